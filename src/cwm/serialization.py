"""
Serialization helpers for the canonical map (WardleyMap and its parts).

Provides lossless JSON/YAML round-trip via intermediate dict representation.
This module intentionally keeps serialization structure stable and explicit.
"""
from __future__ import annotations

import json
from typing import Any, Dict

import yaml

from cwm.model import (
    Accelerator,
    Annotation,
    AnnotationOccurrence,
    Attitude,
    Decorators,
    Diagnostic,
    ElementKind,
    EvolutionLabel,
    EvolvedElement,
    LabelOffset,
    Link,
    MapElement,
    Method,
    Note,
    Pipeline,
    PipelineComponent,
    Point,
    Presentation,
    Size,
    Url,
    WardleyMap,
)


def label_to_dict(label: LabelOffset) -> Dict[str, Any]:
    return {"x": label.x, "y": label.y}


def label_from_dict(d: Dict[str, Any] | None) -> LabelOffset:
    if d is None:
        return LabelOffset()
    return LabelOffset(x=d["x"], y=d["y"])


def decorators_to_dict(d: Decorators | None) -> Dict[str, bool] | None:
    if d is None:
        return None
    return {
        "ecosystem": d.ecosystem,
        "market": d.market,
        "buy": d.buy,
        "build": d.build,
        "outsource": d.outsource,
    }


def decorators_from_dict(d: Dict[str, Any] | None) -> Decorators | None:
    if d is None:
        return None
    return Decorators(
        ecosystem=d.get("ecosystem", False),
        market=d.get("market", False),
        buy=d.get("buy", False),
        build=d.get("build", False),
        outsource=d.get("outsource", False),
    )


def element_to_dict(e: MapElement) -> Dict[str, Any]:
    return {
        "name": e.name,
        "kind": e.kind.value,
        "maturity": e.maturity,
        "visibility": e.visibility,
        "label": label_to_dict(e.label),
        "line": e.line,
        "decorators": decorators_to_dict(e.decorators),
        "inertia": e.inertia,
        "pseudo": e.pseudo,
        "url": e.url,
        "evolving": e.evolving,
        "evolve_maturity": e.evolve_maturity,
        "pipeline": e.pipeline,
    }


def element_from_dict(d: Dict[str, Any]) -> MapElement:
    return MapElement(
        name=d["name"],
        kind=ElementKind(d.get("kind", "component")),
        maturity=d["maturity"],
        visibility=d["visibility"],
        label=label_from_dict(d.get("label")),
        line=d.get("line"),
        decorators=decorators_from_dict(d.get("decorators")),
        inertia=d.get("inertia", False),
        pseudo=d.get("pseudo", False),
        url=d.get("url"),
        evolving=d.get("evolving", False),
        evolve_maturity=d.get("evolve_maturity"),
        pipeline=d.get("pipeline", False),
    )


def link_to_dict(l: Link) -> Dict[str, Any]:
    return {
        "start": l.start,
        "end": l.end,
        "flow": l.flow,
        "future": l.future,
        "past": l.past,
        "context": l.context,
        "flow_value": l.flow_value,
        "line": l.line,
    }


def link_from_dict(d: Dict[str, Any]) -> Link:
    return Link(
        start=d["start"],
        end=d["end"],
        flow=d.get("flow", False),
        future=d.get("future", False),
        past=d.get("past", False),
        context=d.get("context"),
        flow_value=d.get("flow_value"),
        line=d.get("line"),
    )


def evolved_to_dict(e: EvolvedElement) -> Dict[str, Any]:
    return {
        "name": e.name,
        "maturity": e.maturity,
        "override": e.override,
        "label": label_to_dict(e.label),
        "line": e.line,
        "decorators": decorators_to_dict(e.decorators),
    }


def evolved_from_dict(d: Dict[str, Any]) -> EvolvedElement:
    return EvolvedElement(
        name=d["name"],
        maturity=d["maturity"],
        override=d.get("override"),
        label=label_from_dict(d.get("label")),
        line=d.get("line"),
        decorators=decorators_from_dict(d.get("decorators")),
    )


def pipeline_to_dict(p: Pipeline) -> Dict[str, Any]:
    return {
        "name": p.name,
        "visibility": p.visibility,
        "components": [
            {
                "name": c.name,
                "maturity": c.maturity,
                "visibility": c.visibility,
                "label": label_to_dict(c.label),
                "line": c.line,
            }
            for c in p.components
        ],
        "maturity1": p.maturity1,
        "maturity2": p.maturity2,
        "hidden": p.hidden,
        "inertia": p.inertia,
        "line": p.line,
    }


def pipeline_from_dict(d: Dict[str, Any]) -> Pipeline:
    return Pipeline(
        name=d["name"],
        visibility=d["visibility"],
        components=[
            PipelineComponent(
                name=c["name"],
                maturity=c["maturity"],
                visibility=c["visibility"],
                label=label_from_dict(c.get("label")),
                line=c.get("line"),
            )
            for c in d.get("components", [])
        ],
        maturity1=d.get("maturity1"),
        maturity2=d.get("maturity2"),
        hidden=d.get("hidden", False),
        inertia=d.get("inertia", False),
        line=d.get("line"),
    )


def annotation_to_dict(a: Annotation) -> Dict[str, Any]:
    return {
        "number": a.number,
        "text": a.text,
        "occurrences": [{"visibility": o.visibility, "maturity": o.maturity} for o in a.occurrences],
        "line": a.line,
    }


def annotation_from_dict(d: Dict[str, Any]) -> Annotation:
    return Annotation(
        number=d["number"],
        text=d.get("text", ""),
        occurrences=[AnnotationOccurrence(visibility=o["visibility"], maturity=o["maturity"])
                     for o in d.get("occurrences", [])],
        line=d.get("line"),
    )


def presentation_to_dict(p: Presentation) -> Dict[str, Any]:
    return {
        "style": p.style,
        "annotations": {"visibility": p.annotations.visibility, "maturity": p.annotations.maturity},
        "size": {"width": p.size.width, "height": p.size.height},
    }


def presentation_from_dict(d: Dict[str, Any] | None) -> Presentation:
    if d is None:
        return Presentation()
    annotations = d.get("annotations") or {}
    size = d.get("size") or {}
    return Presentation(
        style=d.get("style", ""),
        annotations=Point(visibility=annotations.get("visibility", 0), maturity=annotations.get("maturity", 0)),
        size=Size(width=size.get("width", 0), height=size.get("height", 0)),
    )


def map_to_dict(m: WardleyMap) -> Dict[str, Any]:
    return {
        "title": m.title,
        "presentation": presentation_to_dict(m.presentation),
        "evolution": [{"line1": e.line1, "line2": e.line2} for e in m.evolution],
        "components": [element_to_dict(e) for e in m.components],
        "anchors": [element_to_dict(e) for e in m.anchors],
        "submaps": [element_to_dict(e) for e in m.submaps],
        "markets": [element_to_dict(e) for e in m.markets],
        "ecosystems": [element_to_dict(e) for e in m.ecosystems],
        "evolved": [evolved_to_dict(e) for e in m.evolved],
        "pipelines": [pipeline_to_dict(p) for p in m.pipelines],
        "links": [link_to_dict(l) for l in m.links],
        "annotations": [annotation_to_dict(a) for a in m.annotations],
        "notes": [
            {"text": n.text, "visibility": n.visibility, "maturity": n.maturity, "line": n.line}
            for n in m.notes
        ],
        "methods": [
            {"name": x.name, "decorators": decorators_to_dict(x.decorators), "line": x.line}
            for x in m.methods
        ],
        "urls": [{"name": u.name, "url": u.url, "line": u.line} for u in m.urls],
        "attitudes": [
            {
                "attitude": a.attitude,
                "visibility": a.visibility,
                "maturity": a.maturity,
                "visibility2": a.visibility2,
                "maturity2": a.maturity2,
                "width": a.width,
                "height": a.height,
                "line": a.line,
            }
            for a in m.attitudes
        ],
        "accelerators": [
            {
                "name": a.name,
                "visibility": a.visibility,
                "maturity": a.maturity,
                "deaccelerator": a.deaccelerator,
                "line": a.line,
            }
            for a in m.accelerators
        ],
        "errors": [{"line": e.line, "message": e.message} for e in m.errors],
    }


def map_from_dict(d: Dict[str, Any]) -> WardleyMap:
    m = WardleyMap(title=d.get("title", WardleyMap().title))
    m.presentation = presentation_from_dict(d.get("presentation"))
    if d.get("evolution"):
        m.evolution = [EvolutionLabel(line1=e["line1"], line2=e.get("line2", "")) for e in d["evolution"]]
    m.components = [element_from_dict(e) for e in d.get("components", [])]
    m.anchors = [element_from_dict(e) for e in d.get("anchors", [])]
    m.submaps = [element_from_dict(e) for e in d.get("submaps", [])]
    m.markets = [element_from_dict(e) for e in d.get("markets", [])]
    m.ecosystems = [element_from_dict(e) for e in d.get("ecosystems", [])]
    m.evolved = [evolved_from_dict(e) for e in d.get("evolved", [])]
    m.pipelines = [pipeline_from_dict(p) for p in d.get("pipelines", [])]
    m.links = [link_from_dict(l) for l in d.get("links", [])]
    m.annotations = [annotation_from_dict(a) for a in d.get("annotations", [])]
    m.notes = [Note(text=n["text"], visibility=n["visibility"], maturity=n["maturity"], line=n.get("line"))
               for n in d.get("notes", [])]
    m.methods = [Method(name=x["name"], decorators=decorators_from_dict(x.get("decorators")) or Decorators(),
                        line=x.get("line"))
                 for x in d.get("methods", [])]
    m.urls = [Url(name=u["name"], url=u["url"], line=u.get("line")) for u in d.get("urls", [])]
    m.attitudes = [
        Attitude(
            attitude=a["attitude"],
            visibility=a["visibility"],
            maturity=a["maturity"],
            visibility2=a.get("visibility2"),
            maturity2=a.get("maturity2"),
            width=a.get("width"),
            height=a.get("height"),
            line=a.get("line"),
        )
        for a in d.get("attitudes", [])
    ]
    m.accelerators = [
        Accelerator(
            name=a["name"],
            visibility=a["visibility"],
            maturity=a["maturity"],
            deaccelerator=a.get("deaccelerator", False),
            line=a.get("line"),
        )
        for a in d.get("accelerators", [])
    ]
    m.errors = [Diagnostic(line=e["line"], message=e["message"]) for e in d.get("errors", [])]
    return m


def map_to_json(m: WardleyMap) -> str:
    return json.dumps(map_to_dict(m), sort_keys=True)


def map_from_json(s: str) -> WardleyMap:
    d = json.loads(s)
    return map_from_dict(d)


def map_to_yaml(m: WardleyMap) -> str:
    return yaml.safe_dump(map_to_dict(m))


def map_from_yaml(s: str) -> WardleyMap:
    d = yaml.safe_load(s)
    return map_from_dict(d)
