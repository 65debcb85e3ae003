"""
Unification layer: LegacyMap -> canonical WardleyMap.

Responsibilities:
    - Classify every positioned element into exactly one of
      components / anchors / submaps / markets / ecosystems
    - Give every element a Decorators value, with the market or
      ecosystem flag set when that keyword declared it
    - Compute pipeline extents from their children
    - Mark elements that evolve or head a pipeline
    - Default the evolution axis labels

IMPORTANT:
    Link endpoints are left as raw names. Nothing here checks that a
    link, an evolve or a url reference names something that exists.
"""

from __future__ import annotations

import copy
from typing import Dict, List, Tuple

from cwm.assembly import LegacyMap
from cwm.model import (
    DEFAULT_PIPELINE_EXTENT,
    Decorators,
    ElementKind,
    MapElement,
    Pipeline,
    WardleyMap,
    default_evolution_labels,
)


def classify(element: MapElement) -> ElementKind:
    """
    Decide which canonical collection an element belongs to.

    Decorators take precedence over the declaration keyword: a
    `component X (market)` is a market. With both market and ecosystem
    decorators, ecosystem wins.
    """
    decorators = element.decorators
    if decorators is not None:
        if decorators.ecosystem:
            return ElementKind.ECOSYSTEM
        if decorators.market:
            return ElementKind.MARKET
    return element.kind


def pipeline_extent(pipeline: Pipeline) -> Tuple[float, float]:
    """
    Maturity range covered by a pipeline.

    Children decide the range (min, max) regardless of their order. With
    no children a declared legacy range is used, and failing that the
    fixed fallback (0.2, 0.8).
    """
    if pipeline.components:
        maturities = [child.maturity for child in pipeline.components]
        return min(maturities), max(maturities)
    if pipeline.maturity1 is not None and pipeline.maturity2 is not None:
        return pipeline.maturity1, pipeline.maturity2
    return DEFAULT_PIPELINE_EXTENT


def unify(legacy: LegacyMap) -> WardleyMap:
    """
    Build the canonical map from the legacy record.

    The legacy record is deep-copied first, so the returned map shares no
    objects with it.
    """
    legacy = copy.deepcopy(legacy)

    evolve_targets: Dict[str, float] = {}
    for evolved in legacy.evolved:
        evolve_targets.setdefault(evolved.name, evolved.maturity)
        if evolved.decorators is None:
            evolved.decorators = Decorators()
    pipeline_names = {pipeline.name for pipeline in legacy.pipelines}

    grouped: Dict[ElementKind, List[MapElement]] = {kind: [] for kind in ElementKind}
    for element in [*legacy.elements, *legacy.anchors, *legacy.submaps]:
        if element.decorators is None:
            element.decorators = Decorators()
        # The keyword and the decorator mean the same thing.
        if element.kind == ElementKind.MARKET:
            element.decorators.market = True
        elif element.kind == ElementKind.ECOSYSTEM:
            element.decorators.ecosystem = True
        element.kind = classify(element)
        if element.name in evolve_targets:
            element.evolving = True
            element.evolve_maturity = evolve_targets[element.name]
        element.pipeline = element.name in pipeline_names
        grouped[element.kind].append(element)

    for pipeline in legacy.pipelines:
        pipeline.maturity1, pipeline.maturity2 = pipeline_extent(pipeline)

    evolution = legacy.evolution if len(legacy.evolution) == 4 else default_evolution_labels()

    return WardleyMap(
        title=legacy.title,
        presentation=legacy.presentation,
        evolution=evolution,
        components=grouped[ElementKind.COMPONENT],
        anchors=grouped[ElementKind.ANCHOR],
        submaps=grouped[ElementKind.SUBMAP],
        markets=grouped[ElementKind.MARKET],
        ecosystems=grouped[ElementKind.ECOSYSTEM],
        evolved=legacy.evolved,
        pipelines=legacy.pipelines,
        links=legacy.links,
        annotations=legacy.annotations,
        notes=legacy.notes,
        methods=legacy.methods,
        urls=legacy.urls,
        attitudes=legacy.attitudes,
        accelerators=legacy.accelerators,
        errors=legacy.errors,
    )


__all__ = ["classify", "pipeline_extent", "unify"]
