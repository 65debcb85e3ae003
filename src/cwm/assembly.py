"""
Legacy assembly: fold strategy results into one intermediate record.

The record is a plain dataclass with one field per strategy key. Each key
may be produced by exactly one strategy, so folding is a union and never
an overwrite. Diagnostics are concatenated in strategy execution order.

IMPORTANT: This stage performs no cross validation. It is purely additive.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Iterable, List

from cwm.model import (
    DEFAULT_TITLE,
    Accelerator,
    Annotation,
    Attitude,
    Diagnostic,
    EvolutionLabel,
    EvolvedElement,
    Link,
    MapElement,
    Method,
    Note,
    Pipeline,
    Presentation,
    Url,
)
from cwm.strategies.base import StrategyResult


class AssemblyError(Exception):
    """Raised when two strategies claim the same key or a key is unknown."""
    pass


@dataclass
class LegacyMap:
    """
    Loosely classified map record, one field per strategy key.

    Properties:
        elements:
            Everything declared with component / market / ecosystem,
            not yet classified by decorators

        evolution:
            Custom axis labels; empty when none were written

        pipelines:
            maturity1 / maturity2 only hold a declared legacy range here
    """

    title: str = DEFAULT_TITLE
    evolution: List[EvolutionLabel] = field(default_factory=list)
    presentation: Presentation = field(default_factory=Presentation)
    notes: List[Note] = field(default_factory=list)
    annotations: List[Annotation] = field(default_factory=list)
    elements: List[MapElement] = field(default_factory=list)
    pipelines: List[Pipeline] = field(default_factory=list)
    evolved: List[EvolvedElement] = field(default_factory=list)
    anchors: List[MapElement] = field(default_factory=list)
    links: List[Link] = field(default_factory=list)
    submaps: List[MapElement] = field(default_factory=list)
    urls: List[Url] = field(default_factory=list)
    attitudes: List[Attitude] = field(default_factory=list)
    accelerators: List[Accelerator] = field(default_factory=list)
    methods: List[Method] = field(default_factory=list)
    errors: List[Diagnostic] = field(default_factory=list)


STRATEGY_KEYS = tuple(f.name for f in fields(LegacyMap) if f.name != "errors")


def assemble(results: Iterable[StrategyResult]) -> LegacyMap:
    """
    Fold strategy results into a LegacyMap.

    Args:
        results: Strategy results in execution order

    Returns:
        LegacyMap; keys no strategy produced keep their empty default

    Raises:
        AssemblyError: If a key is produced twice or is not a record field
    """
    produced: Dict[str, Any] = {}
    errors: List[Diagnostic] = []

    for result in results:
        if result.key not in STRATEGY_KEYS:
            raise AssemblyError(f"Unknown legacy map key: {result.key!r}")
        if result.key in produced:
            raise AssemblyError(f"Legacy map key {result.key!r} produced by more than one strategy")
        produced[result.key] = result.value
        errors.extend(result.errors)

    defaults = LegacyMap()
    return LegacyMap(
        title=produced.get("title", defaults.title),
        evolution=produced.get("evolution", defaults.evolution),
        presentation=produced.get("presentation", defaults.presentation),
        notes=produced.get("notes", defaults.notes),
        annotations=produced.get("annotations", defaults.annotations),
        elements=produced.get("elements", defaults.elements),
        pipelines=produced.get("pipelines", defaults.pipelines),
        evolved=produced.get("evolved", defaults.evolved),
        anchors=produced.get("anchors", defaults.anchors),
        links=produced.get("links", defaults.links),
        submaps=produced.get("submaps", defaults.submaps),
        urls=produced.get("urls", defaults.urls),
        attitudes=produced.get("attitudes", defaults.attitudes),
        accelerators=produced.get("accelerators", defaults.accelerators),
        methods=produced.get("methods", defaults.methods),
        errors=errors,
    )


__all__ = ["AssemblyError", "LegacyMap", "STRATEGY_KEYS", "assemble"]
