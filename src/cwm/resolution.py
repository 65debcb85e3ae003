"""
Reference resolution: what a renderer needs on top of the canonical map.

This module provides read-only lookups over a WardleyMap:
    - Position lookup by display name, preferring evolved projections
    - Links with both endpoints resolved
    - A report of references that point at nothing

IMPORTANT: This runs AFTER parsing, on the consumer's side. parse()
never calls it, and dangling references are never parse errors. The
renderer's policy for an unresolved name is to skip it silently.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from cwm.model import Link, WardleyMap


@dataclass(frozen=True)
class ResolvedPosition:
    """Where a name is drawn; `evolved` is True for an evolve projection."""
    maturity: float
    visibility: float
    evolved: bool = False


def build_position_index(wardley_map: WardleyMap) -> Dict[str, ResolvedPosition]:
    """
    Build the name -> position lookup used for drawing links.

    Order of precedence:
        1. Positioned elements (the first declaration of a name wins)
        2. Pipeline children, at their pipeline's visibility
        3. Evolved projections, keyed by `override or name`, at the source
           element's visibility; these replace any entry with the same
           display name

    An evolve of an element that does not exist contributes nothing.
    """
    index: Dict[str, ResolvedPosition] = {}
    for element in wardley_map.all_elements():
        index.setdefault(element.name, ResolvedPosition(element.maturity, element.visibility))

    for pipeline in wardley_map.pipelines:
        for child in pipeline.components:
            index.setdefault(child.name, ResolvedPosition(child.maturity, pipeline.visibility))

    for evolved in wardley_map.evolved:
        source = wardley_map.get_element(evolved.name)
        if source is None:
            continue
        index[evolved.display_name] = ResolvedPosition(evolved.maturity, source.visibility, evolved=True)

    return index


def resolve_position(wardley_map: WardleyMap, name: str) -> Optional[ResolvedPosition]:
    """Resolve one display name, or None when nothing on the map has it."""
    return build_position_index(wardley_map).get(name)


@dataclass(frozen=True)
class ResolvedLink:
    link: Link
    start: ResolvedPosition
    end: ResolvedPosition


def resolve_links(wardley_map: WardleyMap) -> List[ResolvedLink]:
    """Links whose endpoints both resolve, in map order; the rest are skipped."""
    index = build_position_index(wardley_map)
    resolved: List[ResolvedLink] = []
    for link in wardley_map.links:
        start, end = index.get(link.start), index.get(link.end)
        if start is None or end is None:
            continue
        resolved.append(ResolvedLink(link=link, start=start, end=end))
    return resolved


@dataclass
class MapReport:
    """Inventory of a map and of its unresolved references."""

    title: str
    total_elements: int = 0
    total_links: int = 0
    total_pipelines: int = 0
    total_diagnostics: int = 0

    dangling_links: List[Link] = field(default_factory=list)
    missing_evolve_targets: Set[str] = field(default_factory=set)
    pipelines_without_element: Set[str] = field(default_factory=set)
    unknown_url_references: Set[str] = field(default_factory=set)
    duplicate_names: Set[str] = field(default_factory=set)

    warnings: List[str] = field(default_factory=list)

    def add_warning(self, msg: str) -> None:
        """Add a warning to the report."""
        if msg not in self.warnings:
            self.warnings.append(msg)


def analyze_map(wardley_map: WardleyMap) -> MapReport:
    """
    Report references a renderer would have to skip.

    Checks for:
    - Links with an endpoint that resolves to nothing
    - Evolutions of elements that were never declared
    - Pipelines with no element of the same name
    - url(...) references with no matching url declaration
    - Element names declared more than once

    Returns a MapReport with counts and warnings.
    """
    elements = wardley_map.all_elements()
    report = MapReport(title=wardley_map.title)
    report.total_elements = len(elements)
    report.total_links = len(wardley_map.links)
    report.total_pipelines = len(wardley_map.pipelines)
    report.total_diagnostics = len(wardley_map.errors)

    index = build_position_index(wardley_map)
    report.dangling_links = [
        link for link in wardley_map.links
        if link.start not in index or link.end not in index
    ]

    declared: Set[str] = set()
    for element in elements:
        if element.name in declared:
            report.duplicate_names.add(element.name)
        declared.add(element.name)

    report.missing_evolve_targets = {e.name for e in wardley_map.evolved if e.name not in declared}
    report.pipelines_without_element = {p.name for p in wardley_map.pipelines if p.name not in declared}

    url_names = {url.name for url in wardley_map.urls}
    report.unknown_url_references = {
        element.url for element in elements
        if element.url is not None and element.url not in url_names
    }

    if report.dangling_links:
        pairs = ", ".join(f"{l.start}->{l.end}" for l in report.dangling_links)
        report.add_warning(f"Links to undeclared elements: {pairs}")

    if report.missing_evolve_targets:
        report.add_warning(
            f"Evolve of undeclared elements: {', '.join(sorted(report.missing_evolve_targets))}"
        )

    if report.pipelines_without_element:
        report.add_warning(
            f"Pipelines without a matching element: {', '.join(sorted(report.pipelines_without_element))}"
        )

    if report.unknown_url_references:
        report.add_warning(
            f"Unknown url references: {', '.join(sorted(report.unknown_url_references))}"
        )

    if report.duplicate_names:
        report.add_warning(
            f"Names declared more than once: {', '.join(sorted(report.duplicate_names))}"
        )

    return report


__all__ = [
    "ResolvedPosition",
    "ResolvedLink",
    "MapReport",
    "build_position_index",
    "resolve_position",
    "resolve_links",
    "analyze_map",
]
