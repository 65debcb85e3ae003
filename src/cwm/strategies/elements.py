"""
Strategies for positioned elements, pipelines and evolution.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, Iterator, List, Tuple

from cwm.extraction import (
    NUMBER_PATTERN,
    MapParseError,
    extract_decorators,
    extract_label,
    find_pipeline_blocks,
    keyword_body,
    parse_element,
    parse_number,
    parse_numbers,
    pipeline_block_indexes,
    split_position,
    strip_trailing_inertia,
)
from cwm.model import (
    DEFAULT_VISIBILITY,
    Diagnostic,
    ElementKind,
    EvolvedElement,
    LabelOffset,
    MapElement,
    Pipeline,
    PipelineComponent,
)
from cwm.strategies.base import ExtractionStrategy, StrategyResult


class _PositionedElementStrategy(ExtractionStrategy):
    """Reads `keyword Name [v, m] ...` lines for a fixed set of keywords."""

    keywords: Tuple[Tuple[str, ElementKind], ...] = ()

    def apply(self) -> StrategyResult:
        # Children of a pipeline block belong to the pipeline.
        owned = pipeline_block_indexes(self.lines)
        elements: List[MapElement] = []
        errors: List[Diagnostic] = []

        for index, line in enumerate(self.lines):
            if index in owned:
                continue
            for keyword, kind in self.keywords:
                body = keyword_body(line, keyword)
                if body is None:
                    continue
                try:
                    elements.append(parse_element(body, keyword, kind, index + 1))
                except MapParseError as e:
                    self.record(errors, index + 1, e)
                break

        return StrategyResult(self.key, elements, errors)


class ComponentExtractionStrategy(_PositionedElementStrategy):
    key = "elements"
    keywords = (
        ("component", ElementKind.COMPONENT),
        ("market", ElementKind.MARKET),
        ("ecosystem", ElementKind.ECOSYSTEM),
    )


class AnchorExtractionStrategy(_PositionedElementStrategy):
    key = "anchors"
    keywords = (("anchor", ElementKind.ANCHOR),)


class SubMapExtractionStrategy(_PositionedElementStrategy):
    key = "submaps"
    keywords = (("submap", ElementKind.SUBMAP),)


_PIPELINE_PARENT_KEYWORDS = (
    ("component", ElementKind.COMPONENT),
    ("market", ElementKind.MARKET),
    ("ecosystem", ElementKind.ECOSYSTEM),
    ("anchor", ElementKind.ANCHOR),
    ("submap", ElementKind.SUBMAP),
)

_CHILD_RE = re.compile(r"^(?P<name>[^\[\]]*?)\s*\[(?P<coords>[^\[\]]*)\](?P<rest>.*)$")
_CHILD_SPLIT_RE = re.compile(r"(?:^|(?<=\s))component(?:\s+|$)")


class PipelineExtractionStrategy(ExtractionStrategy):
    """
    Reads pipelines in both forms:

        pipeline Name [maturity1, maturity2]

        pipeline Name
        {
          component Child [maturity]
        }

    Block bodies are only read when new pipeline syntax is enabled. The
    pipeline's visibility comes from the top-level declaration of the
    element with the same name; children share it.
    """

    key = "pipelines"

    def apply(self) -> StrategyResult:
        blocks = find_pipeline_blocks(self.lines) if self.switches.enable_new_pipelines else {}
        bodies = set()
        for open_index, close_index in blocks.values():
            bodies.update(range(open_index + 1, close_index))
        visibilities = self._declared_visibilities()

        pipelines: List[Pipeline] = []
        errors: List[Diagnostic] = []
        for index, line in enumerate(self.lines):
            if index in bodies:
                continue
            body = keyword_body(line, "pipeline")
            if body is None:
                continue
            try:
                pipeline = self._parse_header(body, index + 1, visibilities)
            except MapParseError as e:
                self.record(errors, index + 1, e)
                continue

            if index in blocks:
                open_index, close_index = blocks[index]
                pipeline.components = self._parse_children(
                    self._block_segments(open_index, close_index), pipeline.visibility, errors
                )
            elif pipeline.maturity1 is None:
                pipeline.hidden = True
            pipelines.append(pipeline)

        return StrategyResult(self.key, pipelines, errors)

    def _declared_visibilities(self) -> Dict[str, float]:
        owned = pipeline_block_indexes(self.lines)
        visibilities: Dict[str, float] = {}
        for index, line in enumerate(self.lines):
            if index in owned:
                continue
            for keyword, kind in _PIPELINE_PARENT_KEYWORDS:
                body = keyword_body(line, keyword)
                if body is None:
                    continue
                try:
                    element = parse_element(body, keyword, kind, index + 1)
                except MapParseError:
                    # Reported by the strategy that owns the keyword.
                    break
                visibilities.setdefault(element.name, element.visibility)
                break
        return visibilities

    def _parse_header(self, body: str, line_number: int, visibilities: Dict[str, float]) -> Pipeline:
        body = body.split("{", 1)[0]
        _, inertia, body = extract_decorators(body)
        name, declared, rest = split_position(body)
        name, trailing = strip_trailing_inertia(name)
        if not name:
            raise MapParseError("Missing pipeline name")

        pipeline = Pipeline(
            name=name,
            visibility=visibilities.get(name, DEFAULT_VISIBILITY),
            inertia=inertia or trailing or strip_trailing_inertia(rest)[1],
            line=line_number,
        )
        if declared is not None:
            pipeline.maturity1, pipeline.maturity2 = declared
        return pipeline

    def _block_segments(self, open_index: int, close_index: int) -> Iterator[Tuple[int, str]]:
        """
        Yield (line index, text) for the inside of a brace block.

        Text after `{` on the opening line and before `}` on the closing
        line belongs to the block, so `pipeline P { component A [0.3] }`
        is one segment.
        """
        last = min(close_index, len(self.lines) - 1)
        for index in range(open_index, last + 1):
            text = self.lines[index]
            if index == open_index:
                text = text.split("{", 1)[1]
            if index == close_index:
                text = text.split("}", 1)[0]
            yield index, text

    def _parse_children(self, segments: Iterable[Tuple[int, str]], visibility: float,
                        errors: List[Diagnostic]) -> List[PipelineComponent]:
        children: List[PipelineComponent] = []
        for index, text in segments:
            # Several children may share a line; text before the first keyword is ignored.
            for body in _CHILD_SPLIT_RE.split(text)[1:]:
                try:
                    children.append(self._parse_child(body.strip(), visibility, index + 1))
                except MapParseError as e:
                    self.record(errors, index + 1, e)
        return children

    @staticmethod
    def _parse_child(body: str, visibility: float, line_number: int) -> PipelineComponent:
        m = _CHILD_RE.match(body)
        if m is None:
            raise MapParseError("Pipeline component needs a [maturity]")
        name = m.group("name").strip()
        if not name:
            raise MapParseError("Missing pipeline component name")
        (maturity,) = parse_numbers(m.group("coords"), (1,), "maturity")
        label, _ = extract_label(m.group("rest"))
        return PipelineComponent(
            name=name,
            maturity=maturity,
            visibility=visibility,
            label=label or LabelOffset(),
            line=line_number,
        )


_EVOLVE_RE = re.compile(rf"^(?P<target>.+?)\s+(?P<maturity>{NUMBER_PATTERN})$")


class EvolveExtractionStrategy(ExtractionStrategy):
    """
    Reads `evolve Name[->Override] maturity label [dx, dy] (decorators)`.

    The override only renames the projection; `name` stays the original
    element name so links keep resolving against the original.
    """

    key = "evolved"

    def apply(self) -> StrategyResult:
        evolved: List[EvolvedElement] = []
        errors: List[Diagnostic] = []
        for line_number, body in self.keyword_lines("evolve"):
            try:
                evolved.append(self._parse(body, line_number))
            except MapParseError as e:
                self.record(errors, line_number, e)
        return StrategyResult(self.key, evolved, errors)

    @staticmethod
    def _parse(body: str, line_number: int) -> EvolvedElement:
        label, body = extract_label(body)
        decorators, _, body = extract_decorators(body)
        body, _ = strip_trailing_inertia(body)

        m = _EVOLVE_RE.match(body)
        if m is None:
            raise MapParseError("evolve needs a name and a target maturity")

        target = m.group("target")
        name, _, override = target.partition("->")
        name, override = name.strip(), override.strip() or None
        if not name:
            raise MapParseError("Missing evolve name")

        return EvolvedElement(
            name=name,
            maturity=parse_number(m.group("maturity"), "maturity"),
            override=override,
            label=label or LabelOffset(),
            line=line_number,
            decorators=decorators,
        )


__all__ = [
    "ComponentExtractionStrategy",
    "AnchorExtractionStrategy",
    "SubMapExtractionStrategy",
    "PipelineExtractionStrategy",
    "EvolveExtractionStrategy",
]
