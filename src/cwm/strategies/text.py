"""
Strategies for map-level text constructs: title, axis labels,
presentation, notes, annotations and urls.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional

from cwm.extraction import MapParseError, parse_number, parse_numbers
from cwm.model import (
    DEFAULT_TITLE,
    Annotation,
    AnnotationOccurrence,
    Diagnostic,
    EvolutionLabel,
    Note,
    Point,
    Presentation,
    Size,
    Url,
)
from cwm.strategies.base import ExtractionStrategy, StrategyResult


log = logging.getLogger(__name__)


class TitleExtractionStrategy(ExtractionStrategy):
    """`title <text>`; the first title wins."""

    key = "title"

    def apply(self) -> StrategyResult:
        title: Optional[str] = None
        errors: List[Diagnostic] = []
        for line_number, body in self.keyword_lines("title"):
            if not body:
                self.record(errors, line_number, MapParseError("Missing title text"))
                continue
            if title is None:
                title = body
        return StrategyResult(self.key, title if title is not None else DEFAULT_TITLE, errors)


class EvolutionLabelsExtractionStrategy(ExtractionStrategy):
    """
    `evolution A->B->C->D` replaces the four evolution axis labels.

    A stage written `Product&(+rental)` gets a second label line. Any
    count other than four is ignored and the default labels stay.
    """

    key = "evolution"

    def apply(self) -> StrategyResult:
        labels: List[EvolutionLabel] = []
        for line_number, body in self.keyword_lines("evolution"):
            stages = [stage.strip() for stage in body.split("->")]
            if len(stages) != 4 or not all(stages):
                log.debug("line %d: ignoring evolution with %d stages", line_number, len(stages))
                continue
            labels = []
            for stage in stages:
                line1, _, line2 = stage.partition("&")
                labels.append(EvolutionLabel(line1=line1.strip(), line2=line2.strip()))
        return StrategyResult(self.key, labels, [])


_BRACKETED_RE = re.compile(r"^\[(?P<values>[^\[\]]*)\]$")


def _bracketed_pair(body: str, what: str):
    m = _BRACKETED_RE.match(body.strip())
    if m is None:
        raise MapParseError(f"{what} needs a [a, b] pair")
    return parse_numbers(m.group("values"), (2,))


class PresentationExtractionStrategy(ExtractionStrategy):
    """`style <name>`, `annotations [v, m]` and `size [w, h]`; the last one written wins."""

    key = "presentation"

    def apply(self) -> StrategyResult:
        presentation = Presentation()
        errors: List[Diagnostic] = []

        for line_number, body in self.keyword_lines("style"):
            if not body:
                self.record(errors, line_number, MapParseError("Missing style name"))
                continue
            presentation.style = body

        for line_number, body in self.keyword_lines("annotations"):
            try:
                visibility, maturity = _bracketed_pair(body, "annotations")
            except MapParseError as e:
                self.record(errors, line_number, e)
                continue
            presentation.annotations = Point(visibility=visibility, maturity=maturity)

        for line_number, body in self.keyword_lines("size"):
            try:
                width, height = _bracketed_pair(body, "size")
            except MapParseError as e:
                self.record(errors, line_number, e)
                continue
            presentation.size = Size(width=width, height=height)

        errors.sort(key=lambda d: d.line)
        return StrategyResult(self.key, presentation, errors)


_NOTE_RE = re.compile(r"^(?P<text>.*)\[(?P<coords>[^\[\]]*)\]\s*$")


class NoteExtractionStrategy(ExtractionStrategy):
    """`note <text> [v, m]`."""

    key = "notes"

    def apply(self) -> StrategyResult:
        notes: List[Note] = []
        errors: List[Diagnostic] = []
        for line_number, body in self.keyword_lines("note"):
            try:
                m = _NOTE_RE.match(body)
                if m is None:
                    raise MapParseError("note needs a trailing [visibility, maturity]")
                text = m.group("text").strip()
                if not text:
                    raise MapParseError("Missing note text")
                visibility, maturity = parse_numbers(m.group("coords"), (2,))
            except MapParseError as e:
                self.record(errors, line_number, e)
                continue
            notes.append(Note(text=text, visibility=visibility, maturity=maturity, line=line_number))
        return StrategyResult(self.key, notes, errors)


_ANNOTATION_RE = re.compile(r"^(?P<number>[^\s\[]+)\s*(?P<rest>.*)$")
_PAIR_RE = re.compile(r"\[([^\[\]]*)\]")


class AnnotationExtractionStrategy(ExtractionStrategy):
    """
    `annotation N [v, m] text` or `annotation N [[v1, m1], [v2, m2]] text`.

    The multi-position form gives one annotation with several
    occurrences sharing its number and text.
    """

    key = "annotations"

    def apply(self) -> StrategyResult:
        annotations: List[Annotation] = []
        errors: List[Diagnostic] = []
        for line_number, body in self.keyword_lines("annotation"):
            try:
                annotations.append(self._parse(body, line_number))
            except MapParseError as e:
                self.record(errors, line_number, e)
        return StrategyResult(self.key, annotations, errors)

    @staticmethod
    def _parse(body: str, line_number: int) -> Annotation:
        m = _ANNOTATION_RE.match(body)
        if m is None:
            raise MapParseError("Missing annotation number")
        number = parse_number(m.group("number"), "annotation number")
        if not number.is_integer():
            raise MapParseError(f"Annotation number must be whole, got '{m.group('number')}'")

        rest = m.group("rest")
        if rest.startswith("[["):
            end = rest.find("]]")
            if end < 0:
                raise MapParseError("Unterminated annotation position list")
            pairs = _PAIR_RE.findall(rest[1:end + 1])
            text = rest[end + 2:]
        elif rest.startswith("["):
            end = rest.find("]")
            if end < 0:
                raise MapParseError("Unterminated annotation position")
            pairs = [rest[1:end]]
            text = rest[end + 1:]
        else:
            raise MapParseError("annotation needs a [visibility, maturity] position")

        if not pairs:
            raise MapParseError("annotation needs at least one position")
        occurrences = []
        for pair in pairs:
            visibility, maturity = parse_numbers(pair, (2,))
            occurrences.append(AnnotationOccurrence(visibility=visibility, maturity=maturity))

        return Annotation(number=int(number), text=text.strip(), occurrences=occurrences, line=line_number)


_URL_RE = re.compile(r"^(?P<name>[^\[\]]*?)\s*\[(?P<url>[^\[\]]*)\]\s*$")


class UrlExtractionStrategy(ExtractionStrategy):
    """`url <name> [address]`."""

    key = "urls"

    def apply(self) -> StrategyResult:
        urls: List[Url] = []
        errors: List[Diagnostic] = []
        for line_number, body in self.keyword_lines("url"):
            m = _URL_RE.match(body)
            if m is None or not m.group("name"):
                self.record(errors, line_number, MapParseError("url needs a name and an [address]"))
                continue
            urls.append(Url(name=m.group("name"), url=m.group("url").strip(), line=line_number))
        return StrategyResult(self.key, urls, errors)


__all__ = [
    "TitleExtractionStrategy",
    "EvolutionLabelsExtractionStrategy",
    "PresentationExtractionStrategy",
    "NoteExtractionStrategy",
    "AnnotationExtractionStrategy",
    "UrlExtractionStrategy",
]
