"""
Strategy interface and the shared keyword Strategy Runner.

A strategy receives the whole cleaned text, re-scans it with its own
line pattern and returns a StrategyResult:

    key     - the single legacy record field the strategy owns
    value   - its partial result for that field
    errors  - per-line diagnostics, in line order

ARCHITECTURAL RULE:
    Strategies never talk to each other and never assume another
    strategy ran first. Two strategies never own the same key.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional, Tuple

from cwm.config import FeatureSwitches
from cwm.extraction import MapParseError, keyword_body, parse_number, parse_numbers
from cwm.model import Diagnostic


log = logging.getLogger(__name__)


@dataclass
class StrategyResult:
    """Partial result of one strategy."""
    key: str
    value: Any
    errors: List[Diagnostic] = field(default_factory=list)


class ExtractionStrategy(ABC):
    """
    Base class for every extraction strategy.

    Subclasses set `key` and implement apply(). Strategies that depend on
    a feature switch read it from `self.switches`.
    """

    key: str = ""

    def __init__(self, text: str, switches: Optional[FeatureSwitches] = None):
        self.text = text
        self.lines = text.split("\n")
        self.switches = switches or FeatureSwitches()

    @abstractmethod
    def apply(self) -> StrategyResult:
        ...

    def keyword_lines(self, keyword: str) -> Iterator[Tuple[int, str]]:
        """Yield (1-based line number, body) for every line introduced by keyword."""
        for index, line in enumerate(self.lines):
            body = keyword_body(line, keyword)
            if body is not None:
                yield index + 1, body

    def record(self, errors: List[Diagnostic], line_number: int, error: MapParseError) -> None:
        """Turn an extractor failure into a diagnostic for that line."""
        diagnostic = Diagnostic(line=line_number, message=str(error))
        log.debug("%s: line %d: %s", type(self).__name__, line_number, diagnostic.message)
        errors.append(diagnostic)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(key={self.key!r})"


@dataclass
class KeywordElement:
    """
    Uniform shape produced by the Strategy Runner.

    `visibility2` / `maturity2` are set by the four-number coordinate
    form, `width` / `height` by trailing size numbers.
    """

    keyword: str
    name: str
    visibility: float
    maturity: float
    visibility2: Optional[float] = None
    maturity2: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    line: int = 0


_KEYWORD_PAYLOAD_RE = re.compile(r"^(?P<name>[^\[\]]*?)\s*\[(?P<coords>[^\[\]]*)\](?P<rest>.*)$")


class KeywordStrategyRunner:
    """
    Parses `keyword [name] [coordinates] [width height]` lines.

    Used by keyword driven strategies (attitudes, accelerators) so that
    they all produce KeywordElement records with the same rules.

    Args:
        text: Cleaned map text
        keyword: Introducing keyword
        require_name: A name before the coordinates is mandatory
        allow_corners: Accept the four-number `[v1, m1, v2, m2]` form
        allow_size: Read trailing `width height` numbers
    """

    def __init__(
        self,
        text: str,
        keyword: str,
        require_name: bool = False,
        allow_corners: bool = True,
        allow_size: bool = True,
    ):
        self.lines = text.split("\n")
        self.keyword = keyword
        self.require_name = require_name
        self.allow_corners = allow_corners
        self.allow_size = allow_size

    def apply(self) -> Tuple[List[KeywordElement], List[Diagnostic]]:
        elements: List[KeywordElement] = []
        errors: List[Diagnostic] = []
        for index, line in enumerate(self.lines):
            body = keyword_body(line, self.keyword)
            if body is None:
                continue
            try:
                elements.append(self._parse(body, index + 1))
            except MapParseError as e:
                log.debug("%s: line %d: %s", self.keyword, index + 1, e)
                errors.append(Diagnostic(line=index + 1, message=str(e)))
        return elements, errors

    def _parse(self, body: str, line_number: int) -> KeywordElement:
        m = _KEYWORD_PAYLOAD_RE.match(body)
        if m is None:
            raise MapParseError(f"{self.keyword} needs [visibility, maturity] coordinates")

        name = m.group("name").strip()
        if self.require_name and not name:
            raise MapParseError(f"Missing {self.keyword} name")

        counts = (2, 4) if self.allow_corners else (2,)
        coords = parse_numbers(m.group("coords"), counts)
        element = KeywordElement(
            keyword=self.keyword,
            name=name,
            visibility=coords[0],
            maturity=coords[1],
            line=line_number,
        )
        if len(coords) == 4:
            element.visibility2, element.maturity2 = coords[2], coords[3]

        if self.allow_size:
            size = m.group("rest").split()
            if len(size) > 2:
                raise MapParseError(f"{self.keyword} takes at most width and height, got '{m.group('rest').strip()}'")
            if size:
                element.width = parse_number(size[0], "width")
            if len(size) == 2:
                element.height = parse_number(size[1], "height")
        return element
