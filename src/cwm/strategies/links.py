"""
Link strategy: dependencies between elements, by name.

Operators:
    A->B          structural dependency
    A+>B          flow, future
    A+<B          flow, past
    A+<>B         flow, future and past
    A+'value'>B   flow carrying a value (also with < and <>)

Any of them may be followed by `; context text`.
"""

from __future__ import annotations

import re
from typing import List

from cwm.extraction import starts_with_reserved_keyword
from cwm.model import Link
from cwm.strategies.base import ExtractionStrategy, StrategyResult


_LINK_RE = re.compile(
    r"^(?P<start>.+?)\s*"
    r"(?:(?P<flow>\+(?:'(?P<value>[^']*)')?(?P<direction><>|<|>))|->)"
    r"\s*(?P<end>.+?)$"
)


class LinksExtractionStrategy(ExtractionStrategy):
    """
    Reads every non-keyword line containing a link operator.

    Endpoints are NOT checked against declared elements; a link to a
    missing element is kept verbatim. Lines that do not match are not
    links and are skipped without a diagnostic.
    """

    key = "links"

    def apply(self) -> StrategyResult:
        links: List[Link] = []
        for index, line in enumerate(self.lines):
            if starts_with_reserved_keyword(line):
                continue
            link = self._parse(line.strip(), index + 1)
            if link is not None:
                links.append(link)
        return StrategyResult(self.key, links, [])

    def _parse(self, line: str, line_number: int):
        text, separator, context = line.partition(";")
        m = _LINK_RE.match(text.strip())
        if m is None:
            return None

        link = Link(start=m.group("start").strip(), end=m.group("end").strip(), line=line_number)
        if m.group("flow"):
            direction = m.group("direction")
            link.flow = True
            link.future = direction in (">", "<>")
            link.past = direction in ("<", "<>")
            link.flow_value = m.group("value")
        if separator and self.switches.enable_link_context:
            link.context = context.strip() or None
        return link


__all__ = ["LinksExtractionStrategy"]
