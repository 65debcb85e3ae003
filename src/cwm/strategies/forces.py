"""
Keyword driven strategies: attitudes, accelerators and sourcing methods.

Attitudes and accelerators run on the shared KeywordStrategyRunner so
they follow the same coordinate and size rules.
"""

from __future__ import annotations

from typing import List

from cwm.extraction import MapParseError, keyword_body
from cwm.model import Accelerator, Attitude, Decorators, Diagnostic, Method
from cwm.strategies.base import ExtractionStrategy, KeywordElement, KeywordStrategyRunner, StrategyResult


ATTITUDE_KEYWORDS = ("pioneers", "settlers", "townplanners")
ACCELERATOR_KEYWORDS = ("accelerator", "deaccelerator")
METHOD_KEYWORDS = ("build", "buy", "outsource")


def _run_keywords(text: str, keywords, **options):
    """Run one runner per keyword and merge their output in source line order."""
    elements: List[KeywordElement] = []
    errors: List[Diagnostic] = []
    for keyword in keywords:
        found, failed = KeywordStrategyRunner(text, keyword, **options).apply()
        elements.extend(found)
        errors.extend(failed)
    elements.sort(key=lambda e: e.line)
    errors.sort(key=lambda d: d.line)
    return elements, errors


class AttitudeExtractionStrategy(ExtractionStrategy):
    """`pioneers|settlers|townplanners [v, m] width height` or `[v1, m1, v2, m2]`."""

    key = "attitudes"

    def apply(self) -> StrategyResult:
        elements, errors = _run_keywords(self.text, ATTITUDE_KEYWORDS)
        attitudes = [
            Attitude(
                attitude=e.keyword,
                visibility=e.visibility,
                maturity=e.maturity,
                visibility2=e.visibility2,
                maturity2=e.maturity2,
                width=e.width,
                height=e.height,
                line=e.line,
            )
            for e in elements
        ]
        return StrategyResult(self.key, attitudes, errors)


class AcceleratorExtractionStrategy(ExtractionStrategy):
    """
    `accelerator name [v, m]` and `deaccelerator name [v, m]`.

    Only runs when accelerators are enabled; otherwise the result is empty.
    """

    key = "accelerators"

    def apply(self) -> StrategyResult:
        if not self.switches.enable_accelerators:
            return StrategyResult(self.key, [], [])
        elements, errors = _run_keywords(
            self.text,
            ACCELERATOR_KEYWORDS,
            require_name=True,
            allow_corners=False,
            allow_size=False,
        )
        accelerators = [
            Accelerator(
                name=e.name,
                visibility=e.visibility,
                maturity=e.maturity,
                deaccelerator=e.keyword == "deaccelerator",
                line=e.line,
            )
            for e in elements
        ]
        return StrategyResult(self.key, accelerators, errors)


class MethodExtractionStrategy(ExtractionStrategy):
    """`build Name`, `buy Name`, `outsource Name` statements."""

    key = "methods"

    def apply(self) -> StrategyResult:
        methods: List[Method] = []
        errors: List[Diagnostic] = []
        for index, line in enumerate(self.lines):
            for keyword in METHOD_KEYWORDS:
                name = keyword_body(line, keyword)
                if name is None:
                    continue
                if not name:
                    self.record(errors, index + 1, MapParseError(f"Missing {keyword} target"))
                    break
                decorators = Decorators()
                setattr(decorators, keyword, True)
                methods.append(Method(name=name, decorators=decorators, line=index + 1))
                break
        return StrategyResult(self.key, methods, errors)


__all__ = [
    "AttitudeExtractionStrategy",
    "AcceleratorExtractionStrategy",
    "MethodExtractionStrategy",
]
