"""Extraction strategies, one per DSL construct."""

from typing import List, Optional

from cwm.config import FeatureSwitches
from .base import ExtractionStrategy, KeywordElement, KeywordStrategyRunner, StrategyResult
from .elements import (
    AnchorExtractionStrategy,
    ComponentExtractionStrategy,
    EvolveExtractionStrategy,
    PipelineExtractionStrategy,
    SubMapExtractionStrategy,
)
from .forces import AcceleratorExtractionStrategy, AttitudeExtractionStrategy, MethodExtractionStrategy
from .links import LinksExtractionStrategy
from .text import (
    AnnotationExtractionStrategy,
    EvolutionLabelsExtractionStrategy,
    NoteExtractionStrategy,
    PresentationExtractionStrategy,
    TitleExtractionStrategy,
    UrlExtractionStrategy,
)


# Declaration order; diagnostics are always concatenated in this order.
STRATEGY_CLASSES = (
    TitleExtractionStrategy,
    EvolutionLabelsExtractionStrategy,
    PresentationExtractionStrategy,
    NoteExtractionStrategy,
    AnnotationExtractionStrategy,
    ComponentExtractionStrategy,
    PipelineExtractionStrategy,
    EvolveExtractionStrategy,
    AnchorExtractionStrategy,
    LinksExtractionStrategy,
    SubMapExtractionStrategy,
    UrlExtractionStrategy,
    AttitudeExtractionStrategy,
    AcceleratorExtractionStrategy,
    MethodExtractionStrategy,
)


def build_strategies(text: str, switches: Optional[FeatureSwitches] = None) -> List[ExtractionStrategy]:
    """Instantiate every strategy over the same cleaned text, in declaration order."""
    switches = switches or FeatureSwitches()
    return [cls(text, switches) for cls in STRATEGY_CLASSES]


__all__ = [
    "ExtractionStrategy",
    "KeywordElement",
    "KeywordStrategyRunner",
    "StrategyResult",
    "STRATEGY_CLASSES",
    "build_strategies",
    "AcceleratorExtractionStrategy",
    "AnchorExtractionStrategy",
    "AnnotationExtractionStrategy",
    "AttitudeExtractionStrategy",
    "ComponentExtractionStrategy",
    "EvolutionLabelsExtractionStrategy",
    "EvolveExtractionStrategy",
    "LinksExtractionStrategy",
    "MethodExtractionStrategy",
    "NoteExtractionStrategy",
    "PipelineExtractionStrategy",
    "PresentationExtractionStrategy",
    "SubMapExtractionStrategy",
    "TitleExtractionStrategy",
    "UrlExtractionStrategy",
]
