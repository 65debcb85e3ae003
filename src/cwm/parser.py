"""
Map parser (DSL text -> Canonical Wardley Map).

Pipeline:
    raw text
      -> strip_comments
      -> extraction strategies (fan-out over the same cleaned text)
      -> assemble (LegacyMap)
      -> unify (WardleyMap)

parse() is a pure function of its arguments: no I/O, no shared state,
safe to call from several threads at once. It never raises for any
input; problems are reported in WardleyMap.errors.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

from cwm.assembly import LegacyMap, assemble
from cwm.comments import strip_comments
from cwm.config import FeatureSwitches
from cwm.model import Diagnostic, WardleyMap
from cwm.strategies import ExtractionStrategy, StrategyResult, build_strategies
from cwm.unify import unify


log = logging.getLogger(__name__)


def _apply(strategy: ExtractionStrategy) -> StrategyResult:
    try:
        return strategy.apply()
    except Exception as e:
        # A broken strategy costs its own construct, never the whole map.
        log.exception("%r failed", strategy)
        return StrategyResult(
            strategy.key,
            getattr(LegacyMap(), strategy.key),
            [Diagnostic(line=0, message=f"{type(strategy).__name__} failed: {e}")],
        )


def run_strategies(strategies: Sequence[ExtractionStrategy], max_workers: Optional[int] = None) -> List[StrategyResult]:
    """
    Apply every strategy and return results in the order given.

    Args:
        strategies: Strategies in declaration order
        max_workers: Run on a thread pool of this size; None runs sequentially

    Returns:
        One StrategyResult per strategy, in declaration order either way
    """
    if max_workers is None:
        return [_apply(strategy) for strategy in strategies]
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        return list(pool.map(_apply, strategies))


def parse(text: Optional[str], switches: Optional[FeatureSwitches] = None,
          max_workers: Optional[int] = None) -> WardleyMap:
    """
    Parse map DSL text into a WardleyMap.

    Args:
        text: Map source; None is treated as empty
        switches: Feature switches gating optional grammar (defaults: all on)
        max_workers: Optional thread pool size for the strategies

    Returns:
        A fresh WardleyMap; every collection is a list, possibly empty
    """
    cleaned = strip_comments(text or "")
    strategies = build_strategies(cleaned, switches or FeatureSwitches())
    results = run_strategies(strategies, max_workers=max_workers)
    wardley_map = unify(assemble(results))

    log.debug(
        "parsed map %r: %d elements, %d links, %d diagnostics",
        wardley_map.title,
        len(wardley_map.all_elements()),
        len(wardley_map.links),
        len(wardley_map.errors),
    )
    return wardley_map


def parse_file(filepath: str, switches: Optional[FeatureSwitches] = None) -> WardleyMap:
    """
    Parse a map file (UTF-8).

    Raises:
        FileNotFoundError: If file doesn't exist
    """
    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            content = f.read()
    except FileNotFoundError:
        raise FileNotFoundError(f"Map file not found: {filepath}")
    return parse(content, switches=switches)


__all__ = ["parse", "parse_file", "run_strategies"]
