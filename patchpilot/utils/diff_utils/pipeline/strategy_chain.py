"""
Strategy selection for patch application.

Strategies are tried in priority order (strict, shifted, greedy) and the
first success wins. Large patches take an adaptive path that probes the
first hunk to pick one strategy for the whole patch.
"""

import enum
import logging
from dataclasses import replace
from typing import List, Optional, Sequence

from ..core.config import (
    LARGE_CONTENT_CHARS,
    LARGE_PATCH_HUNK_COUNT,
    SMALL_PATCH_MAX_LINES,
    get_small_patch_limits,
    validate_fuzz_factor,
)
from ..application.optimized_strategies import OptimizedGreedyStrategy
from ..application.patch_strategies import (
    GreedyStrategy,
    MatchResult,
    PatchStrategy,
    ShiftedHeaderStrategy,
    StrictStrategy,
    check_arguments,
)
from ..parsing.patch_model import ParsedPatch

logger = logging.getLogger(__name__)

GREEDY_STRATEGY_NAMES = (GreedyStrategy.name, OptimizedGreedyStrategy.name)


class ApplyState(enum.Enum):
    """States of a single patch application attempt."""
    NOT_TRIED = "not_tried"
    TRYING = "trying"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def _run(strategy: PatchStrategy, content: str, patch: ParsedPatch, attempted: List[str]) -> MatchResult:
    logger.debug(f"{ApplyState.TRYING.value}: {strategy.name}")
    result = strategy.apply(content, patch)
    attempted.extend(result.attempted_strategies or (strategy.name,))
    if result.success:
        logger.debug(f"{ApplyState.SUCCEEDED.value}: {result.strategy_name}")
    return result


def _try_in_order(strategies: Sequence[PatchStrategy], content: str, patch: ParsedPatch,
                  attempted: List[str]) -> MatchResult:
    for strategy in strategies:
        result = _run(strategy, content, patch, attempted)
        if result.success:
            return replace(result, attempted_strategies=tuple(attempted))

    logger.debug(f"{ApplyState.FAILED.value}: tried {', '.join(attempted)}")
    return MatchResult.failure(content, tuple(attempted))


class ChainedPatchStrategy(PatchStrategy):
    """Chain of responsibility: try each strategy until one succeeds."""

    name = 'chained'

    def __init__(self, strategies: Sequence[PatchStrategy]):
        self.strategies = list(strategies)

    def apply(self, content: str, patch: ParsedPatch) -> MatchResult:
        check_arguments(content, patch)
        return _try_in_order(self.strategies, content, patch, [])


class OptimizedChainedStrategy(PatchStrategy):
    """
    Chained strategy that picks which strategies to try from the size of
    the patch.
    """

    name = 'optimized-chained'

    def __init__(self, strategies: Sequence[PatchStrategy]):
        self.strategies = list(strategies)

    def apply(self, content: str, patch: ParsedPatch) -> MatchResult:
        check_arguments(content, patch)
        cloned = patch.clone()

        # For small patches, try all strategies in sequence
        if self.is_small_patch(cloned):
            return _try_in_order(self.strategies, content, cloned, [])

        return self.apply_adaptive_strategy(content, cloned)

    def apply_adaptive_strategy(self, content: str, patch: ParsedPatch) -> MatchResult:
        """
        Adaptive approach for large patches:
        1. Try the first hunk with the strict strategy
        2. If it fails, try the first hunk with the shifted strategy
        3. Whichever works on the first hunk is applied to the whole patch
        4. If both fail, fall back to the greedy strategy
        """
        if len(patch.hunks) <= 1:
            return _try_in_order(self.strategies, content, patch, [])

        probe = patch.clone()
        probe.hunks = probe.hunks[:1]
        attempted: List[str] = []

        for strategy in self.strategies[:2]:
            if strategy.name in GREEDY_STRATEGY_NAMES:
                break
            probe_result = strategy.apply(content, probe)
            if probe_result.success:
                logger.debug(f"First hunk applied with '{strategy.name}', using it for all "
                             f"{len(patch.hunks)} hunks")
                return _try_in_order([strategy], content, patch, attempted)
            attempted.append(strategy.name)

        greedy = next((s for s in self.strategies if s.name in GREEDY_STRATEGY_NAMES), None)
        if greedy is not None:
            return _try_in_order([greedy], content, patch, attempted)

        return _try_in_order(self.strategies, content, patch, attempted)

    @staticmethod
    def is_small_patch(patch: ParsedPatch) -> bool:
        """Fewer than 5 hunks and fewer than 500 hunk lines in total."""
        max_hunks, max_lines = get_small_patch_limits()
        return len(patch.hunks) < max_hunks and patch.total_hunk_lines < max_lines


class PerformanceOptimizedStrategy(PatchStrategy):
    """
    Routes large patches to the optimized chain and everything else to
    the standard strategy.
    """

    name = 'performance-optimized'

    def __init__(self, standard_strategy: PatchStrategy, fuzz_factor: int):
        self.standard_strategy = standard_strategy
        self.fuzz_factor = validate_fuzz_factor(fuzz_factor)

    def apply(self, content: str, patch: ParsedPatch) -> MatchResult:
        check_arguments(content, patch)
        if self.is_large_patch(content, patch):
            strategy = PatchStrategyFactory.create_optimized_strategy(self.fuzz_factor)
        else:
            strategy = self.standard_strategy
        return strategy.apply(content, patch)

    @staticmethod
    def is_large_patch(content: str, patch: ParsedPatch) -> bool:
        return (len(patch.hunks) > LARGE_PATCH_HUNK_COUNT or
                len(content) > LARGE_CONTENT_CHARS or
                patch.total_hunk_lines > SMALL_PATCH_MAX_LINES)


class PatchStrategyFactory:
    """Factory methods for strategies and strategy chains."""

    @staticmethod
    def create_default_strategy(fuzz_factor: int) -> PatchStrategy:
        """Strict, then shifted, then greedy."""
        return ChainedPatchStrategy([
            StrictStrategy(),
            ShiftedHeaderStrategy(fuzz_factor),
            GreedyStrategy(),
        ])

    @staticmethod
    def create_optimized_strategy(fuzz_factor: int) -> PatchStrategy:
        """
        Create a strategy chain optimized for performance.

        The shifted strategy is only included when fuzz is enabled and the
        greedy stage uses the indexed implementation.
        """
        strategies: List[PatchStrategy] = [StrictStrategy()]
        if validate_fuzz_factor(fuzz_factor) > 0:
            strategies.append(ShiftedHeaderStrategy(fuzz_factor))
        strategies.append(OptimizedGreedyStrategy())
        return OptimizedChainedStrategy(strategies)

    @staticmethod
    def create_strict_strategy() -> PatchStrategy:
        return StrictStrategy()

    @staticmethod
    def create_shifted_strategy(fuzz_factor: int) -> PatchStrategy:
        return ShiftedHeaderStrategy(fuzz_factor)

    @staticmethod
    def create_greedy_strategy(optimized: bool = True) -> PatchStrategy:
        return OptimizedGreedyStrategy() if optimized else GreedyStrategy()


def use_optimized_strategies(standard_strategy: PatchStrategy,
                             fuzz_factor: Optional[int] = 2) -> PatchStrategy:
    """
    Wrap a standard strategy so that large patches use the optimized chain.

    Args:
        standard_strategy: Strategy used for small patches
        fuzz_factor: Fuzz factor (0-3) for the optimized chain

    Returns:
        The wrapping strategy
    """
    return PerformanceOptimizedStrategy(standard_strategy, fuzz_factor)
