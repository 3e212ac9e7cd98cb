"""
Pipeline module for managing the flow of patch application.

This module provides strategy selection (strict, shifted, greedy and the
optimized variants) and the entry points that apply a whole diff.
"""

from .strategy_chain import (ApplyState, ChainedPatchStrategy, OptimizedChainedStrategy,
                             PerformanceOptimizedStrategy, PatchStrategyFactory, use_optimized_strategies)
from .patch_pipeline import (ApplyStatus, FileApplyResult, FileInfo, apply_patch_to_content,
                             apply_patch_text, describe_patch, prepare_patches)
