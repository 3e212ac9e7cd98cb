"""
Application utilities for the diff_utils package.

This module provides the matching strategies that apply parsed patches to
file content, the hunk header corrector and the per-hunk revert utility.
"""

from .hunk_applier import apply_hunks, find_hunk_position, hunk_matches_at
from .hunk_header_correction import correct_hunk_headers, CorrectionReport, CorrectionResult, HunkCorrection
from .line_index import LineIndex
from .patch_strategies import (
    MatchResult, PatchStrategy, StrictStrategy, ShiftedHeaderStrategy, GreedyStrategy, filter_hunk_context
)
from .optimized_strategies import OptimizedGreedyStrategy
from .hunk_manager import ChangedHunkRange, HunkManager, HunkReviewSession
