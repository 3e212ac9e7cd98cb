"""
diff_utils package - Utilities for applying unified diffs that may not match exactly.

This package provides functionality for parsing, correcting, and applying
diffs with increasingly tolerant matching strategies, and for reverting
individual changed hunks afterwards.
"""

# Core utilities
from .core import PatchApplicationError, MalformedPatchError, ApplyOptions, split_lines

# Parsing utilities
from .parsing import ParsedPatch, Hunk, HunkLine, LineType, parse_patch, normalize_diff, is_well_formed

# Validation utilities
from .validation import validate_patch

# Application utilities
from .application import correct_hunk_headers, CorrectionReport, CorrectionResult, HunkCorrection
from .application import MatchResult, PatchStrategy, StrictStrategy, ShiftedHeaderStrategy, GreedyStrategy
from .application import OptimizedGreedyStrategy, LineIndex
from .application import HunkManager, HunkReviewSession, ChangedHunkRange

# Pipeline utilities
from .pipeline import ChainedPatchStrategy, OptimizedChainedStrategy, PatchStrategyFactory, ApplyState
from .pipeline import use_optimized_strategies, apply_patch_to_content, apply_patch_text, describe_patch
from .pipeline import FileApplyResult, FileInfo, ApplyStatus
