"""
Optimized greedy strategy for large diffs.

Same decisions as GreedyStrategy, but "does this context line exist in the
file" is answered from a LineIndex built once per apply call instead of
scanning the file for every context line, and hunk location jumps straight
to the occurrences of the rarest old block line.
"""

import logging
from typing import List

from ..core.utils import split_lines
from ..parsing.patch_model import Hunk, ParsedPatch
from .hunk_applier import apply_hunks
from .line_index import LineIndex
from .patch_strategies import MatchResult, PatchStrategy, check_arguments, filter_hunk_context

logger = logging.getLogger(__name__)


class OptimizedGreedyStrategy(PatchStrategy):
    """Greedy context filtering backed by a per-call line index."""

    name = 'optimized-greedy'

    def apply(self, content: str, patch: ParsedPatch) -> MatchResult:
        check_arguments(content, patch)
        copy = self.clone_patch(patch)
        file_lines = split_lines(content)

        line_index = self.build_line_index(file_lines)
        if line_index.sampled:
            logger.debug(f"Using sampled line index for {line_index.line_count} lines")

        copy.hunks = [self.optimize_hunk(hunk, line_index) for hunk in copy.hunks]

        patched = apply_hunks(file_lines, copy.hunks, search=True, line_index=line_index)
        return self._finish(content, patched)

    def clone_patch(self, patch: ParsedPatch) -> ParsedPatch:
        return patch.clone()

    def build_line_index(self, file_lines: List[str]) -> LineIndex:
        return LineIndex(file_lines)

    def optimize_hunk(self, hunk: Hunk, line_index: LineIndex) -> Hunk:
        """
        Keep additions, removals and the context lines present in the file.

        Args:
            hunk: The hunk to filter
            line_index: Index of the target file

        Returns:
            The filtered hunk with recomputed counts
        """
        filtered = filter_hunk_context(hunk, line_index.__contains__)
        dropped = len(hunk.lines) - len(filtered.lines)
        if dropped:
            logger.debug(f"Dropped {dropped} stale context line(s) from hunk at line {hunk.old_start}")
        return filtered
