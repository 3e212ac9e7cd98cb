"""
Matching strategies for patch application.

Every strategy exposes a stable name and apply(content, patch) -> MatchResult.
A strategy never mutates the patch it is given and never leaves a file half
patched: on failure the result carries the original content unchanged.
"""

import logging
import math
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from ..core.config import DEFAULT_FUZZ_FACTOR, get_shift_search_radius, validate_fuzz_factor
from ..core.utils import detect_eol, split_lines
from ..parsing.patch_model import Hunk, ParsedPatch
from .hunk_applier import apply_hunks

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchResult:
    """Outcome of one attempt to apply a patch to file content."""
    patched_text: str
    success: bool
    strategy_name: Optional[str] = None
    attempted_strategies: Tuple[str, ...] = ()

    @classmethod
    def failure(cls, content: str, attempted: Tuple[str, ...] = ()) -> 'MatchResult':
        return cls(patched_text=content, success=False, strategy_name=None,
                   attempted_strategies=tuple(attempted))


def check_arguments(content: str, patch: ParsedPatch) -> None:
    """Reject call-contract violations before any work is done."""
    if content is None:
        raise TypeError("content must be a string, not None")
    if patch is None:
        raise TypeError("patch must be a ParsedPatch, not None")


class PatchStrategy:
    """Base interface for patch application strategies."""

    name = 'base'

    def apply(self, content: str, patch: ParsedPatch) -> MatchResult:
        """
        Apply the patch to the content.

        Args:
            content: The original content to patch
            patch: The patch to apply

        Returns:
            MatchResult with the patched content and success flag
        """
        raise NotImplementedError

    def _finish(self, content: str, patched_lines: Optional[List[str]]) -> MatchResult:
        if patched_lines is None:
            logger.debug(f"Strategy '{self.name}' could not apply the patch")
            return MatchResult.failure(content, (self.name,))
        return MatchResult(
            patched_text=detect_eol(content).join(patched_lines),
            success=True,
            strategy_name=self.name,
            attempted_strategies=(self.name,),
        )

    def __repr__(self):
        return f"{type(self).__name__}(name={self.name!r})"


class StrictStrategy(PatchStrategy):
    """Every hunk must match exactly at the position its header claims."""

    name = 'strict'

    def apply(self, content: str, patch: ParsedPatch) -> MatchResult:
        check_arguments(content, patch)
        patched = apply_hunks(split_lines(content), patch.hunks)
        return self._finish(content, patched)


class ShiftedHeaderStrategy(PatchStrategy):
    """
    Tolerates wrong hunk line numbers by re-aligning each hunk on its
    context lines within a window around the claimed start.
    """

    name = 'shifted'

    def __init__(self, fuzz_factor: int = DEFAULT_FUZZ_FACTOR):
        self.fuzz_factor = validate_fuzz_factor(fuzz_factor)

    def apply(self, content: str, patch: ParsedPatch) -> MatchResult:
        check_arguments(content, patch)

        # Skip if fuzz is disabled
        if self.fuzz_factor == 0:
            return MatchResult.failure(content, (self.name,))

        lines = split_lines(content)
        copy = patch.clone()

        for number, hunk in enumerate(copy.hunks, 1):
            position = self.locate_hunk(lines, hunk)
            if position is None:
                logger.debug(f"Hunk {number}: context not found near line {hunk.old_start}")
                return MatchResult.failure(content, (self.name,))
            shifted_start = position if hunk.old_lines == 0 else position + 1
            delta = shifted_start - hunk.old_start
            hunk.old_start = shifted_start
            hunk.new_start += delta

        patched = apply_hunks(lines, copy.hunks, context_tolerance=self.fuzz_factor)
        return self._finish(content, patched)

    def minimum_score(self, context_count: int) -> int:
        """With higher fuzz, fewer exact context matches are needed."""
        return max(1, math.ceil(context_count / (self.fuzz_factor + 1)))

    def locate_hunk(self, file_lines: List[str], hunk: Hunk) -> Optional[int]:
        """
        Locate the best position for a hunk in the file content.

        Context lines are compared at their offsets inside the hunk's old
        block. The first position with the highest score wins.

        Args:
            file_lines: The file content as a list of lines
            hunk: The hunk to locate

        Returns:
            The 0-based start of the old block, or None if no position
            reaches the minimum score
        """
        context = []
        offset = 0
        for line in hunk.lines:
            if line.is_addition:
                continue
            if line.is_context:
                context.append((offset, line.text))
            offset += 1

        if not context:
            return hunk.anchor()

        needed = self.minimum_score(len(context))
        radius = get_shift_search_radius(self.fuzz_factor)
        claimed = hunk.anchor()
        start = max(0, claimed - radius)
        end = min(len(file_lines), claimed + radius)

        best_score, best_position = 0, None
        for i in range(start, end):
            score = 0
            for offset, text in context:
                if i + offset < len(file_lines) and file_lines[i + offset] == text:
                    score += 1
            if score > best_score:
                best_score, best_position = score, i
                if score == len(context):
                    break  # perfect match

        if best_score >= needed:
            return best_position
        return None


def filter_hunk_context(hunk: Hunk, contains: Callable[[str], bool]) -> Hunk:
    """
    Drop the context lines of a hunk that do not occur in the file.

    Additions and removals are always kept and the line order is preserved.
    The header counts of the returned hunk are recomputed from what is left.

    Args:
        hunk: The hunk to filter (not modified)
        contains: Answers whether a line occurs anywhere in the file

    Returns:
        A new, internally consistent hunk
    """
    kept = [line for line in hunk.lines if not line.is_context or contains(line.text)]
    filtered = Hunk(hunk.old_start, 0, hunk.new_start, 0, kept, hunk.section,
                    hunk.old_missing_newline, hunk.new_missing_newline)
    filtered.old_lines = filtered.counted_old_lines
    filtered.new_lines = filtered.counted_new_lines
    return filtered


class GreedyStrategy(PatchStrategy):
    """
    Drops context lines that do not exist anywhere in the file, then places
    each hunk at the nearest exact match of what is left.
    """

    name = 'greedy'

    def apply(self, content: str, patch: ParsedPatch) -> MatchResult:
        check_arguments(content, patch)
        file_lines = split_lines(content)
        copy = patch.clone()

        copy.hunks = [filter_hunk_context(hunk, lambda text: text in file_lines)
                      for hunk in copy.hunks]

        patched = apply_hunks(file_lines, copy.hunks, search=True)
        return self._finish(content, patched)
