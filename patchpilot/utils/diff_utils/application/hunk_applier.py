"""
Hunk application primitive shared by every matching strategy.

All hunks of a patch are applied or none are: the function returns the
complete new line list, or None when any hunk cannot be placed.
"""

import logging
from typing import Iterator, List, Optional

from ..parsing.patch_model import Hunk
from .line_index import LineIndex

logger = logging.getLogger(__name__)


def iter_positions_by_distance(expected: int, low: int, high: int) -> Iterator[int]:
    """
    Yield positions in [low, high] ordered by distance from expected.

    At equal distance the position after expected comes first:
    expected, expected+1, expected-1, expected+2, ...
    """
    if low > high:
        return
    max_distance = max(abs(expected - low), abs(high - expected))
    for distance in range(max_distance + 1):
        forward = expected + distance
        if low <= forward <= high:
            yield forward
        if distance:
            backward = expected - distance
            if low <= backward <= high:
                yield backward


def _distance_key(expected: int):
    return lambda position: (abs(position - expected), 0 if position >= expected else 1)


def hunk_matches_at(file_lines: List[str], hunk: Hunk, position: int, context_tolerance: int = 0) -> bool:
    """
    Check whether the hunk's old block matches the file at a position.

    Removal lines must always match exactly. Up to context_tolerance
    context lines may differ.

    Args:
        file_lines: The file content as a list of lines
        hunk: The hunk to check
        position: 0-based index where the old block would start
        context_tolerance: Number of context mismatches allowed

    Returns:
        True if the hunk can be applied at the position
    """
    if position < 0 or position + hunk.counted_old_lines > len(file_lines):
        return False

    mismatches = 0
    index = position
    for line in hunk.lines:
        if line.is_addition:
            continue
        if file_lines[index] != line.text:
            if line.is_removal:
                return False
            mismatches += 1
            if mismatches > context_tolerance:
                return False
        index += 1
    return True


def find_hunk_position(file_lines: List[str], hunk: Hunk, low: int, high: int,
                       line_index: Optional[LineIndex] = None) -> Optional[int]:
    """
    Find the exact-match position of a hunk nearest to its anchor.

    With a line index only the occurrences of the rarest old block line are
    considered. The position returned is the same as the one the plain scan
    finds, since the scan order and the tie-break key agree.

    Args:
        file_lines: The file content as a list of lines
        hunk: The hunk to locate
        low: Lowest allowed start position
        high: Highest allowed start position
        line_index: Optional index of file_lines

    Returns:
        The 0-based start position, or None if the hunk matches nowhere
    """
    expected = hunk.anchor()
    old_block = hunk.old_block()

    if line_index is not None and old_block:
        anchor_offset = None
        anchor_positions = None
        for offset, text in enumerate(old_block):
            positions = line_index.positions(text)
            if positions is None:
                continue
            if anchor_positions is None or len(positions) < len(anchor_positions):
                anchor_offset, anchor_positions = offset, positions
                if not positions:
                    break

        if anchor_positions is not None:
            candidates = sorted(
                (p - anchor_offset for p in anchor_positions if low <= p - anchor_offset <= high),
                key=_distance_key(expected))
            for candidate in candidates:
                if hunk_matches_at(file_lines, hunk, candidate):
                    return candidate
            return None
        # Every old block line was sampled out: fall back to scanning

    for candidate in iter_positions_by_distance(expected, low, high):
        if hunk_matches_at(file_lines, hunk, candidate):
            return candidate
    return None


def _adjust_final_newline(hunk: Hunk, tail: List[str]) -> List[str]:
    """
    Add or drop the file's final newline as the last hunk's markers say.

    A split file ends with an empty element exactly when its text ends with
    a newline. The markers only count when the hunk reaches the end of the
    file, i.e. nothing but that empty element follows it.
    """
    if hunk.old_missing_newline and not hunk.new_missing_newline and not tail:
        return ['']
    if hunk.new_missing_newline and not hunk.old_missing_newline and tail == ['']:
        return []
    return tail


def apply_hunks(file_lines: List[str], hunks: List[Hunk], context_tolerance: int = 0,
                search: bool = False, line_index: Optional[LineIndex] = None) -> Optional[List[str]]:
    """
    Apply hunks, in order, to a list of file lines.

    Each hunk must begin at or after the end of the previous one. Hunks
    whose header counts disagree with their lines are rejected.

    Args:
        file_lines: The original file lines (not modified)
        hunks: The hunks to apply
        context_tolerance: Context mismatches allowed per hunk when not searching
        search: Look for each hunk's nearest exact match instead of using its anchor
        line_index: Optional index used to speed up the search

    Returns:
        The patched lines, or None if any hunk could not be applied
    """
    result: List[str] = []
    cursor = 0

    for number, hunk in enumerate(hunks, 1):
        if not hunk.is_consistent():
            logger.debug(f"Hunk {number}: header counts -{hunk.old_lines} +{hunk.new_lines} "
                         f"disagree with content -{hunk.counted_old_lines} +{hunk.counted_new_lines}")
            return None

        high = len(file_lines) - hunk.counted_old_lines
        if search:
            position = find_hunk_position(file_lines, hunk, cursor, high, line_index)
        else:
            position = hunk.anchor()
            if position < cursor or not hunk_matches_at(file_lines, hunk, position, context_tolerance):
                position = None

        if position is None:
            logger.debug(f"Hunk {number}: no match for old block at line {hunk.anchor() + 1}")
            return None

        if position != hunk.anchor():
            logger.debug(f"Hunk {number}: applied at line {position + 1} instead of {hunk.anchor() + 1}")

        result.extend(file_lines[cursor:position])
        index = position
        for line in hunk.lines:
            if line.is_addition:
                result.append(line.text)
            elif line.is_removal:
                index += 1
            else:
                # Keep the file's own text for context lines
                result.append(file_lines[index])
                index += 1
        cursor = index

    tail = file_lines[cursor:]
    if hunks:
        tail = _adjust_final_newline(hunks[-1], tail)
    result.extend(tail)
    return result
