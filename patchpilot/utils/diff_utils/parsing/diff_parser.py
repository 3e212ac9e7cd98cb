"""
Utilities for parsing diff files.

The parser is deliberately lenient: hunk boundaries are found from the
structure of the text, never from the line counts claimed in hunk headers,
so that diffs with wrong counts or missing context prefixes still parse.
"""

import re
from typing import List, Optional, Tuple

from ..core.utils import split_lines
from .patch_model import Hunk, HunkLine, LineType, ParsedPatch

import logging
logger = logging.getLogger(__name__)

HUNK_HEADER_RE = re.compile(r'^@@+ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@+ ?(.*)$')
GIT_HEADER_RE = re.compile(r'^diff --git (\S+) (\S+)\s*$')
NO_NEWLINE_RE = re.compile(r'^\\ No newline')

_PREFIX_TYPES = {
    '+': LineType.ADDITION,
    '-': LineType.REMOVAL,
    ' ': LineType.CONTEXT,
}


def parse_hunk_header(line: str) -> Optional[Tuple[int, int, int, int, str]]:
    """
    Parse a hunk header line.

    Args:
        line: A line such as "@@ -12,5 +12,6 @@ def main():"

    Returns:
        Tuple of (old_start, old_lines, new_start, new_lines, section), or None
        if the line is not a hunk header. Omitted counts default to 1.
    """
    match = HUNK_HEADER_RE.match(line)
    if not match:
        return None
    old_start = int(match.group(1))
    old_lines = int(match.group(2)) if match.group(2) is not None else 1
    new_start = int(match.group(3))
    new_lines = int(match.group(4)) if match.group(4) is not None else 1
    return old_start, old_lines, new_start, new_lines, match.group(5).strip()


def _header_file_name(value: str) -> str:
    # Drop the timestamp that some tools append after a tab
    return value.split('\t', 1)[0].strip()


def _is_file_header_start(lines: List[str], i: int, in_hunk: bool) -> bool:
    line = lines[i]
    if line.startswith('diff --git '):
        return True
    if not in_hunk:
        return line.startswith(('--- ', '+++ ', 'Index: '))
    # Inside a hunk "--- x" is only a header when "+++ y" follows it
    return (line.startswith('--- ') and i + 1 < len(lines)
            and lines[i + 1].startswith('+++ '))


def _mark_missing_newline(hunk: Hunk) -> None:
    # The marker applies to the side(s) of the line right before it
    if not hunk.lines:
        return
    previous = hunk.lines[-1]
    if not previous.is_addition:
        hunk.old_missing_newline = True
    if not previous.is_removal:
        hunk.new_missing_newline = True


def parse_patch(diff_content: str) -> List[ParsedPatch]:
    """
    Parse unified diff text into one ParsedPatch per target file.

    Args:
        diff_content: The diff text, with any mix of line endings

    Returns:
        A list of ParsedPatch objects in the order they appear in the text.
        Text without any file header or hunk yields an empty list.
    """
    if diff_content is None:
        raise TypeError("diff_content must be a string, not None")

    lines = split_lines(diff_content)
    patches: List[ParsedPatch] = []
    current: Optional[ParsedPatch] = None
    hunk: Optional[Hunk] = None
    pending_blank = 0

    def start_patch() -> ParsedPatch:
        patch = ParsedPatch()
        patches.append(patch)
        return patch

    for i, line in enumerate(lines):
        if _is_file_header_start(lines, i, hunk is not None):
            hunk = None
            pending_blank = 0
            if line.startswith('diff --git '):
                current = start_patch()
                match = GIT_HEADER_RE.match(line)
                if match:
                    current.old_file_name = match.group(1)
                    current.new_file_name = match.group(2)
            elif line.startswith('Index: '):
                current = start_patch()
            elif line.startswith('--- '):
                if current is None or current.hunks:
                    current = start_patch()
                current.old_file_name = _header_file_name(line[4:])
            else:
                if current is None or current.hunks:
                    current = start_patch()
                current.new_file_name = _header_file_name(line[4:])
            continue

        header = parse_hunk_header(line)
        if header is not None:
            if current is None:
                current = start_patch()
            old_start, old_lines, new_start, new_lines, section = header
            hunk = Hunk(old_start, old_lines, new_start, new_lines, [], section)
            current.hunks.append(hunk)
            pending_blank = 0
            continue

        if hunk is None:
            # Preamble: index lines, file modes, prose around the diff
            continue

        if line == '':
            # Blank lines only count as context when more hunk lines follow
            pending_blank += 1
            continue

        if pending_blank:
            hunk.lines.extend(HunkLine(LineType.CONTEXT, '') for _ in range(pending_blank))
            pending_blank = 0

        if NO_NEWLINE_RE.match(line):
            _mark_missing_newline(hunk)
            continue

        line_type = _PREFIX_TYPES.get(line[0])
        if line_type is None:
            # Context line that lost its leading space
            hunk.lines.append(HunkLine(LineType.CONTEXT, line))
        else:
            hunk.lines.append(HunkLine(line_type, line[1:]))

    logger.debug(f"Parsed {len(patches)} file patch(es) with "
                 f"{sum(len(p.hunks) for p in patches)} hunk(s)")
    return patches
