"""
Best-effort cleanup of diff text before it is parsed.

LLM responses wrap diffs in Markdown fences, paste terminal colour codes,
drop the leading space of context lines and sometimes omit the file headers
altogether. normalize_diff repairs what it can without looking at the target
file; is_well_formed reports whether the result is a structurally valid
unified diff according to unidiff.
"""

import logging
import re
from typing import List, Optional

from unidiff import PatchSet, UnidiffParseError

from ..core.utils import split_lines
from .diff_parser import HUNK_HEADER_RE, NO_NEWLINE_RE

logger = logging.getLogger(__name__)

CODE_FENCE_RE = re.compile(r'^\s*```[\w+-]*\s*$')
ANSI_ESCAPE_RE = re.compile(r'\x1b\[[0-9;?]*[A-Za-z]')
# Control characters other than tab and line terminators
CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f\u200b\ufeff]")

_BODY_PREFIXES = ('+', '-', ' ')


def strip_code_fences(lines: List[str]) -> List[str]:
    """Remove Markdown code fence lines such as ```diff and ```."""
    return [line for line in lines if not CODE_FENCE_RE.match(line)]


def strip_control_characters(text: str) -> str:
    """Remove ANSI colour sequences and stray control characters."""
    text = ANSI_ESCAPE_RE.sub('', text)
    return CONTROL_CHARS_RE.sub('', text)


def _swap_prefix(name: str, old: str, new: str) -> str:
    return new + name[len(old):] if name.startswith(old) else name


def fix_context_prefixes(lines: List[str]) -> List[str]:
    """
    Insert the missing leading space on context lines inside hunks.

    Args:
        lines: The diff lines

    Returns:
        The lines with every non-empty hunk body line carrying a prefix
    """
    result = []
    in_hunk = False
    for i, line in enumerate(lines):
        if HUNK_HEADER_RE.match(line):
            in_hunk = True
        elif line.startswith('diff --git ') or (
                line.startswith('--- ') and i + 1 < len(lines) and lines[i + 1].startswith('+++ ')):
            in_hunk = False
        elif in_hunk and line and not line.startswith(_BODY_PREFIXES) and not NO_NEWLINE_RE.match(line):
            line = ' ' + line
        result.append(line)
    return result


def synthesize_headers(lines: List[str], file_path: Optional[str] = None) -> List[str]:
    """
    Add the file headers a diff is missing.

    A diff made only of hunks gets a full diff --git/---/+++ header when a
    file path is known. A "---" header without its "+++" partner gets one,
    and a "---"/"+++" pair without a "diff --git" line gets that line.

    Args:
        lines: The diff lines
        file_path: The path to use when the diff names no file

    Returns:
        The lines with headers added
    """
    first_hunk = next((i for i, line in enumerate(lines) if HUNK_HEADER_RE.match(line)), None)
    if first_hunk is None:
        return lines

    has_header = any(line.startswith(('--- ', '+++ ', 'diff --git ')) for line in lines[:first_hunk])
    if not has_header:
        if not file_path:
            logger.debug("Diff has no file headers and no file path was given")
            return lines
        logger.debug(f"Synthesizing diff headers for {file_path}")
        return ([f"diff --git a/{file_path} b/{file_path}",
                 f"--- a/{file_path}",
                 f"+++ b/{file_path}"] + lines[first_hunk:])

    result = []
    in_hunk = False
    for i, line in enumerate(lines):
        if HUNK_HEADER_RE.match(line):
            in_hunk = True
        is_minus_header = line.startswith('--- ') and (
            not in_hunk or (i + 1 < len(lines) and lines[i + 1].startswith('+++ ')))
        if is_minus_header:
            in_hunk = False
            old_name = line[4:].split('\t', 1)[0].strip()
            new_name = _swap_prefix(old_name, 'a/', 'b/')
            previous = result[-1] if result else ''
            if not previous.startswith(('diff --git ', 'index ', 'new file mode', 'deleted file mode')):
                git_old = old_name if old_name != '/dev/null' else _swap_prefix(new_name, 'b/', 'a/')
                git_new = new_name if new_name != '/dev/null' else _swap_prefix(old_name, 'a/', 'b/')
                if i + 1 < len(lines) and lines[i + 1].startswith('+++ '):
                    git_new = lines[i + 1][4:].split('\t', 1)[0].strip()
                    if git_new == '/dev/null':
                        git_new = _swap_prefix(git_old, 'a/', 'b/')
                if git_old != '/dev/null' and git_new != '/dev/null':
                    result.append(f"diff --git {git_old} {git_new}")
            result.append(line)
            if not (i + 1 < len(lines) and lines[i + 1].startswith('+++ ')):
                result.append(f"+++ {new_name}")
            continue
        result.append(line)
    return result


def normalize_diff(diff_content: str, file_path: Optional[str] = None) -> str:
    """
    Normalize raw diff text so the lenient parser sees clean structure.

    Args:
        diff_content: Raw diff text, possibly copied from an LLM response
        file_path: Target path used when the diff carries no file headers

    Returns:
        The normalized diff text, ending with a newline
    """
    if diff_content is None:
        raise TypeError("diff_content must be a string, not None")

    text = strip_control_characters(diff_content)
    lines = strip_code_fences(split_lines(text))
    lines = synthesize_headers(lines, file_path)
    lines = fix_context_prefixes(lines)

    while lines and lines[-1] == '':
        lines.pop()
    if not lines:
        return ''
    return '\n'.join(lines) + '\n'


def is_well_formed(diff_content: str) -> bool:
    """
    Check whether diff text is a structurally valid unified diff.

    unidiff trusts the hunk header counts, so a diff whose headers disagree
    with its content is reported as not well formed.

    Args:
        diff_content: The diff text to check

    Returns:
        True if unidiff parses at least one file from the text
    """
    if not diff_content:
        return False
    try:
        patch_set = PatchSet(diff_content)
    except UnidiffParseError as e:
        logger.debug(f"unidiff rejected diff: {e}")
        return False
    return len(patch_set) > 0
