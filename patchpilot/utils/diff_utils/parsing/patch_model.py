"""
Data structures representing a parsed unified diff.

A ParsedPatch describes the changes to one file as an ordered list of hunks.
Each hunk keeps the line counts claimed by its header next to its literal
lines, because the claimed counts of LLM-produced diffs are frequently wrong.
"""

import copy
import enum
import re
from dataclasses import dataclass, field
from typing import List, Optional

DEV_NULL = '/dev/null'
NO_NEWLINE_MARKER = '\\ No newline at end of file'

_CONTROL_CHARS_RE = re.compile(r'[\x00-\x1F\x7F]+')
_ESCAPED_NEWLINE_RE = re.compile(r'\\r|\\n')


class LineType(enum.Enum):
    """Tag of a hunk line, valued by its unified diff prefix."""
    CONTEXT = " "
    ADDITION = "+"
    REMOVAL = "-"


@dataclass(frozen=True)
class HunkLine:
    """One literal hunk line with its prefix stripped."""
    line_type: LineType
    text: str

    @property
    def is_context(self) -> bool:
        return self.line_type == LineType.CONTEXT

    @property
    def is_addition(self) -> bool:
        return self.line_type == LineType.ADDITION

    @property
    def is_removal(self) -> bool:
        return self.line_type == LineType.REMOVAL

    def to_diff_line(self) -> str:
        return self.line_type.value + self.text


@dataclass
class Hunk:
    """A contiguous block of a unified diff."""
    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    lines: List[HunkLine] = field(default_factory=list)
    section: str = ''
    # Set from "\ No newline at end of file" markers
    old_missing_newline: bool = False
    new_missing_newline: bool = False

    @property
    def counted_old_lines(self) -> int:
        """Number of context and removal lines actually present."""
        return sum(1 for line in self.lines if not line.is_addition)

    @property
    def counted_new_lines(self) -> int:
        """Number of context and addition lines actually present."""
        return sum(1 for line in self.lines if not line.is_removal)

    def is_consistent(self) -> bool:
        """Check that the header counts agree with the literal lines."""
        return (self.old_lines == self.counted_old_lines and
                self.new_lines == self.counted_new_lines)

    def old_block(self) -> List[str]:
        """The lines this hunk expects to find in the original file."""
        return [line.text for line in self.lines if not line.is_addition]

    def anchor(self) -> int:
        """
        0-based index in the original file where the old block begins.

        A hunk with an empty old side ("-k,0") inserts after line k, every
        other hunk starts at line old_start.
        """
        if self.old_lines == 0:
            return max(0, self.old_start)
        return max(0, self.old_start - 1)

    def diff_lines(self) -> List[str]:
        """The prefixed body lines, with end of file markers where they belong."""
        last_old = max((i for i, line in enumerate(self.lines) if not line.is_addition), default=None)
        last_new = max((i for i, line in enumerate(self.lines) if not line.is_removal), default=None)
        out = []
        for i, line in enumerate(self.lines):
            out.append(line.to_diff_line())
            if ((self.old_missing_newline and i == last_old) or
                    (self.new_missing_newline and i == last_new)):
                out.append(NO_NEWLINE_MARKER)
        return out

    def header(self) -> str:
        header = f"@@ -{self.old_start},{self.old_lines} +{self.new_start},{self.new_lines} @@"
        if self.section:
            header += f" {self.section}"
        return header


def clean_file_name(name: Optional[str], prefix: str) -> Optional[str]:
    """
    Strip a git a/ or b/ prefix and any control characters from a file name.

    Args:
        name: The file name as written in the diff header
        prefix: The git prefix to remove ('a/' or 'b/')

    Returns:
        The cleaned name, or None if nothing usable is left
    """
    if not name or name == DEV_NULL:
        return None
    if name.startswith(prefix):
        name = name[len(prefix):]
    name = _CONTROL_CHARS_RE.sub('', name)
    name = _ESCAPED_NEWLINE_RE.sub('', name)
    name = name.strip()
    return name or None


@dataclass
class ParsedPatch:
    """All hunks of a unified diff that target a single file."""
    old_file_name: Optional[str] = None
    new_file_name: Optional[str] = None
    hunks: List[Hunk] = field(default_factory=list)

    @property
    def file_path(self) -> Optional[str]:
        """The relative path this patch targets, preferring the new name."""
        return (clean_file_name(self.new_file_name, 'b/') or
                clean_file_name(self.old_file_name, 'a/'))

    @property
    def is_new_file(self) -> bool:
        return self.old_file_name == DEV_NULL

    @property
    def is_deleted_file(self) -> bool:
        return self.new_file_name == DEV_NULL

    @property
    def additions(self) -> int:
        return sum(1 for hunk in self.hunks for line in hunk.lines if line.is_addition)

    @property
    def deletions(self) -> int:
        return sum(1 for hunk in self.hunks for line in hunk.lines if line.is_removal)

    @property
    def total_hunk_lines(self) -> int:
        return sum(len(hunk.lines) for hunk in self.hunks)

    def clone(self) -> 'ParsedPatch':
        """Deep copy, so strategies never touch the caller's patch."""
        return copy.deepcopy(self)

    def to_diff_text(self) -> str:
        """Render the patch back into unified diff text."""
        old_name = self.old_file_name or f"a/{self.file_path or 'unknown'}"
        new_name = self.new_file_name or f"b/{self.file_path or 'unknown'}"
        out = [f"--- {old_name}", f"+++ {new_name}"]
        for hunk in self.hunks:
            out.append(hunk.header())
            out.extend(hunk.diff_lines())
        return '\n'.join(out) + '\n'
