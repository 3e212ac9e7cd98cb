"""
Line-range diff and per-hunk revert between two full texts.

Used after a patch has been applied, to let a reviewer reject individual
changes. Works purely on text and knows nothing about unified diffs.
"""

import difflib
import logging
from dataclasses import dataclass
from typing import List, Optional

from ..core.utils import detect_eol, split_lines

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChangedHunkRange:
    """A changed region, as 0-based line offsets into both texts."""
    original_start: int
    original_length: int
    modified_start: int
    modified_length: int

    @property
    def is_addition(self) -> bool:
        return self.original_length == 0

    @property
    def is_deletion(self) -> bool:
        return self.modified_length == 0


class HunkManager:
    """Computes changed line ranges and reverts them one at a time."""

    def compare(self, original: str, modified: str) -> List[ChangedHunkRange]:
        """
        Compare two texts and return the list of changed hunks.

        The comparison is whitespace sensitive. Adjacent removed and added
        runs form one range; an unchanged run closes the open range.

        Args:
            original: The text before the change
            modified: The text after the change

        Returns:
            The changed ranges in file order
        """
        original_lines = split_lines(original)
        modified_lines = split_lines(modified)
        matcher = difflib.SequenceMatcher(None, original_lines, modified_lines, autojunk=False)

        hunks = []
        current = None
        for tag, i1, i2, j1, j2 in matcher.get_opcodes():
            if tag == 'equal':
                if current is not None:
                    hunks.append(current)
                    current = None
                continue
            if current is None:
                current = [i1, 0, j1, 0]
            current[1] += i2 - i1
            current[3] += j2 - j1

        if current is not None:
            hunks.append(current)

        return [ChangedHunkRange(*hunk) for hunk in hunks]

    def revert_hunk(self, original: str, modified: str, hunk: ChangedHunkRange) -> str:
        """
        Revert one changed range of the modified text to the original text.

        Args:
            original: The text before the change
            modified: The current modified text the range was computed against
            hunk: The range to revert

        Returns:
            The modified text with the range restored
        """
        eol = detect_eol(modified)
        original_lines = split_lines(original)
        modified_lines = split_lines(modified)

        restored = original_lines[hunk.original_start:hunk.original_start + hunk.original_length]
        modified_lines[hunk.modified_start:hunk.modified_start + hunk.modified_length] = restored

        return eol.join(modified_lines)

    def revert_hunks(self, original: str, modified: str, hunks: List[ChangedHunkRange]) -> str:
        """Revert several ranges, last first, so earlier offsets stay valid."""
        for hunk in sorted(hunks, key=lambda h: h.modified_start, reverse=True):
            modified = self.revert_hunk(original, modified, hunk)
        return modified


class HunkReviewSession:
    """
    Review state for one patched file.

    Keeps the original text, the patched text as first produced (for reset)
    and the current text after any rejected hunks.
    """

    def __init__(self, original: str, patched: str, file_path: Optional[str] = None,
                 manager: Optional[HunkManager] = None):
        self.original = original
        self.patched = patched
        self.content = patched
        self.file_path = file_path
        self.manager = manager or HunkManager()

    def hunks(self) -> List[ChangedHunkRange]:
        return self.manager.compare(self.original, self.content)

    def reject(self, index: int) -> str:
        """
        Revert the hunk at index (as listed by hunks()) and return the new content.

        Raises:
            IndexError: If there is no hunk at that index
        """
        hunks = self.hunks()
        if not 0 <= index < len(hunks):
            raise IndexError(f"No hunk {index}; {len(hunks)} hunk(s) remain")
        self.content = self.manager.revert_hunk(self.original, self.content, hunks[index])
        logger.debug(f"Rejected hunk {index} of {self.file_path or 'file'}")
        return self.content

    def reset(self) -> str:
        self.content = self.patched
        return self.content

    @property
    def is_unchanged(self) -> bool:
        return self.content == self.original
