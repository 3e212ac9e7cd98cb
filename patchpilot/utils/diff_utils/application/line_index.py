"""
Content index over the lines of a file.

Built once per strategy invocation and thrown away afterwards. It answers
"does this line occur anywhere in the file" in constant time and gives the
positions of a line so that hunk location can jump straight to candidates.
"""

from collections import Counter
from typing import Dict, List, Optional

from ..core.config import LINE_INDEX_MAX_POSITIONS, get_line_index_sampling_threshold


class LineIndex:
    """
    Mapping from line content to the 0-based positions where it occurs.

    Above the sampling threshold only lines that occur at most
    max_positions times keep a position list. The existence set always
    covers every line, so membership answers never depend on sampling.
    """

    def __init__(self, file_lines: List[str], sampling_threshold: Optional[int] = None,
                 max_positions: int = LINE_INDEX_MAX_POSITIONS):
        if sampling_threshold is None:
            sampling_threshold = get_line_index_sampling_threshold()

        self.line_count = len(file_lines)
        self.sampled = self.line_count > sampling_threshold
        self._counts = Counter(file_lines)
        self._positions: Dict[str, List[int]] = {}

        for i, line in enumerate(file_lines):
            if self.sampled and self._counts[line] > max_positions:
                continue
            self._positions.setdefault(line, []).append(i)

    def __contains__(self, line: str) -> bool:
        return line in self._counts

    def positions(self, line: str) -> Optional[List[int]]:
        """
        Positions of a line in ascending order.

        Returns:
            The complete list of positions, an empty list when the line does
            not occur, or None when the line was left out of a sampled index
        """
        if line not in self._counts:
            return []
        return self._positions.get(line)
