"""
Utility functions for the diff_utils package.
"""

import re
from typing import List

LINE_SPLIT_RE = re.compile(r'\r\n|\r|\n')

def split_lines(text: str) -> List[str]:
    """
    Split text on any line terminator, keeping a trailing empty element when
    the text ends with a newline so that joining restores it.
    """
    return LINE_SPLIT_RE.split(text)

def detect_eol(text: str) -> str:
    """Return the line terminator to use when re-joining lines of text."""
    return '\r\n' if '\r\n' in text else '\n'
