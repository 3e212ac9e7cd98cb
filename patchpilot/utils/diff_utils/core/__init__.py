"""
Core utilities for diff application.
"""

from .utils import split_lines, detect_eol
from .exceptions import PatchApplicationError, MalformedPatchError
from .config import ApplyOptions
