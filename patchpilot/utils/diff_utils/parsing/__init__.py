"""
Parsing utilities for the diff_utils package.

This module provides the diff model and functionality for turning unified
diff text into it.
"""

from .patch_model import DEV_NULL, LineType, HunkLine, Hunk, ParsedPatch, clean_file_name
from .diff_parser import parse_patch, parse_hunk_header
from .diff_normalizer import normalize_diff, is_well_formed
