"""
Validation utilities for the diff_utils package.
"""

from .validators import validate_patch
