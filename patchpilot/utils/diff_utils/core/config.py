"""
Configuration settings for diff utilities.

This module provides centralized configuration for the patch matching engine.
Every value has a built-in default and can be overridden through a
PATCHPILOT_* environment variable.
"""

import os
from dataclasses import dataclass

# Fuzz factor settings
DEFAULT_FUZZ_FACTOR = 2            # Default tolerance used by the shifted strategy
MAX_FUZZ_FACTOR = 3
DEFAULT_AUTO_CORRECT_HUNK_HEADERS = True

# Shifted-header search window: claimed start +/- (base + step * fuzz)
SHIFT_SEARCH_RADIUS_BASE = 100
SHIFT_SEARCH_RADIUS_PER_FUZZ = 20

# Chain selection heuristics
SMALL_PATCH_MAX_HUNKS = 5          # Fewer hunks than this counts as a small patch
SMALL_PATCH_MAX_LINES = 500        # ... and fewer hunk lines than this
LARGE_PATCH_HUNK_COUNT = 5         # More hunks than this is a large patch
LARGE_CONTENT_CHARS = 100000       # ~100KB of content is a large patch target
LARGE_FILE_CHARS = 500000          # ~500KB is a large file

# Line index sampling for the optimized greedy strategy
LINE_INDEX_SAMPLING_THRESHOLD = 50000  # Files with more lines get a sampled position index
LINE_INDEX_MAX_POSITIONS = 64          # Lines occurring more often are left out of the sample

# Environment variable names for configuration overrides
ENV_PREFIX = "PATCHPILOT_"
ENV_FUZZ_FACTOR = f"{ENV_PREFIX}FUZZ_FACTOR"
ENV_AUTO_CORRECT = f"{ENV_PREFIX}AUTO_CORRECT_HUNK_HEADERS"
ENV_SHIFT_RADIUS_BASE = f"{ENV_PREFIX}SHIFT_RADIUS_BASE"
ENV_SHIFT_RADIUS_PER_FUZZ = f"{ENV_PREFIX}SHIFT_RADIUS_PER_FUZZ"
ENV_SMALL_PATCH_MAX_HUNKS = f"{ENV_PREFIX}SMALL_PATCH_MAX_HUNKS"
ENV_SMALL_PATCH_MAX_LINES = f"{ENV_PREFIX}SMALL_PATCH_MAX_LINES"
ENV_LINE_INDEX_SAMPLING_THRESHOLD = f"{ENV_PREFIX}LINE_INDEX_SAMPLING_THRESHOLD"


def get_config_value(env_var: str, default_value):
    """
    Get a configuration value from environment variable or use default.
    
    Args:
        env_var: The environment variable name
        default_value: The default value to use if env var is not set
        
    Returns:
        The configuration value
    """
    value = os.environ.get(env_var)
    if value is None:
        return default_value
    
    # Try to convert to the same type as default_value
    try:
        if isinstance(default_value, bool):
            return value.lower() in ('true', 'yes', '1', 'y')
        elif isinstance(default_value, int):
            return int(value)
        elif isinstance(default_value, float):
            return float(value)
        else:
            return value
    except (ValueError, TypeError):
        return default_value

def get_shift_search_radius(fuzz: int) -> int:
    """Get the shifted strategy search radius for a fuzz factor."""
    base = get_config_value(ENV_SHIFT_RADIUS_BASE, SHIFT_SEARCH_RADIUS_BASE)
    step = get_config_value(ENV_SHIFT_RADIUS_PER_FUZZ, SHIFT_SEARCH_RADIUS_PER_FUZZ)
    return base + step * fuzz

def get_small_patch_limits():
    """
    Get the thresholds under which a patch is considered small.
    
    Returns:
        Tuple of (max_hunks, max_lines)
    """
    return (
        get_config_value(ENV_SMALL_PATCH_MAX_HUNKS, SMALL_PATCH_MAX_HUNKS),
        get_config_value(ENV_SMALL_PATCH_MAX_LINES, SMALL_PATCH_MAX_LINES),
    )

def get_line_index_sampling_threshold() -> int:
    """Get the line count above which the line index is sampled."""
    return get_config_value(ENV_LINE_INDEX_SAMPLING_THRESHOLD, LINE_INDEX_SAMPLING_THRESHOLD)

def validate_fuzz_factor(fuzz) -> int:
    """
    Check that a fuzz factor is an integer between 0 and MAX_FUZZ_FACTOR.
    
    Raises:
        ValueError: If the value is out of range
    """
    if isinstance(fuzz, bool) or not isinstance(fuzz, int) or not 0 <= fuzz <= MAX_FUZZ_FACTOR:
        raise ValueError(f"Fuzz factor must be an integer between 0 and {MAX_FUZZ_FACTOR}, got {fuzz!r}")
    return fuzz


@dataclass(frozen=True)
class ApplyOptions:
    """Options recognized by the patch application entry points."""
    fuzz: int = DEFAULT_FUZZ_FACTOR
    auto_correct_hunk_headers: bool = DEFAULT_AUTO_CORRECT_HUNK_HEADERS

    def __post_init__(self):
        validate_fuzz_factor(self.fuzz)

    @classmethod
    def from_env(cls, **overrides) -> "ApplyOptions":
        """
        Build options from PATCHPILOT_* environment variables.
        
        Args:
            overrides: Explicit values that win over the environment; None is ignored
            
        Returns:
            The resolved options
        """
        values = {
            'fuzz': get_config_value(ENV_FUZZ_FACTOR, DEFAULT_FUZZ_FACTOR),
            'auto_correct_hunk_headers': get_config_value(ENV_AUTO_CORRECT, DEFAULT_AUTO_CORRECT_HUNK_HEADERS),
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)
