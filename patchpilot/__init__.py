"""
PatchPilot - apply fuzzy, LLM-produced unified diffs to source text.
"""

__version__ = "1.2.4"
