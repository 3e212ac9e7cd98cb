"""
Utility to detect and correct inaccurate hunk header line counts.

LLM-produced hunk headers frequently claim the wrong number of old and new
lines. The counts are recomputed from the literal line tags: old = context +
removal lines, new = context + addition lines.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Set

from ..parsing.patch_model import ParsedPatch

logger = logging.getLogger(__name__)

UNKNOWN_FILE = 'unknown-file'


@dataclass(frozen=True)
class HunkCorrection:
    """Original and corrected counts of one hunk header."""
    file_path: str
    hunk_index: int
    original_old: int
    corrected_old: int
    original_new: int
    corrected_new: int

    def describe(self) -> str:
        return (f"{self.file_path} [Hunk {self.hunk_index}]: "
                f"Old lines {self.original_old} -> {self.corrected_old}, "
                f"New lines {self.original_new} -> {self.corrected_new}")


@dataclass
class CorrectionReport:
    """Every correction made in one pass over a set of patches."""
    corrections_made: bool = False
    corrections: List[HunkCorrection] = field(default_factory=list)

    def files_corrected(self) -> Set[str]:
        return {correction.file_path for correction in self.corrections}

    def for_file(self, file_path: str) -> List[HunkCorrection]:
        return [c for c in self.corrections if c.file_path == file_path]


@dataclass
class CorrectionResult:
    corrected_patches: List[ParsedPatch]
    correction_details: CorrectionReport


def correct_hunk_headers(patches: List[ParsedPatch]) -> CorrectionResult:
    """
    Recompute every hunk's old and new line counts from its lines.

    The input patches are not modified; the result holds deep copies.
    Hunks whose counts were already right are copied unchanged and are not
    reported, so running the correction twice reports nothing the second time.

    Args:
        patches: The parsed patches

    Returns:
        CorrectionResult with the corrected copies and the correction report
    """
    if patches is None:
        raise TypeError("patches must be a list of ParsedPatch, not None")

    corrected_patches = []
    corrections = []

    for patch in patches:
        file_path = patch.file_path or UNKNOWN_FILE
        corrected = patch.clone()

        for index, hunk in enumerate(corrected.hunks, 1):
            old_count = hunk.counted_old_lines
            new_count = hunk.counted_new_lines
            if old_count == hunk.old_lines and new_count == hunk.new_lines:
                continue

            correction = HunkCorrection(
                file_path=file_path,
                hunk_index=index,
                original_old=hunk.old_lines,
                corrected_old=old_count,
                original_new=hunk.new_lines,
                corrected_new=new_count,
            )
            corrections.append(correction)
            hunk.old_lines = old_count
            hunk.new_lines = new_count
            logger.debug(f"Corrected hunk header: {correction.describe()}")

        corrected_patches.append(corrected)

    if corrections:
        logger.info(f"Corrected {len(corrections)} hunk header(s) in "
                    f"{len({c.file_path for c in corrections})} file(s)")

    return CorrectionResult(
        corrected_patches=corrected_patches,
        correction_details=CorrectionReport(corrections_made=bool(corrections), corrections=corrections),
    )
