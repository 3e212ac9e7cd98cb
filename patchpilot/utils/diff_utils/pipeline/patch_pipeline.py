"""
Entry points that take raw diff text and apply or describe it.

This module ties the pieces together: normalize the text, parse it into
per-file patches, optionally correct the hunk headers, then run the strategy
chain for every file.
"""
from patchpilot.utils.logging_utils import logger

import enum
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple

from ..core.config import LARGE_CONTENT_CHARS, LARGE_FILE_CHARS, LARGE_PATCH_HUNK_COUNT, ApplyOptions
from ..core.exceptions import PatchApplicationError
from ..application.hunk_header_correction import UNKNOWN_FILE, CorrectionReport, correct_hunk_headers
from ..application.patch_strategies import MatchResult, check_arguments
from ..parsing.diff_normalizer import is_well_formed, normalize_diff
from ..parsing.diff_parser import parse_patch
from ..parsing.patch_model import ParsedPatch
from ..validation.validators import validate_patch
from .strategy_chain import PatchStrategyFactory, use_optimized_strategies

FILE_NOT_FOUND = "File not found"
PATCH_NOT_APPLIED = "Patch could not be applied"


class ApplyStatus(enum.Enum):
    """Outcome of applying the patch for one file."""
    APPLIED = "applied"
    FAILED = "failed"


@dataclass
class FileApplyResult:
    """Result of applying the patch for a single file."""
    file_path: str
    status: ApplyStatus
    reason: Optional[str] = None
    strategy_name: Optional[str] = None
    patched_text: Optional[str] = None
    hunk_headers_corrected: bool = False
    attempted_strategies: Tuple[str, ...] = ()

    @property
    def applied(self) -> bool:
        return self.status == ApplyStatus.APPLIED

    def to_dict(self) -> Dict[str, object]:
        result = {'file': self.file_path, 'status': self.status.value}
        if self.reason:
            result['reason'] = self.reason
        if self.strategy_name:
            result['strategy'] = self.strategy_name
        return result


@dataclass
class FileInfo:
    """Summary of the changes a patch makes to one file."""
    file_path: str
    exists: Optional[bool] = None
    hunks: int = 0
    additions: int = 0
    deletions: int = 0
    hunk_headers_corrected: bool = False


def is_large_patch(content: str, patch: ParsedPatch) -> bool:
    return len(patch.hunks) > LARGE_PATCH_HUNK_COUNT or len(content) > LARGE_CONTENT_CHARS


def is_large_file(content: str) -> bool:
    return len(content) > LARGE_FILE_CHARS


def apply_patch_to_content(content: str, patch: ParsedPatch, fuzz: int = 2) -> MatchResult:
    """
    Apply one file's patch to its content using the strategy chain.

    Large patches and large files go through the performance-optimized
    wrapper; everything else uses the default chain.

    Args:
        content: The current file content
        patch: The parsed patch for this file
        fuzz: Fuzz factor (0-3) for the shifted strategy

    Returns:
        MatchResult with the patched text or the unchanged content

    Raises:
        TypeError: If content or patch is None
        MalformedPatchError: If the patch can never be applied
        ValueError: If fuzz is out of range
    """
    check_arguments(content, patch)
    validate_patch(patch)

    standard_strategy = PatchStrategyFactory.create_default_strategy(fuzz)
    if is_large_patch(content, patch) or is_large_file(content):
        logger.debug(f"Using optimized strategies for {len(patch.hunks)} hunk(s), {len(content)} chars")
        strategy = use_optimized_strategies(standard_strategy, fuzz)
    else:
        strategy = standard_strategy

    return strategy.apply(content, patch)


def prepare_patches(patch_text: str, options: ApplyOptions) -> Tuple[List[ParsedPatch], CorrectionReport]:
    """
    Normalize, parse and (if enabled) correct the patches in a diff.

    Raises:
        PatchApplicationError: If the text contains no patches
    """
    if patch_text is None:
        raise TypeError("patch_text must be a string, not None")

    normalized = normalize_diff(patch_text)
    if not is_well_formed(normalized):
        logger.debug("Diff is not a well-formed unified diff, relying on the lenient parser")

    patches = [p for p in parse_patch(normalized) if p.hunks]
    if not patches:
        raise PatchApplicationError("No valid patches found", {'patch_length': len(patch_text)})

    if not options.auto_correct_hunk_headers:
        return patches, CorrectionReport()

    correction = correct_hunk_headers(patches)
    report = correction.correction_details
    if report.corrections_made:
        for item in report.corrections:
            logger.info(f"Hunk header corrected: {item.describe()}")
        corrected_files = report.files_corrected()
        for patch in correction.corrected_patches:
            if (patch.file_path or UNKNOWN_FILE) in corrected_files and not is_well_formed(patch.to_diff_text()):
                logger.warning(f"{patch.file_path}: corrected patch is still not a well-formed diff")
    return correction.corrected_patches, report


def apply_patch_text(patch_text: str, file_contents: Mapping[str, str],
                     options: Optional[ApplyOptions] = None) -> List[FileApplyResult]:
    """
    Apply a (possibly multi-file) unified diff to in-memory file contents.

    Files are looked up by the path the diff targets. When several patches
    target the same file they are applied in order, each to the result of
    the previous one. A patch that creates a file may target a path that
    does not exist yet.

    Args:
        patch_text: The unified diff
        file_contents: File contents keyed by relative path
        options: Apply options; defaults are read from the environment

    Returns:
        One FileApplyResult per patch, in diff order

    Raises:
        PatchApplicationError: If no valid patches are found
    """
    options = options or ApplyOptions.from_env()
    patches, report = prepare_patches(patch_text, options)
    corrected_files = report.files_corrected()

    working: Dict[str, str] = dict(file_contents)
    results = []

    for patch in patches:
        file_path = patch.file_path or UNKNOWN_FILE
        corrected = file_path in corrected_files

        if file_path in working:
            content = working[file_path]
        elif patch.is_new_file:
            content = ''
        else:
            logger.warning(f"{file_path}: {FILE_NOT_FOUND}")
            results.append(FileApplyResult(file_path, ApplyStatus.FAILED, reason=FILE_NOT_FOUND,
                                           hunk_headers_corrected=corrected))
            continue

        try:
            match = apply_patch_to_content(content, patch, options.fuzz)
        except PatchApplicationError as e:
            logger.warning(f"{file_path}: {e.message}")
            logger.debug(f"Patch rejected: {e.to_dict()}")
            results.append(FileApplyResult(file_path, ApplyStatus.FAILED, reason=e.message,
                                           hunk_headers_corrected=corrected))
            continue
        except Exception as e:
            logger.error(f"{file_path}: unexpected error while applying patch: {e}")
            results.append(FileApplyResult(file_path, ApplyStatus.FAILED, reason=str(e),
                                           hunk_headers_corrected=corrected))
            continue

        if not match.success:
            logger.warning(f"{file_path}: {PATCH_NOT_APPLIED} "
                           f"(tried {', '.join(match.attempted_strategies)})")
            results.append(FileApplyResult(
                file_path, ApplyStatus.FAILED,
                reason=PATCH_NOT_APPLIED,
                hunk_headers_corrected=corrected,
                attempted_strategies=match.attempted_strategies,
            ))
            continue

        logger.info(f"{file_path}: applied with '{match.strategy_name}' strategy")
        working[file_path] = match.patched_text
        results.append(FileApplyResult(
            file_path, ApplyStatus.APPLIED,
            strategy_name=match.strategy_name,
            patched_text=match.patched_text,
            hunk_headers_corrected=corrected,
            attempted_strategies=match.attempted_strategies,
        ))

    applied = sum(1 for r in results if r.applied)
    logger.info(f"Applied patches to {applied}/{len(results)} file(s)")
    return results


def describe_patch(patch_text: str, options: Optional[ApplyOptions] = None,
                   known_files=None) -> List[FileInfo]:
    """
    Summarize what a diff would change, one entry per distinct file.

    Args:
        patch_text: The unified diff
        options: Apply options; only auto_correct_hunk_headers is used
        known_files: Paths that exist; when None, existence is left unknown

    Returns:
        FileInfo entries in order of first appearance
    """
    options = options or ApplyOptions.from_env()
    patches, report = prepare_patches(patch_text, options)
    corrected_files = report.files_corrected()
    known = set(known_files) if known_files is not None else None

    infos: Dict[str, FileInfo] = {}
    for patch in patches:
        file_path = patch.file_path or UNKNOWN_FILE
        info = infos.get(file_path)
        if info is None:
            info = FileInfo(
                file_path=file_path,
                exists=None if known is None else file_path in known,
                hunk_headers_corrected=file_path in corrected_files,
            )
            infos[file_path] = info
        info.hunks += len(patch.hunks)
        info.additions += patch.additions
        info.deletions += patch.deletions

    return list(infos.values())
