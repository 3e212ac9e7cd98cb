"""
Structural validation of parsed patches.
"""

from ..core.exceptions import MalformedPatchError
from ..parsing.patch_model import HunkLine, LineType, ParsedPatch


def validate_patch(patch: ParsedPatch) -> None:
    """
    Reject a patch that no matching strategy could ever apply.

    Wrong header counts are not an error here; the header correction pass
    and the greedy strategies repair those.

    Args:
        patch: The patch to check

    Raises:
        TypeError: If patch is None
        MalformedPatchError: If the patch has no hunks, an empty hunk,
            a negative position or a line with an unknown tag
    """
    if patch is None:
        raise TypeError("patch must be a ParsedPatch, not None")

    file_path = patch.file_path
    if not patch.hunks:
        raise MalformedPatchError("Malformed patch: no hunks found", {'file_path': file_path})

    for index, hunk in enumerate(patch.hunks, 1):
        details = {'file_path': file_path, 'hunk_index': index}
        if not hunk.lines:
            raise MalformedPatchError(f"Malformed patch: hunk {index} has no lines", details)
        if hunk.old_start < 0 or hunk.new_start < 0:
            raise MalformedPatchError(f"Malformed patch: hunk {index} has a negative start line", details)
        for line in hunk.lines:
            if not isinstance(line, HunkLine) or not isinstance(line.line_type, LineType):
                raise MalformedPatchError(f"Malformed patch: hunk {index} has an untagged line {line!r}", details)
