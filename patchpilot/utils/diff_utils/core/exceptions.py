"""
Exceptions raised by the patch engine.

Domain failures (a hunk that matches nowhere) are not exceptions: strategies
report them through an unsuccessful MatchResult. These exceptions cover
inputs that no strategy could ever use.
"""

class PatchApplicationError(Exception):
    """
    Exception raised when a patch cannot be applied at all.

    Attributes:
        message -- explanation of the error
        details -- context such as the file path and hunk index
    """

    def __init__(self, message, details=None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self):
        return {'error': type(self).__name__, 'message': self.message, **self.details}


class MalformedPatchError(PatchApplicationError):
    """
    Raised before any matching strategy runs when a patch is structurally
    unusable: no hunks, an empty hunk, a negative position or a line
    without a known tag.
    """
