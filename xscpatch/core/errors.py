"""Exceptions raised by the patch engine and file helpers.

Script parsing never raises these: malformed script lines are skipped and
reported as diagnostics. Only file access problems and the buffer length
invariant are fatal.
"""

from typing import Optional


class XscPatchError(Exception):
    """Base class for all xscpatch errors."""


class TargetFileError(XscPatchError):
    """Raised when a target file is missing, not a regular file, or unreadable.

    Attributes:
        message: Description of the failure
        path: The offending path (optional)
    """

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        """Initialize TargetFileError exception.

        Args:
            message: Error message describing the failure
            path: The path that could not be read (optional)
        """
        super().__init__(message)
        self.path = path


class BufferLengthError(XscPatchError):
    """Raised when the buffer length changed while rules were applied.

    Rules always replace a sequence with one of identical length, so this
    indicates a logic fault or a corrupted buffer. The result must never be
    persisted.

    Attributes:
        message: Description of the failure
        expected: Buffer length before patching
        actual: Buffer length after patching
    """

    def __init__(self, message: str, expected: int, actual: int) -> None:
        """Initialize BufferLengthError exception.

        Args:
            message: Error message describing the failure
            expected: Length before patching
            actual: Length after patching
        """
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class PatchWriteError(XscPatchError):
    """Raised when the patched bytes cannot be written back to the target.

    The target keeps its pre-patch contents; the backup copy remains the
    recovery path.

    Attributes:
        message: Description of the failure
        path: The target path (optional)
    """

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.path = path
