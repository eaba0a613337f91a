"""Exception model for guarded filesystem operations.

Every error that crosses a component boundary is a FileSystemError tagged
with one ErrorKind. Lower-level OSErrors are caught at the operation
boundary and re-wrapped with wrap_os_error().
"""

from enum import Enum
from typing import Any


class ErrorKind(Enum):
    """Closed set of failure categories."""
    PATH_NOT_ALLOWED = "PATH_NOT_ALLOWED"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    FILE_ALREADY_EXISTS = "FILE_ALREADY_EXISTS"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    SYMLINK_TARGET_INVALID = "SYMLINK_TARGET_INVALID"
    DIRECTORY_NOT_EMPTY = "DIRECTORY_NOT_EMPTY"
    INVALID_OPERATION = "INVALID_OPERATION"
    OPERATION_FAILED = "OPERATION_FAILED"
    VALIDATION_ERROR = "VALIDATION_ERROR"


class FileSystemError(Exception):
    """A tagged filesystem error.

    Attributes:
        kind: The error category
        message: Human-readable description
        details: Optional structured context (offending path, original error)
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        self.kind = kind
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"FileSystemError({self.kind.value}, {self.message!r})"

    @property
    def original_error(self) -> BaseException | None:
        """The underlying exception this error wraps, if any."""
        return self.details.get("original_error")


def wrap_os_error(action: str, error: BaseException, **details: Any) -> FileSystemError:
    """Re-wrap an unexpected exception as OPERATION_FAILED.

    Args:
        action: Short description of what was being attempted
        error: The underlying exception
        **details: Extra context to keep alongside the original error

    Returns:
        A FileSystemError preserving the original error in its details
    """
    if isinstance(error, FileSystemError):
        return error
    details["original_error"] = error
    return FileSystemError(
        ErrorKind.OPERATION_FAILED,
        f"{action} failed: {error}",
        details,
    )
