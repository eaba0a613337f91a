"""Guarded FS - filesystem tools behind a directory allow-list.

This package exposes move/copy/delete/link/permission tools whose every
path is authorized against a fixed set of allowed directories, with a
confirmation gate in front of destructive operations.
"""

__version__ = "0.1.0"

from .core import (
    AtomicFileOps,
    BatchExecutor,
    CallbackConfirmationProvider,
    ConfirmationProvider,
    FailClosedConfirmationProvider,
    PathAuthorizer,
    SensitiveOperationGuard,
)
from .dispatcher import ToolDispatcher
from .exceptions import ErrorKind, FileSystemError
from .types import (
    BatchOperationResult,
    ConfirmationAction,
    ConfirmationRequest,
    ConfirmationResponse,
    DirectoryEntry,
    FileInfo,
    OperationResult,
    SecurityPolicy,
    ToolResponse,
)

__all__ = [
    "__version__",
    # components
    "AtomicFileOps",
    "BatchExecutor",
    "PathAuthorizer",
    "SensitiveOperationGuard",
    "ToolDispatcher",
    # confirmation
    "CallbackConfirmationProvider",
    "ConfirmationProvider",
    "FailClosedConfirmationProvider",
    # types
    "BatchOperationResult",
    "ConfirmationAction",
    "ConfirmationRequest",
    "ConfirmationResponse",
    "DirectoryEntry",
    "FileInfo",
    "OperationResult",
    "SecurityPolicy",
    "ToolResponse",
    # exceptions
    "ErrorKind",
    "FileSystemError",
]
