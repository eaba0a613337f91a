"""Core filesystem components.

- PathAuthorizer: resolves and authorizes paths against the allow-list
- AtomicFileOps: single-file primitives built on the authorizer
- BatchExecutor: per-item isolated batch operations
- SensitiveOperationGuard: confirmation gate for destructive operations
"""

from .authorizer import PathAuthorizer
from .batch import BatchExecutor
from .file_ops import AtomicFileOps
from .guard import (
    CallbackConfirmationProvider,
    ConfirmationProvider,
    FailClosedConfirmationProvider,
    SensitiveOperationGuard,
)

__all__ = [
    "AtomicFileOps",
    "BatchExecutor",
    "CallbackConfirmationProvider",
    "ConfirmationProvider",
    "FailClosedConfirmationProvider",
    "PathAuthorizer",
    "SensitiveOperationGuard",
]
