"""Shared types for guarded filesystem operations.

These types are passed between the authorizer, the file operations,
the batch executor and the tool layer.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any

DEFAULT_MAX_FILE_SIZE = 100 * 1024 * 1024  # 100MB
DEFAULT_CONFIRMATION_TIMEOUT = 120.0
DEFAULT_RESTRICTED_EXTENSIONS = (".exe", ".bat", ".cmd", ".com", ".scr")


@dataclass(frozen=True)
class SecurityPolicy:
    """Process-wide security configuration.

    Built once at process entry and handed to every component that needs it.
    Frozen so concurrent readers never observe a change; use with_overrides()
    to derive a variant (mostly useful in tests).

    Attributes:
        allowed_directories: Absolute directory roots; a path is authorized
            iff it equals or descends from one of them
        enable_path_traversal_protection: Enforce the allow-list check
        enable_symlink_validation: Re-check symlink targets against the allow-list
        allow_force_delete: Master switch for force deletes
        force_delete_requires_confirmation: Route force deletes through the guard
        restricted_extensions: Dot-prefixed lower-case extensions that are never
            authorized; executables and scripts by default, () disables the check
        max_file_size: Reject existing files larger than this many bytes (None disables)
        confirmation_timeout: Seconds to wait for a confirmation response
    """
    allowed_directories: tuple[str, ...] = ()
    enable_path_traversal_protection: bool = True
    enable_symlink_validation: bool = True
    allow_force_delete: bool = True
    force_delete_requires_confirmation: bool = True
    restricted_extensions: tuple[str, ...] = DEFAULT_RESTRICTED_EXTENSIONS
    max_file_size: int | None = DEFAULT_MAX_FILE_SIZE
    confirmation_timeout: float = DEFAULT_CONFIRMATION_TIMEOUT

    def with_overrides(self, **changes: Any) -> "SecurityPolicy":
        """Return a copy of the policy with some fields replaced."""
        if "allowed_directories" in changes:
            changes["allowed_directories"] = tuple(changes["allowed_directories"])
        if "restricted_extensions" in changes:
            changes["restricted_extensions"] = tuple(changes["restricted_extensions"])
        return replace(self, **changes)


@dataclass
class OperationResult:
    """Outcome of a single-file operation."""
    success: bool
    message: str
    details: dict[str, Any] | None = None


@dataclass
class BatchOperationResult:
    """Aggregated outcome of a batch operation.

    Exactly one entry is recorded per input item, either in results or in
    errors, so total_count always equals success_count + error_count.
    """
    results: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.results)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def total_count(self) -> int:
        return self.success_count + self.error_count

    def add_success(self, message: str) -> None:
        self.results.append(message)

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary representation."""
        return {
            "results": list(self.results),
            "errors": list(self.errors),
            "totalCount": self.total_count,
            "successCount": self.success_count,
            "errorCount": self.error_count,
        }


@dataclass
class FileInfo:
    """Descriptive snapshot of a path, recomputed on every query."""
    path: str
    size: int
    is_directory: bool
    is_file: bool
    created_at: datetime
    modified_at: datetime
    accessed_at: datetime
    permissions: str
    extension: str | None = None
    basename: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "path": self.path,
            "size": self.size,
            "isDirectory": self.is_directory,
            "isFile": self.is_file,
            "createdAt": self.created_at.isoformat(),
            "modifiedAt": self.modified_at.isoformat(),
            "accessedAt": self.accessed_at.isoformat(),
            "permissions": self.permissions,
            "extension": self.extension,
            "basename": self.basename,
        }


@dataclass
class DirectoryEntry:
    """A single entry of a directory listing."""
    name: str
    is_directory: bool
    size: int | None = None
    modified_at: datetime | None = None


class ConfirmationAction(Enum):
    """How the other side of a confirmation round trip answered."""
    ACCEPT = "accept"
    DECLINE = "decline"
    CANCEL = "cancel"


@dataclass
class ConfirmationRequest:
    """An out-of-band request for a human to confirm a destructive action.

    Attributes:
        message: Text presented to the human
        affected_paths: Paths the action will touch
        requested_schema: JSON schema of the form to fill in
    """
    message: str
    affected_paths: list[str]
    requested_schema: dict[str, Any]

    @property
    def required_fields(self) -> list[str]:
        return list(self.requested_schema.get("required", []))


@dataclass
class ConfirmationResponse:
    """The structured answer to a ConfirmationRequest."""
    action: ConfirmationAction
    content: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ConfirmationResponse":
        """Build a response from a wire payload.

        Raises:
            ValueError: If the action is missing or unknown
        """
        action = ConfirmationAction(data.get("action"))
        content = data.get("content") or {}
        if not isinstance(content, dict):
            raise ValueError("confirmation content must be an object")
        return cls(action=action, content=content)


@dataclass
class ToolResponse:
    """Envelope returned for every tool call."""
    text: str
    is_error: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "is_error": self.is_error}
