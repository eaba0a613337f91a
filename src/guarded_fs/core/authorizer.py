"""Path authorization against a directory allow-list.

Every filesystem tool resolves its path arguments through PathAuthorizer
before touching the disk. The authorizer:
- expands ``~`` and makes the path absolute and normalized
- rejects null bytes (and Windows-reserved characters on Windows)
- checks the path against the allowed directories
- re-checks symbolic link targets
- for paths that don't exist yet, checks the nearest existing parent

Example:
    policy = SecurityPolicy(allowed_directories=("/home/user/project",))
    authorizer = PathAuthorizer(policy)
    await authorizer.authorize("/home/user/project/src/main.py")  # OK
    await authorizer.authorize("/home/user/project/../../etc/passwd")  # raises
"""

import os
import re
import sys

import aiofiles.os

from ..exceptions import ErrorKind, FileSystemError
from ..logging import get_logger
from ..types import SecurityPolicy
from . import async_os

logger = get_logger(__name__)

IS_WINDOWS = sys.platform == "win32"

_DRIVE_PREFIX = re.compile(r"^[A-Za-z]:")
_WINDOWS_ILLEGAL = re.compile(r'[<>:"|?*]')


def expand_home(path: str) -> str:
    """Expand a leading ``~`` (alone or followed by a separator)."""
    if path == "~" or path.startswith("~/") or path.startswith("~\\"):
        return os.path.expanduser("~") + path[1:]
    return path


def normalize_path(path: str) -> str:
    """Make a path absolute and normalized, with host separators."""
    if not path:
        return ""
    if IS_WINDOWS:
        path = path.replace("/", "\\")
    else:
        path = path.replace("\\", "/")
    return os.path.normpath(os.path.abspath(path))


def contains_illegal_characters(path: str) -> bool:
    """Check for null bytes, and Windows-reserved characters on Windows."""
    if "\0" in path:
        return True
    if IS_WINDOWS:
        return bool(_WINDOWS_ILLEGAL.search(_DRIVE_PREFIX.sub("", path, count=1)))
    return False


def is_within_directories(path: str, directories: tuple[str, ...] | list[str]) -> bool:
    """Check whether a normalized path equals or descends from one of the directories.

    The trailing-separator comparison keeps ``/allowed-evil`` from matching
    ``/allowed``. An empty directory list never matches.
    """
    if not path or not directories:
        return False

    for directory in directories:
        if not directory:
            continue
        with_sep = directory if directory.endswith(os.sep) else directory + os.sep
        if path == directory or path.startswith(with_sep):
            return True
    return False


class PathAuthorizer:
    """Authorizes user-supplied paths against a SecurityPolicy.

    Allowed directories are normalized once at construction. Both the
    literal form and the symlink-resolved form of each directory are kept,
    so an allowed ``/tmp/work`` still matches when ``/tmp`` is itself a link.
    """

    def __init__(self, policy: SecurityPolicy):
        self.policy = policy
        roots: list[str] = []
        for directory in policy.allowed_directories:
            if not directory:
                continue
            normalized = normalize_path(expand_home(directory))
            for candidate in (normalized, os.path.realpath(normalized)):
                if candidate not in roots:
                    roots.append(candidate)
        self.allowed_roots: tuple[str, ...] = tuple(roots)


    def is_allowed(self, path: str) -> bool:
        """Check a normalized path against the allow-list without raising."""
        return is_within_directories(path, self.allowed_roots)

    async def authorize(self, requested_path: str, follow_symlinks: bool = True) -> str:
        """Authorize a path and return its absolute form.

        Args:
            requested_path: The path as supplied by the caller
            follow_symlinks: When the path is a symlink, return its resolved
                target (True) or the link path itself (False). The target is
                validated either way.

        Returns:
            Absolute, normalized path (resolved target for followed symlinks)

        Raises:
            FileSystemError: VALIDATION_ERROR, PATH_NOT_ALLOWED,
                SYMLINK_TARGET_INVALID or OPERATION_FAILED
        """
        if not requested_path:
            raise FileSystemError(ErrorKind.VALIDATION_ERROR, "Path must not be empty")

        normalized = normalize_path(expand_home(requested_path))

        if contains_illegal_characters(normalized):
            raise FileSystemError(
                ErrorKind.VALIDATION_ERROR,
                f"Path contains illegal characters: {normalized!r}",
                {"path": requested_path},
            )

        if self.policy.enable_path_traversal_protection and not self.is_allowed(normalized):
            logger.info("Denied access outside allowed directories: %s", normalized)
            raise FileSystemError(
                ErrorKind.PATH_NOT_ALLOWED,
                f"Access denied - path outside allowed directories: {normalized}",
                {
                    "requested_path": requested_path,
                    "normalized_path": normalized,
                    "allowed_directories": list(self.policy.allowed_directories),
                },
            )

        self._check_extension(normalized)

        try:
            if await aiofiles.os.path.islink(normalized):
                return await self._check_symlink(normalized, follow_symlinks)

            if await async_os.lexists(normalized):
                await self._check_linked_ancestors(normalized)
                await self._check_size(normalized)
                return normalized

            return await self._check_missing(normalized)
        except FileSystemError:
            raise
        except OSError as e:
            raise FileSystemError(
                ErrorKind.OPERATION_FAILED,
                f"Path validation failed: {e}",
                {"path": normalized, "original_error": e},
            ) from e

    async def authorize_all(self, paths: list[str]) -> list[str]:
        """Authorize every path in order, failing on the first rejection."""
        authorized = []
        for path in paths:
            authorized.append(await self.authorize(path))
        return authorized

    async def is_authorized(self, requested_path: str) -> bool:
        """Check whether a path would be authorized without raising."""
        try:
            await self.authorize(requested_path)
            return True
        except FileSystemError:
            return False

    def _check_extension(self, path: str) -> None:
        restricted = self.policy.restricted_extensions
        if not restricted:
            return
        extension = os.path.splitext(path)[1].lower()
        if extension and extension in restricted:
            raise FileSystemError(
                ErrorKind.VALIDATION_ERROR,
                f"Access to this file type is not allowed: {path}",
                {"path": path, "extension": extension},
            )

    async def _check_size(self, path: str) -> None:
        limit = self.policy.max_file_size
        if not limit or not await aiofiles.os.path.isfile(path):
            return
        size = await aiofiles.os.path.getsize(path)
        if size > limit:
            raise FileSystemError(
                ErrorKind.VALIDATION_ERROR,
                f"File size exceeds limit: {size} > {limit}",
                {"path": path, "size": size, "max_file_size": limit},
            )

    async def _check_symlink(self, link_path: str, follow_symlinks: bool) -> str:
        if not self.policy.enable_symlink_validation:
            return link_path

        try:
            # a followed link must resolve; a link handled as itself may dangle
            real_path = await async_os.realpath(link_path, strict=follow_symlinks)
        except OSError as e:
            raise FileSystemError(
                ErrorKind.SYMLINK_TARGET_INVALID,
                f"Cannot resolve symbolic link: {e}",
                {"link_path": link_path, "original_error": e},
            ) from e

        if self.policy.enable_path_traversal_protection and not self.is_allowed(real_path):
            logger.info("Denied symlink escaping allowed directories: %s -> %s", link_path, real_path)
            raise FileSystemError(
                ErrorKind.SYMLINK_TARGET_INVALID,
                f"Symbolic link target is outside allowed directories: {real_path}",
                {"link_path": link_path, "real_path": real_path},
            )

        return real_path if follow_symlinks else link_path

    async def _check_linked_ancestors(self, path: str) -> None:
        # /allowed/linked-dir/file where linked-dir points outside
        if not (self.policy.enable_symlink_validation and self.policy.enable_path_traversal_protection):
            return
        real_path = await async_os.realpath(path)
        if real_path != path and not self.is_allowed(real_path):
            raise FileSystemError(
                ErrorKind.SYMLINK_TARGET_INVALID,
                f"Path resolves outside allowed directories through a symbolic link: {real_path}",
                {"path": path, "real_path": real_path},
            )

    async def _check_missing(self, path: str) -> str:
        if not self.policy.enable_path_traversal_protection:
            return path

        current = os.path.dirname(path)
        while current and current != os.path.dirname(current):
            if await aiofiles.os.path.exists(current):
                real_parent = await async_os.realpath(current)
                if not self.is_allowed(real_parent):
                    logger.info("Denied path whose parent escapes allowed directories: %s", path)
                    raise FileSystemError(
                        ErrorKind.PATH_NOT_ALLOWED,
                        f"Parent directory is outside allowed directories: {real_parent}",
                        {"path": path, "parent_dir": real_parent},
                    )
                return path
            current = os.path.dirname(current)

        if not self.is_allowed(path):
            raise FileSystemError(
                ErrorKind.PATH_NOT_ALLOWED,
                f"Path outside allowed directories: {path}",
                {"path": path},
            )
        return path
