"""Batch execution with per-item isolation.

A batch never aborts because one item failed: each item's exception is
captured into the result's `errors` list and the next item runs. Items are
processed one after another.
"""

import os
import stat
from typing import Awaitable, Callable, Iterable

import aiofiles.os

from ..exceptions import ErrorKind, FileSystemError
from ..logging import get_logger
from ..types import BatchOperationResult
from . import async_os
from .file_ops import AtomicFileOps
from .sensitivity import is_read_only_mode, is_sensitive_path

logger = get_logger(__name__)

ItemOperation = Callable[[str], Awaitable[str]]

# how many sensitive names to quote when a whole batch is refused
MAX_LISTED_SENSITIVE = 5


def describe_item_error(item: str, error: BaseException) -> str:
    """Error text recorded for a failed item."""
    if isinstance(error, FileSystemError):
        return error.message
    return f"{item}: {error}"


class BatchExecutor:
    """Runs move, copy and delete over many paths and aggregates the outcome."""

    def __init__(self, ops: AtomicFileOps):
        self.ops = ops
        self.authorizer = ops.authorizer
        self.guard = ops.guard

    async def run(self, items: Iterable[str], operation: ItemOperation) -> BatchOperationResult:
        """Apply `operation` to every item, collecting successes and failures.

        Args:
            items: Input paths
            operation: Coroutine function returning the success message for one item

        Returns:
            One result or one error per input item
        """
        result = BatchOperationResult()
        for item in items:
            try:
                result.add_success(await operation(item))
            except Exception as e:
                logger.debug("Batch item failed: %s (%s)", item, e)
                result.add_error(describe_item_error(item, e))
        return result

    async def _prepare_destination_dir(self, destination: str, create_dirs: bool) -> str:
        target = await self.authorizer.authorize(destination)

        if await aiofiles.os.path.exists(target):
            if not await aiofiles.os.path.isdir(target):
                raise FileSystemError(
                    ErrorKind.INVALID_OPERATION,
                    f"Destination is not a directory: {target}",
                    {"path": target},
                )
            return target
        if not create_dirs:
            raise FileSystemError(
                ErrorKind.FILE_NOT_FOUND,
                f"Destination directory not found: {target}",
                {"path": target},
            )
        try:
            await aiofiles.os.makedirs(target, exist_ok=True)
        except OSError as e:
            raise FileSystemError(
                ErrorKind.INVALID_OPERATION,
                f"Cannot create destination directory: {target}",
                {"path": target, "original_error": e},
            ) from e
        return target

    async def batch_move(
        self,
        sources: list[str],
        destination: str,
        overwrite: bool = False,
        create_dirs: bool = True,
    ) -> BatchOperationResult:
        """Move every source into the destination directory."""
        target_dir = await self._prepare_destination_dir(destination, create_dirs)

        async def move_one(source: str) -> str:
            src = await self.authorizer.authorize(source, follow_symlinks=False)
            dst = os.path.join(target_dir, os.path.basename(src))
            await self.ops.move(src, dst, overwrite=overwrite)
            return f"{src} -> {dst}"

        return await self.run(sources, move_one)

    async def batch_copy(
        self,
        sources: list[str],
        destination: str,
        overwrite: bool = False,
        create_dirs: bool = True,
    ) -> BatchOperationResult:
        """Copy every source into the destination directory."""
        target_dir = await self._prepare_destination_dir(destination, create_dirs)

        async def copy_one(source: str) -> str:
            src = await self.authorizer.authorize(source, follow_symlinks=False)
            dst = os.path.join(target_dir, os.path.basename(src))
            await self.ops.copy(src, dst, overwrite=overwrite)
            return f"{src} -> {dst}"

        return await self.run(sources, copy_one)

    async def batch_delete(self, paths: list[str], force: bool = False) -> BatchOperationResult:
        """Delete files and empty directories.

        Without force, the whole batch is refused up front if any item is
        sensitive. With force, the guard is consulted once for the batch.

        Raises:
            FileSystemError: PERMISSION_DENIED for the up-front refusals
        """
        if force:
            await self.guard.ensure_force_allowed(
                f"Force delete {len(paths)} path(s)", list(paths)
            )
        else:
            sensitive = await self._find_sensitive(paths)
            if sensitive:
                listed = ", ".join(sensitive[:MAX_LISTED_SENSITIVE])
                more = "..." if len(sensitive) > MAX_LISTED_SENSITIVE else ""
                raise FileSystemError(
                    ErrorKind.PERMISSION_DENIED,
                    f"Batch delete blocked: {len(sensitive)} sensitive file(s) detected.\n"
                    f"Sensitive files: {listed}{more}\n"
                    "⚠️  Set force=true to delete them anyway, and proceed with care",
                    {"sensitive_paths": sensitive},
                )

        suffix = " (force)" if force else ""

        async def delete_one(path: str) -> str:
            target = await self.authorizer.authorize(path, follow_symlinks=False)
            return await self._delete_entry(target, force, suffix)

        return await self.run(paths, delete_one)

    async def _find_sensitive(self, paths: list[str]) -> list[str]:
        sensitive = []
        for path in paths:
            try:
                target = await self.authorizer.authorize(path, follow_symlinks=False)
            except FileSystemError:
                # reported per item later
                continue
            if is_sensitive_path(target):
                sensitive.append(path)
        return sensitive

    @staticmethod
    async def _delete_entry(target: str, force: bool, suffix: str) -> str:
        if not await async_os.lexists(target):
            raise FileSystemError(
                ErrorKind.FILE_NOT_FOUND, f"File not found: {target}", {"path": target}
            )

        st = await async_os.lstat(target)
        sensitive = is_sensitive_path(target)
        read_only = is_read_only_mode(st.st_mode)
        if not force and sensitive:
            raise FileSystemError(
                ErrorKind.PERMISSION_DENIED, f"Sensitive file delete blocked: {target}"
            )
        if not force and read_only:
            raise FileSystemError(
                ErrorKind.PERMISSION_DENIED, f"Read-only file delete blocked: {target}"
            )
        if force and (sensitive or read_only):
            logger.warning("Force deleting file: %s", target)

        if stat.S_ISDIR(st.st_mode):
            # empty directories only; the OS error text is surfaced otherwise
            await aiofiles.os.rmdir(target)
            return f"deleted directory: {target}{suffix}"

        await aiofiles.os.unlink(target)
        return f"deleted file: {target}{suffix}"
