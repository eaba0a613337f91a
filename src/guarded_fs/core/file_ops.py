"""Single-file filesystem primitives.

Every operation follows the same order:
1. authorize every path argument through PathAuthorizer
2. check existence and type explicitly
3. mutate

Disk access goes through aiofiles so concurrent tool calls are not held
up by each other. Unexpected OSErrors are re-wrapped as OPERATION_FAILED
at the operation boundary.
"""

import errno
import os
import re
import secrets
import stat
import time
from datetime import datetime
from typing import Any, Awaitable, Callable

import aiofiles
import aiofiles.os

from ..exceptions import ErrorKind, FileSystemError, wrap_os_error
from ..logging import get_logger
from ..types import DirectoryEntry, FileInfo, OperationResult
from . import async_os
from .authorizer import IS_WINDOWS, PathAuthorizer
from .guard import SensitiveOperationGuard
from .sensitivity import is_read_only_mode, is_sensitive_path

logger = get_logger(__name__)

MODE_PATTERN = re.compile(r"^[0-7]{3}$")

WINDOWS_SYMLINK_HELP = (
    "Creating symbolic links on Windows requires extra privileges. Try one of:\n"
    "1. Run the server as Administrator\n"
    "2. Enable Developer Mode (Windows 10/11)\n"
    "3. Create the link manually with the mklink command"
)


def generate_temp_path(path: str) -> str:
    """Temp file name next to `path` with a timestamp and random suffix."""
    return f"{path}.{int(time.time() * 1000)}.{secrets.token_hex(6)}.tmp"


def _not_found(message: str, path: str) -> FileSystemError:
    return FileSystemError(ErrorKind.FILE_NOT_FOUND, f"{message}: {path}", {"path": path})


async def _ensure_exists(path: str, message: str = "File not found") -> None:
    if not await async_os.lexists(path):
        raise _not_found(message, path)


async def _ensure_destination_free(path: str, overwrite: bool) -> None:
    if not overwrite and await async_os.lexists(path):
        raise FileSystemError(
            ErrorKind.FILE_ALREADY_EXISTS,
            f"Destination already exists and overwrite is disabled: {path}",
            {"path": path},
        )


async def _ensure_distinct(source: str, destination: str) -> None:
    # overwrite removes the destination first, which would take the source with it
    if await async_os.same_entry(source, destination):
        raise FileSystemError(
            ErrorKind.INVALID_OPERATION,
            f"Source and destination are the same file: {destination}",
            {"source": source, "destination": destination},
        )


async def _make_parent_dirs(path: str, create_dirs: bool) -> None:
    if create_dirs:
        await aiofiles.os.makedirs(os.path.dirname(path), exist_ok=True)


async def _is_real_directory(path: str) -> bool:
    return await aiofiles.os.path.isdir(path) and not await aiofiles.os.path.islink(path)


async def _remove_existing(path: str) -> None:
    """Remove whatever currently occupies `path` (file, link or empty directory)."""
    if not await async_os.lexists(path):
        return
    if await _is_real_directory(path):
        try:
            await aiofiles.os.rmdir(path)
        except OSError as e:
            if e.errno in (errno.ENOTEMPTY, errno.EEXIST):
                raise FileSystemError(
                    ErrorKind.DIRECTORY_NOT_EMPTY,
                    f"Cannot overwrite non-empty directory: {path}",
                    {"path": path, "original_error": e},
                ) from e
            raise
    else:
        await aiofiles.os.unlink(path)


def _timestamp(value: float) -> datetime:
    return datetime.fromtimestamp(value)


def _created_time(st: os.stat_result) -> float:
    # st_birthtime is missing on most Linux filesystems
    return getattr(st, "st_birthtime", st.st_ctime)


class AtomicFileOps:
    """Authorized single-file operations.

    Example:
        ops = AtomicFileOps(PathAuthorizer(policy), guard)
        await ops.copy("/work/a.txt", "/work/backup/a.txt")
    """

    def __init__(self, authorizer: PathAuthorizer, guard: SensitiveOperationGuard | None = None):
        self.authorizer = authorizer
        self.guard = guard or SensitiveOperationGuard(authorizer.policy)

    @property
    def policy(self):
        return self.authorizer.policy

    async def _io(self, action: str, func: Callable[..., Awaitable[Any]], *args: Any, **details: Any) -> Any:
        try:
            return await func(*args)
        except FileSystemError:
            raise
        except OSError as e:
            logger.debug("%s failed: %s", action, e)
            raise wrap_os_error(action, e, **details) from e

    # -- move / copy / rename ------------------------------------------------

    async def move(
        self,
        source: str,
        destination: str,
        overwrite: bool = False,
        create_dirs: bool = True,
    ) -> OperationResult:
        """Move a file (or link) to a new location."""
        src = await self.authorizer.authorize(source, follow_symlinks=False)
        dst = await self.authorizer.authorize(destination, follow_symlinks=False)

        async def _move() -> None:
            await _ensure_exists(src, "Source file not found")
            await _ensure_distinct(src, dst)
            await _ensure_destination_free(dst, overwrite)
            await _make_parent_dirs(dst, create_dirs)
            if overwrite and await aiofiles.os.path.islink(dst):
                await aiofiles.os.unlink(dst)
            try:
                await aiofiles.os.replace(src, dst)
            except OSError as e:
                if e.errno != errno.EXDEV:
                    raise
                await async_os.move(src, dst)

        await self._io("File move", _move, source=source, destination=destination)
        return OperationResult(
            success=True,
            message=f"✅ File moved:\nSource: {src}\nDestination: {dst}",
            details={"source": src, "destination": dst},
        )

    async def copy(
        self,
        source: str,
        destination: str,
        overwrite: bool = False,
        create_dirs: bool = True,
    ) -> OperationResult:
        """Copy a file byte-for-byte, leaving the source untouched.

        The destination names the new file itself; an existing directory
        there is refused even with overwrite.
        """
        src = await self.authorizer.authorize(source)
        dst = await self.authorizer.authorize(destination, follow_symlinks=False)

        async def _copy() -> None:
            await _ensure_exists(src, "Source file not found")
            if await aiofiles.os.path.isdir(src):
                raise FileSystemError(
                    ErrorKind.INVALID_OPERATION,
                    f"Source is a directory, only files can be copied: {src}",
                    {"path": src},
                )
            await _ensure_distinct(src, dst)
            if await _is_real_directory(dst):
                raise FileSystemError(
                    ErrorKind.INVALID_OPERATION,
                    f"Destination is a directory, give the full file path: {dst}",
                    {"path": dst},
                )
            await _ensure_destination_free(dst, overwrite)
            await _make_parent_dirs(dst, create_dirs)
            if overwrite and await aiofiles.os.path.islink(dst):
                await aiofiles.os.unlink(dst)
            await async_os.copy2(src, dst)

        await self._io("File copy", _copy, source=source, destination=destination)
        return OperationResult(
            success=True,
            message=f"✅ File copied:\nSource: {src}\nDestination: {dst}",
            details={"source": src, "destination": dst},
        )

    async def rename(
        self,
        old_path: str,
        new_path: str,
        overwrite: bool = False,
        create_dirs: bool = True,
    ) -> OperationResult:
        """Rename a file or directory; with overwrite, an existing target is removed first."""
        old = await self.authorizer.authorize(old_path, follow_symlinks=False)
        new = await self.authorizer.authorize(new_path, follow_symlinks=False)

        async def _rename() -> None:
            await _ensure_exists(old, "Original path not found")
            await _ensure_distinct(old, new)
            await _ensure_destination_free(new, overwrite)
            await _make_parent_dirs(new, create_dirs)
            if overwrite:
                await _remove_existing(new)
            await aiofiles.os.rename(old, new)

        await self._io("Rename", _rename, old_path=old_path, new_path=new_path)
        return OperationResult(
            success=True,
            message=f"✅ Renamed:\nOld path: {old}\nNew path: {new}",
            details={"old_path": old, "new_path": new},
        )

    # -- delete --------------------------------------------------------------

    async def delete(self, path: str, force: bool = False) -> OperationResult:
        """Delete a single file.

        Directories are refused here; sensitive and read-only files are
        refused unless `force` is set, and force itself must get past the
        SensitiveOperationGuard.
        """
        target = await self.authorizer.authorize(path, follow_symlinks=False)

        st = await self._io("File delete", self._lstat_existing, target, "File not found")
        if stat.S_ISDIR(st.st_mode):
            raise FileSystemError(
                ErrorKind.INVALID_OPERATION,
                f"Path is a directory, use batch-delete to remove directories: {target}",
                {"path": target},
            )

        if not force:
            if is_sensitive_path(target):
                raise FileSystemError(
                    ErrorKind.PERMISSION_DENIED,
                    f"Sensitive file detected, delete blocked. Set force=true to delete anyway: {target}\n"
                    "⚠️  Warning: force-deleting sensitive files may break the system or lose data",
                    {"path": target, "reason": "sensitive"},
                )
            if is_read_only_mode(st.st_mode):
                raise FileSystemError(
                    ErrorKind.PERMISSION_DENIED,
                    f"Read-only file detected, delete blocked. Set force=true to delete anyway: {target}\n"
                    "⚠️  Warning: read-only files may hold important data",
                    {"path": target, "reason": "read_only"},
                )
        else:
            await self.guard.ensure_force_allowed(f"Force delete file: {target}", [target])
            logger.warning("Force deleting file: %s", target)

        await self._io("File delete", aiofiles.os.unlink, target, path=path)
        suffix = " (force)" if force else ""
        return OperationResult(
            success=True,
            message=f"✅ File deleted: {target}{suffix}",
            details={"path": target, "force": force},
        )

    @staticmethod
    async def _lstat_existing(path: str, message: str) -> os.stat_result:
        await _ensure_exists(path, message)
        return await async_os.lstat(path)

    # -- links ---------------------------------------------------------------

    async def create_hard_link(
        self,
        source: str,
        destination: str,
        overwrite: bool = False,
        create_dirs: bool = True,
    ) -> OperationResult:
        """Create a hard link to an existing file. Directories are always rejected."""
        src = await self.authorizer.authorize(source)
        dst = await self.authorizer.authorize(destination, follow_symlinks=False)

        async def _link() -> None:
            await _ensure_exists(src, "Source file not found")
            if await aiofiles.os.path.isdir(src):
                raise FileSystemError(
                    ErrorKind.INVALID_OPERATION,
                    f"Hard links cannot point to directories: {src}",
                    {"path": src},
                )
            await _ensure_distinct(src, dst)
            await _ensure_destination_free(dst, overwrite)
            await _make_parent_dirs(dst, create_dirs)
            if overwrite:
                await _remove_existing(dst)
            await aiofiles.os.link(src, dst)

        await self._io("Hard link", _link, source=source, destination=destination)
        return OperationResult(
            success=True,
            message=f"✅ Hard link created:\nSource: {src}\nHard link: {dst}",
            details={"source": src, "destination": dst},
        )

    async def create_symlink(
        self,
        target: str,
        link_path: str,
        overwrite: bool = False,
        create_dirs: bool = True,
    ) -> OperationResult:
        """Create a symbolic link. The target does not have to exist."""
        tgt = await self.authorizer.authorize(target, follow_symlinks=False)
        link = await self.authorizer.authorize(link_path, follow_symlinks=False)

        async def _symlink() -> bool:
            target_exists = await aiofiles.os.path.exists(tgt)
            await _ensure_distinct(tgt, link)
            await _ensure_destination_free(link, overwrite)
            await _make_parent_dirs(link, create_dirs)
            if overwrite:
                await _remove_existing(link)
            await self._create_symbolic_link(tgt, link)
            return target_exists

        target_exists = await self._io("Symbolic link", _symlink, target=target, link_path=link_path)
        status = "exists" if target_exists else "does not exist"
        return OperationResult(
            success=True,
            message=f"✅ Symbolic link created:\nTarget: {tgt} ({status})\nLink: {link}",
            details={"target": tgt, "link_path": link, "target_exists": target_exists},
        )

    @staticmethod
    async def _create_symbolic_link(target: str, link_path: str) -> None:
        if not IS_WINDOWS:
            await aiofiles.os.symlink(target, link_path)
            return

        is_dir = await aiofiles.os.path.isdir(target)
        try:
            relative = os.path.relpath(target, os.path.dirname(link_path))
            await aiofiles.os.symlink(relative, link_path, target_is_directory=is_dir)
            return
        except OSError as e:
            if not isinstance(e, PermissionError) and e.errno not in (errno.EPERM, errno.EACCES):
                raise
        try:
            await aiofiles.os.symlink(target, link_path, target_is_directory=is_dir)
        except OSError as e:
            if isinstance(e, PermissionError) or e.errno in (errno.EPERM, errno.EACCES):
                raise FileSystemError(
                    ErrorKind.PERMISSION_DENIED,
                    WINDOWS_SYMLINK_HELP,
                    {"target": target, "link_path": link_path, "original_error": e},
                ) from e
            raise

    async def read_symlink(self, link_path: str) -> str:
        """Return the target string stored in a symbolic link."""
        link = await self.authorizer.authorize(link_path, follow_symlinks=False)

        async def _readlink() -> str:
            await _ensure_exists(link, "Link not found")
            if not await aiofiles.os.path.islink(link):
                raise FileSystemError(
                    ErrorKind.INVALID_OPERATION,
                    f"Path is not a symbolic link: {link}",
                    {"path": link},
                )
            return await aiofiles.os.readlink(link)

        return await self._io("Read symbolic link", _readlink, link_path=link_path)

    # -- metadata ------------------------------------------------------------

    async def change_permissions(self, path: str, mode: str) -> OperationResult:
        """chmod a path with a 3-digit octal mode string such as "644"."""
        target = await self.authorizer.authorize(path)

        async def _chmod() -> int:
            await _ensure_exists(target, "File or directory not found")
            if not isinstance(mode, str) or not MODE_PATTERN.match(mode):
                raise FileSystemError(
                    ErrorKind.VALIDATION_ERROR,
                    f"Invalid permission mode '{mode}', use octal format such as '755' or '644'",
                    {"mode": mode},
                )
            numeric = int(mode, 8)
            await async_os.chmod(target, numeric)
            return numeric

        numeric = await self._io("Change permissions", _chmod, path=path, mode=mode)
        return OperationResult(
            success=True,
            message=f"✅ Permissions changed:\nPath: {target}\nNew mode: {mode} ({numeric:o})",
            details={"path": target, "mode": mode},
        )

    async def get_file_info(self, path: str) -> FileInfo:
        """Stat a path and describe it."""
        target = await self.authorizer.authorize(path)

        async def _info() -> FileInfo:
            if not await aiofiles.os.path.exists(target):
                raise _not_found("File or directory not found", target)
            st = await aiofiles.os.stat(target)
            is_file = stat.S_ISREG(st.st_mode)
            return FileInfo(
                path=target,
                size=st.st_size,
                is_directory=stat.S_ISDIR(st.st_mode),
                is_file=is_file,
                created_at=_timestamp(_created_time(st)),
                modified_at=_timestamp(st.st_mtime),
                accessed_at=_timestamp(st.st_atime),
                permissions=format(stat.S_IMODE(st.st_mode) & 0o777, "03o"),
                extension=(os.path.splitext(target)[1] or None) if is_file else None,
                basename=os.path.basename(target),
            )

        return await self._io("Get file info", _info, path=path)

    async def stat(self, path: str) -> FileInfo:
        """Alias of get_file_info()."""
        return await self.get_file_info(path)

    # -- directories ---------------------------------------------------------

    async def list_directory(
        self,
        path: str,
        show_hidden: bool = False,
        details: bool = False,
    ) -> list[DirectoryEntry]:
        """List a directory, optionally with hidden entries and size/mtime."""
        target = await self.authorizer.authorize(path)

        async def _list() -> list[DirectoryEntry]:
            if not await aiofiles.os.path.exists(target):
                raise _not_found("Directory not found", target)
            if not await aiofiles.os.path.isdir(target):
                raise FileSystemError(
                    ErrorKind.INVALID_OPERATION,
                    f"Path is not a directory: {target}",
                    {"path": target},
                )

            entries = []
            for name in await aiofiles.os.listdir(target):
                if not show_hidden and name.startswith("."):
                    continue
                entry_path = os.path.join(target, name)
                is_dir = await aiofiles.os.path.isdir(entry_path)
                item = DirectoryEntry(name=name, is_directory=is_dir)
                if details:
                    try:
                        st = await aiofiles.os.stat(entry_path)
                        item.size = None if is_dir else st.st_size
                        item.modified_at = _timestamp(st.st_mtime)
                    except OSError:
                        # dangling link or vanished entry: listed without details
                        pass
                entries.append(item)
            return sorted(entries, key=lambda e: e.name)

        return await self._io("List directory", _list, path=path)

    async def create_directory(self, path: str, recursive: bool = True) -> OperationResult:
        """Create a directory. An existing directory is reported, not an error."""
        target = await self.authorizer.authorize(path)

        async def _mkdir() -> bool:
            if await aiofiles.os.path.exists(target):
                if await aiofiles.os.path.isdir(target):
                    return False
                raise FileSystemError(
                    ErrorKind.FILE_ALREADY_EXISTS,
                    f"Path exists and is not a directory: {target}",
                    {"path": target},
                )
            if recursive:
                await aiofiles.os.makedirs(target, exist_ok=True)
            else:
                await aiofiles.os.mkdir(target)
            return True

        created = await self._io("Create directory", _mkdir, path=path)
        if not created:
            return OperationResult(
                success=True,
                message=f"Directory already exists: {target}",
                details={"path": target, "created": False},
            )
        return OperationResult(
            success=True,
            message=f"✅ Directory created: {target}",
            details={"path": target, "created": True},
        )

    # -- atomic write --------------------------------------------------------

    async def atomic_write(
        self,
        path: str,
        content: str | bytes,
        create_dirs: bool = True,
    ) -> OperationResult:
        """Write a file so readers never see partial content.

        Content goes to a temp file in the destination's directory which is
        then renamed over the destination. On any failure the temp file is
        removed and OPERATION_FAILED is raised.
        """
        target = await self.authorizer.authorize(path)
        data = content.encode("utf-8") if isinstance(content, str) else content

        async def _write() -> None:
            await _make_parent_dirs(target, create_dirs)
            temp_path = generate_temp_path(target)
            try:
                async with aiofiles.open(temp_path, "xb") as f:
                    await f.write(data)
                    await f.flush()
                    await async_os.fsync(f.fileno())
                await aiofiles.os.replace(temp_path, target)
            except BaseException as e:
                try:
                    await aiofiles.os.remove(temp_path)
                except FileNotFoundError:
                    pass
                except OSError as cleanup_error:
                    logger.error("Could not remove temp file %s: %s", temp_path, cleanup_error)
                if isinstance(e, Exception):
                    raise FileSystemError(
                        ErrorKind.OPERATION_FAILED,
                        f"Atomic write failed: {e}",
                        {"path": target, "temp_path": temp_path, "original_error": e},
                    ) from e
                raise

        await self._io("Atomic write", _write, path=path)
        return OperationResult(
            success=True,
            message=f"✅ Wrote {len(data)} bytes to {target}",
            details={"path": target, "size": len(data)},
        )
