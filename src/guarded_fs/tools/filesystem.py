"""Single-path filesystem tools.

Each tool translates its validated arguments into one AtomicFileOps call
and turns the outcome into a text report. Path authorization happens inside
AtomicFileOps, never here.
"""

from .base import BaseTool, ToolContext
from .schemas import (
    ChangePermissionsArgs,
    CopyFileArgs,
    CreateDirectoryArgs,
    CreateHardLinkArgs,
    CreateSymlinkArgs,
    DeleteFileArgs,
    FileInfoArgs,
    ListDirectoryArgs,
    MoveFileArgs,
    ReadSymlinkArgs,
    RenameArgs,
)
from ..formatting import format_directory_listing, format_file_info


class MoveFileTool(BaseTool):
    """Move a file to a new path."""

    name = "move-file"
    title = "Move file"
    description = "Move a file from a source path to a destination path, optionally overwriting and creating directories."
    args_model = MoveFileArgs

    async def execute(self, context: ToolContext, args: MoveFileArgs) -> str:
        result = await context.ops.move(
            args.source, args.destination, overwrite=args.overwrite, create_dirs=args.create_dirs
        )
        return result.message


class CopyFileTool(BaseTool):
    """Copy a file to a new path."""

    name = "copy-file"
    title = "Copy file"
    description = "Copy a file from a source path to a destination path, optionally overwriting and creating directories."
    args_model = CopyFileArgs

    async def execute(self, context: ToolContext, args: CopyFileArgs) -> str:
        result = await context.ops.copy(
            args.source, args.destination, overwrite=args.overwrite, create_dirs=args.create_dirs
        )
        return result.message


class DeleteFileTool(BaseTool):
    """Delete a single file, guarding sensitive and read-only files."""

    DESTRUCTIVE = True

    name = "delete-file"
    title = "Delete file"
    description = (
        "Delete a file. Sensitive (system, config, key, executable) and read-only files "
        "are refused unless force is set; force requires explicit confirmation."
    )
    args_model = DeleteFileArgs

    async def execute(self, context: ToolContext, args: DeleteFileArgs) -> str:
        result = await context.ops.delete(args.path, force=args.force)
        return result.message


class RenameTool(BaseTool):
    """Rename a file or directory."""

    name = "rename"
    title = "Rename file or directory"
    description = "Rename a file or directory; the new path may be in a different directory."
    args_model = RenameArgs

    async def execute(self, context: ToolContext, args: RenameArgs) -> str:
        result = await context.ops.rename(
            args.old_path, args.new_path, overwrite=args.overwrite, create_dirs=args.create_dirs
        )
        return result.message


class CreateHardLinkTool(BaseTool):
    """Create a hard link to an existing file."""

    name = "create-hard-link"
    title = "Create hard link"
    description = "Create a hard link to an existing file. Hard links to directories are not allowed."
    args_model = CreateHardLinkArgs

    async def execute(self, context: ToolContext, args: CreateHardLinkArgs) -> str:
        result = await context.ops.create_hard_link(
            args.source, args.destination, overwrite=args.overwrite, create_dirs=args.create_dirs
        )
        return result.message


class CreateSymlinkTool(BaseTool):
    """Create a symbolic link."""

    name = "create-symlink"
    title = "Create symbolic link"
    description = "Create a symbolic link; the target does not need to exist. Both paths must be inside allowed directories."
    args_model = CreateSymlinkArgs

    async def execute(self, context: ToolContext, args: CreateSymlinkArgs) -> str:
        result = await context.ops.create_symlink(
            args.target, args.link_path, overwrite=args.overwrite, create_dirs=args.create_dirs
        )
        return result.message


class ReadSymlinkTool(BaseTool):
    """Read the target stored in a symbolic link."""

    name = "read-symlink"
    title = "Read symbolic link"
    description = "Read the target path stored in a symbolic link."
    args_model = ReadSymlinkArgs

    async def execute(self, context: ToolContext, args: ReadSymlinkArgs) -> str:
        target = await context.ops.read_symlink(args.link_path)
        return f"🔗 Symbolic link:\nLink path: {args.link_path}\nTarget: {target}"


class ListDirectoryTool(BaseTool):
    """List contents of a directory."""

    name = "list-directory"
    title = "List directory"
    description = "List the files and subdirectories of a directory, optionally with hidden entries and details."
    args_model = ListDirectoryArgs

    async def execute(self, context: ToolContext, args: ListDirectoryArgs) -> str:
        path = await context.ops.authorizer.authorize(args.path)
        entries = await context.ops.list_directory(path, show_hidden=args.show_hidden, details=args.details)
        return format_directory_listing(path, entries, details=args.details)


class CreateDirectoryTool(BaseTool):
    """Create a directory."""

    name = "create-directory"
    title = "Create directory"
    description = "Create a directory, by default including missing parent directories."
    args_model = CreateDirectoryArgs

    async def execute(self, context: ToolContext, args: CreateDirectoryArgs) -> str:
        result = await context.ops.create_directory(args.path, recursive=args.recursive)
        return result.message


class FileInfoTool(BaseTool):
    """Describe a file or directory."""

    name = "file-info"
    title = "File info"
    description = "Show size, type, timestamps and permissions of a file or directory."
    args_model = FileInfoArgs

    async def execute(self, context: ToolContext, args: FileInfoArgs) -> str:
        info = await context.ops.get_file_info(args.path)
        return format_file_info(info)


class ChangePermissionsTool(BaseTool):
    """chmod a file or directory."""

    name = "change-permissions"
    title = "Change permissions"
    description = "Change the permissions of a file or directory using a 3-digit octal mode such as '755'."
    args_model = ChangePermissionsArgs

    async def execute(self, context: ToolContext, args: ChangePermissionsArgs) -> str:
        result = await context.ops.change_permissions(args.path, args.mode)
        return result.message
