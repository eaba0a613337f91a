"""Pydantic argument models for the filesystem tools.

Field names are snake_case in Python and camelCase on the wire
(``createDirs``, ``linkPath``, ...). Unknown arguments are rejected.
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

PathArg = Annotated[str, Field(min_length=1, description="File or directory path")]


class ToolArgs(BaseModel):
    """Base class for tool arguments."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class TransferArgs(ToolArgs):
    """Shared options of operations that write to a destination."""

    overwrite: bool = Field(default=False, description="Overwrite an existing destination")
    create_dirs: bool = Field(
        default=True,
        alias="createDirs",
        description="Create missing parent directories of the destination",
    )


class MoveFileArgs(TransferArgs):
    source: PathArg = Field(description="Source file path")
    destination: PathArg = Field(description="Destination file path")


class CopyFileArgs(TransferArgs):
    source: PathArg = Field(description="Source file path")
    destination: PathArg = Field(description="Destination file path")


class DeleteFileArgs(ToolArgs):
    path: PathArg = Field(description="File to delete")
    force: bool = Field(
        default=False,
        description="Delete sensitive or read-only files (requires confirmation)",
    )


class RenameArgs(TransferArgs):
    old_path: PathArg = Field(alias="oldPath", description="Current path")
    new_path: PathArg = Field(alias="newPath", description="New path")


class CreateHardLinkArgs(TransferArgs):
    source: PathArg = Field(description="Existing file to link to")
    destination: PathArg = Field(description="Path of the new hard link")


class CreateSymlinkArgs(TransferArgs):
    target: PathArg = Field(description="Path the link points to (may not exist)")
    link_path: PathArg = Field(alias="linkPath", description="Path of the new symbolic link")


class ReadSymlinkArgs(ToolArgs):
    link_path: PathArg = Field(alias="linkPath", description="Symbolic link path")


class ListDirectoryArgs(ToolArgs):
    path: PathArg = Field(description="Directory path")
    show_hidden: bool = Field(default=False, alias="showHidden", description="Include dot-files")
    details: bool = Field(default=False, description="Show size and modification time")


class CreateDirectoryArgs(ToolArgs):
    path: PathArg = Field(description="Directory to create")
    recursive: bool = Field(default=True, description="Create missing parent directories")


class FileInfoArgs(ToolArgs):
    path: PathArg = Field(description="File or directory path")


class ChangePermissionsArgs(ToolArgs):
    path: PathArg = Field(description="File or directory path")
    mode: str = Field(
        pattern=r"^[0-7]{3}$",
        description="Octal permission mode such as '755' or '644'",
    )


class BatchTransferArgs(TransferArgs):
    sources: list[PathArg] = Field(min_length=1, description="Source paths")
    destination: PathArg = Field(description="Destination directory")


class BatchDeleteArgs(ToolArgs):
    paths: list[PathArg] = Field(min_length=1, description="Paths to delete")
    force: bool = Field(
        default=False,
        description="Delete sensitive or read-only files (requires confirmation)",
    )
