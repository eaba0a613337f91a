"""Tool implementations for guarded-fs.

All tools inherit from BaseTool and implement the execute method.
"""

from .base import BaseTool, ToolContext
from .batch import BatchCopyTool, BatchDeleteTool, BatchMoveTool
from .filesystem import (
    ChangePermissionsTool,
    CopyFileTool,
    CreateDirectoryTool,
    CreateHardLinkTool,
    CreateSymlinkTool,
    DeleteFileTool,
    FileInfoTool,
    ListDirectoryTool,
    MoveFileTool,
    ReadSymlinkTool,
    RenameTool,
)

__all__ = [
    "BaseTool",
    "ToolContext",
    "BatchCopyTool",
    "BatchDeleteTool",
    "BatchMoveTool",
    "ChangePermissionsTool",
    "CopyFileTool",
    "CreateDirectoryTool",
    "CreateHardLinkTool",
    "CreateSymlinkTool",
    "DeleteFileTool",
    "FileInfoTool",
    "ListDirectoryTool",
    "MoveFileTool",
    "ReadSymlinkTool",
    "RenameTool",
    "get_default_tools",
]


def get_default_tools() -> list[BaseTool]:
    """Get the full set of filesystem tools."""
    return [
        MoveFileTool(),
        CopyFileTool(),
        DeleteFileTool(),
        RenameTool(),
        CreateHardLinkTool(),
        CreateSymlinkTool(),
        ReadSymlinkTool(),
        ListDirectoryTool(),
        CreateDirectoryTool(),
        FileInfoTool(),
        ChangePermissionsTool(),
        BatchMoveTool(),
        BatchCopyTool(),
        BatchDeleteTool(),
    ]
