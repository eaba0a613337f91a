"""Batch filesystem tools.

These report partial failure in the text payload: the success and failure
sections are both present when a batch only partly worked.
"""

from .base import BaseTool, ToolContext
from .schemas import BatchDeleteArgs, BatchTransferArgs
from ..formatting import format_batch_result


class BatchMoveTool(BaseTool):
    """Move several files into one directory."""

    name = "batch-move"
    title = "Batch move"
    description = "Move several files or directories into a destination directory, reporting each success and failure."
    args_model = BatchTransferArgs

    async def execute(self, context: ToolContext, args: BatchTransferArgs) -> str:
        result = await context.batch.batch_move(
            args.sources, args.destination, overwrite=args.overwrite, create_dirs=args.create_dirs
        )
        return format_batch_result(result, "move")


class BatchCopyTool(BaseTool):
    """Copy several files into one directory."""

    name = "batch-copy"
    title = "Batch copy"
    description = "Copy several files into a destination directory, reporting each success and failure."
    args_model = BatchTransferArgs

    async def execute(self, context: ToolContext, args: BatchTransferArgs) -> str:
        result = await context.batch.batch_copy(
            args.sources, args.destination, overwrite=args.overwrite, create_dirs=args.create_dirs
        )
        return format_batch_result(result, "copy")


class BatchDeleteTool(BaseTool):
    """Delete several files or empty directories."""

    DESTRUCTIVE = True

    name = "batch-delete"
    title = "Batch delete"
    description = (
        "Delete several files or empty directories. The whole batch is refused if it "
        "contains sensitive files and force is not set; force requires explicit confirmation."
    )
    args_model = BatchDeleteArgs

    async def execute(self, context: ToolContext, args: BatchDeleteArgs) -> str:
        result = await context.batch.batch_delete(args.paths, force=args.force)
        return format_batch_result(result, "delete")
