"""Human-readable reports for tool responses."""

import math

from .types import BatchOperationResult, DirectoryEntry, FileInfo

SIZE_UNITS = ["B", "KB", "MB", "GB", "TB"]


def format_size(size: int) -> str:
    """Format a byte count with binary units, e.g. 1536 -> '1.50 KB'."""
    if size == 0:
        return "0 B"
    if size < 0:
        return f"{size} B"

    index = min(int(math.log(size, 1024)), len(SIZE_UNITS) - 1)
    # float log can land just under an exact power of 1024
    if index + 1 < len(SIZE_UNITS) and size >= 1024 ** (index + 1):
        index += 1
    return f"{size / 1024 ** index:.2f} {SIZE_UNITS[index]}"


def format_file_info(info: FileInfo) -> str:
    if info.is_directory:
        kind = "directory"
    elif info.is_file:
        kind = "file"
    else:
        kind = "other"

    lines = [
        f"📋 File info: {info.path}",
        "",
        f"Type: {kind}",
        f"Size: {format_size(info.size)}",
        f"Created: {info.created_at:%Y-%m-%d %H:%M:%S}",
        f"Modified: {info.modified_at:%Y-%m-%d %H:%M:%S}",
        f"Accessed: {info.accessed_at:%Y-%m-%d %H:%M:%S}",
        f"Permissions: {info.permissions}",
    ]
    if info.is_file:
        lines.append(f"Extension: {info.extension or 'none'}")
        lines.append(f"Basename: {info.basename}")
    return "\n".join(lines) + "\n"


def format_directory_listing(path: str, entries: list[DirectoryEntry], details: bool = False) -> str:
    if not entries:
        return f"Directory is empty: {path}"

    lines = [f"📁 Directory contents: {path}", ""]
    for entry in entries:
        if not details:
            lines.append(f"• {entry.name}")
        elif entry.modified_at is None:
            lines.append(f"❓ {entry.name} - details unavailable")
        else:
            icon = "📁" if entry.is_directory else "📄"
            size = "" if entry.is_directory or entry.size is None else f" ({format_size(entry.size)})"
            lines.append(f"{icon} {entry.name}{size} - modified: {entry.modified_at:%Y-%m-%d %H:%M:%S}")
    return "\n".join(lines)


def format_batch_result(result: BatchOperationResult, operation: str) -> str:
    """Report with a success section and a failure section, each with a count."""
    output = f"📦 Batch {operation} finished ({result.total_count} item(s))\n\n"

    if result.results:
        output += f"✅ Succeeded ({result.success_count}):\n"
        output += "\n".join(f"  • {r}" for r in result.results) + "\n\n"

    if result.errors:
        output += f"❌ Failed ({result.error_count}):\n"
        output += "\n".join(f"  • {e}" for e in result.errors)

    return output.rstrip("\n")
