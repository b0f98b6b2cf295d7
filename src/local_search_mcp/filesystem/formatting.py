"""
Human-readable summaries of operation results, returned to the caller
alongside the structured data.
"""

from datetime import datetime

from local_search_mcp.filesystem.models import (
    DeleteOutcome,
    DirectoryCreated,
    DirectoryEntry,
    EntryKind,
    FileContent,
    FileInfo,
    FilesSummary,
    MergeResult,
    SearchReport,
    WriteResult,
)

# Content matches shown per file before the rest are counted
MAX_EXCERPTS_SHOWN = 3


def format_size(size: int) -> str:
    if size < 1024:
        return f"{size} bytes"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / 1024 / 1024:.1f} MB"


def format_time(value: datetime) -> str:
    return value.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def format_directory_created(result: DirectoryCreated) -> str:
    if result.created:
        return f"Created directory: {result.path}"
    return f"Directory already exists: {result.path}"


def format_directory_listing(path: str, entries: list[DirectoryEntry]) -> str:
    lines = [f"Contents of {path}:", ""]
    for entry in entries:
        if entry.kind == EntryKind.DIRECTORY:
            lines.append(f"[DIR]  {entry.name}")
        else:
            lines.append(f"[FILE] {entry.name} ({format_size(entry.size)})")
        lines.append(f"       modified: {format_time(entry.modified_at)}")
    lines.append("")
    lines.append(f"{len(entries)} entries")
    return "\n".join(lines)


def format_file_content(result: FileContent) -> str:
    return (
        f"{result.path.name}: {result.line_count} lines, {result.char_count} characters\n"
        f"{'=' * 50}\n\n"
        f"{result.content}"
    )


def format_write_result(result: WriteResult) -> str:
    return (
        f"File written: {result.path}\n"
        f"Size: {format_size(result.size)}\n"
        f"Modified: {format_time(result.modified_at)}"
    )


def format_search_report(report: SearchReport) -> str:
    scope = "file names and content" if report.search_content else "file names only"
    if not report.matches:
        return f"No results for \"{report.query}\" in {report.directory} ({scope})"

    lines = [
        f"Results for \"{report.query}\" ({len(report.matches)} files)",
        f"Directory: {report.directory}",
        f"Scope: {scope}",
    ]
    for match in report.matches:
        lines.append("")
        lines.append(match.relative_path)
        if match.content_matches:
            shown = match.content_matches[:MAX_EXCERPTS_SHOWN]
            for content_match in shown:
                lines.append(f"   Line {content_match.line_number}: {content_match.excerpt}")
            remaining = len(match.content_matches) - len(shown)
            if remaining > 0:
                lines.append(f"   ... and {remaining} more")
    return "\n".join(lines)


def format_file_info(info: FileInfo) -> str:
    descriptor = info.descriptor
    kind = "directory" if descriptor.kind == EntryKind.DIRECTORY else "file"
    lines = [
        f"{info.name}:",
        f"Path: {descriptor.path}",
        f"Type: {kind}",
        f"Size: {format_size(descriptor.size)}",
        f"Created: {format_time(descriptor.created_at)}",
        f"Modified: {format_time(descriptor.modified_at)}",
        f"Accessed: {format_time(descriptor.accessed_at)}",
        f"Permissions: {info.permissions}",
    ]
    if descriptor.extension:
        lines.append(f"Extension: {descriptor.extension}")
    return "\n".join(lines)


def format_merge_result(result: MergeResult) -> str:
    lines = [
        f"Merged {len(result.merged)} files into {result.write.path}",
        f"Size: {format_size(result.write.size)}",
    ]
    lines.extend(f"  - {path.name}" for path in result.merged)
    if result.skipped:
        lines.append(f"Skipped {len(result.skipped)} directories:")
        lines.extend(f"  - {path}" for path in result.skipped)
    return "\n".join(lines)


def format_delete_outcomes(outcomes: list[DeleteOutcome]) -> str:
    deleted = [o for o in outcomes if o.success]
    failed = [o for o in outcomes if not o.success]
    lines = [f"Deleted {len(deleted)} of {len(outcomes)} files"]
    lines.extend(f"  deleted: {o.path}" for o in deleted)
    lines.extend(f"  failed:  {o.path} ({o.error})" for o in failed)
    return "\n".join(lines)


def format_files_summary(summary: FilesSummary) -> str:
    lines = [
        f"Summary of {summary.directory} (pattern: {summary.pattern})",
        f"Files: {summary.file_count}",
        f"Total size: {format_size(summary.total_size)}",
        f"Oldest: {format_time(summary.oldest)}",
        f"Newest: {format_time(summary.newest)}",
        "",
    ]
    lines.extend(
        f"  {entry.name} ({format_size(entry.size)}, {format_time(entry.modified_at)})"
        for entry in summary.files
    )
    return "\n".join(lines)
