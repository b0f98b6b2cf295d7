"""
File-level policy on top of the path sandbox: existence, size ceiling and
the advisory extension list.
"""

import logging
import os
import stat
from datetime import datetime, timezone
from pathlib import Path
from typing import Union

from local_search_mcp.filesystem.config import FileSystemAccessConfig
from local_search_mcp.filesystem.exceptions import (
    FileSizeLimitExceededError,
    FileSystemIOError,
    PathNotFoundError,
)
from local_search_mcp.filesystem.models import EntryKind, FileDescriptor
from local_search_mcp.filesystem.sandbox import PathSandbox

logger = logging.getLogger(__name__)


def _timestamp(seconds: float) -> datetime:
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def describe(path: Path, stat_result: os.stat_result) -> FileDescriptor:
    """Build a FileDescriptor from stat metadata."""
    is_dir = stat.S_ISDIR(stat_result.st_mode)
    created = getattr(stat_result, "st_birthtime", None) or stat_result.st_ctime
    return FileDescriptor(
        kind=EntryKind.DIRECTORY if is_dir else EntryKind.FILE,
        path=path,
        size=stat_result.st_size,
        modified_at=_timestamp(stat_result.st_mtime),
        created_at=_timestamp(created),
        accessed_at=_timestamp(stat_result.st_atime),
        extension=None if is_dir else path.suffix,
    )


class FileGuard:
    """
    Validates files before they are read or written.

    Usage:
        guard = FileGuard(config, PathSandbox(config))
        descriptor = guard.stat("~/Documents/report.md")
    """

    def __init__(self, config: FileSystemAccessConfig, sandbox: PathSandbox):
        self.config = config
        self.sandbox = sandbox

    def stat(self, path: Union[str, Path]) -> FileDescriptor:
        """
        Validate a path and return its metadata.

        Directories are returned without size checks. Files above the size
        limit are rejected; files with an unlisted extension are only logged.

        Raises:
            FileAccessDeniedError: If the path is outside the sandbox
            PathNotFoundError: If the path does not exist
            FileSizeLimitExceededError: If the file is too large
        """
        resolved = self.sandbox.validate(path)

        try:
            stat_result = resolved.stat()
        except FileNotFoundError:
            raise PathNotFoundError(str(path))
        except OSError as e:
            raise FileSystemIOError(str(path), f"Cannot stat path: {e.strerror or e}") from e

        descriptor = describe(resolved, stat_result)
        if descriptor.is_directory:
            return descriptor

        if descriptor.size > self.config.max_file_size_bytes:
            logger.warning(
                f"File too large: {resolved} ({descriptor.size} bytes > "
                f"{self.config.max_file_size_bytes} bytes)"
            )
            raise FileSizeLimitExceededError(
                str(resolved), descriptor.size, self.config.max_file_size_bytes
            )

        self.check_extension(resolved)
        return descriptor

    def prepare_write(self, path: Union[str, Path], content: str) -> Path:
        """
        Validate a write target and the size of the content to be written.

        The filesystem is not touched; the caller performs the write.

        Raises:
            FileAccessDeniedError: If the path is outside the sandbox
            FileSizeLimitExceededError: If the UTF-8 content is too large
        """
        resolved = self.sandbox.validate(path)

        content_size = len(content.encode("utf-8"))
        if content_size > self.config.max_file_size_bytes:
            logger.warning(
                f"Content too large: {content_size} bytes > "
                f"{self.config.max_file_size_bytes} bytes"
            )
            raise FileSizeLimitExceededError(
                str(resolved), content_size, self.config.max_file_size_bytes
            )

        return resolved

    def check_extension(self, path: Path) -> bool:
        """Log a warning for extensions outside the allow-list."""
        if self.config.is_extension_allowed(path):
            return True
        logger.warning(f"Extension not in allow-list: {path.suffix.lower() or '(none)'} ({path})")
        return False
