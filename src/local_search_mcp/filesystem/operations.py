"""
Single-path filesystem operations: create, list, read, write, delete, info.
"""

import logging
import os
from pathlib import Path
from typing import Optional, Union

from local_search_mcp.filesystem.config import FileSystemAccessConfig
from local_search_mcp.filesystem.exceptions import (
    FileSystemError,
    FileSystemIOError,
    IsDirectoryError,
    PathExistsError,
    PathNotFoundError,
)
from local_search_mcp.filesystem.guard import FileGuard, describe
from local_search_mcp.filesystem.models import (
    DeleteOutcome,
    DirectoryCreated,
    DirectoryEntry,
    EntryKind,
    FileContent,
    FileInfo,
    Permissions,
    WriteResult,
)
from local_search_mcp.filesystem.sandbox import PathSandbox

logger = logging.getLogger(__name__)


class FileOperations:
    """
    Sandboxed file and directory operations.

    Every operation validates its path through the sandbox (and, where a file
    is involved, the file guard) before touching the filesystem.

    Usage:
        config = FileSystemAccessConfig(allowed_directories=[Path("/srv/notes")])
        ops = FileOperations(config)

        ops.write_file("/srv/notes/todo.md", "- buy milk\\n")
        print(ops.read_file("/srv/notes/todo.md").content)
    """

    def __init__(
        self,
        config: FileSystemAccessConfig,
        sandbox: Optional[PathSandbox] = None,
        guard: Optional[FileGuard] = None,
    ):
        """
        Initialize the operations.

        Args:
            config: Filesystem access configuration
            sandbox: Path sandbox (created from config if omitted)
            guard: File guard (created from config if omitted)
        """
        self.config = config
        self.sandbox = sandbox or PathSandbox(config)
        self.guard = guard or FileGuard(config, self.sandbox)

    def create_directory(self, path: Union[str, Path]) -> DirectoryCreated:
        """
        Create a directory and any missing parents.

        Existing directories are accepted as they are.

        Raises:
            FileAccessDeniedError: If the path is outside the sandbox
            PathExistsError: If a non-directory already exists at the path
        """
        resolved = self.sandbox.validate(path)

        if resolved.is_dir():
            logger.debug(f"Directory already exists: {resolved}")
            return DirectoryCreated(path=resolved, created=False)
        if os.path.lexists(resolved):
            raise PathExistsError(str(path), "A file already exists at this path")

        try:
            resolved.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create directory {resolved}: {e}")
            raise FileSystemIOError(str(path), f"Cannot create directory: {e.strerror or e}") from e

        logger.info(f"Created directory: {resolved}")
        return DirectoryCreated(path=resolved, created=True)

    def list_directory(self, path: Union[str, Path]) -> list[DirectoryEntry]:
        """
        List the immediate children of a directory in OS enumeration order.

        Raises:
            FileAccessDeniedError: If the path is outside the sandbox
            PathNotFoundError: If the directory does not exist
            FileSystemIOError: If the path is not a directory or cannot be read
        """
        resolved = self.sandbox.validate(path)

        if not resolved.exists():
            raise PathNotFoundError(str(path))
        if not resolved.is_dir():
            raise FileSystemIOError(str(path), "Path is not a directory")

        entries = []
        try:
            with os.scandir(resolved) as it:
                for item in it:
                    # Links escaping the sandbox are described, not followed
                    follow, _ = self.sandbox.is_allowed(item.path)
                    try:
                        descriptor = describe(Path(item.path), item.stat(follow_symlinks=follow))
                    except OSError as e:
                        logger.warning(f"Cannot stat {item.path}: {e}")
                        continue
                    is_dir = descriptor.kind == EntryKind.DIRECTORY
                    entries.append(
                        DirectoryEntry(
                            name=item.name,
                            kind=descriptor.kind,
                            size=None if is_dir else descriptor.size,
                            modified_at=descriptor.modified_at,
                            extension=None if is_dir else descriptor.extension,
                        )
                    )
        except OSError as e:
            raise FileSystemIOError(str(path), f"Cannot list directory: {e.strerror or e}") from e

        logger.debug(f"Listed {len(entries)} entries in {resolved}")
        return entries

    def read_file(self, path: Union[str, Path]) -> FileContent:
        """
        Read a UTF-8 text file.

        Raises:
            FileAccessDeniedError: If the path is outside the sandbox
            PathNotFoundError: If the file does not exist
            IsDirectoryError: If the path is a directory
            FileSizeLimitExceededError: If the file is too large
            FileSystemIOError: If the file cannot be read or decoded
        """
        descriptor = self.guard.stat(path)
        if descriptor.is_directory:
            raise IsDirectoryError(str(path), "Cannot read a directory, use list_directory")

        try:
            with open(descriptor.path, "r", encoding="utf-8", newline="") as f:
                content = f.read()
        except UnicodeDecodeError as e:
            logger.error(f"Failed to decode file {descriptor.path}: {e}")
            raise FileSystemIOError(str(path), "File is not valid UTF-8 text") from e
        except OSError as e:
            raise FileSystemIOError(str(path), f"Cannot read file: {e.strerror or e}") from e

        logger.debug(f"Read file: {descriptor.path} ({descriptor.size} bytes)")
        return FileContent(
            path=descriptor.path,
            content=content,
            line_count=len(content.split("\n")),
            char_count=len(content),
            size=descriptor.size,
        )

    def write_file(self, path: Union[str, Path], content: str) -> WriteResult:
        """
        Write text to a file, overwriting any existing content.

        Raises:
            FileAccessDeniedError: If the path is outside the sandbox
            FileSizeLimitExceededError: If the content is too large
            PathNotFoundError: If the parent directory does not exist
            IsDirectoryError: If the path is a directory
            FileSystemIOError: If the write fails
        """
        resolved = self.guard.prepare_write(path, content)

        if resolved.is_dir():
            raise IsDirectoryError(str(path), "Cannot overwrite a directory")
        if not resolved.parent.is_dir():
            raise PathNotFoundError(str(resolved.parent))

        try:
            with open(resolved, "w", encoding="utf-8", newline="") as f:
                f.write(content)
            stat_result = resolved.stat()
        except OSError as e:
            logger.error(f"Failed to write file {resolved}: {e}")
            raise FileSystemIOError(str(path), f"Cannot write file: {e.strerror or e}") from e

        written = describe(resolved, stat_result)
        logger.info(f"Wrote file: {resolved} ({written.size} bytes)")
        return WriteResult(path=resolved, size=written.size, modified_at=written.modified_at)

    def delete_files(self, paths: list[Union[str, Path]]) -> list[DeleteOutcome]:
        """
        Delete several files independently.

        A failure for one path is recorded in its outcome and does not stop
        the remaining deletions. Directories are never removed.

        Returns:
            One DeleteOutcome per input path, in input order
        """
        outcomes = []
        for path in paths:
            try:
                self._delete_file(path)
            except FileSystemError as e:
                logger.warning(f"Delete failed for {path}: {e}")
                outcomes.append(
                    DeleteOutcome(path=str(path), success=False, error=str(e), error_type=e.kind)
                )
                continue
            outcomes.append(DeleteOutcome(path=str(path), success=True))
        return outcomes

    def _delete_file(self, path: Union[str, Path]) -> None:
        resolved = self.sandbox.validate(path)

        if not os.path.lexists(resolved):
            raise PathNotFoundError(str(path))
        if resolved.is_dir() and not resolved.is_symlink():
            raise IsDirectoryError(str(path), "Directories cannot be deleted")

        try:
            resolved.unlink()
        except OSError as e:
            raise FileSystemIOError(str(path), f"Cannot delete file: {e.strerror or e}") from e
        logger.info(f"Deleted file: {resolved}")

    def get_file_info(self, path: Union[str, Path]) -> FileInfo:
        """
        Return metadata and permission probes for a file or directory.

        A failed permission probe reports False rather than raising.
        """
        descriptor = self.guard.stat(path)
        permissions = Permissions(
            readable=_probe(descriptor.path, os.R_OK),
            writable=_probe(descriptor.path, os.W_OK),
            executable=_probe(descriptor.path, os.X_OK),
        )
        return FileInfo(descriptor=descriptor, permissions=permissions)


def _probe(path: Path, mode: int) -> bool:
    try:
        return os.access(path, mode)
    except (OSError, ValueError):
        return False
