"""
Exceptions for sandboxed filesystem operations.

Every error carries a stable ``kind`` string so the protocol adapter can
report it without inspecting class names.
"""

from typing import Optional


class FileSystemError(Exception):
    """Base exception for filesystem operations."""

    kind = "FileSystemError"

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class FileAccessDeniedError(FileSystemError):
    """Raised when a path resolves outside every allowed directory."""

    kind = "AccessDenied"

    def __init__(self, path: str, reason: str = "Access denied"):
        self.reason = reason
        super().__init__(f"{reason}: {path}", path)


class PathNotFoundError(FileSystemError):
    """Raised when a validated path does not exist."""

    kind = "NotFound"

    def __init__(self, path: str):
        super().__init__(f"Path not found: {path}", path)


class PathExistsError(FileSystemError):
    """Raised when a path already exists with an incompatible type."""

    kind = "AlreadyExists"

    def __init__(self, path: str, reason: str = "Path already exists"):
        self.reason = reason
        super().__init__(f"{reason}: {path}", path)


class IsDirectoryError(FileSystemError):
    """Raised when a file operation targets a directory."""

    kind = "IsADirectory"

    def __init__(self, path: str, reason: str = "Path is a directory"):
        self.reason = reason
        super().__init__(f"{reason}: {path}", path)


class FileSizeLimitExceededError(FileSystemError):
    """Raised when a file or write payload exceeds the size limit."""

    kind = "SizeExceeded"

    def __init__(self, path: str, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"File too large ({size} bytes > {limit} bytes): {path}", path)


class NoFilesToMergeError(FileSystemError):
    """Raised when a merge has nothing left to concatenate."""

    kind = "NoFilesToMerge"

    def __init__(self, reason: str = "No files to merge"):
        super().__init__(reason)


class NoMatchError(FileSystemError):
    """Raised when a filename pattern matches nothing in a directory."""

    kind = "NoMatch"

    def __init__(self, directory: str, pattern: str):
        self.pattern = pattern
        super().__init__(f"No files matching '{pattern}' in {directory}", directory)


class FileSystemIOError(FileSystemError):
    """Raised for operating system failures not covered by another kind."""

    kind = "IoFailure"

    def __init__(self, path: str, reason: str):
        self.reason = reason
        super().__init__(f"{reason}: {path}", path)
