"""
Sandboxed filesystem interface for LLM access.

This module provides filesystem operations (read, write, list, search,
merge, delete, summarize, create-directory) that are strictly confined to a
configured set of allowed directories.
"""

from local_search_mcp.filesystem.aggregate import AggregateOperations
from local_search_mcp.filesystem.config import FileSystemAccessConfig
from local_search_mcp.filesystem.exceptions import (
    FileAccessDeniedError,
    FileSizeLimitExceededError,
    FileSystemError,
    FileSystemIOError,
    IsDirectoryError,
    NoFilesToMergeError,
    NoMatchError,
    PathExistsError,
    PathNotFoundError,
)
from local_search_mcp.filesystem.guard import FileGuard
from local_search_mcp.filesystem.operations import FileOperations
from local_search_mcp.filesystem.sandbox import PathSandbox
from local_search_mcp.filesystem.tools import FileSystemTools, ToolName
from local_search_mcp.filesystem.traversal import TraversalEngine

__all__ = [
    "FileSystemAccessConfig",
    "FileAccessDeniedError",
    "FileSizeLimitExceededError",
    "FileSystemError",
    "FileSystemIOError",
    "IsDirectoryError",
    "NoFilesToMergeError",
    "NoMatchError",
    "PathExistsError",
    "PathNotFoundError",
    "PathSandbox",
    "FileGuard",
    "TraversalEngine",
    "FileOperations",
    "AggregateOperations",
    "FileSystemTools",
    "ToolName",
]
