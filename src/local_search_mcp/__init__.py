"""
Local Search MCP - sandboxed filesystem tools for LLMs.

This package exposes filesystem operations (read, write, list, search,
merge, delete, summarize, create-directory) to an LLM caller while confining
every access to a configured set of allowed directories.
"""

__version__ = "1.0.0"

from local_search_mcp.filesystem import (
    AggregateOperations,
    FileAccessDeniedError,
    FileOperations,
    FileSizeLimitExceededError,
    FileSystemAccessConfig,
    FileSystemError,
    FileSystemTools,
    PathSandbox,
)
from local_search_mcp.settings import ServerSettings

__all__ = [
    # Version
    "__version__",
    # Configuration
    "FileSystemAccessConfig",
    "ServerSettings",
    # Operations
    "PathSandbox",
    "FileOperations",
    "AggregateOperations",
    "FileSystemTools",
    # Errors
    "FileSystemError",
    "FileAccessDeniedError",
    "FileSizeLimitExceededError",
]
