"""
Unified filesystem tools interface.

Provides a high-level interface for LLMs to use the sandboxed filesystem
operations through function calling (OpenAI function calling format) or an
MCP server.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from local_search_mcp.filesystem import formatting
from local_search_mcp.filesystem.aggregate import AggregateOperations
from local_search_mcp.filesystem.config import FileSystemAccessConfig
from local_search_mcp.filesystem.exceptions import FileSystemError
from local_search_mcp.filesystem.models import SortOrder, to_jsonable
from local_search_mcp.filesystem.operations import FileOperations

logger = logging.getLogger(__name__)


class ToolName(str, Enum):
    """Names of the tools exposed to callers."""

    CREATE_DIRECTORY = "create_directory"
    LIST_DIRECTORY = "list_directory"
    READ_FILE = "read_file"
    WRITE_FILE = "write_file"
    SEARCH_FILES = "search_files"
    GET_FILE_INFO = "get_file_info"
    MERGE_FILES = "merge_files"
    MERGE_DIRECTORY_FILES = "merge_directory_files"
    DELETE_FILES = "delete_files"
    GET_FILES_SUMMARY = "get_files_summary"


class ToolArguments(BaseModel):
    """Base for tool argument records (camelCase aliases accepted)."""

    model_config = {"extra": "forbid", "populate_by_name": True}


class PathArgs(ToolArguments):
    path: str = Field(description="File or directory path (absolute, or relative to the home directory)")


class WriteFileArgs(ToolArguments):
    path: str = Field(description="Path of the file to write")
    content: str = Field(description="Text content to write (replaces existing content)")


class SearchFilesArgs(ToolArguments):
    directory: str = Field(description="Directory to search recursively")
    query: str = Field(min_length=1, description="Keyword to look for (case-insensitive)")
    search_content: bool = Field(
        default=False,
        alias="searchContent",
        description="Also search file contents (default: false, file names only)",
    )


class MergeFilesArgs(ToolArguments):
    paths: list[str] = Field(description="Files to merge, in order")
    output_path: Optional[str] = Field(
        default=None,
        alias="outputPath",
        description="Output file path (default: timestamped file in the output directory)",
    )
    separator: Optional[str] = Field(
        default=None,
        description="Header rule placed around each file name (default: 80 '=' characters)",
    )


class MergeDirectoryFilesArgs(ToolArguments):
    directory: str = Field(description="Directory whose files are merged (not recursive)")
    pattern: Optional[str] = Field(
        default=None,
        description="File name pattern, e.g. '2025-10-*.txt' (default: '*')",
    )
    output_path: Optional[str] = Field(
        default=None,
        alias="outputPath",
        description="Output file path (default: timestamped file in the output directory)",
    )
    separator: Optional[str] = Field(default=None, description="Header rule placed around each file name")
    sort_by: SortOrder = Field(
        default=SortOrder.NAME,
        alias="sortBy",
        description="Sort order: 'name' or 'date' (oldest first). Default: name",
    )

    @field_validator("sort_by", mode="before")
    @classmethod
    def lowercase_sort_by(cls, v):
        return v.lower() if isinstance(v, str) else v


class DeleteFilesArgs(ToolArguments):
    paths: list[str] = Field(description="Files to delete (directories are never deleted)")


class FilesSummaryArgs(ToolArguments):
    directory: str = Field(description="Directory to summarise (not recursive)")
    pattern: Optional[str] = Field(default=None, description="File name pattern, e.g. '*.txt' (default: '*')")


@dataclass(frozen=True)
class ToolSpec:
    """One entry of the dispatch table."""

    name: ToolName
    description: str
    arguments: type[ToolArguments]
    handler: Callable[[Any], tuple[str, Any]]


class FileSystemTools:
    """
    Unified filesystem interface for LLM function calling.

    Usage:
        config = FileSystemAccessConfig(
            allowed_directories=[Path("~/Documents")],
        )
        tools = FileSystemTools(config)

        # Get tool schemas for LLM
        schemas = tools.get_tool_schemas()

        # Execute tool call
        result = await tools.execute_tool(
            tool_name="read_file",
            arguments={"path": "~/Documents/notes.md"}
        )
    """

    def __init__(self, config: FileSystemAccessConfig):
        """
        Initialize filesystem tools.

        Args:
            config: Filesystem access configuration
        """
        self.config = config
        self.operations = FileOperations(config)
        self.aggregate = AggregateOperations(self.operations)
        self._tools = {spec.name: spec for spec in self._build_specs()}

    def _build_specs(self) -> list[ToolSpec]:
        return [
            ToolSpec(
                ToolName.CREATE_DIRECTORY,
                "Create a directory. Missing parent directories are created too.",
                PathArgs,
                self._create_directory,
            ),
            ToolSpec(
                ToolName.LIST_DIRECTORY,
                "List the files and folders directly inside a directory.",
                PathArgs,
                self._list_directory,
            ),
            ToolSpec(
                ToolName.READ_FILE,
                "Read the contents of a text file.",
                PathArgs,
                self._read_file,
            ),
            ToolSpec(
                ToolName.WRITE_FILE,
                "Write content to a file (overwrites an existing file).",
                WriteFileArgs,
                self._write_file,
            ),
            ToolSpec(
                ToolName.SEARCH_FILES,
                "Search a directory recursively by file name, and optionally by file content.",
                SearchFilesArgs,
                self._search_files,
            ),
            ToolSpec(
                ToolName.GET_FILE_INFO,
                "Show detailed information about a file or directory.",
                PathArgs,
                self._get_file_info,
            ),
            ToolSpec(
                ToolName.MERGE_FILES,
                "Merge several files into one.",
                MergeFilesArgs,
                self._merge_files,
            ),
            ToolSpec(
                ToolName.MERGE_DIRECTORY_FILES,
                "Merge the files of a directory that match a name pattern.",
                MergeDirectoryFilesArgs,
                self._merge_directory_files,
            ),
            ToolSpec(
                ToolName.DELETE_FILES,
                "Delete several files. Each file is handled independently.",
                DeleteFilesArgs,
                self._delete_files,
            ),
            ToolSpec(
                ToolName.GET_FILES_SUMMARY,
                "Summarise the files of a directory (count, total size, date range).",
                FilesSummaryArgs,
                self._get_files_summary,
            ),
        ]

    @property
    def tool_specs(self) -> list[ToolSpec]:
        return list(self._tools.values())

    def get_tool_schemas(self) -> list[dict[str, Any]]:
        """
        Get OpenAI function calling schemas for all available tools.

        Returns:
            List of tool schemas in OpenAI format
        """
        schemas = []
        for spec in self._tools.values():
            parameters = spec.arguments.model_json_schema(by_alias=True)
            parameters.pop("title", None)
            schemas.append(
                {
                    "type": "function",
                    "function": {
                        "name": spec.name.value,
                        "description": spec.description,
                        "parameters": parameters,
                    },
                }
            )
        return schemas

    async def execute_tool(
        self, tool_name: str, arguments: dict[str, Any]
    ) -> dict[str, Any]:
        """
        Execute a tool call from an LLM.

        Args:
            tool_name: Name of the tool to execute
            arguments: Tool arguments (from LLM function call)

        Returns:
            ``{"success": True, "text", "data"}`` or
            ``{"success": False, "error", "error_type"}``

        Raises:
            ValueError: If tool name is unknown
        """
        try:
            spec = self._tools[ToolName(tool_name)]
        except ValueError:
            raise ValueError(f"Unknown tool: {tool_name}") from None

        logger.info(f"Tool call: {spec.name.value}")
        try:
            args = spec.arguments.model_validate(arguments or {})
        except ValidationError as e:
            logger.warning(f"Invalid arguments for {spec.name.value}: {e}")
            return _failure(tool_name, f"Invalid arguments: {e}", "InvalidArguments")

        try:
            text, data = spec.handler(args)
        except FileSystemError as e:
            logger.warning(f"{spec.name.value} failed: {e}")
            return _failure(tool_name, str(e), e.kind)
        except ValueError as e:
            logger.warning(f"{spec.name.value} rejected: {e}")
            return _failure(tool_name, str(e), "InvalidArguments")

        return {
            "success": True,
            "tool": tool_name,
            "text": text,
            "data": to_jsonable(data),
        }

    def _create_directory(self, args: PathArgs) -> tuple[str, Any]:
        result = self.operations.create_directory(args.path)
        return formatting.format_directory_created(result), result

    def _list_directory(self, args: PathArgs) -> tuple[str, Any]:
        entries = self.operations.list_directory(args.path)
        return formatting.format_directory_listing(args.path, entries), entries

    def _read_file(self, args: PathArgs) -> tuple[str, Any]:
        result = self.operations.read_file(args.path)
        return formatting.format_file_content(result), result

    def _write_file(self, args: WriteFileArgs) -> tuple[str, Any]:
        result = self.operations.write_file(args.path, args.content)
        return formatting.format_write_result(result), result

    def _search_files(self, args: SearchFilesArgs) -> tuple[str, Any]:
        report = self.aggregate.search_files(args.directory, args.query, args.search_content)
        return formatting.format_search_report(report), report

    def _get_file_info(self, args: PathArgs) -> tuple[str, Any]:
        info = self.operations.get_file_info(args.path)
        return formatting.format_file_info(info), info

    def _merge_files(self, args: MergeFilesArgs) -> tuple[str, Any]:
        result = self.aggregate.merge_files(args.paths, args.output_path, args.separator)
        return formatting.format_merge_result(result), result

    def _merge_directory_files(self, args: MergeDirectoryFilesArgs) -> tuple[str, Any]:
        result = self.aggregate.merge_directory_files(
            args.directory,
            pattern=args.pattern,
            output_path=args.output_path,
            separator=args.separator,
            sort_by=args.sort_by,
        )
        return formatting.format_merge_result(result), result

    def _delete_files(self, args: DeleteFilesArgs) -> tuple[str, Any]:
        outcomes = self.operations.delete_files(args.paths)
        return formatting.format_delete_outcomes(outcomes), outcomes

    def _get_files_summary(self, args: FilesSummaryArgs) -> tuple[str, Any]:
        summary = self.aggregate.get_files_summary(args.directory, args.pattern)
        return formatting.format_files_summary(summary), summary

    def get_summary(self) -> dict[str, Any]:
        """
        Get a summary of the filesystem access configuration.

        Returns:
            Dict with configuration summary
        """
        return {
            "allowed_directories": [str(d) for d in self.config.allowed_directories],
            "default_output_directory": str(self.config.default_output_directory)
            if self.config.default_output_directory
            else None,
            "max_file_size_mb": self.config.max_file_size_bytes / (1024 * 1024),
            "allowed_extensions": self.config.allowed_extensions,
            "follow_symlinks": self.config.follow_symlinks,
        }


def _failure(tool_name: str, error: str, error_type: str) -> dict[str, Any]:
    return {
        "success": False,
        "tool": tool_name,
        "error": error,
        "error_type": error_type,
    }
