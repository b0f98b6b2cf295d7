"""
Tests for the tool dispatch layer and the MCP server adapter.
"""

import pytest

from local_search_mcp.filesystem import ToolName
from local_search_mcp.server import LIST_ALLOWED_DIRECTORIES, LocalSearchServer
from local_search_mcp.settings import ServerSettings


class TestFileSystemTools:
    """Test FileSystemTools."""

    def test_get_tool_schemas(self, tools):
        schemas = tools.get_tool_schemas()

        assert [s["function"]["name"] for s in schemas] == [name.value for name in ToolName]
        for schema in schemas:
            assert schema["type"] == "function"
            assert schema["function"]["description"]
            assert schema["function"]["parameters"]["type"] == "object"

    def test_schemas_use_camel_case_aliases(self, tools):
        schemas = {s["function"]["name"]: s["function"]["parameters"] for s in tools.get_tool_schemas()}

        assert "searchContent" in schemas["search_files"]["properties"]
        assert schemas["search_files"]["required"] == ["directory", "query"]
        assert "outputPath" in schemas["merge_files"]["properties"]
        assert "sortBy" in schemas["merge_directory_files"]["properties"]

    @pytest.mark.asyncio
    async def test_write_and_read(self, tools, root):
        target = root / "notes.md"

        result = await tools.execute_tool("write_file", {"path": str(target), "content": "# Notes"})
        assert result["success"] is True
        assert result["tool"] == "write_file"
        assert result["data"]["size"] == 7

        result = await tools.execute_tool("read_file", {"path": str(target)})
        assert result["success"] is True
        assert result["data"]["content"] == "# Notes"
        assert result["text"].endswith("# Notes")

    @pytest.mark.asyncio
    async def test_read_file_denied(self, tools, outside):
        result = await tools.execute_tool("read_file", {"path": str(outside / "secret.txt")})

        assert result["success"] is False
        assert result["error_type"] == "AccessDenied"
        assert "top secret" not in result["error"]

    @pytest.mark.asyncio
    async def test_camel_case_arguments(self, tools, root):
        (root / "notes.txt").write_text("remember the meeting")

        result = await tools.execute_tool(
            "search_files",
            {"directory": str(root), "query": "meeting", "searchContent": True},
        )

        assert result["success"] is True
        assert result["data"]["matches"][0]["relative_path"] == "notes.txt"
        assert "Line 1: remember the meeting" in result["text"]

    @pytest.mark.asyncio
    async def test_merge_directory_files_with_aliases(self, tools, root):
        (root / "a.txt").write_text("alpha")
        (root / "b.txt").write_text("beta")
        output = root / "merged.out"

        result = await tools.execute_tool(
            "merge_directory_files",
            {"directory": str(root), "pattern": "*.txt", "outputPath": str(output), "sortBy": "date"},
        )

        assert result["success"] is True
        assert output.exists()
        assert "Merged 2 files" in result["text"]

    @pytest.mark.asyncio
    async def test_sort_order_is_case_insensitive(self, tools, root):
        (root / "a.txt").write_text("alpha")

        result = await tools.execute_tool(
            "merge_directory_files",
            {"directory": str(root), "outputPath": str(root / "merged.out"), "sortBy": "Date"},
        )

        assert result["success"] is True

    @pytest.mark.asyncio
    async def test_invalid_sort_order(self, tools, root):
        result = await tools.execute_tool(
            "merge_directory_files", {"directory": str(root), "sortBy": "size"}
        )
        assert result["success"] is False
        assert result["error_type"] == "InvalidArguments"

    @pytest.mark.asyncio
    async def test_missing_argument(self, tools):
        result = await tools.execute_tool("read_file", {})
        assert result["success"] is False
        assert result["error_type"] == "InvalidArguments"

    @pytest.mark.asyncio
    async def test_unexpected_argument(self, tools, root):
        result = await tools.execute_tool("read_file", {"path": str(root), "mode": "rb"})
        assert result["success"] is False
        assert result["error_type"] == "InvalidArguments"

    @pytest.mark.asyncio
    async def test_empty_search_query(self, tools, root):
        result = await tools.execute_tool("search_files", {"directory": str(root), "query": ""})
        assert result["success"] is False
        assert result["error_type"] == "InvalidArguments"

    @pytest.mark.asyncio
    async def test_delete_files_reports_per_path(self, tools, root):
        (root / "a.txt").write_text("a")

        result = await tools.execute_tool(
            "delete_files", {"paths": [str(root / "a.txt"), str(root / "missing.txt")]}
        )

        assert result["success"] is True
        assert [o["success"] for o in result["data"]] == [True, False]
        assert result["text"].startswith("Deleted 1 of 2 files")

    @pytest.mark.asyncio
    async def test_files_summary_no_match(self, tools, root):
        result = await tools.execute_tool(
            "get_files_summary", {"directory": str(root), "pattern": "*.pdf"}
        )
        assert result["success"] is False
        assert result["error_type"] == "NoMatch"

    @pytest.mark.asyncio
    async def test_create_directory_and_list(self, tools, root):
        result = await tools.execute_tool("create_directory", {"path": str(root / "new")})
        assert result["data"]["created"] is True

        result = await tools.execute_tool("list_directory", {"path": str(root)})
        assert result["success"] is True
        assert result["data"][0]["name"] == "new"
        assert result["data"][0]["kind"] == "directory"
        assert "[DIR]  new" in result["text"]

    @pytest.mark.asyncio
    async def test_get_file_info(self, tools, root):
        (root / "a.txt").write_text("abc")
        result = await tools.execute_tool("get_file_info", {"path": str(root / "a.txt")})

        assert result["success"] is True
        assert result["data"]["descriptor"]["size"] == 3
        assert "Extension: .txt" in result["text"]

    @pytest.mark.asyncio
    async def test_unknown_tool(self, tools):
        with pytest.raises(ValueError, match="Unknown tool"):
            await tools.execute_tool("format_disk", {})

    def test_get_summary(self, tools, root):
        summary = tools.get_summary()
        assert summary["allowed_directories"] == [str(root)]
        assert summary["default_output_directory"] == str(root)
        assert summary["follow_symlinks"] is False


class TestLocalSearchServer:
    """Test the MCP adapter."""

    @pytest.fixture
    def server(self, root, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        settings = ServerSettings(allowed_paths=str(root), allowed_extensions="all")
        return LocalSearchServer(settings)

    def test_list_tools(self, server):
        names = [tool.name for tool in server.list_tools()]
        assert names == [name.value for name in ToolName] + [LIST_ALLOWED_DIRECTORIES]

    def test_tool_input_schema(self, server):
        tools = {tool.name: tool for tool in server.list_tools()}
        assert tools["read_file"].inputSchema["required"] == ["path"]

    @pytest.mark.asyncio
    async def test_call_tool(self, server, root):
        (root / "hello.txt").write_text("hello world")
        text = await server.call_tool("read_file", {"path": str(root / "hello.txt")})
        assert "hello world" in text

    @pytest.mark.asyncio
    async def test_call_tool_error_is_text(self, server, outside):
        text = await server.call_tool("read_file", {"path": str(outside / "secret.txt")})
        assert text.startswith("Error: ")
        assert "top secret" not in text

    @pytest.mark.asyncio
    async def test_unknown_tool_is_text(self, server):
        text = await server.call_tool("format_disk", {})
        assert text == "Error: Unknown tool: format_disk"

    @pytest.mark.asyncio
    async def test_list_allowed_directories(self, server, root):
        text = await server.call_tool(LIST_ALLOWED_DIRECTORIES, {})
        assert text == f"Allowed directories:\n{root}"
