"""
MCP protocol adapter.

Exposes the filesystem tools over the Model Context Protocol (stdio
transport). Requests are dispatched through FileSystemTools; failures are
returned as error text instead of protocol errors.
"""

import logging
from typing import Any, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from local_search_mcp.filesystem.tools import FileSystemTools
from local_search_mcp.settings import ServerSettings

logger = logging.getLogger(__name__)

LIST_ALLOWED_DIRECTORIES = "list_allowed_directories"


class LocalSearchServer:
    """
    MCP server wrapping FileSystemTools.

    Usage:
        server = LocalSearchServer(ServerSettings())
        asyncio.run(server.run())
    """

    def __init__(self, settings: ServerSettings, tools: Optional[FileSystemTools] = None):
        self.settings = settings
        self.tools = tools or FileSystemTools(settings.to_access_config())
        self.server: Server = Server(
            name=settings.server_name,
            version=settings.server_version,
            instructions=settings.server_description,
        )
        self._register_handlers()
        logger.info("MCP server initialised")

    def _register_handlers(self) -> None:
        @self.server.list_tools()
        async def list_tools() -> list[Tool]:
            return self.list_tools()

        @self.server.call_tool()
        async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
            return [TextContent(type="text", text=await self.call_tool(name, arguments))]

    def list_tools(self) -> list[Tool]:
        tools = [
            Tool(
                name=schema["function"]["name"],
                description=schema["function"]["description"],
                inputSchema=schema["function"]["parameters"],
            )
            for schema in self.tools.get_tool_schemas()
        ]
        tools.append(
            Tool(
                name=LIST_ALLOWED_DIRECTORIES,
                description="List the directories this server is allowed to access.",
                inputSchema={"type": "object", "properties": {}},
            )
        )
        return tools

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> str:
        """Run one tool call and render the result as text."""
        if name == LIST_ALLOWED_DIRECTORIES:
            directories = self.tools.config.allowed_directories
            return "Allowed directories:\n" + "\n".join(str(d) for d in directories)

        try:
            result = await self.tools.execute_tool(name, arguments or {})
        except ValueError as e:
            logger.error(f"Tool call failed: {name}: {e}")
            return f"Error: {e}"

        if not result["success"]:
            logger.error(f"Tool call failed: {name}: {result['error']}")
            return f"Error: {result['error']}"

        logger.info(f"Tool call succeeded: {name}")
        return result["text"]

    async def run(self) -> None:
        """Run the server using stdio."""
        logger.info(f"Starting {self.settings.server_name}")
        logger.info(
            "Allowed directories: "
            + ", ".join(str(d) for d in self.tools.config.allowed_directories)
        )
        logger.info(f"Output directory: {self.tools.config.default_output_directory}")

        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )
