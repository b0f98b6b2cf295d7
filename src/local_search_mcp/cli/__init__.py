"""
CLI module for local-search-mcp.

Provides the command-line entry point that runs the MCP server and lets
tools be called by hand.
"""

from local_search_mcp.cli.main import cli

__all__ = ["cli"]
