"""
Settings for the local search MCP server.

Example:
    ```python
    from local_search_mcp.settings import ServerSettings

    # From environment variables / .env
    settings = ServerSettings()

    # Or from a file
    settings = ServerSettings.from_file("~/.local-search-mcp/config.yaml")

    config = settings.to_access_config()
    ```
"""

from local_search_mcp.settings.config import DEFAULT_EXTENSIONS, ServerSettings

__all__ = [
    "DEFAULT_EXTENSIONS",
    "ServerSettings",
]
