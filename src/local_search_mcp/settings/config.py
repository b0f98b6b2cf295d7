"""
Server configuration.

Settings are read from environment variables (and a ``.env`` file), or from
a YAML/JSON file, and turned into the FileSystemAccessConfig used by the
filesystem tools.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from local_search_mcp.filesystem.config import (
    DEFAULT_MAX_FILE_SIZE,
    FileSystemAccessConfig,
    normalize_path,
)

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = [
    ".txt", ".md", ".js", ".json", ".html", ".css", ".py", ".java",
    ".cpp", ".c", ".h", ".xml", ".yaml", ".yml", ".cs", ".vue", ".ts",
    ".tsx", ".go", ".rs", ".swift", ".kt", ".php", ".rb",
]


def _split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def resolve_user_path(path: str) -> Path:
    """Absolute paths are kept; relative paths are taken from the home directory."""
    expanded = os.path.expanduser(path)
    if os.path.isabs(expanded):
        return normalize_path(expanded)
    return normalize_path(Path.home() / expanded)


class ServerSettings(BaseSettings):
    """
    Local search MCP server settings.

    Environment variables:
        ALLOWED_PATHS - Comma-separated allowed directories (relative = home-based)
        DEFAULT_BASE_PATH - Home subdirectory used when ALLOWED_PATHS is unset
        OUTPUT_PATH - Directory for merge output (default: first allowed path)
        MAX_FILE_SIZE - Maximum file size in bytes (default: 10 MiB)
        ALLOWED_EXTENSIONS - Comma-separated extensions, or "all"
        FOLLOW_SYMLINKS - Allow symlinks that point outside the allowed paths
        SERVER_NAME, SERVER_VERSION, SERVER_DESCRIPTION - Server identity
        LOG_LEVEL - Logging level (default: INFO)
        LOG_FILE - Optional log file path

    Example:
        ```python
        settings = ServerSettings()  # from the environment
        config = settings.to_access_config()
        ```
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    allowed_paths: Optional[str] = Field(
        default=None,
        description="Comma-separated allowed directories",
    )
    default_base_path: str = Field(
        default="Desktop",
        description="Home subdirectory allowed when allowed_paths is unset",
    )
    output_path: Optional[str] = Field(
        default=None,
        description="Default directory for merge output",
    )
    max_file_size: int = Field(
        default=DEFAULT_MAX_FILE_SIZE,
        gt=0,
        description="Maximum file size (bytes)",
    )
    allowed_extensions: Optional[str] = Field(
        default=None,
        description="Comma-separated extensions, 'all' for no restriction",
    )
    follow_symlinks: bool = Field(
        default=False,
        description="Allow symlinks pointing outside the allowed paths",
    )

    server_name: str = Field(default="local-search-mcp-server")
    server_version: str = Field(default="1.0.0")
    server_description: str = Field(
        default="MCP server for searching and accessing the local filesystem"
    )

    log_level: str = Field(default="INFO")
    log_file: Optional[str] = Field(default=None)

    @field_validator("allowed_paths", "allowed_extensions", mode="before")
    @classmethod
    def join_lists(cls, v):
        """Accept YAML/JSON lists as well as comma-separated strings."""
        if isinstance(v, (list, tuple)):
            return ",".join(str(item) for item in v)
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()

    def parse_allowed_paths(self) -> list[Path]:
        """Allowed directories as configured, before existence checks."""
        if not self.allowed_paths:
            home = Path.home()
            return [
                normalize_path(home / self.default_base_path),
                normalize_path(home / "Documents"),
                normalize_path(home / "Downloads"),
            ]
        return [resolve_user_path(path) for path in _split_list(self.allowed_paths)]

    def parse_allowed_extensions(self) -> list[str]:
        """Extensions with leading dots; empty list means no restriction."""
        if self.allowed_extensions is None:
            return list(DEFAULT_EXTENSIONS)
        if self.allowed_extensions.strip().lower() == "all":
            return []
        return [
            ext if ext.startswith(".") else f".{ext}"
            for ext in _split_list(self.allowed_extensions)
        ]

    def to_access_config(self) -> FileSystemAccessConfig:
        """
        Build the filesystem access configuration.

        Missing directories are dropped with a warning.

        Raises:
            ValueError: If none of the allowed paths exist
        """
        valid, invalid = [], []
        for path in self.parse_allowed_paths():
            (valid if path.is_dir() else invalid).append(path)

        if not valid:
            raise ValueError(
                "No usable allowed paths. Invalid paths: "
                + ", ".join(str(p) for p in invalid)
            )
        if invalid:
            logger.warning(
                "Some allowed paths are not accessible: "
                + ", ".join(str(p) for p in invalid)
            )

        output_dir = None
        if self.output_path:
            output_dir = resolve_user_path(self.output_path)
            if not output_dir.is_dir():
                logger.warning(
                    f"Output path does not exist, using default: {valid[0]}"
                )
                output_dir = None
        if output_dir is None:
            logger.info(f"Output path set to default: {valid[0]}")

        config = FileSystemAccessConfig(
            allowed_directories=valid,
            max_file_size_bytes=self.max_file_size,
            allowed_extensions=self.parse_allowed_extensions(),
            default_output_directory=output_dir,
            follow_symlinks=self.follow_symlinks,
        )
        logger.info(f"{len(config.allowed_directories)} allowed paths configured")
        return config

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ServerSettings":
        """
        Load settings from a YAML or JSON file.

        File format (YAML):
            ```yaml
            allowed_paths:
              - ~/Documents
              - /srv/shared
            output_path: ~/Documents/merged
            max_file_size: 10485760
            allowed_extensions: all
            log_file: ~/.local-search-mcp/server.log
            ```

        Raises:
            FileNotFoundError: If the settings file doesn't exist
        """
        path = Path(path).expanduser().resolve()

        if not path.exists():
            raise FileNotFoundError(f"Settings file not found: {path}")

        content = path.read_text()

        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(content)
        elif path.suffix == ".json":
            data = json.loads(content)
        else:
            # Try YAML first, then JSON
            try:
                data = yaml.safe_load(content)
            except yaml.YAMLError:
                data = json.loads(content)

        return cls.from_dict(data or {})

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ServerSettings":
        return cls(**data)

    def __str__(self) -> str:
        return (
            f"ServerSettings(name={self.server_name}, "
            f"allowed_paths={self.allowed_paths!r})"
        )
