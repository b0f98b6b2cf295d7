"""
Configuration for sandboxed filesystem access.
"""

import logging
import os
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

logger = logging.getLogger(__name__)

DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MiB


def normalize_path(path: Union[str, Path]) -> Path:
    """
    Make a path absolute and collapse ``.``/``..`` without touching the disk.

    Symbolic links are left as they are.
    """
    return Path(os.path.normpath(os.path.abspath(os.path.expanduser(str(path)))))


class FileSystemAccessConfig(BaseModel):
    """
    Access policy for the filesystem tools.

    ``allowed_directories`` is the set of roots no operation may leave.
    Roots are stored lexically normalised and must be existing directories.

    Usage:
        config = FileSystemAccessConfig(
            allowed_directories=[Path("~/Documents")],
            max_file_size_bytes=1_000_000,
        )
    """

    allowed_directories: list[Path] = Field(
        default_factory=list,
        description="Allowed root directories (absolute, existing)",
    )

    max_file_size_bytes: int = Field(
        default=DEFAULT_MAX_FILE_SIZE,
        gt=0,
        description="Maximum size of a file that can be read or written (bytes)",
    )

    allowed_extensions: list[str] = Field(
        default_factory=list,
        description="Advisory extension allow-list; empty means every extension. Include the dot, e.g., ['.py', '.md']",
    )

    default_output_directory: Optional[Path] = Field(
        default=None,
        description="Where merges are written when no output path is given (defaults to the first allowed directory)",
    )

    follow_symlinks: bool = Field(
        default=False,
        description="Allow symbolic links whose target lies outside the allowed directories (security risk if enabled)",
    )

    @field_validator("allowed_directories", mode="before")
    @classmethod
    def normalize_directories(cls, v):
        """Normalise, de-duplicate and check that every root is a directory."""
        if not v:
            return []
        roots: list[Path] = []
        for raw in v:
            root = normalize_path(raw)
            if not root.is_dir():
                raise ValueError(f"Allowed directory does not exist: {root}")
            if root not in roots:
                roots.append(root)
        return roots

    @field_validator("allowed_extensions", mode="before")
    @classmethod
    def normalize_extensions(cls, v):
        """Ensure extensions start with a dot and are lowercase."""
        if not v:
            return []
        normalized = []
        for ext in v:
            ext = ext.strip().lower()
            if not ext:
                continue
            if not ext.startswith("."):
                ext = f".{ext}"
            if ext not in normalized:
                normalized.append(ext)
        return normalized

    @field_validator("default_output_directory", mode="before")
    @classmethod
    def normalize_output_directory(cls, v):
        if v is None:
            return None
        return normalize_path(v)

    @model_validator(mode="after")
    def default_output_to_first_root(self) -> "FileSystemAccessConfig":
        """Fall back to the first allowed directory for merge output."""
        if self.default_output_directory is None and self.allowed_directories:
            self.default_output_directory = self.allowed_directories[0]
        return self

    def add_allowed_directory(self, path: Union[str, Path]) -> bool:
        """
        Append a root at runtime.

        Not safe under concurrent use; callers serialise root-set changes.

        Returns:
            True if the directory was added, False if it was missing or
            already present
        """
        root = normalize_path(path)
        if root in self.allowed_directories:
            return False
        if not root.is_dir():
            logger.warning(f"Cannot add allowed directory, not found: {root}")
            return False
        self.allowed_directories.append(root)
        logger.info(f"Added allowed directory: {root}")
        return True

    def is_extension_allowed(self, path: Path) -> bool:
        """Check the advisory extension list (empty list accepts everything)."""
        if not self.allowed_extensions:
            return True
        return path.suffix.lower() in self.allowed_extensions

    def __repr__(self) -> str:
        """Compact representation."""
        return (
            f"FileSystemAccessConfig("
            f"allowed_dirs={len(self.allowed_directories)}, "
            f"max_size={self.max_file_size_bytes})"
        )
