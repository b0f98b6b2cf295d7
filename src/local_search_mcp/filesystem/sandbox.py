"""
Path sandbox: canonicalises input paths and confines them to the allowed
directories.
"""

import logging
import os
import re
from pathlib import Path, PurePath
from typing import Union

from local_search_mcp.filesystem.config import FileSystemAccessConfig, normalize_path
from local_search_mcp.filesystem.exceptions import FileAccessDeniedError

logger = logging.getLogger(__name__)

_DRIVE_PATTERN = re.compile(r"^[A-Za-z]:")


class PathSandbox:
    """
    Validates that paths stay inside the configured allowed directories.

    Resolution is lexical: ``.`` and ``..`` are collapsed without consulting
    the filesystem. When a path exists, its real location must also lie inside
    an allowed directory unless ``follow_symlinks`` is enabled.

    Usage:
        sandbox = PathSandbox(config)
        path = sandbox.validate("Documents/notes.txt")
    """

    def __init__(self, config: FileSystemAccessConfig):
        """
        Initialize the sandbox.

        Args:
            config: Filesystem access configuration
        """
        self.config = config

    def validate(self, input_path: Union[str, Path]) -> Path:
        """
        Resolve a path and ensure it lies within an allowed directory.

        Args:
            input_path: Absolute path, home-relative path or cwd-relative path

        Returns:
            The absolute, lexically normalised path

        Raises:
            FileAccessDeniedError: If the path escapes every allowed directory
        """
        raw = str(input_path)
        if not raw.strip():
            raise FileAccessDeniedError(raw, "Empty path")

        candidate = self._resolve(raw)

        if not self._is_contained(candidate):
            logger.warning(f"Access denied to {candidate} (requested: {raw})")
            raise FileAccessDeniedError(raw, "Path is not within allowed directories")

        if not self.config.follow_symlinks and not self._is_real_path_contained(candidate):
            logger.warning(f"Access denied to {candidate}: symlink target escapes sandbox")
            raise FileAccessDeniedError(raw, "Symbolic link points outside allowed directories")

        return candidate

    def is_allowed(self, input_path: Union[str, Path]) -> tuple[bool, str]:
        """
        Check a path without raising.

        Returns:
            Tuple of (is_allowed, reason)
        """
        try:
            self.validate(input_path)
        except FileAccessDeniedError as e:
            return False, e.reason
        return True, "Path is allowed"

    def _resolve(self, raw: str) -> Path:
        expanded = os.path.expanduser(raw)
        if os.path.isabs(expanded) or _DRIVE_PATTERN.match(expanded):
            return normalize_path(expanded)

        # Short paths like "Documents/a.txt" resolve against home first
        home_based = normalize_path(os.path.join(os.path.expanduser("~"), expanded))
        if self._is_contained(home_based):
            return home_based
        return normalize_path(os.path.join(os.getcwd(), expanded))

    def _is_contained(self, candidate: Path) -> bool:
        return any(
            _is_within_directory(candidate, root)
            for root in self.config.allowed_directories
        )

    def _is_real_path_contained(self, candidate: Path) -> bool:
        if not os.path.lexists(candidate):
            # Nothing on disk yet (e.g. a write target); check the nearest
            # existing ancestor instead
            parent = candidate.parent
            while parent != parent.parent and not os.path.lexists(parent):
                parent = parent.parent
            candidate = parent
        real = Path(os.path.realpath(candidate))
        return any(
            _is_within_directory(real, Path(os.path.realpath(root)))
            for root in self.config.allowed_directories
        )


def _is_within_directory(path: PurePath, directory: PurePath) -> bool:
    """Check if path equals directory or is a lexical descendant of it."""
    try:
        path.relative_to(directory)
        return True
    except ValueError:
        return False
