"""
Directory traversal shared by search, pattern merges and summaries.
"""

import logging
import os
from pathlib import Path
from typing import Callable, Optional

from local_search_mcp.filesystem.sandbox import PathSandbox

logger = logging.getLogger(__name__)

# visit(absolute_path, path_relative_to_walk_root)
Visitor = Callable[[Path, str], None]


class TraversalEngine:
    """
    Sequential, depth-first directory walker.

    Every entry is re-checked against the sandbox before it is visited, so a
    symlink placed inside an allowed directory cannot lead the walk outside
    of it. Directories that cannot be listed are logged and skipped.

    Usage:
        engine = TraversalEngine(PathSandbox(config))
        engine.walk(root, lambda path, rel: print(rel))
    """

    def __init__(self, sandbox: PathSandbox):
        self.sandbox = sandbox

    def walk(self, root_dir: Path, visit: Visitor, recursive: bool = True) -> None:
        """
        Call ``visit`` for every regular file under ``root_dir``.

        Args:
            root_dir: Already validated directory to walk
            visit: Callback receiving the file path and its path relative to root_dir
            recursive: Descend into subdirectories
        """
        self._walk_directory(root_dir, root_dir, visit, recursive)

    def list_files(self, directory: Path) -> list[Path]:
        """Return the regular files directly inside ``directory``."""
        files: list[Path] = []
        self.walk(directory, lambda path, _: files.append(path), recursive=False)
        return files

    def _walk_directory(
        self, directory: Path, root: Path, visit: Visitor, recursive: bool
    ) -> None:
        entries = self._scan(directory)
        if entries is None:
            return

        for entry in entries:
            entry_path = directory / entry.name

            is_allowed, reason = self.sandbox.is_allowed(entry_path)
            if not is_allowed:
                logger.debug(f"Skipping {entry_path}: {reason}")
                continue

            try:
                if entry.is_dir(follow_symlinks=False):
                    if recursive:
                        self._walk_directory(entry_path, root, visit, recursive)
                    continue
                is_file = entry.is_file()
            except OSError as e:
                logger.warning(f"Cannot inspect {entry_path}: {e}")
                continue

            if is_file:
                visit(entry_path, entry_path.relative_to(root).as_posix())

    def _scan(self, directory: Path) -> Optional[list[os.DirEntry]]:
        """List a directory sorted by name, or None if it cannot be read."""
        try:
            with os.scandir(directory) as it:
                return sorted(it, key=lambda entry: entry.name)
        except OSError as e:
            logger.warning(f"Cannot read directory {directory}: {e.strerror or e}")
            return None
