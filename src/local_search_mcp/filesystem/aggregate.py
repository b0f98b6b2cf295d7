"""
Multi-file operations: recursive search, merges and directory summaries.
"""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from local_search_mcp.filesystem.exceptions import (
    FileSystemError,
    FileSystemIOError,
    NoFilesToMergeError,
    NoMatchError,
    PathNotFoundError,
)
from local_search_mcp.filesystem.guard import describe
from local_search_mcp.filesystem.models import (
    ContentMatch,
    FileDescriptor,
    FilesSummary,
    FileSummaryEntry,
    MergeResult,
    MergeSpec,
    SearchMatch,
    SearchReport,
    SortOrder,
)
from local_search_mcp.filesystem.operations import FileOperations
from local_search_mcp.filesystem.patterns import DEFAULT_PATTERN, compile_pattern
from local_search_mcp.filesystem.traversal import TraversalEngine

logger = logging.getLogger(__name__)

# Files at or above this size are matched by name only
CONTENT_SEARCH_LIMIT_BYTES = 1024 * 1024
EXCERPT_LENGTH = 100
DEFAULT_SEPARATOR = "=" * 80


class AggregateOperations:
    """
    Search, merge and summary operations built on FileOperations and the
    traversal engine.

    Usage:
        ops = FileOperations(config)
        aggregate = AggregateOperations(ops)

        report = aggregate.search_files("~/Documents", "invoice", search_content=True)
        for match in report.matches:
            print(match.relative_path)
    """

    def __init__(self, operations: FileOperations, traversal: Optional[TraversalEngine] = None):
        """
        Initialize aggregate operations.

        Args:
            operations: Single-file operations sharing the same sandbox
            traversal: Directory walker (created from the sandbox if omitted)
        """
        self.operations = operations
        self.config = operations.config
        self.sandbox = operations.sandbox
        self.guard = operations.guard
        self.traversal = traversal or TraversalEngine(self.sandbox)

    def search_files(
        self,
        directory: Union[str, Path],
        query: str,
        search_content: bool = False,
    ) -> SearchReport:
        """
        Recursively search a directory by file name and, optionally, content.

        The file name is always compared case-insensitively against the query.
        Content is only scanned for files whose name did not match and which
        are smaller than 1 MiB. Files that cannot be read contribute no
        content matches.

        Args:
            directory: Directory to search
            query: Substring to look for (case-insensitive)
            search_content: Also search inside files

        Returns:
            SearchReport with one SearchMatch per matching file
        """
        if not query:
            raise ValueError("Search query must not be empty")

        root = self._validate_directory(directory)
        needle = query.lower()
        report = SearchReport(directory=root, query=query, search_content=search_content)

        def visit(path: Path, relative_path: str) -> None:
            name_matched = needle in path.name.lower()
            content_matches = []
            if search_content and not name_matched:
                content_matches = self._search_content(path, needle)
            if name_matched or content_matches:
                report.matches.append(
                    SearchMatch(
                        relative_path=relative_path,
                        path=path,
                        name_matched=name_matched,
                        content_matches=content_matches,
                    )
                )

        self.traversal.walk(root, visit)
        logger.info(f"Search for '{query}' in {root} found {len(report.matches)} files")
        return report

    def merge_files(
        self,
        paths: list[Union[str, Path]],
        output_path: Optional[Union[str, Path]] = None,
        separator: Optional[str] = None,
    ) -> MergeResult:
        """
        Concatenate several files into one output file.

        Each file is preceded by a header with its name and path. Directories
        in ``paths`` are skipped with a warning; any other invalid path fails
        the whole merge.

        Args:
            paths: Files to merge, in output order
            output_path: Target file (defaults to a timestamped file in the
                default output directory)
            separator: Header rule (defaults to 80 '=' characters)

        Raises:
            NoFilesToMergeError: If no files are given or only directories remain
        """
        if not paths:
            raise NoFilesToMergeError("No files given to merge")

        separator = DEFAULT_SEPARATOR if separator is None else separator

        files: list[FileDescriptor] = []
        skipped: list[Path] = []
        for path in paths:
            descriptor = self.guard.stat(path)
            if descriptor.is_directory:
                logger.warning(f"Skipping directory in merge: {descriptor.path}")
                skipped.append(descriptor.path)
                continue
            files.append(descriptor)

        if not files:
            raise NoFilesToMergeError("Nothing to merge after skipping directories")

        sections = []
        for descriptor in files:
            content = self.operations.read_file(descriptor.path).content
            sections.append(
                f"{separator}\n"
                f"File: {descriptor.path.name}\n"
                f"Path: {descriptor.path}\n"
                f"{separator}\n\n"
                f"{content}"
            )
        merged = "\n\n".join(sections)

        target = output_path if output_path else self._default_output_path()
        spec = MergeSpec(
            source_paths=[descriptor.path for descriptor in files],
            output_path=self.sandbox.validate(target),
            separator=separator,
        )
        write = self.operations.write_file(spec.output_path, merged)

        logger.info(f"Merged {len(files)} files into {write.path}")
        return MergeResult(spec=spec, merged=spec.source_paths, skipped=skipped, write=write)

    def merge_directory_files(
        self,
        directory: Union[str, Path],
        pattern: Optional[str] = None,
        output_path: Optional[Union[str, Path]] = None,
        separator: Optional[str] = None,
        sort_by: Union[str, SortOrder] = SortOrder.NAME,
    ) -> MergeResult:
        """
        Merge the files of one directory selected by a filename pattern.

        Only immediate files are considered. ``sort_by="date"`` orders them by
        modification time, oldest first; the default orders them by name.

        Raises:
            NoMatchError: If the pattern matches no file
            ValueError: If sort_by is not 'name' or 'date'
        """
        order = SortOrder(sort_by.lower() if sort_by else SortOrder.NAME)
        pattern = pattern or DEFAULT_PATTERN

        root = self._validate_directory(directory)
        descriptors = self._matching_files(root, pattern)
        if order == SortOrder.DATE:
            descriptors.sort(key=lambda d: (d.modified_at, d.path.name))
        else:
            descriptors.sort(key=lambda d: d.path.name)

        return self.merge_files(
            [descriptor.path for descriptor in descriptors],
            output_path=output_path,
            separator=separator,
        )

    def get_files_summary(
        self, directory: Union[str, Path], pattern: Optional[str] = None
    ) -> FilesSummary:
        """
        Summarise the files of one directory selected by a filename pattern.

        Returns:
            FilesSummary with counts, total size, date range and the files
            sorted by size, largest first

        Raises:
            NoMatchError: If the pattern matches no file
        """
        pattern = pattern or DEFAULT_PATTERN
        root = self._validate_directory(directory)
        descriptors = self._matching_files(root, pattern)

        entries = sorted(
            (
                FileSummaryEntry(
                    name=d.path.name,
                    path=d.path,
                    size=d.size,
                    modified_at=d.modified_at,
                )
                for d in descriptors
            ),
            key=lambda entry: entry.size,
            reverse=True,
        )
        modified = [d.modified_at for d in descriptors]

        return FilesSummary(
            directory=root,
            pattern=pattern,
            file_count=len(entries),
            total_size=sum(entry.size for entry in entries),
            oldest=min(modified),
            newest=max(modified),
            files=entries,
        )

    def _matching_files(self, root: Path, pattern: str) -> list[FileDescriptor]:
        """Immediate files of ``root`` whose name matches ``pattern``."""
        regex = compile_pattern(pattern)

        descriptors = []
        for path in self.traversal.list_files(root):
            if not regex.fullmatch(path.name):
                continue
            # Size policy is left to the caller; a summary counts every file
            try:
                descriptors.append(describe(path, path.stat()))
            except OSError as e:
                logger.warning(f"Skipping {path}: {e.strerror or e}")

        if not descriptors:
            raise NoMatchError(str(root), pattern)
        return descriptors

    def _search_content(self, path: Path, needle: str) -> list[ContentMatch]:
        try:
            descriptor = self.guard.stat(path)
            if descriptor.size >= CONTENT_SEARCH_LIMIT_BYTES:
                return []
            content = self.operations.read_file(path).content
        except FileSystemError as e:
            logger.debug(f"Content search skipped for {path}: {e}")
            return []

        matches = []
        for line_number, line in enumerate(content.split("\n"), start=1):
            if needle in line.lower():
                matches.append(
                    ContentMatch(line_number=line_number, excerpt=line.strip()[:EXCERPT_LENGTH])
                )
        return matches

    def _validate_directory(self, directory: Union[str, Path]) -> Path:
        resolved = self.sandbox.validate(directory)
        if not resolved.exists():
            raise PathNotFoundError(str(directory))
        if not resolved.is_dir():
            raise FileSystemIOError(str(directory), "Path is not a directory")
        return resolved

    def _default_output_path(self) -> Path:
        output_dir = self.config.default_output_directory
        if output_dir is None:
            raise FileSystemIOError("", "No default output directory configured")
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        target = output_dir / f"merged_{timestamp}.txt"
        counter = 1
        while os.path.lexists(target):
            target = output_dir / f"merged_{timestamp}_{counter}.txt"
            counter += 1
        return target
