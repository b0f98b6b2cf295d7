"""
Result records produced by the filesystem operations.

All records are created per call and discarded once the response is built.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional


class EntryKind(str, Enum):
    """Type of a filesystem entry."""

    FILE = "file"
    DIRECTORY = "directory"


class SortOrder(str, Enum):
    """Ordering of files selected for a directory merge."""

    NAME = "name"
    DATE = "date"


@dataclass(frozen=True)
class FileDescriptor:
    """Stat metadata for a validated path."""

    kind: EntryKind
    path: Path
    size: int
    modified_at: datetime
    created_at: datetime
    accessed_at: datetime
    extension: Optional[str] = None

    @property
    def is_directory(self) -> bool:
        return self.kind == EntryKind.DIRECTORY


@dataclass
class DirectoryEntry:
    """One immediate child of a listed directory."""

    name: str
    kind: EntryKind
    size: Optional[int]
    modified_at: datetime
    extension: Optional[str] = None


@dataclass
class DirectoryCreated:
    path: Path
    created: bool


@dataclass
class FileContent:
    path: Path
    content: str
    line_count: int
    char_count: int
    size: int


@dataclass
class WriteResult:
    path: Path
    size: int
    modified_at: datetime


@dataclass
class DeleteOutcome:
    """Per-path result of a batch delete."""

    path: str
    success: bool
    error: Optional[str] = None
    error_type: Optional[str] = None


@dataclass
class Permissions:
    readable: bool
    writable: bool
    executable: bool

    def __str__(self) -> str:
        return (
            ("R" if self.readable else "-")
            + ("W" if self.writable else "-")
            + ("X" if self.executable else "-")
        )


@dataclass
class FileInfo:
    descriptor: FileDescriptor
    permissions: Permissions

    @property
    def name(self) -> str:
        return self.descriptor.path.name


@dataclass
class ContentMatch:
    line_number: int
    excerpt: str


@dataclass
class SearchMatch:
    """A file that matched a search by name or by content."""

    relative_path: str
    path: Path
    name_matched: bool
    content_matches: list[ContentMatch] = field(default_factory=list)


@dataclass
class SearchReport:
    directory: Path
    query: str
    search_content: bool
    matches: list[SearchMatch] = field(default_factory=list)


@dataclass
class MergeSpec:
    """Describes one merge invocation."""

    source_paths: list[Path]
    output_path: Path
    separator: str


@dataclass
class MergeResult:
    spec: MergeSpec
    merged: list[Path]
    skipped: list[Path]
    write: WriteResult


@dataclass
class FileSummaryEntry:
    name: str
    path: Path
    size: int
    modified_at: datetime


@dataclass
class FilesSummary:
    directory: Path
    pattern: str
    file_count: int
    total_size: int
    oldest: datetime
    newest: datetime
    files: list[FileSummaryEntry] = field(default_factory=list)


def to_jsonable(value: Any) -> Any:
    """Convert result records into JSON-serialisable structures."""
    if hasattr(value, "__dataclass_fields__"):
        return to_jsonable(asdict(value))
    if isinstance(value, dict):
        return {key: to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Path):
        return str(value)
    return value
