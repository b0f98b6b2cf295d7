"""
Shared fixtures for the filesystem tests.
"""

from pathlib import Path

import pytest

from local_search_mcp.filesystem import (
    AggregateOperations,
    FileGuard,
    FileOperations,
    FileSystemAccessConfig,
    FileSystemTools,
    PathSandbox,
    TraversalEngine,
)


@pytest.fixture
def root(tmp_path) -> Path:
    """An allowed directory."""
    allowed = tmp_path / "allowed"
    allowed.mkdir()
    return allowed


@pytest.fixture
def outside(tmp_path) -> Path:
    """A directory next to the allowed one, outside the sandbox."""
    other = tmp_path / "outside"
    other.mkdir()
    (other / "secret.txt").write_text("top secret")
    return other


@pytest.fixture
def config(root):
    """Create a test filesystem configuration."""
    return FileSystemAccessConfig(
        allowed_directories=[root],
        max_file_size_bytes=2000,
    )


@pytest.fixture
def sandbox(config):
    return PathSandbox(config)


@pytest.fixture
def guard(config, sandbox):
    return FileGuard(config, sandbox)


@pytest.fixture
def traversal(sandbox):
    return TraversalEngine(sandbox)


@pytest.fixture
def ops(config):
    """Create a FileOperations instance."""
    return FileOperations(config)


@pytest.fixture
def aggregate(ops):
    """Create an AggregateOperations instance."""
    return AggregateOperations(ops)


@pytest.fixture
def tools(config):
    """Create a FileSystemTools instance."""
    return FileSystemTools(config)
