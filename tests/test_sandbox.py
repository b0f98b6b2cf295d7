"""
Tests for the path sandbox, file guard and access configuration.
"""

import logging
import os

import pytest

from local_search_mcp.filesystem import (
    FileAccessDeniedError,
    FileGuard,
    FileSizeLimitExceededError,
    FileSystemAccessConfig,
    PathNotFoundError,
    PathSandbox,
)
from local_search_mcp.filesystem.models import EntryKind


class TestFileSystemAccessConfig:
    """Test FileSystemAccessConfig."""

    def test_default_config(self):
        """Test default configuration."""
        config = FileSystemAccessConfig()
        assert config.allowed_directories == []
        assert config.max_file_size_bytes == 10 * 1024 * 1024
        assert config.allowed_extensions == []
        assert config.follow_symlinks is False

    def test_directories_are_normalized_and_deduplicated(self, root):
        config = FileSystemAccessConfig(
            allowed_directories=[root, str(root / "sub" / ".."), root]
        )
        assert config.allowed_directories == [root]

    def test_missing_directory_rejected(self, tmp_path):
        with pytest.raises(ValueError, match="does not exist"):
            FileSystemAccessConfig(allowed_directories=[tmp_path / "missing"])

    def test_extension_normalization(self):
        """Test that extensions are normalized with dots."""
        config = FileSystemAccessConfig(allowed_extensions=["py", ".MD", "py"])
        assert config.allowed_extensions == [".py", ".md"]

    def test_default_output_directory_is_first_root(self, root, tmp_path):
        second = tmp_path / "second"
        second.mkdir()
        config = FileSystemAccessConfig(allowed_directories=[root, second])
        assert config.default_output_directory == root

    def test_add_allowed_directory(self, config, outside, tmp_path):
        assert config.add_allowed_directory(outside) is True
        assert outside in config.allowed_directories

        # Already present and missing directories are not added
        assert config.add_allowed_directory(outside) is False
        assert config.add_allowed_directory(tmp_path / "missing") is False
        assert len(config.allowed_directories) == 2


class TestPathSandbox:
    """Test PathSandbox."""

    def test_root_itself_is_allowed(self, sandbox, root):
        assert sandbox.validate(root) == root

    def test_descendant_is_allowed(self, sandbox, root):
        target = root / "a" / "b.txt"
        assert sandbox.validate(str(target)) == target

    def test_outside_path_denied(self, sandbox, outside):
        with pytest.raises(FileAccessDeniedError):
            sandbox.validate(outside / "secret.txt")

    def test_system_path_denied(self, sandbox):
        with pytest.raises(FileAccessDeniedError):
            sandbox.validate("/etc/passwd")

    def test_dotdot_escape_denied(self, sandbox, root):
        with pytest.raises(FileAccessDeniedError):
            sandbox.validate(f"{root}/../outside/secret.txt")

    def test_dotdot_inside_root_collapses(self, sandbox, root):
        assert sandbox.validate(f"{root}/a/../b.txt") == root / "b.txt"

    def test_sibling_with_common_prefix_denied(self, sandbox, root, tmp_path):
        sibling = tmp_path / "allowed-other"
        sibling.mkdir()
        with pytest.raises(FileAccessDeniedError):
            sandbox.validate(sibling / "x.txt")

    def test_name_starting_with_dots_is_not_traversal(self, sandbox, root):
        assert sandbox.validate(root / "..notes") == root / "..notes"

    def test_validation_is_idempotent(self, sandbox, root):
        first = sandbox.validate(f"{root}/x/./y/../z.txt")
        assert sandbox.validate(first) == first

    def test_relative_path_resolves_against_home(self, sandbox, root, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(root.parent))
        monkeypatch.chdir(tmp_path)
        assert sandbox.validate("allowed/notes.txt") == root / "notes.txt"

    def test_relative_path_falls_back_to_cwd(self, sandbox, root, monkeypatch, outside):
        monkeypatch.setenv("HOME", str(outside))
        monkeypatch.chdir(root)
        assert sandbox.validate("notes.txt") == root / "notes.txt"

    def test_relative_parent_traversal_denied(self, sandbox, root, monkeypatch):
        monkeypatch.setenv("HOME", str(root))
        monkeypatch.chdir(root)
        with pytest.raises(FileAccessDeniedError):
            sandbox.validate("../../etc/passwd")

    def test_empty_path_denied(self, sandbox):
        with pytest.raises(FileAccessDeniedError):
            sandbox.validate("")

    def test_symlink_escape_denied(self, sandbox, root, outside):
        link = root / "link.txt"
        os.symlink(outside / "secret.txt", link)
        with pytest.raises(FileAccessDeniedError, match="Symbolic link"):
            sandbox.validate(link)

    def test_symlinked_directory_escape_denied_for_new_files(self, sandbox, root, outside):
        os.symlink(outside, root / "escape")
        with pytest.raises(FileAccessDeniedError):
            sandbox.validate(root / "escape" / "new.txt")

    def test_symlink_inside_root_allowed(self, sandbox, root):
        (root / "real.txt").write_text("hi")
        os.symlink(root / "real.txt", root / "alias.txt")
        assert sandbox.validate(root / "alias.txt") == root / "alias.txt"

    def test_follow_symlinks_allows_escape(self, root, outside):
        config = FileSystemAccessConfig(allowed_directories=[root], follow_symlinks=True)
        link = root / "link.txt"
        os.symlink(outside / "secret.txt", link)
        assert PathSandbox(config).validate(link) == link

    def test_is_allowed(self, sandbox, root, outside):
        assert sandbox.is_allowed(root / "x.txt") == (True, "Path is allowed")
        is_allowed, reason = sandbox.is_allowed(outside)
        assert is_allowed is False
        assert "not within allowed directories" in reason

    def test_runtime_root_becomes_accessible(self, config, sandbox, outside):
        with pytest.raises(FileAccessDeniedError):
            sandbox.validate(outside / "secret.txt")
        config.add_allowed_directory(outside)
        assert sandbox.validate(outside / "secret.txt") == outside / "secret.txt"


class TestFileGuard:
    """Test FileGuard."""

    def test_stat_file(self, guard, root):
        target = root / "notes.txt"
        target.write_text("hello")

        descriptor = guard.stat(target)
        assert descriptor.kind == EntryKind.FILE
        assert descriptor.path == target
        assert descriptor.size == 5
        assert descriptor.extension == ".txt"

    def test_stat_directory_skips_size_check(self, guard, root):
        descriptor = guard.stat(root)
        assert descriptor.is_directory
        assert descriptor.extension is None

    def test_stat_missing(self, guard, root):
        with pytest.raises(PathNotFoundError):
            guard.stat(root / "missing.txt")

    def test_stat_outside(self, guard, outside):
        with pytest.raises(FileAccessDeniedError):
            guard.stat(outside / "secret.txt")

    def test_stat_too_large(self, guard, root):
        large = root / "large.txt"
        large.write_text("x" * 3000)  # Exceeds 2000 byte limit

        with pytest.raises(FileSizeLimitExceededError) as exc_info:
            guard.stat(large)
        assert exc_info.value.size == 3000
        assert exc_info.value.limit == 2000

    def test_unlisted_extension_only_warns(self, root, caplog):
        config = FileSystemAccessConfig(allowed_directories=[root], allowed_extensions=[".md"])
        guard = FileGuard(config, PathSandbox(config))
        target = root / "program.exe"
        target.write_text("binary-ish")

        with caplog.at_level(logging.WARNING):
            descriptor = guard.stat(target)

        assert descriptor.size == 10
        assert "Extension not in allow-list" in caplog.text

    def test_prepare_write(self, guard, root):
        target = root / "new.txt"
        assert guard.prepare_write(target, "content") == target
        assert not target.exists()

    def test_prepare_write_counts_utf8_bytes(self, guard, root):
        # 700 characters, 2100 bytes in UTF-8
        with pytest.raises(FileSizeLimitExceededError):
            guard.prepare_write(root / "big.txt", "한" * 700)

    def test_prepare_write_outside(self, guard, outside):
        with pytest.raises(FileAccessDeniedError):
            guard.prepare_write(outside / "x.txt", "data")
