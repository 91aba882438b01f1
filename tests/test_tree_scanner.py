"""
Unit Tests for Tree Scanner

Author: JobSync Project
License: MIT
"""

import os
import pytest

from jobsync.config.schema import normalize_root
from jobsync.sync_engine.tree_scanner import EntryKind, scan_tree


@pytest.fixture
def root(tmp_path):
    base = tmp_path / "tree"
    base.mkdir()
    return base


def relative_paths(entries):
    return sorted(entry.relative_path for entry in entries)


class TestScanTree:
    """Test suite for scan_tree."""

    def test_lists_files_and_directories(self, root):
        (root / "a" / "b").mkdir(parents=True)
        (root / "a" / "b" / "f.txt").write_text("12345")
        (root / "top.txt").write_text("x")

        snapshot = scan_tree(normalize_root(str(root)))

        assert relative_paths(snapshot.directories) == ["a", os.path.join("a", "b")]
        assert relative_paths(snapshot.files) == [os.path.join("a", "b", "f.txt"), "top.txt"]
        nested = next(e for e in snapshot.files if e.relative_path.endswith("f.txt"))
        assert nested.kind is EntryKind.FILE
        assert nested.size == 5
        assert snapshot.path_of(nested) == str(root / "a" / "b" / "f.txt")

    def test_dangling_symlink_listed_as_file(self, root, tmp_path):
        os.symlink(tmp_path / "nowhere", root / "broken")

        snapshot = scan_tree(normalize_root(str(root)))

        assert relative_paths(snapshot.files) == ["broken"]
        assert snapshot.directories == []

    def test_directory_symlink_not_descended(self, root, tmp_path):
        target = tmp_path / "target"
        target.mkdir()
        (target / "inner.txt").write_text("x")
        os.symlink(target, root / "link", target_is_directory=True)

        snapshot = scan_tree(normalize_root(str(root)))

        assert relative_paths(snapshot.directories) == ["link"]
        assert snapshot.files == []

    def test_unlistable_directory_raises_by_default(self, root, monkeypatch):
        (root / "locked").mkdir()
        real_scandir = os.scandir
        locked = str(root / "locked")

        def guarded(path=".", *args, **kwargs):
            if isinstance(path, str) and os.path.normpath(path) == locked:
                raise PermissionError(13, "Permission denied", path)
            return real_scandir(path, *args, **kwargs)

        monkeypatch.setattr(os, "scandir", guarded)

        with pytest.raises(PermissionError):
            scan_tree(normalize_root(str(root)))

        errors = []
        (root / "open.txt").write_text("x")
        snapshot = scan_tree(normalize_root(str(root)), onerror=errors.append)

        assert len(errors) == 1
        assert errors[0].filename == locked
        assert relative_paths(snapshot.files) == ["open.txt"]
