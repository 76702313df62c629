"""Tests for file and directory comparison."""

import json

import numpy as np
import pytest

from diffai.compare import DirectoryDiff, diff_paths
from diffai.diff import DiffEntry, DiffType
from diffai.errors import LoadError
from diffai.options import ComparisonOptions


def write_json(path, data):
    """Write ``data`` as JSON, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))
    return path


@pytest.fixture
def snapshot_dirs(tmp_path):
    """Two run directories with shared, changed and one-sided files."""
    old = tmp_path / "run1"
    new = tmp_path / "run2"

    write_json(old / "config.json", {"lr": 0.1, "epochs": 10})
    write_json(new / "config.json", {"lr": 0.2, "epochs": 10})

    write_json(old / "metrics" / "eval.json", {"acc": 0.9})
    write_json(new / "metrics" / "eval.json", {"acc": 0.9})

    write_json(old / "legacy.json", {"v": 1})
    write_json(new / "tokenizer.json", {"vocab": 100})

    (old / "weights").mkdir()
    (new / "weights").mkdir()
    np.save(old / "weights" / "w.npy", np.array([1.0, 2.0, 3.0]))
    np.save(new / "weights" / "w.npy", np.array([1.0, 2.5, 3.0]))

    (old / "README.md").write_text("ignored")
    (new / "NOTES.txt").write_text("ignored")
    return old, new


class TestDiffPathsFiles:
    """Tests for diff_paths on files."""

    def test_files(self, tmp_path):
        old = write_json(tmp_path / "a.json", {"a": 1, "b": 2})
        new = write_json(tmp_path / "b.json", {"a": 1, "b": 3})
        assert diff_paths(old, new) == [DiffEntry.modified("b", 2.0, 3.0)]

    def test_files_as_strings(self, tmp_path):
        old = write_json(tmp_path / "a.json", {"value": 1.0})
        new = write_json(tmp_path / "b.json", {"value": 1.0001})
        options = ComparisonOptions(epsilon=0.001)
        assert diff_paths(str(old), str(new), options) == []

    def test_mixed_formats(self, tmp_path):
        old = write_json(tmp_path / "w.json", [[1, 2], [3, 4]])
        new = tmp_path / "w.npy"
        np.save(new, np.array([[1.0, 2.0], [3.0, 5.0]]))
        assert diff_paths(old, new) == [DiffEntry.modified("[1][1]", 4.0, 5.0)]

    def test_missing_path(self, tmp_path):
        old = write_json(tmp_path / "a.json", {})
        with pytest.raises(LoadError) as excinfo:
            diff_paths(old, tmp_path / "missing.json")
        assert excinfo.value.path.endswith("missing.json")

    def test_unsupported_file(self, tmp_path):
        old = tmp_path / "a.txt"
        new = tmp_path / "b.txt"
        old.write_text("a")
        new.write_text("b")
        with pytest.raises(LoadError, match="Unsupported format"):
            diff_paths(old, new)

    def test_file_and_directory(self, tmp_path):
        old = write_json(tmp_path / "a.json", {})
        new = tmp_path / "dir"
        new.mkdir()
        with pytest.raises(LoadError, match="directory"):
            diff_paths(old, new)


class TestDiffPathsDirectories:
    """Tests for diff_paths on directories."""

    def test_directories(self, snapshot_dirs):
        old, new = snapshot_dirs
        entries = diff_paths(old, new)
        assert entries == [
            DiffEntry.modified("config.json.lr", 0.1, 0.2),
            DiffEntry.removed("legacy.json", {"v": 1.0}),
            DiffEntry.added("tokenizer.json", {"vocab": 100.0}),
            DiffEntry.modified("weights/w.npy[1]", 2.0, 2.5),
        ]

    def test_order_independent_of_workers(self, snapshot_dirs):
        old, new = snapshot_dirs
        assert diff_paths(old, new, max_workers=1) == diff_paths(old, new, max_workers=8)

    def test_path_filter_on_full_path(self, snapshot_dirs):
        old, new = snapshot_dirs
        options = ComparisonOptions(path_filter="weights/w.npy")
        assert diff_paths(old, new, options) == [
            DiffEntry.modified("weights/w.npy[1]", 2.0, 2.5)
        ]

    def test_epsilon_applies_per_file(self, snapshot_dirs):
        old, new = snapshot_dirs
        entries = diff_paths(old, new, ComparisonOptions(epsilon=1.0))
        assert [e.diff_type for e in entries] == [DiffType.REMOVED, DiffType.ADDED]

    def test_identical_directories(self, snapshot_dirs):
        old, _ = snapshot_dirs
        assert diff_paths(old, old) == []

    def test_empty_directories(self, tmp_path):
        (tmp_path / "a").mkdir()
        (tmp_path / "b").mkdir()
        assert diff_paths(tmp_path / "a", tmp_path / "b") == []

    def test_corrupt_file_aborts(self, snapshot_dirs):
        old, new = snapshot_dirs
        (new / "config.json").write_text("{broken")
        with pytest.raises(LoadError) as excinfo:
            diff_paths(old, new)
        assert excinfo.value.path.endswith("config.json")

    def test_whole_file_root_value(self, tmp_path):
        old = tmp_path / "a"
        new = tmp_path / "b"
        write_json(old / "x.json", 1)
        write_json(new / "x.json", "one")
        assert diff_paths(old, new) == [DiffEntry.type_changed("x.json", 1.0, "one")]


class TestDirectoryDiff:
    """Tests for DirectoryDiff."""

    def test_defaults(self):
        differ = DirectoryDiff()
        assert differ.options == ComparisonOptions()
        assert differ.max_workers is None

    def test_keeps_ignore_rules(self, tmp_path):
        old = tmp_path / "a"
        new = tmp_path / "b"
        write_json(old / "m.json", {"step": 1, "_time": 1})
        write_json(new / "m.json", {"step": 1, "_time": 2})
        differ = DirectoryDiff(ComparisonOptions(ignore_keys_regex="^_", path_filter="m.json"))
        assert differ.diff(old, new) == []
