"""Comparison of files and directories."""

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Optional, Union
import logging

from .diff import DiffEngine, DiffEntry, filter_entries
from .errors import LoadError
from .loaders import ValueLoader, is_supported
from .options import ComparisonOptions
from .value import join_paths

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info


def _collect_files(root: Path) -> Dict[str, Path]:
    """Map relative POSIX paths to loadable files below ``root``."""
    files = {}
    for path in sorted(root.rglob("*")):
        if not path.is_file():
            continue
        if not is_supported(path):
            _log_debug("Skipping unsupported file %s", path)
            continue
        files[path.relative_to(root).as_posix()] = path
    return files


class DirectoryDiff:
    """Compare two directory trees file by file."""

    def __init__(
        self,
        options: Optional[ComparisonOptions] = None,
        max_workers: Optional[int] = None,
    ):
        """
        Initialize directory differ.

        Args:
            options: Comparison options
            max_workers: Thread pool size, ``None`` for the executor default
        """
        self.options = options or ComparisonOptions()
        self.max_workers = max_workers
        self._loader = ValueLoader()
        # Filtering needs the full prefixed path, so it runs after merging.
        self._engine = DiffEngine(replace(self.options, path_filter=None))

    def diff(self, old_dir: Path, new_dir: Path) -> List[DiffEntry]:
        """
        Compute differences between two directories.

        Files are matched by relative path. Files present on one side only
        are reported as a single Added or Removed entry holding the whole
        file. Entry paths are nested under the relative file path and the
        result is ordered by relative path.

        Args:
            old_dir: Old/base directory
            new_dir: New directory

        Returns:
            List of diff entries

        Raises:
            LoadError: If any file fails to load
        """
        old_files = _collect_files(old_dir)
        new_files = _collect_files(new_dir)
        names = sorted(set(old_files) | set(new_files))

        results: Dict[str, List[DiffEntry]] = {}
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                executor.submit(
                    self._diff_file, name, old_files.get(name), new_files.get(name)
                ): name
                for name in names
            }
            try:
                for future in as_completed(futures):
                    results[futures[future]] = future.result()
            except BaseException:
                for future in futures:
                    future.cancel()
                raise

        entries = [entry for name in names for entry in results[name]]
        _log_info(
            "Compared %d files (%d only in old, %d only in new): %d entries",
            len(names),
            len(set(old_files) - set(new_files)),
            len(set(new_files) - set(old_files)),
            len(entries),
        )
        return filter_entries(entries, self.options.path_filter)

    def _diff_file(
        self,
        name: str,
        old_file: Optional[Path],
        new_file: Optional[Path],
    ) -> List[DiffEntry]:
        """Compare one matched pair of files."""
        if new_file is None:
            return [DiffEntry.removed(name, self._loader.load(old_file))]
        if old_file is None:
            return [DiffEntry.added(name, self._loader.load(new_file))]

        entries = self._engine.compare(
            self._loader.load(old_file), self._loader.load(new_file)
        )
        return [replace(entry, path=join_paths(name, entry.path)) for entry in entries]


def diff_paths(
    old_path: Union[str, Path],
    new_path: Union[str, Path],
    options: Optional[ComparisonOptions] = None,
    max_workers: Optional[int] = None,
) -> List[DiffEntry]:
    """
    Compare two files or two directories.

    Args:
        old_path: Path to old file or directory
        new_path: Path to new file or directory
        options: Comparison options
        max_workers: Thread pool size for directory comparisons

    Returns:
        List of diff entries

    Raises:
        LoadError: If a path is missing, unreadable or unsupported, or if a
            file is compared with a directory
    """
    old_path = Path(old_path)
    new_path = Path(new_path)

    for path in (old_path, new_path):
        if not path.exists():
            raise LoadError(path, "No such file or directory")

    if old_path.is_dir() and new_path.is_dir():
        return DirectoryDiff(options, max_workers).diff(old_path, new_path)

    if old_path.is_dir() or new_path.is_dir():
        dir_path = old_path if old_path.is_dir() else new_path
        raise LoadError(dir_path, "Cannot compare a file with a directory")

    loader = ValueLoader()
    old_value = loader.load(old_path)
    new_value = loader.load(new_path)
    return DiffEngine(options).compare(old_value, new_value)
