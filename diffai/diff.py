"""Structural diffing of canonical values."""

from dataclasses import dataclass
from enum import Enum
from itertools import islice
from typing import Any, Dict, Iterable, List, Mapping, Optional
import logging
import math

import numpy as np

from .errors import ConfigError
from .options import ComparisonOptions
from .value import (
    Value,
    ValueKind,
    join_index,
    join_key,
    kind_of,
    to_value,
)

_log = logging.getLogger(__name__)

_log_debug = _log.debug


class DiffType(Enum):
    """Type of change between two values."""

    ADDED = "Added"
    REMOVED = "Removed"
    MODIFIED = "Modified"
    TYPE_CHANGED = "TypeChanged"


@dataclass
class DiffEntry:
    """
    A single change at a path.

    ``Added`` entries carry only ``new_value`` and ``Removed`` entries only
    ``old_value``. Since ``None`` is itself a value, presence follows from
    ``diff_type``.
    """

    diff_type: DiffType
    path: str
    old_value: Any = None
    new_value: Any = None

    def __post_init__(self):
        if self.diff_type is DiffType.ADDED and self.old_value is not None:
            raise ValueError("Added entries carry no old_value")
        if self.diff_type is DiffType.REMOVED and self.new_value is not None:
            raise ValueError("Removed entries carry no new_value")

    @classmethod
    def added(cls, path: str, value: Value) -> "DiffEntry":
        return cls(DiffType.ADDED, path, new_value=value)

    @classmethod
    def removed(cls, path: str, value: Value) -> "DiffEntry":
        return cls(DiffType.REMOVED, path, old_value=value)

    @classmethod
    def modified(cls, path: str, old: Value, new: Value) -> "DiffEntry":
        return cls(DiffType.MODIFIED, path, old, new)

    @classmethod
    def type_changed(cls, path: str, old: Value, new: Value) -> "DiffEntry":
        return cls(DiffType.TYPE_CHANGED, path, old, new)

    @property
    def has_old_value(self) -> bool:
        return self.diff_type is not DiffType.ADDED

    @property
    def has_new_value(self) -> bool:
        return self.diff_type is not DiffType.REMOVED

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire dictionary shape."""
        result: Dict[str, Any] = {
            "diffType": self.diff_type.value,
            "path": self.path,
        }
        if self.has_old_value:
            result["oldValue"] = self.old_value
        if self.has_new_value:
            result["newValue"] = self.new_value
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DiffEntry":
        """
        Parse the wire dictionary shape produced by ``to_dict``.

        Args:
            data: Entry dictionary

        Returns:
            The entry, with values converted to canonical form

        Raises:
            ConfigError: If the type is unknown or a required field is missing
        """
        if not isinstance(data, Mapping):
            raise ConfigError(f"Diff entry must be an object, got {type(data).__name__}")
        try:
            diff_type = DiffType(data.get("diffType"))
        except ValueError:
            raise ConfigError(
                f"Invalid diff result type: {data.get('diffType')!r}"
            ) from None
        path = data.get("path")
        if not isinstance(path, str):
            raise ConfigError(f"{diff_type.value} result must have a string path")

        old_value = new_value = None
        if diff_type is not DiffType.ADDED:
            if "oldValue" not in data:
                raise ConfigError(f"{diff_type.value} result must have oldValue")
            old_value = to_value(data["oldValue"])
        if diff_type is not DiffType.REMOVED:
            if "newValue" not in data:
                raise ConfigError(f"{diff_type.value} result must have newValue")
            new_value = to_value(data["newValue"])
        return cls(diff_type, path, old_value, new_value)


@dataclass
class DiffSummary:
    """Counts of entries per diff type."""

    added: int = 0
    removed: int = 0
    modified: int = 0
    type_changed: int = 0

    @property
    def total(self) -> int:
        return self.added + self.removed + self.modified + self.type_changed

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "added": self.added,
            "removed": self.removed,
            "modified": self.modified,
            "type_changed": self.type_changed,
            "total": self.total,
        }


def summarize(entries: Iterable[DiffEntry]) -> DiffSummary:
    """Count ``entries`` by diff type."""
    summary = DiffSummary()
    for entry in entries:
        if entry.diff_type is DiffType.ADDED:
            summary.added += 1
        elif entry.diff_type is DiffType.REMOVED:
            summary.removed += 1
        elif entry.diff_type is DiffType.MODIFIED:
            summary.modified += 1
        else:
            summary.type_changed += 1
    return summary


def numbers_equal(old: float, new: float, epsilon: float) -> bool:
    """Whether two numbers are equal within ``epsilon``. NaN equals NaN."""
    if old == new:
        return True
    if math.isnan(old) or math.isnan(new):
        return math.isnan(old) and math.isnan(new)
    return abs(old - new) <= epsilon


def filter_entries(entries: Iterable[DiffEntry], path_filter: Optional[str]) -> List[DiffEntry]:
    """
    Keep entries at or below ``path_filter``.

    A path matches when it equals the filter or continues it at a segment
    boundary (``filter.key`` or ``filter[i]``). An empty filter keeps all.
    """
    if not path_filter:
        return list(entries)
    prefixes = (path_filter + ".", path_filter + "[")
    return [
        entry
        for entry in entries
        if entry.path == path_filter or entry.path.startswith(prefixes)
    ]


def _all_numbers(seq: List[Any], length: int) -> bool:
    return all(type(item) is float for item in islice(seq, length))


class DiffEngine:
    """Compare two canonical values."""

    #: Shortest all-number sequence compared with a single NumPy pass
    vectorize_min_length = 32

    def __init__(self, options: Optional[ComparisonOptions] = None):
        """
        Initialize engine.

        Args:
            options: Comparison options
        """
        self.options = options or ComparisonOptions()

    def compare(self, old: Value, new: Value) -> List[DiffEntry]:
        """
        Compute differences between two canonical values.

        Entries are produced in depth-first pre-order. At each mapping,
        removed and shared keys follow the old key order and added keys
        come last in the new key order. Sequences are compared by position.

        Args:
            old: Old/base value
            new: New value

        Returns:
            List of diff entries, filtered by ``options.path_filter``
        """
        entries: List[DiffEntry] = []
        if old is not new:
            self._walk(old, new, entries)
        result = filter_entries(entries, self.options.path_filter)
        _log_debug(
            "Compared values: %d entries (%d after path filter)",
            len(entries),
            len(result),
        )
        return result

    def _walk(self, old: Value, new: Value, entries: List[DiffEntry]) -> None:
        """Iterative pre-order walk; the stack holds node pairs and entries."""
        epsilon = self.options.epsilon
        stack: List[Any] = [("", old, new)]

        while stack:
            item = stack.pop()
            if isinstance(item, DiffEntry):
                entries.append(item)
                continue

            path, old_node, new_node = item
            if old_node is new_node:
                continue

            old_kind = kind_of(old_node)
            if old_kind is not kind_of(new_node):
                entries.append(DiffEntry.type_changed(path, old_node, new_node))
            elif old_kind is ValueKind.MAPPING:
                stack.extend(reversed(self._mapping_children(path, old_node, new_node)))
            elif old_kind is ValueKind.SEQUENCE:
                self._compare_sequences(path, old_node, new_node, entries, stack)
            elif old_kind is ValueKind.NUMBER:
                if not numbers_equal(old_node, new_node, epsilon):
                    entries.append(DiffEntry.modified(path, old_node, new_node))
            elif old_node != new_node:
                entries.append(DiffEntry.modified(path, old_node, new_node))

    def _mapping_children(
        self,
        path: str,
        old: Dict[str, Any],
        new: Dict[str, Any],
    ) -> List[Any]:
        """Work items for a mapping pair, in output order."""
        children: List[Any] = []
        options = self.options

        for key, old_child in old.items():
            if options.ignores_key(key):
                continue
            child_path = join_key(path, key)
            if key in new:
                children.append((child_path, old_child, new[key]))
            else:
                children.append(DiffEntry.removed(child_path, old_child))

        for key, new_child in new.items():
            if key not in old and not options.ignores_key(key):
                children.append(DiffEntry.added(join_key(path, key), new_child))

        return children

    def _compare_sequences(
        self,
        path: str,
        old: List[Any],
        new: List[Any],
        entries: List[DiffEntry],
        stack: List[Any],
    ) -> None:
        """Compare by position; trailing elements are Removed or Added."""
        common = min(len(old), len(new))
        tail = [
            DiffEntry.removed(join_index(path, i), old[i])
            for i in range(common, len(old))
        ]
        tail.extend(
            DiffEntry.added(join_index(path, i), new[i])
            for i in range(common, len(new))
        )

        if (
            common >= self.vectorize_min_length
            and _all_numbers(old, common)
            and _all_numbers(new, common)
        ):
            entries.extend(self._compare_numbers(path, old, new, common))
            entries.extend(tail)
            return

        children: List[Any] = [
            (join_index(path, i), old[i], new[i]) for i in range(common)
        ]
        children.extend(tail)
        stack.extend(reversed(children))

    def _compare_numbers(
        self,
        path: str,
        old: List[float],
        new: List[float],
        length: int,
    ) -> List[DiffEntry]:
        """Vectorized ``numbers_equal`` over the first ``length`` elements."""
        old_arr = np.array(old[:length], dtype=np.float64)
        new_arr = np.array(new[:length], dtype=np.float64)

        with np.errstate(invalid="ignore", over="ignore"):
            same = (
                (old_arr == new_arr)
                | (np.isnan(old_arr) & np.isnan(new_arr))
                | (np.abs(old_arr - new_arr) <= self.options.epsilon)
            )

        return [
            DiffEntry.modified(join_index(path, i), old[i], new[i])
            for i in np.flatnonzero(~same).tolist()
        ]


def diff(
    old: Any,
    new: Any,
    options: Optional[ComparisonOptions] = None,
) -> List[DiffEntry]:
    """
    Compare two host structures.

    Both inputs are converted with ``to_value`` before comparison.

    Args:
        old: Old/base structure
        new: New structure
        options: Comparison options

    Returns:
        List of diff entries

    Raises:
        ConversionError: If either input cannot be converted
    """
    old_value = to_value(old)
    new_value = old_value if new is old else to_value(new)
    return DiffEngine(options).compare(old_value, new_value)
