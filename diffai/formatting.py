"""Rendering of diff results."""

from enum import Enum
from typing import Any, List, Optional, Sequence, Union
import json
import math

from .diff import DiffEntry, DiffType
from .errors import ConfigError

# Largest integer exactly representable as a float64.
_MAX_EXACT_INT = 2 ** 53


class OutputFormat(Enum):
    """Supported output formats."""

    JSON = "json"
    DIFFAI = "diffai"

    @classmethod
    def parse(cls, name: Union[str, "OutputFormat"]) -> "OutputFormat":
        """
        Look up a format by name, ignoring case and surrounding space.

        Raises:
            ConfigError: If the format is not supported
        """
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            supported = ", ".join(f.value for f in cls)
            raise ConfigError(
                f"Unsupported output format: {name!r} (expected one of: {supported})"
            ) from None


def _render_leaf(value: Any, ensure_ascii: bool) -> str:
    """
    Render a scalar as JSON text.

    Integral floats become ints and non-finite floats become the strings
    ``NaN``, ``Infinity`` and ``-Infinity`` so the output stays strict JSON.
    """
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=ensure_ascii)
    if isinstance(value, float):
        if math.isnan(value):
            return '"NaN"'
        if math.isinf(value):
            return '"Infinity"' if value > 0 else '"-Infinity"'
        if value.is_integer() and abs(value) < _MAX_EXACT_INT:
            return str(int(value))
        return float.__repr__(value)
    if isinstance(value, int):
        return int.__repr__(value)
    raise ConfigError(f"Cannot render value of type {type(value).__name__}")


def _encode(value: Any, indent: Optional[int] = None, ensure_ascii: bool = True) -> str:
    """
    Encode ``value`` as JSON text without recursion.

    Output matches ``json.dumps`` with the same ``indent``; nesting depth is
    bounded only by memory. The stack holds literal text and
    ``(value, level)`` pairs still to be encoded.
    """
    if indent is None:
        item_sep, key_sep = ", ", ": "
    else:
        item_sep, key_sep = ",", ": "

    def newline(level: int) -> str:
        return "" if indent is None else "\n" + " " * (indent * level)

    out: List[str] = []
    stack: List[Any] = [(value, 0)]

    while stack:
        item = stack.pop()
        if isinstance(item, str):
            out.append(item)
            continue

        node, level = item
        if isinstance(node, dict):
            if not node:
                out.append("{}")
                continue
            pieces: List[Any] = ["{"]
            for i, (key, child) in enumerate(node.items()):
                if i:
                    pieces.append(item_sep)
                pieces.append(newline(level + 1))
                pieces.append(_render_leaf(str(key), ensure_ascii) + key_sep)
                pieces.append((child, level + 1))
            pieces.append(newline(level) + "}")
            stack.extend(reversed(pieces))
        elif isinstance(node, list):
            if not node:
                out.append("[]")
                continue
            pieces = ["["]
            for i, child in enumerate(node):
                if i:
                    pieces.append(item_sep)
                pieces.append(newline(level + 1))
                pieces.append((child, level + 1))
            pieces.append(newline(level) + "]")
            stack.extend(reversed(pieces))
        else:
            out.append(_render_leaf(node, ensure_ascii))

    return "".join(out)


def render_value(value: Any) -> str:
    """Render a value as compact single-line JSON."""
    return _encode(value, ensure_ascii=False)


def format_entry(entry: DiffEntry) -> str:
    """Render one entry as a ``diffai`` format line."""
    prefix = f"{entry.diff_type.value} {entry.path}:"
    if entry.diff_type is DiffType.ADDED:
        return f"{prefix} {render_value(entry.new_value)}"
    if entry.diff_type is DiffType.REMOVED:
        return f"{prefix} {render_value(entry.old_value)}"
    return (
        f"{prefix} {render_value(entry.old_value)} -> "
        f"{render_value(entry.new_value)}"
    )


def format_output(
    entries: Sequence[DiffEntry],
    format: Union[str, OutputFormat] = OutputFormat.DIFFAI,
) -> str:
    """
    Format diff entries.

    Args:
        entries: Diff entries
        format: Output format (json, diffai)

    Returns:
        Formatted string

    Raises:
        ConfigError: If the format is not supported or a value cannot be
            rendered
    """
    output_format = OutputFormat.parse(format)

    if output_format is OutputFormat.JSON:
        return _encode([entry.to_dict() for entry in entries], indent=2)
    return "\n".join(format_entry(entry) for entry in entries)


def parse_json_output(text: str) -> List[DiffEntry]:
    """
    Parse the output of ``format_output(entries, "json")``.

    Non-finite numbers come back as their string renderings.

    Args:
        text: JSON text

    Returns:
        List of diff entries

    Raises:
        ConfigError: If the text is not a JSON array of valid entries
    """
    try:
        data = json.loads(text)
    except (ValueError, RecursionError) as err:
        raise ConfigError(f"Invalid JSON diff output: {err}") from err

    if not isinstance(data, list):
        raise ConfigError("JSON diff output must be an array")

    return [DiffEntry.from_dict(item) for item in data]
