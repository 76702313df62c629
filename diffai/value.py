"""Canonical value model and host conversion."""

from collections.abc import Mapping, Sequence
from decimal import Decimal
from enum import Enum
from numbers import Real
from typing import Any, Dict, List, Union

import numpy as np

from .errors import ConversionError


# Canonical values are plain built-in objects: None, bool, float, str,
# list and dict with str keys.
Value = Union[None, bool, float, str, List[Any], Dict[str, Any]]


class ValueKind(Enum):
    """Kind tag of a canonical value."""

    NULL = "null"
    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"
    SEQUENCE = "sequence"
    MAPPING = "mapping"


_KINDS = {
    bool: ValueKind.BOOL,
    int: ValueKind.NUMBER,
    float: ValueKind.NUMBER,
    str: ValueKind.STRING,
    list: ValueKind.SEQUENCE,
    dict: ValueKind.MAPPING,
}

_EXIT = object()
_CONTAINER = object()


def kind_of(value: Any) -> ValueKind:
    """
    Classify a canonical value.

    Plain ints are accepted as numbers alongside floats.

    Args:
        value: Canonical value

    Returns:
        The value's kind

    Raises:
        ConversionError: If ``value`` is not a canonical value
    """
    if value is None:
        return ValueKind.NULL
    kind = _KINDS.get(type(value))
    if kind is None:
        raise ConversionError(f"Not a canonical value: {type(value).__name__}")
    return kind


def join_key(path: str, key: str) -> str:
    """Extend ``path`` with a mapping key."""
    return f"{path}.{key}" if path else key


def join_index(path: str, index: int) -> str:
    """Extend ``path`` with a sequence index."""
    return f"{path}[{index}]"


def join_paths(prefix: str, path: str) -> str:
    """Nest a rendered ``path`` under ``prefix``."""
    if not path:
        return prefix
    if not prefix:
        return path
    if path.startswith("["):
        return prefix + path
    return f"{prefix}.{path}"


def _convert_leaf(obj: Any) -> Any:
    """Return the canonical leaf for ``obj``, or ``_CONTAINER``."""
    if obj is None:
        return None
    if isinstance(obj, (bool, np.bool_)):
        return bool(obj)
    if isinstance(obj, str):
        return obj
    if isinstance(obj, (Real, Decimal)):
        try:
            return float(obj)
        except (TypeError, ValueError, OverflowError) as err:
            raise ConversionError(
                f"Cannot convert {type(obj).__name__} {obj!r} to a number: {err}"
            ) from err
    if isinstance(obj, Mapping):
        return _CONTAINER
    if isinstance(obj, Sequence) and not isinstance(obj, (bytes, bytearray)):
        return _CONTAINER
    raise ConversionError(f"Unsupported type: {type(obj).__name__}")


def _is_plain_number(obj: Any) -> bool:
    return type(obj) is float or type(obj) is int


def to_value(obj: Any) -> Value:
    """
    Convert a host structure into a canonical value.

    Integers and other real numbers become floats, tuples become lists,
    mapping keys become strings. Array-likes with a ``tolist()`` method
    (NumPy arrays, torch tensors) are expanded into nested lists.

    Args:
        obj: Host object

    Returns:
        Canonical value

    Raises:
        ConversionError: If ``obj`` contains a reference cycle or an
            unsupported type
    """
    root: List[Any] = [None]
    stack: List[tuple] = [(obj, root, 0)]
    # id -> container for every container on the current ancestor chain
    active: Dict[int, Any] = {}

    while stack:
        host, slot, key = stack.pop()
        if host is _EXIT:
            del active[slot]
            continue

        if not isinstance(host, str) and hasattr(host, "tolist"):
            host = host.tolist()

        leaf = _convert_leaf(host)
        if leaf is not _CONTAINER:
            slot[key] = leaf
            continue

        if id(host) in active:
            raise ConversionError(
                f"Reference cycle detected in {type(host).__name__}"
            )

        if isinstance(host, Mapping):
            out: Any = {}
            children = []
            for name, item in host.items():
                if not isinstance(name, str):
                    name = str(name)
                if name in out:
                    raise ConversionError(f"Duplicate mapping key: {name!r}")
                out[name] = None
                children.append((item, out, name))
        else:
            if all(_is_plain_number(item) for item in host):
                try:
                    slot[key] = [float(item) for item in host]
                except OverflowError as err:
                    raise ConversionError(f"Cannot convert int to a number: {err}") from err
                continue
            out = [None] * len(host)
            children = [(item, out, i) for i, item in enumerate(host)]

        slot[key] = out
        if children:
            active[id(host)] = host
            stack.append((_EXIT, id(host), None))
            stack.extend(reversed(children))

    return root[0]
