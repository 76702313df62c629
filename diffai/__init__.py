"""diffai - Structural diffs of AI/ML model artifacts and structured records."""

import logging

from .errors import (
    DiffaiError,
    ConversionError,
    ConfigError,
    LoadError,
)
from .value import (
    Value,
    ValueKind,
    kind_of,
    to_value,
)
from .options import ComparisonOptions
from .diff import (
    DiffEngine,
    DiffEntry,
    DiffType,
    DiffSummary,
    diff,
    summarize,
)
from .formatting import (
    OutputFormat,
    format_output,
    parse_json_output,
)
from .loaders import (
    DataFormat,
    ValueLoader,
    detect_format,
    load_value,
)
from .compare import (
    DirectoryDiff,
    diff_paths,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
__all__ = [
    # Errors
    "DiffaiError",
    "ConversionError",
    "ConfigError",
    "LoadError",
    # Values
    "Value",
    "ValueKind",
    "kind_of",
    "to_value",
    # Diff
    "ComparisonOptions",
    "DiffEngine",
    "DiffEntry",
    "DiffType",
    "DiffSummary",
    "diff",
    "summarize",
    # Formatting
    "OutputFormat",
    "format_output",
    "parse_json_output",
    # Loading
    "DataFormat",
    "ValueLoader",
    "detect_format",
    "load_value",
    "DirectoryDiff",
    "diff_paths",
]
