"""Loading files into canonical values."""

from enum import Enum
from pathlib import Path
from typing import Any, Dict, Union
import importlib
import json
import logging

import numpy as np

from .errors import DiffaiError, LoadError
from .value import Value, to_value

_log = logging.getLogger(__name__)

_log_debug = _log.debug


class DataFormat(Enum):
    """Supported input formats."""

    JSON = "json"
    NUMPY = "numpy"
    NUMPY_ARCHIVE = "numpy_archive"
    SAFETENSORS = "safetensors"
    PYTORCH = "pytorch"
    UNKNOWN = "unknown"


_SUFFIX_FORMATS = {
    ".json": DataFormat.JSON,
    ".npy": DataFormat.NUMPY,
    ".npz": DataFormat.NUMPY_ARCHIVE,
    ".safetensors": DataFormat.SAFETENSORS,
    ".pt": DataFormat.PYTORCH,
    ".pth": DataFormat.PYTORCH,
    ".bin": DataFormat.PYTORCH,
}


def detect_format(path: Union[str, Path]) -> DataFormat:
    """Detect the input format from the file suffix."""
    return _SUFFIX_FORMATS.get(Path(path).suffix.lower(), DataFormat.UNKNOWN)


def is_supported(path: Union[str, Path]) -> bool:
    """Whether a loader exists for ``path``."""
    return detect_format(path) is not DataFormat.UNKNOWN


class ValueLoader:
    """Load files of the supported formats as canonical values."""

    def load(self, path: Union[str, Path]) -> Value:
        """
        Load a file.

        Args:
            path: Path to the file

        Returns:
            Canonical value of the file's contents

        Raises:
            LoadError: If the file is missing, unsupported or unreadable
            ConversionError: If the loaded data cannot be represented
        """
        path = Path(path)
        if not path.is_file():
            raise LoadError(path, "No such file")

        data_format = detect_format(path)
        if data_format is DataFormat.UNKNOWN:
            raise LoadError(path, f"Unsupported format: {path.suffix or '(no suffix)'}")

        _log_debug("Loading %s as %s", path, data_format.value)
        loader = getattr(self, f"_load_{data_format.value}")
        try:
            data = loader(path)
        except DiffaiError:
            raise
        except Exception as err:
            raise LoadError(path, err) from err

        return to_value(data)

    def _require(self, module: str, path: Path) -> Any:
        """Import an optional library needed for ``path``."""
        try:
            return importlib.import_module(module)
        except ImportError as err:
            raise LoadError(
                path, f"{module.split('.')[0]} is required to load this format"
            ) from err

    def _load_json(self, path: Path) -> Any:
        """Load JSON document."""
        with open(path, encoding="utf-8") as f:
            return json.load(f)

    def _load_numpy(self, path: Path) -> Any:
        """Load NumPy array."""
        return np.load(str(path), allow_pickle=False)

    def _load_numpy_archive(self, path: Path) -> Dict[str, Any]:
        """Load NumPy archive as a mapping of array names."""
        with np.load(str(path), allow_pickle=False) as data:
            return {name: data[name] for name in data.files}

    def _load_safetensors(self, path: Path) -> Dict[str, Any]:
        """Load safetensors archive as a mapping of tensor names."""
        safetensors_numpy = self._require("safetensors.numpy", path)
        return safetensors_numpy.load_file(str(path))

    def _load_pytorch(self, path: Path) -> Any:
        """Load PyTorch checkpoint."""
        torch = self._require("torch", path)
        return torch.load(path, map_location="cpu", weights_only=True)


def load_value(path: Union[str, Path]) -> Value:
    """
    Load a file as a canonical value.

    Args:
        path: Path to the file

    Returns:
        Canonical value
    """
    return ValueLoader().load(path)
