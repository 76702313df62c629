"""Comparison options."""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Mapping, Optional
from numbers import Real
import logging
import math
import re

from .errors import ConfigError

_log = logging.getLogger(__name__)

_log_debug = _log.debug

# Binding-style option names accepted by ``from_dict``.
_ALIASES = {
    "pathFilter": "path_filter",
    "ignoreKeysRegex": "ignore_keys_regex",
}


@dataclass(frozen=True)
class ComparisonOptions:
    """Immutable options consumed by the diff engine."""

    #: Numeric tolerance: numbers within ``epsilon`` compare equal
    epsilon: float = 0.0
    #: Keep only entries at or below this path
    path_filter: Optional[str] = None
    #: Skip mapping keys matching this regular expression
    ignore_keys_regex: Optional[str] = None

    _ignore_keys: Optional[re.Pattern] = field(
        default=None, init=False, repr=False, compare=False
    )

    def __post_init__(self):
        epsilon = self.epsilon
        if isinstance(epsilon, bool) or not isinstance(epsilon, Real):
            raise ConfigError(f"epsilon must be a number, got {epsilon!r}")
        if math.isnan(epsilon) or epsilon < 0:
            raise ConfigError(f"epsilon must be >= 0, got {epsilon!r}")
        object.__setattr__(self, "epsilon", float(epsilon))

        if self.path_filter is not None and not isinstance(self.path_filter, str):
            raise ConfigError(f"path_filter must be a string, got {self.path_filter!r}")

        if self.ignore_keys_regex is not None:
            try:
                pattern = re.compile(self.ignore_keys_regex)
            except (re.error, TypeError) as err:
                raise ConfigError(
                    f"Invalid ignore_keys_regex {self.ignore_keys_regex!r}: {err}"
                ) from err
            object.__setattr__(self, "_ignore_keys", pattern)

    def ignores_key(self, key: str) -> bool:
        """Whether mapping ``key`` is excluded from comparison."""
        return self._ignore_keys is not None and self._ignore_keys.search(key) is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "epsilon": self.epsilon,
            "path_filter": self.path_filter,
            "ignore_keys_regex": self.ignore_keys_regex,
        }

    @classmethod
    def from_dict(cls, values: Optional[Mapping[str, Any]]) -> "ComparisonOptions":
        """
        Build options from a mapping of option names.

        Accepts snake_case field names and the camelCase names used by
        language bindings (``pathFilter``, ``ignoreKeysRegex``). ``None``
        values are treated as unset.

        Args:
            values: Option name to value mapping

        Returns:
            New ComparisonOptions

        Raises:
            ConfigError: On unknown option names or invalid values
        """
        if not values:
            return cls()

        field_names = {f.name for f in fields(cls) if f.init}
        kwargs = {}
        for name, value in values.items():
            attr = _ALIASES.get(name, name)
            if attr not in field_names:
                raise ConfigError(f"Unknown comparison option: {name}")
            if value is not None:
                kwargs[attr] = value

        options = cls(**kwargs)
        _log_debug("Initialised ComparisonOptions from mapping: %r", options)
        return options
