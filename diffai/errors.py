"""Exception types raised at the diffai boundaries."""


class DiffaiError(Exception):
    """Base class for diffai errors."""


class ConversionError(DiffaiError):
    """A host structure cannot be represented as a value."""


class ConfigError(DiffaiError):
    """An invalid option value or output format."""


class LoadError(DiffaiError):
    """
    A file or directory could not be read or parsed.

    Attributes:
        path: The path that failed to load
        cause: The underlying exception or a description of the failure
    """

    def __init__(self, path, cause):
        self.path = str(path)
        self.cause = cause
        super().__init__(f"Failed to load {self.path}: {cause}")
