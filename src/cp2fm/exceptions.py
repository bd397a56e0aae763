"""
Converter Exception Classes

Typed exceptions raised by the content-package to feature-model conversion.
Every error carries enough context (entry path, model id, PID) to be
diagnosed without re-running the conversion.
"""


class ConversionError(Exception):
    """Base exception for all conversion errors."""

    pass


class InputError(ConversionError):
    """Raised when the content package or the output directory are invalid."""

    pass


class SettingsError(ConversionError):
    """Raised when converter settings cannot be loaded or are invalid."""

    pass


class ArchiveError(ConversionError):
    """Raised when the content package cannot be opened or read."""

    def __init__(self, message: str, entry_path: str | None = None):
        super().__init__(message)
        self.entry_path = entry_path


class DuplicateConfigurationError(ConversionError):
    """Raised when a PID is registered twice and merging is disabled."""

    def __init__(self, pid: str, model_id: str):
        super().__init__(
            f"Configuration '{pid}' already defined in Feature Model "
            f"'{model_id}', can not be added"
        )
        self.pid = pid
        self.model_id = model_id


class ConfigurationFormatError(ConversionError):
    """Raised when a configuration entry cannot be parsed."""

    def __init__(self, message: str, entry_path: str):
        super().__init__(f"{entry_path}: {message}")
        self.entry_path = entry_path


class DeployError(ConversionError):
    """Raised when an artifact or a model file cannot be written."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path
