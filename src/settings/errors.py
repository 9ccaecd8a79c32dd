"""Error taxonomy for the panel settings store.

A key that was never persisted is not an error: the repository returns
``None`` and the service falls back to the default registry. The exceptions
below cover everything that is.
"""

from typing import Dict


class SettingsError(Exception):
    """Base class for panel settings errors."""


class SettingNotFoundError(SettingsError, LookupError):
    """A key has no stored row and no default value."""

    def __init__(self, key: str):
        super().__init__(f"key <{key}> not in default values")
        self.key = key


class ConversionError(SettingsError, ValueError):
    """A stored or default string cannot be converted to its declared type."""

    def __init__(self, key: str, value: str, expected: str):
        super().__init__(f"setting {key}: cannot convert {value!r} to {expected}")
        self.key = key
        self.value = value
        self.expected = expected


class ConfigurationError(SettingsError, TypeError):
    """The settings schema declares a field type that cannot be stored."""


class ValidationError(SettingsError, ValueError):
    """A submitted settings record breaks its own consistency rules."""


class TemplateError(ValidationError):
    """The Xray template setting is not valid JSON."""


class PersistenceError(SettingsError):
    """One or more keys failed to save during a bulk update.

    ``failures`` maps every failing key to the error raised while saving it.
    """

    def __init__(self, failures: Dict[str, Exception]):
        self.failures = dict(failures)
        message = "; ".join(f"{key}: {error}" for key, error in self.failures.items())
        super().__init__(f"failed to save {len(self.failures)} setting(s): {message}")
