"""Panel settings persisted as key/value strings and exposed as a typed record.

Responsibilities:
- Compiled-in default values for every known key
- Explicit schema mapping record attributes to external keys and types
- Reconciliation between stored rows, defaults and the typed record
"""

from .defaults import DEFAULT_VALUES, default_for
from .errors import (
    ConfigurationError,
    ConversionError,
    PersistenceError,
    SettingNotFoundError,
    SettingsError,
    TemplateError,
    ValidationError,
)
from .schema import SETTING_FIELDS, XRAY_TEMPLATE_KEY, AllSetting, SettingField
from .service import SettingService

__all__ = [
    "DEFAULT_VALUES",
    "default_for",
    "SettingsError",
    "SettingNotFoundError",
    "ConversionError",
    "ConfigurationError",
    "ValidationError",
    "TemplateError",
    "PersistenceError",
    "SETTING_FIELDS",
    "XRAY_TEMPLATE_KEY",
    "AllSetting",
    "SettingField",
    "SettingService",
]
