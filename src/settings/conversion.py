"""String <-> native conversions for setting values."""

import re
from typing import Any

from .errors import ConfigurationError, ConversionError

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")

_TRUE_LITERALS = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_LITERALS = {"0", "f", "F", "FALSE", "false", "False"}

SUPPORTED_TYPES = (int, str, bool)


def parse_int(key: str, value: str) -> int:
    """Parse a base-10 integer. Whitespace, underscores and decimals are rejected."""
    if not _INT_PATTERN.fullmatch(value):
        raise ConversionError(key, value, "int")
    return int(value)


def parse_bool(key: str, value: str) -> bool:
    """Parse a boolean accepting the usual literal spellings."""
    if value in _TRUE_LITERALS:
        return True
    if value in _FALSE_LITERALS:
        return False
    raise ConversionError(key, value, "bool")


def to_native(key: str, value: str, field_type: type) -> Any:
    """Convert a stored string into a record field's declared type.

    Booleans in the record are true only for the exact literal ``"true"``.
    """
    # bool before int: bool is a subclass of int
    if field_type is bool:
        return value == "true"
    if field_type is int:
        return parse_int(key, value)
    if field_type is str:
        return value
    raise ConfigurationError(f"unknown field {key} type {field_type!r}")


def to_string(key: str, value: Any, field_type: type) -> str:
    """Format a record field back to its stored string form."""
    if field_type is bool:
        return "true" if value else "false"
    if field_type is int:
        return str(int(value))
    if field_type is str:
        return "" if value is None else str(value)
    raise ConfigurationError(f"unknown field {key} type {field_type!r}")
