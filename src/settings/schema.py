"""Typed view over the panel settings.

``SETTING_FIELDS`` is the explicit, ordered schema binding each ``AllSetting``
attribute to its external key and declared type. The order is also the write
order used when a whole record is saved.
"""

import ipaddress
import ssl
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .conversion import SUPPORTED_TYPES, parse_bool, parse_int
from .errors import ConfigurationError, ConversionError, ValidationError

XRAY_TEMPLATE_KEY = "xrayTemplateConfig"


@dataclass(frozen=True)
class SettingField:
    """One schema entry: record attribute, external key and declared type."""

    attribute: str
    key: str
    type: type


SETTING_FIELDS: Tuple[SettingField, ...] = (
    SettingField("web_listen", "webListen", str),
    SettingField("web_port", "webPort", int),
    SettingField("web_cert_file", "webCertFile", str),
    SettingField("web_key_file", "webKeyFile", str),
    SettingField("web_base_path", "webBasePath", str),
    SettingField("tg_bot_enable", "tgBotEnable", bool),
    SettingField("tg_bot_token", "tgBotToken", str),
    SettingField("tg_bot_chat_id", "tgBotChatId", int),
    SettingField("tg_run_time", "tgRunTime", str),
    SettingField("xray_template_config", XRAY_TEMPLATE_KEY, str),
    SettingField("time_location", "timeLocation", str),
)


def fields_by_key(schema: Iterable[SettingField] = SETTING_FIELDS) -> Dict[str, SettingField]:
    """Index a schema by external key, rejecting unsupported field types."""
    index = {}
    for field in schema:
        if field.type not in SUPPORTED_TYPES:
            raise ConfigurationError(f"unknown field {field.key} type {field.type!r}")
        index[field.key] = field
    return index


def load_location(name: str) -> ZoneInfo:
    """Load a time zone by IANA name; an empty name means UTC."""
    return ZoneInfo(name or "UTC")


def normalize_base_path(path: str) -> str:
    """Make sure a base path starts and ends with a slash."""
    if not path.startswith("/"):
        path = "/" + path
    if not path.endswith("/"):
        path += "/"
    return path


@dataclass
class AllSetting:
    """Every user-editable panel setting as one typed record."""

    web_listen: str = ""
    web_port: int = 0
    web_cert_file: str = ""
    web_key_file: str = ""
    web_base_path: str = ""
    tg_bot_enable: bool = False
    tg_bot_token: str = ""
    tg_bot_chat_id: int = 0
    tg_run_time: str = ""
    xray_template_config: str = ""
    time_location: str = ""

    def check_valid(self) -> None:
        """Check the record's consistency rules.

        Normalizes ``web_base_path`` in place.

        Raises:
            ValidationError: If any rule is broken
        """
        if self.web_listen:
            try:
                ipaddress.ip_address(self.web_listen)
            except ValueError:
                raise ValidationError(f"web listen is not valid ip: {self.web_listen}") from None

        if self.web_port <= 0 or self.web_port > 65535:
            raise ValidationError(f"web port is not a valid port: {self.web_port}")

        if self.web_cert_file or self.web_key_file:
            if not (self.web_cert_file and self.web_key_file):
                raise ValidationError("cert file and key file must be set together")
            context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
            try:
                context.load_cert_chain(self.web_cert_file, self.web_key_file)
            except (ssl.SSLError, OSError) as e:
                raise ValidationError(
                    f"cert file <{self.web_cert_file}> or key file <{self.web_key_file}> invalid: {e}"
                ) from e

        self.web_base_path = normalize_base_path(self.web_base_path)

        try:
            load_location(self.time_location)
        except (ZoneInfoNotFoundError, ValueError, OSError):
            raise ValidationError(f"time location not exist: {self.time_location}") from None

        if self.tg_bot_enable and not self.tg_bot_token:
            raise ValidationError("telegram bot token is required when the bot is enabled")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary keyed by external setting key."""
        return {field.key: getattr(self, field.attribute) for field in SETTING_FIELDS}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AllSetting":
        """Build a record from a dictionary keyed by external setting key.

        Missing keys keep the zero value. Strings are accepted for integer and
        boolean fields.
        """
        record = cls()
        for field in SETTING_FIELDS:
            if field.key not in data:
                continue
            setattr(record, field.attribute, _coerce_payload(field, data[field.key]))
        return record


def _coerce_payload(field: SettingField, value: Any) -> Any:
    try:
        if field.type is bool:
            if isinstance(value, bool):
                return value
            if isinstance(value, str):
                return parse_bool(field.key, value)
        elif field.type is int:
            if isinstance(value, int) and not isinstance(value, bool):
                return value
            if isinstance(value, str):
                return parse_int(field.key, value)
        elif isinstance(value, str):
            return value
    except ConversionError as e:
        raise ValidationError(str(e)) from e
    raise ValidationError(f"setting {field.key}: expected {field.type.__name__}, got {type(value).__name__}")

