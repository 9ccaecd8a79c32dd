"""Compiled-in default values, keyed by external setting key."""

import secrets
import string
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

SECRET_LENGTH = 32
DEFAULT_TIME_LOCATION = "Asia/Tehran"

_TEMPLATE_PATH = Path(__file__).parent / "xray_template.json"
_SECRET_ALPHABET = string.ascii_letters + string.digits


def _random_sequence(length: int) -> str:
    return "".join(secrets.choice(_SECRET_ALPHABET) for _ in range(length))


XRAY_TEMPLATE_CONFIG = _TEMPLATE_PATH.read_text(encoding="utf-8")

# Generated once per process. Until it is persisted, every restart yields a new one.
_GENERATED_SECRET = _random_sequence(SECRET_LENGTH)

DEFAULT_VALUES: Mapping[str, str] = MappingProxyType({
    "xrayTemplateConfig": XRAY_TEMPLATE_CONFIG,
    "webListen": "",
    "webPort": "2053",
    "webCertFile": "",
    "webKeyFile": "",
    "secret": _GENERATED_SECRET,
    "webBasePath": "/",
    "timeLocation": DEFAULT_TIME_LOCATION,
    "tgBotEnable": "false",
    "tgBotToken": "",
    "tgBotChatId": "0",
    "tgRunTime": "",
})


def default_for(key: str) -> str | None:
    """Return the default value for a key, or None when the key has no default."""
    return DEFAULT_VALUES.get(key)


def default_secret() -> str:
    return DEFAULT_VALUES["secret"]
