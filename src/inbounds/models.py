"""Permissive decoding of inbound entries found in the Xray template."""

import json
import math
from dataclasses import dataclass
from typing import Any

from ..models import Inbound

FALLBACK_SUFFIX = "-fallback"

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


def _as_int(value: Any) -> int:
    # bool is an int subclass but is not a JSON number
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    # Stored in 64-bit columns
    return max(INT64_MIN, min(INT64_MAX, int(value)))


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _as_bool(value: Any) -> bool:
    return value if isinstance(value, bool) else False


def _as_json(value: Any) -> str | None:
    """Serialize a sub-document, or None when it is absent or JSON null."""
    if value is None:
        return None
    return json.dumps(value, separators=(",", ":"), sort_keys=True, ensure_ascii=False, allow_nan=False)


@dataclass
class InboundTemplate:
    """One template entry with every field optional.

    Wrong-typed fields are decoded as missing.
    """

    up: int | None = None
    down: int | None = None
    total: int | None = None
    remark: str | None = None
    enable: bool | None = None
    expiry_time: int | None = None
    listen: str | None = None
    port: int | None = None
    protocol: str | None = None
    settings: str | None = None
    stream_settings: str | None = None
    sniffing: str | None = None
    tag: str | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "InboundTemplate":
        """Decode a template entry, keeping None for anything absent."""
        return cls(
            up=_as_int(data["up"]) if "up" in data else None,
            down=_as_int(data["down"]) if "down" in data else None,
            total=_as_int(data["total"]) if "total" in data else None,
            remark=_as_str(data["remark"]) if "remark" in data else None,
            enable=_as_bool(data["enable"]) if "enable" in data else None,
            expiry_time=_as_int(data["expiryTime"]) if "expiryTime" in data else None,
            listen=_as_str(data["listen"]) if "listen" in data else None,
            port=_as_int(data["port"]) if "port" in data else None,
            protocol=_as_str(data["protocol"]) if "protocol" in data else None,
            settings=_as_json(data.get("settings")),
            stream_settings=_as_json(data.get("streamSettings")),
            sniffing=_as_json(data.get("sniffing")),
            tag=_as_str(data["tag"]) if "tag" in data else None,
        )

    def is_complete(self) -> bool:
        """All three JSON sub-documents are mandatory."""
        return None not in (self.settings, self.stream_settings, self.sniffing)

    def resolve_remark(self) -> str:
        remark = self.remark or ""
        tag = self.tag or ""
        if remark.strip():
            return remark
        if not self.port:
            return f"{tag}{FALLBACK_SUFFIX}".lower()
        return tag.lower()

    def to_inbound(self, user_id: int) -> Inbound:
        """Build an unsaved inbound, applying zero values for missing fields."""
        if not self.is_complete():
            raise ValueError("inbound template is missing settings, streamSettings or sniffing")
        return Inbound(
            user_id=user_id,
            up=self.up or 0,
            down=self.down or 0,
            total=self.total or 0,
            remark=self.resolve_remark(),
            enable=bool(self.enable),
            expiry_time=self.expiry_time or 0,
            listen=self.listen or "",
            port=self.port or 0,
            protocol=self.protocol or "",
            settings=self.settings,
            stream_settings=self.stream_settings,
            sniffing=self.sniffing,
            tag=self.tag or "",
        )
