from enum import Enum

from sqlalchemy import BigInteger, Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..config import SettingsManager
from ..database.base import Base

_settings = SettingsManager.get_instance()


class Protocol(str, Enum):
    """Inbound protocols understood by Xray."""
    VMESS = "vmess"
    VLESS = "vless"
    DOKODEMO = "dokodemo-door"
    HTTP = "http"
    TROJAN = "trojan"
    SHADOWSOCKS = "shadowsocks"
    SOCKS = "socks"


class Inbound(Base):
    """Network listener definition owned by a panel user."""

    __tablename__ = _settings.storage.table_name_inbounds

    # Primary key
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True, index=True)

    user_id: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)

    # Traffic counters, in bytes
    up: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    down: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    total: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    remark: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    enable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    expiry_time: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    listen: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    port: Mapped[int] = mapped_column(Integer, nullable=False, default=0, index=True)
    # Kept as the raw tag so unknown protocols survive a round trip
    protocol: Mapped[str] = mapped_column(String(64), nullable=False, default="")

    # JSON documents serialized to text
    settings: Mapped[str] = mapped_column(Text, nullable=False)
    stream_settings: Mapped[str] = mapped_column(Text, nullable=False)
    sniffing: Mapped[str] = mapped_column(Text, nullable=False)

    tag: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    def __repr__(self) -> str:
        return f"<Inbound(id='{self.id}', tag='{self.tag}', port='{self.port}')>"
