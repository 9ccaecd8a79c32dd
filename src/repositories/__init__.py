from .base import BaseRepository
from .setting_repository import SettingRepository
from .inbound_repository import InboundRepository

__all__ = [
    "BaseRepository",
    "SettingRepository",
    "InboundRepository",
]
