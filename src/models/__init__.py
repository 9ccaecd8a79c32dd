from .setting import Setting
from .inbound import Inbound, Protocol

__all__ = [
    "Setting",
    "Inbound",
    "Protocol",
]
