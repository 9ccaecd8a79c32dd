from .health import health
from .settings import get_all_settings, list_inbounds, reset_settings, update_all_settings

__all__ = [
    "health",
    "get_all_settings",
    "update_all_settings",
    "reset_settings",
    "list_inbounds",
]
