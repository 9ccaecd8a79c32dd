from .base import Base
from .migrations import init_database, verify_schema
from .session import SessionManager, get_session_manager, init_session_manager

__all__ = [
    "Base",
    "SessionManager",
    "get_session_manager",
    "init_session_manager",
    "init_database",
    "verify_schema",
]
