"""Unit tests for database session management and migrations.

Tests cover:
- Session manager initialization and cleanup
- Table creation and schema verification
- Transaction rollback on errors
"""

import pytest
from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from src.config import SettingsManager
from src.database import SessionManager, get_session_manager, init_session_manager
from src.database.migrations import verify_schema
from src.models import Setting


@pytest.mark.unit
def test_session_manager_initialization(test_db_config):
    """Test session manager initialization."""
    manager = SessionManager(connection_string=test_db_config)
    assert manager.engine is not None
    manager.close()


@pytest.mark.unit
def test_verify_schema_reports_missing_tables(test_db_config):
    """Test verification before tables are created."""
    manager = SessionManager(connection_string=test_db_config)

    verification = verify_schema(manager)
    settings = SettingsManager.get_instance()

    assert verification["status"] == "missing_tables"
    assert settings.storage.table_name_settings in verification["missing_tables"]
    manager.close()


@pytest.mark.unit
def test_session_manager_create_tables(test_db_config):
    """Test table creation."""
    manager = SessionManager(connection_string=test_db_config)
    manager.create_all()

    verification = verify_schema(manager)
    assert verification["status"] == "ok"
    assert len(verification["missing_tables"]) == 0

    manager.close()


@pytest.mark.unit
def test_session_context_manager(db_session):
    """Test session as context manager."""
    assert isinstance(db_session, Session)

    result = db_session.execute(text("SELECT 1")).scalar()
    assert result == 1


@pytest.mark.integration
def test_init_database(session_manager):
    """Test database initialization."""
    verification = verify_schema(session_manager)
    settings = SettingsManager.get_instance()

    assert verification["status"] == "ok"
    assert settings.storage.table_name_settings in verification["existing_tables"]
    assert settings.storage.table_name_inbounds in verification["existing_tables"]


@pytest.mark.integration
def test_transaction_rollback_on_duplicate_key(session_manager):
    """Test that transactions are rolled back on errors."""
    with pytest.raises(IntegrityError):
        with session_manager.session() as session:
            session.add(Setting(key="webPort", value="2053"))
            session.add(Setting(key="webPort", value="8080"))
            session.flush()

    with session_manager.session() as session:
        assert session.query(Setting).filter(Setting.key == "webPort").first() is None


@pytest.mark.unit
def test_global_session_manager(test_db_config):
    """Test the global session manager accessor."""
    manager = init_session_manager(connection_string=test_db_config)
    try:
        assert get_session_manager() is manager
    finally:
        manager.close()


@pytest.mark.unit
def test_database_package_exports():
    import src.database as database

    assert set(database.__all__) == {
        "Base",
        "SessionManager",
        "get_session_manager",
        "init_session_manager",
        "init_database",
        "verify_schema",
    }
    assert all(hasattr(database, name) for name in database.__all__)
