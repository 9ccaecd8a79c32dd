from typing import Literal

import dotenv
from loguru import logger
from sqlalchemy import inspect, text

from src.config import SettingsManager
from src.database.migrations import verify_schema

dotenv.load_dotenv()

async def health(
        route: Literal['database', 'settings'] | None = None,
    ) -> dict:
    """Health check function.

    Args:
        route (str): Specific route to check. Options are 'database', 'settings'.

    Returns:
        dict: Health status information.
    """
    logger.info("Health check invoked")

    # Validate settings
    settings = SettingsManager.get_instance()
    errors = settings.validate()
    if errors:
        logger.error("Settings validation errors: {}", errors)
        return {"status": "error", "errors": errors}

    if route is None:
        logger.info("No specific route provided, returning overall readiness")
        return {"status": "success"}

    route_normalised = route.strip().lower()
    logger.info("Health check route: {}", route_normalised)

    if route_normalised == "database":
        # Test database connection
        try:
            from src.database.session import get_session_manager
            session_manager = get_session_manager()
            inspector = inspect(session_manager.engine)
            existing_tables = set(inspector.get_table_names())
            logger.info("Database connection successful, found {} tables", len(existing_tables))
            with session_manager.session() as session:
                session.execute(text("SELECT 1"))
            verification = verify_schema(session_manager)
            return {"status": "success", "database": f"connected (verification {verification['status']}, {len(existing_tables)} tables)"}
        except Exception as e:
            logger.error("Database connection failed: {}", e)
            return {"status": "error", "database": "disconnected", "error": str(e)}

    if route_normalised == "settings":
        # Check stored panel settings still convert to the typed record
        try:
            from src.api.settings import build_setting_service
            record = build_setting_service().get_all_settings()
            logger.info("Panel settings loaded, web port {}", record.web_port)
            return {"status": "success", "settings": f"loaded ({len(record.to_dict())} keys)"}
        except Exception as e:
            logger.error("Panel settings check failed: {}", e)
            return {"status": "error", "settings": "unreadable", "error": str(e)}

    logger.warning("Unknown health check route: {}", route_normalised)
    return {"status": "error", "error": f"Unknown route: {route_normalised}"}
