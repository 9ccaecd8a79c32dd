"""Request handlers for reading, saving and resetting panel settings."""

from typing import Any

import dotenv
from loguru import logger

from ..database import SessionManager, get_session_manager
from ..inbounds import InboundExtractor, InboundService, RequestContext, RequestContextIdentity
from ..settings import AllSetting, PersistenceError, SettingService, SettingsError, ValidationError

dotenv.load_dotenv()


def build_setting_service(session_manager: SessionManager | None = None) -> SettingService:
    """Wire a settings service with the database-backed inbound sink."""
    manager = session_manager or get_session_manager()
    extractor = InboundExtractor(
        sink=InboundService(manager),
        identity=RequestContextIdentity(),
    )
    return SettingService(manager, extractor=extractor)


async def get_all_settings(session_manager: SessionManager | None = None) -> dict:
    """Return every panel setting keyed by external key."""
    logger.info("Get all settings invoked")
    try:
        record = build_setting_service(session_manager).get_all_settings()
    except SettingsError as e:
        logger.error("Failed to load settings: {}", e)
        return {"status": "error", "error": str(e)}

    return {"status": "success", "settings": record.to_dict()}


async def update_all_settings(
        payload: dict[str, Any],
        user_id: int,
        session_manager: SessionManager | None = None,
    ) -> dict:
    """Save a full settings payload on behalf of a user."""
    logger.info("Update all settings invoked by user {}", user_id)
    try:
        record = AllSetting.from_dict(payload)
        build_setting_service(session_manager).update_all_settings(
            record,
            context=RequestContext(user_id=user_id),
        )
    except ValidationError as e:
        logger.warning("Rejected settings update: {}", e)
        return {"status": "error", "error": str(e)}
    except PersistenceError as e:
        logger.error("Settings partially saved: {}", e)
        return {"status": "error", "error": str(e), "failed_keys": sorted(e.failures)}
    except Exception as e:
        logger.error("Settings update failed: {}", e)
        return {"status": "error", "error": str(e)}

    return {"status": "success"}


async def reset_settings(session_manager: SessionManager | None = None) -> dict:
    """Delete every stored setting."""
    logger.info("Reset settings invoked")
    removed = build_setting_service(session_manager).reset_settings()
    return {"status": "success", "removed": removed}


async def list_inbounds(user_id: int, session_manager: SessionManager | None = None) -> dict:
    """List the inbounds a user owns, including those derived from the template."""
    logger.info("List inbounds invoked by user {}", user_id)
    manager = session_manager or get_session_manager()
    inbounds = InboundService(manager).get_inbounds(user_id)
    return {"status": "success", "inbounds": [inbound.to_dict() for inbound in inbounds]}
