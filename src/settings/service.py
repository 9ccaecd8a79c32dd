from typing import TYPE_CHECKING, Any, Dict
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from ..database import SessionManager
from ..repositories import SettingRepository
from .conversion import parse_bool, parse_int, to_native, to_string
from .defaults import DEFAULT_TIME_LOCATION, DEFAULT_VALUES, default_for, default_secret
from .errors import PersistenceError, SettingNotFoundError
from .schema import (
    SETTING_FIELDS,
    XRAY_TEMPLATE_KEY,
    AllSetting,
    SettingField,
    fields_by_key,
    load_location,
    normalize_base_path,
)

if TYPE_CHECKING:
    from ..inbounds import InboundExtractor


class SettingService:
    """Reconciles stored key/value settings with the typed ``AllSetting`` record.

    Each single-key write commits on its own, so a bulk update is best effort
    per key rather than one transaction.
    """

    def __init__(
            self,
            session_manager: SessionManager,
            extractor: "InboundExtractor | None" = None,
        ) -> None:
        self.session_manager = session_manager
        self.extractor = extractor

    def get_all_settings(self) -> AllSetting:
        """Build the typed record from stored rows, filling gaps from defaults.

        Stored keys that are not part of the schema are ignored.

        Raises:
            ConversionError: If a stored or default value does not fit its field
            ConfigurationError: If the schema declares an unsupported type
        """
        schema = fields_by_key(SETTING_FIELDS)
        with self.session_manager.session() as session:
            stored = {setting.key: setting.value for setting in SettingRepository(session).get_all()}

        record = AllSetting()
        for key, value in stored.items():
            self._assign(record, schema, key, value)

        for key, value in DEFAULT_VALUES.items():
            if key in stored:
                continue
            self._assign(record, schema, key, value)

        return record

    @staticmethod
    def _assign(record: AllSetting, schema: Dict[str, SettingField], key: str, value: str) -> None:
        field = schema.get(key)
        if field is None:
            # Stale or internal key, e.g. the session secret
            return
        setattr(record, field.attribute, to_native(key, value, field.type))

    def update_all_settings(self, all_setting: AllSetting, context: Any = None) -> None:
        """Validate a record and save every field.

        The Xray template is routed through the inbound extractor before it is
        saved; an extractor failure aborts the loop, leaving earlier keys saved.

        Raises:
            ValidationError: If the record is invalid, before anything is written
            PersistenceError: Listing every key that failed to save
        """
        all_setting.check_valid()

        failures: Dict[str, Exception] = {}
        for field in SETTING_FIELDS:
            value = to_string(field.key, getattr(all_setting, field.attribute), field.type)

            if field.key == XRAY_TEMPLATE_KEY and self.extractor is not None:
                self.extractor.handle_template(value, context)

            try:
                self.save_setting(field.key, value)
            except SQLAlchemyError as e:
                logger.error("Failed to save setting {}: {}", field.key, e)
                failures[field.key] = e

        if failures:
            raise PersistenceError(failures)
        logger.info("Saved {} settings", len(SETTING_FIELDS))

    def reset_settings(self) -> int:
        """Delete every stored setting so reads fall back to defaults."""
        with self.session_manager.session() as session:
            removed = SettingRepository(session).delete_all()
        logger.info("Reset settings, removed {} row(s)", removed)
        return removed

    def save_setting(self, key: str, value: str) -> None:
        with self.session_manager.session() as session:
            SettingRepository(session).upsert(key, value)

    def get_string(self, key: str) -> str:
        """Get a stored value, falling back to its default.

        Raises:
            SettingNotFoundError: If the key is neither stored nor has a default
        """
        with self.session_manager.session() as session:
            setting = SettingRepository(session).get(key)
        if setting is not None:
            return setting.value

        value = default_for(key)
        if value is None:
            raise SettingNotFoundError(key)
        return value

    def set_string(self, key: str, value: str) -> None:
        self.save_setting(key, value)

    def get_bool(self, key: str) -> bool:
        return parse_bool(key, self.get_string(key))

    def set_bool(self, key: str, value: bool) -> None:
        self.set_string(key, to_string(key, value, bool))

    def get_int(self, key: str) -> int:
        return parse_int(key, self.get_string(key))

    def set_int(self, key: str, value: int) -> None:
        self.set_string(key, to_string(key, value, int))

    def get_xray_config_template(self) -> str:
        return self.get_string(XRAY_TEMPLATE_KEY)

    def get_listen(self) -> str:
        return self.get_string("webListen")

    def get_port(self) -> int:
        return self.get_int("webPort")

    def set_port(self, port: int) -> None:
        self.set_int("webPort", port)

    def get_cert_file(self) -> str:
        return self.get_string("webCertFile")

    def get_key_file(self) -> str:
        return self.get_string("webKeyFile")

    def get_tg_bot_token(self) -> str:
        return self.get_string("tgBotToken")

    def set_tg_bot_token(self, token: str) -> None:
        self.set_string("tgBotToken", token)

    def get_tg_bot_chat_id(self) -> int:
        return self.get_int("tgBotChatId")

    def set_tg_bot_chat_id(self, chat_id: int) -> None:
        self.set_int("tgBotChatId", chat_id)

    def get_tg_bot_enabled(self) -> bool:
        return self.get_bool("tgBotEnable")

    def set_tg_bot_enabled(self, value: bool) -> None:
        self.set_bool("tgBotEnable", value)

    def get_tg_bot_runtime(self) -> str:
        """Get the cron-style schedule for the Telegram bot reports."""
        return self.get_string("tgRunTime")

    def set_tg_bot_runtime(self, runtime: str) -> None:
        self.set_string("tgRunTime", runtime)

    def get_secret(self) -> bytes:
        """Get the session signing secret.

        The generated default is saved on first read so it stays the same
        across restarts. A failed save is logged and the value still returned.
        """
        secret = self.get_string("secret")
        if secret == default_secret():
            try:
                self.save_setting("secret", secret)
            except SQLAlchemyError as e:
                logger.warning("save secret failed: {}", e)
        return secret.encode()

    def get_base_path(self) -> str:
        """Get the web base path, always starting and ending with ``/``."""
        return normalize_base_path(self.get_string("webBasePath"))

    def get_time_location(self) -> ZoneInfo:
        """Get the configured time zone, falling back to the default zone."""
        name = self.get_string("timeLocation")
        try:
            return load_location(name)
        except (ZoneInfoNotFoundError, ValueError, OSError):
            logger.error("location <{}> not exist, using default location: {}", name, DEFAULT_TIME_LOCATION)
            return ZoneInfo(DEFAULT_TIME_LOCATION)
