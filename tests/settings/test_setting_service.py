"""Tests for reconciling stored settings with the typed record.

Tests cover:
- Defaults for keys never stored, stored values taking precedence
- Reset back to defaults
- Update/read round trip and per-key failure reporting
- Typed accessors and their individual policies
"""

import json
from unittest.mock import MagicMock, patch
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy.exc import OperationalError

from src.repositories import SettingRepository
from src.settings import (
    DEFAULT_VALUES,
    SETTING_FIELDS,
    AllSetting,
    ConversionError,
    PersistenceError,
    SettingNotFoundError,
    SettingService,
    ValidationError,
)
from src.settings.conversion import to_native
from src.settings.defaults import default_secret


@pytest.fixture
def service(session_manager):
    return SettingService(session_manager)


def _store(session_manager, **pairs):
    with session_manager.session() as session:
        repo = SettingRepository(session)
        for key, value in pairs.items():
            repo.upsert(key, value)


def _stored(session_manager, key):
    with session_manager.session() as session:
        setting = SettingRepository(session).get(key)
        return None if setting is None else setting.value


def _record(**overrides) -> AllSetting:
    values = {
        "web_listen": "127.0.0.1",
        "web_port": 8443,
        "web_base_path": "/panel/",
        "tg_bot_enable": True,
        "tg_bot_token": "123:abc",
        "tg_bot_chat_id": 987654,
        "tg_run_time": "@daily",
        "xray_template_config": json.dumps({"log": {"loglevel": "info"}}),
        "time_location": "Europe/Berlin",
    }
    values.update(overrides)
    return AllSetting(**values)


@pytest.mark.integration
def test_get_all_settings_uses_defaults_when_empty(service):
    record = service.get_all_settings()

    assert record.web_port == int(DEFAULT_VALUES["webPort"])
    assert record.web_listen == DEFAULT_VALUES["webListen"]
    assert record.web_base_path == DEFAULT_VALUES["webBasePath"]
    assert record.tg_bot_enable is False
    assert record.tg_bot_chat_id == 0
    assert record.time_location == DEFAULT_VALUES["timeLocation"]
    assert record.xray_template_config == DEFAULT_VALUES["xrayTemplateConfig"]


@pytest.mark.integration
def test_get_all_settings_prefers_stored_values(service, session_manager):
    _store(session_manager, webPort="9090", tgBotEnable="true", webListen="10.0.0.1")

    record = service.get_all_settings()

    assert record.web_port == 9090
    assert record.tg_bot_enable is True
    assert record.web_listen == "10.0.0.1"
    # untouched keys still come from defaults
    assert record.time_location == DEFAULT_VALUES["timeLocation"]


@pytest.mark.integration
def test_get_all_settings_ignores_unknown_keys(service, session_manager):
    _store(session_manager, futureFeature="on", secret="s3cret")

    record = service.get_all_settings()

    assert "futureFeature" not in record.to_dict()
    assert record.web_port == 2053


@pytest.mark.integration
def test_get_all_settings_fails_on_bad_stored_integer(service, session_manager):
    _store(session_manager, webPort="not-a-port")

    with pytest.raises(ConversionError) as exc_info:
        service.get_all_settings()

    assert exc_info.value.key == "webPort"


@pytest.mark.integration
def test_reset_settings_restores_defaults(service, session_manager):
    _store(session_manager, webPort="9090", webBasePath="/x/")

    removed = service.reset_settings()
    record = service.get_all_settings()

    expected = AllSetting(**{
        field.attribute: to_native(field.key, DEFAULT_VALUES[field.key], field.type)
        for field in SETTING_FIELDS
    })

    assert removed == 2
    assert record == expected
    assert record.web_port == 2053
    assert record.web_base_path == "/"


@pytest.mark.integration
def test_update_then_get_round_trips(service):
    submitted = _record()

    service.update_all_settings(submitted)

    assert service.get_all_settings() == submitted


@pytest.mark.integration
def test_update_stores_strings(service, session_manager):
    service.update_all_settings(_record(tg_bot_enable=False, tg_bot_token=""))

    assert _stored(session_manager, "webPort") == "8443"
    assert _stored(session_manager, "tgBotEnable") == "false"
    assert _stored(session_manager, "tgBotChatId") == "987654"


@pytest.mark.integration
def test_update_rejects_invalid_record_before_writing(service, session_manager):
    with pytest.raises(ValidationError):
        service.update_all_settings(_record(web_port=0))

    assert _stored(session_manager, "webListen") is None


@pytest.mark.integration
def test_update_collects_every_failed_key(service, session_manager):
    original_upsert = SettingRepository.upsert

    def flaky_upsert(repo, key, value):
        if key in ("webPort", "timeLocation"):
            raise OperationalError("UPDATE settings", {}, Exception("database is locked"))
        return original_upsert(repo, key, value)

    with patch.object(SettingRepository, "upsert", flaky_upsert):
        with pytest.raises(PersistenceError) as exc_info:
            service.update_all_settings(_record())

    assert set(exc_info.value.failures) == {"webPort", "timeLocation"}
    # keys after the first failure were still written
    assert _stored(session_manager, "tgBotToken") == "123:abc"


@pytest.mark.integration
def test_update_routes_template_through_extractor(session_manager):
    extractor = MagicMock()
    service = SettingService(session_manager, extractor=extractor)
    submitted = _record()

    service.update_all_settings(submitted, context="ctx")

    extractor.handle_template.assert_called_once_with(submitted.xray_template_config, "ctx")


@pytest.mark.integration
def test_update_extractor_failure_keeps_earlier_keys(session_manager):
    extractor = MagicMock()
    extractor.handle_template.side_effect = RuntimeError("sink unavailable")
    service = SettingService(session_manager, extractor=extractor)

    with pytest.raises(RuntimeError):
        service.update_all_settings(_record())

    # written before the template key
    assert _stored(session_manager, "tgRunTime") == "@daily"
    # template and later keys were never written
    assert _stored(session_manager, "xrayTemplateConfig") is None
    assert _stored(session_manager, "timeLocation") is None


@pytest.mark.integration
@pytest.mark.parametrize("stored, expected", [
    ("api", "/api/"),
    ("/api", "/api/"),
    ("api/", "/api/"),
    ("/", "/"),
])
def test_get_base_path_always_slashed(service, session_manager, stored, expected):
    _store(session_manager, webBasePath=stored)

    assert service.get_base_path() == expected


@pytest.mark.integration
def test_get_secret_is_materialized_on_first_read(service, session_manager):
    assert _stored(session_manager, "secret") is None

    first = service.get_secret()
    second = service.get_secret()

    assert first == default_secret().encode()
    assert second == first
    assert _stored(session_manager, "secret") == default_secret()


@pytest.mark.integration
def test_get_secret_keeps_stored_value(service, session_manager):
    _store(session_manager, secret="persisted-secret")

    assert service.get_secret() == b"persisted-secret"


@pytest.mark.integration
def test_get_secret_survives_failed_save(service):
    with patch.object(
        SettingRepository,
        "upsert",
        side_effect=OperationalError("INSERT", {}, Exception("read-only database")),
    ):
        assert service.get_secret() == default_secret().encode()


@pytest.mark.integration
def test_typed_accessors_round_trip(service):
    service.set_port(8080)
    service.set_tg_bot_chat_id(-100123)
    service.set_tg_bot_enabled(True)
    service.set_tg_bot_token("token")
    service.set_tg_bot_runtime("@hourly")

    assert service.get_port() == 8080
    assert service.get_tg_bot_chat_id() == -100123
    assert service.get_tg_bot_enabled() is True
    assert service.get_tg_bot_token() == "token"
    assert service.get_tg_bot_runtime() == "@hourly"


@pytest.mark.integration
def test_string_accessors_fall_back_to_defaults(service):
    assert service.get_listen() == ""
    assert service.get_cert_file() == ""
    assert service.get_key_file() == ""
    assert service.get_xray_config_template() == DEFAULT_VALUES["xrayTemplateConfig"]
    assert service.get_tg_bot_enabled() is False


@pytest.mark.integration
def test_get_string_unknown_key(service):
    with pytest.raises(SettingNotFoundError):
        service.get_string("noSuchKey")


@pytest.mark.integration
def test_get_port_conversion_error(service, session_manager):
    _store(session_manager, webPort="80a")

    with pytest.raises(ConversionError):
        service.get_port()


@pytest.mark.integration
def test_get_tg_bot_enabled_conversion_error(service, session_manager):
    _store(session_manager, tgBotEnable="maybe")

    with pytest.raises(ConversionError):
        service.get_tg_bot_enabled()


@pytest.mark.integration
def test_get_time_location(service, session_manager):
    _store(session_manager, timeLocation="Europe/Berlin")

    assert service.get_time_location() == ZoneInfo("Europe/Berlin")


@pytest.mark.integration
def test_get_time_location_falls_back_to_default(service, session_manager):
    _store(session_manager, timeLocation="Nowhere/Special")

    assert service.get_time_location() == ZoneInfo(DEFAULT_VALUES["timeLocation"])


@pytest.mark.integration
def test_get_time_location_empty_is_utc(service, session_manager):
    _store(session_manager, timeLocation="")

    assert service.get_time_location() == ZoneInfo("UTC")
