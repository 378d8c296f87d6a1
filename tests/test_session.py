import json

import structlog

from freight_cms.core.config import ConfigManager
from freight_cms.core.logger import configure_logging
from freight_cms.core.session import (
    COLLECTION_UPDATED,
    SESSION_ENDED,
    EventChannel,
    SessionContext,
    TokenStore,
)
from freight_cms.data.models import PortalRole


def test_token_store_uses_role_storage_keys(token_store):
    token_store.set(PortalRole.ADMIN, "a")
    token_store.set(PortalRole.CLIENTE, "c")

    data = json.loads(token_store.path.read_text())

    assert data == {"admin_token": "a", "cliente_token": "c"}


def test_session_resumes_stored_token(token_store):
    token_store.set(PortalRole.DRIVER, "saved")

    session = SessionContext(PortalRole.DRIVER, token_store=token_store)

    assert session.is_authenticated
    assert session.token == "saved"


def test_end_clears_token_and_cache(token_store):
    events = EventChannel()
    ended = []
    events.subscribe(SESSION_ENDED, ended.append)
    session = SessionContext(PortalRole.ADMIN, token_store=token_store, events=events)
    session.start("tok")
    session.apply("freights", [1, 2], session.next_sequence())

    session.end()

    assert session.token is None
    assert token_store.get(PortalRole.ADMIN) is None
    assert session.get("freights") == []
    assert ended == [{"role": "admin"}]


def test_stale_result_does_not_overwrite_newer(token_store):
    session = SessionContext(PortalRole.ADMIN, token_store=token_store)
    older = session.next_sequence()
    newer = session.next_sequence()

    assert session.apply("freights", ["new"], newer)
    assert not session.apply("freights", ["old"], older)
    assert session.get("freights") == ["new"]


def test_fetch_from_ended_session_is_dropped(token_store):
    session = SessionContext(PortalRole.ADMIN, token_store=token_store)
    session.start("t1")
    in_flight = session.next_sequence()

    session.end()

    assert not session.apply("freights", ["old-session-row"], in_flight)
    assert session.get("freights") == []


def test_fetch_from_previous_login_is_dropped(token_store):
    session = SessionContext(PortalRole.ADMIN, token_store=token_store)
    session.start("t1")
    in_flight = session.next_sequence()

    session.start("t2")

    assert not session.apply("freights", ["old-session-row"], in_flight)
    assert session.apply("freights", ["new"], session.next_sequence())
    assert session.get("freights") == ["new"]


def test_collection_updates_are_published(token_store):
    events = EventChannel()
    updates = []
    unsubscribe = events.subscribe(COLLECTION_UPDATED, updates.append)
    session = SessionContext(PortalRole.ADMIN, token_store=token_store, events=events)

    session.apply("drivers", ["d"], session.next_sequence())
    unsubscribe()
    session.apply("drivers", ["d", "e"], session.next_sequence())

    assert updates == [{"collection": "drivers", "count": 1}]


def test_failing_subscriber_does_not_block_others():
    events = EventChannel()
    received = []

    def broken(payload):
        raise RuntimeError("boom")

    events.subscribe("topic", broken)
    events.subscribe("topic", received.append)
    events.publish("topic", {"x": 1})

    assert received == [{"x": 1}]


def test_missing_business_config_falls_back_to_defaults(tmp_path):
    config = ConfigManager(config_dir=tmp_path)

    assert config.get_storage_key(PortalRole.ABASTECEDOR) == "abastecedor_token"
    assert config.get_polling_config().admin_seconds == 5
    assert config.get_pagination_config().default_limit == 10


def test_business_config_is_loaded(config_manager):
    assert config_manager.get_polling_config().driver_statement_seconds == 3
    assert config_manager.get_locale() == "pt-BR"


def test_token_file_survives_new_store(tmp_path, config_manager):
    path = tmp_path / "nested" / "tokens.json"
    TokenStore(path=path, config_manager=config_manager).set(PortalRole.ADMIN, "x")

    assert TokenStore(path=path, config_manager=config_manager).get(PortalRole.ADMIN) == "x"


def test_configure_logging_renders_json(config_manager, capsys):
    configure_logging(level="INFO", json_output=True, config_manager=config_manager)
    try:
        logger = structlog.get_logger(service_name="balance")
        logger.debug("hidden_event")
        logger.info("payment_batch_built", driver_id=1)
        output = capsys.readouterr().out
    finally:
        structlog.reset_defaults()

    assert '"event": "payment_batch_built"' in output
    assert '"driver_id": 1' in output
    assert "hidden_event" not in output
