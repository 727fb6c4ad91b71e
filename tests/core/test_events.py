from unittest.mock import AsyncMock

import pytest

from storefront.core import events
from storefront.core.config import SERVICE_NAMES


def test_handlers_defined_for_every_role():
    assert set(events.startup_event_handlers) == set(SERVICE_NAMES)
    assert set(events.shutdown_event_handlers) == set(SERVICE_NAMES)


def test_only_auth_connects_to_redis():
    for role, handlers in events.startup_event_handlers.items():
        assert (events.connect_to_redis in handlers) is (role == "auth")


def test_gateway_never_touches_database():
    assert events.connect_to_db not in events.startup_event_handlers["gateway"]
    assert events.close_db_connection not in events.shutdown_event_handlers["gateway"]


async def test_connect_to_redis_pings(monkeypatch):
    client = AsyncMock()
    monkeypatch.setattr(events, "get_redis_client", lambda: client)

    await events.connect_to_redis()

    client.ping.assert_awaited_once()


async def test_connect_to_redis_failure_aborts_startup(monkeypatch):
    client = AsyncMock()
    client.ping.side_effect = ConnectionError("refused")
    monkeypatch.setattr(events, "get_redis_client", lambda: client)

    with pytest.raises(ConnectionError):
        await events.connect_to_redis()


async def test_connect_to_db_failure_aborts_startup(monkeypatch):
    def broken_factory():
        raise OSError("database unreachable")

    monkeypatch.setattr(events, "async_session_factory", broken_factory)

    with pytest.raises(OSError):
        await events.connect_to_db()
