from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import OperationalError

from sims.core.timeutils import utcnow
from sims.db.session import async_session_factory
from sims.services.sessions import DatabaseSessionStore, MemorySessionStore, SessionManager

from .conftest import drop_table

TTL = timedelta(hours=24)


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2024, 3, 1, 8, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class BrokenStore(MemorySessionStore):
    mode = "database"

    async def insert(self, record) -> None:
        raise OperationalError("INSERT INTO user_sessions", {}, Exception("relation does not exist"))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def manager(clock) -> SessionManager:
    return SessionManager(MemorySessionStore(), ttl=TTL, clock=clock)


async def test_token_is_high_entropy_hex(manager):
    token = await manager.create(1)
    assert len(token) == 96
    int(token, 16)
    assert token != await manager.create(1)


async def test_session_valid_until_ttl_elapses(manager, clock):
    token = await manager.create(1)
    clock.advance(hours=23, minutes=59)
    assert await manager.validate(token) is not None

    clock.advance(minutes=1)
    assert await manager.validate(token) is None
    # Expired sessions are deactivated, not revived by later activity.
    clock.now -= timedelta(hours=1)
    assert await manager.validate(token) is None


async def test_touch_slides_expiry(manager, clock):
    token = await manager.create(1)
    for _ in range(6):
        clock.advance(hours=12)
        assert await manager.validate(token) is not None
        await manager.touch(token)

    clock.advance(hours=24, seconds=1)
    assert await manager.validate(token) is None


async def test_destroy_is_idempotent(manager):
    token = await manager.create(1)
    await manager.destroy(token)
    await manager.destroy(token)
    await manager.destroy("unknown-token")
    await manager.destroy(None)
    assert await manager.validate(token) is None


async def test_validate_rejects_missing_token(manager):
    assert await manager.validate(None) is None
    assert await manager.validate("") is None
    assert await manager.validate("f" * 96) is None


async def test_sweep_counts_only_idle_sessions(manager, clock):
    stale = await manager.create(1)
    clock.advance(hours=20)
    fresh = await manager.create(2)
    clock.advance(hours=5)

    assert await manager.sweep() == 1
    assert await manager.validate(stale) is None
    assert await manager.validate(fresh) is not None
    assert await manager.sweep() == 0


async def test_deactivate_user_ends_all_their_sessions(manager):
    first = await manager.create(7)
    second = await manager.create(7)
    other = await manager.create(8)

    assert await manager.deactivate_user(7) == 2
    assert await manager.validate(first) is None
    assert await manager.validate(second) is None
    assert await manager.validate(other) is not None


async def test_store_failure_switches_to_memory(clock):
    manager = SessionManager(BrokenStore(), ttl=TTL, clock=clock)
    assert manager.mode == "database"

    token = await manager.create(1)

    assert manager.degraded is True
    assert manager.mode == "memory"
    assert await manager.validate(token) is not None


async def test_database_store_round_trip(accounts):
    manager = SessionManager(DatabaseSessionStore(async_session_factory), ttl=TTL)
    user_id = accounts["admin"].id

    token = await manager.create(user_id, client_ip="10.0.0.5", user_agent="pytest")
    record = await manager.validate(token)

    assert manager.mode == "database"
    assert record.user_id == user_id
    assert record.client_ip == "10.0.0.5"
    assert record.last_activity.tzinfo is not None
    assert utcnow() - record.last_activity < timedelta(minutes=1)
    assert await manager.count_active() == 1


async def test_missing_session_table_degrades_without_losing_logins(accounts):
    await drop_table("user_sessions")
    manager = SessionManager(DatabaseSessionStore(async_session_factory), ttl=TTL)

    token = await manager.create(accounts["admin"].id)

    assert manager.mode == "memory"
    assert await manager.validate(token) is not None


def test_http_login_survives_session_store_outage(client, login):
    client.portal.call(drop_table, "user_sessions")

    login("admin")
    assert client.get("/api/auth/me").status_code == 200
    status = client.get("/api/debug/db-status").json()
    assert status["sessionStore"] == "memory"
