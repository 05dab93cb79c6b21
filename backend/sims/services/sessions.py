"""Login session lifecycle: creation, sliding-expiry validation, logout and sweeping.

Sessions normally live in the ``user_sessions`` table. If that store fails
(missing relation, unreachable database) the manager swaps, once and for the
rest of the process lifetime, to an in-memory store. Sessions issued before the
swap are lost; users sign in again.
"""
from __future__ import annotations

import logging
import secrets
import threading
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Protocol, TypeVar

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sims.core.timeutils import as_utc, utcnow
from sims.models.user import UserSession

logger = logging.getLogger(__name__)

T = TypeVar("T")

TOKEN_BYTES = 48


@dataclass(slots=True)
class SessionRecord:
    token: str
    user_id: int
    created_at: datetime
    last_activity: datetime
    is_active: bool = True
    client_ip: str | None = None
    user_agent: str | None = None


class SessionStore(Protocol):
    mode: str

    async def insert(self, record: SessionRecord) -> None:
        ...

    async def get(self, token: str) -> SessionRecord | None:
        ...

    async def touch(self, token: str, when: datetime) -> None:
        ...

    async def deactivate(self, token: str) -> None:
        ...

    async def deactivate_idle(self, cutoff: datetime) -> int:
        ...

    async def deactivate_user(self, user_id: int) -> int:
        ...

    async def count_active(self) -> int:
        ...


class MemorySessionStore:
    """Process-local session map used in degraded mode and in tests."""

    mode = "memory"

    def __init__(self) -> None:
        self._sessions: dict[str, SessionRecord] = {}

    async def insert(self, record: SessionRecord) -> None:
        self._sessions[record.token] = replace(record)

    async def get(self, token: str) -> SessionRecord | None:
        record = self._sessions.get(token)
        return replace(record) if record else None

    async def touch(self, token: str, when: datetime) -> None:
        record = self._sessions.get(token)
        if record and record.is_active:
            record.last_activity = when

    async def deactivate(self, token: str) -> None:
        record = self._sessions.get(token)
        if record:
            record.is_active = False

    async def deactivate_idle(self, cutoff: datetime) -> int:
        # Nothing audits in-memory sessions, so idle and dead entries are dropped outright.
        stale = [
            token
            for token, record in self._sessions.items()
            if not record.is_active or record.last_activity < cutoff
        ]
        expired = sum(1 for token in stale if self._sessions[token].is_active)
        for token in stale:
            del self._sessions[token]
        return expired

    async def deactivate_user(self, user_id: int) -> int:
        count = 0
        for record in self._sessions.values():
            if record.user_id == user_id and record.is_active:
                record.is_active = False
                count += 1
        return count

    async def count_active(self) -> int:
        return sum(1 for record in self._sessions.values() if record.is_active)


class DatabaseSessionStore:
    """Sessions persisted in ``user_sessions``; every call is its own short transaction."""

    mode = "database"

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def insert(self, record: SessionRecord) -> None:
        async with self._session_factory() as session:
            session.add(
                UserSession(
                    session_token=record.token,
                    user_id=record.user_id,
                    ip_address=record.client_ip,
                    user_agent=record.user_agent,
                    is_active=record.is_active,
                    created_at=record.created_at,
                    last_activity=record.last_activity,
                )
            )
            await session.commit()

    async def get(self, token: str) -> SessionRecord | None:
        async with self._session_factory() as session:
            result = await session.execute(select(UserSession).where(UserSession.session_token == token))
            row = result.scalar_one_or_none()
        if row is None:
            return None
        return SessionRecord(
            token=row.session_token,
            user_id=row.user_id,
            created_at=as_utc(row.created_at),
            last_activity=as_utc(row.last_activity),
            is_active=row.is_active,
            client_ip=row.ip_address,
            user_agent=row.user_agent,
        )

    async def touch(self, token: str, when: datetime) -> None:
        await self._execute(
            update(UserSession)
            .where(UserSession.session_token == token, UserSession.is_active.is_(True))
            .values(last_activity=when)
        )

    async def deactivate(self, token: str) -> None:
        await self._execute(
            update(UserSession).where(UserSession.session_token == token).values(is_active=False)
        )

    async def deactivate_idle(self, cutoff: datetime) -> int:
        return await self._execute(
            update(UserSession)
            .where(UserSession.is_active.is_(True), UserSession.last_activity < cutoff)
            .values(is_active=False)
        )

    async def deactivate_user(self, user_id: int) -> int:
        return await self._execute(
            update(UserSession)
            .where(UserSession.user_id == user_id, UserSession.is_active.is_(True))
            .values(is_active=False)
        )

    async def count_active(self) -> int:
        async with self._session_factory() as session:
            result = await session.execute(select(UserSession.id).where(UserSession.is_active.is_(True)))
            return len(result.all())

    async def _execute(self, statement) -> int:
        async with self._session_factory() as session:
            result = await session.execute(statement)
            await session.commit()
            return result.rowcount or 0


class SessionManager:
    """Issue, validate, refresh and expire opaque session tokens.

    Expiry is sliding: a session is valid while ``now - last_activity < ttl``
    and every authenticated request moves ``last_activity`` forward.
    """

    def __init__(
        self,
        store: SessionStore,
        ttl: timedelta,
        clock: Callable[[], datetime] = utcnow,
        fallback_factory: Callable[[], SessionStore] = MemorySessionStore,
    ) -> None:
        self._store = store
        self._ttl = ttl
        self._clock = clock
        self._fallback_factory = fallback_factory
        self._swap_lock = threading.Lock()

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    @property
    def mode(self) -> str:
        return self._store.mode

    @property
    def degraded(self) -> bool:
        return self._store.mode == MemorySessionStore.mode

    async def create(self, user_id: int, client_ip: str | None = None, user_agent: str | None = None) -> str:
        now = self._clock()
        record = SessionRecord(
            token=secrets.token_hex(TOKEN_BYTES),
            user_id=user_id,
            created_at=now,
            last_activity=now,
            client_ip=client_ip,
            user_agent=(user_agent or "")[:512],
        )
        await self._call(lambda store: store.insert(record))
        return record.token

    async def validate(self, token: str | None) -> SessionRecord | None:
        if not token:
            return None
        record = await self._call(lambda store: store.get(token))
        if record is None or not record.is_active:
            return None
        if self.is_expired(record):
            logger.info("Session for user %s expired after inactivity", record.user_id)
            await self.destroy(token)
            return None
        return record

    def is_expired(self, record: SessionRecord) -> bool:
        return self._clock() - record.last_activity >= self._ttl

    async def touch(self, token: str) -> None:
        now = self._clock()
        await self._call(lambda store: store.touch(token, now))

    async def destroy(self, token: str | None) -> None:
        if not token:
            return
        await self._call(lambda store: store.deactivate(token))

    async def deactivate_user(self, user_id: int) -> int:
        return await self._call(lambda store: store.deactivate_user(user_id))

    async def sweep(self) -> int:
        cutoff = self._clock() - self._ttl
        count = await self._call(lambda store: store.deactivate_idle(cutoff))
        if count:
            logger.info("Deactivated %d expired session(s)", count)
        return count

    async def count_active(self) -> int:
        return await self._call(lambda store: store.count_active())

    async def _call(self, operation: Callable[[SessionStore], Awaitable[T]]) -> T:
        store = self._store
        try:
            return await operation(store)
        except SQLAlchemyError as exc:
            if store.mode == MemorySessionStore.mode:
                raise
            self._degrade(store, exc)
            return await operation(self._store)

    def _degrade(self, failed: SessionStore, exc: Exception) -> None:
        with self._swap_lock:
            if self._store is failed:
                logger.warning(
                    "Persistent session store failed (%s); using in-memory sessions until restart",
                    exc.__class__.__name__,
                )
                self._store = self._fallback_factory()
