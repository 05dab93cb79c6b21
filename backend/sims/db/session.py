"""Database session and engine management."""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from sims.core.config import get_settings

_settings = get_settings()

# SQLite connections are opened per checkout so the engine survives event loop changes.
_engine_options = {"poolclass": NullPool} if _settings.database_url.startswith("sqlite") else {"pool_pre_ping": True}
engine = create_async_engine(_settings.database_url, future=True, echo=False, **_engine_options)
async_session_factory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@asynccontextmanager
async def get_session() -> AsyncIterator[AsyncSession]:
    """Provide a transactional scope around a series of operations."""

    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
