"""Audit trail writes and reads.

Entries are appended in their own session and transaction after the mutation
they describe has been committed. A failure to append is logged and rolled
back; the caller's mutation stands. Audit is therefore best-effort and
at-most-once.
"""
from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sims.core.errors import ValidationError
from sims.db.session import get_session
from sims.models.activity import ActivityLog

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50
MAX_LIMIT = 200

# Written only by the repositories when they change a row.
SERVER_ACTIONS = frozenset(
    {
        "CREATE_INVENTORY",
        "UPDATE_INVENTORY",
        "DELETE_INVENTORY",
        "CREATE_ASSET",
        "UPDATE_ASSET",
        "DELETE_ASSET",
        "BULK_CREATE_ASSET",
        "CREATE_USER",
        "UPDATE_USER",
        "DEACTIVATE_USER",
        "CREATE_DEPARTMENT",
    }
)


class Actor(Protocol):
    id: int
    username: str


async def record_activity(
    actor: Actor | None,
    action: str,
    description: str,
    table_name: str | None = None,
    record_id: int | str | None = None,
) -> ActivityLog | None:
    entry = ActivityLog(
        user_id=actor.id if actor else None,
        username=actor.username if actor else "system",
        action=action,
        table_name=table_name,
        record_id=str(record_id) if record_id is not None else None,
        description=description,
    )
    async with get_session() as session:
        try:
            session.add(entry)
            await session.commit()
        except SQLAlchemyError:
            logger.exception("Failed to append activity %s for %s", action, entry.username)
            await session.rollback()
            return None
    return entry


async def record_client_activity(actor: Actor, action: str, description: str) -> ActivityLog | None:
    """Append an event reported by the front end.

    Client events never name a table or record and may not use the tags the
    repositories write.
    """
    if action in SERVER_ACTIONS:
        raise ValidationError(f"Action {action} is recorded by the server only")
    return await record_activity(actor, action, description)


async def list_activity(session: AsyncSession, limit: int | None = DEFAULT_LIMIT) -> list[ActivityLog]:
    limit = max(1, min(limit or DEFAULT_LIMIT, MAX_LIMIT))
    result = await session.execute(
        select(ActivityLog).order_by(ActivityLog.timestamp.desc(), ActivityLog.id.desc()).limit(limit)
    )
    return list(result.scalars().all())
