"""Reusable dependencies for FastAPI routes."""
from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from sims.core.config import get_settings
from sims.core.errors import AuthenticationError, AuthorizationError
from sims.core.permissions import authorize
from sims.core.security import SessionSigner
from sims.db.session import get_session
from sims.models.user import User
from sims.services.repair_status import RepairStatusBridge
from sims.services.sessions import SessionManager
from sims.services.users import present_identity

logger = logging.getLogger(__name__)

SESSION_EXPIRED = "Session expired. Please sign in again."


@dataclass(frozen=True, slots=True)
class AuthenticatedUser:
    id: int
    username: str
    name: str
    role: str
    initials: str | None
    session_token: str


async def get_db() -> AsyncIterator[AsyncSession]:
    async with get_session() as session:
        yield session


def get_session_manager(request: Request) -> SessionManager:
    return request.app.state.session_manager


def get_repair_bridge(request: Request) -> RepairStatusBridge:
    return request.app.state.repair_bridge


def read_session_token(request: Request) -> str | None:
    """Return the unsigned token from the session cookie, or None if absent or tampered with."""
    cookie = request.cookies.get(get_settings().session_cookie_name)
    if not cookie:
        return None
    try:
        return SessionSigner().loads(cookie)
    except ValueError:
        return None


async def get_current_user(
    request: Request,
    session: AsyncSession = Depends(get_db),
    manager: SessionManager = Depends(get_session_manager),
) -> AuthenticatedUser:
    """Resolve the session user, re-reading the user row so role changes apply immediately."""
    token = read_session_token(request)
    if not token:
        raise AuthenticationError()

    record = await manager.validate(token)
    if record is None:
        raise AuthenticationError(SESSION_EXPIRED)

    user = await session.get(User, record.user_id)
    if user is None or not user.is_active:
        await manager.destroy(token)
        raise AuthenticationError("Account is not active")

    await manager.touch(token)
    identity = present_identity(user)
    return AuthenticatedUser(
        id=identity.id,
        username=identity.username,
        name=identity.name,
        role=identity.role,
        initials=identity.initials,
        session_token=token,
    )


def require_access(resource: str) -> Callable[..., Awaitable[AuthenticatedUser]]:
    async def dependency(current_user: AuthenticatedUser = Depends(get_current_user)) -> AuthenticatedUser:
        if not authorize(current_user.role, resource):
            logger.info("Denied %s (%s) access to %s", current_user.username, current_user.role, resource)
            raise AuthorizationError()
        return current_user

    return dependency
