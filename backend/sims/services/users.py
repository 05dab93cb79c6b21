"""User service functions for CRUD and authentication."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sims.core.errors import ConflictError, NotFoundError, ValidationError
from sims.core.permissions import HEAD_ADMIN, normalize_role
from sims.core.security import PasswordHasher
from sims.core.timeutils import utcnow
from sims.models.user import User
from sims.schemas.user import UserCreate, UserUpdate
from sims.services.activity import Actor, record_activity

logger = logging.getLogger(__name__)

SYSTEM_ADMIN_USERNAME = "admin"
SYSTEM_ADMIN_NAME = "System Administrator"
SYSTEM_ADMIN_INITIALS = "SA"


@dataclass(frozen=True, slots=True)
class Identity:
    """How a user is presented to clients and to the authorization policy."""

    id: int
    username: str
    name: str
    role: str
    initials: str | None


def present_identity(user: User) -> Identity:
    """Return the display identity for ``user``.

    The built-in ``admin`` account is always shown as the system administrator
    with the top role, whatever its row says. Older databases carry that
    account with a stale name and role; ``ensure_system_administrator`` fixes
    the row at startup and this keeps reads correct before that has run.
    """
    role = normalize_role(user.role) or user.role
    if user.username.lower() == SYSTEM_ADMIN_USERNAME:
        return Identity(
            id=user.id,
            username=user.username,
            name=SYSTEM_ADMIN_NAME,
            role=HEAD_ADMIN,
            initials=user.initials or SYSTEM_ADMIN_INITIALS,
        )
    return Identity(id=user.id, username=user.username, name=user.name, role=role, initials=user.initials)


def derive_initials(full_name: str) -> str:
    parts = [part for part in full_name.split() if part]
    return "".join(part[0] for part in parts[:3]).upper() or "?"


async def get_user_by_username(session: AsyncSession, username: str) -> User | None:
    normalized = username.strip().lower()
    result = await session.execute(select(User).where(User.username == normalized))
    return result.scalar_one_or_none()


async def get_user(session: AsyncSession, user_id: int) -> User:
    user = await session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


async def list_users(session: AsyncSession) -> list[User]:
    result = await session.execute(select(User).order_by(User.name, User.id))
    return list(result.scalars().all())


async def users_exist(session: AsyncSession) -> bool:
    result = await session.execute(select(User.id))
    return result.first() is not None


async def authenticate_user(session: AsyncSession, username: str, password: str) -> User | None:
    """Return the active user matching the credentials, or None.

    Unknown and inactive usernames still pay for one hash verification so the
    response time does not reveal which usernames exist.
    """
    user = await get_user_by_username(session, username)
    if not user or not user.is_active:
        PasswordHasher.burn(password)
        return None
    if not PasswordHasher.verify(password, user.password_hash):
        return None
    user.last_login = utcnow()
    await session.commit()
    return user


async def create_user(session: AsyncSession, user_in: UserCreate, actor: Actor | None = None) -> User:
    username = user_in.username.lower()
    if await get_user_by_username(session, username):
        raise ConflictError("Username already exists")
    full_name = user_in.full_name.strip()
    user = User(
        username=username,
        password_hash=PasswordHasher.hash(user_in.password),
        name=full_name,
        role=user_in.role,
        initials=derive_initials(full_name),
        is_active=True,
    )
    session.add(user)
    await session.commit()
    logger.info("Created user %s with role %s", user.username, user.role)
    await record_activity(
        actor, "CREATE_USER", f"Created user {user.username} ({user.role})", "users", user.id
    )
    return user


async def update_user(session: AsyncSession, user_id: int, user_in: UserUpdate, actor: Actor | None = None) -> User:
    user = await get_user(session, user_id)
    changes: list[str] = []
    if user_in.full_name is not None:
        user.name = user_in.full_name.strip()
        user.initials = derive_initials(user.name)
        changes.append("name")
    if user_in.role is not None:
        user.role = user_in.role
        changes.append("role")
    if user_in.password is not None:
        user.password_hash = PasswordHasher.hash(user_in.password)
        changes.append("password")
    if user_in.is_active is not None:
        if actor is not None and actor.id == user.id and not user_in.is_active:
            raise ValidationError("You cannot deactivate your own account")
        user.is_active = user_in.is_active
        changes.append("active flag")
    if not changes:
        raise ValidationError("No changes supplied")
    await session.commit()
    await record_activity(
        actor, "UPDATE_USER", f"Updated {', '.join(changes)} for user {user.username}", "users", user.id
    )
    return user


async def deactivate_user(session: AsyncSession, user_id: int, actor: Actor | None = None) -> User:
    """Soft delete: the row stays retrievable but can no longer log in."""
    user = await get_user(session, user_id)
    if actor is not None and actor.id == user.id:
        raise ValidationError("You cannot deactivate your own account")
    user.is_active = False
    await session.commit()
    logger.info("Deactivated user %s", user.username)
    await record_activity(actor, "DEACTIVATE_USER", f"Deactivated user {user.username}", "users", user.id)
    return user


async def ensure_system_administrator(session: AsyncSession, bootstrap_password: str | None = None) -> User | None:
    """Seed or correct the built-in ``admin`` account.

    An existing row gets the system administrator name and role. When no users
    exist at all and a bootstrap password is configured, the account is created.
    """
    user = await get_user_by_username(session, SYSTEM_ADMIN_USERNAME)
    if user is None:
        if not bootstrap_password or await users_exist(session):
            return None
        user = User(
            username=SYSTEM_ADMIN_USERNAME,
            password_hash=PasswordHasher.hash(bootstrap_password),
            name=SYSTEM_ADMIN_NAME,
            role=HEAD_ADMIN,
            initials=SYSTEM_ADMIN_INITIALS,
            is_active=True,
        )
        session.add(user)
        await session.commit()
        logger.info("Created bootstrap system administrator account")
        return user

    if user.name != SYSTEM_ADMIN_NAME or user.role != HEAD_ADMIN or not user.initials:
        user.name = SYSTEM_ADMIN_NAME
        user.role = HEAD_ADMIN
        user.initials = user.initials or SYSTEM_ADMIN_INITIALS
        await session.commit()
        logger.info("Normalized system administrator account")
    return user
