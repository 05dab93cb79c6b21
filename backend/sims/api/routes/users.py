"""Staff account management endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from sims.core.dependencies import AuthenticatedUser, get_db, get_session_manager, require_access
from sims.models.user import User
from sims.schemas.common import MessageResponse
from sims.schemas.user import (
    UserCreate,
    UserCreatedResponse,
    UserListResponse,
    UserRead,
    UserResponse,
    UserUpdate,
)
from sims.services import users as user_service
from sims.services.sessions import SessionManager

router = APIRouter(prefix="/users", tags=["users"])


def _user_to_read(user: User) -> UserRead:
    identity = user_service.present_identity(user)
    return UserRead(
        id=user.id,
        username=user.username,
        name=identity.name,
        full_name=identity.name,
        role=identity.role,
        initials=identity.initials,
        is_active=user.is_active,
        last_login=user.last_login,
    )


@router.get("", response_model=UserListResponse)
async def list_users(
    session: AsyncSession = Depends(get_db),
    _: AuthenticatedUser = Depends(require_access("users")),
) -> UserListResponse:
    users = await user_service.list_users(session)
    return UserListResponse(users=[_user_to_read(user) for user in users])


@router.post("", response_model=UserCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: UserCreate,
    session: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_access("users")),
) -> UserCreatedResponse:
    user = await user_service.create_user(session, payload, current_user)
    return UserCreatedResponse(message="User created successfully", user_id=user.id)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    session: AsyncSession = Depends(get_db),
    _: AuthenticatedUser = Depends(require_access("users")),
) -> UserResponse:
    return UserResponse(user=_user_to_read(await user_service.get_user(session, user_id)))


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    payload: UserUpdate,
    session: AsyncSession = Depends(get_db),
    manager: SessionManager = Depends(get_session_manager),
    current_user: AuthenticatedUser = Depends(require_access("users")),
) -> UserResponse:
    user = await user_service.update_user(session, user_id, payload, current_user)
    if not user.is_active:
        await manager.deactivate_user(user.id)
    return UserResponse(user=_user_to_read(user))


@router.delete("/{user_id}", response_model=MessageResponse)
async def deactivate_user(
    user_id: int,
    session: AsyncSession = Depends(get_db),
    manager: SessionManager = Depends(get_session_manager),
    current_user: AuthenticatedUser = Depends(require_access("users")),
) -> MessageResponse:
    user = await user_service.deactivate_user(session, user_id, current_user)
    await manager.deactivate_user(user.id)
    return MessageResponse(message="User deactivated successfully")
