"""Authentication endpoints."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from sims.core.dependencies import AuthenticatedUser, get_current_user, get_db, get_session_manager
from sims.core.errors import AuthenticationError
from sims.core.security import clear_session_cookie, set_session_cookie
from sims.schemas.auth import AuthResponse, LoginRequest, UserIdentity
from sims.schemas.common import MessageResponse
from sims.services.sessions import SessionManager
from sims.services.users import authenticate_user, present_identity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

INVALID_CREDENTIALS = "Invalid username or password"


@router.post("/login", response_model=AuthResponse)
async def login(
    payload: LoginRequest,
    request: Request,
    response: Response,
    session: AsyncSession = Depends(get_db),
    manager: SessionManager = Depends(get_session_manager),
) -> AuthResponse:
    user = await authenticate_user(session, payload.username, payload.password)
    if not user:
        logger.info("Failed login for %s", payload.username.strip().lower())
        raise AuthenticationError(INVALID_CREDENTIALS)

    token = await manager.create(
        user.id,
        client_ip=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    set_session_cookie(response, token)
    logger.info("User %s signed in", user.username)
    identity = present_identity(user)
    return AuthResponse(
        user=UserIdentity(
            id=identity.id,
            username=identity.username,
            name=identity.name,
            role=identity.role,
            initials=identity.initials,
        )
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    current_user: AuthenticatedUser = Depends(get_current_user),
    manager: SessionManager = Depends(get_session_manager),
) -> MessageResponse:
    await manager.destroy(current_user.session_token)
    logger.info("User %s signed out", current_user.username)
    clear_session_cookie(response)
    return MessageResponse(message="Signed out successfully")


@router.get("/me", response_model=AuthResponse)
async def get_current_user_info(current_user: AuthenticatedUser = Depends(get_current_user)) -> AuthResponse:
    return AuthResponse(
        user=UserIdentity(
            id=current_user.id,
            username=current_user.username,
            name=current_user.name,
            role=current_user.role,
            initials=current_user.initials,
        )
    )
