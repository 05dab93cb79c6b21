"""Audit trail endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from sims.core.dependencies import AuthenticatedUser, get_current_user, get_db, require_access
from sims.core.errors import PersistenceError
from sims.schemas.activity import ActivityLogCreate, ActivityLogListResponse, ActivityLogRead, ActivityLogResponse
from sims.services import activity as activity_service

router = APIRouter(prefix="/activity-logs", tags=["activity"])


@router.get("", response_model=ActivityLogListResponse)
async def list_activity_logs(
    limit: int = Query(default=activity_service.DEFAULT_LIMIT, ge=1, le=activity_service.MAX_LIMIT),
    session: AsyncSession = Depends(get_db),
    _: AuthenticatedUser = Depends(require_access("audit")),
) -> ActivityLogListResponse:
    entries = await activity_service.list_activity(session, limit)
    return ActivityLogListResponse(logs=[ActivityLogRead.model_validate(entry) for entry in entries])


@router.post("", response_model=ActivityLogResponse, status_code=status.HTTP_201_CREATED)
async def append_activity_log(
    payload: ActivityLogCreate,
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> ActivityLogResponse:
    entry = await activity_service.record_client_activity(current_user, payload.action, payload.description)
    if entry is None:
        raise PersistenceError("Could not record activity")
    return ActivityLogResponse(log=ActivityLogRead.model_validate(entry))
