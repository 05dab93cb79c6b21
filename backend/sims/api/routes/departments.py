"""Department lookup endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from sims.core.dependencies import AuthenticatedUser, get_db, require_access
from sims.schemas.asset import DepartmentCreate, DepartmentListResponse, DepartmentRead, DepartmentResponse
from sims.services import assets as asset_service

router = APIRouter(prefix="/departments", tags=["departments"])


@router.get("", response_model=DepartmentListResponse)
async def list_departments(
    session: AsyncSession = Depends(get_db),
    _: AuthenticatedUser = Depends(require_access("departments")),
) -> DepartmentListResponse:
    departments = await asset_service.list_departments(session)
    return DepartmentListResponse(departments=[DepartmentRead.model_validate(d) for d in departments])


@router.post("", response_model=DepartmentResponse, status_code=status.HTTP_201_CREATED)
async def create_department(
    payload: DepartmentCreate,
    session: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_access("departments")),
) -> DepartmentResponse:
    department = await asset_service.create_department(session, payload.name, current_user)
    return DepartmentResponse(department=DepartmentRead.model_validate(department))
