"""Health, diagnostics and dashboard endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from sims.core.dependencies import AuthenticatedUser, get_db, get_session_manager, require_access
from sims.core.timeutils import utcnow
from sims.models.asset import Asset
from sims.models.inventory import InventoryItem
from sims.models.user import User
from sims.schemas.activity import DashboardResponse
from sims.schemas.system import DatabaseCounts, DbStatusResponse, HealthResponse
from sims.services.sessions import SessionManager
from sims.services.stats import dashboard_stats

router = APIRouter(tags=["system"])


@router.get("/health", response_model=HealthResponse)
async def health(session: AsyncSession = Depends(get_db)) -> HealthResponse:
    await session.execute(text("SELECT 1"))
    return HealthResponse(status="healthy", database="connected", timestamp=utcnow())


@router.get("/debug/db-status", response_model=DbStatusResponse)
async def db_status(
    session: AsyncSession = Depends(get_db),
    manager: SessionManager = Depends(get_session_manager),
) -> DbStatusResponse:
    async def count(model) -> int:
        return (await session.execute(select(func.count(model.id)))).scalar_one()

    return DbStatusResponse(
        status="Server is running",
        timestamp=utcnow(),
        session_store=manager.mode,
        database=DatabaseCounts(
            users_count=await count(User),
            inventory_count=await count(InventoryItem),
            assets_count=await count(Asset),
            active_sessions=await manager.count_active(),
            connection_status="Connected",
        ),
    )


@router.get("/stats/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    session: AsyncSession = Depends(get_db),
    _: AuthenticatedUser = Depends(require_access("dashboard")),
) -> DashboardResponse:
    return DashboardResponse(stats=await dashboard_stats(session))
