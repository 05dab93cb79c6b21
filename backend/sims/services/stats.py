"""Dashboard figures."""
from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from sims.models.asset import Asset
from sims.models.inventory import InventoryItem
from sims.schemas.activity import ActivityLogRead, AssetStats, DashboardStats, InventoryStats
from sims.schemas.asset import STATUS_ACTIVE, storage_status
from sims.services.activity import list_activity

RECENT_ACTIVITY = 10


async def dashboard_stats(session: AsyncSession) -> DashboardStats:
    total_items, total_value = (
        await session.execute(
            select(
                func.count(InventoryItem.id),
                func.coalesce(func.sum(InventoryItem.unit_cost * InventoryItem.quantity), 0),
            )
        )
    ).one()
    low_stock = (
        await session.execute(
            select(func.count(InventoryItem.id)).where(InventoryItem.quantity <= InventoryItem.reorder_level)
        )
    ).scalar_one()
    total_assets = (await session.execute(select(func.count(Asset.id)))).scalar_one()
    active_assets = (
        await session.execute(
            select(func.count(Asset.id)).where(Asset.condition_status == storage_status(STATUS_ACTIVE))
        )
    ).scalar_one()
    recent = await list_activity(session, RECENT_ACTIVITY)
    return DashboardStats(
        inventory=InventoryStats(
            total_items=total_items,
            total_value=round(float(total_value), 2),
            low_stock_items=low_stock,
        ),
        assets=AssetStats(total_assets=total_assets, active_assets=active_assets),
        recent_activity=[ActivityLogRead.model_validate(entry) for entry in recent],
    )
