"""Inventory item CRUD."""
from __future__ import annotations

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from sims.core.errors import NotFoundError
from sims.models.inventory import InventoryItem
from sims.schemas.inventory import InventoryItemCreate, InventoryItemRead, InventoryItemUpdate
from sims.services.activity import Actor, record_activity

TABLE = "inventory"


def item_to_read(item: InventoryItem) -> InventoryItemRead:
    return InventoryItemRead(
        id=item.id,
        name=item.item_name,
        category=item.category,
        quantity=item.quantity,
        price=item.unit_cost,
        serial_number=item.item_code or "",
        description=item.description or "",
        low_stock_threshold=item.reorder_level,
        unit=item.unit or "pcs",
        supplier=item.supplier or "",
        location=item.location or "Store",
        created_at=item.created_at,
    )


async def list_items(session: AsyncSession, search: str | None = None, category: str | None = None) -> list[InventoryItem]:
    query = select(InventoryItem)
    if search and search.strip():
        pattern = f"%{search.strip().lower()}%"
        query = query.where(
            or_(
                func.lower(InventoryItem.item_name).like(pattern),
                func.lower(InventoryItem.description).like(pattern),
            )
        )
    if category and category.strip() and category.strip().lower() != "all":
        query = query.where(InventoryItem.category == category.strip())
    result = await session.execute(query.order_by(InventoryItem.created_at.desc(), InventoryItem.id.desc()))
    return list(result.scalars().all())


async def get_item(session: AsyncSession, item_id: int) -> InventoryItem:
    item = await session.get(InventoryItem, item_id)
    if not item:
        raise NotFoundError("Item not found")
    return item


def _apply(item: InventoryItem, item_in: InventoryItemCreate) -> None:
    item.item_name = item_in.name
    item.category = item_in.category
    item.description = item_in.description or ""
    item.quantity = item_in.quantity
    item.unit_cost = item_in.price
    item.item_code = (item_in.serial_number or "").strip()
    item.unit = item_in.unit or "pcs"
    item.supplier = item_in.supplier or ""
    item.location = item_in.location or "Store"
    if item_in.low_stock_threshold is not None:
        item.reorder_level = item_in.low_stock_threshold
    elif item.reorder_level is None:
        item.reorder_level = 10


async def create_item(session: AsyncSession, item_in: InventoryItemCreate, actor: Actor) -> InventoryItem:
    item = InventoryItem()
    _apply(item, item_in)
    session.add(item)
    await session.commit()
    await record_activity(
        actor, "CREATE_INVENTORY", f"Added {item.item_name} (qty {item.quantity})", TABLE, item.id
    )
    return item


async def update_item(session: AsyncSession, item_in: InventoryItemUpdate, actor: Actor) -> InventoryItem:
    item = await get_item(session, item_in.id)
    _apply(item, item_in)
    await session.commit()
    await record_activity(
        actor, "UPDATE_INVENTORY", f"Updated {item.item_name} (qty {item.quantity})", TABLE, item.id
    )
    return item


async def delete_item(session: AsyncSession, item_id: int, actor: Actor) -> None:
    item = await get_item(session, item_id)
    name = item.item_name
    await session.delete(item)
    await session.commit()
    await record_activity(actor, "DELETE_INVENTORY", f"Deleted {name}", TABLE, item_id)


async def list_categories(session: AsyncSession) -> list[str]:
    result = await session.execute(
        select(InventoryItem.category)
        .where(InventoryItem.category.is_not(None), InventoryItem.category != "")
        .distinct()
        .order_by(InventoryItem.category)
    )
    return [row[0] for row in result.all()]
