"""Inventory endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from sims.core.dependencies import AuthenticatedUser, get_db, require_access
from sims.schemas.common import MessageResponse
from sims.schemas.inventory import (
    CategoryListResponse,
    InventoryItemCreate,
    InventoryItemUpdate,
    InventoryListResponse,
    InventorySavedResponse,
)
from sims.services import inventory as inventory_service

router = APIRouter(prefix="/inventory", tags=["inventory"])
categories_router = APIRouter(tags=["inventory"])


@router.get("", response_model=InventoryListResponse)
async def list_inventory(
    search: str | None = Query(default=None),
    category: str | None = Query(default=None),
    session: AsyncSession = Depends(get_db),
    _: AuthenticatedUser = Depends(require_access("inventory")),
) -> InventoryListResponse:
    items = await inventory_service.list_items(session, search=search, category=category)
    return InventoryListResponse(items=[inventory_service.item_to_read(item) for item in items])


@router.post("", response_model=InventorySavedResponse, status_code=status.HTTP_201_CREATED)
async def create_inventory_item(
    payload: InventoryItemCreate,
    session: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_access("inventory")),
) -> InventorySavedResponse:
    item = await inventory_service.create_item(session, payload, current_user)
    return InventorySavedResponse(item_id=item.id, message="Item added successfully")


@router.put("", response_model=InventorySavedResponse)
async def update_inventory_item(
    payload: InventoryItemUpdate,
    session: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_access("inventory")),
) -> InventorySavedResponse:
    item = await inventory_service.update_item(session, payload, current_user)
    return InventorySavedResponse(item_id=item.id, message="Item updated successfully")


@router.delete("/{item_id}", response_model=MessageResponse)
async def delete_inventory_item(
    item_id: int,
    session: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_access("inventory")),
) -> MessageResponse:
    await inventory_service.delete_item(session, item_id, current_user)
    return MessageResponse(message="Item deleted successfully")


@categories_router.get("/categories", response_model=CategoryListResponse)
async def list_categories(
    session: AsyncSession = Depends(get_db),
    _: AuthenticatedUser = Depends(require_access("inventory")),
) -> CategoryListResponse:
    return CategoryListResponse(categories=await inventory_service.list_categories(session))
