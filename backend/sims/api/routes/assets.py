"""Asset endpoints, including bulk import and the repair status proxy."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from sims.core.dependencies import AuthenticatedUser, get_db, get_repair_bridge, require_access
from sims.schemas.asset import (
    AssetCreate,
    AssetListResponse,
    AssetSavedResponse,
    AssetUpdate,
    BulkImportResponse,
    RepairStatusResponse,
)
from sims.schemas.common import MessageResponse
from sims.services import assets as asset_service
from sims.services.repair_status import RepairStatusBridge

router = APIRouter(prefix="/assets", tags=["assets"])

STATUS_UNAVAILABLE = "Status unavailable"


@router.get("", response_model=AssetListResponse)
async def list_assets(
    search: str | None = Query(default=None),
    department: str | None = Query(default=None),
    asset_status: str | None = Query(default=None, alias="assetStatus"),
    session: AsyncSession = Depends(get_db),
    _: AuthenticatedUser = Depends(require_access("assets")),
) -> AssetListResponse:
    assets = await asset_service.list_assets(session, search=search, department=department, status=asset_status)
    return AssetListResponse(assets=[asset_service.asset_to_read(asset) for asset in assets])


@router.post("", response_model=AssetSavedResponse, status_code=status.HTTP_201_CREATED)
async def create_asset(
    payload: AssetCreate,
    session: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_access("assets")),
) -> AssetSavedResponse:
    asset = await asset_service.create_asset(session, payload, current_user)
    return AssetSavedResponse(message="Asset registered successfully", sr_number=asset.sr_number, id=asset.id)


@router.put("", response_model=AssetSavedResponse)
async def update_asset(
    payload: AssetUpdate,
    session: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_access("assets")),
) -> AssetSavedResponse:
    asset = await asset_service.update_asset(session, payload, current_user)
    return AssetSavedResponse(message="Asset updated successfully", sr_number=asset.sr_number, id=asset.id)


@router.post("/bulk", response_model=BulkImportResponse, status_code=status.HTTP_201_CREATED)
async def bulk_create_assets(
    payload: list[AssetCreate],
    session: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_access("assets")),
) -> BulkImportResponse:
    assets = await asset_service.bulk_create_assets(session, payload, current_user)
    return BulkImportResponse(
        message=f"Successfully imported {len(assets)} assets",
        count=len(assets),
        sr_numbers=[asset.sr_number for asset in assets],
    )


@router.get("/repair-status/{serial}", response_model=RepairStatusResponse, response_model_exclude_none=True)
async def get_repair_status(
    serial: str,
    bridge: RepairStatusBridge = Depends(get_repair_bridge),
    _: AuthenticatedUser = Depends(require_access("assets")),
) -> RepairStatusResponse:
    result = await bridge.fetch(serial)
    if not result.available:
        return RepairStatusResponse(success=False, message=STATUS_UNAVAILABLE)
    return RepairStatusResponse(data=result.data)


@router.delete("/{asset_id}", response_model=MessageResponse)
async def delete_asset(
    asset_id: int,
    session: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_access("assets")),
) -> MessageResponse:
    await asset_service.delete_asset(session, asset_id, current_user)
    return MessageResponse(message="Asset deleted successfully")
