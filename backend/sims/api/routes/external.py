"""Partner-facing lookup authenticated by a shared API key instead of a session."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from sims.core.config import get_settings
from sims.core.dependencies import get_db
from sims.core.errors import AuthenticationError, NotFoundError
from sims.core.security import api_key_matches
from sims.schemas.asset import ExternalAssetResponse
from sims.services import assets as asset_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/external", tags=["external"])


async def require_partner_key(x_api_key: str | None = Header(default=None)) -> None:
    if not api_key_matches(x_api_key, get_settings().external_api_key):
        logger.warning("Rejected partner lookup with missing or invalid API key")
        raise AuthenticationError("Unauthorized integration access")


@router.get("/asset/{serial}", response_model=ExternalAssetResponse, dependencies=[Depends(require_partner_key)])
async def lookup_asset(serial: str, session: AsyncSession = Depends(get_db)) -> ExternalAssetResponse:
    asset = await asset_service.get_asset_by_serial(session, serial)
    if asset is None:
        raise NotFoundError("Asset not found")
    return ExternalAssetResponse(sr_number=asset.sr_number, owner=asset.employee_name, department=asset.department or "")
