"""Asset and department CRUD, including bulk import."""
from __future__ import annotations

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from sims.core.config import get_settings
from sims.core.errors import ConflictError, DuplicateSerialError, NotFoundError, ValidationError
from sims.models.asset import Asset, Department
from sims.schemas.asset import (
    AssetBase,
    AssetCreate,
    AssetRead,
    AssetUpdate,
    display_status,
    parse_asset_status,
    storage_status,
)
from sims.services.activity import Actor, record_activity
from sims.services.asset_identity import (
    apply_lifecycle_defaults,
    assign_sr_number,
    ensure_unique_serial,
    sr_number_exists,
)

logger = logging.getLogger(__name__)

TABLE = "assets"
MAX_BULK_ROWS = 500


def asset_to_read(asset: Asset) -> AssetRead:
    status_label = display_status(asset.condition_status)
    return AssetRead(
        id=asset.id,
        employee_name=asset.employee_name,
        asset_type=asset.asset_type or "",
        sr_number=asset.sr_number,
        serial_number=asset.serial_number or "",
        department=asset.department or "",
        department_id=asset.department_id,
        section=asset.section or "",
        position=asset.position or "",
        ext_number=asset.ext_number or "",
        office_number=asset.office_number or "",
        status=status_label,
        asset_status=status_label,
        model=asset.model or "",
        brand=asset.brand or "",
        location=asset.location or "",
        notes=asset.notes or "",
        warranty_expiry=asset.warranty_expiry,
        purchase_date=asset.purchase_date,
        disposal_date=asset.disposal_date,
        created_at=asset.created_at,
    )


async def list_assets(
    session: AsyncSession,
    search: str | None = None,
    department: str | None = None,
    status: str | None = None,
) -> list[Asset]:
    query = select(Asset)
    if search and search.strip():
        pattern = f"%{search.strip().lower()}%"
        query = query.where(
            or_(
                func.lower(Asset.employee_name).like(pattern),
                func.lower(Asset.serial_number).like(pattern),
                func.lower(Asset.sr_number).like(pattern),
            )
        )
    if department and department.strip() and department.strip().lower() != "all":
        query = query.where(func.lower(Asset.department) == department.strip().lower())
    if status and status.strip() and status.strip().lower() != "all":
        label = parse_asset_status(status)
        if label is None:
            raise ValidationError(f"Unknown asset status: {status}")
        query = query.where(Asset.condition_status == storage_status(label))
    result = await session.execute(query.order_by(Asset.created_at.desc(), Asset.id.desc()))
    return list(result.scalars().all())


async def get_asset(session: AsyncSession, asset_id: int) -> Asset:
    asset = await session.get(Asset, asset_id)
    if not asset:
        raise NotFoundError("Asset not found")
    return asset


async def get_asset_by_serial(session: AsyncSession, serial: str) -> Asset | None:
    result = await session.execute(
        select(Asset).where(func.lower(Asset.serial_number) == serial.strip().lower()).limit(1)
    )
    return result.scalar_one_or_none()


async def get_or_create_department(session: AsyncSession, name: str) -> Department:
    name = name.strip()
    result = await session.execute(select(Department).where(func.lower(Department.name) == name.lower()))
    department = result.scalar_one_or_none()
    if department is None:
        department = Department(name=name)
        session.add(department)
        await session.flush()
    return department


async def _resolve_department(session: AsyncSession, asset_in: AssetBase) -> tuple[str, int | None]:
    if asset_in.department:
        department = await get_or_create_department(session, asset_in.department)
        return department.name, department.id
    if asset_in.department_id is not None:
        department = await session.get(Department, asset_in.department_id)
        if department is None:
            raise ValidationError("Unknown department")
        return department.name, department.id
    return "", None


def _apply(asset: Asset, asset_in: AssetBase) -> None:
    asset.employee_name = asset_in.employee_name
    asset.asset_type = asset_in.asset_type or "Asset"
    asset.serial_number = asset_in.serial_number
    asset.section = asset_in.section or ""
    asset.position = asset_in.position or ""
    asset.ext_number = asset_in.ext_number or ""
    asset.office_number = asset_in.office_number or ""
    asset.condition_status = storage_status(asset_in.status)
    asset.model = asset_in.model or ""
    asset.brand = asset_in.brand or ""
    asset.location = asset_in.location or "Office"
    asset.notes = asset_in.notes or ""
    asset.warranty_expiry = asset_in.warranty_expiry
    asset.purchase_date = asset_in.purchase_date
    asset.disposal_date = asset_in.disposal_date


async def _build_new_asset(session: AsyncSession, asset_in: AssetCreate, reserved: set[str]) -> Asset:
    asset = Asset()
    _apply(asset, asset_in)
    asset.warranty_expiry, asset.disposal_date = apply_lifecycle_defaults(
        asset_in.purchase_date, asset_in.warranty_expiry, asset_in.disposal_date
    )
    asset.department, asset.department_id = await _resolve_department(session, asset_in)
    asset.sr_number = await assign_sr_number(session, get_settings().org_prefix, asset_in.sr_number, reserved)
    return asset


async def create_asset(session: AsyncSession, asset_in: AssetCreate, actor: Actor) -> Asset:
    await ensure_unique_serial(session, asset_in.serial_number)
    asset = await _build_new_asset(session, asset_in, set())
    session.add(asset)
    await session.commit()
    logger.info("Registered asset %s for %s", asset.sr_number, asset.employee_name)
    await record_activity(
        actor,
        "CREATE_ASSET",
        f"Registered {asset.asset_type} {asset.sr_number} for {asset.employee_name}",
        TABLE,
        asset.id,
    )
    return asset


async def update_asset(session: AsyncSession, asset_in: AssetUpdate, actor: Actor) -> Asset:
    asset = await get_asset(session, asset_in.id)
    await ensure_unique_serial(session, asset_in.serial_number, exclude_id=asset.id)
    if asset_in.sr_number and asset_in.sr_number != asset.sr_number:
        if await sr_number_exists(session, asset_in.sr_number, exclude_id=asset.id):
            raise ConflictError(f'SR Number "{asset_in.sr_number}" is already in use.')
        asset.sr_number = asset_in.sr_number
    _apply(asset, asset_in)
    asset.department, asset.department_id = await _resolve_department(session, asset_in)
    await session.commit()
    await record_activity(
        actor,
        "UPDATE_ASSET",
        f"Updated {asset.asset_type} {asset.sr_number} ({display_status(asset.condition_status)})",
        TABLE,
        asset.id,
    )
    return asset


async def delete_asset(session: AsyncSession, asset_id: int, actor: Actor) -> None:
    asset = await get_asset(session, asset_id)
    sr_number = asset.sr_number
    await session.delete(asset)
    await session.commit()
    await record_activity(actor, "DELETE_ASSET", f"Deleted asset {sr_number}", TABLE, asset_id)


async def bulk_create_assets(session: AsyncSession, rows: list[AssetCreate], actor: Actor) -> list[Asset]:
    """Insert every row or none of them.

    Any serial that is already registered, or repeated within the batch, rejects
    the whole import before anything is written.
    """
    if not rows:
        raise ValidationError("No assets supplied")
    if len(rows) > MAX_BULK_ROWS:
        raise ValidationError(f"A bulk import is limited to {MAX_BULK_ROWS} assets")

    seen_serials: set[str] = set()
    for row in rows:
        if not row.serial_number:
            continue
        key = row.serial_number.lower()
        if key in seen_serials:
            raise DuplicateSerialError(row.serial_number)
        seen_serials.add(key)
        await ensure_unique_serial(session, row.serial_number)

    reserved: set[str] = set()
    assets: list[Asset] = []
    for row in rows:
        asset = await _build_new_asset(session, row, reserved)
        reserved.add(asset.sr_number)
        session.add(asset)
        assets.append(asset)
    await session.commit()
    logger.info("Bulk imported %d asset(s)", len(assets))
    await record_activity(
        actor,
        "BULK_CREATE_ASSET",
        f"Bulk imported {len(assets)} asset(s): {', '.join(a.sr_number for a in assets[:10])}"
        + (" ..." if len(assets) > 10 else ""),
        TABLE,
        None,
    )
    return assets


async def list_departments(session: AsyncSession) -> list[Department]:
    result = await session.execute(select(Department).order_by(Department.name))
    return list(result.scalars().all())


async def create_department(session: AsyncSession, name: str, actor: Actor) -> Department:
    name = name.strip()
    if not name:
        raise ValidationError("Department name is required")
    existing = await session.execute(select(Department.id).where(func.lower(Department.name) == name.lower()))
    if existing.first() is not None:
        raise ConflictError(f'Department "{name}" already exists.')
    department = Department(name=name)
    session.add(department)
    await session.commit()
    await record_activity(actor, "CREATE_DEPARTMENT", f"Created department {name}", "departments", department.id)
    return department
