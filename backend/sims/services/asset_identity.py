"""Serial uniqueness, SR number assignment and lifecycle date defaults for assets."""
from __future__ import annotations

import logging
import secrets
import string
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from sims.core.errors import ConflictError, DuplicateSerialError, PersistenceError
from sims.core.timeutils import utcnow
from sims.models.asset import Asset

logger = logging.getLogger(__name__)

SR_ALPHABET = string.ascii_uppercase + string.digits
SR_SUFFIX_LENGTH = 4
SR_MAX_ATTEMPTS = 5
WARRANTY_YEARS = 1
DISPOSAL_YEARS = 3


async def ensure_unique_serial(session: AsyncSession, serial: str | None, exclude_id: int | None = None) -> None:
    if not serial:
        return
    query = select(Asset.id).where(func.lower(Asset.serial_number) == serial.lower())
    if exclude_id is not None:
        query = query.where(Asset.id != exclude_id)
    result = await session.execute(query.limit(1))
    if result.first() is not None:
        raise DuplicateSerialError(serial)


async def sr_number_exists(session: AsyncSession, sr_number: str, exclude_id: int | None = None) -> bool:
    query = select(Asset.id).where(Asset.sr_number == sr_number)
    if exclude_id is not None:
        query = query.where(Asset.id != exclude_id)
    result = await session.execute(query.limit(1))
    return result.first() is not None


def generate_sr_number(prefix: str, year: int | None = None) -> str:
    """Return e.g. ``BCC-SR-2024-7QX2``."""
    year = year or utcnow().year
    suffix = "".join(secrets.choice(SR_ALPHABET) for _ in range(SR_SUFFIX_LENGTH))
    return f"{prefix.upper()}-SR-{year}-{suffix}"


async def assign_sr_number(
    session: AsyncSession,
    prefix: str,
    requested: str | None = None,
    reserved: set[str] | None = None,
) -> str:
    """Honour a client-supplied SR number or generate a fresh unused one.

    ``reserved`` holds numbers already taken by other rows of the same batch.
    """
    reserved = reserved if reserved is not None else set()
    if requested:
        if requested in reserved or await sr_number_exists(session, requested):
            raise ConflictError(f'SR Number "{requested}" is already in use.')
        return requested
    for _ in range(SR_MAX_ATTEMPTS):
        candidate = generate_sr_number(prefix)
        if candidate not in reserved and not await sr_number_exists(session, candidate):
            return candidate
        logger.warning("SR number collision on %s, retrying", candidate)
    raise PersistenceError("Could not allocate a unique SR number")


def add_years(start: date, years: int) -> date:
    try:
        return start.replace(year=start.year + years)
    except ValueError:
        # 29 February in a non-leap target year
        return start.replace(year=start.year + years, day=28)


def apply_lifecycle_defaults(
    purchase_date: date | None,
    warranty_expiry: date | None,
    disposal_date: date | None,
) -> tuple[date | None, date | None]:
    """Fill in a missing warranty expiry and disposal date from the purchase date."""
    if purchase_date is None:
        return warranty_expiry, disposal_date
    return (
        warranty_expiry or add_years(purchase_date, WARRANTY_YEARS),
        disposal_date or add_years(purchase_date, DISPOSAL_YEARS),
    )
