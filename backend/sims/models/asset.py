"""Database models for assigned hardware assets and departments."""
from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from sims.core.timeutils import utcnow
from sims.db.base import Base


class Department(Base):
    """Lookup table of council departments."""

    __tablename__ = "departments"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)


class Asset(Base):
    """Hardware asset issued to an employee."""

    __tablename__ = "assets"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    asset_type: Mapped[str] = mapped_column(String(64), default="Asset")
    employee_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    sr_number: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    # NULL rather than "" so the unique index only applies to real serials
    serial_number: Mapped[str | None] = mapped_column(String(128), unique=True, index=True)
    department: Mapped[str] = mapped_column(String(100), default="", index=True)  # denormalized name
    department_id: Mapped[int | None] = mapped_column(ForeignKey("departments.id", ondelete="SET NULL"))
    section: Mapped[str] = mapped_column(String(128), default="")
    position: Mapped[str] = mapped_column(String(128), default="")
    ext_number: Mapped[str] = mapped_column(String(32), default="")
    office_number: Mapped[str] = mapped_column(String(32), default="")
    condition_status: Mapped[str] = mapped_column(String(32), default="active", index=True)
    model: Mapped[str] = mapped_column(String(128), default="")
    brand: Mapped[str] = mapped_column(String(150), default="")
    location: Mapped[str] = mapped_column(String(128), default="Office")
    notes: Mapped[str] = mapped_column(Text, default="")
    warranty_expiry: Mapped[date | None] = mapped_column(Date)
    purchase_date: Mapped[date | None] = mapped_column(Date)
    disposal_date: Mapped[date | None] = mapped_column(Date)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)

