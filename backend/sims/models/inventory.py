"""Database model for consumable stock items."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from sims.core.timeutils import utcnow
from sims.db.base import Base


class InventoryItem(Base):
    __tablename__ = "inventory"

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_inventory_quantity_non_negative"),
        CheckConstraint("unit_cost >= 0", name="ck_inventory_unit_cost_non_negative"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    item_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    category: Mapped[str | None] = mapped_column(String(128), index=True)
    description: Mapped[str] = mapped_column(Text, default="")
    quantity: Mapped[int] = mapped_column(Integer, default=0)
    unit_cost: Mapped[float] = mapped_column(Float, default=0.0)
    unit: Mapped[str] = mapped_column(String(32), default="pcs")
    item_code: Mapped[str] = mapped_column(String(128), default="")
    supplier: Mapped[str] = mapped_column(String(255), default="")
    location: Mapped[str] = mapped_column(String(128), default="Store")
    reorder_level: Mapped[int] = mapped_column(Integer, default=10)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
