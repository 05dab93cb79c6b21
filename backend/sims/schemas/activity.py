"""Pydantic schemas for the activity log and dashboard statistics."""
from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, Field, field_validator

from .common import Envelope, WireModel


class ActivityLogRead(WireModel):
    id: int
    user_id: int | None = None
    username: str
    action: str
    table_name: str | None = None
    record_id: str | None = None
    description: str
    timestamp: datetime


class ActivityLogCreate(WireModel):
    action: str = Field(..., min_length=1, max_length=64)
    description: str = Field(default="", max_length=2000, validation_alias=AliasChoices("details", "description"))

    @field_validator("action")
    @classmethod
    def _tag(cls, value: str) -> str:
        value = value.strip().upper().replace(" ", "_")
        if not value:
            raise ValueError("Action is required")
        return value


class ActivityLogListResponse(Envelope):
    logs: list[ActivityLogRead]


class ActivityLogResponse(Envelope):
    log: ActivityLogRead


class InventoryStats(WireModel):
    total_items: int
    total_value: float
    low_stock_items: int


class AssetStats(WireModel):
    total_assets: int
    active_assets: int


class DashboardStats(WireModel):
    inventory: InventoryStats
    assets: AssetStats
    recent_activity: list[ActivityLogRead]


class DashboardResponse(Envelope):
    stats: DashboardStats
