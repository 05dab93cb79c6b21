"""Pydantic schemas for inventory items."""
from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, Field, field_validator

from .common import Envelope, WireModel, blank_to_none


class InventoryItemCreate(WireModel):
    name: str = Field(..., min_length=1, max_length=255)
    category: str | None = Field(default=None, max_length=128)
    description: str | None = None
    quantity: int = Field(default=0, ge=0)
    price: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    serial_number: str | None = Field(
        default=None,
        max_length=128,
        validation_alias=AliasChoices("serialNumber", "serial", "serial_number"),
    )
    unit: str | None = Field(default=None, max_length=32)
    supplier: str | None = Field(default=None, max_length=255)
    location: str | None = Field(default=None, max_length=128)
    low_stock_threshold: int | None = Field(default=None, ge=0)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Item name is required")
        return value

    @field_validator("category", "serial_number", mode="before")
    @classmethod
    def _blank(cls, value):
        return blank_to_none(value)


class InventoryItemUpdate(InventoryItemCreate):
    id: int


class InventoryItemRead(WireModel):
    id: int
    name: str
    category: str | None = None
    quantity: int
    price: float
    serial_number: str
    description: str
    low_stock_threshold: int
    unit: str
    supplier: str
    location: str
    created_at: datetime


class InventoryListResponse(Envelope):
    items: list[InventoryItemRead]


class InventorySavedResponse(Envelope):
    item_id: int
    message: str


class CategoryListResponse(Envelope):
    categories: list[str]
