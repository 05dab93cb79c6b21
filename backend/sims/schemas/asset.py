"""Pydantic schemas for assets and departments, plus status normalization."""
from __future__ import annotations

from datetime import date, datetime

from pydantic import AliasChoices, Field, field_validator

from .common import Envelope, WireModel, blank_to_none

STATUS_ACTIVE = "Active"
STATUS_UNDER_REPAIR = "Under Repair"
STATUS_DISPOSED = "Disposed"

_STATUS_ALIASES = {
    "active": STATUS_ACTIVE,
    "good": STATUS_ACTIVE,
    "working": STATUS_ACTIVE,
    "under repair": STATUS_UNDER_REPAIR,
    "under_repair": STATUS_UNDER_REPAIR,
    "underrepair": STATUS_UNDER_REPAIR,
    "repair": STATUS_UNDER_REPAIR,
    "maintenance": STATUS_UNDER_REPAIR,
    "disposed": STATUS_DISPOSED,
}


def parse_asset_status(value: str | None) -> str | None:
    """Return the display label for a status string, or None when unrecognized."""
    if value is None:
        return None
    return _STATUS_ALIASES.get(value.strip().lower())


def storage_status(label: str) -> str:
    return label.lower()


def display_status(stored: str | None) -> str:
    return parse_asset_status(stored or "") or STATUS_DISPOSED


def _date_part(value):
    value = blank_to_none(value)
    if isinstance(value, str) and "T" in value:
        return value.split("T", 1)[0]
    return value


class AssetBase(WireModel):
    employee_name: str = Field(..., min_length=1, max_length=255)
    asset_type: str | None = Field(
        default=None, max_length=64, validation_alias=AliasChoices("type", "assetType", "asset_type")
    )
    sr_number: str | None = Field(
        default=None,
        max_length=64,
        validation_alias=AliasChoices("srNumber", "internalReferenceNumber", "sr_number"),
    )
    serial_number: str | None = Field(
        default=None,
        max_length=128,
        validation_alias=AliasChoices("serialNumber", "manufacturerSerialNumber", "serial_number"),
    )
    department: str | None = Field(default=None, max_length=100)
    department_id: int | None = None
    section: str | None = None
    position: str | None = None
    ext_number: str | None = Field(default=None, validation_alias=AliasChoices("extNumber", "extension", "ext_number"))
    office_number: str | None = None
    model: str | None = None
    brand: str | None = None
    location: str | None = None
    notes: str | None = None
    status: str = Field(default=STATUS_ACTIVE, validation_alias=AliasChoices("status", "assetStatus"))
    warranty_expiry: date | None = None
    purchase_date: date | None = None
    disposal_date: date | None = None

    @field_validator("employee_name")
    @classmethod
    def _strip_employee(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Employee name is required")
        return value

    @field_validator("sr_number", "serial_number", "department", "asset_type", mode="before")
    @classmethod
    def _blank(cls, value):
        value = blank_to_none(value)
        return value.strip() if isinstance(value, str) else value

    @field_validator("warranty_expiry", "purchase_date", "disposal_date", mode="before")
    @classmethod
    def _dates(cls, value):
        return _date_part(value)

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return STATUS_ACTIVE
        label = parse_asset_status(value) if isinstance(value, str) else None
        if label is None:
            raise ValueError(f"Unknown asset status: {value}")
        return label


class AssetCreate(AssetBase):
    pass


class AssetUpdate(AssetBase):
    id: int


class AssetRead(WireModel):
    id: int
    employee_name: str
    asset_type: str = Field(serialization_alias="type")
    sr_number: str
    serial_number: str
    department: str
    department_id: int | None = None
    section: str
    position: str
    ext_number: str
    office_number: str
    status: str
    asset_status: str
    model: str
    brand: str
    location: str
    notes: str
    warranty_expiry: date | None = None
    purchase_date: date | None = None
    disposal_date: date | None = None
    created_at: datetime


class AssetListResponse(Envelope):
    assets: list[AssetRead]


class AssetSavedResponse(Envelope):
    message: str
    sr_number: str
    id: int


class BulkImportResponse(Envelope):
    message: str
    count: int
    sr_numbers: list[str]


class RepairStatusResponse(Envelope):
    data: dict | list | None = None
    message: str | None = None


class ExternalAssetResponse(Envelope):
    sr_number: str
    owner: str
    department: str


class DepartmentCreate(WireModel):
    name: str = Field(..., min_length=1, max_length=100)


class DepartmentRead(WireModel):
    id: int
    name: str


class DepartmentListResponse(Envelope):
    departments: list[DepartmentRead]


class DepartmentResponse(Envelope):
    department: DepartmentRead
