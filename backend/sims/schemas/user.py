"""Pydantic schemas for user operations."""
from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from sims.core.permissions import STOCK_TAKER, normalize_role

from .common import Envelope, WireModel


def _canonical_role(value: str | None) -> str | None:
    if value is None:
        return None
    canonical = normalize_role(value)
    if canonical is None:
        raise ValueError(f"Unknown role: {value}")
    return canonical


class UserCreate(WireModel):
    username: str = Field(..., min_length=3, max_length=64, pattern=r"^[A-Za-z0-9_.\-]+$")
    full_name: str = Field(..., min_length=1, max_length=128)
    password: str = Field(..., min_length=8, max_length=128)
    role: str = STOCK_TAKER

    @field_validator("role")
    @classmethod
    def _role(cls, value: str) -> str:
        return _canonical_role(value)


class UserUpdate(WireModel):
    full_name: str | None = Field(default=None, min_length=1, max_length=128)
    password: str | None = Field(default=None, min_length=8, max_length=128)
    role: str | None = None
    is_active: bool | None = None

    @field_validator("role")
    @classmethod
    def _role(cls, value: str | None) -> str | None:
        return _canonical_role(value)


class UserRead(WireModel):
    id: int
    username: str
    name: str
    full_name: str
    role: str
    initials: str | None = None
    is_active: bool
    last_login: datetime | None = None


class UserListResponse(Envelope):
    users: list[UserRead]


class UserResponse(Envelope):
    user: UserRead


class UserCreatedResponse(Envelope):
    message: str
    user_id: int
