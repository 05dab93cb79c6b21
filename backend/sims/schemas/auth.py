"""Authentication-related schemas."""
from __future__ import annotations

from pydantic import BaseModel, Field

from .common import Envelope, WireModel


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1, max_length=128)


class UserIdentity(WireModel):
    id: int
    username: str
    name: str
    role: str
    initials: str | None = None


class AuthResponse(Envelope):
    user: UserIdentity
