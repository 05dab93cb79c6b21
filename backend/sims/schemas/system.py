"""Schemas for liveness and diagnostic endpoints."""
from __future__ import annotations

from datetime import datetime

from .common import WireModel


class HealthResponse(WireModel):
    status: str
    database: str
    timestamp: datetime


class DatabaseCounts(WireModel):
    users_count: int
    inventory_count: int
    assets_count: int
    active_sessions: int
    connection_status: str


class DbStatusResponse(WireModel):
    status: str
    timestamp: datetime
    session_store: str
    database: DatabaseCounts
