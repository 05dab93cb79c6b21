"""Role definitions and the route authorization table."""
from __future__ import annotations

ADMIN = "Admin"
HEAD_ADMIN = "Head Administrator"
STOCK_TAKER = "Stock Taker"
ASSET_ADDER = "Asset Adder"

ROLES = (ADMIN, HEAD_ADMIN, STOCK_TAKER, ASSET_ADDER)

_ROLE_ALIASES = {
    "admin": ADMIN,
    "administrator": ADMIN,
    "head administrator": HEAD_ADMIN,
    "head_administrator": HEAD_ADMIN,
    "headadministrator": HEAD_ADMIN,
    "head_admin": HEAD_ADMIN,
    "super_admin": HEAD_ADMIN,
    "super admin": HEAD_ADMIN,
    "system administrator": HEAD_ADMIN,
    "stock taker": STOCK_TAKER,
    "stock_taker": STOCK_TAKER,
    "stocktaker": STOCK_TAKER,
    "stock": STOCK_TAKER,
    "asset adder": ASSET_ADDER,
    "asset_adder": ASSET_ADDER,
    "assetadder": ASSET_ADDER,
    "asset": ASSET_ADDER,
}

_ALL = frozenset(ROLES)
_ADMINS = frozenset({ADMIN, HEAD_ADMIN})

ROUTE_PERMISSIONS: dict[str, frozenset[str]] = {
    "dashboard": _ALL,
    "inventory": _ADMINS | {STOCK_TAKER},
    "assets": _ADMINS | {ASSET_ADDER},
    "departments": _ADMINS | {ASSET_ADDER},
    "reports": _ADMINS,
    "audit": _ADMINS,
    "settings": _ADMINS,
    "users": frozenset({HEAD_ADMIN}),
}


def normalize_role(role: str | None) -> str | None:
    """Map a stored or submitted role label onto its canonical name, or None if unknown."""
    if not role:
        return None
    return _ROLE_ALIASES.get(role.strip().lower())


def authorize(role: str | None, resource: str) -> bool:
    allowed = ROUTE_PERMISSIONS.get(resource)
    if allowed is None:
        return False
    canonical = normalize_role(role)
    return canonical is not None and canonical in allowed
