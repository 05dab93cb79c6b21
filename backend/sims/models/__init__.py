"""SQLAlchemy models exposed for metadata creation and imports."""
from .activity import ActivityLog
from .asset import Asset, Department
from .inventory import InventoryItem
from .user import User, UserSession

__all__ = ["User", "UserSession", "InventoryItem", "Asset", "Department", "ActivityLog"]
