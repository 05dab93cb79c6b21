"""Route modules for the SIMS API."""
from . import activity, assets, auth, departments, external, inventory, system, users

__all__ = ["activity", "assets", "auth", "departments", "external", "inventory", "system", "users"]
