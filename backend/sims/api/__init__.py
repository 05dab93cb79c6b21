"""API router aggregator."""
from fastapi import APIRouter

from sims.api.routes import activity, assets, auth, departments, external, inventory, system, users

api_router = APIRouter(prefix="/api")
api_router.include_router(system.router)
api_router.include_router(auth.router)
api_router.include_router(inventory.router)
api_router.include_router(inventory.categories_router)
api_router.include_router(assets.router)
api_router.include_router(departments.router)
api_router.include_router(users.router)
api_router.include_router(activity.router)
api_router.include_router(external.router)

__all__ = ["api_router"]
