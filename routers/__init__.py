# routers/__init__.py

from fastapi import APIRouter

from .profile import router as profile_router
from .owner_applications import router as owner_applications_router
from .owners import router as owners_router
from .locations import router as locations_router
from .zones import router as zones_router
from .health import router as health_router


# Master router, mounted once by main.create_app()
api_router = APIRouter()

api_router.include_router(profile_router)

# Owner workflow + owner management (super admin)
api_router.include_router(owner_applications_router)
api_router.include_router(owners_router)

# Locations, zones, availability
api_router.include_router(locations_router)
api_router.include_router(zones_router)

api_router.include_router(health_router)

__all__ = ["api_router"]
