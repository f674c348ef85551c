"""
API v1 router - aggregates all endpoint routers.
"""

from fastapi import APIRouter

from autoparts.api.v1.endpoints import admin, health, parts, vehicles

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(
    parts.router,
    prefix="/parts",
    tags=["Parts"],
)

api_router.include_router(
    vehicles.router,
    prefix="/vehicles",
    tags=["Vehicles"],
)

api_router.include_router(
    admin.router,
    prefix="/admin",
    tags=["Admin"],
)

api_router.include_router(
    health.router,
    prefix="/health",
    tags=["Health"],
)
