"""API routes package."""

from fastapi import APIRouter

from yardops.api.routes import (
    health,
    locations,
    meter_types,
    meters,
    notifications,
    readings,
    reports,
    users,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(locations.router)
api_router.include_router(meter_types.router)
api_router.include_router(users.router)
api_router.include_router(meters.router)
api_router.include_router(readings.router)
api_router.include_router(notifications.router)
api_router.include_router(reports.router)
