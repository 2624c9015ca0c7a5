"""API layer module.

Contains FastAPI routers and request/response schemas.
"""

from gardenshare.api.gardens import router as gardens_router
from gardenshare.api.health import router as health_router
from gardenshare.api.land_requests import allocations_router
from gardenshare.api.land_requests import router as land_requests_router
from gardenshare.api.notifications import router as notifications_router

__all__ = [
    "allocations_router",
    "gardens_router",
    "health_router",
    "land_requests_router",
    "notifications_router",
]
