"""Health check endpoints.

Provides endpoints for monitoring service health and readiness.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from gardenshare.api.dependencies import get_uow_factory
from gardenshare.infrastructure.unit_of_work import UnitOfWorkFactory

router = APIRouter()
logger = structlog.get_logger()


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    service: str
    version: str


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check service health.

    Returns:
        Health status with service name and version.
    """
    from gardenshare.infrastructure.config import settings

    return HealthResponse(
        status="healthy",
        service="gardenshare-api",
        version=settings.api_version,
    )


@router.get("/ready")
async def readiness_check(
    uow_factory: Annotated[UnitOfWorkFactory, Depends(get_uow_factory)],
) -> JSONResponse:
    """Check that storage answers a read.

    Returns:
        200 {"status": "ready"} or 503 {"status": "unavailable"}.
    """
    try:
        async with uow_factory() as uow:
            await uow.gardens.get("readiness-probe")
    except Exception as e:
        logger.warning("Readiness check failed", error=str(e))
        return JSONResponse(status_code=503, content={"status": "unavailable"})
    return JSONResponse(status_code=200, content={"status": "ready"})
