"""GardenShare API main application module.

This module initializes the FastAPI application and configures
core middleware, routers, logging and the land request sweep.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gardenshare.api.dependencies import get_sink, get_uow_factory
from gardenshare.api.gardens import router as gardens_router
from gardenshare.api.health import router as health_router
from gardenshare.api.land_requests import allocations_router
from gardenshare.api.land_requests import router as land_requests_router
from gardenshare.api.middleware import setup_middleware
from gardenshare.api.notifications import router as notifications_router
from gardenshare.application.sweep import SweepScheduler
from gardenshare.infrastructure.config import settings
from gardenshare.infrastructure.logging import configure_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Starts the sweep scheduler when enabled and stops it on shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    configure_logging(settings.log_level, log_json=settings.log_json)
    logger.info(
        "Starting GardenShare API",
        version=settings.api_version,
        debug=settings.debug,
        sweep_enabled=settings.sweep_enabled,
    )

    scheduler: SweepScheduler | None = None
    if settings.sweep_enabled:
        uow_factory = app.dependency_overrides.get(get_uow_factory, get_uow_factory)()
        scheduler = SweepScheduler(
            uow_factory,
            get_sink(uow_factory),
            interval_seconds=settings.sweep_interval_seconds,
        )
        scheduler.start()
    app.state.sweep_scheduler = scheduler

    yield

    # Shutdown
    if scheduler is not None:
        await scheduler.stop()
    logger.info("Shutting down GardenShare API")


app = FastAPI(
    title="GardenShare API",
    description="Community garden land allocation backend",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware (must be added before custom middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Setup custom middleware (request ID, API key auth, error handling)
setup_middleware(app)

# Include routers
app.include_router(health_router, tags=["Health"])
app.include_router(gardens_router)
app.include_router(land_requests_router)
app.include_router(allocations_router)
app.include_router(notifications_router)


# ============================================================================
# Custom Exception Handlers
# ============================================================================


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions with consistent format."""
    request_id = getattr(request.state, "request_id", None)

    detail = exc.detail
    if isinstance(detail, dict):
        error_code = detail.get("error_code", "ERROR")
        message = detail.get("message", str(detail))
        details = detail.get("details", {})
    else:
        error_code = "ERROR"
        message = str(detail)
        details = {}

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": error_code,
            "message": message,
            "details": details,
            "request_id": request_id,
        },
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions with consistent format."""
    request_id = getattr(request.state, "request_id", None)

    logger.exception(
        "Unhandled exception in handler",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )

    return JSONResponse(
        status_code=500,
        content={
            "error_code": "INTERNAL_ERROR",
            "message": "An internal error occurred",
            "details": {},
            "request_id": request_id,
        },
    )
