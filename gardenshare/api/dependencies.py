"""FastAPI dependencies shared by the routers.

Services are built per request from a unit of work factory and a
notification sink. Tests swap both through app.dependency_overrides.
"""

from collections.abc import Callable
from datetime import date
from typing import Annotated, Any

from fastapi import Depends, HTTPException, Request, status

from gardenshare.api.middleware import USER_ID_HEADER
from gardenshare.application.garden_service import GardenService
from gardenshare.application.land_request_service import LandRequestService
from gardenshare.application.notifications import (
    NotificationService,
    NotificationSink,
    UnitOfWorkNotificationSink,
)
from gardenshare.infrastructure.unit_of_work import UnitOfWorkFactory, sqlalchemy_uow_factory

_default_uow_factory: UnitOfWorkFactory | None = None


def get_uow_factory() -> UnitOfWorkFactory:
    """Unit of work factory over the configured database."""
    global _default_uow_factory
    if _default_uow_factory is None:
        _default_uow_factory = sqlalchemy_uow_factory()
    return _default_uow_factory


def get_sink(
    uow_factory: Annotated[UnitOfWorkFactory, Depends(get_uow_factory)],
) -> NotificationSink:
    return UnitOfWorkNotificationSink(uow_factory)


def get_clock() -> Callable[[], date]:
    return date.today


def get_current_user_id(request: Request) -> str:
    """Caller identity set by ApiKeyMiddleware from X-User-ID."""
    user_id = getattr(request.state, "user_id", None)
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "error_code": "UNAUTHENTICATED",
                "message": f"Missing {USER_ID_HEADER} header",
            },
        )
    return user_id


def get_garden_service(
    request: Request,
    uow_factory: Annotated[UnitOfWorkFactory, Depends(get_uow_factory)],
) -> GardenService:
    return GardenService(uow_factory, request_id=getattr(request.state, "request_id", None))


def get_land_request_service(
    request: Request,
    uow_factory: Annotated[UnitOfWorkFactory, Depends(get_uow_factory)],
    sink: Annotated[NotificationSink, Depends(get_sink)],
    clock: Annotated[Callable[[], date], Depends(get_clock)],
) -> LandRequestService:
    return LandRequestService(
        uow_factory,
        sink,
        clock=clock,
        request_id=getattr(request.state, "request_id", None),
    )


def get_notification_service(
    request: Request,
    uow_factory: Annotated[UnitOfWorkFactory, Depends(get_uow_factory)],
) -> NotificationService:
    return NotificationService(uow_factory, request_id=getattr(request.state, "request_id", None))


# ============================================================================
# Result -> HTTP error mapping
# ============================================================================


ERROR_STATUS: dict[str, int] = {
    "INVALID_DATE_RANGE": status.HTTP_400_BAD_REQUEST,
    "INVALID_LAND_AMOUNT": status.HTTP_400_BAD_REQUEST,
    "INVALID_DECISION": status.HTTP_400_BAD_REQUEST,
    "UNAUTHORIZED": status.HTTP_403_FORBIDDEN,
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "GARDEN_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "OVERLAPPING_REQUEST": status.HTTP_409_CONFLICT,
    "INSUFFICIENT_LAND": status.HTTP_409_CONFLICT,
    "INVALID_STATE": status.HTTP_409_CONFLICT,
    "NOT_PENDING_EXTENSION": status.HTTP_409_CONFLICT,
    "STORAGE_ERROR": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def raise_for_result(result: Any) -> None:
    """Raise the HTTPException matching a failed service result."""
    if result.success:
        return
    error_code = result.error_code or "ERROR"
    raise HTTPException(
        status_code=ERROR_STATUS.get(error_code, status.HTTP_400_BAD_REQUEST),
        detail={
            "error_code": error_code,
            "message": result.error or "Request failed",
            "details": getattr(result, "details", {}) or {},
        },
    )
