"""Notification API endpoints.

Provides:
- GET /notifications - latest notifications of the caller
- PATCH /notifications/{id} - mark a notification as read
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from gardenshare.api.dependencies import (
    get_current_user_id,
    get_notification_service,
    raise_for_result,
)
from gardenshare.api.schemas import (
    ErrorResponse,
    NotificationResponse,
    NotificationsListResponse,
    NotificationTypeEnum,
)
from gardenshare.application.notifications import NotificationService
from gardenshare.domain.entities import Notification

router = APIRouter(prefix="/notifications", tags=["Notifications"])


def notification_to_response(notification: Notification) -> NotificationResponse:
    """Convert Notification to NotificationResponse."""
    return NotificationResponse(
        id=notification.id,
        recipient_id=notification.recipient_id,
        from_user_id=notification.from_user_id,
        garden_id=notification.garden_id,
        request_id=notification.request_id,
        type=NotificationTypeEnum(notification.type.value),
        message=notification.message,
        is_read=notification.is_read,
        created_at=notification.created_at,
    )


@router.get(
    "",
    response_model=NotificationsListResponse,
    responses={401: {"model": ErrorResponse}},
    summary="List notifications",
)
async def list_notifications(
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
    limit: int | None = Query(default=None, ge=1, le=200, description="Maximum items"),
) -> NotificationsListResponse:
    """List the caller's latest notifications, newest first."""
    result = await service.list_for_user(user_id, limit=limit)
    raise_for_result(result)
    return NotificationsListResponse(
        items=[notification_to_response(n) for n in result.notifications],
        unread=result.unread,
    )


@router.patch(
    "/{notification_id}",
    response_model=NotificationResponse,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Mark notification read",
)
async def mark_notification_read(
    notification_id: str,
    user_id: Annotated[str, Depends(get_current_user_id)],
    service: Annotated[NotificationService, Depends(get_notification_service)],
) -> NotificationResponse:
    """Mark one of the caller's notifications as read."""
    result = await service.mark_read(notification_id, user_id)
    raise_for_result(result)
    return notification_to_response(result.notification)
