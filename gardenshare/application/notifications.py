"""Notification sink and notification queries.

Land request transitions record domain events. Once the transition's
unit of work has committed, publish_notifications() turns the events
into Notification records and hands them to a NotificationSink. A sink
failure is logged and swallowed: the transition it reports on has
already been committed and stays committed.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

import structlog

from gardenshare.domain.base import DomainEvent
from gardenshare.domain.entities import Notification
from gardenshare.domain.events import LandRequestEvent
from gardenshare.domain.exceptions import DomainError, NotificationNotFoundError
from gardenshare.infrastructure.config import settings
from gardenshare.infrastructure.unit_of_work import UnitOfWorkFactory

logger = structlog.get_logger()


# ============================================================================
# Sink
# ============================================================================


@runtime_checkable
class NotificationSink(Protocol):
    """Destination for land allocation notifications."""

    async def emit(self, notification: Notification) -> None: ...


class UnitOfWorkNotificationSink:
    """Persists each notification in its own unit of work."""

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self.uow_factory = uow_factory

    async def emit(self, notification: Notification) -> None:
        async with self.uow_factory() as uow:
            await uow.notifications.add(notification)
            await uow.commit()


async def publish_notifications(
    sink: NotificationSink,
    events: Iterable[DomainEvent],
) -> list[Notification]:
    """Emit one notification per announced event.

    Args:
        sink: Where notifications go.
        events: Events collected from committed aggregates.

    Returns:
        Notifications the sink accepted.
    """
    delivered: list[Notification] = []
    for event in events:
        if not isinstance(event, LandRequestEvent):
            continue
        notification = Notification.from_event(event)
        if notification is None:
            continue
        try:
            await sink.emit(notification)
        except Exception as e:
            logger.error(
                "Notification emit failed",
                event_type=event.event_type,
                request_id=event.request_id,
                recipient_id=notification.recipient_id,
                notification_type=notification.type.value,
                error=str(e),
            )
            continue
        delivered.append(notification)
        logger.debug(
            "Notification emitted",
            event_type=event.event_type,
            request_id=event.request_id,
            recipient_id=notification.recipient_id,
        )
    return delivered


# ============================================================================
# Service Result Types
# ============================================================================


@dataclass
class ListNotificationsResult:
    """Result of listing a user's notifications."""

    notifications: list[Notification] = field(default_factory=list)
    unread: int = 0
    success: bool = True
    error: str | None = None
    error_code: str | None = None


@dataclass
class NotificationResult:
    """Result of updating one notification."""

    notification: Notification | None = None
    success: bool = True
    error: str | None = None
    error_code: str | None = None


# ============================================================================
# Notification Service
# ============================================================================


class NotificationService:
    """Reads and acknowledges the notifications addressed to a user."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        list_limit: int | None = None,
        request_id: str | None = None,
    ) -> None:
        self.uow_factory = uow_factory
        self.list_limit = list_limit or settings.notification_list_limit
        self.request_id = request_id

    async def list_for_user(self, user_id: str, limit: int | None = None) -> ListNotificationsResult:
        """Latest notifications for user_id, newest first.

        Args:
            user_id: Recipient.
            limit: Maximum number returned, defaults to the configured limit.
        """
        try:
            async with self.uow_factory() as uow:
                notifications = await uow.notifications.list_for_user(
                    user_id, limit or self.list_limit
                )
        except Exception as e:
            logger.exception(
                "Failed to list notifications",
                user_id=user_id,
                error=str(e),
                request_id=self.request_id,
            )
            return ListNotificationsResult(
                success=False,
                error="Storage unavailable, retry later",
                error_code="STORAGE_ERROR",
            )

        return ListNotificationsResult(
            notifications=notifications,
            unread=sum(1 for n in notifications if not n.is_read),
        )

    async def mark_read(self, notification_id: str, user_id: str) -> NotificationResult:
        """Mark a notification as read.

        Only the recipient can acknowledge a notification; for anyone else
        it does not exist.
        """
        try:
            async with self.uow_factory() as uow:
                notification = await uow.notifications.get(notification_id)
                if notification is None or notification.recipient_id != user_id:
                    raise NotificationNotFoundError(notification_id)
                notification.mark_read()
                await uow.notifications.save(notification)
                await uow.commit()
        except DomainError as e:
            return NotificationResult(success=False, error=e.message, error_code=e.error_code)
        except Exception as e:
            logger.exception(
                "Failed to mark notification read",
                notification_id=notification_id,
                error=str(e),
                request_id=self.request_id,
            )
            return NotificationResult(
                success=False,
                error="Storage unavailable, retry later",
                error_code="STORAGE_ERROR",
            )

        return NotificationResult(notification=notification)
