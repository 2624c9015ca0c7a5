"""Tests for notification publishing and NotificationService."""

from datetime import date, timedelta

import pytest

from fakes import OWNER_ID, REQUESTER_ID, FailingSink, RecordingSink
from gardenshare.application.notifications import (
    NotificationService,
    NotificationSink,
    UnitOfWorkNotificationSink,
    publish_notifications,
)
from gardenshare.domain.base import utcnow
from gardenshare.domain.entities import Garden, LandRequest, Notification
from gardenshare.domain.state_machines import LandRequestStatus
from gardenshare.domain.value_objects import NotificationType
from gardenshare.infrastructure.repositories import InMemoryNotificationRepository


def make_notification(recipient_id: str, minutes_ago: int = 0, is_read: bool = False) -> Notification:
    return Notification(
        id=f"n-{recipient_id}-{minutes_ago}",
        recipient_id=recipient_id,
        garden_id="g-1",
        type=NotificationType.STATUS_UPDATE,
        message="Your land request for Riverside Plots was approved",
        from_user_id=OWNER_ID,
        is_read=is_read,
        created_at=utcnow() - timedelta(minutes=minutes_ago),
    )


# ============================================================================
# Test: Publishing
# ============================================================================


class TestPublishNotifications:
    """Tests for publish_notifications."""

    @pytest.fixture
    def events(self, garden: Garden):
        request = LandRequest.create(
            garden,
            requester_id=REQUESTER_ID,
            requested_land="1",
            start_date=date(2026, 6, 1),
            end_date=date(2026, 6, 30),
        )
        request.status = LandRequestStatus.APPROVED
        request.activate(garden)
        return request.collect_events()

    @pytest.mark.asyncio
    async def test_silent_events_are_skipped(self, events) -> None:
        """Creation is announced; activation is not."""
        sink = RecordingSink()

        delivered = await publish_notifications(sink, events)

        assert len(events) == 2
        assert [n.type for n in delivered] == [NotificationType.NEW_REQUEST]
        assert sink.notifications == delivered

    @pytest.mark.asyncio
    async def test_sink_failure_is_swallowed(self, events) -> None:
        sink = FailingSink()

        delivered = await publish_notifications(sink, events)

        assert delivered == []
        assert sink.attempts == 1

    def test_sinks_satisfy_protocol(self, store) -> None:
        assert isinstance(RecordingSink(), NotificationSink)
        assert isinstance(UnitOfWorkNotificationSink(store.unit_of_work), NotificationSink)

    @pytest.mark.asyncio
    async def test_unit_of_work_sink_persists(self, store) -> None:
        sink = UnitOfWorkNotificationSink(store.unit_of_work)
        notification = make_notification(REQUESTER_ID)

        await sink.emit(notification)

        assert store.notifications[notification.id].message == notification.message


# ============================================================================
# Test: NotificationService
# ============================================================================


class TestNotificationService:
    """Tests for listing and acknowledging notifications."""

    @pytest.mark.asyncio
    async def test_list_newest_first_with_unread_count(self, store) -> None:
        for n in (
            make_notification(REQUESTER_ID, minutes_ago=30, is_read=True),
            make_notification(REQUESTER_ID, minutes_ago=5),
            make_notification(REQUESTER_ID, minutes_ago=10),
            make_notification(OWNER_ID, minutes_ago=1),
        ):
            store.notifications[n.id] = n

        result = await NotificationService(store.unit_of_work).list_for_user(REQUESTER_ID)

        assert result.success
        assert [n.id for n in result.notifications] == [
            f"n-{REQUESTER_ID}-5",
            f"n-{REQUESTER_ID}-10",
            f"n-{REQUESTER_ID}-30",
        ]
        assert result.unread == 2

    @pytest.mark.asyncio
    async def test_list_respects_limit(self, store) -> None:
        for minutes in range(5):
            n = make_notification(REQUESTER_ID, minutes_ago=minutes)
            store.notifications[n.id] = n

        service = NotificationService(store.unit_of_work, list_limit=3)

        assert len((await service.list_for_user(REQUESTER_ID)).notifications) == 3
        assert len((await service.list_for_user(REQUESTER_ID, limit=1)).notifications) == 1

    @pytest.mark.asyncio
    async def test_list_storage_failure(self, store, monkeypatch) -> None:
        async def unavailable(self, user_id, limit):
            raise ConnectionError("database unreachable")

        monkeypatch.setattr(InMemoryNotificationRepository, "list_for_user", unavailable)

        result = await NotificationService(store.unit_of_work).list_for_user(REQUESTER_ID)

        assert not result.success
        assert result.error_code == "STORAGE_ERROR"

    @pytest.mark.asyncio
    async def test_mark_read(self, store) -> None:
        notification = make_notification(REQUESTER_ID)
        store.notifications[notification.id] = notification

        result = await NotificationService(store.unit_of_work).mark_read(notification.id, REQUESTER_ID)

        assert result.success
        assert result.notification.is_read
        assert store.notifications[notification.id].is_read

    @pytest.mark.asyncio
    async def test_mark_read_by_someone_else(self, store) -> None:
        """Other users' notifications look like missing ones."""
        notification = make_notification(REQUESTER_ID)
        store.notifications[notification.id] = notification

        result = await NotificationService(store.unit_of_work).mark_read(notification.id, OWNER_ID)

        assert result.error_code == "NOT_FOUND"
        assert not store.notifications[notification.id].is_read

    @pytest.mark.asyncio
    async def test_mark_read_unknown(self, store) -> None:
        result = await NotificationService(store.unit_of_work).mark_read("missing", REQUESTER_ID)

        assert result.error_code == "NOT_FOUND"
