"""Tests for notification API endpoints."""

from datetime import timedelta

import pytest
from fastapi import status

from fakes import OWNER_ID, REQUESTER_ID, TODAY
from gardenshare.api.dependencies import get_sink
from gardenshare.application.notifications import UnitOfWorkNotificationSink
from gardenshare.domain.base import utcnow
from gardenshare.domain.entities import Notification
from gardenshare.domain.value_objects import NotificationType


@pytest.fixture
def inbox(store) -> list[Notification]:
    """Three notifications for the requester, one already read, and one for the owner."""
    notifications = [
        Notification(
            id=f"n-{i}",
            recipient_id=recipient,
            garden_id="g-1",
            type=NotificationType.STATUS_UPDATE,
            message=f"Update {i}",
            from_user_id=OWNER_ID,
            is_read=is_read,
            created_at=utcnow() - timedelta(minutes=i),
        )
        for i, recipient, is_read in [
            (1, REQUESTER_ID, False),
            (2, REQUESTER_ID, True),
            (3, REQUESTER_ID, False),
            (4, OWNER_ID, False),
        ]
    ]
    for n in notifications:
        store.notifications[n.id] = n
    return notifications


class TestListNotifications:
    """Tests for GET /notifications."""

    def test_lists_own_notifications_newest_first(self, client, inbox, requester_headers) -> None:
        response = client.get("/notifications", headers=requester_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert [item["id"] for item in data["items"]] == ["n-1", "n-2", "n-3"]
        assert data["unread"] == 2

    def test_limit(self, client, inbox, requester_headers) -> None:
        response = client.get("/notifications", params={"limit": 1}, headers=requester_headers)

        assert [item["id"] for item in response.json()["items"]] == ["n-1"]

    def test_limit_out_of_range(self, client, requester_headers) -> None:
        response = client.get("/notifications", params={"limit": 0}, headers=requester_headers)

        assert response.status_code == 422

    def test_decision_reaches_the_inbox(
        self, client, store, garden, seed_request, owner_headers, requester_headers
    ) -> None:
        """Notifications persisted by the sink are listed for their recipient."""
        client.app.dependency_overrides[get_sink] = lambda: UnitOfWorkNotificationSink(store.unit_of_work)
        request = seed_request(garden, TODAY, TODAY + timedelta(days=30))

        client.patch(f"/requests/{request.id}", json={"status": "approved"}, headers=owner_headers)
        response = client.get("/notifications", headers=requester_headers)

        [item] = response.json()["items"]
        assert item["type"] == "status_update"
        assert item["recipient_id"] == REQUESTER_ID
        assert item["from_user_id"] == OWNER_ID
        assert item["request_id"] == request.id
        assert item["is_read"] is False


class TestMarkNotificationRead:
    """Tests for PATCH /notifications/{id}."""

    def test_mark_read(self, client, store, inbox, requester_headers) -> None:
        response = client.patch("/notifications/n-1", headers=requester_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["is_read"] is True
        assert store.notifications["n-1"].is_read

    def test_mark_read_is_idempotent(self, client, inbox, requester_headers) -> None:
        response = client.patch("/notifications/n-2", headers=requester_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["is_read"] is True

    def test_someone_elses_notification(self, client, store, inbox, owner_headers) -> None:
        response = client.patch("/notifications/n-1", headers=owner_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error_code"] == "NOT_FOUND"
        assert not store.notifications["n-1"].is_read
