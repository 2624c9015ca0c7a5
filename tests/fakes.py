"""Test doubles and shared constants."""

from datetime import date

from gardenshare.domain.entities import Notification
from gardenshare.domain.value_objects import NotificationType
from gardenshare.infrastructure.config import settings

OWNER_ID = "owner-1"
REQUESTER_ID = "gardener-1"
OTHER_REQUESTER_ID = "gardener-2"
TODAY = date(2026, 5, 15)


class RecordingSink:
    """Notification sink that keeps everything it is given."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    async def emit(self, notification: Notification) -> None:
        self.notifications.append(notification)

    def of_type(self, type: NotificationType) -> list[Notification]:
        return [n for n in self.notifications if n.type == type]


class FailingSink:
    """Notification sink whose delivery always fails."""

    def __init__(self) -> None:
        self.attempts = 0

    async def emit(self, notification: Notification) -> None:
        self.attempts += 1
        raise ConnectionError("notification backend unreachable")


class FixedClock:
    """Clock returning a settable day."""

    def __init__(self, today: date) -> None:
        self.today = today

    def __call__(self) -> date:
        return self.today


def auth_headers(user_id: str | None) -> dict[str, str]:
    """API key headers acting as user_id."""
    headers = {"Authorization": f"Bearer {settings.gardenshare_api_key}"}
    if user_id:
        headers["X-User-ID"] = user_id
    return headers
