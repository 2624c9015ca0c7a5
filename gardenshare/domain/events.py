"""Domain events for the land allocation lifecycle.

Every land request transition records one of these events. After the
unit of work commits, the application layer turns the events that carry
a notification_type into notifications for the garden owner or the
requester.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import ClassVar

from gardenshare.domain.base import DomainEvent
from gardenshare.domain.value_objects import NotificationType


# ============================================================================
# Land Request Event Base
# ============================================================================


@dataclass(frozen=True)
class LandRequestEvent(DomainEvent):
    """Common fields of every land request event.

    Subclasses set notification_type (None when the transition is not
    announced to anyone) and decide who receives the notification.
    """

    notification_type: ClassVar[NotificationType | None] = None

    request_id: str = ""
    garden_id: str = ""
    garden_name: str = ""
    requester_id: str = ""
    owner_id: str = ""

    @property
    def recipient_id(self) -> str:
        """User the notification is addressed to (the requester by default)."""
        return self.requester_id

    @property
    def from_user_id(self) -> str | None:
        """User who caused the event (the garden owner by default)."""
        return self.owner_id

    def notification_message(self) -> str:
        """Text of the notification sent for this event."""
        return f"Your land request for {self.garden_name} was updated"


# ============================================================================
# Request / Decision Events
# ============================================================================


@dataclass(frozen=True)
class LandRequestCreated(LandRequestEvent):
    """Event raised when a requester asks for land in a garden."""

    event_type: ClassVar[str] = "land_request.created"
    notification_type: ClassVar[NotificationType | None] = NotificationType.NEW_REQUEST

    requested_land: Decimal = Decimal("0")
    start_date: date | None = None
    end_date: date | None = None

    @property
    def recipient_id(self) -> str:
        return self.owner_id

    @property
    def from_user_id(self) -> str | None:
        return self.requester_id

    def notification_message(self) -> str:
        return (
            f"New land request for {self.garden_name}: {self.requested_land} "
            f"from {self.start_date} to {self.end_date}"
        )


@dataclass(frozen=True)
class LandRequestApproved(LandRequestEvent):
    """Event raised when the owner approves a request.

    activated is True when the allocation started immediately.
    """

    event_type: ClassVar[str] = "land_request.approved"
    notification_type: ClassVar[NotificationType | None] = NotificationType.STATUS_UPDATE

    requested_land: Decimal = Decimal("0")
    activated: bool = False
    previous_allocated: Decimal = Decimal("0")
    new_allocated: Decimal = Decimal("0")

    def notification_message(self) -> str:
        outcome = "approved and is now active" if self.activated else "approved"
        return (
            f"Your land request for {self.garden_name} was {outcome}. "
            f"Previous allocated land: {self.previous_allocated}, "
            f"new allocated land: {self.new_allocated}"
        )


@dataclass(frozen=True)
class LandRequestRejected(LandRequestEvent):
    """Event raised when the owner rejects a request."""

    event_type: ClassVar[str] = "land_request.rejected"
    notification_type: ClassVar[NotificationType | None] = NotificationType.STATUS_UPDATE

    def notification_message(self) -> str:
        return f"Your land request for {self.garden_name} was rejected"


@dataclass(frozen=True)
class LandRequestActivated(LandRequestEvent):
    """Event raised when the sweep starts an approved allocation."""

    event_type: ClassVar[str] = "land_request.activated"

    start_date: date | None = None


@dataclass(frozen=True)
class LandRequestExpired(LandRequestEvent):
    """Event raised when an allocation ends and its land is released.

    reason is "ended" for sweep expirations and "superseded" when a newer
    overlapping request of the same requester was activated. expired_by
    is the owner for supersessions and None for the system.
    """

    event_type: ClassVar[str] = "land_request.expired"
    notification_type: ClassVar[NotificationType | None] = NotificationType.EXPIRATION

    released_land: Decimal = Decimal("0")
    end_date: date | None = None
    reason: str = "ended"
    superseded_by: str | None = None
    expired_by: str | None = None

    @property
    def from_user_id(self) -> str | None:
        return self.expired_by

    def notification_message(self) -> str:
        if self.reason == "superseded":
            return (
                f"Your land allocation in {self.garden_name} was replaced by "
                f"a newly approved request and has expired"
            )
        return f"Your land allocation in {self.garden_name} ended on {self.end_date} and has expired"


# ============================================================================
# Extension Events
# ============================================================================


@dataclass(frozen=True)
class ExtensionRequested(LandRequestEvent):
    """Event raised when a requester asks to push back the end date."""

    event_type: ClassVar[str] = "land_request.extension_requested"
    notification_type: ClassVar[NotificationType | None] = NotificationType.EXTENSION_REQUEST

    current_end_date: date | None = None
    proposed_end_date: date | None = None

    @property
    def recipient_id(self) -> str:
        return self.owner_id

    @property
    def from_user_id(self) -> str | None:
        return self.requester_id

    def notification_message(self) -> str:
        return (
            f"Extension requested for {self.garden_name}: "
            f"end date {self.current_end_date} -> {self.proposed_end_date}"
        )


@dataclass(frozen=True)
class ExtensionApproved(LandRequestEvent):
    """Event raised when the owner accepts an extension."""

    event_type: ClassVar[str] = "land_request.extension_approved"
    notification_type: ClassVar[NotificationType | None] = NotificationType.EXTENSION_UPDATE

    end_date: date | None = None

    def notification_message(self) -> str:
        return f"Your extension for {self.garden_name} was approved. New end date: {self.end_date}"


@dataclass(frozen=True)
class ExtensionRejected(LandRequestEvent):
    """Event raised when the owner declines an extension."""

    event_type: ClassVar[str] = "land_request.extension_rejected"
    notification_type: ClassVar[NotificationType | None] = NotificationType.EXTENSION_UPDATE

    end_date: date | None = None

    def notification_message(self) -> str:
        return (
            f"Your extension for {self.garden_name} was rejected. "
            f"Your allocation still ends on {self.end_date}"
        )
