"""Domain entities for GardenShare.

Garden carries the land ledger (total vs. allocated land), LandRequest
is the allocation aggregate whose transitions follow LandRequestStatus,
and Notification is the message left for a garden owner or requester.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from gardenshare.domain.base import AggregateRoot, Entity, new_id, utcnow
from gardenshare.domain.events import (
    ExtensionApproved,
    ExtensionRejected,
    ExtensionRequested,
    LandRequestActivated,
    LandRequestApproved,
    LandRequestCreated,
    LandRequestEvent,
    LandRequestExpired,
    LandRequestRejected,
)
from gardenshare.domain.exceptions import (
    CapacityExceededError,
    InvalidDateRangeError,
    InvalidLandAmountError,
    InvalidStateTransitionError,
    LedgerInvariantError,
    NotPendingExtensionError,
    UnauthorizedError,
)
from gardenshare.domain.state_machines import (
    SWEEP_EXPIRABLE_STATUSES,
    LandRequestStatus,
    validate_land_request_transition,
)
from gardenshare.domain.value_objects import (
    DateRange,
    NotificationType,
    positive_land,
    to_land,
)


# ============================================================================
# Garden Entity
# ============================================================================


@dataclass(kw_only=True, eq=False)
class Garden(AggregateRoot):
    """A community garden and its land ledger.

    Attributes:
        id: Garden identifier.
        owner_id: User who owns the garden and decides on requests.
        name: Display name.
        total_land: Land the garden offers, never negative.
        allocated_land: Land committed to approved/active requests.
        description: Free-form description.
        address: Postal address.
        latitude: WGS84 latitude of the plot.
        longitude: WGS84 longitude of the plot.
        type: Garden category (community, school, rooftop...).
    """

    owner_id: str
    name: str
    total_land: Decimal
    allocated_land: Decimal = Decimal("0.00")
    description: str | None = None
    address: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    type: str = "community"

    def __post_init__(self) -> None:
        self.total_land = to_land(self.total_land)
        self.allocated_land = to_land(self.allocated_land)
        if self.total_land < 0:
            raise InvalidLandAmountError(self.total_land, "Total land cannot be negative")
        self._check_invariant()

    @classmethod
    def create(
        cls,
        owner_id: str,
        name: str,
        total_land: Decimal | int | str,
        description: str | None = None,
        address: str | None = None,
        latitude: float | None = None,
        longitude: float | None = None,
        type: str = "community",
    ) -> "Garden":
        """Create a new garden with nothing allocated yet."""
        return cls(
            id=new_id(),
            owner_id=owner_id,
            name=name,
            total_land=to_land(total_land),
            description=description,
            address=address,
            latitude=latitude,
            longitude=longitude,
            type=type or "community",
        )

    @property
    def available_land(self) -> Decimal:
        """Land that can still be allocated."""
        return self.total_land - self.allocated_land

    def is_owned_by(self, user_id: str) -> bool:
        return self.owner_id == user_id

    def ensure_owner(self, user_id: str, request_id: str, action: str) -> None:
        """Raise UnauthorizedError unless user_id owns the garden."""
        if not self.is_owned_by(user_id):
            raise UnauthorizedError(user_id, request_id, action)

    def fits(self, amount: Decimal) -> bool:
        """Check whether amount can still be allocated."""
        return self.allocated_land + amount <= self.total_land

    def reserve(self, amount: Decimal) -> None:
        """Allocate land, keeping allocated_land <= total_land.

        Raises:
            CapacityExceededError: If the amount does not fit.
        """
        amount = positive_land(amount)
        if not self.fits(amount):
            raise CapacityExceededError(self.id, amount, self.available_land)
        self.allocated_land += amount
        self._check_invariant()
        self._touch()

    def release(self, amount: Decimal) -> Decimal:
        """Give land back, flooring allocated_land at zero.

        Returns:
            The shortfall that could not be released (zero when the
            books balance). A positive value means the ledger was already
            missing land for this release.
        """
        amount = to_land(amount)
        shortfall = Decimal("0.00")
        remaining = self.allocated_land - amount
        if remaining < 0:
            shortfall = -remaining
            remaining = Decimal("0.00")
        self.allocated_land = remaining
        self._check_invariant()
        self._touch()
        return shortfall

    def _check_invariant(self) -> None:
        if not (Decimal("0") <= self.allocated_land <= self.total_land):
            raise LedgerInvariantError(self.id, self.total_land, self.allocated_land)


# ============================================================================
# Land Request Aggregate Root
# ============================================================================


@dataclass(kw_only=True, eq=False)
class LandRequest(AggregateRoot):
    """A request for land in a garden over a date range.

    Attributes:
        garden_id: Garden the land is requested in.
        requester_id: User asking for the land.
        requested_land: Land quantity, always positive.
        start_date: First day of the allocation.
        end_date: Last day of the allocation.
        status: Current lifecycle state.
        message: Note from the requester.
        contact_info: How the owner can reach the requester.
        previous_end_date: End date before the last extension request.
        proposed_end_date: End date asked for by a pending extension.
        extension_message: Note attached to the pending extension.
        pre_extension_status: Status held when the extension was requested.
    """

    garden_id: str
    requester_id: str
    requested_land: Decimal
    start_date: date
    end_date: date
    status: LandRequestStatus = LandRequestStatus.PENDING
    message: str | None = None
    contact_info: str | None = None
    previous_end_date: date | None = None
    proposed_end_date: date | None = None
    extension_message: str | None = None
    pre_extension_status: LandRequestStatus | None = None
    decided_at: datetime | None = None

    @classmethod
    def create(
        cls,
        garden: Garden,
        requester_id: str,
        requested_land: Decimal | int | str,
        start_date: date,
        end_date: date,
        contact_info: str | None = None,
        message: str | None = None,
    ) -> "LandRequest":
        """Create a pending land request.

        Raises:
            InvalidDateRangeError: If start_date is not before end_date.
            InvalidLandAmountError: If requested_land is not positive.
        """
        date_range = DateRange.of(start_date, end_date)
        request = cls(
            id=new_id(),
            garden_id=garden.id,
            requester_id=requester_id,
            requested_land=positive_land(requested_land),
            start_date=date_range.start,
            end_date=date_range.end,
            contact_info=contact_info,
            message=message,
        )
        request._record_event(
            LandRequestCreated(
                **request._event_fields(garden),
                requested_land=request.requested_land,
                start_date=request.start_date,
                end_date=request.end_date,
            )
        )
        return request

    # -------------------------------------------------------------------------
    # Query Methods
    # -------------------------------------------------------------------------

    @property
    def date_range(self) -> DateRange:
        return DateRange(start=self.start_date, end=self.end_date)

    @property
    def displayed_end_date(self) -> date:
        """End date currently in force (the old one while an extension is pending)."""
        if self.status == LandRequestStatus.PENDING_EXTENSION and self.previous_end_date:
            return self.previous_end_date
        return self.end_date

    def is_requested_by(self, user_id: str) -> bool:
        return self.requester_id == user_id

    def ensure_requester(self, user_id: str, action: str) -> None:
        """Raise UnauthorizedError unless user_id made this request."""
        if not self.is_requested_by(user_id):
            raise UnauthorizedError(user_id, self.id, action)

    def is_visible_to(self, user_id: str, garden: Garden) -> bool:
        """Requests are visible to their requester and the garden owner."""
        return self.is_requested_by(user_id) or garden.is_owned_by(user_id)

    def overlaps(self, other: "LandRequest") -> bool:
        return self.date_range.overlaps(other.date_range)

    def is_due_for_activation(self, today: date) -> bool:
        return self.status == LandRequestStatus.APPROVED and self.date_range.contains(today)

    def is_due_for_expiration(self, today: date) -> bool:
        return self.status in SWEEP_EXPIRABLE_STATUSES and self.date_range.has_ended(today)

    # -------------------------------------------------------------------------
    # State Transitions
    # -------------------------------------------------------------------------

    def approve(self, garden: Garden, today: date, previous_allocated: Decimal) -> None:
        """Approve the request after its land was reserved on the garden.

        The request becomes ACTIVE when today falls within its dates,
        APPROVED otherwise.
        """
        target = (
            LandRequestStatus.ACTIVE
            if self.date_range.contains(today)
            else LandRequestStatus.APPROVED
        )
        self._transition(target)
        self.decided_at = utcnow()
        self._record_event(
            LandRequestApproved(
                **self._event_fields(garden),
                requested_land=self.requested_land,
                activated=target == LandRequestStatus.ACTIVE,
                previous_allocated=previous_allocated,
                new_allocated=garden.allocated_land,
            )
        )

    def reject(self, garden: Garden) -> None:
        """Reject a pending request. No land is involved."""
        self._transition(LandRequestStatus.REJECTED)
        self.decided_at = utcnow()
        self._record_event(LandRequestRejected(**self._event_fields(garden)))

    def activate(self, garden: Garden) -> None:
        """Start an approved allocation whose first day has come."""
        self._transition(LandRequestStatus.ACTIVE)
        self._record_event(
            LandRequestActivated(**self._event_fields(garden), start_date=self.start_date)
        )

    def expire(
        self,
        garden: Garden,
        reason: str = "ended",
        superseded_by: str | None = None,
        expired_by: str | None = None,
    ) -> None:
        """End the allocation. The caller releases the land on the ledger."""
        self._transition(LandRequestStatus.EXPIRED)
        self._record_event(
            LandRequestExpired(
                **self._event_fields(garden),
                released_land=self.requested_land,
                end_date=self.end_date,
                reason=reason,
                superseded_by=superseded_by,
                expired_by=expired_by,
            )
        )

    def request_extension(
        self,
        garden: Garden,
        requester_id: str,
        proposed_end_date: date,
        message: str | None = None,
    ) -> None:
        """Ask the owner to move the end date later.

        Raises:
            UnauthorizedError: If requester_id did not make the request.
            InvalidStateTransitionError: If the request is not approved/active.
            InvalidDateRangeError: If proposed_end_date is not after end_date.
        """
        self.ensure_requester(requester_id, "extend")
        if not self.status.is_extendable():
            raise InvalidStateTransitionError(
                entity_type="LandRequest",
                entity_id=self.id,
                current_state=self.status.value,
                target_state=LandRequestStatus.PENDING_EXTENSION.value,
                allowed_transitions=[s.value for s in self.status.allowed_transitions()],
            )
        if proposed_end_date <= self.end_date:
            raise InvalidDateRangeError(
                self.end_date,
                proposed_end_date,
                reason="proposed_end_date must be after the current end_date",
            )

        self.pre_extension_status = self.status
        self._transition(LandRequestStatus.PENDING_EXTENSION)
        self.previous_end_date = self.end_date
        self.proposed_end_date = proposed_end_date
        self.extension_message = message
        self._record_event(
            ExtensionRequested(
                **self._event_fields(garden),
                current_end_date=self.end_date,
                proposed_end_date=proposed_end_date,
            )
        )

    def approve_extension(self, garden: Garden, today: date) -> None:
        """Move the end date to the proposed one and restore the prior status."""
        self._ensure_pending_extension()
        if self.proposed_end_date is None:
            raise NotPendingExtensionError(self.id, self.status.value)
        self.end_date = self.proposed_end_date
        self.proposed_end_date = None
        self.extension_message = None
        self._transition(self._restored_status(today))
        self.pre_extension_status = None
        self._record_event(ExtensionApproved(**self._event_fields(garden), end_date=self.end_date))

    def reject_extension(self, garden: Garden, today: date) -> None:
        """Drop the extension, keep the end date and restore the prior status."""
        self._ensure_pending_extension()
        self.proposed_end_date = None
        self.previous_end_date = None
        self.extension_message = None
        self._transition(self._restored_status(today))
        self.pre_extension_status = None
        self._record_event(ExtensionRejected(**self._event_fields(garden), end_date=self.end_date))

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _ensure_pending_extension(self) -> None:
        if self.status != LandRequestStatus.PENDING_EXTENSION:
            raise NotPendingExtensionError(self.id, self.status.value)

    def _restored_status(self, today: date) -> LandRequestStatus:
        # An allocation approved before its start stays APPROVED until its first day
        previous = self.pre_extension_status or LandRequestStatus.ACTIVE
        if previous == LandRequestStatus.APPROVED and self.date_range.contains(today):
            return LandRequestStatus.ACTIVE
        return previous

    def _transition(self, target: LandRequestStatus) -> None:
        validate_land_request_transition(self.id, self.status, target)
        self.status = target
        self._touch()

    def _event_fields(self, garden: Garden) -> dict[str, str]:
        return {
            "aggregate_id": self.id,
            "aggregate_type": "LandRequest",
            "request_id": self.id,
            "garden_id": garden.id,
            "garden_name": garden.name,
            "requester_id": self.requester_id,
            "owner_id": garden.owner_id,
        }


# ============================================================================
# Notification Entity
# ============================================================================


@dataclass(kw_only=True, eq=False)
class Notification(Entity):
    """A land allocation notification addressed to one user.

    Attributes:
        recipient_id: User the notification is for.
        garden_id: Garden it concerns.
        type: Notification tag.
        message: Human-readable text.
        from_user_id: User who triggered it, None for the system.
        request_id: Land request it concerns, if any.
        is_read: Whether the recipient acknowledged it.
        created_at: When it was created.
    """

    recipient_id: str
    garden_id: str
    type: NotificationType
    message: str
    from_user_id: str | None = None
    request_id: str | None = None
    is_read: bool = False
    created_at: datetime = field(default_factory=utcnow)

    @classmethod
    def from_event(cls, event: LandRequestEvent) -> "Notification | None":
        """Build the notification announcing a land request event.

        Returns:
            None for events that are not announced.
        """
        if event.notification_type is None:
            return None
        return cls(
            id=new_id(),
            recipient_id=event.recipient_id,
            from_user_id=event.from_user_id,
            garden_id=event.garden_id,
            request_id=event.request_id,
            type=event.notification_type,
            message=event.notification_message(),
            created_at=event.occurred_at,
        )

    def mark_read(self) -> None:
        self.is_read = True
