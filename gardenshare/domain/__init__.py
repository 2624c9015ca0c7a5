"""Domain layer - Entities, value objects, state machines, domain events.

This module exports the core building blocks of land allocation:

- **Entities**: Garden (with its land ledger), LandRequest, Notification
- **Value Objects**: DateRange, land quantities, NotificationType
- **State Machines**: LandRequestStatus and owner Decision
- **Domain Events**: One event per land request transition
- **Exceptions**: Business rule violations

Example usage:
    from datetime import date
    from gardenshare.domain import Garden, LandRequest

    garden = Garden.create(owner_id="owner-1", name="Riverside", total_land="10")
    request = LandRequest.create(
        garden,
        requester_id="user-2",
        requested_land="4",
        start_date=date(2026, 3, 1),
        end_date=date(2026, 9, 30),
    )
    print(request.status)  # LandRequestStatus.PENDING
"""

# Base classes
from gardenshare.domain.base import AggregateRoot, DomainEvent, Entity, ValueObject

# Entities
from gardenshare.domain.entities import Garden, LandRequest, Notification

# Domain Events
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

# Exceptions
from gardenshare.domain.exceptions import (
    CapacityExceededError,
    DomainError,
    GardenNotFoundError,
    InsufficientLandError,
    InvalidDateRangeError,
    InvalidDecisionError,
    InvalidLandAmountError,
    InvalidStateTransitionError,
    LandRequestNotFoundError,
    LedgerInvariantError,
    NotFoundError,
    NotificationNotFoundError,
    NotPendingExtensionError,
    OverlappingRequestError,
    SweepFailedError,
    UnauthorizedError,
    ValidationError,
)

# State Machines
from gardenshare.domain.state_machines import (
    LAND_HOLDING_STATUSES,
    OVERLAP_BLOCKING_STATUSES,
    SWEEP_EXPIRABLE_STATUSES,
    Decision,
    LandRequestStatus,
    validate_land_request_transition,
)

# Value Objects
from gardenshare.domain.value_objects import (
    LAND_QUANTUM,
    DateRange,
    NotificationType,
    positive_land,
    to_land,
)

__all__ = [
    # Base classes
    "AggregateRoot",
    "DomainEvent",
    "Entity",
    "ValueObject",
    # Entities
    "Garden",
    "LandRequest",
    "Notification",
    # Value Objects
    "LAND_QUANTUM",
    "DateRange",
    "NotificationType",
    "positive_land",
    "to_land",
    # State Machines
    "LAND_HOLDING_STATUSES",
    "OVERLAP_BLOCKING_STATUSES",
    "SWEEP_EXPIRABLE_STATUSES",
    "Decision",
    "LandRequestStatus",
    "validate_land_request_transition",
    # Domain Events
    "LandRequestEvent",
    "LandRequestCreated",
    "LandRequestApproved",
    "LandRequestRejected",
    "LandRequestActivated",
    "LandRequestExpired",
    "ExtensionRequested",
    "ExtensionApproved",
    "ExtensionRejected",
    # Exceptions
    "DomainError",
    "ValidationError",
    "InvalidDateRangeError",
    "InvalidLandAmountError",
    "InvalidDecisionError",
    "NotFoundError",
    "GardenNotFoundError",
    "LandRequestNotFoundError",
    "NotificationNotFoundError",
    "UnauthorizedError",
    "CapacityExceededError",
    "InsufficientLandError",
    "OverlappingRequestError",
    "InvalidStateTransitionError",
    "NotPendingExtensionError",
    "LedgerInvariantError",
    "SweepFailedError",
]
