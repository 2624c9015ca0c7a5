"""Domain exceptions.

Business rule violations raised by entities, the ledger and the land
request lifecycle. The application layer turns them into result error
codes; nothing here knows about HTTP.
"""

from datetime import date
from decimal import Decimal
from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    Attributes:
        message: Human-readable error message.
        details: Extra context for logs and API error payloads.
    """

    error_code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Validation Errors
# ============================================================================


class ValidationError(DomainError):
    """Base class for input validation errors raised before any mutation."""

    error_code = "VALIDATION_ERROR"


class InvalidDateRangeError(ValidationError):
    """Raised when a start/end or proposed end date is out of order."""

    error_code = "INVALID_DATE_RANGE"

    def __init__(self, start_date: date, end_date: date, reason: str | None = None) -> None:
        """Initialize invalid date range error.

        Args:
            start_date: Lower bound that was supplied (or current end date).
            end_date: Upper bound that was supplied (or proposed end date).
            reason: Explanation of the violated rule.
        """
        reason = reason or "start_date must be before end_date"
        super().__init__(
            f"Invalid date range {start_date.isoformat()} - {end_date.isoformat()}: {reason}",
            details={
                "start_date": start_date.isoformat(),
                "end_date": end_date.isoformat(),
                "reason": reason,
            },
        )


class InvalidLandAmountError(ValidationError):
    """Raised when a land quantity is not usable."""

    error_code = "INVALID_LAND_AMOUNT"

    def __init__(self, amount: Decimal, reason: str = "Land amount must be positive") -> None:
        super().__init__(
            f"Invalid land amount {amount}: {reason}",
            details={"amount": str(amount), "reason": reason},
        )


class InvalidDecisionError(ValidationError):
    """Raised when a decision is neither approved nor rejected."""

    error_code = "INVALID_DECISION"

    def __init__(self, decision: str) -> None:
        super().__init__(
            f"Invalid decision '{decision}'. Expected 'approved' or 'rejected'",
            details={"decision": decision},
        )


# ============================================================================
# Lookup Errors
# ============================================================================


class NotFoundError(DomainError):
    """Base class for missing records."""

    error_code = "NOT_FOUND"


class GardenNotFoundError(NotFoundError):
    """Raised when a garden does not exist."""

    error_code = "GARDEN_NOT_FOUND"

    def __init__(self, garden_id: str) -> None:
        super().__init__(f"Garden not found: {garden_id}", details={"garden_id": garden_id})


class LandRequestNotFoundError(NotFoundError):
    """Raised when a land request does not exist."""

    def __init__(self, request_id: str) -> None:
        super().__init__(
            f"Land request not found: {request_id}",
            details={"request_id": request_id},
        )


class NotificationNotFoundError(NotFoundError):
    """Raised when a notification does not exist for the caller."""

    def __init__(self, notification_id: str) -> None:
        super().__init__(
            f"Notification not found: {notification_id}",
            details={"notification_id": notification_id},
        )


# ============================================================================
# Authorization Errors
# ============================================================================


class UnauthorizedError(DomainError):
    """Raised when the caller may not act on a land request."""

    error_code = "UNAUTHORIZED"

    def __init__(self, user_id: str, request_id: str, action: str) -> None:
        """Initialize unauthorized error.

        Args:
            user_id: Caller identity.
            request_id: Land request the caller tried to act on.
            action: What the caller tried to do.
        """
        super().__init__(
            f"User {user_id} is not allowed to {action} land request {request_id}",
            details={"user_id": user_id, "request_id": request_id, "action": action},
        )


# ============================================================================
# Capacity and Conflict Errors
# ============================================================================


class CapacityExceededError(DomainError):
    """Raised by the ledger when a reservation does not fit.

    Attributes:
        max_available: Land still available on the garden.
    """

    error_code = "CAPACITY_EXCEEDED"

    def __init__(self, garden_id: str, requested: Decimal, max_available: Decimal) -> None:
        super().__init__(
            f"Requested land exceeds available space (Max: {max_available})",
            details={
                "garden_id": garden_id,
                "requested_land": str(requested),
                "max_available": str(max_available),
            },
        )
        self.garden_id = garden_id
        self.requested = requested
        self.max_available = max_available


class InsufficientLandError(CapacityExceededError):
    """Raised when a land request no longer fits the garden."""

    error_code = "INSUFFICIENT_LAND"


class OverlappingRequestError(DomainError):
    """Raised when a requester already holds an overlapping request."""

    error_code = "OVERLAPPING_REQUEST"

    def __init__(self, garden_id: str, requester_id: str, conflicting_request_id: str) -> None:
        super().__init__(
            "You already have a land request for this garden overlapping these dates",
            details={
                "garden_id": garden_id,
                "requester_id": requester_id,
                "conflicting_request_id": conflicting_request_id,
            },
        )


# ============================================================================
# State Errors
# ============================================================================


class InvalidStateTransitionError(DomainError):
    """Raised when an invalid state transition is attempted."""

    error_code = "INVALID_STATE"

    def __init__(
        self,
        entity_type: str,
        entity_id: str,
        current_state: str,
        target_state: str,
        allowed_transitions: list[str] | None = None,
    ) -> None:
        """Initialize invalid state transition error.

        Args:
            entity_type: Type of entity (e.g., "LandRequest").
            entity_id: ID of the entity.
            current_state: Current state of the entity.
            target_state: Attempted target state.
            allowed_transitions: States reachable from the current one.
        """
        allowed = allowed_transitions or []
        message = (
            f"Cannot transition {entity_type}({entity_id}) "
            f"from '{current_state}' to '{target_state}'. "
            f"Allowed transitions: {allowed}"
        )
        super().__init__(
            message,
            details={
                "entity_type": entity_type,
                "entity_id": entity_id,
                "current_state": current_state,
                "target_state": target_state,
                "allowed_transitions": allowed,
            },
        )


class NotPendingExtensionError(DomainError):
    """Raised when deciding an extension that was never requested."""

    error_code = "NOT_PENDING_EXTENSION"

    def __init__(self, request_id: str, current_status: str) -> None:
        super().__init__(
            f"Land request {request_id} has no pending extension (status '{current_status}')",
            details={"request_id": request_id, "current_status": current_status},
        )


# ============================================================================
# Ledger Errors
# ============================================================================


class LedgerInvariantError(DomainError):
    """Raised when garden totals would break 0 <= allocated <= total."""

    error_code = "LEDGER_INVARIANT"

    def __init__(self, garden_id: str, total_land: Decimal, allocated_land: Decimal) -> None:
        super().__init__(
            f"Garden {garden_id} ledger out of bounds: allocated {allocated_land} of {total_land}",
            details={
                "garden_id": garden_id,
                "total_land": str(total_land),
                "allocated_land": str(allocated_land),
            },
        )


# ============================================================================
# Sweep Errors
# ============================================================================


class SweepFailedError(DomainError):
    """Raised when a sweep batch was rolled back."""

    error_code = "SWEEP_FAILED"

    def __init__(self, today: date, reason: str) -> None:
        super().__init__(
            f"Land request sweep for {today.isoformat()} rolled back: {reason}",
            details={"today": today.isoformat(), "reason": reason},
        )
