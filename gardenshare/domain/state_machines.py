"""State machines for domain entities.

Deterministic transition table for land requests. Every status change
on a LandRequest goes through validate_land_request_transition.
"""

from enum import Enum

from gardenshare.domain.exceptions import InvalidDecisionError, InvalidStateTransitionError


# ============================================================================
# Land Request State Machine
# ============================================================================


class LandRequestStatus(str, Enum):
    """Land request lifecycle states.

    State diagram:
        PENDING ─────────────────────────────► REJECTED
          │          │
          │ approve  │ approve (today within range)
          ▼          ▼
        APPROVED ──► ACTIVE ─────────────────► EXPIRED
          │  ▲         │  ▲    sweep, supersede
          │  │         ▼  │ decide extension
          └──┴──► PENDING_EXTENSION

    An APPROVED request whose end date passed before it was ever
    activated is expired by the sweep as well. A PENDING_EXTENSION
    request waits for the owner even past its old end date.
    """

    PENDING = "pending"
    APPROVED = "approved"
    ACTIVE = "active"
    REJECTED = "rejected"
    EXPIRED = "expired"
    PENDING_EXTENSION = "pending_extension"

    def can_transition_to(self, target: "LandRequestStatus") -> bool:
        """Check if transition to target state is valid."""
        return target in _LAND_REQUEST_TRANSITIONS.get(self, set())

    def allowed_transitions(self) -> list["LandRequestStatus"]:
        """Get list of valid target states."""
        return sorted(_LAND_REQUEST_TRANSITIONS.get(self, set()), key=lambda s: s.value)

    def holds_land(self) -> bool:
        """Check if a request in this state has land reserved on the ledger."""
        return self in LAND_HOLDING_STATUSES

    def is_extendable(self) -> bool:
        """Check if an extension can be requested from this state."""
        return self in {LandRequestStatus.APPROVED, LandRequestStatus.ACTIVE}


# Transitions live outside the enum to avoid Enum member restrictions
_LAND_REQUEST_TRANSITIONS: dict[LandRequestStatus, set[LandRequestStatus]] = {
    LandRequestStatus.PENDING: {
        LandRequestStatus.APPROVED,
        LandRequestStatus.ACTIVE,
        LandRequestStatus.REJECTED,
    },
    LandRequestStatus.APPROVED: {
        LandRequestStatus.ACTIVE,
        LandRequestStatus.PENDING_EXTENSION,
        LandRequestStatus.EXPIRED,
    },
    LandRequestStatus.ACTIVE: {
        LandRequestStatus.EXPIRED,
        LandRequestStatus.PENDING_EXTENSION,
    },
    LandRequestStatus.PENDING_EXTENSION: {
        LandRequestStatus.ACTIVE,
        LandRequestStatus.APPROVED,
    },
    LandRequestStatus.REJECTED: set(),  # Terminal state
    LandRequestStatus.EXPIRED: set(),  # Terminal state
}

LAND_HOLDING_STATUSES: frozenset[LandRequestStatus] = frozenset(
    {
        LandRequestStatus.APPROVED,
        LandRequestStatus.ACTIVE,
        LandRequestStatus.PENDING_EXTENSION,
    }
)

# A pending extension keeps its allocation past the old end date until the owner answers
SWEEP_EXPIRABLE_STATUSES: frozenset[LandRequestStatus] = frozenset(
    {
        LandRequestStatus.APPROVED,
        LandRequestStatus.ACTIVE,
    }
)

OVERLAP_BLOCKING_STATUSES: frozenset[LandRequestStatus] = frozenset(
    {
        LandRequestStatus.PENDING,
        LandRequestStatus.APPROVED,
        LandRequestStatus.ACTIVE,
        LandRequestStatus.PENDING_EXTENSION,
    }
)


# ============================================================================
# Owner Decisions
# ============================================================================


class Decision(str, Enum):
    """Garden owner decision on a land request or an extension."""

    APPROVED = "approved"
    REJECTED = "rejected"

    @classmethod
    def parse(cls, value: "str | Decision") -> "Decision":
        """Parse a decision, raising InvalidDecisionError on anything else."""
        if isinstance(value, Decision):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidDecisionError(str(value)) from None


# ============================================================================
# State Machine Helpers
# ============================================================================


def validate_land_request_transition(
    request_id: str,
    current_status: LandRequestStatus,
    target_status: LandRequestStatus,
) -> None:
    """Validate and raise if a land request transition is invalid.

    Raises:
        InvalidStateTransitionError: If transition is not valid.
    """
    if not current_status.can_transition_to(target_status):
        raise InvalidStateTransitionError(
            entity_type="LandRequest",
            entity_id=request_id,
            current_state=current_status.value,
            target_state=target_status.value,
            allowed_transitions=[s.value for s in current_status.allowed_transitions()],
        )
