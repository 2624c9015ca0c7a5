"""API schemas for GardenShare API.

Pydantic models for request/response validation and serialization.
Land quantities travel as decimal strings ("4.50") to keep precision.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] = Field(
        default_factory=dict, description="Additional error context (e.g. max_available)"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


# ============================================================================
# Garden Schemas
# ============================================================================


class GardenCreateRequest(BaseModel):
    """Request to register a garden."""

    name: str = Field(..., min_length=1, max_length=255, description="Garden name")
    total_land: Decimal = Field(..., description="Land the garden offers")
    description: str | None = Field(default=None, description="Free-form description")
    address: str | None = Field(default=None, max_length=500, description="Postal address")
    latitude: float | None = Field(default=None, ge=-90, le=90, description="Latitude")
    longitude: float | None = Field(default=None, ge=-180, le=180, description="Longitude")
    type: str = Field(default="community", max_length=50, description="Garden category")


class GardenResponse(BaseModel):
    """Garden with its land ledger."""

    id: str = Field(..., description="Garden identifier")
    owner_id: str = Field(..., description="Owner user ID")
    name: str
    description: str | None = None
    address: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    type: str
    total_land: Decimal = Field(..., description="Land the garden offers")
    allocated_land: Decimal = Field(..., description="Land held by approved/active requests")
    available_land: Decimal = Field(..., description="Land still available")
    created_at: datetime
    updated_at: datetime


# ============================================================================
# Land Request Schemas
# ============================================================================


class LandRequestStatusEnum(str, Enum):
    """Land request status values."""

    PENDING = "pending"
    APPROVED = "approved"
    ACTIVE = "active"
    REJECTED = "rejected"
    EXPIRED = "expired"
    PENDING_EXTENSION = "pending_extension"


class LandRequestCreateRequest(BaseModel):
    """Request for land in a garden."""

    requested_land: Decimal = Field(..., description="Land quantity, positive")
    start_date: date = Field(..., description="First day of the allocation")
    end_date: date = Field(..., description="Last day of the allocation")
    contact_info: str | None = Field(default=None, max_length=255)
    message: str | None = Field(default=None, description="Note for the garden owner")


class DecisionRequest(BaseModel):
    """Owner decision on a request or an extension.

    Anything other than "approved" or "rejected" is refused with
    INVALID_DECISION.
    """

    status: str = Field(..., description="'approved' or 'rejected'")


class ExtensionCreateRequest(BaseModel):
    """Request to push back the end date of an allocation."""

    proposed_end_date: date = Field(..., description="New end date, after the current one")
    message: str | None = Field(default=None, description="Note for the garden owner")


class LandRequestResponse(BaseModel):
    """A land request."""

    id: str
    garden_id: str
    garden_name: str | None = None
    requester_id: str
    requested_land: Decimal
    start_date: date
    end_date: date
    status: LandRequestStatusEnum
    message: str | None = None
    contact_info: str | None = None
    previous_end_date: date | None = None
    proposed_end_date: date | None = None
    extension_message: str | None = None
    decided_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class DecisionResponse(LandRequestResponse):
    """A decided land request and the resulting garden totals."""

    allocated_land: Decimal | None = Field(
        default=None, description="Garden allocated land after the decision"
    )
    superseded: list[str] = Field(
        default_factory=list, description="Requests expired by this approval"
    )


class AllocationSchema(BaseModel):
    """One of the caller's current allocations.

    end_date is the end date in force: while an extension is pending it
    is still the previous one.
    """

    request_id: str
    garden_id: str
    garden_name: str | None = None
    requested_land: Decimal
    start_date: date
    end_date: date
    status: LandRequestStatusEnum
    proposed_end_date: date | None = None


class AllocationsListResponse(BaseModel):
    """The caller's pending, approved, active and extending requests."""

    items: list[AllocationSchema]
    total: int


# ============================================================================
# Notification Schemas
# ============================================================================


class NotificationTypeEnum(str, Enum):
    """Notification tags."""

    NEW_REQUEST = "new_request"
    STATUS_UPDATE = "status_update"
    EXPIRATION = "expiration"
    EXTENSION_REQUEST = "extension_request"
    EXTENSION_UPDATE = "extension_update"


class NotificationResponse(BaseModel):
    """A land allocation notification."""

    id: str
    recipient_id: str
    from_user_id: str | None = None
    garden_id: str
    request_id: str | None = None
    type: NotificationTypeEnum
    message: str
    is_read: bool
    created_at: datetime


class NotificationsListResponse(BaseModel):
    """Latest notifications of the caller."""

    items: list[NotificationResponse]
    unread: int
