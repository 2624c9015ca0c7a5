"""SQLAlchemy models for database tables.

ORM models for gardens, land_requests and land_allocation_notifications,
with conversions to and from the domain entities.
"""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from gardenshare.domain.entities import Garden, LandRequest, Notification
from gardenshare.domain.state_machines import LandRequestStatus
from gardenshare.domain.value_objects import NotificationType
from gardenshare.infrastructure.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _aware(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes even for timezone=True columns
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ============================================================================
# Garden Model
# ============================================================================


class GardenModel(Base):
    """Garden model for database persistence.

    total_land and allocated_land form the land ledger; the check
    constraint mirrors the domain invariant.
    """

    __tablename__ = "gardens"
    __table_args__ = (
        CheckConstraint("total_land >= 0", name="ck_gardens_total_land_non_negative"),
        CheckConstraint(
            "allocated_land >= 0 AND allocated_land <= total_land",
            name="ck_gardens_allocated_within_total",
        ),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    owner_id = Column(String(36), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    address = Column(String(500), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    type = Column(String(50), nullable=False, default="community", index=True)
    total_land = Column(Numeric(12, 2), nullable=False)
    allocated_land = Column(Numeric(12, 2), nullable=False, default=0)
    version = Column(Numeric(10, 0), nullable=False, default=1)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    # Relationships
    land_requests = relationship("LandRequestModel", back_populates="garden")

    @classmethod
    def from_entity(cls, garden: Garden) -> "GardenModel":
        model = cls(id=garden.id, created_at=garden.created_at)
        model.apply(garden)
        return model

    def apply(self, garden: Garden) -> None:
        """Copy mutable entity state onto the row."""
        self.owner_id = garden.owner_id
        self.name = garden.name
        self.description = garden.description
        self.address = garden.address
        self.latitude = garden.latitude
        self.longitude = garden.longitude
        self.type = garden.type
        self.total_land = garden.total_land
        self.allocated_land = garden.allocated_land
        self.version = garden.version
        self.updated_at = garden.updated_at

    def to_entity(self) -> Garden:
        return Garden(
            id=self.id,
            owner_id=self.owner_id,
            name=self.name,
            description=self.description,
            address=self.address,
            latitude=self.latitude,
            longitude=self.longitude,
            type=self.type,
            total_land=self.total_land,
            allocated_land=self.allocated_land,
            version=int(self.version or 1),
            created_at=_aware(self.created_at) or _utcnow(),
            updated_at=_aware(self.updated_at) or _utcnow(),
        )


# ============================================================================
# Land Request Model
# ============================================================================


class LandRequestModel(Base):
    """Land request model for database persistence.

    Rows are never deleted; rejected and expired requests stay as history.
    """

    __tablename__ = "land_requests"
    __table_args__ = (
        CheckConstraint("requested_land > 0", name="ck_land_requests_positive_land"),
        CheckConstraint("start_date < end_date", name="ck_land_requests_date_order"),
        Index("ix_land_requests_garden_requester", "garden_id", "user_id"),
        Index("ix_land_requests_status_dates", "status", "start_date", "end_date"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    garden_id = Column(
        String(36),
        ForeignKey("gardens.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(String(36), nullable=False, index=True)
    requested_land = Column(Numeric(12, 2), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default="pending", index=True)
    message = Column(Text, nullable=True)
    contact_info = Column(String(255), nullable=True)

    # Extension
    previous_end_date = Column(Date, nullable=True)
    proposed_end_date = Column(Date, nullable=True)
    extension_message = Column(Text, nullable=True)
    pre_extension_status = Column(String(20), nullable=True)

    version = Column(Numeric(10, 0), nullable=False, default=1)
    decided_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    # Relationships
    garden = relationship("GardenModel", back_populates="land_requests")

    @classmethod
    def from_entity(cls, request: LandRequest) -> "LandRequestModel":
        model = cls(id=request.id, created_at=request.created_at)
        model.apply(request)
        return model

    def apply(self, request: LandRequest) -> None:
        """Copy mutable entity state onto the row."""
        self.garden_id = request.garden_id
        self.user_id = request.requester_id
        self.requested_land = request.requested_land
        self.start_date = request.start_date
        self.end_date = request.end_date
        self.status = request.status.value
        self.message = request.message
        self.contact_info = request.contact_info
        self.previous_end_date = request.previous_end_date
        self.proposed_end_date = request.proposed_end_date
        self.extension_message = request.extension_message
        self.pre_extension_status = (
            request.pre_extension_status.value if request.pre_extension_status else None
        )
        self.version = request.version
        self.decided_at = request.decided_at
        self.updated_at = request.updated_at

    def to_entity(self) -> LandRequest:
        return LandRequest(
            id=self.id,
            garden_id=self.garden_id,
            requester_id=self.user_id,
            requested_land=self.requested_land,
            start_date=self.start_date,
            end_date=self.end_date,
            status=LandRequestStatus(self.status),
            message=self.message,
            contact_info=self.contact_info,
            previous_end_date=self.previous_end_date,
            proposed_end_date=self.proposed_end_date,
            extension_message=self.extension_message,
            pre_extension_status=(
                LandRequestStatus(self.pre_extension_status)
                if self.pre_extension_status
                else None
            ),
            version=int(self.version or 1),
            decided_at=_aware(self.decided_at),
            created_at=_aware(self.created_at) or _utcnow(),
            updated_at=_aware(self.updated_at) or _utcnow(),
        )


# ============================================================================
# Notification Model
# ============================================================================


class NotificationModel(Base):
    """Land allocation notification addressed to one user."""

    __tablename__ = "land_allocation_notifications"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id = Column(String(36), nullable=False, index=True)
    from_user = Column(String(36), nullable=True)
    garden_id = Column(
        String(36),
        ForeignKey("gardens.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    request_id = Column(String(36), nullable=True, index=True)
    type = Column(String(30), nullable=False)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)

    @classmethod
    def from_entity(cls, notification: Notification) -> "NotificationModel":
        model = cls(id=notification.id)
        model.apply(notification)
        return model

    def apply(self, notification: Notification) -> None:
        self.user_id = notification.recipient_id
        self.from_user = notification.from_user_id
        self.garden_id = notification.garden_id
        self.request_id = notification.request_id
        self.type = notification.type.value
        self.message = notification.message
        self.is_read = notification.is_read
        self.created_at = notification.created_at

    def to_entity(self) -> Notification:
        return Notification(
            id=self.id,
            recipient_id=self.user_id,
            from_user_id=self.from_user,
            garden_id=self.garden_id,
            request_id=self.request_id,
            type=NotificationType(self.type),
            message=self.message,
            is_read=bool(self.is_read),
            created_at=_aware(self.created_at) or _utcnow(),
        )
