"""Value objects for the domain layer.

Value objects are immutable and defined by their attributes: an
allocation's date range, land quantities, and notification tags.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Self

from gardenshare.domain.base import ValueObject
from gardenshare.domain.exceptions import InvalidDateRangeError, InvalidLandAmountError

# Land is stored with two decimal places (square metres, acres, whatever the garden uses)
LAND_QUANTUM = Decimal("0.01")


def to_land(value: Decimal | int | float | str) -> Decimal:
    """Normalize a land quantity to a two-place Decimal.

    Trailing zeros are accepted ("1.500" is 1.50). Finer precision is
    refused rather than rounded.

    Args:
        value: Quantity as a Decimal, number or numeric string.

    Returns:
        Quantized Decimal.

    Raises:
        InvalidLandAmountError: If the value is not a finite number or has
            more than two decimal places.
    """
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
        if not amount.is_finite():
            raise InvalidLandAmountError(amount, "Land amount must be a finite number")
        quantized = amount.quantize(LAND_QUANTUM)
        if quantized != amount:
            raise InvalidLandAmountError(amount, "Land amount allows at most two decimal places")
        return quantized
    except InvalidOperation:
        raise InvalidLandAmountError(Decimal(0), f"Not a number: {value!r}") from None


def positive_land(value: Decimal | int | float | str) -> Decimal:
    """Normalize a requested land quantity, requiring it to be positive."""
    amount = to_land(value)
    if amount <= 0:
        raise InvalidLandAmountError(amount)
    return amount


# ============================================================================
# Date Range
# ============================================================================


@dataclass(frozen=True)
class DateRange(ValueObject):
    """Inclusive calendar date range of an allocation.

    Both boundary days belong to the range: a request is active on its
    start and end dates, and two ranges overlap when they share a day.

    Attributes:
        start: First day of the allocation.
        end: Last day of the allocation (strictly after start).
    """

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise InvalidDateRangeError(self.start, self.end)

    @classmethod
    def of(cls, start: date, end: date) -> Self:
        """Build a range, raising InvalidDateRangeError if start >= end."""
        return cls(start=start, end=end)

    def contains(self, day: date) -> bool:
        """Check whether day falls within the range, boundaries included."""
        return self.start <= day <= self.end

    def overlaps(self, other: "DateRange") -> bool:
        """Check whether the two ranges share at least one day."""
        return self.start <= other.end and other.start <= self.end

    def has_ended(self, today: date) -> bool:
        """Check whether the last day of the range is before today."""
        return self.end < today

    def __str__(self) -> str:
        return f"{self.start.isoformat()}..{self.end.isoformat()}"


# ============================================================================
# Notification Types
# ============================================================================


class NotificationType(str, Enum):
    """Tag of a land allocation notification."""

    NEW_REQUEST = "new_request"
    STATUS_UPDATE = "status_update"
    EXPIRATION = "expiration"
    EXTENSION_REQUEST = "extension_request"
    EXTENSION_UPDATE = "extension_update"
