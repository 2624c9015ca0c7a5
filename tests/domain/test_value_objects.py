"""Tests for domain value objects."""

from datetime import date
from decimal import Decimal

import pytest

from gardenshare.domain import DateRange, positive_land, to_land
from gardenshare.domain.exceptions import InvalidDateRangeError, InvalidLandAmountError


class TestLandQuantities:
    """Tests for land quantity normalization."""

    def test_quantizes_to_two_places(self) -> None:
        assert to_land("2.5") == Decimal("2.50")
        assert to_land("2.500") == Decimal("2.50")
        assert to_land(3) == Decimal("3.00")

    @pytest.mark.parametrize("value", ["1.005", "2.345", Decimal("0.001")])
    def test_rejects_finer_than_two_places(self, value) -> None:
        """Amounts are never rounded into a different quantity."""
        with pytest.raises(InvalidLandAmountError) as exc_info:
            to_land(value)
        assert exc_info.value.details["reason"] == "Land amount allows at most two decimal places"

    def test_float_input_uses_its_text_form(self) -> None:
        """0.1 stays 0.10 instead of picking up binary noise."""
        assert to_land(0.1) == Decimal("0.10")

    @pytest.mark.parametrize("value", ["abc", "NaN", "Infinity"])
    def test_rejects_non_numbers(self, value: str) -> None:
        with pytest.raises(InvalidLandAmountError):
            to_land(value)

    @pytest.mark.parametrize("value", ["0", "-1", "0.00"])
    def test_positive_land_rejects_zero_and_negative(self, value: str) -> None:
        with pytest.raises(InvalidLandAmountError) as exc_info:
            positive_land(value)
        assert exc_info.value.error_code == "INVALID_LAND_AMOUNT"


class TestDateRange:
    """Tests for DateRange value object."""

    def test_start_must_precede_end(self) -> None:
        with pytest.raises(InvalidDateRangeError):
            DateRange.of(date(2026, 6, 1), date(2026, 6, 1))
        with pytest.raises(InvalidDateRangeError):
            DateRange.of(date(2026, 6, 2), date(2026, 6, 1))

    def test_contains_is_inclusive(self) -> None:
        """Both boundary days belong to the range."""
        r = DateRange.of(date(2026, 6, 1), date(2026, 6, 30))
        assert r.contains(date(2026, 6, 1))
        assert r.contains(date(2026, 6, 30))
        assert not r.contains(date(2026, 5, 31))
        assert not r.contains(date(2026, 7, 1))

    def test_ranges_sharing_a_boundary_day_overlap(self) -> None:
        a = DateRange.of(date(2026, 6, 1), date(2026, 6, 30))
        b = DateRange.of(date(2026, 6, 30), date(2026, 7, 15))
        assert a.overlaps(b)
        assert b.overlaps(a)

    def test_adjacent_ranges_do_not_overlap(self) -> None:
        a = DateRange.of(date(2026, 6, 1), date(2026, 6, 30))
        b = DateRange.of(date(2026, 7, 1), date(2026, 7, 15))
        assert not a.overlaps(b)

    def test_has_ended_only_after_last_day(self) -> None:
        r = DateRange.of(date(2026, 6, 1), date(2026, 6, 30))
        assert not r.has_ended(date(2026, 6, 30))
        assert r.has_ended(date(2026, 7, 1))

    def test_str(self) -> None:
        r = DateRange.of(date(2026, 6, 1), date(2026, 6, 10))
        assert str(r) == "2026-06-01..2026-06-10"

    def test_immutable(self) -> None:
        r = DateRange.of(date(2026, 6, 1), date(2026, 6, 10))
        with pytest.raises(AttributeError):
            r.start = date(2026, 1, 1)  # type: ignore[misc]
