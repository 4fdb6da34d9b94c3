"""
Unit tests for DateRange construction and overlap.
"""

from __future__ import annotations

from datetime import date

import pytest

from student_housing.domain.dates import DateRange
from student_housing.domain.errors import InvalidRangeError


@pytest.mark.unit
def test_touching_ranges_do_not_overlap() -> None:
    """January and February share only the boundary day."""
    jan = DateRange(date(2024, 1, 1), date(2024, 2, 1))
    feb = DateRange(date(2024, 2, 1), date(2024, 3, 1))

    assert not jan.overlaps(feb)
    assert not feb.overlaps(jan)


@pytest.mark.unit
def test_partially_overlapping_ranges_overlap() -> None:
    a = DateRange(date(2024, 1, 10), date(2024, 1, 20))
    b = DateRange(date(2024, 1, 15), date(2024, 1, 25))

    assert a.overlaps(b)
    assert b.overlaps(a)


@pytest.mark.unit
def test_contained_range_overlaps() -> None:
    outer = DateRange(date(2024, 1, 1), date(2024, 1, 31))
    inner = DateRange(date(2024, 1, 10), date(2024, 1, 11))

    assert outer.overlaps(inner)
    assert inner.overlaps(outer)


@pytest.mark.unit
def test_zero_length_range_is_rejected() -> None:
    with pytest.raises(InvalidRangeError):
        DateRange(date(2024, 1, 1), date(2024, 1, 1))


@pytest.mark.unit
def test_reversed_range_is_rejected() -> None:
    with pytest.raises(InvalidRangeError):
        DateRange(date(2024, 1, 2), date(2024, 1, 1))


@pytest.mark.unit
def test_parse_accepts_iso_strings() -> None:
    dates = DateRange.parse("2024-03-01", "2024-03-08")

    assert dates.start == date(2024, 3, 1)
    assert dates.nights == 7
    assert str(dates) == "[2024-03-01, 2024-03-08)"


@pytest.mark.unit
@pytest.mark.parametrize("start,end", [("2024-13-01", "2024-12-02"), ("soon", "2024-01-02")])
def test_parse_rejects_malformed_dates(start: str, end: str) -> None:
    with pytest.raises(InvalidRangeError):
        DateRange.parse(start, end)
