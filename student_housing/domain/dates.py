"""Calendar date ranges for bookings."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Union

from student_housing.domain.errors import InvalidRangeError


@dataclass(frozen=True)
class DateRange:
    """
    A booking period from ``start`` (inclusive) to ``end`` (exclusive).

    A range must contain at least one night: ``start == end`` and
    ``start > end`` both raise InvalidRangeError.

    Example:
        >>> jan = DateRange(date(2024, 1, 1), date(2024, 2, 1))
        >>> feb = DateRange(date(2024, 2, 1), date(2024, 3, 1))
        >>> jan.overlaps(feb)
        False
    """

    start: date
    end: date

    def __post_init__(self) -> None:
        if not isinstance(self.start, date) or not isinstance(self.end, date):
            raise InvalidRangeError("Start and end must be calendar dates")
        if self.start >= self.end:
            raise InvalidRangeError(
                f"Start date ({self.start.isoformat()}) must be before "
                f"end date ({self.end.isoformat()})"
            )

    @classmethod
    def parse(cls, start: Union[str, date], end: Union[str, date]) -> "DateRange":
        """
        Build a range from ISO-8601 calendar dates or date objects.

        Raises:
            InvalidRangeError: If either value is not an ISO date, or start >= end
        """
        return cls(_to_date(start), _to_date(end))

    def overlaps(self, other: "DateRange") -> bool:
        # Ranges that only touch at a boundary do not overlap
        return self.start < other.end and self.end > other.start

    @property
    def nights(self) -> int:
        return (self.end - self.start).days

    def __str__(self) -> str:
        return f"[{self.start.isoformat()}, {self.end.isoformat()})"


def _to_date(value: Union[str, date]) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise InvalidRangeError(f"Invalid calendar date: {value!r}") from None
