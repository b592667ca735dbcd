"""
Common Value Objects

Value objects used across the booking domain:
- DateRange: an inclusive range of calendar days (first night to last night)
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterator

from shared.domain.base import ValueObject

DATE_FORMAT = "%Y-%m-%d"


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    Represents a range from start_date to end_date, both inclusive.
    A range where start_date == end_date covers a single day.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        if self.start_date > self.end_date:
            raise ValueError(f"Start date ({self.start_date}) must not be after end date ({self.end_date})")

    @classmethod
    def parse(cls, start: str, end: str) -> 'DateRange':
        """Build a range from two YYYY-MM-DD strings."""
        return cls(parse_date(start), parse_date(end))

    def overlaps_with(self, other: 'DateRange') -> bool:
        """
        Check if this range overlaps with another

        Both ends are inclusive, so ranges sharing a single day overlap.

        Examples:
            - DateRange(25, 28) overlaps with DateRange(28, 31) -> True
            - DateRange(25, 28) overlaps with DateRange(29, 31) -> False
        """
        if not isinstance(other, DateRange):
            raise TypeError("Can only check overlap with another DateRange")

        return self.start_date <= other.end_date and other.start_date <= self.end_date

    def contains(self, check_date: date) -> bool:
        return self.start_date <= check_date <= self.end_date

    def clip(self, other: 'DateRange') -> 'DateRange | None':
        """Return the part of this range inside other, or None if disjoint."""
        if not self.overlaps_with(other):
            return None
        return DateRange(max(self.start_date, other.start_date), min(self.end_date, other.end_date))

    def days(self) -> Iterator[date]:
        current = self.start_date
        while current <= self.end_date:
            yield current
            current += timedelta(days=1)

    def __len__(self) -> int:
        """Number of days covered, counting both ends."""
        return (self.end_date - self.start_date).days + 1

    def __str__(self):
        return f"{self.start_date.strftime(DATE_FORMAT)} - {self.end_date.strftime(DATE_FORMAT)}"

    def __repr__(self):
        return f"DateRange({self.start_date}, {self.end_date})"


def parse_date(value: str) -> date:
    """Parse a YYYY-MM-DD string. Raises ValueError on anything else."""
    if not isinstance(value, str):
        raise ValueError(f"Expected a date string, got {value!r}")

    return datetime.strptime(value.strip(), DATE_FORMAT).date()
