#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""A light wrapper around the `datetime` library, containing the interval model
used for conflict detection plus small date and time helpers shared by the
availability and recurrence modules."""

import datetime
from typing import Literal, NamedTuple, Self

from dateutil.relativedelta import relativedelta

from roombook.booking.exceptions import ValidationError

weekdays = Literal[
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"
]

WEEKDAY_NAMES = [
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
]


class TimeInterval(NamedTuple):
    """Represents the time interval between two specific time points.

    Both endpoints are part of the interval, but two intervals that only
    touch (one ends exactly when the other starts) do not overlap.
    """

    start: datetime.datetime
    end: datetime.datetime

    @property
    def duration(self) -> datetime.timedelta:
        return self.end - self.start

    def overlaps(self, other: Self) -> bool:
        """Check if this interval and `other` share any instant other than
        a common endpoint."""
        return self.start < other.end and other.start < self.end


class DateRange(NamedTuple):
    """Represents a duration between two specific dates, both inclusive."""

    start: datetime.date
    end: datetime.date

    def to_interval(self) -> TimeInterval:
        """The time interval from the start of the first day to the end of the last."""
        return TimeInterval(
            start=combine(self.start, datetime.time.min),
            end=combine(self.end + datetime.timedelta(days=1), datetime.time.min),
        )

    @classmethod
    def single_day(cls, date: datetime.date) -> Self:
        return cls(start=date, end=date)

    @classmethod
    def month(cls, year: int, month: int) -> Self:
        """The calendar month `month` of `year`."""
        first = datetime.date(year, month, 1)
        return cls(start=first, end=first + relativedelta(months=1, days=-1))


def overlaps(interval_1: TimeInterval, interval_2: TimeInterval) -> bool:
    """Strict overlap test: `interval_1.start < interval_2.end` and
    `interval_2.start < interval_1.end`. Adjacent intervals do not overlap."""
    return interval_1.start < interval_2.end and interval_2.start < interval_1.end


def validate_interval(interval: TimeInterval) -> TimeInterval:
    """Return `interval` unchanged if it ends after it starts.

    Raises
    ------
    ValidationError if `interval.end <= interval.start`.
    """
    if interval.end <= interval.start:
        raise ValidationError(
            f"Interval must end after it starts, got {interval.start} - {interval.end}"
        )
    return interval


def combine(date: datetime.date, time: datetime.time) -> datetime.datetime:
    """Combine a date and time into a single object representing a given moment
    in time."""
    return datetime.datetime.combine(date, time)


def parse_time_string(time_expr: str) -> datetime.time:
    """Parse a wall-clock time formatted as `HH:MM` (seconds are accepted too)."""
    try:
        return datetime.time.fromisoformat(time_expr)
    except ValueError:
        raise ValidationError(f"Invalid time of day: {time_expr!r}")


def weekday_index(day_of_week: weekdays | str) -> int:
    """Map a weekday name (case-insensitive, full or three-letter) to its
    0-indexed position, Monday being 0."""
    day = day_of_week.strip().lower()
    for i, name in enumerate(WEEKDAY_NAMES):
        if name.lower() == day or name[:3].lower() == day:
            return i
    raise ValidationError(f"Unknown weekday: {day_of_week!r}")

