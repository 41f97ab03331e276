#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Overlap detection between a candidate interval and the bookings of a room.

The check is a plain linear scan: per-room booking volumes are small, so no
index is maintained. Callers validate the candidate beforehand."""

from typing import Iterable, Protocol, TypeVar, runtime_checkable

from roombook.booking.time_utils import TimeInterval, overlaps


@runtime_checkable
class HasInterval(Protocol):
    """Anything occupying a room for a time interval (eg a booking)."""

    @property
    def interval(self) -> TimeInterval: ...


T = TypeVar("T", bound=TimeInterval | HasInterval)


def as_interval(item: TimeInterval | HasInterval) -> TimeInterval:
    if isinstance(item, TimeInterval):
        return item
    return item.interval


def has_conflict(
    candidate: TimeInterval, existing: Iterable[TimeInterval | HasInterval]
) -> bool:
    """Return `True` if any of `existing` overlaps `candidate`.

    Parameters
    ----------
    candidate
        The interval that should be booked.
    existing
        Intervals, or objects exposing an `interval` attribute, already
        occupying the room. No ordering is assumed.
    """
    return any(overlaps(candidate, as_interval(item)) for item in existing)


def find_conflicts(candidate: TimeInterval, existing: Iterable[T]) -> list[T]:
    """Return the items of `existing` overlapping `candidate`, in input order."""
    return [item for item in existing if overlaps(candidate, as_interval(item))]
