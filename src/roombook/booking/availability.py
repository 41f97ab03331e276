#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Free/busy views of a room: the fixed slot grid used by the daily
availability view and the free intervals left between bookings."""

import datetime
from typing import TYPE_CHECKING, Iterable, NamedTuple

from roombook.booking.conflicts import HasInterval, as_interval, has_conflict
from roombook.booking.exceptions import ValidationError
from roombook.booking.rooms import Room, RoomId
from roombook.booking.time_utils import DateRange, TimeInterval, combine
from roombook.constants import (
    DEFAULT_SLOT_END_HOUR,
    DEFAULT_SLOT_MINUTES,
    DEFAULT_SLOT_START_HOUR,
)

if TYPE_CHECKING:
    from roombook.storage.store import BookingStore


class SlotGridSettings(NamedTuple):
    """Slot grid settings.

    Parameters
    ---------
    start_hour
        The hour at which the first slot of the day starts.
    end_hour
        No slot starts at or after this hour.
    slot_minutes
        The duration of each slot.
    """

    start_hour: int = DEFAULT_SLOT_START_HOUR
    end_hour: int = DEFAULT_SLOT_END_HOUR
    slot_minutes: int = DEFAULT_SLOT_MINUTES

    def validate(self) -> "SlotGridSettings":
        if not 0 <= self.start_hour < self.end_hour <= 24:
            raise ValidationError(
                f"Invalid slot grid hours: {self.start_hour} - {self.end_hour}"
            )
        if self.slot_minutes <= 0:
            raise ValidationError(
                f"Slot duration must be positive, got {self.slot_minutes}"
            )
        return self

    def window(self, date: datetime.date) -> TimeInterval:
        """The part of `date` covered by the grid."""
        return TimeInterval(
            start=combine(date, datetime.time(self.start_hour)),
            end=combine(date, datetime.time.min)
            + datetime.timedelta(hours=self.end_hour),
        )


class AvailabilitySlot(NamedTuple):
    """One slot of the availability grid.

    Attributes
    ----------
    time
        The slot start, formatted as `HH:MM`.
    available
        `False` if any booking overlaps the slot, even partially.
    """

    time: str
    available: bool
    start: datetime.datetime
    end: datetime.datetime

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(self.start, self.end)


def generate_slot_grid(
    date: datetime.date,
    bookings: Iterable[TimeInterval | HasInterval],
    settings: SlotGridSettings | None = None,
) -> list[AvailabilitySlot]:
    """Lay the slot grid over `date` and mark each slot free or busy.

    Parameters
    ----------
    date
        The day to compute the grid for.
    bookings
        The bookings (or plain intervals) of the room. Bookings on other days
        simply never overlap a slot.
    settings
        Grid geometry. Defaults to hourly slots from 07:00, the last one
        starting at 21:00.

    Returns
    -------
    The slots in chronological order. The grid has the same number of slots
    regardless of how many bookings there are; a new list is built on every call.
    """
    settings = (settings or SlotGridSettings()).validate()
    bookings = [as_interval(b) for b in bookings]
    window = settings.window(date)
    duration = datetime.timedelta(minutes=settings.slot_minutes)
    slots = []
    slot_start = window.start
    while slot_start < window.end:
        slot = TimeInterval(start=slot_start, end=slot_start + duration)
        slots.append(
            AvailabilitySlot(
                time=slot_start.strftime("%H:%M"),
                available=not has_conflict(slot, bookings),
                start=slot.start,
                end=slot.end,
            )
        )
        slot_start = slot.end
    return slots


def check_availability(
    store: "BookingStore",
    room_id: RoomId,
    date: datetime.date,
    settings: SlotGridSettings | None = None,
) -> list[AvailabilitySlot]:
    """Return the availability grid of a room for a given day.

    Raises
    ------
    SearchError if the room does not exist.
    """
    store.get_room(room_id)
    bookings = store.list_bookings_for_room(room_id, DateRange.single_day(date))
    return generate_slot_grid(date, bookings, settings)


def free_intervals(
    window: TimeInterval, bookings: Iterable[TimeInterval | HasInterval]
) -> list[TimeInterval]:
    """Return the parts of `window` not covered by any of `bookings`."""
    busy = sorted(
        (i for i in map(as_interval, bookings) if i.overlaps(window)),
        key=lambda i: i.start,
    )
    available_intervals = []
    current_start = window.start
    for booking_start, booking_end in busy:
        if current_start < booking_start:
            available_intervals.append(TimeInterval(current_start, booking_start))
        current_start = max(current_start, booking_end)
    if current_start < window.end:
        available_intervals.append(TimeInterval(current_start, window.end))
    return available_intervals


def find_available_time_slots(
    store: "BookingStore",
    room_id: RoomId,
    time_window: list[TimeInterval] | list[datetime.date],
    settings: SlotGridSettings | None = None,
) -> list[TimeInterval]:
    """Check the availability of a room on certain dates or specific time intervals.

    Parameters
    ----------
    time_window
        The dates or time intervals for which availability will be checked.
        Dates are checked over the slot grid hours of that day.

    Returns
    -------
    A list of time intervals indicating the room availability. If the room
    is not available for the duration of the entire time window, the intervals
    when the room is available, if any, are returned. An empty list is returned
    if there are no available time slots for the given time window.
    """
    settings = (settings or SlotGridSettings()).validate()
    store.get_room(room_id)
    available_intervals = []
    for window in time_window:
        if not isinstance(window, TimeInterval):
            window = settings.window(window)
        bookings = store.list_bookings_for_room(
            room_id, DateRange(window.start.date(), window.end.date())
        )
        available_intervals.extend(free_intervals(window, bookings))
    return available_intervals


def summarise_availability(
    room: Room, date: datetime.date, slots: list[AvailabilitySlot]
) -> str:
    """Create a concise, plain-text summary of an availability grid."""
    summary = f"Room: {room.name} (Capacity: {room.capacity}) on {date:%Y-%m-%d}\n"
    free = [s.time for s in slots if s.available]
    if not free:
        return summary + "  Fully booked!\n"
    if len(free) == len(slots):
        return summary + "  Available all day\n"
    for slot in slots:
        summary += f"  {slot.time}  {'free' if slot.available else 'busy'}\n"
    return summary
