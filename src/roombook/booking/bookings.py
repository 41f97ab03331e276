#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Single bookings: the `Booking` model, creation with upfront validation and
conflict checking, and deletion by the owner or an administrator."""

import datetime
import logging
import uuid
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, model_validator

from roombook.booking.conflicts import find_conflicts
from roombook.booking.exceptions import (
    AuthorizationError,
    CapacityError,
    ConflictError,
    ValidationError,
)
from roombook.booking.rooms import Room, RoomId
from roombook.booking.time_utils import DateRange, TimeInterval, validate_interval

if TYPE_CHECKING:
    from roombook.storage.store import BookingStore

BookingId = str

logger = logging.getLogger(__name__)


class Booking(BaseModel):
    """A room booked for a time interval.

    Bookings are never mutated in place; an edit is a delete followed by
    a new booking.

    Parameters
    ----------
    recurrence_id
        Set on bookings materialised by the same recurring booking request.
        Each of them is still an independent booking.
    """

    model_config = ConfigDict(frozen=True)

    booking_id: BookingId = Field(default_factory=lambda: str(uuid.uuid4()))
    room_id: RoomId
    owner_id: str
    title: str = ""
    description: str = ""
    start: datetime.datetime
    end: datetime.datetime
    participants: int = 1
    recurrence_id: str | None = None
    created_at: datetime.datetime = Field(default_factory=datetime.datetime.now)

    @model_validator(mode="after")
    def check_interval(self):
        if self.end <= self.start:
            raise ValueError("booking must end after it starts")
        return self

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(start=self.start, end=self.end)

    @property
    def duration_minutes(self) -> float:
        return self.interval.duration.total_seconds() / 60

    def __str__(self) -> str:
        start = self.start.strftime("%Y-%m-%d %H:%M")
        end = self.end.strftime("%H:%M")
        title = f"'{self.title}' " if self.title else ""
        return f"{title}{start} - {end} ({self.participants} participants)"


def validate_participants(room: Room, participants: int) -> None:
    """Reject participant counts that can never be accommodated by `room`.

    Raises
    ------
    ValidationError if `participants` is not positive.
    CapacityError if `participants` exceeds the room capacity.
    """
    if participants < 1:
        raise ValidationError(
            f"At least one participant is required, got {participants}"
        )
    if participants > room.capacity:
        raise CapacityError(participants=participants, capacity=room.capacity)


def create_single_booking(
    store: "BookingStore",
    room: Room,
    interval: TimeInterval,
    participants: int,
    owner_id: str,
    title: str = "",
    description: str = "",
) -> Booking:
    """Book `room` for `interval`.

    Validation happens before the room bookings are read, and nothing is
    written when any check fails.

    Raises
    ------
    ValidationError
        If the interval is malformed or `participants` is not positive.
    CapacityError
        If `participants` exceeds the room capacity.
    ConflictError
        If the room is already booked at an overlapping time.
    """
    validate_interval(interval)
    validate_participants(room, participants)
    existing = store.list_bookings_for_room(
        room.room_id, DateRange(interval.start.date(), interval.end.date())
    )
    if conflicts := find_conflicts(interval, existing):
        raise ConflictError(
            f"{room.name} is already booked between "
            f"{interval.start:%Y-%m-%d %H:%M} and {interval.end:%H:%M}",
            conflicts=conflicts,
        )
    booking = store.create_booking(
        Booking(
            room_id=room.room_id,
            owner_id=owner_id,
            title=title,
            description=description,
            start=interval.start,
            end=interval.end,
            participants=participants,
        )
    )
    logger.info(f"Booked {room.name} for {owner_id}: {booking}")
    return booking


def delete_booking(
    store: "BookingStore",
    booking_id: BookingId,
    requested_by: str,
    is_admin: bool = False,
) -> Booking:
    """Delete a booking on behalf of its owner or an administrator.

    Returns
    -------
    The deleted booking.

    Raises
    ------
    SearchError if the booking does not exist.
    AuthorizationError if `requested_by` neither owns the booking nor is an admin.
    """
    booking = store.get_booking(booking_id)
    if booking.owner_id != requested_by and not is_admin:
        raise AuthorizationError(
            f"Booking {booking_id} belongs to another user and cannot be deleted"
        )
    store.delete_booking(booking_id)
    logger.info(f"Deleted booking {booking_id} on behalf of {requested_by}")
    return booking


def list_upcoming_bookings(
    store: "BookingStore", owner_id: str, now: datetime.datetime
) -> list[Booking]:
    """The bookings of `owner_id` which have not ended yet, earliest first.

    A booking in progress at `now` is still upcoming.
    """
    return [b for b in store.list_bookings_for_owner(owner_id) if b.end >= now]
