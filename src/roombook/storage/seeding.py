#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Helpers populating a store with rooms and bookings, for tests and demos."""

import datetime
import uuid
from typing import Iterable

from roombook.booking.bookings import Booking, BookingId
from roombook.booking.rooms import Room, RoomId
from roombook.booking.time_utils import TimeInterval
from roombook.storage.database_schemas import DatabaseNamespace
from roombook.storage.store import InMemoryBookingStore


def create_room(
    store: InMemoryBookingStore,
    room_name: str,
    capacity: int,
    floor: str = "",
    equipment: Iterable[str] = (),
) -> RoomId:
    """Create a room in the underlying database."""
    room = Room(
        room_id=str(uuid.uuid4()),
        name=room_name,
        capacity=capacity,
        floor=floor,
        equipment=frozenset(equipment),
    )
    store.add_room(room)
    return room.room_id


def create_booking(
    store: InMemoryBookingStore,
    room_id: RoomId,
    start: datetime.datetime,
    end: datetime.datetime,
    owner_id: str = "admin",
    title: str = "",
    participants: int = 1,
) -> BookingId:
    """Create a booking for an existing conference room.

    The booking is written straight to the database: neither capacity nor
    overlaps with other bookings are checked.

    Parameters
    ----------
    room_id
        The unique identifier of the conference room booked
    start, end
        Start and end booking times.
    """
    booking = Booking(
        room_id=room_id,
        owner_id=owner_id,
        title=title,
        start=start,
        end=end,
        participants=participants,
    )
    store.add_to_database(DatabaseNamespace.BOOKINGS, rows=[booking.model_dump()])
    return booking.booking_id


def simulate_conference_room(
    store: InMemoryBookingStore,
    room_name: str,
    capacity: int,
    bookings: dict[datetime.date, list[TimeInterval]] | None = None,
    floor: str = "",
    equipment: Iterable[str] = (),
) -> RoomId:
    """Add a conference room to the room database.

    Parameters
    ----------
    room_name
        Which conference room to add to the database
    capacity
        The maximum number of people the room can host.
    bookings
        Time intervals when the room is booked, keyed by date. Set to `None`
        if there is no booking for this room.
    """

    room_id = create_room(store, room_name, capacity, floor=floor, equipment=equipment)
    if bookings is not None:
        for date, times_booked in bookings.items():
            for interval in times_booked:
                create_booking(store, room_id, interval.start, interval.end)
    return room_id
