#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime

import pytest

from roombook.booking.rooms import Room
from roombook.booking.time_utils import TimeInterval
from roombook.storage.seeding import simulate_conference_room
from roombook.storage.store import InMemoryBookingStore

rooms_and_bookings = [
    {
        "room_name": "Alpha Room",
        "capacity": 10,
        "floor": "1",
        "equipment": ["projector", "whiteboard"],
        "bookings": {
            datetime.date(2024, 8, 10): [
                TimeInterval(
                    start=datetime.datetime(2024, 8, 10, 9, 0),
                    end=datetime.datetime(2024, 8, 10, 11, 0),
                ),
                TimeInterval(
                    start=datetime.datetime(2024, 8, 10, 13, 0),
                    end=datetime.datetime(2024, 8, 10, 15, 0),
                ),
            ],
            datetime.date(2024, 8, 11): [
                TimeInterval(
                    start=datetime.datetime(2024, 8, 11, 10, 0),
                    end=datetime.datetime(2024, 8, 11, 12, 0),
                ),
            ],
        },
    },
    {
        "room_name": "Beta Room",
        "capacity": 20,
        "floor": "2",
        "equipment": ["projector", "video conference"],
        "bookings": {
            datetime.date(2024, 8, 10): [
                TimeInterval(
                    start=datetime.datetime(2024, 8, 10, 14, 0),
                    end=datetime.datetime(2024, 8, 10, 16, 30),
                ),
            ],
        },
    },
    {
        "room_name": "Gamma Booth",
        "capacity": 2,
        "floor": "Ground",
        "equipment": [],
        "bookings": None,
    },
]


@pytest.fixture
def store() -> InMemoryBookingStore:
    """An empty store."""
    return InMemoryBookingStore()


@pytest.fixture
def populated_store() -> InMemoryBookingStore:
    """A store with three rooms, two of which have bookings on 2024-08-10."""
    store = InMemoryBookingStore()
    for room_data in rooms_and_bookings:
        simulate_conference_room(store, **room_data)
    return store


@pytest.fixture
def room(populated_store: InMemoryBookingStore) -> Room:
    return populated_store.find_room("Alpha Room")


@pytest.fixture
def catalog() -> list[Room]:
    return [
        Room(room_id="r2", name="Booth", capacity=2),
        Room(room_id="r4", name="Huddle", capacity=4),
        Room(room_id="r6", name="Small", capacity=6),
        Room(room_id="r10", name="Medium", capacity=10),
        Room(room_id="r12", name="Large", capacity=12),
        Room(room_id="r20", name="Boardroom", capacity=20),
        Room(room_id="r50", name="Auditorium", capacity=50),
    ]
