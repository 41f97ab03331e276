#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime

import pytest

from roombook.booking.analytics import booking_stats
from roombook.booking.bookings import Booking
from roombook.booking.rooms import Room

NOW = datetime.datetime(2024, 8, 15, 12)
ROOMS = [
    Room(room_id="a", name="Alpha", capacity=10),
    Room(room_id="b", name="Beta", capacity=20),
]


def booking(room_id: str, start: datetime.datetime, minutes: int, participants: int = 2):
    return Booking(
        room_id=room_id,
        owner_id="alex",
        start=start,
        end=start + datetime.timedelta(minutes=minutes),
        participants=participants,
    )


BOOKINGS = [
    booking("a", datetime.datetime(2024, 7, 1, 9), 60, participants=8),
    booking("a", datetime.datetime(2024, 8, 10, 9), 60),
    booking("a", datetime.datetime(2024, 8, 12, 14), 120, participants=4),
    booking("b", datetime.datetime(2024, 8, 20, 10), 30, participants=6),
]


def test_monthly_stats():
    stats = booking_stats(BOOKINGS, ROOMS, now=NOW)
    assert stats.total_bookings == 3
    assert stats.upcoming_bookings == 1
    assert stats.total_participants == 12
    assert stats.average_duration_minutes == 70
    assert stats.top_room == "Alpha"
    assert [(u.room, u.bookings) for u in stats.room_usage] == [("Alpha", 2), ("Beta", 1)]
    assert [(c.date, c.count) for c in stats.booking_trend] == [
        (datetime.date(2024, 8, 10), 1),
        (datetime.date(2024, 8, 12), 1),
        (datetime.date(2024, 8, 20), 1),
    ]


def test_yearly_stats_include_older_bookings():
    stats = booking_stats(BOOKINGS, ROOMS, now=NOW, time_range="year")
    assert stats.total_bookings == 4
    assert stats.total_participants == 20


def test_usage_ties_are_ordered_by_room_name():
    stats = booking_stats(BOOKINGS[2:], ROOMS, now=NOW)
    assert [u.room for u in stats.room_usage] == ["Alpha", "Beta"]


def test_unknown_rooms_are_reported_by_id():
    stats = booking_stats(BOOKINGS[1:2], [], now=NOW)
    assert stats.top_room == "a"


def test_empty_stats():
    stats = booking_stats([], ROOMS, now=NOW)
    assert stats.total_bookings == 0
    assert stats.top_room is None
    assert stats.room_usage == []


def test_unknown_time_range():
    with pytest.raises(ValueError):
        booking_stats(BOOKINGS, ROOMS, now=NOW, time_range="decade")
