#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime

import polars as pl
import pytest

from roombook.booking.bookings import Booking
from roombook.booking.exceptions import SearchError
from roombook.booking.export import CSV_COLUMNS, booking_to_ics, bookings_to_csv
from roombook.booking.rooms import Room

ROOM = Room(room_id="r1", name="Sala Galileo", capacity=8, floor="2")
BOOKINGS = [
    Booking(
        booking_id="b1",
        room_id="r1",
        owner_id="alex",
        title="Design review, part 1",
        description="Bring the \"final\" mockups",
        start=datetime.datetime(2024, 8, 10, 9),
        end=datetime.datetime(2024, 8, 10, 10, 30),
        participants=5,
    ),
    Booking(
        booking_id="b2",
        room_id="r1",
        owner_id="alex",
        start=datetime.datetime(2024, 8, 11, 14),
        end=datetime.datetime(2024, 8, 11, 15),
    ),
]


def test_bookings_to_csv_returns_text():
    text = bookings_to_csv(BOOKINGS, [ROOM])
    df = pl.read_csv(text.encode(), infer_schema_length=0)
    assert df.columns == CSV_COLUMNS
    assert df.row(0, named=True) == {
        "title": "Design review, part 1",
        "description": 'Bring the "final" mockups',
        "room": "Sala Galileo",
        "floor": "2",
        "date": "2024-08-10",
        "start_time": "09:00",
        "end_time": "10:30",
        "participants": "5",
        "organizer": "alex",
    }
    assert df.height == 2


def test_bookings_to_csv_writes_file(tmp_path):
    path = tmp_path / "bookings.csv"
    assert bookings_to_csv(BOOKINGS, [ROOM], path) is None
    df = pl.read_csv(path)
    assert df.get_column("participants").to_list() == [5, 1]


def test_bookings_to_csv_unknown_room():
    with pytest.raises(SearchError):
        bookings_to_csv(BOOKINGS, [])


def test_booking_to_ics():
    ics = booking_to_ics(BOOKINGS[0], ROOM, stamp=datetime.datetime(2024, 8, 1, 12))
    assert ics.endswith("\r\n")
    lines = ics.split("\r\n")[:-1]
    assert lines[0] == "BEGIN:VCALENDAR"
    assert lines[-1] == "END:VCALENDAR"
    assert "UID:b1@meetingroom.local" in lines
    assert "DTSTAMP:20240801T120000" in lines
    assert "DTSTART:20240810T090000" in lines
    assert "DTEND:20240810T103000" in lines
    assert "SUMMARY:Design review\\, part 1" in lines
    assert "LOCATION:Sala Galileo\\, 2" in lines
    assert any(line.startswith("ORGANIZER;CN=alex:") for line in lines)


def test_booking_to_ics_without_floor():
    room = ROOM.model_copy(update={"floor": ""})
    ics = booking_to_ics(BOOKINGS[1], room)
    assert "LOCATION:Sala Galileo\r\n" in ics
    assert "SUMMARY:\r\n" in ics
