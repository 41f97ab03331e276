#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""CSV and iCalendar renderings of bookings."""

import datetime
from pathlib import Path
from typing import Iterable

import polars as pl

from roombook.booking.bookings import Booking
from roombook.booking.exceptions import SearchError
from roombook.booking.rooms import Room
from roombook.constants import ICS_PRODUCT_ID, ICS_UID_DOMAIN

CSV_COLUMNS = [
    "title",
    "description",
    "room",
    "floor",
    "date",
    "start_time",
    "end_time",
    "participants",
    "organizer",
]


def _room_lookup(rooms: Iterable[Room]) -> dict[str, Room]:
    return {room.room_id: room for room in rooms}


def bookings_dataframe(bookings: Iterable[Booking], rooms: Iterable[Room]) -> pl.DataFrame:
    """Flatten bookings into one row per booking, joined with their room."""
    lookup = _room_lookup(rooms)
    rows = []
    for booking in bookings:
        if (room := lookup.get(booking.room_id)) is None:
            raise SearchError(
                f"Room '{booking.room_id}' of booking {booking.booking_id} not found"
            )
        rows.append(
            {
                "title": booking.title,
                "description": booking.description,
                "room": room.name,
                "floor": room.floor,
                "date": booking.start.strftime("%Y-%m-%d"),
                "start_time": booking.start.strftime("%H:%M"),
                "end_time": booking.end.strftime("%H:%M"),
                "participants": booking.participants,
                "organizer": booking.owner_id,
            }
        )
    schema = {column: pl.String for column in CSV_COLUMNS}
    schema["participants"] = pl.Int64
    return pl.DataFrame(rows, schema=schema)


def bookings_to_csv(
    bookings: Iterable[Booking],
    rooms: Iterable[Room],
    path: Path | str | None = None,
) -> str | None:
    """Write the bookings as CSV to `path`, or return the CSV text if no path
    is given."""
    return bookings_dataframe(bookings, rooms).write_csv(
        path, quote_style="non_numeric"
    )


def _ics_datetime(dt: datetime.datetime) -> str:
    return dt.strftime("%Y%m%dT%H%M%S")


def _ics_escape(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\n", "\\n")
    )


def booking_to_ics(
    booking: Booking, room: Room, stamp: datetime.datetime | None = None
) -> str:
    """Render a booking as an iCalendar document with a single event.

    Times are written as floating local times, without a timezone.
    """
    stamp = stamp or datetime.datetime.now()
    location = f"{room.name}, {room.floor}" if room.floor else room.name
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{ICS_PRODUCT_ID}",
        "BEGIN:VEVENT",
        f"UID:{booking.booking_id}@{ICS_UID_DOMAIN}",
        f"DTSTAMP:{_ics_datetime(stamp)}",
        f"DTSTART:{_ics_datetime(booking.start)}",
        f"DTEND:{_ics_datetime(booking.end)}",
        f"SUMMARY:{_ics_escape(booking.title)}",
        f"DESCRIPTION:{_ics_escape(booking.description)}",
        f"LOCATION:{_ics_escape(location)}",
        f"ORGANIZER;CN={_ics_escape(booking.owner_id)}:noreply@{ICS_UID_DOMAIN}",
        "END:VEVENT",
        "END:VCALENDAR",
    ]
    return "\r\n".join(lines) + "\r\n"
