#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Booking statistics for a user's dashboard."""

import datetime
from typing import Iterable, Literal

import polars as pl
from dateutil.relativedelta import relativedelta
from pydantic import BaseModel

from roombook.booking.bookings import Booking
from roombook.booking.rooms import Room

TimeRange = Literal["month", "quarter", "year"]

_RANGE_OFFSETS: dict[str, relativedelta] = {
    "month": relativedelta(months=1),
    "quarter": relativedelta(months=3),
    "year": relativedelta(years=1),
}


class RoomUsage(BaseModel):
    room: str
    bookings: int


class DailyCount(BaseModel):
    date: datetime.date
    count: int


class BookingStats(BaseModel):
    total_bookings: int
    upcoming_bookings: int
    total_participants: int
    average_duration_minutes: int
    top_room: str | None = None
    room_usage: list[RoomUsage] = []
    booking_trend: list[DailyCount] = []


def booking_stats(
    bookings: Iterable[Booking],
    rooms: Iterable[Room],
    now: datetime.datetime,
    time_range: TimeRange = "month",
) -> BookingStats:
    """Summarise the bookings starting within `time_range` before `now` or later.

    Parameters
    ----------
    bookings
        Typically the bookings of a single user.
    rooms
        The room catalog, used to name rooms in the usage breakdown.
    now
        The reference time; bookings starting after it count as upcoming.
    """
    try:
        range_start = now - _RANGE_OFFSETS[time_range]
    except KeyError:
        raise ValueError(f"Unsupported time range: {time_range}")
    names = {room.room_id: room.name for room in rooms}
    df = pl.DataFrame(
        [
            {
                "room": names.get(b.room_id, b.room_id),
                "start": b.start,
                "minutes": b.duration_minutes,
                "participants": b.participants,
            }
            for b in bookings
        ],
        schema={
            "room": pl.String,
            "start": pl.Datetime,
            "minutes": pl.Float64,
            "participants": pl.Int64,
        },
    ).filter(pl.col("start") >= range_start)
    if df.is_empty():
        return BookingStats(
            total_bookings=0,
            upcoming_bookings=0,
            total_participants=0,
            average_duration_minutes=0,
        )

    average_duration = df.get_column("minutes").mean()
    usage = (
        df.group_by("room")
        .agg(pl.len().alias("bookings"))
        .sort(["bookings", "room"], descending=[True, False])
    )
    trend = (
        df.group_by(pl.col("start").dt.date().alias("date"))
        .agg(pl.len().alias("count"))
        .sort("date")
    )
    room_usage = [RoomUsage(**row) for row in usage.to_dicts()]
    return BookingStats(
        total_bookings=df.height,
        upcoming_bookings=df.filter(pl.col("start") > now).height,
        total_participants=int(df.get_column("participants").sum()),
        average_duration_minutes=round(average_duration),
        top_room=room_usage[0].room,
        room_usage=room_usage,
        booking_trend=[DailyCount(**row) for row in trend.to_dicts()],
    )
