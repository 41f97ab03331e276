#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
from enum import StrEnum, auto

import polars as pl


class DatabaseNamespace(StrEnum):
    """Namespace for each database"""

    ROOMS = auto()
    BOOKINGS = auto()


DATABASE_SCHEMAS = {
    DatabaseNamespace.ROOMS: {
        "room_id": pl.String,
        "name": pl.String,
        "capacity": pl.Int64,
        "floor": pl.String,
        "equipment": pl.List(pl.String),
    },
    DatabaseNamespace.BOOKINGS: {
        "booking_id": pl.String,
        "room_id": pl.String,
        "owner_id": pl.String,
        "title": pl.String,
        "description": pl.String,
        "start": pl.Datetime,
        "end": pl.Datetime,
        "participants": pl.Int64,
        "recurrence_id": pl.String,
        "created_at": pl.Datetime,
    },
}
