#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""The persistence interface consumed by the booking core and an in-memory
reference implementation backed by polars dataframes."""

import copy
import datetime
import json
import logging
from pathlib import Path
from typing import Any, Protocol, Self, runtime_checkable

import polars as pl
from polars.exceptions import NoDataError

from roombook.booking.bookings import Booking, BookingId
from roombook.booking.conflicts import find_conflicts
from roombook.booking.exceptions import ConflictError, SearchError, ValidationError
from roombook.booking.rooms import Room, RoomId
from roombook.booking.time_utils import DateRange
from roombook.storage.database_schemas import DATABASE_SCHEMAS, DatabaseNamespace
from roombook.storage.utils import after, before, equals, fuzzy_matches, select_rows

logger = logging.getLogger(__name__)


@runtime_checkable
class BookingStore(Protocol):
    """The data store holding rooms and bookings.

    Implementations are expected to make `create_booking` atomic and to
    refuse overlapping bookings for the same room, so that concurrent callers
    racing past the application-level conflict check cannot double-book.
    """

    def list_rooms(self) -> list[Room]: ...

    def get_room(self, room_id: RoomId) -> Room: ...

    def add_room(self, room: Room) -> Room: ...

    def update_room(self, room: Room) -> Room: ...

    def remove_room(self, room_id: RoomId) -> None: ...

    def list_bookings_for_room(
        self, room_id: RoomId, date_range: DateRange
    ) -> list[Booking]: ...

    def list_bookings_in_range(self, date_range: DateRange) -> list[Booking]: ...

    def list_bookings_for_owner(self, owner_id: str) -> list[Booking]: ...

    def get_booking(self, booking_id: BookingId) -> Booking: ...

    def create_booking(self, booking: Booking) -> Booking: ...

    def delete_booking(self, booking_id: BookingId) -> None: ...


class InMemoryBookingStore:
    """A `BookingStore` keeping one polars dataframe per namespace.

    Dataframes returned by `get_database` should be treated as immutable;
    use the add / remove methods to modify the store.
    """

    dbs_schemas: dict[DatabaseNamespace, dict[str, Any]] = DATABASE_SCHEMAS

    def __init__(self):
        self._dbs: dict[DatabaseNamespace, pl.DataFrame] = {
            namespace: pl.DataFrame(schema=schema)
            for namespace, schema in self.dbs_schemas.items()
        }

    def get_database(self, namespace: DatabaseNamespace) -> pl.DataFrame:
        return self._dbs[namespace]

    def add_to_database(
        self,
        namespace: DatabaseNamespace,
        rows: list[dict[str, Any]],
    ) -> None:
        """Add multiple rows to a database.

        Raises
        ------
        KeyError:   When provided column names in rows does not match given schema
        """
        rows_column_names = {x for row in rows for x in row.keys()}
        schema_column_names = set(self.dbs_schemas[namespace].keys())
        if rows_column_names - schema_column_names:
            raise KeyError(
                f"Only column names {schema_column_names} are allowed for namespace {namespace}. "
                f"Found unknown column name {rows_column_names - schema_column_names}"
            )
        rows = copy.deepcopy(rows)
        self._dbs[namespace] = self._dbs[namespace].vstack(
            pl.DataFrame(rows, schema=self.dbs_schemas[namespace])
        )

    def remove_from_database(
        self,
        namespace: DatabaseNamespace,
        predicate: pl.Expr,
    ) -> None:
        """Remove the rows matching `predicate` from a database.

        Raises
        ------
        NoDataError: If no matching rows where found
        """
        if self._dbs[namespace].filter(predicate).is_empty():
            raise NoDataError(f"No db entry matching {predicate=} found")
        self._dbs[namespace] = self._dbs[namespace].filter(~predicate)

    # rooms

    def list_rooms(self) -> list[Room]:
        return [
            Room.from_dict(record)
            for record in self._dbs[DatabaseNamespace.ROOMS].to_dicts()
        ]

    def get_room(self, room_id: RoomId) -> Room:
        records = (
            self._dbs[DatabaseNamespace.ROOMS].filter(equals("room_id", room_id)).to_dicts()
        )
        if not records:
            raise SearchError(f"Room '{room_id}' not found")
        return Room.from_dict(records[0])

    def find_room(self, name: str, threshold: int = 80) -> Room:
        """Resolve a room by name. A case-insensitive exact match wins,
        otherwise the room whose name fuzzily matches `name` best.

        Raises
        ------
        SearchError
            If no room name is similar enough to `name`, or several rooms
            tie for the best match.
        """
        rooms_db = self._dbs[DatabaseNamespace.ROOMS]
        exact = rooms_db.filter(pl.col("name").str.to_lowercase() == name.lower())
        if not exact.is_empty():
            return Room.from_dict(exact.row(0, named=True))
        matches = fuzzy_matches(rooms_db, "name", name, threshold=threshold)
        if not matches:
            raise SearchError(f"Room '{name}' not found")
        top_score = matches[0][1]
        best = [index for index, score in matches if score == top_score]
        if len(best) > 1:
            names = rooms_db[best].get_column("name").to_list()
            raise SearchError(f"Room name '{name}' is ambiguous, it matches {names}")
        return Room.from_dict(rooms_db.row(best[0], named=True))

    def add_room(self, room: Room) -> Room:
        rooms_db = self._dbs[DatabaseNamespace.ROOMS]
        if not rooms_db.filter(equals("room_id", room.room_id)).is_empty():
            raise ValidationError(f"Room '{room.room_id}' already exists")
        self.add_to_database(DatabaseNamespace.ROOMS, rows=[room.model_dump()])
        return room

    def update_room(self, room: Room) -> Room:
        """Replace the stored room having the ID of `room`, keeping its position.

        Raises
        ------
        SearchError if no room has that ID.
        """
        self.get_room(room.room_id)
        records = [
            room.model_dump() if record["room_id"] == room.room_id else record
            for record in self._dbs[DatabaseNamespace.ROOMS].to_dicts()
        ]
        self._dbs[DatabaseNamespace.ROOMS] = pl.DataFrame(
            records, schema=self.dbs_schemas[DatabaseNamespace.ROOMS]
        )
        return room

    def remove_room(self, room_id: RoomId) -> None:
        """Remove a room together with all of its bookings."""
        try:
            self.remove_from_database(
                DatabaseNamespace.ROOMS, equals("room_id", room_id)
            )
        except NoDataError:
            raise SearchError(f"Room '{room_id}' not found")
        bookings_db = self._dbs[DatabaseNamespace.BOOKINGS]
        self._dbs[DatabaseNamespace.BOOKINGS] = bookings_db.filter(
            pl.col("room_id") != room_id
        )

    # bookings

    @staticmethod
    def _to_bookings(dataframe: pl.DataFrame) -> list[Booking]:
        return [Booking(**record) for record in dataframe.sort("start").to_dicts()]

    def list_bookings(self) -> list[Booking]:
        return self._to_bookings(self._dbs[DatabaseNamespace.BOOKINGS])

    def list_bookings_for_room(
        self, room_id: RoomId, date_range: DateRange
    ) -> list[Booking]:
        """The bookings of `room_id` overlapping any of the days in `date_range`,
        ordered by start time."""
        window = date_range.to_interval()
        return self._to_bookings(
            select_rows(
                self._dbs[DatabaseNamespace.BOOKINGS],
                criteria=[
                    ("room_id", room_id, equals),
                    ("start", window.end, before),
                    ("end", window.start, after),
                ],
            )
        )

    def list_bookings_in_range(self, date_range: DateRange) -> list[Booking]:
        """The bookings of every room overlapping `date_range`, ordered by start time."""
        window = date_range.to_interval()
        return self._to_bookings(
            select_rows(
                self._dbs[DatabaseNamespace.BOOKINGS],
                criteria=[
                    ("start", window.end, before),
                    ("end", window.start, after),
                ],
            )
        )

    def list_bookings_for_owner(self, owner_id: str) -> list[Booking]:
        return self._to_bookings(
            self._dbs[DatabaseNamespace.BOOKINGS].filter(equals("owner_id", owner_id))
        )

    def get_booking(self, booking_id: BookingId) -> Booking:
        bookings_db = self._dbs[DatabaseNamespace.BOOKINGS]
        records = bookings_db.filter(equals("booking_id", booking_id)).to_dicts()
        if not records:
            raise SearchError(f"Booking '{booking_id}' not found")
        return Booking(**records[0])

    def create_booking(self, booking: Booking) -> Booking:
        """Insert `booking`, refusing it if it overlaps a booking of the same room.

        Raises
        ------
        SearchError if the booked room does not exist.
        ConflictError if the room is already booked at an overlapping time.
        """
        self.get_room(booking.room_id)
        existing = self.list_bookings_for_room(
            booking.room_id, DateRange(booking.start.date(), booking.end.date())
        )
        if conflicts := find_conflicts(booking.interval, existing):
            logger.warning(
                f"Refusing booking {booking.booking_id}: overlaps "
                f"{[b.booking_id for b in conflicts]}"
            )
            raise ConflictError(
                f"Room '{booking.room_id}' is already booked at an overlapping time",
                conflicts=conflicts,
            )
        self.add_to_database(DatabaseNamespace.BOOKINGS, rows=[booking.model_dump()])
        return booking

    def delete_booking(self, booking_id: BookingId) -> None:
        try:
            self.remove_from_database(
                DatabaseNamespace.BOOKINGS, equals("booking_id", booking_id)
            )
        except NoDataError:
            raise SearchError(f"Booking '{booking_id}' not found")

    # serialisation

    def to_dict(self) -> dict[str, Any]:
        """Serializes to a dictionary

        We aim to make this serialization reversible, while still somewhat readable.
        """

        def convert_datetime(value: Any) -> Any:
            if isinstance(value, (datetime.date, datetime.datetime)):
                return value.isoformat()
            return value

        return {
            "_dbs": {
                str(namespace): [
                    {k: convert_datetime(v) for k, v in record.items()}
                    for record in database.to_dicts()
                ]
                for namespace, database in self._dbs.items()
            },
        }

    @classmethod
    def from_dict(cls, serialized_dict: dict[str, Any]) -> Self:
        """Load a serialized dict produced by to_dict."""

        def convert_datetime(value, schema: dict[str, Any], key: str):
            if schema[key] is pl.Datetime:
                return datetime.datetime.fromisoformat(value) if value else None
            return value

        store = cls()
        for namespace, records in serialized_dict["_dbs"].items():
            namespace = DatabaseNamespace(namespace)
            schema = cls.dbs_schemas[namespace]
            records = [
                {k: convert_datetime(v, schema, k) for k, v in record.items()}
                for record in records
            ]
            store._dbs[namespace] = pl.DataFrame(records, schema=schema)
        return store

    def save(self, path: Path | str) -> None:
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: Path | str) -> Self:
        with open(path, "r") as f:
            return cls.from_dict(json.load(f))
