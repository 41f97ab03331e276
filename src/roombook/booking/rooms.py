#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""The room inventory: the `Room` model and catalog search helpers."""

from typing import Any, Iterable, Self

from pydantic import BaseModel, ConfigDict, PositiveInt, field_serializer

RoomId = str


class Room(BaseModel):
    """A bookable meeting room.

    Parameters
    ----------
    room_id
        The unique identifier of the room.
    name
        Display name, eg "Sala Galileo".
    capacity
        The maximum number of people the room can host.
    floor
        Free-form floor label, eg "2" or "Ground floor".
    equipment
        Unordered, unique equipment tags (eg "projector", "whiteboard").
    """

    model_config = ConfigDict(frozen=True)

    room_id: RoomId
    name: str
    capacity: PositiveInt
    floor: str = ""
    equipment: frozenset[str] = frozenset()

    @field_serializer("equipment")
    def serialise_equipment(self, equipment: frozenset[str]) -> list[str]:
        return sorted(equipment)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        data = dict(data)
        data["equipment"] = frozenset(data.get("equipment") or [])
        return cls(**data)

    def __str__(self) -> str:
        display = f"{self.name} (capacity: {self.capacity}"
        if self.floor:
            display += f", floor: {self.floor}"
        return display + ")"


def list_equipment(rooms: Iterable[Room]) -> list[str]:
    """The sorted union of the equipment tags of `rooms`."""
    return sorted({tag for room in rooms for tag in room.equipment})


def search_rooms(
    rooms: Iterable[Room],
    text: str | None = None,
    min_capacity: int | None = None,
    equipment: Iterable[str] | None = None,
) -> list[Room]:
    """Filter the room catalog.

    Parameters
    ----------
    rooms
        The catalog to search.
    text
        Case-insensitive substring matched against the room name or floor.
    min_capacity
        If specified, only rooms hosting at least this many people are kept.
    equipment
        Tags that must all be present in a room for it to be kept.

    Returns
    -------
    The matching rooms, in catalog order.
    """
    result = list(rooms)
    if text is not None and text.strip():
        needle = text.strip().lower()
        result = [
            r for r in result if needle in r.name.lower() or needle in r.floor.lower()
        ]
    if min_capacity is not None and min_capacity > 0:
        result = [r for r in result if r.capacity >= min_capacity]
    if equipment:
        required = set(equipment)
        result = [r for r in result if required <= r.equipment]
    return result
