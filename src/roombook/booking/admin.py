#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Room inventory management, reserved to administrators."""

import logging
import uuid
from typing import TYPE_CHECKING, Any, Iterable

from roombook.booking.exceptions import AuthorizationError
from roombook.booking.rooms import Room, RoomId

if TYPE_CHECKING:
    from roombook.storage.store import BookingStore

logger = logging.getLogger(__name__)

EDITABLE_ROOM_FIELDS = frozenset({"name", "capacity", "floor", "equipment"})


def _require_admin(is_admin: bool, action: str):
    if not is_admin:
        raise AuthorizationError(f"Only administrators can {action}")


def add_room(
    store: "BookingStore",
    name: str,
    capacity: int,
    is_admin: bool,
    floor: str = "",
    equipment: Iterable[str] = (),
) -> Room:
    """Add a room with a fresh ID to the inventory.

    Raises
    ------
    AuthorizationError if the caller is not an administrator.
    """
    _require_admin(is_admin, "add rooms")
    room = store.add_room(
        Room(
            room_id=str(uuid.uuid4()),
            name=name,
            capacity=capacity,
            floor=floor,
            equipment=frozenset(equipment),
        )
    )
    logger.info(f"Added room {room}")
    return room


def update_room(
    store: "BookingStore", room_id: RoomId, is_admin: bool, **changes: Any
) -> Room:
    """Replace some of the fields of a room, keeping its ID and bookings.

    Parameters
    ----------
    changes
        New values for any of `name`, `capacity`, `floor` and `equipment`.
        Fields set to `None` are left unchanged.

    Raises
    ------
    AuthorizationError if the caller is not an administrator.
    SearchError if the room does not exist.
    ValueError if a field that cannot be edited is passed.

    Notes
    -----
    Existing bookings are kept even if they exceed a reduced capacity.
    """
    _require_admin(is_admin, "edit rooms")
    if unknown := set(changes) - EDITABLE_ROOM_FIELDS:
        raise ValueError(f"Cannot edit room fields {sorted(unknown)}")
    room = store.get_room(room_id)
    updates = {k: v for k, v in changes.items() if v is not None}
    updated = store.update_room(Room.from_dict(room.model_dump() | updates))
    logger.info(f"Updated room {room_id}: {updated}")
    return updated


def remove_room(store: "BookingStore", room_id: RoomId, is_admin: bool) -> Room:
    """Remove a room and its bookings, returning the removed room."""
    _require_admin(is_admin, "remove rooms")
    room = store.get_room(room_id)
    store.remove_room(room_id)
    logger.info(f"Removed room {room}")
    return room
