#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Advice on how well a room fits the number of meeting participants.

The advice is informational only and never prevents a booking."""

import math
from enum import StrEnum, auto
from typing import Iterable, NamedTuple

from pydantic import BaseModel

from roombook.booking.exceptions import ValidationError
from roombook.booking.rooms import Room
from roombook.constants import (
    MAX_OVER_CAPACITY_SUGGESTIONS,
    MAX_UNDER_UTILIZED_SUGGESTIONS,
    UNDER_UTILIZED_RATIO,
)


class RoomFitSettings(NamedTuple):
    under_utilized_ratio: float = UNDER_UTILIZED_RATIO
    max_over_capacity_suggestions: int = MAX_OVER_CAPACITY_SUGGESTIONS
    max_under_utilized_suggestions: int = MAX_UNDER_UTILIZED_SUGGESTIONS


class FitClassification(StrEnum):
    OVER_CAPACITY = auto()
    UNDER_UTILIZED = auto()
    ADEQUATE = auto()


class RoomSuggestion(BaseModel):
    room: Room
    utilization_percent: int


class RoomFitAdvice(BaseModel):
    """How well the selected room fits the participants.

    Attributes
    ----------
    utilization_percent
        Participants as a percentage of the selected room capacity. May
        exceed 100 for over-capacity selections.
    suggestions
        Alternative rooms, tightest fit first. Always empty for adequate fits.
    """

    classification: FitClassification
    utilization_percent: int
    suggestions: list[RoomSuggestion] = []


def utilization_percent(participants: int, capacity: int) -> int:
    """`participants / capacity` as a whole percentage, halves rounded up."""
    return math.floor(participants / capacity * 100 + 0.5)


def _suggest(
    rooms: Iterable[Room], participants: int, limit: int
) -> list[RoomSuggestion]:
    ranked = sorted(rooms, key=lambda r: r.capacity)[:limit]
    return [
        RoomSuggestion(
            room=room, utilization_percent=utilization_percent(participants, room.capacity)
        )
        for room in ranked
    ]


def suggest_rooms(
    selected_room: Room,
    participants: int,
    catalog: list[Room],
    settings: RoomFitSettings | None = None,
) -> RoomFitAdvice:
    """Classify `selected_room` for `participants` and rank better-fitting rooms.

    Parameters
    ----------
    selected_room
        The room the user is about to book.
    participants
        The number of people attending.
    catalog
        All the rooms that can be suggested. It may or may not include
        `selected_room`, which is never suggested.

    Returns
    -------
    The advice. Over-capacity selections get up to three rooms large enough
    for everyone; selections using less than 30% of the room get up to two
    smaller rooms still large enough, provided the catalog has more than one
    room. Suggestions are sorted by ascending capacity.

    Raises
    ------
    ValidationError if `participants` is not positive. Exceeding the
    capacity of `selected_room` is reported in the advice, not raised.
    """
    settings = settings or RoomFitSettings()
    if participants < 1:
        raise ValidationError(
            f"At least one participant is required, got {participants}"
        )
    capacity = selected_room.capacity
    percent = utilization_percent(participants, capacity)
    others = [r for r in catalog if r.room_id != selected_room.room_id]

    if participants > capacity:
        return RoomFitAdvice(
            classification=FitClassification.OVER_CAPACITY,
            utilization_percent=percent,
            suggestions=_suggest(
                (r for r in others if r.capacity >= participants),
                participants,
                settings.max_over_capacity_suggestions,
            ),
        )
    if participants / capacity < settings.under_utilized_ratio and len(catalog) > 1:
        return RoomFitAdvice(
            classification=FitClassification.UNDER_UTILIZED,
            utilization_percent=percent,
            suggestions=_suggest(
                (r for r in others if participants <= r.capacity < capacity),
                participants,
                settings.max_under_utilized_suggestions,
            ),
        )
    return RoomFitAdvice(
        classification=FitClassification.ADEQUATE, utilization_percent=percent
    )
