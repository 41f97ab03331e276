#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Recurring bookings.

A recurrence rule is expanded into concrete occurrence dates, and each
occurrence is conflict-checked and committed in date order. Expansion is
partial-failure tolerant: an occurrence clashing with an existing booking is
skipped and reported, the others are still booked, and nothing committed
earlier is rolled back.
"""

import datetime
import functools
import logging
import uuid
from dataclasses import dataclass, field
from enum import StrEnum, auto
from typing import TYPE_CHECKING, Callable, NamedTuple

from dateutil import rrule
from pydantic import BaseModel, Field, model_validator

from roombook.booking.bookings import Booking, validate_participants
from roombook.booking.conflicts import find_conflicts
from roombook.booking.exceptions import ConflictError, ValidationError
from roombook.booking.rooms import Room
from roombook.booking.time_utils import (
    WEEKDAY_NAMES,
    DateRange,
    TimeInterval,
    combine,
)
from roombook.constants import CONFLICT_REASON

if TYPE_CHECKING:
    from roombook.storage.store import BookingStore

logger = logging.getLogger(__name__)


class RecurrenceType(StrEnum):
    DAILY = auto()
    WEEKLY = auto()
    BIWEEKLY = auto()
    MONTHLY = auto()


class RecurrenceRule(BaseModel):
    """
    Represents the rule according to which a booking recurs.

    Parameters
    ----------
    recurrence_type
        How often the booking occurs.
    start_time, end_time
        The wall-clock window booked on each occurrence date.
    end_date
        The last date on which the booking may occur (inclusive).
    weekdays
        Days of the week on which the booking occurs (0-indexed, Monday is 0).
        Required for weekly and biweekly rules, ignored otherwise.
    starts_on
        The date the rule was created, from which occurrences are generated.
        Monthly rules recur on this day of the month.

    Raises
    ------
    ValidationError
        When the fields are well typed but inconsistent, eg an empty time
        window. Malformed field values are still reported by pydantic.

    Notes
    -----
    Biweekly rules alternate weeks counting from the week of the first date
    matching `weekdays`, not from the week of `starts_on`.
    """

    recurrence_type: RecurrenceType
    start_time: datetime.time
    end_time: datetime.time
    end_date: datetime.date
    weekdays: frozenset[int] = frozenset()
    starts_on: datetime.date = Field(default_factory=datetime.date.today)

    @model_validator(mode="after")
    def check_rule(self):
        if self.end_time <= self.start_time:
            raise ValidationError("end_time must be after start_time")
        if self.end_date < self.starts_on:
            raise ValidationError("end_date must not be before starts_on")
        if self.recurrence_type in (RecurrenceType.WEEKLY, RecurrenceType.BIWEEKLY):
            if not self.weekdays:
                raise ValidationError(
                    f"At least one weekday is required for {self.recurrence_type} rules"
                )
            if invalid := {d for d in self.weekdays if not 0 <= d <= 6}:
                raise ValidationError(f"Weekday indices must be in 0..6, got {invalid}")
        return self

    def occurrence_interval(self, date: datetime.date) -> TimeInterval:
        """The candidate interval booked on `date`."""
        return TimeInterval(
            start=combine(date, self.start_time), end=combine(date, self.end_time)
        )

    def __str__(self) -> str:
        window = f"{self.start_time:%H:%M}-{self.end_time:%H:%M}"
        days = ""
        if self.recurrence_type in (RecurrenceType.WEEKLY, RecurrenceType.BIWEEKLY):
            days = " on " + ", ".join(WEEKDAY_NAMES[d] for d in sorted(self.weekdays))
        return (
            f"{self.recurrence_type}{days} {window}, "
            f"from {self.starts_on} until {self.end_date}"
        )


def _first_matching_date(rule: RecurrenceRule) -> datetime.date | None:
    for offset in range(7):
        candidate = rule.starts_on + datetime.timedelta(days=offset)
        if candidate > rule.end_date:
            return None
        if candidate.weekday() in rule.weekdays:
            return candidate
    return None


def generate_occurrence_dates(rule: RecurrenceRule) -> list[datetime.date]:
    """Expand `rule` into its ordered occurrence dates.

    - daily: every date from `starts_on` to `end_date`.
    - weekly: every date whose weekday is in `weekdays`.
    - biweekly: as weekly, in every other week, the week of the first
      matching date being included.
    - monthly: the day of month of `starts_on`, in every month having that
      day; shorter months are skipped rather than rolled over.
    """
    dtstart = combine(rule.starts_on, datetime.time.min)
    until = combine(rule.end_date, datetime.time.min)
    match rule.recurrence_type:
        case RecurrenceType.DAILY:
            schedule = rrule.rrule(rrule.DAILY, dtstart=dtstart, until=until)
        case RecurrenceType.WEEKLY:
            schedule = rrule.rrule(
                rrule.WEEKLY,
                dtstart=dtstart,
                until=until,
                byweekday=sorted(rule.weekdays),
            )
        case RecurrenceType.BIWEEKLY:
            first = _first_matching_date(rule)
            if first is None:
                return []
            schedule = rrule.rrule(
                rrule.WEEKLY,
                interval=2,
                wkst=rrule.MO,
                dtstart=combine(first, datetime.time.min),
                until=until,
                byweekday=sorted(rule.weekdays),
            )
        case RecurrenceType.MONTHLY:
            schedule = rrule.rrule(
                rrule.MONTHLY,
                dtstart=dtstart,
                until=until,
                bymonthday=rule.starts_on.day,
            )
        case _:
            raise ValueError(f"Unsupported recurrence type: {rule.recurrence_type}")
    return [occurrence.date() for occurrence in schedule]


class SkippedOccurrence(NamedTuple):
    """An occurrence which was not booked.

    Attributes
    ----------
    conflicts
        The IDs of the bookings the occurrence clashed with.
    """

    date: datetime.date
    reason: str
    conflicts: tuple[str, ...] = ()


class ExpansionState(NamedTuple):
    """The accumulator threaded through the occurrences of one expansion run.

    `committed` holds every booking of the room an occurrence must not
    overlap, including the ones created earlier in the same run.
    """

    committed: tuple[Booking, ...]
    created: tuple[Booking, ...] = ()
    skipped: tuple[SkippedOccurrence, ...] = ()


@dataclass
class RecurrenceOutcome:
    """The result of expanding a recurring booking."""

    recurrence_id: str
    created: list[Booking] = field(default_factory=list)
    skipped: list[SkippedOccurrence] = field(default_factory=list)

    @property
    def created_count(self) -> int:
        return len(self.created)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    @property
    def total(self) -> int:
        return self.created_count + self.skipped_count


class OccurrencePreview(NamedTuple):
    date: datetime.date
    interval: TimeInterval
    conflict: bool


def _commit_occurrence(
    state: ExpansionState,
    date: datetime.date,
    *,
    rule: RecurrenceRule,
    make_booking: Callable[[TimeInterval], Booking],
    materialise: Callable[[Booking], Booking],
) -> ExpansionState:
    """Commit or skip the occurrence on `date`, returning the updated state."""
    candidate = rule.occurrence_interval(date)
    conflicts = find_conflicts(candidate, state.committed)
    if not conflicts:
        try:
            booking = materialise(make_booking(candidate))
        except ConflictError as e:
            conflicts = e.conflicts
        else:
            logger.debug(f"Occurrence on {date} booked as {booking.booking_id}")
            return state._replace(
                committed=state.committed + (booking,),
                created=state.created + (booking,),
            )
    logger.warning(f"Occurrence on {date} skipped: conflicts with existing bookings")
    skipped = SkippedOccurrence(
        date=date,
        reason=CONFLICT_REASON,
        conflicts=tuple(getattr(c, "booking_id", str(c)) for c in conflicts),
    )
    return state._replace(skipped=state.skipped + (skipped,))


def _expand(
    store: "BookingStore",
    room: Room,
    rule: RecurrenceRule,
    make_booking: Callable[[TimeInterval], Booking],
    materialise: Callable[[Booking], Booking],
) -> ExpansionState:
    dates = generate_occurrence_dates(rule)
    if not dates:
        return ExpansionState(committed=())
    existing = store.list_bookings_for_room(
        room.room_id, DateRange(start=dates[0], end=dates[-1])
    )
    step = functools.partial(
        _commit_occurrence,
        rule=rule,
        make_booking=make_booking,
        materialise=materialise,
    )
    return functools.reduce(step, dates, ExpansionState(committed=tuple(existing)))


def expand_recurring_booking(
    store: "BookingStore",
    room: Room,
    rule: RecurrenceRule,
    participants: int,
    owner_id: str,
    title: str = "",
    description: str = "",
) -> RecurrenceOutcome:
    """Book `room` on every occurrence of `rule` that does not clash with an
    existing booking.

    Occurrences are processed in date order, so each one is checked against
    the occurrences booked before it in the same run. Each created booking is
    an independent booking sharing the returned `recurrence_id`.

    Raises
    ------
    ValidationError if `participants` is not positive.
    CapacityError if `participants` exceeds the room capacity. Both are raised
    before anything is booked.
    """
    validate_participants(room, participants)
    recurrence_id = str(uuid.uuid4())

    def make_booking(interval: TimeInterval) -> Booking:
        return Booking(
            room_id=room.room_id,
            owner_id=owner_id,
            title=title,
            description=description,
            start=interval.start,
            end=interval.end,
            participants=participants,
            recurrence_id=recurrence_id,
        )

    state = _expand(store, room, rule, make_booking, store.create_booking)
    outcome = RecurrenceOutcome(
        recurrence_id=recurrence_id,
        created=list(state.created),
        skipped=list(state.skipped),
    )
    logger.info(
        f"Recurring booking of {room.name} ({rule}): "
        f"{outcome.created_count} created, {outcome.skipped_count} skipped"
    )
    return outcome


def preview_recurring_booking(
    store: "BookingStore", room: Room, rule: RecurrenceRule
) -> list[OccurrencePreview]:
    """Dry run of `expand_recurring_booking`: report which occurrences would
    be booked and which would be skipped, without writing to the store."""

    def make_booking(interval: TimeInterval) -> Booking:
        return Booking(
            room_id=room.room_id, owner_id="", start=interval.start, end=interval.end
        )

    state = _expand(store, room, rule, make_booking, lambda booking: booking)
    skipped_dates = {s.date for s in state.skipped}
    return [
        OccurrencePreview(
            date=date,
            interval=rule.occurrence_interval(date),
            conflict=date in skipped_dates,
        )
        for date in generate_occurrence_dates(rule)
    ]
