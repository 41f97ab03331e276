#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime

import pydantic
import pytest

from roombook.booking.bookings import Booking
from roombook.booking.exceptions import (
    BookingError,
    CapacityError,
    ConflictError,
    ValidationError,
)
from roombook.booking.recurrence import (
    RecurrenceRule,
    RecurrenceType,
    expand_recurring_booking,
    generate_occurrence_dates,
    preview_recurring_booking,
)
from roombook.booking.rooms import Room
from roombook.storage.seeding import create_booking, create_room
from roombook.storage.store import InMemoryBookingStore

TEN = datetime.time(10)
ELEVEN = datetime.time(11)


def d(month: int, day: int, year: int = 2024) -> datetime.date:
    return datetime.date(year, month, day)


def rule(recurrence_type: RecurrenceType, starts_on, end_date, weekdays=()) -> RecurrenceRule:
    return RecurrenceRule(
        recurrence_type=recurrence_type,
        start_time=TEN,
        end_time=ELEVEN,
        starts_on=starts_on,
        end_date=end_date,
        weekdays=frozenset(weekdays),
    )


@pytest.fixture
def room(store: InMemoryBookingStore) -> Room:
    return store.get_room(create_room(store, "Sala Galileo", capacity=10))


def test_daily_dates_are_consecutive_and_inclusive():
    dates = generate_occurrence_dates(rule(RecurrenceType.DAILY, d(3, 4), d(3, 8)))
    assert dates == [d(3, 4), d(3, 5), d(3, 6), d(3, 7), d(3, 8)]


def test_single_day_rule():
    assert generate_occurrence_dates(rule(RecurrenceType.DAILY, d(3, 4), d(3, 4))) == [
        d(3, 4)
    ]


def test_weekly_dates_fall_on_selected_weekdays():
    # 2024-03-01 is a Friday
    weekly = rule(RecurrenceType.WEEKLY, d(3, 1), d(3, 15), weekdays=[0, 2])
    dates = generate_occurrence_dates(weekly)
    assert dates == [d(3, 4), d(3, 6), d(3, 11), d(3, 13)]
    assert {date.weekday() for date in dates} == {0, 2}


def test_weekly_end_date_is_inclusive():
    weekly = rule(RecurrenceType.WEEKLY, d(1, 1), d(1, 15), weekdays=[0, 2])
    assert generate_occurrence_dates(weekly) == [
        d(1, 1),
        d(1, 3),
        d(1, 8),
        d(1, 10),
        d(1, 15),
    ]


def test_biweekly_end_date_is_inclusive():
    biweekly = rule(RecurrenceType.BIWEEKLY, d(1, 1), d(1, 29), weekdays=[0])
    assert generate_occurrence_dates(biweekly) == [d(1, 1), d(1, 15), d(1, 29)]


def test_biweekly_alternates_weeks_from_the_first_matching_date():
    biweekly = rule(RecurrenceType.BIWEEKLY, d(3, 1), d(3, 31), weekdays=[1])
    assert generate_occurrence_dates(biweekly) == [d(3, 5), d(3, 19)]


def test_biweekly_first_week_starts_at_the_first_matching_weekday():
    # starts on Wednesday 2024-03-06; Monday 03-04 is before the rule starts
    biweekly = rule(RecurrenceType.BIWEEKLY, d(3, 6), d(4, 4), weekdays=[0, 3])
    assert generate_occurrence_dates(biweekly) == [
        d(3, 7),
        d(3, 18),
        d(3, 21),
        d(4, 1),
        d(4, 4),
    ]


def test_biweekly_without_matching_date():
    # Monday to Wednesday, only Fridays requested
    biweekly = rule(RecurrenceType.BIWEEKLY, d(3, 4), d(3, 6), weekdays=[4])
    assert generate_occurrence_dates(biweekly) == []


def test_monthly_skips_months_without_the_day():
    monthly = rule(RecurrenceType.MONTHLY, d(1, 31), d(6, 30))
    assert generate_occurrence_dates(monthly) == [d(1, 31), d(3, 31), d(5, 31)]


def test_monthly_on_a_common_day():
    monthly = rule(RecurrenceType.MONTHLY, d(1, 15), d(4, 14))
    assert generate_occurrence_dates(monthly) == [d(1, 15), d(2, 15), d(3, 15)]


@pytest.mark.parametrize(
    "kwargs",
    [
        {"start_time": ELEVEN, "end_time": TEN},
        {"start_time": TEN, "end_time": TEN},
        {"end_date": d(3, 1), "starts_on": d(3, 2)},
        {"recurrence_type": RecurrenceType.WEEKLY},
        {"recurrence_type": RecurrenceType.BIWEEKLY},
        {"recurrence_type": RecurrenceType.WEEKLY, "weekdays": frozenset({7})},
    ],
)
def test_invalid_rules_are_rejected(kwargs):
    fields = {
        "recurrence_type": RecurrenceType.DAILY,
        "start_time": TEN,
        "end_time": ELEVEN,
        "starts_on": d(3, 1),
        "end_date": d(3, 10),
    } | kwargs
    with pytest.raises(ValidationError) as exc_info:
        RecurrenceRule(**fields)
    assert isinstance(exc_info.value, BookingError)


def test_malformed_rule_fields_are_rejected_by_pydantic():
    with pytest.raises(pydantic.ValidationError):
        RecurrenceRule(
            recurrence_type="hourly",
            start_time=TEN,
            end_time=ELEVEN,
            starts_on=d(3, 1),
            end_date=d(3, 10),
        )


def test_conflicting_occurrence_is_skipped_and_the_others_are_booked(
    store: InMemoryBookingStore, room: Room
):
    blocker = create_booking(
        store,
        room.room_id,
        datetime.datetime(2024, 3, 6, 10, 30),
        datetime.datetime(2024, 3, 6, 11, 30),
    )
    outcome = expand_recurring_booking(
        store, room, rule(RecurrenceType.DAILY, d(3, 4), d(3, 8)), 4, "alex", "Standup"
    )
    assert outcome.created_count == 4
    assert outcome.skipped_count == 1
    assert outcome.total == 5
    skipped = outcome.skipped[0]
    assert skipped.date == d(3, 6)
    assert skipped.reason == "conflict"
    assert skipped.conflicts == (blocker,)
    assert [b.start.date() for b in outcome.created] == [d(3, 4), d(3, 5), d(3, 7), d(3, 8)]
    assert {b.recurrence_id for b in outcome.created} == {outcome.recurrence_id}
    assert all(b.title == "Standup" and b.participants == 4 for b in outcome.created)
    assert len(store.list_bookings_for_owner("alex")) == 4


def test_adjacent_existing_booking_does_not_block(store: InMemoryBookingStore, room: Room):
    create_booking(
        store,
        room.room_id,
        datetime.datetime(2024, 3, 4, 11),
        datetime.datetime(2024, 3, 4, 12),
    )
    outcome = expand_recurring_booking(
        store, room, rule(RecurrenceType.DAILY, d(3, 4), d(3, 5)), 1, "alex"
    )
    assert outcome.created_count == 2
    assert outcome.skipped == []


def test_capacity_is_checked_before_anything_is_booked(
    store: InMemoryBookingStore, room: Room
):
    with pytest.raises(CapacityError) as exc_info:
        expand_recurring_booking(
            store, room, rule(RecurrenceType.DAILY, d(3, 4), d(3, 8)), 11, "alex"
        )
    assert exc_info.value.participants == 11
    assert exc_info.value.capacity == 10
    assert store.list_bookings() == []


def test_participants_must_be_positive(store: InMemoryBookingStore, room: Room):
    with pytest.raises(ValidationError):
        expand_recurring_booking(
            store, room, rule(RecurrenceType.DAILY, d(3, 4), d(3, 8)), 0, "alex"
        )
    assert store.list_bookings() == []


def test_store_level_conflict_is_reported_as_skipped(room: Room):
    class RacingStore(InMemoryBookingStore):
        """Refuses the booking on 2024-03-05 as if another caller got there first."""

        def create_booking(self, booking: Booking) -> Booking:
            if booking.start.date() == d(3, 5):
                raise ConflictError("taken", conflicts=[])
            return super().create_booking(booking)

    store = RacingStore()
    store.add_room(room)
    outcome = expand_recurring_booking(
        store, room, rule(RecurrenceType.DAILY, d(3, 4), d(3, 6)), 1, "alex"
    )
    assert [s.date for s in outcome.skipped] == [d(3, 5)]
    assert outcome.skipped[0].reason == "conflict"
    assert outcome.created_count == 2


def test_preview_does_not_write(store: InMemoryBookingStore, room: Room):
    create_booking(
        store,
        room.room_id,
        datetime.datetime(2024, 3, 5, 9),
        datetime.datetime(2024, 3, 5, 10, 30),
    )
    previews = preview_recurring_booking(
        store, room, rule(RecurrenceType.DAILY, d(3, 4), d(3, 6))
    )
    assert [(p.date, p.conflict) for p in previews] == [
        (d(3, 4), False),
        (d(3, 5), True),
        (d(3, 6), False),
    ]
    assert previews[0].interval.start == datetime.datetime(2024, 3, 4, 10)
    assert len(store.list_bookings()) == 1


def test_rule_str():
    weekly = rule(RecurrenceType.WEEKLY, d(3, 1), d(3, 15), weekdays=[2, 0])
    assert str(weekly) == (
        "weekly on Monday, Wednesday 10:00-11:00, from 2024-03-01 until 2024-03-15"
    )
