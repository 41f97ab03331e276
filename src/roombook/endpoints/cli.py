#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime
import functools
import logging
from dataclasses import dataclass
from pathlib import Path

import click
import pydantic
from omegaconf import DictConfig
from rich.console import Console

from roombook.booking import admin as admin_ops
from roombook.booking.analytics import booking_stats
from roombook.booking.availability import check_availability, find_available_time_slots
from roombook.booking.bookings import (
    create_single_booking,
    delete_booking,
    list_upcoming_bookings,
)
from roombook.booking.exceptions import BookingError
from roombook.booking.export import booking_to_ics, bookings_to_csv
from roombook.booking.recurrence import (
    RecurrenceRule,
    RecurrenceType,
    expand_recurring_booking,
    preview_recurring_booking,
)
from roombook.booking.room_fit import suggest_rooms
from roombook.booking.rooms import search_rooms
from roombook.booking.time_utils import (
    DateRange,
    TimeInterval,
    combine,
    parse_time_string,
    weekday_index,
)
from roombook.config import load_config, room_fit_settings, slot_grid_settings
from roombook.constants import DEFAULT_SNAPSHOT_PATH
from roombook.display import (
    display_booking,
    display_bookings,
    display_free_intervals,
    display_preview,
    display_recurrence_outcome,
    display_room_fit,
    display_rooms,
    display_slot_grid,
    display_stats,
)
from roombook.storage.store import InMemoryBookingStore

logger = logging.getLogger(__name__)

DATE = click.DateTime(formats=["%Y-%m-%d"])
MONTH = click.DateTime(formats=["%Y-%m"])


@dataclass
class CliState:
    cfg: DictConfig
    store: InMemoryBookingStore
    snapshot: Path
    console: Console

    def save(self):
        self.snapshot.parent.mkdir(parents=True, exist_ok=True)
        self.store.save(self.snapshot)
        logger.debug(f"Store saved to {self.snapshot}")


def report_errors(func):
    """Turn booking and validation errors into click errors (exit code 1)."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (BookingError, pydantic.ValidationError) as e:
            raise click.ClickException(str(e))

    return wrapper


def _parse_weekday(value: str) -> int:
    if value.isdigit():
        return int(value)
    return weekday_index(value)


@click.group()
@click.option(
    "--snapshot",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="JSON file holding rooms and bookings.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML file overriding the default settings.",
)
@click.option("--set", "overrides", multiple=True, help="Eg slot_grid.slot_minutes=30")
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, snapshot, config_path, overrides, verbose):
    """Meeting room booking."""
    cfg = load_config(config_path, overrides)
    logging.basicConfig(
        level=logging.DEBUG if verbose else cfg.logging.level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    snapshot = Path(snapshot or cfg.store.snapshot or DEFAULT_SNAPSHOT_PATH)
    if snapshot.exists():
        store = InMemoryBookingStore.load(snapshot)
    else:
        logger.info(f"No snapshot at {snapshot}, starting from an empty store")
        store = InMemoryBookingStore()
    ctx.obj = CliState(cfg=cfg, store=store, snapshot=snapshot, console=Console())


@cli.command()
@click.option("--text", default=None, help="Substring of the room name or floor")
@click.option("--min-capacity", type=int, default=None)
@click.option("--equipment", multiple=True, help="Required equipment tag")
@click.pass_obj
def rooms(state: CliState, text, min_capacity, equipment):
    """List the rooms matching the given filters."""
    found = search_rooms(state.store.list_rooms(), text, min_capacity, equipment)
    display_rooms(state.console, found)


@cli.command("add-room")
@click.argument("name")
@click.option("--capacity", type=int, required=True)
@click.option("--floor", default="")
@click.option("--equipment", multiple=True)
@click.option("--admin", is_flag=True, help="Act as an administrator")
@click.pass_obj
@report_errors
def add_room(state: CliState, name, capacity, floor, equipment, admin):
    """Add a room to the inventory."""
    room = admin_ops.add_room(
        state.store, name, capacity, is_admin=admin, floor=floor, equipment=equipment
    )
    state.save()
    state.console.print(f"Added room {room.name} [dim]{room.room_id}[/dim]")


@cli.command("edit-room")
@click.argument("room_name")
@click.option("--name", default=None, help="New room name")
@click.option("--capacity", type=int, default=None)
@click.option("--floor", default=None)
@click.option("--equipment", multiple=True, help="Replaces all equipment tags")
@click.option("--admin", is_flag=True, help="Act as an administrator")
@click.pass_obj
@report_errors
def edit_room(state: CliState, room_name, name, capacity, floor, equipment, admin):
    """Change the name, capacity, floor or equipment of a room."""
    room = state.store.find_room(room_name)
    updated = admin_ops.update_room(
        state.store,
        room.room_id,
        is_admin=admin,
        name=name,
        capacity=capacity,
        floor=floor,
        equipment=equipment or None,
    )
    state.save()
    state.console.print(f"Updated room {updated}")


@cli.command("remove-room")
@click.argument("room_name")
@click.option("--admin", is_flag=True, help="Act as an administrator")
@click.pass_obj
@report_errors
def remove_room(state: CliState, room_name, admin):
    """Remove a room together with its bookings."""
    room = state.store.find_room(room_name)
    admin_ops.remove_room(state.store, room.room_id, is_admin=admin)
    state.save()
    state.console.print(f"Removed room {room.name}")


@cli.command()
@click.argument("room_name")
@click.argument("date", type=DATE)
@click.pass_obj
@report_errors
def availability(state: CliState, room_name, date):
    """Show the hourly availability grid of a room."""
    room = state.store.find_room(room_name)
    slots = check_availability(
        state.store, room.room_id, date.date(), slot_grid_settings(state.cfg)
    )
    display_slot_grid(state.console, room, date.date(), slots)


@cli.command()
@click.argument("room_name")
@click.argument("date", type=DATE)
@click.pass_obj
@report_errors
def free(state: CliState, room_name, date):
    """Show the free intervals of a room within the bookable hours."""
    room = state.store.find_room(room_name)
    intervals = find_available_time_slots(
        state.store, room.room_id, [date.date()], slot_grid_settings(state.cfg)
    )
    display_free_intervals(state.console, room, intervals)


@cli.command()
@click.argument("room_name")
@click.argument("participants", type=int)
@click.pass_obj
@report_errors
def suggest(state: CliState, room_name, participants):
    """Check how well a room fits the number of participants."""
    room = state.store.find_room(room_name)
    advice = suggest_rooms(
        room, participants, state.store.list_rooms(), room_fit_settings(state.cfg)
    )
    display_room_fit(state.console, room, participants, advice)


@cli.command()
@click.argument("room_name")
@click.argument("date", type=DATE)
@click.argument("start")
@click.argument("end")
@click.option("--participants", type=int, default=1, show_default=True)
@click.option("--owner", required=True)
@click.option("--title", default="")
@click.option("--description", default="")
@click.pass_obj
@report_errors
def book(state: CliState, room_name, date, start, end, participants, owner, title, description):
    """Book a room on DATE from START to END (HH:MM)."""
    room = state.store.find_room(room_name)
    interval = TimeInterval(
        start=combine(date.date(), parse_time_string(start)),
        end=combine(date.date(), parse_time_string(end)),
    )
    booking = create_single_booking(
        state.store, room, interval, participants, owner, title, description
    )
    state.save()
    display_booking(state.console, room, booking)


@cli.command()
@click.argument("room_name")
@click.option(
    "--type",
    "recurrence_type",
    type=click.Choice([t.value for t in RecurrenceType]),
    required=True,
)
@click.option("--start", required=True, help="Start time, HH:MM")
@click.option("--end", required=True, help="End time, HH:MM")
@click.option("--until", type=DATE, required=True, help="Last date (inclusive)")
@click.option("--from", "starts_on", type=DATE, default=None, help="First date, defaults to today")
@click.option("--weekday", "weekdays", multiple=True, help="Weekday name or index (Monday=0)")
@click.option("--participants", type=int, default=1, show_default=True)
@click.option("--owner", default="")
@click.option("--title", default="")
@click.option("--dry-run", is_flag=True, help="Only report which occurrences conflict")
@click.pass_obj
@report_errors
def recur(
    state: CliState,
    room_name,
    recurrence_type,
    start,
    end,
    until,
    starts_on,
    weekdays,
    participants,
    owner,
    title,
    dry_run,
):
    """Book a room on every occurrence of a recurrence rule."""
    room = state.store.find_room(room_name)
    rule = RecurrenceRule(
        recurrence_type=RecurrenceType(recurrence_type),
        start_time=parse_time_string(start),
        end_time=parse_time_string(end),
        end_date=until.date(),
        weekdays=frozenset(_parse_weekday(w) for w in weekdays),
        starts_on=starts_on.date() if starts_on else datetime.date.today(),
    )
    if dry_run:
        display_preview(state.console, preview_recurring_booking(state.store, room, rule))
        return
    if not owner:
        raise click.UsageError("--owner is required unless --dry-run is given")
    outcome = expand_recurring_booking(
        state.store, room, rule, participants, owner, title
    )
    state.save()
    display_recurrence_outcome(state.console, outcome)


@cli.command()
@click.argument("booking_id")
@click.option("--owner", required=True, help="Who is cancelling the booking")
@click.option("--admin", is_flag=True, help="Cancel on behalf of an administrator")
@click.pass_obj
@report_errors
def cancel(state: CliState, booking_id, owner, admin):
    """Delete a booking."""
    booking = delete_booking(state.store, booking_id, owner, is_admin=admin)
    state.save()
    state.console.print(f"Cancelled {booking}")


@cli.command("my-bookings")
@click.argument("owner")
@click.pass_obj
def my_bookings(state: CliState, owner):
    """List the bookings of OWNER which have not ended yet."""
    bookings = list_upcoming_bookings(state.store, owner, datetime.datetime.now())
    display_bookings(
        state.console, bookings, state.store.list_rooms(), title=f"Upcoming bookings of {owner}"
    )


@cli.command()
@click.argument("month", type=MONTH)
@click.pass_obj
def calendar(state: CliState, month):
    """List every booking in MONTH (YYYY-MM)."""
    bookings = state.store.list_bookings_in_range(DateRange.month(month.year, month.month))
    display_bookings(
        state.console, bookings, state.store.list_rooms(), title=f"{month:%B %Y}"
    )


@cli.command()
@click.argument("owner")
@click.option(
    "--range", "time_range", type=click.Choice(["month", "quarter", "year"]), default="month"
)
@click.pass_obj
def stats(state: CliState, owner, time_range):
    """Summarise the bookings of OWNER."""
    summary = booking_stats(
        state.store.list_bookings_for_owner(owner),
        state.store.list_rooms(),
        now=datetime.datetime.now(),
        time_range=time_range,
    )
    display_stats(state.console, summary)


@cli.command()
@click.argument("owner")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_obj
@report_errors
def export(state: CliState, owner, path):
    """Export the bookings of OWNER to a CSV file."""
    bookings = state.store.list_bookings_for_owner(owner)
    bookings_to_csv(bookings, state.store.list_rooms(), path)
    state.console.print(f"Exported {len(bookings)} bookings to {path}")


@cli.command()
@click.argument("booking_id")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_obj
@report_errors
def ics(state: CliState, booking_id, path):
    """Save a booking as an iCalendar file."""
    booking = state.store.get_booking(booking_id)
    room = state.store.get_room(booking.room_id)
    path.write_text(booking_to_ics(booking, room))
    state.console.print(f"Saved {path}")


if __name__ == "__main__":
    cli()
