#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime

from rich.console import Console
from rich.table import Table
from rich.text import Text

from roombook.booking.analytics import BookingStats
from roombook.booking.availability import AvailabilitySlot
from roombook.booking.bookings import Booking
from roombook.booking.recurrence import OccurrencePreview, RecurrenceOutcome
from roombook.booking.room_fit import FitClassification, RoomFitAdvice
from roombook.booking.rooms import Room
from roombook.booking.time_utils import TimeInterval

FIT_STYLES = {
    FitClassification.ADEQUATE: ("green", "Good fit"),
    FitClassification.UNDER_UTILIZED: ("yellow", "Room larger than needed"),
    FitClassification.OVER_CAPACITY: ("red", "Not enough seats"),
}


def display_slot_grid(
    console: Console, room: Room, date: datetime.date, slots: list[AvailabilitySlot]
):
    """Display the availability grid of a room as a two-column table."""
    table = Table(
        title=f"{room.name} - {date:%A %Y-%m-%d}",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Time", justify="right", style="cyan", no_wrap=True)
    table.add_column("Status", justify="center")
    for slot in slots:
        status = Text("free", style="green") if slot.available else Text("busy", style="red")
        table.add_row(slot.time, status)
    console.print(table)


def display_free_intervals(console: Console, room: Room, intervals: list[TimeInterval]):
    if not intervals:
        console.print(f"[red]{room.name} is fully booked![/red]")
        return
    console.print(f"[bold]{room.name}[/bold] is available:")
    for start, end in intervals:
        console.print(f"  {start:%Y-%m-%d %H:%M} to {end:%H:%M}")


def display_rooms(console: Console, rooms: list[Room]):
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Name", style="cyan")
    table.add_column("Capacity", justify="right")
    table.add_column("Floor")
    table.add_column("Equipment", style="dim")
    for room in rooms:
        table.add_row(
            room.name, str(room.capacity), room.floor, ", ".join(sorted(room.equipment))
        )
    console.print(table)


def display_room_fit(console: Console, room: Room, participants: int, advice: RoomFitAdvice):
    style, headline = FIT_STYLES[advice.classification]
    console.print(
        f"[bold {style}]{headline}[/bold {style}]: {room.name} hosts {room.capacity}, "
        f"{participants} participants ({advice.utilization_percent}% capacity)"
    )
    for suggestion in advice.suggestions:
        console.print(
            f"  - {suggestion.room.name} ({suggestion.room.capacity} seats, "
            f"{suggestion.utilization_percent}% utilisation)"
        )


def display_booking(console: Console, room: Room, booking: Booking):
    console.print(f"[green]Booked[/green] {room.name}: {booking} [dim]{booking.booking_id}[/dim]")


def display_recurrence_outcome(console: Console, outcome: RecurrenceOutcome):
    console.print(
        f"[green]{outcome.created_count} created[/green], "
        f"[yellow]{outcome.skipped_count} skipped[/yellow] "
        f"out of {outcome.total} occurrences"
    )
    for skipped in outcome.skipped:
        console.print(f"  [yellow]skipped[/yellow] {skipped.date}: {skipped.reason}")


def display_preview(console: Console, previews: list[OccurrencePreview]):
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Date", style="cyan")
    table.add_column("Time")
    table.add_column("Status", justify="center")
    for preview in previews:
        start, end = preview.interval
        status = Text("conflict", style="red") if preview.conflict else Text("ok", style="green")
        table.add_row(f"{preview.date:%a %Y-%m-%d}", f"{start:%H:%M}-{end:%H:%M}", status)
    console.print(table)


def display_stats(console: Console, stats: BookingStats):
    console.print(f"Total bookings: {stats.total_bookings}")
    console.print(f"Upcoming: {stats.upcoming_bookings}")
    console.print(f"Participants: {stats.total_participants}")
    console.print(f"Average duration: {stats.average_duration_minutes} minutes")
    if stats.top_room is not None:
        console.print(f"Most booked room: {stats.top_room}")
    if stats.room_usage:
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Room", style="cyan")
        table.add_column("Bookings", justify="right")
        for usage in stats.room_usage:
            table.add_row(usage.room, str(usage.bookings))
        console.print(table)


def display_bookings(
    console: Console, bookings: list[Booking], rooms: list[Room], title: str | None = None
):
    """Display bookings as a table, one row per booking in the given order."""
    if not bookings:
        console.print("[dim]No bookings[/dim]")
        return
    names = {room.room_id: room.name for room in rooms}
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Date", style="cyan", no_wrap=True)
    table.add_column("Time", no_wrap=True)
    table.add_column("Room")
    table.add_column("Title")
    table.add_column("Participants", justify="right")
    table.add_column("Organizer")
    table.add_column("ID", style="dim")
    for booking in bookings:
        table.add_row(
            f"{booking.start:%a %Y-%m-%d}",
            f"{booking.start:%H:%M}-{booking.end:%H:%M}",
            names.get(booking.room_id, booking.room_id),
            booking.title,
            str(booking.participants),
            booking.owner_id,
            booking.booking_id,
        )
    console.print(table)
