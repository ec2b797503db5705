"""
Main CLI application using Typer.

``slots`` and ``book`` are the student booking view, ``schedule`` and
``delete`` the teacher view.
"""

import asyncio
import logging
from pathlib import Path
from typing import List, Optional, Annotated, Tuple

import pendulum
import typer
from pendulum import Date
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.admin_auth import AdminPassword
from ..adapters.booking_store import BookingStore
from ..adapters.storage import FileStorage
from ..config import AppConfig, get_default_config_path
from ..domain.catalog import time_label
from ..domain.draft import DraftBuilder
from ..domain.exceptions import BookingError
from ..domain.models import RESOURCES, parse_date, weekday_label
from ..domain.schedule import ScheduleCell
from ..services.booking_service import BookingService

app = typer.Typer(
    name="makeupbooker",
    help="Book make-up class computer slots and view the weekly schedule",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")]


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_service(config_file: Optional[Path], verbose: bool = False) -> Tuple[AppConfig, BookingService]:
    """Load configuration, set up logging and wire the booking service."""
    config_path = config_file or get_default_config_path()
    try:
        config = AppConfig.load_from_yaml(config_path)
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    _configure_logging("DEBUG" if verbose else config.log_level)

    storage = FileStorage(config.data_dir)
    store = BookingStore(storage, timezone=config.timezone)
    store.load()

    service = BookingService(
        store=store,
        draft_builder=DraftBuilder(timezone=config.timezone),
        messenger=config.build_messenger(),
        admin_password=AdminPassword(storage),
    )
    return config, service


def _parse_date_or_exit(value: str) -> Date:
    try:
        return parse_date(value)
    except ValueError as e:
        console.print(f"[red]Error parsing date: {e}[/red]")
        raise typer.Exit(1)


def _parse_slot_token(token: str) -> Tuple[Date, str, str]:
    """
    Parse a ``DATE,TIME,COMPUTER`` token such as ``2024-03-04,14:00,A``.

    Raises:
        ValueError: If the token is malformed
    """
    parts = [part.strip() for part in token.split(",")]
    if len(parts) != 3:
        raise ValueError(f"Invalid slot '{token}', expected DATE,TIME,COMPUTER")
    date_str, time_slot_id, resource_id = parts
    return parse_date(date_str), time_slot_id, resource_id.upper()


def _print_day_availability(service: BookingService, date: Date) -> bool:
    """Print the free computers for a date. Returns False when the day is closed."""
    availability = service.day_availability(date)
    if not availability:
        console.print(f"[yellow]{date.to_date_string()} ({weekday_label(date)}) is closed for booking.[/yellow]")
        return False

    draft = service.draft
    table = Table(
        title=f"{date.to_date_string()} ({weekday_label(date)})",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Time", style="bold")
    for resource in RESOURCES:
        table.add_column(f"Computer {resource}", justify="center")

    for time_slot, free in availability:
        row = [time_slot.label]
        for resource in RESOURCES:
            if any(slot.matches(date, time_slot.id, resource) for slot in draft):
                row.append("[bold magenta]selected[/bold magenta]")
            elif resource in free:
                row.append("[green]free[/green]")
            else:
                row.append("[dim]taken[/dim]")
        table.add_row(*row)

    console.print(table)
    return True


def _toggle(service: BookingService, date: Date, time_slot_id: str, resource_id: str) -> None:
    before = service.draft
    after = service.toggle_draft_slot(date, time_slot_id, resource_id)
    was_selected = any(slot.matches(date, time_slot_id, resource_id) for slot in before)
    if was_selected and after != before:
        console.print(
            f"[yellow]⚠ {date.to_date_string()} {time_slot_id} computer {resource_id} "
            f"was already selected, deselecting it[/yellow]"
        )
    elif after == before:
        console.print(
            f"[yellow]⚠ {date.to_date_string()} {time_slot_id} computer {resource_id} "
            f"is not available, skipping[/yellow]"
        )


def _run_interactive_wizard(service: BookingService) -> None:
    """
    Let the student pick slots date by date.

    Each entry of ``TIME COMPUTER`` (e.g. ``14:00 A``) toggles a slot;
    an empty entry moves on to the next date.
    """
    console.print("[bold]1️⃣  Pick your slots[/bold]")

    while True:
        date_str = typer.prompt(
            "\n→ Date (YYYY-MM-DD, leave empty to finish)",
            default="",
            show_default=False
        ).strip()
        if not date_str:
            break

        try:
            date = parse_date(date_str)
        except ValueError as e:
            console.print(f"[yellow]⚠ {e}[/yellow]")
            continue

        if not _print_day_availability(service, date):
            continue

        while True:
            entry = typer.prompt(
                "→ Time and computer (e.g. '14:00 A', empty for another date)",
                default="",
                show_default=False
            ).strip()
            if not entry:
                break

            parts = entry.split()
            if len(parts) != 2:
                console.print("[yellow]Please enter a time and a computer, e.g. '14:00 A'[/yellow]")
                continue

            _toggle(service, date, parts[0], parts[1].upper())
            _print_day_availability(service, date)


def _print_draft(service: BookingService) -> None:
    console.print("\n[bold cyan]📊 Selected slots:[/bold cyan]")
    for slot in sorted(service.draft, key=lambda s: s.sort_key()):
        console.print(f"   {slot.date.to_date_string()} {time_label(slot.time_slot_id)}  [bold]computer {slot.resource_id}[/bold]")
    console.print()


@app.command()
def slots(
    date: Annotated[str, typer.Argument(help="Date to show (YYYY-MM-DD)")],
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Show free computers for every time slot of a date.
    """
    _, service = _load_service(config_file, verbose)
    _print_day_availability(service, _parse_date_or_exit(date))


@app.command()
def book(
    slot_tokens: Annotated[Optional[List[str]], typer.Argument(help="Slots as DATE,TIME,COMPUTER (e.g. 2024-03-04,14:00,A). Without slots the wizard starts.")] = None,
    name: Annotated[Optional[str], typer.Option("--name", "-n", help="Student name")] = None,
    student_class: Annotated[Optional[str], typer.Option("--class", "-k", help="Student class")] = None,
    message: Annotated[bool, typer.Option("--message", "-m", help="Print a confirmation message per slot.")] = False,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Book one or more slots - Supports Interactive and Batch mode.

    Examples:

        # Interactive mode
        makeupbooker book

        # Batch mode
        makeupbooker book 2024-03-04,14:00,A 2024-03-09,10:30,B --name Amy --class 1A
    """
    _, service = _load_service(config_file, verbose)

    console.print("\n" + "="*60)
    console.print("[bold cyan]🗓️  Make-up class booking[/bold cyan]")
    console.print("="*60 + "\n")

    if slot_tokens:
        for token in slot_tokens:
            try:
                date, time_slot_id, resource_id = _parse_slot_token(token)
            except ValueError as e:
                console.print(f"[bold red]Error:[/bold red] {e}")
                raise typer.Exit(1)
            _toggle(service, date, time_slot_id, resource_id)
    else:
        _run_interactive_wizard(service)

    if name is None:
        name = typer.prompt("→ Name", default="", show_default=False)
    if student_class is None:
        student_class = typer.prompt("→ Class", default="", show_default=False)

    _print_draft(service)

    try:
        booking = service.commit_draft(name, student_class)
    except BookingError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    console.print(f"[bold green]✓ Booking confirmed for {booking.name} ({booking.student_class})[/bold green]")

    if message:
        console.print()
        for text in asyncio.run(service.confirmation_messages(booking)):
            console.print(f"  {text}")
    console.print()


def _format_cell(cell: ScheduleCell) -> str:
    if not cell.applicable:
        return "[dim]-[/dim]"
    lines = []
    for resource in cell.resources:
        if resource.is_empty:
            lines.append(f"[dim]{resource.resource_id}: ·[/dim]")
        else:
            lines.append(f"{resource.resource_id}: [bold]{resource.occupant_name}[/bold] ({resource.occupant_class})")
    return "\n".join(lines)


@app.command()
def schedule(
    date: Annotated[Optional[str], typer.Argument(help="Any date of the week to show (YYYY-MM-DD). Defaults to today.")] = None,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Show the Monday - Saturday schedule of a week.
    """
    config, service = _load_service(config_file, verbose)

    anchor = _parse_date_or_exit(date) if date else pendulum.today(config.timezone).date()
    grid = service.get_week_schedule(anchor)

    table = Table(
        title=f"Schedule ({grid.start.to_date_string()} ~ {grid.end.to_date_string()})",
        show_header=True,
        header_style="bold cyan",
        show_lines=True
    )
    table.add_column("Time", style="bold")
    for day in grid.days:
        table.add_column(f"{weekday_label(day.date)}\n{day.date.format('MM/DD')}")

    for index, time_slot in enumerate(grid.time_slots):
        table.add_row(time_slot.label, *[_format_cell(day.cells[index]) for day in grid.days])

    console.print()
    console.print(table)
    console.print(f"\n{grid.booked_count()} booked slot(s) this week.\n")


@app.command()
def delete(
    date: Annotated[str, typer.Argument(help="Date of the slot (YYYY-MM-DD)")],
    time_slot_id: Annotated[str, typer.Argument(help="Time of the slot (e.g. 14:00)")],
    resource_id: Annotated[str, typer.Argument(help="Computer (A, B or C)")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip the confirmation prompt.")] = False,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Remove a booked slot from the schedule.
    """
    _, service = _load_service(config_file, verbose)
    slot_date = _parse_date_or_exit(date)
    resource_id = resource_id.upper()

    password = None
    if service.has_admin_password():
        password = typer.prompt("→ Admin password", hide_input=True)

    if not yes:
        typer.confirm(
            f"Delete {slot_date.to_date_string()} {time_slot_id} computer {resource_id}? This cannot be undone",
            abort=True
        )

    try:
        owner = service.delete_slot(slot_date, time_slot_id, resource_id, password=password)
    except BookingError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]✓ Removed slot of {owner.name} ({owner.student_class}).[/green]")


@app.command()
def set_password(
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Set the admin password required for deleting slots.
    """
    _, service = _load_service(config_file, verbose)

    if service.has_admin_password():
        current = typer.prompt("→ Current admin password", hide_input=True)
        if not service.verify_admin_password(current):
            console.print("[bold red]Error:[/bold red] Wrong admin password")
            raise typer.Exit(1)

    new_password = typer.prompt("→ New admin password", hide_input=True, confirmation_prompt=True)
    try:
        service.set_admin_password(new_password)
    except (ValueError, OSError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    console.print("[green]✓ Admin password updated.[/green]")


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]makeupbooker[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
