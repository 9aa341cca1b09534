"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import pendulum
import typer
from pendulum import DateTime
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.in_memory_repository import InMemoryBookingRepository
from ..config import AppConfig, get_default_config_path
from ..domain.booking import BookedInterval
from ..domain.dates import DayOfWeek
from ..domain.exceptions import SchedulingError
from ..domain.occurrence import NextOccurrenceFinder
from ..domain.slot_calculator import OpenSlotCalculator
from ..services.booking_service import BookingService

app = typer.Typer(
    name="groomingslots",
    help="Check opening hours, open slots and booking conflicts of a grooming shop",
    add_completion=False,
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Show debug logging."),
]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config_path = config_file or get_default_config_path()
    try:
        return AppConfig.load_from_yaml(config_path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


def _load_repository(config: AppConfig) -> InMemoryBookingRepository:
    if config.bookings_file is None:
        return InMemoryBookingRepository()
    try:
        return InMemoryBookingRepository.load_from_json(
            config.bookings_file,
            lifecycle=config.build_lifecycle(),
        )
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


def _parse_instant(value: Optional[str], tz: str, label: str) -> DateTime:
    if value is None:
        return pendulum.now(tz)
    try:
        parsed = pendulum.parse(value, tz=tz)
    except ValueError as e:
        console.print(f"[red]Could not parse {label} '{value}': {e}[/red]")
        raise typer.Exit(1)
    if not isinstance(parsed, DateTime):
        console.print(f"[red]Could not parse {label} '{value}': expected a date and time[/red]")
        raise typer.Exit(1)
    return parsed


@app.command()
def is_open(
    when: Annotated[str, typer.Argument(help="Instant to check, e.g. '2024-12-03 10:30'")],
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Check whether the shop is open at a given instant.
    """
    _configure_logging(verbose)
    config = _load_config(config_file)
    instant = _parse_instant(when, config.timezone, "instant")

    finder = NextOccurrenceFinder(config.build_availability(), config.scheduling.horizon_days)

    if finder.is_available(instant):
        console.print(f"[green]✓ Open[/green] at {instant.format('dddd DD.MM.YYYY HH:mm')}")
    else:
        console.print(f"[yellow]✗ Closed[/yellow] at {instant.format('dddd DD.MM.YYYY HH:mm')}")


@app.command()
def next_open(
    from_: Annotated[Optional[str], typer.Option("--from", help="Search start (default: now)")] = None,
    horizon: Annotated[Optional[int], typer.Option("--horizon", help="Days to search ahead")] = None,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Show the next instant at which the shop opens.
    """
    _configure_logging(verbose)
    config = _load_config(config_file)
    start = _parse_instant(from_, config.timezone, "start")

    finder = NextOccurrenceFinder(config.build_availability(), config.scheduling.horizon_days)

    try:
        occurrence = finder.next_available(start, horizon_days=horizon)
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if occurrence is None:
        days = horizon or config.scheduling.horizon_days
        console.print(f"[yellow]⚠ No opening found within {days} day(s).[/yellow]")
        return

    console.print(f"Next opening: [bold]{occurrence.format('dddd DD.MM.YYYY HH:mm')}[/bold]")


@app.command()
def slots(
    start: Annotated[Optional[str], typer.Option("--start", help="Start date (YYYY-MM-DD)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="End date (YYYY-MM-DD)")] = None,
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Minimum slot length in minutes")] = None,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    List the open slots of a date range, taking existing bookings into account.
    """
    _configure_logging(verbose)
    config = _load_config(config_file)
    tz = config.timezone

    try:
        start_date = (
            pendulum.from_format(start, "YYYY-MM-DD", tz=tz).start_of("day")
            if start else pendulum.now(tz).start_of("day")
        )
        end_date = (
            pendulum.from_format(end, "YYYY-MM-DD", tz=tz).end_of("day")
            if end else start_date.add(days=7).end_of("day")
        )
    except ValueError as e:
        console.print(f"[red]Could not parse date: {e}[/red]")
        raise typer.Exit(1)

    min_duration = duration if duration is not None else config.scheduling.default_duration_minutes
    repository = _load_repository(config)

    calculator = OpenSlotCalculator(
        config.build_availability(),
        conflict_detector=config.build_conflict_detector(),
    )
    open_slots = calculator.find_open_slots(
        start_date=start_date,
        end_date=end_date,
        bookings=repository.find_between(start_date, end_date),
        min_duration_minutes=min_duration,
    )

    console.print()
    if not open_slots:
        console.print(
            "[yellow]⚠ No open slots found.[/yellow]\n"
            "Try a longer date range or a shorter minimum duration."
        )
        return

    console.print(f"[bold green]✓ {len(open_slots)} open slot(s) found:[/bold green]\n")
    for slot in open_slots:
        console.print(f"  {slot.format_display()}")
    console.print()


@app.command()
def check(
    when: Annotated[str, typer.Argument(help="Requested start, e.g. '2024-12-03 10:30'")],
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Booking length in minutes")] = None,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Check a requested booking against opening hours and existing bookings.
    """
    _configure_logging(verbose)
    config = _load_config(config_file)
    start = _parse_instant(when, config.timezone, "start")
    minutes = duration if duration is not None else config.scheduling.default_duration_minutes

    try:
        candidate = BookedInterval.create_from_duration(start, minutes)
    except SchedulingError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    availability = config.build_availability()
    if not (availability.includes_instant(candidate.start) and availability.includes_instant(candidate.end)):
        console.print(f"[yellow]⚠ The shop is closed during {candidate}.[/yellow]")

    service = BookingService(
        _load_repository(config),
        conflict_detector=config.build_conflict_detector(),
        lifecycle=config.build_lifecycle(),
    )
    conflicts = service.find_conflicts(candidate)

    if not conflicts:
        console.print(f"[green]✓ {candidate} is free.[/green]")
        return

    table = Table(
        title=f"Conflicts for {candidate}",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Booking", style="bold yellow")
    table.add_column("Interval")
    table.add_column("Status", style="dim")
    table.add_column("Pet", style="dim")

    for booking in conflicts:
        table.add_row(booking.id, str(booking.interval), booking.status.value, booking.pet_id)

    console.print()
    console.print(table)
    console.print()
    raise typer.Exit(2)


@app.command()
def hours(
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    List the configured opening hours and closed dates.
    """
    _configure_logging(verbose)
    config = _load_config(config_file)
    availability = config.build_availability()

    table = Table(
        title=f"Opening hours - {config.shop_name}",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Day", style="bold yellow")
    table.add_column("Hours")

    for day in availability.weekly.get_days_of_week():
        windows = sorted(availability.weekly.windows_for_day(day), key=lambda w: w.start_minute)
        table.add_row(
            DayOfWeek(day).name.title(),
            ", ".join(f"{w.start_time}-{w.end_time}" for w in windows),
        )

    console.print()
    console.print(table)

    if availability.exceptions:
        console.print("\n[bold]Closed on:[/bold]")
        for closed in availability.exceptions:
            console.print(f"  {closed.isoformat()}")
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]groomingslots[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
