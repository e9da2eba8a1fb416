"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, List, NoReturn, Optional, Tuple

import pendulum
import typer
from pendulum import Date, DateTime
from rich.console import Console
from rich.table import Table

from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import BookingSlotsError
from ..domain.models import Slot
from ..engine import BookingEngine
from ..logging_config import configure_logging

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="bookingslots",
    help="Inspect bookable slots and staff assignment for booking links",
    add_completion=False,
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]
DataOption = Annotated[
    Optional[Path],
    typer.Option("--data", help="Fixture file with working hours, bookings and links."),
]
NowOption = Annotated[
    Optional[str],
    typer.Option("--now", help="Reference time (ISO 8601) for the advance notice check."),
]


def _load(config_file: Optional[Path], data_file: Optional[Path]) -> Tuple[AppConfig, BookingEngine]:
    """
    Load configuration and build an engine over the fixture data.
    """
    config_path = config_file or get_default_config_path()
    if config_file is None and data_file is not None and not config_path.exists():
        config = AppConfig()
        config_path = None
    else:
        config = AppConfig.load_from_yaml(config_path)

    configure_logging(config.log_level)

    fixture = data_file or config.resolve_data_file(config_path)
    logger.debug("Using fixture data from %s", fixture)
    return config, BookingEngine.from_fixture(fixture, config=config)


def _parse_day(value: str, config: AppConfig) -> Date:
    try:
        return pendulum.from_format(value, "YYYY-MM-DD", tz=config.tzinfo()).date()
    except ValueError as e:
        console.print(f"[red]Invalid date '{value}', expected YYYY-MM-DD: {e}[/red]")
        raise typer.Exit(1)


def _parse_instant(value: Optional[str], config: AppConfig) -> Optional[DateTime]:
    if value is None:
        return None
    try:
        parsed = pendulum.parse(value, tz=config.tzinfo())
    except ValueError as e:
        console.print(f"[red]Invalid timestamp '{value}': {e}[/red]")
        raise typer.Exit(1)
    if not isinstance(parsed, DateTime):
        console.print(f"[red]Invalid timestamp '{value}'[/red]")
        raise typer.Exit(1)
    return parsed


def _print_slots(slots: List[Slot], title: str) -> None:
    console.print()
    if not slots:
        console.print("[yellow]⚠ No bookable slots.[/yellow]\n")
        return

    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Start", style="bold")
    table.add_column("End")
    table.add_column("Host", style="dim")
    for slot in slots:
        table.add_row(
            slot.start.format("YYYY-MM-DD HH:mm"),
            slot.end.format("HH:mm"),
            slot.assigned_user or "-",
        )
    console.print(table)
    console.print()


def _fail(error: Exception) -> NoReturn:
    console.print(f"[bold red]Error:[/bold red] {error}")
    raise typer.Exit(1)


@app.command()
def slots(
    link_id: Annotated[str, typer.Argument(help="Booking link id")],
    day: Annotated[str, typer.Argument(help="Day (YYYY-MM-DD)")],
    config_file: ConfigOption = None,
    data_file: DataOption = None,
    now: NowOption = None,
):
    """
    Show the guest-facing slots of a booking link for one day.

    Examples:

        bookingslots slots link-1 2024-06-03
        bookingslots slots link-1 2024-06-03 --now 2024-06-03T09:30:00+09:00
    """
    try:
        config, engine = _load(config_file, data_file)
        result = asyncio.run(
            engine.merger.available_slots(
                link_id,
                _parse_day(day, config),
                now=_parse_instant(now, config),
            )
        )
    except (FileNotFoundError, ValueError, BookingSlotsError) as e:
        _fail(e)
    _print_slots(result, f"Slots for {link_id} on {day}")


@app.command()
def user_slots(
    user_id: Annotated[str, typer.Argument(help="Staff user id")],
    day: Annotated[str, typer.Argument(help="Day (YYYY-MM-DD)")],
    duration: Annotated[int, typer.Option("--duration", "-d", help="Slot duration in minutes")] = 60,
    buffer: Annotated[int, typer.Option("--buffer", help="Buffer in minutes")] = 0,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    Show the slots of a single staff member.
    """
    try:
        config, engine = _load(config_file, data_file)
        result = asyncio.run(
            engine.availability.generate_slots(user_id, _parse_day(day, config), duration, buffer)
        )
    except (FileNotFoundError, ValueError, BookingSlotsError) as e:
        _fail(e)
    _print_slots(result, f"Slots for {user_id} on {day}")


@app.command()
def assign(
    link_id: Annotated[str, typer.Argument(help="Booking link id")],
    start: Annotated[str, typer.Argument(help="Start time (ISO 8601)")],
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    Show which member would host a booking starting at START.
    """
    try:
        config, engine = _load(config_file, data_file)
        start_at = _parse_instant(start, config)

        async def _resolve():
            link = await engine.resolver.get_link(link_id)
            return await engine.resolver.resolve_for_link(link, start_at, link.duration)

        user_id = asyncio.run(_resolve())
    except (FileNotFoundError, ValueError, BookingSlotsError) as e:
        _fail(e)

    if user_id is None:
        console.print("\n[yellow]⚠ Nobody can take this slot.[/yellow]\n")
        raise typer.Exit(2)
    console.print(f"\n[green]✓ Assigned to[/green] [bold]{user_id}[/bold]\n")


@app.command()
def plan(
    link_id: Annotated[str, typer.Argument(help="Booking link id")],
    start: Annotated[str, typer.Argument(help="Start time (ISO 8601)")],
    config_file: ConfigOption = None,
    data_file: DataOption = None,
    now: NowOption = None,
):
    """
    Run the final validation a booking goes through before it is saved.
    """
    try:
        config, engine = _load(config_file, data_file)
        booking_plan = asyncio.run(
            engine.planner.plan_booking(
                link_id,
                _parse_instant(start, config),
                now=_parse_instant(now, config),
            )
        )
    except (FileNotFoundError, ValueError, BookingSlotsError) as e:
        _fail(e)

    console.print(
        f"\n[green]✓ Bookable[/green] {booking_plan.start.format('YYYY-MM-DD HH:mm')} - "
        f"{booking_plan.end.format('HH:mm')} with [bold]{booking_plan.user_id}[/bold]\n"
    )


@app.command()
def staff(
    user_id: Annotated[str, typer.Argument(help="Staff user id")],
    day: Annotated[str, typer.Argument(help="Day (YYYY-MM-DD)")],
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    Show whether a staff member works on a given day.
    """
    try:
        config, engine = _load(config_file, data_file)
        status = asyncio.run(engine.availability.staff_availability(user_id, _parse_day(day, config)))
    except (FileNotFoundError, ValueError, BookingSlotsError) as e:
        _fail(e)

    if status.is_available:
        window = status.window
        console.print(
            f"\n[green]✓ {user_id} works on {day}[/green] "
            f"({window.start_time.strftime('%H:%M')} - {window.end_time.strftime('%H:%M')})\n"
        )
    else:
        console.print(f"\n[yellow]⊘ {user_id} is unavailable on {day}:[/yellow] {status.reason}\n")


@app.command()
def stats(
    month: Annotated[str, typer.Argument(help="Month (YYYY-MM)")],
    user_ids: Annotated[List[str], typer.Argument(help="Staff user ids")],
    config_file: ConfigOption = None,
    data_file: DataOption = None,
):
    """
    Count non-cancelled bookings per staff member for a month.
    """
    try:
        config, engine = _load(config_file, data_file)
        counts = asyncio.run(
            engine.statistics.booking_stats(user_ids, _parse_day(f"{month}-01", config))
        )
    except (FileNotFoundError, ValueError, BookingSlotsError) as e:
        _fail(e)

    table = Table(title=f"Bookings in {month}", show_header=True, header_style="bold cyan")
    table.add_column("Staff", style="bold yellow")
    table.add_column("Bookings", justify="right")
    for user_id, count in counts.items():
        table.add_row(user_id, str(count))

    console.print()
    console.print(table)
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]bookingslots[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
