"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import Optional, Annotated

import pendulum
import typer
from rich.console import Console
from rich.table import Table

from ..config import AppConfig, get_default_config_path
from ..adapters.mock_record_store import MockRecordStore
from ..adapters.record_store import RecordStoreClient
from ..domain.date_resolver import friendly_date
from ..domain.exceptions import AgendaError
from ..domain.locale_pt import weekday_short_name
from ..services.availability import AvailabilityService
from ..services.replies import describe_error

app = typer.Typer(
    name="agendafinder",
    help="Resolve Portuguese date expressions and list bookable slots",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
MockOption = Annotated[bool, typer.Option("--mock", help="Use the bundled sample data instead of the record store.")]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output.")]
TodayOption = Annotated[Optional[str], typer.Option("--today", help="Pretend today is this date (YYYY-MM-DD).")]


def _load_config(config_file: Optional[Path], mock: bool) -> AppConfig:
    config_path = config_file or get_default_config_path()
    if mock and not config_path.exists():
        return AppConfig()
    return AppConfig.load_from_yaml(config_path)


def _configure_logging(config: AppConfig, verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, config.log_level)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _build_service(config_file: Optional[Path], mock: bool, verbose: bool) -> AvailabilityService:
    config = _load_config(config_file, mock)
    _configure_logging(config, verbose)

    if mock:
        console.print("[yellow]⚠  Mock mode: using sample data[/yellow]\n")
        store = MockRecordStore.from_json()
    else:
        if not config.record_store.url:
            console.print("[bold red]Error:[/bold red] record_store.url is not configured.")
            raise typer.Exit(1)
        store = RecordStoreClient(
            base_url=config.record_store.url,
            api_key=config.record_store.resolved_api_key(),
            timeout=config.record_store.timeout_seconds,
        )

    return AvailabilityService.from_config(store, config)


def _now(service: AvailabilityService, today: Optional[str]):
    if not today:
        return service.now()
    try:
        return pendulum.from_format(today, "YYYY-MM-DD", tz=service.timezone).set(hour=8)
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] invalid --today value: {e}")
        raise typer.Exit(1)


def _fail(exc: Exception) -> None:
    if isinstance(exc, AgendaError):
        console.print(f"[bold red]✗[/bold red] {describe_error(exc)}")
        console.print(f"[dim]{exc}[/dim]")
    else:
        console.print(f"[bold red]Error:[/bold red] {exc}")
    raise typer.Exit(1)


@app.command()
def resolve(
    expression: Annotated[str, typer.Argument(help="Date expression, e.g. 'próxima segunda' or 'dia 15 de março'")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
    today: TodayOption = None,
):
    """
    Resolve a Portuguese date expression to a calendar date.

    Examples:

        agendafinder resolve amanhã --mock
        agendafinder resolve "segunda-feira, 05/08/2024" --mock
    """
    try:
        service = _build_service(config_file, mock, verbose)
        resolved = service.resolve_date_expression(expression, _now(service, today))
    except (AgendaError, FileNotFoundError, ValueError) as e:
        _fail(e)

    console.print(f"[bold green]✓[/bold green] {friendly_date(resolved.date)}  [dim]({resolved.iso_date})[/dim]")


@app.command()
def slots(
    attendant_id: Annotated[str, typer.Argument(help="Attendant id")],
    date: Annotated[str, typer.Argument(help="Date or date expression")],
    service_id: Annotated[Optional[str], typer.Option("--service", "-s", help="Service id (sets the slot duration)")] = None,
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Slot duration in minutes")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
    today: TodayOption = None,
):
    """
    List the bookable slots of an attendant on a date.

    Examples:

        agendafinder slots att-ana amanhã --mock
        agendafinder slots att-bruno "próxima terça" --service srv-barba --mock
    """
    try:
        service = _build_service(config_file, mock, verbose)
        result = service.available_slots(
            attendant_id, date, service_id=service_id, service_duration=duration, now=_now(service, today)
        )
    except (AgendaError, FileNotFoundError, ValueError) as e:
        _fail(e)

    console.print(
        f"[bold cyan]{result.attendant.name}[/bold cyan] - {friendly_date(result.date.date)} "
        f"({result.service_duration} min)\n"
    )
    if not result.slots:
        console.print("[yellow]⚠ No available slots.[/yellow]")
        return

    console.print(f"[bold green]✓ {len(result.slots)} slot(s):[/bold green]")
    for slot in result.slots:
        console.print(f"  {slot.label}")


@app.command()
def calendar(
    attendant_id: Annotated[str, typer.Argument(help="Attendant id")],
    start: Annotated[str, typer.Option("--start", help="First day (date or expression)")] = "hoje",
    end: Annotated[Optional[str], typer.Option("--end", help="Last day (date or expression). Defaults to start + 13 days")] = None,
    service_id: Annotated[Optional[str], typer.Option("--service", "-s", help="Service id (sets the slot duration)")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
    today: TodayOption = None,
):
    """
    Show a day-by-day availability summary.

    Examples:

        agendafinder calendar att-ana --mock
        agendafinder calendar att-ana --start 2024-06-10 --end 2024-06-20 --mock
    """
    try:
        service = _build_service(config_file, mock, verbose)
        now = _now(service, today)
        start_date = service.resolve_date_expression(start, now).date
        end_date = service.resolve_date_expression(end, now).date if end else start_date.add(days=13)
        result = service.calendar(attendant_id, start_date, end_date, service_id=service_id, now=now)
    except (AgendaError, FileNotFoundError, ValueError) as e:
        _fail(e)

    table = Table(
        title=f"Availability - {result.attendant.name}",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Date", style="bold")
    table.add_column("Day")
    table.add_column("Slots", justify="right")

    for day in result.days:
        count = f"[green]{day.slot_count}[/green]" if day.has_availability else "[dim]0[/dim]"
        table.add_row(day.date.strftime("%d/%m/%Y"), day.weekday, count)

    console.print()
    console.print(table)
    console.print()


@app.command()
def attendants(
    config_file: ConfigOption = None,
    mock: MockOption = False,
    verbose: VerboseOption = False,
):
    """
    List all attendants and their work days.
    """
    try:
        service = _build_service(config_file, mock, verbose)
        rows = service.records.attendants()
    except (AgendaError, FileNotFoundError, ValueError) as e:
        _fail(e)

    if not rows:
        console.print("[yellow]No attendants found.[/yellow]")
        return

    table = Table(title="Attendants", show_header=True, header_style="bold cyan")
    table.add_column("Id", style="dim")
    table.add_column("Name", style="bold yellow")
    table.add_column("Work days")
    table.add_column("Active")

    for attendant in rows:
        days = ", ".join(weekday_short_name(d) for d in sorted(attendant.work_days)) or "-"
        table.add_row(attendant.id, attendant.name, days, "yes" if attendant.active else "no")

    console.print()
    console.print(table)
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]agendafinder[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
