"""Fasting timer commands: start, extend, end, status, history, stats, chart."""

from datetime import datetime, timedelta

import typer
from rich.prompt import Confirm
from rich.table import Table

from fasttrack_cli.adapters.notifications import QueuedNotificationScheduler
from fasttrack_cli.models.fasting.presets import FASTING_MODES, PRESET_HOURS, resolve_hours
from fasttrack_cli.models.fasting.ui import (
    build_chart_table,
    build_history_table,
    build_stats_table,
    build_status_panel,
    format_end_time,
    format_hms,
    format_hours,
)
from fasttrack_cli.services.timer_service import FastingTimer, create_timer
from fasttrack_cli.ui.formatters import (
    format_error,
    format_info,
    format_output,
    format_success,
    format_warning,
)
from fasttrack_cli.utils.ui.console import get_console

console = get_console()
app = typer.Typer(help="Intermittent fasting timer")


def get_timer() -> FastingTimer:
    """Build the timer for the current configuration."""
    try:
        return create_timer()
    except RuntimeError as e:
        format_error(str(e))
        raise typer.Exit(1) from e


def parse_start_time(value: str, now: datetime) -> datetime:
    """
    Parse a ``--start`` value.

    ``HH:MM`` means the most recent such wall-clock time (today, or yesterday if
    that would be in the future). Anything else must be ISO 8601.

    Raises:
        ValueError: If the value cannot be parsed or lies in the future
    """
    text = value.strip()
    try:
        clock = datetime.strptime(text, "%H:%M")
    except ValueError:
        start = datetime.fromisoformat(text.replace("Z", "+00:00")).astimezone()
    else:
        start = now.replace(hour=clock.hour, minute=clock.minute, second=0, microsecond=0)
        if start > now:
            start -= timedelta(days=1)

    if start > now:
        raise ValueError("Start time cannot be in the future")
    return start


def _warn_on_failed_alerts(timer: FastingTimer) -> None:
    for result in timer.last_side_effects:
        if not result.ok and result.operation == "schedule alert":
            format_warning("Could not schedule the end-of-fast alert; the timer still runs.")
            return


@app.command("start")
def start_fast(
    window: str = typer.Argument(
        None, help="Hours (16, 13.5) or a mode (16:8, OMAD). Defaults to the last used"
    ),
    start: str = typer.Option(
        None, "--start", "-s", help="When the fast began (HH:MM or ISO 8601)"
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Replace an active fast without recording it"
    ),
):
    """Start a fast."""
    timer = get_timer()

    if timer.is_fasting and not force:
        format_error("A fast is already running")
        console.print(f"Started: {timer.start_time}")
        console.print(
            "\nUse 'fasttrack end' to record it or 'fasttrack start --force' to replace it."
        )
        raise typer.Exit(1)

    try:
        hours = resolve_hours(window) if window else None
        start_iso = parse_start_time(start, timer.clock()).isoformat() if start else None
    except ValueError as e:
        format_error(str(e))
        raise typer.Exit(1) from e

    session = timer.start_fast(hours, start_iso)

    console.print("\n[bold green]⏳ Fast started[/bold green]")
    console.print(f"Planned: {format_hours(session.planned_hours)}")
    console.print(f"Ends at: {format_end_time(session.end_datetime)}")
    _warn_on_failed_alerts(timer)


@app.command("extend")
def extend_fast(
    hours: float = typer.Argument(None, help="Hours to add (default from config)"),
):
    """Push the end of the active fast back."""
    if hours is not None and hours <= 0:
        format_error("Hours must be greater than zero")
        raise typer.Exit(1)

    timer = get_timer()
    session = timer.extend_fast(hours)
    if session is None:
        format_info("No active fast to extend")
        return

    added = hours if hours is not None else timer.extend_hours
    console.print(
        f"[green]+{format_hours(added)}[/green] - now ends "
        f"{format_end_time(session.end_datetime)}"
    )
    _warn_on_failed_alerts(timer)


@app.command("end")
def end_fast():
    """End the active fast and record it in history."""
    timer = get_timer()
    entry = timer.end_fast()
    if entry is None:
        format_info("No active fast to end")
        return

    console.print("\n[bold green]🎉 Fast complete[/bold green]")
    console.print(
        f"Fasted {format_hours(entry.actual_hours)} (planned {format_hours(entry.planned_hours)})"
    )


@app.command("status")
def show_status(
    output: str = typer.Option(None, "--output", "-o", help="Output format (json, yaml)"),
):
    """Show the active fast."""
    timer = get_timer()

    if output:
        format_output(
            {
                "is_fasting": timer.is_fasting,
                "start_time": timer.start_time,
                "end_time": timer.end_time,
                "duration_hours": timer.duration_hours,
                "remaining": format_hms(timer.remaining_seconds()),
                "elapsed": format_hms(timer.elapsed_seconds()),
            },
            output,
        )
        return

    console.print(build_status_panel(timer.current_session, timer.clock()))


@app.command("history")
def show_history(
    limit: int = typer.Option(20, "--limit", "-n", help="Number of fasts to show"),
    output: str = typer.Option(None, "--output", "-o", help="Output format (json, yaml)"),
):
    """List completed fasts, newest first."""
    timer = get_timer()
    entries = timer.history[:limit]

    if output:
        format_output([entry.to_dict() for entry in entries], output)
        return

    if not entries:
        console.print("[yellow]No past fasts yet.[/yellow]")
        return

    console.print(build_history_table(entries))


@app.command("stats")
def show_stats(
    output: str = typer.Option(None, "--output", "-o", help="Output format (json, yaml)"),
):
    """Show totals over completed fasts."""
    timer = get_timer()
    stats = timer.stats

    if output:
        format_output(stats.to_dict(), output)
        return

    console.print(build_stats_table(stats))


@app.command("chart")
def show_chart(
    days: int = typer.Option(None, "--days", "-d", help="Days to show (default from config)"),
    output: str = typer.Option(None, "--output", "-o", help="Output format (json, yaml)"),
):
    """Hours fasted per day, including the fast in progress."""
    timer = get_timer()
    totals = timer.get_daily_totals(days)

    if output:
        format_output([total.to_dict() for total in totals], output)
        return

    if not totals:
        console.print("[yellow]Nothing to show[/yellow]")
        return

    console.print(build_chart_table(totals))


@app.command("modes")
def list_modes():
    """List fasting modes and presets."""
    table = Table(title="Fasting modes", show_header=True)
    table.add_column("Mode", style="cyan")
    table.add_column("Fast", justify="right")
    table.add_column("Eat", justify="right")
    table.add_column("Description", style="dim")
    for mode in FASTING_MODES:
        table.add_row(
            mode.label,
            format_hours(mode.hours),
            format_hours(mode.eating_hours),
            mode.description,
        )
    console.print(table)
    presets = ", ".join(format_hours(h) for h in PRESET_HOURS)
    console.print(f"\nPresets: {presets}")


@app.command("notify")
def deliver_alerts():
    """Deliver end-of-fast alerts that are due (run from cron or a timer unit)."""
    timer = get_timer()
    scheduler = timer.scheduler
    if not isinstance(scheduler, QueuedNotificationScheduler):
        format_info("Notifications are disabled")
        return

    delivered = scheduler.deliver_due(timer.clock())
    if delivered:
        format_success(f"Delivered {len(delivered)} alert(s)")
    pending = scheduler.pending()
    if pending:
        console.print(f"[dim]{len(pending)} alert(s) pending[/dim]")


@app.command("clear-history")
def clear_history(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Delete all completed fasts (the active fast is kept)."""
    if not yes and not Confirm.ask("Clear all fasting history?", default=False):
        console.print("Cancelled")
        raise typer.Exit(0)

    timer = get_timer()
    timer.clear_history()
    format_success("History cleared")


@app.command("reset")
def reset_all(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Wipe the active fast, history and settings chosen at start."""
    if not yes and not Confirm.ask(
        "Reset everything? This deletes the active fast and all history.", default=False
    ):
        console.print("Cancelled")
        raise typer.Exit(0)

    timer = get_timer()
    timer.reset_all()
    format_success("All fasting data reset")
