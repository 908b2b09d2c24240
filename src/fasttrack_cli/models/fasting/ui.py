"""Terminal rendering for the fasting timer."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .analytics import DailyTotal, FastingStats
from .history import HistoryEntry
from .session import FastingSession


def format_hms(seconds: int) -> str:
    """Format seconds as ``HH:MM:SS`` (hours may exceed 99)."""
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    mins, secs = divmod(rest, 60)
    return f"{hours:02d}:{mins:02d}:{secs:02d}"


def format_clock(moment: datetime) -> str:
    """``6:05 PM`` style time without a leading zero."""
    hour = moment.hour % 12 or 12
    return f"{hour}:{moment:%M} {moment:%p}"


def format_end_time(moment: datetime) -> str:
    """``Mon, Jan 5 • 6:05 PM``."""
    return f"{moment:%a, %b} {moment.day} • {format_clock(moment)}"


def format_hours(hours: float) -> str:
    """``16h``, ``16.5h``, ``17.25h``."""
    return f"{round(hours, 2):g}h"


def render_bar(value: float, max_value: float, width: int = 20) -> str:
    """Render a horizontal bar using block characters."""
    if max_value <= 0:
        ratio = 0.0
    else:
        ratio = min(max(value / max_value, 0.0), 1.0)
    filled = int(round(ratio * width))
    return "█" * filled + "░" * (width - filled)


def history_lines(entry: HistoryEntry) -> tuple[str, str]:
    """Title and detail line for one completed fast.

    ``Jan 5 • 17.0h`` / ``8:00 PM → 1:00 PM (planned 16h)``
    """
    start = entry.start_datetime
    end = entry.end_datetime
    title = f"{start:%b} {start.day} • {format_hours(entry.actual_hours)}"
    detail = (
        f"{format_clock(start)} → {format_clock(end)} "
        f"(planned {format_hours(entry.planned_hours)})"
    )
    return title, detail


def build_status_panel(session: FastingSession | None, now: datetime) -> Panel:
    """Remaining/elapsed countdown for the active fast, or an idle hint."""
    if session is None:
        body = Text.assemble(
            ("Not fasting\n\n", "bold white"),
            ("Start one with ", "dim"),
            ("fasttrack start 16", "cyan"),
            (" or pick a mode from ", "dim"),
            ("fasttrack modes", "cyan"),
        )
        return Panel(body, title="⏳ FastTrack", border_style="dim")

    remaining = session.time_remaining(now)
    elapsed = session.time_elapsed(now)
    total = max(1, int((session.end_datetime - session.start_datetime).total_seconds()))

    if remaining == 0:
        timer_color = "green"
    elif remaining < 3600:
        timer_color = "yellow"
    else:
        timer_color = "cyan"

    progress_pct = min(100, int(elapsed / total * 100))

    grid = Table.grid(padding=(0, 2))
    grid.add_column(style="dim")
    grid.add_column()
    grid.add_row("Remaining", Text(format_hms(remaining), style=f"bold {timer_color}"))
    grid.add_row("Elapsed", Text(format_hms(elapsed), style="bold white"))
    grid.add_row("Planned", format_hours(session.planned_hours))
    grid.add_row("Ends at", format_end_time(session.end_datetime))

    bar = Text(f"{render_bar(elapsed, total, width=30)}  {progress_pct}%", style="dim")

    title = "🎉 Fast complete" if remaining == 0 else "⏳ Fasting"
    return Panel(Group(grid, Text(""), bar), title=title, border_style=timer_color)


def build_stats_table(stats: FastingStats) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Total", justify="right")
    table.add_column("Longest", justify="right")
    table.add_column("Average", justify="right")
    table.add_row(
        str(stats.total_fasts),
        format_hours(stats.longest_hours),
        format_hours(stats.average_hours),
    )
    return table


def build_history_table(entries: Sequence[HistoryEntry]) -> Table:
    table = Table(title=f"Past fasts ({len(entries)})", show_header=True)
    table.add_column("Fast", style="bold")
    table.add_column("Window", style="dim")
    for entry in entries:
        title, detail = history_lines(entry)
        table.add_row(title, detail)
    return table


def build_chart_table(totals: Sequence[DailyTotal], width: int = 24) -> Table:
    """Bar chart of hours fasted per day, scaled to the busiest day (min 24h)."""
    scale = max([24.0, *(t.hours for t in totals)])
    table = Table(title="Hours fasted per day", show_header=False, box=None)
    table.add_column("Day", style="cyan")
    table.add_column("Bar", style="blue")
    table.add_column("Hours", justify="right")
    for total in totals:
        table.add_row(total.label, render_bar(total.hours, scale, width), f"{total.hours:.1f}h")
    return table
