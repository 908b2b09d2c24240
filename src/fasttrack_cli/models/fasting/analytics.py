"""Statistics and per-day totals computed from fasting history."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from .clock import hours_between, local_now
from .history import HistoryEntry
from .session import FastingSession

MAX_HOURS_PER_DAY = 24.0


@dataclass(frozen=True)
class FastingStats:
    """Summary over completed fasts."""

    total_fasts: int
    longest_hours: float
    average_hours: float

    def to_dict(self) -> dict:
        return {
            "total_fasts": self.total_fasts,
            "longest_hours": self.longest_hours,
            "average_hours": self.average_hours,
        }


@dataclass(frozen=True)
class DailyTotal:
    """Hours fasted on one local calendar day."""

    day: date
    hours: float

    @property
    def label(self) -> str:
        return self.day.strftime("%m/%d")

    def to_dict(self) -> dict:
        return {"date": self.day.isoformat(), "label": self.label, "hours": self.hours}


def compute_stats(history: Iterable[HistoryEntry]) -> FastingStats:
    """
    Summarize completed fasts.

    The fast in progress is not part of *history* and never counts here.

    Returns:
        FastingStats with zeros for an empty history; longest and average
        rounded to 2 decimals
    """
    hours = [entry.actual_hours or 0 for entry in history]
    if not hours:
        return FastingStats(total_fasts=0, longest_hours=0, average_hours=0)

    return FastingStats(
        total_fasts=len(hours),
        longest_hours=round(max(hours), 2),
        average_hours=round(sum(hours) / len(hours), 2),
    )


def _local_midnight(day: date) -> datetime:
    """Aware local midnight that starts *day*."""
    return datetime.combine(day, time.min).astimezone()


def _next_midnight(moment: datetime) -> datetime:
    # From the calendar date, not +24h, so DST days still end at local midnight
    return _local_midnight(moment.date() + timedelta(days=1))


def split_span_by_day(
    start: datetime, end: datetime, window_start: datetime, window_end: datetime
) -> list[tuple[date, float]]:
    """
    Clip ``[start, end)`` to the window and split it at local midnights.

    Args:
        start: Span start (aware)
        end: Span end (aware)
        window_start: Inclusive window start, a local midnight
        window_end: Exclusive window end, a local midnight

    Returns:
        ``(day, hours)`` pairs in chronological order; empty if the span misses
        the window or has no positive length
    """
    cursor = max(start.astimezone(), window_start)
    stop = min(end.astimezone(), window_end)

    pieces: list[tuple[date, float]] = []
    while cursor < stop:
        segment_end = min(_next_midnight(cursor), stop)
        pieces.append((cursor.date(), hours_between(cursor, segment_end)))
        cursor = segment_end
    return pieces


def compute_daily_totals(
    history: Sequence[HistoryEntry],
    session: FastingSession | None,
    days: int,
    now: datetime | None = None,
) -> list[DailyTotal]:
    """
    Hours fasted per local day for the last *days* days, ending today.

    Completed fasts and, if one is running, the span from its start until *now*
    are clipped to the window and split at midnight, so a fast from 22:00 to
    02:00 adds 2h to each of the two days it touches.

    Args:
        history: Completed fasts
        session: Fast in progress, or None
        days: Number of days in the series (<= 0 gives an empty series)
        now: Reference time (defaults to the current local time)

    Returns:
        One DailyTotal per day, oldest first, hours rounded to 2 decimals and
        kept within [0, 24]
    """
    if days <= 0:
        return []

    now = (now or local_now()).astimezone()
    today = now.date()
    first_day = today - timedelta(days=days - 1)
    window_start = _local_midnight(first_day)
    window_end = _next_midnight(now)

    buckets: dict[date, float] = {first_day + timedelta(days=i): 0.0 for i in range(days)}

    spans: list[tuple[datetime, datetime]] = [
        (entry.start_datetime, entry.end_datetime) for entry in history
    ]
    if session is not None:
        spans.append((session.start_datetime, now))

    for start, end in spans:
        for day, hours in split_span_by_day(start, end, window_start, window_end):
            if day in buckets:
                buckets[day] += hours

    return [
        DailyTotal(day=day, hours=min(MAX_HOURS_PER_DAY, max(0.0, round(total, 2))))
        for day, total in buckets.items()
    ]
