"""Tests for fasting statistics and daily totals."""

from __future__ import annotations

from datetime import date, datetime, timedelta

from fasttrack_cli.models.fasting.analytics import (
    MAX_HOURS_PER_DAY,
    DailyTotal,
    compute_daily_totals,
    compute_stats,
    split_span_by_day,
)
from fasttrack_cli.models.fasting.history import HistoryEntry
from fasttrack_cli.models.fasting.session import FastingSession

NOW = datetime(2026, 6, 10, 12, 0).astimezone()


def local(*args) -> datetime:
    return datetime(*args).astimezone()


def entry(start: datetime, end: datetime, planned: float = 16) -> HistoryEntry:
    return HistoryEntry.from_span(start, end, planned, end)


def entry_with_hours(actual: float) -> HistoryEntry:
    start = local(2026, 6, 1, 20, 0)
    return HistoryEntry(
        start=start.isoformat(),
        end=(start + timedelta(hours=actual)).isoformat(),
        planned_hours=16,
        actual_hours=actual,
        completed_at=start.isoformat(),
    )


def by_label(totals: list[DailyTotal]) -> dict[str, float]:
    return {t.label: t.hours for t in totals}


# ---------------------------------------------------------------------------
# compute_stats
# ---------------------------------------------------------------------------


class TestComputeStats:
    def test_empty_history(self):
        stats = compute_stats([])
        assert stats.to_dict() == {"total_fasts": 0, "longest_hours": 0, "average_hours": 0}

    def test_two_fasts(self):
        stats = compute_stats([entry_with_hours(10), entry_with_hours(20)])
        assert stats.total_fasts == 2
        assert stats.longest_hours == 20
        assert stats.average_hours == 15

    def test_average_rounded(self):
        stats = compute_stats(
            [entry_with_hours(16), entry_with_hours(16), entry_with_hours(17)]
        )
        assert stats.average_hours == 16.33

    def test_zero_hour_fasts_count(self):
        stats = compute_stats([entry_with_hours(0), entry_with_hours(12)])
        assert stats.total_fasts == 2
        assert stats.average_hours == 6


# ---------------------------------------------------------------------------
# split_span_by_day
# ---------------------------------------------------------------------------


class TestSplitSpanByDay:
    WINDOW = (local(2026, 6, 1), local(2026, 6, 11))

    def test_same_day(self):
        pieces = split_span_by_day(local(2026, 6, 5, 8), local(2026, 6, 5, 20), *self.WINDOW)
        assert pieces == [(date(2026, 6, 5), 12.0)]

    def test_crosses_midnight(self):
        pieces = split_span_by_day(local(2026, 6, 5, 22), local(2026, 6, 6, 2), *self.WINDOW)
        assert pieces == [(date(2026, 6, 5), 2.0), (date(2026, 6, 6), 2.0)]

    def test_multi_day_span(self):
        pieces = split_span_by_day(local(2026, 6, 5, 12), local(2026, 6, 7, 6), *self.WINDOW)
        assert pieces == [
            (date(2026, 6, 5), 12.0),
            (date(2026, 6, 6), 24.0),
            (date(2026, 6, 7), 6.0),
        ]

    def test_clipped_at_window_start(self):
        pieces = split_span_by_day(local(2026, 5, 31, 20), local(2026, 6, 1, 4), *self.WINDOW)
        assert pieces == [(date(2026, 6, 1), 4.0)]

    def test_outside_window(self):
        assert split_span_by_day(local(2026, 5, 1), local(2026, 5, 2), *self.WINDOW) == []

    def test_reversed_span_is_empty(self):
        assert split_span_by_day(local(2026, 6, 5, 8), local(2026, 6, 5, 4), *self.WINDOW) == []


# ---------------------------------------------------------------------------
# compute_daily_totals
# ---------------------------------------------------------------------------


class TestComputeDailyTotals:
    def test_non_positive_days_is_empty(self):
        history = [entry(local(2026, 6, 9, 8), local(2026, 6, 9, 20))]
        assert compute_daily_totals(history, None, 0, now=NOW) == []
        assert compute_daily_totals(history, None, -3, now=NOW) == []

    def test_series_shape_and_labels(self):
        totals = compute_daily_totals([], None, 14, now=NOW)
        assert len(totals) == 14
        assert totals[0].day == date(2026, 5, 28)
        assert totals[-1].day == date(2026, 6, 10)
        assert totals[-1].label == "06/10"
        assert all(t.hours == 0 for t in totals)

    def test_overnight_fast_split_between_days(self):
        history = [entry(local(2026, 6, 8, 22), local(2026, 6, 9, 2))]
        totals = by_label(compute_daily_totals(history, None, 3, now=NOW))
        assert totals == {"06/08": 2.0, "06/09": 2.0, "06/10": 0.0}

    def test_active_session_counts_until_now(self):
        session = FastingSession(
            start_time=local(2026, 6, 9, 20).isoformat(),
            end_time=local(2026, 6, 10, 12).isoformat(),
            planned_hours=16,
        )
        now = local(2026, 6, 10, 6)
        totals = by_label(compute_daily_totals([], session, 2, now=now))
        assert totals == {"06/09": 4.0, "06/10": 6.0}

    def test_active_session_past_its_end_keeps_counting(self):
        session = FastingSession(
            start_time=local(2026, 6, 10, 0).isoformat(),
            end_time=local(2026, 6, 10, 4).isoformat(),
            planned_hours=4,
        )
        totals = compute_daily_totals([], session, 1, now=NOW)
        assert totals[0].hours == 12.0

    def test_entries_before_window_ignored(self):
        history = [entry(local(2026, 5, 1, 8), local(2026, 5, 1, 20))]
        totals = compute_daily_totals(history, None, 7, now=NOW)
        assert sum(t.hours for t in totals) == 0

    def test_overlapping_fasts_clamped_to_a_day(self):
        history = [
            entry(local(2026, 6, 9, 0), local(2026, 6, 10, 0)),
            entry(local(2026, 6, 9, 6), local(2026, 6, 9, 18)),
        ]
        totals = by_label(compute_daily_totals(history, None, 2, now=NOW))
        assert totals["06/09"] == MAX_HOURS_PER_DAY

    def test_hours_rounded(self):
        history = [entry(local(2026, 6, 10, 1), local(2026, 6, 10, 1, 20))]
        totals = compute_daily_totals(history, None, 1, now=NOW)
        assert totals[0].hours == 0.33

    def test_to_dict(self):
        totals = compute_daily_totals([], None, 1, now=NOW)
        assert totals[0].to_dict() == {"date": "2026-06-10", "label": "06/10", "hours": 0.0}
