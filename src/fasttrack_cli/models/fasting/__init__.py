"""Fasting sessions: state machine, history, analytics and persistence schema."""

from .analytics import DailyTotal, FastingStats, compute_daily_totals, compute_stats
from .history import HistoryEntry, HistoryLedger
from .presets import FASTING_MODES, PRESET_HOURS, FastingMode, resolve_hours
from .session import FastingSession, SessionStateMachine
from .snapshot import Snapshot, decode_snapshot, encode_snapshot, migrate_snapshot

__all__ = [
    "DailyTotal",
    "FastingStats",
    "compute_daily_totals",
    "compute_stats",
    "HistoryEntry",
    "HistoryLedger",
    "FASTING_MODES",
    "PRESET_HOURS",
    "FastingMode",
    "resolve_hours",
    "FastingSession",
    "SessionStateMachine",
    "Snapshot",
    "decode_snapshot",
    "encode_snapshot",
    "migrate_snapshot",
]
