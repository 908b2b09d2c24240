"""Fasting timer service - the single entry point used by the CLI.

``FastingTimer`` composes the session state machine, the history ledger and the
analytics functions behind start/extend/end/reset operations and read-only
views. After every mutation it writes a full snapshot to the durable store.
Store and scheduler calls are best-effort: failures are logged, recorded in
``last_side_effects`` and never undo an in-memory transition.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import datetime

from fasttrack_cli.adapters.notifications import (
    NotificationPayload,
    NotificationScheduler,
    NullNotificationScheduler,
    QueuedNotificationScheduler,
)
from fasttrack_cli.adapters.store import DurableStore, JsonFileStore
from fasttrack_cli.models.fasting.analytics import (
    DailyTotal,
    FastingStats,
    compute_daily_totals,
    compute_stats,
)
from fasttrack_cli.models.fasting.clock import local_now, parse_timestamp
from fasttrack_cli.models.fasting.history import HistoryEntry, HistoryLedger
from fasttrack_cli.models.fasting.session import (
    DEFAULT_PLANNED_HOURS,
    FastingSession,
    SessionStateMachine,
)
from fasttrack_cli.models.fasting.snapshot import (
    LEGACY_STORAGE_KEYS,
    STORAGE_KEY,
    Snapshot,
    decode_snapshot,
    encode_snapshot,
)

from .config_service import ConfigService, get_config_service
from .side_effects import Failed, SideEffectResult, attempt, attempt_with_timeout

logger = logging.getLogger(__name__)

DEFAULT_PAYLOAD = NotificationPayload(
    title="Fast complete 🎉", body="Time to re-fuel mindfully."
)


class FastingTimer:
    """Intermittent-fasting timer with history and statistics."""

    def __init__(
        self,
        store: DurableStore,
        scheduler: NotificationScheduler | None = None,
        *,
        default_hours: float = DEFAULT_PLANNED_HOURS,
        extend_hours: float = 1,
        chart_days: int = 14,
        notification_timeout: float = 5.0,
        payload: NotificationPayload = DEFAULT_PAYLOAD,
        clock: Callable[[], datetime] = local_now,
    ):
        self.store = store
        self.scheduler = scheduler or NullNotificationScheduler()
        self.default_hours = default_hours
        self.extend_hours = extend_hours
        self.chart_days = chart_days
        self.notification_timeout = notification_timeout
        self.payload = payload
        self.clock = clock

        self.last_side_effects: list[SideEffectResult] = []
        self._lock = threading.RLock()
        self._machine = SessionStateMachine(
            schedule_alert=self._schedule_alert,
            cancel_alert=self._cancel_alert,
            clock=clock,
        )
        self._ledger = HistoryLedger()
        self._duration_hours = default_hours

        self._load()

    # ------------------------------------------------------------------
    # Side effects
    # ------------------------------------------------------------------

    def _track(self, result: SideEffectResult) -> SideEffectResult:
        self.last_side_effects.append(result)
        return result

    def _schedule_alert(self, fire_at: datetime) -> str | None:
        result = self._track(
            attempt_with_timeout(
                "schedule alert",
                self.notification_timeout,
                self.scheduler.schedule,
                fire_at,
                self.payload,
                on_late_result=self._cancel_late_alert,
            )
        )
        if isinstance(result, Failed):
            return None
        return result.value

    def _cancel_late_alert(self, handle: str | None) -> None:
        # Handle from a schedule call that finished after its timeout
        if handle:
            self.scheduler.cancel(handle)

    def _cancel_alert(self, handle: str) -> None:
        self._track(
            attempt_with_timeout(
                "cancel alert", self.notification_timeout, self.scheduler.cancel, handle
            )
        )

    def _read_snapshot(self) -> Snapshot | None:
        for key in (STORAGE_KEY, *LEGACY_STORAGE_KEYS):
            blob = self.store.get(key)
            if blob:
                if key != STORAGE_KEY:
                    logger.info("Migrating snapshot stored under %s", key)
                return decode_snapshot(blob)
        return None

    def _load(self) -> None:
        result = self._track(attempt("load snapshot", self._read_snapshot))
        snapshot = None if isinstance(result, Failed) else result.value
        if snapshot is None:
            return

        self._machine.session = snapshot.to_session()
        self._ledger = HistoryLedger(snapshot.to_history())
        self._duration_hours = snapshot.planned_hours
        logger.debug(
            "Loaded snapshot: fasting=%s, %d history entries",
            snapshot.is_fasting,
            len(self._ledger),
        )

    def _write_snapshot(self) -> None:
        snapshot = Snapshot.capture(
            self._machine.session, self._ledger.entries, self._duration_hours
        )
        self.store.set(STORAGE_KEY, encode_snapshot(snapshot))

    def _save(self) -> SideEffectResult:
        return self._track(attempt("save snapshot", self._write_snapshot))

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def start_fast(
        self, hours: float | None = None, start_iso: str | None = None
    ) -> FastingSession:
        """
        Start a fast, overwriting (and discarding) any unfinished one.

        Args:
            hours: Planned duration (defaults to the last chosen duration)
            start_iso: ISO 8601 start time (defaults to now); not validated

        Raises:
            ValueError: If *start_iso* is not a valid timestamp
        """
        if hours is None:
            hours = self._duration_hours
        start_at = parse_timestamp(start_iso) if start_iso else self.clock()

        with self._lock:
            self.last_side_effects = []
            session = self._machine.start(hours, start_at)
            self._duration_hours = hours
            self._save()
            logger.info(
                "Started %sh fast at %s, ends %s",
                hours,
                session.start_time,
                session.end_time,
            )
            return session

    def extend_fast(self, hours: float | None = None) -> FastingSession | None:
        """Push the planned end back by *hours*. Returns None when idle."""
        if hours is None:
            hours = self.extend_hours

        with self._lock:
            self.last_side_effects = []
            session = self._machine.extend(hours)
            if session is None:
                logger.debug("extend ignored: no active fast")
                return None
            self._save()
            logger.info("Extended fast by %sh, now ends %s", hours, session.end_time)
            return session

    def end_fast(self) -> HistoryEntry | None:
        """Finish the active fast and record it. Returns None when idle."""
        with self._lock:
            self.last_side_effects = []
            entry = self._machine.end(self.clock())
            if entry is None:
                logger.debug("end ignored: no active fast")
                return None
            self._ledger.record(entry)
            self._save()
            logger.info(
                "Ended fast: %sh actual, %sh planned",
                entry.actual_hours,
                entry.planned_hours,
            )
            return entry

    def reset_all(self) -> None:
        """Wipe the active fast, the history and the chosen duration."""
        with self._lock:
            self.last_side_effects = []
            self._machine.reset()
            self._ledger.clear()
            self._duration_hours = self.default_hours
            for key in LEGACY_STORAGE_KEYS:
                self._track(attempt("delete snapshot", self.store.delete, key))
            self._save()
            logger.info("Reset all fasting data")

    def clear_history(self) -> None:
        """Forget completed fasts, keeping any active one."""
        with self._lock:
            self.last_side_effects = []
            self._ledger.clear()
            self._save()
            logger.info("Cleared fasting history")

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def is_fasting(self) -> bool:
        return self._machine.is_fasting

    @property
    def current_session(self) -> FastingSession | None:
        return self._machine.session

    @property
    def start_time(self) -> str | None:
        session = self._machine.session
        return session.start_time if session else None

    @property
    def end_time(self) -> str | None:
        session = self._machine.session
        return session.end_time if session else None

    @property
    def duration_hours(self) -> float:
        """Planned hours of the active fast, or the last chosen duration."""
        session = self._machine.session
        return session.planned_hours if session else self._duration_hours

    @property
    def history(self) -> tuple[HistoryEntry, ...]:
        return self._ledger.entries

    @property
    def stats(self) -> FastingStats:
        return compute_stats(self._ledger.entries)

    def get_daily_totals(self, days: int | None = None) -> list[DailyTotal]:
        """Hours fasted per day for the last *days* days (default: configured)."""
        if days is None:
            days = self.chart_days
        return compute_daily_totals(
            self._ledger.entries, self._machine.session, days, now=self.clock()
        )

    def remaining_seconds(self) -> int:
        session = self._machine.session
        return session.time_remaining(self.clock()) if session else 0

    def elapsed_seconds(self) -> int:
        session = self._machine.session
        return session.time_elapsed(self.clock()) if session else 0


def create_timer(config_service: ConfigService | None = None) -> FastingTimer:
    """Build a FastingTimer wired to the configured data dir and notifier."""
    config_service = config_service or get_config_service()
    config = config_service.config
    store = JsonFileStore(config_service.data_dir)

    scheduler: NotificationScheduler
    if config.notifications.enabled:
        scheduler = QueuedNotificationScheduler(store)
    else:
        scheduler = NullNotificationScheduler()

    return FastingTimer(
        store,
        scheduler,
        default_hours=config.fasting.default_hours,
        extend_hours=config.fasting.extend_hours,
        chart_days=config.fasting.chart_days,
        notification_timeout=config.notifications.timeout_seconds,
        payload=NotificationPayload(
            title=config.notifications.title, body=config.notifications.body
        ),
    )
