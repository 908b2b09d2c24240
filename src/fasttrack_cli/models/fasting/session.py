"""The active fast and its idle/fasting state machine."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from typing import Literal

from .clock import local_now, parse_timestamp
from .history import HistoryEntry

logger = logging.getLogger(__name__)

SessionStatus = Literal["idle", "fasting"]

DEFAULT_PLANNED_HOURS = 16

ScheduleAlert = Callable[[datetime], str | None]
CancelAlert = Callable[[str], None]


def _no_schedule(fire_at: datetime) -> str | None:
    return None


def _no_cancel(handle: str) -> None:
    return None


@dataclass
class FastingSession:
    """Represents the fast in progress."""

    start_time: str  # ISO 8601
    end_time: str  # ISO 8601, planned end; moved by extend
    planned_hours: float
    notification_handle: str | None = None

    @property
    def start_datetime(self) -> datetime:
        """Parse start time as datetime."""
        return parse_timestamp(self.start_time)

    @property
    def end_datetime(self) -> datetime:
        """Parse end time as datetime."""
        return parse_timestamp(self.end_time)

    def time_remaining(self, now: datetime | None = None) -> int:
        """Seconds until the planned end, never negative."""
        now = now or local_now()
        return max(0, int((self.end_datetime - now).total_seconds()))

    def time_elapsed(self, now: datetime | None = None) -> int:
        """Seconds since the fast started, never negative."""
        now = now or local_now()
        return max(0, int((now - self.start_datetime).total_seconds()))

    def is_overdue(self, now: datetime | None = None) -> bool:
        """True once the planned end has passed."""
        return self.time_remaining(now) == 0

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> FastingSession:
        """Create from dictionary."""
        return cls(**data)


class SessionStateMachine:
    """Owns the single active fast and its notification handle.

    Alerts go through the injected ``schedule_alert``/``cancel_alert``
    callables, which must not raise. The previous handle is always cancelled
    before a new one is scheduled, so at most one alert is outstanding.
    """

    def __init__(
        self,
        session: FastingSession | None = None,
        schedule_alert: ScheduleAlert = _no_schedule,
        cancel_alert: CancelAlert = _no_cancel,
        clock: Callable[[], datetime] = local_now,
    ):
        self.session = session
        self.clock = clock
        self._schedule_alert = schedule_alert
        self._cancel_alert = cancel_alert

    @property
    def status(self) -> SessionStatus:
        return "fasting" if self.session is not None else "idle"

    @property
    def is_fasting(self) -> bool:
        return self.session is not None

    def _release_handle(self) -> None:
        if self.session is not None and self.session.notification_handle:
            handle = self.session.notification_handle
            self.session.notification_handle = None
            self._cancel_alert(handle)

    def _rearm(self) -> None:
        assert self.session is not None
        self._release_handle()
        self.session.notification_handle = self._schedule_alert(
            self.session.end_datetime
        )

    def start(
        self, planned_hours: float, start_at: datetime | None = None
    ) -> FastingSession:
        """Begin a fast of *planned_hours* starting at *start_at* (default now).

        An unfinished fast is overwritten and discarded without being recorded.
        *start_at* is not validated; callers reject future start times.
        """
        start_at = start_at or self.clock()
        if self.session is not None:
            logger.warning(
                "Starting a new fast over an unfinished one started at %s; "
                "the unfinished fast is discarded",
                self.session.start_time,
            )
            self._release_handle()

        end_at = start_at + timedelta(hours=planned_hours)
        self.session = FastingSession(
            start_time=start_at.isoformat(),
            end_time=end_at.isoformat(),
            planned_hours=planned_hours,
        )
        self._rearm()
        return self.session

    def extend(self, delta_hours: float) -> FastingSession | None:
        """Move the planned end by *delta_hours*. No-op when idle.

        ``planned_hours`` keeps the value chosen at start.
        """
        if self.session is None:
            return None

        new_end = self.session.end_datetime + timedelta(hours=delta_hours)
        self.session.end_time = new_end.isoformat()
        self._rearm()
        return self.session

    def end(self, end_at: datetime | None = None) -> HistoryEntry | None:
        """Finish the fast at *end_at* (default now). No-op when idle."""
        if self.session is None:
            return None

        end_at = end_at or self.clock()
        entry = HistoryEntry.from_span(
            self.session.start_datetime,
            end_at,
            self.session.planned_hours,
            completed_at=self.clock(),
        )
        self._release_handle()
        self.session = None
        return entry

    def reset(self) -> None:
        """Drop any fast without recording it."""
        self._release_handle()
        self.session = None
