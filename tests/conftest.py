"""Shared test fixtures and configuration.

Provides infrastructure to isolate tests from the real filesystem, the wall
clock and the desktop notifier.
"""

from __future__ import annotations

import time
from datetime import datetime, timedelta
from unittest.mock import patch

import pytest

from fasttrack_cli.adapters.notifications import NotificationPayload, NotificationScheduler
from fasttrack_cli.adapters.store import MemoryStore
from fasttrack_cli.services.timer_service import FastingTimer

# Mid-June keeps day-boundary tests clear of DST transitions.
BASE_TIME = datetime(2026, 6, 10, 12, 0, 0)


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now

    def set(self, now: datetime) -> None:
        self.now = now


class RecordingScheduler(NotificationScheduler):
    """Scheduler that records calls and can be told to fail or hang."""

    def __init__(self):
        self.active: dict[str, datetime] = {}
        self.scheduled: list[tuple[str, datetime, NotificationPayload]] = []
        self.cancelled: list[str] = []
        self.fail_schedule = False
        self.fail_cancel = False
        self.hang_seconds = 0.0
        self._counter = 0

    def schedule(self, fire_at: datetime, payload: NotificationPayload) -> str:
        if self.hang_seconds:
            time.sleep(self.hang_seconds)
        if self.fail_schedule:
            raise PermissionError("notifications not permitted")
        self._counter += 1
        handle = f"alert-{self._counter}"
        self.active[handle] = fire_at
        self.scheduled.append((handle, fire_at, payload))
        return handle

    def cancel(self, handle: str) -> None:
        if self.fail_cancel:
            raise RuntimeError("scheduler unavailable")
        self.cancelled.append(handle)
        self.active.pop(handle, None)


class BrokenStore(MemoryStore):
    """Store whose reads and/or writes raise."""

    def __init__(self, fail_get: bool = False, fail_set: bool = True, **kwargs):
        super().__init__(**kwargs)
        self.fail_get = fail_get
        self.fail_set = fail_set

    def get(self, key: str) -> str | None:
        if self.fail_get:
            raise OSError("store unavailable")
        return super().get(key)

    def set(self, key: str, blob: str) -> None:
        if self.fail_set:
            raise OSError("disk full")
        super().set(key, blob)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(BASE_TIME.astimezone())


@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def scheduler() -> RecordingScheduler:
    return RecordingScheduler()


@pytest.fixture()
def make_timer(store, scheduler, clock):
    """Factory building a FastingTimer over the shared fakes."""

    def _make(**kwargs) -> FastingTimer:
        kwargs.setdefault("notification_timeout", 1.0)
        return FastingTimer(
            kwargs.pop("store", store),
            kwargs.pop("scheduler", scheduler),
            clock=kwargs.pop("clock", clock),
            **kwargs,
        )

    return _make


@pytest.fixture()
def timer(make_timer) -> FastingTimer:
    return make_timer()


@pytest.fixture()
def tmp_config(tmp_path):
    """Provide a real ConfigService backed by a temporary directory.

    Patches platform dirs so config/data files land in *tmp_path* only.
    Also clears the lru_cache so each test gets a fresh service instance.
    """
    from fasttrack_cli.services.config_service import get_config_service

    config_dir = str(tmp_path / "config")
    data_dir = str(tmp_path / "data")
    get_config_service.cache_clear()
    with patch("fasttrack_cli.services.config_service.user_config_dir", return_value=config_dir):
        with patch("fasttrack_cli.services.config_service.user_data_dir", return_value=data_dir):
            from fasttrack_cli.services.config_service import ConfigService

            svc = ConfigService()
            yield svc
    get_config_service.cache_clear()


@pytest.fixture(autouse=True)
def isolate_log_dir(tmp_path):
    """Keep the application logger out of the real user log directory."""
    import logging

    import fasttrack_cli.utils.logger as logger_mod

    original = logger_mod._logger
    logger_mod._logger = None
    with patch("fasttrack_cli.utils.logger.user_log_dir", return_value=str(tmp_path / "logs")):
        yield
    for handler in logging.getLogger("fasttrack_cli").handlers:
        handler.close()
    logging.getLogger("fasttrack_cli").handlers.clear()
    logging.getLogger("fasttrack_cli").propagate = True
    logger_mod._logger = original


@pytest.fixture()
def broken_store() -> BrokenStore:
    """MemoryStore whose writes fail; set ``fail_get`` to break reads too."""
    return BrokenStore()
