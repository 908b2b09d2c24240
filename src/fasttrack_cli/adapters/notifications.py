"""Local end-of-fast alerts.

A CLI process does not stay alive until a fast ends, so scheduled alerts are
queued in the durable store and delivered by ``fasttrack notify`` (run it from
cron or a systemd timer). Delivery goes through the desktop notifier:
``notify-send`` on Linux, ``osascript`` on macOS.
"""

from __future__ import annotations

import json
import logging
import platform
import shutil
import subprocess
import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import asdict, dataclass
from datetime import datetime

from .store import DurableStore

logger = logging.getLogger(__name__)

ALERTS_KEY = "fasttrack@alerts"


class NotificationUnavailableError(RuntimeError):
    """Raised when no desktop notifier exists on this platform."""


@dataclass(frozen=True)
class NotificationPayload:
    """Title and body of an alert."""

    title: str
    body: str


@dataclass(frozen=True)
class PendingAlert:
    """An alert waiting in the queue."""

    handle: str
    fire_at: str  # ISO 8601
    title: str
    body: str

    def __post_init__(self) -> None:
        if not isinstance(self.fire_at, str):
            raise TypeError(f"fire_at must be an ISO 8601 string, got {self.fire_at!r}")
        # Raises ValueError for an unparsable timestamp
        datetime.fromisoformat(self.fire_at.replace("Z", "+00:00"))

    @property
    def fire_datetime(self) -> datetime:
        return datetime.fromisoformat(self.fire_at.replace("Z", "+00:00")).astimezone()


class NotificationScheduler(ABC):
    """Schedules and cancels a single future alert per handle."""

    @abstractmethod
    def schedule(self, fire_at: datetime, payload: NotificationPayload) -> str | None:
        """Schedule an alert at *fire_at* and return its handle."""

    @abstractmethod
    def cancel(self, handle: str) -> None:
        """Cancel *handle*. Cancelling a fired or unknown handle is a no-op."""


class NullNotificationScheduler(NotificationScheduler):
    """Used when notifications are disabled in the configuration."""

    def schedule(self, fire_at: datetime, payload: NotificationPayload) -> str | None:
        return None

    def cancel(self, handle: str) -> None:
        return None


def send_desktop_notification(title: str, body: str) -> None:
    """Show a desktop notification.

    Raises:
        NotificationUnavailableError: If no notifier is installed
        subprocess.CalledProcessError: If the notifier exits non-zero
    """
    system = platform.system()
    if system == "Darwin" and shutil.which("osascript"):
        script = f"display notification {json.dumps(body)} with title {json.dumps(title)}"
        subprocess.run(
            ["osascript", "-e", script],
            check=True,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            timeout=10,
        )
        return
    if shutil.which("notify-send"):
        subprocess.run(
            ["notify-send", title, body],
            check=True,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            timeout=10,
        )
        return
    raise NotificationUnavailableError(f"No desktop notifier available on {system}")


class QueuedNotificationScheduler(NotificationScheduler):
    """Keeps pending alerts in a :class:`DurableStore` until they are due."""

    def __init__(
        self,
        store: DurableStore,
        notifier: Callable[[str, str], None] = send_desktop_notification,
    ):
        self.store = store
        self.notifier = notifier

    def _load(self) -> dict[str, PendingAlert]:
        raw = self.store.get(ALERTS_KEY)
        if not raw:
            return {}
        try:
            rows = json.loads(raw).get("alerts", {}).items()
        except (json.JSONDecodeError, AttributeError) as e:
            logger.warning("Discarding unreadable alert queue: %s", e)
            return {}

        alerts: dict[str, PendingAlert] = {}
        for handle, fields in rows:
            try:
                alert = PendingAlert(handle=handle, **fields)
            except (TypeError, ValueError) as e:
                logger.warning("Dropping malformed alert %s: %s", handle, e)
                continue
            alerts[handle] = alert
        return alerts

    def _save(self, alerts: dict[str, PendingAlert]) -> None:
        if not alerts:
            self.store.delete(ALERTS_KEY)
            return
        data = {
            "alerts": {
                handle: {k: v for k, v in asdict(alert).items() if k != "handle"}
                for handle, alert in alerts.items()
            }
        }
        self.store.set(ALERTS_KEY, json.dumps(data, indent=2, ensure_ascii=False))

    def schedule(self, fire_at: datetime, payload: NotificationPayload) -> str:
        alerts = self._load()
        handle = str(uuid.uuid4())
        alerts[handle] = PendingAlert(
            handle=handle,
            fire_at=fire_at.isoformat(),
            title=payload.title,
            body=payload.body,
        )
        self._save(alerts)
        logger.debug("Scheduled alert %s at %s", handle, fire_at.isoformat())
        return handle

    def cancel(self, handle: str) -> None:
        alerts = self._load()
        if alerts.pop(handle, None) is not None:
            self._save(alerts)
            logger.debug("Cancelled alert %s", handle)

    def pending(self) -> list[PendingAlert]:
        """Alerts still waiting, soonest first."""
        return sorted(self._load().values(), key=lambda a: a.fire_datetime)

    def deliver_due(self, now: datetime | None = None) -> list[PendingAlert]:
        """Send every alert whose fire time has passed and drop it from the queue.

        An alert whose delivery fails stays queued for the next run.
        """
        now = now or datetime.now().astimezone()
        alerts = self._load()
        delivered: list[PendingAlert] = []
        for alert in sorted(alerts.values(), key=lambda a: a.fire_datetime):
            if alert.fire_datetime > now:
                continue
            try:
                self.notifier(alert.title, alert.body)
            except (NotificationUnavailableError, OSError, subprocess.SubprocessError) as e:
                logger.warning("Could not deliver alert %s: %s", alert.handle, e)
                continue
            delivered.append(alert)
            del alerts[alert.handle]

        if delivered:
            self._save(alerts)
        return delivered
