"""Adapters for the external collaborators of the timer.

- store: durable blob storage for the snapshot
- notifications: end-of-fast alert scheduling and desktop delivery
"""

from .notifications import (
    NotificationPayload,
    NotificationScheduler,
    NullNotificationScheduler,
    QueuedNotificationScheduler,
)
from .store import DurableStore, JsonFileStore, MemoryStore

__all__ = [
    "DurableStore",
    "JsonFileStore",
    "MemoryStore",
    "NotificationPayload",
    "NotificationScheduler",
    "NullNotificationScheduler",
    "QueuedNotificationScheduler",
]
