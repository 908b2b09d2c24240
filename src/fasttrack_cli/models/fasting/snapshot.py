"""Persisted timer state and its schema migrations.

The snapshot is stored as one JSON blob. Field names are camelCase on disk so
snapshots written by earlier releases load unchanged:

- v1 (``fasttrack@state_v1``): no ``history``; ``durationHours``, ``notifId``
- v2 (``fasttrack@state_v2``): adds ``history`` and ``schemaVersion``;
  ``plannedHours``, ``notificationHandle``

``migrate_snapshot`` lifts any earlier shape to the current one. Anything that
still fails validation is treated as absent by ``decode_snapshot``.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .clock import parse_timestamp
from .history import HistoryEntry
from .session import DEFAULT_PLANNED_HOURS, FastingSession

logger = logging.getLogger(__name__)

STORAGE_KEY = "fasttrack@state_v2"
LEGACY_STORAGE_KEYS = ("fasttrack@state_v1",)

SCHEMA_VERSION = 2

_LEGACY_FIELDS = {
    "durationHours": "plannedHours",
    "notifId": "notificationHandle",
}


class HistoryRecord(BaseModel):
    """One completed fast as stored on disk."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    start: str
    end: str
    planned_hours: float = Field(alias="plannedHours", default=DEFAULT_PLANNED_HOURS)
    actual_hours: float = Field(alias="actualHours", default=0, ge=0)
    completed_at: str | None = Field(alias="completedAt", default=None)

    @model_validator(mode="after")
    def check_timestamps(self) -> HistoryRecord:
        parse_timestamp(self.start)
        parse_timestamp(self.end)
        if self.completed_at is not None:
            parse_timestamp(self.completed_at)
        return self

    def to_entry(self) -> HistoryEntry:
        return HistoryEntry(
            start=self.start,
            end=self.end,
            planned_hours=self.planned_hours,
            actual_hours=self.actual_hours,
            completed_at=self.completed_at or self.end,
        )

    @classmethod
    def from_entry(cls, entry: HistoryEntry) -> HistoryRecord:
        return cls(
            start=entry.start,
            end=entry.end,
            planned_hours=entry.planned_hours,
            actual_hours=entry.actual_hours,
            completed_at=entry.completed_at,
        )


class Snapshot(BaseModel):
    """The complete persisted state: active fast (if any) plus history."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    schema_version: int = Field(alias="schemaVersion", default=SCHEMA_VERSION)
    is_fasting: bool = Field(alias="isFasting", default=False)
    start_time: str | None = Field(alias="startTime", default=None)
    end_time: str | None = Field(alias="endTime", default=None)
    planned_hours: float = Field(alias="plannedHours", default=DEFAULT_PLANNED_HOURS)
    history: list[HistoryRecord] = Field(default_factory=list)
    notification_handle: str | None = Field(alias="notificationHandle", default=None)

    @model_validator(mode="after")
    def check_fasting_invariant(self) -> Snapshot:
        """``is_fasting`` iff both timestamps are set; idle carries no handle."""
        if self.is_fasting:
            if not (self.start_time and self.end_time):
                raise ValueError("isFasting requires startTime and endTime")
            parse_timestamp(self.start_time)
            parse_timestamp(self.end_time)
        elif self.start_time or self.end_time or self.notification_handle:
            raise ValueError("idle snapshot must not carry session fields")
        return self

    def to_session(self) -> FastingSession | None:
        if not self.is_fasting:
            return None
        return FastingSession(
            start_time=self.start_time,
            end_time=self.end_time,
            planned_hours=self.planned_hours,
            notification_handle=self.notification_handle,
        )

    def to_history(self) -> list[HistoryEntry]:
        return [record.to_entry() for record in self.history]

    @classmethod
    def capture(
        cls,
        session: FastingSession | None,
        history: list[HistoryEntry] | tuple[HistoryEntry, ...],
        planned_hours: float,
    ) -> Snapshot:
        """Build a snapshot of the given in-memory state."""
        records = [HistoryRecord.from_entry(entry) for entry in history]
        if session is None:
            return cls(is_fasting=False, planned_hours=planned_hours, history=records)
        return cls(
            is_fasting=True,
            start_time=session.start_time,
            end_time=session.end_time,
            planned_hours=session.planned_hours,
            history=records,
            notification_handle=session.notification_handle,
        )


def _migrate_history(items: Any) -> list[dict]:
    """Keep well-formed history rows, dropping the rest."""
    if not isinstance(items, list):
        return []

    kept = []
    for item in items:
        try:
            kept.append(HistoryRecord.model_validate(item).model_dump(by_alias=True))
        except ValidationError as e:
            logger.warning("Dropping malformed history entry: %s", e.errors()[0]["msg"])
    return kept


def migrate_snapshot(raw: Any) -> dict[str, Any]:
    """
    Upgrade a decoded snapshot of any earlier shape to the current schema.

    Missing fields get defaults, legacy names are renamed, a non-positive
    ``plannedHours`` is reset to the default, malformed history
    rows are dropped and a session missing either timestamp becomes idle.

    Raises:
        TypeError: If *raw* is not a JSON object
    """
    if not isinstance(raw, dict):
        raise TypeError(f"snapshot must be an object, got {type(raw).__name__}")

    data = dict(raw)
    for old, new in _LEGACY_FIELDS.items():
        if old in data:
            value = data.pop(old)
            data.setdefault(new, value)

    planned = data.get("plannedHours")
    if isinstance(planned, bool) or not isinstance(planned, (int, float)) or planned <= 0:
        data["plannedHours"] = DEFAULT_PLANNED_HOURS

    is_fasting = bool(data.get("isFasting")) and bool(
        data.get("startTime") and data.get("endTime")
    )
    data["isFasting"] = is_fasting
    if not is_fasting:
        data["startTime"] = None
        data["endTime"] = None
        data["notificationHandle"] = None

    data["history"] = _migrate_history(data.get("history", []))
    data["schemaVersion"] = SCHEMA_VERSION
    return data


def encode_snapshot(snapshot: Snapshot) -> str:
    """Serialize for the durable store."""
    return snapshot.model_dump_json(by_alias=True, indent=2)


def decode_snapshot(blob: str | None) -> Snapshot | None:
    """Parse and migrate a stored blob; None when absent, corrupt or mis-shaped."""
    if not blob:
        return None

    try:
        return Snapshot.model_validate(migrate_snapshot(json.loads(blob)))
    except (json.JSONDecodeError, TypeError, ValueError) as e:
        logger.warning("Ignoring unreadable snapshot: %s", e)
        return None
