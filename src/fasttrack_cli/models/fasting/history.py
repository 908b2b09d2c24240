"""Completed-fast history kept newest-first."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import asdict, dataclass
from datetime import datetime

from .clock import hours_between, local_now, parse_timestamp


@dataclass(frozen=True)
class HistoryEntry:
    """A completed fast. Never mutated once recorded."""

    start: str  # ISO 8601
    end: str  # ISO 8601
    planned_hours: float
    actual_hours: float
    completed_at: str  # ISO 8601

    @property
    def start_datetime(self) -> datetime:
        return parse_timestamp(self.start)

    @property
    def end_datetime(self) -> datetime:
        return parse_timestamp(self.end)

    @property
    def completed_datetime(self) -> datetime:
        return parse_timestamp(self.completed_at)

    @classmethod
    def from_span(
        cls,
        start: datetime,
        end: datetime,
        planned_hours: float,
        completed_at: datetime | None = None,
    ) -> HistoryEntry:
        """Build an entry for the fast that ran from *start* to *end*.

        ``actual_hours`` is rounded to 2 decimals and never negative, even if
        *end* precedes *start*.
        """
        actual = max(0.0, round(hours_between(start, end), 2))
        return cls(
            start=start.isoformat(),
            end=end.isoformat(),
            planned_hours=planned_hours,
            actual_hours=actual,
            completed_at=(completed_at or local_now()).isoformat(),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> HistoryEntry:
        """Create from dictionary."""
        return cls(**data)


class HistoryLedger:
    """Append-only list of completed fasts, newest first."""

    def __init__(self, entries: Iterable[HistoryEntry] = ()):
        self._entries: list[HistoryEntry] = list(entries)

    def record(self, entry: HistoryEntry) -> None:
        """Prepend *entry*."""
        self._entries.insert(0, entry)

    def clear(self) -> None:
        self._entries.clear()

    @property
    def entries(self) -> tuple[HistoryEntry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(tuple(self._entries))

    def __bool__(self) -> bool:
        return bool(self._entries)
