"""Durable key-value stores for the timer snapshot.

The timer treats its store as an opaque substrate holding one serialized blob per
key. ``JsonFileStore`` keeps one file per key in the data directory and replaces
it atomically so a crash mid-write never leaves a truncated snapshot behind.
"""

from __future__ import annotations

import os
import re
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path


class DurableStore(ABC):
    """Abstract blob store with get/set/delete of a single value per key."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored blob, or None if the key is absent."""

    @abstractmethod
    def set(self, key: str, blob: str) -> None:
        """Store *blob* under *key*, replacing any previous value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove *key*. Deleting an absent key is not an error."""


class MemoryStore(DurableStore):
    """Process-local store, used in tests and when no data dir is available."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, blob: str) -> None:
        self._data[key] = blob

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class JsonFileStore(DurableStore):
    """Store each key as ``<data_dir>/<key>.json``."""

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        """File backing *key* (``fasttrack@state_v2`` -> ``fasttrack_state_v2.json``)."""
        return self.data_dir / f"{_UNSAFE_CHARS.sub('_', key)}.json"

    def get(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, blob: str) -> None:
        path = self.path_for(key)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.data_dir, prefix=f".{path.stem}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(blob)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def delete(self, key: str) -> None:
        path = self.path_for(key)
        if path.exists():
            path.unlink()
