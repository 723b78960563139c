"""Durable checkpoint, attempt counter and stats records.

All three sit on a small key/value store. The JSON-file store writes
synchronously and atomically, so a returned ``save`` means the value is on
disk.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

from .models import PlayerStats

logger = logging.getLogger(__name__)

CHECKPOINT_KEY = "checkpoint"
ATTEMPTS_KEY = "attempts"
STATS_KEY = "player_stats"


class KeyValueStore(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStore:
    """In-process store, mostly for tests."""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._data: dict[str, Any] = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore:
    """Key/value pairs kept in one JSON file."""

    def __init__(self, path: str | Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Unreadable store %s, starting empty: %s", self._path, exc)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Store %s does not hold an object, starting empty", self._path)
            return {}
        return raw

    def _write(self, data: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        tmp_path.replace(self._path)
        logger.debug("Saved store to %s", self._path)

    def get(self, key: str, default: Any = None) -> Any:
        return self._read().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def delete(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)


class CheckpointStore:
    """Last visited chapter id."""

    def __init__(self, store: KeyValueStore, key: str = CHECKPOINT_KEY):
        self._store = store
        self._key = key

    def save(self, chapter_id: int) -> bool:
        try:
            self._store.set(self._key, int(chapter_id))
        except OSError as exc:
            logger.error("Failed to save checkpoint %s: %s", chapter_id, exc)
            return False
        logger.debug("Checkpoint saved: chapter %d", chapter_id)
        return True

    def load(self) -> int | None:
        try:
            value = self._store.get(self._key)
        except OSError as exc:
            logger.warning("Failed to read checkpoint: %s", exc)
            return None
        if value is None or isinstance(value, bool):
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning("Ignoring malformed checkpoint value %r", value)
            return None

    def clear(self) -> None:
        self._store.delete(self._key)


class AttemptTracker:
    """How many times the story has been restarted."""

    def __init__(self, store: KeyValueStore, key: str = ATTEMPTS_KEY):
        self._store = store
        self._key = key
        self._unsaved: int | None = None

    def value(self) -> int:
        if self._unsaved is not None:
            return self._unsaved
        raw = self._store.get(self._key, 0)
        try:
            return max(0, int(raw))
        except (TypeError, ValueError):
            logger.warning("Ignoring malformed attempt count %r", raw)
            return 0

    def increment(self) -> int:
        count = self.value() + 1
        self._write(count)
        return count

    def reset(self) -> None:
        self._write(0)

    def _write(self, count: int) -> None:
        try:
            self._store.set(self._key, count)
        except OSError as exc:
            # Keep counting in memory until the store accepts writes again.
            self._unsaved = count
            logger.error("Failed to save attempt count %d: %s", count, exc)
            return
        self._unsaved = None


class StatsStore:
    """Persisted health/energy between runs."""

    def __init__(self, store: KeyValueStore, key: str = STATS_KEY):
        self._store = store
        self._key = key

    def save(self, stats: PlayerStats) -> bool:
        try:
            self._store.set(self._key, stats.to_dict())
        except OSError as exc:
            logger.error("Failed to save player stats: %s", exc)
            return False
        return True

    def load(self) -> PlayerStats | None:
        raw = self._store.get(self._key)
        if not isinstance(raw, dict):
            return None
        return PlayerStats.from_dict(raw)
