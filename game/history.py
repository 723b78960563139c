"""Journey history: an append-only record of what happened on the walk.

The story engine's live state (checkpoint, attempts, stats) lives in a JSON
file. Everything else worth remembering (decisions taken, resets, energy
conversions, daily step counts, achievement unlocks) goes here.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import aiosqlite

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS decisions (
    id TEXT PRIMARY KEY,
    attempt INTEGER,
    from_chapter INTEGER,
    to_chapter INTEGER,
    decision_text TEXT,
    outcome TEXT,             -- "advanced" | "died" | "story_not_found" | ...
    health INTEGER,
    energy INTEGER,
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS resets (
    id TEXT PRIMARY KEY,
    attempt INTEGER,
    from_chapter INTEGER,
    stats_restored INTEGER,
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS energy_conversions (
    id TEXT PRIMARY KEY,
    steps INTEGER,
    steps_goal INTEGER,
    energy_earned INTEGER,
    energy_after INTEGER,
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS daily_steps (
    date TEXT PRIMARY KEY,    -- YYYY-MM-DD
    steps INTEGER,
    distance_miles REAL,
    updated_at TEXT
);

CREATE TABLE IF NOT EXISTS achievements (
    key TEXT PRIMARY KEY,     -- "<category>:<threshold>"
    title TEXT,
    date_earned TEXT,
    recorded_at TEXT
);
"""


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class JourneyDB:
    """Async SQLite history of a player's journey."""

    def __init__(self, db_path: str | Path):
        self._path = Path(db_path)
        self._db: aiosqlite.Connection | None = None

    async def open(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._db = await aiosqlite.connect(str(self._path))
        await self._db.executescript(_SCHEMA)
        await self._db.commit()
        logger.debug("Journey DB ready at %s", self._path)

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None

    async def __aenter__(self) -> JourneyDB:
        await self.open()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def _rows(self, query: str, params: tuple = ()) -> list[dict]:
        cursor = await self._db.execute(query, params)
        cols = [d[0] for d in cursor.description]
        rows = await cursor.fetchall()
        return [dict(zip(cols, row)) for row in rows]

    # ── Logging ─────────────────────────────────────────────────

    async def log_decision(
        self,
        attempt: int,
        from_chapter: int,
        to_chapter: int,
        decision_text: str,
        outcome: str,
        health: int,
        energy: int,
    ) -> str:
        row_id = str(uuid.uuid4())
        await self._db.execute(
            "INSERT INTO decisions (id, attempt, from_chapter, to_chapter, decision_text, outcome, health, energy, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (row_id, attempt, from_chapter, to_chapter, decision_text, outcome, health, energy, _now_iso()),
        )
        await self._db.commit()
        return row_id

    async def log_reset(self, attempt: int, from_chapter: int, stats_restored: bool) -> str:
        row_id = str(uuid.uuid4())
        await self._db.execute(
            "INSERT INTO resets (id, attempt, from_chapter, stats_restored, created_at) VALUES (?, ?, ?, ?, ?)",
            (row_id, attempt, from_chapter, int(stats_restored), _now_iso()),
        )
        await self._db.commit()
        return row_id

    async def log_energy_conversion(
        self,
        steps: int,
        steps_goal: int,
        energy_earned: int,
        energy_after: int,
    ) -> str:
        row_id = str(uuid.uuid4())
        await self._db.execute(
            "INSERT INTO energy_conversions (id, steps, steps_goal, energy_earned, energy_after, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (row_id, steps, steps_goal, energy_earned, energy_after, _now_iso()),
        )
        await self._db.commit()
        return row_id

    async def record_daily_steps(self, date: str, steps: int, distance_miles: float = 0.0) -> None:
        await self._db.execute(
            "INSERT INTO daily_steps (date, steps, distance_miles, updated_at) VALUES (?, ?, ?, ?) "
            "ON CONFLICT(date) DO UPDATE SET steps=excluded.steps, distance_miles=excluded.distance_miles, "
            "updated_at=excluded.updated_at",
            (date, steps, distance_miles, _now_iso()),
        )
        await self._db.commit()

    async def record_achievement(self, key: str, title: str, date_earned: str) -> bool:
        """Store a first unlock; returns False if it was already known."""
        cursor = await self._db.execute(
            "INSERT OR IGNORE INTO achievements (key, title, date_earned, recorded_at) VALUES (?, ?, ?, ?)",
            (key, title, date_earned, _now_iso()),
        )
        await self._db.commit()
        return cursor.rowcount > 0

    # ── Queries ─────────────────────────────────────────────────

    async def get_recent_decisions(self, limit: int = 10) -> list[dict]:
        return await self._rows("SELECT * FROM decisions ORDER BY created_at DESC LIMIT ?", (limit,))

    async def get_recent_resets(self, limit: int = 10) -> list[dict]:
        return await self._rows("SELECT * FROM resets ORDER BY created_at DESC LIMIT ?", (limit,))

    async def get_recent_conversions(self, limit: int = 10) -> list[dict]:
        return await self._rows("SELECT * FROM energy_conversions ORDER BY created_at DESC LIMIT ?", (limit,))

    async def get_daily_steps(self, limit: int = 365) -> list[dict]:
        rows = await self._rows("SELECT * FROM daily_steps ORDER BY date DESC LIMIT ?", (limit,))
        return list(reversed(rows))

    async def get_death_count(self, death_chapter: int | None = None) -> int:
        """Decisions that killed the player or led straight to the death chapter."""
        cursor = await self._db.execute(
            "SELECT COUNT(*) FROM decisions WHERE outcome = 'died' OR (outcome = 'advanced' AND to_chapter = ?)",
            (death_chapter,),
        )
        row = await cursor.fetchone()
        return row[0] if row else 0
