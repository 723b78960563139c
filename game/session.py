"""Game session - wires the story engine to steps, storage and history.

One session is one sitting at the game: load the story, resume from the
checkpoint, pull today's steps, then let the player convert steps and make
decisions until the host closes the session.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pedometer import DailySteps, HttpStepSource, StaticStepSource, StepResult, StepSource
from pedometer.achievements import AchievementItem, evaluate, seven_day_average
from story import (
    AttemptTracker,
    Chapter,
    CheckpointStore,
    JsonFileStore,
    PlayerStats,
    ProgressionController,
    ResourceLedger,
    StatsStore,
    StepTracker,
    Transition,
    load_story,
    steps_until_next_energy_point,
)

from .config import PROJECT_ROOT, load_config, resolve_path
from .history import JourneyDB

logger = logging.getLogger(__name__)

STEPS_TAKEN_KEY = "total_steps_taken"
STEPS_DAY_KEY = "steps_day_utc"


def _today(now: datetime | None = None) -> str:
    now_dt = now or datetime.now(timezone.utc)
    if now_dt.tzinfo is None:
        now_dt = now_dt.replace(tzinfo=timezone.utc)
    return now_dt.astimezone(timezone.utc).date().isoformat()


def build_step_source(steps_cfg: dict[str, Any], secrets: dict[str, str] | None = None) -> StepSource:
    kind = steps_cfg.get("source", "static")
    if kind == "http":
        http_cfg = steps_cfg.get("http", {})
        return HttpStepSource(
            base_url=http_cfg.get("base_url", "http://localhost:8765"),
            token=(secrets or {}).get("step_bridge_token", ""),
            timeout=float(http_cfg.get("timeout", 10)),
        )
    if kind != "static":
        logger.warning("Unknown step source '%s', using static counts", kind)
    return StaticStepSource(
        steps=int(steps_cfg.get("static_count", 0)),
        distance_miles=float(steps_cfg.get("static_distance", 0.0)),
    )


class GameSession:
    """The host side of the game: async I/O around a synchronous engine."""

    def __init__(
        self,
        config: dict | None = None,
        step_source: StepSource | None = None,
        root: Path | None = None,
    ):
        self._cfg = config or load_config()
        root = root or PROJECT_ROOT

        story_cfg = self._cfg.get("story", {})
        ledger_cfg = self._cfg.get("ledger", {})
        steps_cfg = self._cfg.get("steps", {})
        storage = self._cfg.get("storage", {})

        graph = load_story(resolve_path(story_cfg.get("path", "stories/survive.yaml"), root))
        self._store = JsonFileStore(resolve_path(storage.get("state_file", "data/progress.json"), root))
        self._db_path = resolve_path(storage.get("history_db", "data/journey.db"), root)
        self._reset_restores_stats = bool(story_cfg.get("reset_restores_stats", False))

        ledger = ResourceLedger(
            PlayerStats(
                health=int(ledger_cfg.get("starting_health", 10)),
                energy=int(ledger_cfg.get("starting_energy", 0)),
            )
        )
        self.controller = ProgressionController(
            graph,
            ledger,
            CheckpointStore(self._store),
            AttemptTracker(self._store),
            StatsStore(self._store),
        )
        self.tracker = StepTracker(
            total_steps_goal=int(steps_cfg.get("total_steps_goal", 10000)),
            total_steps_taken=int(self._store.get(STEPS_TAKEN_KEY, 0) or 0),
        )
        self._source = step_source or build_step_source(steps_cfg, self._cfg.get("_secrets"))
        self._db: JourneyDB | None = None

        self.controller.start()

    async def __aenter__(self) -> GameSession:
        self._db = JourneyDB(self._db_path)
        await self._db.open()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._db:
            await self._db.close()
            self._db = None
        await self._source.close()

    # ── Steps ───────────────────────────────────────────────────

    async def sync_steps(self, now: datetime | None = None) -> StepResult:
        """Pull today's count from the step source into the tracker."""
        auth = await self._source.authorize()
        if not auth.ok:
            logger.warning("Step source not authorized: %s", auth.error)
            return auth

        result = await self._source.fetch_today()
        if not result.ok:
            logger.warning("Could not read today's steps: %s", result.error)
            return result

        today = _today(now)
        if self._store.get(STEPS_DAY_KEY) != today:
            # New day: the source counts from zero again, so does the pending pool.
            self.tracker.total_steps_taken = 0
            self._store.set(STEPS_TAKEN_KEY, 0)
            self._store.set(STEPS_DAY_KEY, today)

        self.tracker.current_step_count = result.steps
        if self._db:
            await self._db.record_daily_steps(today, result.steps, result.distance_miles)
        logger.info("Synced %d steps (%d pending conversion)", result.steps, self.tracker.steps_to_convert)
        return result

    async def convert(self) -> int:
        """Turn pending steps into energy; energy is stored before steps are cleared."""
        steps = self.tracker.steps_to_convert
        earned = self.controller.convert_tracked_steps(self.tracker)
        self._store.set(STEPS_TAKEN_KEY, self.tracker.total_steps_taken)
        if earned and self._db:
            await self._db.log_energy_conversion(
                steps,
                self.tracker.total_steps_goal,
                earned,
                self.controller.player_stats().energy,
            )
        return earned

    # ── Story ───────────────────────────────────────────────────

    async def choose(self, index: int) -> Transition:
        transition = self.controller.choose(index)
        if self._db and transition.decision is not None:
            await self._db.log_decision(
                attempt=self.controller.attempt_count(),
                from_chapter=transition.previous_chapter_id,
                to_chapter=transition.chapter_id,
                decision_text=transition.decision.text,
                outcome=transition.outcome,
                health=transition.stats.health,
                energy=transition.stats.energy,
            )
        return transition

    async def reset(self, restore_stats: bool | None = None) -> Chapter:
        if restore_stats is None:
            restore_stats = self._reset_restores_stats
        previous = self.controller.current_chapter()
        chapter = self.controller.reset_story(preserve_stats=not restore_stats)
        if self._db:
            await self._db.log_reset(
                self.controller.attempt_count(),
                previous.id if previous else chapter.id,
                restore_stats,
            )
        return chapter

    async def resume(self) -> Chapter:
        return self.controller.resume_story()

    # ── Reporting ───────────────────────────────────────────────

    def status(self) -> dict[str, Any]:
        chapter = self.controller.current_chapter()
        stats = self.controller.player_stats()
        return {
            "story": self.controller.graph.title,
            "chapter_id": chapter.id if chapter else None,
            "chapter_title": chapter.title if chapter else "",
            "day": self.controller.day_label(),
            "completion": self.controller.completion_percentage(),
            "health": stats.health,
            "energy": stats.energy,
            "depleted": self.controller.is_depleted(),
            "ended": bool(chapter and chapter.is_end),
            "attempts": self.controller.attempt_count(),
            "steps_to_convert": self.tracker.steps_to_convert,
            "pending_energy": self.tracker.pending_energy,
            "steps_to_next_point": steps_until_next_energy_point(
                self.tracker.steps_to_convert, self.tracker.total_steps_goal
            ),
            "last_error": self.controller.last_error,
        }

    async def achievements(self, days: int = 30) -> tuple[list[AchievementItem], list[AchievementItem]]:
        """All milestones plus the ones unlocked for the first time just now."""
        for day in await self._source.fetch_history(days):
            if self._db and day.date:
                await self._db.record_daily_steps(day.date, day.steps, day.distance_miles)

        rows = await self._db.get_daily_steps() if self._db else []
        history = [DailySteps.from_api(row) for row in rows]
        items = evaluate(history)

        newly_unlocked: list[AchievementItem] = []
        if self._db:
            for item in items:
                if item.is_completed and await self._db.record_achievement(
                    item.key, item.title, item.date_earned or ""
                ):
                    newly_unlocked.append(item)
        if newly_unlocked:
            logger.info("Unlocked %d achievements", len(newly_unlocked))
        return items, newly_unlocked

    async def journey(self, limit: int = 10) -> dict[str, Any]:
        """Recent decisions, resets and conversions from the history DB."""
        if not self._db:
            return {"decisions": [], "resets": [], "conversions": [], "deaths": 0}
        return {
            "decisions": await self._db.get_recent_decisions(limit),
            "resets": await self._db.get_recent_resets(limit),
            "conversions": await self._db.get_recent_conversions(limit),
            "deaths": await self._db.get_death_count(self.controller.graph.death_chapter_id),
        }

    async def seven_day_average(self) -> float:
        rows = await self._db.get_daily_steps(limit=7) if self._db else []
        return seven_day_average([DailySteps.from_api(row) for row in rows])
