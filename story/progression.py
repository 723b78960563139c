"""Progression controller: the state machine that walks the chapter graph.

Every operation here is synchronous and runs to completion (ledger
mutation, graph resolution, checkpoint write, completion recompute) before
returning. Hosts must not call into one controller from several tasks at
once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .checkpoint import AttemptTracker, CheckpointStore, StatsStore
from .economy import StepTracker, energy_from_steps
from .graph import ChapterGraph
from .ledger import ResourceLedger
from .models import Chapter, Decision, PlayerStats, ProgressionState

logger = logging.getLogger(__name__)


@dataclass
class Transition:
    """Result of applying a decision."""

    outcome: str  # "advanced" | "died" | "no_transition" | "story_not_found" | "invalid_decision"
    chapter_id: int
    previous_chapter_id: int
    stats: PlayerStats
    decision: Decision | None = None
    error: str = ""

    @property
    def moved(self) -> bool:
        return self.chapter_id != self.previous_chapter_id


class ProgressionController:
    """Resolve the current chapter and apply decisions against the ledger."""

    def __init__(
        self,
        graph: ChapterGraph,
        ledger: ResourceLedger,
        checkpoints: CheckpointStore,
        attempts: AttemptTracker,
        stats_store: StatsStore | None = None,
    ):
        self._graph = graph
        self._ledger = ledger
        self._checkpoints = checkpoints
        self._attempts = attempts
        self._stats_store = stats_store
        self._state: ProgressionState | None = None
        self.last_error = ""

    # ── Lifecycle ───────────────────────────────────────────────

    def start(self) -> Chapter:
        """Resume from the checkpoint, or begin at the first chapter."""
        if self._stats_store is not None:
            saved = self._stats_store.load()
            if saved is not None:
                self._ledger.restore(saved)
        chapter = self._resolve_checkpoint()
        self._move_to(chapter)
        logger.info("Story '%s' started at chapter %d", self._graph.title, chapter.id)
        return chapter

    def resume_story(self) -> Chapter:
        """Re-read the checkpoint after an external restart."""
        chapter = self._resolve_checkpoint()
        self._move_to(chapter)
        logger.info("Resumed at chapter %d", chapter.id)
        return chapter

    def reset_story(self, preserve_stats: bool = True) -> Chapter:
        """Send the player back to the first chapter as a new attempt."""
        first = self._graph.first_chapter
        if not preserve_stats:
            self._ledger.restore()
            self._persist_stats()
        self._move_to(first)
        attempt = self._attempts.increment()
        self.last_error = ""
        logger.info(
            "Story reset to chapter %d (attempt %d, stats %s)",
            first.id,
            attempt,
            "kept" if preserve_stats else "restored",
        )
        return first

    # ── Decisions ───────────────────────────────────────────────

    def apply_decision(self, decision: Decision) -> Transition:
        current = self._current_or_start()

        if decision not in current.decisions:
            logger.warning("Decision %r does not belong to chapter %d", decision.text, current.id)
            return self._transition("invalid_decision", current.id, decision, "decision not available here")

        stats = self._ledger.apply_deltas(decision.health_delta, decision.energy_delta)
        self._persist_stats()

        if stats.health <= 0:
            self._ledger.kill_player()
            self._persist_stats()
            death = self._graph.death_chapter
            self._move_to(death)
            self.last_error = ""
            logger.info("Player died at chapter %d -> chapter %d", current.id, death.id)
            return self._transition("died", current.id, decision)

        if decision.target_chapter_id is None:
            logger.debug("Decision %r at chapter %d has no target", decision.text, current.id)
            return self._transition("no_transition", current.id, decision)

        target = self._graph.chapter_by_id(decision.target_chapter_id)
        if target is None:
            self.last_error = f"story not found: {decision.target_chapter_id}"
            logger.warning(
                "Chapter %d decision %r targets missing chapter %d; staying put",
                current.id,
                decision.text,
                decision.target_chapter_id,
            )
            return self._transition("story_not_found", current.id, decision, self.last_error)

        self._move_to(target)
        self.last_error = ""
        logger.info("Chapter %d -> %d (%s)", current.id, target.id, decision.text)
        return self._transition("advanced", current.id, decision)

    def choose(self, index: int) -> Transition:
        """Apply the current chapter's decision at ``index``."""
        current = self._current_or_start()
        if not 0 <= index < len(current.decisions):
            return self._transition("invalid_decision", current.id, None, f"no decision #{index}")
        return self.apply_decision(current.decisions[index])

    # ── Energy ──────────────────────────────────────────────────

    def credit_steps_as_energy(self, steps_to_convert: int, total_steps_goal: int) -> int:
        """Credit energy for steps; callers clear their pending pool afterwards."""
        earned = energy_from_steps(steps_to_convert, total_steps_goal)
        stats = self._ledger.set_energy(self._ledger.stats.energy + earned)
        self._persist_stats()
        logger.info("Converted %d steps into %d energy (now %d)", steps_to_convert, earned, stats.energy)
        return earned

    def convert_tracked_steps(self, tracker: StepTracker) -> int:
        """Credit then commit a tracker's pending steps.

        Steps short of a whole energy point stay pending.
        """
        earned = self.credit_steps_as_energy(tracker.steps_to_convert, tracker.total_steps_goal)
        if earned > 0:
            tracker.commit()
        return earned

    # ── Queries ─────────────────────────────────────────────────

    @property
    def graph(self) -> ChapterGraph:
        return self._graph

    @property
    def state(self) -> ProgressionState | None:
        return self._state

    def current_chapter(self) -> Chapter | None:
        if self._state is None:
            return None
        return self._graph.chapter_by_id(self._state.current_chapter_id)

    def completion_percentage(self) -> int:
        return self._state.completion_percentage if self._state else 0

    def player_stats(self) -> PlayerStats:
        return self._ledger.stats

    def is_depleted(self) -> bool:
        return self._ledger.is_depleted()

    def attempt_count(self) -> int:
        return self._attempts.value()

    def day_label(self) -> str:
        chapter = self.current_chapter()
        if chapter is None or chapter.story_day <= 0:
            return ""
        return f"Day {chapter.story_day} of {self._graph.total_days()}"

    # ── Internals ───────────────────────────────────────────────

    def _resolve_checkpoint(self) -> Chapter:
        saved_id = self._checkpoints.load()
        chapter = self._graph.chapter_by_id(saved_id)
        self.last_error = ""
        if chapter is None:
            if saved_id is not None:
                self.last_error = f"story not found: {saved_id}"
                logger.warning("Checkpoint names unknown chapter %d; using first chapter", saved_id)
            chapter = self._graph.first_chapter
        return chapter

    def _current_or_start(self) -> Chapter:
        chapter = self.current_chapter()
        if chapter is None:
            chapter = self.start()
        return chapter

    def _move_to(self, chapter: Chapter) -> None:
        self._state = ProgressionState(current_chapter_id=chapter.id)
        self._checkpoints.save(chapter.id)
        self._recompute_completion()

    def _recompute_completion(self) -> None:
        if self._state is not None:
            self._state.completion_percentage = self._graph.completion_for(self._state.current_chapter_id)

    def _persist_stats(self) -> None:
        if self._stats_store is not None:
            self._stats_store.save(self._ledger.stats)

    def _transition(
        self,
        outcome: str,
        previous_id: int,
        decision: Decision | None,
        error: str = "",
    ) -> Transition:
        return Transition(
            outcome=outcome,
            chapter_id=self._state.current_chapter_id if self._state else previous_id,
            previous_chapter_id=previous_id,
            stats=self._ledger.stats,
            decision=decision,
            error=error,
        )
