"""Step-to-energy conversion."""

from __future__ import annotations

from dataclasses import dataclass

from .models import STAT_MAX

# Reaching the full step goal earns a full energy bar.
ENERGY_PER_GOAL = STAT_MAX


def energy_from_steps(steps_to_convert: int, total_steps_goal: int) -> int:
    """Energy earned for ``steps_to_convert`` against a daily goal, 0-10."""
    if total_steps_goal <= 0:
        return 0
    earned = steps_to_convert * ENERGY_PER_GOAL // total_steps_goal
    return max(0, min(earned, STAT_MAX))


def steps_per_energy_point(total_steps_goal: int) -> int:
    return max(total_steps_goal // ENERGY_PER_GOAL, 1)


def steps_until_next_energy_point(steps_to_convert: int, total_steps_goal: int) -> int:
    """Steps still needed for the next whole point; 0 on an exact boundary."""
    per_point = steps_per_energy_point(total_steps_goal)
    remaining = per_point - (max(steps_to_convert, 0) % per_point)
    return 0 if remaining == per_point else remaining


@dataclass
class StepTracker:
    """Raw step counts and the portion already turned into energy."""

    current_step_count: int = 0
    total_steps_goal: int = 10000
    total_steps_taken: int = 0  # committed to energy

    @property
    def steps_to_convert(self) -> int:
        return max(self.current_step_count - self.total_steps_taken, 0)

    @property
    def pending_energy(self) -> int:
        return energy_from_steps(self.steps_to_convert, self.total_steps_goal)

    def commit(self) -> int:
        """Mark pending steps as converted; returns how many were committed."""
        committed = self.steps_to_convert
        self.total_steps_taken += committed
        return committed
