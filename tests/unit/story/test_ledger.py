"""Tests for the health/energy ledger and step conversion."""

import pytest

from story.economy import StepTracker, energy_from_steps, steps_per_energy_point, steps_until_next_energy_point
from story.ledger import ResourceLedger
from story.models import PlayerStats


class TestResourceLedger:
    def test_defaults_start_full_health_no_energy(self):
        stats = ResourceLedger().stats
        assert stats.health == 10
        assert stats.energy == 0

    @pytest.mark.parametrize("delta", [-1000, -11, -10, -3, 0, 3, 10, 11, 1000])
    def test_deltas_never_leave_bounds(self, delta):
        ledger = ResourceLedger(PlayerStats(health=5, energy=5))
        stats = ledger.apply_deltas(delta, delta)
        assert 0 <= stats.health <= 10
        assert 0 <= stats.energy <= 10

    def test_apply_deltas_clamps_each_stat(self):
        ledger = ResourceLedger(PlayerStats(health=3, energy=9))
        stats = ledger.apply_deltas(-5, 4)
        assert stats.health == 0
        assert stats.energy == 10

    def test_set_energy_clamps(self):
        ledger = ResourceLedger()
        assert ledger.set_energy(14).energy == 10
        assert ledger.set_energy(-2).energy == 0

    def test_is_depleted_is_advisory(self):
        ledger = ResourceLedger(PlayerStats(health=10, energy=0))
        assert ledger.is_depleted()
        stats = ledger.apply_deltas(-1, -1)
        assert stats.health == 9
        assert ledger.is_depleted()

    def test_kill_player_zeroes_health_only(self):
        ledger = ResourceLedger(PlayerStats(health=7, energy=4))
        stats = ledger.kill_player()
        assert stats.health == 0
        assert stats.energy == 4
        assert ledger.kill_player().health == 0

    def test_restore_defaults_to_starting_stats(self):
        ledger = ResourceLedger(PlayerStats(health=8, energy=2))
        ledger.apply_deltas(-5, 5)
        assert ledger.restore() == PlayerStats(health=8, energy=2)

    def test_stats_returns_a_copy(self):
        ledger = ResourceLedger()
        snapshot = ledger.stats
        snapshot.health = 1
        assert ledger.stats.health == 10

    def test_player_stats_clamp_on_construction(self):
        stats = PlayerStats(health=42, energy=-3)
        assert stats.health == 10
        assert stats.energy == 0


class TestEnergyFromSteps:
    def test_half_goal_is_five_energy(self):
        assert energy_from_steps(2500, 5000) == 5

    def test_over_goal_is_capped(self):
        assert energy_from_steps(7000, 5000) == 10

    @pytest.mark.parametrize("steps", [0, 1, 2500, 10**9])
    def test_zero_goal_yields_nothing(self, steps):
        assert energy_from_steps(steps, 0) == 0
        assert energy_from_steps(steps, -100) == 0

    def test_floors_partial_points(self):
        assert energy_from_steps(999, 10000) == 0
        assert energy_from_steps(1999, 10000) == 1
        assert energy_from_steps(3000, 10000) == 3

    def test_negative_steps_earn_nothing(self):
        assert energy_from_steps(-500, 5000) == 0

    def test_monotonic_and_bounded(self):
        goal = 7300
        previous = 0
        for steps in range(0, 20000, 137):
            earned = energy_from_steps(steps, goal)
            assert 0 <= earned <= 10
            assert earned >= previous
            previous = earned


class TestStepTracker:
    def test_steps_to_convert_never_negative(self):
        tracker = StepTracker(current_step_count=100, total_steps_goal=10000, total_steps_taken=500)
        assert tracker.steps_to_convert == 0

    def test_commit_clears_pending_pool(self):
        tracker = StepTracker(current_step_count=6200, total_steps_goal=10000, total_steps_taken=1000)
        assert tracker.steps_to_convert == 5200
        assert tracker.pending_energy == 5
        assert tracker.commit() == 5200
        assert tracker.steps_to_convert == 0
        assert tracker.total_steps_taken == 6200

    def test_steps_until_next_point(self):
        assert steps_per_energy_point(10000) == 1000
        assert steps_per_energy_point(5) == 1
        assert steps_until_next_energy_point(2500, 10000) == 500
        assert steps_until_next_energy_point(3000, 10000) == 0
