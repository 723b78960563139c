"""Resource ledger for the player's health and energy."""

from __future__ import annotations

import logging
from dataclasses import replace

from .models import STAT_MIN, PlayerStats, clamp_stat

logger = logging.getLogger(__name__)


class ResourceLedger:
    """Apply bounded deltas to health and energy.

    Every mutation clamps both values to [0, 10]. The ledger never blocks a
    mutation on low energy; ``is_depleted`` is advisory for the host.
    """

    def __init__(self, starting: PlayerStats | None = None):
        self._starting = replace(starting) if starting else PlayerStats()
        self._stats = replace(self._starting)

    @property
    def stats(self) -> PlayerStats:
        return replace(self._stats)

    def apply_deltas(self, health_delta: int, energy_delta: int) -> PlayerStats:
        self._stats.health = clamp_stat(self._stats.health + health_delta)
        self._stats.energy = clamp_stat(self._stats.energy + energy_delta)
        logger.debug(
            "Applied deltas hp=%+d ep=%+d -> health=%d energy=%d",
            health_delta,
            energy_delta,
            self._stats.health,
            self._stats.energy,
        )
        return self.stats

    def set_energy(self, value: int) -> PlayerStats:
        self._stats.energy = clamp_stat(value)
        return self.stats

    def is_depleted(self) -> bool:
        return self._stats.energy <= STAT_MIN

    def kill_player(self) -> PlayerStats:
        self._stats.health = STAT_MIN
        return self.stats

    def restore(self, stats: PlayerStats | None = None) -> PlayerStats:
        """Replace current stats, defaulting to the starting values."""
        source = stats if stats is not None else self._starting
        self._stats = PlayerStats(health=source.health, energy=source.energy)
        return self.stats
