"""Data models for step-count readings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


def _as_int(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    try:
        return max(0, int(float(value)))
    except (TypeError, ValueError):
        return 0


def _as_float(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        return max(0.0, float(value))
    except (TypeError, ValueError):
        return 0.0


@dataclass
class StepResult:
    """Outcome of asking a step source for something."""

    ok: bool
    steps: int = 0
    distance_miles: float = 0.0
    error: str = ""

    @classmethod
    def success(cls, steps: int = 0, distance_miles: float = 0.0) -> StepResult:
        return cls(ok=True, steps=steps, distance_miles=distance_miles)

    @classmethod
    def failure(cls, error: str) -> StepResult:
        return cls(ok=False, error=error)

    @classmethod
    def from_api(cls, data: dict) -> StepResult:
        return cls.success(
            steps=_as_int(data.get("steps", data.get("step_count"))),
            distance_miles=_as_float(data.get("distance_miles", data.get("distance"))),
        )


@dataclass
class DailySteps:
    date: str  # YYYY-MM-DD
    steps: int = 0
    distance_miles: float = 0.0

    @classmethod
    def from_api(cls, data: dict) -> DailySteps:
        return cls(
            date=str(data.get("date", "")),
            steps=_as_int(data.get("steps", data.get("step_count"))),
            distance_miles=_as_float(data.get("distance_miles", data.get("distance"))),
        )
