"""Walking milestones derived from daily step history."""

from __future__ import annotations

from dataclasses import dataclass

from .models import DailySteps

STEPS_IN_A_DAY = (5_000, 10_000, 15_000, 20_000, 25_000, 30_000)
TOTAL_STEPS = (10_000, 50_000, 100_000, 250_000, 500_000, 1_000_000)
TOTAL_DISTANCE_MILES = (1.0, 5.0, 10.0, 26.2, 50.0, 100.0)


@dataclass
class AchievementItem:
    category: str  # "steps_in_a_day" | "total_steps" | "total_distance"
    threshold: float
    title: str
    description: str
    is_completed: bool = False
    date_earned: str | None = None
    progress_note: str | None = None  # only while incomplete

    @property
    def key(self) -> str:
        return f"{self.category}:{self.threshold:g}"


def merge_today(history: list[DailySteps], today: DailySteps | None) -> list[DailySteps]:
    """History sorted by date, with today's live reading replacing any stale row."""
    by_date = {day.date: day for day in history if day.date}
    if today is not None and today.date:
        by_date[today.date] = today
    return [by_date[d] for d in sorted(by_date)]


def seven_day_average(history: list[DailySteps]) -> float:
    days = merge_today(history, None)[-7:]
    if not days:
        return 0.0
    return sum(d.steps for d in days) / len(days)


def _steps_in_a_day(days: list[DailySteps]) -> list[AchievementItem]:
    best = max((d.steps for d in days), default=0)
    items = []
    for threshold in STEPS_IN_A_DAY:
        earned = next((d.date for d in days if d.steps >= threshold), None)
        items.append(
            AchievementItem(
                category="steps_in_a_day",
                threshold=threshold,
                title=f"{threshold:,} Steps",
                description=f"Walk {threshold:,} steps in a single day",
                is_completed=earned is not None,
                date_earned=earned,
                progress_note=None if earned else f"Steps to go: {threshold - best:,}",
            )
        )
    return items


def _total_steps(days: list[DailySteps]) -> list[AchievementItem]:
    items = []
    for threshold in TOTAL_STEPS:
        running = 0
        earned = None
        for day in days:
            running += day.steps
            if running >= threshold:
                earned = day.date
                break
        items.append(
            AchievementItem(
                category="total_steps",
                threshold=threshold,
                title=f"{threshold:,} Total Steps",
                description=f"Walk {threshold:,} steps in total",
                is_completed=earned is not None,
                date_earned=earned,
                progress_note=None if earned else f"Steps to go: {threshold - running:,}",
            )
        )
    return items


def _total_distance(days: list[DailySteps]) -> list[AchievementItem]:
    items = []
    for threshold in TOTAL_DISTANCE_MILES:
        running = 0.0
        earned = None
        for day in days:
            running += day.distance_miles
            if running >= threshold:
                earned = day.date
                break
        items.append(
            AchievementItem(
                category="total_distance",
                threshold=threshold,
                title=f"{threshold:g} Miles",
                description=f"Travel {threshold:g} miles in total",
                is_completed=earned is not None,
                date_earned=earned,
                progress_note=None if earned else f"Miles to go: {threshold - running:.1f}",
            )
        )
    return items


def evaluate(history: list[DailySteps], today: DailySteps | None = None) -> list[AchievementItem]:
    """All milestones, completed or not, in display order."""
    days = merge_today(history, today)
    return _steps_in_a_day(days) + _total_steps(days) + _total_distance(days)
