"""Step-count sources and walking milestones."""

from .achievements import AchievementItem, evaluate, seven_day_average
from .models import DailySteps, StepResult
from .source import HttpStepSource, StaticStepSource, StepSource, StepSourceError

__all__ = [
    "AchievementItem",
    "DailySteps",
    "HttpStepSource",
    "StaticStepSource",
    "StepResult",
    "StepSource",
    "StepSourceError",
    "evaluate",
    "seven_day_average",
]
