"""Story engine: chapter graph, resource ledger, checkpoints, progression."""

from .checkpoint import AttemptTracker, CheckpointStore, JsonFileStore, MemoryStore, StatsStore
from .economy import StepTracker, energy_from_steps, steps_until_next_energy_point
from .errors import StoryLoadError
from .graph import ChapterGraph
from .ledger import ResourceLedger
from .loader import load_story, story_from_dict
from .models import Chapter, Decision, PlayerStats, ProgressionState
from .progression import ProgressionController, Transition

__all__ = [
    "AttemptTracker",
    "Chapter",
    "ChapterGraph",
    "CheckpointStore",
    "Decision",
    "JsonFileStore",
    "MemoryStore",
    "PlayerStats",
    "ProgressionController",
    "ProgressionState",
    "ResourceLedger",
    "StatsStore",
    "StepTracker",
    "StoryLoadError",
    "Transition",
    "energy_from_steps",
    "load_story",
    "steps_until_next_energy_point",
    "story_from_dict",
]
