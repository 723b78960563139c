"""Host application: configuration, journey history and the game session."""

from .config import load_config
from .history import JourneyDB
from .session import GameSession, build_step_source

__all__ = [
    "GameSession",
    "JourneyDB",
    "build_step_source",
    "load_config",
]
