"""Data models for chapters, decisions and player state."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

STAT_MIN = 0
STAT_MAX = 10


def clamp_stat(value: int) -> int:
    return max(STAT_MIN, min(int(value), STAT_MAX))


def _as_int(value: Any, default: int = 0) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_optional_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class Decision:
    """An edge out of a chapter, carrying stat deltas."""

    text: str
    target_chapter_id: int | None = None  # None: no transition
    health_delta: int = 0
    energy_delta: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> Decision:
        return cls(
            text=str(data.get("text", "")),
            target_chapter_id=_as_optional_int(data.get("target", data.get("next_chapter"))),
            health_delta=_as_int(data.get("health", data.get("hp", 0))),
            energy_delta=_as_int(data.get("energy", data.get("ep", 0))),
        )


@dataclass(frozen=True)
class Chapter:
    """A node in the narrative graph."""

    id: int
    story_day: int = 0  # 0 for the shared Death/Survive chapters
    title: str = ""
    text: str = ""
    images: tuple[str, ...] = ()
    decisions: tuple[Decision, ...] = ()
    is_terminal: bool = False

    @property
    def is_end(self) -> bool:
        """True for flagged terminals and for chapters with nowhere to go."""
        return self.is_terminal or not self.decisions

    @classmethod
    def from_dict(cls, data: dict) -> Chapter:
        images = data.get("images") or []
        if isinstance(images, str):
            images = [images]
        return cls(
            id=_as_int(data.get("id"), default=-1),
            story_day=_as_int(data.get("day", 0)),
            title=str(data.get("title", "")),
            text=str(data.get("text", "")).strip(),
            images=tuple(str(i) for i in images),
            decisions=tuple(Decision.from_dict(d) for d in data.get("decisions") or []),
            is_terminal=bool(data.get("terminal", False)),
        )


@dataclass
class PlayerStats:
    """Health and energy, each kept within [0, 10]."""

    health: int = STAT_MAX
    energy: int = STAT_MIN

    def __post_init__(self) -> None:
        self.health = clamp_stat(self.health)
        self.energy = clamp_stat(self.energy)

    def to_dict(self) -> dict[str, int]:
        return {"health": self.health, "energy": self.energy}

    @classmethod
    def from_dict(cls, data: dict) -> PlayerStats:
        return cls(
            health=_as_int(data.get("health"), default=STAT_MAX),
            energy=_as_int(data.get("energy"), default=STAT_MIN),
        )


@dataclass
class ProgressionState:
    current_chapter_id: int
    completion_percentage: int = 0


@dataclass
class StoryContent:
    """Everything a story file provides, before graph validation."""

    title: str
    first_chapter_id: int
    death_chapter_id: int
    survive_chapter_id: int | None = None
    details: str = ""
    chapters: list[Chapter] = field(default_factory=list)
    completion: dict[int, int] = field(default_factory=dict)
