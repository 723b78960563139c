"""Load story content from YAML files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from .errors import StoryLoadError
from .graph import ChapterGraph
from .models import Chapter, StoryContent

logger = logging.getLogger(__name__)


def _required_int(data: dict[str, Any], key: str, source: str) -> int:
    value = data.get(key)
    if value is None:
        raise StoryLoadError(f"missing '{key}'", source)
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise StoryLoadError(f"'{key}' must be an integer, got {value!r}", source) from exc


def story_from_dict(data: dict[str, Any], source: str = "") -> ChapterGraph:
    """Build a validated chapter graph from an already-parsed document."""
    if not isinstance(data, dict):
        raise StoryLoadError("story document must be a mapping", source)

    raw_chapters = data.get("chapters") or []
    if not isinstance(raw_chapters, list):
        raise StoryLoadError("'chapters' must be a list", source)

    chapters: list[Chapter] = []
    for idx, raw in enumerate(raw_chapters):
        if not isinstance(raw, dict) or "id" not in raw:
            raise StoryLoadError(f"chapter #{idx} has no id", source)
        chapters.append(Chapter.from_dict(raw))

    completion: dict[int, int] = {}
    for key, value in (data.get("completion") or {}).items():
        try:
            completion[int(key)] = int(value)
        except (TypeError, ValueError) as exc:
            raise StoryLoadError(f"bad completion entry {key!r}: {value!r}", source) from exc

    survive = data.get("survive_chapter")
    content = StoryContent(
        title=str(data.get("title", "")),
        details=str(data.get("details", "")).strip(),
        first_chapter_id=_required_int(data, "first_chapter", source),
        death_chapter_id=_required_int(data, "death_chapter", source),
        survive_chapter_id=int(survive) if survive is not None else None,
        chapters=chapters,
        completion=completion,
    )
    graph = ChapterGraph(content, source=source)
    graph.validate()
    logger.info(
        "Loaded story '%s': %d chapters over %d days",
        graph.title,
        len(graph),
        graph.total_days(),
    )
    return graph


def load_story(path: str | Path) -> ChapterGraph:
    """Read and validate a story file."""
    path = Path(path)
    if not path.exists():
        raise StoryLoadError("story file not found", str(path))

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise StoryLoadError(f"invalid YAML: {exc}", str(path)) from exc

    return story_from_dict(data, source=str(path))
