"""Chapter graph store: the loaded, read-only chapters of one story."""

from __future__ import annotations

import logging
from collections import deque

from .errors import StoryLoadError
from .models import Chapter, StoryContent

logger = logging.getLogger(__name__)


class ChapterGraph:
    """Answer graph queries over a story's chapters.

    Construction fails with StoryLoadError when the content cannot give the
    engine a starting point. Softer authoring problems are reported by
    ``validate()`` and never stop the story from loading.
    """

    def __init__(self, content: StoryContent, source: str = ""):
        self.title = content.title
        self.details = content.details
        self._source = source
        self._chapters: dict[int, Chapter] = {}

        if not content.chapters:
            raise StoryLoadError("story has no chapters", source)

        for chapter in content.chapters:
            if chapter.id in self._chapters:
                raise StoryLoadError(f"duplicate chapter id {chapter.id}", source)
            if chapter.is_terminal and chapter.decisions:
                raise StoryLoadError(
                    f"terminal chapter {chapter.id} has {len(chapter.decisions)} decisions",
                    source,
                )
            self._chapters[chapter.id] = chapter

        if content.first_chapter_id not in self._chapters:
            raise StoryLoadError(f"first chapter {content.first_chapter_id} not found", source)
        if content.death_chapter_id not in self._chapters:
            raise StoryLoadError(f"death chapter {content.death_chapter_id} not found", source)

        for chapter_id, pct in content.completion.items():
            if not 0 <= pct <= 100:
                raise StoryLoadError(
                    f"completion for chapter {chapter_id} is {pct}, expected 0-100",
                    source,
                )

        self.first_chapter_id = content.first_chapter_id
        self.death_chapter_id = content.death_chapter_id
        self.survive_chapter_id = content.survive_chapter_id
        self._completion = dict(content.completion)

    def __len__(self) -> int:
        return len(self._chapters)

    def __contains__(self, chapter_id: object) -> bool:
        return chapter_id in self._chapters

    @property
    def chapters(self) -> list[Chapter]:
        return list(self._chapters.values())

    @property
    def first_chapter(self) -> Chapter:
        return self._chapters[self.first_chapter_id]

    @property
    def death_chapter(self) -> Chapter:
        return self._chapters[self.death_chapter_id]

    @property
    def survive_chapter(self) -> Chapter | None:
        if self.survive_chapter_id is None:
            return None
        return self._chapters.get(self.survive_chapter_id)

    def chapter_by_id(self, chapter_id: int | None) -> Chapter | None:
        if chapter_id is None:
            return None
        return self._chapters.get(chapter_id)

    def total_days(self) -> int:
        """Distinct in-story days, ignoring the day-0 sentinel chapters."""
        return len({c.story_day for c in self._chapters.values() if c.story_day > 0})

    def completion_for(self, chapter_id: int) -> int:
        return self._completion.get(chapter_id, 0)

    def reachable_ids(self) -> set[int]:
        """Chapter ids reachable from the first chapter, Death included."""
        seen = {self.first_chapter_id, self.death_chapter_id}
        queue = deque([self.first_chapter_id])
        while queue:
            chapter = self._chapters[queue.popleft()]
            for decision in chapter.decisions:
                target = decision.target_chapter_id
                if target in self._chapters and target not in seen:
                    seen.add(target)
                    queue.append(target)
        return seen

    def validate(self) -> list[str]:
        """Return authoring warnings that the engine can live with."""
        warnings: list[str] = []
        for chapter in self._chapters.values():
            if not chapter.decisions and not chapter.is_terminal:
                warnings.append(
                    f"chapter {chapter.id} has no decisions but is not marked terminal; "
                    "treating it as an ending"
                )
            for idx, decision in enumerate(chapter.decisions):
                target = decision.target_chapter_id
                if target is None:
                    warnings.append(f"chapter {chapter.id} decision {idx} has no target chapter")
                elif target not in self._chapters:
                    warnings.append(
                        f"chapter {chapter.id} decision {idx} targets unknown chapter {target}"
                    )

        reachable = self.reachable_ids()
        for chapter_id in sorted(self._chapters):
            if chapter_id not in reachable and chapter_id != self.survive_chapter_id:
                warnings.append(f"chapter {chapter_id} is unreachable from chapter {self.first_chapter_id}")

        for chapter_id in sorted(self._completion):
            if chapter_id not in self._chapters:
                warnings.append(f"completion table lists unknown chapter {chapter_id}")

        if self.survive_chapter_id is not None and self.survive_chapter_id not in self._chapters:
            warnings.append(f"survive chapter {self.survive_chapter_id} not found")

        for warning in warnings:
            logger.warning("%s%s", f"{self._source}: " if self._source else "", warning)
        return warnings
