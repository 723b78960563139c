"""Errors raised while loading story content."""

from __future__ import annotations


class StoryLoadError(Exception):
    """Raised when story content cannot establish any initial state."""

    def __init__(self, message: str, source: str = ""):
        self.source = source
        super().__init__(f"{source}: {message}" if source else message)
