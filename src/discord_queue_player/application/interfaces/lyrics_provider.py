"""Port interface for lyrics lookup."""

from __future__ import annotations

from abc import ABC, abstractmethod


class LyricsProvider(ABC):
    @abstractmethod
    async def find_lyrics(self, title: str, author: str | None = None) -> str | None:
        """Return lyric text, or None when nothing was found."""
        ...
