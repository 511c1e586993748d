"""Port interface for asking a user to pick one search result."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.music.entities import Track


class TrackSelector(ABC):
    @abstractmethod
    async def choose(self, candidates: list["Track"]) -> int | str:
        """Present ``candidates`` and return the user's 1-based choice.

        The raw reply may be returned as a string; the caller validates it.
        The caller also bounds the wait with a timeout.
        """
        ...
