"""Port interface for resolving tracks from URLs and search queries."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from discord_queue_player.domain.shared.types import HttpUrlStr, NonEmptyStr, PositiveInt

if TYPE_CHECKING:
    from ...domain.music.entities import Track


class TrackResolver(ABC):
    """Interface for turning URLs and free-text queries into tracks.

    Failures raise :class:`TrackResolutionError` with kind ``NOT_FOUND``
    or ``SOURCE_UNAVAILABLE``.
    """

    @abstractmethod
    def is_url(self, query: NonEmptyStr) -> bool:
        ...

    @abstractmethod
    async def resolve_url(self, url: HttpUrlStr) -> "Track":
        """Resolve a direct link to a single track."""
        ...

    @abstractmethod
    async def search(self, query: NonEmptyStr, limit: PositiveInt = 10) -> list["Track"]:
        """Search for candidate tracks matching a query."""
        ...

    @abstractmethod
    async def stream_url(self, track: "Track") -> HttpUrlStr:
        """Return a direct audio stream URL for ``track``."""
        ...
