"""LyricsProvider implementation backed by the lyrics.ovh HTTP API."""

from __future__ import annotations

import logging
from typing import TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from discord_queue_player.application.interfaces.lyrics_provider import LyricsProvider
from discord_queue_player.config.settings import LyricsSettings
from discord_queue_player.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)

ResponseT = TypeVar("ResponseT", bound=BaseModel)


class LyricsResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    lyrics: str | None = None


class SuggestArtist(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str


class SuggestItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str
    artist: SuggestArtist


class SuggestResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    data: list[SuggestItem] = Field(default_factory=list)


def split_artist_title(title: str) -> tuple[str | None, str]:
    """Split an ``"Artist - Song"`` style title into its parts."""
    if " - " in title:
        artist, _, song = title.partition(" - ")
        if artist.strip() and song.strip():
            return artist.strip(), song.strip()
    return None, title.strip()


class LyricsOvhClient(LyricsProvider):
    """Looks lyrics up by artist and title, guessing the artist when it is missing."""

    def __init__(
        self,
        settings: LyricsSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or LyricsSettings()
        self._client = client or httpx.AsyncClient(
            base_url=self._settings.base_url,
            timeout=self._settings.timeout_seconds,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def find_lyrics(self, title: str, author: str | None = None) -> str | None:
        logger.debug(LogTemplates.LYRICS_LOOKUP, title)
        artist, song = split_artist_title(title)
        artist = artist or author
        if artist is None:
            artist, song = await self._suggest(song) or (None, song)
        if artist is None:
            return None

        found = await self._fetch(
            f"/v1/{quote(artist, safe='')}/{quote(song, safe='')}", title, LyricsResponse
        )
        if found is None:
            return None
        lyrics = found.lyrics
        return lyrics.strip() if lyrics and lyrics.strip() else None

    async def _suggest(self, term: str) -> tuple[str, str] | None:
        found = await self._fetch(f"/suggest/{quote(term, safe='')}", term, SuggestResponse)
        if found is None:
            return None
        suggestions = found.data
        if not suggestions:
            return None
        return suggestions[0].artist.name, suggestions[0].title

    async def _fetch(self, path: str, title: str, model: type[ResponseT]) -> ResponseT | None:
        """GET ``path`` and parse the body as ``model``; any failure yields None."""
        try:
            response = await self._client.get(path)
        except httpx.HTTPError as exc:
            logger.warning(LogTemplates.LYRICS_REQUEST_FAILED, title, exc)
            return None

        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        if response.is_error:
            logger.warning(LogTemplates.LYRICS_REQUEST_FAILED, title, response.status_code)
            return None
        try:
            return model.model_validate_json(response.content)
        except ValidationError as exc:
            logger.warning(LogTemplates.LYRICS_REQUEST_FAILED, title, exc)
            return None
