"""TrackResolver implementation using yt-dlp for URL resolution and search."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Final, cast

from yt_dlp import YoutubeDL
from yt_dlp.utils import DownloadError

from discord_queue_player.application.interfaces.track_resolver import TrackResolver
from discord_queue_player.config.settings import AudioSettings
from discord_queue_player.domain.music.entities import Track, TrackDuration
from discord_queue_player.domain.music.value_objects import SearchType
from discord_queue_player.domain.shared.exceptions import (
    ResolutionErrorKind,
    TrackResolutionError,
)
from discord_queue_player.domain.shared.messages import LogTemplates
from discord_queue_player.infrastructure.audio.models import (
    AudioFormatInfo,
    YtDlpOpts,
    YtDlpTrackInfo,
)

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH: Final[int] = 500

URL_PATTERNS: Final[list[re.Pattern[str]]] = [
    re.compile(r"^https?://"),
    re.compile(r"^www\."),
]


class YtDlpResolver(TrackResolver):

    def __init__(self, settings: AudioSettings | None = None) -> None:
        self._settings = settings or AudioSettings()
        self._base_opts = YtDlpOpts(format=self._settings.ytdlp_format)

    def _get_opts(self, **overrides: Any) -> YtDlpOpts:
        if overrides:
            return self._base_opts.model_copy(update=overrides)
        return self._base_opts

    def is_url(self, query: str) -> bool:
        query = query.strip()
        return any(pattern.search(query) for pattern in URL_PATTERNS)

    @staticmethod
    def _parse_info(data: dict[str, Any]) -> YtDlpTrackInfo:
        return YtDlpTrackInfo.model_validate(data)

    @staticmethod
    def _http_or_none(value: str | None) -> str | None:
        if value and value.startswith(("http://", "https://")):
            return value
        return None

    def _info_to_track(self, info: YtDlpTrackInfo, search_type: SearchType) -> Track | None:
        url = self._http_or_none(info.webpage_url or info.url)
        if url is None:
            return None

        return Track(
            title=info.title[:MAX_TITLE_LENGTH],
            url=url,
            thumbnail=self._http_or_none(info.thumbnail),
            author=info.author,
            search_type=search_type,
            duration=TrackDuration.from_seconds(info.duration),
        )

    @staticmethod
    def _extract_stream_url(info: YtDlpTrackInfo) -> str | None:
        if info.url:
            return info.url
        return YtDlpResolver._extract_stream_from_formats(info.formats)

    @staticmethod
    def _extract_stream_from_formats(formats: list[AudioFormatInfo]) -> str | None:
        audio_formats = [f for f in formats if f.acodec != "none" and f.url]
        if audio_formats:
            return audio_formats[-1].url
        return None

    def _extract_info_sync(self, url: str) -> YtDlpTrackInfo | None:
        try:
            with YoutubeDL(params=cast(Any, self._get_opts().model_dump())) as ydl:
                data = ydl.extract_info(url, download=False)
        except DownloadError as exc:
            logger.warning(LogTemplates.YTDLP_FAILED_EXTRACT_INFO, url)
            raise TrackResolutionError(url, ResolutionErrorKind.SOURCE_UNAVAILABLE) from exc
        return self._parse_info(dict(data)) if isinstance(data, dict) else None

    def _search_sync(self, query: str, limit: int) -> list[YtDlpTrackInfo]:
        search_query = f"ytsearch{limit}:{query}"
        try:
            opts = self._get_opts(extract_flat="in_playlist")
            with YoutubeDL(params=cast(Any, opts.model_dump())) as ydl:
                data = ydl.extract_info(search_query, download=False)
        except DownloadError as exc:
            logger.warning(LogTemplates.YTDLP_FAILED_SEARCH, query)
            raise TrackResolutionError(query, ResolutionErrorKind.SOURCE_UNAVAILABLE) from exc

        if not isinstance(data, dict):
            return []
        entries = data.get("entries") or []
        return [self._parse_info(dict(e)) for e in entries if isinstance(e, dict)]

    async def resolve_url(self, url: str) -> Track:
        info = await asyncio.to_thread(self._extract_info_sync, url.strip())
        track = self._info_to_track(info, SearchType.URL) if info else None
        if track is None:
            raise TrackResolutionError(url, ResolutionErrorKind.NOT_FOUND)
        return track

    async def search(self, query: str, limit: int = 10) -> list[Track]:
        infos = await asyncio.to_thread(self._search_sync, query, limit)
        tracks = [self._info_to_track(info, SearchType.NAME) for info in infos]
        return [track for track in tracks if track is not None][:limit]

    async def stream_url(self, track: Track) -> str:
        info = await asyncio.to_thread(self._extract_info_sync, track.url)
        stream_url = self._extract_stream_url(info) if info else None
        if not stream_url:
            logger.warning(LogTemplates.YTDLP_NO_STREAM_URL, track.title)
            raise TrackResolutionError(track.url, ResolutionErrorKind.SOURCE_UNAVAILABLE)
        return stream_url
