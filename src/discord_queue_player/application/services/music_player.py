"""Music player application service - the guild-addressed command API."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict

from ...domain.music.entities import GuildQueue, RemovedTrack, Track
from ...domain.music.events import TrackQueued
from ...domain.music.filters import AudioFilter, list_filters
from ...domain.music.progress import ProgressBar, build_progress_bar
from ...domain.music.value_objects import ChannelKind, RepeatMode, TeardownReason
from ...domain.shared.constants import LimitConstants
from ...domain.shared.events import EventBus
from ...domain.shared.exceptions import (
    AlreadyConnectedError,
    InvalidSelectionError,
    LyricsNotFoundError,
    NotConnectedError,
    QueueNotFoundError,
    ResolutionErrorKind,
    SelectionTimeoutError,
    TrackResolutionError,
    ValidationError,
)
from ...domain.shared.messages import ErrorMessages, LogTemplates
from ...domain.shared.types import DiscordSnowflake, NonNegativeInt
from .playback_controller import SkipResult

if TYPE_CHECKING:
    from ..interfaces.lyrics_provider import LyricsProvider
    from ..interfaces.track_resolver import TrackResolver
    from ..interfaces.track_selector import TrackSelector
    from ..interfaces.voice_transport import VoiceTransport
    from .playback_controller import PlaybackController
    from .queue_registry import QueueRegistry

logger = logging.getLogger(__name__)


class EnqueueResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    track: Track
    position: NonNegativeInt
    count: NonNegativeInt = 1
    created: bool = False
    started: bool = False


class MusicPlayer:
    """Entry point for every music command, addressed by guild id.

    Commands on a guild without a queue raise :class:`QueueNotFoundError`.
    """

    def __init__(
        self,
        *,
        registry: QueueRegistry,
        controller: PlaybackController,
        transport: VoiceTransport,
        resolver: TrackResolver,
        lyrics_provider: LyricsProvider,
        event_bus: EventBus | None = None,
        search_limit: int = LimitConstants.SEARCH_RESULT_LIMIT,
        selection_timeout: float = LimitConstants.SELECTION_TIMEOUT_SECONDS,
    ) -> None:
        self._registry = registry
        self._controller = controller
        self._transport = transport
        self._resolver = resolver
        self._lyrics = lyrics_provider
        self._event_bus = event_bus or EventBus()
        self._search_limit = search_limit
        self._selection_timeout = selection_timeout

    def _require_queue(self, guild_id: DiscordSnowflake) -> GuildQueue:
        queue = self._registry.get(guild_id)
        if queue is None:
            raise QueueNotFoundError(guild_id)
        return queue

    # ── Adding tracks ───────────────────────────────────────────────

    async def search(
        self,
        guild_id: DiscordSnowflake,
        query: str,
        *,
        requester_id: DiscordSnowflake,
        requester_name: str,
        text_channel_id: DiscordSnowflake | None,
        voice_channel_id: DiscordSnowflake | None,
        selector: TrackSelector,
    ) -> EnqueueResult:
        """Resolve a URL or search query and enqueue the result.

        Free-text queries list up to ``search_limit`` candidates and wait
        for the requester's pick. Nothing is queued if the pick times out
        or is out of range.
        """
        if not query or not query.strip():
            raise ValidationError(ErrorMessages.SEARCH_QUERY_REQUIRED, field="query")
        if voice_channel_id is None:
            raise NotConnectedError(ErrorMessages.USER_NOT_IN_VOICE)

        query = query.strip()
        if self._resolver.is_url(query):
            track = await self._resolver.resolve_url(query)
        else:
            candidates = await self._resolver.search(query, self._search_limit)
            if not candidates:
                raise TrackResolutionError(query, ResolutionErrorKind.NOT_FOUND)
            track = await self._select(guild_id, candidates, selector)

        track = track.with_request(
            requested_by_id=requester_id,
            requested_by_name=requester_name,
            text_channel_id=text_channel_id,
            voice_channel_id=voice_channel_id,
        )
        return await self.enqueue(
            guild_id,
            [track],
            text_channel_id=text_channel_id,
            voice_channel_id=voice_channel_id,
        )

    async def _select(
        self, guild_id: DiscordSnowflake, candidates: list[Track], selector: TrackSelector
    ) -> Track:
        try:
            async with asyncio.timeout(self._selection_timeout):
                choice = await selector.choose(candidates)
        except TimeoutError:
            logger.info(LogTemplates.SELECTION_TIMEOUT, self._selection_timeout, guild_id)
            raise SelectionTimeoutError(self._selection_timeout) from None

        index = _parse_choice(choice)
        if index is None or not 1 <= index <= len(candidates):
            raise InvalidSelectionError(choice, len(candidates))
        return candidates[index - 1]

    async def enqueue(
        self,
        guild_id: DiscordSnowflake,
        tracks: Iterable[Track],
        *,
        text_channel_id: DiscordSnowflake | None = None,
        voice_channel_id: DiscordSnowflake | None = None,
    ) -> EnqueueResult:
        """Append tracks, creating the queue and starting playback if needed."""
        tracks = list(tracks)
        if not tracks:
            raise ValidationError(ErrorMessages.NULL_TRACK, field="tracks")

        queue = self._registry.get(guild_id)
        if queue is not None:
            position = queue.add_tracks(tracks)
            logger.info(LogTemplates.QUEUE_TRACKS_ADDED, len(tracks), guild_id)
            for offset, track in enumerate(tracks):
                await self._event_bus.publish(
                    TrackQueued(guild_id=guild_id, track=track, queue_position=position + offset)
                )
            return EnqueueResult(track=tracks[0], position=position, count=len(tracks))

        if voice_channel_id is None:
            raise NotConnectedError(ErrorMessages.USER_NOT_IN_VOICE)

        connection = self._transport.connection_for(guild_id)
        if connection is None:
            connection = await self._transport.join(guild_id, voice_channel_id)

        queue, created = self._registry.get_or_create(
            guild_id,
            text_channel_id=text_channel_id,
            voice_channel_id=voice_channel_id,
            connection=connection,
        )
        position = queue.add_tracks(tracks)
        logger.info(LogTemplates.QUEUE_TRACKS_ADDED, len(tracks), guild_id)
        started = await self._controller.play(queue, queue.now_playing)
        return EnqueueResult(
            track=tracks[0],
            position=position,
            count=len(tracks),
            created=created,
            started=started,
        )

    # ── Playback control ────────────────────────────────────────────

    async def skip(self, guild_id: DiscordSnowflake) -> SkipResult:
        return await self._controller.skip(self._require_queue(guild_id))

    async def stop(self, guild_id: DiscordSnowflake) -> bool:
        return await self._controller.stop(self._require_queue(guild_id))

    async def pause(self, guild_id: DiscordSnowflake) -> bool:
        return await self._controller.pause(self._require_queue(guild_id))

    async def resume(self, guild_id: DiscordSnowflake) -> bool:
        return await self._controller.resume(self._require_queue(guild_id))

    def set_volume(self, guild_id: DiscordSnowflake, value: Any) -> bool:
        return self._controller.set_volume(self._require_queue(guild_id), value)

    async def set_filter(self, guild_id: DiscordSnowflake, name: Any) -> AudioFilter:
        return await self._controller.set_filter(self._require_queue(guild_id), name)

    def list_filters(self) -> list[AudioFilter]:
        return list_filters()

    # ── Queue settings ──────────────────────────────────────────────

    def set_repeat_mode(self, guild_id: DiscordSnowflake, mode: RepeatMode) -> RepeatMode:
        queue = self._require_queue(guild_id)
        queue.set_repeat_mode(mode)
        logger.info(LogTemplates.REPEAT_MODE_CHANGED, mode.value, guild_id)
        return mode

    def toggle_repeat_track(self, guild_id: DiscordSnowflake) -> RepeatMode:
        mode = self._require_queue(guild_id).toggle_repeat_track()
        logger.info(LogTemplates.REPEAT_MODE_CHANGED, mode.value, guild_id)
        return mode

    def toggle_repeat_queue(self, guild_id: DiscordSnowflake) -> RepeatMode:
        mode = self._require_queue(guild_id).toggle_repeat_queue()
        logger.info(LogTemplates.REPEAT_MODE_CHANGED, mode.value, guild_id)
        return mode

    def shuffle(self, guild_id: DiscordSnowflake) -> list[Track]:
        queue = self._require_queue(guild_id)
        queue.shuffle()
        logger.info(LogTemplates.QUEUE_SHUFFLED, guild_id)
        return list(queue.tracks)

    async def remove_track(self, guild_id: DiscordSnowflake, selector: int | str) -> RemovedTrack:
        removed = await self._controller.remove_track(self._require_queue(guild_id), selector)
        logger.info(LogTemplates.QUEUE_REMOVED, removed.track.title, guild_id)
        return removed

    def set_text_channel(self, guild_id: DiscordSnowflake, channel_id: DiscordSnowflake) -> None:
        self._require_queue(guild_id).set_channel(ChannelKind.TEXT, channel_id)

    # ── Queries ─────────────────────────────────────────────────────

    def get_queue(self, guild_id: DiscordSnowflake) -> list[Track]:
        return list(self._require_queue(guild_id).tracks)

    def now_playing(self, guild_id: DiscordSnowflake) -> Track | None:
        return self._require_queue(guild_id).now_playing

    def progress_bar(self, guild_id: DiscordSnowflake) -> ProgressBar:
        queue = self._require_queue(guild_id)
        track = queue.now_playing
        if track is None or queue.dispatcher is None:
            return build_progress_bar(0, None)
        return build_progress_bar(queue.dispatcher.stream_time, track.duration)

    def snapshot(self, guild_id: DiscordSnowflake) -> dict[str, Any]:
        return self._require_queue(guild_id).to_dict()

    async def get_lyrics(self, guild_id: DiscordSnowflake, title: str | None = None) -> str:
        """Look up lyrics for ``title``, defaulting to the now-playing track."""
        author = None
        if not title:
            track = self.now_playing(guild_id)
            if track is None:
                raise QueueNotFoundError(guild_id)
            title, author = track.title, track.author

        lyrics = await self._lyrics.find_lyrics(title, author)
        if not lyrics:
            raise LyricsNotFoundError(title)
        return lyrics

    # ── Voice ───────────────────────────────────────────────────────

    async def join_voice_channel(
        self, guild_id: DiscordSnowflake, channel_id: DiscordSnowflake
    ) -> Any:
        if self._transport.is_connected(guild_id):
            raise AlreadyConnectedError(guild_id)

        connection = await self._transport.join(guild_id, channel_id)
        queue = self._registry.get(guild_id)
        if queue is not None:
            queue.connection = connection
            queue.set_channel(ChannelKind.VOICE, channel_id)
        logger.info(LogTemplates.VOICE_CONNECTED, channel_id, guild_id)
        return connection

    async def leave_voice_channel(self, guild_id: DiscordSnowflake) -> None:
        """Leave voice; an existing queue is torn down with it."""
        if not self._transport.is_connected(guild_id):
            raise NotConnectedError()

        queue = self._registry.get(guild_id)
        if queue is not None and queue.connection is not None:
            await self._controller.stop(queue, TeardownReason.LEFT_CHANNEL)
        else:
            await self._transport.leave(self._transport.connection_for(guild_id))
            if queue is not None:
                await self._controller.stop(queue, TeardownReason.LEFT_CHANNEL)
        logger.info(LogTemplates.VOICE_DISCONNECTED, guild_id)

    async def handle_connection_lost(self, guild_id: DiscordSnowflake) -> bool:
        queue = self._registry.get(guild_id)
        if queue is None:
            return False
        logger.warning(LogTemplates.VOICE_CONNECTION_LOST, guild_id)
        return await self._controller.stop(queue, TeardownReason.CONNECTION_LOST)


def _parse_choice(choice: Any) -> int | None:
    if isinstance(choice, bool):
        return None
    if isinstance(choice, int):
        return choice
    if isinstance(choice, str) and choice.strip().isdigit():
        return int(choice.strip())
    return None
