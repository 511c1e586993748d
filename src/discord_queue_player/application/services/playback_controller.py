"""Playback controller - drives the single active stream of each guild queue."""

from __future__ import annotations

import logging
from functools import partial
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from ...domain.music.entities import GuildQueue, RemovedTrack, Track
from ...domain.music.events import (
    PlaybackFailed,
    PlaybackPaused,
    PlaybackResumed,
    QueueDestroyed,
    QueueEnded,
    TrackFinished,
    TrackSkipped,
    TrackStarted,
)
from ...domain.music.filters import AudioFilter, get_filter_expression, validate_filter
from ...domain.music.value_objects import (
    ControllerState,
    PlayingState,
    RepeatMode,
    TeardownReason,
    TimestampKind,
    TrackFinishReason,
)
from ...domain.shared.events import EventBus
from ...domain.shared.exceptions import PlaybackError
from ...domain.shared.messages import LogTemplates
from ...domain.shared.types import DiscordSnowflake
from ..interfaces.voice_transport import PlayOptions

if TYPE_CHECKING:
    from ..interfaces.voice_transport import VoiceTransport
    from .queue_registry import QueueRegistry

logger = logging.getLogger(__name__)


class SkipResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    skipped: Track | None = None
    next_track: Track | None = None
    applied: bool = True


class PlaybackController:
    """Playback state machine shared by every guild in the process.

    Each playback start bumps ``queue.version`` and binds the new value to
    the transport's finish/error callbacks. Skip, filter restarts and
    teardown bump it again before ending the stream, so whichever of a
    natural finish or an explicit command claims the token first is the
    only one that advances the queue.
    """

    def __init__(
        self,
        *,
        transport: VoiceTransport,
        registry: QueueRegistry,
        event_bus: EventBus | None = None,
    ) -> None:
        self._transport = transport
        self._registry = registry
        self._event_bus = event_bus or EventBus()

        self._states: dict[DiscordSnowflake, ControllerState] = {}
        # Track currently streaming per guild, compared by identity
        self._current: dict[DiscordSnowflake, Track] = {}
        # Track that already used its forbidden-source retry
        self._retried: dict[DiscordSnowflake, Track] = {}
        # Token of the start awaiting the transport, per guild
        self._starting: dict[DiscordSnowflake, int] = {}

    def state(self, guild_id: DiscordSnowflake) -> ControllerState:
        return self._states.get(guild_id, ControllerState.IDLE)

    def is_starting(self, guild_id: DiscordSnowflake) -> bool:
        return guild_id in self._starting

    def _options_for(self, queue: GuildQueue) -> PlayOptions:
        return PlayOptions(gain=queue.gain, filter_expression=get_filter_expression(queue.filter))

    def _finish_start(self, guild_id: DiscordSnowflake, token: int) -> None:
        if self._starting.get(guild_id) == token:
            del self._starting[guild_id]

    def _discard(self, guild_id: DiscordSnowflake, stream: object) -> None:
        """Release a stream that will never be played."""
        try:
            self._transport.discard_stream(stream)
        except Exception:
            logger.exception(LogTemplates.PLAYBACK_DISCARD_FAILED, guild_id)

    async def play(self, queue: GuildQueue, track: Track | None) -> bool:
        """Start ``track`` on the queue's connection.

        ``None`` means there is nothing left to play and ends the queue.
        Returns whether the stream started.
        """
        guild_id = queue.guild_id
        if track is None:
            await self._end_queue(queue, self._current.get(guild_id))
            return False

        if self._retried.get(guild_id) is not track:
            self._retried.pop(guild_id, None)

        queue.version += 1
        token = queue.version
        options = self._options_for(queue)

        self._starting[guild_id] = token
        stream = None
        try:
            stream = await self._transport.create_stream(track, options)
            if token != queue.version:
                logger.debug(LogTemplates.PLAYBACK_STALE_EVENT, "start", guild_id, token, queue.version)
                self._discard(guild_id, stream)
                return False
            handle = self._transport.play(
                queue.connection,
                stream,
                options,
                on_finish=partial(self._on_finish, queue, token),
                on_error=partial(self._on_error, queue, token),
            )
        except Exception as exc:
            if stream is not None:
                self._discard(guild_id, stream)
            if token != queue.version:
                logger.debug(LogTemplates.PLAYBACK_STALE_EVENT, "start error", guild_id, token, queue.version)
                return False
            self._finish_start(guild_id, token)
            await self._handle_failure(queue, track, PlaybackError.wrap(exc))
            return False
        finally:
            self._finish_start(guild_id, token)

        queue.dispatcher = handle
        queue.playing_state = PlayingState.PLAYING
        if queue.start_timestamp is None:
            queue.set_timestamp(TimestampKind.START)
        self._current[guild_id] = track
        self._states[guild_id] = ControllerState.PLAYING

        logger.info(LogTemplates.PLAYBACK_STARTED, track.title, guild_id)
        await self._event_bus.publish(
            TrackStarted(
                guild_id=guild_id,
                track=track,
                is_retry=self._retried.get(guild_id) is track,
            )
        )
        return True

    def _claim(self, queue: GuildQueue, token: int, source: str) -> bool:
        """Take the advance token, or report it as already used."""
        if token != queue.version or self._registry.get(queue.guild_id) is not queue:
            logger.debug(
                LogTemplates.PLAYBACK_STALE_EVENT, source, queue.guild_id, token, queue.version
            )
            return False
        queue.version += 1
        return True

    def _superseded(self, queue: GuildQueue, claimed: int, source: str) -> bool:
        """Whether a command took over while an advance awaited its subscribers."""
        if queue.version == claimed:
            return False
        logger.debug(LogTemplates.PLAYBACK_STALE_EVENT, source, queue.guild_id, claimed, queue.version)
        return True

    async def _on_finish(self, queue: GuildQueue, token: int) -> None:
        if not self._claim(queue, token, "finish"):
            return

        claimed = queue.version
        guild_id = queue.guild_id
        finished = self._current.pop(guild_id, None)
        queue.dispatcher = None
        self._retried.pop(guild_id, None)

        if finished is not None:
            logger.debug(LogTemplates.TRACK_FINISHED, finished.title, guild_id)
            await self._event_bus.publish(
                TrackFinished(guild_id=guild_id, track=finished, reason=TrackFinishReason.COMPLETED)
            )
            if self._superseded(queue, claimed, "finish"):
                return

        if finished is not None and queue.now_playing is not finished:
            # The playing track was removed from the queue while it streamed.
            next_track = queue.now_playing
        elif queue.repeat_mode is RepeatMode.TRACK:
            next_track = queue.now_playing
        elif queue.repeat_mode is RepeatMode.QUEUE:
            rotated = queue.rotate()
            logger.debug(LogTemplates.QUEUE_ROTATED, getattr(rotated, "title", None), guild_id)
            next_track = queue.now_playing
        else:
            queue.pop_current()
            next_track = queue.now_playing

        if next_track is None:
            await self._end_queue(queue, finished)
            return
        await self.play(queue, next_track)

    async def _on_error(self, queue: GuildQueue, token: int, error: BaseException) -> None:
        if not self._claim(queue, token, "error"):
            return

        track = self._current.pop(queue.guild_id, None) or queue.now_playing
        queue.dispatcher = None
        await self._handle_failure(queue, track, PlaybackError.wrap(error))

    async def _handle_failure(
        self, queue: GuildQueue, track: Track | None, error: PlaybackError
    ) -> None:
        """Retry a forbidden source once, tear the queue down otherwise."""
        guild_id = queue.guild_id
        will_retry = (
            error.is_forbidden and track is not None and self._retried.get(guild_id) is not track
        )

        logger.warning(LogTemplates.PLAYBACK_FAILED, guild_id, error.kind.value, error.message)
        claimed = queue.version
        await self._event_bus.publish(
            PlaybackFailed(
                guild_id=guild_id,
                track=track,
                kind=error.kind,
                message=error.message,
                will_retry=will_retry,
            )
        )
        if self._superseded(queue, claimed, "failure"):
            return

        if will_retry:
            self._retried[guild_id] = track
            logger.info(LogTemplates.PLAYBACK_RETRY_FORBIDDEN, track.title, guild_id)
            await self.play(queue, track)
            return

        await self._teardown(queue, TeardownReason.PLAYBACK_ERROR)

    def _end_stream(self, queue: GuildQueue) -> None:
        """Claim the token and end the live stream without advancing."""
        queue.version += 1
        self._current.pop(queue.guild_id, None)
        dispatcher, queue.dispatcher = queue.dispatcher, None
        if dispatcher is not None:
            dispatcher.end()

    async def skip(self, queue: GuildQueue) -> SkipResult:
        """Force the current track to end and move forward.

        Skipping always progresses, even in TRACK repeat: with a repeat mode
        the skipped track goes to the back of the queue, otherwise it is
        dropped. With fewer than two tracks the queue is torn down instead.
        A skip issued while the next track is still starting is not applied.
        """
        guild_id = queue.guild_id
        if guild_id in self._starting:
            logger.debug(
                LogTemplates.PLAYBACK_STALE_EVENT, "skip", guild_id, self._starting[guild_id], queue.version
            )
            return SkipResult(next_track=queue.now_playing, applied=False)

        streaming = self._current.get(guild_id)
        if streaming is not None and queue.now_playing is not streaming:
            # The streaming track already left the queue; its successor has not played yet.
            return await self._replace_head(queue, streaming)

        current = queue.now_playing
        if current is None:
            return SkipResult(applied=False)

        self._end_stream(queue)
        self._retried.pop(guild_id, None)
        logger.info(LogTemplates.TRACK_SKIPPED, current.title, guild_id)

        if len(queue.tracks) < 2:
            await self._event_bus.publish(TrackSkipped(guild_id=guild_id, track=current))
            await self._end_queue(queue, current)
            return SkipResult(skipped=current)

        if queue.repeat_mode is RepeatMode.DISABLED:
            queue.pop_current()
        else:
            rotated = queue.rotate()
            logger.debug(LogTemplates.QUEUE_ROTATED, getattr(rotated, "title", None), guild_id)
        next_track = queue.now_playing

        await self._event_bus.publish(
            TrackSkipped(guild_id=guild_id, track=current, next_track=next_track)
        )
        await self.play(queue, next_track)
        return SkipResult(skipped=current, next_track=next_track)

    async def _replace_head(self, queue: GuildQueue, streaming: Track) -> SkipResult:
        """End ``streaming`` and start the queue's head in its place."""
        guild_id = queue.guild_id
        self._end_stream(queue)
        self._retried.pop(guild_id, None)
        logger.info(LogTemplates.TRACK_SKIPPED, streaming.title, guild_id)

        next_track = queue.now_playing
        await self._event_bus.publish(
            TrackSkipped(guild_id=guild_id, track=streaming, next_track=next_track)
        )
        if next_track is None:
            await self._end_queue(queue, streaming)
            return SkipResult(skipped=streaming)
        await self.play(queue, next_track)
        return SkipResult(skipped=streaming, next_track=next_track)

    async def remove_track(self, queue: GuildQueue, selector: int | str) -> RemovedTrack:
        """Remove a track; removing the live one moves playback to the new head.

        A removal that empties the queue ends it.
        """
        guild_id = queue.guild_id
        head = queue.now_playing
        removed = queue.remove_track(selector)

        if queue.is_empty:
            await self._end_queue(queue, removed.track)
        elif queue.now_playing is not head and (
            guild_id in self._current or guild_id in self._starting
        ):
            self._end_stream(queue)
            self._retried.pop(guild_id, None)
            await self.play(queue, queue.now_playing)
        return removed

    async def pause(self, queue: GuildQueue) -> bool:
        """Pause the live stream. Returns False if it was not playing."""
        if queue.playing_state is not PlayingState.PLAYING or queue.dispatcher is None:
            return False

        queue.dispatcher.pause()
        queue.playing_state = PlayingState.PAUSED
        self._states[queue.guild_id] = ControllerState.PAUSED
        logger.debug(LogTemplates.PLAYBACK_PAUSED, queue.guild_id)
        await self._event_bus.publish(PlaybackPaused(guild_id=queue.guild_id))
        return True

    async def resume(self, queue: GuildQueue) -> bool:
        """Resume a paused stream. Returns False if it was not paused."""
        if queue.playing_state is not PlayingState.PAUSED or queue.dispatcher is None:
            return False

        queue.dispatcher.resume()
        queue.playing_state = PlayingState.PLAYING
        self._states[queue.guild_id] = ControllerState.PLAYING
        logger.debug(LogTemplates.PLAYBACK_RESUMED, queue.guild_id)
        await self._event_bus.publish(PlaybackResumed(guild_id=queue.guild_id))
        return True

    async def stop(self, queue: GuildQueue, reason: TeardownReason = TeardownReason.STOPPED) -> bool:
        """Clear the queue, leave voice and evict it. A second call returns False."""
        return await self._teardown(queue, reason)

    async def set_filter(self, queue: GuildQueue, name: object) -> AudioFilter:
        """Select a filter preset and restart the current track from its start."""
        preset = validate_filter(name)
        queue.filter = preset.name

        track = queue.now_playing
        if track is not None and queue.dispatcher is not None:
            logger.info(LogTemplates.PLAYBACK_FILTER_APPLIED, preset.name, queue.guild_id, track.title)
            self._end_stream(queue)
            await self.play(queue, track)
        return preset

    def set_volume(self, queue: GuildQueue, value: object) -> bool:
        """Store a new volume; returns whether it reached a live stream."""
        applied = queue.set_volume(value)
        logger.info(LogTemplates.VOLUME_CHANGED, queue.volume, queue.guild_id)
        if not applied:
            logger.debug(LogTemplates.VOLUME_LIVE_APPLY_SKIPPED, queue.guild_id)
        return applied

    async def _end_queue(self, queue: GuildQueue, last_track: Track | None) -> None:
        if queue.end_timestamp is not None:
            return
        logger.info(LogTemplates.QUEUE_ENDED, queue.guild_id)
        await self._event_bus.publish(QueueEnded(guild_id=queue.guild_id, last_track=last_track))
        await self._teardown(queue, TeardownReason.QUEUE_ENDED)

    async def _teardown(self, queue: GuildQueue, reason: TeardownReason) -> bool:
        guild_id = queue.guild_id
        if queue.end_timestamp is not None:
            return False

        logger.info(LogTemplates.TEARDOWN, guild_id, reason.value)
        queue.set_timestamp(TimestampKind.END)
        cleared = queue.clear()

        try:
            self._end_stream(queue)
        except Exception:
            logger.exception(LogTemplates.TEARDOWN_END_FAILED, guild_id)

        connection, queue.connection = queue.connection, None
        if connection is not None:
            try:
                await self._transport.leave(connection)
            except Exception:
                logger.exception(LogTemplates.TEARDOWN_LEAVE_FAILED, guild_id)

        if self._registry.get(guild_id) is queue:
            self._registry.delete(guild_id)

        queue.playing_state = PlayingState.STOPPED
        self._states[guild_id] = ControllerState.ENDED
        self._retried.pop(guild_id, None)

        await self._event_bus.publish(
            QueueDestroyed(guild_id=guild_id, reason=reason, cleared_tracks=cleared)
        )
        return True
