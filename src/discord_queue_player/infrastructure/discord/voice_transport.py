"""Discord voice transport implementing VoiceTransport with FFmpeg audio."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

import discord

from discord_queue_player.application.interfaces.track_resolver import TrackResolver
from discord_queue_player.application.interfaces.voice_transport import (
    ErrorCallback,
    FinishCallback,
    PlaybackHandle,
    PlayOptions,
    VoiceTransport,
)
from discord_queue_player.config.settings import AudioSettings
from discord_queue_player.domain.music.entities import Track
from discord_queue_player.domain.shared.constants import AudioConstants
from discord_queue_player.domain.shared.exceptions import NotConnectedError
from discord_queue_player.domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)


class DiscordPlaybackHandle(PlaybackHandle):
    """Controls one FFmpeg stream on a voice client."""

    def __init__(self, voice_client: discord.VoiceClient, source: discord.PCMVolumeTransformer) -> None:
        self._voice_client = voice_client
        self._source = source
        self._started_at = time.monotonic()
        self._paused_at: float | None = None
        self._paused_total = 0.0
        self.ended = False

    def pause(self) -> None:
        if self._paused_at is None:
            self._paused_at = time.monotonic()
        self._voice_client.pause()

    def resume(self) -> None:
        if self._paused_at is not None:
            self._paused_total += time.monotonic() - self._paused_at
            self._paused_at = None
        self._voice_client.resume()

    def end(self) -> None:
        self.ended = True
        self._voice_client.stop()

    def set_volume(self, gain: float) -> None:
        self._source.volume = gain

    @property
    def stream_time(self) -> int:
        now = self._paused_at if self._paused_at is not None else time.monotonic()
        return max(0, int((now - self._started_at - self._paused_total) * 1000))


class DiscordVoiceTransport(VoiceTransport):
    def __init__(
        self,
        bot: discord.Client,
        resolver: TrackResolver,
        settings: AudioSettings | None = None,
    ) -> None:
        self._bot = bot
        self._resolver = resolver
        self._settings = settings or AudioSettings()
        self._ffmpeg_options = self._settings.ffmpeg_options

    def _get_voice_client(self, guild_id: int) -> discord.VoiceClient | None:
        guild = self._bot.get_guild(guild_id)
        if not guild:
            return None

        vc = guild.voice_client
        return vc if isinstance(vc, discord.VoiceClient) else None

    async def join(self, guild_id: int, channel_id: int) -> discord.VoiceClient:
        guild = self._bot.get_guild(guild_id)
        if not guild:
            logger.warning(LogTemplates.GUILD_NOT_FOUND, guild_id)
            raise NotConnectedError(ErrorMessages.VOICE_CHANNEL_NOT_FOUND)

        channel = guild.get_channel(channel_id)
        if not isinstance(channel, discord.VoiceChannel | discord.StageChannel):
            logger.warning(LogTemplates.CHANNEL_NOT_VOICE, channel_id)
            raise NotConnectedError(ErrorMessages.VOICE_CHANNEL_NOT_FOUND)

        vc = self._get_voice_client(guild_id)
        try:
            async with asyncio.timeout(self._settings.connect_timeout_seconds):
                if vc is not None and vc.is_connected():
                    if vc.channel is None or vc.channel.id != channel_id:
                        await vc.move_to(channel)
                        logger.info(LogTemplates.VOICE_MOVED, channel_id, guild_id)
                    return vc
                vc = await channel.connect(self_deaf=True)
        except TimeoutError as exc:
            logger.error(LogTemplates.VOICE_CONNECTION_TIMEOUT, channel_id)
            raise NotConnectedError(ErrorMessages.VOICE_CONNECT_FAILED) from exc
        except discord.Forbidden as exc:
            logger.error(LogTemplates.VOICE_NO_PERMISSION, channel_id)
            raise NotConnectedError(ErrorMessages.VOICE_CONNECT_FAILED) from exc

        logger.info(LogTemplates.VOICE_CONNECTED, channel_id, guild_id)
        return vc

    async def leave(self, connection: Any) -> None:
        if connection is None:
            return
        await connection.disconnect(force=True)
        logger.info(LogTemplates.VOICE_DISCONNECTED, connection.guild.id)

    def connection_for(self, guild_id: int) -> discord.VoiceClient | None:
        return self._get_voice_client(guild_id)

    def is_connected(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        return vc is not None and vc.is_connected()

    def _build_options(self, options: PlayOptions) -> str:
        base_opts = self._ffmpeg_options.get("options", AudioConstants.FFMPEG_OPTIONS_DEFAULT)
        if options.filter_expression:
            filter_opt = AudioConstants.FFMPEG_FILTER_OPTION.format(
                expression=options.filter_expression
            )
            return f"{base_opts} {filter_opt}"
        return base_opts

    async def create_stream(self, track: Track, options: PlayOptions) -> discord.PCMVolumeTransformer:
        stream_url = await self._resolver.stream_url(track)
        source = discord.FFmpegPCMAudio(
            stream_url,
            executable=self._settings.ffmpeg_executable,
            before_options=self._ffmpeg_options.get(
                "before_options", AudioConstants.FFMPEG_BEFORE_OPTIONS_DEFAULT
            ),
            options=self._build_options(options),
        )
        return discord.PCMVolumeTransformer(source, volume=options.gain)

    def discard_stream(self, stream: Any) -> None:
        stream.cleanup()

    def play(
        self,
        connection: Any,
        stream: Any,
        options: PlayOptions,
        *,
        on_finish: FinishCallback,
        on_error: ErrorCallback,
    ) -> DiscordPlaybackHandle:
        if connection is None:
            raise NotConnectedError()

        if connection.is_playing() or connection.is_paused():
            connection.stop()

        handle = DiscordPlaybackHandle(connection, stream)
        guild_id = connection.guild.id

        def after_callback(error: Exception | None = None) -> None:
            # Runs on the audio player thread
            logger.debug(LogTemplates.TRACK_ENDED, guild_id, error)
            if handle.ended:
                return
            handle.ended = True
            coro = on_error(error) if error else on_finish()
            asyncio.run_coroutine_threadsafe(coro, self._bot.loop)

        connection.play(stream, after=after_callback)
        return handle
