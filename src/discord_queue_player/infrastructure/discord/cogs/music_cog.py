"""Slash-command music cog delegating to the MusicPlayer service."""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from discord_queue_player.domain.music.entities import Track
from discord_queue_player.domain.music.events import PlaybackFailed, QueueEnded, TrackStarted
from discord_queue_player.domain.music.value_objects import RepeatMode
from discord_queue_player.domain.shared.constants import LimitConstants
from discord_queue_player.domain.shared.exceptions import DomainError
from discord_queue_player.domain.shared.messages import (
    DiscordUIMessages,
    ErrorMessages,
    LogTemplates,
)
from discord_queue_player.infrastructure.discord.guards.voice_guards import (
    get_member,
    get_voice_channel_id,
    send_ephemeral,
)
from discord_queue_player.infrastructure.discord.selector import MessageTrackSelector
from discord_queue_player.utils.reply import format_duration, truncate

if TYPE_CHECKING:
    from ....application.services.music_player import MusicPlayer
    from ....config.container import Container

logger = logging.getLogger(__name__)

EMBED_DESCRIPTION_LIMIT = 4096


class MusicCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    @property
    def player(self) -> MusicPlayer:
        return self.container.music_player

    async def cog_load(self) -> None:
        bus = self.container.event_bus
        bus.subscribe(TrackStarted, self._on_track_started)
        bus.subscribe(PlaybackFailed, self._on_playback_failed)
        bus.subscribe(QueueEnded, self._on_queue_ended)

    async def cog_unload(self) -> None:
        bus = self.container.event_bus
        bus.unsubscribe(TrackStarted, self._on_track_started)
        bus.unsubscribe(PlaybackFailed, self._on_playback_failed)
        bus.unsubscribe(QueueEnded, self._on_queue_ended)

    # ─────────────────────────────────────────────────────────────────
    # Channel notices
    # ─────────────────────────────────────────────────────────────────

    def _text_channel_for(self, guild_id: int, track: Track | None) -> int | None:
        if track is not None and track.text_channel_id is not None:
            return track.text_channel_id
        queue = self.container.queue_registry.get(guild_id)
        return queue.text_channel_id if queue is not None else None

    async def _send_notice(
        self,
        channel_id: int | None,
        content: str | None = None,
        *,
        embed: discord.Embed | None = None,
    ) -> None:
        if channel_id is None:
            return
        channel = self.bot.get_channel(channel_id)
        if not isinstance(channel, discord.abc.Messageable):
            return
        try:
            await channel.send(content=content, embed=embed)
        except discord.HTTPException as e:
            logger.warning(LogTemplates.BOT_NOTICE_SEND_FAILED, channel_id, e)

    async def _on_track_started(self, event: TrackStarted) -> None:
        if event.is_retry:
            return
        await self._send_notice(
            self._text_channel_for(event.guild_id, event.track),
            embed=self._build_now_playing_embed(event.track),
        )

    async def _on_playback_failed(self, event: PlaybackFailed) -> None:
        if event.will_retry:
            return
        title = event.track.title if event.track else "Unknown"
        await self._send_notice(
            self._text_channel_for(event.guild_id, event.track),
            DiscordUIMessages.NOTICE_PLAYBACK_FAILED.format(
                title=truncate(title), message=event.message
            ),
        )

    async def _on_queue_ended(self, event: QueueEnded) -> None:
        await self._send_notice(
            self._text_channel_for(event.guild_id, event.last_track),
            DiscordUIMessages.NOTICE_QUEUE_ENDED,
        )

    def _build_now_playing_embed(self, track: Track, progress: str | None = None) -> discord.Embed:
        description_lines = [f"[{truncate(track.title)}]({track.url})"]
        if progress:
            description_lines.append(progress)

        embed = discord.Embed(
            title=DiscordUIMessages.NOW_PLAYING.format(
                title=truncate(track.title, 64), duration=track.duration.formatted
            ),
            description="\n".join(description_lines),
            color=discord.Color.green(),
        )

        if track.thumbnail:
            embed.set_thumbnail(url=track.thumbnail)

        embed.add_field(
            name=DiscordUIMessages.NOW_PLAYING_FIELD_DURATION,
            value=format_duration(track.duration.total_seconds or None),
            inline=True,
        )
        embed.add_field(
            name=DiscordUIMessages.NOW_PLAYING_FIELD_REQUESTER,
            value=track.requested_by_name or "Unknown",
            inline=True,
        )
        return embed

    async def _guild_id(self, interaction: discord.Interaction) -> int | None:
        if not interaction.guild:
            await send_ephemeral(interaction, DiscordUIMessages.ERROR_SERVER_ONLY)
            return None
        return interaction.guild.id

    # ─────────────────────────────────────────────────────────────────
    # Adding tracks
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="play", description="Play a song by URL or search query.")
    @app_commands.describe(query="YouTube URL or search query")
    async def play(self, interaction: discord.Interaction, query: str) -> None:
        member = await get_member(interaction)
        if member is None:
            return

        voice_channel_id = get_voice_channel_id(member)
        if voice_channel_id is None:
            await send_ephemeral(interaction, ErrorMessages.USER_NOT_IN_VOICE)
            return

        assert interaction.guild is not None
        await interaction.response.defer()

        selector = MessageTrackSelector(
            self.bot,
            interaction.channel,
            user_id=member.id,
            channel_id=interaction.channel_id,
        )
        try:
            result = await self.player.search(
                interaction.guild.id,
                query,
                requester_id=member.id,
                requester_name=member.display_name,
                text_channel_id=interaction.channel_id,
                voice_channel_id=voice_channel_id,
                selector=selector,
            )
        except DomainError as e:
            await send_ephemeral(interaction, e.message)
            return

        if result.count > 1:
            await interaction.followup.send(
                DiscordUIMessages.TRACKS_QUEUED.format(count=result.count)
            )
            return

        await interaction.followup.send(
            DiscordUIMessages.TRACK_QUEUED.format(
                title=truncate(result.track.title), position=result.position + 1
            )
        )

    # ─────────────────────────────────────────────────────────────────
    # Playback control
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="skip", description="Skip the current track.")
    async def skip(self, interaction: discord.Interaction) -> None:
        guild_id = await self._guild_id(interaction)
        if guild_id is None:
            return

        try:
            result = await self.player.skip(guild_id)
        except DomainError as e:
            await send_ephemeral(interaction, e.message)
            return

        if not result.applied or result.skipped is None:
            await send_ephemeral(interaction, DiscordUIMessages.ACTION_SKIP_PENDING)
            return

        template = (
            DiscordUIMessages.ACTION_SKIPPED
            if result.next_track
            else DiscordUIMessages.ACTION_SKIPPED_END
        )
        await interaction.response.send_message(
            template.format(title=truncate(result.skipped.title))
        )

    @app_commands.command(name="stop", description="Stop playback and clear the queue.")
    async def stop(self, interaction: discord.Interaction) -> None:
        guild_id = await self._guild_id(interaction)
        if guild_id is None:
            return

        try:
            stopped = await self.player.stop(guild_id)
        except DomainError as e:
            await send_ephemeral(interaction, e.message)
            return

        if stopped:
            await interaction.response.send_message(DiscordUIMessages.ACTION_STOPPED)
        else:
            await send_ephemeral(interaction, DiscordUIMessages.ACTION_NOTHING_STOPPED)

    @app_commands.command(name="pause", description="Pause the current track.")
    async def pause(self, interaction: discord.Interaction) -> None:
        guild_id = await self._guild_id(interaction)
        if guild_id is None:
            return

        try:
            paused = await self.player.pause(guild_id)
        except DomainError as e:
            await send_ephemeral(interaction, e.message)
            return

        if paused:
            await interaction.response.send_message(DiscordUIMessages.ACTION_PAUSED)
        else:
            await send_ephemeral(interaction, DiscordUIMessages.ACTION_ALREADY_PAUSED)

    @app_commands.command(name="resume", description="Resume paused playback.")
    async def resume(self, interaction: discord.Interaction) -> None:
        guild_id = await self._guild_id(interaction)
        if guild_id is None:
            return

        try:
            resumed = await self.player.resume(guild_id)
        except DomainError as e:
            await send_ephemeral(interaction, e.message)
            return

        if resumed:
            await interaction.response.send_message(DiscordUIMessages.ACTION_RESUMED)
        else:
            await send_ephemeral(interaction, DiscordUIMessages.ACTION_ALREADY_PLAYING)

    @app_commands.command(name="volume", description="Set the playback volume.")
    @app_commands.describe(value="Volume level, 5 is normal loudness")
    async def volume(self, interaction: discord.Interaction, value: float) -> None:
        guild_id = await self._guild_id(interaction)
        if guild_id is None:
            return

        try:
            self.player.set_volume(guild_id, value)
        except DomainError as e:
            await send_ephemeral(interaction, e.message)
            return

        await interaction.response.send_message(
            DiscordUIMessages.ACTION_VOLUME_SET.format(volume=f"{value:g}")
        )

    @app_commands.command(name="filter", description="Apply an audio filter to playback.")
    @app_commands.describe(name="Filter name, see /filters")
    async def filter(self, interaction: discord.Interaction, name: str) -> None:
        guild_id = await self._guild_id(interaction)
        if guild_id is None:
            return

        await interaction.response.defer()
        try:
            applied = await self.player.set_filter(guild_id, name)
        except DomainError as e:
            await send_ephemeral(interaction, e.message)
            return

        await interaction.followup.send(DiscordUIMessages.ACTION_FILTER_SET.format(name=applied.name))

    @app_commands.command(name="filters", description="List the available audio filters.")
    async def filters(self, interaction: discord.Interaction) -> None:
        names = ", ".join(f"`{f.name}`" for f in self.player.list_filters())
        embed = discord.Embed(
            title=DiscordUIMessages.FILTERS_TITLE,
            description=names,
            color=discord.Color.blurple(),
        )
        await interaction.response.send_message(embed=embed, ephemeral=True)

    # ─────────────────────────────────────────────────────────────────
    # Queue
    # ─────────────────────────────────────────────────────────────────

    async def _send_repeat_mode(self, interaction: discord.Interaction, mode: RepeatMode) -> None:
        await interaction.response.send_message(
            DiscordUIMessages.ACTION_REPEAT_MODE.format(mode=f"{mode.emoji} {mode.value}")
        )

    @app_commands.command(name="loop", description="Toggle repeating the current track.")
    async def loop(self, interaction: discord.Interaction) -> None:
        guild_id = await self._guild_id(interaction)
        if guild_id is None:
            return

        try:
            mode = self.player.toggle_repeat_track(guild_id)
        except DomainError as e:
            await send_ephemeral(interaction, e.message)
            return

        await self._send_repeat_mode(interaction, mode)

    @app_commands.command(name="loopqueue", description="Toggle repeating the whole queue.")
    async def loopqueue(self, interaction: discord.Interaction) -> None:
        guild_id = await self._guild_id(interaction)
        if guild_id is None:
            return

        try:
            mode = self.player.toggle_repeat_queue(guild_id)
        except DomainError as e:
            await send_ephemeral(interaction, e.message)
            return

        await self._send_repeat_mode(interaction, mode)

    @app_commands.command(name="shuffle", description="Shuffle the upcoming tracks.")
    async def shuffle(self, interaction: discord.Interaction) -> None:
        guild_id = await self._guild_id(interaction)
        if guild_id is None:
            return

        try:
            self.player.shuffle(guild_id)
        except DomainError as e:
            await send_ephemeral(interaction, e.message)
            return

        await interaction.response.send_message(DiscordUIMessages.ACTION_SHUFFLED)

    @app_commands.command(name="remove", description="Remove a track from the queue.")
    @app_commands.describe(track="Queue position (1-based) or exact track title")
    async def remove(self, interaction: discord.Interaction, track: str) -> None:
        guild_id = await self._guild_id(interaction)
        if guild_id is None:
            return

        try:
            removed = await self.player.remove_track(guild_id, track)
        except DomainError as e:
            await send_ephemeral(interaction, e.message)
            return

        await interaction.response.send_message(
            DiscordUIMessages.ACTION_TRACK_REMOVED.format(
                title=truncate(removed.track.title), remaining=removed.remaining
            )
        )

    @app_commands.command(name="queue", description="Show the current queue.")
    @app_commands.describe(page="Page number")
    async def queue(self, interaction: discord.Interaction, page: int = 1) -> None:
        guild_id = await self._guild_id(interaction)
        if guild_id is None:
            return

        try:
            tracks = self.player.get_queue(guild_id)
        except DomainError as e:
            await send_ephemeral(interaction, e.message)
            return

        if not tracks:
            await send_ephemeral(interaction, DiscordUIMessages.QUEUE_EMPTY)
            return

        per_page = LimitConstants.QUEUE_PAGE_SIZE
        total_pages = max(1, math.ceil(len(tracks) / per_page))
        page = max(1, min(page, total_pages))
        start_idx = (page - 1) * per_page

        embed = discord.Embed(
            title=DiscordUIMessages.QUEUE_TITLE.format(count=len(tracks)),
            color=discord.Color.blurple(),
        )
        for idx, track in enumerate(tracks[start_idx : start_idx + per_page], start=start_idx + 1):
            prefix = "🎵 " if idx == 1 else ""
            embed.add_field(
                name=f"{prefix}{idx}. {truncate(track.title)}",
                value=f"`{track.duration.formatted}` | {track.requested_by_name or 'Unknown'}",
                inline=False,
            )
        total = sum(t.duration.total_seconds for t in tracks)
        embed.set_footer(text=f"Page {page}/{total_pages} | Total: {format_duration(total)}")

        await interaction.response.send_message(embed=embed, ephemeral=True)

    @app_commands.command(name="nowplaying", description="Show the current track and its progress.")
    async def nowplaying(self, interaction: discord.Interaction) -> None:
        guild_id = await self._guild_id(interaction)
        if guild_id is None:
            return

        try:
            track = self.player.now_playing(guild_id)
            progress = self.player.progress_bar(guild_id)
        except DomainError as e:
            await send_ephemeral(interaction, e.message)
            return

        if track is None:
            await send_ephemeral(interaction, DiscordUIMessages.QUEUE_EMPTY)
            return

        embed = self._build_now_playing_embed(
            track,
            DiscordUIMessages.PROGRESS.format(bar=progress.bar, percent=progress.percent),
        )
        await interaction.response.send_message(embed=embed, ephemeral=True)

    @app_commands.command(name="lyrics", description="Show lyrics for the current or a named song.")
    @app_commands.describe(title="Song title, defaults to the current track")
    async def lyrics(self, interaction: discord.Interaction, title: str | None = None) -> None:
        guild_id = await self._guild_id(interaction)
        if guild_id is None:
            return

        await interaction.response.defer(ephemeral=True)
        try:
            heading = title or getattr(self.player.now_playing(guild_id), "title", "")
            text = await self.player.get_lyrics(guild_id, title)
        except DomainError as e:
            await send_ephemeral(interaction, e.message)
            return

        embed = discord.Embed(
            title=DiscordUIMessages.LYRICS_TITLE.format(title=truncate(heading, 200)),
            description=truncate(text, EMBED_DESCRIPTION_LIMIT),
            color=discord.Color.blurple(),
        )
        await interaction.followup.send(embed=embed, ephemeral=True)

    # ─────────────────────────────────────────────────────────────────
    # Voice
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="join", description="Join your voice channel.")
    async def join(self, interaction: discord.Interaction) -> None:
        member = await get_member(interaction)
        if member is None:
            return

        voice_channel_id = get_voice_channel_id(member)
        if voice_channel_id is None:
            await send_ephemeral(interaction, ErrorMessages.USER_NOT_IN_VOICE)
            return

        assert interaction.guild is not None
        try:
            await self.player.join_voice_channel(interaction.guild.id, voice_channel_id)
        except DomainError as e:
            await send_ephemeral(interaction, e.message)
            return

        await interaction.response.send_message(
            DiscordUIMessages.ACTION_JOINED.format(channel=member.voice.channel.name)
        )

    @app_commands.command(name="leave", description="Disconnect from the voice channel.")
    async def leave(self, interaction: discord.Interaction) -> None:
        guild_id = await self._guild_id(interaction)
        if guild_id is None:
            return

        try:
            await self.player.leave_voice_channel(guild_id)
        except DomainError as e:
            await send_ephemeral(interaction, e.message)
            return

        await interaction.response.send_message(DiscordUIMessages.ACTION_LEFT)

    @commands.Cog.listener()
    async def on_voice_state_update(
        self,
        member: discord.Member,
        before: discord.VoiceState,
        after: discord.VoiceState,
    ) -> None:
        if self.bot.user is None or member.id != self.bot.user.id:
            return
        if before.channel is None or after.channel is not None:
            return

        guild_id = member.guild.id
        channel_id = self._text_channel_for(guild_id, None)
        if await self.player.handle_connection_lost(guild_id):
            await self._send_notice(channel_id, DiscordUIMessages.NOTICE_CONNECTION_LOST)


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError("Container not found on bot instance")

    await bot.add_cog(MusicCog(bot, container))
