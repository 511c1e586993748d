"""Typed outcome events published by the playback controller and music player."""

from __future__ import annotations

from discord_queue_player.domain.music.entities import Track
from discord_queue_player.domain.music.value_objects import TeardownReason, TrackFinishReason
from discord_queue_player.domain.shared.events import DomainEvent
from discord_queue_player.domain.shared.exceptions import PlaybackErrorKind
from discord_queue_player.domain.shared.types import DiscordSnowflake, NonNegativeInt


class TrackQueued(DomainEvent):
    guild_id: DiscordSnowflake
    track: Track
    queue_position: NonNegativeInt = 0


class TrackStarted(DomainEvent):
    guild_id: DiscordSnowflake
    track: Track
    is_retry: bool = False


class TrackFinished(DomainEvent):
    guild_id: DiscordSnowflake
    track: Track
    reason: TrackFinishReason = TrackFinishReason.COMPLETED


class TrackSkipped(DomainEvent):
    guild_id: DiscordSnowflake
    track: Track
    next_track: Track | None = None


class PlaybackFailed(DomainEvent):
    guild_id: DiscordSnowflake
    track: Track | None = None
    kind: PlaybackErrorKind = PlaybackErrorKind.OTHER
    message: str = ""
    will_retry: bool = False


class PlaybackPaused(DomainEvent):
    guild_id: DiscordSnowflake


class PlaybackResumed(DomainEvent):
    guild_id: DiscordSnowflake


class QueueEnded(DomainEvent):
    """The last track finished with no repeat mode active."""

    guild_id: DiscordSnowflake
    last_track: Track | None = None


class QueueDestroyed(DomainEvent):
    guild_id: DiscordSnowflake
    reason: TeardownReason = TeardownReason.STOPPED
    cleared_tracks: NonNegativeInt = 0
