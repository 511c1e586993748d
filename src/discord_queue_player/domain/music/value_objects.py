"""Immutable value objects for the music bounded context."""

from __future__ import annotations

from enum import Enum


class RepeatMode(Enum):
    """Queue repeat behaviour. Exactly one mode is active at a time."""

    DISABLED = "disabled"
    TRACK = "track"
    QUEUE = "queue"

    @property
    def emoji(self) -> str:
        return {RepeatMode.DISABLED: "➡️", RepeatMode.TRACK: "🔂", RepeatMode.QUEUE: "🔁"}[self]

    def toggled(self, target: RepeatMode) -> RepeatMode:
        """Return the mode produced by toggling ``target`` from this mode.

        Toggling the active mode switches repeat off; toggling the other
        mode switches straight to it.
        """
        if target is RepeatMode.DISABLED or self is target:
            return RepeatMode.DISABLED
        return target


class PlayingState(Enum):
    """Whether the queue's stream is currently audible."""

    PLAYING = "playing"
    PAUSED = "paused"
    STOPPED = "stopped"


class ControllerState(Enum):
    """Playback controller state for a single guild.

    State transitions:
    - IDLE -> PLAYING (first track starts)
    - PLAYING -> PLAYING (track finished, next one starts)
    - PLAYING -> PAUSED (pause)
    - PAUSED -> PLAYING (resume)
    - Any -> ENDED (stop, queue ended, unrecoverable error, connection lost)
    - ENDED -> PLAYING (a new queue for the guild starts)
    """

    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    ENDED = "ended"

    @property
    def is_active(self) -> bool:
        return self in {ControllerState.PLAYING, ControllerState.PAUSED}


class ChannelKind(Enum):
    TEXT = "text"
    VOICE = "voice"


class TimestampKind(Enum):
    START = "start"
    END = "end"


class SearchType(Enum):
    """How a track was found: a direct link or a free-text search."""

    URL = "url"
    NAME = "name"


class TrackFinishReason(Enum):
    """Reasons a track can stop playing."""

    COMPLETED = "completed"
    SKIPPED = "skipped"
    STOPPED = "stopped"
    ERROR = "error"


class TeardownReason(Enum):
    """Reasons a guild queue can be destroyed."""

    STOPPED = "stopped"
    QUEUE_ENDED = "queue_ended"
    PLAYBACK_ERROR = "playback_error"
    CONNECTION_LOST = "connection_lost"
    LEFT_CHANNEL = "left_channel"
