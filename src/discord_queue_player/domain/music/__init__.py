"""
Music Bounded Context

Domain logic for tracks, guild queues, filters and playback progress.
"""

from discord_queue_player.domain.music.entities import (
    GuildQueue,
    RemovedTrack,
    Track,
    TrackDuration,
)
from discord_queue_player.domain.music.events import (
    PlaybackFailed,
    QueueDestroyed,
    QueueEnded,
    TrackFinished,
    TrackQueued,
    TrackSkipped,
    TrackStarted,
)
from discord_queue_player.domain.music.filters import AudioFilter, list_filters, validate_filter
from discord_queue_player.domain.music.progress import ProgressBar, build_progress_bar
from discord_queue_player.domain.music.value_objects import (
    ControllerState,
    PlayingState,
    RepeatMode,
    SearchType,
)

__all__ = [
    # Entities
    "Track",
    "TrackDuration",
    "GuildQueue",
    "RemovedTrack",
    # Value Objects
    "RepeatMode",
    "PlayingState",
    "ControllerState",
    "SearchType",
    # Events
    "TrackQueued",
    "TrackStarted",
    "TrackFinished",
    "TrackSkipped",
    "PlaybackFailed",
    "QueueEnded",
    "QueueDestroyed",
    # Filters and progress
    "AudioFilter",
    "validate_filter",
    "list_filters",
    "ProgressBar",
    "build_progress_bar",
]
