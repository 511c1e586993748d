"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from discord_queue_player.application.interfaces.lyrics_provider import LyricsProvider
from discord_queue_player.application.interfaces.track_resolver import TrackResolver
from discord_queue_player.application.interfaces.track_selector import TrackSelector
from discord_queue_player.application.interfaces.voice_transport import (
    ErrorCallback,
    FinishCallback,
    PlaybackHandle,
    PlayOptions,
    VoiceTransport,
)

__all__ = [
    "ErrorCallback",
    "FinishCallback",
    "LyricsProvider",
    "PlayOptions",
    "PlaybackHandle",
    "TrackResolver",
    "TrackSelector",
    "VoiceTransport",
]
