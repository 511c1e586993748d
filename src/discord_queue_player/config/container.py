"""Dependency Injection Container

Builds the application's object graph lazily and owns the lifecycle of the
resources that need closing. Components are created on first access and
reused afterwards.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..domain.shared.messages import ErrorMessages

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..application.interfaces.lyrics_provider import LyricsProvider
    from ..application.interfaces.track_resolver import TrackResolver
    from ..application.interfaces.voice_transport import VoiceTransport
    from ..application.services.music_player import MusicPlayer
    from ..application.services.playback_controller import PlaybackController
    from ..application.services.queue_registry import QueueRegistry
    from ..domain.shared.events import EventBus
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    Components are lazily initialized when first accessed. The voice
    transport needs the bot, so :meth:`set_bot` must run before it is used.
    """

    settings: Settings
    _bot: Bot | None = None

    _event_bus: EventBus | None = None
    _queue_registry: QueueRegistry | None = None

    # Infrastructure adapters
    _track_resolver: TrackResolver | None = None
    _voice_transport: VoiceTransport | None = None
    _lyrics_provider: LyricsProvider | None = None

    # Application services
    _playback_controller: PlaybackController | None = None
    _music_player: MusicPlayer | None = None

    def set_bot(self, bot: Bot) -> None:
        """Set the Discord bot instance."""
        self._bot = bot

    @property
    def bot(self) -> Bot:
        """Get the Discord bot instance."""
        if self._bot is None:
            raise RuntimeError(ErrorMessages.BOT_NOT_INITIALIZED)
        return self._bot

    @property
    def event_bus(self) -> EventBus:
        if self._event_bus is None:
            from ..domain.shared.events import EventBus

            self._event_bus = EventBus()
        return self._event_bus

    @property
    def queue_registry(self) -> QueueRegistry:
        if self._queue_registry is None:
            from ..application.services.queue_registry import QueueRegistry

            self._queue_registry = QueueRegistry(
                default_volume=self.settings.audio.default_volume
            )
        return self._queue_registry

    # === Infrastructure ===

    @property
    def track_resolver(self) -> TrackResolver:
        """Get the yt-dlp backed track resolver."""
        if self._track_resolver is None:
            from ..infrastructure.audio.ytdlp_resolver import YtDlpResolver

            self._track_resolver = YtDlpResolver(self.settings.audio)
        return self._track_resolver

    @property
    def voice_transport(self) -> VoiceTransport:
        """Get the Discord voice transport."""
        if self._voice_transport is None:
            from ..infrastructure.discord.voice_transport import DiscordVoiceTransport

            self._voice_transport = DiscordVoiceTransport(
                self.bot, self.track_resolver, self.settings.audio
            )
        return self._voice_transport

    @property
    def lyrics_provider(self) -> LyricsProvider:
        if self._lyrics_provider is None:
            from ..infrastructure.lyrics.lyrics_client import LyricsOvhClient

            self._lyrics_provider = LyricsOvhClient(self.settings.lyrics)
        return self._lyrics_provider

    # === Application Services ===

    @property
    def playback_controller(self) -> PlaybackController:
        if self._playback_controller is None:
            from ..application.services.playback_controller import PlaybackController

            self._playback_controller = PlaybackController(
                transport=self.voice_transport,
                registry=self.queue_registry,
                event_bus=self.event_bus,
            )
        return self._playback_controller

    @property
    def music_player(self) -> MusicPlayer:
        """Get the guild-addressed music command API."""
        if self._music_player is None:
            from ..application.services.music_player import MusicPlayer

            audio = self.settings.audio
            self._music_player = MusicPlayer(
                registry=self.queue_registry,
                controller=self.playback_controller,
                transport=self.voice_transport,
                resolver=self.track_resolver,
                lyrics_provider=self.lyrics_provider,
                event_bus=self.event_bus,
                search_limit=audio.search_limit,
                selection_timeout=audio.selection_timeout_seconds,
            )
        return self._music_player

    async def shutdown(self) -> None:
        """Tear down every queue and close network clients."""
        if self._playback_controller is not None and self._queue_registry is not None:
            for queue in self._queue_registry.all():
                await self._playback_controller.stop(queue)

        closer = getattr(self._lyrics_provider, "aclose", None)
        if closer is not None:
            await closer()

        if self._event_bus is not None:
            self._event_bus.clear()


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
