from __future__ import annotations

import asyncio
from typing import Any

import pytest

from discord_queue_player.application.interfaces.lyrics_provider import LyricsProvider
from discord_queue_player.application.interfaces.track_resolver import TrackResolver
from discord_queue_player.application.interfaces.track_selector import TrackSelector
from discord_queue_player.application.interfaces.voice_transport import (
    PlaybackHandle,
    PlayOptions,
    VoiceTransport,
)
from discord_queue_player.application.services.music_player import MusicPlayer
from discord_queue_player.application.services.playback_controller import PlaybackController
from discord_queue_player.application.services.queue_registry import QueueRegistry
from discord_queue_player.domain.music.entities import Track, TrackDuration
from discord_queue_player.domain.shared.events import DomainEvent, EventBus

GUILD_ID = 111
TEXT_CHANNEL_ID = 222
VOICE_CHANNEL_ID = 333


# ============================================================================
# Test doubles
# ============================================================================


class FakeHandle(PlaybackHandle):
    """Records control calls instead of driving audio."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []
        self.ended = False
        self.elapsed_ms = 0

    def pause(self) -> None:
        self.calls.append(("pause", None))

    def resume(self) -> None:
        self.calls.append(("resume", None))

    def end(self) -> None:
        self.ended = True
        self.calls.append(("end", None))

    def set_volume(self, gain: float) -> None:
        self.calls.append(("set_volume", gain))

    @property
    def stream_time(self) -> int:
        return self.elapsed_ms


class PlayCall:
    def __init__(self, stream: Any, options: PlayOptions, on_finish, on_error, handle) -> None:
        self.stream = stream
        self.options = options
        self.on_finish = on_finish
        self.on_error = on_error
        self.handle = handle


class FakeTransport(VoiceTransport):
    """In-memory voice transport; tests fire the finish/error callbacks by hand."""

    def __init__(self) -> None:
        self.connections: dict[int, Any] = {}
        self.joined: list[tuple[int, int]] = []
        self.left: list[Any] = []
        self.streams: list[Track] = []
        self.plays: list[PlayCall] = []
        self.stream_errors: list[BaseException] = []
        self.join_error: BaseException | None = None
        self.play_errors: list[BaseException] = []
        self.discarded: list[Any] = []
        self.stream_gate: asyncio.Event | None = None

    async def join(self, guild_id: int, channel_id: int) -> Any:
        if self.join_error is not None:
            raise self.join_error
        connection = f"connection-{guild_id}-{channel_id}"
        self.connections[guild_id] = connection
        self.joined.append((guild_id, channel_id))
        return connection

    async def leave(self, connection: Any) -> None:
        self.left.append(connection)
        for guild_id, conn in list(self.connections.items()):
            if conn == connection:
                del self.connections[guild_id]

    def connection_for(self, guild_id: int) -> Any | None:
        return self.connections.get(guild_id)

    def is_connected(self, guild_id: int) -> bool:
        return guild_id in self.connections

    async def create_stream(self, track: Track, options: PlayOptions) -> Any:
        self.streams.append(track)
        if self.stream_gate is not None:
            await self.stream_gate.wait()
        if self.stream_errors:
            raise self.stream_errors.pop(0)
        return f"stream:{track.title}"

    def discard_stream(self, stream: Any) -> None:
        self.discarded.append(stream)

    def play(self, connection, stream, options, *, on_finish, on_error) -> FakeHandle:
        if self.play_errors:
            raise self.play_errors.pop(0)
        handle = FakeHandle()
        self.plays.append(PlayCall(stream, options, on_finish, on_error, handle))
        return handle

    @property
    def last(self) -> PlayCall:
        return self.plays[-1]

    @property
    def played_titles(self) -> list[str]:
        return [call.stream.removeprefix("stream:") for call in self.plays]


class FakeResolver(TrackResolver):
    def __init__(self, candidates: list[Track] | None = None) -> None:
        self.candidates = candidates or []
        self.resolved: list[str] = []

    def is_url(self, query: str) -> bool:
        return query.startswith(("http://", "https://"))

    async def resolve_url(self, url: str) -> Track:
        self.resolved.append(url)
        return make_track("Resolved", url=url)

    async def search(self, query: str, limit: int = 10) -> list[Track]:
        return self.candidates[:limit]

    async def stream_url(self, track: Track) -> str:
        return f"{track.url}/stream"


class FakeLyrics(LyricsProvider):
    def __init__(self, lyrics: str | None = "la la la") -> None:
        self.lyrics = lyrics
        self.lookups: list[tuple[str, str | None]] = []

    async def find_lyrics(self, title: str, author: str | None = None) -> str | None:
        self.lookups.append((title, author))
        return self.lyrics


class FixedSelector(TrackSelector):
    def __init__(self, choice: int | str) -> None:
        self.choice = choice
        self.offered: list[Track] = []

    async def choose(self, candidates: list[Track]) -> int | str:
        self.offered = list(candidates)
        return self.choice


class EventRecorder:
    """Subscribes to event types and keeps what was published, in order."""

    def __init__(self, bus: EventBus) -> None:
        self.bus = bus
        self.events: list[DomainEvent] = []

    def watch(self, *event_types: type[DomainEvent]) -> EventRecorder:
        for event_type in event_types:
            self.bus.subscribe(event_type, self._record)
        return self

    async def _record(self, event: DomainEvent) -> None:
        self.events.append(event)

    def of(self, event_type: type[DomainEvent]) -> list[DomainEvent]:
        return [e for e in self.events if isinstance(e, event_type)]


def make_track(title: str = "Test Track", *, seconds: int = 180, url: str | None = None) -> Track:
    slug = title.lower().replace(" ", "-")
    return Track(
        title=title,
        url=url or f"https://youtube.com/watch?v={slug}",
        thumbnail="https://example.com/thumb.jpg",
        author="Test Artist",
        duration=TrackDuration.from_seconds(seconds),
    )


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def sample_track() -> Track:
    return make_track()


@pytest.fixture
def abc_tracks() -> list[Track]:
    return [make_track("A"), make_track("B"), make_track("C")]


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def recorder(event_bus) -> EventRecorder:
    return EventRecorder(event_bus)


@pytest.fixture
def registry() -> QueueRegistry:
    return QueueRegistry()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def controller(transport, registry, event_bus) -> PlaybackController:
    return PlaybackController(transport=transport, registry=registry, event_bus=event_bus)


@pytest.fixture
def resolver() -> FakeResolver:
    return FakeResolver([make_track("First"), make_track("Second"), make_track("Third")])


@pytest.fixture
def lyrics() -> FakeLyrics:
    return FakeLyrics()


@pytest.fixture
def player(registry, controller, transport, resolver, lyrics, event_bus) -> MusicPlayer:
    return MusicPlayer(
        registry=registry,
        controller=controller,
        transport=transport,
        resolver=resolver,
        lyrics_provider=lyrics,
        event_bus=event_bus,
        selection_timeout=0.05,
    )


@pytest.fixture
def new_queue(registry, transport):
    """Build a registered queue holding ``tracks`` with a live fake connection."""

    def _make(tracks: list[Track]):
        transport.connections[GUILD_ID] = "connection"
        queue, _ = registry.get_or_create(
            GUILD_ID,
            text_channel_id=TEXT_CHANNEL_ID,
            voice_channel_id=VOICE_CHANNEL_ID,
            connection="connection",
        )
        queue.add_tracks(tracks)
        return queue

    return _make
