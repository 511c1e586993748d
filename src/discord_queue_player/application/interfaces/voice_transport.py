"""Port interface for voice connections and the live audio stream."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict

from discord_queue_player.domain.shared.types import DiscordSnowflake, PositiveFloat

if TYPE_CHECKING:
    from ...domain.music.entities import Track

FinishCallback = Callable[[], Awaitable[None]]
ErrorCallback = Callable[[BaseException], Awaitable[None]]


class PlayOptions(BaseModel):
    """Per-stream settings handed to the transport when a track starts."""

    model_config = ConfigDict(frozen=True)

    gain: PositiveFloat = 1.0
    filter_expression: str | None = None


class PlaybackHandle(ABC):
    """Live control object for one playing stream (the dispatcher)."""

    @abstractmethod
    def pause(self) -> None:
        ...

    @abstractmethod
    def resume(self) -> None:
        ...

    @abstractmethod
    def end(self) -> None:
        """Stop the stream. Implementations must not fire the finish callback afterwards."""
        ...

    @abstractmethod
    def set_volume(self, gain: float) -> None:
        ...

    @property
    @abstractmethod
    def stream_time(self) -> int:
        """Elapsed playback time in milliseconds."""
        ...


class VoiceTransport(ABC):
    """Interface for joining voice channels and streaming audio into them."""

    @abstractmethod
    async def join(self, guild_id: DiscordSnowflake, channel_id: DiscordSnowflake) -> Any:
        """Connect to a voice channel and return the connection handle."""
        ...

    @abstractmethod
    async def leave(self, connection: Any) -> None:
        ...

    @abstractmethod
    def connection_for(self, guild_id: DiscordSnowflake) -> Any | None:
        """Return the live connection handle for a guild, if any."""
        ...

    @abstractmethod
    def is_connected(self, guild_id: DiscordSnowflake) -> bool:
        ...

    @abstractmethod
    async def create_stream(self, track: "Track", options: PlayOptions) -> Any:
        """Fetch a playable audio source for ``track``."""
        ...

    @abstractmethod
    def discard_stream(self, stream: Any) -> None:
        """Release a stream from ``create_stream`` that will never be played."""
        ...

    @abstractmethod
    def play(
        self,
        connection: Any,
        stream: Any,
        options: PlayOptions,
        *,
        on_finish: FinishCallback,
        on_error: ErrorCallback,
    ) -> PlaybackHandle:
        """Start ``stream`` on ``connection``.

        Exactly one of ``on_finish`` or ``on_error`` is awaited when the
        stream stops on its own.
        """
        ...
