"""Core domain entities for the music bounded context."""

from __future__ import annotations

import math
import random
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from discord_queue_player.domain.music.value_objects import (
    ChannelKind,
    PlayingState,
    RepeatMode,
    SearchType,
    TimestampKind,
)
from discord_queue_player.domain.shared.constants import AudioConstants
from discord_queue_player.domain.shared.datetime_utils import utcnow
from discord_queue_player.domain.shared.exceptions import (
    InvalidVolumeError,
    TrackNotFoundError,
    ValidationError,
)
from discord_queue_player.domain.shared.messages import ErrorMessages
from discord_queue_player.domain.shared.types import (
    DiscordSnowflake,
    Hours,
    HttpUrlStr,
    MinutesPart,
    NonEmptyStr,
    NonNegativeInt,
    SecondsPart,
    TrackTitleStr,
    UtcDatetimeField,
)


class TrackDuration(BaseModel):
    """A track length split into hours, minutes and seconds."""

    model_config = ConfigDict(frozen=True)

    hours: Hours = 0
    minutes: MinutesPart = 0
    seconds: SecondsPart = 0

    @classmethod
    def from_seconds(cls, total: int | float | None) -> TrackDuration:
        """Build a duration from a second count; missing or negative values give zero."""
        if total is None or not math.isfinite(total) or total <= 0:
            return cls()
        hours, remainder = divmod(int(total), 3600)
        minutes, seconds = divmod(remainder, 60)
        return cls(hours=hours, minutes=minutes, seconds=seconds)

    @property
    def total_seconds(self) -> int:
        return self.hours * 3600 + self.minutes * 60 + self.seconds

    @property
    def total_milliseconds(self) -> int:
        return self.total_seconds * 1000

    @property
    def formatted(self) -> str:
        """Format as zero-padded HH:MM:SS."""
        return f"{self.hours:02d}:{self.minutes:02d}:{self.seconds:02d}"


class Track(BaseModel):
    """Immutable value object representing a playable track."""

    model_config = ConfigDict(frozen=True)

    title: TrackTitleStr
    url: HttpUrlStr
    thumbnail: HttpUrlStr | None = None
    author: NonEmptyStr | None = None
    search_type: SearchType = SearchType.URL
    duration: TrackDuration = Field(default_factory=TrackDuration)

    # Request metadata (set when queued)
    requested_by_id: DiscordSnowflake | None = None
    requested_by_name: NonEmptyStr | None = None
    text_channel_id: DiscordSnowflake | None = None
    voice_channel_id: DiscordSnowflake | None = None

    @property
    def display_title(self) -> str:
        if self.duration.total_seconds:
            return f"{self.title} [{self.duration.formatted}]"
        return self.title

    def with_request(
        self,
        *,
        requested_by_id: DiscordSnowflake,
        requested_by_name: NonEmptyStr,
        text_channel_id: DiscordSnowflake | None = None,
        voice_channel_id: DiscordSnowflake | None = None,
    ) -> Track:
        """Return a copy of this track carrying requester and channel references."""
        return self.model_copy(
            update={
                "requested_by_id": requested_by_id,
                "requested_by_name": requested_by_name,
                "text_channel_id": text_channel_id,
                "voice_channel_id": voice_channel_id,
            }
        )


class RemovedTrack(BaseModel):
    """Result of removing a track from a queue."""

    model_config = ConfigDict(frozen=True)

    track: Track
    remaining: NonNegativeInt


class GuildQueue(BaseModel):
    """Aggregate root owning one guild's ordered play-list and playback settings.

    ``tracks[0]`` is the now-playing track while playback is active.
    ``connection`` and ``dispatcher`` are transport handles that the queue
    stores and forwards calls to but never creates; they are left out of
    dumps and passed through by reference on :meth:`to_dict`/:meth:`from_dict`.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    guild_id: DiscordSnowflake
    tracks: list[Track] = Field(default_factory=list)
    repeat_mode: RepeatMode = RepeatMode.DISABLED
    volume: int | float = AudioConstants.DEFAULT_VOLUME
    filter: NonEmptyStr | None = None
    playing_state: PlayingState = PlayingState.STOPPED
    text_channel_id: DiscordSnowflake | None = None
    voice_channel_id: DiscordSnowflake | None = None
    start_timestamp: UtcDatetimeField | None = None
    end_timestamp: UtcDatetimeField | None = None

    # Advance token, bumped whenever a track starts or an advance is claimed
    version: NonNegativeInt = 0

    connection: Any = Field(default=None, exclude=True)
    dispatcher: Any = Field(default=None, exclude=True)

    @property
    def is_empty(self) -> bool:
        return not self.tracks

    @property
    def now_playing(self) -> Track | None:
        return self.tracks[0] if self.tracks else None

    @property
    def gain(self) -> float:
        """Linear gain applied to the live stream."""
        return self.volume / AudioConstants.VOLUME_SCALE

    @property
    def total_duration_seconds(self) -> int:
        return sum(track.duration.total_seconds for track in self.tracks)

    def add_tracks(self, *tracks: Track | list[Track] | tuple[Track, ...]) -> int:
        """Append one or more tracks, returning the 0-based position of the first.

        Accepts ``add_tracks(a)``, ``add_tracks(a, b)`` and ``add_tracks([a, b])``.
        Nothing is appended if any item is ``None``.
        """
        items: list[Any]
        if len(tracks) == 1 and isinstance(tracks[0], list | tuple):
            items = list(tracks[0])
        else:
            items = list(tracks)

        if any(item is None for item in items):
            raise ValidationError(ErrorMessages.NULL_TRACK, field="tracks")

        position = len(self.tracks)
        self.tracks.extend(items)
        return position

    def set_repeat_mode(self, mode: RepeatMode) -> RepeatMode:
        self.repeat_mode = mode
        return self.repeat_mode

    def toggle_repeat_track(self) -> RepeatMode:
        return self.set_repeat_mode(self.repeat_mode.toggled(RepeatMode.TRACK))

    def toggle_repeat_queue(self) -> RepeatMode:
        return self.set_repeat_mode(self.repeat_mode.toggled(RepeatMode.QUEUE))

    def set_volume(self, value: Any) -> bool:
        """Validate and store a new volume.

        Returns whether the new gain was applied to a live dispatcher.
        """
        if (
            isinstance(value, bool)
            or not isinstance(value, int | float)
            or not math.isfinite(value)
            or value <= 0
        ):
            raise InvalidVolumeError(value)

        self.volume = value
        if self.dispatcher is None:
            return False
        self.dispatcher.set_volume(self.gain)
        return True

    def set_channel(self, kind: ChannelKind, channel_id: DiscordSnowflake | None) -> None:
        if channel_id is None:
            raise ValidationError(ErrorMessages.NULL_CHANNEL, field=f"{kind.value}_channel_id")
        if kind is ChannelKind.TEXT:
            self.text_channel_id = channel_id
        else:
            self.voice_channel_id = channel_id

    def set_timestamp(self, kind: TimestampKind, value: datetime | None = None) -> datetime:
        stamp = value or utcnow()
        if kind is TimestampKind.START:
            self.start_timestamp = stamp
        else:
            self.end_timestamp = stamp
        return stamp

    def remove_track(self, selector: int | str) -> RemovedTrack:
        """Remove a track by 1-based position or exact title.

        A string made only of digits is read as a position.
        """
        index = self._find_index(selector)
        if index is None:
            raise TrackNotFoundError(selector)
        track = self.tracks.pop(index)
        return RemovedTrack(track=track, remaining=len(self.tracks))

    def _find_index(self, selector: int | str) -> int | None:
        if isinstance(selector, bool):
            return None
        if isinstance(selector, str) and selector.strip().isdigit():
            selector = int(selector.strip())
        if isinstance(selector, int):
            if 1 <= selector <= len(self.tracks):
                return selector - 1
            return None
        if isinstance(selector, str):
            for index, track in enumerate(self.tracks):
                if track.title == selector:
                    return index
        return None

    def shuffle(self, rng: random.Random | None = None) -> None:
        """Fisher-Yates shuffle of every track after the now-playing one."""
        rng = rng or random
        tracks = self.tracks
        for i in range(len(tracks) - 1, 1, -1):
            j = rng.randint(1, i)
            tracks[i], tracks[j] = tracks[j], tracks[i]

    def rotate(self) -> Track | None:
        """Move the now-playing track to the back of the queue."""
        if not self.tracks:
            return None
        track = self.tracks.pop(0)
        self.tracks.append(track)
        return track

    def pop_current(self) -> Track | None:
        return self.tracks.pop(0) if self.tracks else None

    def clear(self) -> int:
        """Drop all tracks and return the count removed."""
        count = len(self.tracks)
        self.tracks.clear()
        return count

    def to_dict(self) -> dict[str, Any]:
        """Plain JSON-compatible snapshot, with transport handles kept by reference."""
        data = self.model_dump(mode="json")
        data["connection"] = self.connection
        data["dispatcher"] = self.dispatcher
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GuildQueue:
        return cls.model_validate(data)
