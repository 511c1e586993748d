"""
Unit Tests for Music Domain Entities

Tests for:
- TrackDuration conversions and formatting
- Track validation and request metadata
- GuildQueue add/remove/shuffle/rotate, repeat modes, volume and channels
- Snapshot round trips
"""

import random
from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest
from conftest import make_track
from pydantic import ValidationError as PydanticValidationError

from discord_queue_player.domain.music.entities import GuildQueue, Track, TrackDuration
from discord_queue_player.domain.music.value_objects import (
    ChannelKind,
    ControllerState,
    RepeatMode,
    TimestampKind,
)
from discord_queue_player.domain.shared.exceptions import (
    InvalidVolumeError,
    TrackNotFoundError,
    ValidationError,
)

# =============================================================================
# TrackDuration
# =============================================================================


class TestTrackDuration:
    """Tests for TrackDuration."""

    def test_from_seconds_splits_parts(self):
        duration = TrackDuration.from_seconds(3725)

        assert (duration.hours, duration.minutes, duration.seconds) == (1, 2, 5)
        assert duration.total_seconds == 3725
        assert duration.total_milliseconds == 3_725_000
        assert duration.formatted == "01:02:05"

    @pytest.mark.parametrize("value", [None, 0, -5, float("nan"), float("inf")])
    def test_from_seconds_invalid_gives_zero(self, value):
        """Missing or nonsensical lengths should produce a zero duration."""
        assert TrackDuration.from_seconds(value).total_seconds == 0

    def test_fractional_seconds_truncate(self):
        assert TrackDuration.from_seconds(61.9).formatted == "00:01:01"

    def test_rejects_out_of_range_minutes(self):
        with pytest.raises(PydanticValidationError):
            TrackDuration(minutes=60)


# =============================================================================
# Track
# =============================================================================


class TestTrack:
    """Tests for the Track value object."""

    def test_requires_http_url(self):
        with pytest.raises(PydanticValidationError):
            Track(title="Song", url="ftp://example.com/song")

    def test_rejects_empty_title(self):
        with pytest.raises(PydanticValidationError):
            Track(title="", url="https://example.com")

    def test_is_frozen(self, sample_track):
        with pytest.raises(PydanticValidationError):
            sample_track.title = "Other"

    def test_with_request_copies_metadata(self, sample_track):
        requested = sample_track.with_request(
            requested_by_id=42, requested_by_name="Listener", text_channel_id=7
        )

        assert requested is not sample_track
        assert requested.requested_by_id == 42
        assert requested.requested_by_name == "Listener"
        assert requested.text_channel_id == 7
        assert sample_track.requested_by_id is None

    def test_display_title(self):
        assert make_track("A", seconds=90).display_title == "A [00:01:30]"
        assert make_track("A", seconds=0).display_title == "A"


# =============================================================================
# GuildQueue
# =============================================================================


@pytest.fixture
def queue():
    return GuildQueue(guild_id=111)


class TestGuildQueueTracks:
    """Tests for adding, removing and reordering tracks."""

    def test_new_queue_defaults(self, queue):
        assert queue.is_empty
        assert queue.now_playing is None
        assert queue.repeat_mode is RepeatMode.DISABLED
        assert queue.volume == 5
        assert queue.gain == 1.0
        assert queue.version == 0

    def test_add_tracks_preserves_order(self, queue, abc_tracks):
        """Tracks added one at a time, variadically or as a list keep their order."""
        assert queue.add_tracks(abc_tracks[0]) == 0
        assert queue.add_tracks(abc_tracks[1], abc_tracks[2]) == 1
        assert queue.add_tracks([make_track("D")]) == 3

        assert [t.title for t in queue.tracks] == ["A", "B", "C", "D"]
        assert queue.now_playing.title == "A"

    def test_add_none_rejected_atomically(self, queue, sample_track):
        """A None anywhere in the batch should add nothing."""
        with pytest.raises(ValidationError):
            queue.add_tracks([sample_track, None])

        assert queue.is_empty

    def test_total_duration(self, queue):
        queue.add_tracks(make_track("A", seconds=60), make_track("B", seconds=30))

        assert queue.total_duration_seconds == 90

    @pytest.mark.parametrize("selector", [2, "2", " 2 "])
    def test_remove_by_position(self, queue, abc_tracks, selector):
        queue.add_tracks(abc_tracks)

        removed = queue.remove_track(selector)

        assert removed.track.title == "B"
        assert removed.remaining == 2
        assert [t.title for t in queue.tracks] == ["A", "C"]

    def test_remove_by_title(self, queue, abc_tracks):
        queue.add_tracks(abc_tracks)

        removed = queue.remove_track("C")

        assert removed.track.title == "C"

    @pytest.mark.parametrize("selector", [0, 4, -1, "Nope", "a", True])
    def test_remove_missing(self, queue, abc_tracks, selector):
        queue.add_tracks(abc_tracks)

        with pytest.raises(TrackNotFoundError):
            queue.remove_track(selector)

        assert len(queue.tracks) == 3

    def test_shuffle_pins_head_and_keeps_tracks(self, queue):
        tracks = [make_track(f"T{i}") for i in range(20)]
        queue.add_tracks(tracks)

        queue.shuffle(random.Random(1234))

        assert queue.tracks[0] is tracks[0]
        assert sorted(t.title for t in queue.tracks) == sorted(t.title for t in tracks)

    def test_shuffle_two_tracks_is_noop(self, queue):
        queue.add_tracks(make_track("A"), make_track("B"))

        queue.shuffle()

        assert [t.title for t in queue.tracks] == ["A", "B"]

    def test_shuffle_reaches_every_position(self, queue):
        """Over many runs each non-head track should land in each later slot."""
        queue.add_tracks([make_track(f"T{i}") for i in range(4)])
        rng = random.Random(7)
        seen = set()
        for _ in range(200):
            queue.shuffle(rng)
            seen.add(tuple(t.title for t in queue.tracks))

        assert all(order[0] == "T0" for order in seen)
        assert len(seen) == 6

    def test_rotate_and_pop(self, queue, abc_tracks):
        queue.add_tracks(abc_tracks)

        assert queue.rotate().title == "A"
        assert [t.title for t in queue.tracks] == ["B", "C", "A"]
        assert queue.pop_current().title == "B"
        assert queue.clear() == 2
        assert queue.rotate() is None
        assert queue.pop_current() is None


class TestGuildQueueSettings:
    """Tests for repeat modes, volume, channels and timestamps."""

    def test_repeat_modes_exclusive(self, queue):
        assert queue.toggle_repeat_track() is RepeatMode.TRACK
        assert queue.toggle_repeat_queue() is RepeatMode.QUEUE
        assert queue.repeat_mode is RepeatMode.QUEUE
        assert queue.toggle_repeat_queue() is RepeatMode.DISABLED
        assert queue.toggle_repeat_track() is RepeatMode.TRACK
        assert queue.toggle_repeat_track() is RepeatMode.DISABLED

    @pytest.mark.parametrize("value", [0, -1, float("nan"), float("inf"), "5", None, True])
    def test_invalid_volume(self, queue, value):
        with pytest.raises(InvalidVolumeError):
            queue.set_volume(value)

        assert queue.volume == 5

    def test_volume_applies_to_dispatcher(self, queue):
        queue.dispatcher = MagicMock()

        assert queue.set_volume(2.5) is True
        queue.dispatcher.set_volume.assert_called_once_with(0.5)

    def test_volume_without_dispatcher(self, queue):
        assert queue.set_volume(10) is False
        assert queue.gain == 2.0

    def test_set_channel(self, queue):
        queue.set_channel(ChannelKind.TEXT, 10)
        queue.set_channel(ChannelKind.VOICE, 20)

        assert (queue.text_channel_id, queue.voice_channel_id) == (10, 20)

    def test_set_channel_none(self, queue):
        with pytest.raises(ValidationError):
            queue.set_channel(ChannelKind.TEXT, None)

    def test_set_timestamp(self, queue):
        stamp = datetime(2024, 1, 1, tzinfo=UTC)

        assert queue.set_timestamp(TimestampKind.START, stamp) == stamp
        assert queue.start_timestamp == stamp
        assert queue.set_timestamp(TimestampKind.END).tzinfo is not None


class TestGuildQueueSnapshot:
    """Tests for to_dict / from_dict."""

    def test_round_trip_keeps_fields_and_handles(self, queue, abc_tracks):
        connection, dispatcher = object(), object()
        queue.add_tracks(abc_tracks)
        queue.set_repeat_mode(RepeatMode.QUEUE)
        queue.filter = "echo"
        queue.connection = connection
        queue.dispatcher = dispatcher
        queue.set_timestamp(TimestampKind.START)

        data = queue.to_dict()
        restored = GuildQueue.from_dict(data)

        assert data["repeat_mode"] == "queue"
        assert isinstance(data["start_timestamp"], str)
        assert restored.tracks == queue.tracks
        assert restored.repeat_mode is RepeatMode.QUEUE
        assert restored.filter == "echo"
        assert restored.start_timestamp == queue.start_timestamp
        assert restored.connection is connection
        assert restored.dispatcher is dispatcher


class TestControllerState:
    def test_is_active(self):
        assert ControllerState.PLAYING.is_active
        assert ControllerState.PAUSED.is_active
        assert not ControllerState.IDLE.is_active
        assert not ControllerState.ENDED.is_active
