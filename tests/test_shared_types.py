"""Unit tests for domain/shared/types.py Pydantic Annotated constraints."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest
from pydantic import BaseModel, ValidationError

from discord_queue_player.domain.shared.types import (
    DiscordSnowflake,
    HttpUrlStr,
    MinutesPart,
    NonEmptyStr,
    PositiveFloat,
    TrackTitleStr,
    UtcDatetimeField,
)


def _model_for(annotation):
    """Create a one-field model with the given annotation."""
    return type("M", (BaseModel,), {"__annotations__": {"v": annotation}})


class TestNumericTypes:
    @pytest.mark.parametrize("value", [1, 2**64 - 1])
    def test_snowflake_bounds_ok(self, value):
        assert _model_for(DiscordSnowflake)(v=value).v == value

    @pytest.mark.parametrize("value", [0, -1, 2**64])
    def test_snowflake_out_of_range(self, value):
        with pytest.raises(ValidationError):
            _model_for(DiscordSnowflake)(v=value)

    def test_positive_float(self):
        with pytest.raises(ValidationError):
            _model_for(PositiveFloat)(v=0.0)

    def test_minutes_part(self):
        with pytest.raises(ValidationError):
            _model_for(MinutesPart)(v=60)


class TestStringTypes:
    def test_non_empty(self):
        with pytest.raises(ValidationError):
            _model_for(NonEmptyStr)(v="")

    def test_title_length(self):
        assert _model_for(TrackTitleStr)(v="x" * 500).v
        with pytest.raises(ValidationError):
            _model_for(TrackTitleStr)(v="x" * 501)

    @pytest.mark.parametrize("value", ["http://a", "https://a"])
    def test_http_url_ok(self, value):
        assert _model_for(HttpUrlStr)(v=value).v == value

    def test_http_url_rejects_other_schemes(self):
        with pytest.raises(ValidationError):
            _model_for(HttpUrlStr)(v="ftp://a")


class TestUtcDatetime:
    def test_converts_to_utc(self):
        local = datetime(2024, 1, 1, 12, tzinfo=timezone(timedelta(hours=2)))

        assert _model_for(UtcDatetimeField)(v=local).v == datetime(2024, 1, 1, 10, tzinfo=UTC)

    def test_accepts_iso_z_string(self):
        value = _model_for(UtcDatetimeField)(v="2024-01-01T00:00:00Z").v

        assert value.tzinfo is not None

    def test_rejects_naive(self):
        with pytest.raises(ValidationError):
            _model_for(UtcDatetimeField)(v=datetime(2024, 1, 1))
