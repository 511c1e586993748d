"""Named audio filter presets and their FFmpeg expressions."""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict

from discord_queue_player.domain.shared.exceptions import (
    InvalidFilterTypeError,
    UnknownFilterError,
)
from discord_queue_player.domain.shared.types import NonEmptyStr


class AudioFilter(BaseModel):
    """A named preset mapped to an FFmpeg ``-af`` filter graph."""

    model_config = ConfigDict(frozen=True)

    name: NonEmptyStr
    expression: NonEmptyStr


_PRESETS: tuple[AudioFilter, ...] = (
    AudioFilter(name="3d", expression="apulsator=hz=0.125"),
    AudioFilter(name="bassboost", expression="bass=g=10,dynaudnorm=f=150:g=15"),
    AudioFilter(name="echo", expression="aecho=0.8:0.9:1000:0.3"),
    AudioFilter(name="flanger", expression="flanger"),
    AudioFilter(name="gate", expression="agate"),
    AudioFilter(name="haas", expression="haas"),
    AudioFilter(name="karaoke", expression="stereotools=mlev=0.1"),
    AudioFilter(name="nightcore", expression="asetrate=48000*1.25,aresample=48000,bass=g=5"),
    AudioFilter(name="reverse", expression="areverse"),
    AudioFilter(name="vaporwave", expression="asetrate=48000*0.8,aresample=48000,atempo=1.1"),
    AudioFilter(name="mcompand", expression="mcompand"),
    AudioFilter(name="phaser", expression="aphaser=in_gain=0.4"),
    AudioFilter(name="tremolo", expression="tremolo"),
    AudioFilter(name="surround", expression="surround"),
    AudioFilter(name="earwax", expression="earwax"),
)

FILTER_PRESETS: dict[str, AudioFilter] = {preset.name: preset for preset in _PRESETS}


def _is_numeric(value: str) -> bool:
    try:
        number = float(value)
    except ValueError:
        return False
    return math.isfinite(number)


def validate_filter(value: Any) -> AudioFilter:
    """Resolve a user-supplied filter name to its preset.

    Numbers, and strings that parse as numbers, raise
    :class:`InvalidFilterTypeError`. Empty or unknown names raise
    :class:`UnknownFilterError`. Lookup ignores case and surrounding spaces.
    """
    if isinstance(value, bool) or isinstance(value, int | float):
        raise InvalidFilterTypeError(value)
    if value is None or not isinstance(value, str) or not value.strip():
        raise UnknownFilterError(value)

    name = value.strip()
    if _is_numeric(name):
        raise InvalidFilterTypeError(value)

    preset = FILTER_PRESETS.get(name.lower())
    if preset is None:
        raise UnknownFilterError(value)
    return preset


def get_filter_expression(name: str | None) -> str | None:
    """Return the FFmpeg expression for a stored filter name, if any."""
    if name is None:
        return None
    preset = FILTER_PRESETS.get(name)
    return preset.expression if preset else None


def list_filters() -> list[AudioFilter]:
    return list(_PRESETS)
