"""Track progress computation for now-playing displays."""

from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, Field

from discord_queue_player.domain.music.entities import TrackDuration
from discord_queue_player.domain.shared.constants import ProgressBarConstants


class ProgressBar(BaseModel):
    model_config = ConfigDict(frozen=True)

    bar: str
    percent: int = Field(ge=0, le=100)

    def __str__(self) -> str:
        return f"{self.bar}  [{self.percent}%]"


def _render(marker_index: int) -> str:
    size = ProgressBarConstants.SIZE
    marker_index = max(0, min(marker_index, size - 1))
    line = ProgressBarConstants.LINE
    return line * marker_index + ProgressBarConstants.SLIDER + line * (size - marker_index - 1)


EMPTY_BAR = _render(0)


def build_progress_bar(
    elapsed_ms: int | float | None, duration: TrackDuration | int | float | None
) -> ProgressBar:
    """Place a marker on an 11-segment bar at the elapsed fraction of ``duration``.

    ``duration`` is a :class:`TrackDuration` or a length in seconds. Missing,
    zero or NaN inputs render the empty bar at 0%. Under 5% the bar stays
    empty but the percentage is still reported. Elapsed time past the end
    renders a full bar at 100%.
    """
    total_seconds = duration.total_seconds if isinstance(duration, TrackDuration) else duration
    if (
        not total_seconds
        or not elapsed_ms
        or math.isnan(total_seconds)
        or math.isnan(elapsed_ms)
        or total_seconds < 0
        or elapsed_ms < 0
    ):
        return ProgressBar(bar=EMPTY_BAR, percent=0)

    total_ms = total_seconds * 1000
    if elapsed_ms >= total_ms:
        return ProgressBar(bar=_render(ProgressBarConstants.SIZE - 1), percent=100)

    fraction = elapsed_ms / total_ms
    percent = math.floor(fraction * 100)
    if percent < ProgressBarConstants.MIN_VISIBLE_PERCENT:
        return ProgressBar(bar=EMPTY_BAR, percent=percent)
    return ProgressBar(bar=_render(math.floor(fraction * ProgressBarConstants.SIZE)), percent=percent)
