"""Utility functions for formatting Discord messages."""

from __future__ import annotations

from functools import cache
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..domain.music.entities import Track


@cache
def format_duration(seconds: int | float | None) -> str:
    if seconds is None:
        return "–"

    total_seconds = int(seconds)
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    secs = total_seconds % 60

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


@cache
def truncate(text: str, max_length: int = 90) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 1] + "…"


def format_track_line(index: int, track: Track, *, max_length: int = 60) -> str:
    """Render ``track`` as a numbered list line with its duration."""
    return f"`{index}.` {truncate(track.title, max_length)} `[{track.duration.formatted}]`"


def format_track_list(tracks: list[Track], *, start: int = 1, limit: int | None = None) -> str:
    shown = tracks if limit is None else tracks[:limit]
    return "\n".join(format_track_line(start + i, track) for i, track in enumerate(shown))


def split_message(text: str, max_length: int = 2000) -> list[str]:
    """Split long text on line boundaries into chunks Discord will accept."""
    chunks: list[str] = []
    current = ""
    for line in text.splitlines(keepends=True):
        while len(line) > max_length:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:max_length])
            line = line[max_length:]
        if len(current) + len(line) > max_length:
            chunks.append(current)
            current = ""
        current += line
    if current:
        chunks.append(current)
    return chunks
