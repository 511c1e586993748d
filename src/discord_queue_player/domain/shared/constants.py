"""Centralized constants shared across layers."""

from __future__ import annotations


class AudioConstants:
    """Audio and FFmpeg configuration constants."""

    FFMPEG_BEFORE_OPTIONS_DEFAULT = "-reconnect 1 -reconnect_streamed 1 -reconnect_delay_max 5"
    FFMPEG_OPTIONS_DEFAULT = "-vn"
    FFMPEG_EXECUTABLE = "ffmpeg"
    FFMPEG_FILTER_OPTION = '-af "{expression}"'

    YTDLP_FORMAT_DEFAULT = "bestaudio/best"

    # Queue volume is stored on a 0..∞ scale where this value is unity gain.
    VOLUME_SCALE = 5
    DEFAULT_VOLUME = 5

    CONNECT_TIMEOUT_SECONDS = 10.0


class LimitConstants:
    """Numeric limits and constraints."""

    SEARCH_RESULT_LIMIT = 10
    SELECTION_TIMEOUT_SECONDS = 30.0
    QUEUE_PAGE_SIZE = 10


class ProgressBarConstants:
    SIZE = 11
    LINE = "▬"
    SLIDER = "🔘"
    MIN_VISIBLE_PERCENT = 5
