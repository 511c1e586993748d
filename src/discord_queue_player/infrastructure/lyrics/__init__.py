"""Lyrics lookup over HTTP."""

from discord_queue_player.infrastructure.lyrics.lyrics_client import LyricsOvhClient

__all__ = ["LyricsOvhClient"]
