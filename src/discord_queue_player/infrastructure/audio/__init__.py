"""Audio infrastructure - yt-dlp based track resolution."""

from discord_queue_player.infrastructure.audio.ytdlp_resolver import YtDlpResolver

__all__ = ["YtDlpResolver"]
