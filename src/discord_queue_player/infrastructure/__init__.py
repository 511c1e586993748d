"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Discord (bot, cogs, voice transport, track selection)
- Audio (yt-dlp track resolution)
- Lyrics (lyrics.ovh over httpx)
"""

from discord_queue_player.infrastructure.discord.bot import create_bot
from discord_queue_player.infrastructure.discord.voice_transport import DiscordVoiceTransport

__all__ = [
    "create_bot",
    "DiscordVoiceTransport",
]
