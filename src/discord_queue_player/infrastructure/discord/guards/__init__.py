"""Voice channel guard functions for Discord cogs."""

from discord_queue_player.infrastructure.discord.guards.voice_guards import (
    get_member,
    get_voice_channel_id,
    send_ephemeral,
)

__all__ = [
    "get_member",
    "get_voice_channel_id",
    "send_ephemeral",
]
