"""TrackSelector that lists search results in chat and waits for a numbered reply."""

from __future__ import annotations

from typing import TYPE_CHECKING

import discord

from discord_queue_player.application.interfaces.track_selector import TrackSelector
from discord_queue_player.domain.shared.messages import DiscordUIMessages
from discord_queue_player.utils.reply import format_track_list

if TYPE_CHECKING:
    from discord.abc import Messageable

    from ...domain.music.entities import Track


class MessageTrackSelector(TrackSelector):
    """Posts the candidates to ``channel`` and returns the requester's next message.

    The wait has no timeout of its own; the caller bounds it.
    """

    def __init__(
        self,
        client: discord.Client,
        channel: Messageable,
        *,
        user_id: int,
        channel_id: int,
    ) -> None:
        self._client = client
        self._channel = channel
        self._user_id = user_id
        self._channel_id = channel_id

    def _is_reply(self, message: discord.Message) -> bool:
        return message.author.id == self._user_id and message.channel.id == self._channel_id

    async def choose(self, candidates: list[Track]) -> str:
        await self._channel.send(
            DiscordUIMessages.SELECT_TRACK.format(
                count=len(candidates), choices=format_track_list(candidates)
            )
        )
        message = await self._client.wait_for("message", check=self._is_reply)
        return message.content.strip()
