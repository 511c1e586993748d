"""Process-wide mapping from guild to its active queue."""

from __future__ import annotations

import logging
from typing import Any

from ...domain.music.entities import GuildQueue
from ...domain.shared.constants import AudioConstants
from ...domain.shared.messages import LogTemplates
from ...domain.shared.types import DiscordSnowflake

logger = logging.getLogger(__name__)


class QueueRegistry:
    """Owns every live :class:`GuildQueue`, at most one per guild.

    Built once per process and passed to whoever needs it.
    :meth:`get_or_create` is the only way a queue comes into existence.
    """

    def __init__(self, *, default_volume: int | float = AudioConstants.DEFAULT_VOLUME) -> None:
        self._queues: dict[DiscordSnowflake, GuildQueue] = {}
        self._default_volume = default_volume

    def __len__(self) -> int:
        return len(self._queues)

    def __contains__(self, guild_id: object) -> bool:
        return guild_id in self._queues

    def get(self, guild_id: DiscordSnowflake) -> GuildQueue | None:
        return self._queues.get(guild_id)

    def get_or_create(
        self,
        guild_id: DiscordSnowflake,
        *,
        text_channel_id: DiscordSnowflake | None = None,
        voice_channel_id: DiscordSnowflake | None = None,
        connection: Any = None,
    ) -> tuple[GuildQueue, bool]:
        """Return the guild's queue and whether it was created by this call."""
        queue = self._queues.get(guild_id)
        if queue is not None:
            return queue, False

        queue = GuildQueue(
            guild_id=guild_id,
            volume=self._default_volume,
            text_channel_id=text_channel_id,
            voice_channel_id=voice_channel_id,
            connection=connection,
        )
        self._queues[guild_id] = queue
        logger.info(LogTemplates.QUEUE_CREATED, guild_id)
        return queue, True

    def delete(self, guild_id: DiscordSnowflake) -> bool:
        """Evict the guild's queue. Returns False if there was none."""
        if self._queues.pop(guild_id, None) is None:
            return False
        logger.info(LogTemplates.QUEUE_DELETED, guild_id)
        return True

    def all(self) -> list[GuildQueue]:
        return list(self._queues.values())
