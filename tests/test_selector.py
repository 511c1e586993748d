"""Tests for the chat-based search result selector."""

from unittest.mock import AsyncMock, MagicMock

from conftest import TEXT_CHANNEL_ID, make_track

from discord_queue_player.infrastructure.discord.selector import MessageTrackSelector

USER_ID = 42


def _message(author_id: int, channel_id: int, content: str = "1") -> MagicMock:
    message = MagicMock()
    message.author.id = author_id
    message.channel.id = channel_id
    message.content = content
    return message


class TestMessageTrackSelector:
    async def test_lists_candidates_and_returns_reply(self):
        client = MagicMock()
        client.wait_for = AsyncMock(return_value=_message(USER_ID, TEXT_CHANNEL_ID, " 2 \n"))
        channel = MagicMock()
        channel.send = AsyncMock()
        selector = MessageTrackSelector(
            client, channel, user_id=USER_ID, channel_id=TEXT_CHANNEL_ID
        )

        choice = await selector.choose([make_track("First"), make_track("Second")])

        assert choice == "2"
        sent = channel.send.await_args.args[0]
        assert "(1-2)" in sent
        assert "`1.` First" in sent
        assert "`2.` Second" in sent
        assert client.wait_for.await_args.args == ("message",)

    def test_only_accepts_requester_in_same_channel(self):
        selector = MessageTrackSelector(
            MagicMock(), MagicMock(), user_id=USER_ID, channel_id=TEXT_CHANNEL_ID
        )

        assert selector._is_reply(_message(USER_ID, TEXT_CHANNEL_ID))
        assert not selector._is_reply(_message(7, TEXT_CHANNEL_ID))
        assert not selector._is_reply(_message(USER_ID, 999))
