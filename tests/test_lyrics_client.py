"""Unit tests for the lyrics.ovh client using httpx.MockTransport."""

import httpx
import pytest

from discord_queue_player.config.settings import LyricsSettings
from discord_queue_player.infrastructure.lyrics.lyrics_client import (
    LyricsOvhClient,
    split_artist_title,
)


def _client(handler) -> LyricsOvhClient:
    settings = LyricsSettings()
    http = httpx.AsyncClient(base_url=settings.base_url, transport=httpx.MockTransport(handler))
    return LyricsOvhClient(settings, client=http)


class TestSplitArtistTitle:
    @pytest.mark.parametrize(
        "title, expected",
        [
            ("Queen - Bohemian Rhapsody", ("Queen", "Bohemian Rhapsody")),
            ("Bohemian Rhapsody", (None, "Bohemian Rhapsody")),
            (" - Song", (None, "- Song")),
            ("A - B - C", ("A", "B - C")),
        ],
    )
    def test_split(self, title, expected):
        assert split_artist_title(title) == expected


class TestFindLyrics:
    async def test_artist_from_title(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request.url.raw_path.decode())
            return httpx.Response(200, json={"lyrics": "  Is this the real life?  "})

        client = _client(handler)

        lyrics = await client.find_lyrics("Queen - Bohemian Rhapsody")

        assert lyrics == "Is this the real life?"
        assert requests == ["/v1/Queen/Bohemian%20Rhapsody"]
        await client.aclose()

    async def test_author_used_when_title_has_no_artist(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request.url.raw_path.decode())
            return httpx.Response(200, json={"lyrics": "words"})

        client = _client(handler)

        assert await client.find_lyrics("Song", author="Band") == "words"
        assert requests == ["/v1/Band/Song"]

    async def test_suggest_when_artist_unknown(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request.url.raw_path.decode())
            if request.url.path.startswith("/suggest/"):
                return httpx.Response(
                    200, json={"data": [{"title": "Yesterday", "artist": {"name": "The Beatles"}}]}
                )
            return httpx.Response(200, json={"lyrics": "all my troubles"})

        client = _client(handler)

        assert await client.find_lyrics("yesterday") == "all my troubles"
        assert requests == ["/suggest/yesterday", "/v1/The%20Beatles/Yesterday"]

    async def test_no_suggestions(self):
        client = _client(lambda request: httpx.Response(200, json={"data": []}))

        assert await client.find_lyrics("zzzz") is None

    async def test_not_found(self):
        client = _client(lambda request: httpx.Response(404, json={"error": "No lyrics found"}))

        assert await client.find_lyrics("A - B") is None

    async def test_server_error(self):
        client = _client(lambda request: httpx.Response(500))

        assert await client.find_lyrics("A - B") is None

    async def test_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        client = _client(handler)

        assert await client.find_lyrics("A - B") is None

    async def test_blank_lyrics(self):
        client = _client(lambda request: httpx.Response(200, json={"lyrics": "   "}))

        assert await client.find_lyrics("A - B") is None

    async def test_non_json_body(self):
        client = _client(lambda request: httpx.Response(200, text="<html>maintenance</html>"))

        assert await client.find_lyrics("A - B") is None

    async def test_unexpected_lyrics_shape(self):
        client = _client(lambda request: httpx.Response(200, json={"lyrics": ["verse"]}))

        assert await client.find_lyrics("A - B") is None

    async def test_unexpected_suggest_shape(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request.url.raw_path.decode())
            return httpx.Response(200, json={"data": "nothing here"})

        client = _client(handler)

        assert await client.find_lyrics("yesterday") is None
        assert requests == ["/suggest/yesterday"]
