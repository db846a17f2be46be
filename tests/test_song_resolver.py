"""
Unit Tests for Song Resolution

Tests for SongResolver over a fake searcher and for the yt-dlp backed
searcher with YoutubeDL patched out.
"""

from unittest.mock import MagicMock, patch

import pytest

from discord_music_assistant.application.services.song_resolver import SongResolver
from discord_music_assistant.infrastructure.audio.models import YtDlpVideoInfo
from discord_music_assistant.infrastructure.audio.ytdlp_searcher import YtDlpSongSearcher

FIRST = "https://www.youtube.com/watch?v=aaa"


# =============================================================================
# SongResolver
# =============================================================================


class TestSongResolver:
    """Tests for turning queries into songs."""

    @pytest.fixture
    def resolver(self, fake_searcher):
        return SongResolver(fake_searcher)

    @pytest.mark.asyncio
    async def test_url_is_looked_up_directly(self, resolver, fake_searcher):
        song = await resolver.resolve(f"  {FIRST}  ", "Tester")

        assert song.id == "aaa"
        assert song.title == "First Song"
        assert song.duration == 200
        assert song.requested_by == "Tester"
        assert fake_searcher.lookups == [FIRST]
        assert fake_searcher.searches == []

    @pytest.mark.asyncio
    async def test_url_lookup_without_url_keeps_query(self, resolver, fake_searcher):
        fake_searcher.catalog["https://example.com/track"] = {"id": "t1", "title": "Track"}

        song = await resolver.resolve("https://example.com/track", "Tester")

        assert song.url == "https://example.com/track"

    @pytest.mark.asyncio
    async def test_unknown_url_resolves_to_none(self, resolver):
        assert await resolver.resolve("https://www.youtube.com/watch?v=missing", "Tester") is None

    @pytest.mark.asyncio
    async def test_search_result_is_enriched_by_lookup(self, resolver, fake_searcher):
        song = await resolver.resolve("first song", "Tester")

        assert song.id == "aaa"
        assert song.duration == 200
        assert song.thumbnail is not None
        assert fake_searcher.lookups == [FIRST]

    @pytest.mark.asyncio
    async def test_lookup_failure_keeps_search_result(self, resolver, fake_searcher):
        fake_searcher.lookup_error = RuntimeError("extractor broke")

        song = await resolver.resolve("first song", "Tester")

        assert song.title == "First Song"
        assert song.duration == 0

    @pytest.mark.asyncio
    async def test_lookup_values_of_none_do_not_override(self, resolver, fake_searcher):
        fake_searcher.search_results["partial"] = [
            {"id": "p1", "title": "Partial", "url": "https://example.com/p1", "duration_raw": "2:05"}
        ]
        fake_searcher.catalog["https://example.com/p1"] = {
            "id": "p1",
            "title": None,
            "url": "https://example.com/p1",
            "duration_in_sec": None,
        }

        song = await resolver.resolve("partial", "Tester")

        assert song.title == "Partial"
        assert song.duration == 125

    @pytest.mark.asyncio
    async def test_no_search_results(self, resolver):
        assert await resolver.resolve("no such song anywhere", "Tester") is None

    @pytest.mark.asyncio
    async def test_blank_query(self, resolver, fake_searcher):
        assert await resolver.resolve("   ", "Tester") is None
        assert fake_searcher.searches == []


# =============================================================================
# YtDlpSongSearcher
# =============================================================================


@pytest.fixture
def youtube_dl():
    """Patch YoutubeDL and return the object used inside its context manager."""
    with patch("discord_music_assistant.infrastructure.audio.ytdlp_searcher.YoutubeDL") as cls:
        ydl = MagicMock()
        cls.return_value.__enter__.return_value = ydl
        yield ydl


class TestYtDlpSongSearcher:
    """Tests for yt-dlp extraction mapped onto search metadata."""

    @pytest.mark.parametrize(
        ("query", "expected"),
        [
            ("https://youtu.be/abc", True),
            ("http://example.com/song", True),
            ("www.youtube.com/watch?v=abc", True),
            ("never gonna give you up", False),
        ],
    )
    def test_is_url(self, query, expected):
        assert YtDlpSongSearcher().is_url(query) is expected

    @pytest.mark.asyncio
    async def test_lookup_maps_fields(self, youtube_dl):
        youtube_dl.extract_info.return_value = {
            "id": "abc",
            "title": "A Song",
            "webpage_url": "https://www.youtube.com/watch?v=abc",
            "url": "https://rr1.googlevideo.com/stream",
            "thumbnail": "https://i.ytimg.com/vi/abc/hq.jpg",
            "duration": 215,
            "duration_string": "3:35",
            "formats": [{"format_id": "251"}],
        }

        metadata = await YtDlpSongSearcher().lookup("https://www.youtube.com/watch?v=abc")

        assert metadata == {
            "id": "abc",
            "title": "A Song",
            "url": "https://www.youtube.com/watch?v=abc",
            "thumbnail": "https://i.ytimg.com/vi/abc/hq.jpg",
            "duration_in_sec": 215,
            "duration_raw": "3:35",
        }
        youtube_dl.extract_info.assert_called_once_with(
            "https://www.youtube.com/watch?v=abc", download=False
        )

    @pytest.mark.asyncio
    async def test_lookup_failure_returns_none(self, youtube_dl):
        youtube_dl.extract_info.side_effect = Exception("Video unavailable")

        assert await YtDlpSongSearcher().lookup("https://youtu.be/gone") is None

    @pytest.mark.asyncio
    async def test_search_skips_entries_without_url(self, youtube_dl):
        youtube_dl.extract_info.return_value = {
            "entries": [
                {"id": "abc", "title": "Hit", "url": "https://www.youtube.com/watch?v=abc"},
                {"id": "def", "title": ""},
                None,
            ]
        }

        results = await YtDlpSongSearcher().search("hit song", limit=3)

        assert [r["id"] for r in results] == ["abc"]
        youtube_dl.extract_info.assert_called_once_with("ytsearch3:hit song", download=False)

    @pytest.mark.asyncio
    async def test_search_failure_returns_empty(self, youtube_dl):
        youtube_dl.extract_info.side_effect = Exception("network down")

        assert await YtDlpSongSearcher().search("anything") == []


class TestYtDlpVideoInfo:
    def test_blank_text_fields_become_none(self):
        info = YtDlpVideoInfo.model_validate({"id": "x", "title": "   ", "thumbnail": 42})

        assert info.title is None
        assert info.thumbnail is None
        assert info.page_url is None
