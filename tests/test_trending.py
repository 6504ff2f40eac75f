"""
Tests for trending content.

Tests cover:
- ISO 8601 duration parsing
- YouTube video resource mapping
- TrendingService category fan-out and fallbacks
- YouTubeDataClient request building and error mapping
"""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from clients.youtube_data import YouTubeDataClient, YouTubeDataError
from services.trending import (
    TrendingService,
    clamp_trending_count,
    parse_iso_duration,
    youtube_item_to_suggestion,
)


def make_video(video_id="abc", views="1000", duration="PT12M30S"):
    return {
        "id": video_id,
        "snippet": {
            "title": f"Video {video_id}",
            "channelTitle": "Channel",
            "description": "d" * 200,
            "publishedAt": "2024-07-01T10:00:00Z",
            "thumbnails": {"high": {"url": f"https://i.ytimg.com/vi/{video_id}/hq.jpg"}},
        },
        "statistics": {"viewCount": views},
        "contentDetails": {"duration": duration},
    }


@pytest.fixture
def mock_client():
    client = MagicMock(spec=YouTubeDataClient)
    client.enabled = True
    client.most_popular = AsyncMock(return_value=[make_video()])
    return client


# =============================================================================
# Helpers
# =============================================================================

class TestParseIsoDuration:

    @pytest.mark.parametrize("value,expected", [
        ("PT1H2M10S", 62),
        ("PT15M", 15),
        ("PT45S", 0),
        ("PT2H", 120),
        (None, 0),
        ("garbage", 0),
    ])
    def test_durations(self, value, expected):
        assert parse_iso_duration(value) == expected


class TestClampTrendingCount:

    def test_bounds(self):
        assert clamp_trending_count(None) == 10
        assert clamp_trending_count(0) == 1
        assert clamp_trending_count(500) == 50


class TestYoutubeItemToSuggestion:

    def test_maps_fields(self):
        s = youtube_item_to_suggestion(make_video(views="5000000"), "gaming")

        assert s["id"] == "yt_abc"
        assert s["creatorName"] == "Channel"
        assert s["url"] == "https://www.youtube.com/watch?v=abc"
        assert s["thumbnailUrl"] == "https://i.ytimg.com/vi/abc/hq.jpg"
        assert s["durationMinutes"] == 12
        assert s["datePublished"] == "2024-07-01T10:00:00Z"
        assert s["tags"] == ["gaming", "trending", "youtube"]
        assert s["relevance"] == pytest.approx(0.7)
        assert s["description"] == "d" * 150 + "..."

    def test_relevance_is_capped(self):
        s = youtube_item_to_suggestion(make_video(views="900000000"), "music")
        assert s["relevance"] == 0.9

    def test_thumbnail_falls_back_to_video_id(self):
        item = make_video()
        item["snippet"]["thumbnails"] = {}
        s = youtube_item_to_suggestion(item, "music")
        assert s["thumbnailUrl"] == "https://i.ytimg.com/vi/abc/hqdefault.jpg"


# =============================================================================
# Service
# =============================================================================

class TestTrendingService:

    @pytest.mark.asyncio
    async def test_no_api_key_uses_fallback(self, mock_client):
        mock_client.enabled = False
        result = await TrendingService(mock_client).get_trending(count=3)

        assert result["source"] == "fallback"
        assert [s["id"] for s in result["suggestions"]] == ["trend_1", "trend_2", "trend_3"]
        mock_client.most_popular.assert_not_called()

    @pytest.mark.asyncio
    async def test_single_category(self, mock_client):
        result = await TrendingService(mock_client).get_trending("gaming", 5)

        assert result["source"] == "youtube"
        assert result["suggestions"][0]["id"] == "yt_abc"
        mock_client.most_popular.assert_awaited_once_with("20", 5)

    @pytest.mark.asyncio
    async def test_unknown_category_uses_overall_chart(self, mock_client):
        await TrendingService(mock_client).get_trending("cooking", 5)
        mock_client.most_popular.assert_awaited_once_with(None, 5)

    @pytest.mark.asyncio
    async def test_all_fans_out_over_categories(self, mock_client):
        mock_client.most_popular.side_effect = lambda cat, n: [
            make_video(f"{cat}_{i}") for i in range(n)
        ]
        result = await TrendingService(mock_client).get_trending("all", 10)

        assert mock_client.most_popular.await_count == 4
        requested = {call.args for call in mock_client.most_popular.await_args_list}
        assert requested == {("20", 3), ("10", 3), ("24", 3), ("27", 3)}
        assert len(result["suggestions"]) == 10

    @pytest.mark.asyncio
    async def test_all_tolerates_one_failing_category(self, mock_client):
        async def fake(cat, n):
            if cat == "10":
                raise YouTubeDataError("boom")
            return [make_video(cat)]

        mock_client.most_popular.side_effect = fake
        result = await TrendingService(mock_client).get_trending("all", 8)

        assert result["source"] == "youtube"
        assert len(result["suggestions"]) == 3

    @pytest.mark.asyncio
    async def test_category_error_returns_fallback_with_error(self, mock_client):
        mock_client.most_popular.side_effect = YouTubeDataError("quota")
        result = await TrendingService(mock_client).get_trending("music", 3)

        assert result["source"] == "fallback"
        assert result["error"] == "quota"
        assert len(result["suggestions"]) == 5


# =============================================================================
# Client
# =============================================================================

class TestYouTubeDataClient:

    def _patch_client(self, response=None, error=None):
        http_client = MagicMock()
        http_client.get = AsyncMock(return_value=response, side_effect=error)
        http_client.__aenter__ = AsyncMock(return_value=http_client)
        http_client.__aexit__ = AsyncMock(return_value=False)
        return patch("clients.youtube_data.httpx.AsyncClient", return_value=http_client), http_client

    @pytest.mark.asyncio
    async def test_sends_category_and_key(self):
        response = httpx.Response(200, json={"items": [{"id": "x"}]})
        patcher, http_client = self._patch_client(response=response)

        with patcher:
            client = YouTubeDataClient(api_key="key", region_code="GB", timeout=5)
            items = await client.most_popular("20", 4)

        assert items == [{"id": "x"}]
        params = http_client.get.call_args.kwargs["params"]
        assert params["videoCategoryId"] == "20"
        assert params["regionCode"] == "GB"
        assert params["maxResults"] == 4
        assert params["key"] == "key"

    @pytest.mark.asyncio
    async def test_omits_category_when_none(self):
        patcher, http_client = self._patch_client(response=httpx.Response(200, json={}))

        with patcher:
            items = await YouTubeDataClient(api_key="key").most_popular(None, 4)

        assert items == []
        assert "videoCategoryId" not in http_client.get.call_args.kwargs["params"]

    @pytest.mark.asyncio
    async def test_non_200_raises(self):
        patcher, _ = self._patch_client(response=httpx.Response(403, text="quota"))

        with patcher, pytest.raises(YouTubeDataError):
            await YouTubeDataClient(api_key="key").most_popular("10", 4)

    @pytest.mark.asyncio
    async def test_transport_error_raises(self):
        patcher, _ = self._patch_client(error=httpx.ConnectError("down"))

        with patcher, pytest.raises(YouTubeDataError):
            await YouTubeDataClient(api_key="key").most_popular("10", 4)

    def test_enabled_requires_key(self):
        with patch("clients.youtube_data.config") as mock_config:
            mock_config.youtube.api_key = None
            assert YouTubeDataClient().enabled is False
