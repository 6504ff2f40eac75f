"""
Trending content from the YouTube "mostPopular" charts.

Falls back to a small static list when no API key is configured or the
API call fails.
"""

import asyncio
import logging
import math
import re
from typing import Any, Optional

from clients.youtube_data import YouTubeDataClient

logger = logging.getLogger(__name__)

DEFAULT_COUNT = 10
MAX_COUNT = 50

CATEGORY_IDS = {
    "gaming": "20",
    "music": "10",
    "news": "25",
    "education": "27",
    "entertainment": "24",
    "sports": "17",
    "technology": "28",
    "science": "28",
}

ALL_CATEGORIES = ("gaming", "music", "entertainment", "education")

_DURATION_PATTERN = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?")

FALLBACK_TRENDING = [
    {
        "id": "trend_1",
        "title": "Top Tech News This Week",
        "creatorName": "Tech Daily",
        "durationMinutes": 15,
        "description": "Stay updated with the latest in technology",
        "tags": ["tech", "news", "trending"],
        "relevance": 0.7,
        "url": "#",
    },
    {
        "id": "trend_2",
        "title": "Relaxing Music Mix",
        "creatorName": "Chill Vibes",
        "durationMinutes": 60,
        "description": "Perfect background music for work or study",
        "tags": ["music", "chill", "trending"],
        "relevance": 0.7,
        "url": "#",
    },
    {
        "id": "trend_3",
        "title": "Quick Coding Tutorial",
        "creatorName": "Code Masters",
        "durationMinutes": 12,
        "description": "Learn something new in just 12 minutes",
        "tags": ["coding", "learning", "trending"],
        "relevance": 0.7,
        "url": "#",
    },
    {
        "id": "trend_4",
        "title": "Gaming Highlights",
        "creatorName": "Pro Gamer",
        "durationMinutes": 20,
        "description": "Best gaming moments from this week",
        "tags": ["gaming", "entertainment", "trending"],
        "relevance": 0.7,
        "url": "#",
    },
    {
        "id": "trend_5",
        "title": "Productivity Tips",
        "creatorName": "Life Optimizer",
        "durationMinutes": 8,
        "description": "Boost your daily productivity",
        "tags": ["wellness", "learning", "trending"],
        "relevance": 0.7,
        "url": "#",
    },
]


def clamp_trending_count(count: Optional[int]) -> int:
    if count is None:
        return DEFAULT_COUNT
    return min(max(count, 1), MAX_COUNT)


def parse_iso_duration(duration: Optional[str]) -> int:
    """
    Convert an ISO 8601 duration like PT1H2M10S to whole minutes.

    Seconds are dropped; unparseable input yields 0.
    """
    match = _DURATION_PATTERN.match(duration or "PT0S")
    if not match:
        return 0
    hours = int(match.group(1) or 0)
    minutes = int(match.group(2) or 0)
    return hours * 60 + minutes


def _best_thumbnail(video_id: Optional[str], thumbnails: dict[str, Any]) -> Optional[str]:
    for size in ("maxres", "high", "medium", "default"):
        url = (thumbnails.get(size) or {}).get("url")
        if url:
            return url
    if video_id:
        return f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg"
    return None


def youtube_item_to_suggestion(item: dict[str, Any], category: str) -> dict[str, Any]:
    """Map a YouTube video resource to a suggestion dict."""
    video_id = item.get("id")
    snippet = item.get("snippet") or {}
    statistics = item.get("statistics") or {}
    content_details = item.get("contentDetails") or {}

    try:
        views = int(statistics.get("viewCount") or 0)
    except (TypeError, ValueError):
        views = 0

    suggestion = {
        "id": f"yt_{video_id}",
        "title": snippet.get("title") or "Untitled",
        "creatorName": snippet.get("channelTitle") or "Unknown",
        "tags": [category, "trending", "youtube"],
        "relevance": min(0.9, 0.5 + (views / 10_000_000) * 0.4),
        "url": f"https://www.youtube.com/watch?v={video_id}",
    }

    thumbnail_url = _best_thumbnail(video_id, snippet.get("thumbnails") or {})
    if thumbnail_url:
        suggestion["thumbnailUrl"] = thumbnail_url

    duration_minutes = parse_iso_duration(content_details.get("duration"))
    if duration_minutes:
        suggestion["durationMinutes"] = duration_minutes

    if snippet.get("publishedAt"):
        suggestion["datePublished"] = snippet["publishedAt"]

    if snippet.get("description"):
        suggestion["description"] = snippet["description"][:150] + "..."

    return suggestion


def get_fallback_trending(count: int) -> list[dict[str, Any]]:
    return [dict(item) for item in FALLBACK_TRENDING[:count]]


class TrendingService:
    """Fetches trending videos per category."""

    def __init__(self, client: Optional[YouTubeDataClient] = None) -> None:
        self.client = client or YouTubeDataClient()

    async def _fetch_category(self, category: str, max_results: int) -> list[dict[str, Any]]:
        items = await self.client.most_popular(CATEGORY_IDS.get(category), max_results)
        return [youtube_item_to_suggestion(item, category) for item in items]

    async def _fetch_quietly(self, category: str, max_results: int) -> list[dict[str, Any]]:
        try:
            return await self._fetch_category(category, max_results)
        except Exception as e:
            logger.warning(f"Trending fetch for {category} failed: {e}")
            return []

    async def get_trending(
        self, category: str = "all", count: Optional[int] = None
    ) -> dict[str, Any]:
        """
        Get trending suggestions.

        Returns:
            Dict with suggestions, source ("youtube" or "fallback") and,
            when a fetch failed, error
        """
        count = clamp_trending_count(count)

        if not self.client.enabled:
            logger.warning("No YOUTUBE_API_KEY found, using fallback trending content")
            return {"suggestions": get_fallback_trending(count), "source": "fallback"}

        try:
            if category == "all":
                per_category = math.ceil(count / len(ALL_CATEGORIES))
                results = await asyncio.gather(*(
                    self._fetch_quietly(cat, per_category) for cat in ALL_CATEGORIES
                ))
                suggestions = [s for batch in results for s in batch][:count]
            else:
                suggestions = await self._fetch_category(category, count)
        except Exception as e:
            logger.error(f"Trending API error: {e}")
            return {
                "suggestions": get_fallback_trending(DEFAULT_COUNT),
                "source": "fallback",
                "error": str(e),
            }

        return {"suggestions": suggestions, "source": "youtube"}


_trending_service: Optional[TrendingService] = None


def get_trending_service() -> TrendingService:
    global _trending_service
    if _trending_service is None:
        _trending_service = TrendingService()
    return _trending_service
