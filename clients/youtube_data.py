"""
YouTube Data API Client.

API-key access to the public YouTube Data API v3, used for trending
("mostPopular") charts.
"""

import logging
from typing import Any, Optional

import httpx

from config import config

logger = logging.getLogger(__name__)

YOUTUBE_VIDEOS_API_URL = "https://www.googleapis.com/youtube/v3/videos"


class YouTubeDataError(Exception):
    """The YouTube Data API returned an error or could not be reached."""


class YouTubeDataClient:
    """
    Thin async wrapper over the videos endpoint of the YouTube Data API.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        region_code: Optional[str] = None,
        timeout: Optional[int] = None,
    ) -> None:
        self.api_key = api_key or config.youtube.api_key
        self.region_code = region_code or config.youtube.region_code
        self.timeout = timeout or config.youtube.timeout

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def most_popular(
        self, category_id: Optional[str], max_results: int
    ) -> list[dict[str, Any]]:
        """
        Fetch the most popular videos for a video category.

        Args:
            category_id: YouTube video category id (e.g. "20" for gaming),
                or None for the overall chart
            max_results: Number of videos to request (1-50)

        Returns:
            Raw video resources with snippet, contentDetails and statistics

        Raises:
            YouTubeDataError: On transport errors or non-200 responses
        """
        params = {
            "part": "snippet,contentDetails,statistics",
            "chart": "mostPopular",
            "regionCode": self.region_code,
            "maxResults": max_results,
            "key": self.api_key,
        }
        if category_id:
            params["videoCategoryId"] = category_id

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.get(YOUTUBE_VIDEOS_API_URL, params=params)
        except httpx.HTTPError as e:
            logger.warning(f"YouTube Data API request failed: {e}")
            raise YouTubeDataError(f"YouTube API request failed: {e}") from e

        if resp.status_code != 200:
            logger.warning(
                f"YouTube Data API returned {resp.status_code}: {resp.text[:200]}"
            )
            raise YouTubeDataError(f"YouTube API error: {resp.status_code}")

        return resp.json().get("items", [])
