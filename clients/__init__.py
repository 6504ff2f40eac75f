"""
YouTube API Clients.

Provides API-key access to the public YouTube Data API.
"""

from .youtube_data import YouTubeDataClient, YouTubeDataError

__all__ = ["YouTubeDataClient", "YouTubeDataError"]
