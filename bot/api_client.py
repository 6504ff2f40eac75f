"""
HTTP client the bot uses to reach the Maintain API.
"""

import logging
from typing import Any, Optional
from uuid import UUID

import httpx

from config import config

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """The Maintain API could not be reached or returned an error status."""


class MaintainApiClient:
    """Calls /api/recommend and /api/trending on behalf of bot users."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[int] = None) -> None:
        self.base_url = (base_url or config.telegram.api_url).rstrip("/")
        self.timeout = timeout or config.telegram.request_timeout

    async def _request(
        self,
        method: str,
        path: str,
        user_id: Optional[UUID] = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        cookies = {config.auth.cookie_name: str(user_id)} if user_id else None
        try:
            async with httpx.AsyncClient(timeout=self.timeout, cookies=cookies) as client:
                resp = await client.request(method, f"{self.base_url}{path}", **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"API request {method} {path} failed: {e}")
            raise ApiError(f"API request failed: {e}") from e

        if resp.status_code >= 400:
            logger.error(f"API {method} {path} returned {resp.status_code}: {resp.text[:200]}")
            raise ApiError(f"API error: {resp.status_code}")

        return resp.json()

    async def recommend(
        self,
        message: str,
        mood: Optional[str] = None,
        profile: Optional[dict[str, Any]] = None,
        count: Optional[int] = None,
        user_id: Optional[UUID] = None,
    ) -> dict[str, Any]:
        """
        Request recommendations; the user's cookie makes the fallback use
        their saves.
        """
        payload = {
            "message": message,
            "mood": mood,
            "count": min(count or config.telegram.default_count, config.telegram.max_count),
            "profile": profile or {},
        }
        return await self._request("POST", "/api/recommend", user_id=user_id, json=payload)

    async def trending(self, category: str = "all", count: int = 10) -> dict[str, Any]:
        return await self._request(
            "GET", "/api/trending", params={"category": category, "count": count}
        )
