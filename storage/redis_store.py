"""
Redis-based temporary store for the Telegram bot.

Handles:
- Suggestions shown in chat, so like/save buttons can resolve them later
- Last recommendation request per chat, for "more like this" / "different"
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

import redis.asyncio as redis

from config import config

logger = logging.getLogger(__name__)


class SuggestionCache:
    """
    Short-lived cache of bot suggestions using Redis.

    Callback buttons only carry the suggestion id, so the full suggestion
    is kept here for a while after it is displayed. Everything is
    best-effort: failures are logged and treated as cache misses.
    """

    PREFIX_SUGGESTION = "suggestion"
    PREFIX_LAST_REQUEST = "lastreq"

    TTL_LAST_REQUEST = 3600 * 24  # 24 hours

    def __init__(self, ttl: Optional[int] = None) -> None:
        self._client: Optional[Any] = None
        self._connected = False
        self.ttl = ttl or config.telegram.suggestion_ttl

    async def _ensure_connection(self) -> Any:
        """
        Ensure Redis connection is established.

        Returns:
            Redis client instance, or an in-memory stub when Redis is down
        """
        if self._client is None or not self._connected:
            try:
                self._client = redis.from_url(
                    config.redis.url,
                    encoding="utf-8",
                    decode_responses=True
                )
                await self._client.ping()
                self._connected = True
                logger.info("Redis connection established")
            except Exception as e:
                logger.error(f"Redis connection failed: {e}")
                self._client = InMemoryRedisStub()
                self._connected = True

        return self._client

    def _make_key(self, prefix: str, *parts: str) -> str:
        """Build a Redis key from parts."""
        return f"maintain:{prefix}:{':'.join(parts)}"

    async def store_suggestion(
        self, suggestion: dict[str, Any], ref: Optional[str] = None
    ) -> None:
        """
        Remember a suggestion for the configured TTL.

        Stored under ref when given (the key carried in callback data),
        otherwise under the suggestion id.
        """
        suggestion_id = ref or suggestion.get("id")
        if not suggestion_id:
            return

        client = await self._ensure_connection()
        key = self._make_key(self.PREFIX_SUGGESTION, str(suggestion_id))

        try:
            await client.setex(key, self.ttl, json.dumps(suggestion))
        except Exception as e:
            logger.error(f"Failed to cache suggestion {suggestion_id}: {e}")

    async def get_suggestion(self, suggestion_id: str) -> Optional[dict[str, Any]]:
        """
        Look up a previously shown suggestion.

        Returns:
            The suggestion dict, or None when expired or unknown
        """
        client = await self._ensure_connection()
        key = self._make_key(self.PREFIX_SUGGESTION, suggestion_id)

        try:
            data = await client.get(key)
            if data:
                return json.loads(data)
        except Exception as e:
            logger.error(f"Failed to read cached suggestion {suggestion_id}: {e}")

        return None

    async def set_last_request(self, chat_id: str, request: dict[str, Any]) -> None:
        """Store the last recommendation request (message and mood) for a chat."""
        client = await self._ensure_connection()
        key = self._make_key(self.PREFIX_LAST_REQUEST, str(chat_id))

        try:
            await client.setex(key, self.TTL_LAST_REQUEST, json.dumps(request))
        except Exception as e:
            logger.error(f"Failed to store last request: {e}")

    async def get_last_request(self, chat_id: str) -> Optional[dict[str, Any]]:
        client = await self._ensure_connection()
        key = self._make_key(self.PREFIX_LAST_REQUEST, str(chat_id))

        try:
            data = await client.get(key)
            if data:
                return json.loads(data)
        except Exception as e:
            logger.error(f"Failed to read last request: {e}")

        return None


class InMemoryRedisStub:
    """
    In-memory fallback when Redis is not available.

    Used for development/testing or when Redis connection fails.
    Data is not persisted and will be lost on restart. Expired keys are
    purged on every write, so unread entries do not accumulate.
    """

    def __init__(self) -> None:
        self._store: dict[str, tuple[str, Optional[float]]] = {}

    @staticmethod
    def _now() -> float:
        return datetime.now(timezone.utc).timestamp()

    def _purge_expired(self, now: float) -> None:
        expired = [
            key for key, (_, expiry) in self._store.items()
            if expiry is not None and expiry <= now
        ]
        for key in expired:
            del self._store[key]

    async def get(self, key: str) -> Optional[str]:
        """Get a value by key."""
        if key in self._store:
            value, expiry = self._store[key]
            if expiry is None or expiry > self._now():
                return value
            del self._store[key]
        return None

    async def setex(self, key: str, ttl: int, value: str) -> None:
        """Set a value with expiry."""
        now = self._now()
        self._purge_expired(now)
        self._store[key] = (value, now + ttl)

    async def delete(self, key: str) -> None:
        self._store.pop(key, None)

    async def ping(self) -> bool:
        return True
