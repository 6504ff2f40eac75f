"""
Storage module initialization.

Provides access to the persistent store (PostgreSQL) and the bot's
temporary suggestion cache (Redis).
"""

from storage.redis_store import SuggestionCache
from storage.postgres_store import PostgresStore

__all__ = [
    "SuggestionCache",
    "PostgresStore"
]
