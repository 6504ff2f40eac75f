"""
Bot user state backed by PostgresStore.

Telegram users are mapped to application users on first contact; every
bot-side read and write goes through this class.
"""

import logging
from typing import Any, Optional
from uuid import UUID

from db.models.history_session import HistorySession
from db.models.notification_settings import NotificationSettings
from db.models.user import User
from storage.postgres_store import PostgresStore

logger = logging.getLogger(__name__)

NOTIFICATION_TOGGLES = {
    "daily": "dailyDigest",
    "trending": "trendingAlerts",
    "reminders": "reminders",
}


def telegram_data_from_user(tg_user: Any) -> dict[str, Any]:
    """Extract the fields stored for a telegram.User."""
    return {
        "telegram_id": str(tg_user.id),
        "username": tg_user.username,
        "first_name": tg_user.first_name,
        "last_name": tg_user.last_name,
        "language_code": tg_user.language_code,
    }


class BotProfiles:
    """Per-user bot state: mood, profile, history, saves, likes and settings."""

    def __init__(self, store: Optional[PostgresStore] = None) -> None:
        self.store = store or PostgresStore()

    def ensure_user(self, tg_user: Any) -> User:
        return self.store.find_or_create_telegram_user(telegram_data_from_user(tg_user))

    @staticmethod
    def current_mood(user: User) -> Optional[str]:
        account = user.telegram_account
        return account.current_mood if account else None

    @staticmethod
    def is_pending_profile_setup(user: User) -> bool:
        account = user.telegram_account
        return bool(account and account.pending_profile_setup)

    @staticmethod
    def profile_dict(user: User) -> dict[str, Any]:
        return user.profile.to_dict() if user.profile else {}

    def set_mood(self, telegram_id: str, mood: Optional[str]) -> None:
        self.store.update_telegram_mood(telegram_id, mood)

    def set_pending_profile_setup(self, telegram_id: str, pending: bool) -> None:
        self.store.set_pending_profile_setup(telegram_id, pending)

    def update_profile(self, user_id: UUID, data: dict[str, Any]) -> None:
        self.store.update_user_profile(user_id, data)

    def reset(self, user: User) -> None:
        """Clear profile, mood and any pending profile setup."""
        self.store.reset_profile(user.id)
        if user.telegram_id:
            self.store.update_telegram_mood(user.telegram_id, None)
            self.store.set_pending_profile_setup(user.telegram_id, False)

    # History

    def add_to_history(
        self,
        user_id: UUID,
        message: str,
        mood: Optional[str],
        suggestions: list[dict[str, Any]],
    ) -> HistorySession:
        return self.store.add_to_history(user_id, message, mood, suggestions)

    def get_history(self, user_id: UUID, limit: int = 10) -> list[HistorySession]:
        return self.store.get_user_history(user_id, limit=limit)

    def get_global_history(self, limit: int = 5) -> list[tuple[HistorySession, Optional[str]]]:
        return self.store.get_global_history(limit=limit)

    def set_feedback(self, user_id: UUID, session_id: str, feedback: str) -> bool:
        try:
            parsed = UUID(session_id)
        except ValueError:
            logger.warning(f"Ignoring feedback for malformed session id {session_id!r}")
            return False
        return self.store.set_history_feedback(user_id, parsed, feedback)

    # Saves & likes

    def add_to_saves(self, user_id: UUID, suggestion: dict[str, Any], list_name: str) -> None:
        self.store.save_video(user_id, suggestion["id"], suggestion, list_name)

    def get_saves(self, user_id: UUID, list_name: Optional[str] = None) -> list[Any]:
        return self.store.get_user_saves(user_id, list_name)

    def toggle_like(
        self, user_id: UUID, video_id: str, suggestion: Optional[dict[str, Any]] = None
    ) -> bool:
        return self.store.toggle_like(user_id, video_id, suggestion)

    def is_liked(self, user_id: UUID, video_id: str) -> bool:
        return self.store.is_video_liked(user_id, video_id)

    def get_stats(self, user_id: UUID) -> Any:
        return self.store.get_user_stats(user_id)

    # Notifications

    def get_notifications(self, telegram_id: str) -> Optional[NotificationSettings]:
        return self.store.get_telegram_notification_settings(telegram_id)

    def toggle_notification(self, telegram_id: str, action: str) -> Optional[NotificationSettings]:
        """
        Flip one notification toggle ("daily", "trending" or "reminders").

        Returns:
            Updated settings, or None for an unknown toggle
        """
        key = NOTIFICATION_TOGGLES.get(action)
        if key is None:
            return None

        current = self.get_notifications(telegram_id)
        current_value = bool(current.to_dict().get(key)) if current else False
        return self.store.update_telegram_notifications(telegram_id, {key: not current_value})
