"""
SQLAlchemy models for Maintain.

Models:
- User: Web (email) and/or Telegram users
- Profile: Recommendation preferences
- HistorySession: Past recommendation requests
- SavedItem: Suggestions saved into lists
- Like: Liked suggestions
- UserStats: Usage counters and streaks
- TelegramAccount: Telegram identity and bot state
- NotificationSettings: Bot notification toggles
"""

from db.models.user import User
from db.models.profile import Profile
from db.models.history_session import HistorySession
from db.models.saved_item import SavedItem
from db.models.like import Like
from db.models.user_stats import UserStats
from db.models.telegram_account import TelegramAccount
from db.models.notification_settings import NotificationSettings

__all__ = [
    "User",
    "Profile",
    "HistorySession",
    "SavedItem",
    "Like",
    "UserStats",
    "TelegramAccount",
    "NotificationSettings",
]
