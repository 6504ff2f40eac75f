"""
PostgreSQL-backed store for users, preferences and saved content.

Provides persistent storage for:
- Users (web email/password and Telegram identities)
- Profiles and usage stats
- Recommendation history
- Saved items and likes
- Telegram bot state and notification settings
"""

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator, Optional
from uuid import UUID

from sqlalchemy import desc
from sqlalchemy.orm import Session

from db.base import utcnow
from db.session import SessionLocal
from db.models.user import User
from db.models.profile import Profile
from db.models.history_session import HistorySession
from db.models.saved_item import SavedItem
from db.models.like import Like
from db.models.user_stats import UserStats
from db.models.telegram_account import TelegramAccount
from db.models.notification_settings import NotificationSettings
from services.auth import hash_password, check_password
from storage.errors import (
    UserAlreadyExistsError,
    UserNotFoundError,
    TelegramAlreadyLinkedError,
    TelegramAccountNotFoundError,
)

logger = logging.getLogger(__name__)

MAX_HISTORY_SESSIONS = 50

PROFILE_FIELDS = {
    "hobbies": "hobbies",
    "interests": "interests",
    "languages": "languages",
    "workContext": "work_context",
    "youtubers": "youtubers",
}

NOTIFICATION_FIELDS = {
    "dailyDigest": "daily_digest",
    "dailyDigestTime": "daily_digest_time",
    "trendingAlerts": "trending_alerts",
    "reminders": "reminders",
    "timezone": "timezone",
}


class PostgresStore:
    """
    Data access layer over PostgreSQL.

    Every public method opens a short-lived session, commits on success and
    rolls back on failure. Returned ORM objects are detached but fully
    loaded (sessions are created with expire_on_commit=False).
    """

    def __init__(self) -> None:
        """Initialize the PostgreSQL store."""
        logger.info("PostgresStore initialized")

    def _get_session(self) -> Session:
        """Create a new database session."""
        return SessionLocal()

    @contextmanager
    def _session_scope(self, operation: str) -> Iterator[Session]:
        session = self._get_session()
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error(f"Error during {operation}: {e}")
            raise
        finally:
            session.close()

    # -------------------------------------------------------------------------
    # USERS & AUTH
    # -------------------------------------------------------------------------

    @staticmethod
    def _new_user_children(user: User) -> None:
        """Attach empty profile and zeroed stats to a new user."""
        user.profile = Profile(hobbies=[], interests=[], languages=[], youtubers=[])
        user.stats = UserStats(
            total_queries=0,
            total_likes=0,
            total_saves=0,
            total_videos_watched=0,
            streak=0,
            longest_streak=0,
            favorite_categories={},
        )

    @staticmethod
    def _new_telegram_account(telegram_data: dict[str, Any]) -> TelegramAccount:
        account = TelegramAccount(
            telegram_id=str(telegram_data["telegram_id"]),
            username=telegram_data.get("username"),
            first_name=telegram_data.get("first_name"),
            last_name=telegram_data.get("last_name"),
            language_code=telegram_data.get("language_code"),
            pending_profile_setup=False,
        )
        account.notifications = NotificationSettings(
            daily_digest=False,
            trending_alerts=False,
            reminders=False,
            timezone="UTC",
        )
        return account

    def create_user(self, email: str, password: str, name: Optional[str] = None) -> User:
        """
        Register a web user with an empty profile and zeroed stats.

        Raises:
            UserAlreadyExistsError: If the email is already registered.
        """
        with self._session_scope("create_user") as session:
            existing = session.query(User).filter(User.email == email).first()
            if existing:
                raise UserAlreadyExistsError("User already exists")

            user = User(email=email, password_hash=hash_password(password), name=name)
            self._new_user_children(user)
            session.add(user)
            session.flush()
            logger.info(f"Created web user id={user.id}")
            return user

    def verify_user(self, email: str, password: str) -> Optional[User]:
        """Return the user when the credentials match, otherwise None."""
        user = self.get_user_by_email(email)
        if not user or not check_password(password, user.password_hash):
            return None
        return user

    def get_user_by_email(self, email: str) -> Optional[User]:
        with self._session_scope("get_user_by_email") as session:
            return session.query(User).filter(User.email == email).first()

    def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        with self._session_scope("get_user_by_id") as session:
            return session.query(User).filter(User.id == user_id).first()

    def get_user_by_telegram_id(self, telegram_id: str) -> Optional[User]:
        with self._session_scope("get_user_by_telegram_id") as session:
            return (
                session.query(User)
                .filter(User.telegram_id == str(telegram_id))
                .first()
            )

    def find_or_create_telegram_user(self, telegram_data: dict[str, Any]) -> User:
        """
        Find the user behind a Telegram id, creating one on first contact.

        Args:
            telegram_data: Dict with telegram_id and optional username,
                first_name, last_name, language_code.

        Returns:
            The User with profile, stats and telegram_account loaded.
        """
        telegram_id = str(telegram_data["telegram_id"])
        with self._session_scope("find_or_create_telegram_user") as session:
            user = session.query(User).filter(User.telegram_id == telegram_id).first()

            if user:
                if user.telegram_account is None:
                    user.telegram_account = self._new_telegram_account(telegram_data)
                user.telegram_account.last_active = utcnow()
                return user

            user = User(
                telegram_id=telegram_id,
                telegram_username=telegram_data.get("username"),
                name=telegram_data.get("first_name"),
            )
            self._new_user_children(user)
            user.telegram_account = self._new_telegram_account(telegram_data)
            session.add(user)
            session.flush()
            logger.info(f"Created Telegram user id={user.id} telegram_id={telegram_id}")
            return user

    def link_telegram_to_web_user(self, user_id: UUID, telegram_data: dict[str, Any]) -> User:
        """
        Attach a Telegram identity to an existing web user.

        Raises:
            UserNotFoundError: If the web user does not exist.
            TelegramAlreadyLinkedError: If the Telegram id belongs to another user.
        """
        telegram_id = str(telegram_data["telegram_id"])
        with self._session_scope("link_telegram_to_web_user") as session:
            existing = session.query(User).filter(User.telegram_id == telegram_id).first()
            if existing and existing.id != user_id:
                raise TelegramAlreadyLinkedError(
                    "Telegram account already linked to another user")

            user = session.query(User).filter(User.id == user_id).first()
            if not user:
                raise UserNotFoundError(f"User {user_id} not found")

            user.telegram_id = telegram_id
            user.telegram_username = telegram_data.get("username")

            if user.telegram_account is None:
                user.telegram_account = self._new_telegram_account(telegram_data)
            else:
                account = user.telegram_account
                account.username = telegram_data.get("username")
                account.first_name = telegram_data.get("first_name")
                account.last_name = telegram_data.get("last_name")
                account.last_active = utcnow()

            logger.info(f"Linked telegram_id={telegram_id} to user_id={user_id}")
            return user

    # -------------------------------------------------------------------------
    # HISTORY
    # -------------------------------------------------------------------------

    def add_to_history(
        self,
        user_id: UUID,
        message: str,
        mood: Optional[str],
        suggestions: list[dict[str, Any]],
        timestamp: Optional[datetime] = None,
    ) -> HistorySession:
        """
        Record a recommendation session and bump query stats.

        Keeps at most MAX_HISTORY_SESSIONS per user; older sessions are pruned.
        """
        with self._session_scope("add_to_history") as session:
            history = HistorySession(
                user_id=user_id,
                message=message,
                mood=mood,
                suggestions=suggestions,
                timestamp=timestamp or utcnow(),
            )
            session.add(history)
            session.flush()

            stale = (
                session.query(HistorySession.id)
                .filter(HistorySession.user_id == user_id)
                .order_by(desc(HistorySession.timestamp))
                .offset(MAX_HISTORY_SESSIONS)
                .all()
            )
            if stale:
                session.query(HistorySession).filter(
                    HistorySession.id.in_([row.id for row in stale])
                ).delete(synchronize_session=False)

            stats = self._get_or_create_stats(session, user_id)
            stats.total_queries += 1
            self._apply_streak(stats)
            return history

    def get_user_history(self, user_id: UUID, limit: int = 10) -> list[HistorySession]:
        with self._session_scope("get_user_history") as session:
            return (
                session.query(HistorySession)
                .filter(HistorySession.user_id == user_id)
                .order_by(desc(HistorySession.timestamp))
                .limit(limit)
                .all()
            )

    def get_global_history(self, limit: int = 20) -> list[tuple[HistorySession, Optional[str]]]:
        """Recent sessions across all users with a display name for each."""
        with self._session_scope("get_global_history") as session:
            rows = (
                session.query(HistorySession, User.name, User.telegram_username)
                .join(User, User.id == HistorySession.user_id)
                .order_by(desc(HistorySession.timestamp))
                .limit(limit)
                .all()
            )
            return [(history, name or username) for history, name, username in rows]

    def get_history_session(self, user_id: UUID, session_id: UUID) -> Optional[HistorySession]:
        with self._session_scope("get_history_session") as session:
            return (
                session.query(HistorySession)
                .filter(
                    HistorySession.user_id == user_id,
                    HistorySession.id == session_id,
                )
                .first()
            )

    def set_history_feedback(self, user_id: UUID, session_id: UUID, feedback: str) -> bool:
        """Attach helpful/not-helpful feedback. Returns False if the session is gone."""
        with self._session_scope("set_history_feedback") as session:
            history = (
                session.query(HistorySession)
                .filter(
                    HistorySession.user_id == user_id,
                    HistorySession.id == session_id,
                )
                .first()
            )
            if not history:
                return False
            history.feedback = feedback
            return True

    def delete_history(self, user_id: UUID, session_id: Optional[UUID] = None) -> int:
        """Delete one session, or the whole history when session_id is None."""
        with self._session_scope("delete_history") as session:
            query = session.query(HistorySession).filter(HistorySession.user_id == user_id)
            if session_id is not None:
                query = query.filter(HistorySession.id == session_id)
            deleted = query.delete(synchronize_session=False)
            logger.info(f"Deleted {deleted} history session(s) for user_id={user_id}")
            return deleted

    # -------------------------------------------------------------------------
    # SAVES
    # -------------------------------------------------------------------------

    def save_video(
        self,
        user_id: UUID,
        video_id: str,
        suggestion: dict[str, Any],
        list_name: str,
        notes: Optional[str] = None,
    ) -> SavedItem:
        """
        Save a suggestion into a list.

        Saving an already-saved video moves it to the new list without
        touching the save counter.
        """
        with self._session_scope("save_video") as session:
            existing = (
                session.query(SavedItem)
                .filter(SavedItem.user_id == user_id, SavedItem.video_id == video_id)
                .first()
            )
            if existing:
                existing.list = list_name
                if notes is not None:
                    existing.notes = notes
                return existing

            saved = SavedItem(
                user_id=user_id,
                video_id=video_id,
                suggestion=suggestion,
                list=list_name,
                notes=notes,
                added_at=utcnow(),
            )
            session.add(saved)

            stats = self._get_or_create_stats(session, user_id)
            stats.total_saves += 1
            return saved

    def get_user_saves(self, user_id: UUID, list_name: Optional[str] = None) -> list[SavedItem]:
        with self._session_scope("get_user_saves") as session:
            query = session.query(SavedItem).filter(SavedItem.user_id == user_id)
            if list_name:
                query = query.filter(SavedItem.list == list_name)
            return query.order_by(desc(SavedItem.added_at)).all()

    def remove_save(self, user_id: UUID, video_id: str) -> bool:
        with self._session_scope("remove_save") as session:
            deleted = (
                session.query(SavedItem)
                .filter(SavedItem.user_id == user_id, SavedItem.video_id == video_id)
                .delete(synchronize_session=False)
            )
            if not deleted:
                return False
            stats = self._get_or_create_stats(session, user_id)
            stats.total_saves = max(0, stats.total_saves - 1)
            return True

    # -------------------------------------------------------------------------
    # LIKES
    # -------------------------------------------------------------------------

    def like_video(
        self,
        user_id: UUID,
        video_id: str,
        suggestion: Optional[dict[str, Any]] = None,
    ) -> Like:
        """Like a video. Idempotent: an existing like is returned unchanged."""
        with self._session_scope("like_video") as session:
            existing = (
                session.query(Like)
                .filter(Like.user_id == user_id, Like.video_id == video_id)
                .first()
            )
            if existing:
                return existing

            like = Like(
                user_id=user_id,
                video_id=video_id,
                suggestion=suggestion,
                liked_at=utcnow(),
            )
            session.add(like)

            stats = self._get_or_create_stats(session, user_id)
            stats.total_likes += 1
            if suggestion:
                categories = dict(stats.favorite_categories or {})
                for tag in suggestion.get("tags") or []:
                    categories[tag] = categories.get(tag, 0) + 1
                stats.favorite_categories = categories
            return like

    def unlike_video(self, user_id: UUID, video_id: str) -> bool:
        with self._session_scope("unlike_video") as session:
            deleted = (
                session.query(Like)
                .filter(Like.user_id == user_id, Like.video_id == video_id)
                .delete(synchronize_session=False)
            )
            if not deleted:
                return False
            stats = self._get_or_create_stats(session, user_id)
            stats.total_likes = max(0, stats.total_likes - 1)
            return True

    def toggle_like(
        self,
        user_id: UUID,
        video_id: str,
        suggestion: Optional[dict[str, Any]] = None,
    ) -> bool:
        """Flip the like state. Returns True when the video is now liked."""
        if self.is_video_liked(user_id, video_id):
            self.unlike_video(user_id, video_id)
            return False
        self.like_video(user_id, video_id, suggestion)
        return True

    def get_user_likes(self, user_id: UUID, limit: Optional[int] = None) -> list[Like]:
        with self._session_scope("get_user_likes") as session:
            query = (
                session.query(Like)
                .filter(Like.user_id == user_id)
                .order_by(desc(Like.liked_at))
            )
            if limit:
                query = query.limit(limit)
            return query.all()

    def is_video_liked(self, user_id: UUID, video_id: str) -> bool:
        with self._session_scope("is_video_liked") as session:
            like = (
                session.query(Like.id)
                .filter(Like.user_id == user_id, Like.video_id == video_id)
                .first()
            )
            return like is not None

    # -------------------------------------------------------------------------
    # PROFILE
    # -------------------------------------------------------------------------

    def get_profile(self, user_id: UUID) -> Optional[Profile]:
        with self._session_scope("get_profile") as session:
            return session.query(Profile).filter(Profile.user_id == user_id).first()

    def update_user_profile(self, user_id: UUID, data: dict[str, Any]) -> Profile:
        """
        Upsert the profile. Only keys present in data (camelCase API names)
        are changed.
        """
        with self._session_scope("update_user_profile") as session:
            profile = session.query(Profile).filter(Profile.user_id == user_id).first()
            if profile is None:
                profile = Profile(
                    user_id=user_id, hobbies=[], interests=[], languages=[], youtubers=[])
                session.add(profile)

            for key, column in PROFILE_FIELDS.items():
                if key in data and data[key] is not None:
                    setattr(profile, column, data[key])

            if data.get("name") is not None:
                user = session.query(User).filter(User.id == user_id).first()
                if user:
                    user.name = data["name"]
            return profile

    def reset_profile(self, user_id: UUID) -> Profile:
        return self.update_user_profile(
            user_id,
            {"hobbies": [], "interests": [], "languages": [], "youtubers": [], "workContext": ""},
        )

    # -------------------------------------------------------------------------
    # STATS
    # -------------------------------------------------------------------------

    @staticmethod
    def _get_or_create_stats(session: Session, user_id: UUID) -> UserStats:
        stats = session.query(UserStats).filter(UserStats.user_id == user_id).first()
        if stats is None:
            stats = UserStats(
                user_id=user_id,
                total_queries=0,
                total_likes=0,
                total_saves=0,
                total_videos_watched=0,
                streak=0,
                longest_streak=0,
                favorite_categories={},
            )
            session.add(stats)
        return stats

    @staticmethod
    def _apply_streak(stats: UserStats, now: Optional[datetime] = None) -> UserStats:
        """
        Advance the daily streak.

        One day since last activity continues the streak, a longer gap
        restarts it at 1, the same day leaves it unchanged (except a fresh
        account, which starts at 1).
        """
        now = now or utcnow()
        last_active = stats.last_active_date or now
        if last_active.tzinfo is None:
            last_active = last_active.replace(tzinfo=timezone.utc)
        days = (now.date() - last_active.date()).days

        if days == 1:
            stats.streak += 1
        elif days > 1 or stats.streak == 0:
            stats.streak = 1

        stats.longest_streak = max(stats.longest_streak, stats.streak)
        stats.last_active_date = now
        return stats

    def get_user_stats(self, user_id: UUID) -> Optional[UserStats]:
        with self._session_scope("get_user_stats") as session:
            return session.query(UserStats).filter(UserStats.user_id == user_id).first()

    def update_streak(self, user_id: UUID) -> Optional[UserStats]:
        with self._session_scope("update_streak") as session:
            stats = session.query(UserStats).filter(UserStats.user_id == user_id).first()
            if stats is None:
                return None
            return self._apply_streak(stats)

    # -------------------------------------------------------------------------
    # TELEGRAM
    # -------------------------------------------------------------------------

    @staticmethod
    def _get_account(session: Session, telegram_id: str) -> TelegramAccount:
        account = (
            session.query(TelegramAccount)
            .filter(TelegramAccount.telegram_id == str(telegram_id))
            .first()
        )
        if account is None:
            raise TelegramAccountNotFoundError(
                f"Telegram account {telegram_id} not found")
        return account

    def update_telegram_mood(self, telegram_id: str, mood: Optional[str]) -> TelegramAccount:
        with self._session_scope("update_telegram_mood") as session:
            account = self._get_account(session, telegram_id)
            account.current_mood = mood
            account.last_active = utcnow()
            return account

    def set_pending_profile_setup(self, telegram_id: str, pending: bool) -> TelegramAccount:
        with self._session_scope("set_pending_profile_setup") as session:
            account = self._get_account(session, telegram_id)
            account.pending_profile_setup = pending
            return account

    def get_telegram_notification_settings(self, telegram_id: str) -> Optional[NotificationSettings]:
        with self._session_scope("get_telegram_notification_settings") as session:
            account = (
                session.query(TelegramAccount)
                .filter(TelegramAccount.telegram_id == str(telegram_id))
                .first()
            )
            return account.notifications if account else None

    def update_telegram_notifications(
        self, telegram_id: str, data: dict[str, Any]
    ) -> NotificationSettings:
        """
        Update notification toggles, creating the settings row if missing.

        Raises:
            TelegramAccountNotFoundError: If the Telegram account is unknown.
        """
        with self._session_scope("update_telegram_notifications") as session:
            account = self._get_account(session, telegram_id)
            settings = account.notifications
            if settings is None:
                settings = NotificationSettings(
                    daily_digest=False,
                    trending_alerts=False,
                    reminders=False,
                    timezone="UTC",
                )
                account.notifications = settings

            for key, column in NOTIFICATION_FIELDS.items():
                if key in data:
                    setattr(settings, column, data[key])
            return settings
