import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Integer, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, utcnow

if TYPE_CHECKING:
    from db.models.user import User


class UserStats(Base):
    """Per-user usage counters and activity streak."""

    __tablename__ = "user_stats"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), unique=True)
    total_queries: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_likes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_saves: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_videos_watched: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    streak: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    longest_streak: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    favorite_categories: Mapped[dict] = mapped_column(JSONB, default=dict, nullable=False)
    last_active_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow)
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow)

    user: Mapped["User"] = relationship(back_populates="stats")

    def to_dict(self) -> dict:
        return {
            "totalQueries": self.total_queries,
            "totalLikes": self.total_likes,
            "totalSaves": self.total_saves,
            "totalVideosWatched": self.total_videos_watched,
            "streak": self.streak,
            "longestStreak": self.longest_streak,
            "favoriteCategories": dict(self.favorite_categories or {}),
            "lastActiveDate": self.last_active_date.isoformat() if self.last_active_date else None,
            "joinedAt": self.joined_at.isoformat() if self.joined_at else None,
        }
