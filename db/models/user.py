import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import String, DateTime
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, utcnow

if TYPE_CHECKING:
    from db.models.profile import Profile
    from db.models.user_stats import UserStats
    from db.models.telegram_account import TelegramAccount


class User(Base):
    """Application user, reachable by email (web) and/or Telegram id (bot)."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email: Mapped[str | None] = mapped_column(String(320), unique=True)
    password_hash: Mapped[str | None] = mapped_column(String(255))
    name: Mapped[str | None] = mapped_column(String(255))
    telegram_id: Mapped[str | None] = mapped_column(String(64), unique=True)
    telegram_username: Mapped[str | None] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow)

    profile: Mapped[Optional["Profile"]] = relationship(
        back_populates="user", uselist=False, cascade="all, delete-orphan", lazy="selectin")
    stats: Mapped[Optional["UserStats"]] = relationship(
        back_populates="user", uselist=False, cascade="all, delete-orphan", lazy="selectin")
    telegram_account: Mapped[Optional["TelegramAccount"]] = relationship(
        back_populates="user", uselist=False, cascade="all, delete-orphan", lazy="selectin")

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "email": self.email,
            "name": self.name,
            "telegramId": self.telegram_id,
            "telegramUsername": self.telegram_username,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
