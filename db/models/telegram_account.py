import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import String, Boolean, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, utcnow

if TYPE_CHECKING:
    from db.models.user import User
    from db.models.notification_settings import NotificationSettings


class TelegramAccount(Base):
    """Telegram identity of a user plus the bot's conversational state."""

    __tablename__ = "telegram_accounts"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), unique=True)
    telegram_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    username: Mapped[str | None] = mapped_column(String(255))
    first_name: Mapped[str | None] = mapped_column(String(255))
    last_name: Mapped[str | None] = mapped_column(String(255))
    language_code: Mapped[str | None] = mapped_column(String(16))
    current_mood: Mapped[str | None] = mapped_column(String(32))
    pending_profile_setup: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False)
    last_active: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow)

    user: Mapped["User"] = relationship(back_populates="telegram_account")
    notifications: Mapped[Optional["NotificationSettings"]] = relationship(
        back_populates="telegram_account", uselist=False,
        cascade="all, delete-orphan", lazy="selectin")
