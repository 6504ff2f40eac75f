import uuid
from typing import TYPE_CHECKING

from sqlalchemy import String, Boolean, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base

if TYPE_CHECKING:
    from db.models.telegram_account import TelegramAccount


class NotificationSettings(Base):
    __tablename__ = "notification_settings"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    telegram_account_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("telegram_accounts.id", ondelete="CASCADE"), unique=True)
    daily_digest: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    daily_digest_time: Mapped[str | None] = mapped_column(String(5))
    trending_alerts: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    reminders: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    timezone: Mapped[str] = mapped_column(String(64), default="UTC", nullable=False)

    telegram_account: Mapped["TelegramAccount"] = relationship(back_populates="notifications")

    def to_dict(self) -> dict:
        return {
            "dailyDigest": self.daily_digest,
            "dailyDigestTime": self.daily_digest_time,
            "trendingAlerts": self.trending_alerts,
            "reminders": self.reminders,
            "timezone": self.timezone,
        }
