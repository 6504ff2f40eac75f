import uuid
from datetime import datetime

from sqlalchemy import String, Text, DateTime, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, utcnow


class HistorySession(Base):
    """One recommendation request and the suggestions it produced."""

    __tablename__ = "history_sessions"
    __table_args__ = (
        Index("idx_history_user_timestamp", "user_id", "timestamp"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"))
    message: Mapped[str] = mapped_column(Text, nullable=False)
    mood: Mapped[str | None] = mapped_column(String(32))
    suggestions: Mapped[list] = mapped_column(JSONB, default=list, nullable=False)
    feedback: Mapped[str | None] = mapped_column(String(16))
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "message": self.message,
            "mood": self.mood,
            "suggestions": list(self.suggestions or []),
            "feedback": self.feedback,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }
