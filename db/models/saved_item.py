import uuid
from datetime import datetime

from sqlalchemy import String, Text, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, utcnow


class SavedItem(Base):
    """A suggestion saved by a user into one of the save lists.

    A user can hold a given video in at most one list; saving it again
    moves it via the (user_id, video_id) unique constraint.
    """

    __tablename__ = "saved_items"
    __table_args__ = (
        Index("idx_saved_items_user_id", "user_id"),
        UniqueConstraint("user_id", "video_id", name="uq_saved_items_user_video"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"))
    video_id: Mapped[str] = mapped_column(String(255), nullable=False)
    list: Mapped[str] = mapped_column(String(32), nullable=False)
    suggestion: Mapped[dict] = mapped_column(JSONB, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)
    added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.video_id,
            "list": self.list,
            "addedAt": self.added_at.isoformat() if self.added_at else None,
            "notes": self.notes,
            "suggestion": self.suggestion,
        }
