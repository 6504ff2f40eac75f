import uuid
from datetime import datetime

from sqlalchemy import String, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, utcnow


class Like(Base):
    __tablename__ = "likes"
    __table_args__ = (
        Index("idx_likes_user_id", "user_id"),
        UniqueConstraint("user_id", "video_id", name="uq_likes_user_video"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"))
    video_id: Mapped[str] = mapped_column(String(255), nullable=False)
    suggestion: Mapped[dict | None] = mapped_column(JSONB)
    liked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow)

    def to_dict(self) -> dict:
        return {
            "videoId": self.video_id,
            "suggestion": self.suggestion,
            "likedAt": self.liked_at.isoformat() if self.liked_at else None,
        }
