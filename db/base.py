"""
SQLAlchemy declarative base and common model utilities.
"""

from datetime import datetime, timezone

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase


# Naming convention for constraints (helps with Alembic migrations)
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    Provides:
    - Common metadata with naming conventions
    - Default __repr__ implementation
    """

    metadata = metadata

    def __repr__(self) -> str:
        """Generate a readable representation of the model."""
        class_name = self.__class__.__name__
        attrs = []
        for col in self.__table__.columns:
            if col.name in ("id", "email", "user_id", "video_id", "telegram_id", "list"):
                value = getattr(self, col.name, None)
                attrs.append(f"{col.name}={value!r}")
        return f"<{class_name}({', '.join(attrs)})>"


def utcnow() -> datetime:
    """Timezone-aware UTC timestamp used as column default."""
    return datetime.now(timezone.utc)
