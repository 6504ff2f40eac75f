"""
Database package for Maintain.

Provides SQLAlchemy models, session management, and database utilities.
"""

from db.base import Base
from db.session import engine, SessionLocal

__all__ = ["Base", "engine", "SessionLocal"]
