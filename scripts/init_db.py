#!/usr/bin/env python3
"""
Database initialization script.

Creates all tables and, outside production, a demo web user.
Use Alembic (`alembic upgrade head`) for managed deployments.
"""

import sys
import os

# Add the parent directory to the path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import db.models  # noqa: E402,F401  registers every model on Base.metadata
from config import config  # noqa: E402
from db.base import Base  # noqa: E402
from db.session import engine  # noqa: E402
from storage.errors import UserAlreadyExistsError  # noqa: E402
from storage.postgres_store import PostgresStore  # noqa: E402

DEMO_EMAIL = "demo@maintain.dev"
DEMO_PASSWORD = "maintain-demo"


def create_tables():
    """Create all database tables."""
    print("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    print("✓ Tables created successfully")


def seed_demo_user(store=None):
    """Insert the demo user if it does not exist."""
    store = store or PostgresStore()
    try:
        user = store.create_user(DEMO_EMAIL, DEMO_PASSWORD, name="Demo User")
        print(f"✓ Demo user created: {user.email}")
    except UserAlreadyExistsError:
        print(f"✓ Demo user already exists: {DEMO_EMAIL}")


def main():
    """Initialize the database with all tables and seed data."""
    print("=" * 50)
    print("Database Initialization")
    print("=" * 50)

    try:
        create_tables()
        if not config.server.is_production:
            seed_demo_user()
        print("=" * 50)
        print("✓ Database initialized successfully!")
        print("=" * 50)
    except Exception as e:
        print(f"✗ Database initialization failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
