#!/usr/bin/env python3
"""
Import data from the old JSON files into PostgreSQL.

Reads DATA_DIR/store.json (single web user) and DATA_DIR/bot-profiles.json
(Telegram users keyed by telegram id). DATA_DIR defaults to .data.

Usage:
    python scripts/migrate_json_store.py --email you@example.com --password secret
"""

import argparse
import json
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

# Add the parent directory to the path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from storage.errors import UserAlreadyExistsError  # noqa: E402
from storage.postgres_store import PostgresStore  # noqa: E402

DATA_DIR = Path(os.getenv("DATA_DIR", ".data"))


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse ISO strings (with a trailing Z) or epoch milliseconds as UTC.

    ISO strings without an offset are taken to be UTC.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except (ValueError, OSError, OverflowError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def load_json(path: Path) -> Optional[dict[str, Any]]:
    if not path.exists():
        print(f"⚠️  {path} not found, skipping")
        return None
    with path.open(encoding="utf-8") as f:
        return json.load(f)


def import_history(store: PostgresStore, user_id, sessions: list[dict[str, Any]]) -> int:
    imported = 0
    for entry in sessions:
        if not entry.get("message"):
            continue
        session = store.add_to_history(
            user_id,
            entry["message"],
            entry.get("mood"),
            entry.get("suggestions") or [],
            timestamp=parse_timestamp(entry.get("timestamp")),
        )
        if entry.get("feedback") in ("helpful", "not-helpful"):
            store.set_history_feedback(user_id, session.id, entry["feedback"])
        imported += 1
    return imported


def import_saves(store: PostgresStore, user_id, saves: list[dict[str, Any]]) -> int:
    imported = 0
    for save in saves:
        suggestion = save.get("suggestion") or {}
        video_id = save.get("id") or suggestion.get("id")
        if not video_id:
            continue
        store.save_video(user_id, video_id, suggestion, save.get("list", "other"), save.get("notes"))
        imported += 1
    return imported


def import_likes(
    store: PostgresStore,
    user_id,
    likes: list[str],
    liked_suggestions: Optional[dict[str, Any]] = None,
) -> int:
    liked_suggestions = liked_suggestions or {}
    for video_id in likes:
        store.like_video(user_id, video_id, liked_suggestions.get(video_id))
    return len(likes)


def migrate_web_data(store: PostgresStore, email: str, password: str) -> None:
    print("📦 Migrating web app data from store.json...")
    data = load_json(DATA_DIR / "store.json")
    if data is None:
        return

    profile = data.get("profile") or {}
    try:
        user = store.create_user(email, password, name=profile.get("name") or "Web User")
        print(f"✅ Created user: {user.id}")
    except UserAlreadyExistsError:
        user = store.get_user_by_email(email)
        print(f"✓ Using existing user: {user.id}")

    if profile:
        store.update_user_profile(user.id, profile)

    print(f"  - {import_history(store, user.id, data.get('history') or [])} history sessions")
    print(f"  - {import_saves(store, user.id, data.get('saves') or [])} saves")
    likes = import_likes(store, user.id, data.get("likes") or [], data.get("likedSuggestions"))
    print(f"  - {likes} likes")
    print("✅ Web app data migration complete!")


def migrate_bot_data(store: PostgresStore) -> None:
    print("\n📱 Migrating Telegram bot data from bot-profiles.json...")
    data = load_json(DATA_DIR / "bot-profiles.json")
    if not data or not data.get("users"):
        print("No bot users to migrate")
        return

    users = data["users"]
    print(f"Found {len(users)} bot users")

    for telegram_id, bot_user in users.items():
        label = bot_user.get("username") or bot_user.get("firstName") or telegram_id
        print(f"\nMigrating bot user: {label}")

        user = store.find_or_create_telegram_user({
            "telegram_id": telegram_id,
            "username": bot_user.get("username"),
            "first_name": bot_user.get("firstName"),
        })

        if bot_user.get("profile"):
            store.update_user_profile(user.id, bot_user["profile"])
        if bot_user.get("currentMood"):
            store.update_telegram_mood(telegram_id, bot_user["currentMood"])

        notifications = bot_user.get("notifications") or {}
        if notifications:
            store.update_telegram_notifications(telegram_id, {
                "dailyDigest": bool(notifications.get("dailyDigest")),
                "dailyDigestTime": notifications.get("dailyTime"),
                "trendingAlerts": bool(notifications.get("trendingAlerts")),
                "reminders": bool(notifications.get("reminders")),
            })

        print(f"  - {import_history(store, user.id, bot_user.get('history') or [])} history sessions")
        print(f"  - {import_saves(store, user.id, bot_user.get('saves') or [])} saves")
        print(f"  - {import_likes(store, user.id, bot_user.get('likes') or [])} likes")
        print(f"✅ Migrated bot user: {label}")

    print("\n✅ Bot data migration complete!")


def main():
    parser = argparse.ArgumentParser(description="Import .data JSON files into PostgreSQL")
    parser.add_argument("--email", default="user@example.com", help="Owner of store.json data")
    parser.add_argument("--password", required=True, help="Password for a newly created web user")
    args = parser.parse_args()

    print("🚀 Starting database migration...\n")
    store = PostgresStore()

    try:
        migrate_web_data(store, args.email, args.password)
        migrate_bot_data(store)
    except Exception as e:
        print(f"\n❌ Migration failed: {e}")
        sys.exit(1)

    print("\n🎉 Migration complete! Back up your .data folder before deleting it.")


if __name__ == "__main__":
    main()
