"""Formatting helpers for bot messages."""

import hashlib
import re
from datetime import datetime, timezone
from typing import Any, Optional

from bot.config import MOOD_EMOJIS

TELEGRAM_MAX_MESSAGE = 4096

# Telegram allows 64 bytes of callback data; leave room for prefix and list name.
MAX_CALLBACK_REF = 40

_MARKDOWN_V2_SPECIAL = re.compile(r"([_*\[\]()~`>#+\-=|{}.!\\])")

_PROFILE_FIELDS = {
    "hobbies": re.compile(r"hobbies?:\s*([^\n]+)", re.IGNORECASE),
    "interests": re.compile(r"interests?:\s*([^\n]+)", re.IGNORECASE),
    "languages": re.compile(r"languages?:\s*([^\n]+)", re.IGNORECASE),
    "youtubers": re.compile(r"youtubers?:\s*([^\n]+)", re.IGNORECASE),
}

_LIST_SEPARATOR = re.compile(r",|،")


def escape_markdown(text: Any) -> str:
    """Escape MarkdownV2 special characters."""
    return _MARKDOWN_V2_SPECIAL.sub(r"\\\1", str(text))


def escape_url(url: str) -> str:
    """Escape the target of a MarkdownV2 inline link."""
    return url.replace("\\", "\\\\").replace(")", "\\)")


def bold(text: Any) -> str:
    return f"*{escape_markdown(text)}*"


def split_message(message: str, max_length: int = TELEGRAM_MAX_MESSAGE) -> list[str]:
    """
    Split text into chunks of at most max_length, preferring line breaks.

    Lines longer than max_length are hard-cut.
    """
    chunks = []
    current = ""

    for line in message.split("\n"):
        if len(current) + len(line) + 1 > max_length:
            if current:
                chunks.append(current.strip())
                current = ""
            while len(line) > max_length:
                chunks.append(line[:max_length])
                line = line[max_length:]
            current = line + "\n"
        else:
            current += line + "\n"

    if current.strip():
        chunks.append(current.strip())

    return chunks


def get_time_ago(when: datetime, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    seconds = int((now - when).total_seconds())

    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{seconds // 60}min ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    if seconds < 604800:
        return f"{seconds // 86400}d ago"
    return when.strftime("%Y-%m-%d")


def get_mood_emoji(mood: Optional[str]) -> str:
    return MOOD_EMOJIS.get(mood or "", "💭")


def parse_profile_from_message(message: str) -> dict[str, Any]:
    """
    Parse "Hobbies: a, b" style lines into a partial profile.

    Values are split on Latin or Arabic commas. Only fields that appear in
    the message are returned.
    """
    profile: dict[str, Any] = {}

    for field_name, pattern in _PROFILE_FIELDS.items():
        match = pattern.search(message)
        if not match:
            continue
        values = [v.strip() for v in _LIST_SEPARATOR.split(match.group(1)) if v.strip()]
        if field_name == "youtubers":
            profile[field_name] = [{"name": name, "channelUrl": ""} for name in values]
        else:
            profile[field_name] = values

    return profile


def callback_ref(suggestion_id: str) -> str:
    """
    Short, separator-free reference to a suggestion for callback data.

    Ids that are too long or contain ':' are replaced by a stable hash.
    """
    if len(suggestion_id.encode("utf-8")) <= MAX_CALLBACK_REF and ":" not in suggestion_id:
        return suggestion_id
    return "h" + hashlib.sha1(suggestion_id.encode("utf-8")).hexdigest()[:16]


def format_video(video: dict[str, Any], index: int) -> str:
    """MarkdownV2 caption for a single suggestion."""
    message = f"*{index}\\. {escape_markdown(video.get('title', 'Untitled'))}*\n\n"

    if video.get("creatorName"):
        message += f"📺 {escape_markdown(video['creatorName'])}\n"

    if video.get("durationMinutes"):
        message += f"⏱️ {escape_markdown(video['durationMinutes'])} min\n"

    description = video.get("description")
    if description:
        if len(description) > 150:
            message += f"\n{escape_markdown(description[:150])}\\.\\.\\.\n"
        else:
            message += f"\n{escape_markdown(description)}\n"

    url = video.get("url")
    if url and url != "#":
        message += f"\n🔗 [Watch on YouTube]({escape_url(url)})"

    return message


def format_suggestions(suggestions: list[dict[str, Any]]) -> str:
    """MarkdownV2 list of suggestions in a single message."""
    message = f"📺 *Found {len(suggestions)} videos:*\n\n"

    for i, s in enumerate(suggestions, start=1):
        message += f"{i}\\. {bold(s.get('title', 'Untitled'))}\n"
        message += f"   👤 {escape_markdown(s.get('creatorName', 'Unknown'))}\n"

        if s.get("durationMinutes"):
            message += f"   ⏱️ {escape_markdown(s['durationMinutes'])} min\n"

        description = s.get("description")
        if description:
            suffix = "\\.\\.\\." if len(description) > 100 else ""
            message += f"   📝 {escape_markdown(description[:100])}{suffix}\n"

        url = s.get("url")
        if url and url != "#":
            message += f"   🔗 [Watch Video]({escape_url(url)})\n"

        message += "\n"

    return message
