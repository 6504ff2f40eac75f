"""
Personal commands: /stats, /mysaves, /myhistory and /notifications.
"""

import logging

from telegram import Update
from telegram.constants import ParseMode
from telegram.ext import ContextTypes

from bot.config import LIST_EMOJIS
from bot.handlers import get_profiles
from bot.keyboards import notifications_keyboard
from bot.utils import bold, escape_markdown, escape_url, get_mood_emoji, get_time_ago

logger = logging.getLogger(__name__)

MY_SAVES_LIMIT = 10
MY_HISTORY_LIMIT = 10


async def stats(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    profiles = get_profiles(context)
    user = profiles.ensure_user(update.effective_user)
    user_stats = profiles.get_stats(user.id)

    if user_stats is None:
        await update.message.reply_text("📊 No stats yet. Ask me for some videos first!")
        return

    message = (
        "📊 *Your Stats*\n\n"
        f"🔍 Queries: {user_stats.total_queries}\n"
        f"❤️ Likes: {user_stats.total_likes}\n"
        f"💾 Saves: {user_stats.total_saves}\n"
        f"🔥 Streak: {user_stats.streak} days \\(best {user_stats.longest_streak}\\)\n"
    )

    categories = sorted(
        (user_stats.favorite_categories or {}).items(), key=lambda kv: kv[1], reverse=True
    )[:3]
    if categories:
        top = ", ".join(name for name, _ in categories)
        message += f"⭐ Top categories: {escape_markdown(top)}\n"

    if user_stats.joined_at:
        message += f"\n📅 Member since {escape_markdown(user_stats.joined_at.strftime('%Y-%m-%d'))}"

    await update.message.reply_text(message, parse_mode=ParseMode.MARKDOWN_V2)


async def mysaves(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Flat list of the user's most recent saves."""
    profiles = get_profiles(context)
    user = profiles.ensure_user(update.effective_user)
    items = profiles.get_saves(user.id)[:MY_SAVES_LIMIT]

    if not items:
        await update.message.reply_text("💾 No saved videos yet.")
        return

    message = "💾 *Your Saved Videos:*\n\n"
    for i, item in enumerate(items, start=1):
        suggestion = item.suggestion or {}
        emoji = LIST_EMOJIS.get(item.list, "📁")
        message += f"{i}\\. {bold(suggestion.get('title', item.video_id))} {emoji}\n"
        url = suggestion.get("url")
        if url and url != "#":
            message += f"   🔗 [Watch]({escape_url(url)})\n"

    await update.message.reply_text(
        message, parse_mode=ParseMode.MARKDOWN_V2, disable_web_page_preview=True
    )


async def myhistory(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    profiles = get_profiles(context)
    user = profiles.ensure_user(update.effective_user)
    sessions = profiles.get_history(user.id, limit=MY_HISTORY_LIMIT)

    if not sessions:
        await update.message.reply_text("📭 You have no history yet.")
        return

    message = "📜 *Your History:*\n\n"
    for i, session in enumerate(sessions, start=1):
        feedback = {"helpful": " 👍", "not-helpful": " 👎"}.get(session.feedback or "", "")
        message += f"{i}\\. {bold(session.message)}{feedback}\n"
        message += (
            f"   {get_mood_emoji(session.mood)} {escape_markdown(get_time_ago(session.timestamp))}"
            f" \\| {len(session.suggestions or [])} videos\n"
        )

    await update.message.reply_text(message, parse_mode=ParseMode.MARKDOWN_V2)


async def notifications(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    profiles = get_profiles(context)
    profiles.ensure_user(update.effective_user)
    settings = profiles.get_notifications(str(update.effective_user.id))

    await update.message.reply_text(
        "🔔 *Notification Settings*\n\nTap to toggle:",
        parse_mode=ParseMode.MARKDOWN,
        reply_markup=notifications_keyboard(
            bool(settings and settings.daily_digest),
            bool(settings and settings.trending_alerts),
            bool(settings and settings.reminders),
        ),
    )
