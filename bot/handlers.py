"""
Command and message handlers for the Telegram bot.

Shared services live in application.bot_data:
- "profiles": BotProfiles
- "cache": SuggestionCache
- "api": MaintainApiClient
"""

import logging
from collections import defaultdict
from typing import Any, Optional

from telegram import Update
from telegram.constants import ParseMode
from telegram.error import TelegramError
from telegram.ext import ContextTypes

from bot import config as messages
from bot.api_client import ApiError, MaintainApiClient
from bot.keyboards import feedback_keyboard, mood_keyboard, video_action_keyboard
from bot.profiles import BotProfiles
from bot.utils import (
    bold,
    callback_ref,
    escape_markdown,
    format_suggestions,
    format_video,
    get_mood_emoji,
    get_time_ago,
    parse_profile_from_message,
    split_message,
)
from storage.redis_store import SuggestionCache

logger = logging.getLogger(__name__)

TRENDING_COUNT = 10
GLOBAL_HISTORY_LIMIT = 5
SAVES_PREVIEW = 3


def get_profiles(context: ContextTypes.DEFAULT_TYPE) -> BotProfiles:
    return context.bot_data["profiles"]


def get_cache(context: ContextTypes.DEFAULT_TYPE) -> SuggestionCache:
    return context.bot_data["cache"]


def get_api(context: ContextTypes.DEFAULT_TYPE) -> MaintainApiClient:
    return context.bot_data["api"]


# =============================================================================
# Recommendations
# =============================================================================


async def _delete_quietly(context: ContextTypes.DEFAULT_TYPE, chat_id: int, message_id: int) -> None:
    try:
        await context.bot.delete_message(chat_id=chat_id, message_id=message_id)
    except TelegramError as e:
        logger.warning(f"Could not delete message {message_id}: {e}")


async def send_suggestion(
    context: ContextTypes.DEFAULT_TYPE,
    chat_id: int,
    video: dict[str, Any],
    index: int,
    is_liked: bool = False,
) -> None:
    """
    Send one suggestion with its action buttons.

    Uses the thumbnail as a photo when there is one and falls back to a
    plain text message when Telegram rejects the photo.
    """
    ref = callback_ref(str(video["id"]))
    await get_cache(context).store_suggestion(video, ref=ref)

    keyboard = video_action_keyboard(ref, url=video.get("url"), is_liked=is_liked)
    caption = format_video(video, index)
    thumbnail = video.get("thumbnailUrl")

    if thumbnail and thumbnail.startswith("http"):
        try:
            await context.bot.send_photo(
                chat_id=chat_id,
                photo=thumbnail,
                caption=caption,
                parse_mode=ParseMode.MARKDOWN_V2,
                reply_markup=keyboard,
            )
            return
        except TelegramError as e:
            logger.warning(f"Photo send failed for {video['id']}, sending text: {e}")

    await context.bot.send_message(
        chat_id=chat_id,
        text=caption,
        parse_mode=ParseMode.MARKDOWN_V2,
        reply_markup=keyboard,
        disable_web_page_preview=True,
    )


async def send_recommendations(
    context: ContextTypes.DEFAULT_TYPE,
    chat_id: int,
    tg_user: Any,
    query: str,
    mood: Optional[str] = None,
) -> None:
    """
    Fetch recommendations from the API and post them to the chat.

    The mood defaults to the user's stored mood. History is recorded
    before the suggestions are sent so the feedback buttons can refer to it.
    """
    profiles = get_profiles(context)
    loading = await context.bot.send_message(chat_id=chat_id, text=messages.PROCESSING)

    try:
        user = profiles.ensure_user(tg_user)
        mood = mood or profiles.current_mood(user)
        data = await get_api(context).recommend(
            query,
            mood=mood,
            profile=profiles.profile_dict(user),
            user_id=user.id,
        )
    except Exception as e:
        if not isinstance(e, ApiError):
            logger.error(f"Recommendation request failed for {tg_user.id}: {e}")
        await _delete_quietly(context, chat_id, loading.message_id)
        await context.bot.send_message(chat_id=chat_id, text=messages.ERROR)
        return

    await _delete_quietly(context, chat_id, loading.message_id)

    suggestions = data.get("suggestions") or []
    if not suggestions:
        await context.bot.send_message(chat_id=chat_id, text=messages.NO_RESULTS)
        return

    session = profiles.add_to_history(user.id, query, mood, suggestions)
    await get_cache(context).set_last_request(chat_id, {"message": query, "mood": mood})

    for index, video in enumerate(suggestions, start=1):
        await send_suggestion(context, chat_id, video, index)

    if data.get("usedFallback"):
        await context.bot.send_message(chat_id=chat_id, text=messages.FALLBACK_NOTICE)

    await context.bot.send_message(
        chat_id=chat_id,
        text=messages.FEEDBACK_PROMPT,
        reply_markup=feedback_keyboard(str(session.id)),
    )


# =============================================================================
# Commands
# =============================================================================


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    get_profiles(context).ensure_user(update.effective_user)
    await update.message.reply_text(
        messages.WELCOME, parse_mode=ParseMode.MARKDOWN, reply_markup=mood_keyboard()
    )


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.message.reply_text(messages.HELP, parse_mode=ParseMode.MARKDOWN)


async def apply_mood(update: Update, context: ContextTypes.DEFAULT_TYPE, mood: str) -> None:
    profiles = get_profiles(context)
    profiles.ensure_user(update.effective_user)
    profiles.set_mood(str(update.effective_user.id), mood)
    await update.message.reply_text(messages.mood_set(mood), parse_mode=ParseMode.MARKDOWN)


async def mood(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """/mood <mood>, or a mood picker when no argument is given."""
    if not context.args:
        await update.message.reply_text("How are you feeling?", reply_markup=mood_keyboard())
        return

    value = context.args[0].lower()
    if value not in messages.VALID_MOODS:
        await update.message.reply_text(messages.INVALID_MOOD)
        return

    await apply_mood(update, context, value)


async def quick_mood(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """/tired, /curious, ... set the mood directly."""
    command = update.message.text.split()[0].lstrip("/").split("@")[0].lower()
    await apply_mood(update, context, command)


async def profile(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    profiles = get_profiles(context)
    user = profiles.ensure_user(update.effective_user)
    data = profiles.profile_dict(user)

    if not (data.get("hobbies") or data.get("interests")):
        profiles.set_pending_profile_setup(str(update.effective_user.id), True)
        await update.message.reply_text(messages.PROFILE_START, parse_mode=ParseMode.MARKDOWN)
        return

    youtubers = [y.get("name", "") for y in data.get("youtubers", [])]
    lines = [
        "👤 *Your Profile*",
        "",
        f"*Hobbies:* {escape_markdown(', '.join(data.get('hobbies', [])) or '-')}",
        f"*Interests:* {escape_markdown(', '.join(data.get('interests', [])) or '-')}",
        f"*Languages:* {escape_markdown(', '.join(data.get('languages', [])) or '-')}",
        f"*YouTubers:* {escape_markdown(', '.join(youtubers) or '-')}",
        f"*Mood:* {get_mood_emoji(profiles.current_mood(user))} "
        f"{escape_markdown(profiles.current_mood(user) or 'not set')}",
        "",
        escape_markdown("Use /reset to start over."),
    ]
    await update.message.reply_text("\n".join(lines), parse_mode=ParseMode.MARKDOWN_V2)


async def skip(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    profiles = get_profiles(context)
    user = profiles.ensure_user(update.effective_user)

    if not profiles.is_pending_profile_setup(user):
        await update.message.reply_text("Nothing to skip. Send /profile to set up your preferences.")
        return

    profiles.set_pending_profile_setup(str(update.effective_user.id), False)
    await update.message.reply_text(messages.PROFILE_SKIPPED)


async def reset(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    profiles = get_profiles(context)
    user = profiles.ensure_user(update.effective_user)
    profiles.reset(user)
    await update.message.reply_text(messages.PROFILE_RESET)


async def recommend(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    query = " ".join(context.args or []).strip()
    if not query:
        await update.message.reply_text(
            "Tell me what you want to watch, e.g. /recommend 20min coding tutorial"
        )
        return

    await send_recommendations(context, update.effective_chat.id, update.effective_user, query)


async def history(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Most recent recommendation requests across all users."""
    sessions = get_profiles(context).get_global_history(limit=GLOBAL_HISTORY_LIMIT)
    if not sessions:
        await update.message.reply_text("📭 No history yet. Send me what you'd like to watch!")
        return

    message = "📜 *Recent Recommendations:*\n\n"
    for i, (session, name) in enumerate(sessions, start=1):
        message += f"{i}\\. {bold(session.message)}\n"
        message += (
            f"   📅 {escape_markdown(get_time_ago(session.timestamp))}"
            f" \\| {get_mood_emoji(session.mood)} {escape_markdown(session.mood or 'no mood')}\n"
        )
        message += f"   📺 {len(session.suggestions or [])} videos"
        if name:
            message += f" for {escape_markdown(name)}"
        message += "\n\n"

    await update.message.reply_text(message, parse_mode=ParseMode.MARKDOWN_V2)


async def saves(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Saved items grouped by list, a few titles per list."""
    profiles = get_profiles(context)
    user = profiles.ensure_user(update.effective_user)
    items = profiles.get_saves(user.id)

    if not items:
        await update.message.reply_text("💾 You haven't saved anything yet. Tap Save on a video!")
        return

    grouped: dict[str, list[Any]] = defaultdict(list)
    for item in items:
        grouped[item.list].append(item)

    message = "💾 *Your Saved Content:*\n\n"
    for list_name in messages.SAVE_LIST_NAMES:
        entries = grouped.get(list_name)
        if not entries:
            continue
        emoji = messages.LIST_EMOJIS[list_name]
        message += f"{emoji} {bold(list_name.capitalize())} \\({len(entries)}\\)\n"
        for item in entries[:SAVES_PREVIEW]:
            title = (item.suggestion or {}).get("title", item.video_id)
            message += f"  • {escape_markdown(title)}\n"
        message += "\n"

    message += escape_markdown("Use /mysaves to see everything.")
    await update.message.reply_text(message, parse_mode=ParseMode.MARKDOWN_V2)


async def trending(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    category = context.args[0].lower() if context.args else "all"
    await update.message.reply_text("📈 Fetching trending content...")

    try:
        data = await get_api(context).trending(category=category, count=TRENDING_COUNT)
    except ApiError:
        await update.message.reply_text(messages.ERROR)
        return

    suggestions = data.get("suggestions") or []
    if not suggestions:
        await update.message.reply_text(messages.NO_RESULTS)
        return

    for chunk in split_message(format_suggestions(suggestions), 4000):
        await update.message.reply_text(
            chunk, parse_mode=ParseMode.MARKDOWN_V2, disable_web_page_preview=True
        )


# =============================================================================
# Free text
# =============================================================================


async def handle_text(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Profile answers while setup is pending, otherwise a recommendation query."""
    text = (update.message.text or "").strip()
    if not text:
        return

    profiles = get_profiles(context)
    user = profiles.ensure_user(update.effective_user)

    if profiles.is_pending_profile_setup(user):
        parsed = parse_profile_from_message(text)
        if not parsed:
            await update.message.reply_text(messages.PROFILE_UNPARSED)
            return

        profiles.update_profile(user.id, parsed)
        profiles.set_pending_profile_setup(str(update.effective_user.id), False)
        await update.message.reply_text(messages.PROFILE_SAVED)
        return

    await send_recommendations(context, update.effective_chat.id, update.effective_user, text)
