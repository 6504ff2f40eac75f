"""
Inline button callbacks.

Callback data is "<action>:<arg>". Each action handler returns the toast
text for the callback answer (or None); the router answers every query
exactly once.
"""

import logging
from typing import Any, Awaitable, Callable, Optional

from telegram import Update
from telegram.constants import ParseMode
from telegram.error import BadRequest, TelegramError
from telegram.ext import ContextTypes

from bot import config as messages
from bot.handlers import get_cache, get_profiles, send_recommendations
from bot.keyboards import notifications_keyboard, save_list_keyboard, video_action_keyboard

logger = logging.getLogger(__name__)

ERROR_TOAST = "❌ An error occurred"
UNKNOWN_TOAST = "Action not implemented yet"

FEEDBACK_VALUES = ("helpful", "not-helpful")

CallbackAction = Callable[[Update, ContextTypes.DEFAULT_TYPE, str], Awaitable[Optional[str]]]


async def _edit_markup(query: Any, markup: Any) -> None:
    try:
        await query.edit_message_reply_markup(reply_markup=markup)
    except BadRequest as e:
        # Pressing the same button twice leaves the markup unchanged.
        if "not modified" not in str(e).lower():
            raise


async def _restore_actions(update: Update, context: ContextTypes.DEFAULT_TYPE, ref: str) -> None:
    suggestion = await get_cache(context).get_suggestion(ref)
    profiles = get_profiles(context)
    user = profiles.ensure_user(update.callback_query.from_user)
    url = suggestion.get("url") if suggestion else None
    liked = profiles.is_liked(user.id, suggestion["id"]) if suggestion else False
    await _edit_markup(update.callback_query, video_action_keyboard(ref, url=url, is_liked=liked))


# =============================================================================
# Actions
# =============================================================================


async def on_mood(update: Update, context: ContextTypes.DEFAULT_TYPE, arg: str) -> Optional[str]:
    if arg not in messages.VALID_MOODS:
        return "Invalid mood"

    query = update.callback_query
    profiles = get_profiles(context)
    profiles.ensure_user(query.from_user)
    profiles.set_mood(str(query.from_user.id), arg)
    await query.edit_message_text(messages.mood_set(arg), parse_mode=ParseMode.MARKDOWN)
    return f"{messages.MOOD_EMOJIS[arg]} Mood: {arg}"


async def on_like(update: Update, context: ContextTypes.DEFAULT_TYPE, arg: str) -> Optional[str]:
    suggestion = await get_cache(context).get_suggestion(arg)
    if suggestion is None:
        return messages.SUGGESTION_EXPIRED

    query = update.callback_query
    profiles = get_profiles(context)
    user = profiles.ensure_user(query.from_user)
    liked = profiles.toggle_like(user.id, suggestion["id"], suggestion)

    await _edit_markup(query, video_action_keyboard(arg, url=suggestion.get("url"), is_liked=liked))
    return "❤️ Liked!" if liked else "💔 Removed from likes"


async def on_save(update: Update, context: ContextTypes.DEFAULT_TYPE, arg: str) -> Optional[str]:
    if await get_cache(context).get_suggestion(arg) is None:
        return messages.SUGGESTION_EXPIRED

    await _edit_markup(update.callback_query, save_list_keyboard(arg))
    return "Choose a list"


async def on_save_to(update: Update, context: ContextTypes.DEFAULT_TYPE, arg: str) -> Optional[str]:
    ref, _, list_name = arg.partition(":")
    if list_name not in messages.SAVE_LIST_NAMES:
        return "Unknown list"

    suggestion = await get_cache(context).get_suggestion(ref)
    if suggestion is None:
        return messages.SUGGESTION_EXPIRED

    profiles = get_profiles(context)
    user = profiles.ensure_user(update.callback_query.from_user)
    profiles.add_to_saves(user.id, suggestion, list_name)

    await _restore_actions(update, context, ref)
    return f"{messages.LIST_EMOJIS[list_name]} Saved to {list_name}"


async def on_back(update: Update, context: ContextTypes.DEFAULT_TYPE, arg: str) -> Optional[str]:
    await _restore_actions(update, context, arg)
    return None


async def on_feedback(update: Update, context: ContextTypes.DEFAULT_TYPE, arg: str) -> Optional[str]:
    session_id, _, value = arg.partition(":")
    if value not in FEEDBACK_VALUES:
        return "Unknown feedback"

    query = update.callback_query
    profiles = get_profiles(context)
    user = profiles.ensure_user(query.from_user)
    if not profiles.set_feedback(user.id, session_id, value):
        return "Session not found"

    await query.edit_message_text("🙏 Thanks for your feedback!")
    return "Thanks!"


async def on_notify(update: Update, context: ContextTypes.DEFAULT_TYPE, arg: str) -> Optional[str]:
    query = update.callback_query

    if arg == "done":
        await query.edit_message_text("✅ Notification settings saved.")
        return None

    profiles = get_profiles(context)
    profiles.ensure_user(query.from_user)
    settings = profiles.toggle_notification(str(query.from_user.id), arg)
    if settings is None:
        return "Unknown setting"

    await _edit_markup(
        query,
        notifications_keyboard(settings.daily_digest, settings.trending_alerts, settings.reminders),
    )
    return "Updated"


async def on_more_like(update: Update, context: ContextTypes.DEFAULT_TYPE, arg: str) -> Optional[str]:
    suggestion = await get_cache(context).get_suggestion(arg)
    if suggestion is None:
        return messages.SUGGESTION_EXPIRED

    query = update.callback_query
    chat_id = query.message.chat_id
    last = await get_cache(context).get_last_request(chat_id) or {}

    text = f"Videos similar to \"{suggestion.get('title', '')}\""
    if suggestion.get("creatorName"):
        text += f" by {suggestion['creatorName']}"

    context.application.create_task(
        send_recommendations(context, chat_id, query.from_user, text, mood=last.get("mood"))
    )
    return "🔄 Finding similar videos..."


async def on_different(update: Update, context: ContextTypes.DEFAULT_TYPE, arg: str) -> Optional[str]:
    suggestion = await get_cache(context).get_suggestion(arg)
    query = update.callback_query
    chat_id = query.message.chat_id
    last = await get_cache(context).get_last_request(chat_id)

    if suggestion is None and last is None:
        return messages.SUGGESTION_EXPIRED

    title = suggestion.get("title", "") if suggestion else ""
    if last and title:
        text = f"{last['message']}, but something different from \"{title}\""
    elif last:
        text = f"{last['message']}, but something different"
    else:
        text = f"Something different from \"{title}\""

    context.application.create_task(
        send_recommendations(
            context, chat_id, query.from_user, text, mood=(last or {}).get("mood")
        )
    )
    return "🎲 Finding something different..."


async def on_noop(update: Update, context: ContextTypes.DEFAULT_TYPE, arg: str) -> Optional[str]:
    return None


CALLBACK_ACTIONS: dict[str, CallbackAction] = {
    "mood": on_mood,
    "like": on_like,
    "save": on_save,
    "saveto": on_save_to,
    "back": on_back,
    "feedback": on_feedback,
    "notify": on_notify,
    "morelike": on_more_like,
    "different": on_different,
    "noop": on_noop,
}


# =============================================================================
# Router
# =============================================================================


async def handle_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    query = update.callback_query
    action, _, arg = (query.data or "").partition(":")
    handler = CALLBACK_ACTIONS.get(action)

    if handler is None:
        logger.warning(f"Unknown callback action: {query.data!r}")
        toast: Optional[str] = UNKNOWN_TOAST
    else:
        try:
            toast = await handler(update, context, arg)
        except Exception as e:
            logger.error(f"Callback {action} failed: {e}")
            toast = ERROR_TOAST

    try:
        await query.answer(toast)
    except TelegramError as e:
        logger.warning(f"Failed to answer callback query: {e}")
