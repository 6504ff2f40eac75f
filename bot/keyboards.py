"""
Inline keyboards.

Callback data is "<action>:<arg>[:<arg>]". Suggestion references come from
bot.utils.callback_ref and never contain ':'.
"""

from typing import Optional

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from bot.config import LIST_EMOJIS, MOOD_EMOJIS, SAVE_LIST_NAMES, VALID_MOODS


def mood_keyboard() -> InlineKeyboardMarkup:
    """Two rows of three mood buttons."""
    buttons = [
        InlineKeyboardButton(f"{MOOD_EMOJIS[mood]} {mood.capitalize()}", callback_data=f"mood:{mood}")
        for mood in VALID_MOODS
    ]
    return InlineKeyboardMarkup([buttons[i:i + 3] for i in range(0, len(buttons), 3)])


def video_action_keyboard(
    ref: str, url: Optional[str] = None, is_liked: bool = False
) -> InlineKeyboardMarkup:
    row = [
        InlineKeyboardButton("❤️ Liked" if is_liked else "🤍 Like", callback_data=f"like:{ref}"),
        InlineKeyboardButton("💾 Save", callback_data=f"save:{ref}"),
    ]
    if url and url.startswith("http"):
        row.append(InlineKeyboardButton("▶️ Watch", url=url))

    return InlineKeyboardMarkup([
        row,
        [
            InlineKeyboardButton("🔄 More Like This", callback_data=f"morelike:{ref}"),
            InlineKeyboardButton("🎲 Different", callback_data=f"different:{ref}"),
        ],
    ])


def save_list_keyboard(ref: str) -> InlineKeyboardMarkup:
    rows = [
        [InlineKeyboardButton(
            f"{LIST_EMOJIS[name]} {name.capitalize()}",
            callback_data=f"saveto:{ref}:{name}",
        )]
        for name in SAVE_LIST_NAMES
    ]
    rows.append([InlineKeyboardButton("« Back", callback_data=f"back:{ref}")])
    return InlineKeyboardMarkup(rows)


def feedback_keyboard(session_id: str) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup([[
        InlineKeyboardButton("👍 Helpful", callback_data=f"feedback:{session_id}:helpful"),
        InlineKeyboardButton("👎 Not Helpful", callback_data=f"feedback:{session_id}:not-helpful"),
    ]])


def notifications_keyboard(
    daily_enabled: bool, trending_enabled: bool, reminders_enabled: bool
) -> InlineKeyboardMarkup:
    def toggle(enabled: bool, label: str, action: str) -> list[InlineKeyboardButton]:
        mark = "✅" if enabled else "⬜"
        return [InlineKeyboardButton(f"{mark} {label}", callback_data=f"notify:{action}")]

    return InlineKeyboardMarkup([
        toggle(daily_enabled, "Daily Digest", "daily"),
        toggle(trending_enabled, "Trending Alerts", "trending"),
        toggle(reminders_enabled, "Reminders", "reminders"),
        [InlineKeyboardButton("✓ Done", callback_data="notify:done")],
    ])
