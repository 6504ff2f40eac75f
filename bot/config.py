"""
Static bot configuration: moods, command menu and message templates.

Templates are written for Telegram's legacy Markdown parse mode; anything
containing user data is built with MarkdownV2 escaping instead.
"""

from schemas import MOODS, SAVE_LISTS

VALID_MOODS = MOODS

MOOD_EMOJIS = {
    "tired": "😴",
    "curious": "🧐",
    "motivated": "⚡",
    "relaxed": "🧘",
    "bored": "🤥",
    "chill": "😌",
}

LIST_EMOJIS = {
    "listen": "🎧",
    "learn": "📚",
    "knowledge": "🧠",
    "tomorrow": "📅",
    "other": "📁",
}

SAVE_LIST_NAMES = SAVE_LISTS

BOT_COMMANDS = {
    "start": "Start the bot and see instructions",
    "help": "Show available commands",
    "mood": "Set your mood (e.g., /mood curious)",
    "profile": "Manage your profile preferences",
    "recommend": "Get recommendations (e.g., /recommend 20min coding)",
    "history": "View recent recommendations",
    "saves": "View your saved content by list",
    "trending": "Get trending content",
    "stats": "View your usage statistics",
    "mysaves": "View your personal saved videos",
    "myhistory": "View your personal history",
    "notifications": "Manage notification settings",
    "reset": "Reset your profile and preferences",
}

WELCOME = """👋 Welcome to Maintain Bot!

I can help you find YouTube videos based on your preferences and mood.

🎯 *Quick Start:*
Just send me a message like:
• "40-minute coding tutorial"
• "relaxing music for studying"
• "quick tech news"

📋 *Commands:*
/mood - Set your current mood
/profile - Set your interests & preferences
/history - View past recommendations
/saves - View saved content
/trending - Get trending videos
/help - Show all commands

Let's start! What would you like to watch? 🎥"""

HELP = """🤖 *Maintain Bot Commands*

*Getting Recommendations:*
Just send any message describing what you want!
Examples:
• "30 min coding tutorial"
• "funny tech videos"
• "learn JavaScript basics"

*Available Commands:*
/mood <mood> - Set your mood
  Moods: tired, curious, motivated, relaxed, bored, chill

/profile - Setup your preferences
  • Hobbies
  • Interests
  • Languages
  • Favorite YouTubers

/recommend <query> - Get recommendations
/history - View recent recommendations
/saves - View your saved videos by list
/trending - Get trending content
/stats - View your usage statistics
/mysaves - View your personal saved videos
/myhistory - View your personal history
/notifications - Manage daily digest settings
/reset - Reset your profile
/help - Show this message

💡 *Features:*
• 👍 Like/Save buttons on every video
• 📊 Track your viewing stats
• 🔔 Daily digest notifications
• 📷 Video thumbnails
• ⚡ Quick actions with buttons"""

INVALID_MOOD = "❌ Invalid mood. Choose from:\n" + "\n".join(f"• {m}" for m in VALID_MOODS)

PROCESSING = "🔍 Searching for videos..."

NO_RESULTS = "😕 No recommendations found. Try a different query!"

ERROR = "❌ Oops! Something went wrong. Please try again later."

PROFILE_START = """📝 *Setup Your Profile*

Let me know your preferences to get better recommendations!

Reply with your details in this format:

*Hobbies:* programming, gaming
*Interests:* web development, AI
*Languages:* English, Arabic
*YouTubers:* Fireship, ThePrimeagen

Or send /skip to continue without setting profile."""

PROFILE_SAVED = "✅ Profile saved successfully!"

PROFILE_RESET = "🔄 Profile and preferences have been reset."

PROFILE_UNPARSED = "I couldn't understand that format. Please try again or send /skip"

PROFILE_SKIPPED = "Profile setup skipped. You can set it later with /profile"

FALLBACK_NOTICE = "ℹ️ Using fallback suggestions (AI unavailable)"

FEEDBACK_PROMPT = "Were these recommendations helpful?"

SUGGESTION_EXPIRED = "⌛ This suggestion expired. Ask me again!"


def mood_set(mood: str) -> str:
    return f"✅ Mood set to: *{mood}*\n\nNow send me what you'd like to watch!"
