"""
Telegram application wiring.

build_application() registers every handler on a python-telegram-bot
Application and stores the shared services in bot_data.
"""

import logging
from typing import Optional

from telegram import BotCommand, Update
from telegram.error import Forbidden, TelegramError, TimedOut
from telegram.ext import (
    Application,
    ApplicationBuilder,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)
from telegram.request import HTTPXRequest

from bot import callbacks, commands, handlers
from bot.api_client import MaintainApiClient
from bot.config import BOT_COMMANDS, VALID_MOODS
from bot.profiles import BotProfiles
from config import config
from storage.redis_store import SuggestionCache

logger = logging.getLogger(__name__)


async def error_handler(update: Optional[object], context: ContextTypes.DEFAULT_TYPE) -> None:
    err = context.error
    if isinstance(err, TimedOut):
        logger.warning(f"Network timeout while calling Telegram API: {err}")
        return
    if isinstance(err, Forbidden):
        logger.warning(f"Bot was blocked or lacks access: {err}")
        return
    logger.error("Unhandled error during update processing", exc_info=err)

    if isinstance(update, Update) and update.effective_chat:
        try:
            await context.bot.send_message(
                chat_id=update.effective_chat.id,
                text="❌ Oops! Something went wrong. Please try again later.",
            )
        except TelegramError as e:
            logger.warning(f"Could not notify chat about the error: {e}")


async def configure_commands(app: Application) -> None:
    try:
        await app.bot.set_my_commands(
            [BotCommand(name, description) for name, description in BOT_COMMANDS.items()]
        )
        logger.info(f"Registered {len(BOT_COMMANDS)} bot commands")
    except TelegramError as e:
        logger.warning(f"Failed to update bot commands: {e}")


def register_handlers(app: Application) -> None:
    app.add_handler(CommandHandler("start", handlers.start))
    app.add_handler(CommandHandler("help", handlers.help_command))
    app.add_handler(CommandHandler("mood", handlers.mood))
    app.add_handler(CommandHandler(list(VALID_MOODS), handlers.quick_mood))
    app.add_handler(CommandHandler("profile", handlers.profile))
    app.add_handler(CommandHandler("skip", handlers.skip))
    app.add_handler(CommandHandler("reset", handlers.reset))
    app.add_handler(CommandHandler("recommend", handlers.recommend))
    app.add_handler(CommandHandler("history", handlers.history))
    app.add_handler(CommandHandler("saves", handlers.saves))
    app.add_handler(CommandHandler("trending", handlers.trending))

    app.add_handler(CommandHandler("stats", commands.stats))
    app.add_handler(CommandHandler("mysaves", commands.mysaves))
    app.add_handler(CommandHandler("myhistory", commands.myhistory))
    app.add_handler(CommandHandler("notifications", commands.notifications))

    app.add_handler(CallbackQueryHandler(callbacks.handle_callback))
    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handlers.handle_text))

    app.add_error_handler(error_handler)


def build_application(
    token: Optional[str] = None,
    profiles: Optional[BotProfiles] = None,
    cache: Optional[SuggestionCache] = None,
    api: Optional[MaintainApiClient] = None,
) -> Application:
    """
    Create the bot application.

    Raises:
        ValueError: If no bot token is configured
    """
    token = token or config.telegram.token
    if not token:
        raise ValueError("TELEGRAM_BOT_TOKEN is not set")

    request = HTTPXRequest(connect_timeout=25, read_timeout=60, write_timeout=60, pool_timeout=20)
    app = ApplicationBuilder().token(token).request(request).build()
    app.post_init = configure_commands

    app.bot_data["profiles"] = profiles or BotProfiles()
    app.bot_data["cache"] = cache or SuggestionCache()
    app.bot_data["api"] = api or MaintainApiClient()

    register_handlers(app)
    return app


def main() -> None:
    logging.basicConfig(
        level=getattr(logging, config.server.log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    app = build_application()
    logger.info(f"Starting bot polling (API at {config.telegram.api_url})")
    app.run_polling(allowed_updates=Update.ALL_TYPES)
