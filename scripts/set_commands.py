#!/usr/bin/env python3
"""
Register the bot command menu with Telegram.

The bot also does this on startup; this script is for updating the menu
without restarting it.
"""

import asyncio
import os
import sys

# Add the parent directory to the path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from telegram import Bot, BotCommand  # noqa: E402
from telegram.error import TelegramError  # noqa: E402

from bot.config import BOT_COMMANDS  # noqa: E402
from config import config  # noqa: E402


async def set_commands(token: str) -> None:
    commands = [BotCommand(name, description) for name, description in BOT_COMMANDS.items()]
    async with Bot(token) as bot:
        await bot.set_my_commands(commands)
        registered = await bot.get_my_commands()

    print(f"✅ Registered {len(registered)} commands:")
    for command in registered:
        print(f"   /{command.command} - {command.description}")


def main():
    token = config.telegram.token
    if not token:
        print("❌ TELEGRAM_BOT_TOKEN is not set!")
        sys.exit(1)

    try:
        asyncio.run(set_commands(token))
    except TelegramError as e:
        print(f"❌ Failed to set commands: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
