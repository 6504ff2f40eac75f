#!/usr/bin/env python3
"""
Start the Telegram bot with long polling.

Requires TELEGRAM_BOT_TOKEN; the API server must be reachable at APP_URL.
"""

import sys
import os

# Add the parent directory to the path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bot.app import main  # noqa: E402


if __name__ == "__main__":
    main()
