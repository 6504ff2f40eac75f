#!/usr/bin/env python3
"""
Bot health check.

Verifies the bot token against Telegram's getMe and that the Maintain API
answers on /health. Exits non-zero when either check fails.
"""

import os
import sys

# Add the parent directory to the path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import httpx  # noqa: E402

from config import config  # noqa: E402

TELEGRAM_API = "https://api.telegram.org"


def print_environment():
    print("📋 Environment Check:")
    print(f"   TELEGRAM_BOT_TOKEN: {'✅ Set' if config.telegram.token else '❌ Missing'}")
    print(f"   APP_URL: {config.telegram.api_url}")
    print(f"   LLM_PROVIDER: {config.llm.provider}")
    print(f"   GOOGLE_GEMINI_API_KEY: "
          f"{'✅ Set' if config.llm.gemini_api_key else '⚠️  Missing (will use fallback)'}")
    print(f"   YOUTUBE_API_KEY: "
          f"{'✅ Set' if config.youtube.api_key else '⚠️  Missing (static trending)'}")
    print("")


def check_bot(token: str) -> bool:
    print("🔌 Testing Telegram API Connection...")
    try:
        resp = httpx.get(f"{TELEGRAM_API}/bot{token}/getMe", timeout=10)
        data = resp.json()
    except (httpx.HTTPError, ValueError) as e:
        print(f"❌ Could not reach Telegram: {e}")
        return False

    if not data.get("ok"):
        print("❌ Invalid Bot Token!")
        print(f"   Error: {data.get('description')}")
        return False

    bot = data["result"]
    print("✅ Bot Connected Successfully!")
    print(f"   Bot Username: @{bot.get('username')}")
    print(f"   Bot Name: {bot.get('first_name')}")
    print(f"   Bot ID: {bot.get('id')}")
    return True


def check_api(base_url: str) -> bool:
    print(f"\n🌐 Testing Maintain API at {base_url}...")
    try:
        resp = httpx.get(f"{base_url.rstrip('/')}/health", timeout=10)
    except httpx.HTTPError as e:
        print(f"❌ API unreachable: {e}")
        return False

    if resp.status_code != 200:
        print(f"❌ API returned {resp.status_code}")
        return False

    print(f"✅ API is up ({resp.json().get('status', 'ok')})")
    return True


def main():
    print("🔍 Checking Telegram Bot Configuration...\n")
    print_environment()

    token = config.telegram.token
    if not token:
        print("❌ TELEGRAM_BOT_TOKEN is not set!")
        print("   export TELEGRAM_BOT_TOKEN='<your token>'")
        sys.exit(1)

    bot_ok = check_bot(token)
    api_ok = check_api(config.telegram.api_url)

    if not (bot_ok and api_ok):
        sys.exit(1)

    print("\n🎉 Your bot is ready! Start it with:")
    print("   python scripts/run_bot.py")


if __name__ == "__main__":
    main()
