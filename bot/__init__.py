"""
Telegram bot for Maintain.

Run with `python -m scripts.run_bot` or call bot.app.main().
"""
