"""
Tests for bot command, message and callback handlers.

Telegram objects and services in bot_data are mocks; see conftest.py.
"""

import uuid
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from telegram.error import BadRequest

from bot import callbacks, commands, handlers
from bot.api_client import ApiError
from bot.config import FALLBACK_NOTICE, FEEDBACK_PROMPT, INVALID_MOOD, NO_RESULTS, PROFILE_SAVED


def sent_texts(context):
    return [call.kwargs.get("text") for call in context.bot.send_message.await_args_list]


# =============================================================================
# Recommendations
# =============================================================================

class TestSendRecommendations:

    @pytest.mark.asyncio
    async def test_sends_each_suggestion_then_feedback(
        self, bot_context, tg_user, sample_suggestion, mock_profiles, mock_cache, mock_api, user_id
    ):
        session_id = uuid.uuid4()
        mock_profiles.add_to_history.return_value = SimpleNamespace(id=session_id)
        text_only = {"id": "vid_2", "title": "No thumb", "url": "#"}
        mock_api.recommend.return_value = {
            "suggestions": [sample_suggestion, text_only],
            "model": "gemini-test",
            "usedFallback": False,
        }

        await handlers.send_recommendations(bot_context, 777, tg_user, "rust")

        mock_api.recommend.assert_awaited_once()
        assert mock_api.recommend.await_args.kwargs["mood"] == "curious"
        assert mock_api.recommend.await_args.kwargs["user_id"] == user_id
        bot_context.bot.delete_message.assert_awaited_once_with(chat_id=777, message_id=99)
        mock_profiles.add_to_history.assert_called_once_with(
            user_id, "rust", "curious", [sample_suggestion, text_only]
        )
        mock_cache.set_last_request.assert_awaited_once_with(
            777, {"message": "rust", "mood": "curious"}
        )
        assert mock_cache.store_suggestion.await_count == 2
        bot_context.bot.send_photo.assert_awaited_once()

        texts = sent_texts(bot_context)
        assert texts[-1] == FEEDBACK_PROMPT
        assert FALLBACK_NOTICE not in texts
        feedback_markup = bot_context.bot.send_message.await_args.kwargs["reply_markup"]
        assert feedback_markup.inline_keyboard[0][0].callback_data == f"feedback:{session_id}:helpful"

    @pytest.mark.asyncio
    async def test_notes_fallback(self, bot_context, tg_user, mock_api, mock_profiles):
        mock_profiles.add_to_history.return_value = SimpleNamespace(id=uuid.uuid4())
        mock_api.recommend.return_value = {
            "suggestions": [{"id": "fallback_1", "title": "x", "url": "#"}],
            "usedFallback": True,
        }

        await handlers.send_recommendations(bot_context, 777, tg_user, "rust")

        assert FALLBACK_NOTICE in sent_texts(bot_context)

    @pytest.mark.asyncio
    async def test_no_results(self, bot_context, tg_user, mock_profiles):
        await handlers.send_recommendations(bot_context, 777, tg_user, "rust")

        assert sent_texts(bot_context)[-1] == NO_RESULTS
        mock_profiles.add_to_history.assert_not_called()

    @pytest.mark.asyncio
    async def test_api_error_replies_generic_error(self, bot_context, tg_user, mock_api):
        mock_api.recommend.side_effect = ApiError("down")

        await handlers.send_recommendations(bot_context, 777, tg_user, "rust")

        assert "Something went wrong" in sent_texts(bot_context)[-1]
        bot_context.bot.delete_message.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_photo_failure_falls_back_to_text(self, bot_context, sample_suggestion):
        bot_context.bot.send_photo.side_effect = BadRequest("wrong file identifier")

        await handlers.send_suggestion(bot_context, 777, sample_suggestion, 1)

        kwargs = bot_context.bot.send_message.await_args.kwargs
        assert "Intro to Rust Ownership" in kwargs["text"]
        assert kwargs["reply_markup"].inline_keyboard[0][0].callback_data == "like:vid_123"


# =============================================================================
# Commands
# =============================================================================

class TestCommands:

    @pytest.mark.asyncio
    async def test_start_registers_user(self, message_update, bot_context, mock_profiles, tg_user):
        await handlers.start(message_update, bot_context)

        mock_profiles.ensure_user.assert_called_once_with(tg_user)
        assert "Welcome" in message_update.message.reply_text.await_args.args[0]

    @pytest.mark.asyncio
    async def test_mood_with_argument(self, message_update, bot_context, mock_profiles):
        bot_context.args = ["Relaxed"]
        await handlers.mood(message_update, bot_context)
        mock_profiles.set_mood.assert_called_once_with("4242", "relaxed")

    @pytest.mark.asyncio
    async def test_mood_invalid(self, message_update, bot_context, mock_profiles):
        bot_context.args = ["sleepy"]
        await handlers.mood(message_update, bot_context)

        message_update.message.reply_text.assert_awaited_once_with(INVALID_MOOD)
        mock_profiles.set_mood.assert_not_called()

    @pytest.mark.asyncio
    async def test_mood_without_argument_shows_keyboard(self, message_update, bot_context):
        await handlers.mood(message_update, bot_context)
        assert "reply_markup" in message_update.message.reply_text.await_args.kwargs

    @pytest.mark.asyncio
    async def test_quick_mood_command(self, message_update, bot_context, mock_profiles):
        message_update.message.text = "/chill@MaintainBot"
        await handlers.quick_mood(message_update, bot_context)
        mock_profiles.set_mood.assert_called_once_with("4242", "chill")

    @pytest.mark.asyncio
    async def test_profile_starts_setup_when_empty(self, message_update, bot_context, mock_profiles):
        await handlers.profile(message_update, bot_context)
        mock_profiles.set_pending_profile_setup.assert_called_once_with("4242", True)

    @pytest.mark.asyncio
    async def test_profile_shows_existing(self, message_update, bot_context, mock_profiles):
        mock_profiles.profile_dict.return_value = {
            "hobbies": ["chess"], "interests": [], "languages": [], "youtubers": [{"name": "Fireship"}],
        }
        await handlers.profile(message_update, bot_context)

        text = message_update.message.reply_text.await_args.args[0]
        assert "chess" in text and "Fireship" in text
        mock_profiles.set_pending_profile_setup.assert_not_called()

    @pytest.mark.asyncio
    async def test_skip_clears_pending(self, message_update, bot_context, mock_profiles):
        mock_profiles.is_pending_profile_setup.return_value = True
        await handlers.skip(message_update, bot_context)
        mock_profiles.set_pending_profile_setup.assert_called_once_with("4242", False)

    @pytest.mark.asyncio
    async def test_reset(self, message_update, bot_context, mock_profiles, bot_user):
        await handlers.reset(message_update, bot_context)
        mock_profiles.reset.assert_called_once_with(bot_user)

    @pytest.mark.asyncio
    async def test_recommend_requires_query(self, message_update, bot_context, mock_api):
        await handlers.recommend(message_update, bot_context)

        mock_api.recommend.assert_not_awaited()
        assert "/recommend" in message_update.message.reply_text.await_args.args[0]

    @pytest.mark.asyncio
    async def test_recommend_joins_args(self, message_update, bot_context, mock_api):
        bot_context.args = ["20min", "coding"]
        await handlers.recommend(message_update, bot_context)
        assert mock_api.recommend.await_args.args[0] == "20min coding"

    @pytest.mark.asyncio
    async def test_history_lists_global_sessions(self, message_update, bot_context, mock_profiles):
        session = SimpleNamespace(
            message="lofi beats", mood="chill", suggestions=[{}, {}],
            timestamp=datetime.now(timezone.utc),
        )
        mock_profiles.get_global_history.return_value = [(session, "Bob")]

        await handlers.history(message_update, bot_context)

        mock_profiles.get_global_history.assert_called_once_with(limit=5)
        text = message_update.message.reply_text.await_args.args[0]
        assert "*lofi beats*" in text
        assert "2 videos for Bob" in text

    @pytest.mark.asyncio
    async def test_saves_grouped_by_list(self, message_update, bot_context, mock_profiles, make_saved_item):
        mock_profiles.get_saves.return_value = [
            make_saved_item("a", "learn"),
            make_saved_item("b", "learn"),
            make_saved_item("c", "listen"),
        ]
        await handlers.saves(message_update, bot_context)

        text = message_update.message.reply_text.await_args.args[0]
        assert "*Learn* \\(2\\)" in text
        assert "*Listen* \\(1\\)" in text
        assert text.index("Listen") < text.index("Learn")

    @pytest.mark.asyncio
    async def test_trending(self, message_update, bot_context, mock_api, sample_suggestion):
        mock_api.trending.return_value = {"suggestions": [sample_suggestion], "source": "youtube"}
        bot_context.args = ["Music"]

        await handlers.trending(message_update, bot_context)

        mock_api.trending.assert_awaited_once_with(category="music", count=10)
        assert "Found 1 videos" in message_update.message.reply_text.await_args.args[0]


class TestTextHandler:

    @pytest.mark.asyncio
    async def test_pending_profile_is_parsed(self, message_update, bot_context, mock_profiles, user_id):
        mock_profiles.is_pending_profile_setup.return_value = True
        message_update.message.text = "Hobbies: chess, go"

        await handlers.handle_text(message_update, bot_context)

        mock_profiles.update_profile.assert_called_once_with(user_id, {"hobbies": ["chess", "go"]})
        mock_profiles.set_pending_profile_setup.assert_called_once_with("4242", False)
        message_update.message.reply_text.assert_awaited_once_with(PROFILE_SAVED)

    @pytest.mark.asyncio
    async def test_pending_profile_unparsed_stays_pending(self, message_update, bot_context, mock_profiles):
        mock_profiles.is_pending_profile_setup.return_value = True
        message_update.message.text = "whatever"

        await handlers.handle_text(message_update, bot_context)

        mock_profiles.update_profile.assert_not_called()
        mock_profiles.set_pending_profile_setup.assert_not_called()

    @pytest.mark.asyncio
    async def test_text_requests_recommendations(self, message_update, bot_context, mock_api):
        await handlers.handle_text(message_update, bot_context)
        assert mock_api.recommend.await_args.args[0] == "30 min coding tutorial"


class TestPersonalCommands:

    @pytest.mark.asyncio
    async def test_stats(self, message_update, bot_context, mock_profiles):
        mock_profiles.get_stats.return_value = SimpleNamespace(
            total_queries=12, total_likes=3, total_saves=4, streak=2, longest_streak=5,
            favorite_categories={"rust": 3, "go": 1}, joined_at=None,
        )
        await commands.stats(message_update, bot_context)

        text = message_update.message.reply_text.await_args.args[0]
        assert "Queries: 12" in text
        assert "best 5" in text
        assert "rust, go" in text

    @pytest.mark.asyncio
    async def test_mysaves_limits_to_ten(self, message_update, bot_context, mock_profiles, make_saved_item):
        mock_profiles.get_saves.return_value = [make_saved_item(f"v{i}") for i in range(15)]
        await commands.mysaves(message_update, bot_context)

        text = message_update.message.reply_text.await_args.args[0]
        assert "10\\." in text
        assert "11\\." not in text

    @pytest.mark.asyncio
    async def test_myhistory_empty(self, message_update, bot_context, mock_profiles):
        mock_profiles.get_history.return_value = []
        await commands.myhistory(message_update, bot_context)
        assert "no history" in message_update.message.reply_text.await_args.args[0]

    @pytest.mark.asyncio
    async def test_notifications_keyboard_reflects_settings(self, message_update, bot_context, mock_profiles):
        mock_profiles.get_notifications.return_value = SimpleNamespace(
            daily_digest=True, trending_alerts=False, reminders=False
        )
        await commands.notifications(message_update, bot_context)

        markup = message_update.message.reply_text.await_args.kwargs["reply_markup"]
        assert markup.inline_keyboard[0][0].text.startswith("✅")
        assert markup.inline_keyboard[1][0].text.startswith("⬜")


# =============================================================================
# Callbacks
# =============================================================================

class TestCallbackRouter:

    async def press(self, update, context, data):
        update.callback_query.data = data
        await callbacks.handle_callback(update, context)
        return update.callback_query.answer.await_args.args[0]

    @pytest.mark.asyncio
    async def test_unknown_action(self, callback_update, bot_context):
        toast = await self.press(callback_update, bot_context, "explode:1")
        assert toast == "Action not implemented yet"

    @pytest.mark.asyncio
    async def test_errors_become_error_toast(self, callback_update, bot_context, mock_profiles):
        mock_profiles.ensure_user.side_effect = RuntimeError("db down")
        toast = await self.press(callback_update, bot_context, "mood:chill")

        assert toast == "❌ An error occurred"
        callback_update.callback_query.answer.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_mood(self, callback_update, bot_context, mock_profiles):
        toast = await self.press(callback_update, bot_context, "mood:chill")

        mock_profiles.set_mood.assert_called_once_with("4242", "chill")
        callback_update.callback_query.edit_message_text.assert_awaited_once()
        assert "chill" in toast

    @pytest.mark.asyncio
    async def test_like_toggles(self, callback_update, bot_context, mock_cache, mock_profiles,
                                sample_suggestion, user_id):
        mock_cache.get_suggestion.return_value = sample_suggestion
        mock_profiles.toggle_like.return_value = True

        toast = await self.press(callback_update, bot_context, "like:vid_123")

        assert toast == "❤️ Liked!"
        mock_profiles.toggle_like.assert_called_once_with(user_id, "vid_123", sample_suggestion)
        markup = callback_update.callback_query.edit_message_reply_markup.await_args.kwargs["reply_markup"]
        assert markup.inline_keyboard[0][0].text == "❤️ Liked"

    @pytest.mark.asyncio
    async def test_like_expired(self, callback_update, bot_context, mock_profiles):
        toast = await self.press(callback_update, bot_context, "like:gone")

        assert "expired" in toast
        mock_profiles.toggle_like.assert_not_called()

    @pytest.mark.asyncio
    async def test_like_unchanged_markup_is_ignored(self, callback_update, bot_context, mock_cache,
                                                    mock_profiles, sample_suggestion):
        mock_cache.get_suggestion.return_value = sample_suggestion
        mock_profiles.toggle_like.return_value = False
        callback_update.callback_query.edit_message_reply_markup.side_effect = BadRequest(
            "Message is not modified"
        )

        toast = await self.press(callback_update, bot_context, "like:vid_123")
        assert toast == "💔 Removed from likes"

    @pytest.mark.asyncio
    async def test_save_shows_list_picker(self, callback_update, bot_context, mock_cache, sample_suggestion):
        mock_cache.get_suggestion.return_value = sample_suggestion

        toast = await self.press(callback_update, bot_context, "save:vid_123")

        assert toast == "Choose a list"
        markup = callback_update.callback_query.edit_message_reply_markup.await_args.kwargs["reply_markup"]
        assert markup.inline_keyboard[0][0].callback_data == "saveto:vid_123:listen"

    @pytest.mark.asyncio
    async def test_save_to_list(self, callback_update, bot_context, mock_cache, mock_profiles,
                                sample_suggestion, user_id):
        mock_cache.get_suggestion.return_value = sample_suggestion
        mock_profiles.is_liked.return_value = False

        toast = await self.press(callback_update, bot_context, "saveto:vid_123:learn")

        assert toast == "📚 Saved to learn"
        mock_profiles.add_to_saves.assert_called_once_with(user_id, sample_suggestion, "learn")

    @pytest.mark.asyncio
    async def test_save_to_unknown_list(self, callback_update, bot_context, mock_profiles):
        toast = await self.press(callback_update, bot_context, "saveto:vid_123:someday")

        assert toast == "Unknown list"
        mock_profiles.add_to_saves.assert_not_called()

    @pytest.mark.asyncio
    async def test_back_restores_actions(self, callback_update, bot_context, mock_cache, sample_suggestion):
        mock_cache.get_suggestion.return_value = sample_suggestion
        await self.press(callback_update, bot_context, "back:vid_123")

        markup = callback_update.callback_query.edit_message_reply_markup.await_args.kwargs["reply_markup"]
        assert markup.inline_keyboard[0][0].callback_data == "like:vid_123"

    @pytest.mark.asyncio
    async def test_feedback(self, callback_update, bot_context, mock_profiles, user_id):
        session_id = str(uuid.uuid4())
        mock_profiles.set_feedback.return_value = True

        toast = await self.press(callback_update, bot_context, f"feedback:{session_id}:not-helpful")

        assert toast == "Thanks!"
        mock_profiles.set_feedback.assert_called_once_with(user_id, session_id, "not-helpful")

    @pytest.mark.asyncio
    async def test_notify_toggle(self, callback_update, bot_context, mock_profiles):
        mock_profiles.toggle_notification.return_value = SimpleNamespace(
            daily_digest=True, trending_alerts=False, reminders=False
        )
        toast = await self.press(callback_update, bot_context, "notify:daily")

        assert toast == "Updated"
        mock_profiles.toggle_notification.assert_called_once_with("4242", "daily")

    @pytest.mark.asyncio
    async def test_notify_done(self, callback_update, bot_context):
        toast = await self.press(callback_update, bot_context, "notify:done")

        assert toast is None
        callback_update.callback_query.edit_message_text.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_more_like_schedules_recommendations(self, callback_update, bot_context,
                                                       mock_cache, sample_suggestion):
        mock_cache.get_suggestion.return_value = sample_suggestion
        mock_cache.get_last_request.return_value = {"message": "rust", "mood": "tired"}

        toast = await self.press(callback_update, bot_context, "morelike:vid_123")

        assert "similar" in toast
        bot_context.application.create_task.assert_called_once()

    @pytest.mark.asyncio
    async def test_different_without_context_expires(self, callback_update, bot_context):
        toast = await self.press(callback_update, bot_context, "different:gone")

        assert "expired" in toast
        bot_context.application.create_task.assert_not_called()

    @pytest.mark.asyncio
    async def test_different_query_text(self, callback_update, bot_context, mock_cache,
                                        mock_api, sample_suggestion):
        mock_cache.get_suggestion.return_value = sample_suggestion
        mock_cache.get_last_request.return_value = {"message": "rust", "mood": None}
        scheduled = []
        bot_context.application.create_task = MagicMock(side_effect=scheduled.append)

        await self.press(callback_update, bot_context, "different:vid_123")
        await scheduled[0]

        query = mock_api.recommend.await_args.args[0]
        assert query == 'rust, but something different from "Intro to Rust Ownership"'

    @pytest.mark.asyncio
    async def test_noop(self, callback_update, bot_context):
        assert await self.press(callback_update, bot_context, "noop") is None


class TestErrorHandler:

    @pytest.mark.asyncio
    async def test_timeout_is_only_logged(self):
        from telegram.error import TimedOut
        from bot.app import error_handler

        context = MagicMock()
        context.error = TimedOut()
        context.bot.send_message = AsyncMock()

        await error_handler(None, context)
        context.bot.send_message.assert_not_awaited()
