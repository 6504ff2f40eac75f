"""
Shared pytest fixtures for the Maintain test suite.

Provides reusable fixtures for:
- Sample suggestions and saved items
- Mock PostgresStore instances
- Mock LLM clients
- Mock Telegram updates and contexts
"""

import uuid
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from storage.postgres_store import PostgresStore


# =============================================================================
# Content Fixtures
# =============================================================================

@pytest.fixture
def sample_suggestion():
    """A well-formed suggestion in wire (camelCase) format."""
    return {
        "id": "vid_123",
        "title": "Intro to Rust Ownership",
        "creatorName": "Let's Get Rusty",
        "thumbnailUrl": "https://i.ytimg.com/vi/abc/hqdefault.jpg",
        "durationMinutes": 25,
        "description": "Borrowing and lifetimes explained",
        "tags": ["rust", "programming"],
        "relevance": 0.9,
        "url": "https://www.youtube.com/watch?v=abc",
    }


@pytest.fixture
def make_saved_item():
    """Factory for objects shaped like SavedItem rows."""
    def _make(video_id="vid_1", list_name="learn", suggestion=None):
        return SimpleNamespace(
            video_id=video_id,
            list=list_name,
            suggestion=suggestion if suggestion is not None else {
                "id": video_id,
                "title": f"Saved {video_id}",
                "creatorName": "Someone",
                "description": "A saved video",
                "tags": ["python"],
                "relevance": 0.8,
                "url": f"https://www.youtube.com/watch?v={video_id}",
            },
        )
    return _make


# =============================================================================
# Store / LLM Fixtures
# =============================================================================

@pytest.fixture
def user_id():
    return uuid.UUID("00000000-0000-0000-0000-000000000001")


@pytest.fixture
def mock_store():
    """PostgresStore double; every method is a MagicMock."""
    return MagicMock(spec=PostgresStore)


@pytest.fixture
def mock_llm():
    """LLM client double returning an empty array unless configured."""
    llm = MagicMock()
    llm.model_name = "gemini-test"
    llm.generate.return_value = "[]"
    return llm


# =============================================================================
# Telegram Fixtures
# =============================================================================

@pytest.fixture
def tg_user():
    return SimpleNamespace(
        id=4242,
        username="alice",
        first_name="Alice",
        last_name=None,
        language_code="en",
    )


@pytest.fixture
def bot_user(user_id):
    """Application user as returned by BotProfiles.ensure_user."""
    return SimpleNamespace(
        id=user_id,
        telegram_id="4242",
        telegram_account=SimpleNamespace(current_mood="curious", pending_profile_setup=False),
        profile=None,
    )


@pytest.fixture
def mock_profiles(bot_user):
    profiles = MagicMock()
    profiles.ensure_user.return_value = bot_user
    profiles.current_mood.return_value = "curious"
    profiles.profile_dict.return_value = {}
    profiles.is_pending_profile_setup.return_value = False
    return profiles


@pytest.fixture
def mock_cache():
    cache = MagicMock()
    cache.get_suggestion = AsyncMock(return_value=None)
    cache.store_suggestion = AsyncMock()
    cache.set_last_request = AsyncMock()
    cache.get_last_request = AsyncMock(return_value=None)
    return cache


@pytest.fixture
def mock_api():
    api = MagicMock()
    api.recommend = AsyncMock(return_value={"suggestions": [], "model": "test", "usedFallback": False})
    api.trending = AsyncMock(return_value={"suggestions": [], "source": "fallback"})
    return api


@pytest.fixture
def bot_context(mock_profiles, mock_cache, mock_api):
    """ContextTypes.DEFAULT_TYPE double with services in bot_data."""
    context = MagicMock()
    context.bot_data = {"profiles": mock_profiles, "cache": mock_cache, "api": mock_api}
    context.args = []
    context.bot.send_message = AsyncMock(return_value=SimpleNamespace(message_id=99))
    context.bot.send_photo = AsyncMock()
    context.bot.delete_message = AsyncMock()
    context.application.create_task = MagicMock(side_effect=lambda coro: coro.close())
    return context


@pytest.fixture
def message_update(tg_user):
    """Update double for a text message in chat 777."""
    update = MagicMock()
    update.effective_user = tg_user
    update.effective_chat.id = 777
    update.message.text = "30 min coding tutorial"
    update.message.reply_text = AsyncMock()
    return update


@pytest.fixture
def callback_update(tg_user):
    """Update double for an inline-button press in chat 777."""
    update = MagicMock()
    query = MagicMock()
    query.from_user = tg_user
    query.message.chat_id = 777
    query.answer = AsyncMock()
    query.edit_message_text = AsyncMock()
    query.edit_message_reply_markup = AsyncMock()
    update.callback_query = query
    return update
