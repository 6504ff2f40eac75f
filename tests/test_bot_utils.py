"""
Tests for bot formatting helpers and keyboards.
"""

from datetime import datetime, timedelta, timezone

import pytest

from bot.keyboards import (
    feedback_keyboard,
    mood_keyboard,
    notifications_keyboard,
    save_list_keyboard,
    video_action_keyboard,
)
from bot.utils import (
    callback_ref,
    escape_markdown,
    escape_url,
    format_suggestions,
    format_video,
    get_mood_emoji,
    get_time_ago,
    parse_profile_from_message,
    split_message,
)


# =============================================================================
# Formatting
# =============================================================================

class TestEscapeMarkdown:

    def test_escapes_special_characters(self):
        assert escape_markdown("a_b*c[d](e)!") == "a\\_b\\*c\\[d\\]\\(e\\)\\!"

    def test_plain_text_unchanged(self):
        assert escape_markdown("hello world") == "hello world"

    def test_non_string(self):
        assert escape_markdown(2.5) == "2\\.5"

    def test_escape_url_only_touches_parens_and_backslash(self):
        assert escape_url("https://x.com/a_(b)") == "https://x.com/a_(b\\)"


class TestSplitMessage:

    def test_short_message_is_one_chunk(self):
        assert split_message("hello\nworld") == ["hello\nworld"]

    def test_splits_on_lines(self):
        text = "\n".join(["x" * 10] * 5)
        chunks = split_message(text, max_length=25)

        assert all(len(c) <= 25 for c in chunks)
        assert "".join(chunks).replace("\n", "") == "x" * 50

    def test_hard_cuts_long_lines(self):
        chunks = split_message("y" * 25, max_length=10)
        assert chunks == ["y" * 10, "y" * 10, "y" * 5]


class TestGetTimeAgo:

    NOW = datetime(2024, 7, 10, 12, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("delta,expected", [
        (timedelta(seconds=30), "just now"),
        (timedelta(minutes=5), "5min ago"),
        (timedelta(hours=3), "3h ago"),
        (timedelta(days=2), "2d ago"),
        (timedelta(days=30), "2024-06-10"),
    ])
    def test_buckets(self, delta, expected):
        assert get_time_ago(self.NOW - delta, now=self.NOW) == expected

    def test_naive_datetime_is_utc(self):
        naive = datetime(2024, 7, 10, 11, 0)
        assert get_time_ago(naive, now=self.NOW) == "1h ago"


class TestMoodEmoji:

    def test_known_and_unknown(self):
        assert get_mood_emoji("tired") == "😴"
        assert get_mood_emoji("sleepy") == "💭"
        assert get_mood_emoji(None) == "💭"


class TestParseProfile:

    def test_parses_all_fields(self):
        message = (
            "Hobbies: programming, gaming\n"
            "Interests: web development, AI\n"
            "Languages: English، Arabic\n"
            "YouTubers: Fireship, ThePrimeagen"
        )
        profile = parse_profile_from_message(message)

        assert profile["hobbies"] == ["programming", "gaming"]
        assert profile["interests"] == ["web development", "AI"]
        assert profile["languages"] == ["English", "Arabic"]
        assert profile["youtubers"] == [
            {"name": "Fireship", "channelUrl": ""},
            {"name": "ThePrimeagen", "channelUrl": ""},
        ]

    def test_partial_and_case_insensitive(self):
        assert parse_profile_from_message("HOBBIES: chess") == {"hobbies": ["chess"]}

    def test_unparseable(self):
        assert parse_profile_from_message("I like stuff") == {}


class TestCallbackRef:

    def test_short_id_kept(self):
        assert callback_ref("yt_abc123") == "yt_abc123"

    def test_long_or_colon_ids_hashed(self):
        long_ref = callback_ref("x" * 100)
        colon_ref = callback_ref("a:b")

        assert long_ref.startswith("h") and len(long_ref) == 17
        assert ":" not in colon_ref
        assert callback_ref("x" * 100) == long_ref


class TestFormatVideo:

    def test_includes_title_creator_and_link(self, sample_suggestion):
        text = format_video(sample_suggestion, 1)

        assert text.startswith("*1\\. Intro to Rust Ownership*")
        assert "📺 Let's Get Rusty" in text
        assert "⏱️ 25 min" in text
        assert "[Watch on YouTube](https://www.youtube.com/watch?v=abc)" in text

    def test_truncates_description_and_skips_placeholder_url(self):
        text = format_video({"title": "T", "description": "d" * 200, "url": "#"}, 2)

        assert "d" * 150 + "\\.\\.\\." in text
        assert "Watch" not in text

    def test_format_suggestions_lists_all(self, sample_suggestion):
        text = format_suggestions([sample_suggestion, {"title": "Second", "url": "#"}])

        assert "Found 2 videos" in text
        assert "2\\. *Second*" in text
        assert "👤 Unknown" in text


# =============================================================================
# Keyboards
# =============================================================================

def callback_data(markup):
    return [button.callback_data for row in markup.inline_keyboard for button in row]


class TestKeyboards:

    def test_mood_keyboard_layout(self):
        markup = mood_keyboard()

        assert [len(row) for row in markup.inline_keyboard] == [3, 3]
        assert callback_data(markup)[0] == "mood:tired"

    def test_video_actions(self):
        markup = video_action_keyboard("vid_1", url="https://youtu.be/x", is_liked=True)
        first_row = markup.inline_keyboard[0]

        assert first_row[0].text == "❤️ Liked"
        assert first_row[2].url == "https://youtu.be/x"
        assert "morelike:vid_1" in callback_data(markup)
        assert "different:vid_1" in callback_data(markup)

    def test_video_actions_without_real_url(self):
        markup = video_action_keyboard("vid_1", url="#")
        assert len(markup.inline_keyboard[0]) == 2
        assert markup.inline_keyboard[0][0].text == "🤍 Like"

    def test_save_list_keyboard(self):
        data = callback_data(save_list_keyboard("vid_1"))

        assert data[:5] == [
            "saveto:vid_1:listen",
            "saveto:vid_1:learn",
            "saveto:vid_1:knowledge",
            "saveto:vid_1:tomorrow",
            "saveto:vid_1:other",
        ]
        assert data[-1] == "back:vid_1"

    def test_callback_data_fits_telegram_limit(self):
        ref = callback_ref("x" * 200)
        for data in callback_data(save_list_keyboard(ref)):
            assert len(data.encode("utf-8")) <= 64

    def test_feedback_keyboard(self):
        assert callback_data(feedback_keyboard("s1")) == [
            "feedback:s1:helpful",
            "feedback:s1:not-helpful",
        ]

    def test_notifications_keyboard_marks_state(self):
        markup = notifications_keyboard(True, False, True)
        labels = [row[0].text for row in markup.inline_keyboard]

        assert labels[0].startswith("✅")
        assert labels[1].startswith("⬜")
        assert callback_data(markup)[-1] == "notify:done"
