"""
Tests for the LLM client layer.

Tests cover:
- Provider selection
- Content flattening
- Error mapping in the Gemini client
"""

from unittest.mock import MagicMock, patch

import pytest

from llm import LLMError, get_llm_client
from llm.common import extract_text


class TestExtractText:

    def test_string(self):
        assert extract_text("hello") == "hello"

    def test_parts(self):
        assert extract_text([{"type": "text", "text": "a"}, "b", {"type": "image"}]) == "ab"

    def test_empty(self):
        assert extract_text(None) == ""
        assert extract_text([]) == ""


class TestGetLlmClient:

    def test_unknown_provider(self):
        with patch("llm.config") as mock_config:
            mock_config.llm.provider = "llama"
            with pytest.raises(ValueError, match="Unsupported LLM provider"):
                get_llm_client()

    def test_gemini_provider(self):
        with patch("llm.config") as mock_config, \
                patch("llm.langchain_gemini.LangChainGeminiClient") as mock_cls:
            mock_config.llm.provider = "gemini"
            client = get_llm_client()

        assert client is mock_cls.return_value


class TestLangChainGeminiClient:

    @pytest.fixture
    def gemini(self):
        with patch("llm.langchain_gemini.config") as mock_config, \
                patch("llm.langchain_gemini.ChatGoogleGenerativeAI") as mock_chat:
            mock_config.llm.gemini_api_key = "key"
            mock_config.llm.gemini_model = "gemini-test"
            from llm.langchain_gemini import LangChainGeminiClient
            client = LangChainGeminiClient()
            yield client, mock_chat.return_value

    def test_missing_key(self):
        with patch("llm.langchain_gemini.config") as mock_config:
            mock_config.llm.gemini_api_key = None
            from llm.langchain_gemini import LangChainGeminiClient
            with pytest.raises(ValueError):
                LangChainGeminiClient()

    def test_generate_sends_system_and_prompt(self, gemini):
        client, chat = gemini
        chat.invoke.return_value = MagicMock(content="[]")

        assert client.generate("prompt", system="system") == "[]"
        messages = chat.invoke.call_args.args[0]
        assert [m.content for m in messages] == ["system", "prompt"]

    def test_invoke_failure_raises_llm_error(self, gemini):
        client, chat = gemini
        chat.invoke.side_effect = RuntimeError("quota")

        with pytest.raises(LLMError, match="quota"):
            client.generate("prompt")

    def test_empty_response_raises_llm_error(self, gemini):
        client, chat = gemini
        chat.invoke.return_value = MagicMock(content="")

        with pytest.raises(LLMError):
            client.generate("prompt")
