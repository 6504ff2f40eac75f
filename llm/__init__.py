"""
LLM clients.

Both providers expose generate(prompt, system=None) -> str and raise LLMError
on failure.
"""

import logging

from config import config
from llm.common import LLMError

logger = logging.getLogger(__name__)


def get_llm_client():
    """
    Build the chat client for the configured provider.

    Raises:
        ValueError: If the provider is unknown or its credentials are missing.
    """
    if config.llm.provider == "azure_openai":
        from llm.langchain_azure import LangChainAzureClient
        client = LangChainAzureClient()
    elif config.llm.provider == "gemini":
        from llm.langchain_gemini import LangChainGeminiClient
        client = LangChainGeminiClient()
    else:
        raise ValueError(
            f"Unsupported LLM provider: {config.llm.provider}. "
            "Supported: 'azure_openai', 'gemini'"
        )

    logger.info(f"LLM provider initialized: {config.llm.provider}")
    return client


__all__ = ["LLMError", "get_llm_client"]
