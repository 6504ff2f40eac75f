"""
LangChain Azure OpenAI client for LLM invocations.

Uses AzureChatOpenAI from langchain-openai to interact with
Azure-hosted OpenAI models (e.g., gpt-4o-mini).
"""

import logging
from typing import Optional

from langchain_openai import AzureChatOpenAI
from langchain_core.messages import HumanMessage, SystemMessage
from config import config
from llm.common import LLMError, extract_text

logger = logging.getLogger(__name__)


class LangChainAzureClient:
    """
    Client for interacting with Azure OpenAI models via LangChain.
    """

    def __init__(self) -> None:
        """
        Initialize the LangChain Azure OpenAI client.
        Raises ValueError if required Azure configuration is missing.
        """
        if not config.llm.azure_openai_api_key:
            logger.error("AZURE_OPENAI_API_KEY not found in configuration")
            raise ValueError("AZURE_OPENAI_API_KEY is required")

        if not config.llm.azure_openai_endpoint:
            logger.error("AZURE_OPENAI_ENDPOINT not found in configuration")
            raise ValueError("AZURE_OPENAI_ENDPOINT is required")

        if not config.llm.azure_openai_deployment_name:
            logger.error("AZURE_OPENAI_DEPLOYMENT not found in configuration")
            raise ValueError("AZURE_OPENAI_DEPLOYMENT is required")

        self.deployment_name = config.llm.azure_openai_deployment_name
        self.model_name = f"azure/{self.deployment_name}"

        self.llm = AzureChatOpenAI(
            azure_endpoint=config.llm.azure_openai_endpoint,
            api_key=config.llm.azure_openai_api_key,
            api_version=config.llm.azure_openai_api_version,
            deployment_name=self.deployment_name,
            temperature=config.llm.temperature,
            max_tokens=config.llm.max_output_tokens,
            top_p=config.llm.top_p,
            timeout=config.llm.timeout,
        )

        logger.info(
            f"Azure OpenAI client initialized with deployment: {self.deployment_name}"
        )

    def generate(self, prompt: str, system: Optional[str] = None) -> str:
        """
        Generate a response using LangChain Azure OpenAI.

        Falls back to Gemini automatically if Azure's content filter
        blocks the request.

        Raises:
            LLMError: If the call fails or the model returns no text
        """
        messages = []
        if system:
            messages.append(SystemMessage(content=system))
        messages.append(HumanMessage(content=prompt))

        try:
            response = self.llm.invoke(messages)
        except Exception as e:
            error_msg = str(e).lower()
            if "content filter" in error_msg or "content_filter" in error_msg:
                logger.warning(
                    f"Azure content filter triggered, attempting Gemini fallback: {e}"
                )
                return self._gemini_fallback(prompt, system)

            logger.error(f"LangChain Azure OpenAI generation failed: {e}")
            raise LLMError(str(e)) from e

        text = extract_text(response.content)
        if not text:
            logger.warning("Azure LLM returned empty content")
            raise LLMError("Empty response from Azure OpenAI")
        return text

    def _gemini_fallback(self, prompt: str, system: Optional[str]) -> str:
        """Retry the prompt using Gemini when Azure content filter blocks."""
        from llm.langchain_gemini import LangChainGeminiClient

        if not config.llm.gemini_api_key:
            logger.error("Gemini fallback unavailable: GOOGLE_GEMINI_API_KEY not set")
            raise LLMError("Blocked by Azure content filter")

        try:
            gemini = LangChainGeminiClient()
        except ValueError as e:
            raise LLMError(str(e)) from e

        result = gemini.generate(prompt, system)
        logger.info("Gemini fallback succeeded after Azure content filter block")
        return result
