import logging
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_core.messages import HumanMessage, SystemMessage
from typing import Optional
from config import config
from llm.common import LLMError, extract_text

logger = logging.getLogger(__name__)

class LangChainGeminiClient:
    """
    Client for interacting with Google's Gemini models via LangChain.
    """

    def __init__(self) -> None:
        """
        Initialize the LangChain Gemini client.
        Raises ValueError if API key is missing.
        """
        self.api_key = config.llm.gemini_api_key
        if not self.api_key:
            logger.error("GOOGLE_GEMINI_API_KEY not found in configuration")
            raise ValueError("GOOGLE_GEMINI_API_KEY is required")

        self.model_name = config.llm.gemini_model

        self.llm = ChatGoogleGenerativeAI(
            model=self.model_name,
            google_api_key=self.api_key,
            temperature=config.llm.temperature,
            max_output_tokens=config.llm.max_output_tokens,
            top_p=config.llm.top_p,
            top_k=config.llm.top_k,
            timeout=config.llm.timeout,
        )

        logger.info(f"Initialized LangChain Gemini client with model: {self.model_name}")

    def generate(self, prompt: str, system: Optional[str] = None) -> str:
        """
        Generate a response using LangChain.

        Args:
            prompt: User prompt
            system: Optional system instruction

        Returns:
            Generated text response

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
            logger.error(f"LangChain Gemini generation failed: {e}")
            raise LLMError(str(e)) from e

        logger.debug(f"LLM response content type: {type(response.content)}")

        text = extract_text(response.content)
        if not text:
            logger.warning("LLM returned empty content")
            raise LLMError("Empty response from Gemini")
        return text
