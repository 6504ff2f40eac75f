"""Shared helpers for the LangChain chat clients."""

from typing import Any


class LLMError(Exception):
    """The model call failed or returned nothing usable."""


def extract_text(content: Any) -> str:
    """
    Flatten a LangChain message content into plain text.

    Newer chat models return a list of parts instead of a string.
    """
    if isinstance(content, list):
        text_parts = []
        for part in content:
            if isinstance(part, dict) and "text" in part:
                text_parts.append(part["text"])
            elif isinstance(part, str):
                text_parts.append(part)
        return "".join(text_parts)

    return str(content) if content else ""
