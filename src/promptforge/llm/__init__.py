"""LLM client infrastructure for promptforge.

Provides an async Gemini HTTP client whose requests run through the
retrying executor, plus the LLM error hierarchy.
"""

from promptforge.exceptions import (
    LLMAuthError,
    LLMClientError,
    LLMConfigError,
    LLMConnectionError,
    LLMHTTPError,
    LLMRateLimitError,
    LLMResponseError,
)
from promptforge.llm.client import DEFAULT_BASE_URL, DEFAULT_MODEL, GeminiClient

__all__ = [
    "GeminiClient",
    "DEFAULT_BASE_URL",
    "DEFAULT_MODEL",
    "LLMClientError",
    "LLMConfigError",
    "LLMConnectionError",
    "LLMHTTPError",
    "LLMRateLimitError",
    "LLMAuthError",
    "LLMResponseError",
]
