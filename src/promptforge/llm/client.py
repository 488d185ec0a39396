"""Async Gemini client built on httpx and the retrying executor.

Sends ``generateContent`` requests to the Generative Language API. Every
request goes through ``RetryingExecutor``: rate limits and connection
failures are retried with exponential backoff, everything else fails at
once. Reads configuration from constructor arguments or environment
variables.
"""

from __future__ import annotations

import logging
import os
from typing import Any

import httpx

from promptforge.exceptions import (
    LLMConfigError,
    LLMConnectionError,
    LLMResponseError,
)
from promptforge.retry import ExecutionResult, RetryingExecutor, RetryPolicy

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-2.5-flash"


class GeminiClient:
    """Async httpx client for Gemini ``generateContent``.

    Usage::

        async with GeminiClient(api_key="...") as client:
            text = await client.generate_text("What is 3 * 5?")

    ``generate()`` returns the typed ``ExecutionResult`` so callers can tell
    an exhausted retry budget from a hard failure; ``generate_text()``
    unwraps it and raises the surfaced error.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        default_model: str = DEFAULT_MODEL,
        timeout: float = 120.0,
        policy: RetryPolicy | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: API key. Falls back to PROMPTFORGE_API_KEY, then to
                GOOGLE_API_KEY.
            base_url: API base URL. Falls back to PROMPTFORGE_BASE_URL, then
                to the public v1beta endpoint.
            default_model: Model used when a call does not name one.
            timeout: Per-request timeout in seconds. The executor adds none
                of its own, so this bounds every attempt.
            policy: Retry policy for every request. Defaults to 5 attempts,
                1s base delay, up to 1s jitter.

        Raises:
            LLMConfigError: If no API key is provided or found in environment.
        """
        self._api_key = (
            api_key
            or os.environ.get("PROMPTFORGE_API_KEY")
            or os.environ.get("GOOGLE_API_KEY", "")
        )
        if not self._api_key:
            raise LLMConfigError(
                "No API key provided. Pass api_key= or set PROMPTFORGE_API_KEY "
                "(or GOOGLE_API_KEY) environment variable."
            )
        self._base_url = (
            base_url or os.environ.get("PROMPTFORGE_BASE_URL", DEFAULT_BASE_URL)
        ).rstrip("/")
        self._default_model = default_model
        self._timeout = timeout
        self.policy = policy if policy is not None else RetryPolicy()
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers={
                "Content-Type": "application/json",
                "x-goog-api-key": self._api_key,
            },
        )

    @staticmethod
    def build_payload(
        prompt: str,
        *,
        system_instruction: str | None = None,
        generation_config: dict | None = None,
        grounding: bool = False,
    ) -> dict[str, Any]:
        """Build a ``generateContent`` request body.

        Args:
            prompt: User prompt text.
            system_instruction: Optional system instruction text.
            generation_config: Optional ``generationConfig`` dict
                (temperature, maxOutputTokens, ...).
            grounding: Enable the Google Search grounding tool.
        """
        payload: dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        if generation_config:
            payload["generationConfig"] = dict(generation_config)
        if grounding:
            payload["tools"] = [{"google_search": {}}]
        return payload

    def _url(self, model: str | None) -> str:
        return f"{self._base_url}/models/{model or self._default_model}:generateContent"

    async def generate(
        self,
        prompt: str,
        *,
        system_instruction: str | None = None,
        model: str | None = None,
        generation_config: dict | None = None,
        grounding: bool = False,
    ) -> ExecutionResult:
        """Send a prompt with retry.

        Returns:
            ``Completed`` holding the successful ``httpx.Response``, or
            ``Exhausted`` / ``Aborted`` holding the last underlying error.
        """
        url = self._url(model)
        payload = self.build_payload(
            prompt,
            system_instruction=system_instruction,
            generation_config=generation_config,
            grounding=grounding,
        )

        async def send() -> httpx.Response:
            try:
                return await self._client.post(url, json=payload)
            except httpx.TransportError as exc:
                raise LLMConnectionError(
                    f"Failed to fetch {url}: {type(exc).__name__}: {exc}"
                ) from exc

        result = await RetryingExecutor(self.policy).run(send)
        if not result.ok:
            logger.debug("generateContent failed after %d attempt(s)", result.attempts)
        return result

    async def generate_text(self, prompt: str, **kwargs: Any) -> str:
        """Send a prompt with retry and return the model's text.

        Raises:
            LLMRateLimitError, LLMConnectionError: When retries are exhausted.
            LLMHTTPError, LLMAuthError: On non-retryable HTTP errors.
            LLMResponseError: On an unreadable response body.
        """
        result = await self.generate(prompt, **kwargs)
        response: httpx.Response = result.unwrap()
        try:
            data = response.json()
        except ValueError as exc:
            raise LLMResponseError(
                f"Response is not valid JSON: {exc}. Body: {response.text}"
            ) from exc
        return self.extract_text(data)

    async def aclose(self) -> None:
        """Close the underlying httpx client."""
        await self._client.aclose()

    async def __aenter__(self) -> GeminiClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    @staticmethod
    def extract_text(response: dict) -> str:
        """Extract the generated text from a response dict.

        Joins the ``text`` of every part of the first candidate.

        Raises:
            LLMResponseError: If the response has no candidate text.
        """
        try:
            parts = response["candidates"][0]["content"]["parts"]
            texts = [part["text"] for part in parts if "text" in part]
        except (KeyError, IndexError, TypeError) as exc:
            raise LLMResponseError(
                f"Cannot extract text from response: {exc}. Response: {response}"
            ) from exc
        if not texts:
            raise LLMResponseError(f"Response has no text parts. Response: {response}")
        return "".join(texts)

    @staticmethod
    def extract_usage(response: dict) -> dict | None:
        """Return ``usageMetadata`` from a response dict, or None."""
        return response.get("usageMetadata")
