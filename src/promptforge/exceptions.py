"""promptforge exception hierarchy.

All promptforge-specific exceptions inherit from PromptForgeError,
including the LLM transport errors that the retry classifier inspects.
"""

from __future__ import annotations


class PromptForgeError(Exception):
    """Base exception for all promptforge errors."""


class RetryPolicyError(PromptForgeError, ValueError):
    """Raised when a retry policy is constructed with invalid values."""


class ExecutionCancelledError(PromptForgeError):
    """The caller cancelled an execution before it reached a terminal state."""

    def __init__(self, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(f"Execution cancelled after {attempts} attempt(s)")


class LLMClientError(PromptForgeError):
    """Base for all LLM client errors."""


class LLMConfigError(LLMClientError):
    """Missing or invalid LLM configuration (e.g., no API key)."""


class LLMConnectionError(LLMClientError):
    """The request never produced a response (DNS, refused, reset, timeout)."""


class LLMHTTPError(LLMClientError):
    """The API answered with a non-success HTTP status.

    Attributes:
        status_code: HTTP status of the response.
        body: Response body text, as returned by the server.
    """

    def __init__(self, status_code: int, body: str = "", message: str | None = None) -> None:
        self.status_code = status_code
        self.body = body
        if message is None:
            message = f"HTTP error! Status: {status_code}, Body: {body}"
        super().__init__(message)


class LLMRateLimitError(LLMHTTPError):
    """Rate limited by the API (429).

    Attributes:
        retry_after: Seconds to wait before retrying (from Retry-After header),
            or None if not provided.
    """

    def __init__(
        self,
        body: str = "",
        retry_after: float | None = None,
        status_code: int = 429,
    ) -> None:
        self.retry_after = retry_after
        message = f"Rate limited: HTTP {status_code} - {body}"
        if retry_after is not None:
            message = f"{message} (retry after {retry_after}s)"
        super().__init__(status_code, body, message)


class LLMAuthError(LLMHTTPError):
    """Authentication failed (401/403)."""

    def __init__(self, status_code: int, body: str = "") -> None:
        super().__init__(
            status_code,
            body,
            f"Authentication failed: HTTP {status_code} - {body}",
        )


class LLMResponseError(LLMClientError):
    """Unexpected response format from LLM API."""
