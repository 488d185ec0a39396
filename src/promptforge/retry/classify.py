"""Outcome classification for retried requests.

Turns what one attempt produced (a response object, or a raised exception)
into an ``AttemptOutcome``. Non-success responses are first converted to a
structured error (``response_error``) so that the retry decision is made
on error types and status codes, never on message text.

Decision table:

    success response                      -> Success
    429 / rate limited                    -> RetryableFailure
    connection or network failure         -> RetryableFailure
    any other error response or exception -> FatalFailure

Extra statuses (e.g. 5xx) can be made retryable through
``transient_error_predicate``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

import httpx

from promptforge.exceptions import (
    LLMAuthError,
    LLMConnectionError,
    LLMHTTPError,
    LLMRateLimitError,
)
from promptforge.retry.outcomes import (
    AttemptOutcome,
    FatalFailure,
    RetryableFailure,
    Success,
)

if TYPE_CHECKING:
    from promptforge.retry.policy import RetryPolicy

DEFAULT_RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({429})
SERVER_ERROR_STATUS_CODES: frozenset[int] = frozenset({500, 502, 503, 504})
_AUTH_ERROR_STATUS_CODES = {401, 403}

_MISSING: Any = object()


def is_success_response(response: Any) -> bool:
    """Whether a response object indicates success.

    Reads ``is_success`` (httpx), then ``ok`` (requests/aiohttp style).
    Objects with neither indicator are treated as successful payloads.
    """
    indicator = getattr(response, "is_success", None)
    if indicator is None:
        indicator = getattr(response, "ok", None)
    if indicator is None:
        return True
    return bool(indicator)


def _parse_retry_after(raw: object) -> float | None:
    if raw is None:
        return None
    try:
        return float(raw)  # type: ignore[arg-type]
    except (ValueError, TypeError):
        return None


def response_error(response: Any) -> LLMHTTPError:
    """Build the structured error for a non-success response.

    Returns:
        LLMRateLimitError for 429, LLMAuthError for 401/403, otherwise
        LLMHTTPError. Each carries the status code and body text.
    """
    status = getattr(response, "status_code", None)
    if status is None:
        status = getattr(response, "status", 0)
    try:
        body = response.text
    except (AttributeError, httpx.ResponseNotRead):
        # Streamed responses have no body until read().
        body = ""
    if not isinstance(body, str):
        body = ""
    headers = getattr(response, "headers", None) or {}

    if status == 429:
        return LLMRateLimitError(
            body, retry_after=_parse_retry_after(headers.get("Retry-After"))
        )
    if status in _AUTH_ERROR_STATUS_CODES:
        return LLMAuthError(status, body)
    return LLMHTTPError(status, body)


def transient_error_predicate(
    retryable_statuses: Iterable[int] = DEFAULT_RETRYABLE_STATUS_CODES,
) -> Callable[[BaseException], bool]:
    """Build an ``is_retryable`` predicate.

    Args:
        retryable_statuses: HTTP statuses whose ``LLMHTTPError`` is treated
            as transient. Rate limiting is always transient.

    Returns:
        A predicate that is True for rate limits, connection failures
        (``LLMConnectionError``, any ``httpx.TransportError`` and the builtin
        ``ConnectionError`` family) and HTTP errors with a status in
        ``retryable_statuses``.
    """
    statuses = frozenset(retryable_statuses)

    def is_retryable(reason: BaseException) -> bool:
        if isinstance(reason, LLMAuthError):
            return False
        if isinstance(reason, LLMRateLimitError):
            return True
        if isinstance(reason, LLMHTTPError):
            return reason.status_code in statuses
        return isinstance(
            reason, (LLMConnectionError, httpx.TransportError, ConnectionError)
        )

    return is_retryable


is_transient_error = transient_error_predicate()


def classify_attempt(
    policy: RetryPolicy,
    *,
    response: Any = _MISSING,
    error: BaseException | None = None,
) -> AttemptOutcome:
    """Classify one attempt.

    Pass exactly one of ``response`` (the operation returned) or ``error``
    (the operation raised).

    Raises:
        TypeError: If neither or both are given.
    """
    has_response = response is not _MISSING
    if has_response == (error is not None):
        raise TypeError("classify_attempt() takes exactly one of response= or error=")

    if error is None:
        if is_success_response(response):
            return Success(response)
        reason: BaseException = response_error(response)
    else:
        reason = error

    if policy.is_retryable(reason):
        return RetryableFailure(reason)
    return FatalFailure(reason)
