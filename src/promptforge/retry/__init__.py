"""Bounded retry with exponential backoff and jitter.

Wraps an asynchronous request operation in a policy that classifies each
attempt as success, retryable failure or fatal failure, and re-issues the
operation with ``base_delay_ms * 2**i + jitter`` delays until it succeeds,
fails fatally, or runs out of attempts.
"""

from promptforge.retry.outcomes import (
    Aborted,
    AttemptOutcome,
    Cancelled,
    Completed,
    ExecutionResult,
    Exhausted,
    FatalFailure,
    RequestOperation,
    RetryableFailure,
    Success,
)
from promptforge.retry.classify import (
    DEFAULT_RETRYABLE_STATUS_CODES,
    SERVER_ERROR_STATUS_CODES,
    classify_attempt,
    is_success_response,
    is_transient_error,
    response_error,
    transient_error_predicate,
)
from promptforge.retry.policy import BackoffWait, RetryPolicy, backoff_delay_ms
from promptforge.retry.executor import RetryHandle, RetryingExecutor, execute_with_retry

__all__ = [
    "RetryPolicy",
    "backoff_delay_ms",
    "BackoffWait",
    "RetryingExecutor",
    "RetryHandle",
    "execute_with_retry",
    "RequestOperation",
    "AttemptOutcome",
    "Success",
    "RetryableFailure",
    "FatalFailure",
    "ExecutionResult",
    "Completed",
    "Exhausted",
    "Aborted",
    "Cancelled",
    "classify_attempt",
    "is_success_response",
    "response_error",
    "is_transient_error",
    "transient_error_predicate",
    "DEFAULT_RETRYABLE_STATUS_CODES",
    "SERVER_ERROR_STATUS_CODES",
]
