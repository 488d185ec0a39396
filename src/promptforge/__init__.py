"""promptforge: reliable LLM requests with bounded retry.

Runs model requests through a retrying executor with exponential backoff
and jitter, and ships a Gemini client and a prompt template built on it.
"""

from promptforge._version import __version__

# Errors
from promptforge.exceptions import (
    ExecutionCancelledError,
    PromptForgeError,
    RetryPolicyError,
)

# Retry executor
from promptforge.retry import (
    Aborted,
    Cancelled,
    Completed,
    ExecutionResult,
    Exhausted,
    RetryHandle,
    RetryingExecutor,
    RetryPolicy,
    backoff_delay_ms,
    execute_with_retry,
)

# Collaborators
from promptforge.llm import GeminiClient
from promptforge.prompts import PromptTemplate

__all__ = [
    "__version__",
    "PromptForgeError",
    "RetryPolicyError",
    "ExecutionCancelledError",
    "RetryPolicy",
    "backoff_delay_ms",
    "RetryingExecutor",
    "RetryHandle",
    "execute_with_retry",
    "ExecutionResult",
    "Completed",
    "Exhausted",
    "Aborted",
    "Cancelled",
    "GeminiClient",
    "PromptTemplate",
]
