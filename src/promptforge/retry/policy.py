"""Retry policy and backoff calculation.

A ``RetryPolicy`` is built once per call site and is read-only for the
duration of an execution. ``backoff_delay_ms`` is the pure backoff
formula; ``BackoffWait`` adapts it to tenacity's wait-strategy interface
so the execution loop can be driven by ``tenacity.AsyncRetrying``.
"""

from __future__ import annotations

import math
import random
from collections.abc import Callable
from dataclasses import dataclass, field
from numbers import Real
from typing import TYPE_CHECKING

from tenacity.wait import wait_base

from promptforge.exceptions import RetryPolicyError
from promptforge.retry.classify import is_transient_error

if TYPE_CHECKING:
    from tenacity import RetryCallState


@dataclass(frozen=True)
class RetryPolicy:
    """Immutable retry configuration.

    Attributes:
        max_attempts: Total attempts including the first (>= 1). With 1,
            nothing is ever retried.
        base_delay_ms: Initial backoff unit in milliseconds (>= 0).
        jitter_max_ms: Upper bound of the uniform random delay added to
            every backoff, in milliseconds (>= 0).
        is_retryable: Predicate over a failure reason (a raised exception,
            or the structured error built from a non-success response).
    """

    max_attempts: int = 5
    base_delay_ms: float = 1000.0
    jitter_max_ms: float = 1000.0
    is_retryable: Callable[[BaseException], bool] = field(
        default=is_transient_error, compare=False
    )

    def __post_init__(self) -> None:
        if isinstance(self.max_attempts, bool) or not isinstance(self.max_attempts, int):
            raise RetryPolicyError(
                f"max_attempts must be an integer, got {self.max_attempts!r}"
            )
        if self.max_attempts < 1:
            raise RetryPolicyError(
                f"max_attempts must be >= 1, got {self.max_attempts}"
            )
        _check_delay("base_delay_ms", self.base_delay_ms)
        _check_delay("jitter_max_ms", self.jitter_max_ms)
        if not callable(self.is_retryable):
            raise RetryPolicyError("is_retryable must be callable")

    @classmethod
    def no_retry(cls) -> RetryPolicy:
        """A policy that issues exactly one attempt."""
        return cls(max_attempts=1, base_delay_ms=0.0, jitter_max_ms=0.0)


def _check_delay(name: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise RetryPolicyError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise RetryPolicyError(f"{name} must be finite, got {value}")
    if value < 0:
        raise RetryPolicyError(f"{name} must be non-negative, got {value}")


def backoff_delay_ms(
    policy: RetryPolicy,
    attempt_index: int,
    rng: random.Random | None = None,
) -> float:
    """Delay before the next attempt, in milliseconds.

    ``attempt_index`` is zero-based: 0 is the delay before the first retry.
    The index is not checked against ``policy.max_attempts``.

    Args:
        policy: Supplies ``base_delay_ms`` and ``jitter_max_ms``.
        attempt_index: Zero-based retry index.
        rng: Source of randomness for the jitter. Defaults to the
            ``random`` module.

    Returns:
        ``base_delay_ms * 2**attempt_index + uniform(0, jitter_max_ms)``.

    Raises:
        ValueError: If ``attempt_index`` is negative.
    """
    if attempt_index < 0:
        raise ValueError(f"attempt_index must be >= 0, got {attempt_index}")
    source = rng if rng is not None else random
    jitter = source.uniform(0, policy.jitter_max_ms) if policy.jitter_max_ms else 0.0
    return policy.base_delay_ms * 2**attempt_index + jitter


class BackoffWait(wait_base):
    """tenacity wait strategy backed by ``backoff_delay_ms``.

    tenacity numbers attempts from 1, so the wait after attempt ``n`` uses
    retry index ``n - 1``. Returns seconds, as tenacity expects.
    """

    def __init__(self, policy: RetryPolicy, rng: random.Random | None = None) -> None:
        self.policy = policy
        self.rng = rng

    def __call__(self, retry_state: RetryCallState) -> float:
        index = retry_state.attempt_number - 1
        return backoff_delay_ms(self.policy, index, self.rng) / 1000.0
