"""Tests for RetryPolicy validation and the backoff calculator."""

from __future__ import annotations

import random
from types import SimpleNamespace

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from promptforge.exceptions import PromptForgeError, RetryPolicyError
from promptforge.retry import (
    BackoffWait,
    RetryPolicy,
    backoff_delay_ms,
    is_transient_error,
)


class TestRetryPolicy:
    def test_defaults(self):
        policy = RetryPolicy()
        assert policy.max_attempts == 5
        assert policy.base_delay_ms == 1000.0
        assert policy.jitter_max_ms == 1000.0
        assert policy.is_retryable is is_transient_error

    def test_custom_predicate(self):
        def never(reason):
            return False

        policy = RetryPolicy(max_attempts=3, is_retryable=never)
        assert policy.is_retryable is never

    def test_frozen(self):
        policy = RetryPolicy()
        with pytest.raises(AttributeError):
            policy.max_attempts = 10  # type: ignore[misc]

    def test_no_retry(self):
        policy = RetryPolicy.no_retry()
        assert policy.max_attempts == 1
        assert policy.base_delay_ms == 0.0

    @pytest.mark.parametrize("max_attempts", [0, -1])
    def test_rejects_non_positive_attempts(self, max_attempts):
        with pytest.raises(RetryPolicyError, match="max_attempts must be >= 1"):
            RetryPolicy(max_attempts=max_attempts)

    @pytest.mark.parametrize("max_attempts", [2.5, "3", True])
    def test_rejects_non_integer_attempts(self, max_attempts):
        with pytest.raises(RetryPolicyError, match="integer"):
            RetryPolicy(max_attempts=max_attempts)

    def test_rejects_negative_base_delay(self):
        with pytest.raises(RetryPolicyError, match="base_delay_ms"):
            RetryPolicy(base_delay_ms=-1)

    def test_rejects_negative_jitter(self):
        with pytest.raises(RetryPolicyError, match="jitter_max_ms"):
            RetryPolicy(jitter_max_ms=-0.5)

    @pytest.mark.parametrize("field", ["base_delay_ms", "jitter_max_ms"])
    @pytest.mark.parametrize(
        ("value", "message"),
        [
            (float("nan"), "finite"),
            (float("inf"), "finite"),
            ("100", "number"),
            (True, "number"),
        ],
    )
    def test_rejects_unusable_delays(self, field, value, message):
        with pytest.raises(RetryPolicyError, match=f"{field} must be {message}"):
            RetryPolicy(**{field: value})

    def test_rejects_non_callable_predicate(self):
        with pytest.raises(RetryPolicyError, match="callable"):
            RetryPolicy(is_retryable="yes")  # type: ignore[arg-type]

    def test_policy_error_is_value_error(self):
        assert issubclass(RetryPolicyError, ValueError)
        assert issubclass(RetryPolicyError, PromptForgeError)


class TestBackoffDelay:
    def test_exponential_without_jitter(self):
        policy = RetryPolicy(base_delay_ms=1000, jitter_max_ms=0)
        delays = [backoff_delay_ms(policy, i) for i in range(5)]
        assert delays == [1000, 2000, 4000, 8000, 16000]

    def test_zero_base_delay(self):
        policy = RetryPolicy(base_delay_ms=0, jitter_max_ms=0)
        assert backoff_delay_ms(policy, 3) == 0

    def test_jitter_uses_injected_rng(self):
        policy = RetryPolicy(base_delay_ms=100, jitter_max_ms=50)
        expected_jitter = random.Random(42).uniform(0, 50)
        assert backoff_delay_ms(policy, 1, random.Random(42)) == 200 + expected_jitter

    def test_index_not_bounded_by_max_attempts(self):
        policy = RetryPolicy(max_attempts=2, base_delay_ms=1, jitter_max_ms=0)
        assert backoff_delay_ms(policy, 10) == 1024

    def test_negative_index_rejected(self):
        with pytest.raises(ValueError):
            backoff_delay_ms(RetryPolicy(), -1)

    @given(
        base=st.floats(min_value=0, max_value=1e6, allow_nan=False),
        jitter=st.floats(min_value=0, max_value=1e4, allow_nan=False),
        index=st.integers(min_value=0, max_value=16),
        seed=st.integers(),
    )
    def test_delay_within_jitter_bounds(self, base, jitter, index, seed):
        policy = RetryPolicy(base_delay_ms=base, jitter_max_ms=jitter)
        delay = backoff_delay_ms(policy, index, random.Random(seed))
        floor = base * 2**index
        assert floor <= delay <= floor + jitter
        assert delay >= 0

    @settings(max_examples=200)
    @given(
        base=st.floats(min_value=0, max_value=1e6, allow_nan=False),
        index=st.integers(min_value=0, max_value=30),
    )
    def test_monotonic_doubling_without_jitter(self, base, index):
        policy = RetryPolicy(base_delay_ms=base, jitter_max_ms=0)
        assert backoff_delay_ms(policy, index + 1) >= 2 * backoff_delay_ms(policy, index)


class TestBackoffWait:
    def test_maps_attempt_number_to_zero_based_index(self):
        wait = BackoffWait(RetryPolicy(base_delay_ms=500, jitter_max_ms=0))
        assert wait(SimpleNamespace(attempt_number=1)) == 0.5
        assert wait(SimpleNamespace(attempt_number=3)) == 2.0

    def test_uses_rng(self):
        policy = RetryPolicy(base_delay_ms=0, jitter_max_ms=1000)
        wait = BackoffWait(policy, random.Random(3))
        expected = random.Random(3).uniform(0, 1000) / 1000.0
        assert wait(SimpleNamespace(attempt_number=1)) == expected
