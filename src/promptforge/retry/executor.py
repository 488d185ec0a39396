"""Retrying request executor.

Drives one request operation through a ``RetryPolicy``:

    Attempting(0) -> Attempting(1) -> ... -> Attempting(max_attempts - 1)

Each state issues exactly one attempt and classifies it. Success ends in
``Completed``, a fatal failure ends in ``Aborted`` at once, and a
retryable failure either sleeps ``delay(i)`` and moves to the next state or,
on the last permitted attempt, ends in ``Exhausted``.

The loop is a ``tenacity.AsyncRetrying`` built per execution, retrying on
*results* (outcomes) rather than exceptions. The operation's exceptions are
classified inside the attempt, so only cancellation escapes tenacity.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, TypeVar

import tenacity

from promptforge.retry.classify import classify_attempt
from promptforge.retry.outcomes import (
    Aborted,
    AttemptOutcome,
    Cancelled,
    Completed,
    ExecutionResult,
    Exhausted,
    FatalFailure,
    RetryableFailure,
    Success,
)
from promptforge.retry.policy import BackoffWait, RetryPolicy

if TYPE_CHECKING:
    from collections.abc import Generator

    from promptforge.retry.outcomes import RequestOperation

logger = logging.getLogger(__name__)

T = TypeVar("T")

SleepFn = Callable[[float], Awaitable[Any]]


@dataclass
class _ExecutionState:
    """Mutable bookkeeping owned by a single execution."""

    attempts: int = 0
    history: list[BaseException] = field(default_factory=list)


def _is_retryable_outcome(outcome: AttemptOutcome) -> bool:
    return isinstance(outcome, RetryableFailure)


def _last_outcome(retry_state: tenacity.RetryCallState) -> AttemptOutcome:
    # Budget exhausted on a retryable outcome: hand it back instead of RetryError.
    return retry_state.outcome.result()  # type: ignore[union-attr]


class RetryingExecutor:
    """Runs request operations under a retry policy.

    The executor only holds configuration; every execution keeps its own
    attempt counter and history, so one instance can serve concurrent
    executions.

    Usage::

        executor = RetryingExecutor(RetryPolicy(max_attempts=5))
        result = await executor.run(lambda: client.post(url, json=payload))
        if result.ok:
            print(result.response.json())
        else:
            print(f"Failed after {result.attempts} attempts: {result.error}")

    The executor imposes no per-attempt timeout. Operations must resolve in
    bounded time on their own (e.g. an httpx client timeout).
    """

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        *,
        sleep: SleepFn | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            policy: Retry policy. Defaults to ``RetryPolicy()``.
            sleep: Coroutine function used for backoff delays (seconds).
                Defaults to ``asyncio.sleep``.
            rng: Randomness for jitter. Defaults to the ``random`` module.
        """
        self.policy = policy if policy is not None else RetryPolicy()
        self._sleep = sleep if sleep is not None else asyncio.sleep
        self._rng = rng

    async def run(self, operation: RequestOperation) -> ExecutionResult:
        """Execute ``operation`` until a terminal result is reached.

        Cancelling the awaiting task propagates ``asyncio.CancelledError``.
        Use ``submit()`` to get a ``Cancelled`` result instead.
        """
        return await self._execute(operation, _ExecutionState())

    def submit(self, operation: RequestOperation) -> RetryHandle:
        """Start executing ``operation`` as a cancellable task.

        Must be called from a running event loop.
        """
        state = _ExecutionState()
        task = asyncio.get_running_loop().create_task(self._execute(operation, state))
        return RetryHandle(task, state)

    def _retrying(self) -> tenacity.AsyncRetrying:
        return tenacity.AsyncRetrying(
            stop=tenacity.stop_after_attempt(self.policy.max_attempts),
            wait=BackoffWait(self.policy, self._rng),
            retry=tenacity.retry_if_result(_is_retryable_outcome),
            before_sleep=tenacity.before_sleep_log(logger, logging.WARNING),
            retry_error_callback=_last_outcome,
            sleep=self._sleep,
        )

    async def _execute(
        self, operation: RequestOperation, state: _ExecutionState
    ) -> ExecutionResult:
        policy = self.policy

        async def attempt() -> AttemptOutcome:
            state.attempts += 1
            try:
                response = await operation()
            except Exception as exc:
                outcome = _classify(policy, error=exc)
            else:
                outcome = _classify(policy, response=response)

            logger.debug(
                "Attempt %d/%d: %s", state.attempts, policy.max_attempts, outcome.kind
            )
            if not isinstance(outcome, Success):
                state.history.append(outcome.reason)  # type: ignore[attr-defined]
            return outcome

        outcome = await self._retrying()(attempt)
        return _to_result(outcome, state)


def _classify(policy: RetryPolicy, **attempt: Any) -> AttemptOutcome:
    try:
        return classify_attempt(policy, **attempt)
    except Exception as exc:
        # A broken response object or predicate must still end the execution.
        logger.warning("Could not classify attempt outcome: %r", exc)
        return FatalFailure(exc)


def _to_result(outcome: AttemptOutcome, state: _ExecutionState) -> ExecutionResult:
    history = tuple(state.history)
    if isinstance(outcome, Success):
        return Completed(outcome.response, attempts=state.attempts, history=history)
    if isinstance(outcome, FatalFailure):
        logger.debug("Aborted after %d attempt(s): %s", state.attempts, outcome.reason)
        return Aborted(outcome.reason, attempts=state.attempts, history=history)
    if isinstance(outcome, RetryableFailure):
        logger.debug("Exhausted after %d attempt(s): %s", state.attempts, outcome.reason)
        return Exhausted(outcome.reason, attempts=state.attempts, history=history)
    raise TypeError(f"Unknown attempt outcome: {outcome!r}")


class RetryHandle(Generic[T]):
    """A running execution that the caller may cancel.

    Awaiting the handle (or ``result()``) yields the ``ExecutionResult``.
    After ``cancel()`` the in-flight attempt or pending backoff is
    interrupted, no further attempt is issued, and the result is
    ``Cancelled``.
    """

    def __init__(self, task: asyncio.Task, state: _ExecutionState) -> None:
        self._task = task
        self._state = state

    @property
    def attempts(self) -> int:
        """Attempts issued so far."""
        return self._state.attempts

    def cancel(self) -> bool:
        """Request cancellation. Returns False if the execution already finished."""
        return self._task.cancel()

    def done(self) -> bool:
        return self._task.done()

    async def result(self) -> ExecutionResult:
        """Wait for the terminal result.

        Cancelling the task that awaits ``result()`` does not cancel the
        execution itself.
        """
        try:
            return await asyncio.shield(self._task)
        except asyncio.CancelledError:
            if not self._task.cancelled():
                raise
            return Cancelled(
                attempts=self._state.attempts, history=tuple(self._state.history)
            )

    def __await__(self) -> Generator[Any, None, ExecutionResult]:
        return self.result().__await__()


async def execute_with_retry(
    operation: RequestOperation,
    policy: RetryPolicy | None = None,
    *,
    sleep: SleepFn | None = None,
    rng: random.Random | None = None,
) -> ExecutionResult:
    """Run ``operation`` once under ``policy`` and return its result."""
    return await RetryingExecutor(policy, sleep=sleep, rng=rng).run(operation)
