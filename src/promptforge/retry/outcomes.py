"""Attempt outcomes and execution results.

An ``AttemptOutcome`` describes a single attempt and never leaves the
execution loop. An ``ExecutionResult`` is the one value an execution hands
back to its caller: ``Completed`` on success, ``Exhausted`` when retryable
failures used up the budget, ``Aborted`` on a fatal failure, ``Cancelled``
when the caller withdrew.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, ClassVar, Generic, TypeVar

from promptforge.exceptions import ExecutionCancelledError

T = TypeVar("T")

RequestOperation = Callable[[], Awaitable[Any]]
"""Zero-argument callable producing an awaitable response (or raising)."""


# ---------------------------------------------------------------------------
# Per-attempt outcomes
# ---------------------------------------------------------------------------


class AttemptOutcome:
    """Base for the three outcomes of one attempt."""

    kind: ClassVar[str] = "outcome"


@dataclass(frozen=True)
class Success(AttemptOutcome, Generic[T]):
    """The operation returned a response that indicates success."""

    kind: ClassVar[str] = "success"

    response: T


@dataclass(frozen=True)
class RetryableFailure(AttemptOutcome):
    """A transient failure, eligible for another attempt while budget remains."""

    kind: ClassVar[str] = "retryable"

    reason: BaseException


@dataclass(frozen=True)
class FatalFailure(AttemptOutcome):
    """A non-transient failure. Never retried."""

    kind: ClassVar[str] = "fatal"

    reason: BaseException


# ---------------------------------------------------------------------------
# Execution results
# ---------------------------------------------------------------------------


class ExecutionResult(Generic[T]):
    """Base for terminal execution results.

    Every variant carries ``attempts`` (operations actually issued) and
    ``history`` (the reasons of every failed attempt, oldest first).
    """

    ok: ClassVar[bool] = False
    attempts: int
    history: tuple[BaseException, ...]

    @property
    def error(self) -> BaseException | None:
        """The cause surfaced to the caller, or None on success."""
        return None

    def unwrap(self) -> T:
        """Return the response, or raise the surfaced error."""
        error = self.error
        if error is None:
            return self.response  # type: ignore[attr-defined]
        raise error


@dataclass(frozen=True)
class Completed(ExecutionResult[T]):
    """An attempt succeeded. ``response`` is that attempt's response."""

    ok: ClassVar[bool] = True

    response: T
    attempts: int = 1
    history: tuple[BaseException, ...] = ()


@dataclass(frozen=True)
class Exhausted(ExecutionResult[Any]):
    """Every permitted attempt failed with a retryable failure.

    ``reason`` is the last attempt's underlying error, never a synthetic one.
    """

    reason: BaseException
    attempts: int = 1
    history: tuple[BaseException, ...] = ()

    @property
    def error(self) -> BaseException:
        return self.reason


@dataclass(frozen=True)
class Aborted(ExecutionResult[Any]):
    """A fatal failure stopped the execution, regardless of remaining budget."""

    reason: BaseException
    attempts: int = 1
    history: tuple[BaseException, ...] = ()

    @property
    def error(self) -> BaseException:
        return self.reason


@dataclass(frozen=True)
class Cancelled(ExecutionResult[Any]):
    """The caller cancelled the execution mid-flight."""

    attempts: int = 0
    history: tuple[BaseException, ...] = ()

    @property
    def error(self) -> ExecutionCancelledError:
        return ExecutionCancelledError(self.attempts)
