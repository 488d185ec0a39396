"""Shared test fixtures for promptforge.

Provides scripted request operations and a sleep recorder so retry tests
never wait on real time.
"""

from __future__ import annotations

import asyncio

import pytest


class ScriptedOperation:
    """Async request operation that replays a script of results.

    Each call consumes the next item: exceptions are raised, anything else is
    returned. Once the script runs out, the last item repeats.
    """

    def __init__(self, script: list) -> None:
        self.script = list(script)
        self.calls = 0

    async def __call__(self):
        item = self.script[min(self.calls, len(self.script) - 1)]
        self.calls += 1
        await asyncio.sleep(0)
        if isinstance(item, BaseException):
            raise item
        return item


class SleepRecorder:
    """Drop-in for ``asyncio.sleep`` that records delays and returns at once."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def clean_env(monkeypatch):
    """Keep the developer's real credentials out of every test."""
    for name in (
        "PROMPTFORGE_API_KEY",
        "GOOGLE_API_KEY",
        "PROMPTFORGE_BASE_URL",
        "PROMPTFORGE_MODEL",
        "PROMPTFORGE_MAX_ATTEMPTS",
        "PROMPTFORGE_BASE_DELAY_MS",
        "PROMPTFORGE_JITTER_MS",
        "PROMPTFORGE_RETRY_5XX",
    ):
        monkeypatch.delenv(name, raising=False)
