"""promptforge CLI -- send prompts to Gemini with bounded retry.

This module is NEVER imported from promptforge/__init__.py.
It is only loaded via the ``promptforge`` entry point defined in pyproject.toml.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

try:
    import click
    from dotenv import load_dotenv
except ImportError:
    raise ImportError(
        "CLI dependencies not installed. Install with: pip install promptforge[cli]"
    ) from None

from promptforge.cli.formatting import get_console
from promptforge.llm.client import DEFAULT_MODEL

if TYPE_CHECKING:
    from promptforge.llm.client import GeminiClient
    from promptforge.retry import ExecutionResult, RetryPolicy


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log every attempt and retry.")
@click.option(
    "--model",
    default=DEFAULT_MODEL,
    show_default=True,
    envvar="PROMPTFORGE_MODEL",
    help="Model name.",
)
@click.option(
    "--max-attempts",
    default=5,
    show_default=True,
    type=click.IntRange(min=1),
    envvar="PROMPTFORGE_MAX_ATTEMPTS",
    help="Total attempts per request, including the first.",
)
@click.option(
    "--base-delay-ms",
    default=1000.0,
    show_default=True,
    type=click.FloatRange(min=0),
    envvar="PROMPTFORGE_BASE_DELAY_MS",
    help="Initial backoff delay; doubles after every retry.",
)
@click.option(
    "--jitter-ms",
    default=1000.0,
    show_default=True,
    type=click.FloatRange(min=0),
    envvar="PROMPTFORGE_JITTER_MS",
    help="Upper bound of the random delay added to every backoff.",
)
@click.option(
    "--retry-5xx",
    is_flag=True,
    envvar="PROMPTFORGE_RETRY_5XX",
    help="Also retry 500/502/503/504 responses.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    model: str,
    max_attempts: int,
    base_delay_ms: float,
    jitter_ms: float,
    retry_5xx: bool,
) -> None:
    """promptforge: reliable prompts for hosted LLMs."""
    ctx.ensure_object(dict)
    ctx.obj["model"] = model
    ctx.obj["policy"] = _build_policy(max_attempts, base_delay_ms, jitter_ms, retry_5xx)
    if verbose:
        _configure_logging()


def main() -> None:
    """Console-script entry point. Loads ``.env`` before option parsing."""
    load_dotenv()
    cli()


def _configure_logging() -> None:
    from rich.logging import RichHandler

    root = logging.getLogger("promptforge")
    root.setLevel(logging.DEBUG)
    if any(isinstance(h, RichHandler) for h in root.handlers):
        return
    root.addHandler(RichHandler(console=get_console(stderr=True), show_path=False))


def _build_policy(
    max_attempts: int, base_delay_ms: float, jitter_ms: float, retry_5xx: bool
) -> RetryPolicy:
    from promptforge.retry import (
        DEFAULT_RETRYABLE_STATUS_CODES,
        SERVER_ERROR_STATUS_CODES,
        RetryPolicy,
        transient_error_predicate,
    )

    statuses = set(DEFAULT_RETRYABLE_STATUS_CODES)
    if retry_5xx:
        statuses |= SERVER_ERROR_STATUS_CODES
    return RetryPolicy(
        max_attempts=max_attempts,
        base_delay_ms=base_delay_ms,
        jitter_max_ms=jitter_ms,
        is_retryable=transient_error_predicate(statuses),
    )


def _open_client(ctx: click.Context) -> GeminiClient:
    """Create a GeminiClient from Click context.

    Raises LLMConfigError when no API key is configured.
    """
    from promptforge.llm.client import GeminiClient

    return GeminiClient(default_model=ctx.obj["model"], policy=ctx.obj["policy"])


def _run_prompt(ctx: click.Context, prompt: str, **kwargs: Any) -> ExecutionResult:
    """Open a client, send one prompt with retry, close the client."""
    client = _open_client(ctx)

    async def _send() -> ExecutionResult:
        async with client:
            return await client.generate(prompt, **kwargs)

    return asyncio.run(_send())


# Register subcommands after cli group is defined
from promptforge.cli.commands.ask import ask  # noqa: E402
from promptforge.cli.commands.generate import generate  # noqa: E402

cli.add_command(ask)
cli.add_command(generate)
