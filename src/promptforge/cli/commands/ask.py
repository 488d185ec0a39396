"""promptforge ask -- send one question to the model."""

from __future__ import annotations

import click

from promptforge.cli.formatting import (
    format_attempts,
    format_error,
    format_failure,
    format_response,
    get_console,
)
from promptforge.exceptions import PromptForgeError


@click.command()
@click.argument("message")
@click.option("--system", default=None, help="Optional system instruction.")
@click.option("--raw", is_flag=True, help="Print the reply without Markdown rendering.")
@click.pass_context
def ask(ctx: click.Context, message: str, system: str | None, raw: bool) -> None:
    """Ask the model a single question and print its reply."""
    from promptforge.cli import _run_prompt
    from promptforge.llm.client import GeminiClient

    console = get_console()
    try:
        result = _run_prompt(ctx, message, system_instruction=system)
        if not result.ok:
            format_failure(result, console)
            raise SystemExit(1)
        text = GeminiClient.extract_text(result.response.json())
        format_response(text, console, raw=raw)
        format_attempts(result, console)
    except SystemExit:
        raise
    except (PromptForgeError, ValueError) as e:
        format_error(str(e), console)
        raise SystemExit(1) from None
