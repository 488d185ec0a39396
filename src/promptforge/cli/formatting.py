"""Rich formatting helpers for the promptforge CLI.

Rich auto-detects TTY and degrades gracefully when piped (no ANSI codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel

from promptforge.retry import Aborted, Cancelled, Exhausted

if TYPE_CHECKING:
    from promptforge.retry import ExecutionResult


def get_console(stderr: bool = False) -> Console:
    """Create a Rich Console that auto-detects TTY for graceful pipe degradation."""
    return Console(stderr=stderr)


def format_prompt(prompt: str, console: Console) -> None:
    """Display the assembled prompt."""
    console.print(Panel(escape(prompt), title="Assembled prompt", title_align="left"))


def format_response(text: str, console: Console, *, raw: bool = False) -> None:
    """Display model output, rendered as Markdown unless ``raw``."""
    if raw:
        console.print(text, markup=False, highlight=False)
    else:
        console.print(Markdown(text))


def format_failure(result: ExecutionResult, console: Console) -> None:
    """Display the error banner for a failed execution."""
    if isinstance(result, Exhausted):
        format_error(
            f"Gave up after {result.attempts} attempt(s): {result.reason}", console
        )
    elif isinstance(result, Aborted):
        format_error(f"Request failed: {result.reason}", console)
    elif isinstance(result, Cancelled):
        format_error(f"Cancelled after {result.attempts} attempt(s).", console)
    else:
        format_error(f"Unexpected result: {result!r}", console)


def format_attempts(result: ExecutionResult, console: Console) -> None:
    """Show how many attempts an execution took, when it needed retries."""
    if result.attempts > 1:
        console.print(f"[dim]Completed after {result.attempts} attempts.[/dim]")


def format_error(message: str, console: Console) -> None:
    """Display an error message."""
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)
