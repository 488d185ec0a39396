"""promptforge generate -- assemble a coding-task prompt and run it."""

from __future__ import annotations

import click
from pydantic import ValidationError

from promptforge.cli.formatting import (
    format_attempts,
    format_error,
    format_failure,
    format_prompt,
    format_response,
    get_console,
)
from promptforge.exceptions import PromptForgeError
from promptforge.prompts.template import (
    DEFAULT_CONSTRAINTS,
    DEFAULT_FORMAT,
    DEFAULT_LANGUAGE,
    DEFAULT_ROLE,
)


@click.command()
@click.option("--task", required=True, help="What the model should build or fix.")
@click.option("--role", default=DEFAULT_ROLE, show_default=True, help="Persona for the system instruction.")
@click.option("--language", default=DEFAULT_LANGUAGE, show_default=True, help="Target programming language.")
@click.option("--context", "context_text", default=None, help="Background the model should assume.")
@click.option("--format", "output_format", default=DEFAULT_FORMAT, show_default=True, help="Expected output format.")
@click.option("--constraints", default=DEFAULT_CONSTRAINTS, help="Constraints on the answer.")
@click.option("--grounding/--no-grounding", default=True, help="Enable Google Search grounding.")
@click.option("--show-prompt/--no-show-prompt", default=True, help="Print the assembled prompt first.")
@click.option("--dry-run", is_flag=True, help="Only assemble and print the prompt.")
@click.option("--raw", is_flag=True, help="Print the reply without Markdown rendering.")
@click.pass_context
def generate(
    ctx: click.Context,
    task: str,
    role: str,
    language: str,
    context_text: str | None,
    output_format: str,
    constraints: str,
    grounding: bool,
    show_prompt: bool,
    dry_run: bool,
    raw: bool,
) -> None:
    """Assemble a prompt from template fields and send it to the model.

    Prints the reply on success. On failure, prints whether the retry
    budget ran out or the request failed outright, and exits with status 1.
    """
    from promptforge.cli import _run_prompt
    from promptforge.llm.client import GeminiClient
    from promptforge.prompts import PromptTemplate

    console = get_console()
    try:
        template = PromptTemplate(
            task=task,
            role=role,
            language=language,
            context=context_text,
            output_format=output_format,
            constraints=constraints,
            grounding=grounding,
        )
    except ValidationError as e:
        messages = "; ".join(err["msg"] for err in e.errors())
        format_error(f"Invalid prompt fields: {messages}", console)
        raise SystemExit(1) from None

    prompt = template.assemble()
    if show_prompt or dry_run:
        format_prompt(prompt, console)
    if dry_run:
        return

    try:
        result = _run_prompt(
            ctx,
            prompt,
            system_instruction=template.system_instruction(),
            grounding=template.grounding,
        )
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
