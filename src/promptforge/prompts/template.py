"""Prompt template assembled from form fields.

``PromptTemplate`` holds the fields of the prompt generator form (role,
language, context, task, output format, constraints) and renders them into
a single prompt in a fixed section order.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, field_validator

DEFAULT_ROLE = "Senior Software Engineer"
DEFAULT_LANGUAGE = "Python"
DEFAULT_FORMAT = "markdown code block"
DEFAULT_CONSTRAINTS = (
    "Must use modern standards. Do not include introductory or concluding text."
)
NO_CONTEXT = "No specific context provided. Assume standard environment."


class PromptTemplate(BaseModel):
    """Form fields for a coding-task prompt."""

    model_config = {"frozen": True}

    task: str
    role: str = DEFAULT_ROLE
    language: str = DEFAULT_LANGUAGE
    context: Optional[str] = None
    output_format: str = DEFAULT_FORMAT
    constraints: str = DEFAULT_CONSTRAINTS
    grounding: bool = True

    @field_validator("task")
    @classmethod
    def _task_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("task must not be blank")
        return value

    def system_instruction(self) -> str:
        """Role-based system instruction sent alongside the prompt."""
        return (
            f"You are a world-class, detail-oriented {self.role}. "
            "Your goal is to solve the user's request flawlessly."
        )

    def assemble(self) -> str:
        """Render the prompt: instruction, context, task, output requirements, action."""
        parts = [
            f"System Instruction: {self.system_instruction()}",
            "--- CONTEXT ---",
            self.context or NO_CONTEXT,
            "--- TASK ---",
            "The user requires assistance with the following coding task, "
            f"focusing on the {self.language} language:",
            self.task,
            "--- OUTPUT REQUIREMENTS ---",
            f"Format: {self.output_format}.",
            f"Constraints: {self.constraints}.",
            "ACTION: Based on the context and requirements, provide the direct, "
            "complete solution.",
        ]
        return "\n\n".join(parts)
