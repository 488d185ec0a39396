"""Tests for prompt assembly from template fields."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from promptforge.prompts import PromptTemplate
from promptforge.prompts.template import DEFAULT_CONSTRAINTS, NO_CONTEXT


class TestPromptTemplate:
    def test_defaults(self):
        template = PromptTemplate(task="Reverse a linked list")
        assert template.role == "Senior Software Engineer"
        assert template.language == "Python"
        assert template.output_format == "markdown code block"
        assert template.constraints == DEFAULT_CONSTRAINTS
        assert template.context is None
        assert template.grounding is True

    def test_blank_task_rejected(self):
        with pytest.raises(ValidationError):
            PromptTemplate(task="   ")

    def test_frozen(self):
        template = PromptTemplate(task="x")
        with pytest.raises(ValidationError):
            template.task = "y"

    def test_system_instruction_uses_role(self):
        template = PromptTemplate(task="x", role="Data Engineer")
        assert template.system_instruction() == (
            "You are a world-class, detail-oriented Data Engineer. "
            "Your goal is to solve the user's request flawlessly."
        )

    def test_assemble_section_order(self):
        template = PromptTemplate(
            task="Parse a CSV file",
            language="Rust",
            context="Running on an embedded Linux box.",
            output_format="single file",
            constraints="No external crates",
        )
        sections = template.assemble().split("\n\n")

        assert sections[0] == f"System Instruction: {template.system_instruction()}"
        assert sections[1:3] == ["--- CONTEXT ---", "Running on an embedded Linux box."]
        assert sections[3] == "--- TASK ---"
        assert "focusing on the Rust language" in sections[4]
        assert sections[5] == "Parse a CSV file"
        assert sections[6] == "--- OUTPUT REQUIREMENTS ---"
        assert sections[7] == "Format: single file."
        assert sections[8] == "Constraints: No external crates."
        assert sections[9].startswith("ACTION:")
        assert len(sections) == 10

    def test_empty_context_falls_back(self):
        for context in (None, ""):
            prompt = PromptTemplate(task="x", context=context).assemble()
            assert NO_CONTEXT in prompt
