"""Prompt assembly for promptforge."""

from promptforge.prompts.template import PromptTemplate

__all__ = ["PromptTemplate"]
