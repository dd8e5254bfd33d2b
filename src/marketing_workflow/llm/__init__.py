"""Completion provider package."""

from marketing_workflow.llm.factory import LLMFactory
from marketing_workflow.llm.provider import Completion, LLMProvider

__all__ = [
    "Completion",
    "LLMFactory",
    "LLMProvider",
]
