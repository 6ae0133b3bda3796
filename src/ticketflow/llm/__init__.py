"""LLM package initialization."""

from ticketflow.llm.factory import LLMFactory
from ticketflow.llm.provider import LLMProvider

__all__ = [
    "LLMFactory",
    "LLMProvider",
]
