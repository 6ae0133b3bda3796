"""Classification and drafting backed by an LLM provider."""

from __future__ import annotations

import logging

from ticketflow.activities.providers import ClassificationProvider, TextGenerationProvider
from ticketflow.llm.provider import LLMProvider
from ticketflow.models import ClassificationResult

logger = logging.getLogger(__name__)

_CLASSIFY_SYSTEM_PROMPT = """\
You triage customer support tickets.
Reply with a single JSON object and nothing else, with these keys:
- "intent": short kebab-case intent, e.g. "reset-password", "request-refund"
- "sentiment": one of "positive", "neutral", "negative"
- "urgency": one of "low", "medium", "high", "critical"
- "category": one of "authentication", "billing", "technical", "feature-request", "general"
"""

_GENERATE_SYSTEM_PROMPT = """\
You are a support agent drafting a reply to a customer.
Be concise and polite. Use the reference material when it is relevant.
Sign off as "Support Team".
"""


def _strip_code_fence(content: str) -> str:
    text = content.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        text = text.rsplit("```", 1)[0]
    return text.strip()


class LLMClassifier(ClassificationProvider):
    def __init__(self, llm: LLMProvider) -> None:
        self._llm = llm

    def classify(self, text: str) -> ClassificationResult:
        content = self._llm.chat(
            [
                {"role": "system", "content": _CLASSIFY_SYSTEM_PROMPT},
                {"role": "user", "content": text},
            ],
            max_tokens=200,
        )
        # Raises pydantic.ValidationError on malformed replies.
        return ClassificationResult.model_validate_json(_strip_code_fence(content))


class LLMTextGenerator(TextGenerationProvider):
    def __init__(self, llm: LLMProvider, max_tokens: int = 600) -> None:
        self._llm = llm
        self._max_tokens = max_tokens

    def generate(self, context: str, classification: ClassificationResult) -> str:
        prompt = (
            f"Ticket classification: {classification.model_dump_json()}\n\n"
            f"Reference material:\n{context}"
        )
        content = self._llm.chat(
            [
                {"role": "system", "content": _GENERATE_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            max_tokens=self._max_tokens,
        ).strip()
        if not content:
            raise ValueError("LLM returned an empty response")
        logger.debug(f"Drafted response of {len(content)} characters")
        return content
