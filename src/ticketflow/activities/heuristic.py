"""Keyword heuristics standing in for model-backed classification and drafting."""

from __future__ import annotations

from typing import TypeVar

from ticketflow.activities.providers import ClassificationProvider, TextGenerationProvider
from ticketflow.models import ClassificationResult, Sentiment, Urgency

V = TypeVar("V")

# (keywords, value) pairs; the first rule with a matching keyword wins.
_SENTIMENT_RULES: list[tuple[tuple[str, ...], Sentiment]] = [
    (("urgent", "critical", "broken"), Sentiment.NEGATIVE),
    (("thank", "great", "excellent"), Sentiment.POSITIVE),
]

_URGENCY_RULES: list[tuple[tuple[str, ...], Urgency]] = [
    (("urgent", "asap", "immediately"), Urgency.CRITICAL),
    (("important", "soon"), Urgency.HIGH),
    (("when possible", "no rush"), Urgency.LOW),
]

_CATEGORY_RULES: list[tuple[tuple[str, ...], str]] = [
    (("login", "password", "access"), "authentication"),
    (("payment", "billing", "invoice"), "billing"),
    (("bug", "error", "crash"), "technical"),
    (("feature", "request", "enhancement"), "feature-request"),
]

_INTENT_RULES: list[tuple[tuple[str, ...], str]] = [
    (("reset password",), "reset-password"),
    (("refund",), "request-refund"),
    (("cancel",), "cancel-subscription"),
    (("how to", "how do i"), "how-to-question"),
    (("not working", "doesn't work"), "report-issue"),
]


def _first_match(text: str, rules: list[tuple[tuple[str, ...], V]], default: V) -> V:
    for keywords, value in rules:
        if any(keyword in text for keyword in keywords):
            return value
    return default


class HeuristicClassifier(ClassificationProvider):
    """Rule-based classifier; a total, deterministic function of the text."""

    def classify(self, text: str) -> ClassificationResult:
        lower = text.lower()
        return ClassificationResult(
            intent=_first_match(lower, _INTENT_RULES, "general-inquiry"),
            sentiment=_first_match(lower, _SENTIMENT_RULES, Sentiment.NEUTRAL),
            urgency=_first_match(lower, _URGENCY_RULES, Urgency.MEDIUM),
            category=_first_match(lower, _CATEGORY_RULES, "general"),
        )


_CATEGORY_PARAGRAPHS: dict[str, str] = {
    "authentication": (
        "For account access issues, please try the following:\n"
        '1. Use the "Forgot Password" link on the login page\n'
        "2. Check your email for the reset link\n"
        "3. If you don't receive the email, check your spam folder\n\n"
    ),
    "billing": (
        "For billing inquiries, our billing team will review your request.\n"
        "Please allow 1-2 business days for a detailed response.\n\n"
    ),
    "technical": (
        "We've received your technical issue report.\n"
        "Our engineering team will investigate and respond within 24 hours.\n\n"
    ),
    "feature-request": (
        "Thank you for your feature suggestion!\n"
        "We've added it to our product roadmap for consideration.\n\n"
    ),
}

_GENERIC_PARAGRAPH = "We've reviewed your inquiry and will provide a detailed response soon.\n\n"

MAX_CONTEXT_CHARS = 300
MIN_CONTEXT_CHARS = 20


class TemplateTextGenerator(TextGenerationProvider):
    """Assembles a response from fixed paragraphs and the supplied context."""

    def generate(self, context: str, classification: ClassificationResult) -> str:
        parts = ["Thank you for reaching out to our support team.\n\n"]

        if classification.urgency in (Urgency.CRITICAL, Urgency.HIGH):
            parts.append("We understand this is urgent and we're prioritizing your request.\n\n")

        parts.append(_CATEGORY_PARAGRAPHS.get(classification.category, _GENERIC_PARAGRAPH))

        if context and len(context) > MIN_CONTEXT_CHARS:
            parts.append("In the meantime, you may find this information helpful:\n\n")
            parts.append(context[:MAX_CONTEXT_CHARS])
            parts.append("\n\n")

        parts.append("If you have any additional questions, please don't hesitate to reach out.\n\n")
        parts.append("Best regards,\nSupport Team")
        return "".join(parts)
