"""Keyword-scored knowledge base search."""

from __future__ import annotations

import re
from dataclasses import dataclass

from ticketflow.activities.providers import KnowledgeSearchProvider
from ticketflow.models import KnowledgeMatch

TOKEN_SCORE = 0.3
TITLE_PHRASE_SCORE = 0.5
MIN_TOKEN_LENGTH = 3

_TOKEN_SPLIT = re.compile(r"[^a-z0-9]+")


@dataclass(frozen=True, slots=True)
class KnowledgeArticle:
    id: str
    title: str
    content: str


DEFAULT_ARTICLES: tuple[KnowledgeArticle, ...] = (
    KnowledgeArticle(
        id="kb-001",
        title="How to reset your password",
        content=(
            'To reset your password, go to the login page and click "Forgot Password". '
            "Enter your email and follow the instructions sent to you."
        ),
    ),
    KnowledgeArticle(
        id="kb-002",
        title="Payment issues and refunds",
        content=(
            "If you're experiencing payment issues, please check your payment method is "
            "valid. For refunds, contact our billing team within 30 days of purchase."
        ),
    ),
    KnowledgeArticle(
        id="kb-003",
        title="Account access problems",
        content=(
            "If you cannot access your account, ensure you're using the correct email "
            "address. Try clearing your browser cache or use password reset."
        ),
    ),
    KnowledgeArticle(
        id="kb-004",
        title="Feature request process",
        content=(
            "We appreciate feature requests! Submit yours through our feedback form. "
            "Popular requests are prioritized in our roadmap."
        ),
    ),
    KnowledgeArticle(
        id="kb-005",
        title="Technical issues and bug reports",
        content=(
            "For technical issues, please provide: browser version, steps to reproduce, "
            "and screenshots. Our team will investigate within 24 hours."
        ),
    ),
)


def _tokens(text: str) -> list[str]:
    return [t for t in _TOKEN_SPLIT.split(text.lower()) if len(t) >= MIN_TOKEN_LENGTH]


class KeywordKnowledgeSearch(KnowledgeSearchProvider):
    """Scores each article by query-token overlap.

    Every distinct query token found in the article adds ``TOKEN_SCORE``; the
    whole query phrase appearing in the title adds ``TITLE_PHRASE_SCORE``.
    Scores are capped at 1.0. Results keep corpus order for equal scores.
    """

    def __init__(self, articles: tuple[KnowledgeArticle, ...] = DEFAULT_ARTICLES) -> None:
        self._articles = articles

    def search(self, query: str, limit: int) -> list[KnowledgeMatch]:
        query_tokens = list(dict.fromkeys(_tokens(query)))
        phrase = " ".join(_TOKEN_SPLIT.split(query.lower())).strip()

        scored: list[KnowledgeMatch] = []
        for article in self._articles:
            haystack = f"{article.title} {article.content}".lower()
            score = sum(TOKEN_SCORE for token in query_tokens if token in haystack)
            if phrase and phrase in article.title.lower():
                score += TITLE_PHRASE_SCORE
            scored.append(
                KnowledgeMatch(
                    id=article.id,
                    title=article.title,
                    content=article.content,
                    similarity_score=round(min(score, 1.0), 6),
                )
            )

        scored.sort(key=lambda match: match.similarity_score, reverse=True)
        return scored[:limit]
