"""Unit tests for the default heuristic, keyword and in-memory providers."""

from __future__ import annotations

import pytest

from ticketflow.activities.heuristic import HeuristicClassifier, TemplateTextGenerator
from ticketflow.activities.knowledge_base import KeywordKnowledgeSearch, KnowledgeArticle
from ticketflow.activities.ticketing import (
    InMemoryTicketBoard,
    InMemoryTicketRepository,
    RecordingNotifier,
    TicketingUnavailable,
)
from ticketflow.models import ClassificationResult, Sentiment, TicketStatus, Urgency


@pytest.mark.parametrize(
    "text,intent,sentiment,urgency,category",
    [
        (
            "urgent: cannot reset password",
            "reset-password",
            Sentiment.NEGATIVE,
            Urgency.CRITICAL,
            "authentication",
        ),
        (
            "feature request: dark mode",
            "general-inquiry",
            Sentiment.NEUTRAL,
            Urgency.MEDIUM,
            "feature-request",
        ),
        (
            "Thanks! Great product, how do I export invoices? No rush.",
            "how-to-question",
            Sentiment.POSITIVE,
            Urgency.LOW,
            "billing",
        ),
        (
            "Important: the app is broken and sync is not working",
            "report-issue",
            Sentiment.NEGATIVE,
            Urgency.HIGH,
            "general",
        ),
    ],
)
def test_heuristic_classifier_rules(
    text: str, intent: str, sentiment: Sentiment, urgency: Urgency, category: str
) -> None:
    result = HeuristicClassifier().classify(text)

    assert result == ClassificationResult(
        intent=intent, sentiment=sentiment, urgency=urgency, category=category
    )


def test_keyword_search_scores_and_orders() -> None:
    matches = KeywordKnowledgeSearch().search("reset-password", 3)

    assert [m.id for m in matches[:2]] == ["kb-001", "kb-003"]
    assert matches[0].similarity_score == pytest.approx(0.6)
    assert matches[1].similarity_score == pytest.approx(0.6)


def test_keyword_search_title_phrase_boost_is_capped() -> None:
    corpus = (
        KnowledgeArticle(id="a", title="Dark mode", content="Enable dark mode in settings."),
        KnowledgeArticle(id="b", title="Billing", content="Invoices are monthly."),
    )

    matches = KeywordKnowledgeSearch(corpus).search("dark mode", 5)

    assert matches[0].id == "a"
    assert matches[0].similarity_score == 1.0
    assert matches[1].similarity_score == 0.0


def test_keyword_search_ignores_short_tokens() -> None:
    corpus = (KnowledgeArticle(id="a", title="Go", content="go to it"),)

    matches = KeywordKnowledgeSearch(corpus).search("go to", 5)

    assert matches[0].similarity_score == 0.0


def test_template_generator_includes_context_and_urgency() -> None:
    classification = ClassificationResult(
        intent="reset-password",
        sentiment=Sentiment.NEGATIVE,
        urgency=Urgency.CRITICAL,
        category="authentication",
    )
    context = "To reset your password, go to the login page and click Forgot Password." * 10

    text = TemplateTextGenerator().generate(context, classification)

    assert "prioritizing your request" in text
    assert "Forgot Password" in text
    assert context[:300] in text
    assert context[:301] not in text
    assert text.endswith("Support Team")


def test_template_generator_skips_short_context() -> None:
    classification = ClassificationResult(
        intent="general-inquiry",
        sentiment=Sentiment.NEUTRAL,
        urgency=Urgency.LOW,
        category="general",
    )

    text = TemplateTextGenerator().generate("dark mode", classification)

    assert "you may find this information helpful" not in text
    assert "prioritizing" not in text


def test_ticket_board_refuses_unavailable_tickets() -> None:
    board = InMemoryTicketBoard(unavailable={"T-1"})

    with pytest.raises(TicketingUnavailable):
        board.set_status("T-1", TicketStatus.RESOLVED)

    board.set_status("T-2", TicketStatus.IN_PROGRESS)
    assert board.status_of("T-2") is TicketStatus.IN_PROGRESS
    assert board.status_of("T-1") is None


def test_notifier_failing_channel() -> None:
    notifier = RecordingNotifier(failing_channels={"pager"})

    with pytest.raises(TicketingUnavailable):
        notifier.send("wake up", "pager")
    notifier.send("fyi", "support-team")

    assert [(n.channel, n.message) for n in notifier.outbox] == [("support-team", "fyi")]


def test_repository_lists_sample_tickets() -> None:
    repository = InMemoryTicketRepository()

    assert [t.id for t in repository.list()] == ["TICKET-001", "TICKET-002", "TICKET-003"]
    assert repository.get("missing") is None
