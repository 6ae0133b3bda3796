"""Routing engine: classification in, call plan out.

Everything here is a pure function of its arguments. There is no I/O and no
clock access, so replaying a workflow with the same classification (and the
same search outcome) always yields the same plan.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from ticketflow.models import (
    ClassificationResult,
    KnowledgeMatch,
    OperationError,
    Sentiment,
    TicketStatus,
    Urgency,
    is_error,
)
from ticketflow.workflow.plan import (
    CallPlan,
    GenerateStep,
    NotifyStep,
    RoutePath,
    SearchStep,
    UpdateStatusStep,
)


@dataclass(frozen=True, slots=True)
class RoutingConstants:
    """Decision constants. Changing any of them changes routing for
    in-flight workflows, so bump ``version`` with every change."""

    version: str = "1"
    confidence_threshold: float = 0.8
    critical_search_limit: int = 3
    elevated_search_limit: int = 5
    normal_search_limit: int = 3
    alert_channel: str = "support-alerts"
    escalation_channel: str = "support-team"
    review_channel: str = "support-team"
    escalation_response: str = "Escalated to support team"
    review_response: str = "Escalated to support team for personalized assistance"


CONSTANTS = RoutingConstants()


def idempotency_key(step: str, ticket_id: str) -> str:
    """Key for one step of one ticket; identical across replays."""

    return f"{step}:{ticket_id}"


def select_path(classification: ClassificationResult) -> RoutePath:
    if classification.urgency == Urgency.CRITICAL:
        return RoutePath.CRITICAL
    if classification.sentiment == Sentiment.NEGATIVE or classification.urgency == Urgency.HIGH:
        return RoutePath.ELEVATED
    return RoutePath.NORMAL


def best_match(matches: Sequence[KnowledgeMatch]) -> KnowledgeMatch | None:
    """First element of a similarity-sorted result, if any."""

    return matches[0] if matches else None


def plan_route(
    *, ticket_id: str, ticket_text: str, classification: ClassificationResult
) -> CallPlan:
    path = select_path(classification)

    if path is RoutePath.CRITICAL:
        return CallPlan(
            path=path,
            steps=(
                NotifyStep(
                    channel=CONSTANTS.alert_channel,
                    message=(
                        f"URGENT: Ticket {ticket_id} requires immediate attention - "
                        f"{classification.category}"
                    ),
                    key=idempotency_key("notify-critical", ticket_id),
                ),
                UpdateStatusStep(
                    status=TicketStatus.IN_PROGRESS,
                    key=idempotency_key("update-in-progress", ticket_id),
                ),
                SearchStep(
                    query=classification.intent,
                    limit=CONSTANTS.critical_search_limit,
                    key=idempotency_key("search", ticket_id),
                ),
                GenerateStep(
                    fallback_context=ticket_text,
                    key=idempotency_key("generate-critical", ticket_id),
                ),
            ),
            final_status=TicketStatus.IN_PROGRESS,
        )

    if path is RoutePath.ELEVATED:
        return CallPlan(
            path=path,
            steps=(
                SearchStep(
                    query=classification.intent,
                    limit=CONSTANTS.elevated_search_limit,
                    key=idempotency_key("search", ticket_id),
                ),
            ),
            final_status=TicketStatus.IN_PROGRESS,
            awaits_search=True,
        )

    return CallPlan(
        path=path,
        steps=(
            SearchStep(
                query=classification.intent,
                limit=CONSTANTS.normal_search_limit,
                key=idempotency_key("search", ticket_id),
            ),
            GenerateStep(
                fallback_context=ticket_text,
                key=idempotency_key("generate-auto", ticket_id),
            ),
            UpdateStatusStep(
                status=TicketStatus.RESOLVED,
                key=idempotency_key("update-resolved", ticket_id),
            ),
        ),
        final_status=TicketStatus.RESOLVED,
    )


def plan_after_search(
    *,
    ticket_id: str,
    classification: ClassificationResult,
    search_result: Sequence[KnowledgeMatch] | OperationError,
) -> CallPlan:
    """Second half of the elevated path, decided by the search outcome."""

    if is_error(search_result):
        return CallPlan(
            path=RoutePath.ELEVATED,
            steps=(
                NotifyStep(
                    channel=CONSTANTS.escalation_channel,
                    message=f"Ticket {ticket_id} needs human review (KB search failed)",
                    key=idempotency_key("notify-escalate", ticket_id),
                ),
                UpdateStatusStep(
                    status=TicketStatus.IN_PROGRESS,
                    key=idempotency_key("update-in-progress", ticket_id),
                ),
            ),
            final_status=TicketStatus.IN_PROGRESS,
            fixed_response=CONSTANTS.escalation_response,
        )

    best = best_match(search_result)
    # Strictly greater: a top score of exactly the threshold is low confidence.
    if best is not None and best.similarity_score > CONSTANTS.confidence_threshold:
        return CallPlan(
            path=RoutePath.ELEVATED,
            steps=(
                GenerateStep(
                    fallback_context=best.content,
                    key=idempotency_key("generate-resolve", ticket_id),
                ),
                UpdateStatusStep(
                    status=TicketStatus.RESOLVED,
                    key=idempotency_key("update-resolved", ticket_id),
                ),
            ),
            final_status=TicketStatus.RESOLVED,
        )

    return CallPlan(
        path=RoutePath.ELEVATED,
        steps=(
            NotifyStep(
                channel=CONSTANTS.review_channel,
                message=f"Ticket {ticket_id} needs human review - {classification.category}",
                key=idempotency_key("notify-review", ticket_id),
            ),
            UpdateStatusStep(
                status=TicketStatus.IN_PROGRESS,
                key=idempotency_key("update-in-progress", ticket_id),
            ),
        ),
        final_status=TicketStatus.IN_PROGRESS,
        fixed_response=CONSTANTS.review_response,
    )
