"""Ticket workflow: drives one execution from classification to outcome.

Execution is replay-safe: idempotency keys are derived from the ticket id
only, routing is pure, and every effect goes through the idempotency store.
Re-running ``process`` for a ticket that already (partly) ran re-uses the
recorded results instead of repeating their effects.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from ticketflow.activities.contract import FALLBACK_RESPONSE, Activities
from ticketflow.models import (
    ClassificationResult,
    ErrorKind,
    KnowledgeMatch,
    OperationError,
    Outcome,
    Ticket,
    is_error,
)
from ticketflow.workflow.plan import (
    CallPlan,
    GenerateStep,
    NotifyStep,
    SearchStep,
    UpdateStatusStep,
)
from ticketflow.workflow.routing import (
    CONSTANTS,
    best_match,
    idempotency_key,
    plan_after_search,
    plan_route,
)

logger = logging.getLogger(__name__)


@dataclass
class _ExecutionState:
    """Partial outcome accumulated while a plan runs."""

    ticket: Ticket
    classification: ClassificationResult
    search_result: tuple[KnowledgeMatch, ...] | OperationError | None = None
    generated_text: str | None = None


def _is_mismatch(value: object) -> bool:
    return is_error(value) and value.kind is ErrorKind.IDEMPOTENCY_MISMATCH


class TicketWorkflow:
    """High-level, replay-safe ticket processing."""

    def __init__(
        self, activities: Activities, clock: Callable[[], float] = time.monotonic
    ) -> None:
        self._activities = activities
        self._clock = clock

    def process_ticket(self, ticket_id: str, ticket_text: str) -> Outcome | OperationError:
        """Process a ticket given only its id and text."""

        return self.process(Ticket(id=ticket_id, text=ticket_text))

    def resolve(self, ticket_id: str) -> Outcome | OperationError:
        """Fetch a ticket from the repository, then process it."""

        ticket = self._activities.fetch_ticket(ticket_id)
        if is_error(ticket):
            logger.error(f"Could not load ticket: {ticket}", extra={"ticket_id": ticket_id})
            return ticket
        return self.process(ticket)

    def process(self, ticket: Ticket) -> Outcome | OperationError:
        started = self._clock()
        text = ticket.content
        logger.info(
            f"Processing ticket {ticket.id}",
            extra={"ticket_id": ticket.id, "routing_version": CONSTANTS.version},
        )

        classification = self._activities.classify(text, idempotency_key("classify", ticket.id))
        if is_error(classification):
            logger.error(f"Classification failed: {classification}", extra={"ticket_id": ticket.id})
            return classification

        logger.info(
            f"Classification complete: {classification.category} ({classification.urgency.value}), "
            f"sentiment: {classification.sentiment.value}",
            extra={"ticket_id": ticket.id},
        )

        state = _ExecutionState(ticket=ticket, classification=classification)
        plan = plan_route(ticket_id=ticket.id, ticket_text=text, classification=classification)
        failure = self._execute(plan, state)
        if failure is not None:
            return failure

        if plan.awaits_search:
            plan = plan_after_search(
                ticket_id=ticket.id,
                classification=classification,
                search_result=state.search_result if state.search_result is not None else (),
            )
            failure = self._execute(plan, state)
            if failure is not None:
                return failure

        if plan.fixed_response is not None:
            response = plan.fixed_response
        else:
            response = state.generated_text if state.generated_text is not None else FALLBACK_RESPONSE

        outcome = Outcome(
            ticket_id=ticket.id,
            final_status=plan.final_status,
            response_text=response,
            elapsed_ms=max(0, round((self._clock() - started) * 1000)),
        )
        logger.info(
            f"Ticket {ticket.id} processed - status: {outcome.final_status.value}, "
            f"time: {outcome.elapsed_ms}ms",
            extra={"ticket_id": ticket.id, "path": plan.path.value},
        )
        return outcome

    def _execute(self, plan: CallPlan, state: _ExecutionState) -> OperationError | None:
        """Run the plan's steps in order.

        Returns the error that aborts the workflow, or None when the plan
        completed.
        """

        ticket_id = state.ticket.id
        logger.debug("Executing call plan", extra={"ticket_id": ticket_id, "plan": plan.to_json()})

        for step in plan.steps:
            if isinstance(step, NotifyStep):
                result = self._activities.notify(step.message, step.channel, step.key)
                if _is_mismatch(result):
                    return result
                if is_error(result):
                    logger.warning(
                        f"Notification failed, continuing: {result}",
                        extra={"ticket_id": ticket_id, "channel": step.channel},
                    )

            elif isinstance(step, UpdateStatusStep):
                result = self._activities.update_status(ticket_id, step.status, step.key)
                if is_error(result):
                    logger.error(f"Update failed: {result}", extra={"ticket_id": ticket_id})
                    return result

            elif isinstance(step, SearchStep):
                matches = self._activities.search_knowledge(step.query, step.limit, step.key)
                if _is_mismatch(matches):
                    return matches
                state.search_result = matches

            elif isinstance(step, GenerateStep):
                found = state.search_result
                top = best_match(found) if found is not None and not is_error(found) else None
                context = top.content if top is not None else step.fallback_context
                text = self._activities.generate_text(context, state.classification, step.key)
                if is_error(text):
                    return text
                state.generated_text = text

        return None
