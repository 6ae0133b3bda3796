"""Activity contract layer.

Every effect-performing activity takes its typed input plus an idempotency
key, consults the idempotency store, and only on a miss calls its provider.
Failures are handled by class:

- advisory (classify, search, generate): provider failures become safe
  defaults so the workflow always reaches a conclusion
- mandatory (update status): provider failures become ``UpdateError``
- best-effort (notify): provider failures become ``NotificationError``;
  the caller logs and carries on

Whatever ``compute`` returns is recorded, fallbacks and errors included.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ticketflow.activities.providers import (
    ClassificationProvider,
    KnowledgeSearchProvider,
    NotificationProvider,
    TextGenerationProvider,
    TicketRepository,
    TicketStatusProvider,
)
from ticketflow.idempotency import IdempotencyStore, fingerprint
from ticketflow.models import (
    DEFAULT_CLASSIFICATION,
    ClassificationResult,
    ErrorKind,
    KnowledgeMatch,
    OperationError,
    Ticket,
    TicketStatus,
)

logger = logging.getLogger(__name__)

CLASSIFY = "classify"
SEARCH_KNOWLEDGE = "search_knowledge"
GENERATE_TEXT = "generate_text"
UPDATE_STATUS = "update_status"
NOTIFY = "notify"

MIN_SIMILARITY = 0.1

FALLBACK_RESPONSE = (
    "Thank you for contacting support. We have received your ticket "
    "and will respond within 24 hours."
)


class ActivityCancelled(BaseException):
    """Raised by a host to abandon an in-flight activity call.

    It is a ``BaseException`` so provider failure handling never absorbs it;
    nothing is recorded for the key and a later call runs the effect again.
    """


def _normalize_matches(matches: Sequence[KnowledgeMatch], limit: int) -> tuple[KnowledgeMatch, ...]:
    kept = [m for m in matches if m.similarity_score >= MIN_SIMILARITY]
    # sorted() is stable: equal scores keep the provider's order.
    kept = sorted(kept, key=lambda m: m.similarity_score, reverse=True)
    return tuple(kept[:limit])


class Activities:
    """The five idempotent activities plus the read-only ticket lookup."""

    def __init__(
        self,
        *,
        store: IdempotencyStore,
        classifier: ClassificationProvider,
        knowledge: KnowledgeSearchProvider,
        generator: TextGenerationProvider,
        tickets: TicketStatusProvider,
        notifier: NotificationProvider,
        repository: TicketRepository | None = None,
    ) -> None:
        self.store = store
        self._classifier = classifier
        self._knowledge = knowledge
        self._generator = generator
        self._tickets = tickets
        self._notifier = notifier
        self._repository = repository

    def classify(self, text: str, idempotency_key: str) -> ClassificationResult | OperationError:
        def compute() -> ClassificationResult:
            logger.info(
                "Classifying ticket text",
                extra={"activity": CLASSIFY, "idempotency_key": idempotency_key},
            )
            try:
                return self._classifier.classify(text)
            except Exception:
                logger.warning(
                    "Classification provider failed; using default classification",
                    extra={"activity": CLASSIFY, "idempotency_key": idempotency_key},
                    exc_info=True,
                )
                return DEFAULT_CLASSIFICATION

        return self.store.record_or_fetch(
            CLASSIFY, idempotency_key, fingerprint(text=text), compute
        )

    def search_knowledge(
        self, query: str, limit: int, idempotency_key: str
    ) -> tuple[KnowledgeMatch, ...] | OperationError:
        """Search the knowledge base.

        Returns at most ``limit`` matches scoring at least ``MIN_SIMILARITY``,
        best first. Provider failures yield an empty sequence.
        """

        if limit < 1:
            return ()

        def compute() -> tuple[KnowledgeMatch, ...]:
            logger.info(
                f"Searching knowledge base for {query!r} (limit {limit})",
                extra={"activity": SEARCH_KNOWLEDGE, "idempotency_key": idempotency_key},
            )
            try:
                return _normalize_matches(self._knowledge.search(query, limit), limit)
            except Exception:
                logger.warning(
                    "Knowledge search provider failed; returning no matches",
                    extra={"activity": SEARCH_KNOWLEDGE, "idempotency_key": idempotency_key},
                    exc_info=True,
                )
                return ()

        return self.store.record_or_fetch(
            SEARCH_KNOWLEDGE,
            idempotency_key,
            fingerprint(query=query, limit=limit),
            compute,
        )

    def generate_text(
        self, context: str, classification: ClassificationResult, idempotency_key: str
    ) -> str | OperationError:
        def compute() -> str:
            logger.info(
                "Generating response",
                extra={"activity": GENERATE_TEXT, "idempotency_key": idempotency_key},
            )
            try:
                return self._generator.generate(context, classification)
            except Exception:
                logger.warning(
                    "Text generation provider failed; using fallback response",
                    extra={"activity": GENERATE_TEXT, "idempotency_key": idempotency_key},
                    exc_info=True,
                )
                return FALLBACK_RESPONSE

        return self.store.record_or_fetch(
            GENERATE_TEXT,
            idempotency_key,
            fingerprint(context=context, classification=classification),
            compute,
        )

    def update_status(
        self, ticket_id: str, status: TicketStatus, idempotency_key: str
    ) -> None | OperationError:
        def compute() -> None | OperationError:
            logger.info(
                f"Updating ticket {ticket_id} to status: {status.value}",
                extra={"activity": UPDATE_STATUS, "idempotency_key": idempotency_key},
            )
            try:
                self._tickets.set_status(ticket_id, status)
            except Exception as e:
                logger.error(
                    f"Ticket status update failed: {e}",
                    extra={"activity": UPDATE_STATUS, "idempotency_key": idempotency_key},
                )
                return OperationError(
                    kind=ErrorKind.UPDATE_ERROR,
                    message=str(e) or "Unknown error updating ticket",
                )
            return None

        return self.store.record_or_fetch(
            UPDATE_STATUS,
            idempotency_key,
            fingerprint(ticket_id=ticket_id, status=status.value),
            compute,
        )

    def notify(self, message: str, channel: str, idempotency_key: str) -> None | OperationError:
        def compute() -> None | OperationError:
            logger.info(
                f"Sending notification to {channel}",
                extra={"activity": NOTIFY, "idempotency_key": idempotency_key},
            )
            try:
                self._notifier.send(message, channel)
            except Exception as e:
                logger.warning(
                    f"Notification failed: {e}",
                    extra={"activity": NOTIFY, "idempotency_key": idempotency_key},
                )
                return OperationError(
                    kind=ErrorKind.NOTIFICATION_ERROR,
                    message=str(e) or "Unknown error sending notification",
                )
            return None

        return self.store.record_or_fetch(
            NOTIFY,
            idempotency_key,
            fingerprint(message=message, channel=channel),
            compute,
        )

    def fetch_ticket(self, ticket_id: str) -> Ticket | OperationError:
        """Look up a ticket. Read-only, so it bypasses the idempotency store."""

        if self._repository is None:
            return OperationError(
                kind=ErrorKind.FETCH_ERROR, message="No ticket repository configured"
            )
        try:
            ticket = self._repository.get(ticket_id)
        except Exception as e:
            logger.error(f"Ticket fetch failed: {e}", extra={"ticket_id": ticket_id})
            return OperationError(
                kind=ErrorKind.FETCH_ERROR,
                message=str(e) or "Unknown error fetching ticket",
            )
        if ticket is None:
            return OperationError(
                kind=ErrorKind.NOT_FOUND,
                message=f"Ticket {ticket_id} not found in the system",
            )
        return ticket
