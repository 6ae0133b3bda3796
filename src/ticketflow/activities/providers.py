"""Effect provider interfaces wrapped by the activity layer.

Providers perform the real work (a model call, a search, an API write) and
signal failure by raising. Translating failures into fallbacks or
``OperationError`` values is the activity layer's job, not the provider's.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from ticketflow.models import ClassificationResult, KnowledgeMatch, Ticket, TicketStatus


class ClassificationProvider(ABC):
    @abstractmethod
    def classify(self, text: str) -> ClassificationResult:
        """Derive intent, sentiment, urgency and category from ticket text."""


class KnowledgeSearchProvider(ABC):
    @abstractmethod
    def search(self, query: str, limit: int) -> Sequence[KnowledgeMatch]:
        """Return candidate articles for ``query``.

        The activity layer enforces the similarity floor, ordering and
        ``limit``; providers may return more.
        """


class TextGenerationProvider(ABC):
    @abstractmethod
    def generate(self, context: str, classification: ClassificationResult) -> str:
        """Draft a customer-facing response."""


class TicketStatusProvider(ABC):
    """The ticketing system of record."""

    @abstractmethod
    def set_status(self, ticket_id: str, status: TicketStatus) -> None: ...


class NotificationProvider(ABC):
    @abstractmethod
    def send(self, message: str, channel: str) -> None: ...


class TicketRepository(ABC):
    @abstractmethod
    def get(self, ticket_id: str) -> Ticket | None:
        """Return the ticket, or None when the id is unknown."""
