"""Factory for assembling the activity layer from settings."""

from __future__ import annotations

import logging

from ticketflow.activities.contract import Activities
from ticketflow.activities.heuristic import HeuristicClassifier, TemplateTextGenerator
from ticketflow.activities.knowledge_base import KeywordKnowledgeSearch
from ticketflow.activities.llm_backed import LLMClassifier, LLMTextGenerator
from ticketflow.activities.ticketing import (
    InMemoryTicketBoard,
    InMemoryTicketRepository,
    RecordingNotifier,
)
from ticketflow.core.config import StoreConfig, WorkflowSettings
from ticketflow.idempotency import (
    IdempotencyStore,
    InMemoryIdempotencyStore,
    JsonFileIdempotencyStore,
)
from ticketflow.llm.factory import LLMFactory

logger = logging.getLogger(__name__)


class ActivityFactory:
    """Factory for creating the idempotency store and the activity layer."""

    @staticmethod
    def create_store(config: StoreConfig) -> IdempotencyStore:
        """Create an idempotency store based on configuration.

        Raises:
            ValueError: If the backend is not supported.
        """
        logger.info(f"Creating idempotency store: {config.backend}")

        if config.backend == "memory":
            return InMemoryIdempotencyStore()
        elif config.backend == "json":
            return JsonFileIdempotencyStore(config.path)
        else:
            raise ValueError(f"Unsupported idempotency store backend: {config.backend}")

    @staticmethod
    def create(settings: WorkflowSettings, store: IdempotencyStore | None = None) -> Activities:
        """Create the activity layer with the configured provider stack.

        Args:
            settings: Workflow settings.
            store: Store to use instead of the configured one.

        Returns:
            Activities wired to their providers.
        """
        kind = settings.provider.kind
        logger.info(f"Creating activity providers: {kind}")

        if kind == "heuristic":
            classifier = HeuristicClassifier()
            generator = TemplateTextGenerator()
        elif kind == "openai":
            llm = LLMFactory.create(settings.provider)
            classifier = LLMClassifier(llm)
            generator = LLMTextGenerator(llm)
        else:
            raise ValueError(f"Unsupported provider kind: {kind}")

        return Activities(
            store=store if store is not None else ActivityFactory.create_store(settings.store),
            classifier=classifier,
            knowledge=KeywordKnowledgeSearch(),
            generator=generator,
            tickets=InMemoryTicketBoard(),
            notifier=RecordingNotifier(),
            repository=InMemoryTicketRepository(),
        )
