"""Test configuration and fixtures."""

import logging
import os
from collections.abc import Callable, Iterator
from pathlib import Path
from unittest.mock import Mock

import pytest

from ticketflow.activities.contract import Activities
from ticketflow.activities.heuristic import HeuristicClassifier, TemplateTextGenerator
from ticketflow.activities.knowledge_base import KeywordKnowledgeSearch
from ticketflow.activities.ticketing import (
    InMemoryTicketBoard,
    InMemoryTicketRepository,
    RecordingNotifier,
)
from ticketflow.idempotency import InMemoryIdempotencyStore
from ticketflow.orchestrator.logging import JsonFormatter
from ticketflow.orchestrator.ticket_workflow import TicketWorkflow


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's .env and TICKETFLOW_* variables out of the tests."""
    monkeypatch.chdir(tmp_path)
    for name in list(os.environ):
        if name.startswith("TICKETFLOW_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Iterator[None]:
    """The CLI installs a JSON handler on the root logger; drop it after each test."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if isinstance(handler.formatter, JsonFormatter):
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.fixture
def store() -> InMemoryIdempotencyStore:
    """Provide an empty in-memory idempotency store."""
    return InMemoryIdempotencyStore()


@pytest.fixture
def classifier() -> Mock:
    """Heuristic classifier wrapped so calls can be counted."""
    return Mock(wraps=HeuristicClassifier())


@pytest.fixture
def knowledge() -> Mock:
    """Keyword knowledge search wrapped so calls can be counted."""
    return Mock(wraps=KeywordKnowledgeSearch())


@pytest.fixture
def generator() -> Mock:
    """Template generator wrapped so calls can be counted."""
    return Mock(wraps=TemplateTextGenerator())


@pytest.fixture
def board() -> InMemoryTicketBoard:
    return InMemoryTicketBoard()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def make_activities(
    store: InMemoryIdempotencyStore,
    classifier: Mock,
    knowledge: Mock,
    generator: Mock,
    board: InMemoryTicketBoard,
    notifier: RecordingNotifier,
) -> Callable[..., Activities]:
    """Build an activity layer from the default fixtures, with overrides."""

    def _make(**overrides: object) -> Activities:
        kwargs: dict[str, object] = {
            "store": store,
            "classifier": classifier,
            "knowledge": knowledge,
            "generator": generator,
            "tickets": board,
            "notifier": notifier,
            "repository": InMemoryTicketRepository(),
        }
        kwargs.update(overrides)
        return Activities(**kwargs)  # type: ignore[arg-type]

    return _make


@pytest.fixture
def activities(make_activities: Callable[..., Activities]) -> Activities:
    return make_activities()


@pytest.fixture
def workflow(activities: Activities) -> TicketWorkflow:
    """Workflow with a frozen clock so outcomes are reproducible."""
    return TicketWorkflow(activities, clock=lambda: 100.0)
