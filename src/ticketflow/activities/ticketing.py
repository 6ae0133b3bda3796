"""In-process ticketing and notification backends.

These stand in for the external ticketing system and chat/e-mail
integrations. They keep everything they did in memory so callers can
inspect the effects that were actually performed.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import UTC, datetime

from ticketflow.activities.providers import (
    NotificationProvider,
    TicketRepository,
    TicketStatusProvider,
)
from ticketflow.models import Ticket, TicketStatus

logger = logging.getLogger(__name__)


class TicketingUnavailable(RuntimeError):
    """Raised by a backend that refuses to serve a request."""


class InMemoryTicketBoard(TicketStatusProvider):
    """Ticket status system of record.

    Ticket ids listed in ``unavailable`` are refused, which simulates an
    outage of the ticketing API for those tickets.
    """

    def __init__(self, unavailable: set[str] | None = None) -> None:
        self._lock = threading.Lock()
        self._statuses: dict[str, TicketStatus] = {}
        self._writes: list[tuple[str, TicketStatus]] = []
        self.unavailable = set(unavailable or ())

    def set_status(self, ticket_id: str, status: TicketStatus) -> None:
        if ticket_id in self.unavailable:
            raise TicketingUnavailable(f"Ticketing system rejected update for {ticket_id}")
        with self._lock:
            self._statuses[ticket_id] = status
            self._writes.append((ticket_id, status))
        logger.info(
            "Ticket status updated",
            extra={"ticket_id": ticket_id, "status": status.value},
        )

    def status_of(self, ticket_id: str) -> TicketStatus | None:
        with self._lock:
            return self._statuses.get(ticket_id)

    @property
    def writes(self) -> list[tuple[str, TicketStatus]]:
        with self._lock:
            return list(self._writes)


@dataclass(frozen=True, slots=True)
class Notification:
    channel: str
    message: str


class RecordingNotifier(NotificationProvider):
    """Delivers notifications into an in-memory outbox.

    Channels listed in ``failing_channels`` raise instead of delivering.
    """

    def __init__(self, failing_channels: set[str] | None = None) -> None:
        self._lock = threading.Lock()
        self._outbox: list[Notification] = []
        self.failing_channels = set(failing_channels or ())

    def send(self, message: str, channel: str) -> None:
        if channel in self.failing_channels:
            raise TicketingUnavailable(f"Channel {channel!r} is not reachable")
        with self._lock:
            self._outbox.append(Notification(channel=channel, message=message))
        logger.info(
            "Notification delivered",
            extra={"channel": channel, "preview": message[:50]},
        )

    @property
    def outbox(self) -> list[Notification]:
        with self._lock:
            return list(self._outbox)


SAMPLE_TICKETS: tuple[Ticket, ...] = (
    Ticket(
        id="TICKET-001",
        title="Cannot reset password",
        text=(
            "I've been trying to reset my password for the past hour but I'm not receiving "
            "the reset email. This is urgent as I need to access my account for an "
            "important meeting."
        ),
        requester_contact="user@example.com",
        created_at=datetime(2025, 1, 6, 9, 0, tzinfo=UTC),
        priority_hint="high",
    ),
    Ticket(
        id="TICKET-002",
        title="Billing question about invoice",
        text=(
            "I received an invoice for $99 but I thought my subscription was $49/month. "
            "Can you please clarify this charge?"
        ),
        requester_contact="customer@example.com",
        created_at=datetime(2025, 1, 6, 8, 0, tzinfo=UTC),
        priority_hint="medium",
    ),
    Ticket(
        id="TICKET-003",
        title="Feature request: Dark mode",
        text=(
            "Would love to see a dark mode option in the app. Many of us work late hours "
            "and it would be easier on the eyes."
        ),
        requester_contact="feedback@example.com",
        created_at=datetime(2025, 1, 5, 10, 0, tzinfo=UTC),
        priority_hint="low",
    ),
)


class InMemoryTicketRepository(TicketRepository):
    def __init__(self, tickets: tuple[Ticket, ...] = SAMPLE_TICKETS) -> None:
        self._tickets = {ticket.id: ticket for ticket in tickets}

    def get(self, ticket_id: str) -> Ticket | None:
        return self._tickets.get(ticket_id)

    def list(self) -> list[Ticket]:
        return list(self._tickets.values())
