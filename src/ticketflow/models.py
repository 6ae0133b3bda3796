"""Domain types shared by the activities, the routing engine and the orchestrator."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TypeGuard

from pydantic import BaseModel, ConfigDict, Field


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class Urgency(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class TicketStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in-progress"
    WAITING_RESPONSE = "waiting-response"
    RESOLVED = "resolved"
    CLOSED = "closed"


class Ticket(BaseModel):
    """A support ticket as supplied by the caller. Never mutated."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    text: str
    requester_contact: str | None = None
    created_at: datetime | None = None
    priority_hint: str | None = None

    @property
    def content(self) -> str:
        """Text used for classification."""

        if self.title.strip():
            return f"{self.title}\n{self.text}"
        return self.text


class ClassificationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    intent: str
    sentiment: Sentiment
    urgency: Urgency
    category: str


class KnowledgeMatch(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    content: str
    similarity_score: float = Field(ge=0.0, le=1.0)


class Outcome(BaseModel):
    """Terminal artifact of one workflow execution."""

    model_config = ConfigDict(frozen=True)

    ticket_id: str
    final_status: TicketStatus
    response_text: str
    elapsed_ms: int = Field(ge=0)


class ErrorKind(str, Enum):
    IDEMPOTENCY_MISMATCH = "IdempotencyMismatch"
    UPDATE_ERROR = "UpdateError"
    NOTIFICATION_ERROR = "NotificationError"
    FETCH_ERROR = "FetchError"
    NOT_FOUND = "NotFound"


@dataclass(frozen=True, slots=True)
class OperationError:
    """A failure returned as a value from an activity or the orchestrator."""

    kind: ErrorKind
    message: str

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


def is_error(value: object) -> TypeGuard[OperationError]:
    return isinstance(value, OperationError)


DEFAULT_CLASSIFICATION = ClassificationResult(
    intent="unknown",
    sentiment=Sentiment.NEUTRAL,
    urgency=Urgency.MEDIUM,
    category="general",
)
