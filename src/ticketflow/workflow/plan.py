from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ticketflow.models import TicketStatus


class RoutePath(str, Enum):
    CRITICAL = "critical"
    ELEVATED = "elevated"
    NORMAL = "normal"


@dataclass(frozen=True, slots=True)
class NotifyStep:
    channel: str
    message: str
    key: str


@dataclass(frozen=True, slots=True)
class UpdateStatusStep:
    status: TicketStatus
    key: str


@dataclass(frozen=True, slots=True)
class SearchStep:
    query: str
    limit: int
    key: str


@dataclass(frozen=True, slots=True)
class GenerateStep:
    """Generate a response from the best search match.

    ``fallback_context`` is used when no search ran earlier in the plan or
    the search produced no matches.
    """

    fallback_context: str
    key: str


Step = NotifyStep | UpdateStatusStep | SearchStep | GenerateStep


@dataclass(frozen=True, slots=True)
class CallPlan:
    """Ordered activity calls chosen for one classification.

    ``fixed_response`` is set when the path answers with a canned text
    instead of a generated one. ``awaits_search`` marks the first half of
    the elevated path: the remaining steps depend on the search outcome.
    """

    path: RoutePath
    steps: tuple[Step, ...]
    final_status: TicketStatus
    fixed_response: str | None = None
    awaits_search: bool = False

    def to_json(self) -> dict[str, object]:
        out: dict[str, object] = {
            "path": self.path.value,
            "steps": [_step_to_json(step) for step in self.steps],
            "final_status": self.final_status.value,
        }
        if self.fixed_response is not None:
            out["fixed_response"] = self.fixed_response
        if self.awaits_search:
            out["awaits_search"] = True
        return out


def _step_to_json(step: Step) -> dict[str, object]:
    if isinstance(step, NotifyStep):
        return {"activity": "notify", "channel": step.channel, "key": step.key}
    if isinstance(step, UpdateStatusStep):
        return {"activity": "update_status", "status": step.status.value, "key": step.key}
    if isinstance(step, SearchStep):
        return {
            "activity": "search_knowledge",
            "query": step.query,
            "limit": step.limit,
            "key": step.key,
        }
    return {"activity": "generate_text", "key": step.key}
