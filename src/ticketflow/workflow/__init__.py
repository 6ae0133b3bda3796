"""Routing engine for the ticket workflow.

The engine is a set of pure functions producing explicit call plans:
- which path a classification selects (critical, elevated, normal)
- the ordered activity calls of that path
- the continuation of the elevated path once the search outcome is known

Keeping this free of I/O is what makes workflow replay deterministic.
"""

from ticketflow.workflow.plan import (
    CallPlan,
    GenerateStep,
    NotifyStep,
    RoutePath,
    SearchStep,
    Step,
    UpdateStatusStep,
)
from ticketflow.workflow.routing import (
    CONSTANTS,
    RoutingConstants,
    best_match,
    idempotency_key,
    plan_after_search,
    plan_route,
    select_path,
)

__all__ = [
    "CONSTANTS",
    "CallPlan",
    "GenerateStep",
    "NotifyStep",
    "RoutePath",
    "RoutingConstants",
    "SearchStep",
    "Step",
    "UpdateStatusStep",
    "best_match",
    "idempotency_key",
    "plan_after_search",
    "plan_route",
    "select_path",
]
