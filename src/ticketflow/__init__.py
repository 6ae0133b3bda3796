"""Ticketflow.

A deterministic ticket-resolution workflow built on idempotent activities:
- a pure routing engine that turns a classification into a call plan
- an activity layer whose effects are gated by an idempotency store
- an orchestrator that executes the plan and assembles the outcome
"""

__version__ = "0.1.0"

from ticketflow.core.config import WorkflowSettings

__all__ = ["__version__", "WorkflowSettings"]
