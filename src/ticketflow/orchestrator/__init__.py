"""Workflow orchestration: execution driver, CLI and logging setup."""

from ticketflow.orchestrator.ticket_workflow import TicketWorkflow

__all__ = ["TicketWorkflow"]
