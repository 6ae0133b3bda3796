"""CLI entrypoint for the ticket workflow."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from pydantic import ValidationError

from ticketflow import __version__
from ticketflow.activities.factory import ActivityFactory
from ticketflow.activities.ticketing import SAMPLE_TICKETS
from ticketflow.core.config import WorkflowSettings
from ticketflow.models import OperationError, Outcome, is_error
from ticketflow.orchestrator.logging import configure_logging
from ticketflow.orchestrator.ticket_workflow import TicketWorkflow

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ticketflow",
        description="Deterministic ticket-resolution workflow with idempotent activities",
    )
    parser.add_argument("--version", action="version", version=f"ticketflow {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    process = subparsers.add_parser("process", help="Process a ticket given its id and text")
    process.add_argument("--ticket-id", required=True, help="Ticket identifier")
    process.add_argument("--text", required=True, help="Ticket text")

    resolve = subparsers.add_parser(
        "resolve", help="Fetch a ticket from the sample repository and process it"
    )
    resolve.add_argument("--ticket-id", required=True, help="Ticket identifier, e.g. TICKET-001")

    subparsers.add_parser("samples", help="List the sample tickets available to 'resolve'")

    return parser


def _emit(result: Outcome | OperationError) -> int:
    if is_error(result):
        print(
            json.dumps({"error": {"kind": result.kind.value, "message": result.message}}),
            file=sys.stderr,
        )
        return 1
    print(result.model_dump_json(indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "samples":
        for ticket in SAMPLE_TICKETS:
            print(f"{ticket.id}\t{ticket.title}")
        return 0

    try:
        settings = WorkflowSettings()
        activities = ActivityFactory.create(settings)
    except (ValidationError, ValueError) as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.effective_log_level, stream=sys.stderr)
    workflow = TicketWorkflow(activities)

    if args.command == "process":
        return _emit(workflow.process_ticket(args.ticket_id, args.text))

    if args.command == "resolve":
        return _emit(workflow.resolve(args.ticket_id))

    logger.error("Unknown command", extra={"command": args.command})
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
