#!/usr/bin/env python3
"""Programmatic workflow example.

This demonstrates using the workflow components directly:

* load settings from `.env`
* build the activity layer with a JSON-backed idempotency store
* run every sample ticket through the workflow, twice

The second pass replays recorded results, so no notification or status
update is performed again.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Sequence

from ticketflow.activities.factory import ActivityFactory
from ticketflow.activities.ticketing import SAMPLE_TICKETS
from ticketflow.core.config import WorkflowSettings
from ticketflow.idempotency import JsonFileIdempotencyStore
from ticketflow.models import is_error
from ticketflow.orchestrator.logging import configure_logging
from ticketflow.orchestrator.ticket_workflow import TicketWorkflow


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the sample tickets (programmatic example).")
    parser.add_argument(
        "--state-file",
        type=Path,
        default=Path(".state/example-idempotency.json"),
        help="Where recorded activity results are kept",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = WorkflowSettings()
    configure_logging(settings.effective_log_level)

    store = JsonFileIdempotencyStore(args.state_file)
    workflow = TicketWorkflow(ActivityFactory.create(settings, store=store))

    for attempt in (1, 2):
        print(f"--- pass {attempt} ---")
        for ticket in SAMPLE_TICKETS:
            result = workflow.process(ticket)
            if is_error(result):
                print(f"{ticket.id}: {result}")
                continue
            print(f"{ticket.id}: {result.final_status.value}")

    print(f"Recorded results persisted to: {args.state_file}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
