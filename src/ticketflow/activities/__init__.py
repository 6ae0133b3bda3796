"""Activity contract layer and its default effect providers."""

from ticketflow.activities.contract import (
    FALLBACK_RESPONSE,
    MIN_SIMILARITY,
    Activities,
    ActivityCancelled,
)
from ticketflow.activities.factory import ActivityFactory

__all__ = [
    "FALLBACK_RESPONSE",
    "MIN_SIMILARITY",
    "Activities",
    "ActivityCancelled",
    "ActivityFactory",
]
