"""Core package initialization."""

from ticketflow.core.config import ProviderConfig, StoreConfig, WorkflowSettings

__all__ = [
    "ProviderConfig",
    "StoreConfig",
    "WorkflowSettings",
]
