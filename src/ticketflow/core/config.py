"""Core configuration for the ticket workflow."""

import logging
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ProviderConfig(BaseSettings):
    """Configuration for the effect providers behind the activities."""

    kind: Literal["heuristic", "openai"] = Field(
        default="heuristic",
        description="Provider stack used for classification and text generation",
    )

    # OpenAI settings
    openai_api_key: str | None = Field(
        default=None,
        description="OpenAI API key",
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        description="OpenAI model to use",
    )
    openai_temperature: float = Field(
        default=0.0,
        ge=0.0,
        le=2.0,
        description="Temperature for OpenAI model",
    )

    model_config = SettingsConfigDict(
        env_prefix="TICKETFLOW_PROVIDER_",
        env_file=".env",
        extra="ignore",
    )


class StoreConfig(BaseSettings):
    """Configuration for the idempotency store."""

    backend: Literal["memory", "json"] = Field(
        default="memory",
        description="Idempotency store backend",
    )
    path: Path = Field(
        default=Path(".state/idempotency.json"),
        description="File used by the json backend",
    )

    model_config = SettingsConfigDict(
        env_prefix="TICKETFLOW_STORE_",
        env_file=".env",
        extra="ignore",
    )


class WorkflowSettings(BaseSettings):
    """Main configuration for the ticket workflow."""

    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    provider: ProviderConfig = Field(
        default_factory=ProviderConfig,
        description="Provider configuration",
    )
    store: StoreConfig = Field(
        default_factory=StoreConfig,
        description="Idempotency store configuration",
    )

    model_config = SettingsConfigDict(
        env_prefix="TICKETFLOW_",
        env_file=".env",
        extra="ignore",
    )

    @property
    def effective_log_level(self) -> str:
        """Log level after applying the debug switch."""
        if self.debug:
            return "DEBUG"
        level = self.log_level.upper()
        if not isinstance(logging.getLevelName(level), int):
            return "INFO"
        return level
