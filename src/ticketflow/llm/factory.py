"""Factory for creating LLM providers."""

import logging

from ticketflow.core.config import ProviderConfig
from ticketflow.llm.openai_provider import OpenAIProvider
from ticketflow.llm.provider import LLMProvider

logger = logging.getLogger(__name__)


class LLMFactory:
    """Factory for creating LLM provider instances."""

    @staticmethod
    def create(config: ProviderConfig) -> LLMProvider:
        """Create an LLM provider based on configuration.

        Args:
            config: Provider configuration specifying the backend.

        Returns:
            Configured LLM provider instance.

        Raises:
            ValueError: If the configured provider is not model-backed.
        """
        logger.info(f"Creating LLM provider: {config.kind}")

        if config.kind == "openai":
            return OpenAIProvider(config)
        else:
            raise ValueError(f"Provider kind {config.kind!r} is not backed by an LLM")
