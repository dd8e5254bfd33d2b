"""Completion provider selection."""

import logging
from collections.abc import Callable

from marketing_workflow.config import LLMConfig
from marketing_workflow.llm.llama_provider import LLaMAProvider
from marketing_workflow.llm.openai_provider import OpenAIProvider
from marketing_workflow.llm.provider import LLMProvider

logger = logging.getLogger(__name__)

ProviderBuilder = Callable[[LLMConfig], LLMProvider]

_PROVIDERS: dict[str, ProviderBuilder] = {
    "openai": OpenAIProvider,
    "llama": LLaMAProvider,
}


class LLMFactory:
    """Builds the process's single completion provider from configuration."""

    @staticmethod
    def supported() -> list[str]:
        return sorted(_PROVIDERS)

    @staticmethod
    def create(config: LLMConfig) -> LLMProvider:
        """Create the provider named by ``config.provider``.

        Raises:
            ValueError: The provider is unknown, or its configuration is incomplete.
        """
        builder = _PROVIDERS.get(config.provider)
        if builder is None:
            raise ValueError(
                f"Unsupported LLM provider: {config.provider!r} "
                f"(expected one of: {', '.join(LLMFactory.supported())})"
            )

        provider = builder(config)
        logger.info(
            "Completion provider ready",
            extra={"provider": config.provider, "provider_class": type(provider).__name__},
        )
        return provider
