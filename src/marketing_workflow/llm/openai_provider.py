"""OpenAI completion provider implementation."""

import logging

from openai import OpenAI

from marketing_workflow.config import LLMConfig
from marketing_workflow.llm.provider import Completion, LLMProvider

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """OpenAI completions API provider."""

    def __init__(self, config: LLMConfig, client: OpenAI | None = None) -> None:
        """Initialize the OpenAI provider.

        Args:
            config: LLM configuration.
            client: Pre-built client (mainly for tests). Built from the API key if omitted.

        Raises:
            ValueError: If API key is not provided.
        """
        if client is None and not config.openai_api_key:
            raise ValueError("OpenAI API key is required (set OPENAI_API_KEY)")

        self.config = config
        self.client = client or OpenAI(api_key=config.openai_api_key)
        self.model = config.openai_model

        logger.info(f"OpenAI provider initialized with model: {self.model}")

    def complete(
        self,
        prompt: str,
        max_tokens: int,
        model: str | None = None,
    ) -> Completion:
        """Generate a completion using the OpenAI completions endpoint.

        API errors are not caught here; they propagate to the workflow runtime.
        """
        logger.debug(f"Generating completion for prompt: {prompt[:100]}...")

        response = self.client.completions.create(
            model=model or self.model,
            prompt=prompt,
            max_tokens=max_tokens,
        )

        text = response.choices[0].text if response.choices else None
        logger.debug(
            f"Generated {len(text or '')} characters",
            extra={"completion_id": response.id},
        )

        return Completion(id=response.id, text=text)

    def close(self) -> None:
        self.client.close()
