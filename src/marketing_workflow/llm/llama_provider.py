"""Local LLaMA completion provider implementation."""

import logging

from marketing_workflow.config import LLMConfig
from marketing_workflow.llm.provider import Completion, LLMProvider

logger = logging.getLogger(__name__)


class LLaMAProvider(LLMProvider):
    """Local LLaMA model provider implementation.

    Requires llama-cpp-python to be installed:
        pip install "marketing-workflow[llama]"
    """

    def __init__(self, config: LLMConfig) -> None:
        """Initialize the LLaMA provider.

        Args:
            config: LLM configuration.

        Raises:
            ValueError: If model path is not provided.
            ImportError: If llama-cpp-python is not installed.
        """
        if not config.llama_model_path:
            raise ValueError("LLaMA model path is required")

        try:
            from llama_cpp import Llama
        except ImportError as e:
            raise ImportError(
                "llama-cpp-python is required for LLaMA provider. "
                "Install it with: pip install llama-cpp-python"
            ) from e

        self.config = config

        logger.info(f"Loading LLaMA model from: {config.llama_model_path}")

        self.llm = Llama(
            model_path=str(config.llama_model_path),
            n_ctx=config.llama_n_ctx,
            n_threads=config.llama_n_threads,
            verbose=False,
        )

        logger.info("LLaMA model loaded successfully")

    def complete(
        self,
        prompt: str,
        max_tokens: int,
        model: str | None = None,
    ) -> Completion:
        """Generate a completion using the local LLaMA model.

        ``model`` is ignored: the loaded model file is the model.
        """
        logger.debug(f"Generating completion for prompt: {prompt[:100]}...")

        result = self.llm(prompt, max_tokens=max_tokens)

        choices = result.get("choices") or []
        text = choices[0].get("text") if choices else None
        logger.debug(f"Generated {len(text or '')} characters")

        return Completion(id=str(result.get("id", "")), text=text)
