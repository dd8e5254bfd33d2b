"""Abstract base class for completion providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Completion:
    """One response from a text-completion call.

    ``text`` is None when the provider returned no choices or an empty choice.
    """

    id: str
    text: str | None


class LLMProvider(ABC):
    """Abstract base class for completion providers.

    This interface allows pluggable backends (OpenAI, LLaMA, etc.)
    """

    @abstractmethod
    def complete(
        self,
        prompt: str,
        max_tokens: int,
        model: str | None = None,
    ) -> Completion:
        """Generate a text completion from a prompt.

        Args:
            prompt: The input prompt.
            max_tokens: Maximum tokens to generate.
            model: Model override. Defaults to the configured model.

        Returns:
            The completion text and its provider-assigned identifier.
        """
        pass

    def close(self) -> None:
        """Release any resources held by the provider."""
