"""Unit tests for completion providers."""

from types import SimpleNamespace
from unittest.mock import Mock

import pytest

from marketing_workflow.config import LLMConfig
from marketing_workflow.llm.factory import LLMFactory
from marketing_workflow.llm.llama_provider import LLaMAProvider
from marketing_workflow.llm.openai_provider import OpenAIProvider
from marketing_workflow.llm.provider import Completion


def _response(completion_id: str, *texts: str) -> SimpleNamespace:
    return SimpleNamespace(id=completion_id, choices=[SimpleNamespace(text=t) for t in texts])


def test_openai_provider_requires_api_key() -> None:
    with pytest.raises(ValueError, match="API key"):
        OpenAIProvider(LLMConfig(openai_api_key=None))


def test_openai_provider_calls_completions_endpoint(llm_config: LLMConfig) -> None:
    client = Mock()
    client.completions.create.return_value = _response("cmpl-1", "Hello")
    provider = OpenAIProvider(llm_config, client=client)

    completion = provider.complete("Say hello", max_tokens=16)

    assert completion == Completion(id="cmpl-1", text="Hello")
    client.completions.create.assert_called_once_with(
        model="gpt-3.5-turbo-instruct",
        prompt="Say hello",
        max_tokens=16,
    )


def test_openai_provider_model_override(llm_config: LLMConfig) -> None:
    client = Mock()
    client.completions.create.return_value = _response("cmpl-2", "x")
    provider = OpenAIProvider(llm_config, client=client)

    provider.complete("p", max_tokens=1, model="davinci-002")

    assert client.completions.create.call_args.kwargs["model"] == "davinci-002"


def test_openai_provider_without_choices_returns_no_text(llm_config: LLMConfig) -> None:
    client = Mock()
    client.completions.create.return_value = _response("cmpl-3")
    provider = OpenAIProvider(llm_config, client=client)

    assert provider.complete("p", max_tokens=1) == Completion(id="cmpl-3", text=None)


def test_openai_provider_errors_propagate(llm_config: LLMConfig) -> None:
    client = Mock()
    client.completions.create.side_effect = RuntimeError("rate limited")
    provider = OpenAIProvider(llm_config, client=client)

    with pytest.raises(RuntimeError, match="rate limited"):
        provider.complete("p", max_tokens=1)


def test_factory_creates_openai_provider(llm_config: LLMConfig) -> None:
    provider = LLMFactory.create(llm_config)

    assert isinstance(provider, OpenAIProvider)
    assert provider.model == "gpt-3.5-turbo-instruct"


def test_llama_provider_requires_model_path() -> None:
    with pytest.raises(ValueError, match="model path"):
        LLaMAProvider(LLMConfig(provider="llama"))


def test_factory_rejects_unknown_provider() -> None:
    config = LLMConfig.model_construct(provider="bogus")

    with pytest.raises(ValueError, match="expected one of: llama, openai"):
        LLMFactory.create(config)


def test_factory_lists_supported_providers() -> None:
    assert LLMFactory.supported() == ["llama", "openai"]
