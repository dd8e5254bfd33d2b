"""Test configuration and fixtures."""

import json
from pathlib import Path
from unittest.mock import Mock

import pytest

from marketing_workflow.config import LLMConfig, WorkflowSettings
from marketing_workflow.llm.provider import Completion, LLMProvider

NIGHTSHIFT: dict[str, str] = {
    "feature_name": "NightShift",
    "headline": "See in the dark",
    "description": "Flip one switch and every screen goes easy on your eyes. Late nights just got better.",
}


@pytest.fixture
def temp_state_dir(tmp_path: Path) -> Path:
    """Provide a temporary state directory."""
    state_dir = tmp_path / ".state"
    state_dir.mkdir()
    return state_dir


@pytest.fixture
def llm_config() -> LLMConfig:
    """Provide a test LLM configuration."""
    return LLMConfig(
        provider="openai",
        openai_api_key="test-key",
        openai_model="gpt-3.5-turbo-instruct",
    )


@pytest.fixture
def settings(temp_state_dir: Path, llm_config: LLMConfig) -> WorkflowSettings:
    """Provide test workflow settings."""
    return WorkflowSettings(
        log_level="DEBUG",
        state_path=temp_state_dir,
        llm=llm_config,
    )


@pytest.fixture
def nightshift() -> dict[str, str]:
    return dict(NIGHTSHIFT)


@pytest.fixture
def branding_completion() -> Completion:
    return Completion(id="cmpl-branding", text=json.dumps(NIGHTSHIFT))


@pytest.fixture
def blog_completion() -> Completion:
    return Completion(id="cmpl-blog", text="Full blog text...")


@pytest.fixture
def mock_llm(branding_completion: Completion, blog_completion: Completion) -> Mock:
    """A completion provider answering the branding step, then the blog post step."""
    llm = Mock(spec=LLMProvider)
    llm.complete.side_effect = [branding_completion, blog_completion]
    return llm
