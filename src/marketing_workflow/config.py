"""Configuration for the feature marketing workflow.

Settings are loaded from environment variables and a local `.env` file (if present).

The completion provider credential is read from `OPENAI_API_KEY` so the service can
share the key conventionally exported for other OpenAI tooling.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

FEATURE_CREATED_EVENT = "feature.created"


class LLMConfig(BaseSettings):
    """Configuration for completion providers."""

    provider: Literal["openai", "llama"] = Field(
        default="openai",
        description="Completion provider to use",
    )

    # OpenAI settings
    openai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("openai_api_key", "OPENAI_API_KEY"),
        description="OpenAI API key",
    )
    openai_model: str = Field(
        default="gpt-3.5-turbo-instruct",
        description="Model served by the OpenAI completions endpoint",
    )

    # LLaMA settings
    llama_model_path: Path | None = Field(
        default=None,
        description="Path to LLaMA model file",
    )
    llama_n_ctx: int = Field(
        default=4096,
        gt=0,
        description="Context window size for LLaMA",
    )
    llama_n_threads: int | None = Field(
        default=None,
        description="Number of threads for LLaMA (None = auto)",
    )

    model_config = SettingsConfigDict(
        env_prefix="MARKETING_LLM_",
        env_file=".env",
        extra="ignore",
    )


class WorkflowSettings(BaseSettings):
    """Main configuration for the marketing workflow.

    Environment variables use the ``MARKETING_`` prefix, e.g. ``MARKETING_LOG_LEVEL``
    or ``MARKETING_PERSIST_RESULTS``.
    """

    log_level: str = Field(
        default="INFO",
        description="Root logging level",
    )
    log_format: Literal["json", "text"] = Field(
        default="json",
        description="Log record format: one JSON object per line, or plain text",
    )

    state_path: Path = Field(
        default=Path(".state"),
        description="Directory holding run step logs and saved results",
    )

    event_name: str = Field(
        default=FEATURE_CREATED_EVENT,
        description="Event name that triggers the marketing plan workflow",
    )

    branding_max_tokens: int = Field(
        default=256,
        gt=0,
        description="Completion budget for the branding step",
    )
    blog_post_max_tokens: int = Field(
        default=1024,
        gt=0,
        description="Completion budget for the blog post step",
    )

    malformed_response_policy: Literal["fail", "reprompt"] = Field(
        default="fail",
        description=(
            "What to do when the branding completion is not the expected JSON object. "
            "'fail' raises immediately; 'reprompt' asks the model to correct its output."
        ),
    )
    max_reprompts: int = Field(
        default=1,
        ge=0,
        le=5,
        description="Correction prompts issued before giving up (reprompt policy only)",
    )

    allow_empty_blog_post: bool = Field(
        default=False,
        description="Accept an empty blog post completion instead of failing the step",
    )

    persist_results: bool = Field(
        default=False,
        description="Save each completed feature to the local results store",
    )

    max_attempts: int = Field(
        default=4,
        ge=1,
        description="Maximum number of executions (first run plus resumes) per run",
    )
    run_lease_seconds: float = Field(
        default=600.0,
        gt=0,
        description=(
            "How long an execution's claim on a run stays valid without progress. "
            "After that another execution may take the run over."
        ),
    )

    llm: LLMConfig = Field(
        default_factory=LLMConfig,
        description="Completion provider configuration",
    )

    model_config = SettingsConfigDict(
        env_prefix="MARKETING_",
        env_file=".env",
        extra="ignore",
    )

    @property
    def runs_dir(self) -> Path:
        """Directory where per-run step logs are persisted."""

        return self.state_path / "runs"

    @property
    def results_file(self) -> Path:
        """Path where saved feature records are persisted."""

        return self.state_path / "features.json"
