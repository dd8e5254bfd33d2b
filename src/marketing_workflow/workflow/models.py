"""Pydantic models for step outputs and the workflow result.

Serialized with ``by_alias=True`` these use the camelCase keys consumers of the
workflow result expect (``completionId``, ``featureBranding``, ``blogPost``).
"""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field


class BrandingCopy(BaseModel):
    """The JSON object the branding prompt asks the model to return."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    feature_name: str
    headline: str
    description: str


class BrandingResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    completion_id: str = Field(alias="completionId")
    result: BrandingCopy


class BlogPost(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    completion_id: str = Field(alias="completionId")
    result: str | None = None


class WorkflowResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    feature_branding: BrandingResult = Field(alias="featureBranding")
    blog_post: BlogPost = Field(alias="blogPost")


class FeatureRecord(BaseModel):
    """A completed feature announcement, as written to the results store."""

    run_id: str
    input: str
    name: str
    title: str
    description: str
    blog_post: str | None = None
    created_at: str = Field(default_factory=lambda: datetime.now(tz=UTC).isoformat())
