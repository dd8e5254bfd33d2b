"""Pydantic models for the REST server."""

from __future__ import annotations

from pydantic import BaseModel, Field


class EventRequest(BaseModel):
    name: str
    data: dict[str, object] = Field(default_factory=dict)
    id: str | None = None


class EventAccepted(BaseModel):
    ids: list[str] = Field(default_factory=list)
