"""FastAPI server adapter for the marketing workflow.

This module exposes event ingestion and run inspection over HTTP.

Design intent:
- Keep workflow logic in `marketing_workflow.workflow.*`
- Keep server-specific concerns (routing, background execution) here
"""

from __future__ import annotations

__all__ = ["create_app"]

from marketing_workflow.server.app import create_app
