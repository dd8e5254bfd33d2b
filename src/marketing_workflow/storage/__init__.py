"""Local persistence for completed feature announcements."""

from marketing_workflow.storage.results import ResultStore

__all__ = ["ResultStore"]
