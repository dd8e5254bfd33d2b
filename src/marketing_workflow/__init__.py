"""Feature marketing workflow.

When a feature is announced, brand it and draft its launch blog post:
- configuration loaded from `.env`
- structured logging
- durable, resumable step execution with a local JSON step log
"""

__version__ = "0.1.0"

from marketing_workflow.config import WorkflowSettings

__all__ = ["__version__", "WorkflowSettings"]
