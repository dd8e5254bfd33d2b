"""Process-level composition of the marketing workflow."""

import logging

from marketing_workflow.config import WorkflowSettings
from marketing_workflow.llm.factory import LLMFactory
from marketing_workflow.llm.provider import LLMProvider
from marketing_workflow.storage.results import ResultStore
from marketing_workflow.workflow.events import TriggerEvent
from marketing_workflow.workflow.marketing import register_marketing_plan
from marketing_workflow.workflow.runtime import WorkflowRuntime
from marketing_workflow.workflow.step_log import RunRecord, StepLog

logger = logging.getLogger(__name__)


class MarketingService:
    """Owns the completion provider, step log and runtime for one process.

    The provider is created once here and injected into the workflow; close the
    service at shutdown to release it.
    """

    def __init__(
        self,
        settings: WorkflowSettings | None = None,
        llm: LLMProvider | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            settings: Configuration object. If None, loads from environment.
            llm: Completion provider. If None, built from ``settings.llm``.
        """
        self.settings = settings or WorkflowSettings()

        self.llm: LLMProvider = llm or LLMFactory.create(self.settings.llm)
        self.step_log = StepLog(
            self.settings.runs_dir, lease_seconds=self.settings.run_lease_seconds
        )
        self.results = ResultStore(self.settings.results_file)

        self.runtime = WorkflowRuntime(self.step_log, max_attempts=self.settings.max_attempts)
        register_marketing_plan(
            self.runtime,
            llm=self.llm,
            settings=self.settings,
            results=self.results,
        )

        logger.info(
            "Marketing service initialized",
            extra={"state_path": str(self.settings.state_path)},
        )

    def feature_created(self, feature_input: str, *, event_id: str | None = None) -> TriggerEvent:
        return TriggerEvent(
            name=self.settings.event_name,
            data={"input": feature_input},
            id=event_id,
        )

    def send(
        self,
        feature_input: str,
        *,
        event_id: str | None = None,
        raise_errors: bool = True,
    ) -> list[RunRecord]:
        """Dispatch a feature event and run its workflows to completion."""
        return self.runtime.dispatch(
            self.feature_created(feature_input, event_id=event_id),
            raise_errors=raise_errors,
        )

    def close(self) -> None:
        self.llm.close()
