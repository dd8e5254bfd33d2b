"""FastAPI app factory.

Endpoints are intentionally thin wrappers over the marketing service. Accepted
events are executed after the response is sent; clients poll the run endpoint.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import BackgroundTasks, FastAPI, HTTPException

from marketing_workflow import __version__
from marketing_workflow.config import WorkflowSettings
from marketing_workflow.errors import InvalidEventError, RetryBudgetExhausted, RunInProgressError
from marketing_workflow.llm.provider import LLMProvider
from marketing_workflow.server.models import EventAccepted, EventRequest
from marketing_workflow.service import MarketingService
from marketing_workflow.workflow.events import TriggerEvent, feature_input
from marketing_workflow.workflow.state_machine import is_terminal
from marketing_workflow.workflow.step_log import RunRecord, is_valid_run_id

logger = logging.getLogger(__name__)


def create_app(
    settings: WorkflowSettings | None = None, llm: LLMProvider | None = None
) -> FastAPI:
    service = MarketingService(settings, llm=llm)

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        service.close()

    app = FastAPI(
        title="Feature Marketing Workflow",
        version=__version__,
        description="Event ingestion and run status for the feature marketing workflow.",
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    # Expose the service for request handlers that want to read it.
    app.state.service = service

    def _run_in_background(run_id: str) -> None:
        try:
            service.runtime.resume(run_id, raise_errors=False)
        except (RetryBudgetExhausted, RunInProgressError) as e:
            logger.warning(str(e), extra={"run_id": run_id})

    def _get_run_or_404(run_id: str) -> RunRecord:
        record = service.step_log.get(run_id) if is_valid_run_id(run_id) else None
        if record is None:
            raise HTTPException(status_code=404, detail="Run not found")
        return record

    def _schedulable(record: RunRecord) -> bool:
        return not is_terminal(record.state) and not service.step_log.is_claimed(record)

    @app.get("/api/health")
    def health() -> dict[str, object]:
        return {
            "status": "ok",
            "version": __version__,
            "functions": [f.id for f in service.runtime.functions],
        }

    @app.post("/api/events", response_model=EventAccepted, status_code=202)
    def send_event(req: EventRequest, background: BackgroundTasks) -> EventAccepted:
        try:
            event = TriggerEvent.from_json(req.model_dump())
            if event.name == service.settings.event_name:
                feature_input(event)
        except InvalidEventError as e:
            raise HTTPException(status_code=422, detail=str(e)) from e

        records = service.runtime.start(event)
        for record in records:
            if _schedulable(record):
                background.add_task(_run_in_background, record.run_id)

        logger.info(
            "Event accepted",
            extra={"event_name": event.name, "run_ids": [r.run_id for r in records]},
        )
        return EventAccepted(ids=[r.run_id for r in records])

    @app.get("/api/runs", response_model=list[RunRecord])
    def list_runs() -> list[RunRecord]:
        return service.step_log.list()

    @app.get("/api/runs/{run_id}", response_model=RunRecord)
    def get_run(run_id: str) -> RunRecord:
        return _get_run_or_404(run_id)

    @app.post("/api/runs/{run_id}/resume", response_model=RunRecord, status_code=202)
    def resume_run(run_id: str, background: BackgroundTasks) -> RunRecord:
        record = _get_run_or_404(run_id)
        if is_terminal(record.state):
            return record
        if service.step_log.is_claimed(record):
            raise HTTPException(status_code=409, detail=f"Run {run_id} is already executing")
        if record.attempts >= service.runtime.max_attempts:
            raise HTTPException(
                status_code=409,
                detail=f"Run {run_id} failed after {record.attempts} attempts",
            )
        background.add_task(_run_in_background, run_id)
        return record

    return app
