"""A small durable runtime for event-triggered workflows.

Functions are registered for an event name. Dispatching an event creates one run
per registered function, backed by a step log. Handlers sequence their work through
``Step.run``; a step whose output is already recorded is not executed again, so
resuming a failed run only repeats the steps that never finished.

The runtime has no retry loop. A failed run stays failed until it is resumed
explicitly, and the number of executions per run is capped. Every execution
claims its run in the step log first, so a run is never executed twice at once.
"""

from __future__ import annotations

import logging
import os
import socket
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from pydantic import BaseModel

from marketing_workflow.errors import RunInProgressError, RunNotFoundError
from marketing_workflow.workflow.events import TriggerEvent
from marketing_workflow.workflow.state_machine import RunState
from marketing_workflow.workflow.step_log import RunRecord, StepLog

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True, slots=True)
class RunContext:
    run_id: str
    event: TriggerEvent
    attempt: int



class Step:
    """Memoizing step executor bound to one claimed run."""

    def __init__(self, step_log: StepLog, run_id: str, owner: str | None = None) -> None:
        self._log = step_log
        self._run_id = run_id
        self._owner = owner

    def run(
        self,
        step_id: str,
        fn: Callable[[], M],
        *,
        model: type[M],
        running: RunState,
        done: RunState,
    ) -> M:
        """Execute ``fn`` once per run and return its (possibly recorded) output.

        Args:
            step_id: Stable name of the step within the function.
            fn: Zero-argument callable producing the step output.
            model: Model used to rehydrate a recorded output.
            running: Run state while the step executes.
            done: Run state once the output is recorded.
        """
        record = self._log.get(self._run_id)
        if record is None:
            raise RunNotFoundError(self._run_id)

        recorded = record.steps.get(step_id)
        if recorded is not None:
            logger.info(
                "Reusing recorded step output",
                extra={"run_id": self._run_id, "step_id": step_id},
            )
            return model.model_validate(recorded.output)

        # An interrupted run may already be in this step's running state.
        if record.state is not running:
            self._log.transition(self._run_id, to=running, owner=self._owner)

        logger.info("Running step", extra={"run_id": self._run_id, "step_id": step_id})
        output = fn()

        self._log.record_step(
            self._run_id,
            step_id=step_id,
            output=output.model_dump(mode="json", by_alias=True),
            to=done,
            owner=self._owner,
        )
        return output


Handler = Callable[[RunContext, Step], BaseModel]


@dataclass(frozen=True, slots=True)
class WorkflowFunction:
    id: str
    name: str
    event: str
    handler: Handler


class WorkflowRuntime:
    def __init__(self, step_log: StepLog, *, max_attempts: int = 4) -> None:
        self.step_log = step_log
        self.max_attempts = max_attempts
        self.instance_id = f"{socket.gethostname()}:{os.getpid()}"
        self._functions: dict[str, WorkflowFunction] = {}

    @property
    def functions(self) -> list[WorkflowFunction]:
        return list(self._functions.values())

    def register(self, function: WorkflowFunction) -> WorkflowFunction:
        if function.id in self._functions:
            raise ValueError(f"Function already registered: {function.id}")
        self._functions[function.id] = function
        logger.info(
            "Function registered",
            extra={"function_id": function.id, "trigger_event": function.event},
        )
        return function

    def create_function(
        self, *, fn_id: str, name: str, event: str
    ) -> Callable[[Handler], WorkflowFunction]:
        """Decorator registering ``handler`` to run whenever ``event`` is dispatched."""

        def decorator(handler: Handler) -> WorkflowFunction:
            return self.register(
                WorkflowFunction(id=fn_id, name=name, event=event, handler=handler)
            )

        return decorator

    def dispatch(self, event: TriggerEvent, *, raise_errors: bool = True) -> list[RunRecord]:
        """Start one run per function registered for ``event.name``.

        An event carrying an ``id`` maps to deterministic run ids, so delivering it
        again resumes the existing runs instead of starting new ones. A run that is
        still executing is returned as it stands.
        """
        targets = [f for f in self._functions.values() if f.event == event.name]
        if not targets:
            logger.warning("No functions registered for event", extra={"event_name": event.name})
            return []

        records = []
        for function in targets:
            run_id = self._run_id_for(function, event)
            owner = self._new_owner()
            try:
                record = self.step_log.create(
                    run_id=run_id, function_id=function.id, event=event.to_json(), owner=owner
                )
            except FileExistsError:
                logger.info("Event already delivered", extra={"run_id": run_id})
                try:
                    records.append(self.resume(run_id, raise_errors=raise_errors))
                except RunInProgressError:
                    logger.info("Run is already executing", extra={"run_id": run_id})
                    records.append(self._require(run_id))
                continue

            records.append(self._execute(function, record, owner, raise_errors=raise_errors))
        return records

    def start(self, event: TriggerEvent) -> list[RunRecord]:
        """Create pending, unclaimed runs for ``event`` without executing them."""
        records = []
        for function in self._functions.values():
            if function.event != event.name:
                continue
            run_id = self._run_id_for(function, event)
            try:
                record = self.step_log.create(
                    run_id=run_id, function_id=function.id, event=event.to_json()
                )
            except FileExistsError:
                record = self._require(run_id)
            records.append(record)
        return records

    def resume(self, run_id: str, *, raise_errors: bool = True) -> RunRecord:
        """Continue a run from its step log.

        Completed runs are returned unchanged.

        Raises:
            RunNotFoundError: No step log exists for ``run_id``.
            RunInProgressError: Another execution holds the run.
            RetryBudgetExhausted: The run has already used all of its attempts.
        """
        owner = self._new_owner()
        record = self.step_log.claim(run_id, owner=owner, max_attempts=self.max_attempts)
        if record.owner != owner:
            return record

        function = self._functions.get(record.function_id)
        if function is None:
            self.step_log.fail(run_id, error="No function registered", owner=owner)
            raise ValueError(f"No function registered with id: {record.function_id}")
        return self._execute(function, record, owner, raise_errors=raise_errors)

    def _execute(
        self,
        function: WorkflowFunction,
        record: RunRecord,
        owner: str,
        *,
        raise_errors: bool,
    ) -> RunRecord:
        run_id = record.run_id
        log_extra = {"run_id": run_id, "function_id": function.id, "attempt": record.attempts}
        logger.info("Run started", extra=log_extra)

        try:
            event = TriggerEvent.from_json(record.event)
            output = function.handler(
                RunContext(run_id=run_id, event=event, attempt=record.attempts),
                Step(self.step_log, run_id, owner),
            )
        except Exception as e:
            logger.exception("Run failed", extra=log_extra)
            record = self.step_log.fail(run_id, error=f"{type(e).__name__}: {e}", owner=owner)
            if raise_errors:
                raise
            return record

        record = self.step_log.complete(
            run_id, result=output.model_dump(mode="json", by_alias=True), owner=owner
        )
        logger.info("Run completed", extra=log_extra)
        return record

    def _require(self, run_id: str) -> RunRecord:
        record = self.step_log.get(run_id)
        if record is None:
            raise RunNotFoundError(run_id)
        return record

    def _new_owner(self) -> str:
        return f"{self.instance_id}:{uuid.uuid4().hex[:12]}"

    @staticmethod
    def _run_id_for(function: WorkflowFunction, event: TriggerEvent) -> str:
        suffix = event.id or uuid.uuid4().hex
        return f"{function.id}-{suffix}"
