"""Persisted per-run step log.

Each run is one JSON file under the runs directory. A step's output is written
together with the run's next state before the following step starts, so a
resumed run can replay recorded outputs instead of repeating completions.

An executor claims a run before executing it. While the claim is held (and its
lease has not expired) no other executor may claim the run, and writes that name
a different owner are rejected.
"""

from __future__ import annotations

import json
import logging
import re
import threading
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from marketing_workflow.errors import RetryBudgetExhausted, RunInProgressError, RunNotFoundError
from marketing_workflow.workflow.state_machine import RunState, is_terminal, transition

logger = logging.getLogger(__name__)

_RUN_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,127}$")


def _utc_iso_now() -> str:
    return datetime.now(tz=UTC).isoformat()


def is_valid_run_id(run_id: str) -> bool:
    return bool(_RUN_ID_RE.fullmatch(run_id))


class StepRecord(BaseModel):
    output: Any
    completed_at: str = Field(default_factory=_utc_iso_now)


class RunRecord(BaseModel):
    run_id: str
    function_id: str
    event: dict[str, Any]
    state: RunState = RunState.PENDING
    steps: dict[str, StepRecord] = Field(default_factory=dict)
    attempts: int = 0

    # Executor currently holding the run, refreshed on every write it makes.
    owner: str | None = None
    claimed_at: str | None = None

    error: str | None = None
    result: dict[str, Any] | None = None

    created_at: str = Field(default_factory=_utc_iso_now)
    updated_at: str = Field(default_factory=_utc_iso_now)

    @property
    def in_progress(self) -> bool:
        return self.owner is not None


@dataclass
class StepLog:
    root: Path
    lease_seconds: float = 600.0

    def __post_init__(self) -> None:
        self._lock = threading.Lock()

    def _path(self, run_id: str) -> Path:
        if not is_valid_run_id(run_id):
            raise ValueError(f"Invalid run id: {run_id!r}")
        return self.root / f"{run_id}.json"

    def _load_unlocked(self, run_id: str) -> RunRecord | None:
        path = self._path(run_id)
        if not path.exists():
            return None
        raw = json.loads(path.read_text(encoding="utf-8"))
        return RunRecord.model_validate(raw)

    def _require_unlocked(self, run_id: str) -> RunRecord:
        record = self._load_unlocked(run_id)
        if record is None:
            raise RunNotFoundError(run_id)
        return record

    def _save_unlocked(self, record: RunRecord) -> RunRecord:
        path = self._path(record.run_id)
        path.parent.mkdir(parents=True, exist_ok=True)
        record = record.model_copy(update={"updated_at": _utc_iso_now()})
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(
            json.dumps(record.model_dump(mode="json"), indent=2, ensure_ascii=False) + "\n",
            encoding="utf-8",
        )
        tmp.replace(path)
        return record

    def _lease_expired(self, record: RunRecord) -> bool:
        if record.claimed_at is None:
            return True
        claimed = datetime.fromisoformat(record.claimed_at)
        return datetime.now(tz=UTC) - claimed > timedelta(seconds=self.lease_seconds)

    def is_claimed(self, record: RunRecord) -> bool:
        """Whether an executor currently holds an unexpired claim on ``record``."""
        return record.in_progress and not self._lease_expired(record)

    def _owned_unlocked(self, run_id: str, owner: str | None) -> RunRecord:
        """Load a run for writing on behalf of ``owner`` and refresh the claim."""
        record = self._require_unlocked(run_id)
        if owner is None:
            return record
        if record.owner != owner:
            raise RunInProgressError(run_id, record.owner)
        return record.model_copy(update={"claimed_at": _utc_iso_now()})

    def get(self, run_id: str) -> RunRecord | None:
        with self._lock:
            return self._load_unlocked(run_id)

    def list(self) -> list[RunRecord]:
        with self._lock:
            if not self.root.exists():
                return []
            records = []
            for path in sorted(self.root.glob("*.json")):
                try:
                    records.append(
                        RunRecord.model_validate_json(path.read_text(encoding="utf-8"))
                    )
                except ValueError:
                    logger.warning("Skipping unreadable step log", extra={"path": str(path)})
            return sorted(records, key=lambda r: r.created_at)

    def create(
        self,
        *,
        run_id: str,
        function_id: str,
        event: dict[str, Any],
        owner: str | None = None,
    ) -> RunRecord:
        """Create a run, claimed by ``owner`` as its first attempt when given."""
        with self._lock:
            if self._load_unlocked(run_id) is not None:
                raise FileExistsError(f"Run already exists: {run_id}")
            record = RunRecord(run_id=run_id, function_id=function_id, event=event)
            if owner is not None:
                record = record.model_copy(
                    update={"owner": owner, "claimed_at": _utc_iso_now(), "attempts": 1}
                )
            return self._save_unlocked(record)

    def claim(self, run_id: str, *, owner: str, max_attempts: int) -> RunRecord:
        """Claim a run for one more attempt.

        Completed runs are returned unchanged and unclaimed.

        Raises:
            RunNotFoundError: No step log exists for ``run_id``.
            RunInProgressError: Another executor holds an unexpired claim.
            RetryBudgetExhausted: The run has already used all of its attempts.
        """
        with self._lock:
            record = self._require_unlocked(run_id)
            if is_terminal(record.state):
                return record
            if self.is_claimed(record):
                raise RunInProgressError(run_id, record.owner)
            if record.attempts >= max_attempts:
                raise RetryBudgetExhausted(run_id, record.attempts)
            if record.in_progress:
                logger.warning(
                    "Taking over run with expired claim",
                    extra={"run_id": run_id, "previous_owner": record.owner},
                )
            return self._save_unlocked(
                record.model_copy(
                    update={
                        "owner": owner,
                        "claimed_at": _utc_iso_now(),
                        "attempts": record.attempts + 1,
                    }
                )
            )

    def transition(self, run_id: str, *, to: RunState, owner: str | None = None) -> RunRecord:
        with self._lock:
            record = self._owned_unlocked(run_id, owner)
            state = transition(current=record.state, to=to)
            return self._save_unlocked(record.model_copy(update={"state": state}))

    def record_step(
        self,
        run_id: str,
        *,
        step_id: str,
        output: Any,
        to: RunState,
        owner: str | None = None,
    ) -> RunRecord:
        """Persist a step's output and move the run to the step's done state."""
        with self._lock:
            record = self._owned_unlocked(run_id, owner)
            state = transition(current=record.state, to=to)
            steps = {**record.steps, step_id: StepRecord(output=output)}
            return self._save_unlocked(
                record.model_copy(update={"state": state, "steps": steps})
            )

    def fail(self, run_id: str, *, error: str, owner: str | None = None) -> RunRecord:
        """Mark a run failed and release its claim.

        Never raises for state reasons: this runs inside failure handlers, where
        the original error must not be replaced.
        """
        with self._lock:
            record = self._require_unlocked(run_id)
            if owner is not None and record.owner != owner:
                logger.warning(
                    "Run is claimed by another executor; failure not recorded",
                    extra={"run_id": run_id, "error": error},
                )
                return record
            if is_terminal(record.state):
                logger.warning(
                    "Completed run cannot be marked failed",
                    extra={"run_id": run_id, "error": error},
                )
                return record
            return self._save_unlocked(
                record.model_copy(
                    update={
                        "state": RunState.FAILED,
                        "error": error,
                        "result": None,
                        "owner": None,
                        "claimed_at": None,
                    }
                )
            )

    def complete(
        self, run_id: str, *, result: dict[str, Any], owner: str | None = None
    ) -> RunRecord:
        with self._lock:
            record = self._owned_unlocked(run_id, owner)
            state = transition(current=record.state, to=RunState.COMPLETE)
            return self._save_unlocked(
                record.model_copy(
                    update={
                        "state": state,
                        "error": None,
                        "result": result,
                        "owner": None,
                        "claimed_at": None,
                    }
                )
            )
