"""Unit tests for the persisted step log."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from marketing_workflow.errors import (
    IllegalTransitionError,
    RetryBudgetExhausted,
    RunInProgressError,
    RunNotFoundError,
)
from marketing_workflow.workflow.state_machine import RunState
from marketing_workflow.workflow.step_log import StepLog

EVENT = {"name": "feature.created", "data": {"input": "Dark mode"}}


def _edit_on_disk(root: Path, run_id: str, **changes: Any) -> None:
    path = root / f"{run_id}.json"
    raw = json.loads(path.read_text(encoding="utf-8"))
    raw.update(changes)
    path.write_text(json.dumps(raw), encoding="utf-8")


def test_step_log_roundtrip(tmp_path: Path) -> None:
    log = StepLog(tmp_path / "runs")
    assert log.get("run-1") is None
    assert log.list() == []

    log.create(run_id="run-1", function_id="fn", event=EVENT)
    log.transition("run-1", to=RunState.BRANDING_RUNNING)
    log.record_step(
        "run-1", step_id="branding", output={"completionId": "c1"}, to=RunState.BRANDING_DONE
    )

    # A fresh instance sees the same record on disk.
    loaded = StepLog(tmp_path / "runs").get("run-1")
    assert loaded is not None
    assert loaded.state is RunState.BRANDING_DONE
    assert loaded.event == EVENT
    assert loaded.steps["branding"].output == {"completionId": "c1"}
    assert [r.run_id for r in log.list()] == ["run-1"]


def test_create_rejects_duplicate_run(tmp_path: Path) -> None:
    log = StepLog(tmp_path)
    log.create(run_id="run-1", function_id="fn", event=EVENT)

    with pytest.raises(FileExistsError):
        log.create(run_id="run-1", function_id="fn", event=EVENT)


def test_record_step_enforces_transitions(tmp_path: Path) -> None:
    log = StepLog(tmp_path)
    log.create(run_id="run-1", function_id="fn", event=EVENT)

    with pytest.raises(IllegalTransitionError):
        log.record_step("run-1", step_id="blog", output="x", to=RunState.BLOG_POST_DONE)

    record = log.get("run-1")
    assert record is not None
    assert record.steps == {}


def test_fail_and_complete(tmp_path: Path) -> None:
    log = StepLog(tmp_path)
    log.create(run_id="run-1", function_id="fn", event=EVENT)
    log.transition("run-1", to=RunState.BRANDING_RUNNING)

    failed = log.fail("run-1", error="EmptyCompletionError: boom")
    assert failed.state is RunState.FAILED
    assert failed.error == "EmptyCompletionError: boom"

    # Failing an already failed run only replaces the error.
    assert log.fail("run-1", error="again").error == "again"


def test_unknown_and_invalid_run_ids(tmp_path: Path) -> None:
    log = StepLog(tmp_path)

    with pytest.raises(RunNotFoundError):
        log.transition("missing", to=RunState.BRANDING_RUNNING)
    with pytest.raises(ValueError):
        log.get("../escape")


def test_fail_never_overwrites_a_completed_run(tmp_path: Path) -> None:
    log = StepLog(tmp_path)
    log.create(run_id="run-1", function_id="fn", event=EVENT)
    for state in (
        RunState.BRANDING_RUNNING,
        RunState.BRANDING_DONE,
        RunState.BLOG_POST_RUNNING,
        RunState.BLOG_POST_DONE,
    ):
        log.transition("run-1", to=state)
    log.complete("run-1", result={"ok": True})

    record = log.fail("run-1", error="late failure")

    assert record.state is RunState.COMPLETE
    assert record.error is None
    assert record.result == {"ok": True}


def test_fail_between_steps(tmp_path: Path) -> None:
    log = StepLog(tmp_path)
    log.create(run_id="run-1", function_id="fn", event=EVENT)
    log.transition("run-1", to=RunState.BRANDING_RUNNING)
    log.record_step("run-1", step_id="branding", output={}, to=RunState.BRANDING_DONE)

    record = log.fail("run-1", error="KeyError: 'headline'")

    assert record.state is RunState.FAILED
    assert record.error == "KeyError: 'headline'"
    assert set(record.steps) == {"branding"}


def test_claim_is_exclusive_until_released(tmp_path: Path) -> None:
    log = StepLog(tmp_path)
    created = log.create(run_id="run-1", function_id="fn", event=EVENT, owner="worker-a")
    assert created.owner == "worker-a"
    assert created.attempts == 1
    assert log.is_claimed(created)

    with pytest.raises(RunInProgressError) as excinfo:
        log.claim("run-1", owner="worker-b", max_attempts=4)
    assert excinfo.value.owner == "worker-a"

    released = log.fail("run-1", error="boom", owner="worker-a")
    assert released.owner is None
    assert not log.is_claimed(released)

    claimed = log.claim("run-1", owner="worker-b", max_attempts=4)
    assert claimed.owner == "worker-b"
    assert claimed.attempts == 2


def test_writes_from_another_owner_are_rejected(tmp_path: Path) -> None:
    log = StepLog(tmp_path)
    log.create(run_id="run-1", function_id="fn", event=EVENT, owner="worker-a")

    with pytest.raises(RunInProgressError):
        log.transition("run-1", to=RunState.BRANDING_RUNNING, owner="worker-b")

    # A stale owner's failure is ignored rather than clobbering the live run.
    record = log.fail("run-1", error="stale", owner="worker-b")
    assert record.state is RunState.PENDING
    assert record.owner == "worker-a"


def test_expired_claim_can_be_taken_over(tmp_path: Path) -> None:
    log = StepLog(tmp_path, lease_seconds=60)
    log.create(run_id="run-1", function_id="fn", event=EVENT, owner="worker-a")
    _edit_on_disk(tmp_path, "run-1", claimed_at="2000-01-01T00:00:00+00:00")

    record = log.claim("run-1", owner="worker-b", max_attempts=4)

    assert record.owner == "worker-b"
    assert record.attempts == 2


def test_claim_checks_attempt_budget(tmp_path: Path) -> None:
    log = StepLog(tmp_path)
    log.create(run_id="run-1", function_id="fn", event=EVENT)
    _edit_on_disk(tmp_path, "run-1", attempts=2)

    with pytest.raises(RetryBudgetExhausted):
        log.claim("run-1", owner="worker-a", max_attempts=2)


def test_claim_returns_completed_run_unchanged(tmp_path: Path) -> None:
    log = StepLog(tmp_path)
    log.create(run_id="run-1", function_id="fn", event=EVENT)
    _edit_on_disk(tmp_path, "run-1", state="complete", result={"ok": True})

    record = log.claim("run-1", owner="worker-a", max_attempts=1)

    assert record.state is RunState.COMPLETE
    assert record.owner is None
