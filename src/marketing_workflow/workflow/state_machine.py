from __future__ import annotations

from enum import Enum

from marketing_workflow.errors import IllegalTransitionError


class RunState(str, Enum):
    PENDING = "pending"
    BRANDING_RUNNING = "branding_running"
    BRANDING_DONE = "branding_done"
    BLOG_POST_RUNNING = "blog_post_running"
    BLOG_POST_DONE = "blog_post_done"
    SAVING = "saving"
    SAVED = "saved"
    COMPLETE = "complete"
    FAILED = "failed"


ALLOWED_TRANSITIONS: dict[RunState, set[RunState]] = {
    RunState.PENDING: {RunState.BRANDING_RUNNING, RunState.FAILED},
    RunState.BRANDING_RUNNING: {RunState.BRANDING_DONE, RunState.FAILED},
    RunState.BRANDING_DONE: {RunState.BLOG_POST_RUNNING, RunState.FAILED},
    RunState.BLOG_POST_RUNNING: {RunState.BLOG_POST_DONE, RunState.FAILED},
    RunState.BLOG_POST_DONE: {RunState.SAVING, RunState.COMPLETE, RunState.FAILED},
    RunState.SAVING: {RunState.SAVED, RunState.FAILED},
    RunState.SAVED: {RunState.COMPLETE, RunState.FAILED},
    # A failed run resumes at the first step without a recorded result.
    RunState.FAILED: {
        RunState.BRANDING_RUNNING,
        RunState.BLOG_POST_RUNNING,
        RunState.SAVING,
    },
    RunState.COMPLETE: set(),
}


def transition(*, current: RunState, to: RunState) -> RunState:
    allowed = ALLOWED_TRANSITIONS.get(current, set())
    if to not in allowed:
        raise IllegalTransitionError(f"Illegal transition: {current.value} -> {to.value}")
    return to


def is_terminal(state: RunState) -> bool:
    return state is RunState.COMPLETE
