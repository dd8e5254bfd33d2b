"""Error taxonomy for the marketing workflow.

Provider errors (network, auth, rate limits) are not wrapped: they surface from the
completion client unmodified.
"""

from __future__ import annotations


class WorkflowError(Exception):
    """Base class for errors raised by this package."""


class GenerationError(WorkflowError):
    """A completion was returned but cannot be used as step output."""


class EmptyCompletionError(GenerationError):
    """The provider returned no text."""

    def __init__(self, step: str, completion_id: str | None = None) -> None:
        self.step = step
        self.completion_id = completion_id
        super().__init__(f"Failed to generate: empty completion in step {step!r}")


class MalformedResponseError(GenerationError):
    """The completion text is not the JSON object the step asked for."""

    def __init__(self, reason: str, raw_text: str) -> None:
        self.reason = reason
        self.raw_text = raw_text
        super().__init__(f"Malformed completion: {reason}")


class InvalidEventError(WorkflowError):
    """The trigger event does not match the expected contract."""


class IllegalTransitionError(WorkflowError, ValueError):
    """A run attempted a state change the state machine does not allow."""


class RunNotFoundError(WorkflowError, KeyError):
    """No step log exists for the requested run id."""

    def __init__(self, run_id: str) -> None:
        self.run_id = run_id
        super().__init__(run_id)

    def __str__(self) -> str:
        return f"Run not found: {self.run_id}"


class RetryBudgetExhausted(WorkflowError):
    """A failed run has already been executed the maximum number of times."""

    def __init__(self, run_id: str, attempts: int) -> None:
        self.run_id = run_id
        self.attempts = attempts
        super().__init__(f"Run {run_id} failed after {attempts} attempts")


class RunInProgressError(WorkflowError):
    """Another executor holds the run's claim."""

    def __init__(self, run_id: str, owner: str | None = None) -> None:
        self.run_id = run_id
        self.owner = owner
        super().__init__(f"Run {run_id} is already executing")
