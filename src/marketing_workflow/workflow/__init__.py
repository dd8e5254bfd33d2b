"""Explicit workflow domain concepts.

This package introduces first-class types for:
- Trigger events (signals)
- Memoized steps backed by a persisted per-run step log
- A run state machine
- The marketing plan workflow itself

The intent is to make each invocation restartable, inspectable, and
deterministic in its control flow.
"""

__all__: list[str] = []
