"""Logging configuration for the workflow.

Uses standard library logging. Records are written to stderr, so CLI output on
stdout stays machine-readable. Run context passed through ``extra=`` (run id,
step id, completion id, attempt) is promoted to top-level fields in JSON output
and appended as ``key=value`` pairs in text output.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any, Literal

LogFormat = Literal["json", "text"]

CONTEXT_FIELDS: tuple[str, ...] = ("run_id", "function_id", "step_id", "completion_id", "attempt")

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Attributes every LogRecord carries; anything else arrived through ``extra=``.
_STANDARD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    """Return the fields attached to ``record`` via ``extra=``."""
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _STANDARD_ATTRS and not key.startswith("_")
    }


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with run context at the top level."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (record)
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra = record_context(record)
        for key in CONTEXT_FIELDS:
            if key in extra:
                payload[key] = extra.pop(key)
        if extra:
            payload["extra"] = extra

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, ensure_ascii=False, default=str)


class ContextTextFormatter(logging.Formatter):
    """Plain text lines with the run context appended."""

    def __init__(self) -> None:
        super().__init__(TEXT_FORMAT)

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (record)
        line = super().format(record)
        context = record_context(record)
        pairs = " ".join(f"{key}={context[key]}" for key in CONTEXT_FIELDS if key in context)
        if not pairs:
            return line
        head, sep, tail = line.partition("\n")
        return f"{head} [{pairs}]{sep}{tail}"


def configure_logging(level: str, fmt: LogFormat = "json") -> None:
    """Install a single stderr handler on the root logger."""

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setFormatter(JsonFormatter() if fmt == "json" else ContextTextFormatter())

    root.addHandler(handler)
    root.setLevel(level.upper())

    # The OpenAI client logs every HTTP request at INFO through httpx.
    logging.getLogger("httpx").setLevel(max(root.level, logging.WARNING))
    logging.getLogger("openai").setLevel(max(root.level, logging.INFO))
