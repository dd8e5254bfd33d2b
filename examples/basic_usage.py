#!/usr/bin/env python3
"""Programmatic marketing plan example.

This demonstrates using the workflow components directly:

* load settings from `.env` (OPENAI_API_KEY is required)
* send a feature event and run the marketing plan workflow
* print the branding and blog post, with the step log left under `.state/runs/`
"""

from __future__ import annotations

import argparse
import json
from typing import Sequence

from marketing_workflow.config import WorkflowSettings
from marketing_workflow.logging import configure_logging
from marketing_workflow.service import MarketingService
from marketing_workflow.workflow.state_machine import RunState


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create a marketing plan (programmatic example).")
    parser.add_argument(
        "--input",
        default="Dark mode toggle in settings",
        help="Technical description of the new feature",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    settings = WorkflowSettings()
    configure_logging(settings.log_level, settings.log_format)

    service = MarketingService(settings)
    try:
        [record] = service.send(args.input, raise_errors=False)
    finally:
        service.close()

    if record.state is not RunState.COMPLETE:
        print(f"Run {record.run_id} failed: {record.error}")
        print(f"Resume with: marketing-workflow resume --run-id {record.run_id}")
        return 1

    print(json.dumps(record.result, indent=2, ensure_ascii=False))
    print(f"Step log: {settings.runs_dir / (record.run_id + '.json')}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
