"""CLI entrypoint for the feature marketing workflow."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from pydantic import ValidationError

from marketing_workflow import __version__
from marketing_workflow.config import WorkflowSettings
from marketing_workflow.errors import RetryBudgetExhausted, RunInProgressError, RunNotFoundError
from marketing_workflow.logging import configure_logging
from marketing_workflow.service import MarketingService
from marketing_workflow.workflow.state_machine import RunState
from marketing_workflow.workflow.step_log import RunRecord, StepLog

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="marketing-workflow",
        description="Brand a new feature and draft its announcement blog post",
    )
    parser.add_argument(
        "--version", action="version", version=f"marketing-workflow {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    send = subparsers.add_parser("send", help="Send a feature event and run the workflow")
    send.add_argument("--input", required=True, help="Technical description of the feature")
    send.add_argument(
        "--id",
        dest="event_id",
        default=None,
        help="Event id. Re-sending an id resumes its run instead of starting a new one.",
    )

    resume = subparsers.add_parser("resume", help="Resume a failed or interrupted run")
    resume.add_argument("--run-id", required=True, help="Run id to resume")

    show = subparsers.add_parser("show", help="Print a run's step log")
    show.add_argument("--run-id", required=True, help="Run id to show")

    subparsers.add_parser("list", help="List recorded runs")

    return parser


def _print_outcome(record: RunRecord) -> int:
    if record.state is RunState.COMPLETE:
        print(json.dumps(record.result, indent=2, ensure_ascii=False))
        return 0
    print(f"Run {record.run_id} {record.state.value}: {record.error}", file=sys.stderr)
    return 1


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = WorkflowSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(settings.log_level, settings.log_format)

    try:
        if args.command == "show":
            record = StepLog(settings.runs_dir).get(args.run_id)
            if record is None:
                raise RunNotFoundError(args.run_id)
            print(json.dumps(record.model_dump(mode="json"), indent=2, ensure_ascii=False))
            return 0

        if args.command == "list":
            for record in StepLog(settings.runs_dir).list():
                print(f"{record.run_id}\t{record.state.value}\t{record.created_at}")
            return 0

        try:
            service = MarketingService(settings)
        except ValueError as e:
            print(f"Configuration error: {e}", file=sys.stderr)
            return 2

        try:
            if args.command == "send":
                exit_code = 0
                for record in service.send(
                    args.input, event_id=args.event_id, raise_errors=False
                ):
                    exit_code = max(exit_code, _print_outcome(record))
                return exit_code

            if args.command == "resume":
                record = service.runtime.resume(args.run_id, raise_errors=False)
                return _print_outcome(record)
        finally:
            service.close()

        logger.error("Unknown command", extra={"command": args.command})
        return 2

    except (RunNotFoundError, RunInProgressError, RetryBudgetExhausted) as e:
        logger.warning(str(e))
        print(str(e), file=sys.stderr)
        return 3

    except Exception:
        logger.exception("Command failed")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
