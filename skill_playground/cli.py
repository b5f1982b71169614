"""Command-line entry point.

Reads a goal from a file, plans and executes it, and prints the plan and the
result::

    skill-playground --input ask.txt
    skill-playground --input ask.txt --planner action
    skill-playground --input text.txt --planner direct --function Summarize

Exit status is 0 when the run succeeds and 1 when planning, validation or
execution fails. Usage errors exit with 2.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from .core.config import Settings, load_settings
from .core.logging_config import setup_logging
from .errors import NotFoundError, PlanningError, SkillPlaygroundError
from .factory import build_orchestrator
from .planning.planner import PlannerStrategy
from .runtime import ExecutionResult
from .service import Orchestrator

DIRECT_MODE = "direct"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="skill-playground",
        description="Plan and execute a goal over the configured skills",
    )

    parser.add_argument(
        "--input",
        "-i",
        type=Path,
        required=True,
        help="Path to the input file to be processed",
    )

    parser.add_argument(
        "--function",
        "-f",
        type=str,
        default=None,
        help="The function to be executed (required with --planner direct)",
    )

    parser.add_argument(
        "--planner",
        "-p",
        choices=("sequential", "action", DIRECT_MODE),
        default=None,
        help="Planner variant; defaults to SKILL_PLAYGROUND_PLANNER",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Logging level override (DEBUG, INFO, WARNING, ERROR)",
    )

    return parser


def _report_result(result: ExecutionResult, out: TextIO) -> int:
    if result.succeeded:
        print(f"\nRESULT: {result.final_value}", file=out)
        return 0
    print(f"\nRESULT: {result.status.value}", file=out)
    print(f"[execution] {result.reason}", file=out)
    for i, value in enumerate(result.per_step_outputs, start=1):
        print(f"  step {i} output: {value}", file=out)
    return 1


async def run_goal(
    orchestrator: Orchestrator,
    goal: str,
    *,
    mode: str,
    function: Optional[str] = None,
    out: Optional[TextIO] = None,
) -> int:
    """Run ``goal`` in ``mode`` and print the outcome. Returns the exit status."""
    out = out or sys.stdout
    try:
        if mode == DIRECT_MODE:
            result = await orchestrator.invoke_function(function or "", goal)
        else:
            outcome = await orchestrator.run(goal)
            print(f"\nPLAN:\n{outcome.plan.to_safe_string()}", file=out)
            result = outcome.result
    except PlanningError as e:
        print(f"[{e.stage}] {e}", file=out)
        return 1
    except NotFoundError as e:
        print(f"[lookup] {e}", file=out)
        return 1
    return _report_result(result, out)


def main(
    argv: Optional[List[str]] = None,
    *,
    settings: Optional[Settings] = None,
    out: Optional[TextIO] = None,
) -> int:
    out = out or sys.stdout
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = settings or load_settings()
    setup_logging(log_level=args.log_level or settings.log_level)

    mode = args.planner or settings.planner_strategy
    if mode == DIRECT_MODE and not args.function:
        parser.error("--function is required with --planner direct")

    try:
        goal = args.input.read_text(encoding="utf-8")
    except OSError as e:
        parser.error(f"cannot read input file: {e}")

    try:
        orchestrator = build_orchestrator(
            settings,
            strategy=PlannerStrategy.sequential if mode == DIRECT_MODE else mode,
        )
    except (SkillPlaygroundError, ValueError) as e:
        print(f"[startup] {e}", file=out)
        return 1

    return asyncio.run(run_goal(orchestrator, goal, mode=mode, function=args.function, out=out))


if __name__ == "__main__":
    sys.exit(main())
