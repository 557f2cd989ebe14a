"""Command-line entry point: run one goal to completion and print the result."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from aimeAgent.config import get_settings
from aimeAgent.config.settings import GovernanceSettings
from aimeAgent.core.orchestrator import RunReport
from aimeAgent.runtime import build_application
from aimeAgent.utils import handle_model_error, log_error, setup_logging

LOGGER = logging.getLogger("aimeAgent.main")


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="aime",
        description="aimeAgent - hierarchical task orchestration with MCP tools",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            '  aime "Plan a 3-day trip to Tokyo in May with a 5000 budget"\n'
            '  aime --mcp-config my_servers.yaml --max-turns 20 "Research MCP adoption"'
        ),
    )
    parser.add_argument("goal", help="Top-level goal to accomplish")
    parser.add_argument("--mcp-config", type=str, help="YAML file listing MCP tool servers")
    parser.add_argument("--max-turns", type=_positive_int, help="Orchestrator turn budget (default: MAX_TURNS or 50)")
    parser.add_argument(
        "--max-iterations", type=_positive_int, help="ReAct iterations per task (default: MAX_ITERATIONS or 5)"
    )
    parser.add_argument(
        "--non-interactive", action="store_true", help="Do not register the ask_user tool"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show INFO logs on the console")
    return parser.parse_args(argv)


def _print_report(report: RunReport) -> None:
    print("\n========= Task tree =========")
    print(report.tree)
    status = "finished" if report.finished else "stopped at the turn budget"
    print(f"\n({status} after {report.turns} turn(s))")
    print("\n========= Final report =========")
    print(report.final_report or "(no report)")


async def async_main(args: argparse.Namespace) -> int:
    settings = get_settings()
    setup_logging(settings.observability, verbose=args.verbose)

    overrides = {
        name: value
        for name, value in (("max_turns", args.max_turns), ("max_iterations", args.max_iterations))
        if value is not None
    }

    if overrides:
        try:
            governance = GovernanceSettings(**{**settings.governance.model_dump(), **overrides})
        except ValidationError as e:
            print(f"Invalid budget option: {e.errors()[0]['msg']}", file=sys.stderr)
            return 1
        # Copy so the cached settings keep their configured values
        settings = settings.model_copy(update={"governance": governance})

    try:
        orchestrator = await build_application(
            settings=settings,
            mcp_config_path=args.mcp_config,
            interactive=not args.non_interactive,
        )
    except Exception as e:
        log_error(LOGGER, e, context="building the application")
        print(f"Startup failed: {handle_model_error(e)}", file=sys.stderr)
        return 1

    try:
        report = await orchestrator.run(args.goal)
    finally:
        await orchestrator.tool_bus.close_all_connections()

    _print_report(report)
    return 0 if report.finished else 2


def cli(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        return asyncio.run(async_main(args))
    except KeyboardInterrupt:
        print("\nInterrupted.")
        return 130


if __name__ == "__main__":
    sys.exit(cli())
