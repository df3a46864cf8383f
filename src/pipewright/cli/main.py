# src/pipewright/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds the PipelineContext and the task registry, then
runs the requested tasks in order. Long-running tasks (watch, test-browser)
run until SIGINT/SIGTERM; in-flight work is abandoned, not rolled back.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from collections.abc import Callable, Sequence

from ..config import get_settings
from ..core.registry import TaskRegistry
from ..core.state import PipelineContext
from ..errors import PipelineError
from ..logging_setup import setup_logging
from .bootstrap import create_context
from .tasks import build_registry

logger = logging.getLogger(__name__)

DEFAULT_TASK = "default"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pipewright",
        description="Build, lint and test the library.",
    )
    parser.add_argument("tasks", nargs="*", metavar="TASK", help=f"tasks to run (default: {DEFAULT_TASK})")
    parser.add_argument("--grep", default=None, help="only run node tests whose name matches EXPR")
    parser.add_argument("--root", default=None, help="project root (default: current directory)")
    parser.add_argument("--list", action="store_true", help="list tasks and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug output on the console")
    return parser


async def run_tasks(registry: TaskRegistry, names: Sequence[str]) -> None:
    # Validate everything up front so a typo in the last name has no side effects.
    for name in names:
        registry.plan(name)

    current = asyncio.current_task()
    if current is not None:
        loop = asyncio.get_running_loop()
        try:
            loop.add_signal_handler(signal.SIGTERM, current.cancel)
        except (NotImplementedError, RuntimeError):
            # Windows event loops have no add_signal_handler.
            pass

    for name in names:
        await registry.run(name)


def main(
    argv: Sequence[str] | None = None,
    *,
    context_factory: Callable[..., PipelineContext] = create_context,
) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings(args.root)

    level_name = "DEBUG" if args.verbose else str(settings.log_level).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.log_dir, console_level=console_level)

    ctx = context_factory(settings=settings, grep=args.grep)
    registry = build_registry(ctx)

    if args.list:
        print(registry.describe())
        return 0

    names = args.tasks or [DEFAULT_TASK]
    try:
        asyncio.run(run_tasks(registry, names))
    except PipelineError as e:
        logger.error("%s", e)
        return 1
    except (KeyboardInterrupt, asyncio.CancelledError):
        logger.info("Interrupted, bye.")
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
