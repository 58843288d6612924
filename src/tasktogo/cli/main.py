# src/tasktogo/cli/main.py

"""
CLI entrypoint.

Initializes logging, loads the task list, then either runs the command given
on the command line (command mode) or starts the interactive console. The
list is saved on the way out if anything changed.
"""

from __future__ import annotations

import argparse
import logging
import sys

from .. import __version__
from ..cli.bootstrap import create_initial_state, save_if_modified
from ..config import get_settings
from ..connectors.console_connector import print_error, run_command, run_console_loop
from ..logging_setup import setup_logging
from ..tasks.task_store import TaskStoreError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tasktogo",
        description="Personal task list with recurring tasks.",
    )
    parser.add_argument("-l", "--list", dest="list_path", help="task list file (default: ~/.tasktogo)")
    parser.add_argument(
        "--color",
        dest="colors",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="colorize listings by urgency",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("command", nargs=argparse.REMAINDER, help="command to run (omit for interactive mode)")
    return parser


def main(argv: list[str] | None = None) -> int:
    opts = build_parser().parse_args(argv)
    settings = get_settings().with_overrides(list_path=opts.list_path, colors=opts.colors)

    level_name = str(settings.log_level).upper()
    console_level = getattr(logging, level_name, logging.WARNING)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s %s (list=%s)", settings.app_name, __version__, settings.list_path)

    try:
        state = create_initial_state(settings=settings)
    except (TaskStoreError, OSError) as e:
        logger.error("Could not read task list %s: %s", settings.list_path, e)
        print(f"Could not read task list: {e}", file=sys.stderr)
        return 1

    status = 0
    try:
        if opts.command:
            status = run_command(state, opts.command)
        else:
            run_console_loop(state)
    finally:
        try:
            save_if_modified(state)
        except OSError as e:
            logger.error("Could not save list: %s", e)
            print_error(state, e)
            status = 1

    logger.info("Bye.")
    return status


if __name__ == "__main__":
    sys.exit(main())
