# src/tasktogo/connectors/console_connector.py

from __future__ import annotations

import logging

from ..cli.arguments import CommandError, tokenize
from ..cli.commands import EXIT_COMMANDS, Reply
from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..tasks.errors import TaskError

logger = logging.getLogger(__name__)

PROMPT = ": "


def print_reply(state: AppState, reply: Reply) -> None:
    if isinstance(reply, str) and not reply:
        return
    state.console.print(reply, markup=False, highlight=False)


def print_error(state: AppState, err: Exception) -> None:
    state.console.print(f"Error: {err}", markup=False, highlight=False, style="bold red")


def run_command(state: AppState, args: list[str]) -> int:
    """Run one command (command mode). Returns the process exit status."""
    try:
        reply = command_registry.dispatch(state, args)
    except (CommandError, TaskError) as e:
        logger.warning("User error: %s", e)
        print_error(state, e)
        return 1

    print_reply(state, reply)
    return 0


def run_console_loop(state: AppState, *, read_line=input) -> None:
    """
    Interactive mode: read a line, run it, print the reply.

    Returns on EOF, Ctrl-C, or an exit command. User errors are reported and
    the loop continues.
    """
    logger.info("Console started (list=%s).", state.store.path)

    while True:
        try:
            line = read_line(PROMPT).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            state.console.print()
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            state.console.print()
            break

        if not line:
            continue

        try:
            args = tokenize(line)
            if args and args[0].lower() in EXIT_COMMANDS:
                logger.info("Console exit command received.")
                break
            reply = command_registry.dispatch(state, args)
        except (CommandError, TaskError) as e:
            logger.warning("User error: %s", e)
            print_error(state, e)
            continue
        except Exception:
            logger.exception("Command handler crashed.")
            state.console.print("Internal error while handling a command.", markup=False)
            continue

        print_reply(state, reply)

    logger.info("Console finished.")
