# src/tasktogo/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable

from rich.text import Text

from ..core.state import AppState
from ..tasks.task_models import EventualTask, OccurrenceTemplate, OneShotTask, RecurrenceSchedule
from .arguments import CommandError, parse_add, parse_eventually, parse_recurring, tokenize

Reply = str | Text
CommandHandler = Callable[[AppState, list[str]], Reply]

EXIT_COMMANDS = frozenset({"exit", "quit", "q"})

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Command registry used by the console loop and by command mode."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, tuple[str, str]] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        usage: str = "",
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = (usage or key, help_text)
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def dispatch(self, state: AppState, args: list[str]) -> Reply:
        """
        Run an already tokenized command.

        Raises CommandError for empty input, unknown commands, and bad
        arguments; task validation errors propagate as TaskError.
        """
        if not args:
            raise CommandError("no arguments given")

        name = args[0].lower()
        handler = self._handlers.get(name)
        if handler is None:
            raise CommandError(f"unknown command: {args[0]}. Use help to list available commands.")

        logger.debug("User invoked %s args=%s", name, args[1:])
        return handler(state, args[1:])

    def handle(self, state: AppState, line: str) -> Reply:
        """Tokenize a command line (quotes and backslashes honoured) and run it."""
        return self.dispatch(state, tokenize(line))

    def build_help(self, app_name: str = "tasktogo") -> str:
        width = max((len(usage) for usage, _ in self._help.values()), default=0)
        lines = [f"{app_name} commands:", ""]
        for usage, help_text in self._help.values():
            lines.append(f"    {usage.ljust(width)}  - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _mark_modified(state: AppState) -> None:
    state.modified = True
    state.is_new_list = False


def cmd_help(state: AppState, args: list[str]) -> Reply:
    return registry.build_help(str(getattr(state.settings, "app_name", "tasktogo")))


def cmd_exit(state: AppState, args: list[str]) -> Reply:
    # The console loop intercepts exit itself; in command mode this is a no-op.
    return ""


def cmd_list(state: AppState, args: list[str]) -> Reply:
    """
    list          -> all tasks (or max_list_items from settings)
    list N        -> the N most urgent tasks
    """
    if state.is_new_list and len(state.registry) == 0:
        raise CommandError("no tasks in list")

    limit = 0
    if args:
        try:
            limit = int(args[0])
        except ValueError:
            limit = 0
    if limit == 0:
        limit = int(getattr(state.settings, "max_list_items", 0) or 0)

    now = state.now()
    tasks = state.registry.list_tasks(now)
    if 0 < limit < len(tasks):
        tasks = tasks[:limit]

    if not tasks:
        return "No pending tasks."
    return Text("\n").join(t.render_short(state.render_config, now) for t in tasks)


def cmd_info(state: AppState, args: list[str]) -> Reply:
    if not args:
        raise CommandError("no task name given")

    now = state.now()
    term = " ".join(args)
    task = state.registry.find(term, now)
    if task is None:
        return f"No task matches {term!r}."
    return task.render_long(state.render_config, now)


def cmd_add(state: AppState, args: list[str]) -> Reply:
    """add <name...> <priority> <month> <day> <HH:MM> [-- description]"""
    now = state.now()
    parsed = parse_add(args, now)
    task = OneShotTask(
        priority=parsed.priority,
        due_at=parsed.due_at,
        name=parsed.name,
        description=parsed.description,
    )
    state.registry.add(task)
    _mark_modified(state)
    logger.info("Added one-shot task %r due=%s priority=%s", task.name, task.due_at, task.priority)
    return Text("Added ").append_text(task.render_short(state.render_config, now))


def cmd_eventually(state: AppState, args: list[str]) -> Reply:
    """eventually <name...> <priority> [-- description]"""
    parsed = parse_eventually(args)
    task = EventualTask(priority=parsed.priority, name=parsed.name, description=parsed.description)
    state.registry.add(task)
    _mark_modified(state)
    logger.info("Added eventual task %r priority=%s", task.name, task.priority)
    return Text("Added ").append_text(task.render_short(state.render_config, state.now()))


def cmd_recurring(state: AppState, args: list[str]) -> Reply:
    """recurring <name...> <priority> <start> [<end>] <delay[,delay]> [-- description]"""
    now = state.now()
    parsed = parse_recurring(args, now)
    schedule = RecurrenceSchedule(
        start=parsed.start,
        end=parsed.end,
        delays=parsed.delays,
        template=OccurrenceTemplate(
            priority=parsed.priority,
            name=parsed.name,
            description=parsed.description,
        ),
    )
    state.registry.add(schedule)
    _mark_modified(state)
    logger.info(
        "Added recurring task %r start=%s end=%s delays=%s",
        parsed.name,
        parsed.start,
        parsed.end,
        [str(d) for d in parsed.delays],
    )

    pending = schedule.tasks(now)
    if not pending:
        return f"Added recurring {parsed.name!r}; first occurrence due {schedule.due_at(1):%Y-%m-%d %H:%M}."
    return f"Added recurring {parsed.name!r} ({len(pending)} pending)."


def cmd_done(state: AppState, args: list[str]) -> Reply:
    """done <name prefix...>"""
    if not args:
        raise CommandError("no task name given")

    term = " ".join(args)
    task = state.registry.complete(term, state.now())
    if task is None:
        return f"No task matches {term!r}."

    _mark_modified(state)
    return f"Done: {task.name}"


registry.register("help", cmd_help, help_text="print this menu", aliases=["h"])
registry.register("exit", cmd_exit, help_text="exit gracefully", aliases=["quit", "q"])
registry.register(
    "list", cmd_list, help_text="list all tasks", usage="list [maxItems]", aliases=["l"]
)
registry.register(
    "info", cmd_info, help_text="show a task with its description", usage="info name", aliases=["i"]
)
registry.register(
    "add",
    cmd_add,
    help_text="add a task",
    usage="add name priority month day hr:min [-- description]",
    aliases=["a"],
)
registry.register(
    "eventually",
    cmd_eventually,
    help_text="add an eventual task",
    usage="eventually name priority [-- description]",
    aliases=["e"],
)
registry.register(
    "recurring",
    cmd_recurring,
    help_text="add a recurring task (YYYY-MM-DD HH:MM times, %d in name = occurrence)",
    usage="recurring name priority start [end] delay[,delay]",
    aliases=["r"],
)
registry.register("done", cmd_done, help_text="complete a task", usage="done name", aliases=["d"])
