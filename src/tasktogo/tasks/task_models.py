# src/tasktogo/tasks/task_models.py

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import StrEnum
from typing import TYPE_CHECKING

from .. import render
from . import priority as ordering
from . import recurrence
from .errors import InvalidOccurrenceError, InvalidPriorityError, InvalidScheduleError, TaskError

if TYPE_CHECKING:
    from rich.text import Text

    from ..render import RenderConfig
    from .registry import TaskRegistry

logger = logging.getLogger(__name__)

__all__ = [
    "CompletionTracker",
    "ContainerKind",
    "EventualTask",
    "InvalidOccurrenceError",
    "InvalidPriorityError",
    "InvalidScheduleError",
    "OccurrenceTemplate",
    "OneShotTask",
    "RecurrenceSchedule",
    "RecurringOccurrence",
    "TaskError",
    "format_occurrence",
]


class ContainerKind(StrEnum):
    """Discriminator for the containers stored in a registry."""

    ONE_SHOT = "oneshot"
    EVENTUAL = "eventual"
    RECURRING = "recurring"


def _check_priority(priority: int) -> int:
    # bool is an int subclass; reject it explicitly.
    if isinstance(priority, bool) or not isinstance(priority, int):
        raise InvalidPriorityError(f"priority must be an integer, got {priority!r}")
    if priority <= 0:
        raise InvalidPriorityError(f"priority must be positive, got {priority}")
    return priority


def _check_aware(value: datetime, what: str) -> datetime:
    if value.tzinfo is None or value.utcoffset() is None:
        raise TaskError(f"{what} must be timezone-aware")
    return value


def _matches(name: str, term: str) -> bool:
    return name.lower().startswith(term.lower())


_OCCURRENCE_RE = re.compile(r"%(-?\d*)d|%%")


def format_occurrence(template: str, occurrence: int) -> str:
    """
    Substitute the occurrence number into a printf-style template.

    Only %d (with an optional width) and %% are understood; any other text is
    kept verbatim, so a template without placeholders is returned unchanged.
    """

    def _sub(m: re.Match[str]) -> str:
        if m.group(0) == "%%":
            return "%"
        return f"%{m.group(1)}d" % occurrence

    return _OCCURRENCE_RE.sub(_sub, template)


@dataclass(slots=True, eq=False)
class OneShotTask:
    priority: int
    due_at: datetime
    name: str
    description: str = ""

    def __post_init__(self) -> None:
        _check_priority(self.priority)
        _check_aware(self.due_at, "due_at")

    def tasks(self, now: datetime) -> list[OneShotTask]:
        return [self]

    def score(self, now: datetime) -> float:
        return ordering.dated_score(self.priority, self.due_at, now)

    def matches(self, term: str) -> bool:
        return _matches(self.name, term)

    def render_short(self, config: RenderConfig, now: datetime) -> Text:
        return render.render_dated(self.priority, self.due_at, self.name, None, config, now)

    def render_long(self, config: RenderConfig, now: datetime) -> Text:
        return render.render_dated(
            self.priority, self.due_at, self.name, self.description, config, now
        )

    def complete(self, registry: TaskRegistry) -> None:
        registry.remove(self)


@dataclass(slots=True, eq=False)
class EventualTask:
    """A task without a due date; it floats at a constant nice value."""

    priority: int
    name: str
    description: str = ""

    def __post_init__(self) -> None:
        _check_priority(self.priority)

    @property
    def due_at(self) -> None:
        return None

    def tasks(self, now: datetime) -> list[EventualTask]:
        return [self]

    def score(self, now: datetime) -> float:
        return ordering.eventual_score(self.priority)

    def matches(self, term: str) -> bool:
        return _matches(self.name, term)

    def render_short(self, config: RenderConfig, now: datetime) -> Text:
        return render.render_eventual(self.priority, self.name, None, config)

    def render_long(self, config: RenderConfig, now: datetime) -> Text:
        return render.render_eventual(self.priority, self.name, self.description, config)

    def complete(self, registry: TaskRegistry) -> None:
        registry.remove(self)


@dataclass(slots=True, frozen=True)
class OccurrenceTemplate:
    """
    Blueprint for the occurrences of a schedule.

    name and description may contain %d, replaced by the 1-based occurrence
    number.
    """

    priority: int
    name: str
    description: str = ""

    def __post_init__(self) -> None:
        _check_priority(self.priority)


@dataclass(slots=True)
class CompletionTracker:
    """
    Completion state of a schedule: a high-water mark plus holes below it.

    last_completed is the greatest completed occurrence (0 = none); exceptions
    holds indices below it that are still pending.
    """

    last_completed: int = 0
    exceptions: set[int] = field(default_factory=set)

    def __post_init__(self) -> None:
        if self.last_completed < 0:
            raise TaskError(f"last_completed must be >= 0, got {self.last_completed}")
        self.exceptions = set(self.exceptions)
        bad = sorted(e for e in self.exceptions if not 0 < e < self.last_completed)
        if bad:
            raise TaskError(
                f"exceptions must lie in 1..{self.last_completed - 1}, got {bad}"
            )

    def complete(self, index: int) -> None:
        if index <= 0:
            raise InvalidOccurrenceError(f"occurrence index must be >= 1, got {index}")

        if index > self.last_completed:
            # Everything skipped on the way up stays pending.
            self.exceptions.update(range(self.last_completed + 1, index))
            self.last_completed = index
        else:
            self.exceptions.discard(index)

    def is_completed(self, index: int) -> bool:
        return index <= self.last_completed and index not in self.exceptions


@dataclass(slots=True, eq=False)
class RecurrenceSchedule:
    """
    Generator of occurrences repeating at a fixed, cycled list of delays.

    Occurrence n is due at start + the sum of the first n delays (cycling
    through the list). Nothing is stored per occurrence; completions live in
    the tracker.
    """

    start: datetime
    delays: tuple[timedelta, ...]
    template: OccurrenceTemplate
    end: datetime | None = None
    tracker: CompletionTracker = field(default_factory=CompletionTracker)

    def __post_init__(self) -> None:
        self.delays = tuple(self.delays)
        if not self.delays:
            raise InvalidScheduleError("at least one delay is required")
        non_positive = [d for d in self.delays if d <= timedelta(0)]
        if non_positive:
            raise InvalidScheduleError(
                f"delays must be strictly positive, got {[str(d) for d in non_positive]}"
            )
        _check_aware(self.start, "start")
        if self.end is not None:
            _check_aware(self.end, "end")

    @property
    def cycle(self) -> timedelta:
        return sum(self.delays, timedelta(0))

    def due_at(self, index: int) -> datetime:
        return recurrence.due_at(self, index)

    def spawn(self, index: int) -> RecurringOccurrence:
        return RecurringOccurrence(
            schedule=self,
            index=index,
            due_at=recurrence.due_at(self, index),
            priority=self.template.priority,
            name=format_occurrence(self.template.name, index),
            description=format_occurrence(self.template.description, index),
        )

    def tasks(self, now: datetime) -> list[RecurringOccurrence]:
        return [self.spawn(index) for index, _ in recurrence.expand(self, now)]

    def complete(self, index: int) -> None:
        self.tracker.complete(index)
        logger.debug(
            "Schedule %r: completed #%s last_completed=%s exceptions=%s",
            self.template.name,
            index,
            self.tracker.last_completed,
            sorted(self.tracker.exceptions),
        )


@dataclass(slots=True, eq=False)
class RecurringOccurrence:
    """
    One generated occurrence of a schedule.

    Lives only as long as the listing that produced it; the schedule handle is
    used to route completion back to the tracker.
    """

    schedule: RecurrenceSchedule = field(repr=False)
    index: int
    due_at: datetime
    priority: int
    name: str
    description: str = ""

    def score(self, now: datetime) -> float:
        return ordering.dated_score(self.priority, self.due_at, now)

    def matches(self, term: str) -> bool:
        return _matches(self.name, term)

    def render_short(self, config: RenderConfig, now: datetime) -> Text:
        return render.render_dated(self.priority, self.due_at, self.name, None, config, now)

    def render_long(self, config: RenderConfig, now: datetime) -> Text:
        return render.render_dated(
            self.priority, self.due_at, self.name, self.description, config, now
        )

    def complete(self, registry: TaskRegistry) -> None:
        self.schedule.complete(self.index)
