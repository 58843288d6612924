# src/tasktogo/tasks/priority.py

from __future__ import annotations

"""
Nice values and display order.

A task's nice value is

    ln(priority) * (due - now)

with the duration in nanoseconds; lower sorts first. Overdue tasks have a
negative duration, so with priority > 1 the more overdue (and the more
important) a task is, the earlier it is listed. Priority 1 collapses the
value to 0 whatever the due date.

Eventual tasks have no due date and use EVENTUAL_FACTOR in its place, which
lets them interleave with dated tasks by priority alone.
"""

import math
from collections.abc import Iterable
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..core.ports import Task

NANOSECONDS_PER_MICROSECOND = 1_000

# 72 hours in nanoseconds.
EVENTUAL_FACTOR = 72 * 60 * 60 * 1_000_000_000


def to_nanoseconds(delta: timedelta) -> int:
    return (delta // timedelta(microseconds=1)) * NANOSECONDS_PER_MICROSECOND


def dated_score(priority: int, due_at: datetime, now: datetime) -> float:
    return math.log(priority) * to_nanoseconds(due_at - now)


def eventual_score(priority: int) -> float:
    return math.log(priority) * EVENTUAL_FACTOR


def sort_key(task: Task, now: datetime) -> tuple[float, bool, float]:
    """
    Ordering key: nice value, then due date ascending.

    Tasks without a due date sort after dated tasks of equal nice value.
    """
    due = task.due_at
    if due is None:
        return (task.score(now), True, 0.0)
    return (task.score(now), False, due.timestamp())


def sort_tasks(tasks: Iterable[Task], now: datetime) -> list[Task]:
    # sorted() is stable: equal keys keep insertion order.
    return sorted(tasks, key=lambda t: sort_key(t, now))
