# src/tasktogo/tasks/recurrence.py

from __future__ import annotations

"""
Occurrence math for recurrence schedules.

Occurrence n (1-based) of a schedule with delays d[0..k-1] is due at

    start + (n // k) * sum(d) + sum(d[: n % k])

so occurrence 1 is due one delay after start. Everything here is a pure
function of the schedule parameters and its completion tracker; the only
input that depends on the wall clock is the `now` passed to expand().
"""

from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from .errors import InvalidOccurrenceError

if TYPE_CHECKING:
    from .task_models import RecurrenceSchedule


def _partial(delays: tuple[timedelta, ...], count: int) -> timedelta:
    return sum(delays[:count], timedelta(0))


def due_at(schedule: RecurrenceSchedule, index: int) -> datetime:
    """Due time of occurrence `index`; independent of when it is called."""
    if index <= 0:
        raise InvalidOccurrenceError(f"occurrence index must be >= 1, got {index}")

    delays = schedule.delays
    full, remaining = divmod(index, len(delays))
    return schedule.start + full * schedule.cycle + _partial(delays, remaining)


def final_index(schedule: RecurrenceSchedule, at: datetime) -> int:
    """
    Highest occurrence index whose due time is <= `at` (0 if none).

    Whole cycles are counted with one division; the remainder is resolved by
    walking a single pass of the delay list.
    """
    elapsed = at - schedule.start
    if elapsed < timedelta(0):
        return 0

    delays = schedule.delays
    cycle = schedule.cycle
    full = elapsed // cycle
    index = full * len(delays)

    remaining = elapsed - full * cycle
    offset = timedelta(0)
    for delay in delays:
        offset += delay
        if offset > remaining:
            break
        index += 1

    return index


def expand(schedule: RecurrenceSchedule, now: datetime) -> list[tuple[int, datetime]]:
    """
    Pending occurrences of `schedule` as of `now`, as (index, due_at) pairs.

    While the schedule is running (started, and its end not yet passed) the
    occurrence that is currently open is included ahead of its due time.
    Exceptions come first in index order, followed by everything between the
    high-water mark and the last due occurrence.
    """
    end = schedule.end
    tracker = schedule.tracker

    if end is not None and now > end:
        last = final_index(schedule, end)
    else:
        last = final_index(schedule, now)
        if schedule.start <= now:
            last += 1

    pending = sorted(tracker.exceptions)
    pending.extend(range(tracker.last_completed + 1, last + 1))
    return [(index, due_at(schedule, index)) for index in pending]
