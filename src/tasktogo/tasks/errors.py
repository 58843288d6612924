# src/tasktogo/tasks/errors.py

from __future__ import annotations


class TaskError(ValueError):
    """Base class for invalid task data."""


class InvalidScheduleError(TaskError):
    """Empty delay list or a delay that is not strictly positive."""


class InvalidOccurrenceError(TaskError):
    """Occurrence indices are 1-based."""


class InvalidPriorityError(TaskError):
    pass
