# src/tasktogo/tasks/registry.py

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from datetime import datetime

from ..core.ports import Task, TaskContainer
from .priority import sort_tasks
from .task_models import EventualTask, OneShotTask, RecurrenceSchedule

logger = logging.getLogger(__name__)


class TaskRegistry:
    """
    In-memory collection of task containers.

    Containers are one-shot tasks, eventual tasks, and recurrence schedules,
    kept in insertion ("storage") order. Listing expands every container as of
    a given moment and sorts the result; nothing sorted is kept between calls.
    """

    def __init__(self, containers: Iterable[TaskContainer] = ()) -> None:
        self._containers: list[TaskContainer] = list(containers)

    def __len__(self) -> int:
        return len(self._containers)

    def __iter__(self) -> Iterator[TaskContainer]:
        return iter(self._containers)

    @property
    def containers(self) -> list[TaskContainer]:
        return list(self._containers)

    @property
    def one_shot(self) -> list[OneShotTask]:
        return [c for c in self._containers if isinstance(c, OneShotTask)]

    @property
    def eventual(self) -> list[EventualTask]:
        return [c for c in self._containers if isinstance(c, EventualTask)]

    @property
    def recurring(self) -> list[RecurrenceSchedule]:
        return [c for c in self._containers if isinstance(c, RecurrenceSchedule)]

    def add(self, container: TaskContainer) -> None:
        self._containers.append(container)
        logger.debug("Registry add %s (total=%d)", type(container).__name__, len(self._containers))

    def remove(self, container: TaskContainer) -> None:
        """Remove a container by identity; unknown containers are ignored."""
        for i, existing in enumerate(self._containers):
            if existing is container:
                del self._containers[i]
                logger.debug(
                    "Registry remove %s (total=%d)", type(container).__name__, len(self._containers)
                )
                return

    def expand(self, now: datetime) -> list[Task]:
        """All displayable tasks in storage order."""
        out: list[Task] = []
        for container in self._containers:
            out.extend(container.tasks(now))
        return out

    def list_tasks(self, now: datetime) -> list[Task]:
        return sort_tasks(self.expand(now), now)

    def find(self, term: str, now: datetime) -> Task | None:
        """First task in storage order whose name starts with `term` (any case)."""
        for task in self.expand(now):
            if task.matches(term):
                return task
        return None

    def complete(self, term: str, now: datetime) -> Task | None:
        """
        Complete the first task matching `term`.

        Returns the completed task, or None when nothing matched (which is not
        an error).
        """
        task = self.find(term, now)
        if task is None:
            logger.debug("Registry complete: no match for %r", term)
            return None

        task.complete(self)
        logger.info("Completed %r", task.name)
        return task
