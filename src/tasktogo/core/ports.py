# src/tasktogo/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the engine.

Task kinds are independent record types; the registry and the command layer
only rely on the capabilities declared here.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from rich.text import Text

    from ..render import RenderConfig
    from ..tasks.registry import TaskRegistry


class Task(Protocol):
    """
    Anything that can be listed, searched, and completed.

    due_at is None for tasks without a due date (eventual tasks).
    """

    priority: int
    name: str
    description: str

    @property
    def due_at(self) -> datetime | None: ...

    def score(self, now: datetime) -> float: ...
    def matches(self, term: str) -> bool: ...
    def render_short(self, config: RenderConfig, now: datetime) -> Text: ...
    def render_long(self, config: RenderConfig, now: datetime) -> Text: ...

    # Routes completion back to whatever produced the task.
    def complete(self, registry: TaskRegistry) -> None: ...


class TaskContainer(Protocol):
    """Something stored in the registry that expands into displayable tasks."""

    def tasks(self, now: datetime) -> list[Task]: ...
