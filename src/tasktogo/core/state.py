# src/tasktogo/core/state.py

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from rich.console import Console

from ..render import RenderConfig
from ..tasks.registry import TaskRegistry
from ..tasks.task_store import TaskFileStore


def local_now() -> datetime:
    """Current time as an aware datetime in the local timezone."""
    return datetime.now().astimezone()


@dataclass
class AppState:
    # Settings object (config.Settings or a test stand-in).
    settings: object

    registry: TaskRegistry
    store: TaskFileStore
    render_config: RenderConfig
    console: Console

    # Set by every command that changes the registry; checked on exit.
    modified: bool = False
    is_new_list: bool = False

    clock: Callable[[], datetime] = local_now

    def now(self) -> datetime:
        return self.clock()
