# src/tasktogo/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- takes the settings (already merged with command line flags),
- loads the task registry from the list file,
- wires the store, render config and output console into AppState,
- saves the registry back when something changed.
"""

from __future__ import annotations

import logging

from rich.console import Console

from ..config import get_settings
from ..core.state import AppState
from ..render import RenderConfig
from ..tasks.task_store import TaskFileStore

logger = logging.getLogger(__name__)


def create_initial_state(*, settings=None, console: Console | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Raises TaskStoreError when the list file exists but cannot be decoded;
    nothing is written in that case.
    """
    if settings is None:
        settings = get_settings()

    store = TaskFileStore(settings.list_path)
    registry = store.load()

    render_config = RenderConfig.from_settings(settings)
    if console is None:
        console = Console(no_color=not render_config.colors, highlight=False)

    return AppState(
        settings=settings,
        registry=registry,
        store=store,
        render_config=render_config,
        console=console,
        is_new_list=store.is_new,
    )


def save_if_modified(state: AppState) -> bool:
    """Write the registry back to its file if a command changed it."""
    if not state.modified:
        return False
    state.store.save(state.registry)
    state.modified = False
    logger.debug("List saved to %s", state.store.path)
    return True
