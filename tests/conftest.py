# tests/conftest.py

from __future__ import annotations

import os
import time
from collections.abc import Callable, Iterator
from datetime import UTC, datetime
from pathlib import Path
from types import SimpleNamespace

import pytest
from rich.console import Console

from tasktogo.core.state import AppState
from tasktogo.render import RenderConfig
from tasktogo.tasks.registry import TaskRegistry
from tasktogo.tasks.task_store import TaskFileStore

from .fakes import FakeClock

# Saturday, 17 Oct 2026, 12:00 UTC.
NOW = datetime(2026, 10, 17, 12, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def local_zone() -> Iterator[Callable[[str], None]]:
    """
    Pin the process-local timezone to UTC; tests may switch it through the
    returned setter. The original TZ is restored afterwards.
    """
    saved = os.environ.get("TZ")

    def set_zone(name: str) -> None:
        os.environ["TZ"] = name
        time.tzset()

    set_zone("UTC")
    yield set_zone

    if saved is None:
        os.environ.pop("TZ", None)
    else:
        os.environ["TZ"] = saved
    time.tzset()


@pytest.fixture()
def now() -> datetime:
    return NOW


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """Minimal settings object compatible with AppState and the CLI modules."""
    return SimpleNamespace(
        app_name="tasktogo",
        log_level="WARNING",
        data_dir=tmp_path / "state",
        list_path=tmp_path / "tasks.json",
        max_list_items=0,
        colors=False,
        due_format="%A, %b %d, %H:%M",
        color_threshold_hours=24.0,
    )


@pytest.fixture()
def state(settings: SimpleNamespace, clock: FakeClock) -> AppState:
    """
    AppState wired with a fake clock and an uncolored console that writes to
    stdout (captured with capsys).

    The JSON store is real: its behaviour is part of what we want to test.
    """
    store = TaskFileStore(settings.list_path)
    return AppState(
        settings=settings,
        registry=TaskRegistry(),
        store=store,
        render_config=RenderConfig.from_settings(settings),
        console=Console(no_color=True, highlight=False, width=200),
        clock=clock,
    )
