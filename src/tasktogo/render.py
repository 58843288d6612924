# src/tasktogo/render.py

"""
Task rendering.

Everything that affects output (colors, date format, color threshold) is
carried by an explicit RenderConfig; there is no global output context.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from rich.text import Text

DEFAULT_DUE_FORMAT = "%A, %b %d, %H:%M"

# Most urgent first.
RAINBOW = ("red", "yellow", "green", "cyan", "blue", "magenta")

# Priority steps per color for eventual tasks.
EVENTUAL_THRESHOLD = 1


@dataclass(slots=True, frozen=True)
class RenderConfig:
    colors: bool = True
    due_format: str = DEFAULT_DUE_FORMAT
    color_threshold: timedelta = timedelta(hours=24)

    @classmethod
    def from_settings(cls, settings, *, colors: bool | None = None) -> RenderConfig:
        return cls(
            colors=bool(getattr(settings, "colors", True)) if colors is None else colors,
            due_format=str(getattr(settings, "due_format", DEFAULT_DUE_FORMAT)),
            color_threshold=timedelta(hours=float(getattr(settings, "color_threshold_hours", 24))),
        )


def _clamp(col: int) -> int:
    return max(0, min(len(RAINBOW) - 1, col))


def color_for_date(due_at: datetime, now: datetime, threshold: timedelta) -> str:
    """Red when due within one threshold (or overdue), then towards magenta."""
    return RAINBOW[_clamp(int((due_at - now) / threshold))]


def color_for_priority(priority: int, threshold: int = EVENTUAL_THRESHOLD) -> str:
    return RAINBOW[_clamp(priority // threshold)]


def format_due(due_at: datetime, now: datetime, due_format: str = DEFAULT_DUE_FORMAT) -> str:
    """
    Human-friendly due date relative to `now`, in now's timezone.

    Today/Tomorrow/Yesterday, the weekday within the coming week, otherwise
    the absolute `due_format`.
    """
    local_due = due_at.astimezone(now.tzinfo)
    days = (local_due.date() - now.date()).days
    clock = local_due.strftime("%H:%M")

    if days == 0:
        return f"Today {clock}"
    if days == 1:
        return f"Tomorrow {clock}"
    if days == -1:
        return f"Yesterday {clock}"
    if 1 < days < 7:
        return f"{local_due.strftime('%A')} {clock}"
    return local_due.strftime(due_format)


def _finish(line: str, description: str | None, style: str | None) -> Text:
    text = Text(line, style=style or "")
    if description is not None:
        text.append(f"\n\t{description}")
    return text


def render_dated(
    priority: int,
    due_at: datetime,
    name: str,
    description: str | None,
    config: RenderConfig,
    now: datetime,
) -> Text:
    """`(priority) due - name`, plus a tab-indented description when given."""
    style = color_for_date(due_at, now, config.color_threshold) if config.colors else None
    line = f"({priority}) {format_due(due_at, now, config.due_format)} - {name}"
    return _finish(line, description, style)


def render_eventual(
    priority: int,
    name: str,
    description: str | None,
    config: RenderConfig,
) -> Text:
    style = color_for_priority(priority) if config.colors else None
    return _finish(f"({priority}) - {name}", description, style)
