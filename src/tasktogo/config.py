# src/tasktogo/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Every value has a default; an empty environment gives a working setup.
- Command line flags override a copy of the settings, never the environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKTOGO"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default.expanduser()
    return Path(os.path.expandvars(raw)).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Task list ----
    list_path: Path
    max_list_items: int

    # ---- Rendering ----
    colors: bool
    due_format: str
    color_threshold_hours: float

    @staticmethod
    def from_env() -> Settings:
        data_dir = _env_path(_k("DATA_DIR"), Path("~/.local/state/tasktogo"))

        return Settings(
            app_name=_env(_k("APP_NAME"), "tasktogo") or "tasktogo",
            log_level=_env(_k("LOG_LEVEL"), "WARNING"),
            data_dir=data_dir,
            list_path=_env_path(_k("LIST_PATH"), Path("~/.tasktogo")),
            max_list_items=max(0, _env_int(_k("MAX_LIST_ITEMS"), 0)),
            colors=_env_bool(_k("COLORS"), True),
            due_format=_env(_k("DUE_FORMAT"), "%A, %b %d, %H:%M") or "%A, %b %d, %H:%M",
            color_threshold_hours=max(0.01, _env_float(_k("COLOR_THRESHOLD_HOURS"), 24.0)),
        )

    def with_overrides(
        self,
        *,
        list_path: str | Path | None = None,
        colors: bool | None = None,
    ) -> Settings:
        s = self
        if list_path is not None:
            s = replace(s, list_path=Path(os.path.expandvars(str(list_path))).expanduser())
        if colors is not None:
            s = replace(s, colors=colors)
        return s


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
