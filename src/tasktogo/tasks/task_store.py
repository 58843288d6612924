# src/tasktogo/tasks/task_store.py

from __future__ import annotations

import contextlib
import json
import logging
import os
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from dateutil.parser import isoparse

from ..core.ports import TaskContainer
from .priority import to_nanoseconds
from .registry import TaskRegistry
from .task_models import (
    CompletionTracker,
    ContainerKind,
    EventualTask,
    OccurrenceTemplate,
    OneShotTask,
    RecurrenceSchedule,
)

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1

# Zero time written by tasktogo 0.2 files for "no end".
_LEGACY_ZERO_TIME_PREFIX = "0001-01-01T00:00:00"


class TaskStoreError(Exception):
    """The task file could not be decoded."""


class UnknownContainerKindError(TaskStoreError):
    pass


# ---- field helpers ----


def _time_to_str(value: datetime) -> str:
    return value.isoformat()


def _str_to_time(raw: Any, what: str) -> datetime:
    if not isinstance(raw, str) or not raw:
        raise TaskStoreError(f"{what}: expected an ISO 8601 timestamp, got {raw!r}")
    try:
        value = isoparse(raw)
    except ValueError as e:
        raise TaskStoreError(f"{what}: invalid timestamp {raw!r}") from e
    if value.tzinfo is None:
        # Files written by hand may omit the offset; read them as local time.
        value = value.astimezone()
    return value


def _ns_to_delta(raw: Any, what: str) -> timedelta:
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise TaskStoreError(f"{what}: expected integer nanoseconds, got {raw!r}")
    return timedelta(microseconds=raw // 1_000)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _count(raw: Any, what: str) -> int:
    if raw is None:
        return 0
    if not _is_int(raw):
        raise TaskStoreError(f"{what}: expected an integer, got {raw!r}")
    return raw


def _indices(raw: Any, what: str) -> set[int]:
    if raw is None:
        return set()
    if not isinstance(raw, list) or not all(_is_int(i) for i in raw):
        raise TaskStoreError(f"{what}: expected a list of integers, got {raw!r}")
    return set(raw)


def _require(record: dict[str, Any], key: str, kind: type, what: str) -> Any:
    if key not in record:
        raise TaskStoreError(f"{what}: missing field {key!r}")
    value = record[key]
    if kind is int and isinstance(value, bool):
        raise TaskStoreError(f"{what}: field {key!r} must be an integer")
    if not isinstance(value, kind):
        raise TaskStoreError(f"{what}: field {key!r} must be {kind.__name__}")
    return value


# ---- current format ----


def encode_container(container: TaskContainer) -> dict[str, Any]:
    if isinstance(container, OneShotTask):
        return {
            "kind": ContainerKind.ONE_SHOT.value,
            "priority": container.priority,
            "due_at": _time_to_str(container.due_at),
            "name": container.name,
            "description": container.description,
        }
    if isinstance(container, EventualTask):
        return {
            "kind": ContainerKind.EVENTUAL.value,
            "priority": container.priority,
            "name": container.name,
            "description": container.description,
        }
    if isinstance(container, RecurrenceSchedule):
        return {
            "kind": ContainerKind.RECURRING.value,
            "start": _time_to_str(container.start),
            "end": _time_to_str(container.end) if container.end is not None else None,
            "delays_ns": [to_nanoseconds(d) for d in container.delays],
            "last_completed": container.tracker.last_completed,
            "exceptions": sorted(container.tracker.exceptions),
            "template": {
                "priority": container.template.priority,
                "name": container.template.name,
                "description": container.template.description,
            },
        }
    raise UnknownContainerKindError(f"cannot encode container of type {type(container).__name__}")


def decode_container(record: Any) -> TaskContainer:
    if not isinstance(record, dict):
        raise TaskStoreError(f"container record must be an object, got {type(record).__name__}")

    raw_kind = record.get("kind")
    try:
        kind = ContainerKind(raw_kind)
    except ValueError:
        raise UnknownContainerKindError(f"unknown container kind {raw_kind!r}") from None

    what = f"{kind.value} record"
    try:
        if kind is ContainerKind.ONE_SHOT:
            return OneShotTask(
                priority=_require(record, "priority", int, what),
                due_at=_str_to_time(record.get("due_at"), f"{what} due_at"),
                name=_require(record, "name", str, what),
                description=str(record.get("description") or ""),
            )

        if kind is ContainerKind.EVENTUAL:
            return EventualTask(
                priority=_require(record, "priority", int, what),
                name=_require(record, "name", str, what),
                description=str(record.get("description") or ""),
            )

        template = _require(record, "template", dict, what)
        raw_end = record.get("end")
        return RecurrenceSchedule(
            start=_str_to_time(record.get("start"), f"{what} start"),
            end=_str_to_time(raw_end, f"{what} end") if raw_end is not None else None,
            delays=tuple(
                _ns_to_delta(d, f"{what} delays_ns") for d in _require(record, "delays_ns", list, what)
            ),
            template=OccurrenceTemplate(
                priority=_require(template, "priority", int, f"{what} template"),
                name=_require(template, "name", str, f"{what} template"),
                description=str(template.get("description") or ""),
            ),
            tracker=CompletionTracker(
                last_completed=_count(record.get("last_completed"), f"{what} last_completed"),
                exceptions=_indices(record.get("exceptions"), f"{what} exceptions"),
            ),
        )
    except (ValueError, TypeError) as e:
        raise TaskStoreError(f"{what}: {e}") from e


def encode_registry(registry: TaskRegistry) -> dict[str, Any]:
    return {
        "version": FORMAT_VERSION,
        "containers": [encode_container(c) for c in registry],
    }


# ---- legacy format (tasktogo 0.2 files) ----


def _legacy_time(raw: Any, what: str) -> datetime | None:
    if raw is None or (isinstance(raw, str) and raw.startswith(_LEGACY_ZERO_TIME_PREFIX)):
        return None
    return _str_to_time(raw, what)


def _decode_legacy(data: dict[str, Any]) -> list[TaskContainer]:
    """
    Convert a file written by tasktogo 0.2.

    Layout: {"Definite": [...], "Eventual": [...], "Recurring": [...]} with
    capitalised field names and durations in nanoseconds.
    """
    out: list[TaskContainer] = []
    try:
        for rec in data.get("Definite") or ():
            due = _legacy_time(rec.get("DueBy"), "Definite DueBy")
            if due is None:
                raise TaskStoreError("Definite task without a due date")
            out.append(
                OneShotTask(
                    priority=int(rec.get("Priority") or 0),
                    due_at=due,
                    name=str(rec.get("Name") or ""),
                    description=str(rec.get("Description") or ""),
                )
            )

        for rec in data.get("Eventual") or ():
            out.append(
                EventualTask(
                    priority=int(rec.get("Priority") or 0),
                    name=str(rec.get("Name") or ""),
                    description=str(rec.get("Description") or ""),
                )
            )

        for rec in data.get("Recurring") or ():
            start = _legacy_time(rec.get("Start"), "Recurring Start")
            if start is None:
                raise TaskStoreError("Recurring task without a start")
            spawn = rec.get("Spawn") or {}
            out.append(
                RecurrenceSchedule(
                    start=start,
                    end=_legacy_time(rec.get("End"), "Recurring End"),
                    delays=tuple(_ns_to_delta(d, "Recurring Delay") for d in rec.get("Delay") or ()),
                    template=OccurrenceTemplate(
                        priority=int(spawn.get("Priority") or 0),
                        name=str(spawn.get("Name") or ""),
                        description=str(spawn.get("Description") or ""),
                    ),
                    tracker=CompletionTracker(
                        last_completed=_count(rec.get("LastCompleted"), "Recurring LastCompleted"),
                        exceptions=_indices(rec.get("Except"), "Recurring Except"),
                    ),
                )
            )
    except (ValueError, AttributeError, TypeError) as e:
        raise TaskStoreError(f"invalid legacy task file: {e}") from e

    return out


def decode_registry(data: Any) -> TaskRegistry:
    if not isinstance(data, dict):
        raise TaskStoreError(f"task file must contain an object, got {type(data).__name__}")

    if "containers" in data:
        version = data.get("version", FORMAT_VERSION)
        if version != FORMAT_VERSION:
            raise TaskStoreError(f"unsupported task file version {version!r}")
        records = data["containers"]
        if not isinstance(records, list):
            raise TaskStoreError("'containers' must be a list")
        return TaskRegistry(decode_container(r) for r in records)

    if {"Definite", "Eventual", "Recurring"} & data.keys():
        return TaskRegistry(_decode_legacy(data))

    if not data:
        return TaskRegistry()

    raise TaskStoreError("unrecognised task file layout")


class TaskFileStore:
    """
    JSON file holding every container of a registry.

    Writes are atomic (temp file + os.replace). A missing file reads as an
    empty registry and sets is_new.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path).expanduser()
        self.is_new = False

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> TaskRegistry:
        if not self._path.exists():
            logger.info("Task file %s doesn't exist, using blank list", self._path)
            self.is_new = True
            return TaskRegistry()

        self.is_new = False
        try:
            data = json.loads(self._path.read_text("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise TaskStoreError(f"{self._path}: not valid JSON ({e})") from e

        registry = decode_registry(data)
        logger.info("Loaded %d containers from %s", len(registry), self._path)
        return registry

    def save(self, registry: TaskRegistry) -> None:
        payload = json.dumps(encode_registry(registry), ensure_ascii=False, indent=2)

        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            tmp.write_text(payload + "\n", "utf-8")
            os.replace(tmp, self._path)
        except OSError:
            with contextlib.suppress(OSError):
                tmp.unlink(missing_ok=True)
            raise
        with contextlib.suppress(OSError):
            # Best-effort: keep the task list private on disk.
            os.chmod(self._path, 0o600)
        self.is_new = False
        logger.info("Saved %d containers to %s", len(registry), self._path)
