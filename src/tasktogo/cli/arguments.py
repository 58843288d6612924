# src/tasktogo/cli/arguments.py

"""
Parsing of command arguments into task fields.

Command lines are tokenized with shlex (quotes and backslashes work as in a
shell). A lone "--" token separates the arguments from an optional
description.
"""

from __future__ import annotations

import re
import shlex
from dataclasses import dataclass
from datetime import datetime, timedelta

from dateutil import parser as dtparser
from dateutil.relativedelta import relativedelta

# Absolute format used by `recurring` (two tokens: date and time).
FULL_FORMAT = "%Y-%m-%d %H:%M"

DESCRIPTION_SEPARATOR = "--"

_INT_RE = re.compile(r"[+-]?\d+")
_YEAR_RE = re.compile(r"\b\d{4}\b")
_DURATION_PART = r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h|d|w)"
_DURATION_RE = re.compile(rf"(?:{_DURATION_PART})+")
_DURATION_PART_RE = re.compile(_DURATION_PART)

_UNIT_MICROSECONDS = {
    "ns": 0.001,
    "us": 1.0,
    "µs": 1.0,
    "ms": 1_000.0,
    "s": 1_000_000.0,
    "m": 60 * 1_000_000.0,
    "h": 60 * 60 * 1_000_000.0,
    "d": 24 * 60 * 60 * 1_000_000.0,
    "w": 7 * 24 * 60 * 60 * 1_000_000.0,
}


class CommandError(Exception):
    """User input that cannot be turned into a command."""


@dataclass(slots=True, frozen=True)
class DatedArgs:
    name: str
    priority: int
    due_at: datetime
    description: str


@dataclass(slots=True, frozen=True)
class EventualArgs:
    name: str
    priority: int
    description: str


@dataclass(slots=True, frozen=True)
class RecurringArgs:
    name: str
    priority: int
    start: datetime
    end: datetime | None
    delays: tuple[timedelta, ...]
    description: str


def tokenize(line: str) -> list[str]:
    try:
        return shlex.split(line)
    except ValueError as e:
        raise CommandError(f"could not split arguments: {e}") from e


def split_description(args: list[str]) -> tuple[list[str], str]:
    if DESCRIPTION_SEPARATOR not in args:
        return list(args), ""
    i = args.index(DESCRIPTION_SEPARATOR)
    return list(args[:i]), " ".join(args[i + 1 :])


def is_int(token: str) -> bool:
    return bool(_INT_RE.fullmatch(token))


def parse_duration(text: str) -> timedelta:
    """
    Parse a duration such as "90m", "1h30m", "1.5h" or "2d".

    Units: ns, us (µs), ms, s, m, h, d, w. A leading "-" is accepted so that
    the schedule can reject it with a precise message.
    """
    raw = text.strip()
    sign = 1
    if raw and raw[0] in "+-":
        sign = -1 if raw[0] == "-" else 1
        raw = raw[1:]

    if raw == "0":
        return timedelta(0)
    if not raw or not _DURATION_RE.fullmatch(raw):
        raise CommandError(f"invalid duration {text!r}")

    micros = 0.0
    for m in _DURATION_PART_RE.finditer(raw):
        micros += float(m.group(1)) * _UNIT_MICROSECONDS[m.group(2)]
    try:
        return sign * timedelta(microseconds=micros)
    except OverflowError as e:
        raise CommandError(f"invalid duration {text!r}") from e


def parse_delays(text: str) -> tuple[timedelta, ...]:
    return tuple(parse_duration(part) for part in text.split(",") if part.strip())


def _to_local(value: datetime) -> datetime:
    # Naive input is wall-clock time in the local zone, with the offset that
    # applies on that date.
    return value.astimezone() if value.tzinfo is None else value


def parse_due(text: str, now: datetime) -> datetime:
    """
    Parse a due date such as "Jan 27 12:00".

    Without an explicit year the next occurrence of that date is used: this
    year, or next year if it has already passed.
    """
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0, tzinfo=None)
    try:
        due = dtparser.parse(text, default=midnight)
    except (ValueError, OverflowError) as e:
        raise CommandError(f"could not parse due date {text!r}") from e

    local_due = _to_local(due)
    if local_due < now and not _YEAR_RE.search(text):
        local_due = _to_local(due + relativedelta(years=1))
    return local_due


def parse_full_time(date_token: str, time_token: str) -> datetime | None:
    """Parse a date token and a time token in FULL_FORMAT; None if they do not match."""
    try:
        value = datetime.strptime(f"{date_token} {time_token}", FULL_FORMAT)
    except ValueError:
        return None
    return _to_local(value)


def _split_name_priority(args: list[str]) -> tuple[str, int, list[str]]:
    """
    Leading words up to the first integer form the name; the integer is the
    priority; everything after it is returned as the remainder.
    """
    for i, token in enumerate(args):
        if is_int(token):
            name = " ".join(args[:i]).strip()
            if not name:
                raise CommandError("no task name given")
            return name, int(token), list(args[i + 1 :])
    raise CommandError("no priority argument given")


def parse_add(args: list[str], now: datetime) -> DatedArgs:
    """add <name...> <priority> <month> <day> <HH:MM> [-- description]"""
    args, description = split_description(args)
    name, priority, rest = _split_name_priority(args)
    if not rest:
        raise CommandError("no due date given")
    return DatedArgs(
        name=name,
        priority=priority,
        due_at=parse_due(" ".join(rest), now),
        description=description,
    )


def parse_eventually(args: list[str]) -> EventualArgs:
    """eventually <name...> <priority> [-- description]"""
    args, description = split_description(args)
    name, priority, _ = _split_name_priority(args)
    return EventualArgs(name=name, priority=priority, description=description)


def parse_recurring(args: list[str], now: datetime) -> RecurringArgs:
    """
    recurring <name...> <priority> <start> [<end>] <delay[,delay...]> [-- description]

    Read right to left: the delays, then one or two "YYYY-MM-DD HH:MM"
    timestamps (the later one being the end when there are two), then the
    priority; the remaining words are the name.
    """
    args, description = split_description(args)
    if not args:
        raise CommandError("no arguments given")

    delays = parse_delays(args[-1])
    if not delays:
        raise CommandError("no delay given")
    rest = args[:-1]

    if len(rest) < 2:
        raise CommandError("no start time given")
    last = parse_full_time(rest[-2], rest[-1])
    if last is None:
        raise CommandError(f"could not parse time {rest[-2]!r} {rest[-1]!r}, expected YYYY-MM-DD HH:MM")
    rest = rest[:-2]

    start, end = last, None
    if len(rest) >= 2:
        earlier = parse_full_time(rest[-2], rest[-1])
        if earlier is not None:
            start, end = earlier, last
            rest = rest[:-2]

    if not rest or not is_int(rest[-1]):
        raise CommandError("no priority argument given")
    priority = int(rest[-1])
    name = " ".join(rest[:-1]).strip()
    if not name:
        raise CommandError("no task name given")

    return RecurringArgs(
        name=name,
        priority=priority,
        start=start,
        end=end,
        delays=delays,
        description=description,
    )
