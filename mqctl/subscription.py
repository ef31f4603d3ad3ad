"""Start positions for events-store subscriptions and duration handling."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum

from .errors import CommandError

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

CHOICE_NEW = "start from new messages only"
CHOICE_FIRST = "start from first body"
CHOICE_LAST = "start from last body"
CHOICE_SEQUENCE = "start from sequence"
CHOICE_TIME = "start from time"
CHOICE_DURATION = "start from duration"

CHOICES = (
    CHOICE_NEW,
    CHOICE_FIRST,
    CHOICE_LAST,
    CHOICE_SEQUENCE,
    CHOICE_TIME,
    CHOICE_DURATION,
)

DEFAULT_SEQUENCE = "1"
DEFAULT_DURATION = "1h"

_NS_PER_SECOND = 1_000_000_000
_MAX_NS = (1 << 63) - 1
_UNITS = {
    "ns": 1,
    "us": 1_000,
    "\u00b5s": 1_000,
    "\u03bcs": 1_000,
    "ms": 1_000_000,
    "s": _NS_PER_SECOND,
    "m": 60 * _NS_PER_SECOND,
    "h": 3600 * _NS_PER_SECOND,
}
_NUMBER = re.compile(r"([0-9]*)(?:\.([0-9]*))?")
_UNIT = re.compile(r"[^0-9.]*")
_TIME = re.compile(
    r"([0-9]{4})-([0-9]{2})-([0-9]{2}) ([0-9]{1,2}):([0-9]{2}):([0-9]{2})(?:[.,]([0-9]+))?"
)
_SEQUENCE = re.compile(r"[+-]?[0-9]+")


class StartKind(Enum):
    """Where a subscription starts reading the store."""

    NEW = "new"
    FIRST = "first"
    LAST = "last"
    SEQUENCE = "sequence"
    TIME = "time"
    TIME_DELTA = "time_delta"


@dataclass(frozen=True)
class SubscriptionOption:
    """A start position; value is a sequence, a UTC datetime or seconds back."""

    kind: StartKind
    value: int | float | datetime | None = None


def parse_duration(text: str) -> float:
    """Parse a duration such as "1h30m" or "250ms" into seconds."""
    invalid = ValueError(f'time: invalid duration "{text}"')
    rest = text
    negative = False
    if rest[:1] in ("-", "+"):
        negative = rest[0] == "-"
        rest = rest[1:]
    if rest == "0":
        return 0.0
    if not rest:
        raise invalid
    total = 0
    while rest:
        number = _NUMBER.match(rest)
        whole, fraction = number.group(1), number.group(2) or ""
        if not whole and not fraction:
            raise invalid
        rest = rest[number.end():]
        unit = _UNIT.match(rest).group(0)
        rest = rest[len(unit):]
        if not unit:
            raise ValueError(f'time: missing unit in duration "{text}"')
        if unit not in _UNITS:
            raise ValueError(f'time: unknown unit "{unit}" in duration "{text}"')
        scale = _UNITS[unit]
        nanos = int(whole or "0") * scale
        if fraction:
            nanos += int(fraction) * scale // 10 ** len(fraction)
        total += nanos
        if total > _MAX_NS:
            raise invalid
    return (-total if negative else total) / _NS_PER_SECOND


def _with_fraction(value: int, precision: int) -> str:
    whole, remainder = divmod(value, 10**precision)
    digits = f"{remainder:0{precision}d}".rstrip("0")
    return f"{whole}.{digits}" if digits else str(whole)


def format_duration(seconds: float) -> str:
    """Render seconds in the compact "1h2m3.5s" style."""
    nanos = round(seconds * _NS_PER_SECOND)
    sign = "-" if nanos < 0 else ""
    value = abs(nanos)
    if value == 0:
        return "0s"
    if value < 1_000:
        return f"{sign}{value}ns"
    if value < 1_000_000:
        return f"{sign}{_with_fraction(value, 3)}\u00b5s"
    if value < _NS_PER_SECOND:
        return f"{sign}{_with_fraction(value, 6)}ms"
    whole_seconds = value // _NS_PER_SECOND
    text = _with_fraction(value % (60 * _NS_PER_SECOND), 9) + "s"
    minutes = whole_seconds // 60
    if minutes:
        text = f"{minutes % 60}m{text}"
        hours = minutes // 60
        if hours:
            text = f"{hours}h{text}"
    return sign + text


def parse_start_time(text: str) -> datetime:
    """Parse "YYYY-MM-DD HH:MM:SS" as a UTC moment."""
    match = _TIME.fullmatch(text)
    if match is None:
        raise ValueError(f'cannot parse "{text}" as "YYYY-MM-DD HH:MM:SS"')
    year, month, day, hour, minute, second, fraction = match.groups()
    micros = int((fraction or "").ljust(6, "0")[:6])
    return datetime(
        int(year),
        int(month),
        int(day),
        int(hour),
        int(minute),
        int(second),
        micros,
        tzinfo=timezone.utc,
    )


def subscription_from_flags(
    start_new: bool = False,
    start_first: bool = False,
    start_last: bool = False,
    start_sequence: int = 0,
    start_time: str = "",
    start_duration: str = "",
) -> SubscriptionOption | None:
    """Pick the start position from command-line flags; None means none was set."""
    if start_new:
        return SubscriptionOption(StartKind.NEW)
    if start_first:
        return SubscriptionOption(StartKind.FIRST)
    if start_last:
        return SubscriptionOption(StartKind.LAST)
    if start_sequence > 0:
        return SubscriptionOption(StartKind.SEQUENCE, start_sequence)
    if start_time:
        try:
            moment = parse_start_time(start_time)
        except ValueError as exc:
            raise CommandError(f"start time format error, {exc}") from exc
        return SubscriptionOption(StartKind.TIME, moment)
    if start_duration:
        try:
            delta = parse_duration(start_duration)
        except ValueError as exc:
            raise CommandError(f"start duration format error, {exc}") from exc
        return SubscriptionOption(StartKind.TIME_DELTA, delta)
    return None


def _default_start_time() -> str:
    moment = datetime.now(timezone.utc) - timedelta(minutes=1)
    return moment.strftime(TIME_FORMAT)


def subscription_from_choice(choice: str, value: str | None = None) -> SubscriptionOption:
    """Build the start position from an interactive choice and its typed value."""
    if choice == CHOICE_NEW:
        return SubscriptionOption(StartKind.NEW)
    if choice == CHOICE_FIRST:
        return SubscriptionOption(StartKind.FIRST)
    if choice == CHOICE_LAST:
        return SubscriptionOption(StartKind.LAST)
    if choice == CHOICE_SEQUENCE:
        text = DEFAULT_SEQUENCE if value is None else value
        if not _SEQUENCE.fullmatch(text):
            raise ValueError(f'invalid sequence "{text}"')
        return SubscriptionOption(StartKind.SEQUENCE, int(text))
    if choice == CHOICE_TIME:
        text = _default_start_time() if value is None else value
        return SubscriptionOption(StartKind.TIME, parse_start_time(text))
    if choice == CHOICE_DURATION:
        text = DEFAULT_DURATION if value is None else value
        return SubscriptionOption(StartKind.TIME_DELTA, parse_duration(text))
    raise CommandError("invalid input")