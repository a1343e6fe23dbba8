"""Parse free-form "remind me" messages into a time and a message."""

from __future__ import annotations

import re
from datetime import datetime, timedelta
from typing import Optional

_REMIND_FORMAT = re.compile(
    r"^remind\s+me(?:\s+to)?\s+(?P<message>.+)\s+"
    r"(?:at\s+(?P<when>.+)|in\s+(?P<duration>.+))\Z",
    re.IGNORECASE,
)

_CLOCK = re.compile(r"(\d{1,2})(?::(\d{2}))?(am|pm)")

_GO_DURATION = re.compile(r"(?:(?:\d+\.?\d*|\.\d+)(?:ns|us|µs|μs|ms|h|m|s))+")
_GO_PIECE = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|h|m|s)")
_UNIT_MICROSECONDS = {
    "ns": 0.001,
    "us": 1,
    "µs": 1,
    "μs": 1,
    "ms": 1_000,
    "s": 1_000_000,
    "m": 60_000_000,
    "h": 3_600_000_000,
}

# an hour, two hours, 2 hours, etc
_LAZY = re.compile(
    r"^(\d+|a|an|one|two|three|four|five|six|seven|eight|nine)\s+(hours?|minutes?|days?)$"
)
_WORD_COUNTS = {
    "a": 1, "an": 1, "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10,
}
_UNITS = {
    "hour": timedelta(hours=1), "hours": timedelta(hours=1),
    "minute": timedelta(minutes=1), "minutes": timedelta(minutes=1),
    "day": timedelta(days=1), "days": timedelta(days=1),
}


class InvalidInput(ValueError):
    """Raised when the user's message cannot be understood."""

    def invalid_input(self) -> bool:
        """Mark this error as caused by invalid user input."""
        return True


def next_time(start: datetime, clock: datetime) -> datetime:
    """Return the first moment at or after ``start`` whose clock matches ``clock``."""
    midnight = start.replace(hour=0, minute=0, second=0, microsecond=0)
    soon = midnight + timedelta(
        hours=clock.hour,
        minutes=clock.minute,
        seconds=clock.second,
        microseconds=clock.microsecond,
    )
    if soon < start:
        return soon + timedelta(days=1)
    return soon


def _parse_clock(text: str) -> Optional[datetime]:
    m = _CLOCK.fullmatch(text)
    if m is None:
        return None
    hour = int(m.group(1))
    minute = int(m.group(2) or 0)
    if hour > 12 or minute > 59:
        return None
    if m.group(3) == "pm" and hour < 12:
        hour += 12
    elif m.group(3) == "am" and hour == 12:
        hour = 0
    return datetime(1, 1, 1, hour, minute)


def _parse_go_duration(text: str) -> Optional[timedelta]:
    sign = 1
    body = text
    if body[:1] in "+-" and body:
        sign = -1 if body[0] == "-" else 1
        body = body[1:]
    if body == "0":
        return timedelta(0)
    if not body or not _GO_DURATION.fullmatch(body):
        return None
    micros = sum(float(n) * _UNIT_MICROSECONDS[u] for n, u in _GO_PIECE.findall(body))
    return timedelta(microseconds=sign * micros)


def parse_duration(text: str) -> timedelta:
    """Parse ``10m``-style or ``two hours``-style durations; zero means invalid."""
    parsed = _parse_go_duration(text)
    if parsed is not None:
        return parsed
    m = _LAZY.match(text)
    if m is None:
        return timedelta(0)
    count = _WORD_COUNTS.get(m.group(1))
    if count is None:
        count = int(m.group(1))
    return count * _UNITS[m.group(2)]


def parse(now: datetime, message: str) -> tuple[datetime, str]:
    """Parse ``remind me [to] X (at T|in D)`` into ``(when, X)``."""
    m = _REMIND_FORMAT.match(message)
    if m is None:
        raise InvalidInput("invalid remind format")
    what = m.group("message")
    if not what:
        raise InvalidInput("blank event")

    when = m.group("when")
    duration = m.group("duration")
    if when:
        when = when.lower()
        if when == "noon":
            when = "12:00pm"
        elif when == "midnight":
            when = "12:00am"
        clock = _parse_clock(when)
        if clock is None:
            raise InvalidInput("invalid remind format")
        return next_time(now, clock), what
    if duration:
        delta = parse_duration(duration)
        if delta == timedelta(0):
            raise InvalidInput("invalid duration format")
        return now + delta, what
    raise RuntimeError("impossible")