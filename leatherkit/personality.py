"""Pseudorandom canned responses."""

from __future__ import annotations

import random

_ACKS = [
    "station",
    "got em.",
    "👍",
    "ack",
    "10-4",
    "wilco",
    "aye aye cap'm'",
]

_ERRS = [
    "COMPTER FAIL",
    "Shucks Howdy! 🤠",
    "FAIL🐳",
]

_USER_ERRS = [
    "PEBCAK",
    "You're holding it wrong",
    "WRONG",
]


def ack() -> str:
    """Return a string meaning "yes"."""
    offset = 100
    res = random.randrange(offset + len(_ACKS))
    if res > offset:
        return _ACKS[res - offset]
    return "Aight"


def err() -> str:
    """Return a string meaning something went wrong."""
    return random.choice(_ERRS)


def user_err(error: BaseException) -> str:
    """Return a string blaming the user, if ``error`` is about invalid input."""
    if callable(getattr(error, "invalid_input", None)):
        return f"{random.choice(_USER_ERRS)}: {error}"
    return err()