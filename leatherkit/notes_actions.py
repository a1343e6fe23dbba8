"""Actions run on incoming messages: todo items, reminders and deferrals."""

from __future__ import annotations

import hashlib
import random
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import IO, Callable, Sequence, Union

import requests

from leatherkit import personality, reminders
from leatherkit.dropbox_client import DropboxError, UploadParams

_CLIENT_FAILURES = (DropboxError, requests.RequestException)

_IS_ITEM = re.compile(r"^\s?\*\s+(.*?)\s*\Z")
_MD_LINK = re.compile(r"^\[(.*)\]\((.*)\)\Z")

INSPIRATION_PATH = "/notes/content/posts/inspiration.md"

DEFER_PATTERN = re.compile(
    r"^\s*defer\s+(?:(.*)\s+)?(?:until|till|til)\s+"
    r"(\d{4}-\d\d-\d\d|mon|monday|tue|tuesday|wed|wednesday|thu|thur|thursday"
    r"|fri|friday|sat|saturday|sun|sunday)\s*",
    re.IGNORECASE,
)

_WEEKDAYS = {
    "mon": 0, "monday": 0,
    "tue": 1, "tuesday": 1,
    "wed": 2, "wednesday": 2,
    "thu": 3, "thur": 3, "thursday": 3,
    "fri": 4, "friday": 4,
    "sat": 5, "saturday": 5,
    "sun": 6, "sunday": 6,
}

_REMIND_TEMPLATE = """{{
"title": "deferred {id}",
"tags":["deferred"],
"review_by": "{review_by}",
}}

{what}
"""

_TODO_TEMPLATE = """{{
"title": {title},
"date": "{at}",
"tags": [ "private", "inbox" ]
}}
 * {message}
"""

_GO_ESCAPES = {
    '"': '\\"', "\\": "\\\\", "\a": "\\a", "\b": "\\b", "\f": "\\f",
    "\n": "\\n", "\r": "\\r", "\t": "\\t", "\v": "\\v",
}


@dataclass(frozen=True)
class Media:
    """An attachment sent along with a message."""

    content_type: str = ""
    url: str = ""


Action = Callable[[str, Sequence[Media]], str]


class _ActionError(RuntimeError):
    """An action failed; ``reply`` is what to answer the sender."""

    def __init__(self, reply: str, message: str):
        super().__init__(message)
        self.reply = reply


def _read_text(stream: Union[str, bytes, IO]) -> str:
    if hasattr(stream, "read"):
        stream = stream.read()
    if isinstance(stream, (bytes, bytearray)):
        stream = bytes(stream).decode("utf-8")
    return stream


def beer_me(stream: Union[str, bytes, IO]) -> str:
    """Pick a random bullet item from a Markdown list.

    A single link item is returned with spaces around its URL.
    """
    text = _read_text(stream)
    items = []
    for line in text.split("\n"):
        m = _IS_ITEM.match(line.removesuffix("\r"))
        if m is not None:
            items.append(m.group(1))
    if not items:
        raise LookupError("never found anything")

    random.shuffle(items)
    link = _MD_LINK.match(items[0])
    if link is not None:
        return f"[{link.group(1)}]( {link.group(2)} )"
    return items[0]


def inspire_me(client) -> Action:
    """Return an action answering with a random item from the inspiration note."""

    def action(_text: str, _media: Sequence[Media] = ()) -> str:
        try:
            data = client.download(INSPIRATION_PATH)
        except _CLIENT_FAILURES as exc:
            raise _ActionError(personality.err(), f"dropbox.Download: {exc}") from exc
        try:
            return beer_me(data)
        except LookupError as exc:
            raise _ActionError(personality.err(), str(exc)) from exc

    return action


def jump_to(start: datetime, weekday: int) -> datetime:
    """Return the first day on or after ``start`` falling on ``weekday`` (Monday is 0)."""
    return start + timedelta(days=(weekday - start.weekday()) % 7)


def _upload(client, path: str, body: str) -> None:
    try:
        client.create(UploadParams(path=path, autorename=True), body)
    except _CLIENT_FAILURES as exc:
        raise _ActionError(personality.err(), f"dropbox.Create: {exc}") from exc


def _sha1_hex(*parts: str) -> str:
    digest = hashlib.sha1()
    for part in parts:
        digest.update(part.encode("utf-8"))
    return digest.hexdigest()


def defer_message(client) -> Action:
    """Return an action storing ``defer <message> till <date|weekday>`` for later."""

    def action(text: str, media: Sequence[Media] = ()) -> str:
        m = DEFER_PATTERN.match(text)
        if m is None:
            raise _ActionError(
                personality.err(), f"deferMessage: input didn't match pattern ({text})"
            )
        message = m.group(1) or ""
        when = m.group(2)
        weekday = _WEEKDAYS.get(when.lower())
        if weekday is not None:
            when = jump_to(datetime.now(), weekday).strftime("%Y-%m-%d")

        for i, item in enumerate(media):
            if item.content_type.startswith("image/"):
                message += f' <img alt="attachment {i}" src="{item.url}" height="128" />'
            else:
                message += f" [attachment {i}]({item.url})"

        path = f"/notes/.deferred/{when}-{_sha1_hex(message)}.md"
        _upload(client, path, " * " + message + "\n")
        return personality.ack()

    return action


def _rfc3339(when: datetime) -> str:
    text = when.isoformat(timespec="seconds")
    if text.endswith("+00:00"):
        text = text[:-6] + "Z"
    return text


def remind(client) -> Action:
    """Return an action storing ``remind me [to] X (at T|in D)`` as a note to review."""

    def action(text: str, media: Sequence[Media] = ()) -> str:
        try:
            when, what = reminders.parse(datetime.now().astimezone(), text)
        except reminders.InvalidInput as exc:
            raise _ActionError(personality.user_err(exc), str(exc)) from exc

        for item in media:
            what += " " + item.url

        note_id = _sha1_hex(what)
        path = f"/notes/content/posts/deferred_{note_id}.md"
        body = _REMIND_TEMPLATE.format(
            id=note_id, review_by=when.strftime("%Y-%m-%d"), what=what
        )
        _upload(client, path, body)
        return personality.ack() + "; will remind you @ " + _rfc3339(when)

    return action


def _go_quote(text: str) -> str:
    out = ['"']
    for ch in text:
        if ch in _GO_ESCAPES:
            out.append(_GO_ESCAPES[ch])
        elif ch.isprintable():
            out.append(ch)
        elif ord(ch) < 0x80:
            out.append(f"\\x{ord(ch):02x}")
        elif ord(ch) <= 0xFFFF:
            out.append(f"\\u{ord(ch):04x}")
        else:
            out.append(f"\\U{ord(ch):08x}")
    out.append('"')
    return "".join(out)


def todo_body(message: str, at: datetime) -> str:
    """Render the note text for an inbox item created at ``at``."""
    return _TODO_TEMPLATE.format(
        title=_go_quote(message), at=at.strftime("%Y-%m-%dT%H:%M:%S"), message=message
    )


def todo(client) -> Action:
    """Return an action storing the message as an inbox item."""

    def action(text: str, media: Sequence[Media] = ()) -> str:
        note_id = _sha1_hex(text, *(item.url for item in media))
        message = text
        for i, item in enumerate(media):
            if item.content_type.startswith("image/"):
                message += f' <img src="{item.url}" height="128" /> attachment {i} on {note_id}'
            else:
                message += f" [attachment {i} on {note_id}]({item.url})"

        path = f"/notes/content/posts/todo-{note_id}.md"
        _upload(client, path, todo_body(message, datetime.now()))
        return personality.ack()

    return action