"""Optional filesystem operations: writing, watching and removing.

A filesystem here is any object with an ``open`` method.  Extra
capabilities are found by looking for the matching method on it.
"""

from __future__ import annotations

import enum
import threading
from dataclasses import dataclass
from typing import Any, Iterator, Optional

_UNSUPPORTED = "filesystem does not support requested operation"


class Op(enum.Flag):
    """The kind of change a watch event describes."""

    CREATE = 1
    WRITE = 2
    REMOVE = 4
    RENAME = 8
    CHMOD = 16


@dataclass(frozen=True)
class Event:
    """A change to ``name``, relative to the watched directory."""

    name: str
    op: Op


class UnsupportedOperation(Exception):
    """Raised when a filesystem lacks the requested capability."""


def _method(fs: Any, name: str):
    method = getattr(fs, name, None)
    return method if callable(method) else None


def write_file(fs: Any, name: str, contents: bytes, mode: int = 0o644) -> None:
    """Write ``contents`` to ``name`` through ``fs``.

    Uses ``fs.write_file`` when present, otherwise ``fs.create``; the
    second way does not apply ``mode``.
    """
    writer = _method(fs, "write_file")
    if writer is not None:
        writer(name, contents, mode)
        return

    creator = _method(fs, "create")
    if creator is not None:
        handle = creator(name)
        try:
            handle.write(contents)
        finally:
            handle.close()
        return

    raise UnsupportedOperation(f"couldn't write file via {type(fs).__name__}: {_UNSUPPORTED}")


def watch(fs: Any, directory: str,
          stop: Optional[threading.Event] = None) -> Iterator[list[Event]]:
    """Return batches of events for changes under ``directory``."""
    watcher = _method(fs, "watch")
    if watcher is None:
        raise UnsupportedOperation(f"couldn't watch dir via {type(fs).__name__}: {_UNSUPPORTED}")
    return watcher(directory, stop)


def remove(fs: Any, path: str) -> None:
    """Remove ``path`` through ``fs``."""
    remover = _method(fs, "remove")
    if remover is None:
        raise UnsupportedOperation(_UNSUPPORTED)
    remover(path)