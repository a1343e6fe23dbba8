"""A filesystem rooted at a local directory."""

from __future__ import annotations

import os
import queue
import threading
from typing import BinaryIO, Iterator, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from leatherkit.lmfs import Event, Op

_OPS = {
    "created": Op.CREATE,
    "modified": Op.WRITE,
    "deleted": Op.REMOVE,
    "moved": Op.RENAME,
}


def _valid_path(name: str) -> bool:
    if name == ".":
        return True
    if not name or name.startswith("/") or name.endswith("/"):
        return False
    return all(part not in ("", ".", "..") for part in name.split("/"))


class _Forwarder(FileSystemEventHandler):
    def __init__(self, root: str, out: "queue.Queue[list[Event]]"):
        super().__init__()
        self._root = root
        self._out = out

    def _rel(self, path) -> str:
        return os.path.relpath(os.fsdecode(path), self._root)

    def on_any_event(self, event: FileSystemEvent) -> None:
        op = _OPS.get(event.event_type)
        if op is None:
            return
        if event.is_directory and op is Op.WRITE:
            return
        self._out.put([Event(self._rel(event.src_path), op)])
        if op is Op.RENAME:
            dest = getattr(event, "dest_path", "")
            if dest:
                self._out.put([Event(self._rel(dest), Op.CREATE)])


def _events(observer, out: "queue.Queue[list[Event]]",
            stop: Optional[threading.Event]) -> Iterator[list[Event]]:
    try:
        while stop is None or not stop.is_set():
            try:
                batch = out.get(timeout=0.1)
            except queue.Empty:
                continue
            yield batch
    finally:
        observer.stop()
        observer.join()


class DirFS:
    """Files under ``root``, addressed by slash-separated relative names."""

    def __init__(self, root: str):
        self.root = os.fspath(root)

    def __repr__(self) -> str:
        return f"DirFS({self.root!r})"

    def open(self, name: str) -> BinaryIO:
        """Open ``name`` for reading in binary mode."""
        if not _valid_path(name) or (os.name == "nt" and any(c in name for c in "\\:")):
            raise ValueError(f"open {name}: invalid argument")
        return open(self.root + "/" + name, "rb")

    def create(self, name: str) -> BinaryIO:
        """Create or truncate ``name`` and open it for writing."""
        return open(os.path.join(self.root, name), "wb")

    def sub(self, directory: str) -> "DirFS":
        """Return the filesystem rooted at ``directory`` inside this one."""
        return DirFS(os.path.join(self.root, directory))

    def remove(self, name: str) -> None:
        """Remove the file or empty directory ``name``."""
        os.remove(self.root + "/" + name) if not os.path.isdir(
            self.root + "/" + name
        ) else os.rmdir(self.root + "/" + name)

    def watch(self, path: str,
              stop: Optional[threading.Event] = None) -> Iterator[list[Event]]:
        """Yield batches of changes under ``path``, recursively, until ``stop`` is set."""
        root = os.path.join(self.root, path)
        os.stat(root)
        out: "queue.Queue[list[Event]]" = queue.Queue()
        observer = Observer()
        observer.schedule(_Forwarder(root, out), root, recursive=True)
        observer.start()
        return _events(observer, out, stop)