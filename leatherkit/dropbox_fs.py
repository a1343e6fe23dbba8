"""A read/write filesystem view of a Dropbox folder."""

from __future__ import annotations

import io
import posixpath
import stat
import threading
from datetime import datetime, timezone
from typing import Iterator, Optional

from leatherkit.dropbox_client import (
    Client,
    DropboxError,
    GetMetadataParams,
    ListFolderParams,
    Metadata,
    UploadParams,
)
from leatherkit.lmfs import Event, Op

_ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


def _join(*parts: str) -> str:
    joined = "/".join(p for p in parts if p)
    if not joined:
        return ""
    cleaned = posixpath.normpath(joined)
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


class DropboxFS:
    """Files in Dropbox under ``directory``."""

    def __init__(self, client: Client, directory: str = "/"):
        self.client = client
        self.directory = directory

    def _getmeta(self, name: str) -> "DropboxDirEntry":
        path = _join(self.directory, name)
        meta = self.client.get_metadata(GetMetadataParams(path=path))
        return DropboxDirEntry(self, path.removesuffix(meta.name), meta)

    def open(self, name: str) -> "DropboxDirEntry":
        """Return an entry for ``name`` that can be read like a file."""
        try:
            return self._getmeta(name)
        except DropboxError as exc:
            raise DropboxError(f"couldn't open {name}: {exc}") from exc

    def stat(self, name: str) -> "DropboxDirEntry":
        """Return the entry describing ``name``."""
        try:
            return self._getmeta(name)
        except DropboxError as exc:
            raise DropboxError(f"couldn't stat {name}: {exc}") from exc

    def read_dir(self, name: str) -> list["DropboxDirEntry"]:
        """List every entry in the folder ``name``."""
        return self._list(_join(self.directory, name), -1)

    def _list(self, path: str, n: int) -> list["DropboxDirEntry"]:
        limit = n if n > 0 else 0
        try:
            res = self.client.list_folder(ListFolderParams(path=path, limit=limit))
        except DropboxError as exc:
            raise DropboxError(f"path={path} {exc}") from exc

        entries: list[DropboxDirEntry] = []
        while True:
            for meta in res.entries:
                entries.append(DropboxDirEntry(self, path, meta))
                if n > 0 and len(entries) == n:
                    return entries
            if not res.has_more:
                return entries
            res = self.client.list_folder_continue(res.cursor)

    def read_file(self, name: str) -> bytes:
        """Return the contents of ``name``."""
        try:
            return self.client.download(_join(self.directory, name))
        except DropboxError as exc:
            raise DropboxError(f"path={name} {exc}") from exc

    def remove(self, name: str) -> None:
        """Delete ``name``."""
        self.client.delete(_join(self.directory, name))

    def watch(self, directory: str,
              stop: Optional[threading.Event] = None) -> Iterator[list[Event]]:
        """Yield batches of changes under ``directory`` until ``stop`` is set."""
        root = _join(self.directory, directory)
        for batch in self.client.longpoll(root, stop):
            events = []
            for meta in batch:
                if meta.tag == "deleted":
                    op = Op.REMOVE
                elif meta.tag in ("file", "folder"):
                    op = Op.CREATE
                else:
                    raise ValueError("unknown longpoll tag: " + meta.tag)
                events.append(Event(posixpath.relpath(meta.path_lower, root), op))
            yield events

    def sub(self, directory: str) -> "DropboxFS":
        """Return the filesystem rooted at ``directory`` inside this one."""
        return DropboxFS(self.client, _join(self.directory, directory))

    def write_file(self, name: str, contents: bytes, mode: int = 0o644) -> None:
        """Write ``contents`` to ``name``, overwriting; ``mode`` is ignored."""
        self.client.create(
            UploadParams(path=_join(self.directory, name), mode="overwrite"), contents
        )


class DropboxDirEntry:
    """A file or folder in Dropbox, readable like a binary file."""

    def __init__(self, fs: DropboxFS, directory: str, metadata: Metadata):
        self.fs = fs
        self.dir = directory
        self.metadata = metadata
        self._reader: Optional[io.BytesIO] = None

    def __repr__(self) -> str:
        return f"DropboxDirEntry({self.path!r})"

    @property
    def name(self) -> str:
        """The entry's base name."""
        return self.metadata.name

    @property
    def path(self) -> str:
        """The entry's full Dropbox path."""
        return _join(self.dir, self.name)

    @property
    def size(self) -> int:
        """The size in bytes."""
        return self.metadata.size

    def is_dir(self) -> bool:
        """Whether the entry is a folder."""
        return self.metadata.tag == "folder"

    def mode(self) -> int:
        """Read-only permission bits, with the directory bit for folders."""
        if self.is_dir():
            return stat.S_IFDIR | 0o555
        return 0o444

    def mod_time(self) -> datetime:
        """The server modification time, or the zero time when unknown."""
        try:
            parsed = datetime.strptime(self.metadata.server_modified, "%Y-%m-%dT%H:%M:%SZ")
        except ValueError:
            return _ZERO_TIME
        return parsed.replace(tzinfo=timezone.utc)

    def read(self, size: int = -1) -> bytes:
        """Read from the file's contents, downloading them on first use."""
        if self.is_dir():
            raise IsADirectoryError("not a file")
        if self._reader is None:
            self._reader = io.BytesIO(self.fs.client.download(self.path))
        return self._reader.read(size)

    def read_dir(self, n: int = -1) -> list["DropboxDirEntry"]:
        """List up to ``n`` entries of this folder; all of them when ``n`` <= 0."""
        if not self.is_dir():
            raise NotADirectoryError("not a directory")
        return self.fs._list(self.path, n)

    def stat(self) -> "DropboxDirEntry":
        """Return this entry."""
        return self

    def close(self) -> None:
        """Release the downloaded contents."""
        self._reader = None

    def __enter__(self) -> "DropboxDirEntry":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()