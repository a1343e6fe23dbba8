"""A small client for the Dropbox HTTP API."""

from __future__ import annotations

import json
import sys
import threading
import time
from dataclasses import dataclass, field
from typing import IO, Any, Iterator, Optional, Union

import requests

API_URL = "https://api.dropboxapi.com/2/files"
CONTENT_URL = "https://content.dropboxapi.com/2/files"
NOTIFY_URL = "https://notify.dropboxapi.com/2/files"


class DropboxError(Exception):
    """Raised when Dropbox answers with an error or an unreadable body."""


def _compact(obj: Any) -> str:
    return json.dumps(obj, separators=(",", ":"))


@dataclass
class GetMetadataParams:
    """Parameters to the get_metadata endpoint."""

    path: str
    include_media_info: bool = False
    include_deleted: bool = False
    include_has_explicit_shared_members: bool = False
    include_property_groups: list[str] = field(default_factory=list)

    def to_json(self) -> dict[str, Any]:
        """Return the request body, leaving out empty optional fields."""
        out: dict[str, Any] = {"path": self.path}
        for key in (
            "include_media_info",
            "include_deleted",
            "include_has_explicit_shared_members",
            "include_property_groups",
        ):
            value = getattr(self, key)
            if value:
                out[key] = value
        return out


@dataclass
class ListFolderParams:
    """Parameters to the list_folder endpoint."""

    path: str
    recursive: bool = False
    include_media_info: bool = False
    include_deleted: bool = False
    include_has_explicit_shared_members: bool = False
    include_mounted_folders: bool = False
    include_non_downloadable_files: bool = False
    limit: int = 0

    def to_json(self) -> dict[str, Any]:
        """Return the request body; ``limit`` is left out when zero."""
        out: dict[str, Any] = {
            "path": self.path,
            "recursive": self.recursive,
            "include_media_info": self.include_media_info,
            "include_deleted": self.include_deleted,
            "include_has_explicit_shared_members": self.include_has_explicit_shared_members,
            "include_mounted_folders": self.include_mounted_folders,
            "include_non_downloadable_files": self.include_non_downloadable_files,
        }
        if self.limit:
            out["limit"] = self.limit
        return out


@dataclass
class Metadata:
    """Metadata of a file, folder or deleted entry."""

    tag: str = ""
    name: str = ""
    id: str = ""
    client_modified: str = ""
    server_modified: str = ""
    rev: str = ""
    size: int = 0
    path_lower: str = ""
    path_display: str = ""
    sharing_info: dict[str, Any] = field(default_factory=dict)
    is_downloadable: bool = False
    property_groups: list[dict[str, Any]] = field(default_factory=list)
    has_explicit_shared_members: bool = False
    content_hash: str = ""
    file_lock_info: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "Metadata":
        """Build metadata from a decoded API object, ignoring unknown keys."""
        if not isinstance(data, dict):
            raise DropboxError(f"expected an object, got {type(data).__name__}")
        return cls(
            tag=data.get(".tag", ""),
            name=data.get("name", ""),
            id=data.get("id", ""),
            client_modified=data.get("client_modified", ""),
            server_modified=data.get("server_modified", ""),
            rev=data.get("rev", ""),
            size=int(data.get("size", 0) or 0),
            path_lower=data.get("path_lower", ""),
            path_display=data.get("path_display", ""),
            sharing_info=dict(data.get("sharing_info") or {}),
            is_downloadable=bool(data.get("is_downloadable", False)),
            property_groups=list(data.get("property_groups") or []),
            has_explicit_shared_members=bool(data.get("has_explicit_shared_members", False)),
            content_hash=data.get("content_hash", ""),
            file_lock_info=dict(data.get("file_lock_info") or {}),
        )


@dataclass
class ListFolderResult:
    """One page of a folder listing."""

    entries: list[Metadata] = field(default_factory=list)
    cursor: str = ""
    has_more: bool = False

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "ListFolderResult":
        """Build a result from a decoded API object."""
        if not isinstance(data, dict):
            raise DropboxError(f"expected an object, got {type(data).__name__}")
        return cls(
            entries=[Metadata.from_json(e) for e in data.get("entries") or []],
            cursor=data.get("cursor", ""),
            has_more=bool(data.get("has_more", False)),
        )


@dataclass
class UploadParams:
    """Parameters to the upload endpoint."""

    path: str
    autorename: bool = False
    mode: str = ""

    def to_json(self) -> dict[str, Any]:
        """Return the API argument, leaving out empty optional fields."""
        out: dict[str, Any] = {"path": self.path}
        if self.autorename:
            out["autorename"] = True
        if self.mode:
            out["mode"] = self.mode
        return out


_FAILURES = (DropboxError, requests.RequestException, ValueError)


class Client:
    """Access to the Dropbox API with a bearer token."""

    def __init__(self, token: str, session: Optional[requests.Session] = None):
        if not token:
            raise ValueError("Token is required")
        self.token = token
        self.session = session if session is not None else requests.Session()

    def _auth(self) -> dict[str, str]:
        return {"Authorization": "Bearer " + self.token}

    def _post_json(self, url: str, body: Any, auth: bool = True,
                   timeout: Optional[float] = None) -> requests.Response:
        headers = {"Content-Type": "application/json"}
        if auth:
            headers.update(self._auth())
        return self.session.post(
            url, data=json.dumps(body).encode(), headers=headers, timeout=timeout
        )

    @staticmethod
    def _check(resp: requests.Response) -> None:
        if resp.status_code > 399:
            raise DropboxError(resp.text)

    @staticmethod
    def _decode(resp: requests.Response) -> Any:
        try:
            return resp.json()
        except ValueError as exc:
            raise DropboxError(f"json decode: {exc}") from exc

    def delete(self, path: str) -> None:
        """Delete a file or folder."""
        resp = self._post_json(f"{API_URL}/delete_v2", {"path": path})
        self._check(resp)

    def download(self, path: str) -> bytes:
        """Return the contents of the file at ``path``."""
        headers = self._auth()
        headers["Dropbox-API-Arg"] = _compact({"path": path})
        resp = self.session.post(f"{CONTENT_URL}/download", data=b"", headers=headers)
        self._check(resp)
        return resp.content

    def create(self, params: UploadParams, body: Union[bytes, str, IO[bytes]]) -> None:
        """Upload ``body`` to the path given in ``params``."""
        if isinstance(body, str):
            body = body.encode()
        headers = self._auth()
        headers["Content-Type"] = "application/octet-stream"
        headers["Dropbox-API-Arg"] = _compact(params.to_json())
        resp = self.session.post(f"{CONTENT_URL}/upload", data=body, headers=headers)
        self._check(resp)

    def get_metadata(self, params: GetMetadataParams) -> Metadata:
        """Return metadata for a file or folder."""
        resp = self._post_json(f"{API_URL}/get_metadata", params.to_json())
        return Metadata.from_json(self._decode(resp))

    def list_folder(self, params: ListFolderParams) -> ListFolderResult:
        """Return the first page of a folder listing."""
        resp = self._post_json(f"{API_URL}/list_folder", params.to_json())
        self._check(resp)
        return ListFolderResult.from_json(self._decode(resp))

    def list_folder_continue(self, cursor: str) -> ListFolderResult:
        """Return the next page of a listing started earlier."""
        resp = self._post_json(f"{API_URL}/list_folder/continue", {"cursor": cursor})
        return ListFolderResult.from_json(self._decode(resp))

    def list_folder_longpoll(self, cursor: str, timeout: int = 0) -> tuple[bool, int]:
        """Wait for changes after ``cursor``; return ``(changes, backoff)``."""
        if timeout == 0:
            timeout = 30
        # Dropbox may add up to 90s to avoid a thundering herd; allow 1s more.
        resp = self._post_json(
            f"{NOTIFY_URL}/list_folder/longpoll",
            {"cursor": cursor, "timeout": timeout},
            auth=False,
            timeout=timeout + 90 + 1,
        )
        self._check(resp)
        data = self._decode(resp)
        if not isinstance(data, dict):
            raise DropboxError("unexpected longpoll response")
        return bool(data.get("changes", False)), int(data.get("backoff", 0) or 0)

    def longpoll(self, directory: str,
                 stop: Optional[threading.Event] = None) -> Iterator[list[Metadata]]:
        """Yield batches of changed entries in ``directory`` until ``stop`` is set."""
        while stop is None or not stop.is_set():
            try:
                res = self.list_folder(ListFolderParams(path=directory))
                while res.has_more:
                    res = self.list_folder_continue(res.cursor)
                cursor = res.cursor
                changed, backoff = self.list_folder_longpoll(cursor, 480)
            except _FAILURES as exc:
                print(f"longpoll: {exc}", file=sys.stderr)
                continue

            if backoff:
                if stop is not None:
                    stop.wait(backoff)
                else:
                    time.sleep(backoff)

            if not changed:
                continue

            res = ListFolderResult(has_more=True, cursor=cursor)
            while res.has_more:
                try:
                    res = self.list_folder_continue(res.cursor)
                except _FAILURES as exc:
                    print(f"ListFolderContinue: {exc}", file=sys.stderr)
                    break
                if res.entries:
                    yield res.entries
                    break