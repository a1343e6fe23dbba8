"""HTTP helpers: a User-Agent-stamped client and small WSGI utilities."""

from __future__ import annotations

import functools
import sys
import traceback
from typing import Callable, Optional

import requests

VERSION = "dev"
USER_AGENT = "leatherman/" + VERSION


def new_request(method: str, url: str, data=None) -> requests.PreparedRequest:
    """Build a prepared request carrying the package's User-Agent."""
    return requests.Request(method, url, data=data, headers={"User-Agent": USER_AGENT}).prepare()


def get(url: str, timeout: Optional[float] = None) -> requests.Response:
    """GET ``url`` with the package's User-Agent."""
    with requests.Session() as session:
        return session.send(new_request("GET", url), timeout=timeout)


def error_handler(func: Callable) -> Callable:
    """Turn exceptions raised by a WSGI app into a 500 response."""

    @functools.wraps(func)
    def app(environ, start_response):
        try:
            return list(func(environ, start_response))
        except Exception as exc:
            traceback.print_exception(type(exc), exc, exc.__traceback__, file=sys.stderr)
            start_response("500 Internal Server Error", [], sys.exc_info())
            return [b""]

    return app


def trim_handler_prefix(prefix: str, app: Callable) -> Callable:
    """Strip ``prefix`` from PATH_INFO before calling ``app``."""

    def trimmed(environ, start_response):
        inner = dict(environ)
        path = inner.get("PATH_INFO", "")
        if path.startswith(prefix):
            inner["PATH_INFO"] = path[len(prefix):]
        return app(inner, start_response)

    return trimmed


class ClearMux:
    """A path router whose root lists every registered pattern."""

    def __init__(self):
        self._routes: dict[str, Callable] = {}

    def handle(self, pattern: str, app: Callable) -> None:
        """Route ``pattern`` to ``app``; a trailing slash matches a subtree."""
        if pattern == "/" or pattern in self._routes:
            raise ValueError(f"multiple registrations for {pattern}")
        self._routes[pattern] = app

    def _index(self, environ, start_response):
        start_response("200 OK", [("Content-Type", "text/plain; charset=utf-8")])
        return ["".join(f" * {p}\n" for p in sorted(self._routes)).encode()]

    def _match(self, path: str) -> Callable:
        best, best_len = self._index, 0
        for pattern, app in self._routes.items():
            hit = path.startswith(pattern) if pattern.endswith("/") else path == pattern
            if hit and len(pattern) > best_len:
                best, best_len = app, len(pattern)
        return best

    def __call__(self, environ, start_response):
        return self._match(environ.get("PATH_INFO", "") or "/")(environ, start_response)