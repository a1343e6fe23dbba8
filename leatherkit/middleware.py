"""WSGI middleware composition and JSON access logging."""

from __future__ import annotations

import json
import time
from datetime import datetime
from typing import IO, Callable
from wsgiref.util import request_uri

Adapter = Callable[[Callable], Callable]


def adapt(app: Callable, *args: Adapter) -> Callable:
    """Wrap ``app`` with each adapter in turn."""
    for adapter in args:
        app = adapter(app)
    return app


def access_log(stream: IO[str]) -> Adapter:
    """Return an adapter that writes one JSON access-log line per request."""

    def adapter(app: Callable) -> Callable:
        def logged(environ, start_response):
            started = datetime.now().astimezone()
            t0 = time.monotonic()
            status = {"code": 0}

            def recording_start(status_line, headers, exc_info=None):
                status["code"] = int(status_line.split(" ", 1)[0])
                return start_response(status_line, headers, exc_info)

            try:
                result = app(environ, recording_start)
                try:
                    body = list(result)
                finally:
                    close = getattr(result, "close", None)
                    if close is not None:
                        close()
                return body
            finally:
                line = {
                    "Time": started.isoformat(),
                    "Type": "accesslog",
                    "Duration": time.monotonic() - t0,
                    "Method": environ.get("REQUEST_METHOD", ""),
                    "URL": request_uri(environ),
                    "UserAgent": environ.get("HTTP_USER_AGENT", ""),
                    "Proto": environ.get("SERVER_PROTOCOL", ""),
                    "Host": environ.get("HTTP_HOST", ""),
                    "RemoteAddr": environ.get("REMOTE_ADDR", ""),
                    "StatusCode": status["code"],
                }
                stream.write(json.dumps(line) + "\n")

        return logged

    return adapter