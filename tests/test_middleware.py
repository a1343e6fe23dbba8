import io
import json
from wsgiref.util import setup_testing_defaults

import pytest

from leatherkit.middleware import access_log, adapt


def _call(app, path="/"):
    environ = {"PATH_INFO": path}
    setup_testing_defaults(environ)
    seen = {}

    def start_response(status, headers, exc_info=None):
        seen["status"] = status

    body = b"".join(app(environ, start_response))
    return seen["status"], body


def test_log_records_status():
    def inner(environ, start_response):
        start_response("404 Not Found", [])
        return [b""]

    buf = io.StringIO()
    status, _ = _call(adapt(inner, access_log(buf)))
    assert status.startswith("404")
    line = json.loads(buf.getvalue())
    assert line["StatusCode"] == 404
    assert line["Type"] == "accesslog"
    assert line["Method"] == "GET"


def test_adapt_order():
    def inner(environ, start_response):
        start_response("200 OK", [])
        return [b"x"]

    def wrap(tag):
        def adapter(app):
            def wrapped(environ, start_response):
                return [tag] + list(app(environ, start_response))
            return wrapped
        return adapter

    _, body = _call(adapt(inner, wrap(b"1"), wrap(b"2")))
    assert body == b"21x"


def test_log_written_on_error():
    def inner(environ, start_response):
        raise RuntimeError("boom")

    buf = io.StringIO()
    with pytest.raises(RuntimeError):
        _call(adapt(inner, access_log(buf)))
    assert json.loads(buf.getvalue())["StatusCode"] == 0