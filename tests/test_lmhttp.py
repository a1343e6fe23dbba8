from wsgiref.util import setup_testing_defaults

import pytest
import responses

from leatherkit.lmhttp import (
    USER_AGENT,
    ClearMux,
    error_handler,
    get,
    new_request,
    trim_handler_prefix,
)


def _call(app, path="/"):
    environ = {"PATH_INFO": path}
    setup_testing_defaults(environ)
    seen = {}

    def start_response(status, headers, exc_info=None):
        seen["status"] = status

    body = b"".join(app(environ, start_response))
    return seen["status"], body


def _echo(environ, start_response):
    start_response("200 OK", [])
    return [environ["PATH_INFO"].encode()]


def test_new_request_user_agent():
    req = new_request("POST", "http://example.com/x", data=b"hi")
    assert req.headers["User-Agent"] == USER_AGENT
    assert (req.method, req.body) == ("POST", b"hi")


def test_get_sends_user_agent():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, "http://example.com/", body="ok")
        resp = get("http://example.com/")
        assert resp.text == "ok"
        assert rsps.calls[0].request.headers["User-Agent"] == USER_AGENT


def test_error_handler_500():
    def broken(environ, start_response):
        raise RuntimeError("boom")

    status, _ = _call(error_handler(broken))
    assert status.startswith("500")


def test_trim_handler_prefix():
    assert _call(trim_handler_prefix("/api", _echo), "/api/x")[1] == b"/x"


def test_clear_mux_routes_and_index():
    mux = ClearMux()
    mux.handle("/b", _echo)
    mux.handle("/a/", _echo)
    assert _call(mux, "/a/deep")[1] == b"/a/deep"
    assert _call(mux, "/b")[1] == b"/b"
    assert _call(mux, "/")[1] == b" * /a/\n * /b\n"
    assert _call(mux, "/bx")[1] == b" * /a/\n * /b\n"


def test_clear_mux_duplicate():
    mux = ClearMux()
    mux.handle("/a", _echo)
    with pytest.raises(ValueError):
        mux.handle("/a", _echo)