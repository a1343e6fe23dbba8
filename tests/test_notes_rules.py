import json
import re

import pytest
import responses

from leatherkit import personality
from leatherkit.notes_actions import Media
from leatherkit.notes_rules import (
    HELP_TEXT,
    NoRuleMatched,
    Rule,
    Rules,
    help_action,
    new_rules,
)

ACKS = {"Aight", *personality._ACKS}
UPLOAD_URL = "https://content.dropboxapi.com/2/files/upload"
DOWNLOAD_URL = "https://content.dropboxapi.com/2/files/download"


def test_help_action():
    assert help_action(None)("cmds", []) == HELP_TEXT
    assert HELP_TEXT.startswith("• help\n")


def test_dispatch_first_match_wins():
    rules = Rules([
        Rule(re.compile("a"), lambda text, media: "first"),
        Rule(re.compile("b"), lambda text, media: "second"),
    ])
    assert rules.dispatch("ab", []) == "first"
    assert rules.dispatch("b", []) == "second"


def test_dispatch_passes_media():
    media = [Media("image/png", "http://example.com/a.png")]
    rules = Rules([Rule(re.compile(""), lambda text, m: text + " " + m[0].url)])
    assert rules.dispatch("see", media) == "see http://example.com/a.png"


def test_dispatch_no_rule():
    rules = Rules([Rule(re.compile("^x$"), lambda text, media: "x")])
    with pytest.raises(NoRuleMatched):
        rules.dispatch("y", [])


def test_new_rules_requires_token():
    with pytest.raises(ValueError):
        new_rules("")


def test_new_rules_help():
    rules = new_rules("token")
    assert rules.dispatch("  CMDS ", []) == HELP_TEXT
    assert rules.dispatch("commands", []) == HELP_TEXT


def test_new_rules_inspire():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, DOWNLOAD_URL, body=b" * be kind\n")
        rules = new_rules("token")
        assert rules.dispatch("Inspire Me", []) == "be kind"
        assert rsps.calls[0].request.headers["Authorization"] == "Bearer token"


def test_new_rules_fallback_is_todo():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, UPLOAD_URL, body=b"{}")
        rules = new_rules("token")
        assert rules.dispatch("buy milk", []) in ACKS
        arg = json.loads(rsps.calls[0].request.headers["Dropbox-API-Arg"])
        assert arg["path"].startswith("/notes/content/posts/todo-")
        assert arg["autorename"] is True


def test_new_rules_defer():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, UPLOAD_URL, body=b"{}")
        rules = new_rules("token")
        assert rules.dispatch("defer buy milk till 2020-01-02", []) in ACKS
        arg = json.loads(rsps.calls[0].request.headers["Dropbox-API-Arg"])
        assert arg["path"].startswith("/notes/.deferred/2020-01-02-")


def test_new_rules_remind_invalid_goes_to_remind():
    with responses.RequestsMock() as rsps:
        rules = new_rules("token")
        with pytest.raises(RuntimeError) as excinfo:
            rules.dispatch("remind me", [])
        assert excinfo.value.reply.partition(": ")[0] in personality._USER_ERRS
        assert len(rsps.calls) == 0