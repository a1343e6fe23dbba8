"""Route incoming messages to the first matching action."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Sequence

from leatherkit.dropbox_client import Client
from leatherkit.notes_actions import (
    DEFER_PATTERN,
    Media,
    defer_message,
    inspire_me,
    remind,
    todo,
)

HELP_TEXT = (
    "• help\n• inspire me\n• defer <m> til <t>\n• remind me <x> [at <t>|in <d>]\n"
    "• <todo>\nhttps://git.io/Jeojv"
)


class NoRuleMatched(LookupError):
    """Raised when no rule matches a message."""


@dataclass
class Rule:
    """An action run for messages that ``pattern`` finds a match in."""

    pattern: re.Pattern
    action: Callable[[str, Sequence[Media]], str]


@dataclass
class Rules:
    """An ordered list of rules; the first match wins."""

    rules: list[Rule] = field(default_factory=list)

    def dispatch(self, text: str, media: Sequence[Media] = ()) -> str:
        """Run the first rule whose pattern matches ``text`` and return its reply."""
        for rule in self.rules:
            if rule.pattern.search(text):
                return rule.action(text, media)
        raise NoRuleMatched("no rules matched")


def help_action(client) -> Callable[[str, Sequence[Media]], str]:
    """Return an action answering with the list of commands."""

    def action(_text: str, _media: Sequence[Media] = ()) -> str:
        return HELP_TEXT

    return action


def new_rules(token: str) -> Rules:
    """Build the default rule set backed by a Dropbox client for ``token``."""
    client = Client(token)
    return Rules([
        Rule(re.compile(r"^\s*(?:commands|cmd|cmds)\s*\Z", re.IGNORECASE), help_action(client)),
        Rule(re.compile(r"^\s*inspire\s+me\s*\Z", re.IGNORECASE), inspire_me(client)),
        Rule(re.compile(r"^\s*remind\s+me\s*", re.IGNORECASE), remind(client)),
        Rule(DEFER_PATTERN, defer_message(client)),
        Rule(re.compile(""), todo(client)),
    ])