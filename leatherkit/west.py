"""Lossless Markdown syntax tree used for notes.

Every node remembers enough of its source text that rendering a parsed
document with :meth:`Node.markdown` gives back the original input.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Optional

# Enables internal consistency checks on rendered lengths.
DEBUG = False


def _verify(kind: str, node: "Node", rendered: str) -> None:
    if not DEBUG:
        return
    if node.end < node.start:
        raise AssertionError("impossible start/end")
    expected = node.end - node.start
    if len(rendered) != expected:
        raise AssertionError(
            f"{kind} len ({len(rendered)}) not the expected value ({expected}): {rendered}"
        )


@dataclass
class Node(ABC):
    """A piece of a Markdown document."""

    start: int = field(default=0, kw_only=True)
    end: int = field(default=0, kw_only=True)

    @abstractmethod
    def markdown(self) -> str:
        """Render the node back to Markdown source."""

    def children(self) -> list[Node]:
        """Return the nodes nested in this one that a walk descends into."""
        return []


@dataclass
class Document(Node):
    """A whole parsed document."""

    nodes: list[Node] = field(default_factory=list)

    def markdown(self) -> str:
        rendered = "".join(node.markdown() for node in self.nodes)
        _verify("final", self, rendered)
        return rendered

    def children(self) -> list[Node]:
        return self.nodes


@dataclass
class Inline(Node):
    """A run of inline elements such as text, code spans and links."""

    nodes: list[Node] = field(default_factory=list)

    def markdown(self) -> str:
        rendered = "".join(node.markdown() for node in self.nodes)
        _verify("inline", self, rendered)
        return rendered

    def children(self) -> list[Node]:
        return self.nodes


@dataclass
class Header(Node):
    """An ATX header; ``level`` is the number of leading hashes."""

    level: int = 0
    inline: Optional[Inline] = None

    def markdown(self) -> str:
        body = self.inline.markdown() if self.inline is not None else ""
        rendered = "#" * self.level + body
        _verify("header", self, rendered)
        return rendered

    def children(self) -> list[Node]:
        return self.inline.nodes if self.inline is not None else []


@dataclass
class InlineCode(Node):
    """A backtick code span."""

    text: str = ""

    def markdown(self) -> str:
        return f"`{self.text}`"


@dataclass
class Text(Node):
    """Plain text."""

    text: str = ""

    def markdown(self) -> str:
        return self.text


@dataclass
class Link(Node):
    """An inline link; its body is not visited by :func:`walk`."""

    body: Inline = field(default_factory=Inline)
    href: str = ""

    def markdown(self) -> str:
        return f"[{self.body.markdown()}]({self.href})"


@dataclass
class ListItem(Node):
    """One item of a list, including its bullet prefix."""

    prefix: str = ""
    inline: Optional[Inline] = None

    def markdown(self) -> str:
        body = self.inline.markdown() if self.inline is not None else ""
        return self.prefix + body + "\n"

    def children(self) -> list[Node]:
        return self.inline.nodes if self.inline is not None else []


@dataclass
class List(Node):
    """A list of items."""

    items: list[ListItem] = field(default_factory=list)

    def markdown(self) -> str:
        return "".join(item.markdown() for item in self.items)

    def children(self) -> list[Node]:
        return list(self.items)


@dataclass
class CodeFenceBlock(Node):
    """A fenced code block, kept verbatim."""

    fence: str = ""
    lang: str = ""
    body: str = ""
    endfence: str = ""

    def markdown(self) -> str:
        return self.fence + self.lang + "\n" + self.body + self.endfence


@dataclass
class TableRow(Node):
    """A table row made of cells separated by pipes."""

    columns: list[Node] = field(default_factory=list)

    def markdown(self) -> str:
        return "|".join(cell.markdown() for cell in self.columns)

    def children(self) -> list[Node]:
        return self.columns


@dataclass
class TableDelimiterRow(Node):
    """The row of dashes separating a table header from its body."""

    delimiters: list[Node] = field(default_factory=list)

    def markdown(self) -> str:
        return "|".join(cell.markdown() for cell in self.delimiters)

    def children(self) -> list[Node]:
        return self.delimiters


@dataclass
class Table(Node):
    """A pipe table with header, delimiter row and body rows."""

    header: Optional[TableRow] = None
    delimiter: Optional[TableDelimiterRow] = None
    rows: list[Node] = field(default_factory=list)

    def markdown(self) -> str:
        head = self.header.markdown() if self.header is not None else ""
        delim = self.delimiter.markdown() if self.delimiter is not None else ""
        body = "\n".join(row.markdown() for row in self.rows)
        return head + "\n" + delim + "\n" + body

    def children(self) -> list[Node]:
        return self.rows


class _WalkSignal(Exception):
    """Base for exceptions a walk callback raises to steer the walk."""


class WalkBreak(_WalkSignal):
    """Raised by a walk callback to stop the whole walk."""


class WalkNoRecurse(_WalkSignal):
    """Raised by a walk callback to skip the children of the current node."""


def walk(node: Node, fn: Callable[[Node], object]) -> None:
    """Call ``fn`` on ``node`` and its descendants, depth first.

    ``fn`` may raise :class:`WalkBreak` to end the walk or
    :class:`WalkNoRecurse` to skip the current node's children; any other
    exception propagates.
    """
    try:
        _walk(node, fn)
    except WalkBreak:
        pass


def _walk(node: Node, fn: Callable[[Node], object]) -> None:
    try:
        fn(node)
    except WalkNoRecurse:
        return
    for child in node.children():
        _walk(child, fn)