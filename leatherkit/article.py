"""Notes articles: a relaxed JSON header followed by Markdown."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import IO, Optional, Union

_MDLUA = re.compile(r"```mdlua\n(.*?)```\n", re.DOTALL)


@dataclass
class Article:
    """A parsed note."""

    title: str = ""
    filename: str = ""
    url: str = ""
    raw: bool = False
    tags: Optional[list[str]] = None
    reviewed_on: Optional[str] = None
    review_by: Optional[str] = None
    extra: Optional[dict[str, str]] = None
    body: str = ""
    markdown_lua: str = ""
    raw_contents: str = ""


def _skip_space(text: str, i: int) -> int:
    while i < len(text):
        if text[i].isspace():
            i += 1
        elif text.startswith("//", i):
            j = text.find("\n", i)
            i = len(text) if j == -1 else j
        elif text.startswith("/*", i):
            j = text.find("*/", i + 2)
            if j == -1:
                raise ValueError("unterminated comment")
            i = j + 2
        else:
            break
    return i


def _split_header(text: str) -> tuple[str, str]:
    """Return the first JSON container as strict JSON, and the text after it."""
    i = _skip_space(text, 0)
    if i >= len(text) or text[i] not in "{[":
        raise ValueError("expected a JSON object at the start of the article")
    out: list[str] = []
    depth = 0
    while i < len(text):
        c = text[i]
        if c == '"':
            j = i + 1
            while j < len(text) and text[j] != '"':
                j += 2 if text[j] == "\\" else 1
            if j >= len(text):
                raise ValueError("unterminated string")
            out.append(text[i:j + 1])
            i = j + 1
            continue
        if text.startswith("//", i) or text.startswith("/*", i):
            i = _skip_space(text, i)
            continue
        if c in "}]":
            joined = "".join(out).rstrip()
            if joined.endswith(","):
                joined = joined[:-1]
            out = [joined, c]
            depth -= 1
            i += 1
            if depth == 0:
                return "".join(out), text[i:]
            continue
        if c in "{[":
            depth += 1
        out.append(c)
        i += 1
    raise ValueError("unexpected end of JSON header")


def _apply(article: Article, header: dict) -> None:
    fields = {k.lower(): v for k, v in header.items()}
    if "title" in fields:
        article.title = str(fields["title"])
    if "raw" in fields:
        article.raw = bool(fields["raw"])
    if "tags" in fields:
        tags = fields["tags"]
        if tags is not None and not (isinstance(tags, list) and all(isinstance(t, str) for t in tags)):
            raise ValueError("tags must be a list of strings")
        article.tags = tags
    for key in ("reviewed_on", "review_by"):
        if key in fields:
            setattr(article, key, fields[key])
    if "extra" in fields:
        extra = fields["extra"]
        if extra is not None and not isinstance(extra, dict):
            raise ValueError("extra must be an object")
        article.extra = extra


def read_article(data: Union[str, bytes, IO]) -> Article:
    """Parse an article from text, bytes or a readable file."""
    if hasattr(data, "read"):
        data = data.read()
    if isinstance(data, (bytes, bytearray)):
        data = bytes(data).decode("utf-8")
    article = Article(raw_contents=data)
    header_text, rest = _split_header(data)
    try:
        header = json.loads(header_text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"invalid article header: {exc}") from exc
    if not isinstance(header, dict):
        raise ValueError("article header must be an object")
    _apply(article, header)
    article.markdown_lua = "".join(_MDLUA.findall(rest))
    article.body = _MDLUA.sub("", rest)
    return article