"""In-memory SQLite index of notes articles."""

from __future__ import annotations

import sqlite3
from typing import Any

from leatherkit.article import Article

SCHEMA = """
CREATE TABLE articles (
	title,
	url,
	filename,
	reviewed_on NULLABLE,
	review_by NULLABLE,
	body,
	markdownlua
);
CREATE TABLE article_tag ( id, tag );
CREATE VIEW _ ( id, title, url, filename, body, markdownlua, reviewed_on, review_by, tag) AS
	SELECT a.rowid, title, url, filename, body, markdownlua, reviewed_on, review_by, tag
	FROM articles a
	JOIN article_tag at ON a.rowid = at.id;
"""


class NotesDB:
    """A named, shared, in-memory database of articles and their tags."""

    def __init__(self, name: str = ""):
        name = name or "notes"
        self.conn = sqlite3.connect(
            f"file:{name}?mode=memory&cache=shared",
            uri=True,
            check_same_thread=False,
            isolation_level=None,
        )
        try:
            self.conn.execute("PRAGMA journal_mode = OFF")
            self.conn.execute("PRAGMA synchronous = OFF")
            self.conn.execute("PRAGMA auto_vacuum = OFF")
            self.conn.executescript(SCHEMA)
        except sqlite3.Error:
            self.conn.close()
            raise

    def __enter__(self) -> "NotesDB":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def insert_article(self, article: Article) -> None:
        """Insert ``article`` and its tags; filename and url are required."""
        if not article.filename:
            raise ValueError("Filename is required")
        if not article.url:
            raise ValueError("URL is required")
        cur = self.conn.execute(
            "INSERT INTO articles (title, url, filename, reviewed_on, review_by, body, markdownlua)"
            " VALUES (?, ?, ?, ?, ?, ?, ?)",
            (
                article.title, article.url, article.filename, article.reviewed_on,
                article.review_by, article.body, article.markdown_lua,
            ),
        )
        rowid = cur.lastrowid
        self.conn.executemany(
            "INSERT INTO article_tag (id, tag) VALUES (?, ?)",
            [(rowid, tag) for tag in article.tags or []],
        )

    def load_article(self, name: str) -> Article:
        """Load the article stored under filename ``name``."""
        row = self.conn.execute(
            "SELECT rowid, title, url, filename, reviewed_on, review_by, body, markdownlua"
            " FROM articles WHERE filename = ?",
            (name,),
        ).fetchone()
        if row is None:
            raise LookupError(f"no article named {name}")
        rowid, title, url, filename, reviewed_on, review_by, body, mdlua = row
        tags = [t for (t,) in self.conn.execute("SELECT tag FROM article_tag WHERE id = ?", (rowid,))]
        return Article(
            title=title, url=url, filename=filename, reviewed_on=reviewed_on,
            review_by=review_by, body=body, markdown_lua=mdlua, tags=tags,
        )

    def delete_article(self, name: str) -> None:
        """Delete the article with filename ``name`` and its tags, if present."""
        self.conn.execute(
            "DELETE FROM article_tag WHERE id IN (SELECT rowid FROM articles WHERE filename = ?)",
            (name,),
        )
        self.conn.execute("DELETE FROM articles WHERE filename = ?", (name,))

    def replace_article(self, article: Article) -> None:
        """Delete any article with the same filename, then insert ``article``."""
        self.delete_article(article.filename)
        self.insert_article(article)

    def query(self, sql: str, *args: str) -> list[dict[str, Any]]:
        """Run ``sql`` and return its rows as column-keyed dicts."""
        cur = self.conn.execute(sql, args)
        cols = [d[0] for d in cur.description or []]
        return [dict(zip(cols, row)) for row in cur]

    def close(self) -> None:
        """Close the connection."""
        self.conn.close()