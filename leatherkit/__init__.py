"""Notes toolkit: round-tripping Markdown, reminder parsing, a notes database, Dropbox and local filesystems, and HTTP helpers."""

__version__ = "0.1.0"