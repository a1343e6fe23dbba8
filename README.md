# leatherkit

leatherkit is a library of building blocks for keeping a personal notes collection:

- `leatherkit.west` and `leatherkit.west_parse`: a Markdown syntax tree that round-trips. When you parse a document and render it with `markdown()`, you get the input back unchanged. You can edit nodes, such as a link's `href`, and the rest of the text stays as it was.
- `leatherkit.reminders`: parses phrases such as `remind me to call home in an hour` or `remind me to stretch at 10:30am`.
- `leatherkit.article` and `leatherkit.notes_db`: an article is a relaxed-JSON header followed by a Markdown body. Comments and trailing commas are allowed in the header. `NotesDB` is an in-memory SQLite index of articles and their tags that you can query.
- `leatherkit.dropbox_client` and `leatherkit.dropbox_fs`: a small Dropbox HTTP API client, and a filesystem view over a Dropbox folder.
- `leatherkit.dirfs` and `leatherkit.lmfs`: a local directory filesystem with change watching (via watchdog), plus the helpers `write_file`, `watch` and `remove`. These helpers work with either filesystem.
- `leatherkit.lmhttp`, `leatherkit.middleware` and `leatherkit.errlog`: requests sent with a `leatherman/…` User-Agent, WSGI utilities and JSON log lines.
- `leatherkit.notes_actions` and `leatherkit.notes_rules`: note commands in the style of text messages (todo, defer, remind, inspire me, help). Each command stores its result in Dropbox.
- `leatherkit.steam`: a cached map of Steam app ids to app names.
- `leatherkit.personality`: random short acknowledgement and error replies.

## Installation

```
pip install leatherkit
```

## Markdown round trips

```python
from leatherkit.west import Link, WalkBreak, walk
from leatherkit.west_parse import parse

doc = parse(" * [a](/a?x=1)\n * [b](/b?x=1)\n")

def tag_first_link(node):
    if isinstance(node, Link):
        node.href += "&y=1"
        raise WalkBreak

walk(doc, tag_first_link)
print(doc.markdown())   # " * [a](/a?x=1&y=1)\n * [b](/b?x=1)\n"
```

`parse` accepts either `str` or `bytes`. A walk callback can raise `WalkBreak` to stop the walk, or `WalkNoRecurse` to skip the children of the current node.

## Reminders

```python
from datetime import datetime
from leatherkit import reminders

when, what = reminders.parse(datetime.now(), "remind me to water plants in 2 hours")
```

Times can be given as `at 3pm`, `at 10:01am`, `at noon` or `at midnight`. Durations can be given as `in 10m`, `in 1h30m`, `in an hour` or `in two days`. Input that does not match raises `reminders.InvalidInput`.

## Articles and the notes database

```python
from leatherkit.article import read_article
from leatherkit.notes_db import NotesDB

article = read_article('{"title": "hello", "tags": ["a"],}\n# Body\n')
article.filename = "hello.md"
article.url = "/hello"

with NotesDB("notes") as db:
    db.insert_article(article)
    rows = db.query("SELECT title, tag FROM _")   # [{"title": "hello", "tag": "a"}]
```

Blocks fenced as ```` ```mdlua ```` are taken out of the body and collected in `Article.markdown_lua`. `NotesDB` also provides `load_article`, `delete_article` and `replace_article`.

## Dropbox

```python
from leatherkit.dropbox_client import Client, UploadParams
from leatherkit.dropbox_fs import DropboxFS

client = Client("token")
client.create(UploadParams(path="/notes/hello.md", mode="overwrite"), b"hello")
print(client.download("/notes/hello.md"))

fs = DropboxFS(client, "/notes")
for entry in fs.read_dir("."):
    print(entry.name, entry.is_dir(), entry.mod_time())
```

API errors raise `DropboxError`. `Client.longpoll` and `DropboxFS.watch` are generators. They yield batches of changes until the `threading.Event` you pass in is set.

## Local directories

```python
import threading
from leatherkit.dirfs import DirFS
from leatherkit import lmfs

fs = DirFS("/tmp/notes")
lmfs.write_file(fs, "a.md", b"hello")
stop = threading.Event()
for batch in lmfs.watch(fs, ".", stop):
    print(batch)        # [Event(name='a.md', op=<Op.WRITE: 2>)]
    stop.set()
```

If a filesystem does not support an operation, the call raises `lmfs.UnsupportedOperation`.

## HTTP helpers

- `lmhttp.get(url)` and `lmhttp.new_request(method, url)` send the package's User-Agent.
- `lmhttp.ClearMux` is a WSGI router. Its `/` route lists every registered pattern.
- `lmhttp.trim_handler_prefix(prefix, app)` strips a prefix from the request path before calling `app`.
- `lmhttp.error_handler(app)` turns exceptions into a 500 response.
- `middleware.adapt(app, middleware.access_log(stream))` writes one JSON access-log line per request.
- `errlog.log_error(exc)` writes an error as a JSON line.

## Note commands

```python
from leatherkit.notes_rules import new_rules

rules = new_rules("token")
reply = rules.dispatch("remind me to stretch in 10m", [])
```

`dispatch` runs the first rule that matches. Any message that no other rule matches becomes a todo item.

## What this package does not do

leatherkit is a library only. It does not provide:

- a command-line program
- a web server or service that receives messages
- rendering or templating of notes into HTML pages
- scripting inside notes: `mdlua` blocks are collected, never run

## Running the tests

```
pip install "leatherkit[test]"
pytest
```