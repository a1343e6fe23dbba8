"""Structured JSON error lines."""

from __future__ import annotations

import json
import sys
from datetime import datetime
from typing import IO, Optional


def log_error(error: BaseException, stream: Optional[IO[str]] = None) -> None:
    """Write ``error`` as one JSON line to ``stream`` (stdout by default)."""
    out = stream if stream is not None else sys.stdout
    line = {
        "Time": datetime.now().astimezone().isoformat(),
        "Type": "error",
        "Message": str(error),
    }
    out.write(json.dumps(line) + "\n")