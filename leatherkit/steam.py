"""A cached map of Steam app ids to app names."""

from __future__ import annotations

import random
import sys
import threading
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import requests

from leatherkit import lmhttp

APP_LIST_URL = "https://api.steampowered.com/ISteamApps/GetAppList/v2/"
_MAX_AGE = timedelta(hours=24)


def _field(data: Any, key: str) -> Any:
    if not isinstance(data, dict):
        return None
    if key in data:
        return data[key]
    for k, v in data.items():
        if k.lower() == key.lower():
            return v
    return None


class AppIDs:
    """Steam app names by app id, reloaded at most once a day."""

    def __init__(self):
        self._lock = threading.Lock()
        self._raw: dict[int, str] = {}
        self.last_load: Optional[datetime] = None

    def autoload(self) -> None:
        """Reload forever, sleeping a random time of up to a day in between."""
        rnd = random.Random(int(time.time()))
        while True:
            try:
                self.load()
            except (requests.RequestException, ValueError) as exc:
                print(exc, file=sys.stderr)
            time.sleep(rnd.random() * _MAX_AGE.total_seconds())

    def load(self) -> None:
        """Fetch the app list unless it was loaded within the last day."""
        with self._lock:
            now = datetime.now(timezone.utc)
            if self.last_load is not None and now - self.last_load < _MAX_AGE:
                return

            resp = lmhttp.get(APP_LIST_URL, timeout=60)
            if resp.status_code != 200:
                raise requests.HTTPError("non-200 status", response=resp)

            apps = _field(_field(resp.json(), "applist"), "apps") or []
            self._raw.clear()
            for app in apps:
                self._raw[int(_field(app, "appid") or 0)] = _field(app, "name") or ""

            self.last_load = datetime.now(timezone.utc)

    def app(self, appid: int) -> str:
        """Return the name of ``appid``, or an empty string when unknown."""
        with self._lock:
            return self._raw.get(appid, "")