from datetime import datetime, timedelta, timezone
from unittest import mock

import pytest
import requests
import responses

from leatherkit.steam import APP_LIST_URL, AppIDs


class _Stop(Exception):
    pass


def _apps(*pairs):
    return {"applist": {"apps": [{"appid": i, "name": n} for i, n in pairs]}}


def test_load_and_lookup():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, APP_LIST_URL,
                 json=_apps((10, "Counter-Strike"), (20, "Team Fortress")))
        ids = AppIDs()
        ids.load()
        assert ids.app(10) == "Counter-Strike"
        assert ids.app(20) == "Team Fortress"
        assert ids.app(30) == ""
        assert ids.last_load is not None
        assert rsps.calls[0].request.headers["User-Agent"].startswith("leatherman/")


def test_load_is_cached_for_a_day():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, APP_LIST_URL, json=_apps((1, "one")))
        ids = AppIDs()
        ids.load()
        ids.load()
        assert ids.app(1) == "one"
        assert len(rsps.calls) == 1


def test_stale_load_replaces_contents():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, APP_LIST_URL, json=_apps((1, "one")))
        rsps.add(responses.GET, APP_LIST_URL, json=_apps((2, "two")))
        ids = AppIDs()
        ids.load()
        ids.last_load = datetime.now(timezone.utc) - timedelta(hours=25)
        ids.load()
        assert ids.app(1) == ""
        assert ids.app(2) == "two"
        assert len(rsps.calls) == 2


def test_non_200_raises():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, APP_LIST_URL, status=500)
        ids = AppIDs()
        with pytest.raises(requests.HTTPError, match="non-200 status"):
            ids.load()
        assert ids.last_load is None


def test_autoload_loads_then_sleeps():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, APP_LIST_URL, json=_apps((7, "seven")))
        ids = AppIDs()
        with mock.patch("leatherkit.steam.time.sleep", side_effect=_Stop) as sleep:
            with pytest.raises(_Stop):
                ids.autoload()
        assert ids.app(7) == "seven"
        (delay,), _ = sleep.call_args
        assert 0 <= delay <= 24 * 60 * 60


def test_autoload_survives_errors():
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, APP_LIST_URL, status=503)
        ids = AppIDs()
        with mock.patch("leatherkit.steam.time.sleep", side_effect=_Stop) as sleep:
            with pytest.raises(_Stop):
                ids.autoload()
        assert sleep.call_count == 1
        assert ids.last_load is None