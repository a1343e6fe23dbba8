from datetime import datetime, timedelta

import pytest

from leatherkit.reminders import InvalidInput, next_time, parse, parse_duration


def test_next_time_later_today():
    now = datetime(2012, 12, 12, 6, 0, 0)
    assert next_time(now, datetime(1, 1, 1, 7, 0)) == datetime(2012, 12, 12, 7, 0)


def test_next_time_rolls_to_tomorrow():
    now = datetime(2012, 12, 12, 6, 0, 0)
    assert next_time(now, datetime(1, 1, 1, 5, 0)) == datetime(2012, 12, 13, 5, 0)


NOW = datetime(2012, 12, 12)


@pytest.mark.parametrize(
    "text,message,expected",
    [
        ("remind me to frew in an hour", "frew", NOW + timedelta(hours=1)),
        ("remind me to frew in 10m", "frew", NOW + timedelta(minutes=10)),
        ("remind me to frioux at 10am", "frioux", NOW + timedelta(hours=10)),
        ("remind me to frioux at 10AM", "frioux", NOW + timedelta(hours=10)),
        ("remind me to frioux at 10:01am", "frioux", NOW + timedelta(hours=10, minutes=1)),
        ("remind me to frioux at noon", "frioux", datetime(2012, 12, 12, 12)),
        ("remind me to frioux at midnight", "frioux", datetime(2012, 12, 12, 0)),
    ],
)
def test_parse(text, message, expected):
    assert parse(NOW, text) == (expected, message)


def test_parse_empty_is_invalid():
    with pytest.raises(InvalidInput):
        parse(NOW, "")


def test_parse_bad_clock_is_invalid():
    with pytest.raises(InvalidInput):
        parse(NOW, "remind me to x at tea time")


def test_parse_bad_duration_is_invalid():
    with pytest.raises(InvalidInput, match="duration"):
        parse(NOW, "remind me to x in a while")


def test_parse_duration_lazy_and_go():
    assert parse_duration("2 days") == timedelta(days=2)
    assert parse_duration("one minute") == timedelta(minutes=1)
    assert parse_duration("1h30m") == timedelta(hours=1, minutes=30)
    assert parse_duration("nonsense") == timedelta(0)