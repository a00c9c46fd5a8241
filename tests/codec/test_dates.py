"""Tests for date/time normalization."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from libsql_http.codec.dates import (
    format_datetime,
    format_timedelta,
    julian_to_datetime,
    parse_datetime,
    parse_datetime_offset,
    parse_timedelta,
    unix_to_datetime,
)


def test_format_truncates_to_milliseconds():
    assert format_datetime(datetime(2024, 3, 1, 4, 5, 6, 789999)) == "2024-03-01 04:05:06.789"


def test_local_time_read_back_as_naive_utc():
    local = datetime(2024, 6, 1, 18, 0, tzinfo=timezone(timedelta(hours=-4)))
    assert parse_datetime(format_datetime(local)) == datetime(2024, 6, 1, 22, 0)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("2024-01-15 10:30:00.250", datetime(2024, 1, 15, 10, 30, 0, 250000)),
        ("2024-01-15 10:30:00", datetime(2024, 1, 15, 10, 30)),
        ("2024-01-15 10:30", datetime(2024, 1, 15, 10, 30)),
        ("2024-01-15", datetime(2024, 1, 15)),
        ("2024-01-15T10:30:00", datetime(2024, 1, 15, 10, 30)),
        ("2024-01-15T10:30:00.5Z", datetime(2024, 1, 15, 10, 30, 0, 500000)),
    ],
)
def test_parse_known_formats(text, expected):
    assert parse_datetime(text) == expected


def test_parse_iso_offset_converted_to_utc():
    assert parse_datetime("2024-01-15T12:00:00+02:00") == datetime(2024, 1, 15, 10, 0)


def test_parse_garbage_raises():
    with pytest.raises(ValueError):
        parse_datetime("not a date")


def test_parse_offset_without_offset_is_utc():
    assert parse_datetime_offset("2024-01-15 10:30:00") == datetime(2024, 1, 15, 10, 30, tzinfo=UTC)


def test_unix_seconds():
    assert unix_to_datetime(86400) == datetime(1970, 1, 2)


def test_julian_day():
    assert julian_to_datetime(2440588.5) == datetime(1970, 1, 2)


def test_timedelta_with_days_and_fraction():
    value = timedelta(days=2, hours=3, minutes=4, seconds=5, microseconds=600000)
    text = format_timedelta(value)
    assert text == "2.03:04:05.6000000"
    assert parse_timedelta(text) == value


def test_negative_timedelta():
    assert parse_timedelta(format_timedelta(timedelta(minutes=-90))) == timedelta(minutes=-90)


def test_bad_timedelta_raises():
    with pytest.raises(ValueError):
        parse_timedelta("an hour")
