from datetime import datetime, timedelta, timezone

import pytest

from dbshell.sqlitetime import convert_bytes, parse_sqlite_time


def test_parse_space_separated():
    assert parse_sqlite_time("2006-01-02 15:04:05") == datetime(
        2006, 1, 2, 15, 4, 5, tzinfo=timezone.utc
    )


def test_parse_with_offset_and_fraction():
    value = parse_sqlite_time("2006-01-02T15:04:05.123456789-07:00")
    assert value.utcoffset() == timedelta(hours=-7)
    assert value.microsecond == 123456
    assert (value.hour, value.minute, value.second) == (15, 4, 5)


@pytest.mark.parametrize(
    "text",
    ["2006-01-02", "2006-01-02 15:04", "2006-01-02T15:04", "2006-01-02T15:04:05"],
)
def test_parse_layouts_keep_date(text):
    value = parse_sqlite_time(text)
    assert value.date() == datetime(2006, 1, 2).date()


def test_parse_bytes_equals_str():
    assert parse_sqlite_time(b"2006-01-02 15:04") == parse_sqlite_time("2006-01-02 15:04")


def test_parse_empty_is_none():
    assert parse_sqlite_time("") is None


@pytest.mark.parametrize("text", ["hello", "2006-13-02", "2006-01-02 25:00", "06-01-02"])
def test_parse_invalid(text):
    with pytest.raises(ValueError):
        parse_sqlite_time(text)


def test_parse_rejects_other_types():
    with pytest.raises(TypeError):
        parse_sqlite_time(12)


def test_convert_bytes_formats_time():
    assert convert_bytes(b"2006-01-02 15:04:05", "%Y/%m/%d") == "2006/01/02"


def test_convert_bytes_round_trip():
    text = convert_bytes(b"2006-01-02 15:04:05+02:00", "%Y-%m-%d %H:%M:%S%z")
    assert parse_sqlite_time(text[:-2] + ":" + text[-2:]) == parse_sqlite_time(
        "2006-01-02 15:04:05+02:00"
    )


@pytest.mark.parametrize("raw", [b"not a date", b"   ", b""])
def test_convert_bytes_passes_through(raw):
    assert convert_bytes(raw, "%Y") == raw.decode()