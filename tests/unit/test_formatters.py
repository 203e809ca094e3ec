from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from src.transforms.formatters import (
    format_bytes,
    format_duration,
    format_number,
    format_region,
    format_time,
    from_now,
    iso8601_duration_to_seconds,
    parse_int,
    resolve_timezone,
)


NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "value,expected",
    [
        (0, "0"),
        (999, "999"),
        (1000, "1.000 (1rb)"),
        (1500, "1.500 (1,5rb)"),
        (1999, "1.999 (1,9rb)"),
        (1_234_567, "1.234.567 (1,2jt)"),
        (2_000_000_000, "2.000.000.000 (2M)"),
        (3_450_000_000_000, "3.450.000.000.000 (3,4T)"),
        ("1500", "1.500 (1,5rb)"),
        ("abc", "NaN"),
        (None, "NaN"),
    ],
)
def test_format_number(value, expected) -> None:
    assert format_number(value) == expected


def test_format_number_truncates_instead_of_rounding() -> None:
    # 1.99 million must not become "2jt"
    assert format_number(1_990_000) == "1.990.000 (1,9jt)"


def test_parse_int_takes_leading_integer() -> None:
    assert parse_int("12.7k") == 12
    assert parse_int(12.9) == 12
    assert parse_int("abc") is None
    assert parse_int(True) is None


@pytest.mark.parametrize(
    "seconds,expected",
    [
        (0, "0:00"),
        (5, "0:05"),
        (59.9, "0:59"),
        (125, "2:05"),
        (3600, "60:00"),
        ("65", "1:05"),
        ("n/a", "NaN:NaN"),
        (None, "NaN:NaN"),
    ],
)
def test_format_duration(seconds, expected) -> None:
    assert format_duration(seconds) == expected


def test_format_bytes_is_megabytes_with_two_decimals() -> None:
    assert format_bytes(0) == "0.00"
    assert format_bytes(1048576) == "1.00"
    assert format_bytes(1572864) == "1.50"


def test_format_time_uses_indonesian_names() -> None:
    # 2024-01-15 10:30:00 UTC was a Monday
    assert format_time(1705314600) == "Senin, 15 Januari 2024 pukul 10.30.00"
    assert format_time("1705314600") == "Senin, 15 Januari 2024 pukul 10.30.00"
    assert format_time(0) == "Kamis, 1 Januari 1970 pukul 00.00.00"


def test_format_time_respects_timezone() -> None:
    wib = timezone(timedelta(hours=7))
    assert format_time(1705314600, wib) == "Senin, 15 Januari 2024 pukul 17.30.00"


@pytest.mark.parametrize("value", [None, "", "abc", float("nan"), 1e20])
def test_format_time_invalid(value) -> None:
    assert format_time(value) == "Invalid Date"


def test_resolve_timezone_utc() -> None:
    assert resolve_timezone(None) is timezone.utc
    assert resolve_timezone("utc") is timezone.utc


@pytest.mark.parametrize(
    "published,is_live,expected",
    [
        ("2024-01-15T11:59:45Z", False, "Published 0 mins ago"),
        ("2024-01-15T11:59:00Z", False, "Published 1 min ago"),
        ("2024-01-15T11:30:00Z", False, "Published 30 mins ago"),
        ("2024-01-15T11:01:00Z", False, "Published 59 mins ago"),
        ("2024-01-15T10:00:00Z", False, "Published 2 hours ago"),
        ("2024-01-15T11:00:00Z", False, "Published 1 hour ago"),
        ("2024-01-13T12:00:00Z", False, "Published 2 days ago"),
        ("2024-01-12T12:00:00Z", False, "Published 3 days ago"),
        ("2024-01-01T12:00:00Z", False, "Published 2 weeks ago"),
        ("2023-11-15T12:00:00Z", False, "Published 2 months ago"),
        ("2023-01-15T12:00:00Z", False, "Published 1 year ago"),
        ("2024-01-15T10:30:00Z", True, "Stream started 90 mins ago"),
        ("2024-01-15T10:00:00Z", True, "Stream started 2 hours ago"),
    ],
)
def test_from_now(published, is_live, expected) -> None:
    assert from_now(published, is_live, now=NOW) == expected


def test_from_now_future_dates_read_later() -> None:
    assert from_now("2024-01-15T14:00:00Z", now=NOW) == "Published 2 hours later"
    assert from_now("2024-01-15T12:10:00Z", now=NOW) == "Published 10 mins later"


def test_from_now_naive_date_is_utc() -> None:
    assert from_now("2024-01-15T11:30:00", now=NOW) == "Published 30 mins ago"


def test_from_now_invalid_date_raises() -> None:
    with pytest.raises(ValueError):
        from_now("not a date", now=NOW)


@pytest.mark.parametrize(
    "duration,expected",
    [
        ("PT15S", 15),
        ("PT4M13S", 253),
        ("PT1H2M3S", 3723),
        ("P1DT1S", 86401),
        ("P1W", 604800),
        ("P0D", 0),
        ("", 0),
        (None, 0),
        ("garbage", 0),
    ],
)
def test_iso8601_duration_to_seconds(duration, expected) -> None:
    assert iso8601_duration_to_seconds(duration) == expected


def test_format_region_known_code() -> None:
    assert format_region("ID") == {
        "name": "Indonesia",
        "flag": "\U0001F1EE\U0001F1E9",
        "continent": "Asia",
        "phoneCode": "+62",
        "currencyId": "IDR",
    }
    assert format_region("id")["name"] == "Indonesia"


def test_format_region_missing_code() -> None:
    out = format_region(None)
    assert out["name"] == "Tidak diketahui"
    assert out["flag"] == ""
    assert format_region("")["name"] == "Tidak diketahui"


def test_format_region_unknown_code_keeps_code_as_name() -> None:
    out = format_region("XX")
    assert out == {"name": "XX", "flag": "", "continent": "", "phoneCode": "", "currencyId": ""}
