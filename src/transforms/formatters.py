"""
Display formatting for provider payloads.

Numbers, dates and weekday/month names follow the id-ID conventions the
frontend expects ("1.500 (1,5rb)", "Senin, 15 Januari 2024 pukul 10.30.00").
"""

from __future__ import annotations

import math
import re
from datetime import datetime, timezone, tzinfo
from typing import Any, Mapping
from zoneinfo import ZoneInfo

from src.transforms.countries import Country, countries_by_code


ID_WEEKDAYS = ("Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu", "Minggu")
ID_MONTHS = (
    "Januari",
    "Februari",
    "Maret",
    "April",
    "Mei",
    "Juni",
    "Juli",
    "Agustus",
    "September",
    "Oktober",
    "November",
    "Desember",
)

# Largest first; only the first match is rendered.
MAGNITUDES = (
    (10**12, "T"),
    (10**9, "M"),
    (10**6, "jt"),
    (10**3, "rb"),
)

RELATIVE_UNITS = (
    ("year", "years", 365 * 24 * 60 * 60),
    ("month", "months", 30 * 24 * 60 * 60),
    ("week", "weeks", 7 * 24 * 60 * 60),
    ("day", "days", 24 * 60 * 60),
    ("hour", "hours", 60 * 60),
    ("min", "mins", 60),
    ("sec", "secs", 1),
)

UNKNOWN_REGION_NAME = "Tidak diketahui"
INVALID_DATE = "Invalid Date"
NAN = "NaN"

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")
_ISO8601_DURATION_RE = re.compile(
    r"^P(?:(\d+)W)?(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?)?$"
)


def parse_int(value: Any) -> int | None:
    """Leading-integer parse: 12 -> 12, "1500" -> 1500, "12.7k" -> 12, "abc" -> None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return int(value)
    match = _LEADING_INT_RE.match(str(value))
    return int(match.group(1)) if match else None


def group_thousands(num: int) -> str:
    return f"{num:,}".replace(",", ".")


def format_number(value: Any) -> str:
    num = parse_int(value)
    if num is None:
        return NAN

    display = group_thousands(num)
    for threshold, suffix in MAGNITUDES:
        if num >= threshold:
            # truncate to one decimal place without float rounding
            whole, tenth = divmod(num * 10 // threshold, 10)
            count = str(whole) if tenth == 0 else f"{whole},{tenth}"
            return f"{display} ({count}{suffix})"
    return display


def format_duration(seconds: Any) -> str:
    try:
        total = float(seconds)
    except (TypeError, ValueError):
        return f"{NAN}:{NAN}"
    if not math.isfinite(total):
        return f"{NAN}:{NAN}"
    mins = math.floor(total / 60)
    secs = math.floor(total % 60)
    return f"{mins}:{secs:02d}"


def format_bytes(num_bytes: float) -> str:
    return f"{float(num_bytes) / (1024 * 1024):.2f}"


def resolve_timezone(name: str | None) -> tzinfo:
    if not name or name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def format_time(timestamp: Any, tz: tzinfo | None = None) -> str:
    try:
        seconds = float(timestamp)
    except (TypeError, ValueError):
        return INVALID_DATE
    if not math.isfinite(seconds):
        return INVALID_DATE
    try:
        dt = datetime.fromtimestamp(seconds, tz=tz or timezone.utc)
    except (OverflowError, OSError, ValueError):
        return INVALID_DATE

    weekday = ID_WEEKDAYS[dt.weekday()]
    month = ID_MONTHS[dt.month - 1]
    return f"{weekday}, {dt.day} {month} {dt.year} pukul {dt:%H.%M.%S}"


def parse_iso8601_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def from_now(date_string: str, is_live: bool = False, *, now: datetime | None = None) -> str:
    """
    Relative publish time, e.g. "Published 3 days ago" / "Stream started 45 mins ago".

    Below the minute threshold (59 min, or 119 min for live streams) the value
    is always expressed in minutes; above it the largest fitting unit wins.
    """
    target = parse_iso8601_datetime(date_string)
    if target is None:
        raise ValueError(f"Invalid date: {date_string!r}")
    current = now or datetime.now(timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)

    diff = math.floor((current - target).total_seconds())
    magnitude = abs(diff)
    minute_threshold = 119 if is_live else 59

    result = ""
    if magnitude < minute_threshold * 60:
        minutes = magnitude // 60
        result = f"{minutes} {'min' if minutes == 1 else 'mins'}"
    else:
        for singular, plural, size in RELATIVE_UNITS:
            if magnitude >= size:
                count = magnitude // size
                result = f"{count} {singular if count == 1 else plural}"
                break

    prefix = "Stream started " if is_live else "Published "
    suffix = " ago" if diff >= 0 else " later"
    return f"{prefix}{result}{suffix}"


def iso8601_duration_to_seconds(duration: str | None) -> int:
    match = _ISO8601_DURATION_RE.match((duration or "").strip())
    if not match:
        return 0
    weeks, days, hours, minutes, seconds = (int(g or 0) for g in match.groups())
    return (((weeks * 7 + days) * 24 + hours) * 60 + minutes) * 60 + seconds


def _region_record(name: str, country: Country | None = None) -> dict[str, str]:
    if country is None:
        return {"name": name, "flag": "", "continent": "", "phoneCode": "", "currencyId": ""}
    return {
        "name": country.name,
        "flag": country.flag,
        "continent": country.continent,
        "phoneCode": country.phone_code,
        "currencyId": country.currency_id,
    }


def format_region(code: str | None, countries: Mapping[str, Country] | None = None) -> dict[str, str]:
    if not code:
        return _region_record(UNKNOWN_REGION_NAME)
    table = countries if countries is not None else countries_by_code()
    country = table.get(code.upper())
    if country is None:
        return _region_record(code)
    return _region_record(country.name, country)
