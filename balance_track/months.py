"""
Calendar Arithmetic

Month keys are `YYYY-MM` strings. With four-digit years and zero-padded
months, comparing two keys as strings is the same as comparing them
chronologically. Every component relies on that, so the helpers here
always emit canonical keys and reject anything else.

Month arithmetic works on (year, month) pairs only. Days never take part,
so there is no end-of-month rollover to worry about.
"""

import calendar
import re
from datetime import date

from balance_track.exceptions import MalformedKey

MonthKey = str

_MONTH_KEY_RE = re.compile(r"([0-9]{4})-([0-9]{2})")
_DAY_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


def month_key(year: int, month_index0: int) -> MonthKey:
    """Build a key from a year and a zero-based month index (0 = January)."""
    return f"{year:04d}-{month_index0 + 1:02d}"


def parse_month_key(key: str) -> tuple[int, int]:
    """
    Split a key into (year, month).

    Raises:
        MalformedKey: if the key is not `YYYY-MM` with a month in 1..12
    """
    if not isinstance(key, str):
        raise MalformedKey(key)
    match = _MONTH_KEY_RE.fullmatch(key)
    if not match:
        raise MalformedKey(key)
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise MalformedKey(key)
    return year, month


def add_months(key: MonthKey, offset: int) -> MonthKey:
    """Shift a key by `offset` months (may be negative)."""
    year, month = parse_month_key(key)
    total = year * 12 + (month - 1) + offset
    return month_key(total // 12, total % 12)


def months_between(start_key: MonthKey, end_key: MonthKey) -> int:
    """Signed month distance; months_between(a, b) == -months_between(b, a)."""
    start_year, start_month = parse_month_key(start_key)
    end_year, end_month = parse_month_key(end_key)
    return (end_year - start_year) * 12 + (end_month - start_month)


def month_key_of(day: date) -> MonthKey:
    """Key of the month a calendar day falls in."""
    return month_key(day.year, day.month - 1)


def year_of(key: MonthKey) -> int:
    return parse_month_key(key)[0]


def months_of_year(year: int) -> list[MonthKey]:
    """The twelve keys of a year, January first."""
    return [month_key(year, index) for index in range(12)]


def last_day_of_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def parse_day(value) -> date:
    """
    Parse a strict `YYYY-MM-DD` calendar day.

    Accepts `date` objects unchanged.

    Raises:
        MalformedKey: if the value is not a valid calendar day
    """
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not _DAY_RE.fullmatch(value):
        raise MalformedKey(value, expected="YYYY-MM-DD")
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise MalformedKey(value, expected="YYYY-MM-DD") from e
