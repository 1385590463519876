"""
Calendar-day helpers.

Everything in the tracker works on local calendar days (datetime.date).
Instants are truncated with day_key() before any comparison; storage uses
ISO 'YYYY-MM-DD' text.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple, Union

from .errors import ValidationError

WEEKDAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]  # 0..6

DayLike = Union[date, datetime, str]


def day_key(instant: DayLike) -> date:
    """
    Truncate an instant to the local calendar day.

    Aware datetimes are converted to local time first, naive ones are
    taken as local already. ISO strings are parsed.
    """
    if isinstance(instant, str):
        instant = datetime.fromisoformat(instant.strip())
    if isinstance(instant, datetime):
        if instant.tzinfo is not None:
            instant = instant.astimezone()
        return instant.date()
    if isinstance(instant, date):
        return instant
    raise TypeError(f"cannot derive a calendar day from {type(instant).__name__}")


def safe_day_key(instant: Optional[DayLike]) -> Optional[date]:
    """
    day_key() that returns None for missing or malformed input.
    """
    if instant is None or instant == "":
        return None
    try:
        return day_key(instant)
    except (TypeError, ValueError):
        return None


def inclusive_day_count(a: date, b: date) -> int:
    """
    Days spanned by [a, b], counting both ends. Meaningful for b >= a.
    """
    return (b - a).days + 1


def daterange(start: date, end: date) -> List[date]:
    """
    Inclusive date range.
    """
    days = []
    cur = start
    while cur <= end:
        days.append(cur)
        cur += timedelta(days=1)
    return days


def month_bounds(d: date) -> Tuple[date, date]:
    start = d.replace(day=1)
    # next month start
    if start.month == 12:
        nm = start.replace(year=start.year + 1, month=1, day=1)
    else:
        nm = start.replace(month=start.month + 1, day=1)
    return start, nm - timedelta(days=1)


def parse_day(text: str) -> date:
    try:
        return date.fromisoformat((text or "").strip())
    except ValueError as exc:
        raise ValidationError(f"Not a valid date (YYYY-MM-DD): {text!r}") from exc


def format_day(d: date) -> str:
    return d.isoformat()


def clamp(value: int, low: int = 0, high: int = 100) -> int:
    return max(low, min(high, value))


def percent(numerator: int, denominator: int) -> int:
    """
    100 * numerator / denominator rounded half-up and clamped to 0..100.
    """
    if denominator <= 0:
        return 0
    # integer half-up rounding; round() would round 2.5 to 2
    return clamp((200 * numerator + denominator) // (2 * denominator))
