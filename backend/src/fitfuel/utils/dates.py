"""Local calendar dates.

Timestamps are stored in UTC; everything the user sees (and every daily
bucket) is a YYYY-MM-DD date on the wall clock of the viewer's timezone.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta
from typing import Optional

import pytz

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}
MAX_BACKDATE_DAYS = 365

_DAYS_AGO_RE = re.compile(r"^(\d+)\s+days?\s+ago$")
_MONTH_DAY_RE = re.compile(r"^([a-z]+)\.?\s+(\d{1,2})(?:st|nd|rd|th)?(?:,?\s+(\d{4}))?$")


def get_timezone(name: Optional[str]):
    """pytz timezone for ``name``; unknown or empty names fall back to UTC."""
    try:
        return pytz.timezone(name or "UTC")
    except pytz.exceptions.UnknownTimeZoneError:
        return pytz.UTC


def utcnow() -> datetime:
    return datetime.now(pytz.UTC)


def as_utc(ts: datetime) -> datetime:
    # SQLite hands back naive datetimes; they were written as UTC.
    if ts.tzinfo is None:
        return pytz.UTC.localize(ts)
    return ts.astimezone(pytz.UTC)


def local_date(ts: datetime, tz) -> date:
    return as_utc(ts).astimezone(tz).date()


def format_date_for_db(d: date) -> str:
    return d.strftime("%Y-%m-%d")


def today_local(tz, now: Optional[datetime] = None) -> date:
    return local_date(now or utcnow(), tz)


def parse_local_date(value: str) -> date:
    """'2025-10-22' -> date(2025, 10, 22) without any timezone shift."""
    return datetime.strptime(value.strip(), "%Y-%m-%d").date()


def local_noon_utc(day: date, tz) -> datetime:
    return tz.localize(datetime.combine(day, time(12, 0))).astimezone(pytz.UTC)


def parse_natural_date(text: str, today: date) -> Optional[date]:
    """Understands today/yesterday, 'N days ago', weekday names, 'Nov 23' and ISO dates."""
    value = (text or "").strip().lower()
    if not value:
        return None
    if value == "today":
        return today
    if value == "yesterday":
        return today - timedelta(days=1)

    m = _DAYS_AGO_RE.match(value)
    if m:
        return today - timedelta(days=int(m.group(1)))

    weekday = value[5:] if value.startswith("last ") else value
    if weekday in WEEKDAYS:
        # most recent past occurrence, never today
        delta = (today.weekday() - WEEKDAYS.index(weekday)) % 7 or 7
        return today - timedelta(days=delta)

    try:
        return parse_local_date(value)
    except ValueError:
        pass

    m = _MONTH_DAY_RE.match(value)
    if m and m.group(1)[:3] in MONTHS:
        month = MONTHS[m.group(1)[:3]]
        year = int(m.group(3)) if m.group(3) else today.year
        try:
            parsed = date(year, month, int(m.group(2)))
        except ValueError:
            return None
        if not m.group(3) and parsed > today:
            try:
                parsed = parsed.replace(year=year - 1)
            except ValueError:
                return None
        return parsed
    return None


def validate_workout_date(d: date, today: date) -> Optional[str]:
    """Error message for an unacceptable workout date, ``None`` when fine."""
    if d > today:
        return "Workout date cannot be in the future."
    if (today - d).days > MAX_BACKDATE_DAYS:
        return "Workout date cannot be more than a year in the past."
    return None
