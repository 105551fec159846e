from datetime import date, datetime

import pytz

from fitfuel.utils.dates import (
    as_utc,
    get_timezone,
    local_date,
    local_noon_utc,
    parse_natural_date,
    validate_workout_date,
)

NY = pytz.timezone("America/New_York")
# a Wednesday
TODAY = date(2025, 11, 26)


def test_unknown_timezone_falls_back_to_utc():
    assert get_timezone("Mars/Olympus_Mons") is pytz.UTC
    assert get_timezone(None) is pytz.UTC
    assert get_timezone("Asia/Tokyo").zone == "Asia/Tokyo"


def test_naive_timestamps_are_utc():
    ts = as_utc(datetime(2025, 1, 15, 3, 30))
    assert ts.tzinfo is not None
    assert ts.hour == 3


def test_aware_timestamps_are_converted_to_utc():
    aware = NY.localize(datetime(2025, 1, 14, 22, 30))
    assert as_utc(aware) == pytz.UTC.localize(datetime(2025, 1, 15, 3, 30))
    assert as_utc(aware).tzinfo is pytz.UTC


def test_local_date_crosses_midnight():
    ts = datetime(2025, 1, 15, 3, 30)
    assert local_date(ts, NY) == date(2025, 1, 14)
    assert local_date(ts, pytz.UTC) == date(2025, 1, 15)
    assert local_date(ts, pytz.timezone("Pacific/Kiritimati")) == date(2025, 1, 15)


def test_local_noon_utc():
    ts = local_noon_utc(date(2025, 1, 15), pytz.timezone("Asia/Tokyo"))
    assert ts == pytz.UTC.localize(datetime(2025, 1, 15, 3, 0))


def test_parse_relative_dates():
    assert parse_natural_date("today", TODAY) == TODAY
    assert parse_natural_date("Yesterday", TODAY) == date(2025, 11, 25)
    assert parse_natural_date("3 days ago", TODAY) == date(2025, 11, 23)
    assert parse_natural_date("1 day ago", TODAY) == date(2025, 11, 25)


def test_parse_weekday_is_most_recent_past():
    assert parse_natural_date("Monday", TODAY) == date(2025, 11, 24)
    assert parse_natural_date("last friday", TODAY) == date(2025, 11, 21)
    # same weekday as today means a week ago
    assert parse_natural_date("wednesday", TODAY) == date(2025, 11, 19)


def test_parse_month_day():
    assert parse_natural_date("Nov 23", TODAY) == date(2025, 11, 23)
    assert parse_natural_date("november 2nd", TODAY) == date(2025, 11, 2)
    # without a year a future date means last year
    assert parse_natural_date("Dec 25", TODAY) == date(2024, 12, 25)
    assert parse_natural_date("Feb 30", TODAY) is None


def test_parse_iso_and_garbage():
    assert parse_natural_date("2025-10-01", TODAY) == date(2025, 10, 1)
    assert parse_natural_date("someday", TODAY) is None
    assert parse_natural_date("", TODAY) is None


def test_validate_workout_date():
    assert validate_workout_date(TODAY, TODAY) is None
    assert validate_workout_date(date(2025, 11, 27), TODAY) is not None
    assert validate_workout_date(date(2024, 11, 26), TODAY) is None
    assert validate_workout_date(date(2024, 11, 25), TODAY) is not None
