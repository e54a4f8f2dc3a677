from datetime import date, datetime

import pytz

from core import time_utils


def test_day_window_is_inclusive_utc_naive():
    start, end = time_utils.day_window("2025-03-10")
    assert start == datetime(2025, 3, 10, 0, 0)
    assert end == datetime(2025, 3, 10, 23, 59, 59, 999999)
    assert start.tzinfo is None and end.tzinfo is None


def test_week_window_runs_monday_to_sunday():
    start, end = time_utils.week_window(date(2025, 3, 13))
    assert start == datetime(2025, 3, 10)
    assert end.date() == date(2025, 3, 16)
    assert time_utils.week_dates_list("2025-03-16")[0] == "2025-03-10"


def test_parse_date_accepts_strings_dates_and_datetimes():
    assert time_utils.parse_date("2025-03-10") == date(2025, 3, 10)
    assert time_utils.parse_date(datetime(2025, 3, 10, 18)) == date(2025, 3, 10)


def test_to_utc_naive_converts_aware_values():
    aware = pytz.timezone("Asia/Kolkata").localize(datetime(2025, 3, 10, 9, 30))
    assert time_utils.to_utc_naive(aware) == datetime(2025, 3, 10, 4, 0)


def test_to_local_display_treats_naive_as_utc():
    shown = time_utils.to_local_display(datetime(2025, 3, 10, 9))
    assert shown.tzinfo is not None
    assert shown.hour == 9


def test_month_start_wraps_years():
    assert time_utils.month_start(date(2025, 3, 12)) == date(2025, 3, 1)
    assert time_utils.month_start(date(2025, 3, 12), 5) == date(2024, 10, 1)
    assert time_utils.month_start(date(2025, 12, 3), -1) == date(2026, 1, 1)
