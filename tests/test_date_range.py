"""Range keyword resolution and CalDAV timestamp formatting."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import pytest

from dawnfire_dashboard.calendars.date_range import format_caldav_timestamp, resolve_date_window
from dawnfire_dashboard.exceptions import ValidationError

BERLIN = timezone(timedelta(hours=1))
NOW = datetime(2025, 3, 10, 15, 45, 12, tzinfo=BERLIN)


def test_today_spans_local_midnight_to_last_millisecond() -> None:
    window = resolve_date_window("today", NOW)

    assert window.start == datetime(2025, 3, 10, 0, 0, tzinfo=BERLIN)
    assert window.end == datetime(2025, 3, 10, 23, 59, 59, 999000, tzinfo=BERLIN)


def test_default_keyword_is_today() -> None:
    assert resolve_date_window(None, NOW) == resolve_date_window("today", NOW)


def test_tomorrow_is_today_shifted_one_day() -> None:
    window = resolve_date_window("tomorrow", NOW)

    assert window.start == datetime(2025, 3, 11, 0, 0, tzinfo=BERLIN)
    assert window.end == datetime(2025, 3, 11, 23, 59, 59, 999000, tzinfo=BERLIN)


def test_week_runs_from_today_midnight_to_seven_days_later() -> None:
    window = resolve_date_window("week", NOW)

    assert window.start == datetime(2025, 3, 10, 0, 0, tzinfo=BERLIN)
    assert window.end == datetime(2025, 3, 17, 23, 59, 59, 999000, tzinfo=BERLIN)


def test_keyword_matching_ignores_case_and_whitespace() -> None:
    assert resolve_date_window(" Week ", NOW) == resolve_date_window("week", NOW)


def test_unknown_keyword_raises_validation_error() -> None:
    with pytest.raises(ValidationError, match="today, tomorrow, week"):
        resolve_date_window("month", NOW)


def test_window_follows_wall_clock_across_dst_change() -> None:
    try:
        new_york = ZoneInfo("America/New_York")
    except ZoneInfoNotFoundError:
        pytest.skip("IANA timezone data not installed")
    # DST starts 2025-03-09 in New York; the week window still ends at local 23:59:59.999.
    now = datetime(2025, 3, 8, 12, 0, tzinfo=new_york)

    window = resolve_date_window("week", now)

    assert window.end.hour == 23
    assert window.end.utcoffset() == timedelta(hours=-4)
    assert window.start.utcoffset() == timedelta(hours=-5)


def test_caldav_timestamp_is_basic_utc_without_fraction() -> None:
    assert format_caldav_timestamp(datetime(2025, 3, 10, 23, 59, 59, 999000, tzinfo=BERLIN)) == (
        "20250310T225959Z"
    )
    assert format_caldav_timestamp(datetime(2025, 1, 1, tzinfo=UTC)) == "20250101T000000Z"
