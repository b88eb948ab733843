"""Tests for the UTC date helpers."""

from datetime import UTC, datetime, timedelta, timezone

from crm_api.utils.dates import add_months, month_start, to_iso_utc, to_naive_utc, utc_now


def test_utc_now_is_naive_with_millisecond_precision():
    now = utc_now()
    assert now.tzinfo is None
    assert now.microsecond % 1000 == 0


def test_to_naive_utc_converts_offsets():
    aware = datetime(2024, 3, 1, 2, 30, tzinfo=timezone(timedelta(hours=5)))
    assert to_naive_utc(aware) == datetime(2024, 2, 29, 21, 30)
    assert to_naive_utc(datetime(2024, 1, 1)) == datetime(2024, 1, 1)


def test_to_iso_utc_appends_z():
    assert to_iso_utc(datetime(2024, 5, 6, 7, 8, 9)) == "2024-05-06T07:08:09.000Z"
    assert to_iso_utc(datetime(2024, 5, 6, tzinfo=UTC)) == "2024-05-06T00:00:00.000Z"


def test_month_start():
    assert month_start(datetime(2024, 7, 19, 13, 5, 1, 123000)) == datetime(2024, 7, 1)


def test_add_months_crosses_year_boundaries():
    assert add_months(datetime(2024, 1, 31, 12), -1) == datetime(2023, 12, 1)
    assert add_months(datetime(2024, 11, 15), 2) == datetime(2025, 1, 1)
    assert add_months(datetime(2024, 6, 10), -6) == datetime(2023, 12, 1)
    assert add_months(datetime(2024, 6, 10), 0) == datetime(2024, 6, 1)
