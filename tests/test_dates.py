"""
tests/test_dates.py

Purpose:
    Upstream date parsing, series status and date repair.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from series_api.dates import parse_date, parse_datetime, parse_end_date, repair_series_dates, series_status
from series_api.models import SeriesRecord

NOW = datetime(2025, 4, 15, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2025-03-22", date(2025, 3, 22)),
        ("2025-03-22T19:30:00", date(2025, 3, 22)),
        ("Mar 22, 2025", date(2025, 3, 22)),
        (date(2025, 1, 2), date(2025, 1, 2)),
        (datetime(2025, 1, 2, 5, 0), date(2025, 1, 2)),
    ],
)
def test_parse_date_accepts_common_shapes(value, expected) -> None:
    assert parse_date(value) == expected


@pytest.mark.parametrize("value", [None, "", "  ", "TBD", "nan", "not a date", 12345])
def test_parse_date_rejects_garbage(value) -> None:
    assert parse_date(value) is None


def test_month_day_takes_default_year() -> None:
    assert parse_date("May 25", default_year=2025) == date(2025, 5, 25)
    assert parse_date("Sept 3", default_year=2024) == date(2024, 9, 3)


def test_parse_datetime_is_aware_utc() -> None:
    dt = parse_datetime("2025-03-22T14:00:00")
    assert dt == datetime(2025, 3, 22, 14, 0, tzinfo=timezone.utc)
    assert dt.utcoffset().total_seconds() == 0

    naive = parse_datetime(datetime(2025, 3, 22, 14, 0))
    assert naive.tzinfo is not None
    assert parse_datetime("") is None
    assert parse_datetime(None) is None


@pytest.mark.parametrize(
    "start, end, expected",
    [
        (date(2025, 5, 1), date(2025, 6, 1), "upcoming"),
        (date(2025, 4, 15), date(2025, 4, 15), "ongoing"),
        (date(2025, 3, 1), date(2025, 4, 14), "completed"),
        (None, date(2025, 6, 1), "upcoming"),
    ],
)
def test_series_status(start, end, expected) -> None:
    assert series_status(start, end, NOW.date()) == expected


def _record(start, end) -> SeriesRecord:
    return SeriesRecord(id="1", slug="s", name="S", start_date=start, end_date=end, status="completed")


def test_repair_fills_both_dates() -> None:
    repaired = repair_series_dates(_record(None, None), NOW)
    assert repaired.start_date == date(2025, 4, 15)
    assert repaired.end_date == date(2025, 5, 15)
    assert repaired.status == "ongoing"


def test_repair_keeps_valid_dates() -> None:
    record = _record(date(2025, 3, 22), date(2025, 5, 25))
    repaired = repair_series_dates(record, NOW)
    assert (repaired.start_date, repaired.end_date) == (record.start_date, record.end_date)
    assert repaired.status == "ongoing"


def test_repair_resets_inverted_range() -> None:
    repaired = repair_series_dates(_record(date(2025, 1, 10), date(2024, 12, 1)), NOW)
    assert repaired.end_date == date(2025, 2, 9)
    assert repaired.status == "completed"


def test_end_date_takes_start_year() -> None:
    assert parse_end_date("May 25", date(2025, 3, 22), 2030) == date(2025, 5, 25)


def test_end_date_rolls_over_new_year() -> None:
    assert parse_end_date("Jan 5", date(2024, 12, 20), 2030) == date(2025, 1, 5)
    # a full date before the start is left for repair
    assert parse_end_date("2024-11-01", date(2024, 12, 20), 2030) == date(2024, 11, 1)


def test_end_date_without_start_uses_fallback_year() -> None:
    assert parse_end_date("Jan 5", None, 2026) == date(2026, 1, 5)
    assert parse_end_date(None, date(2024, 12, 20), 2030) is None
