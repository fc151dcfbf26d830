# series_api/dates.py
from __future__ import annotations

import re
from dataclasses import replace
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

import pandas as pd

from series_api.models import SeriesRecord, SeriesStatus

DEFAULT_SERIES_LENGTH_DAYS = 30

_MONTHS = [
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
]

# "May 25", "Mar 22" - upstream sometimes drops the year from end dates
_MONTH_DAY_RE = re.compile(r"^\s*([A-Za-z]+)\.?\s+(\d{1,2})\s*$")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _month_day(value: str, year: int) -> Optional[date]:
    m = _MONTH_DAY_RE.match(value)
    if not m:
        return None
    token = m.group(1).lower()
    idx = next((i for i, name in enumerate(_MONTHS) if name.startswith(token[:3])), None)
    if idx is None:
        return None
    try:
        return date(year, idx + 1, int(m.group(2)))
    except ValueError:
        return None


def parse_date(value: Any, *, default_year: Optional[int] = None) -> Optional[date]:
    """
    Tolerant calendar-date parsing for upstream fields.

    Accepts date/datetime objects, ISO strings and most human formats.
    "Month Day" strings take `default_year` when given.
    Returns None for anything missing or unparsable.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    s = value.strip()
    if not s or s.lower() in ("nan", "null", "none", "tbd"):
        return None

    if default_year is not None:
        md = _month_day(s, default_year)
        if md is not None:
            return md

    try:
        ts = pd.to_datetime(s, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(ts):
        return None
    return ts.date()


def parse_end_date(value: Any, start: Optional[date], fallback_year: int) -> Optional[date]:
    """
    Series end date. A year-less "Month Day" takes the start year, or the
    following year when that would land before the start ("Jan 5" closing a
    series that began in December).
    """
    year = start.year if start else fallback_year
    end = parse_date(value, default_year=year)
    if end is None or start is None or end >= start or not isinstance(value, str):
        return end
    if _MONTH_DAY_RE.match(value):
        rolled = _month_day(value, year + 1)
        if rolled is not None:
            return rolled
    return end


def parse_datetime(value: Any) -> Optional[datetime]:
    """Match kick-off times, normalized to aware UTC datetimes."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        ts = pd.to_datetime(value.strip(), utc=True, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(ts):
        return None
    return ts.to_pydatetime()


def series_status(start: Optional[date], end: Optional[date], today: date) -> SeriesStatus:
    if start is None or end is None:
        return "upcoming"
    if today < start:
        return "upcoming"
    if today > end:
        return "completed"
    return "ongoing"


def repair_series_dates(record: SeriesRecord, now: datetime) -> SeriesRecord:
    """
    Every resolved series leaves with usable dates:
    - missing/unparsable start -> today
    - missing/unparsable end   -> start + 30 days
    - end before start         -> start + 30 days
    Status is re-derived from the repaired dates.
    """
    today = now.date()

    start = parse_date(record.start_date)
    if start is None:
        start = today

    end = parse_end_date(record.end_date, start, today.year)
    if end is None or end < start:
        end = start + timedelta(days=DEFAULT_SERIES_LENGTH_DAYS)

    return replace(
        record,
        start_date=start,
        end_date=end,
        status=series_status(start, end, today),
    )
