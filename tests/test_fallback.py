"""
tests/test_fallback.py

Purpose:
    Synthetic series built from the reference text alone.
"""

from __future__ import annotations

from datetime import date, datetime, timezone

from series_api.fallback import (
    DEFAULT_IPL_ROSTER,
    is_ipl_name,
    is_ipl_slug,
    season_window,
    sniff_year,
    synthetic_series,
    title_from_slug,
)
from series_api.identifiers import normalize

APRIL = datetime(2025, 4, 15, tzinfo=timezone.utc)
JANUARY = datetime(2025, 1, 10, tzinfo=timezone.utc)


def test_ipl_detection() -> None:
    assert is_ipl_slug("ipl-2024")
    assert is_ipl_slug("indian-premier-league-2025")
    assert not is_ipl_slug("wpl-2025")
    assert not is_ipl_slug("ripley-cup")

    assert is_ipl_name("Indian Premier League 2025")
    assert is_ipl_name("IPL 2023")
    assert not is_ipl_name("Women's Premier League 2025")


def test_sniff_year() -> None:
    assert sniff_year("ipl-2024") == 2024
    assert sniff_year("bbl-2024-25") == 2024
    assert sniff_year("series-12345") is None
    assert sniff_year("") is None
    assert sniff_year("IPL 2025") == 2025


def test_sniff_year_ignores_digits_inside_identifiers() -> None:
    assert sniff_year("c2024abc-74d4-416f-b7b4-7da4b4e3ae6e") is None
    assert sniff_year("abc1999") is None


def test_uuid_synthetic_series_uses_rolling_window() -> None:
    record = synthetic_series(normalize("c2024abc-74d4-416f-b7b4-7da4b4e3ae6e"), APRIL)
    assert record.start_date == date(2025, 3, 25)


def test_season_window_anchored_on_year() -> None:
    assert season_window("ipl-2023", APRIL) == (date(2023, 3, 22), date(2023, 5, 26))


def test_season_window_without_year_uses_current_season() -> None:
    assert season_window("ipl", APRIL) == (date(2025, 3, 25), date(2025, 5, 28))
    # before March the last completed season applies
    assert season_window("ipl", JANUARY) == (date(2024, 3, 25), date(2024, 5, 28))


def test_title_from_slug() -> None:
    assert title_from_slug("the-hundred-2025") == "The Hundred 2025"
    assert title_from_slug("") == "Cricket Series"


def test_ipl_synthetic_series() -> None:
    record = synthetic_series(normalize("ipl-2024"), APRIL)

    assert record.name == "Indian Premier League 2024"
    assert record.id == "synthetic-ipl-2024"
    assert record.slug == "ipl-2024"
    assert record.formats == {"T20": 74}
    assert record.teams == DEFAULT_IPL_ROSTER
    assert record.synthetic is True
    assert record.start_date == date(2024, 3, 22)


def test_generic_synthetic_series_has_no_teams() -> None:
    record = synthetic_series(normalize("Ashes 2025"), APRIL)

    assert record.name == "Ashes 2025"
    assert record.teams == ()
    assert record.formats == {}
    assert record.start_date.year == 2025


def test_synthetic_series_keeps_raw_id_for_ids() -> None:
    record = synthetic_series(normalize("98765"), APRIL)
    assert record.id == "98765"


def test_synthetic_series_is_deterministic() -> None:
    ref = normalize("indian-premier-league-2025")
    assert synthetic_series(ref, APRIL) == synthetic_series(ref, APRIL)
