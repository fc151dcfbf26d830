"""
tests/test_standings_service.py

Purpose:
    Serve-or-recompute policy for standings: cache reuse, forced refresh,
    last-known-good fallback on upstream failure and cold-start placeholder.

Dependencies:
    tests/conftest.py (FakeSource, make_match, cache, clock)
"""

from __future__ import annotations

from datetime import date

import pytest

from series_api.models import SeriesRecord
from series_api.standings_service import StandingsService, standings_cache_key

SERIES = SeriesRecord(
    id="s1",
    slug="indian-premier-league-2025",
    name="Indian Premier League 2025",
    start_date=date(2025, 3, 22),
    end_date=date(2025, 5, 25),
    teams=("Mumbai Indians", "Chennai Super Kings", "Gujarat Titans"),
    status="ongoing",
)


@pytest.fixture
def ipl_matches(make_match):
    return [
        make_match(
            "m1", "Mumbai Indians", "Chennai Super Kings", "Mumbai Indians won by 20 runs",
            score=[
                {"r": 180, "w": 5, "o": 20, "inning": "Mumbai Indians Inning 1"},
                {"r": 160, "w": 8, "o": 20, "inning": "Chennai Super Kings Inning 1"},
            ],
            date="2025-03-23T14:00:00",
        ),
        make_match(
            "m2", "Gujarat Titans", "Mumbai Indians", "Gujarat Titans won by 6 wkts",
            score=[
                {"r": 150, "w": 9, "o": 20, "inning": "Mumbai Indians Inning 1"},
                {"r": 151, "w": 4, "o": 18.3, "inning": "Gujarat Titans Inning 1"},
            ],
            date="2025-03-29T14:00:00",
        ),
    ]


@pytest.fixture
def service(fake_source, cache, clock, ipl_matches) -> StandingsService:
    fake_source.matches["s1"] = list(ipl_matches)
    return StandingsService(fake_source, cache, clock=clock)


def test_first_call_computes_and_stores(service, fake_source, cache) -> None:
    table = service.get_or_refresh(SERIES)

    assert table.source == "computed"
    assert table.is_placeholder is False
    assert set(table.teams()) == {"Mumbai Indians", "Chennai Super Kings", "Gujarat Titans"}
    assert fake_source.call_names() == ["request_points_refresh", "fetch_matches"]

    entry = cache.get(standings_cache_key(SERIES.slug))
    assert entry["stale"] is False
    assert entry["table"].rows == table.rows


def test_fresh_entry_is_served_from_cache(service, fake_source) -> None:
    first = service.get_or_refresh(SERIES)
    calls = len(fake_source.calls)

    second = service.get_or_refresh(SERIES)

    assert second.source == "cache"
    assert second.rows == first.rows
    assert len(fake_source.calls) == calls


def test_force_refresh_recomputes(service, fake_source, ipl_matches) -> None:
    service.get_or_refresh(SERIES)
    fake_source.matches["s1"] = ipl_matches[:1]

    table = service.get_or_refresh(SERIES, force_refresh=True)

    assert table.source == "computed"
    assert set(table.teams()) == {"Mumbai Indians", "Chennai Super Kings"}
    assert fake_source.call_names().count("fetch_matches") == 2


def test_failed_refresh_serves_last_known_good(service, fake_source) -> None:
    cached = service.get_or_refresh(SERIES)
    fake_source.fail_matches = True

    table = service.get_or_refresh(SERIES, force_refresh=True)

    assert table.rows == cached.rows
    assert table.is_placeholder is False
    assert table.source == "last_known_good"


def test_failed_refresh_keeps_stored_entry(service, fake_source, cache) -> None:
    cached = service.get_or_refresh(SERIES)
    fake_source.fail_matches = True
    service.get_or_refresh(SERIES, force_refresh=True)

    assert cache.get(standings_cache_key(SERIES.slug))["table"].rows == cached.rows


def test_refresh_signal_failure_is_ignored(service, fake_source) -> None:
    fake_source.fail_refresh = True

    table = service.get_or_refresh(SERIES)

    assert table.source == "computed"
    assert len(table.rows) == 3


def test_cold_start_failure_returns_placeholder(service, fake_source, cache) -> None:
    fake_source.fail_matches = True

    table = service.get_or_refresh(SERIES)

    assert table.is_placeholder is True
    assert table.teams() == SERIES.teams
    assert all(r.points == 0 and r.played == 0 for r in table.rows)
    assert cache.get(standings_cache_key(SERIES.slug)) is None


def test_series_without_completed_matches_gets_placeholder(service, fake_source) -> None:
    fake_source.matches["s1"] = []

    table = service.get_or_refresh(SERIES)

    assert table.is_placeholder is True
    assert len(table.rows) == 3


def test_mark_stale_forces_recompute(service, fake_source) -> None:
    assert service.mark_stale(SERIES.slug) is False

    service.get_or_refresh(SERIES)
    assert service.mark_stale(SERIES.slug) is True

    table = service.get_or_refresh(SERIES)
    assert table.source == "computed"
    assert fake_source.call_names().count("fetch_matches") == 2


def test_standings_values(service) -> None:
    table = service.get_or_refresh(SERIES)
    by_team = {r.team: r for r in table.rows}

    mi = by_team["Mumbai Indians"]
    assert (mi.played, mi.won, mi.lost, mi.points) == (2, 1, 1, 2)
    assert mi.recent_form == ("W", "L")

    gt = by_team["Gujarat Titans"]
    assert (gt.played, gt.won, gt.points) == (1, 1, 2)
    # 151 off 18.3 overs against 150 off 20
    assert gt.net_run_rate == pytest.approx(round(151 / (111 / 6) - 150 / 20, 3))

    # GT level on points with MI but ahead on NRR; CSK last
    assert table.teams()[-1] == "Chennai Super Kings"


def test_list_matches_in_kickoff_order(service, fake_source) -> None:
    fake_source.matches["s1"] = list(reversed(fake_source.matches["s1"])) + [{"id": "junk"}]

    matches = service.list_matches(SERIES)

    assert [m.id for m in matches] == ["m1", "m2"]
    assert all(m.lifecycle_status == "completed" for m in matches)
    assert "request_points_refresh" not in fake_source.call_names()


def test_list_matches_empty_when_upstream_down(service, fake_source, cache) -> None:
    fake_source.fail_matches = True
    assert service.list_matches(SERIES) == []
    assert cache.get(standings_cache_key(SERIES.slug)) is None
