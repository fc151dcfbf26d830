"""
tests/conftest.py

Purpose:
    Shared fakes for the resolver / standings tests: an in-memory upstream
    source standing in for CricAPI, a fixed clock and a fresh session cache.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest

from series_api.cache import TTLCache
from series_api.cricketdata_client import UpstreamFetchError

FIXED_NOW = datetime(2025, 4, 15, 12, 0, tzinfo=timezone.utc)


class FakeSource:
    """Duck-typed stand-in for CricketDataClient; records every call."""

    def __init__(
        self,
        series: Optional[Dict[str, Dict[str, Any]]] = None,
        listing: Optional[List[Dict[str, Any]]] = None,
        matches: Optional[Dict[str, List[Dict[str, Any]]]] = None,
    ) -> None:
        self.series = dict(series or {})
        self.listing = list(listing or [])
        self.matches = dict(matches or {})
        self.calls: List[tuple] = []
        self.fail_fetch_series = False
        self.fail_listing = False
        self.fail_matches = False
        self.fail_refresh = False

    def fetch_series(self, series_id: str) -> Optional[Dict[str, Any]]:
        self.calls.append(("fetch_series", series_id))
        if self.fail_fetch_series:
            raise UpstreamFetchError("series_info down")
        return self.series.get(series_id)

    def list_series(self) -> List[Dict[str, Any]]:
        self.calls.append(("list_series",))
        if self.fail_listing:
            raise UpstreamFetchError("series listing down")
        return list(self.listing)

    def fetch_matches(self, series_id: str) -> List[Dict[str, Any]]:
        self.calls.append(("fetch_matches", series_id))
        if self.fail_matches:
            raise UpstreamFetchError("matches down")
        return list(self.matches.get(series_id, []))

    def request_points_refresh(self, series_id: str) -> None:
        self.calls.append(("request_points_refresh", series_id))
        if self.fail_refresh:
            raise UpstreamFetchError("series_points down")

    def call_names(self) -> List[str]:
        return [c[0] for c in self.calls]


def completed_match(
    match_id: str,
    team1: str,
    team2: str,
    status: str,
    score: Optional[List[Dict[str, Any]]] = None,
    date: str = "2025-03-22T14:00:00",
) -> Dict[str, Any]:
    """CricAPI-shaped finished match."""
    return {
        "id": match_id,
        "name": f"{team1} vs {team2}, {match_id}",
        "matchType": "t20",
        "status": status,
        "venue": "Wankhede Stadium, Mumbai",
        "dateTimeGMT": date,
        "teams": [team1, team2],
        "score": score or [],
        "matchStarted": True,
        "matchEnded": True,
    }


@pytest.fixture
def fake_source() -> FakeSource:
    return FakeSource()


@pytest.fixture
def cache() -> TTLCache:
    return TTLCache(default_ttl_seconds=3600)


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def make_match():
    return completed_match
