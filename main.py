# main.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, Field

from series_api.cache import TTLCache
from series_api.config import (
    LOG_LEVEL,
    LOG_LEVELS,
    SERIES_CACHE_TTL_SECONDS,
    STANDINGS_CACHE_TTL_SECONDS,
    validate_config,
)
from series_api.cricketdata_client import CricketDataClient
from series_api.identifiers import InvalidReference
from series_api.models import LifecycleStatus, SeriesRecord
from series_api.resolver import SeriesResolver
from series_api.standings_service import StandingsService

logging.basicConfig(
    level=LOG_LEVEL if LOG_LEVEL in LOG_LEVELS else "INFO",
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("series_api")

# -----------------------
# Wiring
# -----------------------
source = CricketDataClient.from_config()
session_cache = TTLCache(default_ttl_seconds=SERIES_CACHE_TTL_SECONDS)
resolver = SeriesResolver(source, session_cache, cache_ttl_seconds=SERIES_CACHE_TTL_SECONDS)
standings = StandingsService(source, session_cache, cache_ttl_seconds=STANDINGS_CACHE_TTL_SECONDS)

# -----------------------
# App
# -----------------------
app = FastAPI(
    title="Cricket Series Standings API",
    version="0.1.0",
    description="Resolves series references (id, UUID or slug) and serves computed points tables",
)


@app.on_event("startup")
def on_startup():
    validate_config()
    logger.info("Series API started (CricAPI upstream %s)", "enabled" if source.enabled else "disabled")


@app.get("/health")
def health_check():
    return {"status": "ok", "time": datetime.now(timezone.utc).isoformat()}


# -----------------------
# Helpers
# -----------------------
def _resolve_or_400(reference: str, force_refresh: bool = False) -> SeriesRecord:
    try:
        previous = resolver.cached(reference) if force_refresh else None
        series = resolver.resolve(reference, force_refresh=force_refresh)
    except InvalidReference as e:
        raise HTTPException(status_code=400, detail=str(e))

    if previous is not None and previous.id != series.id:
        # standings stored for the old identity no longer describe this series
        logger.info("Series %s re-resolved %s -> %s", reference, previous.id, series.id)
        standings.mark_stale(previous.slug)
        standings.mark_stale(series.slug)
    return series


def _points_response(series: SeriesRecord, force_refresh: bool) -> PointsTableResponse:
    table = standings.get_or_refresh(series, force_refresh=force_refresh)
    return PointsTableResponse(
        series=SeriesOut(**series.to_dict()),
        source=table.source,
        stale=table.source == "last_known_good",
        placeholder=table.is_placeholder,
        points_table=[StandingsRowOut(**row) for row in table.to_rows()],
    )


# -----------------------
# Response models
# -----------------------
class SeriesOut(BaseModel):
    id: str
    slug: str
    name: str
    start_date: Optional[str] = Field(None, description="YYYY-MM-DD")
    end_date: Optional[str] = Field(None, description="YYYY-MM-DD")
    formats: Dict[str, int] = Field(default_factory=dict, description="e.g. {\"T20\": 74}")
    teams: List[str] = Field(default_factory=list)
    status: str = Field(..., description="upcoming/ongoing/completed")
    synthetic: bool = Field(False, description="True when built without upstream data")


class SeriesResponse(BaseModel):
    series: SeriesOut


class StandingsRowOut(BaseModel):
    pos: int
    team: str
    played: int
    won: int
    lost: int
    tied: int
    no_result: int
    points: int
    nrr: float = Field(..., description="Net run rate, 3 decimals")
    recent_form: List[str] = Field(default_factory=list, description="Last 5 results, most recent last")


class PointsTableResponse(BaseModel):
    series: SeriesOut
    source: str = Field(..., description="computed/cache/last_known_good/placeholder")
    stale: bool
    placeholder: bool
    points_table: List[StandingsRowOut]


class InningsOut(BaseModel):
    team: Optional[str] = None
    runs: int
    wickets: int
    overs: str


class MatchOut(BaseModel):
    id: str
    series_id: Optional[str] = None
    team_a: str
    team_b: str
    venue: Optional[str] = None
    scheduled_at: Optional[str] = Field(None, description="ISO-8601, UTC")
    status: str = Field(..., description="upcoming/live/completed")
    outcome: Optional[str] = Field(None, description="win/tie/no_result, completed matches only")
    winner: Optional[str] = None
    match_type: Optional[str] = None
    innings: List[InningsOut] = Field(default_factory=list)


class MatchesResponse(BaseModel):
    series: SeriesOut
    counts: Dict[str, int] = Field(..., description="Matches per lifecycle status, before filtering")
    matches: List[MatchOut]


# -----------------------
# Series endpoints
# -----------------------
@app.get("/api/series/{reference}", response_model=SeriesResponse)
def get_series(reference: str, force_refresh: bool = Query(False)):
    series = _resolve_or_400(reference, force_refresh=force_refresh)
    return SeriesResponse(series=SeriesOut(**series.to_dict()))


@app.get("/api/series/{reference}/points", response_model=PointsTableResponse)
def get_points_table(reference: str, force_refresh: bool = Query(False)):
    series = _resolve_or_400(reference, force_refresh=force_refresh)
    return _points_response(series, force_refresh)


@app.post("/api/series/{reference}/points/update", response_model=PointsTableResponse)
def update_points_table(reference: str):
    series = _resolve_or_400(reference, force_refresh=True)
    return _points_response(series, force_refresh=True)


@app.get("/api/series/{reference}/matches", response_model=MatchesResponse)
def get_series_matches(reference: str, status: Optional[LifecycleStatus] = Query(None)):
    series = _resolve_or_400(reference)
    matches = standings.list_matches(series)

    counts = {"upcoming": 0, "live": 0, "completed": 0}
    for m in matches:
        counts[m.lifecycle_status] += 1

    if status is not None:
        matches = [m for m in matches if m.lifecycle_status == status]

    return MatchesResponse(
        series=SeriesOut(**series.to_dict()),
        counts=counts,
        matches=[MatchOut(**m.to_dict()) for m in matches],
    )
