# series_api/standings_service.py
from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from series_api.cache import make_key
from series_api.cricketdata_client import UpstreamFetchError
from series_api.dates import utc_now
from series_api.match_ingest import normalize_matches
from series_api.models import MatchRecord, SeriesRecord, StandingsTable
from series_api.points_table import aggregate, kickoff_time, placeholder_table

logger = logging.getLogger("series_api.standings")


def standings_cache_key(slug: str) -> str:
    return make_key("standings", slug)


class StandingsService:
    """
    Decides whether a stored standings table is served or recomputed.

    Cache entry (whole-record overwrite per series slug):
      {"table": StandingsTable, "stale": bool, "computed_at": iso-8601}
    """

    def __init__(
        self,
        source: Any,
        cache: Any,
        *,
        cache_ttl_seconds: Optional[int] = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.source = source
        self.cache = cache
        self.cache_ttl_seconds = cache_ttl_seconds
        self._clock = clock

    def get_or_refresh(self, series: SeriesRecord, force_refresh: bool = False) -> StandingsTable:
        key = standings_cache_key(series.slug)
        entry = self._entry(key)

        if not force_refresh and entry is not None and not entry["stale"]:
            return replace(entry["table"], source="cache")

        try:
            table = self._recompute(series)
        except UpstreamFetchError as e:
            if entry is not None:
                logger.warning(
                    "Standings refresh for %s failed, serving last known good table from %s: %s",
                    series.slug, entry["computed_at"], e,
                )
                return replace(entry["table"], source="last_known_good")

            logger.warning("Standings for %s unavailable, serving placeholder: %s", series.slug, e)
            return placeholder_table(series)

        self._write(key, table, stale=False)
        return table

    def mark_stale(self, slug: str) -> bool:
        """Flag a stored table so the next call recomputes. False if nothing is stored."""
        key = standings_cache_key(slug)
        entry = self._entry(key)
        if entry is None:
            return False
        self._write(key, entry["table"], stale=True, computed_at=entry["computed_at"])
        return True

    def list_matches(self, series: SeriesRecord) -> List[MatchRecord]:
        """
        Every normalized match of the series, in kick-off order and with its
        lifecycle status. Empty when upstream is unavailable; never cached.
        """
        try:
            raw_matches = self.source.fetch_matches(series.id)
        except UpstreamFetchError as e:
            logger.warning("Match list for %s unavailable: %s", series.slug, e)
            return []
        return sorted(normalize_matches(raw_matches, series_id=series.id), key=kickoff_time)

    # -----------------------
    # Internals
    # -----------------------
    def _recompute(self, series: SeriesRecord) -> StandingsTable:
        # Best-effort: the fetch below never depends on this succeeding
        try:
            self.source.request_points_refresh(series.id)
        except Exception as e:
            logger.info("Points refresh signal for %s ignored: %s", series.id, e)

        raw_matches = self.source.fetch_matches(series.id)
        matches = normalize_matches(raw_matches, series_id=series.id)
        table = aggregate(series, matches)
        logger.info(
            "Standings for %s recomputed from %d matches (%d rows, placeholder=%s)",
            series.slug, len(matches), len(table.rows), table.is_placeholder,
        )
        return table

    def _entry(self, key: str) -> Optional[Dict[str, Any]]:
        entry = self.cache.get(key)
        if not isinstance(entry, dict) or not isinstance(entry.get("table"), StandingsTable):
            return None
        return entry

    def _write(self, key: str, table: StandingsTable, *, stale: bool, computed_at: Optional[str] = None) -> None:
        entry = {
            "table": table,
            "stale": stale,
            "computed_at": computed_at or self._clock().isoformat(),
        }
        if self.cache_ttl_seconds is None:
            self.cache.set(key, entry)
        else:
            self.cache.set(key, entry, ttl_seconds=self.cache_ttl_seconds)
