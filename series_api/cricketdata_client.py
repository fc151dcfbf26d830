# series_api/cricketdata_client.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from series_api import config

logger = logging.getLogger("series_api.cricketdata")


class UpstreamFetchError(Exception):
    """Raised when a CricAPI (cricapi.com) call fails, times out or is misconfigured."""
    pass


class CricketDataClient:
    """
    Thin CricAPI v1 adapter exposing the three reads the resolver and the
    standings service need, plus the best-effort points refresh signal.

    Every failure surfaces as UpstreamFetchError; callers fall back.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        *,
        enabled: bool = True,
        timeout_seconds: int = 12,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url
        self.enabled = enabled
        self.timeout_seconds = timeout_seconds
        self._session = session or requests.Session()

    @classmethod
    def from_config(cls) -> "CricketDataClient":
        return cls(
            api_key=config.CRICKETDATA_API_KEY,
            base_url=config.CRICKETDATA_BASE_URL,
            enabled=config.CRICKETDATA_ENABLED,
            timeout_seconds=config.CRICKETDATA_TIMEOUT_SECONDS,
        )

    def get_json(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Generic helper to call CricAPI endpoints.

        IMPORTANT:
        - Only allowed when the client is enabled (CRICKETDATA_ENABLED=1).
        - A bounded timeout applies to every call; a hung upstream is a fetch failure.
        """
        if not self.enabled:
            raise UpstreamFetchError("CricketData is disabled (set CRICKETDATA_ENABLED=1 to enable).")

        if not self.api_key:
            raise UpstreamFetchError("CRICKETDATA_API_KEY is not configured")

        if not self.base_url.startswith("http"):
            raise UpstreamFetchError("CRICKETDATA_BASE_URL must start with http/https")

        url = f"{self.base_url.rstrip('/')}/{endpoint.lstrip('/')}"
        query = dict(params or {})
        query["apikey"] = self.api_key

        try:
            resp = self._session.get(url, params=query, timeout=self.timeout_seconds)
        except requests.RequestException as e:
            raise UpstreamFetchError(f"Network error: {e}") from e

        if resp.status_code != 200:
            raise UpstreamFetchError(f"HTTP {resp.status_code}: {resp.text[:200]}")

        try:
            data = resp.json()
        except ValueError as e:
            raise UpstreamFetchError(f"Invalid JSON response: {e}") from e

        if not isinstance(data, dict):
            raise UpstreamFetchError("Invalid response shape: expected a JSON object")

        if data.get("status") != "success":
            raise UpstreamFetchError(data.get("reason") or data.get("message") or "Unknown API error")

        info = data.get("info")
        if isinstance(info, dict) and "hitsToday" in info:
            logger.debug("CricAPI %s hits today: %s/%s", endpoint, info.get("hitsToday"), info.get("hitsLimit"))

        return data

    # -----------------------
    # Reads
    # -----------------------
    def fetch_series(self, series_id: str) -> Optional[Dict[str, Any]]:
        """series_info payload, or None when upstream has nothing for this id."""
        data = self.get_json("series_info", {"id": series_id}).get("data")
        return data if isinstance(data, dict) and data else None

    def list_series(self) -> List[Dict[str, Any]]:
        data = self.get_json("series", {"offset": 0}).get("data")
        if not isinstance(data, list):
            return []
        return [s for s in data if isinstance(s, dict)]

    def fetch_match(self, match_id: str) -> Optional[Dict[str, Any]]:
        data = self.get_json("match_info", {"id": match_id}).get("data")
        return data if isinstance(data, dict) and data else None

    def fetch_matches(self, series_id: str) -> List[Dict[str, Any]]:
        """
        Match list for a series. series_info's matchList carries no scores,
        so ended matches are enriched from match_info (best-effort per match).
        """
        detail = self.fetch_series(series_id)
        if detail is None:
            raise UpstreamFetchError(f"No series found upstream for id={series_id}")

        matches = detail.get("matchList")
        if not isinstance(matches, list):
            matches = detail.get("matches")
        if not isinstance(matches, list):
            return []

        out: List[Dict[str, Any]] = []
        for m in matches:
            if not isinstance(m, dict):
                continue
            if m.get("matchEnded") and not m.get("score") and m.get("id"):
                try:
                    full = self.fetch_match(str(m["id"]))
                except UpstreamFetchError as e:
                    logger.warning("Score enrichment failed for match %s: %s", m.get("id"), e)
                    full = None
                if full:
                    m = {**m, **full}
            out.append(m)
        return out

    # -----------------------
    # Signals
    # -----------------------
    def request_points_refresh(self, series_id: str) -> None:
        """
        Nudge upstream to rebuild its points table for this series.
        Result is discarded; callers swallow failures.
        """
        self.get_json("series_points", {"id": series_id})
