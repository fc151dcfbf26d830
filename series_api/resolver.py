# series_api/resolver.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from series_api.cache import make_key
from series_api.cricketdata_client import UpstreamFetchError
from series_api.dates import parse_date, parse_end_date, repair_series_dates, series_status, utc_now
from series_api.fallback import DEFAULT_IPL_T20_MATCHES, is_ipl_name, synthetic_series, title_from_slug
from series_api.identifiers import normalize, slugify
from series_api.match_ingest import teams_from_matches
from series_api.models import NormalizedRef, SeriesRecord

logger = logging.getLogger("series_api.resolver")

Strategy = Callable[[NormalizedRef], Optional[SeriesRecord]]

_FORMAT_KEYS: Tuple[Tuple[str, str], ...] = (("T20", "t20"), ("ODI", "odi"), ("Test", "test"))


def series_cache_key(slug: str) -> str:
    return make_key("series", slug)


# -----------------------------
# Payload -> SeriesRecord
# -----------------------------
def _safe_int(x: Any, default: int = 0) -> int:
    try:
        if x is None:
            return default
        return int(float(str(x).strip()))
    except (TypeError, ValueError):
        return default


def _unwrap(payload: Dict[str, Any]) -> Tuple[Dict[str, Any], List[Any]]:
    """
    series_info nests details under "info" next to "matchList";
    listing entries and cached payloads are flat.
    """
    info = payload.get("info")
    details = dict(info) if isinstance(info, dict) else dict(payload)
    matches = payload.get("matchList")
    if not isinstance(matches, list):
        matches = details.get("matchList") or details.get("matches")
    if not isinstance(matches, list):
        matches = []
    return details, matches


def _count_formats(details: Dict[str, Any], matches: List[Any], name: str) -> Dict[str, int]:
    formats = {label: _safe_int(details.get(key)) for label, key in _FORMAT_KEYS}

    if not any(formats.values()):
        for m in matches:
            if not isinstance(m, dict):
                continue
            kind = str(m.get("matchType") or m.get("format") or "").lower()
            for label, key in _FORMAT_KEYS:
                if key in kind:
                    formats[label] += 1
                    break

    if not any(formats.values()) and is_ipl_name(name):
        formats["T20"] = len(matches) or DEFAULT_IPL_T20_MATCHES

    return {k: v for k, v in formats.items() if v > 0}


def _declared_teams(details: Dict[str, Any], matches: List[Any]) -> Tuple[str, ...]:
    teams = details.get("teams")
    if isinstance(teams, list) and teams:
        names = []
        for t in teams:
            name = t.get("name") if isinstance(t, dict) else t
            name = str(name or "").strip()
            if name and name not in names:
                names.append(name)
        if names:
            return tuple(names)
    return tuple(teams_from_matches(matches))


def build_series_record(payload: Dict[str, Any], ref: NormalizedRef, now: datetime) -> Optional[SeriesRecord]:
    """
    Map an upstream series payload onto a SeriesRecord.
    Returns None when the payload does not describe a series (no id, no name).
    Dates are parsed but not yet repaired.
    """
    if not isinstance(payload, dict):
        return None
    details, matches = _unwrap(payload)

    series_id = str(details.get("id") or "").strip()
    name = str(details.get("name") or "").strip()
    if not series_id and not name:
        return None

    name = name or title_from_slug(ref.slug)
    start = parse_date(details.get("startDate") or details.get("startdate"))
    end = parse_end_date(details.get("endDate") or details.get("enddate"), start, now.year)

    return SeriesRecord(
        id=series_id or ref.raw,
        slug=slugify(name) or ref.slug,
        name=name,
        start_date=start,
        end_date=end,
        formats=_count_formats(details, matches, name),
        teams=_declared_teams(details, matches),
        status=series_status(start, end, now.date()),
    )


def _record_to_cache(record: SeriesRecord) -> Dict[str, Any]:
    return record.to_dict()


def _record_from_cache(value: Any) -> Optional[SeriesRecord]:
    if isinstance(value, SeriesRecord):
        return value
    if not isinstance(value, dict) or not value.get("slug"):
        return None
    return SeriesRecord(
        id=str(value.get("id") or ""),
        slug=str(value["slug"]),
        name=str(value.get("name") or ""),
        start_date=parse_date(value.get("start_date")),
        end_date=parse_date(value.get("end_date")),
        formats=dict(value.get("formats") or {}),
        teams=tuple(value.get("teams") or ()),
        status=value.get("status") or "upcoming",
        synthetic=bool(value.get("synthetic")),
    )


# -----------------------------
# Resolver
# -----------------------------
class SeriesResolver:
    """
    Resolves a series reference through an ordered fallback chain:

      1) session cache (by canonical slug)
      2) direct upstream lookup (uuid / legacy numeric id only)
      3) upstream listing + slug/name match
      4) deterministic synthetic series

    Steps run strictly one after another; the first that yields a record wins.
    The last step cannot fail, so any non-empty reference resolves.
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

    def resolve(self, reference: Union[str, NormalizedRef], *, force_refresh: bool = False) -> SeriesRecord:
        ref = reference if isinstance(reference, NormalizedRef) else normalize(reference)
        now = self._clock()

        strategies: List[Tuple[str, Strategy]] = []
        if not force_refresh:
            strategies.append(("session_cache", self._from_cache))
        strategies.extend([
            ("direct_lookup", lambda r: self._from_direct_lookup(r, now)),
            ("listing_match", lambda r: self._from_listing(r, now)),
            ("synthetic", lambda r: synthetic_series(r, now)),
        ])

        for step, strategy in strategies:
            try:
                record = strategy(ref)
            except UpstreamFetchError as e:
                logger.warning("Series %s: %s failed: %s", ref.slug, step, e)
                continue
            if record is None:
                continue

            record = repair_series_dates(record, now)
            if step != "session_cache":
                # cache hits keep their original expiry
                self._store(ref, record)
            logger.info("Series %s resolved via %s -> %s (%s)", ref.raw, step, record.id, record.name)
            return record

        # Unreachable: the synthetic step always yields a record
        raise RuntimeError(f"Series resolution exhausted for {ref.raw!r}")

    def cached(self, reference: Union[str, NormalizedRef]) -> Optional[SeriesRecord]:
        """The stored record for this reference, without touching upstream."""
        ref = reference if isinstance(reference, NormalizedRef) else normalize(reference)
        return self._from_cache(ref)

    def _store(self, ref: NormalizedRef, record: SeriesRecord) -> None:
        key = series_cache_key(ref.slug)
        if self.cache_ttl_seconds is None:
            self.cache.set(key, _record_to_cache(record))
        else:
            self.cache.set(key, _record_to_cache(record), ttl_seconds=self.cache_ttl_seconds)

    # -----------------------
    # Strategies
    # -----------------------
    def _from_cache(self, ref: NormalizedRef) -> Optional[SeriesRecord]:
        return _record_from_cache(self.cache.get(series_cache_key(ref.slug)))

    def _from_direct_lookup(self, ref: NormalizedRef, now: datetime) -> Optional[SeriesRecord]:
        if ref.kind not in ("uuid", "legacy_id"):
            return None
        payload = self.source.fetch_series(ref.raw)
        if not payload:
            return None
        return build_series_record(payload, ref, now)

    def _from_listing(self, ref: NormalizedRef, now: datetime) -> Optional[SeriesRecord]:
        needle = ref.slug.replace("-", " ")
        match = None
        for candidate in self.source.list_series() or []:
            if not isinstance(candidate, dict):
                continue
            name = str(candidate.get("name") or "")
            if not name:
                continue
            if slugify(name) == ref.slug or needle in name.lower():
                match = candidate
                break

        if match is None:
            return None

        payload: Optional[Dict[str, Any]] = None
        if match.get("id"):
            try:
                payload = self.source.fetch_series(str(match["id"]))
            except UpstreamFetchError as e:
                logger.warning("Series %s: detail fetch for listed id %s failed: %s", ref.slug, match.get("id"), e)

        return build_series_record(payload or match, ref, now)
