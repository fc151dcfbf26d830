# series_api/match_ingest.py
from __future__ import annotations

import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Tuple

from series_api.dates import parse_datetime
from series_api.models import (
    InningsSummary,
    LifecycleStatus,
    MatchRecord,
    MatchResult,
    TeamRef,
)
from series_api.nrr_math import overs_to_balls

logger = logging.getLogger("series_api.match_ingest")


class MalformedMatchData(Exception):
    """Raised when a match payload cannot yield two team identities."""
    pass


# "Mumbai Indians vs Chennai Super Kings, 3rd Match" / "India v England"
_VS_SPLIT_RE = re.compile(r"\s+(?:vs|v)\.?\s+", re.IGNORECASE)

_LIVE_RE = re.compile(r"\b(?:live|ongoing)\b", re.IGNORECASE)
_COMPLETED_RE = re.compile(r"\b(?:won(?!\s+the\s+toss)|drawn|tied|no result|abandoned)\b", re.IGNORECASE)
_TIE_RE = re.compile(r"\b(?:tied|drawn)\b", re.IGNORECASE)
_NO_RESULT_RE = re.compile(r"\b(?:no result|abandoned)\b", re.IGNORECASE)
_WON_RE = re.compile(r"^\s*(.+?)\s+won\b(?!\s+the\s+toss)", re.IGNORECASE)

# "187/5", "187/5 (20)", "187"
_SCORE_RE = re.compile(r"^\s*(\d+)\s*(?:/\s*(\d+))?")
_OVERS_IN_SCORE_RE = re.compile(r"\(\s*([0-9]+(?:\.[0-9])?)\s*(?:ov(?:ers)?)?\s*\)", re.IGNORECASE)


def _clean(x: Any) -> str:
    if x is None:
        return ""
    s = str(x).strip()
    return "" if s.lower() == "nan" else s


def _safe_int(x: Any, default: int = 0) -> int:
    try:
        if x is None:
            return default
        sx = str(x).strip()
        if not sx or sx.lower() == "nan":
            return default
        return int(float(sx))
    except (TypeError, ValueError):
        return default


def _same_team(a: str, b: str) -> bool:
    return a.strip().lower() == b.strip().lower()


# -----------------------------
# Team extraction
# -----------------------------
def _names_from_objects(items: Any) -> List[str]:
    if not isinstance(items, list):
        return []
    names: List[str] = []
    for item in items:
        if isinstance(item, dict):
            name = _clean(item.get("name"))
        else:
            name = _clean(item)
        if name:
            names.append(name)
    return names


def _names_from_title(title: str) -> List[str]:
    parts = _VS_SPLIT_RE.split(title, maxsplit=1)
    if len(parts) < 2:
        return []
    first = parts[0].strip()
    # drop the fixture suffix CricAPI appends: ", 3rd Match"
    second = parts[1].split(",", 1)[0].strip()
    return [n for n in (first, second) if n]


def _short_names(raw: Dict[str, Any]) -> Dict[str, str]:
    out: Dict[str, str] = {}
    info = raw.get("teamInfo")
    if not isinstance(info, list):
        return out
    for t in info:
        if not isinstance(t, dict):
            continue
        name = _clean(t.get("name"))
        short = _clean(t.get("shortname") or t.get("shortName"))
        if name and short:
            out[name.lower()] = short
    return out


def extract_team_names(raw: Dict[str, Any]) -> List[str]:
    """
    Team names in precedence order:
      1) `teams` array (objects with a name, or plain strings)
      2) `teamInfo` array of objects
      3) textual "Team A vs Team B" split of the match name
    Returns [] when fewer than two names can be found.
    """
    for names in (
        _names_from_objects(raw.get("teams")),
        _names_from_objects(raw.get("teamInfo")),
        _names_from_title(_clean(raw.get("name"))),
    ):
        if len(names) >= 2:
            return names[:2]
    return []


def extract_teams(raw: Dict[str, Any]) -> Tuple[TeamRef, TeamRef]:
    names = extract_team_names(raw)
    if len(names) < 2 or _same_team(names[0], names[1]):
        raise MalformedMatchData(f"Match {raw.get('id')!r} does not name two distinct teams")

    shorts = _short_names(raw)
    a, b = names
    return (
        TeamRef(name=a, short_name=shorts.get(a.lower())),
        TeamRef(name=b, short_name=shorts.get(b.lower())),
    )


# -----------------------------
# Lifecycle + result
# -----------------------------
def classify_status(status_text: Any, match_started: Any = None, match_ended: Any = None) -> LifecycleStatus:
    """
    Best-effort keyword heuristic over unstructured upstream status text.
      "live"/"ongoing"                 -> live
      "won"/"drawn"/"tied"/"no result" -> completed
      anything else                    -> upcoming

    CricAPI's matchEnded / matchStarted flags are honoured when present;
    "X won the toss" is not a result.
    """
    s = _clean(status_text)
    if _LIVE_RE.search(s):
        return "live"
    if _COMPLETED_RE.search(s) or match_ended is True:
        return "completed"
    if match_started is True:
        return "live"
    return "upcoming"


def _resolve_team(label: str, team_a: TeamRef, team_b: TeamRef) -> Optional[str]:
    """Map free text (name or short name) onto one of the two match teams."""
    lab = label.strip().lower()
    if not lab:
        return None
    for t in (team_a, team_b):
        if lab == t.name.lower() or (t.short_name and lab == t.short_name.lower()):
            return t.name
    # "Mumbai Indians Inning 1" style prefixes
    for t in sorted((team_a, team_b), key=lambda x: len(x.name), reverse=True):
        if lab.startswith(t.name.lower()):
            return t.name
    for t in (team_a, team_b):
        if t.short_name and lab.startswith(t.short_name.lower() + " "):
            return t.name
    # "Delhi won by 5 wkts" for "Delhi Capitals"; only when unambiguous
    hits = [t.name for t in (team_a, team_b) if t.name.lower().startswith(lab + " ")]
    if len(hits) == 1:
        return hits[0]
    return None


def _parse_result(
    raw: Dict[str, Any],
    status_text: str,
    team_a: TeamRef,
    team_b: TeamRef,
    innings: Tuple[InningsSummary, ...],
) -> Optional[MatchResult]:
    if _NO_RESULT_RE.search(status_text):
        return MatchResult(outcome="no_result")
    if _TIE_RE.search(status_text):
        return MatchResult(outcome="tie")

    explicit = _clean(raw.get("matchWinner") or raw.get("winner"))
    if explicit:
        winner = _resolve_team(explicit, team_a, team_b)
        if winner:
            return MatchResult(outcome="win", winner=winner)

    m = _WON_RE.match(status_text)
    if m:
        winner = _resolve_team(m.group(1), team_a, team_b)
        if winner:
            return MatchResult(outcome="win", winner=winner)

        # Status says someone won but names don't line up: fall back to totals
        totals = {team_a.name: 0, team_b.name: 0}
        for inn in innings:
            if inn.team in totals:
                totals[inn.team] += inn.runs
        if totals[team_a.name] != totals[team_b.name]:
            winner = max(totals, key=totals.get)
            return MatchResult(outcome="win", winner=winner)

    return None


# -----------------------------
# Scores
# -----------------------------
def parse_score(value: Any) -> Tuple[int, int]:
    """
    "187/5" -> (187, 5); "187" -> (187, 0); malformed/absent -> (0, 0).
    """
    m = _SCORE_RE.match(_clean(value))
    if not m:
        return 0, 0
    runs = int(m.group(1))
    wickets = int(m.group(2)) if m.group(2) else 0
    return runs, wickets


def _safe_balls(overs: Any) -> Tuple[str, int]:
    s = _clean(overs)
    if not s:
        return "0", 0
    try:
        return s, overs_to_balls(s)
    except ValueError:
        return s, 0


def _parse_innings_entry(entry: Any) -> Tuple[str, int, int, str, int]:
    """Returns (label, runs, wickets, overs, balls)."""
    if isinstance(entry, dict):
        label = _clean(entry.get("inning") or entry.get("team"))
        if "r" in entry:
            runs = _safe_int(entry.get("r"))
            wickets = _safe_int(entry.get("w"))
        else:
            runs, wickets = parse_score(entry.get("score"))
        overs, balls = _safe_balls(entry.get("o", entry.get("overs")))
        return label, runs, wickets, overs, balls

    s = _clean(entry)
    runs, wickets = parse_score(s)
    m = _OVERS_IN_SCORE_RE.search(s)
    overs, balls = _safe_balls(m.group(1) if m else None)
    return "", runs, wickets, overs, balls


def parse_innings(raw: Dict[str, Any], team_a: TeamRef, team_b: TeamRef) -> Tuple[InningsSummary, ...]:
    entries = raw.get("score")
    if not isinstance(entries, list):
        entries = raw.get("innings")
    if not isinstance(entries, list):
        return ()

    out: List[InningsSummary] = []
    for i, entry in enumerate(entries):
        label, runs, wickets, overs, balls = _parse_innings_entry(entry)
        team = _resolve_team(label, team_a, team_b) if label else None
        if team is None:
            # No usable label: innings alternate A, B, A, B
            team = team_a.name if i % 2 == 0 else team_b.name
        out.append(InningsSummary(team=team, runs=runs, wickets=wickets, overs=overs, balls=balls))
    return tuple(out)


# -----------------------------
# Public API
# -----------------------------
def normalize_match(raw: Dict[str, Any], series_id: Optional[str] = None) -> MatchRecord:
    """
    Map one loosely-typed upstream match payload onto a MatchRecord.
    Raises MalformedMatchData when two teams cannot be extracted.
    """
    if not isinstance(raw, dict):
        raise MalformedMatchData(f"Match payload must be an object, got {type(raw).__name__}")

    team_a, team_b = extract_teams(raw)

    status_text = _clean(raw.get("status"))
    lifecycle = classify_status(status_text, raw.get("matchStarted"), raw.get("matchEnded"))
    innings = parse_innings(raw, team_a, team_b)

    result = None
    if lifecycle == "completed":
        result = _parse_result(raw, status_text, team_a, team_b, innings)

    return MatchRecord(
        id=_clean(raw.get("id")) or f"{team_a.name} vs {team_b.name}",
        series_id=_clean(raw.get("series_id") or raw.get("seriesId")) or series_id,
        team_a=team_a,
        team_b=team_b,
        venue=_clean(raw.get("venue")) or None,
        scheduled_at=parse_datetime(raw.get("dateTimeGMT") or raw.get("date")),
        lifecycle_status=lifecycle,
        result=result,
        innings=innings,
        match_type=_clean(raw.get("matchType") or raw.get("format")) or None,
    )


def normalize_matches(raws: Iterable[Any], series_id: Optional[str] = None) -> List[MatchRecord]:
    """Normalize a batch, silently dropping payloads without two teams."""
    out: List[MatchRecord] = []
    for raw in raws or []:
        try:
            out.append(normalize_match(raw, series_id=series_id))
        except MalformedMatchData as e:
            logger.debug("Dropping match: %s", e)
    return out


def teams_from_matches(raws: Iterable[Any]) -> List[str]:
    """Distinct team names across a raw match list, in first-seen order."""
    seen: Dict[str, str] = {}
    for raw in raws or []:
        if not isinstance(raw, dict):
            continue
        for name in extract_team_names(raw):
            seen.setdefault(name.lower(), name)
    return list(seen.values())
