from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Literal, Optional, Tuple


# -----------------------------
# Enumerations
# -----------------------------
RefKind = Literal["uuid", "legacy_id", "slug"]
SeriesStatus = Literal["upcoming", "ongoing", "completed"]
LifecycleStatus = Literal["upcoming", "live", "completed"]
MatchOutcome = Literal["win", "tie", "no_result"]
FormatName = Literal["T20", "ODI", "Test"]


# -----------------------------
# Series identity
# -----------------------------
@dataclass(frozen=True)
class NormalizedRef:
    raw: str
    kind: RefKind
    slug: str


@dataclass(frozen=True)
class SeriesRecord:
    id: str
    slug: str
    name: str

    # Either may be None straight off an upstream payload; the resolver
    # repairs both before a record leaves it.
    start_date: Optional[date]
    end_date: Optional[date]

    formats: Dict[str, int] = field(default_factory=dict)
    teams: Tuple[str, ...] = ()
    status: SeriesStatus = "upcoming"
    synthetic: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "slug": self.slug,
            "name": self.name,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "formats": dict(self.formats),
            "teams": list(self.teams),
            "status": self.status,
            "synthetic": self.synthetic,
        }


# -----------------------------
# Canonical match
# -----------------------------
@dataclass(frozen=True)
class TeamRef:
    name: str
    short_name: Optional[str] = None


@dataclass(frozen=True)
class InningsSummary:
    team: Optional[str]
    runs: int = 0
    wickets: int = 0
    overs: str = "0"
    balls: int = 0


@dataclass(frozen=True)
class MatchResult:
    outcome: MatchOutcome
    winner: Optional[str] = None


@dataclass(frozen=True)
class MatchRecord:
    id: str
    series_id: Optional[str]
    team_a: TeamRef
    team_b: TeamRef
    venue: Optional[str] = None
    scheduled_at: Optional[datetime] = None
    lifecycle_status: LifecycleStatus = "upcoming"
    result: Optional[MatchResult] = None
    innings: Tuple[InningsSummary, ...] = ()
    match_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "series_id": self.series_id,
            "team_a": self.team_a.name,
            "team_b": self.team_b.name,
            "venue": self.venue,
            "scheduled_at": self.scheduled_at.isoformat() if self.scheduled_at else None,
            "status": self.lifecycle_status,
            "outcome": self.result.outcome if self.result else None,
            "winner": self.result.winner if self.result else None,
            "match_type": self.match_type,
            "innings": [
                {"team": i.team, "runs": i.runs, "wickets": i.wickets, "overs": i.overs}
                for i in self.innings
            ],
        }


# -----------------------------
# Standings
# -----------------------------
@dataclass(frozen=True)
class StandingsRow:
    team: str
    played: int = 0
    won: int = 0
    lost: int = 0
    tied: int = 0
    no_result: int = 0
    points: int = 0
    net_run_rate: float = 0.0
    recent_form: Tuple[str, ...] = ()

    def to_dict(self, pos: Optional[int] = None) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if pos is not None:
            out["pos"] = pos
        out.update({
            "team": self.team,
            "played": self.played,
            "won": self.won,
            "lost": self.lost,
            "tied": self.tied,
            "no_result": self.no_result,
            "points": self.points,
            "nrr": self.net_run_rate,
            "recent_form": list(self.recent_form),
        })
        return out


@dataclass(frozen=True)
class StandingsTable:
    series_slug: str
    rows: Tuple[StandingsRow, ...] = ()
    is_placeholder: bool = False
    # computed | cache | last_known_good | placeholder
    source: str = "computed"

    def teams(self) -> Tuple[str, ...]:
        return tuple(r.team for r in self.rows)

    def to_rows(self) -> list:
        return [r.to_dict(pos=i) for i, r in enumerate(self.rows, start=1)]
