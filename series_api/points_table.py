# series_api/points_table.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Literal, Optional, Sequence

from series_api.models import MatchRecord, SeriesRecord, StandingsRow, StandingsTable
from series_api.nrr_math import TeamAggregate, apply_innings, normalize_innings_balls, nrr, quota_balls

ResultType = Literal["WIN", "NR", "TIE"]

POINTS_WIN = 2
POINTS_SHARED = 1
FORM_WINDOW = 5
NRR_DECIMALS = 3

# Matches without a kick-off time sort before dated ones
_UNDATED = datetime.min.replace(tzinfo=timezone.utc)


@dataclass
class TeamRow:
    team: str
    played: int = 0
    won: int = 0
    lost: int = 0
    nr: int = 0
    tied: int = 0
    points: int = 0
    agg: TeamAggregate = field(init=False)
    form: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.agg = TeamAggregate(self.team)


def apply_result(
    row_a: TeamRow,
    row_b: TeamRow,
    *,
    result: ResultType = "WIN",
    winner: Optional[str] = None,
) -> None:
    """
    Updates played/won/lost/nr/tied/points and recent form ONLY.
    Aggregates are updated separately via nrr_math.apply_innings using real runs/balls.

    Rules:
    - WIN: winner must be row_a.team or row_b.team, points = 2 to winner
    - NR : both get 1 point, nr += 1
    - TIE: both get 1 point, tied += 1
    """
    row_a.played += 1
    row_b.played += 1

    if result in ("NR", "TIE"):
        for row in (row_a, row_b):
            if result == "NR":
                row.nr += 1
            else:
                row.tied += 1
            row.points += POINTS_SHARED
            # form is W/L/T only: a shared-points result reads as T
            row.form.append("T")
        return

    if result != "WIN":
        raise ValueError(f"Invalid result: {result}")

    if winner is None:
        raise ValueError("winner is required when result='WIN'")

    if winner == row_a.team:
        victor, loser = row_a, row_b
    elif winner == row_b.team:
        victor, loser = row_b, row_a
    else:
        raise ValueError("winner must be either team A or team B")

    victor.won += 1
    victor.points += POINTS_WIN
    victor.form.append("W")
    loser.lost += 1
    loser.form.append("L")


def _team_key(name: str) -> str:
    return name.strip().lower()


def _apply_match_innings(rows: Dict[str, TeamRow], match: MatchRecord) -> None:
    a, b = match.team_a.name, match.team_b.name
    quota = quota_balls(match.match_type)

    for inn in match.innings:
        if inn.team not in (a, b):
            continue
        balls = normalize_innings_balls(inn.balls, inn.wickets >= 10, quota)
        if balls <= 0:
            # no overs recorded: nothing to rate
            continue
        opponent = b if inn.team == a else a
        apply_innings(rows[_team_key(inn.team)].agg, rows[_team_key(opponent)].agg, runs=inn.runs, balls=balls)


def _is_countable(match: MatchRecord) -> bool:
    if match.lifecycle_status != "completed":
        return False
    a, b = _team_key(match.team_a.name), _team_key(match.team_b.name)
    return bool(a) and bool(b) and a != b


def kickoff_time(match: MatchRecord) -> datetime:
    dt = match.scheduled_at
    if dt is None:
        return _UNDATED
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def _finalize(row: TeamRow) -> StandingsRow:
    return StandingsRow(
        team=row.team,
        played=row.played,
        won=row.won,
        lost=row.lost,
        tied=row.tied,
        no_result=row.nr,
        points=row.points,
        net_run_rate=round(nrr(row.agg), NRR_DECIMALS),
        recent_form=tuple(row.form[-FORM_WINDOW:]),
    )


def compute_sorted_table(rows: List[TeamRow]) -> List[StandingsRow]:
    """
    Returns points table sorted by:
    1) Points (desc)
    2) NRR (desc)
    Rows still level keep their input order (sorted() is stable with reverse=True).
    """
    finalized = [_finalize(r) for r in rows]

    def key_fn(r: StandingsRow):
        return (r.points, r.net_run_rate)

    return sorted(finalized, key=key_fn, reverse=True)


def placeholder_table(series: SeriesRecord) -> StandingsTable:
    """All-zero rows for the series' declared teams; empty for a team-less series."""
    rows = tuple(StandingsRow(team=t) for t in series.teams)
    return StandingsTable(series_slug=series.slug, rows=rows, is_placeholder=True, source="placeholder")


def aggregate(series: SeriesRecord, matches: Sequence[MatchRecord]) -> StandingsTable:
    """
    Fold the completed matches of a series into a ranked standings table.

    Rows exist only for teams that played at least one completed match.
    With no completed match at all the placeholder table is returned instead.
    """
    completed = [m for m in matches if _is_countable(m)]
    if not completed:
        return placeholder_table(series)

    # chronological, so first-appearance order and form are oldest -> newest
    completed.sort(key=kickoff_time)

    rows: Dict[str, TeamRow] = {}
    for m in completed:
        for name in (m.team_a.name, m.team_b.name):
            # first spelling seen wins the display name
            rows.setdefault(_team_key(name), TeamRow(team=name.strip()))

        row_a, row_b = rows[_team_key(m.team_a.name)], rows[_team_key(m.team_b.name)]
        res = m.result
        winner_key = _team_key(res.winner) if res is not None and res.winner else None

        if res is not None and res.outcome == "win" and winner_key in (_team_key(row_a.team), _team_key(row_b.team)):
            winner = row_a.team if winner_key == _team_key(row_a.team) else row_b.team
            apply_result(row_a, row_b, result="WIN", winner=winner)
        elif res is not None and res.outcome == "no_result":
            apply_result(row_a, row_b, result="NR")
            # abandoned games are left out of NRR
            continue
        else:
            apply_result(row_a, row_b, result="TIE")

        _apply_match_innings(rows, m)

    return StandingsTable(
        series_slug=series.slug,
        rows=tuple(compute_sorted_table(list(rows.values()))),
        is_placeholder=False,
        source="computed",
    )
