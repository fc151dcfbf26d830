# series_api/nrr_math.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Union

BALLS_PER_OVER = 6
MAX_BALLS_T10 = 10 * BALLS_PER_OVER
MAX_BALLS_T20 = 20 * BALLS_PER_OVER
MAX_BALLS_ODI = 50 * BALLS_PER_OVER

OversLike = Union[str, int, float]

# "20", "19.4", "19." - completed overs, then balls of the current over
_OVERS_RE = re.compile(r"^(\d+)(?:\.(\d?))?$")


@dataclass
class TeamAggregate:
    """
    Running totals behind one team's NRR across a series.
    Kept in balls; overs notation is not decimal and does not add up.
    """
    team: str
    runs_for: int = 0
    balls_for: int = 0
    runs_against: int = 0
    balls_against: int = 0


def overs_to_balls(overs: OversLike) -> int:
    """
    "19.4" -> 118. The digit after the point counts balls (0-5), so 19.4
    overs is 19*6 + 4 balls, not 19.4 * 6.

    Floats are read through their str() form (CricAPI sends 19.4, not "19.4").
    Raises ValueError for anything that is not overs notation.
    """
    if overs is None:
        raise ValueError("Overs cannot be None")

    m = _OVERS_RE.match(str(overs).strip())
    if not m:
        raise ValueError(f"Invalid overs: {overs!r}")

    completed = int(m.group(1))
    extra = int(m.group(2) or 0)
    if extra >= BALLS_PER_OVER:
        raise ValueError(f"Invalid overs: {overs!r} (balls part must be 0-5)")

    return completed * BALLS_PER_OVER + extra


def run_rate(runs: int, balls: int) -> float:
    """Runs per six balls; 0.0 when no balls were bowled."""
    if balls <= 0:
        return 0.0
    return runs * BALLS_PER_OVER / balls


def nrr(agg: TeamAggregate) -> float:
    return run_rate(agg.runs_for, agg.balls_for) - run_rate(agg.runs_against, agg.balls_against)


def quota_balls(match_type: Optional[str]) -> Optional[int]:
    """
    Full innings allocation for limited-overs formats, None for first-class
    cricket (no over quota).
    """
    mt = (match_type or "").lower()
    if "t20" in mt:
        return MAX_BALLS_T20
    if "t10" in mt:
        return MAX_BALLS_T10
    if "odi" in mt or "one-day" in mt or "list a" in mt:
        return MAX_BALLS_ODI
    return None


def normalize_innings_balls(balls: int, all_out: bool, quota: Optional[int] = MAX_BALLS_T20) -> int:
    """
    Balls an innings is charged for in NRR.

    A side bowled out is charged its whole quota even if it lasted 15 overs;
    a chase finished early keeps the balls actually faced.
    0 stays 0: caller leaves such innings out of the aggregates.
    """
    if balls < 0:
        raise ValueError("Balls cannot be negative")
    if balls == 0 or not all_out or quota is None:
        return balls
    return max(balls, quota)


def apply_innings(
    batting: TeamAggregate,
    bowling: TeamAggregate,
    *,
    runs: int,
    balls: int,
) -> None:
    """
    Credits one innings to both sides: the batting side scored `runs` off
    `balls`, the bowling side conceded them.
    """
    if balls <= 0:
        raise ValueError("Cannot apply an innings with no balls bowled")

    batting.runs_for += int(runs)
    batting.balls_for += int(balls)

    bowling.runs_against += int(runs)
    bowling.balls_against += int(balls)
