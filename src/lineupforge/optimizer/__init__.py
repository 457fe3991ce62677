"""Randomized-greedy lineup construction and diversity-aware generation."""

from .filler import (
    AttemptOutcome,
    FailureReason,
    LineupPlayer,
    LineupResult,
    WindowPolicy,
    build_single_lineup,
    lineup_violations,
)
from .ranking import rank_by_value, rank_lineups
from .service import BuildOutput, EmptyPoolError, generate_lineups, lineup_diff

__all__ = [
    "AttemptOutcome",
    "BuildOutput",
    "EmptyPoolError",
    "FailureReason",
    "LineupPlayer",
    "LineupResult",
    "WindowPolicy",
    "build_single_lineup",
    "generate_lineups",
    "lineup_diff",
    "lineup_violations",
    "rank_by_value",
    "rank_lineups",
]
