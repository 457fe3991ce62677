"""Orderings for candidates (value density) and finished lineups."""

from __future__ import annotations

import random
from typing import TYPE_CHECKING, List, Mapping, Optional, Sequence

from lineupforge.models import PlayerRecord

if TYPE_CHECKING:
    from .filler import LineupResult


def value_density(value: float, salary: int) -> float:
    return value / max(1, salary)


def rank_by_value(
    records: Sequence[PlayerRecord],
    *,
    temperature: float = 0.0,
    rng: Optional[random.Random] = None,
    values: Optional[Mapping[str, float]] = None,
) -> List[PlayerRecord]:
    """Order candidates by value per unit of salary, best first.

    Ties fall back to raw value and then ``player_id``. A positive
    ``temperature`` adds ``uniform(-temperature, temperature)`` times the best
    density in the set to every key, so orderings vary between calls while
    staying biased toward value. ``values`` overrides projections by id.
    """

    if not records:
        return []

    def value_of(record: PlayerRecord) -> float:
        if values is None:
            return record.projection
        return values.get(record.player_id, record.projection)

    densities = [value_density(value_of(record), record.salary) for record in records]
    keys = list(densities)
    if temperature > 0:
        rng = rng or random.Random()
        scale = max(abs(density) for density in densities)
        keys = [density + rng.uniform(-temperature, temperature) * scale for density in densities]

    order = sorted(
        range(len(records)),
        key=lambda idx: (-keys[idx], -value_of(records[idx]), records[idx].player_id),
    )
    return [records[idx] for idx in order]


def rank_lineups(lineups: Sequence["LineupResult"]) -> List["LineupResult"]:
    """Best projection first; cheaper lineups win ties."""

    return sorted(
        lineups,
        key=lambda lineup: (-round(lineup.projection, 6), lineup.salary, tuple(sorted(lineup.signature))),
    )
