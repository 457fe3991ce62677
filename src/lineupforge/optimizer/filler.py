"""Single-attempt lineup construction.

One attempt walks the template's slots in order and fills each with the
first feasible candidate inside a small window at the top of the value
ranking. The window keeps repeated attempts varied instead of always
returning the greedy optimum; an attempt that cannot be completed is
reported as a failure and simply retried by the caller.
"""

from __future__ import annotations

import math
import random
from collections import Counter, defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple

from lineupforge.config import GeneratorSettings, RosterTemplate, Slot, StackRule
from lineupforge.models import PlayerRecord

from .ranking import rank_by_value


class FailureReason(str, Enum):
    CATEGORY_STARVATION = "category_starvation"
    BUDGET_EXHAUSTED = "budget_exhausted"
    CONSTRAINT_UNSATISFIABLE = "constraint_unsatisfiable"


@dataclass(frozen=True)
class WindowPolicy:
    """How much of a slot's ranked eligible list one attempt may look at."""

    fraction: float = 0.15
    widened_fraction: float = 0.25
    min_size: int = 3

    @classmethod
    def from_settings(cls, settings: GeneratorSettings) -> "WindowPolicy":
        return cls(
            fraction=settings.window_fraction,
            widened_fraction=settings.widened_fraction,
            min_size=settings.min_window,
        )

    def bounds(self, eligible: int) -> Tuple[int, int]:
        first = min(eligible, max(self.min_size, math.ceil(eligible * self.fraction)))
        widened = min(eligible, max(first, math.ceil(eligible * self.widened_fraction)))
        return first, widened


@dataclass(frozen=True)
class LineupPlayer:
    player_id: str
    name: str
    team: str
    position: str
    slot: str
    salary: int
    projection: float


@dataclass(frozen=True)
class LineupResult:
    lineup_id: str
    players: Tuple[LineupPlayer, ...]
    salary: int
    projection: float

    @property
    def signature(self) -> FrozenSet[str]:
        return frozenset(player.player_id for player in self.players)


@dataclass(frozen=True)
class AttemptOutcome:
    lineup: Optional[LineupResult] = None
    reason: Optional[FailureReason] = None
    slot: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.lineup is not None


def _stack_shortfall(
    members: Sequence[Tuple[Slot, str, str]],
    rule: StackRule,
) -> Optional[str]:
    """Return why ``members`` (slot, position, team) miss the stack, if they do."""

    anchor_index = next(
        (idx for idx, (slot, _, _) in enumerate(members) if slot.positions == {rule.anchor_position}),
        None,
    )
    if anchor_index is None:
        anchor_index = next(
            (idx for idx, (_, position, _) in enumerate(members) if position == rule.anchor_position),
            None,
        )
    if anchor_index is None:
        return f"no {rule.anchor_position} anchor in lineup"

    anchor_team = members[anchor_index][2]
    companions = sum(
        1
        for idx, (_, position, team) in enumerate(members)
        if idx != anchor_index
        and position in rule.companion_positions
        and (not rule.same_team_required or team == anchor_team)
    )
    if companions < rule.min_companions:
        return (
            f"{rule.anchor_position} stack has {companions} companion(s), "
            f"needs {rule.min_companions}"
        )
    return None


def build_single_lineup(
    records: Sequence[PlayerRecord],
    template: RosterTemplate,
    *,
    salary_cap: Optional[int] = None,
    noise: float = 0.0,
    temperature: float = 0.0,
    max_from_one_team: Optional[int] = None,
    window: Optional[WindowPolicy] = None,
    rng: Optional[random.Random] = None,
) -> AttemptOutcome:
    """Try once to fill every slot of ``template`` from ``records``."""

    rng = rng or random.Random()
    window = window or WindowPolicy()
    cap = template.salary_cap if salary_cap is None else salary_cap
    team_cap = template.team_max_players if max_from_one_team is None else max_from_one_team
    exclusion = template.exclusion_rule

    values: Optional[Dict[str, float]] = None
    if noise > 0:
        values = {record.player_id: record.projection + rng.uniform(-noise, noise) for record in records}

    ranked = rank_by_value(records, temperature=temperature, rng=rng, values=values)
    rank_index: Dict[str, int] = {}
    by_position: Dict[str, List[PlayerRecord]] = defaultdict(list)
    for idx, record in enumerate(ranked):
        rank_index[record.player_id] = idx
        by_position[record.position].append(record)

    # Cheapest possible salary per slot, ignoring usage, as a lower bound
    # on what the still-open slots will cost.
    cheapest = [
        min((record.salary for pos in slot.positions for record in by_position.get(pos, ())), default=0)
        for slot in template.slots
    ]
    reserve_after = [sum(cheapest[idx + 1:]) for idx in range(len(cheapest))]

    chosen: List[Tuple[Slot, PlayerRecord]] = []
    used_ids: set[str] = set()
    team_counts: Counter[str] = Counter()
    spent = 0

    for slot_idx, slot in enumerate(template.slots):
        eligible = sorted(
            (
                record
                for pos in slot.positions
                for record in by_position.get(pos, ())
                if record.player_id not in used_ids
            ),
            key=lambda record: rank_index[record.player_id],
        )
        if not eligible:
            return AttemptOutcome(reason=FailureReason.CATEGORY_STARVATION, slot=slot.name)

        budget_left = cap - spent - reserve_after[slot_idx]
        rejections: Counter[str] = Counter()

        def feasible(record: PlayerRecord) -> bool:
            if record.salary > budget_left:
                rejections["budget"] += 1
                return False
            if team_counts[record.team] + 1 > team_cap:
                rejections["team"] += 1
                return False
            if exclusion is not None and any(
                placed.team == record.team and exclusion.blocks(placed.position, record.position)
                for _, placed in chosen
            ):
                rejections["exclusion"] += 1
                return False
            return True

        first, widened = window.bounds(len(eligible))
        pick = next((record for record in eligible[:first] if feasible(record)), None)
        if pick is None:
            pick = next((record for record in eligible[first:widened] if feasible(record)), None)
        if pick is None:
            if set(rejections) == {"budget"}:
                return AttemptOutcome(reason=FailureReason.BUDGET_EXHAUSTED, slot=slot.name)
            return AttemptOutcome(reason=FailureReason.CONSTRAINT_UNSATISFIABLE, slot=slot.name)

        chosen.append((slot, pick))
        used_ids.add(pick.player_id)
        team_counts[pick.team] += 1
        spent += pick.salary

    if template.stack_rule is not None:
        members = [(slot, record.position, record.team) for slot, record in chosen]
        if _stack_shortfall(members, template.stack_rule) is not None:
            return AttemptOutcome(reason=FailureReason.CONSTRAINT_UNSATISFIABLE)

    players = tuple(
        LineupPlayer(
            player_id=record.player_id,
            name=record.name,
            team=record.team,
            position=record.position,
            slot=slot.name,
            salary=record.salary,
            projection=record.projection,
        )
        for slot, record in chosen
    )
    return AttemptOutcome(
        lineup=LineupResult(
            lineup_id="",
            players=players,
            salary=spent,
            projection=float(sum(player.projection for player in players)),
        )
    )


def lineup_violations(
    lineup: LineupResult,
    template: RosterTemplate,
    *,
    salary_cap: Optional[int] = None,
    max_from_one_team: Optional[int] = None,
) -> List[str]:
    """List every roster rule ``lineup`` breaks; empty means valid."""

    cap = template.salary_cap if salary_cap is None else salary_cap
    team_cap = template.team_max_players if max_from_one_team is None else max_from_one_team
    problems: List[str] = []

    if len(lineup.players) != len(template.slots):
        problems.append(f"expected {len(template.slots)} players, got {len(lineup.players)}")
    for slot, player in zip(template.slots, lineup.players):
        if player.slot != slot.name or not slot.accepts(player.position):
            problems.append(f"{player.player_id} ({player.position}) cannot fill slot {slot.name}")
    if len(lineup.signature) != len(lineup.players):
        problems.append("duplicate player ids")
    salary = sum(player.salary for player in lineup.players)
    if salary > cap:
        problems.append(f"salary {salary} exceeds cap {cap}")
    for team, count in Counter(player.team for player in lineup.players).items():
        if count > team_cap:
            problems.append(f"{count} players from {team} (max {team_cap})")

    rule = template.exclusion_rule
    if rule is not None:
        for idx, first in enumerate(lineup.players):
            for second in lineup.players[idx + 1:]:
                if first.team == second.team and rule.blocks(first.position, second.position):
                    problems.append(
                        f"{first.position} {first.player_id} shares {first.team} with "
                        f"{second.position} {second.player_id}"
                    )

    if template.stack_rule is not None:
        members = [
            (slot, player.position, player.team)
            for slot, player in zip(template.slots, lineup.players)
        ]
        shortfall = _stack_shortfall(members, template.stack_rule)
        if shortfall:
            problems.append(shortfall)
    return problems
