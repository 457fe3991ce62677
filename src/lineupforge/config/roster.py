"""Roster templates for supported site/sport combinations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple, Union


@dataclass(frozen=True)
class Slot:
    name: str
    positions: FrozenSet[str]

    def __post_init__(self) -> None:
        if not self.positions:
            raise ValueError(f"Slot {self.name!r} must accept at least one position")

    def accepts(self, position: str) -> bool:
        return position in self.positions


@dataclass(frozen=True)
class StackRule:
    """Require the anchor to be joined by ``min_companions`` teammates."""

    anchor_position: str
    companion_positions: FrozenSet[str]
    min_companions: int = 1
    same_team_required: bool = True


@dataclass(frozen=True)
class ExclusionRule:
    """Forbid ``position`` from sharing a team with ``blocked_positions``.

    An empty ``blocked_positions`` blocks every other position.
    """

    position: str
    blocked_positions: FrozenSet[str] = frozenset()

    def blocks(self, first: str, second: str) -> bool:
        for own, other in ((first, second), (second, first)):
            if own != self.position or other == self.position:
                continue
            if not self.blocked_positions or other in self.blocked_positions:
                return True
        return False


@dataclass(frozen=True)
class RosterTemplate:
    site: str
    sport: str
    salary_cap: int
    slots: Tuple[Slot, ...]
    team_max_players: int
    stack_rule: Optional[StackRule] = None
    exclusion_rule: Optional[ExclusionRule] = None

    def __post_init__(self) -> None:
        if not self.slots:
            raise ValueError("Roster template needs at least one slot")
        if self.salary_cap < 0:
            raise ValueError("salary_cap must be non-negative")
        if self.team_max_players < 1:
            raise ValueError("team_max_players must be at least 1")
        if self.stack_rule is not None:
            if self.stack_rule.anchor_position not in self.positions:
                raise ValueError(
                    f"Stack anchor {self.stack_rule.anchor_position!r} is not used by any slot"
                )
            if self.stack_rule.min_companions < 0:
                raise ValueError("min_companions must be non-negative")

    @property
    def key(self) -> str:
        return f"{self.site}_{self.sport}"

    @property
    def roster_order(self) -> Tuple[str, ...]:
        return tuple(slot.name for slot in self.slots)

    @property
    def positions(self) -> FrozenSet[str]:
        return frozenset().union(*(slot.positions for slot in self.slots))


def _slots(*entries: Tuple[str, Iterable[str]]) -> Tuple[Slot, ...]:
    return tuple(Slot(name, frozenset(positions)) for name, positions in entries)


_NFL_OFFENSE = frozenset({"QB", "RB", "WR", "TE"})

_TEMPLATES: Dict[Tuple[str, str], RosterTemplate] = {
    ("DK", "NFL"): RosterTemplate(
        site="DK",
        sport="NFL",
        salary_cap=50_000,
        slots=_slots(
            ("QB", {"QB"}),
            ("RB", {"RB"}),
            ("RB", {"RB"}),
            ("WR", {"WR"}),
            ("WR", {"WR"}),
            ("WR", {"WR"}),
            ("TE", {"TE"}),
            ("FLEX", {"RB", "WR", "TE"}),
            ("DST", {"DST"}),
        ),
        team_max_players=4,
        stack_rule=StackRule("QB", frozenset({"WR", "TE"}), min_companions=1),
        exclusion_rule=ExclusionRule("DST", _NFL_OFFENSE),
    ),
    ("FD", "NFL"): RosterTemplate(
        site="FD",
        sport="NFL",
        salary_cap=60_000,
        slots=_slots(
            ("QB", {"QB"}),
            ("RB", {"RB"}),
            ("RB", {"RB"}),
            ("WR", {"WR"}),
            ("WR", {"WR"}),
            ("WR", {"WR"}),
            ("TE", {"TE"}),
            ("FLEX", {"RB", "WR", "TE"}),
            ("DEF", {"D"}),
        ),
        team_max_players=4,
        stack_rule=StackRule("QB", frozenset({"WR", "TE"}), min_companions=1),
        exclusion_rule=ExclusionRule("D", _NFL_OFFENSE),
    ),
    ("FD", "MLB"): RosterTemplate(
        site="FD",
        sport="MLB",
        salary_cap=35_000,
        slots=_slots(
            ("P", {"P"}),
            ("C1B", {"C", "1B"}),
            ("2B", {"2B"}),
            ("3B", {"3B"}),
            ("SS", {"SS"}),
            ("OF", {"OF"}),
            ("OF", {"OF"}),
            ("OF", {"OF"}),
            ("UTIL", {"C", "1B", "2B", "3B", "SS", "OF"}),
        ),
        team_max_players=4,
    ),
    ("DK", "NBA"): RosterTemplate(
        site="DK",
        sport="NBA",
        salary_cap=50_000,
        slots=_slots(
            ("PG", {"PG"}),
            ("SG", {"SG"}),
            ("SF", {"SF"}),
            ("PF", {"PF"}),
            ("C", {"C"}),
            ("G", {"PG", "SG"}),
            ("F", {"SF", "PF"}),
            ("UTIL", {"PG", "SG", "SF", "PF", "C"}),
        ),
        team_max_players=4,
    ),
    ("FD", "NHL"): RosterTemplate(
        site="FD",
        sport="NHL",
        salary_cap=55_000,
        slots=_slots(
            ("C", {"C"}),
            ("C", {"C"}),
            ("W", {"W"}),
            ("W", {"W"}),
            ("D", {"D"}),
            ("D", {"D"}),
            ("UTIL", {"C", "W", "D"}),
            ("UTIL", {"C", "W", "D"}),
            ("G", {"G"}),
        ),
        team_max_players=4,
    ),
}


def iter_templates() -> Iterable[RosterTemplate]:
    """Return an iterator of all built-in templates."""

    return _TEMPLATES.values()


def get_template(site: str, sport: str) -> RosterTemplate:
    """Fetch the template for a site/sport pair, raising KeyError if missing."""

    key = (site.upper(), sport.upper())
    if key not in _TEMPLATES:
        raise KeyError(f"No roster template configured for site={site!r}, sport={sport!r}")
    return _TEMPLATES[key]


def get_template_by_key(site_key: Union[str, Tuple[str, str]]) -> RosterTemplate:
    """Resolve a template using either "SITE_SPORT" or (site, sport)."""

    if isinstance(site_key, tuple):
        site, sport = site_key
        return get_template(site, sport)

    if not isinstance(site_key, str):
        raise TypeError("site_key must be a str or (site, sport) tuple")

    parts = site_key.split("_", 1)
    if len(parts) != 2:
        raise ValueError(f"site_key must look like 'SITE_SPORT', got {site_key!r}")

    site, sport = parts
    return get_template(site, sport)


def _position_set(raw: Any, field: str) -> FrozenSet[str]:
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, (list, tuple, set, frozenset)):
        raise ValueError(f"{field} must be a list of positions")
    return frozenset(str(item).strip().upper() for item in raw if str(item).strip())


def _int_field(raw: Any, field: str) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValueError(f"{field} must be an integer") from None


def template_from_mapping(data: Mapping[str, Any]) -> RosterTemplate:
    """Build a template from a JSON-style payload.

    Expected shape::

        {"site": "X", "sport": "Y", "salary_cap": 50000, "team_max_players": 4,
         "slots": [{"name": "QB", "positions": ["QB"]}, ...],
         "stack_rule": {"anchor_position": "QB", "companion_positions": ["WR"],
                        "min_companions": 1, "same_team_required": true},
         "exclusion_rule": {"position": "DST", "blocked_positions": ["QB"]}}
    """

    try:
        raw_slots = data["slots"]
        salary_cap = int(data["salary_cap"])
    except KeyError as exc:
        raise ValueError(f"template is missing required field {exc.args[0]!r}") from None
    except (TypeError, ValueError):
        raise ValueError("salary_cap must be an integer") from None

    if not isinstance(raw_slots, list):
        raise ValueError("slots must be a list")
    slots = []
    for entry in raw_slots:
        if not isinstance(entry, Mapping) or "name" not in entry:
            raise ValueError("each slot needs a name and positions")
        slots.append(
            Slot(
                name=str(entry["name"]),
                positions=_position_set(entry.get("positions", []), "slot positions"),
            )
        )

    stack_rule = None
    raw_stack = data.get("stack_rule")
    if raw_stack:
        if not isinstance(raw_stack, Mapping):
            raise ValueError("stack_rule must be an object")
        if "anchor_position" not in raw_stack:
            raise ValueError("stack_rule needs an anchor_position")
        stack_rule = StackRule(
            anchor_position=str(raw_stack["anchor_position"]).upper(),
            companion_positions=_position_set(raw_stack.get("companion_positions", []), "companion_positions"),
            min_companions=_int_field(raw_stack.get("min_companions", 1), "min_companions"),
            same_team_required=bool(raw_stack.get("same_team_required", True)),
        )

    exclusion_rule = None
    raw_exclusion = data.get("exclusion_rule")
    if raw_exclusion:
        if not isinstance(raw_exclusion, Mapping):
            raise ValueError("exclusion_rule must be an object")
        if "position" not in raw_exclusion:
            raise ValueError("exclusion_rule needs a position")
        exclusion_rule = ExclusionRule(
            position=str(raw_exclusion["position"]).upper(),
            blocked_positions=_position_set(raw_exclusion.get("blocked_positions", []), "blocked_positions"),
        )

    return RosterTemplate(
        site=str(data.get("site", "CUSTOM")).upper(),
        sport=str(data.get("sport", "CUSTOM")).upper(),
        salary_cap=salary_cap,
        slots=tuple(slots),
        team_max_players=_int_field(data.get("team_max_players", len(slots)), "team_max_players"),
        stack_rule=stack_rule,
        exclusion_rule=exclusion_rule,
    )

