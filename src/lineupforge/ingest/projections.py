"""Helpers to load player CSVs and emit canonical records."""

from __future__ import annotations

import csv
import io
import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel

from lineupforge.config import RosterTemplate
from lineupforge.models import PlayerRecord


logger = logging.getLogger(__name__)

# Spellings seen in the wild for team defenses; mapped onto whichever of
# these the template actually uses.
_DEFENSE_ALIASES = {"DST", "D/ST", "D", "DEF", "DEFENSE"}


class ProjectionRow(BaseModel):
    raw_id: Optional[str] = None
    raw_name: str
    raw_team: str
    raw_position: Optional[str] = None
    raw_salary: str
    raw_projection: str
    raw_sport: Optional[str] = None

    @classmethod
    def from_mapping(cls, row: Mapping[str, str], mapping: Mapping[str, str]) -> "ProjectionRow":
        def extract(spec: Optional[str | Sequence[str]], *, default: Optional[str] = None) -> Optional[str]:
            if spec is None:
                return default
            if isinstance(spec, str):
                value = row.get(spec)
                return value.strip() if value is not None else default
            parts = [row.get(col, "").strip() for col in spec if row.get(col)]
            return " ".join(parts) if parts else default

        def parse_spec(key: str, default_key: Optional[str] = None) -> Optional[str | Sequence[str]]:
            spec = mapping.get(key)
            if spec is None and default_key:
                spec = default_key
            if spec is None:
                return None
            if isinstance(spec, str) and "|" in spec:
                return tuple(part.strip() for part in spec.split("|"))
            return spec

        data = {
            "raw_id": extract(parse_spec("player_id")) or None,
            "raw_name": extract(parse_spec("name", "name"), default=""),
            "raw_team": extract(parse_spec("team", "team"), default=""),
            "raw_position": extract(parse_spec("position")),
            "raw_salary": extract(parse_spec("salary", "salary"), default="0"),
            "raw_projection": extract(parse_spec("projection", "projection"), default="0"),
            "raw_sport": extract(parse_spec("sport")),
        }
        return cls(**data)


DEFAULT_PROJECTION_MAPPING = {
    "player_id": "id",
    "name": "name",
    "team": "team",
    "position": "pos",
    "salary": "salary",
    "projection": "proj",
    "sport": "sport",
}


@dataclass(frozen=True)
class LoadReport:
    total_rows: int
    loaded_players: int
    skipped_rows: List[Tuple[str, str]] = field(default_factory=list)
    position_counts: Dict[str, int] = field(default_factory=dict)


def _team_token(value: str) -> str:
    return re.sub(r"[^A-Z0-9]", "", value.upper())


def _canonical_team(team: str) -> str:
    return _team_token(team) or team.strip().upper()


def _canonical_position(raw_position: Optional[str], template: RosterTemplate) -> Optional[str]:
    """Resolve a raw position onto the template's closed position set."""

    if not raw_position:
        return None
    valid = template.positions
    tokens = [token.strip().upper() for token in re.split(r"[/,]", raw_position) if token.strip()]
    if raw_position.strip().upper() in _DEFENSE_ALIASES:
        tokens = [raw_position.strip().upper()]
    for token in tokens:
        if token in valid:
            return token
        if token in _DEFENSE_ALIASES:
            match = next((alias for alias in sorted(_DEFENSE_ALIASES) if alias in valid), None)
            if match:
                return match
    return None


def _parse_salary(raw_salary: str) -> int:
    text = raw_salary.strip()
    if text.lstrip("$ ").startswith("-"):
        raise ValueError(f"salary '{raw_salary}' is negative")
    if "." in text:
        text = text.split(".", 1)[0]
    digits = re.sub(r"[^0-9]", "", text)
    if not digits:
        raise ValueError(f"salary '{raw_salary}' has no digits")
    return int(digits)


def _parse_projection(raw_projection: str) -> float:
    text = raw_projection.strip()
    if not text:
        return 0.0
    try:
        value = float(text)
    except ValueError:
        raise ValueError(f"projection '{raw_projection}' is not numeric") from None
    return max(0.0, value)


def _fallback_id(name: str, team: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return f"{slug}-{team.lower()}"


def rows_to_records(
    rows: Sequence[ProjectionRow],
    *,
    template: RosterTemplate,
) -> Tuple[List[PlayerRecord], LoadReport]:
    records: List[PlayerRecord] = []
    skipped: List[Tuple[str, str]] = []
    seen_ids: set[str] = set()
    for row in rows:
        label = row.raw_name or row.raw_id or "<unnamed>"
        if not row.raw_name:
            skipped.append((label, "missing name"))
            continue
        position = _canonical_position(row.raw_position, template)
        if position is None:
            skipped.append((label, f"position {row.raw_position!r} not used by {template.key}"))
            continue
        team = _canonical_team(row.raw_team) if row.raw_team else ""
        if not team:
            skipped.append((label, "missing team"))
            continue
        try:
            salary = _parse_salary(row.raw_salary)
            projection = _parse_projection(row.raw_projection)
        except ValueError as exc:
            skipped.append((label, str(exc)))
            continue
        player_id = row.raw_id or _fallback_id(row.raw_name, team)
        if player_id in seen_ids:
            skipped.append((label, f"duplicate id {player_id}"))
            continue
        seen_ids.add(player_id)
        metadata: dict[str, object] = {"sport": (row.raw_sport or template.sport).upper()}
        if row.raw_position and row.raw_position.strip().upper() != position:
            metadata["raw_position"] = row.raw_position
        records.append(
            PlayerRecord(
                player_id=player_id,
                name=row.raw_name,
                team=team,
                position=position,
                salary=salary,
                projection=projection,
                metadata=metadata,
            )
        )

    if skipped:
        logger.info("Skipped %s of %s rows while loading players", len(skipped), len(rows))
    report = LoadReport(
        total_rows=len(rows),
        loaded_players=len(records),
        skipped_rows=skipped,
        position_counts=dict(Counter(record.position for record in records)),
    )
    return records, report


def read_projection_rows(lines: Iterable[str], *, mapping: Mapping[str, str] | None = None) -> List[ProjectionRow]:
    mapping = mapping or DEFAULT_PROJECTION_MAPPING
    reader = csv.DictReader(lines)
    return [ProjectionRow.from_mapping(row, mapping) for row in reader]


def load_projection_csv(path: Path, *, mapping: Mapping[str, str] | None = None) -> List[ProjectionRow]:
    with path.open(newline="", encoding="utf-8") as f:
        return read_projection_rows(f, mapping=mapping)


def load_records_from_csv(
    path: Path,
    *,
    template: RosterTemplate,
    mapping: Mapping[str, str] | None = None,
) -> Tuple[List[PlayerRecord], LoadReport]:
    return rows_to_records(load_projection_csv(path, mapping=mapping), template=template)


def load_records_from_bytes(
    contents: bytes,
    *,
    template: RosterTemplate,
    mapping: Mapping[str, str] | None = None,
) -> Tuple[List[PlayerRecord], LoadReport]:
    text = contents.decode("utf-8-sig")
    rows = read_projection_rows(io.StringIO(text, newline=""), mapping=mapping)
    return rows_to_records(rows, template=template)
