"""CSV export helpers for generated lineups."""

from __future__ import annotations

import csv
from io import StringIO
from typing import Mapping, Sequence

from lineupforge.config import RosterTemplate
from lineupforge.optimizer import LineupResult


class ContestExportError(RuntimeError):
    """Raised when a lineup does not match the contest template."""


_HEADER_ALIASES: Mapping[str, str] = {
    "DEF": "DST",
}

SUMMARY_HEADER = (
    "lineup_id",
    "salary",
    "projection",
    "player_ids",
    "player_names",
    "teams",
    "positions",
)


def _slot_headers(slot_order: Sequence[str]) -> tuple[str, ...]:
    counts: dict[str, int] = {}
    headers: list[str] = []
    for slot in slot_order:
        key = _HEADER_ALIASES.get(slot, slot)
        counts[key] = counts.get(key, 0) + 1
        if slot_order.count(slot) > 1:
            headers.append(f"{key}{counts[key]}")
        else:
            headers.append(key)
    return tuple(headers)


def export_lineups_to_csv(
    lineups: Sequence[LineupResult],
    *,
    template: RosterTemplate,
    entry_names: Sequence[str] | None = None,
) -> str:
    """Write one upload row per lineup with player ids in slot order."""

    if entry_names is not None and len(entry_names) != len(lineups):
        raise ContestExportError("entry_names length must match lineups length")

    slot_order = template.roster_order
    buffer = StringIO()
    writer = csv.writer(buffer)
    writer.writerow(("EntryName", *_slot_headers(slot_order)))

    for idx, lineup in enumerate(lineups):
        slots = tuple(player.slot for player in lineup.players)
        if slots != slot_order:
            raise ContestExportError(
                f"Lineup {lineup.lineup_id} does not follow the {template.key} slot order"
            )
        entry_name = entry_names[idx] if entry_names is not None else lineup.lineup_id
        writer.writerow([entry_name, *(player.player_id for player in lineup.players)])

    return buffer.getvalue()


def lineups_to_summary_csv(lineups: Sequence[LineupResult]) -> str:
    buffer = StringIO()
    writer = csv.writer(buffer)
    writer.writerow(SUMMARY_HEADER)
    for lineup in lineups:
        writer.writerow([
            lineup.lineup_id,
            lineup.salary,
            f"{lineup.projection:.2f}",
            " ".join(player.player_id for player in lineup.players),
            " | ".join(player.name for player in lineup.players),
            " ".join(player.team for player in lineup.players),
            " ".join(player.position for player in lineup.players),
        ])
    return buffer.getvalue()


__all__ = [
    "ContestExportError",
    "export_lineups_to_csv",
    "lineups_to_summary_csv",
]
