"""Built-in demonstration pool for the DK_NFL template."""

from __future__ import annotations

from typing import List, Tuple

from lineupforge.models import PlayerRecord


_SAMPLE_ROWS: Tuple[Tuple[str, str, str, int, float], ...] = (
    ("J. Elite", "NE", "QB", 7200, 22.5),
    ("K. Gunslinger", "KC", "QB", 7600, 23.1),
    ("D. Caretaker", "MIA", "QB", 5600, 17.5),
    ("R. Thunder", "SF", "RB", 6900, 18.0),
    ("B. Workhorse", "DAL", "RB", 6800, 16.9),
    ("S. ValueBack", "CHI", "RB", 5200, 14.2),
    ("J. Backup", "SF", "RB", 4200, 10.1),
    ("L. Grinder", "MIN", "RB", 4600, 11.4),
    ("W. Alpha", "MIN", "WR", 8200, 21.0),
    ("C. DeepThreat", "MIA", "WR", 7000, 17.2),
    ("R. Slot", "LAR", "WR", 5400, 12.8),
    ("T. Rookie", "HOU", "WR", 4800, 11.3),
    ("P. Possession", "KC", "WR", 4100, 10.2),
    ("A. Speedster", "NE", "WR", 3900, 9.1),
    ("D. Reliable", "MIA", "WR", 5000, 12.4),
    ("T. Titan", "KC", "TE", 7300, 17.8),
    ("M. MidTier", "DET", "TE", 4500, 9.4),
    ("G. Blocker", "MIA", "TE", 3600, 7.8),
    ("H. SafeHands", "NE", "TE", 3800, 8.3),
    ("Steel Wall", "PIT", "DST", 3300, 7.0),
    ("Windy D", "CHI", "DST", 2800, 6.1),
    ("Bay Wall", "SF", "DST", 3000, 6.5),
)


def sample_players() -> List[PlayerRecord]:
    """Return a small NFL pool that fills a DK_NFL roster several ways."""

    return [
        PlayerRecord(
            player_id=f"S{idx + 1:03}",
            name=name,
            team=team,
            position=position,
            salary=salary,
            projection=projection,
            metadata={"sport": "NFL"},
        )
        for idx, (name, team, position, salary, projection) in enumerate(_SAMPLE_ROWS)
    ]
