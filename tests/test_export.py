import csv
from io import StringIO

import pytest

from lineupforge.config import get_template
from lineupforge.export import ContestExportError, export_lineups_to_csv, lineups_to_summary_csv
from lineupforge.optimizer import LineupPlayer, LineupResult


def _lineup(template_key: str = "DK_NFL", lineup_id: str = "L001") -> LineupResult:
    site, sport = template_key.split("_")
    template = get_template(site, sport)
    players = tuple(
        LineupPlayer(
            player_id=f"{lineup_id}-{idx}",
            name=f"Player {idx}",
            team="KC" if idx % 2 else "BUF",
            position=sorted(slot.positions)[0],
            slot=slot.name,
            salary=5000,
            projection=10.0,
        )
        for idx, slot in enumerate(template.slots)
    )
    return LineupResult(
        lineup_id=lineup_id,
        players=players,
        salary=5000 * len(players),
        projection=10.0 * len(players),
    )


def test_contest_export_numbers_repeated_slots():
    lineup = _lineup()
    text = export_lineups_to_csv([lineup], template=get_template("DK", "NFL"))

    rows = list(csv.reader(StringIO(text)))
    assert rows[0] == ["EntryName", "QB", "RB1", "RB2", "WR1", "WR2", "WR3", "TE", "FLEX", "DST"]
    assert rows[1][0] == "L001"
    assert rows[1][1:] == [player.player_id for player in lineup.players]


def test_contest_export_aliases_def_header_and_entry_names():
    lineup = _lineup("FD_NFL")
    text = export_lineups_to_csv([lineup], template=get_template("FD", "NFL"), entry_names=["Entry A"])

    rows = list(csv.reader(StringIO(text)))
    assert rows[0][-1] == "DST"
    assert rows[1][0] == "Entry A"


def test_contest_export_rejects_mismatched_lineups():
    with pytest.raises(ContestExportError):
        export_lineups_to_csv([_lineup("FD_NFL")], template=get_template("DK", "NFL"))
    with pytest.raises(ContestExportError):
        export_lineups_to_csv([_lineup()], template=get_template("DK", "NFL"), entry_names=[])


def test_summary_csv_lists_players():
    lineups = [_lineup(lineup_id="L001"), _lineup(lineup_id="L002")]
    rows = list(csv.DictReader(StringIO(lineups_to_summary_csv(lineups))))

    assert [row["lineup_id"] for row in rows] == ["L001", "L002"]
    assert rows[0]["salary"] == "45000"
    assert rows[0]["projection"] == "90.00"
    assert rows[0]["player_names"].split(" | ")[0] == "Player 0"
    assert rows[0]["positions"].split()[0] == "QB"
