import pytest

from lineupforge.config import (
    ExclusionRule,
    RosterTemplate,
    Slot,
    StackRule,
    get_template,
    get_template_by_key,
    iter_templates,
    template_from_mapping,
)


def test_get_template_handles_site_and_sport_uppercase():
    template = get_template("fd", "mlb")
    assert template.site == "FD"
    assert "P" in template.positions
    assert template.roster_order[0] == "P"


def test_get_template_by_key_string_alias():
    template = get_template_by_key("FD_NFL")
    assert template.salary_cap == 60_000
    assert template.roster_order[-1] == "DEF"


def test_get_template_by_key_tuple():
    assert get_template_by_key(("dk", "nba")).key == "DK_NBA"


def test_get_template_missing_raises():
    with pytest.raises(KeyError):
        get_template("FD", "CURLING")


def test_builtin_templates_are_listed():
    keys = {template.key for template in iter_templates()}
    assert {"DK_NFL", "FD_NFL", "FD_MLB", "DK_NBA", "FD_NHL"} <= keys


def test_dk_nfl_rules():
    template = get_template("DK", "NFL")
    assert template.salary_cap == 50_000
    assert template.roster_order == ("QB", "RB", "RB", "WR", "WR", "WR", "TE", "FLEX", "DST")
    assert template.team_max_players == 4
    assert template.stack_rule is not None
    assert template.stack_rule.anchor_position == "QB"
    assert template.exclusion_rule is not None
    assert template.exclusion_rule.blocks("QB", "DST")


def test_exclusion_rule_is_symmetric():
    rule = ExclusionRule("DST", frozenset({"QB", "WR"}))
    assert rule.blocks("DST", "QB")
    assert rule.blocks("WR", "DST")
    assert not rule.blocks("DST", "RB")
    assert not rule.blocks("QB", "WR")
    assert not rule.blocks("DST", "DST")


def test_exclusion_rule_without_blocked_positions_blocks_everything_else():
    rule = ExclusionRule("G")
    assert rule.blocks("G", "C")
    assert rule.blocks("W", "G")
    assert not rule.blocks("C", "W")


def test_template_requires_slots_and_positions():
    with pytest.raises(ValueError):
        Slot("FLEX", frozenset())
    with pytest.raises(ValueError):
        RosterTemplate(site="X", sport="Y", salary_cap=100, slots=(), team_max_players=1)


def test_template_rejects_unknown_stack_anchor():
    with pytest.raises(ValueError):
        RosterTemplate(
            site="X",
            sport="Y",
            salary_cap=100,
            slots=(Slot("A", frozenset({"A"})),),
            team_max_players=1,
            stack_rule=StackRule("QB", frozenset({"A"})),
        )


def test_template_from_mapping_builds_rules():
    template = template_from_mapping(
        {
            "site": "cu",
            "sport": "nfl",
            "salary_cap": 30000,
            "slots": [
                {"name": "QB", "positions": ["qb"]},
                {"name": "WR", "positions": ["WR"]},
                {"name": "FLEX", "positions": ["WR", "TE"]},
            ],
            "stack_rule": {"anchor_position": "qb", "companion_positions": ["WR"]},
            "exclusion_rule": {"position": "TE", "blocked_positions": ["QB"]},
        }
    )
    assert template.key == "CU_NFL"
    assert template.slots[0].positions == frozenset({"QB"})
    assert template.team_max_players == 3
    assert template.stack_rule == StackRule("QB", frozenset({"WR"}), 1, True)
    assert template.exclusion_rule == ExclusionRule("TE", frozenset({"QB"}))


@pytest.mark.parametrize(
    "payload",
    [
        {"slots": [{"name": "A", "positions": ["A"]}]},
        {"salary_cap": 100},
        {"salary_cap": "lots", "slots": []},
        {"salary_cap": 100, "slots": [{"positions": ["A"]}]},
        {"salary_cap": 100, "slots": [{"name": "A", "positions": []}]},
        {"salary_cap": 100, "slots": [{"name": "A", "positions": ["A"]}], "stack_rule": {"min_companions": 1}},
        {"salary_cap": 100, "slots": [{"name": "A", "positions": ["A"]}], "exclusion_rule": {"blocked_positions": ["A"]}},
        {"salary_cap": 100, "slots": [{"name": "A", "positions": ["A"]}], "team_max_players": None},
        {"salary_cap": 100, "slots": [{"name": "A", "positions": ["A"]}], "stack_rule": ["anchor_position"]},
        {
            "salary_cap": 100,
            "slots": [{"name": "A", "positions": ["A"]}],
            "stack_rule": {"anchor_position": "A", "min_companions": None},
        },
        {"salary_cap": 100, "slots": [{"name": "A", "positions": ["A"]}], "exclusion_rule": ["position"]},
    ],
)
def test_template_from_mapping_rejects_bad_payloads(payload):
    with pytest.raises(ValueError):
        template_from_mapping(payload)
