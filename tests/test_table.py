import time

import pytest

from holdem_equity.engine.table import build_table, parse_rounds, parse_workers
from holdem_equity.helpers.cards import Hand
from holdem_equity.helpers.errors import ConfigError, ConflictError, ParseError

def test_build_table_applies_blockers():
    t = build_table("AsTd3h", "AhTh", ["AKo+,AKs+,TT+,33", "full"])
    assert [len(r) for r in t.players] == [1, 31, 1081]
    assert t.labels == ("hero", "villain 1", "villain 2")
    assert t.missing == 2
    assert t.players[0].hands == (Hand.from_str("AhTh"),)

def test_player_label_style():
    t = build_table("", "AhTh", ["QQ+", "22"], label_style="player")
    assert t.labels == ("player 1", "player 2", "player 3")
    with pytest.raises(ConfigError):
        build_table("", "AhTh", ["QQ+"], label_style="seat")

def test_fixed_villain_blocks_other_ranges():
    t = build_table("", "AhTh", ["KsKd", "KK"])
    assert [str(h) for h in t.players[2]] == ["KhKc"]
    assert t.fixed_mask == t.players[0].masks[0] | t.players[1].masks[0] | t.players[2].masks[0]

@pytest.mark.parametrize("community", ["As", "AsKd", "AsKdQhJc9s8s"])
def test_bad_street_size(community):
    with pytest.raises(ConfigError):
        build_table(community, "2c2d", ["full"])

def test_villain_count():
    with pytest.raises(ConfigError):
        build_table("", "AhTh", [])
    with pytest.raises(ConfigError):
        build_table("", "AhTh", ["full"] * 9)
    assert len(build_table("", "AhTh", ["full"] * 8).players) == 9

def test_conflicts():
    with pytest.raises(ConflictError):
        build_table("AsTd3h", "AsKd", ["full"])
    with pytest.raises(ConflictError):
        build_table("AsTd3h", "AhAh", ["full"])
    with pytest.raises(ConflictError):
        build_table("AsAd3h", "AhKh", ["AA"])
    with pytest.raises(ConflictError):
        build_table("", "AhTh", ["KsKd", "KsKc"])
    with pytest.raises(ConflictError):
        build_table("", "AhTh", ["AhTh"])

def test_no_joint_assignment_is_conflict():
    # each range alone is fine, but both villains need the Ah
    with pytest.raises(ConflictError):
        build_table("", "2c2d", ["AhKs,AhKc", "AhQs,AhQc"])

def test_conflict_behind_broad_ranges_fails_fast():
    # three aces left, two villains need a pair of them each
    t0 = time.perf_counter()
    with pytest.raises(ConflictError):
        build_table("", "AhTh", ["full", "full", "full", "AA", "AA"])
    assert time.perf_counter() - t0 < 2.0

def test_joint_assignment_with_broad_ranges():
    t = build_table("", "AhTh", ["full", "full", "full", "AA", "KK"])
    assert [len(r) for r in t.players[4:]] == [3, 6]

def test_parse_errors():
    with pytest.raises(ParseError):
        build_table("AsTx3h", "AhTh", ["full"])
    with pytest.raises(ParseError):
        build_table("AsTd3h", "Ah", ["full"])
    with pytest.raises(ParseError):
        build_table("AsTd3h", "AhTh", ["TT+,XX"])

def test_parse_rounds():
    assert parse_rounds("100") == 100
    assert parse_rounds(7) == 7
    for bad in ("abc", "0", "-3", 0, -1, True, 2.5):
        with pytest.raises(ParseError):
            parse_rounds(bad)

def test_parse_workers():
    assert parse_workers(None) == 1
    assert parse_workers(3) == 3
    for bad in (0, -2, "x"):
        with pytest.raises(ConfigError):
            parse_workers(bad)
