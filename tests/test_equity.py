import random

import pytest

from holdem_equity import ConfigError, ParseError, enumerate_equity, simulate_equity
from holdem_equity.engine.deals import enumerate_batches, enumerate_deals
from holdem_equity.engine.equity import TIE_UNITS, EquityResult, EquityTally, merge_results
from holdem_equity.engine.table import build_table

REGRESSION = ("AsTd3h", "AhTh", ["AKo+,AKs+,TT+,33", "full"])

@pytest.fixture(scope="module")
def regression():
    return enumerate_equity(*REGRESSION, workers=1)

@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("HOLDEM_EQUITY_WORKERS", "HOLDEM_EQUITY_LOG_LEVEL", "HOLDEM_EQUITY_ENUMERATE_WARN"):
        monkeypatch.delenv(name, raising=False)

def _conserved(results):
    total = results[0].total_deals
    assert all(r.total_deals == total for r in results)
    assert sum(r.win_count * TIE_UNITS + r.tie_units for r in results) == TIE_UNITS * total
    for r in results:
        assert r.equity_pct == pytest.approx(r.win_pct + r.tie_pct)

def test_regression_flop_three_way(regression):
    assert regression[0].format_line() == "hero: equity=72.80 win=72.58 tie=0.22"
    assert [r.label for r in regression] == ["hero", "villain 1", "villain 2"]
    _conserved(regression)
    assert sum(r.equity_pct for r in regression) == pytest.approx(100.0)

def test_heads_up_equities_sum_to_100():
    res = enumerate_equity("AsTd3h2c", "AhTh", ["QQ+"], workers=1)
    _conserved(res)
    assert res[0].total_deals == 13 * 44
    assert res[0].equity_pct + res[1].equity_pct == pytest.approx(100.0)

def test_batch_and_single_deal_tallies_agree():
    table = build_table("AsTd3h2c", "AhTh", ["QQ+", "JJ,99"])
    one = EquityTally(table)
    for deal in enumerate_deals(table):
        one.record_deal(deal)
    many = EquityTally(table)
    for batch in enumerate_batches(table):
        many.record_batch(batch)
    assert one.results == many.results
    _conserved(many.results)

def test_suit_symmetric_spot_splits_evenly():
    # no spades or hearts on board: the two hands are mirror images
    hero, villain = enumerate_equity("2c7d9c", "AsKs", ["AhKh"], workers=1)
    assert hero.win_count == villain.win_count
    assert hero.tie_units == villain.tie_units
    assert hero.equity_pct == pytest.approx(50.0)

@pytest.mark.slow
def test_preflop_mirror_hands():
    hero, villain = enumerate_equity("", "AsKs", ["AhKh"], workers=1)
    assert hero.win_count == villain.win_count
    assert hero.equity_pct == pytest.approx(50.0)

def test_board_plays_for_everyone():
    res = enumerate_equity("AsKsQsJsTs", "2c3d", ["4h5h", "6h7h"])
    for r in res:
        assert r.total_deals == 1
        assert r.win_count == 0
        assert r.tie_units == TIE_UNITS // 3
        assert r.tie_pct == pytest.approx(100 / 3)

def test_parallel_enumerate_matches_serial():
    serial = enumerate_equity("AsTd3h2c", "AhTh", ["QQ+", "JJ,99"], workers=1)
    parallel = enumerate_equity("AsTd3h2c", "AhTh", ["QQ+", "JJ,99"], workers=2)
    assert serial == parallel

def test_simulate_is_reproducible():
    args = ("AsTd3h", "AhTh", ["TT+", "full"])
    a = simulate_equity(3000, *args, seed=11, workers=1)
    b = simulate_equity(3000, *args, seed=11, workers=1)
    c = simulate_equity(3000, *args, rng=random.Random(11), workers=1)
    assert a == b == c
    assert a[0].total_deals == 3000
    _conserved(a)

def test_simulate_reproducible_with_workers():
    args = ("AsTd3h", "AhTh", ["TT+"])
    a = simulate_equity(2000, *args, seed=4, workers=2)
    b = simulate_equity(2000, *args, seed=4, workers=2)
    assert a == b
    assert a[0].total_deals == 2000

def test_simulate_converges_on_turn():
    exact = enumerate_equity("AsTd3h2c", "AhTh", ["QQ+"], workers=1)
    approx = simulate_equity("20000", "AsTd3h2c", "AhTh", ["QQ+"], seed=2024, workers=1)
    for e, a in zip(exact, approx):
        assert abs(e.equity_pct - a.equity_pct) < 2.0

@pytest.mark.slow
def test_simulate_matches_regression(regression):
    approx = simulate_equity(1_000_000, *REGRESSION, seed=1, workers=1)
    for exact, sampled in zip(regression, approx):
        assert abs(sampled.equity_pct - exact.equity_pct) < 1.0

@pytest.mark.parametrize("rounds", ["abc", "0", -5, 0])
def test_bad_rounds(rounds):
    with pytest.raises(ParseError):
        simulate_equity(rounds, "AsTd3h", "AhTh", ["full"])

def test_rng_and_seed_together():
    with pytest.raises(ConfigError):
        simulate_equity(10, "AsTd3h", "AhTh", ["full"], rng=random.Random(1), seed=1)

def test_result_percentages():
    r = EquityResult("hero", win_count=3, tie_units=TIE_UNITS // 2, total_deals=4)
    assert r.win_pct == pytest.approx(75.0)
    assert r.tie_pct == pytest.approx(12.5)
    assert r.tie_share_sum == pytest.approx(0.5)
    assert r.format_line() == "hero: equity=87.50 win=75.00 tie=12.50"
    assert EquityResult("hero").equity_pct == 0.0

def test_merge():
    a = EquityResult("hero", 1, 840, 3)
    b = EquityResult("hero", 2, 1260, 5)
    assert a + b == b + a == EquityResult("hero", 3, 2100, 8)
    with pytest.raises(ValueError):
        a.merge(EquityResult("villain 1"))
    merged = merge_results([[a, EquityResult("villain 1", 0, 0, 3)], [b, EquityResult("villain 1", 1, 0, 5)]])
    assert [r.total_deals for r in merged] == [8, 8]
    assert merged[1].win_count == 1
