import random

from holdem_equity.helpers.cards import id_to_card
from holdem_equity.helpers.evaluator import (
    CATEGORY, compare_hands, evaluate_best, evaluate_hand, score_cards, score_ids, winners,
)

def test_straight_flush_beats_flush():
    board = ["Qs","Js","Ts","2d","3c"]
    hero = ["As","Ks"]      # royal
    vill = ["Ah","Kh"]      # just broadway straight (not flush)
    assert compare_hands(hero, vill, board) == 1

def test_pair_vs_high_card():
    board = ["2s","7d","Jh","4c","9c"]
    hero = ["Jc","3d"]      # pair of J
    vill = ["Ah","Kd"]      # high card
    assert compare_hands(hero, vill, board) == 1

def test_evaluate_best_returns_expected_shape():
    ev, best5 = evaluate_best(["Ah","Ad"], ["7c","8d","9s"])
    assert ev.name == "pair"
    assert isinstance(ev.tiebreak, tuple)
    assert len(best5) == 5

def test_category_for_each_seven_card_hand():
    hands = [
        (["As","Kd","9h","7c","5s","3d","2h"], "high_card"),
        (["As","Ad","9h","7c","5s","3d","2h"], "pair"),
        (["As","Ad","9h","9c","5s","3d","2h"], "two_pair"),
        (["As","Ad","Ac","9c","5s","3d","2h"], "trips"),
        (["9s","8d","7h","6c","5s","Kd","2h"], "straight"),
        (["As","Js","9s","7s","3s","Kd","2h"], "flush"),
        (["As","Ad","Ac","9c","9s","3d","2h"], "full_house"),
        (["As","Ad","Ac","Ah","9s","3d","2h"], "quads"),
        (["9s","8s","7s","6s","5s","Kd","2h"], "straight_flush"),
    ]
    evs = []
    for cards, name in hands:
        ev = evaluate_hand(cards)
        assert ev.name == name
        evs.append(ev)
    # listed lowest to highest
    assert evs == sorted(evs)
    assert [e.category for e in evs] == sorted(CATEGORY.values())

def test_straight_flush_beats_quads_on_same_board():
    board = ["9h","9d","9c","Th","Jh"]
    assert compare_hands(["Qh","Kh"], ["9s","2c"], board) == 1

def test_wheel_is_five_high_straight():
    wheel = evaluate_hand(["5d","4c","3h","2s","Ah"])
    assert wheel.name == "straight"
    assert wheel.tiebreak == (5,)
    six_high = evaluate_hand(["6d","5c","4h","3s","2h"])
    assert wheel < six_high

def test_wheel_in_seven_cards():
    ev = evaluate_hand(["Ah","2d","3c","4s","5h","Kd","9c"])
    assert ev.name == "straight"
    assert ev.tiebreak == (5,)

def test_kickers_break_ties():
    board = ["Kd","Kc","7h","4s","2d"]
    assert compare_hands(["As","9h"], ["Qs","Jh"], board) == 1
    # both play the board
    assert compare_hands(["3c","5h"], ["3h","5d"], ["As","Ks","Qd","Jc","9h"]) == 0

def test_three_pairs_keeps_best_kicker():
    ev = evaluate_hand(["Ks","Kd","Qh","Qc","Js","Jd","2h"])
    assert ev.name == "two_pair"
    assert ev.tiebreak == (13, 12, 11)

def test_full_house_from_two_trips():
    ev = evaluate_hand(["Ks","Kd","Kh","Qc","Qs","Qd","2h"])
    assert ev.name == "full_house"
    assert ev.tiebreak == (13, 12)

def test_score_ids_matches_subset_evaluator():
    rng = random.Random(7)
    for n in (5, 6, 7):
        for _ in range(1500):
            ids = rng.sample(range(52), n)
            cards = [id_to_card(i) for i in ids]
            assert score_ids(ids) == evaluate_hand(cards).strength, cards

def test_score_cards_orders_like_evaluated_hands():
    a = ["Qh","Kh","9h","Th","Jh","9d","9c"]
    b = ["9s","2c","9h","Th","Jh","9d","9c"]
    assert score_cards(a) > score_cards(b)

def test_winners():
    assert winners([3, 7, 7, 1]) == [1, 2]
    assert winners([5]) == [0]
