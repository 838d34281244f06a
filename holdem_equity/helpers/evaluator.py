from __future__ import annotations
from itertools import combinations
from typing import Dict, Iterable, List, NamedTuple, Sequence, Tuple, Union

from .cards import Card, parse_cards

CATEGORY = {
    "high_card": 0,
    "pair": 1,
    "two_pair": 2,
    "trips": 3,
    "straight": 4,
    "flush": 5,
    "full_house": 6,
    "quads": 7,
    "straight_flush": 8,
}
CATEGORY_NAME = {v: k for k, v in CATEGORY.items()}

HIGH_CARD = CATEGORY["high_card"]
PAIR = CATEGORY["pair"]
TWO_PAIR = CATEGORY["two_pair"]
TRIPS = CATEGORY["trips"]
STRAIGHT = CATEGORY["straight"]
FLUSH = CATEGORY["flush"]
FULL_HOUSE = CATEGORY["full_house"]
QUADS = CATEGORY["quads"]
STRAIGHT_FLUSH = CATEGORY["straight_flush"]


def pack_strength(category: int, tiebreak: Sequence[int]) -> int:
    """
    Packs (category, tiebreak) into one int with the same ordering:
      bits: [category:4][t0:4][t1:4][t2:4][t3:4][t4:4]
    Tiebreak length is fixed per category, so zero padding is safe.
    """
    s = category
    for i in range(5):
        s = (s << 4) | (tiebreak[i] if i < len(tiebreak) else 0)
    return s


class EvaluatedHand(NamedTuple):
    category: int
    tiebreak: Tuple[int, ...]

    @property
    def name(self) -> str:
        return CATEGORY_NAME[self.category]

    @property
    def strength(self) -> int:
        return pack_strength(self.category, self.tiebreak)


def _rank_counts(cards: List[Card]) -> Dict[int, int]:
    d: Dict[int, int] = {}
    for c in cards:
        d[c.val] = d.get(c.val, 0) + 1
    return d


# (high card, 5-bit window) for every straight, best first; bit v is rank v, bit 1 is the low ace
_STRAIGHTS = tuple((high, 0b11111 << (high - 4)) for high in range(14, 4, -1))


def _straight_high_bits(bits: int) -> int:
    if bits >> 14 & 1:
        bits |= 1 << 1  # ace low
    for high, window in _STRAIGHTS:
        if bits & window == window:
            return high
    return 0


def straight_high(values: Iterable[int]) -> int:
    """Highest straight in the given rank values, 5 for the wheel, 0 if none."""
    bits = 0
    for v in values:
        bits |= 1 << v
    return _straight_high_bits(bits)


def evaluate_5(cards5: List[Card]) -> EvaluatedHand:
    if len(cards5) != 5:
        raise ValueError("evaluate_5 expects exactly 5 cards")

    vals = sorted([c.val for c in cards5], reverse=True)
    suits = [c.suit for c in cards5]
    is_flush = len(set(suits)) == 1

    counts = _rank_counts(cards5)
    groups = sorted(counts.items(), key=lambda kv: (kv[1], kv[0]), reverse=True)
    count_pattern = sorted(counts.values(), reverse=True)

    sh = straight_high(vals)
    is_straight = sh > 0

    if is_straight and is_flush:
        return EvaluatedHand(STRAIGHT_FLUSH, (sh,))
    if count_pattern == [4, 1]:
        quad = groups[0][0]
        kicker = max(v for v in vals if v != quad)
        return EvaluatedHand(QUADS, (quad, kicker))
    if count_pattern == [3, 2]:
        trips = groups[0][0]
        pair = groups[1][0]
        return EvaluatedHand(FULL_HOUSE, (trips, pair))
    if is_flush:
        return EvaluatedHand(FLUSH, tuple(vals))
    if is_straight:
        return EvaluatedHand(STRAIGHT, (sh,))
    if count_pattern == [3, 1, 1]:
        trips = groups[0][0]
        kickers = sorted([v for v in vals if v != trips], reverse=True)
        return EvaluatedHand(TRIPS, (trips, *kickers))
    if count_pattern == [2, 2, 1]:
        pair_hi = groups[0][0]
        pair_lo = groups[1][0]
        kicker = max(v for v in vals if v != pair_hi and v != pair_lo)
        return EvaluatedHand(TWO_PAIR, (pair_hi, pair_lo, kicker))
    if count_pattern == [2, 1, 1, 1]:
        pair = groups[0][0]
        kickers = sorted([v for v in vals if v != pair], reverse=True)
        return EvaluatedHand(PAIR, (pair, *kickers))
    return EvaluatedHand(HIGH_CARD, tuple(vals))


def evaluate_hand(cards: Iterable[Union[str, Card]]) -> EvaluatedHand:
    """Best 5-card hand out of 5, 6 or 7 cards."""
    cs = parse_cards(cards)
    if not (5 <= len(cs) <= 7):
        raise ValueError(f"Expected 5 to 7 cards, got {len(cs)}")
    if len(cs) == 5:
        return evaluate_5(cs)
    return max(evaluate_5(list(combo)) for combo in combinations(cs, 5))


def evaluate_best(
    hand: Iterable[Union[str, Card]],
    board: Iterable[Union[str, Card]],
) -> Tuple[EvaluatedHand, List[Card]]:
    h = parse_cards(hand)
    b = parse_cards(board)
    cards = h + b
    if len(h) != 2:
        raise ValueError("Hold'em hand must be exactly 2 cards")
    if not (3 <= len(b) <= 5):
        raise ValueError("Board must be 3, 4, or 5 cards post-flop")
    if len(set(cards)) != len(cards):
        raise ValueError("Duplicate cards detected")

    best = None
    best5: List[Card] = []
    for combo in combinations(cards, 5):
        ev = evaluate_5(list(combo))
        if best is None or ev > best:
            best, best5 = ev, list(combo)

    assert best is not None
    return best, sorted(best5, key=lambda c: c.val, reverse=True)


def compare_hands(hand1, hand2, board) -> int:
    k1, _ = evaluate_best(hand1, board)
    k2, _ = evaluate_best(hand2, board)
    return 1 if k1 > k2 else (-1 if k2 > k1 else 0)


def winners(strengths: Sequence) -> List[int]:
    best = max(strengths)
    return [i for i, s in enumerate(strengths) if s == best]


# ------------------------------------------------------------
# Direct scorer over card ids (0..51, rank-major).
# Same result as evaluate_hand(...).strength, no subset loop.
# ------------------------------------------------------------

def _top(bits: int, n: int, skip: int = 0) -> List[int]:
    out: List[int] = []
    v = 14
    while v >= 2 and len(out) < n:
        if bits >> v & 1 and v != skip:
            out.append(v)
        v -= 1
    return out


def score_ids(ids: Sequence[int]) -> int:
    counts = [0] * 15
    suit_bits = [0, 0, 0, 0]
    for cid in ids:
        v = (cid >> 2) + 2
        counts[v] += 1
        suit_bits[cid & 3] |= 1 << v

    flush_bits = 0
    for bits in suit_bits:
        if bits.bit_count() >= 5:
            flush_bits = bits
            break
    if flush_bits:
        sh = _straight_high_bits(flush_bits)
        if sh:
            return pack_strength(STRAIGHT_FLUSH, (sh,))

    rank_bits = suit_bits[0] | suit_bits[1] | suit_bits[2] | suit_bits[3]
    quads: List[int] = []
    trips: List[int] = []
    pairs: List[int] = []
    for v in range(14, 1, -1):
        c = counts[v]
        if c == 4:
            quads.append(v)
        elif c == 3:
            trips.append(v)
        elif c == 2:
            pairs.append(v)

    if quads:
        q = quads[0]
        return pack_strength(QUADS, (q, _top(rank_bits, 1, skip=q)[0]))
    if trips and (len(trips) > 1 or pairs):
        t = trips[0]
        p = max(trips[1] if len(trips) > 1 else 0, pairs[0] if pairs else 0)
        return pack_strength(FULL_HOUSE, (t, p))
    if flush_bits:
        return pack_strength(FLUSH, _top(flush_bits, 5))
    sh = _straight_high_bits(rank_bits)
    if sh:
        return pack_strength(STRAIGHT, (sh,))
    if trips:
        t = trips[0]
        return pack_strength(TRIPS, (t, *_top(rank_bits, 2, skip=t)))
    if len(pairs) > 1:
        hi, lo = pairs[0], pairs[1]
        kicker = _top(rank_bits & ~(1 << lo), 1, skip=hi)[0]
        return pack_strength(TWO_PAIR, (hi, lo, kicker))
    if pairs:
        p = pairs[0]
        return pack_strength(PAIR, (p, *_top(rank_bits, 3, skip=p)))
    return pack_strength(HIGH_CARD, _top(rank_bits, 5))


def score_cards(cards: Iterable[Union[str, Card]]) -> int:
    return score_ids([c.id for c in parse_cards(cards)])
