from __future__ import annotations
import logging
from dataclasses import dataclass, field
from itertools import combinations
from typing import Dict, FrozenSet, Iterable, Iterator, List, Tuple, Union

import numpy as np

from .cards import RANK_TO_VAL, SUITS, Card, CardSet, Hand, all_hands
from .errors import ConflictError, EquityError, ParseError

logger = logging.getLogger(__name__)

_CARDS_BY_VAL: Dict[int, List[Card]] = {v: [Card(v, s) for s in SUITS] for v in range(2, 15)}


# ------------------------------------------------------------
# Range AST
# ------------------------------------------------------------

@dataclass(frozen=True)
class PairNode:
    rank: int


@dataclass(frozen=True)
class SuitedNode:
    high: int
    low: int


@dataclass(frozen=True)
class OffsuitNode:
    high: int
    low: int


ShapeNode = Union[PairNode, SuitedNode, OffsuitNode]


@dataclass(frozen=True)
class OpenNode:
    """`base+`: sweep the low rank upward, shape held fixed."""
    base: ShapeNode


@dataclass(frozen=True)
class SpanNode:
    """`99-66`, `A5s-A2s`: inclusive span between two shapes of the same kind."""
    start: ShapeNode
    end: ShapeNode


@dataclass(frozen=True)
class ExactNode:
    hand: Hand


@dataclass(frozen=True)
class FullNode:
    pass


@dataclass(frozen=True)
class UnionNode:
    parts: Tuple["RangeNode", ...]


RangeNode = Union[PairNode, SuitedNode, OffsuitNode, OpenNode, SpanNode, ExactNode, FullNode, UnionNode]


# ------------------------------------------------------------
# Parsing
# ------------------------------------------------------------

def _rank(ch: str, tok: str) -> int:
    v = RANK_TO_VAL.get(ch.upper())
    if v is None:
        raise ParseError(f"Bad rank {ch!r} in range token {tok!r}")
    return v


def _parse_shape(s: str, tok: str) -> ShapeNode:
    if len(s) == 2:
        r1, r2 = _rank(s[0], tok), _rank(s[1], tok)
        if r1 != r2:
            raise ParseError(f"Range token {tok!r} needs an 's' or 'o' suffix")
        return PairNode(r1)
    if len(s) == 3:
        r1, r2, suffix = _rank(s[0], tok), _rank(s[1], tok), s[2].lower()
        if suffix not in ("s", "o"):
            raise ParseError(f"Bad suffix {s[2]!r} in range token {tok!r}")
        if r1 <= r2:
            raise ParseError(f"Range token {tok!r}: first rank must be higher than the second")
        return SuitedNode(r1, r2) if suffix == "s" else OffsuitNode(r1, r2)
    raise ParseError(f"Unrecognized range token {tok!r}")


def parse_token(tok: str) -> RangeNode:
    t = tok.strip()
    if not t:
        raise ParseError("Empty range token")
    if t.lower() == "full":
        return FullNode()

    if "-" in t:
        a, _, b = t.partition("-")
        start, end = _parse_shape(a.strip(), t), _parse_shape(b.strip(), t)
        if type(start) is not type(end):
            raise ParseError(f"Range span {t!r} mixes different shapes")
        if not isinstance(start, PairNode) and start.high != end.high:
            raise ParseError(f"Range span {t!r} must keep the same high rank")
        return SpanNode(start, end)

    if t.endswith("+"):
        return OpenNode(_parse_shape(t[:-1], t))

    if len(t) == 4:
        try:
            return ExactNode(Hand.from_str(t))
        except EquityError as e:
            raise ParseError(f"Bad hand {t!r} in range: {e}") from e

    return _parse_shape(t, t)


def parse_range(range_spec: str) -> UnionNode:
    if not range_spec or not range_spec.strip():
        raise ParseError("Empty range")
    return UnionNode(tuple(parse_token(tok) for tok in range_spec.split(",")))


# ------------------------------------------------------------
# Expansion (pure)
# ------------------------------------------------------------

def _pair_hands(v: int) -> List[Hand]:
    return [Hand.of(a, b) for a, b in combinations(_CARDS_BY_VAL[v], 2)]


def _suited_hands(hi: int, lo: int) -> List[Hand]:
    return [Hand.of(Card(hi, s), Card(lo, s)) for s in SUITS]


def _offsuit_hands(hi: int, lo: int) -> List[Hand]:
    return [Hand.of(Card(hi, s1), Card(lo, s2)) for s1 in SUITS for s2 in SUITS if s1 != s2]


def _shape_hands(node: ShapeNode) -> List[Hand]:
    if isinstance(node, PairNode):
        return _pair_hands(node.rank)
    if isinstance(node, SuitedNode):
        return _suited_hands(node.high, node.low)
    return _offsuit_hands(node.high, node.low)


def _with_low(node: ShapeNode, low: int) -> ShapeNode:
    if isinstance(node, PairNode):
        return PairNode(low)
    return type(node)(node.high, low)


def expand(node: RangeNode) -> FrozenSet[Hand]:
    if isinstance(node, UnionNode):
        out: set = set()
        for part in node.parts:
            out |= expand(part)
        return frozenset(out)
    if isinstance(node, FullNode):
        return frozenset(all_hands())
    if isinstance(node, ExactNode):
        return frozenset([node.hand])
    if isinstance(node, OpenNode):
        base = node.base
        if isinstance(base, PairNode):
            lows = range(base.rank, 15)
        else:
            lows = range(base.low, base.high)
        return frozenset(h for lo in lows for h in _shape_hands(_with_low(base, lo)))
    if isinstance(node, SpanNode):
        if isinstance(node.start, PairNode):
            a, b = node.start.rank, node.end.rank
        else:
            a, b = node.start.low, node.end.low
        lo, hi = min(a, b), max(a, b)
        return frozenset(h for r in range(lo, hi + 1) for h in _shape_hands(_with_low(node.start, r)))
    return frozenset(_shape_hands(node))


# ------------------------------------------------------------
# Concrete ranges
# ------------------------------------------------------------

@dataclass(frozen=True)
class Range:
    """
    Deduplicated, blocker-filtered hands for one player.
    `masks[i]` is the card mask of `hands[i]`; `mask_array` is the same as uint64
    for vectorized collision checks.
    """
    hands: Tuple[Hand, ...]
    text: str = ""
    masks: Tuple[int, ...] = field(init=False, repr=False, compare=False)
    mask_array: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        masks = tuple(h.mask for h in self.hands)
        object.__setattr__(self, "masks", masks)
        object.__setattr__(self, "mask_array", np.array(masks, dtype=np.uint64))

    @classmethod
    def from_hands(cls, hands: Iterable[Hand], text: str = "") -> "Range":
        return cls(tuple(sorted(set(hands), reverse=True)), text)

    def __len__(self) -> int:
        return len(self.hands)

    def __iter__(self) -> Iterator[Hand]:
        return iter(self.hands)

    def __contains__(self, hand: Hand) -> bool:
        return hand in self.hands

    @property
    def is_fixed(self) -> bool:
        return len(self.hands) == 1

    def without(self, blockers: Union[CardSet, int]) -> "Range":
        bits = blockers.bits if isinstance(blockers, CardSet) else blockers
        keep = tuple(h for h, m in zip(self.hands, self.masks) if not (m & bits))
        return self if len(keep) == len(self.hands) else Range(keep, self.text)

    def shape_counts(self) -> Dict[str, int]:
        out: Dict[str, int] = {}
        for h in self.hands:
            out[h.label] = out.get(h.label, 0) + 1
        return out


def build_range(range_spec: str, blockers: Union[CardSet, int] = 0) -> Range:
    full = Range.from_hands(expand(parse_range(range_spec)), range_spec.strip())
    r = full.without(blockers)
    logger.debug("range %r: %d hands (%d before blockers)", r.text, len(r), len(full))
    if not r:
        raise ConflictError(f"Range {range_spec!r} has no hands left after removing known cards")
    return r
