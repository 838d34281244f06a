from __future__ import annotations
import random
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Tuple, Union

from .errors import ConflictError, ParseError

RANKS = "23456789TJQKA"
SUITS = "shdc"
RANK_TO_VAL = {r: i + 2 for i, r in enumerate(RANKS)}  # 2..14
VAL_TO_RANK = {v: r for r, v in RANK_TO_VAL.items()}
SUIT_TO_I = {s: i for i, s in enumerate(SUITS)}

# ------------------------------------------------------------
# Card encoding: 0..51 (rank-major, suit-minor)
# rank 2..A => 0..12, suit s/h/d/c => 0..3
# ------------------------------------------------------------
N_CARDS = 52
FULL_MASK = (1 << N_CARDS) - 1


@dataclass(frozen=True, order=True)
class Card:
    val: int
    suit: str
    id: int = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.val not in VAL_TO_RANK or self.suit not in SUIT_TO_I:
            raise ParseError(f"Bad card: val={self.val!r} suit={self.suit!r}")
        object.__setattr__(self, "id", (self.val - 2) * 4 + SUIT_TO_I[self.suit])

    def __str__(self) -> str:
        return f"{VAL_TO_RANK[self.val]}{self.suit}"

    @property
    def mask(self) -> int:
        return 1 << self.id

    @staticmethod
    def from_str(s: str) -> "Card":
        s = s.strip()
        if len(s) != 2:
            raise ParseError(f"Bad card string: {s!r}")
        r, su = s[0].upper(), s[1].lower()
        if r not in RANK_TO_VAL or su not in SUITS:
            raise ParseError(f"Bad card string: {s!r}")
        return Card(RANK_TO_VAL[r], su)


ALL_CARDS: Tuple[Card, ...] = tuple(Card(v, s) for v in range(2, 15) for s in SUITS)


def card_to_id(c: Union[str, Card]) -> int:
    c = c if isinstance(c, Card) else Card.from_str(c)
    return c.id


def id_to_card(cid: int) -> Card:
    if not (0 <= cid < N_CARDS):
        raise ValueError(f"Card id out of range: {cid}")
    return ALL_CARDS[cid]


def parse_cards(cards: Iterable[Union[str, Card]]) -> List[Card]:
    out: List[Card] = []
    for x in cards:
        out.append(x if isinstance(x, Card) else Card.from_str(x))
    return out


def parse_card_string(s: str) -> List[Card]:
    """
    "AsTd3h" -> [As, Td, 3h]. Empty string means no cards.
    Duplicates inside the string are a conflict, not a parse problem.
    """
    s = s.strip()
    if len(s) % 2:
        raise ParseError(f"Bad card string {s!r}: expected two characters per card")
    cards = [Card.from_str(s[i:i + 2]) for i in range(0, len(s), 2)]
    if len(set(cards)) != len(cards):
        raise ConflictError(f"Duplicate card in {s!r}")
    return cards


class CardSet:
    """
    Immutable set of cards stored as a 52-bit mask.
    Union / intersection / difference / membership are single int ops.
    """
    __slots__ = ("bits",)

    def __init__(self, bits: int = 0):
        if bits & ~FULL_MASK:
            raise ValueError("CardSet mask has bits beyond the 52 cards")
        self.bits = bits

    @classmethod
    def of(cls, cards: Iterable[Union[str, Card]]) -> "CardSet":
        bits = 0
        for c in parse_cards(cards):
            bits |= c.mask
        return cls(bits)

    def __or__(self, other: "CardSet") -> "CardSet":
        return CardSet(self.bits | other.bits)

    def __and__(self, other: "CardSet") -> "CardSet":
        return CardSet(self.bits & other.bits)

    def __sub__(self, other: "CardSet") -> "CardSet":
        return CardSet(self.bits & ~other.bits)

    def __contains__(self, card: Card) -> bool:
        return bool(self.bits >> card.id & 1)

    def __len__(self) -> int:
        return self.bits.bit_count()

    def __bool__(self) -> bool:
        return self.bits != 0

    def __iter__(self) -> Iterator[Card]:
        return (ALL_CARDS[cid] for cid in iter_ids(self.bits))

    def __eq__(self, other: object) -> bool:
        return isinstance(other, CardSet) and other.bits == self.bits

    def __hash__(self) -> int:
        return hash(self.bits)

    def __repr__(self) -> str:
        return f"CardSet({''.join(str(c) for c in self)})"

    def isdisjoint(self, other: "CardSet") -> bool:
        return not (self.bits & other.bits)


def iter_ids(bits: int) -> Iterator[int]:
    while bits:
        low = bits & -bits
        yield low.bit_length() - 1
        bits ^= low


def ids_to_mask(ids: Iterable[int]) -> int:
    m = 0
    for cid in ids:
        m |= 1 << cid
    return m


class Deck:
    """
    The 52 cards minus whatever is already known.
    Tracks the dead cards as a bit mask, so membership and removal are O(1).
    """

    def __init__(self, exclude: Union[CardSet, int, Iterable[Union[str, Card]]] = 0):
        if isinstance(exclude, CardSet):
            self.dead = exclude.bits
        elif isinstance(exclude, int):
            self.dead = exclude & FULL_MASK
        else:
            self.dead = CardSet.of(exclude).bits

    @property
    def mask(self) -> int:
        return FULL_MASK & ~self.dead

    def __len__(self) -> int:
        return N_CARDS - self.dead.bit_count()

    def __contains__(self, card: Card) -> bool:
        return not (self.dead >> card.id & 1)

    def remove(self, card: Card) -> None:
        if card not in self:
            raise ConflictError(f"Card {card} is not in the deck")
        self.dead |= card.mask

    def cards(self) -> List[Card]:
        return [ALL_CARDS[cid] for cid in iter_ids(self.mask)]

    def draw_id(self, rng: random.Random) -> int:
        # at most 23 dead cards in a hold'em deal, so rejection is cheap
        if self.dead == FULL_MASK:
            raise ValueError("Deck is empty")
        while True:
            cid = rng.randrange(N_CARDS)
            if not (self.dead >> cid & 1):
                self.dead |= 1 << cid
                return cid

    def draw(self, rng: random.Random) -> Card:
        return ALL_CARDS[self.draw_id(rng)]


@dataclass(frozen=True, order=True)
class Hand:
    """Two distinct hole cards, stored high card first."""
    high: Card
    low: Card

    @staticmethod
    def of(a: Card, b: Card) -> "Hand":
        if a == b:
            raise ConflictError(f"Hand uses {a} twice")
        return Hand(a, b) if a > b else Hand(b, a)

    @staticmethod
    def from_str(s: str) -> "Hand":
        cards = parse_card_string(s)
        if len(cards) != 2:
            raise ParseError(f"Bad hand string {s!r}: expected exactly 2 cards")
        return Hand.of(cards[0], cards[1])

    def __str__(self) -> str:
        return f"{self.high}{self.low}"

    @property
    def ids(self) -> Tuple[int, int]:
        return (self.high.id, self.low.id)

    @property
    def mask(self) -> int:
        return self.high.mask | self.low.mask

    @property
    def is_pair(self) -> bool:
        return self.high.val == self.low.val

    @property
    def is_suited(self) -> bool:
        return self.high.suit == self.low.suit

    @property
    def shape(self) -> str:
        if self.is_pair:
            return "pair"
        return "suited" if self.is_suited else "offsuit"

    @property
    def label(self) -> str:
        hi, lo = VAL_TO_RANK[self.high.val], VAL_TO_RANK[self.low.val]
        if self.is_pair:
            return hi + lo
        return hi + lo + ("s" if self.is_suited else "o")


def all_hands() -> List[Hand]:
    """All 1326 starting hands."""
    out: List[Hand] = []
    for i in range(N_CARDS):
        for j in range(i):
            out.append(Hand.of(ALL_CARDS[i], ALL_CARDS[j]))
    return out
