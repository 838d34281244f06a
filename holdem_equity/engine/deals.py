from __future__ import annotations
import random
from dataclasses import dataclass
from itertools import combinations
from math import comb
from typing import Iterator, List, Sequence, Tuple

import numpy as np

from ..helpers.cards import ALL_CARDS, N_CARDS, Card, Deck, Hand, ids_to_mask
from ..helpers.ranges import Range
from .table import Table


@dataclass(frozen=True)
class Deal:
    """Hole cards for every player (hero first) plus a complete board."""
    hands: Tuple[Hand, ...]
    board: Tuple[Card, ...]

    @property
    def mask(self) -> int:
        m = 0
        for c in self.board:
            m |= c.mask
        for h in self.hands:
            m |= h.mask
        return m

    def is_valid(self) -> bool:
        n = len(self.board) + 2 * len(self.hands)
        return len(self.board) == 5 and self.mask.bit_count() == n


@dataclass(frozen=True)
class DealBatch:
    """
    Every deal that shares `board_ids` and the hands of all players but the
    last: one deal per entry of `last` (indices into the last player's range).
    The generator only puts compatible hands in `last`.
    """
    board_ids: Tuple[int, ...]
    board_mask: int
    prefix: Tuple[int, ...]
    last: np.ndarray

    def __len__(self) -> int:
        return int(self.last.size)

    def deals(self, table: Table) -> Iterator[Deal]:
        board = tuple(ALL_CARDS[c] for c in self.board_ids)
        head = tuple(p.hands[i] for p, i in zip(table.players, self.prefix))
        last = table.players[-1]
        for i in self.last:
            yield Deal(head + (last.hands[int(i)],), board)


def _assignments(
    players: Sequence[Range],
    used: int,
    i: int = 0,
    picked: Tuple[int, ...] = (),
) -> Iterator[Tuple[Tuple[int, ...], int]]:
    """Collision-free (hand index per player, cards used) pairs, in range order."""
    if i == len(players):
        yield picked, used
        return
    for j, m in enumerate(players[i].masks):
        if not (m & used):
            yield from _assignments(players, used | m, i + 1, picked + (j,))


def _deck_ids(excluded: int) -> List[int]:
    return [cid for cid in range(N_CARDS) if not (excluded >> cid & 1)]


def count_board_completions(table: Table) -> int:
    return comb(len(_deck_ids(table.board_mask | table.fixed_mask)), table.missing)


def estimate_enumeration_size(table: Table) -> int:
    """Upper bound on the number of deals `enumerate` will visit."""
    n = count_board_completions(table)
    for r in table.players:
        n *= len(r)
    return n


def enumerate_deals(table: Table) -> Iterator[Deal]:
    """Every valid deal exactly once, one at a time."""
    board = table.board
    for picked, used in _assignments(table.players, table.board_mask):
        hands = tuple(p.hands[i] for p, i in zip(table.players, picked))
        for extra in combinations(_deck_ids(used), table.missing):
            yield Deal(hands, board + tuple(ALL_CARDS[c] for c in extra))


def enumerate_batches(table: Table, shard: int = 0, shards: int = 1) -> Iterator[DealBatch]:
    """
    Same deals as `enumerate_deals`, grouped per (board, all hands but the last).

    Board completions are the outer loop so hand strengths can be scored once
    per board. Shards split the board completions; when there are fewer
    completions than shards (river, or turn with many workers) they split the
    hand prefixes of each board instead. Either way the shards are disjoint and
    together cover every valid deal.
    """
    if not (0 <= shard < shards):
        raise ValueError(f"Bad shard {shard} of {shards}")

    head = table.players[:-1]
    last = table.players[-1]
    deck_ids = _deck_ids(table.board_mask | table.fixed_mask)
    by_board = comb(len(deck_ids), table.missing) >= shards

    for b, extra in enumerate(combinations(deck_ids, table.missing)):
        if by_board and b % shards != shard:
            continue
        board_mask = table.board_mask | ids_to_mask(extra)
        board_ids = table.board_ids + extra

        live = np.flatnonzero((last.mask_array & np.uint64(board_mask)) == 0)
        if not live.size:
            continue
        live_masks = last.mask_array[live]

        for u, (prefix, used) in enumerate(_assignments(head, board_mask)):
            if not by_board and u % shards != shard:
                continue
            ok = live[(live_masks & np.uint64(used)) == 0]
            if ok.size:
                yield DealBatch(board_ids, board_mask, prefix, ok)


def sample_deal(table: Table, rng: random.Random) -> Deal:
    """
    One uniform valid deal: hands are drawn per player and the whole draw is
    rejected on any collision, then the board is completed from what's left.
    """
    players = table.players
    while True:
        used = table.board_mask
        picked: List[int] = []
        for r in players:
            i = rng.randrange(len(r))
            m = r.masks[i]
            if m & used:
                break
            used |= m
            picked.append(i)
        else:
            break

    deck = Deck(used)
    extra = tuple(deck.draw(rng) for _ in range(table.missing))
    hands = tuple(p.hands[i] for p, i in zip(players, picked))
    return Deal(hands, table.board + extra)


def simulate_deals(table: Table, rounds: int, rng: random.Random) -> Iterator[Deal]:
    for _ in range(rounds):
        yield sample_deal(table, rng)
