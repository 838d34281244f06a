from __future__ import annotations
import logging
import random
import time
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from ..config import get_config
from ..helpers.cards import Card, Hand
from ..helpers.errors import ConfigError
from ..helpers.evaluator import score_ids, winners
from .deals import Deal, DealBatch, enumerate_batches, estimate_enumeration_size, sample_deal
from .parallel import run_jobs, split_rounds
from .table import Table, build_table, parse_rounds, parse_workers

logger = logging.getLogger(__name__)

# lcm(1..9): a pot split k ways (k <= 9 players) is a whole number of units,
# so tie credit is counted exactly
TIE_UNITS = 2520


@dataclass(slots=True)
class EquityResult:
    """
    Running totals for one player. Percentages are derived on read:
      win%    = 100 * win_count / total_deals
      tie%    = 100 * tie_share_sum / total_deals
      equity% = win% + tie%
    """
    label: str
    win_count: int = 0
    tie_units: int = 0
    total_deals: int = 0

    @property
    def tie_share_sum(self) -> float:
        return self.tie_units / TIE_UNITS

    @property
    def win_pct(self) -> float:
        if not self.total_deals:
            return 0.0
        return 100.0 * self.win_count / self.total_deals

    @property
    def tie_pct(self) -> float:
        if not self.total_deals:
            return 0.0
        return 100.0 * self.tie_units / (TIE_UNITS * self.total_deals)

    @property
    def equity_pct(self) -> float:
        return self.win_pct + self.tie_pct

    def merge(self, other: "EquityResult") -> "EquityResult":
        if other.label != self.label:
            raise ValueError(f"Can't merge results for {self.label!r} and {other.label!r}")
        return EquityResult(
            label=self.label,
            win_count=self.win_count + other.win_count,
            tie_units=self.tie_units + other.tie_units,
            total_deals=self.total_deals + other.total_deals,
        )

    __add__ = merge

    def format_line(self) -> str:
        return f"{self.label}: equity={self.equity_pct:.2f} win={self.win_pct:.2f} tie={self.tie_pct:.2f}"


def merge_results(parts: Sequence[Sequence[EquityResult]]) -> List[EquityResult]:
    """Element-wise sum of per-worker results (order doesn't matter)."""
    if not parts:
        raise ValueError("Nothing to merge")
    out = list(parts[0])
    for part in parts[1:]:
        if len(part) != len(out):
            raise ValueError("Per-worker results disagree on the number of players")
        out = [a.merge(b) for a, b in zip(out, part)]
    return out


class EquityTally:
    """
    Accumulates showdown outcomes for one table.
    Feed it deals one at a time (`record_deal`) or enumerated batches
    (`record_batch`); strengths for a batch's board are scored once and reused
    until the board changes.
    """

    def __init__(self, table: Table):
        self.table = table
        self.results = [EquityResult(label) for label in table.labels]
        self._board_mask = -1
        self._scores: List[np.ndarray] = []

    @property
    def total_deals(self) -> int:
        return self.results[0].total_deals

    def record_deal(self, deal: Deal) -> None:
        board = tuple(c.id for c in deal.board)
        strengths = [score_ids((*board, h.high.id, h.low.id)) for h in deal.hands]
        best = winners(strengths)
        if len(best) == 1:
            self.results[best[0]].win_count += 1
        else:
            share = TIE_UNITS // len(best)
            for i in best:
                self.results[i].tie_units += share
        for r in self.results:
            r.total_deals += 1

    def _board_scores(self, batch: DealBatch) -> List[np.ndarray]:
        if batch.board_mask != self._board_mask:
            board = batch.board_ids
            bm = batch.board_mask
            self._scores = [
                np.array(
                    [-1 if m & bm else score_ids((*board, h.high.id, h.low.id)) for h, m in zip(p.hands, p.masks)],
                    dtype=np.int64,
                )
                for p in self.table.players
            ]
            self._board_mask = bm
        return self._scores

    def record_batch(self, batch: DealBatch) -> None:
        scores = self._board_scores(batch)
        partial = [int(scores[p][i]) for p, i in enumerate(batch.prefix)]
        last_scores = scores[-1][batch.last]

        n = int(last_scores.size)
        best = max(partial)
        leaders = [p for p, s in enumerate(partial) if s == best]
        k = len(leaders)
        gt = int(np.count_nonzero(last_scores > best))
        eq = int(np.count_nonzero(last_scores == best))
        lt = n - gt - eq

        res = self.results
        res[-1].win_count += gt
        if eq:
            share = TIE_UNITS // (k + 1)
            res[-1].tie_units += eq * share
            for p in leaders:
                res[p].tie_units += eq * share
        if lt:
            if k == 1:
                res[leaders[0]].win_count += lt
            else:
                share = TIE_UNITS // k
                for p in leaders:
                    res[p].tie_units += lt * share
        for r in res:
            r.total_deals += n


# ------------------------------------------------------------
# Worker entry points (module level so they pickle)
# ------------------------------------------------------------

def _enumerate_shard(job: Tuple[Table, int, int]) -> List[EquityResult]:
    table, shard, shards = job
    tally = EquityTally(table)
    for batch in enumerate_batches(table, shard, shards):
        tally.record_batch(batch)
    logger.debug("enumerate shard %d/%d: %d deals", shard + 1, shards, tally.total_deals)
    return tally.results


def _simulate_rounds(table: Table, rounds: int, rng: random.Random) -> List[EquityResult]:
    tally = EquityTally(table)
    for _ in range(rounds):
        tally.record_deal(sample_deal(table, rng))
    return tally.results


def _simulate_shard(job: Tuple[Table, int, int]) -> List[EquityResult]:
    table, rounds, seed = job
    results = _simulate_rounds(table, rounds, random.Random(seed))
    logger.debug("simulate shard seed=%d: %d rounds", seed, rounds)
    return results


# ------------------------------------------------------------
# Public API
# ------------------------------------------------------------

def enumerate_table(table: Table, workers: int = 1) -> List[EquityResult]:
    cfg = get_config()
    size = estimate_enumeration_size(table)
    if size > cfg.enumerate_warn_threshold:
        logger.warning("enumerate may visit up to %d deals; consider simulate instead", size)
    logger.info("enumerate: %d players, board=%s, <= %d deals, %d worker(s)",
                table.n_players, "".join(str(c) for c in table.board) or "-", size, workers)

    t0 = time.perf_counter()
    jobs = [(table, k, workers) for k in range(workers)]
    results = merge_results(run_jobs(_enumerate_shard, jobs, workers))
    logger.info("enumerate: %d deals in %.2fs", results[0].total_deals, time.perf_counter() - t0)
    return results


def simulate_table(table: Table, rounds: int, rng: random.Random, workers: int = 1) -> List[EquityResult]:
    workers = min(workers, rounds)
    logger.info("simulate: %d players, board=%s, %d rounds, %d worker(s)",
                table.n_players, "".join(str(c) for c in table.board) or "-", rounds, workers)

    t0 = time.perf_counter()
    if workers == 1:
        results = _simulate_rounds(table, rounds, rng)
    else:
        counts = split_rounds(rounds, workers)
        jobs = [(table, n, rng.getrandbits(64)) for n in counts]
        results = merge_results(run_jobs(_simulate_shard, jobs, workers))
    logger.info("simulate: %d deals in %.2fs", results[0].total_deals, time.perf_counter() - t0)
    return results


def enumerate_equity(
    community: Union[str, Sequence[Card]],
    hero: Union[str, Hand],
    villain_ranges: Sequence[str],
    *,
    workers: Optional[int] = None,
    label_style: str = "hero",
) -> List[EquityResult]:
    """
    Exact equity over every valid deal. Returns one EquityResult per player,
    hero first. No size cap: check `estimate_enumeration_size` for big spots.
    """
    table = build_table(community, hero, villain_ranges, label_style=label_style)
    n_workers = parse_workers(get_config().workers if workers is None else workers)
    return enumerate_table(table, n_workers)


def simulate_equity(
    rounds: Union[int, str],
    community: Union[str, Sequence[Card]],
    hero: Union[str, Hand],
    villain_ranges: Sequence[str],
    *,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None,
    workers: Optional[int] = None,
    label_style: str = "hero",
) -> List[EquityResult]:
    """
    Monte Carlo equity from `rounds` uniform valid deals.

    Randomness comes only from `rng` (or a fresh random.Random(seed)); a fixed
    seed with a fixed worker count reproduces the same numbers.
    """
    n = parse_rounds(rounds)
    if rng is not None and seed is not None:
        raise ConfigError("Pass either rng or seed, not both")
    table = build_table(community, hero, villain_ranges, label_style=label_style)
    n_workers = parse_workers(get_config().workers if workers is None else workers)
    return simulate_table(table, n, rng if rng is not None else random.Random(seed), n_workers)
