from __future__ import annotations
import logging
from concurrent.futures import ProcessPoolExecutor
from typing import Callable, List, Sequence, TypeVar

logger = logging.getLogger(__name__)

J = TypeVar("J")
R = TypeVar("R")


def split_rounds(rounds: int, workers: int) -> List[int]:
    """Near-equal round counts per worker; the first `rounds % workers` get one extra."""
    base, extra = divmod(rounds, workers)
    return [base + (1 if i < extra else 0) for i in range(workers) if base or i < extra]


def run_jobs(fn: Callable[[J], R], jobs: Sequence[J], workers: int) -> List[R]:
    """
    Runs `fn` over `jobs`, in this process when there's a single worker or job,
    otherwise on a process pool. Results come back in job order. `fn` must be a
    module-level function and jobs must pickle.
    """
    if workers <= 1 or len(jobs) <= 1:
        return [fn(j) for j in jobs]
    logger.debug("dispatching %d jobs to %d worker processes", len(jobs), workers)
    with ProcessPoolExecutor(max_workers=workers) as ex:
        return list(ex.map(fn, jobs))
