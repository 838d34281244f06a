"""
Command line wrapper around the equity engine.

  holdem-equity enumerate AsTd3h AhTh "AKo+,AKs+,TT+,33" full
  holdem-equity simulate 1000000 AsTd3h AhTh "AKo+,AKs+,TT+,33" full --seed 7

Prints one line per player, or an error on stderr with exit status 1.
"""

from __future__ import annotations
import argparse
import logging
import sys
from typing import List, Optional

from .config import EquityConfig
from .engine.equity import enumerate_equity, simulate_equity
from .helpers.errors import EquityError

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _add_table_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("community", help='board cards, e.g. "AsTd3h"; "" or "-" preflop')
    p.add_argument("hero", help='hero hole cards, e.g. "AhTh"')
    p.add_argument("ranges", nargs="*", help='one range per villain, e.g. "TT+,AKs" or "full"')


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="holdem-equity", description="Texas Hold'em range equity calculator")
    ap.add_argument("-v", "--verbose", action="count", default=0, help="-v info, -vv debug")
    ap.add_argument("--workers", type=int, default=None, help="worker processes (default: $HOLDEM_EQUITY_WORKERS or 1)")
    ap.add_argument("--player-labels", action="store_true", help='label lines "player N" instead of hero/villain')
    sub = ap.add_subparsers(dest="command", required=True)

    en = sub.add_parser("enumerate", help="exact equity over every valid deal")
    _add_table_args(en)

    si = sub.add_parser("simulate", help="Monte Carlo equity")
    si.add_argument("rounds", help="number of sampled deals")
    _add_table_args(si)
    si.add_argument("--seed", type=int, default=None)
    return ap


def _configure_logging(verbose: int, cfg: EquityConfig) -> None:
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.getLevelName(cfg.log_level)
    logging.basicConfig(level=level, format=LOG_FORMAT)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        cfg = EquityConfig.from_env()
    except EquityError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    _configure_logging(args.verbose, cfg)

    community = "" if args.community == "-" else args.community
    label_style = "player" if args.player_labels else "hero"
    workers = cfg.workers if args.workers is None else args.workers

    try:
        if args.command == "enumerate":
            results = enumerate_equity(
                community, args.hero, args.ranges, workers=workers, label_style=label_style
            )
        else:
            results = simulate_equity(
                args.rounds, community, args.hero, args.ranges,
                seed=args.seed, workers=workers, label_style=label_style,
            )
    except EquityError as e:
        logger.debug("rejected input", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1

    for r in results:
        print(r.format_line())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
