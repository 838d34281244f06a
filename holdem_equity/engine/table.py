from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

from ..helpers.cards import Card, CardSet, Hand, ids_to_mask, parse_card_string
from ..helpers.errors import ConfigError, ConflictError, ParseError
from ..helpers.ranges import Range, build_range

logger = logging.getLogger(__name__)

STREET_SIZES = (0, 3, 4, 5)
MAX_VILLAINS = 8  # nine players at most
LABEL_STYLES = ("hero", "player")


def player_labels(n_players: int, style: str = "hero") -> Tuple[str, ...]:
    if style == "hero":
        return ("hero",) + tuple(f"villain {i}" for i in range(1, n_players))
    if style == "player":
        return tuple(f"player {i}" for i in range(1, n_players + 1))
    raise ConfigError(f"Unknown label style {style!r}, expected one of {LABEL_STYLES}")


@dataclass(frozen=True)
class Table:
    """
    Validated, immutable input of one run. Player 0 is the hero (a one-hand
    range), players 1.. are the villains in input order.
    Safe to share read-only across workers.
    """
    board: Tuple[Card, ...]
    players: Tuple[Range, ...]
    labels: Tuple[str, ...]

    @property
    def board_ids(self) -> Tuple[int, ...]:
        return tuple(c.id for c in self.board)

    @property
    def board_mask(self) -> int:
        return ids_to_mask(self.board_ids)

    @property
    def missing(self) -> int:
        return 5 - len(self.board)

    @property
    def fixed_mask(self) -> int:
        """Cards held by players whose hand is known in advance."""
        m = 0
        for r in self.players:
            if r.is_fixed:
                m |= r.masks[0]
        return m

    @property
    def n_players(self) -> int:
        return len(self.players)


def _has_joint_assignment(players: Sequence[Range]) -> bool:
    """
    True if every player can be dealt a hand with no card shared.
    Narrowest ranges go first so conflicts between them surface before the
    search fans out over broad ones; dead (depth, cards used) states are cached.
    """
    order = sorted(players, key=len)
    dead = set()

    def search(i: int, used: int) -> bool:
        if i == len(order):
            return True
        if (i, used) in dead:
            return False
        for m in order[i].masks:
            if not (m & used) and search(i + 1, used | m):
                return True
        dead.add((i, used))
        return False

    return search(0, 0)


def _resolve_blockers(players: List[Range], board_mask: int) -> List[Range]:
    """
    Strip every hand that touches the board or a fixed player's cards.
    Repeats until stable, since stripping can leave another range with one hand.
    """
    while True:
        changed = False
        for i, r in enumerate(players):
            blockers = board_mask
            for j, other in enumerate(players):
                if j != i and other.is_fixed:
                    blockers |= other.masks[0]
            narrowed = r.without(blockers)
            if not narrowed:
                who = "hero" if i == 0 else f"villain {i}"
                raise ConflictError(
                    f"No valid hand left for {who} ({r.text or r.hands[0]}) after removing known cards"
                )
            if len(narrowed) != len(r):
                players[i] = narrowed
                changed = True
        if not changed:
            return players


def build_table(
    community: Union[str, Sequence[Card]],
    hero: Union[str, Hand],
    villain_ranges: Sequence[str],
    label_style: str = "hero",
) -> Table:
    """
    Parse and validate everything up front. Nothing downstream re-checks input,
    so every ParseError / ConflictError / ConfigError is raised here.
    """
    board = parse_card_string(community) if isinstance(community, str) else list(community)
    if len(set(board)) != len(board):
        raise ConflictError("Duplicate card in community cards")
    hero_hand = Hand.from_str(hero) if isinstance(hero, str) else hero
    if isinstance(villain_ranges, str):
        raise ConfigError("villain_ranges must be a list of range strings")

    parsed = [build_range(text) for text in villain_ranges]

    if len(board) not in STREET_SIZES:
        raise ConfigError(f"Community must have 0, 3, 4 or 5 cards, got {len(board)}")
    if not parsed:
        raise ConfigError("At least one villain range is required")
    if len(parsed) > MAX_VILLAINS:
        raise ConfigError(f"At most {MAX_VILLAINS} villains are supported, got {len(parsed)}")

    board_mask = CardSet.of(board).bits
    if hero_hand.mask & board_mask:
        raise ConflictError(f"Hero hand {hero_hand} shares a card with the community cards")

    players = _resolve_blockers([Range((hero_hand,), str(hero_hand))] + parsed, board_mask)
    if not _has_joint_assignment(players):
        raise ConflictError("Ranges leave no collision-free way to deal every player a hand")

    labels = player_labels(len(players), label_style)
    for label, r in zip(labels, players):
        logger.debug("%s: %d hands", label, len(r))
    return Table(board=tuple(board), players=tuple(players), labels=labels)


def parse_rounds(rounds: Union[int, str]) -> int:
    if isinstance(rounds, bool):
        raise ParseError(f"rounds must be a positive integer, got {rounds!r}")
    if isinstance(rounds, str):
        try:
            rounds = int(rounds.strip())
        except ValueError as e:
            raise ParseError(f"rounds must be a positive integer, got {rounds!r}") from e
    if not isinstance(rounds, int) or rounds <= 0:
        raise ParseError(f"rounds must be a positive integer, got {rounds!r}")
    return rounds


def parse_workers(workers: Optional[Union[int, str]]) -> int:
    if workers is None:
        return 1
    try:
        n = int(workers)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"workers must be a positive integer, got {workers!r}") from e
    if n <= 0 or isinstance(workers, bool):
        raise ConfigError(f"workers must be a positive integer, got {workers!r}")
    return n
