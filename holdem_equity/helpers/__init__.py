# errors
from .errors import EquityError, ParseError, ConflictError, ConfigError

# cards
from .cards import (
    Card,
    CardSet,
    Deck,
    Hand,
    parse_cards,
    parse_card_string,
    card_to_id,
    id_to_card,
)

# evaluation
from .evaluator import (
    EvaluatedHand,
    evaluate_5,
    evaluate_hand,
    evaluate_best,
    compare_hands,
    winners,
    score_ids,
    score_cards,
    CATEGORY,
)

# ranges
from .ranges import Range, parse_range, expand, build_range

__all__ = [
    # errors
    "EquityError", "ParseError", "ConflictError", "ConfigError",

    # cards
    "Card", "CardSet", "Deck", "Hand",
    "parse_cards", "parse_card_string", "card_to_id", "id_to_card",

    # evaluation
    "EvaluatedHand", "evaluate_5", "evaluate_hand", "evaluate_best",
    "compare_hands", "winners", "score_ids", "score_cards", "CATEGORY",

    # ranges
    "Range", "parse_range", "expand", "build_range",
]
