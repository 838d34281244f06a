from __future__ import annotations


class EquityError(ValueError):
    """Base class for every input problem the engine reports."""


class ParseError(EquityError):
    """Bad card token, bad range token, or a rounds value that isn't a positive int."""


class ConflictError(EquityError):
    """The same card is claimed twice, or a range has no hand left after blockers."""


class ConfigError(EquityError):
    """Wrong number of villains or community cards, or a bad setting."""
