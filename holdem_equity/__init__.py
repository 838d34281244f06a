from .helpers.errors import EquityError, ParseError, ConflictError, ConfigError
from .engine.equity import EquityResult, enumerate_equity, simulate_equity

__version__ = "0.1.0"

__all__ = [
    "EquityError",
    "ParseError",
    "ConflictError",
    "ConfigError",
    "EquityResult",
    "enumerate_equity",
    "simulate_equity",
]
