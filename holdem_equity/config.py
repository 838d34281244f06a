"""Runtime settings for the equity engine and its command line wrapper."""

from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .helpers.errors import ConfigError

ENV_WORKERS = "HOLDEM_EQUITY_WORKERS"
ENV_LOG_LEVEL = "HOLDEM_EQUITY_LOG_LEVEL"
ENV_ENUMERATE_WARN = "HOLDEM_EQUITY_ENUMERATE_WARN"

MAX_AUTO_WORKERS = 8


@dataclass(frozen=True)
class EquityConfig:
    """
    workers:                   processes used per run (1 = in-process)
    log_level:                 level the CLI configures logging with
    enumerate_warn_threshold:  deal count above which an enumerate run logs a warning
    """
    workers: int = 1
    log_level: str = "WARNING"
    enumerate_warn_threshold: int = 200_000_000

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EquityConfig":
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            workers=_parse_workers(env.get(ENV_WORKERS), defaults.workers),
            log_level=_parse_level(env.get(ENV_LOG_LEVEL), defaults.log_level),
            enumerate_warn_threshold=_parse_positive(
                ENV_ENUMERATE_WARN, env.get(ENV_ENUMERATE_WARN), defaults.enumerate_warn_threshold
            ),
        )


def _parse_positive(name: str, raw: Optional[str], default: int) -> int:
    if raw is None or not raw.strip():
        return default
    try:
        n = int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a positive integer, got {raw!r}") from e
    if n <= 0:
        raise ConfigError(f"{name} must be a positive integer, got {raw!r}")
    return n


def _parse_workers(raw: Optional[str], default: int) -> int:
    if raw is not None and raw.strip().lower() == "auto":
        return min(os.cpu_count() or 1, MAX_AUTO_WORKERS)
    return _parse_positive(ENV_WORKERS, raw, default)


def _parse_level(raw: Optional[str], default: str) -> str:
    if raw is None or not raw.strip():
        return default
    level = raw.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError(f"{ENV_LOG_LEVEL} must be a logging level name, got {raw!r}")
    return level


def get_config() -> EquityConfig:
    return EquityConfig.from_env()
