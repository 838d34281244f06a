import os

import pytest

from holdem_equity.config import MAX_AUTO_WORKERS, EquityConfig
from holdem_equity.helpers.errors import ConfigError

def test_defaults():
    cfg = EquityConfig.from_env({})
    assert cfg == EquityConfig()
    assert cfg.workers == 1
    assert cfg.log_level == "WARNING"
    assert cfg.enumerate_warn_threshold == 200_000_000

def test_values_from_env():
    cfg = EquityConfig.from_env({
        "HOLDEM_EQUITY_WORKERS": "3",
        "HOLDEM_EQUITY_LOG_LEVEL": "debug",
        "HOLDEM_EQUITY_ENUMERATE_WARN": "1000",
    })
    assert cfg.workers == 3
    assert cfg.log_level == "DEBUG"
    assert cfg.enumerate_warn_threshold == 1000

def test_auto_workers():
    cfg = EquityConfig.from_env({"HOLDEM_EQUITY_WORKERS": "auto"})
    assert cfg.workers == min(os.cpu_count() or 1, MAX_AUTO_WORKERS)

def test_blank_values_fall_back():
    cfg = EquityConfig.from_env({"HOLDEM_EQUITY_WORKERS": "", "HOLDEM_EQUITY_LOG_LEVEL": " "})
    assert cfg == EquityConfig()

@pytest.mark.parametrize("env", [
    {"HOLDEM_EQUITY_WORKERS": "0"},
    {"HOLDEM_EQUITY_WORKERS": "two"},
    {"HOLDEM_EQUITY_LOG_LEVEL": "LOUD"},
    {"HOLDEM_EQUITY_ENUMERATE_WARN": "-1"},
])
def test_bad_values(env):
    with pytest.raises(ConfigError):
        EquityConfig.from_env(env)

def test_reads_process_env(monkeypatch):
    monkeypatch.setenv("HOLDEM_EQUITY_WORKERS", "2")
    assert EquityConfig.from_env().workers == 2
