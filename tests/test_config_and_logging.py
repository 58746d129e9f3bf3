# tests/test_config_and_logging.py
import json
import logging
import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

from reiops.adapters.config import AppConfig
from reiops.adapters.logging_utils import JsonLogFormatter, get_logger


def test_defaults():
    cfg = AppConfig()
    assert cfg.DEFAULT_PROVINCE == "ON"
    assert cfg.DEFAULT_INTEREST_RATE == 5.5
    assert cfg.DEFAULT_AMORTIZATION_YEARS == 25


def test_env_prefix(monkeypatch):
    monkeypatch.setenv("REIOPS_DEFAULT_PROVINCE", "bc")
    monkeypatch.setenv("REIOPS_DEFAULT_INTEREST_RATE", "4.25%")
    cfg = AppConfig()
    assert cfg.DEFAULT_PROVINCE == "BC"
    assert cfg.DEFAULT_INTEREST_RATE == 4.25


def test_rejects_negative_and_zero():
    with pytest.raises(ValidationError):
        AppConfig(DEFAULT_HEATING_MONTHLY=-1)
    with pytest.raises(ValidationError):
        AppConfig(DEFAULT_AMORTIZATION_YEARS=0)


def test_json_formatter_merges_context():
    record = logging.LogRecord("reiops.test", logging.INFO, __file__, 1, "deal analyzed", None, None)
    record.context = {"score": 42}
    payload = json.loads(JsonLogFormatter().format(record))
    assert payload["message"] == "deal analyzed"
    assert payload["level"] == "INFO"
    assert payload["score"] == 42


def test_get_logger_is_idempotent():
    a = get_logger("reiops.test.idempotent")
    b = get_logger("reiops.test.idempotent")
    assert a is b
    assert len(a.handlers) == 1
    assert a.propagate is False


def test_json_formatter_includes_exception_and_iso_timestamp():
    try:
        raise KeyError("mls-404")
    except KeyError:
        record = logging.LogRecord("reiops.test", logging.ERROR, __file__, 1, "fetch failed", None, sys.exc_info())
    payload = json.loads(JsonLogFormatter().format(record))
    assert "KeyError" in payload["exception"]
    assert payload["ts"].endswith("+00:00")
    assert payload["env"] == "dev"


def test_json_formatter_serializes_non_json_context():
    record = logging.LogRecord("reiops.test", logging.INFO, __file__, 1, "flags", None, None)
    record.context = {"flags": ("NEGATIVE_CASH_FLOW",), "path": Path("deals.csv")}
    payload = json.loads(JsonLogFormatter().format(record))
    assert payload["flags"] == ["NEGATIVE_CASH_FLOW"]
    assert payload["path"] == "deals.csv"


def test_get_logger_level_override():
    assert get_logger("reiops.test.level", "DEBUG").level == logging.DEBUG
