"""
Unit tests for core/logging.py
"""

import logging
from dataclasses import replace

import pytest

from dcf_engine.core.config import settings
from dcf_engine.core.logging import ENGINE_LOGGERS, engine_log_level
from dcf_engine.services.modeling.sensitivity import build_sensitivity_table


def test_engine_log_level_restores_previous_levels():
    engine_logger = logging.getLogger(ENGINE_LOGGERS[0])
    engine_logger.setLevel(logging.NOTSET)

    with engine_log_level(logging.WARNING):
        assert all(logging.getLogger(name).level == logging.WARNING for name in ENGINE_LOGGERS)

    assert engine_logger.level == logging.NOTSET


def test_engine_log_level_restores_on_error():
    with pytest.raises(RuntimeError):
        with engine_log_level(logging.ERROR):
            raise RuntimeError("boom")

    assert all(logging.getLogger(name).level == logging.NOTSET for name in ENGINE_LOGGERS)


def _engine_records(caplog):
    return [r for r in caplog.records if r.name in ENGINE_LOGGERS]


def test_sweep_holds_engine_debug_logs(defaults, caplog):
    caplog.set_level(logging.DEBUG)
    build_sensitivity_table(replace(defaults, projection_years=2))

    assert _engine_records(caplog) == []
    assert any("Sensitivity table" in r.getMessage() for r in caplog.records)


def test_sweep_keeps_engine_debug_logs_when_enabled(defaults, caplog, monkeypatch):
    monkeypatch.setattr(settings, "SENSITIVITY_LOG_RUNS", True)
    caplog.set_level(logging.DEBUG)
    build_sensitivity_table(replace(defaults, projection_years=2))

    assert any(r.getMessage().startswith("Model run") for r in _engine_records(caplog))
