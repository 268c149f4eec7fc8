from __future__ import annotations

from pathlib import Path

import pytest

import founder_finance.runtime_logging as runtime_logging
from founder_finance.defaults import CASH_FLOW_DEFAULTS, FINANCIAL_MODEL_DEFAULTS
from founder_finance.schema import sanitize_cash_flow_inputs, sanitize_financial_model_inputs


@pytest.fixture
def cash_flow_inputs() -> dict:
    inputs, _, _ = sanitize_cash_flow_inputs(dict(CASH_FLOW_DEFAULTS))
    return inputs


@pytest.fixture
def financial_model_inputs() -> dict:
    inputs, _, _ = sanitize_financial_model_inputs(dict(FINANCIAL_MODEL_DEFAULTS))
    return inputs


@pytest.fixture
def isolated_runtime_log(tmp_path, monkeypatch) -> Path:
    log_file = Path(tmp_path) / "runtime_events.jsonl"
    monkeypatch.setattr(runtime_logging, "LOG_DIR", Path(tmp_path))
    monkeypatch.setattr(runtime_logging, "RUNTIME_EVENTS_LOG_FILE", log_file)
    return log_file
