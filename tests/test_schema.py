from __future__ import annotations

import pandas as pd

from founder_finance.defaults import CASH_FLOW_DEFAULTS, FINANCIAL_MODEL_DEFAULTS
from founder_finance.schema import (
    month_labels,
    sanitize_cash_flow_inputs,
    sanitize_financial_model_inputs,
    sanitize_one_time_income,
)


def test_month_labels_wrap_around_year_end():
    assert month_labels(1, 3) == ["Jan", "Feb", "Mar"]
    assert month_labels(11, 4) == ["Nov", "Dec", "Jan", "Feb"]
    assert len(month_labels(1, 36)) == 36


def test_empty_payload_returns_defaults():
    inputs, warnings, unknown = sanitize_cash_flow_inputs({})
    assert inputs == CASH_FLOW_DEFAULTS
    assert warnings == []
    assert unknown == []


def test_unknown_keys_are_reported_not_applied():
    inputs, _, unknown = sanitize_financial_model_inputs({"starting_revenue": 1.0, "headcount": 12})
    assert unknown == ["headcount"]
    assert "headcount" not in inputs
    assert inputs["starting_revenue"] == 1.0


def test_non_numeric_value_keeps_default_with_warning():
    inputs, warnings, _ = sanitize_financial_model_inputs({"tax_rate": "abc", "dso": True})
    assert inputs["tax_rate"] == FINANCIAL_MODEL_DEFAULTS["tax_rate"]
    assert inputs["dso"] == FINANCIAL_MODEL_DEFAULTS["dso"]
    assert len(warnings) == 2


def test_start_month_out_of_range_falls_back_to_january():
    inputs, warnings, _ = sanitize_cash_flow_inputs({"start_month": 14})
    assert inputs["start_month"] == 1
    assert any("start_month" in w for w in warnings)


def test_one_time_income_is_padded_and_coerced():
    warnings: list[str] = []
    values = sanitize_one_time_income([100, "x", None, "250.5"], warnings)
    assert values == [100.0, 0.0, 0.0, 250.5] + [0.0] * 8
    assert warnings == ["monthly_one_time_income[1] is not numeric and was treated as 0."]


def test_one_time_income_is_truncated_with_warning():
    warnings: list[str] = []
    values = sanitize_one_time_income(pd.Series([1.0] * 14), warnings)
    assert len(values) == 12
    assert any("truncated" in w for w in warnings)


def test_one_time_income_rejects_non_list():
    warnings: list[str] = []
    assert sanitize_one_time_income("lots", warnings) == [0.0] * 12
    assert warnings
