from __future__ import annotations

import pytest

from founder_finance.input_metadata import (
    INPUT_GUIDANCE,
    advisory_warnings,
    economics_warnings,
    help_with_guidance,
)
from founder_finance.schema import CASH_FLOW_MODEL, FINANCIAL_MODEL


def test_guided_inputs_mention_reasonable_range():
    text = help_with_guidance("dso", "Collection period.")
    assert text.startswith("Collection period.")
    assert "Reasonable range: 0 to 90." in text


def test_unguided_inputs_keep_base_help():
    assert help_with_guidance("starting_cash", "Cash on day one.") == "Cash on day one."


def test_every_guidance_entry_has_ordered_bounds():
    for key, g in INPUT_GUIDANCE.items():
        assert g["min"] <= g["max"], key
        assert g["note"].strip(), key


def test_advisory_warnings_flag_out_of_range_values(financial_model_inputs):
    inputs = dict(financial_model_inputs, dso=180.0, monthly_growth_rate=35.0)
    warnings = advisory_warnings(inputs)
    assert len(warnings) == 2
    assert any(w.startswith("dso=180.000") for w in warnings)


def test_defaults_raise_no_advisory_warnings(cash_flow_inputs, financial_model_inputs):
    assert advisory_warnings(cash_flow_inputs) == []
    assert advisory_warnings(financial_model_inputs) == []


def test_break_even_inputs_have_no_economics_warning(cash_flow_inputs):
    assert economics_warnings(cash_flow_inputs, CASH_FLOW_MODEL) == []


def test_loss_making_month_one_is_flagged(cash_flow_inputs):
    inputs = dict(cash_flow_inputs, fixed_costs=900_000.0)
    warnings = economics_warnings(inputs, CASH_FLOW_MODEL)
    assert len(warnings) == 1
    assert "exceed revenue" in warnings[0]


def test_variable_costs_above_revenue_are_flagged(financial_model_inputs):
    inputs = dict(financial_model_inputs, cogs_percent=70.0, variable_opex_percent=40.0)
    warnings = economics_warnings(inputs, FINANCIAL_MODEL)
    assert any("consume all revenue" in w for w in warnings)


def test_unknown_model_is_rejected(cash_flow_inputs):
    with pytest.raises(ValueError, match="Unsupported model"):
        economics_warnings(cash_flow_inputs, "other")
