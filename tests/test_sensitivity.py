from __future__ import annotations

import pytest

from founder_finance.financial_model import run_financial_model
from founder_finance.schema import CASH_FLOW_MODEL, FINANCIAL_MODEL
from founder_finance.sensitivity import (
    MIN_GROWTH_RATE,
    TARGET_OPTIONS,
    apply_percentage_shift,
    evaluate_outputs,
    run_one_way_sensitivity,
)


def test_sensitivity_has_delta_column_for_every_target(financial_model_inputs):
    df = run_one_way_sensitivity(financial_model_inputs, 0.1, drivers=["starting_revenue", "fixed_opex"])

    assert len(df) == 4
    assert set(df["Case"]) == {"Low", "High"}
    for target in TARGET_OPTIONS[FINANCIAL_MODEL]:
        assert f"Delta {target}" in df.columns


def test_revenue_driver_moves_revenue_in_the_expected_direction(financial_model_inputs):
    df = run_one_way_sensitivity(financial_model_inputs, 0.2, drivers=["starting_revenue"])
    high = df[df["Case"] == "High"].iloc[0]
    low = df[df["Case"] == "Low"].iloc[0]

    assert high["Delta Three-Year Revenue"] > 0
    assert low["Delta Three-Year Revenue"] < 0


def test_cash_flow_sensitivity_targets(cash_flow_inputs):
    df = run_one_way_sensitivity(cash_flow_inputs, 0.1, drivers=["fixed_costs"], model=CASH_FLOW_MODEL)
    high = df[df["Case"] == "High"].iloc[0]

    assert high["Delta Final Balance"] == pytest.approx(-12 * 40_000.0)
    for target in TARGET_OPTIONS[CASH_FLOW_MODEL]:
        assert target in df.columns


def test_unknown_and_non_numeric_drivers_are_skipped(cash_flow_inputs):
    df = run_one_way_sensitivity(
        cash_flow_inputs, 0.1, drivers=["not_a_driver", "monthly_one_time_income"], model=CASH_FLOW_MODEL
    )
    assert df.empty


def test_tax_driver_is_clamped_to_valid_range(financial_model_inputs):
    inputs = dict(financial_model_inputs, tax_rate=90.0)
    df = run_one_way_sensitivity(inputs, 0.5, drivers=["tax_rate"])
    assert len(df) == 2

    high = df[df["Case"] == "High"].iloc[0]
    capped = run_financial_model(dict(inputs, tax_rate=100.0)).summary
    assert high["Year 3 Net Income"] == pytest.approx(capped["year3_net_income"])
    assert high["Ending Cash"] == pytest.approx(capped["final_balance"])

    low = df[df["Case"] == "Low"].iloc[0]
    halved = run_financial_model(dict(inputs, tax_rate=45.0)).summary
    assert low["Year 3 Net Income"] == pytest.approx(halved["year3_net_income"])


def test_negative_growth_driver_keeps_its_sign(financial_model_inputs):
    inputs = dict(financial_model_inputs, monthly_growth_rate=-5.0)
    df = run_one_way_sensitivity(inputs, 0.1, drivers=["monthly_growth_rate"])
    low = df[df["Case"] == "Low"].iloc[0]
    high = df[df["Case"] == "High"].iloc[0]

    # Low scales -5% to -4.5% (less decline), High to -5.5% (more decline).
    assert low["Delta Three-Year Revenue"] > 0
    assert high["Delta Three-Year Revenue"] < 0
    assert low["Three-Year Revenue"] == pytest.approx(
        run_financial_model(dict(inputs, monthly_growth_rate=-4.5)).summary["three_year_revenue"]
    )


def test_growth_driver_is_kept_above_minus_100(financial_model_inputs):
    inputs = dict(financial_model_inputs, monthly_growth_rate=-95.0)
    df = run_one_way_sensitivity(inputs, 0.1, drivers=["monthly_growth_rate"])
    high = df[df["Case"] == "High"].iloc[0]
    floored = run_financial_model(dict(inputs, monthly_growth_rate=MIN_GROWTH_RATE)).summary
    assert high["Three-Year Revenue"] == pytest.approx(floored["three_year_revenue"])


def test_percentage_shift_returns_adjusted_copy(financial_model_inputs):
    shifted = apply_percentage_shift(financial_model_inputs, 0.1, -0.2, FINANCIAL_MODEL)

    assert shifted["starting_revenue"] == pytest.approx(financial_model_inputs["starting_revenue"] * 1.1)
    assert shifted["fixed_opex"] == pytest.approx(financial_model_inputs["fixed_opex"] * 0.8)
    assert shifted["cogs_percent"] == pytest.approx(financial_model_inputs["cogs_percent"] * 0.8)
    assert shifted["dso"] == financial_model_inputs["dso"]
    assert shifted is not financial_model_inputs


def test_unsupported_model_is_rejected(cash_flow_inputs):
    with pytest.raises(ValueError, match="Unsupported model"):
        evaluate_outputs(cash_flow_inputs, "monte_carlo")
