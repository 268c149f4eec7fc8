"""What-if analysis: adjust input assumptions and re-run the engine."""

from __future__ import annotations

from copy import deepcopy

import pandas as pd

from founder_finance.cash_flow import run_cash_flow_forecast
from founder_finance.financial_model import run_financial_model
from founder_finance.metrics import compute_cash_flow_summary
from founder_finance.schema import CASH_FLOW_MODEL, FINANCIAL_MODEL


DEFAULT_SENSITIVITY_DRIVERS = {
    CASH_FLOW_MODEL: [
        "monthly_recurring_revenue",
        "fixed_costs",
        "variable_cost_percent",
        "payment_terms_days",
        "payable_terms_days",
    ],
    FINANCIAL_MODEL: [
        "starting_revenue",
        "monthly_growth_rate",
        "cogs_percent",
        "fixed_opex",
        "variable_opex_percent",
        "dso",
        "dpo",
        "tax_rate",
        "annual_capex",
    ],
}

REVENUE_KEYS = {
    CASH_FLOW_MODEL: ["monthly_recurring_revenue"],
    FINANCIAL_MODEL: ["starting_revenue"],
}

COST_KEYS = {
    CASH_FLOW_MODEL: ["fixed_costs", "variable_cost_percent"],
    FINANCIAL_MODEL: ["fixed_opex", "variable_opex_percent", "cogs_percent"],
}

TARGET_OPTIONS = {
    CASH_FLOW_MODEL: ["Final Balance", "Lowest Balance", "Total Net Cash Flow", "Negative Balance Months"],
    FINANCIAL_MODEL: ["Three-Year Revenue", "Year 3 EBITDA", "Year 3 Net Income", "Ending Cash", "Lowest Cash"],
}


def evaluate_outputs(inputs: dict, model: str) -> dict:
    if model == CASH_FLOW_MODEL:
        summary = compute_cash_flow_summary(run_cash_flow_forecast(inputs))
        return {
            "Final Balance": summary["final_balance"],
            "Lowest Balance": summary["lowest_balance"],
            "Total Net Cash Flow": summary["total_net_flow"],
            "Negative Balance Months": summary["negative_balance_months"],
        }
    if model == FINANCIAL_MODEL:
        summary = run_financial_model(inputs).summary
        return {
            "Three-Year Revenue": summary["three_year_revenue"],
            "Year 3 EBITDA": summary["year3_ebitda"],
            "Year 3 Net Income": summary["year3_net_income"],
            "Ending Cash": summary["final_balance"],
            "Lowest Cash": summary["lowest_balance"],
        }
    raise ValueError(f"Unsupported model: {model}")


MIN_GROWTH_RATE = -99.0


def _clamp_driver(driver: str, value: float) -> float:
    # Growth may be negative but must stay above -100% to keep revenue positive.
    if driver == "monthly_growth_rate":
        return max(value, MIN_GROWTH_RATE)
    value = max(value, 0.0)
    if driver == "tax_rate":
        value = min(value, 100.0)
    return value


def run_one_way_sensitivity(
    base_inputs: dict,
    delta_pct: float,
    drivers: list[str] | None = None,
    model: str = FINANCIAL_MODEL,
) -> pd.DataFrame:
    base = evaluate_outputs(base_inputs, model)

    if drivers is None or len(drivers) == 0:
        drivers = [d for d in DEFAULT_SENSITIVITY_DRIVERS[model] if d in base_inputs]

    rows = []
    for driver in drivers:
        if driver not in base_inputs or not isinstance(base_inputs[driver], (int, float)):
            continue
        for case, mult in [("Low", 1 - delta_pct), ("High", 1 + delta_pct)]:
            scenario = deepcopy(base_inputs)
            scenario[driver] = _clamp_driver(driver, float(scenario[driver]) * mult)
            out = evaluate_outputs(scenario, model)
            rows.append(
                {
                    "Driver": driver,
                    "Case": case,
                    **{k: out[k] for k in base.keys()},
                    **{f"Delta {k}": out[k] - base[k] for k in base.keys()},
                }
            )
    return pd.DataFrame(rows)


def apply_percentage_shift(inputs: dict, revenue_shift_pct: float, cost_shift_pct: float, model: str) -> dict:
    """Return a copy of ``inputs`` with revenue and cost drivers scaled; the original is untouched."""
    shifted = deepcopy(inputs)
    for key in REVENUE_KEYS[model]:
        shifted[key] = max(0.0, float(shifted[key]) * (1 + revenue_shift_pct))
    for key in COST_KEYS[model]:
        shifted[key] = max(0.0, float(shifted[key]) * (1 + cost_shift_pct))
    return shifted
