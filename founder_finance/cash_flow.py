"""12-month cash flow forecast: accrual revenue/expenses converted to cash via DSO/DPO."""

from __future__ import annotations

import math
from typing import Dict

import numpy as np
import pandas as pd

from founder_finance.defaults import FORECAST_MONTHS
from founder_finance.schema import month_labels
from founder_finance.stepper import forecast_expenses, forecast_revenue
from founder_finance.timing import balances, cash_movements, convert_timing


REQUIRED_FIELDS = [
    "monthly_recurring_revenue",
    "monthly_one_time_income",
    "fixed_costs",
    "variable_cost_percent",
    "payment_terms_days",
    "payable_terms_days",
    "starting_balance",
]


def validate_cash_flow_inputs(inputs: Dict) -> None:
    missing = [f for f in REQUIRED_FIELDS if f not in inputs]
    if missing:
        raise ValueError(f"Missing cash flow inputs: {', '.join(missing)}.")

    for field in REQUIRED_FIELDS:
        if field == "monthly_one_time_income":
            continue
        if not math.isfinite(float(inputs[field])):
            raise ValueError(f"{field} must be a finite number.")
    for idx, amount in enumerate(inputs["monthly_one_time_income"]):
        if not math.isfinite(float(amount)):
            raise ValueError(f"monthly_one_time_income[{idx}] must be a finite number.")

    for field in ["payment_terms_days", "payable_terms_days"]:
        if float(inputs[field]) < 0:
            raise ValueError(f"{field} must be non-negative.")
    for field in ["variable_cost_percent", "fixed_costs"]:
        if float(inputs[field]) < 0:
            raise ValueError(f"{field} must be non-negative.")

    one_time = inputs["monthly_one_time_income"]
    if len(one_time) != FORECAST_MONTHS:
        raise ValueError(f"monthly_one_time_income must have exactly {FORECAST_MONTHS} entries.")

    start_month = int(inputs.get("start_month", 1))
    if not 1 <= start_month <= 12:
        raise ValueError("start_month must be in [1,12].")


def run_cash_flow_forecast(inputs: Dict) -> pd.DataFrame:
    """Project 12 months of cash movement using the receivable/payable balance method."""
    validate_cash_flow_inputs(inputs)

    one_time = [float(v) for v in inputs["monthly_one_time_income"]]
    revenue = forecast_revenue(inputs["monthly_recurring_revenue"], one_time)
    variable_costs, total_expenses = forecast_expenses(
        revenue, inputs["fixed_costs"], inputs["variable_cost_percent"]
    )

    receivables = convert_timing(revenue, inputs["payment_terms_days"], steady_state=True)
    payables = convert_timing(total_expenses, inputs["payable_terms_days"], steady_state=True)

    cash_inflow = cash_movements(receivables)
    cash_outflow = cash_movements(payables)
    net_cash_flow = cash_inflow - cash_outflow
    opening = np.zeros(FORECAST_MONTHS)
    closing = np.zeros(FORECAST_MONTHS)
    cash = float(inputs["starting_balance"])
    for m in range(FORECAST_MONTHS):
        opening[m] = cash
        cash = cash + net_cash_flow[m]
        closing[m] = cash

    t = np.arange(FORECAST_MONTHS)
    df = pd.DataFrame(
        {
            "Month_Number": t + 1,
            "Month_Label": month_labels(int(inputs.get("start_month", 1)), FORECAST_MONTHS),
            "Recurring Revenue": np.full(FORECAST_MONTHS, float(inputs["monthly_recurring_revenue"])),
            "One-Time Income": one_time,
            "Revenue": revenue,
            "Fixed Costs": np.full(FORECAST_MONTHS, float(inputs["fixed_costs"])),
            "Variable Costs": variable_costs,
            "Total Expenses": total_expenses,
            "Opening Balance": opening,
            "Cash Inflow": cash_inflow,
            "Cash Outflow": cash_outflow,
            "Net Cash Flow": net_cash_flow,
            "Closing Balance": closing,
            "AR Balance": balances(receivables),
            "AP Balance": balances(payables),
        }
    )
    df.attrs["starting_balance"] = float(inputs["starting_balance"])
    df.attrs["dso_days"] = float(inputs["payment_terms_days"])
    df.attrs["dpo_days"] = float(inputs["payable_terms_days"])
    return df
