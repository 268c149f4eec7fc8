"""36-month integrated financial model (P&L, balance sheet, cash flow statement)."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict

import numpy as np
import pandas as pd

from founder_finance.aggregation import aggregate_annual
from founder_finance.balance import BalanceState, accumulate, assert_balanced, seed_state
from founder_finance.defaults import MODEL_MONTHS, MONTHS_PER_YEAR
from founder_finance.metrics import compute_financial_model_summary
from founder_finance.schema import month_labels
from founder_finance.stepper import step_period
from founder_finance.timing import advance, days_to_ratio


REQUIRED_FIELDS = [
    "starting_revenue",
    "monthly_growth_rate",
    "cogs_percent",
    "fixed_opex",
    "variable_opex_percent",
    "starting_cash",
    "dso",
    "dpo",
    "tax_rate",
    "annual_capex",
    "depreciation_years",
]

FLOW_COLUMNS = [
    "Revenue",
    "COGS",
    "Gross Profit",
    "Fixed OPEX",
    "Variable OPEX",
    "Total OPEX",
    "EBITDA",
    "Depreciation",
    "EBIT",
    "Tax",
    "Net Income",
    "Capex",
    "Change in AR",
    "Change in AP",
    "Operating Cash Flow",
    "Investing Cash Flow",
    "Cash Inflow",
    "Cash Outflow",
    "Net Cash Flow",
]

STOCK_COLUMNS = [
    "Closing Balance",
    "AR Balance",
    "AP Balance",
    "Cumulative Capex",
    "Accumulated Depreciation",
    "Net PP&E",
    "Total Assets",
    "Total Liabilities",
    "Retained Earnings",
    "Total Equity",
]


@dataclass
class FinancialModelResult:
    monthly: pd.DataFrame
    annual: pd.DataFrame
    seed: Dict[str, float]
    summary: Dict[str, Any] = field(default_factory=dict)


def validate_financial_model_inputs(inputs: Dict) -> None:
    missing = [f for f in REQUIRED_FIELDS if f not in inputs]
    if missing:
        raise ValueError(f"Missing financial model inputs: {', '.join(missing)}.")

    for f in REQUIRED_FIELDS:
        if not math.isfinite(float(inputs[f])):
            raise ValueError(f"{f} must be a finite number.")

    non_negative_fields = [
        "starting_revenue",
        "cogs_percent",
        "fixed_opex",
        "variable_opex_percent",
        "dso",
        "dpo",
        "annual_capex",
        "depreciation_years",
    ]
    for f in non_negative_fields:
        if float(inputs[f]) < 0:
            raise ValueError(f"{f} must be non-negative.")

    if not 0 <= float(inputs["tax_rate"]) <= 100:
        raise ValueError("tax_rate must be in [0,100].")
    if float(inputs["monthly_growth_rate"]) <= -100:
        raise ValueError("monthly_growth_rate must be greater than -100.")
    if float(inputs["annual_capex"]) > 0 and float(inputs["depreciation_years"]) <= 0:
        raise ValueError("depreciation_years must be positive when annual_capex is nonzero.")
    if not 1 <= int(inputs.get("start_month", 1)) <= 12:
        raise ValueError("start_month must be in [1,12].")


def _state_row(state: BalanceState) -> dict:
    return {
        "Closing Balance": state.cash,
        "AR Balance": state.receivables,
        "AP Balance": state.payables,
        "Cumulative Capex": state.cumulative_capex,
        "Accumulated Depreciation": state.accumulated_depreciation,
        "Net PP&E": state.net_fixed_assets,
        "Total Assets": state.total_assets,
        "Total Liabilities": state.total_liabilities,
        "Retained Earnings": state.retained_earnings,
        "Total Equity": state.total_equity,
    }


def run_financial_model(inputs: Dict) -> FinancialModelResult:
    validate_financial_model_inputs(inputs)

    ar_ratio = days_to_ratio(inputs["dso"])
    ap_ratio = days_to_ratio(inputs["dpo"])

    seed = seed_state(inputs["starting_cash"])
    assert_balanced(seed)

    rows: list[dict] = []
    state = seed
    for m in range(1, MODEL_MONTHS + 1):
        econ = step_period(m, inputs, state.cumulative_capex)
        # Receivables and payables start from the seed (zero) so the Year-0 balance sheet holds.
        receivable = advance(state.receivables, econ.revenue, ar_ratio)
        payable = advance(state.payables, econ.cash_costs, ap_ratio)
        opening_cash = state.cash
        state, lines = accumulate(state, econ, receivable, payable)
        assert_balanced(state)

        rows.append(
            {
                "Revenue": econ.revenue,
                "COGS": econ.cogs,
                "Gross Profit": econ.gross_profit,
                "Fixed OPEX": econ.fixed_opex,
                "Variable OPEX": econ.variable_opex,
                "Total OPEX": econ.total_opex,
                "EBITDA": econ.ebitda,
                "Depreciation": econ.depreciation,
                "EBIT": econ.ebit,
                "Tax": econ.tax,
                "Net Income": econ.net_income,
                "Capex": econ.capex,
                "Change in AR": lines.change_in_receivables,
                "Change in AP": lines.change_in_payables,
                "Operating Cash Flow": lines.operating_cash_flow,
                "Investing Cash Flow": lines.investing_cash_flow,
                "Cash Inflow": receivable.cash,
                "Cash Outflow": payable.cash + econ.tax + econ.capex,
                "Net Cash Flow": lines.net_cash_flow,
                "Opening Balance": opening_cash,
                **_state_row(state),
            }
        )

    monthly = pd.DataFrame(rows)
    t = np.arange(MODEL_MONTHS)
    monthly.insert(0, "Month_Label", month_labels(int(inputs.get("start_month", 1)), MODEL_MONTHS))
    monthly.insert(0, "Month_Number", t + 1)
    monthly.insert(0, "Year", (t // MONTHS_PER_YEAR + 1).astype(int))
    monthly.attrs["starting_balance"] = float(inputs["starting_cash"])
    monthly.attrs["dso_days"] = float(inputs["dso"])
    monthly.attrs["dpo_days"] = float(inputs["dpo"])

    annual = aggregate_annual(monthly, FLOW_COLUMNS, STOCK_COLUMNS)
    annual.insert(1, "Opening Balance", [seed.cash] + annual["Closing Balance"].tolist()[:-1])

    seed_row = {"Year": 0, **_state_row(seed)}
    summary = compute_financial_model_summary(monthly, annual, seed_row, inputs["dso"], inputs["dpo"])
    return FinancialModelResult(monthly=monthly, annual=annual, seed=seed_row, summary=summary)
