"""Default assumption sets for the cash flow forecast and the financial model."""

from __future__ import annotations


FORECAST_MONTHS = 12
MODEL_MONTHS = 36
MONTHS_PER_YEAR = 12


CASH_FLOW_DEFAULTS = {
    "monthly_recurring_revenue": 500_000.0,
    "monthly_one_time_income": [0.0] * FORECAST_MONTHS,
    "fixed_costs": 400_000.0,
    "variable_cost_percent": 20.0,
    "payment_terms_days": 30.0,
    "payable_terms_days": 15.0,
    "starting_balance": 3_000_000.0,
    "start_month": 1,
}


FINANCIAL_MODEL_DEFAULTS = {
    "starting_revenue": 500_000.0,
    "monthly_growth_rate": 5.0,
    "cogs_percent": 30.0,
    "fixed_opex": 200_000.0,
    "variable_opex_percent": 10.0,
    "starting_cash": 2_000_000.0,
    "dso": 30.0,
    "dpo": 30.0,
    "tax_rate": 25.0,
    "annual_capex": 500_000.0,
    "depreciation_years": 5.0,
    "start_month": 1,
}
