"""Input guidance metadata, advisory range checks and business-concern flags."""

from __future__ import annotations

from typing import Any

from founder_finance.schema import CASH_FLOW_MODEL, FINANCIAL_MODEL


INPUT_GUIDANCE: dict[str, dict[str, Any]] = {
    "variable_cost_percent": {"min": 0.0, "max": 80.0, "note": "Costs that scale with each sale, as a share of revenue."},
    "payment_terms_days": {"min": 0.0, "max": 90.0, "note": "Most B2B invoices are collected within 30 to 60 days."},
    "payable_terms_days": {"min": 0.0, "max": 90.0, "note": "Supplier terms of 15 to 45 days are common."},
    "monthly_growth_rate": {"min": -10.0, "max": 20.0, "note": "Sustained monthly growth above 20% is rare beyond the first year."},
    "cogs_percent": {"min": 0.0, "max": 80.0, "note": "Software businesses often run below 30%; physical goods higher."},
    "variable_opex_percent": {"min": 0.0, "max": 40.0, "note": "Commissions, payment fees and other revenue-linked opex."},
    "dso": {"min": 0.0, "max": 90.0, "note": "Accounts receivable collection period."},
    "dpo": {"min": 0.0, "max": 90.0, "note": "Accounts payable cycle length."},
    "tax_rate": {"min": 0.0, "max": 40.0, "note": "Flat rate applied to positive pre-tax profit only."},
    "depreciation_years": {"min": 3.0, "max": 10.0, "note": "Useful life for equipment and fit-out."},
}


def _fmt(v: float) -> str:
    if abs(v - round(v)) < 1e-9:
        return f"{int(round(v))}"
    return f"{v:.3f}".rstrip("0").rstrip(".")


def help_with_guidance(key: str, base_help: str) -> str:
    g = INPUT_GUIDANCE.get(key)
    if not g:
        return base_help
    return f"{base_help} Reasonable range: {_fmt(g['min'])} to {_fmt(g['max'])}. {g['note']}"


def advisory_warnings(inputs: dict) -> list[str]:
    warnings: list[str] = []
    for key, g in INPUT_GUIDANCE.items():
        if key not in inputs:
            continue
        try:
            v = float(inputs[key])
        except (TypeError, ValueError):
            continue
        if v < g["min"] or v > g["max"]:
            warnings.append(
                f"{key}={v:.3f} is outside the recommended range [{_fmt(g['min'])}, {_fmt(g['max'])}]."
            )
    return warnings


def economics_warnings(inputs: dict, model: str) -> list[str]:
    """Flag loss-making unit economics; the engine still runs these inputs."""
    warnings: list[str] = []
    if model == CASH_FLOW_MODEL:
        revenue = float(inputs["monthly_recurring_revenue"])
        variable_pct = float(inputs["variable_cost_percent"])
        costs = float(inputs["fixed_costs"]) + revenue * variable_pct / 100
    elif model == FINANCIAL_MODEL:
        revenue = float(inputs["starting_revenue"])
        variable_pct = float(inputs["cogs_percent"]) + float(inputs["variable_opex_percent"])
        costs = float(inputs["fixed_opex"]) + revenue * variable_pct / 100
    else:
        raise ValueError(f"Unsupported model: {model}")

    if variable_pct >= 100:
        warnings.append("Variable costs consume all revenue: every additional sale loses money.")
    if costs > revenue:
        warnings.append(
            f"Month-1 costs ({costs:,.0f}) exceed revenue ({revenue:,.0f}); cash will decline until revenue catches up."
        )
    return warnings
