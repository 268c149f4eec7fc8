"""Summary metrics derived from finished projections."""

from __future__ import annotations

from typing import Any

import pandas as pd


def _safe_div(a: float, b: float) -> float:
    return float(a / b) if b else 0.0


def calculate_dso(receivables: float, revenue: float) -> float:
    """Days of revenue held in receivables (30-day month)."""
    return _safe_div(receivables, revenue) * 30


def calculate_dpo(payables: float, expenses: float) -> float:
    return _safe_div(payables, expenses) * 30


def cash_conversion_cycle(dso_days: float, dpo_days: float) -> float:
    return float(dso_days) - float(dpo_days)


def _cash_analytics(df: pd.DataFrame, starting_balance: float, dso_days: float, dpo_days: float) -> dict[str, Any]:
    balances = [float(starting_balance)] + df["Closing Balance"].astype(float).tolist()
    best_idx = df["Net Cash Flow"].idxmax()
    worst_idx = df["Net Cash Flow"].idxmin()
    first = df.iloc[0]

    return {
        "total_inflow": float(df["Cash Inflow"].sum()),
        "total_outflow": float(df["Cash Outflow"].sum()),
        "total_net_flow": float(df["Net Cash Flow"].sum()),
        "final_balance": float(df["Closing Balance"].iloc[-1]),
        "peak_balance": max(balances),
        "lowest_balance": min(balances),
        "avg_net_flow": float(df["Net Cash Flow"].mean()),
        "negative_flow_months": int((df["Net Cash Flow"] < 0).sum()),
        "negative_balance_months": int((df["Closing Balance"] < 0).sum()),
        "cash_conversion_cycle": cash_conversion_cycle(dso_days, dpo_days),
        "working_capital_impact": float(first["AR Balance"] - first["AP Balance"]),
        "best_month": str(df.loc[best_idx, "Month_Label"]),
        "best_month_net_flow": float(df.loc[best_idx, "Net Cash Flow"]),
        "worst_month": str(df.loc[worst_idx, "Month_Label"]),
        "worst_month_net_flow": float(df.loc[worst_idx, "Net Cash Flow"]),
    }


def compute_cash_flow_summary(
    df: pd.DataFrame,
    starting_balance: float | None = None,
    dso_days: float | None = None,
    dpo_days: float | None = None,
) -> dict[str, Any]:
    """Peak/trough balances (starting balance included), negative months, CCC and working capital impact."""
    if df.empty:
        raise ValueError("Cannot summarize an empty projection.")
    if starting_balance is None:
        starting_balance = df.attrs.get("starting_balance", float(df["Opening Balance"].iloc[0]))
    if dso_days is None:
        dso_days = df.attrs.get("dso_days", 0.0)
    if dpo_days is None:
        dpo_days = df.attrs.get("dpo_days", 0.0)
    return _cash_analytics(df, starting_balance, dso_days, dpo_days)


def compute_financial_model_summary(
    monthly: pd.DataFrame,
    annual: pd.DataFrame,
    seed: dict,
    dso_days: float,
    dpo_days: float,
) -> dict[str, Any]:
    total_revenue = float(annual["Revenue"].sum())
    last_year = annual.iloc[-1]

    summary = {
        "three_year_revenue": total_revenue,
        "gross_margin_pct": 100.0 * _safe_div(float(annual["Gross Profit"].sum()), total_revenue),
        "net_margin_pct": 100.0 * _safe_div(float(annual["Net Income"].sum()), total_revenue),
        "year3_ebitda": float(last_year["EBITDA"]),
        "year3_net_income": float(last_year["Net Income"]),
        "total_tax": float(annual["Tax"].sum()),
        "ending_equity": float(last_year["Total Equity"]),
    }
    summary.update(_cash_analytics(monthly, float(seed["Closing Balance"]), dso_days, dpo_days))

    profitable = monthly.loc[monthly["Net Income"] > 0, "Month_Number"]
    summary["first_profitable_month"] = int(profitable.iloc[0]) if not profitable.empty else None
    return summary
