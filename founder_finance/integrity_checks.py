"""Roll-forward and accounting identity checks over projection frames."""

from __future__ import annotations

from typing import Any

import numpy as np
import pandas as pd

from founder_finance.timing import days_to_ratio


def _finding(
    check: str,
    max_abs_delta: float,
    month: str,
    lhs_name: str,
    rhs_name: str,
) -> dict[str, Any]:
    return {
        "Check": check,
        "Max Abs Delta": float(max_abs_delta),
        "Month of Max Delta": month,
        "LHS": lhs_name,
        "RHS": rhs_name,
    }


def _month_of_max_delta(df: pd.DataFrame, delta: np.ndarray) -> str:
    if len(delta) == 0:
        return ""
    idx = int(np.argmax(np.abs(delta)))
    if "Month_Number" in df.columns and idx < len(df):
        return str(df.iloc[idx]["Month_Number"])
    return str(idx)


def _check_series_identity(
    findings: list[dict[str, Any]],
    df: pd.DataFrame,
    check_name: str,
    lhs_name: str,
    rhs_name: str,
    lhs: np.ndarray,
    rhs: np.ndarray,
    tol: float,
) -> None:
    delta = np.nan_to_num(np.asarray(lhs, dtype=float) - np.asarray(rhs, dtype=float), nan=0.0)
    if len(delta) == 0:
        return
    max_abs = float(np.max(np.abs(delta)))
    if max_abs > float(tol):
        findings.append(_finding(check_name, max_abs, _month_of_max_delta(df, delta), lhs_name, rhs_name))


def _check_non_negative(findings: list[dict[str, Any]], df: pd.DataFrame, col: str, tol: float) -> None:
    values = df[col].to_numpy(dtype=float)
    below = np.minimum(values, 0.0)
    if len(below) and float(np.min(below)) < -float(tol):
        findings.append(_finding(f"{col} non-negative", float(-np.min(below)), _month_of_max_delta(df, below), col, "0"))


def _check_cash_chain(findings: list[dict[str, Any]], df: pd.DataFrame, starting_balance: float, tol: float) -> None:
    _check_series_identity(
        findings,
        df,
        "Cash roll-forward",
        "Closing Balance",
        "Opening Balance + Net Cash Flow",
        df["Closing Balance"].to_numpy(),
        (df["Opening Balance"] + df["Net Cash Flow"]).to_numpy(),
        tol,
    )
    prev_closing = np.concatenate(([float(starting_balance)], df["Closing Balance"].to_numpy()[:-1]))
    _check_series_identity(
        findings,
        df,
        "Opening balance chaining",
        "Opening Balance",
        "Prior Closing Balance",
        df["Opening Balance"].to_numpy(),
        prev_closing,
        tol,
    )
    _check_non_negative(findings, df, "Cash Inflow", tol)
    _check_non_negative(findings, df, "Cash Outflow", tol)


def _cash_flow_checks(findings: list[dict[str, Any]], df: pd.DataFrame, assumptions: dict, tol: float) -> None:
    _check_series_identity(
        findings,
        df,
        "Revenue identity",
        "Revenue",
        "Recurring Revenue + One-Time Income",
        df["Revenue"].to_numpy(),
        (df["Recurring Revenue"] + df["One-Time Income"]).to_numpy(),
        tol,
    )
    _check_series_identity(
        findings,
        df,
        "Expense identity",
        "Total Expenses",
        "Fixed Costs + Variable Costs",
        df["Total Expenses"].to_numpy(),
        (df["Fixed Costs"] + df["Variable Costs"]).to_numpy(),
        tol,
    )
    _check_series_identity(
        findings,
        df,
        "Net cash flow identity",
        "Net Cash Flow",
        "Cash Inflow - Cash Outflow",
        df["Net Cash Flow"].to_numpy(),
        (df["Cash Inflow"] - df["Cash Outflow"]).to_numpy(),
        tol,
    )
    ar_ratio = days_to_ratio(assumptions.get("payment_terms_days", df.attrs.get("dso_days", 0.0)))
    ap_ratio = days_to_ratio(assumptions.get("payable_terms_days", df.attrs.get("dpo_days", 0.0)))
    _check_series_identity(
        findings,
        df,
        "Receivable balance",
        "AR Balance",
        "DSO ratio x Revenue",
        df["AR Balance"].to_numpy(),
        ar_ratio * df["Revenue"].to_numpy(),
        tol,
    )
    _check_series_identity(
        findings,
        df,
        "Payable balance",
        "AP Balance",
        "DPO ratio x Total Expenses",
        df["AP Balance"].to_numpy(),
        ap_ratio * df["Total Expenses"].to_numpy(),
        tol,
    )


def _financial_model_checks(findings: list[dict[str, Any]], df: pd.DataFrame, tol: float) -> None:
    identities = [
        ("Gross profit identity", "Gross Profit", "Revenue - COGS", df["Revenue"] - df["COGS"]),
        ("OPEX identity", "Total OPEX", "Fixed OPEX + Variable OPEX", df["Fixed OPEX"] + df["Variable OPEX"]),
        ("EBITDA identity", "EBITDA", "Gross Profit - Total OPEX", df["Gross Profit"] - df["Total OPEX"]),
        ("EBIT identity", "EBIT", "EBITDA - Depreciation", df["EBITDA"] - df["Depreciation"]),
        ("Net income identity", "Net Income", "EBIT - Tax", df["EBIT"] - df["Tax"]),
        (
            "Operating cash flow identity",
            "Operating Cash Flow",
            "Net Income + Depreciation - Change in AR + Change in AP",
            df["Net Income"] + df["Depreciation"] - df["Change in AR"] + df["Change in AP"],
        ),
        ("Investing cash flow identity", "Investing Cash Flow", "-Capex", -df["Capex"]),
        (
            "Net cash flow identity",
            "Net Cash Flow",
            "Operating Cash Flow + Investing Cash Flow",
            df["Operating Cash Flow"] + df["Investing Cash Flow"],
        ),
        ("Net PP&E identity", "Net PP&E", "Cumulative Capex - Accumulated Depreciation", df["Cumulative Capex"] - df["Accumulated Depreciation"]),
        ("Liabilities identity", "Total Liabilities", "AP Balance", df["AP Balance"]),
        (
            "Balance sheet identity",
            "Total Assets",
            "Total Liabilities + Total Equity",
            df["Total Liabilities"] + df["Total Equity"],
        ),
    ]
    for check_name, lhs_col, rhs_name, rhs in identities:
        _check_series_identity(findings, df, check_name, lhs_col, rhs_name, df[lhs_col].to_numpy(), rhs.to_numpy(), tol)
    _check_non_negative(findings, df, "Tax", tol)


def check_seed(seed: dict, tol: float = 1e-3) -> list[dict[str, Any]]:
    """Year-0 balance sheet must balance like every monthly row."""
    delta = float(seed["Total Assets"]) - (float(seed["Total Liabilities"]) + float(seed["Total Equity"]))
    if abs(delta) > tol:
        return [_finding("Seed balance sheet identity", abs(delta), "0", "Total Assets", "Total Liabilities + Total Equity")]
    return []


def run_integrity_checks(df: pd.DataFrame, assumptions: dict | None = None, tol: float = 1e-3) -> list[dict[str, Any]]:
    """Return integrity findings (empty list means all checks passed)."""
    if not isinstance(df, pd.DataFrame) or df.empty:
        return [{"Check": "Dataframe not available", "Max Abs Delta": np.nan, "Month of Max Delta": "", "LHS": "", "RHS": ""}]

    assumptions = assumptions or {}
    findings: list[dict[str, Any]] = []
    starting_balance = df.attrs.get("starting_balance", float(df["Opening Balance"].iloc[0]))
    _check_cash_chain(findings, df, starting_balance, tol)

    if "Total Assets" in df.columns:
        _financial_model_checks(findings, df, tol)
    else:
        _cash_flow_checks(findings, df, assumptions, tol)
    return findings
