"""Delimited text exports for projections."""

from __future__ import annotations

import io
from datetime import datetime, timezone
from typing import Any

import pandas as pd


CASH_FLOW_EXPORT_COLUMNS = [
    ("Month", "Month_Label"),
    ("Opening Balance", "Opening Balance"),
    ("Revenue (Accrual)", "Revenue"),
    ("Cash Inflow", "Cash Inflow"),
    ("Total Expenses (Accrual)", "Total Expenses"),
    ("Cash Outflow", "Cash Outflow"),
    ("Net Cash Flow", "Net Cash Flow"),
    ("Closing Balance", "Closing Balance"),
    ("Accounts Receivable", "AR Balance"),
    ("Accounts Payable", "AP Balance"),
    ("Fixed Costs", "Fixed Costs"),
    ("Variable Costs", "Variable Costs"),
]

PNL_LINES = [
    ("Revenue", "Revenue"),
    ("COGS", "COGS"),
    ("Gross Profit", "Gross Profit"),
    ("Gross Margin %", "Gross Margin %"),
    ("Fixed OpEx", "Fixed OPEX"),
    ("Variable OpEx", "Variable OPEX"),
    ("Total OpEx", "Total OPEX"),
    ("EBITDA", "EBITDA"),
    ("Depreciation", "Depreciation"),
    ("EBIT", "EBIT"),
    ("Tax", "Tax"),
    ("Net Income", "Net Income"),
    ("Net Margin %", "Net Margin %"),
]

BALANCE_SHEET_LINES = [
    ("Cash", "Closing Balance"),
    ("Accounts Receivable", "AR Balance"),
    ("Net PP&E", "Net PP&E"),
    ("Total Assets", "Total Assets"),
    ("Accounts Payable", "AP Balance"),
    ("Total Liabilities", "Total Liabilities"),
    ("Retained Earnings", "Retained Earnings"),
    ("Total Equity", "Total Equity"),
]

CASH_FLOW_STATEMENT_LINES = [
    ("Operating Cash Flow", "Operating Cash Flow"),
    ("Investing Cash Flow", "Investing Cash Flow"),
    ("Net Cash Flow", "Net Cash Flow"),
    ("Ending Cash", "Closing Balance"),
]


def _fmt(value: Any) -> str:
    return f"{float(value):.2f}"


def _utc_iso_now() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def header_block(title: str, context: dict | None = None, generated_at: str | None = None) -> list[str]:
    lines = [f"# {title}", f"# Generated: {generated_at or _utc_iso_now()}"]
    for key, value in (context or {}).items():
        lines.append(f"# {key}: {value}")
    lines.append("")
    return lines


def _table_csv(table: pd.DataFrame) -> str:
    buf = io.StringIO()
    table.to_csv(buf, index=False, lineterminator="\n")
    return buf.getvalue().rstrip("\n")


def export_monthly_csv(
    df: pd.DataFrame,
    columns: list[tuple[str, str]],
    title: str,
    context: dict | None = None,
    generated_at: str | None = None,
) -> str:
    """Header block, column header row, one row per period; numbers at two decimals."""
    present = [(label, col) for label, col in columns if col in df.columns]
    table = pd.DataFrame(
        {
            label: df[col].map(_fmt) if pd.api.types.is_numeric_dtype(df[col]) else df[col].astype(str)
            for label, col in present
        }
    )
    lines = header_block(title, context, generated_at)
    lines.append(_table_csv(table))
    return "\n".join(lines)


def export_cash_flow_csv(
    df: pd.DataFrame,
    title: str = "12-Month Cash Flow Forecast",
    context: dict | None = None,
    generated_at: str | None = None,
) -> str:
    return export_monthly_csv(df, CASH_FLOW_EXPORT_COLUMNS, title, context, generated_at)


def _statement_rows(heading: str, periods: list[str], lines: list[tuple[str, str]], frame: pd.DataFrame) -> list[list[str]]:
    rows = [[heading, ""] + periods]
    for label, col in lines:
        suffix = "%" if label.endswith("%") else ""
        rows.append([label, ""] + [f"{_fmt(v)}{suffix}" for v in frame[col].tolist()])
    return rows


def export_financial_model_csv(
    result,
    title: str = "3-Year Financial Model",
    context: dict | None = None,
    generated_at: str | None = None,
) -> str:
    """Three statements by year; the balance sheet includes the Year-0 seed column."""
    annual = result.annual
    year_labels = [f"Year {int(y)}" for y in annual["Year"]]
    with_seed = pd.concat([pd.DataFrame([result.seed]), annual], ignore_index=True)

    sections = [
        _statement_rows("PROFIT & LOSS", year_labels, PNL_LINES, annual),
        _statement_rows("BALANCE SHEET", ["Year 0"] + year_labels, BALANCE_SHEET_LINES, with_seed),
        _statement_rows("CASH FLOW STATEMENT", year_labels, CASH_FLOW_STATEMENT_LINES, annual),
    ]

    lines = header_block(title, context, generated_at)
    for idx, rows in enumerate(sections):
        if idx:
            lines.append("")
        lines.extend(",".join(row) for row in rows)
    return "\n".join(lines)
