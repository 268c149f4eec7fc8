"""Roll monthly projection rows into yearly rows."""

from __future__ import annotations

import pandas as pd

from founder_finance.defaults import MONTHS_PER_YEAR


def _safe_pct(numerator: float, denominator: float) -> float:
    return float(100.0 * numerator / denominator) if denominator > 0 else 0.0


def aggregate_annual(
    monthly: pd.DataFrame,
    flow_columns: list[str],
    stock_columns: list[str],
    months_per_year: int = MONTHS_PER_YEAR,
) -> pd.DataFrame:
    """Sum flow columns and take stock columns from the last month of each block.

    Balance-sheet stocks are point-in-time snapshots and are never summed.
    Margins are recomputed from summed values rather than averaged month by month.
    """
    if len(monthly) % months_per_year != 0:
        raise ValueError(f"Monthly rows ({len(monthly)}) do not divide into {months_per_year}-month years.")

    missing = [c for c in flow_columns + stock_columns if c not in monthly.columns]
    if missing:
        raise ValueError(f"Monthly frame is missing columns: {', '.join(missing)}.")

    block = pd.Series(range(len(monthly)), index=monthly.index) // months_per_year + 1
    grouped = monthly.groupby(block.to_numpy(), sort=True)
    flows = grouped[flow_columns].sum()
    stocks = grouped[stock_columns].last()

    annual = pd.concat([flows, stocks], axis=1)
    annual.insert(0, "Year", annual.index.astype(int))
    annual = annual.reset_index(drop=True)

    if "Revenue" in annual.columns:
        if "Gross Profit" in annual.columns:
            annual["Gross Margin %"] = [
                _safe_pct(gp, rev) for gp, rev in zip(annual["Gross Profit"], annual["Revenue"])
            ]
        if "Net Income" in annual.columns:
            annual["Net Margin %"] = [
                _safe_pct(ni, rev) for ni, rev in zip(annual["Net Income"], annual["Revenue"])
            ]
    return annual
