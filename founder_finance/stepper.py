"""Accrual-basis economics for a single simulated month."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from founder_finance.defaults import MONTHS_PER_YEAR


@dataclass(frozen=True)
class PeriodEconomics:
    month: int
    revenue: float
    cogs: float
    gross_profit: float
    fixed_opex: float
    variable_opex: float
    total_opex: float
    ebitda: float
    capex: float
    cumulative_capex: float
    depreciation: float
    ebit: float
    tax: float
    net_income: float

    @property
    def cash_costs(self) -> float:
        """Costs settled through payables (COGS plus operating expenses)."""
        return self.cogs + self.total_opex


def compound_revenue(starting_revenue: float, growth_rate_pct: float, month: int) -> float:
    return float(starting_revenue) * (1 + float(growth_rate_pct) / 100) ** (int(month) - 1)


def is_capex_month(month: int) -> bool:
    # Annual capex lands as a lump sum in the first month of each 12-month block.
    return (int(month) - 1) % MONTHS_PER_YEAR == 0


def monthly_depreciation(cumulative_capex: float, depreciation_years: float) -> float:
    if cumulative_capex <= 0 or depreciation_years <= 0:
        return 0.0
    return float(cumulative_capex) / (float(depreciation_years) * MONTHS_PER_YEAR)


def step_period(month: int, assumptions: Dict, cumulative_capex: float) -> PeriodEconomics:
    """Compute month ``month`` given cumulative capex carried from the prior month."""
    revenue = compound_revenue(assumptions["starting_revenue"], assumptions["monthly_growth_rate"], month)
    cogs = revenue * float(assumptions["cogs_percent"]) / 100
    gross_profit = revenue - cogs
    fixed_opex = float(assumptions["fixed_opex"])
    variable_opex = revenue * float(assumptions["variable_opex_percent"]) / 100
    total_opex = fixed_opex + variable_opex
    ebitda = gross_profit - total_opex

    capex = float(assumptions["annual_capex"]) if is_capex_month(month) else 0.0
    cumulative = float(cumulative_capex) + capex
    depreciation = monthly_depreciation(cumulative, float(assumptions["depreciation_years"]))

    ebit = ebitda - depreciation
    # No loss carry-forward: losses produce zero tax, never a credit.
    tax = max(0.0, ebit) * float(assumptions["tax_rate"]) / 100
    net_income = ebit - tax

    return PeriodEconomics(
        month=int(month),
        revenue=revenue,
        cogs=cogs,
        gross_profit=gross_profit,
        fixed_opex=fixed_opex,
        variable_opex=variable_opex,
        total_opex=total_opex,
        ebitda=ebitda,
        capex=capex,
        cumulative_capex=cumulative,
        depreciation=depreciation,
        ebit=ebit,
        tax=tax,
        net_income=net_income,
    )


def forecast_revenue(recurring_revenue: float, one_time_income: list[float]) -> list[float]:
    """Flat recurring revenue plus each month's one-time addend."""
    return [float(recurring_revenue) + float(extra) for extra in one_time_income]


def forecast_expenses(revenue: list[float], fixed_costs: float, variable_cost_percent: float) -> tuple[list[float], list[float]]:
    variable = [r * float(variable_cost_percent) / 100 for r in revenue]
    total = [float(fixed_costs) + v for v in variable]
    return variable, total
