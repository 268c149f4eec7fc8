"""Running balance-sheet state for the integrated financial model."""

from __future__ import annotations

from dataclasses import dataclass

from founder_finance.stepper import PeriodEconomics
from founder_finance.timing import TimingStep


BALANCE_TOLERANCE = 1e-6


class BalanceSheetImbalanceError(RuntimeError):
    """Raised when total assets differ from total liabilities plus equity."""

    def __init__(self, period: int, delta: float):
        self.period = int(period)
        self.delta = float(delta)
        super().__init__(f"Balance sheet out of balance in period {self.period} by {self.delta:,.6f}.")


@dataclass(frozen=True)
class BalanceState:
    period: int
    cash: float
    receivables: float
    payables: float
    cumulative_capex: float
    accumulated_depreciation: float
    retained_earnings: float
    paid_in_capital: float

    @property
    def net_fixed_assets(self) -> float:
        return self.cumulative_capex - self.accumulated_depreciation

    @property
    def total_assets(self) -> float:
        return self.cash + self.receivables + self.net_fixed_assets

    @property
    def total_liabilities(self) -> float:
        # No long-term debt in this model.
        return self.payables

    @property
    def total_equity(self) -> float:
        return self.paid_in_capital + self.retained_earnings

    @property
    def imbalance(self) -> float:
        return self.total_assets - (self.total_liabilities + self.total_equity)


@dataclass(frozen=True)
class CashFlowLines:
    change_in_receivables: float
    change_in_payables: float
    operating_cash_flow: float
    investing_cash_flow: float
    net_cash_flow: float


def seed_state(starting_cash: float) -> BalanceState:
    """Year-0 snapshot: starting cash funded entirely by paid-in capital."""
    return BalanceState(
        period=0,
        cash=float(starting_cash),
        receivables=0.0,
        payables=0.0,
        cumulative_capex=0.0,
        accumulated_depreciation=0.0,
        retained_earnings=0.0,
        paid_in_capital=float(starting_cash),
    )


def accumulate(
    previous: BalanceState,
    economics: PeriodEconomics,
    receivable: TimingStep,
    payable: TimingStep,
) -> tuple[BalanceState, CashFlowLines]:
    """Roll the balance sheet forward one month using the indirect cash flow method."""
    delta_ar = receivable.ending_balance - previous.receivables
    delta_ap = payable.ending_balance - previous.payables
    operating_cf = economics.net_income + economics.depreciation - delta_ar + delta_ap
    investing_cf = -economics.capex
    net_cf = operating_cf + investing_cf

    state = BalanceState(
        period=economics.month,
        cash=previous.cash + net_cf,
        receivables=receivable.ending_balance,
        payables=payable.ending_balance,
        cumulative_capex=economics.cumulative_capex,
        accumulated_depreciation=previous.accumulated_depreciation + economics.depreciation,
        retained_earnings=previous.retained_earnings + economics.net_income,
        paid_in_capital=previous.paid_in_capital,
    )
    lines = CashFlowLines(
        change_in_receivables=delta_ar,
        change_in_payables=delta_ap,
        operating_cash_flow=operating_cf,
        investing_cash_flow=investing_cf,
        net_cash_flow=net_cf,
    )
    return state, lines


def assert_balanced(state: BalanceState, tol: float = BALANCE_TOLERANCE) -> None:
    # Scale tolerance with the size of the balance sheet to absorb float rounding.
    scale = max(1.0, abs(state.total_assets))
    if abs(state.imbalance) > tol * scale:
        raise BalanceSheetImbalanceError(state.period, state.imbalance)
