"""Accrual-to-cash timing conversion through receivable/payable balances.

A days-outstanding parameter is turned into a ratio of "months of accrual
still outstanding" at period end:

    ending_balance = ratio * accrual
    cash           = max(0, beginning_balance + accrual - ending_balance)

The same fold serves receivables (DSO, cash inflow) and payables (DPO, cash
outflow). With ``steady_state=True`` the period-1 beginning balance is seeded
as ``ratio * accruals[0]`` so a constant accrual stream yields constant cash
from the first period on.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import numpy as np


DAYS_PER_MONTH = 30.0
MAX_OUTSTANDING_MONTHS = 12.0


@dataclass(frozen=True)
class TimingStep:
    accrual: float
    beginning_balance: float
    ending_balance: float
    cash: float

    @property
    def change_in_balance(self) -> float:
        return self.ending_balance - self.beginning_balance


def days_to_ratio(days: float) -> float:
    """Convert days outstanding into months of accrual held as a balance, capped at 12."""
    return min(max(float(days), 0.0) / DAYS_PER_MONTH, MAX_OUTSTANDING_MONTHS)


def advance(beginning_balance: float, accrual: float, ratio: float) -> TimingStep:
    ending = ratio * accrual
    cash = max(0.0, beginning_balance + accrual - ending)
    return TimingStep(
        accrual=float(accrual),
        beginning_balance=float(beginning_balance),
        ending_balance=float(ending),
        cash=float(cash),
    )


def convert_timing(
    accruals: Iterable[float],
    days: float,
    steady_state: bool = True,
    opening_balance: float | None = None,
) -> list[TimingStep]:
    amounts = [float(a) for a in accruals]
    if not amounts:
        return []
    ratio = days_to_ratio(days)

    if opening_balance is not None:
        balance = float(opening_balance)
    elif steady_state:
        balance = ratio * amounts[0]
    else:
        balance = 0.0

    steps: list[TimingStep] = []
    for amount in amounts:
        step = advance(balance, amount, ratio)
        steps.append(step)
        balance = step.ending_balance
    return steps


def balances(steps: list[TimingStep]) -> np.ndarray:
    return np.array([s.ending_balance for s in steps], dtype=float)


def cash_movements(steps: list[TimingStep]) -> np.ndarray:
    return np.array([s.cash for s in steps], dtype=float)
