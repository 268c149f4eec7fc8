"""Input sanitization helpers and month labeling."""

from __future__ import annotations

import math
from copy import deepcopy
from typing import Any

import pandas as pd

from founder_finance.defaults import CASH_FLOW_DEFAULTS, FINANCIAL_MODEL_DEFAULTS, FORECAST_MONTHS


MONTH_ABBREVIATIONS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

CASH_FLOW_MODEL = "cash_flow"
FINANCIAL_MODEL = "financial_model"


def month_labels(start_month: int, count: int) -> list[str]:
    """Calendar labels for ``count`` consecutive periods starting at ``start_month`` (1-12)."""
    offset = int(start_month) - 1
    return [MONTH_ABBREVIATIONS[(offset + i) % 12] for i in range(int(count))]


def _to_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        out = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(out) or math.isinf(out):
        return None
    return out


def sanitize_one_time_income(raw: Any, warnings: list[str]) -> list[float]:
    """Coerce a one-time income entry list to exactly 12 floats, non-numeric values as zero."""
    if raw is None:
        return [0.0] * FORECAST_MONTHS
    if isinstance(raw, pd.Series):
        records = raw.tolist()
    elif isinstance(raw, (list, tuple)):
        records = list(raw)
    else:
        warnings.append("monthly_one_time_income ignored because it is not a list.")
        return [0.0] * FORECAST_MONTHS

    values: list[float] = []
    for idx, item in enumerate(records[:FORECAST_MONTHS]):
        v = _to_float(item)
        if v is None:
            if item not in (None, ""):
                warnings.append(f"monthly_one_time_income[{idx}] is not numeric and was treated as 0.")
            v = 0.0
        values.append(v)
    if len(records) > FORECAST_MONTHS:
        warnings.append(f"monthly_one_time_income truncated to {FORECAST_MONTHS} months.")
    if len(values) < FORECAST_MONTHS:
        values.extend([0.0] * (FORECAST_MONTHS - len(values)))
    return values


def _sanitize(raw_inputs: Any, defaults: dict) -> tuple[dict, list[str], list[str]]:
    warnings: list[str] = []
    unknown_keys: list[str] = []
    inputs = deepcopy(defaults)
    payload = raw_inputs if isinstance(raw_inputs, dict) else {}

    for k, v in payload.items():
        if k not in inputs:
            unknown_keys.append(k)
            continue
        if k == "monthly_one_time_income":
            inputs[k] = sanitize_one_time_income(v, warnings)
            continue
        num = _to_float(v)
        if num is None:
            warnings.append(f"{k} is not numeric; default {defaults[k]} used.")
            continue
        inputs[k] = int(num) if k == "start_month" else num

    if not 1 <= int(inputs["start_month"]) <= 12:
        warnings.append("start_month outside 1-12; January used.")
        inputs["start_month"] = 1
    return inputs, warnings, unknown_keys


def sanitize_cash_flow_inputs(raw_inputs: Any) -> tuple[dict, list[str], list[str]]:
    """Return (inputs, warnings, unknown_keys) for the 12-month cash flow forecast."""
    return _sanitize(raw_inputs, CASH_FLOW_DEFAULTS)


def sanitize_financial_model_inputs(raw_inputs: Any) -> tuple[dict, list[str], list[str]]:
    """Return (inputs, warnings, unknown_keys) for the 36-month financial model."""
    return _sanitize(raw_inputs, FINANCIAL_MODEL_DEFAULTS)
