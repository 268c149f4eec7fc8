from __future__ import annotations

import pandas as pd

from founder_finance.cash_flow import run_cash_flow_forecast
from founder_finance.financial_model import run_financial_model
from founder_finance.integrity_checks import check_seed, run_integrity_checks


def test_cash_flow_forecast_passes_integrity_checks(cash_flow_inputs):
    df = run_cash_flow_forecast(cash_flow_inputs)
    assert run_integrity_checks(df, cash_flow_inputs) == []


def test_financial_model_passes_integrity_checks(financial_model_inputs):
    result = run_financial_model(financial_model_inputs)
    assert run_integrity_checks(result.monthly, financial_model_inputs) == []
    assert check_seed(result.seed) == []


def test_broken_closing_balance_is_reported(cash_flow_inputs):
    df = run_cash_flow_forecast(cash_flow_inputs)
    df.loc[4, "Closing Balance"] += 1_000.0

    findings = run_integrity_checks(df, cash_flow_inputs)
    by_check = {f["Check"]: f for f in findings}
    assert "Cash roll-forward" in by_check
    assert by_check["Cash roll-forward"]["Month of Max Delta"] == "5"
    assert by_check["Cash roll-forward"]["Max Abs Delta"] == 1_000.0
    assert "Opening balance chaining" in by_check


def test_receivable_balance_mismatch_is_reported(cash_flow_inputs):
    df = run_cash_flow_forecast(cash_flow_inputs)
    df.loc[0, "AR Balance"] = 0.0

    checks = [f["Check"] for f in run_integrity_checks(df, cash_flow_inputs)]
    assert checks == ["Receivable balance"]


def test_balance_sheet_break_is_reported(financial_model_inputs):
    df = run_financial_model(financial_model_inputs).monthly
    df.loc[10, "Total Assets"] += 50.0

    checks = [f["Check"] for f in run_integrity_checks(df)]
    assert "Balance sheet identity" in checks


def test_negative_tax_is_reported(financial_model_inputs):
    df = run_financial_model(financial_model_inputs).monthly
    df.loc[2, "Tax"] = -10.0
    df.loc[2, "Net Income"] = df.loc[2, "EBIT"] + 10.0

    checks = [f["Check"] for f in run_integrity_checks(df)]
    assert "Tax non-negative" in checks


def test_unbalanced_seed_is_reported():
    seed = {"Total Assets": 100.0, "Total Liabilities": 0.0, "Total Equity": 90.0}
    findings = check_seed(seed)
    assert findings[0]["Check"] == "Seed balance sheet identity"
    assert findings[0]["Max Abs Delta"] == 10.0


def test_empty_frame_yields_single_finding():
    findings = run_integrity_checks(pd.DataFrame())
    assert findings[0]["Check"] == "Dataframe not available"
