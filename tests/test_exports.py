from __future__ import annotations

from founder_finance.cash_flow import run_cash_flow_forecast
from founder_finance.exports import export_cash_flow_csv, export_financial_model_csv, header_block
from founder_finance.financial_model import run_financial_model


GENERATED_AT = "2026-01-01T00:00:00+00:00"


def test_header_block_lists_context_then_blank_line():
    lines = header_block("Report", {"Scenario": "Base"}, generated_at=GENERATED_AT)
    assert lines == ["# Report", f"# Generated: {GENERATED_AT}", "# Scenario: Base", ""]


def test_cash_flow_export_layout(cash_flow_inputs):
    df = run_cash_flow_forecast(cash_flow_inputs)
    text = export_cash_flow_csv(df, context={"Starting Balance": "3000000"}, generated_at=GENERATED_AT)
    lines = text.split("\n")

    assert lines[0] == "# 12-Month Cash Flow Forecast"
    assert lines[1] == f"# Generated: {GENERATED_AT}"
    assert lines[2] == "# Starting Balance: 3000000"
    assert lines[3] == ""
    assert lines[4] == (
        "Month,Opening Balance,Revenue (Accrual),Cash Inflow,Total Expenses (Accrual),Cash Outflow,"
        "Net Cash Flow,Closing Balance,Accounts Receivable,Accounts Payable,Fixed Costs,Variable Costs"
    )
    assert lines[5] == (
        "Jan,3000000.00,500000.00,500000.00,500000.00,500000.00,0.00,3000000.00,500000.00,250000.00,400000.00,100000.00"
    )
    assert lines[-1].startswith("Dec,")
    assert len(lines) == 17


def test_cash_flow_export_has_no_header_noise_without_context(cash_flow_inputs):
    df = run_cash_flow_forecast(cash_flow_inputs)
    lines = export_cash_flow_csv(df, generated_at=GENERATED_AT).split("\n")
    assert lines[2] == ""
    assert len(lines) == 16


def test_financial_model_export_sections(financial_model_inputs):
    result = run_financial_model(financial_model_inputs)
    lines = export_financial_model_csv(result, generated_at=GENERATED_AT).split("\n")

    assert lines[0] == "# 3-Year Financial Model"
    assert "PROFIT & LOSS,,Year 1,Year 2,Year 3" in lines
    assert "BALANCE SHEET,,Year 0,Year 1,Year 2,Year 3" in lines
    assert "CASH FLOW STATEMENT,,Year 1,Year 2,Year 3" in lines
    assert "Gross Margin %,,70.00%,70.00%,70.00%" in lines

    cash_row = next(line for line in lines if line.startswith("Cash,"))
    assert cash_row.split(",")[2] == "2000000.00"

    pnl_at = lines.index("PROFIT & LOSS,,Year 1,Year 2,Year 3")
    bs_at = lines.index("BALANCE SHEET,,Year 0,Year 1,Year 2,Year 3")
    assert lines[bs_at - 1] == ""
    assert bs_at > pnl_at
