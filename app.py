import json
from copy import deepcopy

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from founder_finance.cash_flow import run_cash_flow_forecast
from founder_finance.defaults import CASH_FLOW_DEFAULTS, FINANCIAL_MODEL_DEFAULTS, FORECAST_MONTHS
from founder_finance.exports import export_cash_flow_csv, export_financial_model_csv
from founder_finance.financial_model import run_financial_model
from founder_finance.input_metadata import advisory_warnings, economics_warnings, help_with_guidance
from founder_finance.integrity_checks import check_seed, run_integrity_checks
from founder_finance.metrics import compute_cash_flow_summary
from founder_finance.runtime_logging import (
    append_runtime_event,
    install_global_exception_logging,
    log_model_run,
    read_runtime_events,
    runtime_log_path,
)
from founder_finance.schema import (
    CASH_FLOW_MODEL,
    FINANCIAL_MODEL,
    MONTH_ABBREVIATIONS,
    month_labels,
    sanitize_cash_flow_inputs,
    sanitize_financial_model_inputs,
)
from founder_finance.sensitivity import TARGET_OPTIONS, apply_percentage_shift, run_one_way_sensitivity


install_global_exception_logging()

st.set_page_config(page_title="Founder Finance Projections", layout="wide")


UI_DEFAULTS = {
    "cf_revenue_shift_pct": 0.0,
    "cf_cost_shift_pct": 0.0,
    "fm_revenue_shift_pct": 0.0,
    "fm_cost_shift_pct": 0.0,
    "sensitivity_delta": 0.1,
}

for _key, _value in UI_DEFAULTS.items():
    st.session_state.setdefault(_key, _value)


def _serialize_assumptions(assumptions: dict) -> str:
    return json.dumps(assumptions, sort_keys=True, separators=(",", ":"))


@st.cache_data(show_spinner=False)
def _run_cash_flow_cached(assumptions_json: str) -> pd.DataFrame:
    return run_cash_flow_forecast(json.loads(assumptions_json))


@st.cache_data(show_spinner=False)
def _run_financial_model_cached(assumptions_json: str):
    return run_financial_model(json.loads(assumptions_json))


@st.cache_data(show_spinner=False)
def _run_sensitivity_cached(assumptions_json: str, delta: float, model: str) -> pd.DataFrame:
    return run_one_way_sensitivity(json.loads(assumptions_json), delta, model=model)


def _format_currency_value(x: float) -> str:
    if x < 0:
        return f"-{abs(x):,.0f}"
    return f"{x:,.0f}"


def _format_dataframe_for_display(df: pd.DataFrame) -> pd.DataFrame:
    out = df.copy()
    for col in out.columns:
        if col in {"Year", "Month_Number"} or not pd.api.types.is_numeric_dtype(out[col]):
            continue
        if "%" in str(col):
            out[col] = out[col].map(lambda v: "" if pd.isna(v) else f"{float(v):,.2f}%")
        else:
            out[col] = out[col].map(lambda v: "" if pd.isna(v) else _format_currency_value(float(v)))
    return out


def _show_warnings(warnings: list[str]) -> None:
    if not warnings:
        return
    with st.expander(f"[!] Input Warnings ({len(warnings)})", expanded=False):
        st.caption("Calculations continue using sanitized values where necessary.")
        for warning in warnings:
            st.write(f"- {warning}")


def _show_findings(findings: list[dict]) -> None:
    if findings:
        st.error(f"{len(findings)} integrity check(s) failed.")
        st.dataframe(pd.DataFrame(findings), width="stretch", hide_index=True)
    else:
        st.caption("All roll-forward and accounting identity checks passed.")


def _cash_flow_inputs() -> tuple[dict, list[str]]:
    d = CASH_FLOW_DEFAULTS
    st.sidebar.header("Cash Flow Forecast")
    raw = {
        "monthly_recurring_revenue": st.sidebar.number_input(
            "Monthly Recurring Revenue", min_value=0.0, value=d["monthly_recurring_revenue"], step=10_000.0, key="cf_mrr"
        ),
        "fixed_costs": st.sidebar.number_input(
            "Fixed Costs per Month", min_value=0.0, value=d["fixed_costs"], step=10_000.0, key="cf_fixed"
        ),
        "variable_cost_percent": st.sidebar.number_input(
            "Variable Costs (% of revenue)",
            min_value=0.0,
            value=d["variable_cost_percent"],
            step=1.0,
            key="cf_variable_pct",
            help=help_with_guidance("variable_cost_percent", "Costs that scale with revenue."),
        ),
        "payment_terms_days": st.sidebar.number_input(
            "Customer Payment Terms (DSO days)",
            min_value=0.0,
            value=d["payment_terms_days"],
            step=5.0,
            key="cf_dso",
            help=help_with_guidance("payment_terms_days", "Days between invoicing and collecting cash."),
        ),
        "payable_terms_days": st.sidebar.number_input(
            "Supplier Payment Terms (DPO days)",
            min_value=0.0,
            value=d["payable_terms_days"],
            step=5.0,
            key="cf_dpo",
            help=help_with_guidance("payable_terms_days", "Days between receiving a bill and paying it."),
        ),
        "starting_balance": st.sidebar.number_input(
            "Starting Cash Balance", value=d["starting_balance"], step=100_000.0, key="cf_start_balance"
        ),
        "start_month": MONTH_ABBREVIATIONS.index(
            st.sidebar.selectbox("First Month", options=MONTH_ABBREVIATIONS, key="cf_start_month")
        )
        + 1,
    }

    st.sidebar.caption("One-time income by month")
    one_time_df = st.sidebar.data_editor(
        pd.DataFrame({"Month": month_labels(raw["start_month"], FORECAST_MONTHS), "Amount": d["monthly_one_time_income"]}),
        hide_index=True,
        disabled=["Month"],
        key="cf_one_time_income",
    )
    raw["monthly_one_time_income"] = one_time_df["Amount"].tolist()

    inputs, warnings, _ = sanitize_cash_flow_inputs(raw)
    return inputs, warnings


def _financial_model_inputs() -> tuple[dict, list[str]]:
    d = FINANCIAL_MODEL_DEFAULTS
    st.sidebar.header("Financial Model")
    raw = {
        "starting_revenue": st.sidebar.number_input(
            "Starting Monthly Revenue", min_value=0.0, value=d["starting_revenue"], step=10_000.0, key="fm_revenue"
        ),
        "monthly_growth_rate": st.sidebar.number_input(
            "Monthly Growth Rate (%)",
            value=d["monthly_growth_rate"],
            step=0.5,
            key="fm_growth",
            help=help_with_guidance("monthly_growth_rate", "Compound month-over-month revenue growth."),
        ),
        "cogs_percent": st.sidebar.number_input(
            "COGS (% of revenue)", min_value=0.0, value=d["cogs_percent"], step=1.0, key="fm_cogs",
            help=help_with_guidance("cogs_percent", "Direct cost of delivering the product."),
        ),
        "fixed_opex": st.sidebar.number_input(
            "Fixed OpEx per Month", min_value=0.0, value=d["fixed_opex"], step=10_000.0, key="fm_fixed_opex"
        ),
        "variable_opex_percent": st.sidebar.number_input(
            "Variable OpEx (% of revenue)", min_value=0.0, value=d["variable_opex_percent"], step=1.0, key="fm_variable_opex",
            help=help_with_guidance("variable_opex_percent", "Operating costs that scale with revenue."),
        ),
        "starting_cash": st.sidebar.number_input(
            "Starting Cash", value=d["starting_cash"], step=100_000.0, key="fm_starting_cash"
        ),
        "dso": st.sidebar.number_input("DSO (days)", min_value=0.0, value=d["dso"], step=5.0, key="fm_dso"),
        "dpo": st.sidebar.number_input("DPO (days)", min_value=0.0, value=d["dpo"], step=5.0, key="fm_dpo"),
        "tax_rate": st.sidebar.number_input(
            "Tax Rate (%)", min_value=0.0, max_value=100.0, value=d["tax_rate"], step=1.0, key="fm_tax",
            help=help_with_guidance("tax_rate", "Applied to positive pre-tax profit; losses earn no credit."),
        ),
        "annual_capex": st.sidebar.number_input(
            "Annual CapEx", min_value=0.0, value=d["annual_capex"], step=50_000.0, key="fm_capex"
        ),
        "depreciation_years": st.sidebar.number_input(
            "Depreciation Life (years)", min_value=0.0, value=d["depreciation_years"], step=1.0, key="fm_dep_years"
        ),
        "start_month": MONTH_ABBREVIATIONS.index(
            st.sidebar.selectbox("Model Start Month", options=MONTH_ABBREVIATIONS, key="fm_start_month")
        )
        + 1,
    }
    inputs, warnings, _ = sanitize_financial_model_inputs(raw)
    return inputs, warnings


def _run_or_stop(runner, inputs: dict, model: str):
    try:
        return runner(_serialize_assumptions(inputs))
    except ValueError as exc:
        append_runtime_event(
            level="WARNING",
            event="model_validation_failed",
            message="Inputs rejected before simulation.",
            context={"error": str(exc)},
            exc=exc,
            model=model,
        )
        st.error(f"Input validation error: {exc}")
        st.stop()


def _what_if_controls(prefix: str) -> tuple[float, float]:
    c1, c2 = st.columns(2)
    revenue_shift = c1.slider("Revenue shift", -0.5, 0.5, step=0.05, key=f"{prefix}_revenue_shift_pct")
    cost_shift = c2.slider("Cost shift", -0.5, 0.5, step=0.05, key=f"{prefix}_cost_shift_pct")
    return revenue_shift, cost_shift


cf_base_inputs, cf_warnings = _cash_flow_inputs()
fm_base_inputs, fm_warnings = _financial_model_inputs()

st.title("Founder Finance Projections")
cash_flow_tab, model_tab, diagnostics_tab = st.tabs(["Cash Flow Forecast", "Financial Model", "Diagnostics"])

with cash_flow_tab:
    revenue_shift, cost_shift = _what_if_controls("cf")
    cf_inputs = apply_percentage_shift(cf_base_inputs, revenue_shift, cost_shift, CASH_FLOW_MODEL)
    warnings = cf_warnings + advisory_warnings(cf_inputs) + economics_warnings(cf_inputs, CASH_FLOW_MODEL)
    _show_warnings(warnings)

    cf_df = _run_or_stop(_run_cash_flow_cached, cf_inputs, CASH_FLOW_MODEL)
    cf_summary = compute_cash_flow_summary(cf_df)
    cf_findings = run_integrity_checks(cf_df, cf_inputs)
    log_model_run(CASH_FLOW_MODEL, warnings, cf_findings, summary=cf_summary)

    m1, m2, m3, m4 = st.columns(4)
    m1.metric("Final Balance", _format_currency_value(cf_summary["final_balance"]))
    m2.metric("Lowest Balance", _format_currency_value(cf_summary["lowest_balance"]))
    m3.metric("Cash Conversion Cycle", f"{cf_summary['cash_conversion_cycle']:,.0f} days")
    m4.metric("Working Capital Tied Up", _format_currency_value(cf_summary["working_capital_impact"]))
    if cf_summary["negative_balance_months"]:
        st.warning(f"Cash balance is negative in {cf_summary['negative_balance_months']} month(s).")

    fig = go.Figure()
    fig.add_trace(go.Bar(x=cf_df["Month_Label"], y=cf_df["Cash Inflow"], name="Cash Inflow"))
    fig.add_trace(go.Bar(x=cf_df["Month_Label"], y=-cf_df["Cash Outflow"], name="Cash Outflow"))
    fig.add_trace(go.Scatter(x=cf_df["Month_Label"], y=cf_df["Closing Balance"], name="Closing Balance", yaxis="y2"))
    fig.update_layout(
        title="Monthly Cash Movement", barmode="relative", yaxis2=dict(overlaying="y", side="right")
    )
    st.plotly_chart(fig, width="stretch")

    st.dataframe(_format_dataframe_for_display(cf_df), width="stretch", hide_index=True)
    st.download_button(
        "Download Cash Flow CSV",
        data=export_cash_flow_csv(cf_df, context={"Starting balance": f"{cf_inputs['starting_balance']:.2f}"}),
        file_name="cash_flow_forecast.csv",
        mime="text/csv",
    )
    _show_findings(cf_findings)

with model_tab:
    revenue_shift, cost_shift = _what_if_controls("fm")
    fm_inputs = apply_percentage_shift(fm_base_inputs, revenue_shift, cost_shift, FINANCIAL_MODEL)
    warnings = fm_warnings + advisory_warnings(fm_inputs) + economics_warnings(fm_inputs, FINANCIAL_MODEL)
    _show_warnings(warnings)

    result = _run_or_stop(_run_financial_model_cached, fm_inputs, FINANCIAL_MODEL)
    fm_findings = run_integrity_checks(result.monthly, fm_inputs) + check_seed(result.seed)
    log_model_run(FINANCIAL_MODEL, warnings, fm_findings, summary=result.summary)

    s = result.summary
    m1, m2, m3, m4 = st.columns(4)
    m1.metric("3-Year Revenue", _format_currency_value(s["three_year_revenue"]))
    m2.metric("Gross Margin", f"{s['gross_margin_pct']:,.1f}%")
    m3.metric("Year 3 EBITDA", _format_currency_value(s["year3_ebitda"]))
    m4.metric("Year 3 Net Income", _format_currency_value(s["year3_net_income"]))

    annual_cols = ["Year", "Revenue", "Gross Profit", "Gross Margin %", "EBITDA", "Net Income", "Net Margin %", "Closing Balance", "Total Equity"]
    st.caption("Annual summary (flows summed, balances at year end)")
    st.dataframe(_format_dataframe_for_display(result.annual[annual_cols]), width="stretch", hide_index=True)

    pnl = result.monthly[["Month_Number", "Revenue", "EBITDA", "Net Income"]].melt(
        "Month_Number", var_name="Line", value_name="Amount"
    )
    st.plotly_chart(px.line(pnl, x="Month_Number", y="Amount", color="Line", title="Monthly P&L"), width="stretch")
    st.plotly_chart(px.line(result.monthly, x="Month_Number", y="Closing Balance", title="Cash Balance"), width="stretch")

    with st.expander("Monthly detail", expanded=False):
        st.dataframe(_format_dataframe_for_display(result.monthly), width="stretch", hide_index=True)

    st.download_button(
        "Download Financial Model CSV",
        data=export_financial_model_csv(result, context={"Starting cash": f"{fm_inputs['starting_cash']:.2f}"}),
        file_name="financial_model.csv",
        mime="text/csv",
    )
    _show_findings(fm_findings)

    st.subheader("One-way sensitivity")
    delta = st.slider("Driver change", 0.05, 0.5, step=0.05, key="sensitivity_delta")
    sens_df = _run_sensitivity_cached(_serialize_assumptions(fm_inputs), float(delta), FINANCIAL_MODEL)
    target = st.selectbox("Target metric", options=TARGET_OPTIONS[FINANCIAL_MODEL], key="sensitivity_target")
    if not sens_df.empty:
        st.plotly_chart(
            px.bar(sens_df, x=f"Delta {target}", y="Driver", color="Case", orientation="h", barmode="group", title=f"Impact on {target}"),
            width="stretch",
        )

with diagnostics_tab:
    st.caption(f"Runtime log: {runtime_log_path()}")
    model_filter = st.selectbox(
        "Show events for",
        options=["All", CASH_FLOW_MODEL, FINANCIAL_MODEL],
        key="diagnostics_model",
        help="Restrict the log to one model's runs.",
    )
    events = read_runtime_events(limit=100, model=None if model_filter == "All" else model_filter)
    if events:
        runtime_df = pd.DataFrame(events)
        runtime_cols = [c for c in ["timestamp_utc", "level", "model", "event", "message"] if c in runtime_df.columns]
        st.dataframe(runtime_df[runtime_cols].iloc[::-1], width="stretch", hide_index=True)
    else:
        st.write("No runtime events recorded.")
    with st.expander("Active assumptions", expanded=False):
        st.json({"cash_flow": deepcopy(cf_inputs), "financial_model": deepcopy(fm_inputs)})
