import json

import numpy as np
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from hvac_valuation.defaults import DEFAULTS
from hvac_valuation.formatting import format_money, format_multiple, format_pct, format_ratio_pct
from hvac_valuation.goal_seek import solve_for_input
from hvac_valuation.input_metadata import INPUT_GUIDANCE, advisory_warnings, help_with_guidance, input_label
from hvac_valuation.integrity_checks import run_integrity_checks
from hvac_valuation.model import ValuationResults, asset_floor_summary, results_table, run_valuation, unit_economics
from hvac_valuation.presets import PROFILE_FIELDS, PROFILE_LABELS, PROFILE_PRESETS, apply_profile, resolve_profile
from hvac_valuation.runtime_logging import (
    install_global_exception_logging,
    log_advisory_warnings,
    log_profile_applied,
    read_runtime_events,
    runtime_log_path,
)
from hvac_valuation.schema import INPUT_FIELDS, ValuationInputs
from hvac_valuation.sensitivity import (
    DEFAULT_SENSITIVITY_DRIVERS,
    TARGET_OPTIONS,
    available_sensitivity_drivers,
    run_one_way_sensitivity,
    valuation_grid,
)


install_global_exception_logging()


UI_DEFAULTS = {
    "profile_choice": "balanced",
    "sensitivity_delta": 0.1,
    "sensitivity_drivers": list(DEFAULT_SENSITIVITY_DRIVERS),
    "grid_target": "forward_ev",
    "goal_target_value": 2_000_000.0,
    "goal_result": None,
}

INPUT_SECTIONS = {
    "Revenue History": ("rev_year_3_ago", "rev_year_2_ago", "rev_last_year"),
    "Revenue Mix": ("service_mix_pct", "install_mix_pct", "maintenance_pct"),
    "Cost Structure": (
        "tech_labor_pct",
        "materials_pct",
        "overhead_pct",
        "marketing_pct",
        "fleet_pct",
        "other_cost_pct",
    ),
    "Owner Adjustment": ("owner_addback_pct",),
    "Team and Assets": ("techs", "trucks", "asset_floor", "debt"),
    "Valuation Settings": ("multiple", "growth_rate"),
}


def _init_state() -> None:
    for key, value in DEFAULTS.items():
        if key not in st.session_state:
            st.session_state[key] = float(value)
    for key, value in UI_DEFAULTS.items():
        if key not in st.session_state:
            st.session_state[key] = value


def _inputs_from_state() -> ValuationInputs:
    return ValuationInputs(**{k: float(st.session_state[k]) for k in INPUT_FIELDS})


def _on_profile_change() -> None:
    requested = st.session_state["profile_choice"]
    updated = apply_profile(requested, _inputs_from_state())
    for field in PROFILE_FIELDS:
        st.session_state[field] = float(getattr(updated, field))
    log_profile_applied(requested, resolve_profile(requested))


@st.cache_data(show_spinner=False)
def _run_valuation_cached(inputs_json: str) -> dict:
    return run_valuation(json.loads(inputs_json)).to_dict()


def _input_widget(key: str) -> None:
    g = INPUT_GUIDANCE[key]
    fmt = "%.0f"
    if g["kind"] == "pct":
        fmt = "%.1f%%"
    elif g["kind"] == "multiple":
        fmt = "%.1fx"
    elif g["kind"] == "currency":
        fmt = "$%.0f"
    st.slider(
        input_label(key),
        min_value=float(g["min"]),
        max_value=float(g["max"]),
        step=float(g["step"]),
        format=fmt,
        key=key,
        help=help_with_guidance(key),
    )


def _render_inputs() -> None:
    st.sidebar.selectbox(
        "Business Profile",
        options=list(PROFILE_PRESETS),
        format_func=lambda k: PROFILE_LABELS.get(k, k),
        key="profile_choice",
        on_change=_on_profile_change,
        help="Applies a preset revenue mix, cost structure, add-back and multiple. Revenue, team and debt are kept.",
    )
    for section, keys in INPUT_SECTIONS.items():
        with st.sidebar.expander(section, expanded=section in {"Revenue History", "Valuation Settings"}):
            for key in keys:
                _input_widget(key)


def _bridge_figures(results: ValuationResults, debt: float) -> tuple[go.Figure, go.Figure]:
    fig = go.Figure(
        go.Waterfall(
            x=["Reported EBITDA", "Owner Add-backs", "Adjusted EBITDA"],
            measure=["relative", "relative", "total"],
            y=[results.ebitda_reported, results.owner_addbacks, 0],
            text=[format_money(results.ebitda_reported), format_money(results.owner_addbacks), format_money(results.ebitda_adjusted)],
        )
    )
    fig.update_layout(title="EBITDA Bridge", showlegend=False, height=360)

    ev_fig = go.Figure(
        go.Waterfall(
            x=["Enterprise Value", "Debt", "Equity Value"],
            measure=["relative", "relative", "total"],
            y=[results.enterprise_value, -debt, 0],
            text=[format_money(results.enterprise_value), format_money(-debt), format_money(results.equity_value)],
        )
    )
    ev_fig.update_layout(title="Enterprise to Equity Value", showlegend=False, height=360)
    return fig, ev_fig


def _render_summary(inputs: ValuationInputs, results: ValuationResults) -> None:
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Revenue (TTM)", format_money(results.revenue_ttm), f"CAGR {format_ratio_pct(results.cagr)}")
    c2.metric("Adjusted EBITDA", format_money(results.ebitda_adjusted), f"{format_pct(results.adj_margin)} margin")
    c3.metric("Enterprise Value", format_money(results.enterprise_value), f"at {format_multiple(inputs.multiple)}")
    c4.metric("Equity Value", format_money(results.equity_value))

    d1, d2, d3, d4 = st.columns(4)
    d1.metric("Reported EBITDA Margin", format_pct(results.ebitda_margin_reported), f"Costs {format_pct(results.total_cost_pct)}")
    d2.metric("Forward Revenue", format_money(results.forward_revenue))
    d3.metric("Forward EBITDA", format_money(results.forward_ebitda))
    d4.metric("Forward EV", format_money(results.forward_ev))

    e1, e2, e3, e4 = st.columns(4)
    e1.metric("Reported EBITDA", format_money(results.ebitda_reported))
    e2.metric("Owner Add-backs", format_money(results.owner_addbacks))
    e3.metric("Value per Tech", format_money(results.value_per_tech))
    e4.metric("Value per Truck", format_money(results.value_per_truck))

    units = unit_economics(inputs, results)
    f1, f2, _, _ = st.columns(4)
    f1.metric("Revenue per Tech", format_money(units["revenue_per_tech"]))
    f2.metric("Revenue per Truck", format_money(units["revenue_per_truck"]))

    floor = asset_floor_summary(inputs, results)
    if floor["floor_supports_value"]:
        st.info(
            f"Asset floor {format_money(floor['asset_floor'])} covers the equity value; "
            "hard assets alone support this price."
        )
    else:
        st.caption(
            f"Equity value exceeds the asset floor by {format_money(floor['equity_over_floor'])} (goodwill over hard assets)."
        )

    bridge_fig, ev_fig = _bridge_figures(results, inputs.debt)
    left, right = st.columns(2)
    left.plotly_chart(bridge_fig, use_container_width=True)
    right.plotly_chart(ev_fig, use_container_width=True)

    table = results_table(results)
    st.dataframe(table[["Metric", "Display"]], hide_index=True, use_container_width=True)


def _render_sensitivity(inputs: ValuationInputs) -> None:
    st.slider("Flex (+/-)", min_value=0.01, max_value=0.5, step=0.01, key="sensitivity_delta")
    st.multiselect("Drivers", options=available_sensitivity_drivers(), key="sensitivity_drivers")
    drivers = list(st.session_state["sensitivity_drivers"])
    if not drivers:
        st.caption("Select at least one driver.")
    else:
        sens_df = run_one_way_sensitivity(inputs, float(st.session_state["sensitivity_delta"]), drivers)
        display_df = sens_df.copy()
        for col in display_df.columns:
            if col not in {"Driver", "Case", "Input Value"}:
                display_df[col] = display_df[col].map(format_money)
        st.dataframe(
            display_df,
            hide_index=True,
            use_container_width=True,
        )

    st.selectbox("Grid Output", options=TARGET_OPTIONS, key="grid_target")
    multiples = np.round(np.arange(3.0, 7.01, 0.5), 2)
    growth_rates = np.arange(-10.0, 20.01, 5.0)
    grid = valuation_grid(inputs, multiples, growth_rates, target=st.session_state["grid_target"])
    fig = px.imshow(
        grid.to_numpy(),
        labels={"x": "EBITDA Multiple", "y": "Growth Rate %", "color": "Value"},
        x=[format_multiple(m) for m in grid.columns],
        y=[f"{g:.0f}%" for g in grid.index],
        aspect="auto",
        color_continuous_scale="Blues",
        text_auto=".3s",
    )
    fig.update_layout(height=420)
    st.plotly_chart(fig, use_container_width=True)


def _render_goal_seek(inputs: ValuationInputs) -> None:
    st.number_input("Target Equity Value", min_value=0.0, step=50_000.0, key="goal_target_value")
    if st.button("Solve Implied Multiple"):
        st.session_state["goal_result"] = solve_for_input(
            inputs,
            "multiple",
            "equity_value",
            float(st.session_state["goal_target_value"]),
            lower_bound=0.0,
            upper_bound=30.0,
        )
    result = st.session_state.get("goal_result")
    if result is None:
        return
    if result.status == "solved":
        st.success(f"Implied multiple {format_multiple(result.value, 2)} gives equity value {format_money(result.achieved)}.")
    else:
        st.warning(result.message)


def _render_diagnostics(inputs: ValuationInputs, results: ValuationResults) -> None:
    findings = run_integrity_checks(inputs, results)
    if findings:
        st.error("Integrity checks failed.")
        st.dataframe(pd.DataFrame(findings), hide_index=True)
    else:
        st.caption("All valuation identity checks passed.")
    st.caption(f"Runtime log: {runtime_log_path()}")
    events = read_runtime_events(limit=50)
    if events:
        st.dataframe(pd.DataFrame(events)[["timestamp_utc", "level", "event", "message"]], hide_index=True)


def main() -> None:
    st.set_page_config(page_title="HVAC Business Valuation", layout="wide")
    _init_state()

    st.title("HVAC Business Valuation Estimator")
    st.caption("Runs entirely on the inputs below. Inputs are not stored or sent anywhere.")

    _render_inputs()
    inputs = _inputs_from_state()
    results = ValuationResults(**_run_valuation_cached(json.dumps(inputs.to_dict(), sort_keys=True)))

    warnings = advisory_warnings(inputs)
    for warning in warnings:
        st.warning(warning)
    if warnings != st.session_state.get("last_advisory_warnings"):
        log_advisory_warnings(warnings)
        st.session_state["last_advisory_warnings"] = warnings

    summary_tab, sensitivity_tab, goal_tab, diagnostics_tab = st.tabs(
        ["Valuation", "Sensitivity", "Goal Seek", "Diagnostics"]
    )
    with summary_tab:
        _render_summary(inputs, results)
    with sensitivity_tab:
        _render_sensitivity(inputs)
    with goal_tab:
        _render_goal_seek(inputs)
    with diagnostics_tab:
        _render_diagnostics(inputs, results)


main()
