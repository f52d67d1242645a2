"""Core HVAC valuation engine: reported/adjusted EBITDA, EV, equity and projections."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Mapping

import pandas as pd

from hvac_valuation.formatting import format_money, format_pct, format_ratio_pct
from hvac_valuation.schema import COST_FIELDS, ValuationInputs, as_inputs


@dataclass(frozen=True)
class ValuationResults:
    revenue_ttm: float
    total_cost_pct: float
    ebitda_margin_reported: float
    ebitda_reported: float
    owner_addbacks: float
    ebitda_adjusted: float
    adj_margin: float
    enterprise_value: float
    forward_revenue: float
    forward_ebitda: float
    forward_ev: float
    equity_value: float
    value_per_tech: float
    value_per_truck: float
    cagr: float

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


# Display label and value kind for each result field, in presentation order.
RESULT_FIELDS: dict[str, tuple[str, str]] = {
    "revenue_ttm": ("Revenue (TTM)", "currency"),
    "total_cost_pct": ("Total Cost %", "pct"),
    "ebitda_margin_reported": ("Reported EBITDA Margin", "pct"),
    "ebitda_reported": ("Reported EBITDA", "currency"),
    "owner_addbacks": ("Owner Add-backs", "currency"),
    "ebitda_adjusted": ("Adjusted EBITDA", "currency"),
    "adj_margin": ("Adjusted EBITDA Margin", "pct"),
    "enterprise_value": ("Enterprise Value", "currency"),
    "forward_revenue": ("Forward Revenue", "currency"),
    "forward_ebitda": ("Forward Adjusted EBITDA", "currency"),
    "forward_ev": ("Forward Enterprise Value", "currency"),
    "equity_value": ("Equity Value", "currency"),
    "value_per_tech": ("Equity Value per Tech", "currency"),
    "value_per_truck": ("Equity Value per Truck", "currency"),
    "cagr": ("Revenue CAGR (3-yr approx.)", "ratio"),
}


def _safe_div(a: float, b: float) -> float:
    return float(a / b) if b > 0 else 0.0


def run_valuation(inputs: Mapping[str, Any] | ValuationInputs) -> ValuationResults:
    """Derive every valuation figure from one set of inputs."""
    i = as_inputs(inputs)

    revenue_ttm = i.rev_last_year
    total_cost_pct = sum(getattr(i, name) for name in COST_FIELDS)
    ebitda_margin_reported = 100 - total_cost_pct
    ebitda_reported = revenue_ttm * ebitda_margin_reported / 100
    owner_addbacks = revenue_ttm * i.owner_addback_pct / 100
    ebitda_adjusted = ebitda_reported + owner_addbacks
    adj_margin = _safe_div(ebitda_adjusted, revenue_ttm) * 100
    enterprise_value = ebitda_adjusted * i.multiple

    forward_revenue = revenue_ttm * (1 + i.growth_rate / 100)
    forward_ebitda_reported = forward_revenue * ebitda_margin_reported / 100
    forward_addbacks = forward_revenue * i.owner_addback_pct / 100
    forward_ebitda = forward_ebitda_reported + forward_addbacks
    forward_ev = forward_ebitda * i.multiple

    equity_value = enterprise_value - i.debt
    value_per_tech = _safe_div(equity_value, i.techs)
    value_per_truck = _safe_div(equity_value, i.trucks)

    # Two-point, two-period growth; the middle history year is not used.
    if i.rev_year_3_ago > 0 and i.rev_last_year > 0:
        cagr = (i.rev_last_year / i.rev_year_3_ago) ** 0.5 - 1
    else:
        cagr = 0.0

    return ValuationResults(
        revenue_ttm=revenue_ttm,
        total_cost_pct=total_cost_pct,
        ebitda_margin_reported=ebitda_margin_reported,
        ebitda_reported=ebitda_reported,
        owner_addbacks=owner_addbacks,
        ebitda_adjusted=ebitda_adjusted,
        adj_margin=adj_margin,
        enterprise_value=enterprise_value,
        forward_revenue=forward_revenue,
        forward_ebitda=forward_ebitda,
        forward_ev=forward_ev,
        equity_value=equity_value,
        value_per_tech=value_per_tech,
        value_per_truck=value_per_truck,
        cagr=cagr,
    )


def format_result(field: str, value: float) -> str:
    kind = RESULT_FIELDS[field][1]
    if kind == "pct":
        return format_pct(value)
    if kind == "ratio":
        return format_ratio_pct(value)
    return format_money(value)


def results_table(results: ValuationResults) -> pd.DataFrame:
    """One row per result field with its label, raw value and display string."""
    values = results.to_dict()
    rows = [
        {
            "Field": field,
            "Metric": label,
            "Value": float(values[field]),
            "Display": format_result(field, values[field]),
        }
        for field, (label, _) in RESULT_FIELDS.items()
    ]
    return pd.DataFrame(rows)


def asset_floor_summary(inputs: Mapping[str, Any] | ValuationInputs, results: ValuationResults | None = None) -> dict[str, Any]:
    """Compare equity value with the fleet/equipment asset floor."""
    i = as_inputs(inputs)
    res = results if results is not None else run_valuation(i)
    return {
        "asset_floor": float(i.asset_floor),
        "equity_value": float(res.equity_value),
        "equity_over_floor": float(res.equity_value - i.asset_floor),
        "floor_supports_value": bool(res.equity_value <= i.asset_floor),
    }


def unit_economics(inputs: Mapping[str, Any] | ValuationInputs, results: ValuationResults | None = None) -> dict[str, float]:
    """Revenue per technician and per truck, zero when the count is not positive."""
    i = as_inputs(inputs)
    res = results if results is not None else run_valuation(i)
    return {
        "revenue_per_tech": _safe_div(res.revenue_ttm, i.techs),
        "revenue_per_truck": _safe_div(res.revenue_ttm, i.trucks),
    }
