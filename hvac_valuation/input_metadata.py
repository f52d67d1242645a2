"""Input labels, advisory slider bounds and range warnings."""

from __future__ import annotations

from typing import Any

from hvac_valuation.schema import REVENUE_MIX_FIELDS, as_inputs


INPUT_GUIDANCE: dict[str, dict[str, Any]] = {
    "rev_year_3_ago": {"label": "Revenue 3 Years Ago", "kind": "currency", "min": 0.0, "max": 20_000_000.0, "step": 50_000.0, "note": "Oldest year of the revenue history; anchors the CAGR."},
    "rev_year_2_ago": {"label": "Revenue 2 Years Ago", "kind": "currency", "min": 0.0, "max": 20_000_000.0, "step": 50_000.0, "note": "Shown for trend context only."},
    "rev_last_year": {"label": "Revenue Last Year (TTM)", "kind": "currency", "min": 0.0, "max": 20_000_000.0, "step": 50_000.0, "note": "Valuation base for EBITDA and projections."},
    "service_mix_pct": {"label": "Service Revenue %", "kind": "pct", "min": 0.0, "max": 100.0, "step": 1.0, "note": "Repair and diagnostic calls."},
    "install_mix_pct": {"label": "Install / Replacement Revenue %", "kind": "pct", "min": 0.0, "max": 100.0, "step": 1.0, "note": "Equipment replacement and new installs."},
    "maintenance_pct": {"label": "Maintenance Agreement Revenue %", "kind": "pct", "min": 0.0, "max": 100.0, "step": 1.0, "note": "Recurring agreement revenue; buyers pay up for it."},
    "tech_labor_pct": {"label": "Tech Labor % of Revenue", "kind": "pct", "min": 15.0, "max": 45.0, "step": 0.5, "note": "Loaded field labor."},
    "materials_pct": {"label": "Materials / Equipment % of Revenue", "kind": "pct", "min": 5.0, "max": 40.0, "step": 0.5, "note": "Rises with install-heavy mix."},
    "overhead_pct": {"label": "Overhead % of Revenue", "kind": "pct", "min": 5.0, "max": 30.0, "step": 0.5, "note": "Office payroll, rent, insurance."},
    "marketing_pct": {"label": "Marketing % of Revenue", "kind": "pct", "min": 0.0, "max": 20.0, "step": 0.5, "note": "Paid leads and brand spend."},
    "fleet_pct": {"label": "Fleet % of Revenue", "kind": "pct", "min": 0.0, "max": 15.0, "step": 0.5, "note": "Truck payments, fuel and upkeep."},
    "other_cost_pct": {"label": "Other Costs % of Revenue", "kind": "pct", "min": 0.0, "max": 20.0, "step": 0.5, "note": "Everything not captured above."},
    "owner_addback_pct": {"label": "Owner Add-backs % of Revenue", "kind": "pct", "min": 0.0, "max": 15.0, "step": 0.5, "note": "Owner perks and one-time costs added back to EBITDA."},
    "techs": {"label": "Technicians", "kind": "count", "min": 0.0, "max": 100.0, "step": 1.0, "note": "Field technicians on payroll."},
    "trucks": {"label": "Trucks", "kind": "count", "min": 0.0, "max": 100.0, "step": 1.0, "note": "Service vehicles in the fleet."},
    "asset_floor": {"label": "Asset Value Floor", "kind": "currency", "min": 0.0, "max": 5_000_000.0, "step": 25_000.0, "note": "Liquidation value of fleet and equipment."},
    "debt": {"label": "Debt", "kind": "currency", "min": 0.0, "max": 10_000_000.0, "step": 25_000.0, "note": "Outstanding debt assumed or repaid at close."},
    "multiple": {"label": "EBITDA Multiple", "kind": "multiple", "min": 2.0, "max": 10.0, "step": 0.1, "note": "Typical HVAC deals clear between 3x and 7x adjusted EBITDA."},
    "growth_rate": {"label": "Forward Growth Rate %", "kind": "pct", "min": -20.0, "max": 40.0, "step": 0.5, "note": "Next-year revenue growth."},
}


def _fmt(v: float) -> str:
    if abs(v - round(v)) < 1e-9:
        return f"{int(round(v)):,}"
    return f"{v:.3f}".rstrip("0").rstrip(".")


def input_label(key: str) -> str:
    g = INPUT_GUIDANCE.get(key)
    return g["label"] if g else key.replace("_", " ").title()


def help_with_guidance(key: str, base_help: str = "") -> str:
    g = INPUT_GUIDANCE.get(key)
    if not g:
        return base_help
    text = f"Reasonable range: {_fmt(g['min'])} to {_fmt(g['max'])}. {g['note']}"
    return f"{base_help} {text}" if base_help else text


def advisory_warnings(inputs) -> list[str]:
    """List values outside their advisory range; never blocks computation."""
    values = as_inputs(inputs).to_dict()
    warnings: list[str] = []
    for key, g in INPUT_GUIDANCE.items():
        v = float(values[key])
        if v < g["min"] or v > g["max"]:
            warnings.append(
                f"{key}={v:,.3f} is outside the recommended range [{_fmt(g['min'])}, {_fmt(g['max'])}]."
            )

    mix_total = sum(float(values[k]) for k in REVENUE_MIX_FIELDS)
    if abs(mix_total - 100.0) > 1e-9:
        warnings.append(f"Revenue mix totals {mix_total:.1f}% rather than 100%.")
    return warnings
