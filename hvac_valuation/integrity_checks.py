"""Arithmetic identity checks over a valuation result."""

from __future__ import annotations

from typing import Any

from hvac_valuation.model import ValuationResults
from hvac_valuation.schema import COST_FIELDS, as_inputs


def _finding(check: str, lhs_name: str, rhs_name: str, lhs: float, rhs: float) -> dict[str, Any]:
    return {
        "Check": check,
        "Abs Delta": float(abs(lhs - rhs)),
        "LHS": lhs_name,
        "RHS": rhs_name,
    }


def _check_identity(
    findings: list[dict[str, Any]],
    check_name: str,
    lhs_name: str,
    rhs_name: str,
    lhs: float,
    rhs: float,
    tol: float,
) -> None:
    # Tolerance scales with the larger operand.
    scale = max(1.0, abs(lhs), abs(rhs))
    if abs(lhs - rhs) > float(tol) * scale:
        findings.append(_finding(check_name, lhs_name, rhs_name, lhs, rhs))


def run_integrity_checks(inputs, results: ValuationResults, tol: float = 1e-6) -> list[dict[str, Any]]:
    """Return integrity findings (empty list means all checks passed)."""
    i = as_inputs(inputs)
    r = results
    findings: list[dict[str, Any]] = []

    _check_identity(
        findings,
        "Cost identity",
        "Total Cost %",
        "Sum of cost percentages",
        r.total_cost_pct,
        sum(getattr(i, name) for name in COST_FIELDS),
        tol,
    )
    _check_identity(
        findings,
        "Margin identity",
        "Reported EBITDA Margin",
        "100 - Total Cost %",
        r.ebitda_margin_reported,
        100 - r.total_cost_pct,
        tol,
    )
    _check_identity(
        findings,
        "Reported EBITDA identity",
        "Reported EBITDA",
        "Revenue x Margin",
        r.ebitda_reported,
        r.revenue_ttm * r.ebitda_margin_reported / 100,
        tol,
    )
    _check_identity(
        findings,
        "Adjusted EBITDA identity",
        "Adjusted EBITDA",
        "Reported EBITDA + Owner Add-backs",
        r.ebitda_adjusted,
        r.ebitda_reported + r.owner_addbacks,
        tol,
    )
    _check_identity(
        findings,
        "Enterprise value identity",
        "Enterprise Value",
        "Adjusted EBITDA x Multiple",
        r.enterprise_value,
        r.ebitda_adjusted * i.multiple,
        tol,
    )
    _check_identity(
        findings,
        "Forward EBITDA identity",
        "Forward Adjusted EBITDA",
        "Forward Revenue x (Margin + Add-back %)",
        r.forward_ebitda,
        r.forward_revenue * (r.ebitda_margin_reported + i.owner_addback_pct) / 100,
        tol,
    )
    _check_identity(
        findings,
        "Forward EV identity",
        "Forward Enterprise Value",
        "Forward Adjusted EBITDA x Multiple",
        r.forward_ev,
        r.forward_ebitda * i.multiple,
        tol,
    )
    _check_identity(
        findings,
        "Equity identity",
        "Equity Value",
        "Enterprise Value - Debt",
        r.equity_value,
        r.enterprise_value - i.debt,
        tol,
    )
    if i.techs > 0:
        _check_identity(
            findings,
            "Per-tech identity",
            "Equity Value per Tech x Techs",
            "Equity Value",
            r.value_per_tech * i.techs,
            r.equity_value,
            tol,
        )
    if i.trucks > 0:
        _check_identity(
            findings,
            "Per-truck identity",
            "Equity Value per Truck x Trucks",
            "Equity Value",
            r.value_per_truck * i.trucks,
            r.equity_value,
            tol,
        )
    return findings
