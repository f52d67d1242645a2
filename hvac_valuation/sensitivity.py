"""One-way sensitivity and multiple-by-growth valuation grids."""

from __future__ import annotations

from typing import Iterable

import numpy as np
import pandas as pd

from hvac_valuation.model import RESULT_FIELDS, run_valuation
from hvac_valuation.schema import INPUT_FIELDS, ValuationInputs, as_inputs


DEFAULT_SENSITIVITY_DRIVERS = [
    "rev_last_year",
    "tech_labor_pct",
    "materials_pct",
    "overhead_pct",
    "owner_addback_pct",
    "multiple",
    "growth_rate",
    "debt",
]

TARGET_OPTIONS = [
    "ebitda_adjusted",
    "enterprise_value",
    "equity_value",
    "forward_ev",
    "value_per_tech",
]


def available_sensitivity_drivers() -> list[str]:
    """Inputs that can move at least one target output."""
    blocked = {"service_mix_pct", "install_mix_pct", "maintenance_pct", "asset_floor", "rev_year_2_ago"}
    return sorted(k for k in INPUT_FIELDS if k not in blocked)


def evaluate_outputs(inputs: ValuationInputs) -> dict[str, float]:
    values = run_valuation(inputs).to_dict()
    return {k: float(values[k]) for k in TARGET_OPTIONS}


def run_one_way_sensitivity(inputs, delta_pct: float, drivers: list[str] | None = None) -> pd.DataFrame:
    """Flex each driver down and up by delta_pct and record the move in every target output."""
    base_inputs = as_inputs(inputs)
    base = evaluate_outputs(base_inputs)

    if drivers is None or len(drivers) == 0:
        drivers = list(DEFAULT_SENSITIVITY_DRIVERS)

    rows = []
    for driver in drivers:
        if driver not in INPUT_FIELDS:
            continue
        start = float(getattr(base_inputs, driver))
        for case, mult in [("Low", 1 - delta_pct), ("High", 1 + delta_pct)]:
            scenario = base_inputs.replace(**{driver: start * mult})
            out = evaluate_outputs(scenario)
            rows.append(
                {
                    "Driver": driver,
                    "Case": case,
                    "Input Value": start * mult,
                    **{RESULT_FIELDS[k][0]: out[k] for k in base},
                    **{f"Delta {RESULT_FIELDS[k][0]}": out[k] - base[k] for k in base},
                }
            )

    return pd.DataFrame(rows)


def valuation_grid(
    inputs,
    multiples: Iterable[float],
    growth_rates: Iterable[float],
    target: str = "forward_ev",
) -> pd.DataFrame:
    """Target output for every multiple/growth pair; rows are growth rates, columns multiples."""
    if target not in RESULT_FIELDS:
        raise KeyError(f"Unknown result field: {target}")
    base_inputs = as_inputs(inputs)
    multiples = np.asarray(list(multiples), dtype=float)
    growth_rates = np.asarray(list(growth_rates), dtype=float)

    grid = np.zeros((len(growth_rates), len(multiples)), dtype=float)
    for r, growth in enumerate(growth_rates):
        for c, multiple in enumerate(multiples):
            scenario = base_inputs.replace(multiple=multiple, growth_rate=growth)
            grid[r, c] = getattr(run_valuation(scenario), target)

    return pd.DataFrame(
        grid,
        index=pd.Index(growth_rates, name="Growth Rate %"),
        columns=pd.Index(multiples, name="Multiple"),
    )
