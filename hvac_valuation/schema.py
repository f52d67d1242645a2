"""Valuation input record, field names, and numeric coercion helpers."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Mapping


class InputCoercionError(ValueError):
    """Raised when an input value cannot be read as a number."""

    def __init__(self, field: str, value: Any):
        self.field = field
        self.value = value
        super().__init__(f"{field}: cannot coerce {value!r} to a number")


@dataclass(frozen=True)
class ValuationInputs:
    """Business metrics supplied by the caller. Percentages are whole numbers (30 means 30%).

    Unset fields are 0. Session starting values live in ``DEFAULTS``.
    """

    rev_year_3_ago: float = 0.0
    rev_year_2_ago: float = 0.0
    rev_last_year: float = 0.0
    service_mix_pct: float = 0.0
    install_mix_pct: float = 0.0
    maintenance_pct: float = 0.0
    tech_labor_pct: float = 0.0
    materials_pct: float = 0.0
    overhead_pct: float = 0.0
    marketing_pct: float = 0.0
    fleet_pct: float = 0.0
    other_cost_pct: float = 0.0
    owner_addback_pct: float = 0.0
    techs: float = 0.0
    trucks: float = 0.0
    asset_floor: float = 0.0
    debt: float = 0.0
    multiple: float = 0.0
    growth_rate: float = 0.0

    def __post_init__(self):
        for f in fields(self):
            object.__setattr__(self, f.name, coerce_number(getattr(self, f.name), field=f.name))

    def to_dict(self) -> dict[str, float]:
        return asdict(self)

    def replace(self, **updates: Any) -> "ValuationInputs":
        """Return a copy with the named fields overwritten."""
        unknown = set(updates) - set(INPUT_FIELDS)
        if unknown:
            raise KeyError(f"Unknown input field(s): {', '.join(sorted(unknown))}")
        return replace(self, **updates)


INPUT_FIELDS: tuple[str, ...] = tuple(f.name for f in fields(ValuationInputs))

REVENUE_HISTORY_FIELDS = ("rev_year_3_ago", "rev_year_2_ago", "rev_last_year")
REVENUE_MIX_FIELDS = ("service_mix_pct", "install_mix_pct", "maintenance_pct")
COST_FIELDS = (
    "tech_labor_pct",
    "materials_pct",
    "overhead_pct",
    "marketing_pct",
    "fleet_pct",
    "other_cost_pct",
)

# Widget/export key names used by the browser calculator.
CAMEL_CASE_ALIASES = {
    "revYear3Ago": "rev_year_3_ago",
    "revYear2Ago": "rev_year_2_ago",
    "revLastYear": "rev_last_year",
    "serviceMixPct": "service_mix_pct",
    "installMixPct": "install_mix_pct",
    "maintenancePct": "maintenance_pct",
    "techLaborPct": "tech_labor_pct",
    "materialsPct": "materials_pct",
    "overheadPct": "overhead_pct",
    "marketingPct": "marketing_pct",
    "fleetPct": "fleet_pct",
    "otherCostPct": "other_cost_pct",
    "ownerAddbackPct": "owner_addback_pct",
    "assetFloor": "asset_floor",
    "growthRate": "growth_rate",
}


def coerce_number(value: Any, field: str = "value") -> float:
    """Read a caller-supplied value as a float; blanks, None, False and NaN become 0.0."""
    if value is None or value is False:
        return 0.0
    if isinstance(value, str):
        text = value.strip().replace(",", "").replace("$", "").replace("%", "")
        if not text:
            return 0.0
        value = text
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InputCoercionError(field, value) from None
    if math.isnan(number):
        return 0.0
    return number


def canonical_key(key: str) -> str | None:
    if key in INPUT_FIELDS:
        return key
    return CAMEL_CASE_ALIASES.get(key)


def normalize_inputs(raw: Mapping[str, Any] | ValuationInputs | None) -> tuple[ValuationInputs, list[str]]:
    """Build a ValuationInputs record from a loose mapping.

    Accepts snake_case or camelCase keys. Missing fields are 0, matching
    an unset field. Unrecognized keys are skipped and reported in the
    returned warnings list.
    """
    if isinstance(raw, ValuationInputs):
        return raw, []

    warnings: list[str] = []
    values: dict[str, Any] = {}
    for key, value in (raw or {}).items():
        name = canonical_key(str(key))
        if name is None:
            warnings.append(f"Ignored unknown input key '{key}'.")
            continue
        values[name] = value
    return ValuationInputs(**values), warnings


def as_inputs(raw: Mapping[str, Any] | ValuationInputs | None) -> ValuationInputs:
    inputs, _ = normalize_inputs(raw)
    return inputs
