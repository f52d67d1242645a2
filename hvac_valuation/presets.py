"""Named business profiles that bulk-assign mix, cost and multiple inputs."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from hvac_valuation.schema import ValuationInputs, as_inputs


logger = logging.getLogger(__name__)

DEFAULT_PROFILE = "balanced"

PROFILE_FIELDS = (
    "service_mix_pct",
    "install_mix_pct",
    "maintenance_pct",
    "tech_labor_pct",
    "materials_pct",
    "overhead_pct",
    "marketing_pct",
    "fleet_pct",
    "other_cost_pct",
    "owner_addback_pct",
    "multiple",
)


def _preset(values: tuple[float, ...]) -> dict[str, float]:
    return {field: float(v) for field, v in zip(PROFILE_FIELDS, values)}


# service, install, maint, tech labor, materials, overhead, marketing, fleet, other, addback, multiple
PROFILE_PRESETS: dict[str, dict[str, float]] = {
    "balanced": _preset((40, 35, 25, 30, 18, 15, 8, 6, 7, 4, 5.0)),
    "serviceHeavy": _preset((55, 20, 25, 32, 16, 15, 7, 6, 7, 5, 5.5)),
    "installHeavy": _preset((20, 60, 20, 26, 26, 14, 8, 6, 6, 3, 4.3)),
    "contractRich": _preset((35, 15, 50, 28, 14, 16, 7, 6, 6, 4, 6.0)),
}

PROFILE_LABELS = {
    "balanced": "Balanced service / install",
    "serviceHeavy": "Service-heavy",
    "installHeavy": "Install / replacement-heavy",
    "contractRich": "Maintenance-contract rich",
}


def resolve_profile(profile_id: Any) -> str:
    """Return a known profile id, falling back to balanced for anything unrecognized."""
    if isinstance(profile_id, str) and profile_id in PROFILE_PRESETS:
        return profile_id
    logger.debug("Unknown profile %r; using %s", profile_id, DEFAULT_PROFILE)
    return DEFAULT_PROFILE


def profile_overrides(profile_id: Any) -> dict[str, float]:
    return dict(PROFILE_PRESETS[resolve_profile(profile_id)])


def apply_profile(profile_id: Any, current_inputs: Mapping[str, Any] | ValuationInputs | None) -> ValuationInputs:
    """Return a copy of current_inputs with the profile's override fields applied.

    Revenue history, team/asset counts, debt and growth rate are carried over
    unchanged. The caller's record is never modified.
    """
    return as_inputs(current_inputs).replace(**profile_overrides(profile_id))
