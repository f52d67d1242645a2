"""Balanced-profile starting inputs for a new session."""

DEFAULTS = {
    "rev_year_3_ago": 1_800_000.0,
    "rev_year_2_ago": 2_100_000.0,
    "rev_last_year": 2_500_000.0,
    "service_mix_pct": 40.0,
    "install_mix_pct": 35.0,
    "maintenance_pct": 25.0,
    "tech_labor_pct": 30.0,
    "materials_pct": 18.0,
    "overhead_pct": 15.0,
    "marketing_pct": 8.0,
    "fleet_pct": 6.0,
    "other_cost_pct": 7.0,
    "owner_addback_pct": 4.0,
    "techs": 8.0,
    "trucks": 6.0,
    "asset_floor": 450_000.0,
    "debt": 250_000.0,
    "multiple": 5.0,
    "growth_rate": 5.0,
}
