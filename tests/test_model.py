from __future__ import annotations

import math
from dataclasses import replace

import pytest

from hvac_valuation.model import RESULT_FIELDS, asset_floor_summary, results_table, run_valuation, unit_economics
from hvac_valuation.schema import ValuationInputs


def test_balanced_defaults_scenario(base_inputs):
    r = run_valuation(base_inputs)

    assert r.revenue_ttm == 2_500_000
    assert r.total_cost_pct == 84
    assert r.ebitda_margin_reported == 16
    assert r.ebitda_reported == pytest.approx(400_000)
    assert r.owner_addbacks == pytest.approx(100_000)
    assert r.ebitda_adjusted == pytest.approx(500_000)
    assert r.adj_margin == pytest.approx(20)
    assert r.enterprise_value == pytest.approx(2_500_000)
    assert r.equity_value == pytest.approx(2_250_000)
    assert r.value_per_tech == pytest.approx(281_250)
    assert r.value_per_truck == pytest.approx(375_000)
    assert r.cagr == pytest.approx(math.sqrt(2_500_000 / 1_800_000) - 1)
    assert r.cagr == pytest.approx(0.1785, abs=1e-4)


def test_forward_projection_uses_growth_rate(base_inputs):
    r = run_valuation(base_inputs)

    assert r.forward_revenue == pytest.approx(2_625_000)
    assert r.forward_ebitda == pytest.approx(525_000)
    assert r.forward_ev == pytest.approx(2_625_000)


def test_negative_growth_shrinks_forward_figures(base_inputs):
    r = run_valuation(base_inputs.replace(growth_rate=-10))
    assert r.forward_revenue == pytest.approx(2_250_000)
    assert r.forward_ev < r.enterprise_value


def test_same_inputs_give_identical_results(base_inputs):
    assert run_valuation(base_inputs) == run_valuation(base_inputs)
    assert run_valuation(base_inputs.to_dict()) == run_valuation(base_inputs)


def test_engine_does_not_mutate_mapping_input(base_inputs):
    raw = base_inputs.to_dict()
    snapshot = dict(raw)
    run_valuation(raw)
    assert raw == snapshot


def test_adjusted_ebitda_is_exact_sum(base_inputs):
    for addback in (0, 3.3, 4, 12.7):
        for labor in (20, 30.5, 44):
            r = run_valuation(base_inputs.replace(owner_addback_pct=addback, tech_labor_pct=labor))
            assert r.ebitda_adjusted == r.ebitda_reported + r.owner_addbacks


def test_zero_techs_and_trucks_yield_zero_per_unit_values(base_inputs):
    r = run_valuation(base_inputs.replace(techs=0, trucks=0))
    assert r.value_per_tech == 0
    assert r.value_per_truck == 0
    assert r.equity_value == pytest.approx(2_250_000)


def test_zero_revenue_scenario(zero_revenue_inputs):
    r = run_valuation(zero_revenue_inputs)

    assert r.revenue_ttm == 0
    assert r.ebitda_reported == 0
    assert r.owner_addbacks == 0
    assert r.ebitda_adjusted == 0
    assert r.adj_margin == 0
    assert r.enterprise_value == 0
    assert r.cagr == 0


def test_cagr_is_zero_without_oldest_revenue(base_inputs):
    assert run_valuation(base_inputs.replace(rev_year_3_ago=0)).cagr == 0


def test_cagr_ignores_middle_year(base_inputs):
    low = run_valuation(base_inputs.replace(rev_year_2_ago=100))
    high = run_valuation(base_inputs.replace(rev_year_2_ago=9_000_000))
    assert low.cagr == high.cagr


def test_missing_revenue_and_debt_are_treated_as_zero():
    r = run_valuation({"revLastYear": None, "debt": "", "multiple": 5})
    assert r.revenue_ttm == 0
    assert r.equity_value == 0


def test_costs_over_100_give_negative_margin_without_error(base_inputs):
    r = run_valuation(base_inputs.replace(materials_pct=60))
    assert r.total_cost_pct == 126
    assert r.ebitda_margin_reported == -26
    assert r.ebitda_reported < 0
    assert r.equity_value < 0


def test_revenue_mix_does_not_affect_results(base_inputs):
    skewed = base_inputs.replace(service_mix_pct=90, install_mix_pct=90, maintenance_pct=90)
    assert run_valuation(skewed) == run_valuation(base_inputs)


def test_camel_case_mapping_matches_dataclass_input(base_inputs):
    raw = {
        "revYear3Ago": 1_800_000,
        "revLastYear": 2_500_000,
        "techLaborPct": 30,
        "materialsPct": 18,
        "overheadPct": 15,
        "marketingPct": 8,
        "fleetPct": 6,
        "otherCostPct": 7,
        "ownerAddbackPct": 4,
        "multiple": 5,
        "debt": 250_000,
        "techs": 8,
        "trucks": 6,
        "growthRate": 5,
    }
    assert run_valuation(raw).equity_value == pytest.approx(run_valuation(base_inputs).equity_value)


def test_results_table_lists_every_field_with_display_text(base_inputs):
    table = results_table(run_valuation(base_inputs))

    assert list(table["Field"]) == list(RESULT_FIELDS)
    display = dict(zip(table["Field"], table["Display"]))
    assert display["enterprise_value"] == "$2,500,000"
    assert display["adj_margin"] == "20.0%"
    assert display["cagr"] == "17.9%"


def test_asset_floor_summary(base_inputs):
    summary = asset_floor_summary(base_inputs)
    assert summary["equity_over_floor"] == pytest.approx(2_250_000 - 450_000)
    assert summary["floor_supports_value"] is False

    heavy_assets = asset_floor_summary(base_inputs.replace(asset_floor=3_000_000))
    assert heavy_assets["floor_supports_value"] is True


def test_omitted_fields_count_as_zero():
    r = run_valuation({"multiple": 5})
    assert r.revenue_ttm == 0
    assert r.enterprise_value == 0
    assert r.equity_value == 0
    assert r.cagr == 0

    r = run_valuation({"revLastYear": 1_000_000, "multiple": 5})
    # no costs, no add-back, no debt supplied
    assert r.ebitda_adjusted == pytest.approx(1_000_000)
    assert r.equity_value == r.enterprise_value == pytest.approx(5_000_000)
    assert r.cagr == 0


def test_unset_record_field_computes_as_zero(base_inputs):
    r = run_valuation(ValuationInputs(rev_last_year=None, multiple=5))
    assert r.revenue_ttm == 0
    assert r.cagr == 0

    r = run_valuation(replace(base_inputs, debt=None))
    assert r.equity_value == pytest.approx(r.enterprise_value)


def test_unit_economics(base_inputs):
    units = unit_economics(base_inputs)
    assert units["revenue_per_tech"] == pytest.approx(312_500)
    assert units["revenue_per_truck"] == pytest.approx(2_500_000 / 6)

    empty_fleet = unit_economics(base_inputs.replace(techs=0, trucks=-1))
    assert empty_fleet == {"revenue_per_tech": 0.0, "revenue_per_truck": 0.0}
