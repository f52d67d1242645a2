from __future__ import annotations

import pytest

from hvac_valuation.defaults import DEFAULTS
from hvac_valuation.schema import ValuationInputs


@pytest.fixture
def base_inputs() -> ValuationInputs:
    return ValuationInputs(**DEFAULTS)


@pytest.fixture
def zero_revenue_inputs(base_inputs) -> ValuationInputs:
    return base_inputs.replace(rev_last_year=0)
