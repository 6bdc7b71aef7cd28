"""
Shared fixtures for the projection engine tests.
"""

from dataclasses import replace

import pytest

from dcf_engine.services.modeling.engine import run_model
from dcf_engine.services.modeling.types import Assumptions, ModelOutput, default_assumptions


@pytest.fixture
def defaults() -> Assumptions:
    """The default company: $1B revenue, 8% growth, 5 years."""
    return default_assumptions()


@pytest.fixture
def default_output(defaults) -> ModelOutput:
    return run_model(defaults)


@pytest.fixture
def small_debt(defaults) -> Assumptions:
    """$50M of debt repaid at $20M/year, fully retired in year 3."""
    return replace(defaults, debt_balance=50_000_000.0, yearly_repayment=20_000_000.0)
