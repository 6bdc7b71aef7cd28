"""
Unit tests for dcf.py
"""

import math

import pytest

from dcf_engine.services.modeling.dcf import (
    discount_factors,
    gordon_terminal_value,
    is_valid_valuation,
    run_dcf,
)


def test_discount_factors_decrease_within_unit_interval():
    factors = discount_factors(10.0, 5)

    assert len(factors) == 5
    assert factors[0] == pytest.approx(1 / 1.1)
    assert all(0 < f <= 1 for f in factors)
    assert all(a > b for a, b in zip(factors, factors[1:]))


def test_flat_perpetuity_values_to_cash_flow_over_rate():
    # 100/year forever at 10% is worth 1000 regardless of the horizon split
    result = run_dcf([100.0, 100.0], wacc=10.0, terminal_growth_rate=0.0,
                     net_debt=0.0, shares_outstanding=1.0)

    assert result.terminal_value == pytest.approx(1_000.0)
    assert result.sum_pv_ufcf == pytest.approx(100 / 1.1 + 100 / 1.21)
    assert result.enterprise_value == pytest.approx(1_000.0)
    assert result.implied_share_price == pytest.approx(1_000.0)
    assert is_valid_valuation(result)


def test_equity_bridge():
    result = run_dcf([50.0, 60.0, 70.0], wacc=9.0, terminal_growth_rate=2.0,
                     net_debt=200.0, shares_outstanding=4.0)

    assert result.equity_value == pytest.approx(result.enterprise_value - 200.0)
    assert result.implied_share_price == pytest.approx(result.equity_value / 4.0)
    assert result.pv_terminal_value == pytest.approx(
        result.terminal_value * result.discount_factors[-1]
    )


def test_terminal_growth_equal_to_wacc_does_not_raise():
    result = run_dcf([100.0], wacc=10.0, terminal_growth_rate=10.0,
                     net_debt=0.0, shares_outstanding=1.0)

    assert math.isinf(result.terminal_value)
    assert not is_valid_valuation(result)


def test_terminal_growth_above_wacc_is_invalid():
    result = run_dcf([100.0], wacc=5.0, terminal_growth_rate=8.0,
                     net_debt=0.0, shares_outstanding=1.0)

    assert math.isfinite(result.terminal_value)
    assert result.terminal_value < 0
    assert not is_valid_valuation(result)


def test_gordon_singularity():
    assert gordon_terminal_value(-10.0, 5.0, 5.0) == -math.inf
    assert math.isnan(gordon_terminal_value(0.0, 5.0, 5.0))


def test_empty_stream_values_to_zero():
    result = run_dcf([], wacc=10.0, terminal_growth_rate=2.0,
                     net_debt=100.0, shares_outstanding=10.0)

    assert result.discount_factors == ()
    assert result.terminal_value == 0.0
    assert result.enterprise_value == 0.0
    assert result.implied_share_price == pytest.approx(-10.0)
    assert is_valid_valuation(result)


def test_zero_shares_gives_zero_price():
    result = run_dcf([100.0], wacc=10.0, terminal_growth_rate=2.0,
                     net_debt=0.0, shares_outstanding=0.0)
    assert result.implied_share_price == 0.0
