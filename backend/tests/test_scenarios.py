"""
Unit tests for scenarios.py
"""

from dataclasses import replace

import pytest

from dcf_engine.services.modeling.scenarios import (
    BEAR_TERMINAL_GROWTH,
    BULL_TERMINAL_GROWTH,
    Scenario,
    build_default_scenarios,
    compare_scenarios,
    run_scenarios,
)


def test_build_default_scenarios(defaults):
    base, bull, bear = build_default_scenarios(defaults)

    assert (base.name, bull.name, bear.name) == ("base", "bull", "bear")
    assert base.assumptions == defaults
    assert bull.assumptions.revenue_growth_rate == pytest.approx(9.6)
    assert bull.assumptions.cogs_percent == pytest.approx(58.0)
    assert bull.assumptions.terminal_growth_rate == BULL_TERMINAL_GROWTH
    assert bear.assumptions.revenue_growth_rate == pytest.approx(5.6)
    assert bear.assumptions.cogs_percent == pytest.approx(63.0)
    assert bear.assumptions.terminal_growth_rate == BEAR_TERMINAL_GROWTH


def test_bull_above_base_above_bear(defaults):
    results = {r.name: r for r in run_scenarios(build_default_scenarios(defaults))}

    assert all(r.valid for r in results.values())
    assert results["bull"].implied_share_price > results["base"].implied_share_price
    assert results["base"].implied_share_price > results["bear"].implied_share_price


def test_compare_scenarios_deltas(defaults):
    rows = {row["name"]: row for row in compare_scenarios(
        run_scenarios(build_default_scenarios(defaults))
    )}

    assert rows["base"]["delta_vs_base"] == 0.0
    assert rows["base"]["pct_delta_vs_base"] == 0.0
    assert rows["bull"]["delta_vs_base"] > 0
    assert rows["bear"]["pct_delta_vs_base"] < 0
    assert rows["bear"]["delta_vs_base"] == pytest.approx(
        rows["bear"]["implied_share_price"] - rows["base"]["implied_share_price"]
    )


def test_compare_without_base_has_no_deltas(defaults):
    results = run_scenarios([Scenario("upside", replace(defaults, wacc=9.0))])
    row = compare_scenarios(results)[0]

    assert row["implied_share_price"] is not None
    assert row["delta_vs_base"] is None
    assert row["pct_delta_vs_base"] is None


def test_duplicate_names_rejected(defaults):
    with pytest.raises(ValueError, match="Duplicate"):
        run_scenarios([Scenario("a", defaults), Scenario("a", defaults)])


def test_unknown_kind_rejected(defaults):
    with pytest.raises(ValueError, match="Unknown scenario kind"):
        run_scenarios([Scenario("a", defaults, kind="moonshot")])
