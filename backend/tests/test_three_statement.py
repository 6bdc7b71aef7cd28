"""
Unit tests for three_statement.py

Income statement, working capital, balance sheet (cash plug) and cash flow.
"""

from dataclasses import replace

import pytest

from dcf_engine.services.modeling.engine import run_model
from dcf_engine.services.modeling.three_statement import (
    DAYS_PER_YEAR,
    base_year_working_capital,
    compute_working_capital,
)


def test_income_statement_year_one(default_output):
    row = default_output.income_statement[0]

    assert row.revenue == 1_080_000_000.0
    assert row.cogs == pytest.approx(648_000_000.0)
    assert row.gross_profit == pytest.approx(432_000_000.0)
    assert row.sga == pytest.approx(216_000_000.0)
    assert row.depreciation == pytest.approx(15_400_000.0)
    assert row.ebit == pytest.approx(200_600_000.0)
    assert row.interest_expense == pytest.approx(10_000_000.0)
    assert row.ebt == pytest.approx(190_600_000.0)
    assert row.taxes == pytest.approx(47_650_000.0)
    assert row.net_income == pytest.approx(142_950_000.0)


def test_no_tax_benefit_on_losses(defaults):
    output = run_model(replace(defaults, cogs_percent=90.0, sga_percent=20.0))

    for row in output.income_statement:
        assert row.ebt < 0
        assert row.taxes == 0.0
        assert row.net_income == row.ebt


def test_compute_working_capital():
    wc = compute_working_capital(365.0, 219.0, 45.0, 60.0, 30.0)

    assert wc.accounts_receivable == pytest.approx(45.0)
    assert wc.inventory == pytest.approx(36.0)
    assert wc.accounts_payable == pytest.approx(18.0)
    assert wc.net_working_capital == pytest.approx(63.0)


def test_base_year_working_capital(defaults):
    wc = base_year_working_capital(defaults)
    # (45 + 60% * 60 - 60% * 30) days of revenue
    assert wc.net_working_capital == pytest.approx(1_000_000_000.0 * 63 / DAYS_PER_YEAR)


def test_balance_sheet_balances_every_period(default_output):
    for row in default_output.balance_sheet:
        assert row.cash >= 0
        assert abs(row.total_assets - (row.total_liabilities + row.total_equity)) < 1e-3
        assert row.balance_check == 0.0


def test_balance_sheet_balances_when_plug_floors_every_year(defaults):
    # No debt, long collection/inventory cycles and heavy capex: the plug
    # is negative in every year
    output = run_model(replace(
        defaults,
        revenue_growth_rate=40.0,
        days_receivables=120.0,
        days_inventory=180.0,
        capex_percent=30.0,
        debt_balance=0.0,
        yearly_repayment=0.0,
    ))

    assert output.balance_sheet[0].cash_floored
    for row in output.balance_sheet:
        assert row.total_assets == pytest.approx(row.total_liabilities + row.total_equity)
        assert row.unfunded_assets >= 0


def test_cash_floor_understates_asset_lines(default_output):
    """
    Known limitation: a negative cash plug is floored at zero rather than
    funded by new debt. Total assets still equal liabilities plus equity,
    but the asset lines (AR + inventory + cash + PP&E) add up to more than
    that total by `unfunded_assets`.

    The default company hits this in year 1 by roughly $2.06M.
    """
    year_one = default_output.balance_sheet[0]
    asset_lines = (
        year_one.accounts_receivable + year_one.inventory + year_one.cash + year_one.ppe
    )

    assert year_one.cash == 0.0
    assert year_one.cash_floored
    assert year_one.unfunded_assets == pytest.approx(2_060_959, rel=1e-4)
    assert asset_lines - year_one.total_assets == pytest.approx(year_one.unfunded_assets)

    later_years = default_output.balance_sheet[1:]
    assert all(not row.cash_floored for row in later_years)
    assert all(row.cash > 0 for row in later_years)
    assert all(row.unfunded_assets == pytest.approx(0.0, abs=1e-3) for row in later_years)


def test_retained_earnings_accumulate_net_income(default_output):
    running = 0.0
    for bs_row, is_row in zip(default_output.balance_sheet, default_output.income_statement):
        running += is_row.net_income
        assert bs_row.retained_earnings == pytest.approx(running)
        assert bs_row.total_equity == bs_row.retained_earnings


def test_balance_sheet_uses_schedule_balances(default_output):
    for bs_row, dep_row, debt_row in zip(
        default_output.balance_sheet,
        default_output.depreciation_schedule,
        default_output.debt_schedule,
    ):
        assert bs_row.ppe == dep_row.ending_ppe
        assert bs_row.debt_balance == debt_row.ending_balance


def test_cash_flow_year_one(default_output):
    row = default_output.cash_flow[0]
    change_in_nwc = 80_000_000.0 * 63 / DAYS_PER_YEAR

    assert row.nopat == pytest.approx(150_450_000.0)
    assert row.change_in_nwc == pytest.approx(change_in_nwc)
    assert row.capex == pytest.approx(54_000_000.0)
    assert row.unlevered_fcf == pytest.approx(
        150_450_000.0 + 15_400_000.0 - change_in_nwc - 54_000_000.0
    )


def test_ufcf_ignores_interest(defaults):
    levered = run_model(defaults)
    unlevered = run_model(replace(defaults, debt_balance=0.0, yearly_repayment=0.0))

    for a, b in zip(levered.cash_flow, unlevered.cash_flow):
        assert a.unlevered_fcf == pytest.approx(b.unlevered_fcf)
        assert a.net_income < b.net_income
