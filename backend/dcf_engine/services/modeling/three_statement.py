"""
three_statement.py — Forward Financial Projections (3-Statement Model)

Purpose:
- Generate forecasted:
    * Income Statement (Revenue → EBIT → Net Income)
    * Balance Sheet (working capital, PP&E, debt, retained earnings, cash plug)
    * Cash Flow Statement (Unlevered Free Cash Flow focus)

All builders take rows aligned by index with the revenue, depreciation and
debt schedules, and return tuples of frozen rows.
"""

from typing import Sequence, Tuple

from dcf_engine.services.modeling.types import (
    Assumptions,
    BalanceSheetRow,
    CashFlowRow,
    DebtRow,
    DepreciationRow,
    IncomeStatementRow,
    WorkingCapital,
)

DAYS_PER_YEAR = 365


def build_income_statement(
    assumptions: Assumptions,
    revenues: Sequence[float],
    depreciation_schedule: Sequence[DepreciationRow],
    debt_schedule: Sequence[DebtRow],
) -> Tuple[IncomeStatementRow, ...]:
    """
    Project the income statement for every forecast year.

    Flow: Revenue → COGS → Gross Profit → SG&A → Depreciation → EBIT
          → Interest → EBT → Taxes → Net Income

    Taxes apply only to positive EBT (no tax benefit on losses).
    """
    rows = []
    for i, revenue in enumerate(revenues):
        cogs = revenue * (assumptions.cogs_percent / 100)
        gross_profit = revenue - cogs
        sga = revenue * (assumptions.sga_percent / 100)
        depreciation = depreciation_schedule[i].depreciation
        ebit = gross_profit - sga - depreciation
        interest_expense = debt_schedule[i].interest_expense
        ebt = ebit - interest_expense
        taxes = max(0.0, ebt * (assumptions.tax_rate / 100))

        rows.append(IncomeStatementRow(
            year=i + 1,
            revenue=revenue,
            cogs=cogs,
            gross_profit=gross_profit,
            sga=sga,
            depreciation=depreciation,
            ebit=ebit,
            interest_expense=interest_expense,
            ebt=ebt,
            taxes=taxes,
            net_income=ebt - taxes,
        ))
    return tuple(rows)


def compute_working_capital(
    revenue: float,
    cogs: float,
    days_receivables: float,
    days_inventory: float,
    days_payables: float,
) -> WorkingCapital:
    """
    Working capital balances from turnover days.

    AR = revenue/365 * DSO, inventory = COGS/365 * DIO, AP = COGS/365 * DPO.
    """
    receivables = revenue / DAYS_PER_YEAR * days_receivables
    inventory = cogs / DAYS_PER_YEAR * days_inventory
    payables = cogs / DAYS_PER_YEAR * days_payables
    return WorkingCapital(
        accounts_receivable=receivables,
        inventory=inventory,
        accounts_payable=payables,
        net_working_capital=receivables + inventory - payables,
    )


def _working_capital_for(assumptions: Assumptions, revenue: float, cogs: float) -> WorkingCapital:
    return compute_working_capital(
        revenue,
        cogs,
        assumptions.days_receivables,
        assumptions.days_inventory,
        assumptions.days_payables,
    )


def base_year_working_capital(assumptions: Assumptions) -> WorkingCapital:
    """Working capital implied by base revenue and the COGS ratio (period 0)."""
    base_cogs = assumptions.base_revenue * (assumptions.cogs_percent / 100)
    return _working_capital_for(assumptions, assumptions.base_revenue, base_cogs)


def build_balance_sheet(
    assumptions: Assumptions,
    income_statement: Sequence[IncomeStatementRow],
    depreciation_schedule: Sequence[DepreciationRow],
    debt_schedule: Sequence[DebtRow],
) -> Tuple[BalanceSheetRow, ...]:
    """
    Project year-end balance sheets.

    Assets:      AR + Inventory + Cash plug + PP&E
    Liabilities: AP + Debt
    Equity:      Retained earnings (cumulative net income from zero)

    The cash plug is whatever cash makes assets equal liabilities plus
    equity, and total assets are reported as liabilities plus equity every
    period. A negative plug is floored at zero rather than modeled as
    negative cash or new financing; in that case the reported total
    understates the asset lines by `unfunded_assets`.
    """
    rows = []
    retained_earnings = 0.0

    for i, is_row in enumerate(income_statement):
        wc = _working_capital_for(assumptions, is_row.revenue, is_row.cogs)
        retained_earnings += is_row.net_income

        ppe = depreciation_schedule[i].ending_ppe
        debt_balance = debt_schedule[i].ending_balance

        total_liabilities = wc.accounts_payable + debt_balance
        total_equity = retained_earnings
        non_cash_assets = wc.accounts_receivable + wc.inventory + ppe

        cash = max(0.0, total_liabilities + total_equity - non_cash_assets)
        total_current_assets = wc.accounts_receivable + wc.inventory + cash
        total_assets = total_liabilities + total_equity

        rows.append(BalanceSheetRow(
            year=is_row.year,
            accounts_receivable=wc.accounts_receivable,
            inventory=wc.inventory,
            cash=cash,
            total_current_assets=total_current_assets,
            ppe=ppe,
            total_assets=total_assets,
            accounts_payable=wc.accounts_payable,
            debt_balance=debt_balance,
            total_liabilities=total_liabilities,
            retained_earnings=retained_earnings,
            total_equity=total_equity,
            net_working_capital=wc.net_working_capital,
            balance_check=total_assets - (total_liabilities + total_equity),
            unfunded_assets=non_cash_assets + cash - total_assets,
        ))
    return tuple(rows)


def build_cash_flow(
    assumptions: Assumptions,
    income_statement: Sequence[IncomeStatementRow],
    depreciation_schedule: Sequence[DepreciationRow],
) -> Tuple[CashFlowRow, ...]:
    """
    Project the cash flow statement and unlevered free cash flow.

    UFCF = EBIT * (1 - tax rate) + D&A - ΔNWC - CapEx

    EBIT (pre-interest) is used rather than net income: the DCF discounts
    unlevered flows and subtracts net debt separately.
    """
    rows = []
    previous_nwc = base_year_working_capital(assumptions).net_working_capital

    for i, is_row in enumerate(income_statement):
        nwc = _working_capital_for(assumptions, is_row.revenue, is_row.cogs).net_working_capital
        change_in_nwc = nwc - previous_nwc
        previous_nwc = nwc

        capex = depreciation_schedule[i].capex
        nopat = is_row.ebit * (1 - assumptions.tax_rate / 100)

        rows.append(CashFlowRow(
            year=is_row.year,
            net_income=is_row.net_income,
            nopat=nopat,
            depreciation=is_row.depreciation,
            change_in_nwc=change_in_nwc,
            capex=capex,
            unlevered_fcf=nopat + is_row.depreciation - change_in_nwc - capex,
        ))
    return tuple(rows)
