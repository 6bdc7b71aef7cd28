"""
schedules.py — Revenue, Depreciation & Debt Schedules

Purpose:
- Project revenue forward at a constant growth rate
- Roll forward PP&E with straight-line depreciation
- Amortize debt with a fixed yearly repayment

Each schedule is a fold over the projection years: a single-period step
function takes the running beginning balance and returns one row, whose
ending balance becomes the next period's beginning balance.
"""

from __future__ import annotations

from typing import Sequence, Tuple

from dcf_engine.services.modeling.types import (
    Assumptions,
    DebtRow,
    DepreciationRow,
)


# -----------------------------------------------------------------------------
# Revenue
# -----------------------------------------------------------------------------


def project_revenues(base_revenue: float, growth_rate: float, years: int) -> Tuple[float, ...]:
    """
    Project revenues for `years` periods using a constant growth rate.

    Example:
        project_revenues(1_000_000_000, 8, 2)
        # (1080000000.0, 1166400000.0)
    """
    revenues = []
    current_revenue = base_revenue
    for _ in range(years):
        current_revenue = current_revenue * (1 + growth_rate / 100)
        revenues.append(current_revenue)
    return tuple(revenues)


# -----------------------------------------------------------------------------
# Depreciation
# -----------------------------------------------------------------------------


def opening_ppe(assumptions: Assumptions) -> float:
    """
    Starting PP&E, approximated as two years of base-year capex.

    Stands in for the unknown opening book value.
    """
    return assumptions.base_revenue * (assumptions.capex_percent / 100) * 2


def depreciation_step(
    year: int,
    beginning_ppe: float,
    revenue: float,
    capex_percent: float,
    depreciation_years: float,
) -> DepreciationRow:
    capex = revenue * (capex_percent / 100)
    depreciation = (beginning_ppe + capex) / depreciation_years
    return DepreciationRow(
        year=year,
        beginning_ppe=beginning_ppe,
        capex=capex,
        depreciation=depreciation,
        ending_ppe=beginning_ppe + capex - depreciation,
    )


def build_depreciation_schedule(
    assumptions: Assumptions,
    revenues: Sequence[float],
) -> Tuple[DepreciationRow, ...]:
    """
    Roll PP&E forward one row per projected revenue.

    depreciation_years must be >= 1; the sanitizer guarantees this.
    """
    schedule = []
    beginning = opening_ppe(assumptions)
    for i, revenue in enumerate(revenues):
        row = depreciation_step(
            i + 1,
            beginning,
            revenue,
            assumptions.capex_percent,
            assumptions.depreciation_years,
        )
        schedule.append(row)
        beginning = row.ending_ppe
    return tuple(schedule)


# -----------------------------------------------------------------------------
# Debt
# -----------------------------------------------------------------------------


def debt_step(
    year: int,
    beginning_balance: float,
    interest_rate: float,
    yearly_repayment: float,
) -> DebtRow:
    # Repayment is capped at the outstanding balance, so the floor is zero.
    repayment = min(yearly_repayment, beginning_balance)
    return DebtRow(
        year=year,
        beginning_balance=beginning_balance,
        interest_expense=beginning_balance * (interest_rate / 100),
        repayment=repayment,
        ending_balance=beginning_balance - repayment,
    )


def build_debt_schedule(assumptions: Assumptions) -> Tuple[DebtRow, ...]:
    """
    Amortize the opening debt balance over the projection horizon.

    Once the balance reaches zero, interest and repayment stay at zero.
    """
    schedule = []
    balance = assumptions.debt_balance
    for i in range(assumptions.projection_years):
        row = debt_step(i + 1, balance, assumptions.interest_rate, assumptions.yearly_repayment)
        schedule.append(row)
        balance = row.ending_balance
    return tuple(schedule)
