"""
engine.py — Projection & Valuation Orchestrator

Runs the full model in dependency order:

    Sanitize → Revenue → Depreciation → Debt → Income Statement
             → Balance Sheet → Cash Flow → DCF Valuation

No branching, no I/O beyond DEBUG logging, no randomness: the same
Assumptions always produce an identical ModelOutput, which is what makes the
engine safe to call in tight loops for scenario and sensitivity sweeps.
"""

from __future__ import annotations

from dcf_engine.core.logging import get_logger
from dcf_engine.services.modeling.dcf import run_dcf
from dcf_engine.services.modeling.sanitizer import sanitize_assumptions
from dcf_engine.services.modeling.schedules import (
    build_debt_schedule,
    build_depreciation_schedule,
    project_revenues,
)
from dcf_engine.services.modeling.three_statement import (
    build_balance_sheet,
    build_cash_flow,
    build_income_statement,
)
from dcf_engine.services.modeling.types import Assumptions, ModelOutput

logger = get_logger(__name__)


def run_model(assumptions: Assumptions, sanitize: bool = True) -> ModelOutput:
    """
    Main entrypoint: project all three statements and value the company.

    Args:
        assumptions: Raw Assumptions for one scenario
        sanitize: Clamp inputs first (default). Pass False only when the
            caller has already sanitized, or to exercise the raw formulas.

    Returns:
        ModelOutput with every schedule, the valuation, and the sanitizer's
        adjustments and advisory warnings.
    """
    adjustments = ()
    warnings = ()
    if sanitize:
        result = sanitize_assumptions(assumptions)
        assumptions = result.assumptions
        adjustments = result.adjustments
        warnings = result.warnings

    revenues = project_revenues(
        assumptions.base_revenue,
        assumptions.revenue_growth_rate,
        assumptions.projection_years,
    )
    depreciation_schedule = build_depreciation_schedule(assumptions, revenues)
    debt_schedule = build_debt_schedule(assumptions)
    income_statement = build_income_statement(
        assumptions, revenues, depreciation_schedule, debt_schedule
    )
    balance_sheet = build_balance_sheet(
        assumptions, income_statement, depreciation_schedule, debt_schedule
    )
    cash_flow = build_cash_flow(assumptions, income_statement, depreciation_schedule)
    valuation = run_dcf(
        [row.unlevered_fcf for row in cash_flow],
        assumptions.wacc,
        assumptions.terminal_growth_rate,
        assumptions.net_debt,
        assumptions.shares_outstanding,
    )

    logger.debug(
        "Model run: %d years, EV=%.2f, price=%.4f",
        assumptions.projection_years,
        valuation.enterprise_value,
        valuation.implied_share_price,
    )

    return ModelOutput(
        assumptions=assumptions,
        revenues=revenues,
        depreciation_schedule=depreciation_schedule,
        debt_schedule=debt_schedule,
        income_statement=income_statement,
        balance_sheet=balance_sheet,
        cash_flow=cash_flow,
        valuation=valuation,
        adjustments=adjustments,
        warnings=warnings,
    )
