"""
sanitizer.py — Assumption Clamping & Advisory Validation

Purpose:
- Clamp a raw Assumptions record into ranges that are safe for division and
  discounting (depreciation life >= 1, shares >= 1, terminal growth < WACC)
- Report every change made, so callers can surface corrections instead of
  hiding them
- Produce advisory warnings for values outside "typical" bands

Clamping never raises: sweeps perturb single fields far outside sensible
ranges and must still get a complete run back.
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Any, Dict, List, Tuple

from dcf_engine.core.logging import get_logger
from dcf_engine.services.modeling.types import (
    Adjustment,
    Assumptions,
    SanitizationResult,
    ValidationWarning,
    default_assumptions,
)

logger = get_logger(__name__)


# -----------------------------------------------------------------------------
# Clamp Ranges
# -----------------------------------------------------------------------------

MAX_REVENUE = 10_000_000_000_000.0  # $10T sanity cap

MIN_PROJECTION_YEARS = 0
MAX_PROJECTION_YEARS = 20

GROWTH_MIN = -50.0
GROWTH_MAX = 100.0

COGS_MIN = 20.0
COGS_MAX = 95.0

SGA_MIN = 5.0
SGA_MAX = 50.0

TAX_MIN = 10.0
TAX_MAX = 40.0

DSO_MIN = 15.0
DSO_MAX = 120.0
DIO_MIN = 0.0
DIO_MAX = 180.0
DPO_MIN = 10.0
DPO_MAX = 120.0

CAPEX_MIN = 0.0
CAPEX_MAX = 50.0
DEPRECIATION_YEARS_MIN = 1.0
DEPRECIATION_YEARS_MAX = 50.0

INTEREST_MIN = 0.0
INTEREST_MAX = 30.0

WACC_MIN = 5.0
WACC_MAX = 20.0
TERMINAL_GROWTH_MIN = 0.0
TERMINAL_GROWTH_MAX = 5.0
TERMINAL_GROWTH_BUFFER = 0.5  # pp below WACC

MIN_SHARES_OUTSTANDING = 1.0

# -----------------------------------------------------------------------------
# Warning Bands (advisory only)
# -----------------------------------------------------------------------------

GROWTH_WARNING_HIGH = 50.0
COGS_WARNING_HIGH = 85.0
COGS_WARNING_LOW = 30.0
TAX_WARNING_LOW = 15.0
TAX_WARNING_HIGH = 35.0
DSO_WARNING = 90.0
DPO_WARNING = 90.0


def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp value into [lower, upper]."""
    return min(max(value, lower), upper)


def validate_assumptions(assumptions: Assumptions) -> List[ValidationWarning]:
    """
    Return advisory warnings for problematic values.

    Warnings are informational and never block computation. They describe the
    raw input, so call this before sanitizing.
    """
    a = assumptions
    warnings: List[ValidationWarning] = []

    if a.base_revenue <= 0:
        warnings.append(ValidationWarning(
            "base_revenue", "Base revenue must be positive", "high"))

    if a.revenue_growth_rate > GROWTH_WARNING_HIGH:
        warnings.append(ValidationWarning(
            "revenue_growth_rate",
            f"Growth rate of {a.revenue_growth_rate}% may be unsustainable",
            "medium",
        ))
    if a.revenue_growth_rate < GROWTH_MIN:
        warnings.append(ValidationWarning(
            "revenue_growth_rate", "Significant decline in revenue projected", "high"))

    if a.cogs_percent > COGS_WARNING_HIGH:
        warnings.append(ValidationWarning(
            "cogs_percent",
            f"COGS of {a.cogs_percent}% leaves very thin margins",
            "medium",
        ))
    if a.cogs_percent < COGS_WARNING_LOW:
        warnings.append(ValidationWarning(
            "cogs_percent",
            f"COGS of {a.cogs_percent}% is unusually low (typical for software)",
            "low",
        ))

    if a.tax_rate < TAX_WARNING_LOW or a.tax_rate > TAX_WARNING_HIGH:
        warnings.append(ValidationWarning(
            "tax_rate",
            f"Effective tax rate of {a.tax_rate}% is unusual - may have one-time items",
            "low",
        ))

    if a.days_receivables > DSO_WARNING:
        warnings.append(ValidationWarning(
            "days_receivables",
            f"DSO of {a.days_receivables} days may indicate collection issues",
            "medium",
        ))
    if a.days_payables > DPO_WARNING:
        warnings.append(ValidationWarning(
            "days_payables",
            f"DPO of {a.days_payables} days indicates stretched payables",
            "low",
        ))

    if a.wacc < WACC_MIN:
        warnings.append(ValidationWarning(
            "wacc", f"WACC of {a.wacc}% is very low - verify cost of capital", "medium"))
    if a.wacc > WACC_MAX:
        warnings.append(ValidationWarning(
            "wacc", f"WACC of {a.wacc}% is high - reflects significant risk", "medium"))

    if a.terminal_growth_rate >= a.wacc:
        warnings.append(ValidationWarning(
            "terminal_growth_rate",
            "Terminal growth cannot exceed WACC (creates infinite value)",
            "high",
        ))

    return warnings


def _replace_non_finite(assumptions: Assumptions) -> Tuple[Dict[str, Any], List[Adjustment]]:
    """Swap NaN/inf inputs for the default value of the same field."""
    defaults = default_assumptions().to_dict()
    values = assumptions.to_dict()
    adjustments: List[Adjustment] = []
    for name, value in values.items():
        if isinstance(value, float) and not math.isfinite(value):
            values[name] = defaults[name]
            adjustments.append(Adjustment(name, value, defaults[name]))
    return values, adjustments


def sanitize_assumptions(assumptions: Assumptions) -> SanitizationResult:
    """
    Clamp every field into its safe range.

    Args:
        assumptions: Raw, possibly out-of-range Assumptions

    Returns:
        SanitizationResult with:
        - assumptions: the clamped record (a new instance; input untouched)
        - adjustments: one Adjustment per field that changed
        - warnings: advisory warnings for the raw input
    """
    warnings = validate_assumptions(assumptions)
    values, adjustments = _replace_non_finite(assumptions)
    v = values

    wacc = clamp(v["wacc"], WACC_MIN, WACC_MAX)
    clamped = {
        "base_revenue": clamp(v["base_revenue"], 0.0, MAX_REVENUE),
        "projection_years": int(clamp(round(v["projection_years"]),
                                      MIN_PROJECTION_YEARS, MAX_PROJECTION_YEARS)),
        "revenue_growth_rate": clamp(v["revenue_growth_rate"], GROWTH_MIN, GROWTH_MAX),
        "cogs_percent": clamp(v["cogs_percent"], COGS_MIN, COGS_MAX),
        "sga_percent": clamp(v["sga_percent"], SGA_MIN, SGA_MAX),
        "tax_rate": clamp(v["tax_rate"], TAX_MIN, TAX_MAX),
        "days_receivables": clamp(v["days_receivables"], DSO_MIN, DSO_MAX),
        "days_inventory": clamp(v["days_inventory"], DIO_MIN, DIO_MAX),
        "days_payables": clamp(v["days_payables"], DPO_MIN, DPO_MAX),
        "capex_percent": clamp(v["capex_percent"], CAPEX_MIN, CAPEX_MAX),
        "depreciation_years": clamp(v["depreciation_years"],
                                    DEPRECIATION_YEARS_MIN, DEPRECIATION_YEARS_MAX),
        "debt_balance": max(0.0, v["debt_balance"]),
        "interest_rate": clamp(v["interest_rate"], INTEREST_MIN, INTEREST_MAX),
        "yearly_repayment": max(0.0, v["yearly_repayment"]),
        "wacc": wacc,
        "terminal_growth_rate": clamp(
            v["terminal_growth_rate"],
            TERMINAL_GROWTH_MIN,
            min(TERMINAL_GROWTH_MAX, wacc - TERMINAL_GROWTH_BUFFER),
        ),
        "shares_outstanding": max(MIN_SHARES_OUTSTANDING, v["shares_outstanding"]),
    }

    for name, new_value in clamped.items():
        if new_value != v[name]:
            adjustments.append(Adjustment(name, v[name], new_value))

    sanitized = replace(assumptions, **{**v, **clamped})

    for adjustment in adjustments:
        logger.debug(
            "Clamped %s from %r to %r",
            adjustment.field, adjustment.original, adjustment.adjusted,
        )

    return SanitizationResult(
        assumptions=sanitized,
        adjustments=tuple(adjustments),
        warnings=tuple(warnings),
    )
