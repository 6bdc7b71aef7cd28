"""
dcf.py — Discounted Cash Flow Valuation

Purpose:
- Discount an unlevered free cash flow stream at WACC
- Add a Gordon-growth terminal value on the final projected year
- Bridge enterprise value → equity value → implied share price

The valuator trusts its caller (the sanitizer) to guarantee wacc > g. It does
not raise when that precondition is broken: the terminal value becomes
non-finite or sign-inverted, and `is_valid_valuation` lets sweep callers
flag such results as "N/A".
"""

from __future__ import annotations

import math
from typing import Sequence

from dcf_engine.services.modeling.types import ValuationResult


def discount_factors(wacc: float, periods: int) -> tuple:
    """1 / (1 + wacc)^(i+1) for i in 0..periods-1, wacc in percent."""
    rate = wacc / 100
    return tuple(1 / (1 + rate) ** (i + 1) for i in range(periods))


def gordon_terminal_value(final_fcf: float, wacc: float, terminal_growth_rate: float) -> float:
    """
    Perpetuity-growth terminal value as of the final projected year.

    Returns ±inf (sign of the numerator) or NaN instead of raising when
    wacc == terminal growth.
    """
    rate = wacc / 100
    growth = terminal_growth_rate / 100
    numerator = final_fcf * (1 + growth)
    denominator = rate - growth
    if denominator == 0:
        if numerator == 0:
            return math.nan
        return math.copysign(math.inf, numerator)
    return numerator / denominator


def run_dcf(
    ufcf_stream: Sequence[float],
    wacc: float,
    terminal_growth_rate: float,
    net_debt: float,
    shares_outstanding: float,
) -> ValuationResult:
    """
    Value a projected unlevered free cash flow stream.

    Args:
        ufcf_stream: Unlevered FCF per projected year (year 1 first)
        wacc: Discount rate in percent (10 means 10%)
        terminal_growth_rate: Perpetual growth after the horizon, in percent
        net_debt: Debt minus cash, subtracted from enterprise value
        shares_outstanding: Share count for the per-share value

    Returns:
        ValuationResult. An empty stream values to zero enterprise value with
        a zero terminal value.
    """
    stream = tuple(ufcf_stream)
    factors = discount_factors(wacc, len(stream))
    pv_ufcf = tuple(fcf * factor for fcf, factor in zip(stream, factors))
    sum_pv_ufcf = sum(pv_ufcf)

    if stream:
        terminal_value = gordon_terminal_value(stream[-1], wacc, terminal_growth_rate)
        pv_terminal_value = terminal_value * factors[-1]
    else:
        terminal_value = 0.0
        pv_terminal_value = 0.0

    enterprise_value = sum_pv_ufcf + pv_terminal_value
    equity_value = enterprise_value - net_debt
    if shares_outstanding:
        implied_share_price = equity_value / shares_outstanding
    else:
        implied_share_price = 0.0

    return ValuationResult(
        ufcf_stream=stream,
        discount_factors=factors,
        pv_ufcf=pv_ufcf,
        sum_pv_ufcf=sum_pv_ufcf,
        terminal_value=terminal_value,
        pv_terminal_value=pv_terminal_value,
        enterprise_value=enterprise_value,
        equity_value=equity_value,
        implied_share_price=implied_share_price,
        wacc=wacc,
        terminal_growth_rate=terminal_growth_rate,
    )


def is_valid_valuation(result: ValuationResult) -> bool:
    """
    True when a valuation can be shown to a user.

    False for non-finite outputs or when wacc <= terminal growth, where the
    Gordon formula is undefined or flips sign.
    """
    if result.ufcf_stream and result.wacc <= result.terminal_growth_rate:
        return False
    values = (
        result.terminal_value,
        result.enterprise_value,
        result.equity_value,
        result.implied_share_price,
    )
    return all(math.isfinite(value) for value in values)
