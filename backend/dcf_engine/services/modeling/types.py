"""
types.py — Shared Data Layer for Modeling Modules

Purpose:
- Define the immutable value objects passed between the projection engine's stages
- Provide the default-assumptions factory and JSON (de)serialization helpers

Every object here is produced by one engine run and never mutated afterwards.
A scenario is simply a named Assumptions instance; re-running the engine on a
different instance yields an independent result.
"""

from __future__ import annotations

import math
import re
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, Tuple


Year = int


def _to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _to_snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


# ============================================================================
# Input
# ============================================================================


@dataclass(frozen=True)
class Assumptions:
    """
    Complete set of inputs for one engine run.

    Percentage fields are stored in percentage units (8 means 8%), never as
    fractions. Conversion happens only inside the formulas.
    """
    # Base data
    base_revenue: float
    projection_years: int

    # Income statement (% of revenue / %)
    revenue_growth_rate: float
    cogs_percent: float
    sga_percent: float
    tax_rate: float

    # Working capital (days)
    days_receivables: float  # DSO
    days_inventory: float  # DIO
    days_payables: float  # DPO

    # CapEx & depreciation
    capex_percent: float
    depreciation_years: float  # straight-line life

    # Debt
    debt_balance: float
    interest_rate: float
    yearly_repayment: float

    # Valuation
    wacc: float
    terminal_growth_rate: float
    shares_outstanding: float
    net_debt: float

    def to_dict(self, camel: bool = False) -> Dict[str, Any]:
        """
        Serialize to a JSON-friendly dict.

        Args:
            camel: Emit camelCase keys (baseRevenue, projectionYears, ...) as the
                browser workstation and its chat-context sync expect.
        """
        data = asdict(self)
        if camel:
            return {_to_camel(key): value for key, value in data.items()}
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Assumptions":
        """
        Build Assumptions from a dict with snake_case or camelCase keys.

        Missing fields fall back to default_assumptions(); unknown keys are ignored.
        """
        known = {f.name for f in fields(cls)}
        values = default_assumptions().to_dict()
        for key, value in (data or {}).items():
            name = key if key in known else _to_snake(key)
            if name in known and value is not None:
                values[name] = value
        values["projection_years"] = int(values["projection_years"])
        return cls(**values)


def default_assumptions() -> Assumptions:
    """
    Default assumptions for a typical company ($1B revenue, 5-year horizon).

    Returns a fresh value on every call so scenarios never share state.
    """
    return Assumptions(
        base_revenue=1_000_000_000.0,
        projection_years=5,
        revenue_growth_rate=8.0,
        cogs_percent=60.0,
        sga_percent=20.0,
        tax_rate=25.0,
        days_receivables=45.0,
        days_inventory=60.0,
        days_payables=30.0,
        capex_percent=5.0,
        depreciation_years=10.0,
        debt_balance=200_000_000.0,
        interest_rate=5.0,
        yearly_repayment=20_000_000.0,
        wacc=10.0,
        terminal_growth_rate=2.5,
        shares_outstanding=100_000_000.0,
        net_debt=200_000_000.0,
    )


# ============================================================================
# Sanitizer Output
# ============================================================================


@dataclass(frozen=True)
class ValidationWarning:
    """Advisory note about an input outside its typical band."""
    field: str
    message: str
    severity: str  # "low" | "medium" | "high"


@dataclass(frozen=True)
class Adjustment:
    """A value the sanitizer changed to keep the formulas numerically safe."""
    field: str
    original: Any
    adjusted: Any


@dataclass(frozen=True)
class SanitizationResult:
    assumptions: Assumptions
    adjustments: Tuple[Adjustment, ...] = ()
    warnings: Tuple[ValidationWarning, ...] = ()

    @property
    def was_adjusted(self) -> bool:
        return bool(self.adjustments)


# ============================================================================
# Schedules
# ============================================================================


@dataclass(frozen=True)
class DepreciationRow:
    """One year of the PP&E roll-forward."""
    year: Year
    beginning_ppe: float
    capex: float
    depreciation: float
    ending_ppe: float


@dataclass(frozen=True)
class DebtRow:
    """One year of the debt amortization schedule."""
    year: Year
    beginning_balance: float
    interest_expense: float
    repayment: float
    ending_balance: float


# ============================================================================
# Statement Rows
# ============================================================================


@dataclass(frozen=True)
class WorkingCapital:
    accounts_receivable: float
    inventory: float
    accounts_payable: float
    net_working_capital: float


@dataclass(frozen=True)
class IncomeStatementRow:
    year: Year
    revenue: float
    cogs: float
    gross_profit: float
    sga: float
    depreciation: float
    ebit: float  # operating income
    interest_expense: float
    ebt: float  # pre-tax income
    taxes: float
    net_income: float


@dataclass(frozen=True)
class BalanceSheetRow:
    """
    Year-end balance sheet.

    `cash` is the balancing plug, floored at zero. `total_assets` always
    equals total_liabilities + total_equity, so `balance_check` is zero.
    `unfunded_assets` is the amount by which AR + inventory + cash + PP&E
    exceed that total: zero unless the floor engaged, otherwise the
    financing the model does not represent.
    """
    year: Year
    accounts_receivable: float
    inventory: float
    cash: float
    total_current_assets: float
    ppe: float
    total_assets: float
    accounts_payable: float
    debt_balance: float
    total_liabilities: float
    retained_earnings: float
    total_equity: float
    net_working_capital: float
    balance_check: float
    unfunded_assets: float = 0.0

    @property
    def cash_floored(self) -> bool:
        # Relative tolerance absorbs float noise from the plug arithmetic.
        tolerance = 1e-9 * max(1.0, abs(self.total_assets))
        return self.cash == 0.0 and self.unfunded_assets > tolerance


@dataclass(frozen=True)
class CashFlowRow:
    year: Year
    net_income: float
    nopat: float  # EBIT * (1 - tax rate)
    depreciation: float
    change_in_nwc: float
    capex: float
    unlevered_fcf: float


# ============================================================================
# Valuation
# ============================================================================


@dataclass(frozen=True)
class ValuationResult:
    """DCF valuation derived from the unlevered free cash flow stream."""
    ufcf_stream: Tuple[float, ...]
    discount_factors: Tuple[float, ...]
    pv_ufcf: Tuple[float, ...]
    sum_pv_ufcf: float
    terminal_value: float
    pv_terminal_value: float
    enterprise_value: float
    equity_value: float
    implied_share_price: float
    wacc: float
    terminal_growth_rate: float


@dataclass(frozen=True)
class ModelOutput:
    """Full bundle returned by one run of the engine."""
    assumptions: Assumptions
    revenues: Tuple[float, ...]
    depreciation_schedule: Tuple[DepreciationRow, ...]
    debt_schedule: Tuple[DebtRow, ...]
    income_statement: Tuple[IncomeStatementRow, ...]
    balance_sheet: Tuple[BalanceSheetRow, ...]
    cash_flow: Tuple[CashFlowRow, ...]
    valuation: ValuationResult
    adjustments: Tuple[Adjustment, ...] = field(default=())
    warnings: Tuple[ValidationWarning, ...] = field(default=())

    def to_dict(self) -> Dict[str, Any]:
        """
        JSON-friendly dict of the whole bundle.

        Non-finite floats (a terminal value blown up by wacc == g) become None.
        """
        return _json_safe(asdict(self))


def _json_safe(value: Any) -> Any:
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, dict):
        return {key: _json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(item) for item in value]
    return value


def json_safe(value: Any) -> Any:
    """Public wrapper used by the API layer for sweep payloads."""
    return _json_safe(value)
