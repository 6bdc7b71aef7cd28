"""
scenarios.py — Bear/Bull/Base Scenario Analysis

Purpose:
- Build Bear, Bull, and Base case scenarios from one set of assumptions
- Run the projection engine once per named scenario
- Compare implied share prices against the base case

Key Differences:
- Base: the assumptions as given
- Bull: higher growth, better gross margin, 3% terminal growth
- Bear: lower growth, margin pressure, 2% terminal growth
- All scenarios use the same engine, so results differ only by inputs
"""

from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional

from dcf_engine.core.logging import get_logger
from dcf_engine.services.modeling.dcf import is_valid_valuation
from dcf_engine.services.modeling.engine import run_model
from dcf_engine.services.modeling.types import Assumptions, ModelOutput

logger = get_logger(__name__)

SCENARIO_KINDS = ("base", "bull", "bear", "custom")

BULL_GROWTH_MULTIPLIER = 1.2
BULL_COGS_SHIFT = -2.0
BULL_TERMINAL_GROWTH = 3.0

BEAR_GROWTH_MULTIPLIER = 0.7
BEAR_COGS_SHIFT = 3.0
BEAR_TERMINAL_GROWTH = 2.0


@dataclass(frozen=True)
class Scenario:
    """A named Assumptions instance."""
    name: str
    assumptions: Assumptions
    kind: str = "custom"


@dataclass(frozen=True)
class ScenarioResult:
    name: str
    kind: str
    output: ModelOutput
    valid: bool

    @property
    def implied_share_price(self) -> float:
        return self.output.valuation.implied_share_price

    @property
    def equity_value(self) -> float:
        return self.output.valuation.equity_value


def build_default_scenarios(base: Assumptions) -> List[Scenario]:
    """
    Derive Base, Bull and Bear scenarios from one set of assumptions.

    Shifts are applied to the raw values; each run sanitizes its own inputs.
    """
    bull = replace(
        base,
        revenue_growth_rate=base.revenue_growth_rate * BULL_GROWTH_MULTIPLIER,
        cogs_percent=base.cogs_percent + BULL_COGS_SHIFT,
        terminal_growth_rate=BULL_TERMINAL_GROWTH,
    )
    bear = replace(
        base,
        revenue_growth_rate=base.revenue_growth_rate * BEAR_GROWTH_MULTIPLIER,
        cogs_percent=base.cogs_percent + BEAR_COGS_SHIFT,
        terminal_growth_rate=BEAR_TERMINAL_GROWTH,
    )
    return [
        Scenario("base", base, "base"),
        Scenario("bull", bull, "bull"),
        Scenario("bear", bear, "bear"),
    ]


def run_scenarios(scenarios: Iterable[Scenario]) -> List[ScenarioResult]:
    """
    Run the engine once per scenario.

    Raises:
        ValueError: on duplicate scenario names or an unknown kind
    """
    results: List[ScenarioResult] = []
    seen = set()
    for scenario in scenarios:
        if scenario.name in seen:
            raise ValueError(f"Duplicate scenario name: {scenario.name}")
        if scenario.kind not in SCENARIO_KINDS:
            raise ValueError(f"Unknown scenario kind: {scenario.kind}")
        seen.add(scenario.name)

        output = run_model(scenario.assumptions)
        results.append(ScenarioResult(
            name=scenario.name,
            kind=scenario.kind,
            output=output,
            valid=is_valid_valuation(output.valuation),
        ))

    logger.info("Ran %d scenarios", len(results))
    return results


def compare_scenarios(
    results: List[ScenarioResult],
    base_name: str = "base",
) -> List[Dict[str, Optional[float]]]:
    """
    Compare each scenario's implied share price with the base scenario.

    Returns:
        One dict per scenario:
        {
            "name": str,
            "kind": str,
            "implied_share_price": float | None,
            "equity_value": float | None,
            "enterprise_value": float | None,
            "delta_vs_base": float | None,
            "pct_delta_vs_base": float | None,
            "valid": bool,
        }
        Invalid scenarios, or a missing/invalid base, yield None deltas.
    """
    base = next((r for r in results if r.name == base_name), None)
    base_price = base.implied_share_price if base is not None and base.valid else None

    rows = []
    for result in results:
        price = result.implied_share_price if result.valid else None
        delta = None
        pct_delta = None
        if price is not None and base_price is not None:
            delta = price - base_price
            if base_price != 0:
                pct_delta = delta / abs(base_price) * 100

        rows.append({
            "name": result.name,
            "kind": result.kind,
            "implied_share_price": price,
            "equity_value": result.equity_value if result.valid else None,
            "enterprise_value": result.output.valuation.enterprise_value if result.valid else None,
            "delta_vs_base": delta,
            "pct_delta_vs_base": pct_delta,
            "valid": result.valid,
        })
    return rows
