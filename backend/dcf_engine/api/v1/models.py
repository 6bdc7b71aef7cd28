"""
models.py — Projection Model API Endpoints

Purpose:
- Expose the projection & valuation engine over HTTP
- Run single models, scenario comparisons and sensitivity sweeps in-memory
- No persistence: every request is an independent, synchronous engine run

Endpoints:
- GET  /api/v1/models/defaults    - Default assumptions
- POST /api/v1/models/validate    - Sanitize assumptions, report adjustments & warnings
- POST /api/v1/models/run         - Full 3-statement projection + DCF
- POST /api/v1/models/scenarios   - Base/Bull/Bear (or custom) comparison
- POST /api/v1/models/sensitivity - WACC x terminal growth table
- POST /api/v1/models/heatmap     - Two-driver sweep
- POST /api/v1/models/tornado     - One-driver-at-a-time shocks
"""

from dataclasses import asdict
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from dcf_engine.core.logging import get_logger
from dcf_engine.services.modeling.engine import run_model
from dcf_engine.services.modeling.formatting import format_currency, format_percent
from dcf_engine.services.modeling.sanitizer import sanitize_assumptions
from dcf_engine.services.modeling.scenarios import (
    Scenario,
    build_default_scenarios,
    compare_scenarios,
    run_scenarios,
)
from dcf_engine.services.modeling.sensitivity import (
    build_heatmap,
    build_sensitivity_table,
    build_tornado,
)
from dcf_engine.services.modeling.types import (
    Assumptions,
    default_assumptions,
    json_safe,
)

logger = get_logger(__name__)

router = APIRouter(
    prefix="/models",
    tags=["models"]
)

# -----------------------------------------------------------------------------
# Request/Response Schemas
# -----------------------------------------------------------------------------

_DEFAULTS = default_assumptions()


class CamelModel(BaseModel):
    """Accepts camelCase (browser) or snake_case keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AssumptionsPayload(CamelModel):
    base_revenue: float = _DEFAULTS.base_revenue
    projection_years: int = _DEFAULTS.projection_years
    revenue_growth_rate: float = _DEFAULTS.revenue_growth_rate
    cogs_percent: float = _DEFAULTS.cogs_percent
    sga_percent: float = _DEFAULTS.sga_percent
    tax_rate: float = _DEFAULTS.tax_rate
    days_receivables: float = _DEFAULTS.days_receivables
    days_inventory: float = _DEFAULTS.days_inventory
    days_payables: float = _DEFAULTS.days_payables
    capex_percent: float = _DEFAULTS.capex_percent
    depreciation_years: float = _DEFAULTS.depreciation_years
    debt_balance: float = _DEFAULTS.debt_balance
    interest_rate: float = _DEFAULTS.interest_rate
    yearly_repayment: float = _DEFAULTS.yearly_repayment
    wacc: float = _DEFAULTS.wacc
    terminal_growth_rate: float = _DEFAULTS.terminal_growth_rate
    shares_outstanding: float = _DEFAULTS.shares_outstanding
    net_debt: float = _DEFAULTS.net_debt

    def to_assumptions(self) -> Assumptions:
        return Assumptions(**self.model_dump())


class ScenarioPayload(CamelModel):
    name: str
    kind: str = "custom"
    assumptions: AssumptionsPayload


class ScenariosRequest(CamelModel):
    # Either explicit scenarios, or a base case to derive Base/Bull/Bear from
    scenarios: List[ScenarioPayload] = Field(default_factory=list)
    base: Optional[AssumptionsPayload] = None
    base_name: str = "base"


class SensitivityRequest(CamelModel):
    assumptions: AssumptionsPayload = Field(default_factory=AssumptionsPayload)
    metric: str = "share_price"


class HeatmapRequest(SensitivityRequest):
    x_axis: str = "wacc"
    y_axis: str = "terminal_growth_rate"
    max_steps: Optional[int] = None


# -----------------------------------------------------------------------------
# Endpoints
# -----------------------------------------------------------------------------


@router.get("/defaults")
async def get_defaults() -> Dict[str, Any]:
    """Default assumptions for a typical company, camelCase keys."""
    return default_assumptions().to_dict(camel=True)


@router.post("/validate")
async def validate_model_inputs(request: AssumptionsPayload) -> Dict[str, Any]:
    """
    Sanitize assumptions without running the model.

    Returns the clamped assumptions plus every adjustment and advisory warning.
    """
    result = sanitize_assumptions(request.to_assumptions())
    return json_safe({
        "assumptions": result.assumptions.to_dict(camel=True),
        "adjustments": [asdict(a) for a in result.adjustments],
        "warnings": [asdict(w) for w in result.warnings],
    })


@router.post("/run")
async def run_projection_model(request: AssumptionsPayload) -> Dict[str, Any]:
    """
    Run the full 3-statement projection and DCF valuation.
    """
    try:
        logger.info("Running projection model")
        output = run_model(request.to_assumptions())
        valuation = output.valuation
        payload = output.to_dict()
        payload["summary"] = {
            "enterprise_value": format_currency(valuation.enterprise_value),
            "equity_value": format_currency(valuation.equity_value),
            "wacc": format_percent(valuation.wacc),
            "terminal_growth_rate": format_percent(valuation.terminal_growth_rate, decimals=2),
        }
        return json_safe(payload)
    except Exception as exc:
        logger.exception("Error running projection model: %s", exc)
        raise HTTPException(status_code=500, detail=f"Error running model: {str(exc)}")


@router.post("/scenarios")
async def run_scenario_comparison(request: ScenariosRequest) -> Dict[str, Any]:
    """
    Run the engine once per scenario and compare implied share prices.

    If no explicit scenarios are sent, Base/Bull/Bear are derived from `base`
    (or from the default assumptions).
    """
    try:
        if request.scenarios:
            scenarios = [
                Scenario(s.name, s.assumptions.to_assumptions(), s.kind)
                for s in request.scenarios
            ]
        else:
            base = request.base.to_assumptions() if request.base else default_assumptions()
            scenarios = build_default_scenarios(base)

        results = run_scenarios(scenarios)
        return json_safe({
            "comparison": compare_scenarios(results, base_name=request.base_name),
            "scenarios": {
                r.name: {
                    "kind": r.kind,
                    "assumptions": r.output.assumptions.to_dict(camel=True),
                    "valuation": asdict(r.output.valuation),
                }
                for r in results
            },
        })
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception as exc:
        logger.exception("Error running scenarios: %s", exc)
        raise HTTPException(status_code=500, detail=f"Error running scenarios: {str(exc)}")


@router.post("/sensitivity")
async def run_sensitivity_table(request: SensitivityRequest) -> Dict[str, Any]:
    """WACC x terminal growth grid; invalid cells are null."""
    try:
        table = build_sensitivity_table(request.assumptions.to_assumptions(), request.metric)
        return json_safe(asdict(table))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception as exc:
        logger.exception("Error building sensitivity table: %s", exc)
        raise HTTPException(status_code=500, detail=f"Error building sensitivity table: {str(exc)}")


@router.post("/heatmap")
async def run_heatmap(request: HeatmapRequest) -> Dict[str, Any]:
    """Two-driver sweep; invalid cells carry a null value."""
    try:
        heatmap = build_heatmap(
            request.assumptions.to_assumptions(),
            x_axis=request.x_axis,
            y_axis=request.y_axis,
            metric=request.metric,
            max_steps=request.max_steps,
        )
        return json_safe(asdict(heatmap))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception as exc:
        logger.exception("Error building heatmap: %s", exc)
        raise HTTPException(status_code=500, detail=f"Error building heatmap: {str(exc)}")


@router.post("/tornado")
async def run_tornado(request: SensitivityRequest) -> Dict[str, Any]:
    """Drivers sorted by impact range, largest first."""
    try:
        drivers = build_tornado(request.assumptions.to_assumptions(), request.metric)
        return json_safe({
            "metric": request.metric,
            "drivers": [
                {**asdict(driver), "impact_range": driver.impact_range}
                for driver in drivers
            ],
        })
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception as exc:
        logger.exception("Error building tornado: %s", exc)
        raise HTTPException(status_code=500, detail=f"Error building tornado: {str(exc)}")
