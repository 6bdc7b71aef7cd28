"""
sensitivity.py — DCF Sensitivity Analysis

Purpose:
- WACC × Terminal Growth sensitivity table with the base case in the middle
- Two-axis heatmap over any pair of key drivers
- Tornado analysis: one driver at a time, low/high relative shocks

Every cell is an independent engine run on perturbed assumptions. Cells whose
valuation is undefined (wacc <= g, non-finite output) or whose swept inputs
were clamped by the sanitizer are reported as None ("N/A") rather than
raising, so one bad cell never sinks the whole grid.
"""

import functools
import logging
import math
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional, Tuple

from dcf_engine.core.config import settings
from dcf_engine.core.logging import engine_log_level, get_logger
from dcf_engine.services.modeling.dcf import is_valid_valuation
from dcf_engine.services.modeling.engine import run_model
from dcf_engine.services.modeling.sanitizer import sanitize_assumptions
from dcf_engine.services.modeling.types import Assumptions, ModelOutput

logger = get_logger(__name__)


# -----------------------------------------------------------------------------
# Output Metrics
# -----------------------------------------------------------------------------

def _ev_to_revenue(output: ModelOutput) -> Optional[float]:
    if not output.revenues or output.revenues[0] == 0:
        return None
    return output.valuation.enterprise_value / output.revenues[0]


METRICS: Dict[str, Callable[[ModelOutput], Optional[float]]] = {
    "share_price": lambda output: output.valuation.implied_share_price,
    "equity_value": lambda output: output.valuation.equity_value,
    "enterprise_value": lambda output: output.valuation.enterprise_value,
    "ev_to_revenue": _ev_to_revenue,
}


def _metric_fn(metric: str) -> Callable[[ModelOutput], Optional[float]]:
    if metric not in METRICS:
        raise ValueError(f"Unknown metric '{metric}'. Expected one of: {', '.join(METRICS)}")
    return METRICS[metric]


def evaluate(
    assumptions: Assumptions,
    metric: str = "share_price",
    swept_fields: Tuple[str, ...] = (),
) -> Optional[float]:
    """
    Run the engine once and extract a metric.

    Returns None when the valuation is invalid, the metric is non-finite, or
    the sanitizer clamped one of `swept_fields` (the cell would silently
    describe different inputs than its labels).
    """
    metric_fn = _metric_fn(metric)
    output = run_model(assumptions)
    if not is_valid_valuation(output.valuation):
        return None
    if any(adj.field in swept_fields for adj in output.adjustments):
        return None
    value = metric_fn(output)
    if value is None or not math.isfinite(value):
        return None
    return value


def _steps(lower: float, upper: float, step: float) -> List[float]:
    count = int(math.floor((upper - lower) / step + 1e-9)) + 1
    return [round(lower + k * step, 4) for k in range(max(count, 0))]


def _centered(base: float, half_width: float, step: float) -> List[float]:
    n = int(round(half_width / step))
    return [round(base + k * step, 4) for k in range(-n, n + 1)]


def _sample(values: List[float], max_steps: int) -> List[float]:
    """Thin an axis to at most ~max_steps values, keeping the first."""
    if len(values) <= max_steps:
        return values
    stride = math.ceil(len(values) / max_steps)
    return [value for i, value in enumerate(values) if i % stride == 0]


def _percent_change(value: Optional[float], base_value: Optional[float]) -> Optional[float]:
    if value is None or base_value is None or base_value == 0:
        return None
    return (value - base_value) / abs(base_value) * 100


def _sweep(fn):
    """Hold per-run engine logs at INFO for the sweep unless SENSITIVITY_LOG_RUNS."""
    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        level = logging.NOTSET if settings.SENSITIVITY_LOG_RUNS else logging.INFO
        with engine_log_level(level):
            return fn(*args, **kwargs)
    return wrapper


# -----------------------------------------------------------------------------
# WACC × Terminal Growth Table
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class SensitivityTable:
    """Rows are terminal growth values, columns are WACC values."""
    metric: str
    wacc_values: Tuple[float, ...]
    terminal_growth_values: Tuple[float, ...]
    matrix: Tuple[Tuple[Optional[float], ...], ...]
    base_value: Optional[float]
    base_wacc: float
    base_terminal_growth: float


@_sweep
def build_sensitivity_table(
    assumptions: Assumptions,
    metric: str = "share_price",
    wacc_half_width: float = 2.0,
    growth_half_width: float = 1.0,
) -> SensitivityTable:
    """
    Build the WACC × terminal growth grid around the base case.

    - WACC: base ± 2pp in SENSITIVITY_WACC_STEP increments (positive values only)
    - Terminal growth: base ± 1pp in SENSITIVITY_GROWTH_STEP increments
      (values >= 0 and below base WACC)
    - Cells with wacc <= g are None
    """
    _metric_fn(metric)
    wacc_values = [
        w for w in _centered(assumptions.wacc, wacc_half_width, settings.SENSITIVITY_WACC_STEP)
        if w > 0
    ]
    growth_values = [
        g for g in _centered(
            assumptions.terminal_growth_rate, growth_half_width, settings.SENSITIVITY_GROWTH_STEP
        )
        if 0 <= g < assumptions.wacc
    ]

    swept = ("wacc", "terminal_growth_rate")
    matrix = []
    for growth in growth_values:
        row = []
        for wacc in wacc_values:
            if wacc <= growth:
                row.append(None)
                continue
            perturbed = replace(assumptions, wacc=wacc, terminal_growth_rate=growth)
            row.append(evaluate(perturbed, metric, swept))
        matrix.append(tuple(row))

    base_value = evaluate(assumptions, metric)
    invalid = sum(cell is None for row in matrix for cell in row)
    logger.info(
        "Sensitivity table %dx%d (%s), %d N/A cells",
        len(growth_values), len(wacc_values), metric, invalid,
    )

    return SensitivityTable(
        metric=metric,
        wacc_values=tuple(wacc_values),
        terminal_growth_values=tuple(growth_values),
        matrix=tuple(matrix),
        base_value=base_value,
        base_wacc=assumptions.wacc,
        base_terminal_growth=assumptions.terminal_growth_rate,
    )


# -----------------------------------------------------------------------------
# Two-Axis Heatmap
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class AxisConfig:
    key: str
    label: str
    min: float
    max: float
    step: float


# key -> (label, lower bound, upper bound, half width, step); None means unbounded
HEATMAP_AXES: Dict[str, Tuple[str, Optional[float], Optional[float], float, float]] = {
    "wacc": ("WACC", 5.0, None, 3.0, 0.5),
    "terminal_growth_rate": ("Terminal Growth", 0.0, 5.0, 1.5, 0.25),
    "revenue_growth_rate": ("Revenue Growth", -5.0, None, 5.0, 1.0),
    "cogs_percent": ("COGS %", 30.0, 90.0, 5.0, 1.0),
    "sga_percent": ("SG&A %", 5.0, 40.0, 3.0, 0.5),
}


@dataclass(frozen=True)
class HeatmapCell:
    x: int
    y: int
    x_value: float
    y_value: float
    value: Optional[float]
    percent_change: Optional[float]


@dataclass(frozen=True)
class Heatmap:
    metric: str
    x_axis: AxisConfig
    y_axis: AxisConfig
    x_values: Tuple[float, ...]
    y_values: Tuple[float, ...]
    cells: Tuple[Tuple[HeatmapCell, ...], ...]
    base_value: Optional[float]


def axis_config(assumptions: Assumptions, key: str) -> AxisConfig:
    """
    Axis range for one driver: sanitized base ± half width, within the axis
    bounds.

    A base value outside the bounds is first pulled to the nearest bound, so
    the axis is never empty (it then no longer contains the base value).
    """
    if key not in HEATMAP_AXES:
        raise ValueError(f"Unknown heatmap axis '{key}'. Expected one of: {', '.join(HEATMAP_AXES)}")
    label, lower, upper, half_width, step = HEATMAP_AXES[key]
    lower = -math.inf if lower is None else lower
    upper = math.inf if upper is None else upper

    sanitized = sanitize_assumptions(assumptions).assumptions
    center = min(max(getattr(sanitized, key), lower), upper)
    return AxisConfig(
        key=key,
        label=label,
        min=max(lower, center - half_width),
        max=min(upper, center + half_width),
        step=step,
    )


@_sweep
def build_heatmap(
    assumptions: Assumptions,
    x_axis: str = "wacc",
    y_axis: str = "terminal_growth_rate",
    metric: str = "share_price",
    max_steps: Optional[int] = None,
) -> Heatmap:
    """
    Sweep two drivers across their ranges and record the metric per cell.

    Each axis is sampled to at most `max_steps` values
    (default settings.SENSITIVITY_MAX_STEPS) to bound the number of runs.

    Raises:
        ValueError: unknown axis or metric, or x_axis == y_axis
    """
    if x_axis == y_axis:
        raise ValueError("Heatmap axes must be different drivers")
    _metric_fn(metric)
    max_steps = max_steps or settings.SENSITIVITY_MAX_STEPS

    x_config = axis_config(assumptions, x_axis)
    y_config = axis_config(assumptions, y_axis)
    x_values = _sample(_steps(x_config.min, x_config.max, x_config.step), max_steps)
    y_values = _sample(_steps(y_config.min, y_config.max, y_config.step), max_steps)

    base_value = evaluate(assumptions, metric)
    swept = (x_axis, y_axis)

    cells = []
    for yi, y_value in enumerate(y_values):
        row = []
        for xi, x_value in enumerate(x_values):
            perturbed = replace(assumptions, **{x_axis: x_value, y_axis: y_value})
            value = evaluate(perturbed, metric, swept)
            row.append(HeatmapCell(
                x=xi,
                y=yi,
                x_value=x_value,
                y_value=y_value,
                value=value,
                percent_change=_percent_change(value, base_value),
            ))
        cells.append(tuple(row))

    logger.info(
        "Heatmap %s x %s (%s): %d cells",
        x_axis, y_axis, metric, len(x_values) * len(y_values),
    )

    return Heatmap(
        metric=metric,
        x_axis=x_config,
        y_axis=y_config,
        x_values=tuple(x_values),
        y_values=tuple(y_values),
        cells=tuple(cells),
        base_value=base_value,
    )


# -----------------------------------------------------------------------------
# Tornado
# -----------------------------------------------------------------------------

# Relative shocks (% change from the base value) per driver
TORNADO_RANGES: Dict[str, Tuple[str, float, float]] = {
    "revenue_growth_rate": ("Revenue Growth", -25.0, 25.0),
    "wacc": ("WACC", -20.0, 20.0),
    "terminal_growth_rate": ("Terminal Growth", -30.0, 30.0),
    "cogs_percent": ("COGS %", -10.0, 10.0),
    "sga_percent": ("SG&A %", -15.0, 15.0),
    "tax_rate": ("Tax Rate", -20.0, 20.0),
    "capex_percent": ("CapEx %", -25.0, 25.0),
}


@dataclass(frozen=True)
class TornadoDriver:
    key: str
    label: str
    base_input: float
    low_input: float
    high_input: float
    low_impact: float
    high_impact: float

    @property
    def impact_range(self) -> float:
        return abs(self.high_impact - self.low_impact)


@_sweep
def build_tornado(assumptions: Assumptions, metric: str = "share_price") -> List[TornadoDriver]:
    """
    Shock each driver low/high and measure the change in the metric.

    Drivers whose low or high run is invalid, or whose shocked input the
    sanitizer clamps, are skipped. Result is sorted by impact range, largest
    first.
    """
    _metric_fn(metric)
    base_value = evaluate(assumptions, metric)
    if base_value is None:
        logger.info("Tornado skipped: base valuation is invalid")
        return []

    drivers: List[TornadoDriver] = []
    for key, (label, low_pct, high_pct) in TORNADO_RANGES.items():
        base_input = getattr(assumptions, key)
        low_input = base_input * (1 + low_pct / 100)
        high_input = base_input * (1 + high_pct / 100)

        # A clamped shock would run at a different input than the one reported
        low_value = evaluate(replace(assumptions, **{key: low_input}), metric, (key,))
        high_value = evaluate(replace(assumptions, **{key: high_input}), metric, (key,))
        if low_value is None or high_value is None:
            logger.debug("Tornado driver %s skipped: invalid or clamped run", key)
            continue

        drivers.append(TornadoDriver(
            key=key,
            label=label,
            base_input=base_input,
            low_input=low_input,
            high_input=high_input,
            low_impact=low_value - base_value,
            high_impact=high_value - base_value,
        ))

    drivers.sort(key=lambda driver: driver.impact_range, reverse=True)
    logger.info("Tornado (%s): %d drivers", metric, len(drivers))
    return drivers
