"""
Cost curves and premium sweeps for reporting.

Thin, frame-returning wrappers around the cost model and level search. Every
function returns a polars DataFrame ready for plotting or tabulation.
"""

from collections.abc import Iterable

import numpy as np
import polars as pl
from loguru import logger
from numpy.typing import ArrayLike

from commitlab.config import DEFAULT_PREMIUM, CommitmentConfig
from commitlab.demand import DemandSeries
from commitlab.exceptions import InvalidInputError
from commitlab.modeling.cost_model import evaluate, on_demand_only_cost
from commitlab.modeling.search import SearchStrategy, find_optimal_level


def cost_curve(
    series: DemandSeries,
    levels: ArrayLike | None = None,
    steps: int = 101,
    premium: float = DEFAULT_PREMIUM,
) -> pl.DataFrame:
    """
    Total cost and its components as a function of commitment level.

    Args:
        series: Hourly demand with at least 2 samples
        levels: Levels to evaluate (default: ``steps`` levels across the usage range)
        steps: Number of default levels when ``levels`` is None
        premium: On-demand price multiple

    Returns:
        DataFrame with columns level, used, unused, on_demand_cost, total

    Example:
        >>> curve = cost_curve(series, premium=2.1)
        >>> curve.sort("total").row(0, named=True)["level"]  # cheapest level on the curve
    """
    if levels is None:
        if not isinstance(steps, (int, np.integer)):
            raise InvalidInputError(f"steps must be an integer, got {steps!r}")
        if steps < 2:
            raise InvalidInputError(f"steps must be >= 2 for a cost curve, got {steps}")
        lower, upper = series.bounds
        levels = np.linspace(lower, upper, steps)

    rows = []
    for level in np.asarray(levels, dtype=np.float64):
        segments = evaluate(series, float(level), premium)
        rows.append(
            {
                "level": float(level),
                "used": segments.used_cost,
                "unused": segments.unused_cost,
                "on_demand_cost": segments.total_on_demand_cost,
                "total": segments.total,
            }
        )
    return pl.DataFrame(rows)


def premium_sweep(
    series: DemandSeries,
    premiums: Iterable[float],
    strategy: SearchStrategy | str = SearchStrategy.GRID,
    config: CommitmentConfig | None = None,
) -> pl.DataFrame:
    """
    Optimal level and savings across on-demand premiums.

    Args:
        series: Hourly demand with at least 2 samples
        premiums: On-demand price multiples to evaluate (each >= 1)
        strategy: Level search strategy
        config: Search settings; its premium is replaced by each swept value

    Returns:
        DataFrame with columns premium, optimal_level, cost, on_demand_only_cost,
        savings_pct (savings of the optimal commitment over pure on-demand)
    """
    config = config or CommitmentConfig()
    rows = []
    for premium in premiums:
        swept = config.model_copy(update={"premium": float(premium)})
        result = find_optimal_level(series, strategy, swept)
        baseline = on_demand_only_cost(series, swept.premium)
        rows.append(
            {
                "premium": swept.premium,
                "optimal_level": result.level,
                "cost": result.cost,
                "on_demand_only_cost": baseline,
                "savings_pct": 100.0 * (baseline - result.cost) / baseline if baseline else 0.0,
            }
        )
    if not rows:
        raise InvalidInputError("premium sweep needs at least one premium")

    logger.info(f"Swept {len(rows)} premiums from {rows[0]['premium']} to {rows[-1]['premium']}")
    return pl.DataFrame(rows)
