"""
Search for the commitment level that minimizes total cost.

Three interchangeable strategies minimize ``level -> evaluate(series, level).total``
over ``[min(usage), max(usage)]``:

- ``GRID``: evaluate equally spaced candidate levels and keep the cheapest.
  Exact up to grid resolution and deterministic on ties (lowest level wins).
  This is the reference strategy when exactness matters.
- ``BOUNDED``: scipy's bounded scalar minimizer (Brent-style bracketing).
- ``NUMERIC``: scipy's Nelder-Mead simplex seeded at a starting level.

The objective is convex and piecewise linear for a single series, with kinks
at the observed usage values, but it can have wide flat stretches. BOUNDED and
NUMERIC are fast heuristics that may settle on any point of a flat minimum or,
for multi-modal inputs, a non-global point. They are not certified optima.

Every strategy clamps its level into the bounds and reports the cost of that
level exactly as ``evaluate`` computes it.

Example:
    ```python
    from commitlab.modeling.search import SearchStrategy, find_optimal_level

    result = find_optimal_level(series, SearchStrategy.GRID)
    print(f"Commit {result.level:.2f} for total cost {result.cost:,.0f}")
    ```
"""

import math
from dataclasses import dataclass
from enum import Enum

import numpy as np
from loguru import logger
from numpy.typing import NDArray
from scipy.optimize import minimize, minimize_scalar

from commitlab.config import (
    DEFAULT_GRID_STEPS,
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_PREMIUM,
    DEFAULT_TOLERANCE,
    CommitmentConfig,
)
from commitlab.demand import DemandSeries
from commitlab.exceptions import InvalidInputError

from .cost_model import interval_usage, total_cost, validate_premium


class SearchStrategy(str, Enum):
    """Named level search strategies."""

    GRID = "grid"
    BOUNDED = "bounded"
    NUMERIC = "numeric"


@dataclass(frozen=True)
class OptimizationResult:
    """
    Optimal commitment level for one series and premium.

    Attributes:
        level: Commitment level within the series' usage bounds
        cost: ``evaluate(series, level, premium).total``
        strategy: Strategy that produced the level
        evaluations: Number of objective evaluations performed
        converged: False when a scipy minimizer stopped on its iteration cap
    """

    level: float
    cost: float
    strategy: SearchStrategy
    evaluations: int
    converged: bool = True


def _prepare(series: DemandSeries, premium: float) -> tuple[NDArray[np.float64], float, float, float]:
    usage = interval_usage(series)
    lower, upper = series.bounds
    return usage, lower, upper, validate_premium(premium)


def _finish(
    usage: NDArray[np.float64],
    level: float,
    lower: float,
    upper: float,
    premium: float,
    strategy: SearchStrategy,
    evaluations: int,
    converged: bool = True,
) -> OptimizationResult:
    level = float(np.clip(level, lower, upper))
    result = OptimizationResult(
        level=level,
        cost=total_cost(usage, level, premium),
        strategy=strategy,
        evaluations=evaluations,
        converged=converged,
    )
    logger.debug(
        f"{strategy.value} search: level={result.level:.6g}, cost={result.cost:.6g}, "
        f"evaluations={evaluations}"
    )
    return result


def _validate_scipy_options(tolerance: float, max_iterations: int) -> None:
    if not tolerance > 0:
        raise InvalidInputError(f"tolerance must be > 0, got {tolerance}")
    if max_iterations < 1:
        raise InvalidInputError(f"max_iterations must be >= 1, got {max_iterations}")


def grid_minimize(
    series: DemandSeries, steps: int = DEFAULT_GRID_STEPS, premium: float = DEFAULT_PREMIUM
) -> OptimizationResult:
    """
    Evaluate ``steps`` equally spaced levels across the usage range.

    Args:
        series: Hourly demand with at least 2 samples
        steps: Number of candidate levels, endpoints included. ``steps=1``
            evaluates only the midpoint of the range.
        premium: On-demand price multiple (>= 1)

    Returns:
        OptimizationResult for the cheapest candidate. On exact ties the
        lowest level wins.

    Raises:
        InvalidInputError: If steps is not an integer >= 1, premium < 1 or the
            series is too short
    """
    if not isinstance(steps, (int, np.integer)):
        raise InvalidInputError(f"steps must be an integer, got {steps!r}")
    if steps < 1:
        raise InvalidInputError(f"steps must be >= 1, got {steps}")
    usage, lower, upper, premium = _prepare(series, premium)

    if steps == 1:
        candidates = np.array([(lower + upper) / 2])
    else:
        candidates = np.linspace(lower, upper, int(steps))

    costs = np.array([total_cost(usage, level, premium) for level in candidates])
    # argmin returns the first minimum, i.e. the lowest level on ties
    best = int(np.argmin(costs))
    return _finish(
        usage, float(candidates[best]), lower, upper, premium, SearchStrategy.GRID, len(candidates)
    )


def bounded_minimize(
    series: DemandSeries,
    tolerance: float = DEFAULT_TOLERANCE,
    premium: float = DEFAULT_PREMIUM,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> OptimizationResult:
    """
    Bracketing scalar minimization over the usage range.

    Faster than a fine grid but only a heuristic: on non-convex or flat
    objectives it may return a local or arbitrary flat-region minimum.

    Args:
        series: Hourly demand with at least 2 samples
        tolerance: Absolute convergence tolerance on the level
        premium: On-demand price multiple (>= 1)
        max_iterations: Iteration cap passed to scipy

    Raises:
        InvalidInputError: If tolerance <= 0, premium < 1 or the series is too short
    """
    _validate_scipy_options(tolerance, max_iterations)
    usage, lower, upper, premium = _prepare(series, premium)

    if lower == upper:
        return _finish(usage, lower, lower, upper, premium, SearchStrategy.BOUNDED, 1)

    opt = minimize_scalar(
        lambda level: total_cost(usage, level, premium),
        bounds=(lower, upper),
        method="bounded",
        options={"xatol": tolerance, "maxiter": max_iterations},
    )
    if not opt.success:
        logger.warning(f"Bounded search stopped before converging: {opt.message}")
    return _finish(
        usage,
        float(opt.x),
        lower,
        upper,
        premium,
        SearchStrategy.BOUNDED,
        int(opt.nfev),
        bool(opt.success),
    )


def numeric_minimize(
    series: DemandSeries,
    initial_guess: float | None = None,
    premium: float = DEFAULT_PREMIUM,
    tolerance: float = DEFAULT_TOLERANCE,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> OptimizationResult:
    """
    Gradient-free local search (Nelder-Mead) from a starting level.

    Args:
        series: Hourly demand with at least 2 samples
        initial_guess: Starting level (default: midpoint of the usage range)
        premium: On-demand price multiple (>= 1)
        tolerance: Absolute convergence tolerance on the level
        max_iterations: Iteration cap passed to scipy

    Returns:
        OptimizationResult with the level clamped to the usage range. Not
        guaranteed to be the global optimum.

    Raises:
        InvalidInputError: If the guess is not finite, tolerance <= 0,
            premium < 1 or the series is too short
    """
    _validate_scipy_options(tolerance, max_iterations)
    usage, lower, upper, premium = _prepare(series, premium)

    if initial_guess is None:
        initial_guess = (lower + upper) / 2
    elif not math.isfinite(initial_guess):
        raise InvalidInputError(f"initial_guess must be finite, got {initial_guess}")

    if lower == upper:
        return _finish(usage, lower, lower, upper, premium, SearchStrategy.NUMERIC, 1)

    opt = minimize(
        lambda x: total_cost(usage, float(x[0]), premium),
        x0=np.array([float(np.clip(initial_guess, lower, upper))]),
        method="Nelder-Mead",
        bounds=[(lower, upper)],
        options={"xatol": tolerance, "maxiter": max_iterations},
    )
    if not opt.success:
        logger.warning(f"Nelder-Mead search stopped before converging: {opt.message}")
    return _finish(
        usage,
        float(opt.x[0]),
        lower,
        upper,
        premium,
        SearchStrategy.NUMERIC,
        int(opt.nfev),
        bool(opt.success),
    )


def find_optimal_level(
    series: DemandSeries,
    strategy: SearchStrategy | str = SearchStrategy.GRID,
    config: CommitmentConfig | None = None,
    initial_guess: float | None = None,
) -> OptimizationResult:
    """
    Run one named search strategy with settings from ``config``.

    Args:
        series: Hourly demand with at least 2 samples
        strategy: ``SearchStrategy`` member or its value ("grid", "bounded", "numeric")
        config: Premium and search settings (default: ``CommitmentConfig()``)
        initial_guess: Starting level for ``NUMERIC`` (ignored otherwise)

    Returns:
        OptimizationResult from the selected strategy
    """
    config = config or CommitmentConfig()
    try:
        strategy = SearchStrategy(strategy)
    except ValueError as e:
        raise InvalidInputError(
            f"unknown strategy {strategy!r}, expected one of {[s.value for s in SearchStrategy]}"
        ) from e

    if strategy is SearchStrategy.GRID:
        result = grid_minimize(series, steps=config.grid_steps, premium=config.premium)
    elif strategy is SearchStrategy.BOUNDED:
        result = bounded_minimize(
            series,
            tolerance=config.tolerance,
            premium=config.premium,
            max_iterations=config.max_iterations,
        )
    else:
        result = numeric_minimize(
            series,
            initial_guess=initial_guess,
            premium=config.premium,
            tolerance=config.tolerance,
            max_iterations=config.max_iterations,
        )

    logger.info(
        f"Optimal commitment ({strategy.value}, premium={config.premium}): "
        f"level={result.level:.4f}, cost={result.cost:,.2f}"
    )
    return result
