"""Commitment cost model, level search and scenario analysis."""

from .cost_model import (
    CostSegments,
    breakeven_coverage,
    evaluate,
    evaluate_levels,
    on_demand_only_cost,
)
from .laddering import (
    LadderComparison,
    LadderPlan,
    LadderStep,
    compare_ladder,
    evaluate_ladder,
    ladder_plan,
    partition,
    partition_weekly,
)
from .scenarios import (
    ForecastSensitivity,
    extend,
    forecast_sensitivity,
    future_only,
    sensitivity_sweep,
)
from .search import (
    OptimizationResult,
    SearchStrategy,
    bounded_minimize,
    find_optimal_level,
    grid_minimize,
    numeric_minimize,
)

__all__ = [
    # Cost model
    "CostSegments",
    "evaluate",
    "evaluate_levels",
    "on_demand_only_cost",
    "breakeven_coverage",
    # Level search
    "SearchStrategy",
    "OptimizationResult",
    "grid_minimize",
    "bounded_minimize",
    "numeric_minimize",
    "find_optimal_level",
    # Scenarios
    "ForecastSensitivity",
    "extend",
    "future_only",
    "forecast_sensitivity",
    "sensitivity_sweep",
    # Laddering
    "LadderStep",
    "LadderPlan",
    "LadderComparison",
    "partition",
    "partition_weekly",
    "ladder_plan",
    "evaluate_ladder",
    "compare_ladder",
]
