"""commitlab - Optimal compute capacity commitment analysis"""

__version__ = "0.1.0"

# Import submodules
from . import analysis, demand, io, modeling, utils

# Convenience imports
from .config import CommitmentConfig
from .demand import DemandSeries, Sample
from .exceptions import CommitmentError, DegenerateNormalizationError, InvalidInputError
from .io import VMDemandLoader, aggregate, normalize
from .modeling import (
    CostSegments,
    LadderPlan,
    OptimizationResult,
    SearchStrategy,
    compare_ladder,
    evaluate,
    evaluate_ladder,
    extend,
    find_optimal_level,
    forecast_sensitivity,
)
from .utils import configure_notebook_logging

__all__ = [
    "analysis",
    "demand",
    "io",
    "modeling",
    "utils",
    "CommitmentConfig",
    "DemandSeries",
    "Sample",
    "CommitmentError",
    "InvalidInputError",
    "DegenerateNormalizationError",
    "VMDemandLoader",
    "aggregate",
    "normalize",
    "CostSegments",
    "OptimizationResult",
    "SearchStrategy",
    "LadderPlan",
    "evaluate",
    "find_optimal_level",
    "extend",
    "forecast_sensitivity",
    "evaluate_ladder",
    "compare_ladder",
    "configure_notebook_logging",
]
