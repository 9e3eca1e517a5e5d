"""
Cost of serving hourly demand under a flat capacity commitment.

Each hourly interval is charged at the committed rate for the committed level
and at ``premium`` times that rate for demand above it:

    used      = min(usage, level)
    unused    = max(level - usage, 0)
    on_demand = max(usage - level, 0)
    cost      = used + unused + on_demand * premium

Interval i spans samples i and i+1 and is charged at the usage of sample i
(left endpoint), so a series of n samples has n-1 costed intervals. The
convention is kept for reproducibility of published figures; right-endpoint or
trapezoidal variants give different totals.

Example:
    ```python
    from commitlab.demand import DemandSeries
    from commitlab.modeling.cost_model import evaluate

    series = DemandSeries.from_values([10, 20, 30, 20])
    segments = evaluate(series, level=20, premium=2.0)
    segments.total  # 10+10 (hour 0) + 20 (hour 1) + 20+10*2 (hour 2) = 80.0
    segments.to_frame()  # one row per interval, keyed by interval_start
    ```
"""

import math
from dataclasses import dataclass

import numpy as np
import polars as pl
from numpy.typing import ArrayLike, NDArray

from commitlab.config import DEFAULT_PREMIUM
from commitlab.demand import DemandSeries
from commitlab.exceptions import InvalidInputError


@dataclass(frozen=True)
class CostSegments:
    """
    Per-interval cost partition of a series at a commitment level.

    Arrays are aligned by construction and indexed by interval; ``to_frame``
    pairs them explicitly with each interval's start timestamp.

    Attributes:
        interval_start: Start timestamp of each hourly interval, shape (n-1,)
        used: Committed capacity consumed, shape (n-1,)
        unused: Committed capacity paid for but idle, shape (n-1,)
        on_demand: Demand above the commitment (raw units, before premium), shape (n-1,)
        level: Commitment level per interval, shape (n-1,)
        premium: On-demand price multiple
    """

    interval_start: NDArray[np.datetime64]
    used: NDArray[np.float64]
    unused: NDArray[np.float64]
    on_demand: NDArray[np.float64]
    level: NDArray[np.float64]
    premium: float

    @property
    def on_demand_cost(self) -> NDArray[np.float64]:
        return self.on_demand * self.premium

    @property
    def interval_total(self) -> NDArray[np.float64]:
        return _interval_totals(self.used, self.unused, self.on_demand, self.premium)

    @property
    def used_cost(self) -> float:
        return float(np.sum(self.used))

    @property
    def unused_cost(self) -> float:
        return float(np.sum(self.unused))

    @property
    def total_on_demand_cost(self) -> float:
        return float(np.sum(self.on_demand_cost))

    @property
    def total(self) -> float:
        """Total cost over all intervals."""
        return _sum_total(self.used, self.unused, self.on_demand, self.premium)

    def __len__(self) -> int:
        return len(self.used)

    def to_frame(self) -> pl.DataFrame:
        """One row per interval keyed by ``interval_start``."""
        return pl.DataFrame(
            {
                "interval_start": self.interval_start,
                "level": self.level,
                "used": self.used,
                "unused": self.unused,
                "on_demand": self.on_demand,
                "on_demand_cost": self.on_demand_cost,
                "total": self.interval_total,
            }
        )


def _interval_totals(
    used: NDArray[np.float64],
    unused: NDArray[np.float64],
    on_demand: NDArray[np.float64],
    premium: float,
) -> NDArray[np.float64]:
    return used + unused + on_demand * premium


def _sum_total(
    used: NDArray[np.float64],
    unused: NDArray[np.float64],
    on_demand: NDArray[np.float64],
    premium: float,
) -> float:
    # Single summation path shared by CostSegments.total and the search objective
    return float(np.sum(_interval_totals(used, unused, on_demand, premium)))


def _partition(
    usage: NDArray[np.float64], level: float | NDArray[np.float64]
) -> tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]:
    used = np.minimum(usage, level)
    unused = np.maximum(level - usage, 0.0)
    on_demand = np.maximum(usage - level, 0.0)
    return used, unused, on_demand


def validate_premium(premium: float) -> float:
    """Return premium as float, raising if it would make on-demand cheaper than commitment."""
    if not math.isfinite(premium) or premium < 1:
        raise InvalidInputError(f"premium must be a finite value >= 1, got {premium}")
    return float(premium)


def interval_usage(series: DemandSeries) -> NDArray[np.float64]:
    """Usage charged for each interval (left endpoint of each sample pair)."""
    return series.require_costable().usage[:-1]


def total_cost(usage: NDArray[np.float64], level: float, premium: float) -> float:
    """
    Total cost of interval usage at one level, without building segments.

    ``usage`` is the per-interval usage from ``interval_usage``. The result is
    bit-identical to ``evaluate(series, level, premium).total``.
    """
    return _sum_total(*_partition(usage, level), premium)


def evaluate(series: DemandSeries, level: float, premium: float = DEFAULT_PREMIUM) -> CostSegments:
    """
    Partition the cost of serving ``series`` at a flat commitment ``level``.

    Args:
        series: Hourly demand with at least 2 samples
        level: Commitment level in usage units
        premium: On-demand price multiple (must be >= 1, default: 2.1)

    Returns:
        CostSegments with one entry per hourly interval

    Raises:
        InvalidInputError: If the series has fewer than 2 samples, the level is
            negative or not finite, or premium < 1
    """
    premium = validate_premium(premium)
    series.require_costable()
    if not math.isfinite(level):
        raise InvalidInputError(f"level must be finite, got {level}")
    if level < 0:
        raise InvalidInputError(f"level must be >= 0, got {level}")
    return _segments(series, np.full(len(series) - 1, float(level)), premium)


def evaluate_levels(
    series: DemandSeries, levels: ArrayLike, premium: float = DEFAULT_PREMIUM
) -> CostSegments:
    """
    Cost a series with a separate commitment level per interval.

    Used by laddering, where the applicable level changes at sub-period
    boundaries.

    Args:
        series: Hourly demand with at least 2 samples
        levels: One level per interval, shape (len(series) - 1,)
        premium: On-demand price multiple (must be >= 1)

    Raises:
        InvalidInputError: If ``levels`` has the wrong shape, or negative
            or non-finite values
    """
    premium = validate_premium(premium)
    series.require_costable()
    level_arr = np.asarray(levels, dtype=np.float64)
    if level_arr.shape != (len(series) - 1,):
        raise InvalidInputError(
            f"expected {len(series) - 1} interval levels, got shape {level_arr.shape}"
        )
    if not np.all(np.isfinite(level_arr)):
        raise InvalidInputError("interval levels contain non-finite values")
    if np.any(level_arr < 0):
        raise InvalidInputError(f"interval levels must be >= 0, min is {level_arr.min()}")
    return _segments(series, level_arr, premium)


def _segments(series: DemandSeries, levels: NDArray[np.float64], premium: float) -> CostSegments:
    usage = interval_usage(series)
    used, unused, on_demand = _partition(usage, levels)
    return CostSegments(
        interval_start=series.timestamps[:-1],
        used=used,
        unused=unused,
        on_demand=on_demand,
        level=levels,
        premium=premium,
    )


def on_demand_only_cost(series: DemandSeries, premium: float = DEFAULT_PREMIUM) -> float:
    """Cost of serving all demand on demand (commitment level zero)."""
    return evaluate(series, 0.0, premium).total


def breakeven_coverage(premium: float = DEFAULT_PREMIUM) -> float:
    """
    Fraction of hours a marginal unit of commitment must be used to pay off.

    A unit of commitment costs 1 every hour and saves ``premium`` in each hour
    it is used, so it pays off when used in more than ``1 / premium`` of hours.
    The cost-minimizing level therefore sits at the ``1 - 1/premium`` quantile
    of interval usage.

    Example:
        >>> breakeven_coverage(2.0)
        0.5
    """
    return 1.0 - 1.0 / validate_premium(premium)
