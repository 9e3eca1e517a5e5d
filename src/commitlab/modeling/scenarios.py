"""
Forecast sensitivity of the optimal commitment level.

A commitment bought today is paid for while demand keeps moving. These helpers
project the most recent week of demand forward under a deterministic
compounding trend and measure how much more it costs to serve that future with
a level chosen from today's data instead of one chosen from the projection.

Growth is applied per day: with ``g = (1 + annual_trend) ** (1 / 365)``, day
``d`` (1-7) of generated week ``w`` (1-based) is the template day scaled by
``g ** ((w - 1) * 7 + d)``, uniformly across its 24 hours. Consecutive weeks
therefore differ by exactly ``g ** 7``.

Example:
    ```python
    from commitlab.modeling.scenarios import forecast_sensitivity

    result = forecast_sensitivity(series, weeks=26, annual_trend=0.3)
    print(f"Committing on today's data costs {result.cost_ratio:.3f}x the forecast plan")
    ```
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np
import polars as pl
from loguru import logger

from commitlab.config import HOURS_PER_DAY, HOURS_PER_WEEK, CommitmentConfig
from commitlab.demand import DemandSeries
from commitlab.demand.series import HOUR
from commitlab.exceptions import InvalidInputError

from .cost_model import evaluate
from .search import SearchStrategy, find_optimal_level


def daily_growth_factor(annual_trend: float) -> float:
    """Per-day multiplier equivalent to ``annual_trend`` compounded over 365 days."""
    if not math.isfinite(annual_trend) or annual_trend <= -1:
        raise InvalidInputError(f"annual_trend must be finite and > -1, got {annual_trend}")
    return (1.0 + annual_trend) ** (1.0 / 365.0)


def extend(series: DemandSeries, weeks: int, annual_trend: float) -> DemandSeries:
    """
    Append ``weeks`` projected weeks after the end of ``series``.

    The last 168 hours of ``series`` are the weekly template. Generated
    timestamps continue hourly from the final sample.

    Args:
        series: Hourly demand covering at least one full week
        weeks: Number of weeks to generate (>= 1)
        annual_trend: Annual growth rate, e.g. 0.1 for +10% per year

    Returns:
        DemandSeries of ``len(series) + weeks * 168`` samples: the original
        followed by the projection

    Raises:
        InvalidInputError: If weeks < 1, the trend is not finite or <= -1, or
            the series is shorter than a week
    """
    if weeks < 1:
        raise InvalidInputError(f"weeks must be >= 1, got {weeks}")
    growth = daily_growth_factor(annual_trend)
    if len(series) < HOURS_PER_WEEK:
        raise InvalidInputError(
            f"series must cover at least one week ({HOURS_PER_WEEK} hours), got {len(series)}"
        )

    template = series.usage[-HOURS_PER_WEEK:].reshape(7, HOURS_PER_DAY)
    day_offsets = np.arange(1, 7 * weeks + 1, dtype=np.float64).reshape(weeks, 7, 1)
    projected = (template[np.newaxis, :, :] * growth**day_offsets).reshape(-1)

    future_ts = series.timestamps[-1] + np.arange(1, weeks * HOURS_PER_WEEK + 1) * HOUR
    timestamps = np.concatenate([series.timestamps, future_ts])
    usage = np.concatenate([series.usage, projected])
    order = np.argsort(timestamps, kind="stable")

    logger.debug(
        f"Extended series by {weeks} weeks at {annual_trend:+.2%}/yr "
        f"(final week factor {growth ** (7 * weeks):.4f})"
    )
    return DemandSeries(timestamps[order], usage[order])


def future_only(extended: DemandSeries, original: DemandSeries) -> DemandSeries:
    """Samples of ``extended`` strictly after the last timestamp of ``original``."""
    mask = extended.timestamps > original.timestamps[-1]
    if not mask.any():
        raise InvalidInputError("extended series has no samples after the original series")
    return DemandSeries(extended.timestamps[mask], extended.usage[mask])


@dataclass(frozen=True)
class ForecastSensitivity:
    """
    Cost of committing on today's data versus on a trend projection.

    Both levels are scored against the same projected future series.

    Attributes:
        weeks: Projection horizon in weeks
        annual_trend: Annual growth rate of the projection
        actual_level: Optimal level for the historical series
        forecast_level: Optimal level for the projected future
        cost_with_actual_level: Future cost when committing at ``actual_level``
        cost_with_forecast_level: Future cost when committing at ``forecast_level``
    """

    weeks: int
    annual_trend: float
    actual_level: float
    forecast_level: float
    cost_with_actual_level: float
    cost_with_forecast_level: float

    @property
    def cost_delta(self) -> float:
        """Extra cost of ignoring the forecast (>= 0 when the forecast level is optimal)."""
        return self.cost_with_actual_level - self.cost_with_forecast_level

    @property
    def cost_ratio(self) -> float:
        if self.cost_with_forecast_level == 0:
            return 1.0 if self.cost_with_actual_level == 0 else math.inf
        return self.cost_with_actual_level / self.cost_with_forecast_level

    def as_row(self) -> dict[str, float]:
        return {
            "weeks": self.weeks,
            "annual_trend": self.annual_trend,
            "actual_level": self.actual_level,
            "forecast_level": self.forecast_level,
            "cost_with_actual_level": self.cost_with_actual_level,
            "cost_with_forecast_level": self.cost_with_forecast_level,
            "cost_delta": self.cost_delta,
            "cost_ratio": self.cost_ratio,
        }


def forecast_sensitivity(
    series: DemandSeries,
    weeks: int,
    annual_trend: float,
    strategy: SearchStrategy | str = SearchStrategy.GRID,
    config: CommitmentConfig | None = None,
) -> ForecastSensitivity:
    """
    Compare a level chosen on historical data with one chosen on the projection.

    Args:
        series: Historical hourly demand (at least one week)
        weeks: Projection horizon in weeks
        annual_trend: Annual growth rate applied to the projection
        strategy: Level search strategy used for both levels
        config: Premium and search settings

    Returns:
        ForecastSensitivity for the projected future weeks
    """
    config = config or CommitmentConfig()
    future = future_only(extend(series, weeks, annual_trend), series)

    actual = find_optimal_level(series, strategy, config)
    forecast = find_optimal_level(future, strategy, config)

    result = ForecastSensitivity(
        weeks=weeks,
        annual_trend=annual_trend,
        actual_level=actual.level,
        forecast_level=forecast.level,
        cost_with_actual_level=evaluate(future, actual.level, config.premium).total,
        cost_with_forecast_level=evaluate(future, forecast.level, config.premium).total,
    )
    logger.info(
        f"Forecast sensitivity ({weeks} weeks, {annual_trend:+.1%}/yr): "
        f"delta={result.cost_delta:,.2f}, ratio={result.cost_ratio:.4f}"
    )
    return result


def sensitivity_sweep(
    series: DemandSeries,
    horizons: Iterable[int],
    trends: Iterable[float],
    strategy: SearchStrategy | str = SearchStrategy.GRID,
    config: CommitmentConfig | None = None,
) -> pl.DataFrame:
    """
    Forecast sensitivity for every (horizon, trend) combination.

    Returns:
        DataFrame with one row per combination and the columns of
        ``ForecastSensitivity.as_row``, sorted by weeks then trend
    """
    trends = list(trends)
    rows = [
        forecast_sensitivity(series, weeks, trend, strategy, config).as_row()
        for weeks in horizons
        for trend in trends
    ]
    if not rows:
        raise InvalidInputError("sensitivity sweep needs at least one horizon and one trend")
    return pl.DataFrame(rows).sort(["weeks", "annual_trend"])
