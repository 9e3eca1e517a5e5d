"""
Laddered commitments: one independently optimized level per sub-period.

Instead of one flat level for the whole range, the range is cut into
contiguous sub-periods (a week by default) and each gets its own level. The
ladder is costed by walking the full series and charging every hourly interval
at the level of the sub-period containing the interval's start.

Sub-period k owns the intervals that start on its samples, including the
hand-off interval from its last sample into sub-period k+1. Levels are
optimized over exactly those intervals. ``compare_ladder`` also keeps the flat
level for any period where it is cheaper than the period's own search result,
so the ladder never costs more than the flat commitment it is compared to.

Example:
    ```python
    from commitlab.modeling.laddering import compare_ladder

    comparison = compare_ladder(series)
    print(f"Weekly ladder saves {comparison.savings_pct:.2f}% over a flat level")
    ```
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

import numpy as np
from loguru import logger
from numpy.typing import NDArray

from commitlab.config import HOURS_PER_WEEK, CommitmentConfig
from commitlab.demand import DemandSeries
from commitlab.exceptions import InvalidInputError

from .cost_model import CostSegments, evaluate_levels, interval_usage, total_cost
from .search import SearchStrategy, find_optimal_level


def partition(series: DemandSeries, period_hours: int = HOURS_PER_WEEK) -> list[DemandSeries]:
    """
    Split a series into contiguous, non-overlapping sub-series.

    Every sub-series has ``period_hours`` samples except possibly the last.
    A trailing remainder shorter than 2 samples cannot be costed on its own and
    is merged into the preceding sub-period.

    Args:
        series: Hourly demand with at least 2 samples
        period_hours: Samples per sub-period (>= 2)

    Returns:
        Sub-series covering ``series`` exactly, in order

    Raises:
        InvalidInputError: If period_hours < 2 or the series is too short
    """
    if period_hours < 2:
        raise InvalidInputError(f"period_hours must be >= 2, got {period_hours}")
    series.require_costable()

    bounds = list(range(0, len(series), period_hours)) + [len(series)]
    if len(bounds) > 2 and bounds[-1] - bounds[-2] < 2:
        logger.warning(
            f"Merging trailing {bounds[-1] - bounds[-2]}-hour remainder into the previous period"
        )
        del bounds[-2]

    return [series[start:end] for start, end in zip(bounds[:-1], bounds[1:])]


def partition_weekly(series: DemandSeries) -> list[DemandSeries]:
    """Split a series into week-long sub-series."""
    return partition(series, HOURS_PER_WEEK)


@dataclass(frozen=True)
class LadderStep:
    """Commitment level for samples ``[start_index, end_index)`` of a series."""

    start_index: int
    end_index: int
    start: datetime
    end: datetime
    level: float


class LadderPlan:
    """
    Ordered sub-period levels partitioning a series.

    Attributes:
        steps: LadderStep entries whose index ranges tile ``[0, n_samples)``
    """

    def __init__(self, steps: Sequence[LadderStep]):
        """
        Raises:
            InvalidInputError: If steps is empty, does not start at index 0, or
                leaves gaps or overlaps between consecutive steps
        """
        steps = tuple(steps)
        if not steps:
            raise InvalidInputError("LadderPlan requires at least one step")
        if steps[0].start_index != 0:
            raise InvalidInputError(f"first step must start at index 0, got {steps[0].start_index}")
        for prev, nxt in zip(steps[:-1], steps[1:]):
            if nxt.start_index != prev.end_index:
                raise InvalidInputError(
                    f"steps must be contiguous: step ending at {prev.end_index} "
                    f"followed by step starting at {nxt.start_index}"
                )
        for step in steps:
            if step.end_index <= step.start_index:
                raise InvalidInputError(
                    f"step [{step.start_index}, {step.end_index}) is empty"
                )
        self.steps = steps

    @property
    def levels(self) -> list[float]:
        return [step.level for step in self.steps]

    @property
    def n_samples(self) -> int:
        return self.steps[-1].end_index

    def levels_per_interval(self, n_intervals: int) -> NDArray[np.float64]:
        """Level in force for each hourly interval, by the sub-period of its start sample."""
        if n_intervals != self.n_samples - 1:
            raise InvalidInputError(
                f"plan covers {self.n_samples} samples ({self.n_samples - 1} intervals), "
                f"got {n_intervals} intervals"
            )
        per_sample = np.repeat(
            np.array(self.levels, dtype=np.float64),
            [step.end_index - step.start_index for step in self.steps],
        )
        return per_sample[:-1]

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self):
        return iter(self.steps)

    def __repr__(self) -> str:
        return f"LadderPlan(periods={len(self)}, samples={self.n_samples})"


def ladder_plan(
    sub_series: Sequence[DemandSeries],
    strategy: SearchStrategy | str = SearchStrategy.GRID,
    config: CommitmentConfig | None = None,
    fallback_level: float | None = None,
) -> LadderPlan:
    """
    Optimize one level per sub-period.

    A period's own search only sees that period's usage range, so with a
    finite grid or a heuristic strategy it can miss a level that is cheaper on
    the period than its best candidate. Passing the whole-series level as
    ``fallback_level`` keeps it wherever it costs no more, which makes the ladder
    no more expensive than committing at ``fallback_level`` throughout.

    Args:
        sub_series: Contiguous sub-series in order, as returned by ``partition``
        strategy: Level search strategy for each sub-period
        config: Premium and search settings
        fallback_level: Level to keep for any period where it costs no more than
            the searched level

    Returns:
        LadderPlan with one step per sub-series

    Raises:
        InvalidInputError: If ``sub_series`` is empty or not contiguous, or
            ``fallback_level`` is negative or not finite
    """
    if not sub_series:
        raise InvalidInputError("ladder_plan requires at least one sub-series")
    if fallback_level is not None and not (math.isfinite(fallback_level) and fallback_level >= 0):
        raise InvalidInputError(f"fallback_level must be finite and >= 0, got {fallback_level}")
    config = config or CommitmentConfig()

    steps = []
    offset = 0
    for k, part in enumerate(sub_series):
        if k > 0 and part.timestamps[0] <= sub_series[k - 1].timestamps[-1]:
            raise InvalidInputError(f"sub-series {k} overlaps or precedes sub-series {k - 1}")

        # Include the hand-off sample so the boundary interval is optimized too
        window = part.concat(sub_series[k + 1][:1]) if k + 1 < len(sub_series) else part
        result = find_optimal_level(window, strategy, config)
        level = result.level
        if fallback_level is not None:
            fallback_cost = total_cost(interval_usage(window), fallback_level, config.premium)
            if fallback_cost <= result.cost:
                logger.debug(
                    f"Period {k}: fallback level {fallback_level:.6g} beats searched level "
                    f"{result.level:.6g} ({fallback_cost:.6g} <= {result.cost:.6g})"
                )
                level = fallback_level
        steps.append(
            LadderStep(
                start_index=offset,
                end_index=offset + len(part),
                start=part.start,
                end=part.end,
                level=level,
            )
        )
        offset += len(part)

    return LadderPlan(steps)


def evaluate_ladder(
    series: DemandSeries, plan: LadderPlan, premium: float | None = None
) -> CostSegments:
    """
    Cost a series under a laddered plan.

    Args:
        series: Full hourly demand the plan was built for
        plan: Sub-period levels covering every sample of ``series``
        premium: On-demand price multiple (default: ``CommitmentConfig().premium``)

    Returns:
        CostSegments with the locally applicable level per interval; ``.total``
        is the ladder cost

    Raises:
        InvalidInputError: If the plan does not cover the series exactly
    """
    premium = CommitmentConfig().premium if premium is None else premium
    levels = plan.levels_per_interval(len(series.require_costable()) - 1)
    return evaluate_levels(series, levels, premium)


@dataclass(frozen=True)
class LadderComparison:
    """
    Laddered versus flat commitment over the same series.

    Attributes:
        plan: Per-period levels
        flat_level: Optimal single level for the whole series
        flat_cost: Total cost at ``flat_level``
        ladder_cost: Total cost of ``plan``
    """

    plan: LadderPlan
    flat_level: float
    flat_cost: float
    ladder_cost: float

    @property
    def savings(self) -> float:
        """Cost avoided by laddering (negative if the ladder is worse)."""
        return self.flat_cost - self.ladder_cost

    @property
    def savings_pct(self) -> float:
        return 100.0 * self.savings / self.flat_cost if self.flat_cost else 0.0


def compare_ladder(
    series: DemandSeries,
    period_hours: int | None = None,
    strategy: SearchStrategy | str = SearchStrategy.GRID,
    config: CommitmentConfig | None = None,
) -> LadderComparison:
    """
    Build a ladder over ``series`` and compare it to one flat level.

    Args:
        series: Multi-period hourly demand
        period_hours: Sub-period length (default: ``config.period_hours``)
        strategy: Level search strategy for both the ladder and the flat level
        config: Premium and search settings

    Returns:
        LadderComparison with both costs
    """
    config = config or CommitmentConfig()
    period_hours = config.period_hours if period_hours is None else period_hours

    flat = find_optimal_level(series, strategy, config)
    plan = ladder_plan(
        partition(series, period_hours), strategy, config, fallback_level=flat.level
    )
    ladder_cost = evaluate_ladder(series, plan, config.premium).total

    comparison = LadderComparison(
        plan=plan, flat_level=flat.level, flat_cost=flat.cost, ladder_cost=ladder_cost
    )
    logger.info(
        f"Ladder of {len(plan)} periods: cost={ladder_cost:,.2f} vs flat={flat.cost:,.2f} "
        f"({comparison.savings_pct:+.2f}% savings)"
    )
    return comparison
