"""Tests for trend projection and forecast sensitivity."""

import math

import numpy as np
import polars as pl
import pytest

from commitlab.config import CommitmentConfig
from commitlab.exceptions import InvalidInputError
from commitlab.modeling.cost_model import evaluate
from commitlab.modeling.scenarios import (
    ForecastSensitivity,
    daily_growth_factor,
    extend,
    forecast_sensitivity,
    future_only,
    sensitivity_sweep,
)
from commitlab.modeling.search import SearchStrategy


@pytest.fixture
def one_week(rng, make_series):
    """One week of positive hourly demand."""
    return make_series(rng.uniform(20, 80, 168))


class TestExtend:
    """Tests for extend()."""

    def test_length_and_cadence(self, one_week):
        """Two extra weeks should add 336 hourly samples."""
        extended = extend(one_week, weeks=2, annual_trend=0.1)
        deltas = np.diff(extended.timestamps)

        assert len(extended) == len(one_week) + 2 * 7 * 24
        assert np.all(deltas == np.timedelta64(1, "h"))

    def test_original_prefix_unchanged(self, one_week):
        extended = extend(one_week, weeks=1, annual_trend=0.1)
        np.testing.assert_array_equal(extended.usage[: len(one_week)], one_week.usage)
        np.testing.assert_array_equal(extended.timestamps[: len(one_week)], one_week.timestamps)

    def test_daily_compounding(self, one_week):
        """Week 1 day d should be the template times g**d, uniformly over its hours."""
        g = (1 + 0.1) ** (1 / 365)
        week1 = extend(one_week, weeks=1, annual_trend=0.1).usage[168:].reshape(7, 24)
        template = one_week.usage.reshape(7, 24)

        for day in range(7):
            np.testing.assert_allclose(week1[day], template[day] * g ** (day + 1), rtol=1e-12)

    def test_week_two_compounds_week_one(self, one_week):
        """Week 2 should equal week 1 times g**7 at every hour (compounding)."""
        g = (1 + 0.1) ** (1 / 365)
        future = extend(one_week, weeks=2, annual_trend=0.1).usage[168:]
        week1, week2 = future[:168], future[168:]

        np.testing.assert_allclose(week2, week1 * g**7, rtol=1e-12)

    def test_zero_trend_repeats_template(self, one_week):
        extended = extend(one_week, weeks=3, annual_trend=0.0)
        for w in range(1, 4):
            np.testing.assert_array_equal(extended.usage[168 * w : 168 * (w + 1)], one_week.usage)

    def test_uses_most_recent_week(self, make_series):
        """A longer series should be projected from its final week."""
        series = make_series([1.0] * 168 + [5.0] * 168)
        extended = extend(series, weeks=1, annual_trend=0.0)
        assert (extended.usage[336:] == 5.0).all()

    def test_negative_trend_shrinks(self, one_week):
        future = extend(one_week, weeks=1, annual_trend=-0.2).usage[168:]
        assert (future < one_week.usage).all()

    def test_invalid_weeks(self, one_week):
        with pytest.raises(InvalidInputError, match="weeks"):
            extend(one_week, weeks=0, annual_trend=0.1)

    @pytest.mark.parametrize("trend", [-1.0, -2.0, float("nan"), float("inf")])
    def test_invalid_trend(self, one_week, trend):
        with pytest.raises(InvalidInputError, match="annual_trend"):
            extend(one_week, weeks=1, annual_trend=trend)

    def test_requires_full_week(self, make_series):
        with pytest.raises(InvalidInputError, match="one week"):
            extend(make_series([1.0] * 100), weeks=1, annual_trend=0.1)


class TestFutureOnly:
    """Tests for future_only()."""

    def test_keeps_samples_after_original(self, one_week):
        extended = extend(one_week, weeks=2, annual_trend=0.05)
        future = future_only(extended, one_week)

        assert len(future) == 336
        assert future.start > one_week.end

    def test_no_future_samples(self, one_week):
        with pytest.raises(InvalidInputError, match="no samples after"):
            future_only(one_week, one_week)


class TestForecastSensitivity:
    """Tests for forecast_sensitivity()."""

    def test_scored_on_same_future(self, one_week):
        """Both levels should be costed against the projected future series."""
        config = CommitmentConfig(premium=2.1, grid_steps=50)
        result = forecast_sensitivity(one_week, weeks=4, annual_trend=0.5, config=config)
        future = future_only(extend(one_week, 4, 0.5), one_week)

        assert isinstance(result, ForecastSensitivity)
        assert result.cost_with_actual_level == evaluate(future, result.actual_level, 2.1).total
        assert result.cost_with_forecast_level == evaluate(future, result.forecast_level, 2.1).total

    def test_growth_raises_forecast_level(self, one_week):
        result = forecast_sensitivity(one_week, weeks=8, annual_trend=1.0)
        assert result.forecast_level > result.actual_level

    def test_delta_and_ratio(self, one_week):
        """Forecast-based level should be no worse on the future it was fitted to."""
        config = CommitmentConfig(grid_steps=1000)
        result = forecast_sensitivity(one_week, weeks=8, annual_trend=1.0, config=config)

        assert result.cost_delta == pytest.approx(
            result.cost_with_actual_level - result.cost_with_forecast_level
        )
        assert result.cost_delta >= -1e-9 * result.cost_with_forecast_level
        assert result.cost_ratio == pytest.approx(
            result.cost_with_actual_level / result.cost_with_forecast_level
        )

    def test_zero_trend_no_delta(self, one_week):
        """With no growth the future repeats today and the two levels cost about the same."""
        result = forecast_sensitivity(one_week, weeks=2, annual_trend=0.0)
        assert result.cost_delta >= 0.0
        assert result.cost_ratio == pytest.approx(1.0, rel=1e-3)

    def test_ratio_for_zero_costs(self):
        result = ForecastSensitivity(1, 0.0, 0.0, 0.0, 0.0, 0.0)
        assert result.cost_ratio == 1.0
        assert math.isinf(ForecastSensitivity(1, 0.0, 0.0, 0.0, 5.0, 0.0).cost_ratio)

    @pytest.mark.parametrize("strategy", list(SearchStrategy))
    def test_all_strategies(self, one_week, strategy):
        result = forecast_sensitivity(one_week, weeks=2, annual_trend=0.2, strategy=strategy)
        assert np.isfinite(result.cost_ratio)


class TestSensitivitySweep:
    """Tests for sensitivity_sweep()."""

    def test_one_row_per_combination(self, one_week):
        frame = sensitivity_sweep(
            one_week, horizons=[2, 4], trends=[0.0, 0.1, 0.3], config=CommitmentConfig(grid_steps=20)
        )

        assert isinstance(frame, pl.DataFrame)
        assert frame.height == 6
        assert {"weeks", "annual_trend", "cost_delta", "cost_ratio"} <= set(frame.columns)
        assert frame["weeks"].to_list() == [2, 2, 2, 4, 4, 4]

    def test_empty_sweep(self, one_week):
        with pytest.raises(InvalidInputError):
            sensitivity_sweep(one_week, horizons=[], trends=[0.1])


def test_daily_growth_factor_compounds_to_annual():
    assert daily_growth_factor(0.25) ** 365 == pytest.approx(1.25)
