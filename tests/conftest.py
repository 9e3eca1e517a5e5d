"""Shared fixtures and configuration for tests."""

import os

# MUST set MPLBACKEND before any matplotlib imports
os.environ["MPLBACKEND"] = "Agg"

from datetime import datetime, timedelta

import numpy as np
import polars as pl
import pytest

from commitlab.demand import DemandSeries

# Test configuration
pytest.TEST_SEED = 42
START = datetime(2021, 3, 1)


@pytest.fixture
def rng():
    """Seeded generator for reproducible synthetic demand."""
    return np.random.default_rng(pytest.TEST_SEED)


@pytest.fixture
def make_series():
    """Factory for hourly series starting at a fixed instant."""

    def _make(values, start: datetime = START) -> DemandSeries:
        return DemandSeries.from_values(np.asarray(values, dtype=np.float64), start=start)

    return _make


@pytest.fixture
def two_day_series(make_series):
    """24 hours at 10 followed by 24 hours at 20."""
    return make_series([10.0] * 24 + [20.0] * 24)


@pytest.fixture
def weekly_demand(rng, make_series):
    """Three weeks of diurnal demand with noise."""
    hours = np.arange(3 * 168)
    diurnal = 60 + 25 * np.sin(2 * np.pi * hours / 24)
    weekly = 10 * np.cos(2 * np.pi * hours / 168)
    noise = rng.normal(0, 3, len(hours))
    return make_series(np.clip(diurnal + weekly + noise, 0, None))


@pytest.fixture
def raw_records():
    """Per-(SKU, region, hour) records for three hours."""
    timestamps = [START + timedelta(hours=h) for h in range(3)]
    rows = []
    for ts in timestamps:
        for sku in ["sku_a", "sku_b"]:
            for region in [1, 2]:
                rows.append(
                    {
                        "timestamp": ts,
                        "sku": sku,
                        "region": region,
                        "count": 10 * (timestamps.index(ts) + 1) + region,
                    }
                )
    # Shuffle row order so aggregation must sort
    return pl.DataFrame(rows).reverse()
