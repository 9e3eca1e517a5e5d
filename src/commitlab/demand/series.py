"""Immutable hourly demand series consumed by the cost model."""

from collections.abc import Iterator, Sequence
from datetime import datetime
from typing import NamedTuple

import numpy as np
import polars as pl
from numpy.typing import ArrayLike, NDArray

from commitlab.exceptions import InvalidInputError

HOUR = np.timedelta64(1, "h")


class Sample(NamedTuple):
    """One hourly observation of aggregate VM demand."""

    timestamp: datetime
    usage: float


def _frozen(values: NDArray) -> NDArray:
    values.flags.writeable = False
    return values


class DemandSeries:
    """
    Ordered hourly demand samples.

    The series is a snapshot: both arrays are read-only and every transforming
    method returns a new instance. Timestamps must be strictly increasing and
    usage finite and non-negative; hourly spacing is assumed, not checked.

    Attributes:
        timestamps: ``datetime64[us]`` array of sample instants
        usage: ``float64`` array of demand, one value per timestamp

    Example:
        >>> series = DemandSeries.from_values([10, 12, 9, 14])
        >>> series.bounds
        (9.0, 14.0)
    """

    def __init__(self, timestamps: ArrayLike, usage: ArrayLike):
        """
        Build a series from parallel timestamp and usage arrays.

        Args:
            timestamps: Sample instants (datetimes or datetime64 values)
            usage: Demand per sample

        Raises:
            InvalidInputError: If the arrays are empty, differ in length, contain
                negative or non-finite usage, or timestamps are not strictly increasing
        """
        ts = np.array(timestamps, dtype="datetime64[us]")
        values = np.array(usage, dtype=np.float64)

        if ts.ndim != 1 or values.ndim != 1:
            raise InvalidInputError("timestamps and usage must be one-dimensional")
        if len(ts) == 0:
            raise InvalidInputError("DemandSeries requires at least one sample")
        if len(ts) != len(values):
            raise InvalidInputError(
                f"timestamps and usage must have same length, got {len(ts)} and {len(values)}"
            )
        if not np.all(np.isfinite(values)):
            raise InvalidInputError("usage contains non-finite values")
        if np.any(values < 0):
            raise InvalidInputError(f"usage must be non-negative, min is {values.min()}")
        if len(ts) > 1 and not np.all(np.diff(ts) > np.timedelta64(0, "us")):
            raise InvalidInputError("timestamps must be strictly increasing")

        self._timestamps = _frozen(ts)
        self._usage = _frozen(values)

    @classmethod
    def from_values(
        cls, usage: Sequence[float] | NDArray, start: datetime = datetime(2020, 1, 1)
    ) -> "DemandSeries":
        """Hourly series starting at ``start`` with the given usage values."""
        values = np.asarray(usage, dtype=np.float64)
        timestamps = np.datetime64(start, "us") + np.arange(len(values)) * HOUR
        return cls(timestamps, values)

    @classmethod
    def from_frame(
        cls, df: pl.DataFrame, time_col: str = "timestamp", value_col: str = "usage"
    ) -> "DemandSeries":
        """
        Build a series from a two-column polars DataFrame.

        Args:
            df: Frame already sorted by ``time_col`` with one row per hour
            time_col: Timestamp column name
            value_col: Usage column name

        Returns:
            DemandSeries over the frame's rows

        Raises:
            InvalidInputError: If either column is missing
        """
        missing = {time_col, value_col} - set(df.columns)
        if missing:
            raise InvalidInputError(f"columns {sorted(missing)} not found in {df.columns}")
        return cls(df[time_col].to_numpy(), df[value_col].cast(pl.Float64).to_numpy())

    @property
    def timestamps(self) -> NDArray[np.datetime64]:
        return self._timestamps

    @property
    def usage(self) -> NDArray[np.float64]:
        return self._usage

    @property
    def start(self) -> datetime:
        return self._timestamps[0].astype(datetime)

    @property
    def end(self) -> datetime:
        return self._timestamps[-1].astype(datetime)

    @property
    def min_usage(self) -> float:
        return float(self._usage.min())

    @property
    def max_usage(self) -> float:
        return float(self._usage.max())

    @property
    def bounds(self) -> tuple[float, float]:
        """Search range for commitment levels: (min usage, max usage)."""
        return self.min_usage, self.max_usage

    def require_costable(self) -> "DemandSeries":
        """Return self, raising if the series has no hourly interval to cost."""
        if len(self) < 2:
            raise InvalidInputError(
                f"series must contain at least 2 samples to be costed, got {len(self)}"
            )
        return self

    def with_usage(self, usage: ArrayLike) -> "DemandSeries":
        """New series on the same timestamps with replaced usage."""
        return DemandSeries(self._timestamps, usage)

    def concat(self, other: "DemandSeries") -> "DemandSeries":
        """Append ``other``, which must start after this series ends."""
        return DemandSeries(
            np.concatenate([self._timestamps, other.timestamps]),
            np.concatenate([self._usage, other.usage]),
        )

    def to_frame(self) -> pl.DataFrame:
        """Polars view with ``timestamp`` and ``usage`` columns."""
        return pl.DataFrame({"timestamp": self._timestamps, "usage": self._usage})

    def __len__(self) -> int:
        return len(self._usage)

    def __iter__(self) -> Iterator[Sample]:
        for ts, value in zip(self._timestamps, self._usage):
            yield Sample(ts.astype(datetime), float(value))

    def __getitem__(self, key):
        if isinstance(key, slice):
            return DemandSeries(self._timestamps[key], self._usage[key])
        return Sample(self._timestamps[key].astype(datetime), float(self._usage[key]))

    def __repr__(self) -> str:
        return (
            f"DemandSeries(n={len(self)}, start={self.start}, end={self.end}, "
            f"usage=[{self.min_usage:.4g}, {self.max_usage:.4g}])"
        )
