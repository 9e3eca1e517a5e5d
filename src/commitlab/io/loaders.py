"""Loaders that turn raw VM demand records into a DemandSeries."""

from pathlib import Path

import polars as pl
from loguru import logger

from commitlab.demand import DemandSeries
from commitlab.exceptions import DegenerateNormalizationError, InvalidInputError


def _require_columns(df: pl.DataFrame | pl.LazyFrame, columns: list[str]) -> None:
    available = df.collect_schema().names() if isinstance(df, pl.LazyFrame) else df.columns
    missing = [col for col in columns if col not in available]
    if missing:
        raise InvalidInputError(f"columns {missing} not found in records: {available}")


def aggregate(
    records: pl.DataFrame | pl.LazyFrame,
    time_col: str = "timestamp",
    value_col: str = "count",
) -> DemandSeries:
    """
    Sum per-(SKU, region, hour) records into one hourly demand series.

    Args:
        records: Raw records with at least ``time_col`` and ``value_col``
        time_col: Timestamp column name
        value_col: Demand column name

    Returns:
        DemandSeries with one sample per distinct timestamp, sorted ascending

    Raises:
        InvalidInputError: If a required column is missing or no records remain

    Example:
        >>> series = aggregate(records)  # sums across every type and region
    """
    _require_columns(records, [time_col, value_col])

    hourly = (
        records.lazy()
        .group_by(time_col)
        .agg(pl.col(value_col).cast(pl.Float64).sum().alias("usage"))
        .sort(time_col)
        .collect()
    )
    if hourly.height == 0:
        raise InvalidInputError("no records to aggregate")

    logger.debug(f"Aggregated records into {hourly.height:,} hourly samples")
    return DemandSeries.from_frame(hourly, time_col=time_col, value_col="usage")


def normalize(series: DemandSeries, ceiling: float = 100.0) -> DemandSeries:
    """
    Rescale usage so the peak sample equals ``ceiling``.

    Raises:
        DegenerateNormalizationError: If every sample is zero
        InvalidInputError: If ceiling is not positive
    """
    if ceiling <= 0:
        raise InvalidInputError(f"ceiling must be > 0, got {ceiling}")

    peak = series.max_usage
    if peak == 0:
        raise DegenerateNormalizationError("cannot normalize a series whose usage is all zero")
    if peak == ceiling:
        logger.warning(f"Series peak already equals ceiling {ceiling}; normalization is a no-op")

    return series.with_usage(series.usage * (ceiling / peak))


class VMDemandLoader:
    """
    Load the hourly VM demand dataset.

    Records carry a timestamp, an obfuscated SKU type label, an obfuscated
    region id (1-4) and a normalized VM count. Loading optionally narrows to
    one SKU and/or region before summing into a single DemandSeries.
    """

    # Column renames for standardization
    COLUMN_RENAMES = {"vm_type": "sku", "sku_type": "sku", "vm_count": "count"}

    TIME_COL = "timestamp"
    VALUE_COL = "count"

    @staticmethod
    def read(source: str | Path | pl.DataFrame | pl.LazyFrame) -> pl.LazyFrame:
        """
        Open records lazily from a parquet/CSV path or an in-memory frame.

        Raises:
            InvalidInputError: If the file extension is not supported
        """
        if isinstance(source, (pl.DataFrame, pl.LazyFrame)):
            frame = source.lazy()
        else:
            path = Path(source)
            suffix = path.suffix.lower()
            if suffix == ".parquet":
                frame = pl.scan_parquet(path)
            elif suffix == ".csv":
                frame = pl.scan_csv(path, try_parse_dates=True)
            else:
                raise InvalidInputError(f"unsupported file type '{suffix}' for {path}")
            logger.info(f"Reading VM demand records from {path}")

        names = frame.collect_schema().names()
        renames = {
            old: new
            for old, new in VMDemandLoader.COLUMN_RENAMES.items()
            if old in names and new not in names
        }
        return frame.rename(renames) if renames else frame

    @staticmethod
    def load(
        source: str | Path | pl.DataFrame | pl.LazyFrame,
        sku: str | None = None,
        region: int | None = None,
        ceiling: float | None = None,
    ) -> DemandSeries:
        """
        Load records into an hourly DemandSeries.

        Args:
            source: Parquet/CSV path or polars frame of raw records
            sku: Keep only this SKU type label (default: all)
            region: Keep only this region id (default: all)
            ceiling: Normalize so the peak equals this value (default: no normalization)

        Returns:
            Aggregated (and optionally normalized) DemandSeries
        """
        frame = VMDemandLoader.read(source)
        time_col = VMDemandLoader.TIME_COL

        if frame.collect_schema().get(time_col) == pl.String:
            frame = frame.with_columns(pl.col(time_col).str.to_datetime())

        if sku is not None:
            _require_columns(frame, ["sku"])
            frame = frame.filter(pl.col("sku") == sku)
        if region is not None:
            _require_columns(frame, ["region"])
            frame = frame.filter(pl.col("region") == region)

        series = aggregate(frame, time_col=time_col, value_col=VMDemandLoader.VALUE_COL)
        logger.info(
            f"Loaded {len(series):,} hourly samples ({series.start} to {series.end}), "
            f"sku={sku or 'all'}, region={region or 'all'}"
        )

        if ceiling is not None:
            series = normalize(series, ceiling)
        return series
