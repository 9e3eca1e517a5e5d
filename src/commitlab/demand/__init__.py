"""Demand series container."""

from .series import DemandSeries, Sample

__all__ = ["DemandSeries", "Sample"]
