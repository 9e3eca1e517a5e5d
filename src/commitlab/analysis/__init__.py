"""Reporting helpers: cost curves, premium sweeps and charts."""

from .plots import plot_cost_curve, plot_cost_segments
from .sweeps import cost_curve, premium_sweep

__all__ = [
    "cost_curve",
    "premium_sweep",
    "plot_cost_curve",
    "plot_cost_segments",
]
