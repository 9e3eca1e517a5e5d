"""Matplotlib renderers for cost segments and cost curves."""

import matplotlib.dates as mdates
import matplotlib.pyplot as plt
import polars as pl

from commitlab.exceptions import InvalidInputError
from commitlab.modeling.cost_model import CostSegments
from commitlab.modeling.search import OptimizationResult

SEGMENT_COLORS = {
    "used": "steelblue",
    "unused": "lightgray",
    "on_demand_cost": "indianred",
}


def plot_cost_segments(
    segments: CostSegments,
    title: str | None = None,
    figsize: tuple[int, int] = (14, 5),
) -> plt.Figure:
    """
    Stacked hourly cost: used commitment, unused commitment, on-demand.

    Args:
        segments: Output of ``evaluate`` or ``evaluate_ladder``
        title: Plot title (None = auto-generate from level and total)
        figsize: Figure size (width, height)

    Returns:
        Matplotlib Figure object
    """
    fig, ax = plt.subplots(figsize=figsize)

    ax.stackplot(
        segments.interval_start,
        segments.used,
        segments.unused,
        segments.on_demand_cost,
        labels=["Used commitment", "Unused commitment", "On-demand (at premium)"],
        colors=[SEGMENT_COLORS["used"], SEGMENT_COLORS["unused"], SEGMENT_COLORS["on_demand_cost"]],
        step="post",
        alpha=0.85,
    )

    if len(set(segments.level.tolist())) == 1:
        auto_title = f"Hourly Cost at Commitment {segments.level[0]:.2f} (total {segments.total:,.0f})"
    else:
        auto_title = f"Hourly Cost under Laddered Commitment (total {segments.total:,.0f})"

    locator = mdates.AutoDateLocator()
    ax.xaxis.set_major_locator(locator)
    ax.xaxis.set_major_formatter(mdates.ConciseDateFormatter(locator))

    ax.set_xlabel("Time", fontsize=12, fontweight="bold")
    ax.set_ylabel("Cost (commitment units)", fontsize=12, fontweight="bold")
    ax.set_title(title or auto_title, fontsize=14, fontweight="bold", pad=15)
    ax.legend(loc="upper left")
    ax.grid(True, alpha=0.3, linestyle="--")

    plt.tight_layout()
    return fig


def plot_cost_curve(
    curve: pl.DataFrame,
    optimum: OptimizationResult | None = None,
    title: str = "Total Cost by Commitment Level",
    figsize: tuple[int, int] = (10, 6),
) -> plt.Figure:
    """
    Plot a ``cost_curve`` frame, optionally marking the optimal level.

    Raises:
        InvalidInputError: If the frame lacks the cost curve columns
    """
    required = {"level", "used", "unused", "on_demand_cost", "total"}
    missing = required - set(curve.columns)
    if missing:
        raise InvalidInputError(f"cost curve is missing columns {sorted(missing)}")

    fig, ax = plt.subplots(figsize=figsize)
    level = curve["level"].to_numpy()

    ax.plot(level, curve["total"].to_numpy(), color="black", linewidth=2.5, label="Total")
    for col, label in [
        ("used", "Used commitment"),
        ("unused", "Unused commitment"),
        ("on_demand_cost", "On-demand"),
    ]:
        ax.plot(level, curve[col].to_numpy(), color=SEGMENT_COLORS[col], linewidth=1.5, label=label)

    if optimum is not None:
        ax.axvline(optimum.level, color="darkgreen", linestyle="--", linewidth=1.5)
        ax.scatter(
            [optimum.level],
            [optimum.cost],
            color="darkgreen",
            zorder=5,
            label=f"Optimum ({optimum.level:.2f})",
        )

    ax.set_xlabel("Commitment level", fontsize=12, fontweight="bold")
    ax.set_ylabel("Cost", fontsize=12, fontweight="bold")
    ax.set_title(title, fontsize=14, fontweight="bold", pad=15)
    ax.legend()
    ax.grid(True, alpha=0.3, linestyle="--")

    plt.tight_layout()
    return fig
