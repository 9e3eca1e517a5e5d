"""
Analysis configuration.

Every core function takes its parameters explicitly. ``CommitmentConfig``
bundles the defaults used across the notebooks so that a study can pin them
once and pass the same object to search, scenario and laddering helpers.
"""

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PREMIUM = 2.1
DEFAULT_GRID_STEPS = 100
DEFAULT_TOLERANCE = 1e-3
DEFAULT_MAX_ITERATIONS = 500
HOURS_PER_DAY = 24
HOURS_PER_WEEK = 7 * HOURS_PER_DAY


class CommitmentConfig(BaseModel):
    """Pricing and search settings shared by a commitment study."""

    model_config = ConfigDict(frozen=True)

    premium: float = Field(
        DEFAULT_PREMIUM, ge=1, description="On-demand price as a multiple of committed price"
    )
    grid_steps: int = Field(DEFAULT_GRID_STEPS, ge=1, description="Candidate levels in grid search")
    tolerance: float = Field(
        DEFAULT_TOLERANCE, gt=0, description="Absolute level tolerance for scalar search"
    )
    max_iterations: int = Field(
        DEFAULT_MAX_ITERATIONS, ge=1, description="Iteration cap for scipy minimizers"
    )
    period_hours: int = Field(HOURS_PER_WEEK, ge=2, description="Ladder sub-period length")
    normalization_ceiling: float = Field(
        100.0, gt=0, description="Peak usage after normalization"
    )
