"""Tests for CommitmentConfig."""

import pytest
from pydantic import ValidationError

from commitlab.config import HOURS_PER_WEEK, CommitmentConfig


class TestCommitmentConfig:
    def test_defaults(self):
        config = CommitmentConfig()

        assert config.premium == 2.1
        assert config.grid_steps == 100
        assert config.period_hours == HOURS_PER_WEEK
        assert config.normalization_ceiling == 100.0

    @pytest.mark.parametrize(
        "field, value",
        [
            ("premium", 0.9),
            ("grid_steps", 0),
            ("tolerance", 0.0),
            ("max_iterations", 0),
            ("period_hours", 1),
            ("normalization_ceiling", -1.0),
        ],
    )
    def test_rejects_out_of_range(self, field, value):
        with pytest.raises(ValidationError):
            CommitmentConfig(**{field: value})

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            CommitmentConfig(premium=0.5)

    def test_frozen(self):
        config = CommitmentConfig()
        with pytest.raises(ValidationError):
            config.premium = 3.0

    def test_model_copy_update(self):
        config = CommitmentConfig(grid_steps=25)
        updated = config.model_copy(update={"premium": 3.0})

        assert updated.premium == 3.0
        assert updated.grid_steps == 25
        assert config.premium == 2.1
