"""Tests for the notebook loguru sink."""

import io
import re
import sys

import pytest
from loguru import logger

from commitlab.config import CommitmentConfig
from commitlab.modeling.laddering import partition
from commitlab.modeling.search import find_optimal_level
from commitlab.utils import configure_notebook_logging


@pytest.fixture(autouse=True)
def restore_logger():
    yield
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def stream():
    return io.StringIO()


class TestConfigureNotebookLogging:
    def test_returns_handler_id(self, stream):
        handler_id = configure_notebook_logging(sink=stream)
        assert isinstance(handler_id, int)
        logger.remove(handler_id)

    def test_info_shows_results_not_candidates(self, stream, make_series):
        configure_notebook_logging("INFO", sink=stream)
        find_optimal_level(make_series([1.0, 2.0, 3.0]), config=CommitmentConfig(grid_steps=3))

        output = stream.getvalue()
        assert "Optimal commitment (grid" in output
        assert "grid search:" not in output

    def test_debug_tags_submodule(self, stream, make_series):
        configure_notebook_logging("DEBUG", sink=stream)
        find_optimal_level(make_series([1.0, 2.0, 3.0]), config=CommitmentConfig(grid_steps=3))

        lines = stream.getvalue().splitlines()
        search_lines = [line for line in lines if "commitlab.modeling.search" in line]
        assert any(line.startswith("DEBUG") and "grid search:" in line for line in search_lines)

    def test_only_commitlab_records(self, stream):
        """Records from outside the package are dropped."""
        configure_notebook_logging("DEBUG", sink=stream)
        logger.info("message from a notebook cell")
        assert stream.getvalue() == ""

    def test_warning_level(self, stream, make_series):
        configure_notebook_logging("WARNING", sink=stream)
        partition(make_series([1.0] * 9), period_hours=4)
        find_optimal_level(make_series([1.0, 2.0]))

        output = stream.getvalue()
        assert "Merging trailing 1-hour remainder" in output
        assert "Optimal commitment" not in output

    def test_show_time(self, stream, make_series):
        configure_notebook_logging("INFO", show_time=True, sink=stream)
        find_optimal_level(make_series([1.0, 2.0]))

        assert re.match(r"\d{2}:\d{2}:\d{2} \| INFO", stream.getvalue())
