"""
Loguru sink for analysis notebooks.

commitlab logs search results, ladder comparisons and sweep progress through
loguru. In a notebook those lines are easier to follow without loguru's default
file/line prefix and without chatter from other libraries, so the sink added
here only accepts commitlab records and tags each one with its submodule.
"""

import sys
from typing import TextIO

from loguru import logger

PACKAGE = "commitlab"

_FORMAT = "<level>{level: <8}</level> | <cyan>{name: <28}</cyan> | {message}"
_TIMED_FORMAT = "<green>{time:HH:mm:ss}</green> | " + _FORMAT


def configure_notebook_logging(
    level: str = "INFO", show_time: bool = False, sink: TextIO | None = None
) -> int:
    """
    Replace loguru's sinks with one that shows commitlab records only.

    Args:
        level: Minimum level (DEBUG shows every grid/scipy search, WARNING only
            unconverged searches and merged ladder remainders). Default: INFO
        show_time: Prefix each line with HH:mm:ss. Default: False
        sink: Stream to write to (default: ``sys.stderr`` at call time)

    Returns:
        Handler id of the new sink, for ``logger.remove``

    Example:
        ```python
        from commitlab.utils import configure_notebook_logging

        configure_notebook_logging("INFO")
        # INFO     | commitlab.modeling.search    | Optimal commitment (grid, premium=2.1): ...
        ```
    """
    logger.remove()
    logger.enable(PACKAGE)

    stream = sys.stderr if sink is None else sink
    return logger.add(
        stream,
        format=_TIMED_FORMAT if show_time else _FORMAT,
        level=level,
        filter=PACKAGE,
        colorize=False if sink is not None else None,
    )
