"""Notebook helpers."""

from .notebook_logging import configure_notebook_logging

__all__ = ["configure_notebook_logging"]
