"""Data loading for VM demand records."""

from .loaders import VMDemandLoader, aggregate, normalize

__all__ = ["VMDemandLoader", "aggregate", "normalize"]
