"""Data providers package."""

from .metrics import MetricsProvider

__all__ = ["MetricsProvider"]
