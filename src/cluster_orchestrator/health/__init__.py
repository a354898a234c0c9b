"""Readiness evaluation for application snapshots."""

from .aggregator import HealthAggregator

__all__ = ["HealthAggregator"]
