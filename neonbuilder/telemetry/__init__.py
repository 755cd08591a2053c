"""Telemetry and observability helpers.

This package tracks estimated generation costs and run events.
"""

from .cost_tracker import CostSummary, CostTracker, PricingTable
from .logger import RunLogger

__all__ = ["CostSummary", "CostTracker", "PricingTable", "RunLogger"]
