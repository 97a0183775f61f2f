# src/costopt/analytics/__init__.py
"""Decision logic shared by the runbooks."""

from .metrics_aggregator import MetricsAggregator, average, maximum, total
from .vm_rightsizing import VmRightsizingEngine
from .storage_tiering import StorageTieringEngine
from .database_scaling import DatabaseScalingEngine
from .approval import ApprovalGate, approve, evaluate_approval

__all__ = [
    "MetricsAggregator",
    "average",
    "maximum",
    "total",
    "VmRightsizingEngine",
    "StorageTieringEngine",
    "DatabaseScalingEngine",
    "ApprovalGate",
    "approve",
    "evaluate_approval",
]
