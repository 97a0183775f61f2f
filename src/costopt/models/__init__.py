from .utilization import *
from .recommendation import *
from .results import *

__all__ = [
    "UtilizationSample",
    "BlobAccessInfo",
    "Confidence",
    "RecommendedAction",
    "OptimizationRecommendation",
    "ApprovalOutcome",
    "ApprovalDecision",
    "TieringPlan",
    "ResourceKind",
    "ExecutionAction",
    "ApprovalRequiredReason",
    "NoActionResult",
    "ResizedResult",
    "SimulatedResult",
    "ApprovalRequiredResult",
    "ErrorResult",
    "ExecutionResult",
    "RunSummary",
    "MutationOutcome",
]
