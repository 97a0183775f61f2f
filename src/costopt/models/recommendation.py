"""Recommendation and approval records."""

from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Optional
from enum import Enum


class Confidence(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class RecommendedAction(str, Enum):
    """What the runbook would do with a recommendation."""
    NONE = "None"
    RESIZE = "Resize"
    CHANGE_TIER = "ChangeTier"
    SCALE_DOWN = "ScaleDown"
    SCALE_UP = "ScaleUp"
    ENABLE_AUTOSCALE = "EnableAutoScale"
    INCREASE_RU = "IncreaseRU"


class OptimizationRecommendation(BaseModel):
    """Outcome of classifying one utilization sample against the catalog."""
    
    model_config = ConfigDict(frozen=True)
    
    current_configuration: Optional[str] = None
    recommended_configuration: Optional[str] = None
    justification: str
    estimated_monthly_savings: float = 0.0
    confidence: Confidence
    should_optimize: bool = False
    action: RecommendedAction = RecommendedAction.NONE
    resource_name: Optional[str] = None


class ApprovalOutcome(str, Enum):
    AUTO_APPROVED = "AutoApproved"
    FORCE_APPROVED = "ForceApproved"
    PENDING_APPROVAL = "PendingApproval"
    EXCEEDS_CEILING = "ExceedsCeiling"


class ApprovalDecision(BaseModel):
    """Result of gating a recommendation's savings against the two ceilings."""
    
    model_config = ConfigDict(frozen=True)
    
    estimated_savings: float
    outcome: ApprovalOutcome
    auto_approval_ceiling: float
    manual_approval_ceiling: float
    forced: bool = False
    
    @property
    def approved(self) -> bool:
        return self.outcome in (ApprovalOutcome.AUTO_APPROVED, ApprovalOutcome.FORCE_APPROVED)
    
    @property
    def reason(self) -> str:
        if self.outcome == ApprovalOutcome.AUTO_APPROVED:
            return f"savings ${self.estimated_savings:.2f} below auto-approval ceiling ${self.auto_approval_ceiling:.2f}"
        if self.outcome == ApprovalOutcome.FORCE_APPROVED:
            return f"savings ${self.estimated_savings:.2f} approved by force flag"
        if self.outcome == ApprovalOutcome.PENDING_APPROVAL:
            return f"savings ${self.estimated_savings:.2f} requires manual approval (use --force to override)"
        return (f"savings ${self.estimated_savings:.2f} at or above ${self.manual_approval_ceiling:.2f}, "
                f"must be applied manually")


class TieringPlan(BaseModel):
    """Per-blob tier changes proposed for one storage account."""
    
    account_name: str
    blobs_scanned: int = 0
    recommendations: List[OptimizationRecommendation] = Field(default_factory=list)
    
    @property
    def total_savings(self) -> float:
        return round(sum(r.estimated_monthly_savings for r in self.recommendations), 2)
    
    @property
    def transitions(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for rec in self.recommendations:
            key = f"{rec.current_configuration}->{rec.recommended_configuration}"
            counts[key] = counts.get(key, 0) + 1
        return counts
    
    def describe_target(self) -> Optional[str]:
        """Compact target label for summary lines, e.g. 'Cool:12,Archive:3'."""
        if not self.recommendations:
            return None
        by_target: Dict[str, int] = {}
        for rec in self.recommendations:
            by_target[rec.recommended_configuration] = by_target.get(rec.recommended_configuration, 0) + 1
        return ",".join(f"{tier}:{count}" for tier, count in sorted(by_target.items()))
