"""Per-resource execution results and the run-level summary."""

from pydantic import BaseModel, ConfigDict, Field
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from datetime import datetime, timezone
from enum import Enum


class ResourceKind(str, Enum):
    VIRTUAL_MACHINE = "VirtualMachine"
    STORAGE_ACCOUNT = "StorageAccount"
    SQL_DATABASE = "SqlDatabase"
    COSMOS_DB = "CosmosDB"


class ExecutionAction(str, Enum):
    NONE = "None"
    RESIZED = "Resized"
    SIMULATED = "Simulated"
    APPROVAL_REQUIRED = "ApprovalRequired"
    ERROR = "Error"


class ApprovalRequiredReason(str, Enum):
    PENDING_APPROVAL = "PendingApproval"
    EXCEEDS_CEILING = "ExceedsCeiling"
    MANUAL_ACTION = "ManualAction"


OPTIMIZATION_TYPES = {
    ResourceKind.VIRTUAL_MACHINE: "VMRightSizing",
    ResourceKind.STORAGE_ACCOUNT: "StorageTiering",
    ResourceKind.SQL_DATABASE: "DatabaseScaling",
    ResourceKind.COSMOS_DB: "DatabaseScaling",
}


class _ResultBase(BaseModel):
    model_config = ConfigDict(frozen=True)
    
    resource_name: str
    resource_kind: ResourceKind
    resource_id: Optional[str] = None
    success: bool
    message: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    
    @property
    def estimated_savings(self) -> float:
        return 0.0
    
    def summary_fields(self) -> Dict[str, Any]:
        """Fields for the one-line per-resource log record."""
        return {
            "resource": self.resource_name,
            "current": getattr(self, "current_configuration", None),
            "target": getattr(self, "target_configuration", None),
            "action": self.action.value,
            "success": self.success,
        }
    
    def to_event(self) -> Dict[str, Any]:
        """Render as a CostOptimizationEvents_CL record."""
        details = self.model_dump(
            mode="json",
            exclude={"resource_name", "resource_kind", "resource_id", "timestamp", "action", "success"}
        )
        return {
            "TimeGenerated": self.timestamp.isoformat(),
            "ResourceId": self.resource_id or self.resource_name,
            "ResourceType": self.resource_kind.value,
            "OptimizationType": OPTIMIZATION_TYPES[self.resource_kind],
            "Action": self.action.value,
            "EstimatedSavings": round(self.estimated_savings, 2),
            "Status": "Succeeded" if self.success else "Failed",
            "Details": details,
        }


class NoActionResult(_ResultBase):
    action: Literal[ExecutionAction.NONE] = ExecutionAction.NONE
    current_configuration: Optional[str] = None


class _ChangeResult(_ResultBase):
    current_configuration: Optional[str] = None
    target_configuration: Optional[str] = None
    savings: float = 0.0
    
    @property
    def estimated_savings(self) -> float:
        return self.savings


class ResizedResult(_ChangeResult):
    """A live change was applied. Blob batches report their per-item counts."""
    
    action: Literal[ExecutionAction.RESIZED] = ExecutionAction.RESIZED
    succeeded: int = Field(1, ge=0)
    failed: int = Field(0, ge=0)


class SimulatedResult(_ChangeResult):
    action: Literal[ExecutionAction.SIMULATED] = ExecutionAction.SIMULATED


class ApprovalRequiredResult(_ChangeResult):
    action: Literal[ExecutionAction.APPROVAL_REQUIRED] = ExecutionAction.APPROVAL_REQUIRED
    reason: ApprovalRequiredReason


class ErrorResult(_ResultBase):
    action: Literal[ExecutionAction.ERROR] = ExecutionAction.ERROR
    success: bool = False
    error_type: str


ExecutionResult = Annotated[
    Union[NoActionResult, ResizedResult, SimulatedResult, ApprovalRequiredResult, ErrorResult],
    Field(discriminator="action"),
]


class RunSummary(BaseModel):
    """Aggregates over every result of one runbook invocation."""
    
    runbook: str
    started_at: datetime
    finished_at: datetime
    dry_run: bool
    total_resources: int = 0
    action_counts: Dict[str, int] = Field(default_factory=dict)
    succeeded: int = 0
    failed: int = 0
    total_estimated_savings: float = 0.0
    applied_savings: float = 0.0
    
    @property
    def duration_seconds(self) -> float:
        return (self.finished_at - self.started_at).total_seconds()
    
    @classmethod
    def from_results(cls, runbook: str, results: List[ExecutionResult], started_at: datetime,
                     finished_at: datetime, dry_run: bool) -> "RunSummary":
        counts = {action.value: 0 for action in ExecutionAction}
        for result in results:
            counts[result.action.value] += 1
        
        return cls(
            runbook=runbook,
            started_at=started_at,
            finished_at=finished_at,
            dry_run=dry_run,
            total_resources=len(results),
            action_counts=counts,
            succeeded=sum(1 for r in results if r.success),
            failed=sum(1 for r in results if not r.success),
            total_estimated_savings=round(sum(r.estimated_savings for r in results), 2),
            applied_savings=round(
                sum(r.estimated_savings for r in results if r.action == ExecutionAction.RESIZED), 2
            ),
        )


class MutationOutcome(BaseModel):
    """What a mutator did with an approved recommendation."""
    
    model_config = ConfigDict(frozen=True)
    
    applied: bool
    simulated: bool = False
    message: str
    succeeded: int = Field(0, ge=0)
    failed: int = Field(0, ge=0)
    realized_savings: Optional[float] = Field(None, description="Savings of the items actually changed")
    final_state: Optional[str] = None
