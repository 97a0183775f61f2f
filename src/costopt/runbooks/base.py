"""Shared runbook skeleton: enumerate, then fold every target into a result."""

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, List
from datetime import datetime, timezone
import structlog

from costopt.analytics.approval import ApprovalGate
from costopt.core.exceptions import AuthenticationException
from costopt.models.recommendation import ApprovalOutcome, OptimizationRecommendation
from costopt.models.results import (
    ApprovalRequiredReason, ApprovalRequiredResult, ErrorResult, ExecutionResult,
    MutationOutcome, NoActionResult, ResizedResult, ResourceKind, RunSummary, SimulatedResult
)
from .reporter import RunReport, RunReporter

logger = structlog.get_logger(__name__)


class BaseRunbook(ABC):
    """Runs metrics → recommendation → approval → mutation for each target.

    Targets are processed strictly one after another. Each one sits inside its
    own failure boundary so an exception becomes an Error result for that
    target and the loop moves on. Only authentication failures abort the run.
    """
    
    name = "runbook"
    
    def __init__(self, approval_gate: ApprovalGate, resource_group: str,
                 force: bool = False, dry_run: bool = False):
        self.approval_gate = approval_gate
        self.resource_group = resource_group
        self.force = force
        self.dry_run = dry_run
        self.reporter = RunReporter(self.name)
        self.logger = logger.bind(runbook=self.name, resource_group=resource_group)
    
    @abstractmethod
    async def list_targets(self) -> List[Dict[str, Any]]:
        """Enumerate the resources in scope."""
        pass
    
    @abstractmethod
    async def process(self, target: Dict[str, Any]) -> ExecutionResult:
        """Produce the result for one resource. May raise."""
        pass
    
    @abstractmethod
    def resource_kind(self, target: Dict[str, Any]) -> ResourceKind:
        pass
    
    async def run(self) -> RunReport:
        started_at = datetime.now(timezone.utc)
        self.logger.info("Runbook started", dry_run=self.dry_run, force=self.force)
        
        targets = await self.list_targets()
        self.logger.info(f"Processing {len(targets)} resources")
        
        results: List[ExecutionResult] = []
        for target in targets:
            result = await self._process_safely(target)
            self.reporter.resource_processed(result)
            results.append(result)
        
        summary = RunSummary.from_results(
            self.name, results, started_at, datetime.now(timezone.utc), self.dry_run
        )
        self.reporter.run_completed(summary)
        return RunReport(summary=summary, results=results)
    
    async def _process_safely(self, target: Dict[str, Any]) -> ExecutionResult:
        try:
            return await self.process(target)
        except AuthenticationException:
            raise
        except Exception as e:
            self.logger.error("Resource processing failed", resource=target.get('name'), error=str(e),
                              error_type=type(e).__name__)
            return ErrorResult(
                resource_name=target.get('name', 'unknown'),
                resource_kind=self.resource_kind(target),
                resource_id=target.get('id'),
                message=str(e),
                error_type=type(e).__name__,
            )
    
    async def gate_and_apply(self, target: Dict[str, Any], recommendation: OptimizationRecommendation,
                             mutate: Callable[[], Awaitable[MutationOutcome]]) -> ExecutionResult:
        """Turn a recommendation into a result, consulting the approval gate before mutating."""
        common = dict(
            resource_name=target['name'],
            resource_kind=self.resource_kind(target),
            resource_id=target.get('id'),
        )
        
        if not recommendation.should_optimize:
            return NoActionResult(
                **common,
                success=True,
                message=recommendation.justification,
                current_configuration=recommendation.current_configuration,
            )
        
        change = dict(
            current_configuration=recommendation.current_configuration,
            target_configuration=recommendation.recommended_configuration,
            savings=recommendation.estimated_monthly_savings,
        )
        
        decision = self.approval_gate.evaluate(recommendation.estimated_monthly_savings, self.force)
        if not decision.approved:
            reason = (ApprovalRequiredReason.PENDING_APPROVAL
                      if decision.outcome == ApprovalOutcome.PENDING_APPROVAL
                      else ApprovalRequiredReason.EXCEEDS_CEILING)
            return ApprovalRequiredResult(
                **common, **change,
                success=True,
                message=f"{recommendation.justification}; {decision.reason}",
                reason=reason,
            )
        
        outcome = await mutate()
        if outcome.simulated:
            return SimulatedResult(**common, **change, success=True, message=outcome.message)
        if outcome.applied or outcome.failed:
            if outcome.realized_savings is not None:
                change["savings"] = outcome.realized_savings
            return ResizedResult(
                **common, **change,
                success=outcome.failed == 0,
                message=outcome.message,
                succeeded=outcome.succeeded,
                failed=outcome.failed,
            )
        return ApprovalRequiredResult(
            **common, **change,
            success=True,
            message=outcome.message,
            reason=ApprovalRequiredReason.MANUAL_ACTION,
        )
