"""Savings-based approval gate."""

import structlog

from costopt.models.recommendation import ApprovalDecision, ApprovalOutcome

logger = structlog.get_logger(__name__)


def evaluate_approval(estimated_savings: float, auto_approval_ceiling: float,
                      manual_approval_ceiling: float, force: bool = False) -> ApprovalDecision:
    """Three-tier step function over monthly savings.

    Below the auto ceiling the change proceeds. Between the ceilings it needs
    the force flag. At or above the manual ceiling automation never acts.
    """
    if estimated_savings < auto_approval_ceiling:
        outcome = ApprovalOutcome.AUTO_APPROVED
    elif estimated_savings < manual_approval_ceiling:
        outcome = ApprovalOutcome.FORCE_APPROVED if force else ApprovalOutcome.PENDING_APPROVAL
    else:
        outcome = ApprovalOutcome.EXCEEDS_CEILING
    
    return ApprovalDecision(
        estimated_savings=estimated_savings,
        outcome=outcome,
        auto_approval_ceiling=auto_approval_ceiling,
        manual_approval_ceiling=manual_approval_ceiling,
        forced=force,
    )


def approve(estimated_savings: float, auto_approval_ceiling: float,
            manual_approval_ceiling: float, force: bool = False) -> bool:
    return evaluate_approval(
        estimated_savings, auto_approval_ceiling, manual_approval_ceiling, force
    ).approved


class ApprovalGate:
    """Approval gate bound to the configured ceilings."""
    
    def __init__(self, auto_approval_ceiling: float = 100.0, manual_approval_ceiling: float = 500.0):
        self.auto_approval_ceiling = auto_approval_ceiling
        self.manual_approval_ceiling = manual_approval_ceiling
    
    @classmethod
    def from_settings(cls, approval_settings) -> "ApprovalGate":
        return cls(
            auto_approval_ceiling=approval_settings.auto_approve_threshold,
            manual_approval_ceiling=approval_settings.require_approval_threshold,
        )
    
    def evaluate(self, estimated_savings: float, force: bool = False) -> ApprovalDecision:
        decision = evaluate_approval(
            estimated_savings, self.auto_approval_ceiling, self.manual_approval_ceiling, force
        )
        logger.debug("Approval evaluated", outcome=decision.outcome.value, savings=estimated_savings)
        return decision
