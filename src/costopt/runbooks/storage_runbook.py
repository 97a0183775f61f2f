"""Moves idle blobs to cheaper access tiers."""

from typing import Any, Dict, List, Optional

from costopt.actions.blob_tiering import BlobTierChanger
from costopt.analytics.approval import ApprovalGate
from costopt.analytics.metrics_aggregator import MetricsAggregator
from costopt.analytics.storage_tiering import StorageTieringEngine
from costopt.config.catalog import PricingCatalog
from costopt.models.recommendation import (
    Confidence, OptimizationRecommendation, RecommendedAction, TieringPlan
)
from costopt.models.results import ExecutionResult, ResourceKind
from .base import BaseRunbook


class StorageTieringRunbook(BaseRunbook):
    """One result per storage account; the approval gate sees the account's total savings."""
    
    name = "Optimize-Storage"
    
    def __init__(self, clients: Dict[str, Any], settings, catalog: PricingCatalog, resource_group: str,
                 account_name: Optional[str] = None, target_tier: Optional[str] = None,
                 force: bool = False, dry_run: bool = False):
        super().__init__(ApprovalGate.from_settings(settings.approval), resource_group, force, dry_run)
        self.storage = clients['storage']
        self.account_name = account_name
        self.target_tier = target_tier
        self.aggregator = MetricsAggregator(clients['monitor'], settings.runbook.lookback_days)
        self.engine = StorageTieringEngine.from_settings(catalog, settings)
        self.changer = BlobTierChanger(self.storage)
    
    def resource_kind(self, target: Dict[str, Any]) -> ResourceKind:
        return ResourceKind.STORAGE_ACCOUNT
    
    async def list_targets(self) -> List[Dict[str, Any]]:
        return await self.storage.list_storage_accounts(self.resource_group, self.account_name)
    
    @staticmethod
    def summarize(account: Dict[str, Any], plan: TieringPlan) -> OptimizationRecommendation:
        """Fold a blob plan into the account-level recommendation."""
        if not plan.recommendations:
            return OptimizationRecommendation(
                current_configuration=account.get('access_tier'),
                justification=f"No blob tier changes among {plan.blobs_scanned} blobs",
                confidence=Confidence.HIGH,
                resource_name=account['name'],
            )
        
        all_tracked = all(rec.confidence == Confidence.HIGH for rec in plan.recommendations)
        return OptimizationRecommendation(
            current_configuration=account.get('access_tier'),
            recommended_configuration=plan.describe_target(),
            justification=(f"{len(plan.recommendations)} of {plan.blobs_scanned} blobs idle: "
                           + ", ".join(f"{k} x{v}" for k, v in sorted(plan.transitions.items()))),
            estimated_monthly_savings=plan.total_savings,
            confidence=Confidence.HIGH if all_tracked else Confidence.MEDIUM,
            should_optimize=True,
            action=RecommendedAction.CHANGE_TIER,
            resource_name=account['name'],
        )
    
    async def process(self, account: Dict[str, Any]) -> ExecutionResult:
        usage = await self.aggregator.collect_storage_account(account['id'])
        self.logger.info(
            "Storage account usage",
            resource=account['name'],
            transactions=usage.total_transactions,
            egress_bytes=usage.total_egress_bytes,
            used_capacity_bytes=usage.avg_used_capacity_bytes,
        )
        
        blobs = await self.storage.list_blobs(account)
        plan = self.engine.plan_account(
            account['name'], blobs,
            default_tier=account.get('access_tier'),
            target_tier=self.target_tier,
        )
        recommendation = self.summarize(account, plan)
        
        return await self.gate_and_apply(
            account, recommendation,
            lambda: self.changer.apply(account, plan, self.dry_run),
        )
