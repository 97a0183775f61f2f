"""Blob access-tier recommendations."""

from typing import Iterable, Optional
from datetime import datetime, timezone
import structlog

from costopt.config.catalog import PricingCatalog
from costopt.models.recommendation import (
    Confidence, OptimizationRecommendation, RecommendedAction, TieringPlan
)
from costopt.models.utilization import BlobAccessInfo

logger = structlog.get_logger(__name__)

HOT = "Hot"
COOL = "Cool"
ARCHIVE = "Archive"


class StorageTieringEngine:
    """Moves idle blobs down the Hot → Cool → Archive ladder by days since last access."""
    
    def __init__(self, catalog: PricingCatalog, cool_after_days: int = 30,
                 archive_after_days: int = 90, hot_archive_after_days: int = 180):
        self.catalog = catalog
        self.cool_after_days = cool_after_days
        self.archive_after_days = archive_after_days
        self.hot_archive_after_days = hot_archive_after_days
    
    @classmethod
    def from_settings(cls, catalog: PricingCatalog, settings) -> "StorageTieringEngine":
        return cls(
            catalog,
            cool_after_days=settings.thresholds.storage_access_threshold,
            archive_after_days=settings.thresholds.storage_archive_threshold,
            hot_archive_after_days=settings.thresholds.storage_hot_archive_threshold,
        )
    
    def _target_tier(self, current_tier: Optional[str], days: int) -> Optional[str]:
        if current_tier == HOT:
            if days >= self.hot_archive_after_days:
                return ARCHIVE
            if days >= self.cool_after_days:
                return COOL
        elif current_tier == COOL and days >= self.archive_after_days:
            return ARCHIVE
        return None
    
    def blob_savings(self, blob: BlobAccessInfo, current_tier: str, target_tier: str) -> float:
        price, fraction = self.catalog.tier_transition(current_tier, target_tier)
        return blob.size_gb * price * fraction
    
    def recommend_blob(self, blob: BlobAccessInfo, default_tier: Optional[str] = HOT,
                       now: Optional[datetime] = None) -> OptimizationRecommendation:
        current_tier = blob.access_tier or default_tier
        days = blob.days_since_access(now)
        
        if days is None:
            return OptimizationRecommendation(
                current_configuration=current_tier,
                justification="No access or modification time recorded",
                confidence=Confidence.LOW,
                resource_name=blob.path,
            )
        
        confidence = Confidence.HIGH if blob.uses_access_tracking else Confidence.MEDIUM
        target_tier = self._target_tier(current_tier, days)
        
        if target_tier is None:
            return OptimizationRecommendation(
                current_configuration=current_tier,
                justification=f"{current_tier} tier appropriate, last access {days} days ago",
                confidence=confidence,
                resource_name=blob.path,
            )
        
        return OptimizationRecommendation(
            current_configuration=current_tier,
            recommended_configuration=target_tier,
            justification=f"Not accessed for {days} days, move {current_tier} to {target_tier}",
            estimated_monthly_savings=self.blob_savings(blob, current_tier, target_tier),
            confidence=confidence,
            should_optimize=True,
            action=RecommendedAction.CHANGE_TIER,
            resource_name=blob.path,
        )
    
    def explicit_blob(self, blob: BlobAccessInfo, target_tier: str,
                      default_tier: Optional[str] = HOT) -> OptimizationRecommendation:
        """Recommendation for an operator-supplied tier."""
        current_tier = blob.access_tier or default_tier
        if current_tier == target_tier:
            return OptimizationRecommendation(
                current_configuration=current_tier,
                justification=f"Already in {target_tier} tier",
                confidence=Confidence.HIGH,
                resource_name=blob.path,
            )
        
        current_price = self.catalog.storage_tier_prices.get(current_tier, 0.0)
        target_price = self.catalog.storage_tier_prices.get(target_tier, current_price)
        return OptimizationRecommendation(
            current_configuration=current_tier,
            recommended_configuration=target_tier,
            justification=f"Explicit target tier {target_tier} requested",
            estimated_monthly_savings=max(blob.size_gb * (current_price - target_price), 0.0),
            confidence=Confidence.HIGH,
            should_optimize=True,
            action=RecommendedAction.CHANGE_TIER,
            resource_name=blob.path,
        )
    
    def plan_account(self, account_name: str, blobs: Iterable[BlobAccessInfo],
                     default_tier: Optional[str] = HOT, target_tier: Optional[str] = None,
                     now: Optional[datetime] = None) -> TieringPlan:
        """Classify every blob of an account, keeping only actionable changes."""
        now = now or datetime.now(timezone.utc)
        plan = TieringPlan(account_name=account_name)
        
        for blob in blobs:
            plan.blobs_scanned += 1
            if target_tier:
                rec = self.explicit_blob(blob, target_tier, default_tier)
            else:
                rec = self.recommend_blob(blob, default_tier, now)
            if rec.should_optimize:
                plan.recommendations.append(rec)
        
        logger.info(
            f"Tiering plan for {account_name}",
            blobs_scanned=plan.blobs_scanned,
            changes=len(plan.recommendations),
            transitions=plan.transitions,
            savings=plan.total_savings,
        )
        return plan
