"""Best-effort access-tier changes across a storage account's blobs."""

from typing import Any, Dict
import structlog

from costopt.core.exceptions import MutationException
from costopt.models.recommendation import TieringPlan
from costopt.models.results import MutationOutcome

logger = structlog.get_logger(__name__)


class BlobTierChanger:
    """Sets the tier of each planned blob; one blob failing never stops the batch."""
    
    def __init__(self, storage_client):
        self.storage = storage_client
    
    async def apply(self, account: Dict[str, Any], plan: TieringPlan, dry_run: bool = False) -> MutationOutcome:
        log = logger.bind(resource=account['name'])
        attempted = len(plan.recommendations)
        
        if dry_run:
            log.info("DRY RUN: would change blob tiers", blobs=attempted, transitions=plan.transitions)
            return MutationOutcome(
                applied=False,
                simulated=True,
                message=f"Would change tier of {attempted} blobs ({plan.describe_target()})",
            )
        
        succeeded = 0
        failed = 0
        realized = 0.0
        for rec in plan.recommendations:
            container, _, blob_name = rec.resource_name.partition('/')
            try:
                await self.storage.set_blob_tier(account, container, blob_name, rec.recommended_configuration)
                succeeded += 1
                realized += rec.estimated_monthly_savings
                log.debug("Blob tier changed", blob=rec.resource_name, tier=rec.recommended_configuration)
            except MutationException as e:
                failed += 1
                log.warning("Blob tier change failed", blob=rec.resource_name, error=str(e))
        
        log.info("Blob tiering completed", attempted=attempted, succeeded=succeeded, failed=failed)
        return MutationOutcome(
            applied=succeeded > 0,
            message=f"Changed tier of {succeeded}/{attempted} blobs, {failed} failed",
            succeeded=succeeded,
            failed=failed,
            realized_savings=round(realized, 2),
        )
