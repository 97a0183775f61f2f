"""Applies database scaling recommendations."""

from typing import Any, Dict
import structlog

from costopt.config.catalog import PricingCatalog
from costopt.models.recommendation import OptimizationRecommendation, RecommendedAction
from costopt.models.results import MutationOutcome

logger = structlog.get_logger(__name__)


class DatabaseScaler:
    """Dispatches on the recommended action.

    Only ScaleDown is applied through the SQL API. ScaleUp, EnableAutoScale and
    IncreaseRU are acknowledged and left for an operator.
    """
    
    def __init__(self, database_client, catalog: PricingCatalog):
        self.database = database_client
        self.catalog = catalog
    
    async def apply(self, database: Dict[str, Any], recommendation: OptimizationRecommendation,
                    dry_run: bool = False) -> MutationOutcome:
        name = database['name']
        action = recommendation.action
        target = recommendation.recommended_configuration
        log = logger.bind(resource=name, action=action.value, target=target)
        
        if action != RecommendedAction.SCALE_DOWN:
            log.info("Recommendation acknowledged, manual action required")
            return MutationOutcome(
                applied=False,
                message=f"{action.value} for {name} acknowledged; apply manually",
            )
        
        if dry_run:
            log.info("DRY RUN: would scale database")
            return MutationOutcome(
                applied=False,
                simulated=True,
                message=f"Would scale {name} from {recommendation.current_configuration} to {target}",
            )
        
        tier = self.catalog.sql_tier(target)
        await self.database.set_service_objective(
            database['resource_group'],
            database['server'],
            name,
            target,
            edition=tier.edition if tier else database.get('edition'),
        )
        log.info("Database scaled")
        return MutationOutcome(
            applied=True,
            message=f"Scaled {name} from {recommendation.current_configuration} to {target}",
            succeeded=1,
            final_state=target,
        )
