"""Scales SQL databases and reviews Cosmos DB throughput."""

from typing import Any, Dict, List, Optional
from enum import Enum

from costopt.actions.database_scaler import DatabaseScaler
from costopt.analytics.approval import ApprovalGate
from costopt.analytics.database_scaling import DatabaseScalingEngine
from costopt.analytics.metrics_aggregator import MetricsAggregator
from costopt.config.catalog import PricingCatalog
from costopt.core.exceptions import ResourceNotFoundException
from costopt.models.results import ExecutionResult, ResourceKind
from .base import BaseRunbook


class DatabaseType(str, Enum):
    ALL = "All"
    SQL_DATABASE = "SqlDatabase"
    COSMOS_DB = "CosmosDB"


class DatabaseScalingRunbook(BaseRunbook):
    
    name = "Optimize-Database"
    
    def __init__(self, clients: Dict[str, Any], settings, catalog: PricingCatalog, resource_group: str,
                 database_type: DatabaseType = DatabaseType.ALL, database_name: Optional[str] = None,
                 target_sku: Optional[str] = None, force: bool = False, dry_run: bool = False):
        super().__init__(ApprovalGate.from_settings(settings.approval), resource_group, force, dry_run)
        self.database = clients['database']
        self.database_type = DatabaseType(database_type)
        self.database_name = database_name
        self.target_sku = target_sku
        self.aggregator = MetricsAggregator(clients['monitor'], settings.runbook.lookback_days)
        self.engine = DatabaseScalingEngine.from_settings(catalog, settings)
        self.scaler = DatabaseScaler(self.database, catalog)
    
    def resource_kind(self, target: Dict[str, Any]) -> ResourceKind:
        return target.get('resource_kind', ResourceKind.SQL_DATABASE)
    
    async def list_targets(self) -> List[Dict[str, Any]]:
        targets = []
        if self.database_type in (DatabaseType.ALL, DatabaseType.SQL_DATABASE):
            for db in await self.database.list_sql_databases(self.resource_group, self.database_name):
                targets.append({**db, 'resource_kind': ResourceKind.SQL_DATABASE})
        if self.database_type in (DatabaseType.ALL, DatabaseType.COSMOS_DB):
            for account in await self.database.list_cosmos_accounts(self.resource_group, self.database_name):
                targets.append({**account, 'resource_kind': ResourceKind.COSMOS_DB})
        
        if self.database_name and not targets:
            raise ResourceNotFoundException(self.database_type.value, self.database_name, self.resource_group)
        return targets
    
    async def process(self, target: Dict[str, Any]) -> ExecutionResult:
        if target['resource_kind'] == ResourceKind.COSMOS_DB:
            return await self._process_cosmos(target)
        return await self._process_sql(target)
    
    async def _process_sql(self, db: Dict[str, Any]) -> ExecutionResult:
        objective = db['service_objective']
        if self.target_sku:
            recommendation = self.engine.explicit_sql(objective, self.target_sku)
        else:
            sample = await self.aggregator.collect_sql_database(db['id'])
            recommendation = self.engine.recommend_sql(objective, sample)
            self.logger.info(
                "Database analyzed",
                resource=db['name'],
                avg_dtu=round(sample.avg_dtu_percent, 2),
                daily_connections=round(sample.daily_connections, 1),
                data_points=sample.data_points,
                confidence=recommendation.confidence.value,
            )
        
        return await self.gate_and_apply(
            db, recommendation,
            lambda: self.scaler.apply(db, recommendation, self.dry_run),
        )
    
    async def _process_cosmos(self, account: Dict[str, Any]) -> ExecutionResult:
        if self.target_sku:
            self.logger.warning("Target SKU ignored for Cosmos DB", resource=account['name'])
        sample = await self.aggregator.collect_cosmos_account(account['id'])
        recommendation = self.engine.recommend_cosmos(sample)
        self.logger.info(
            "Cosmos DB account analyzed",
            resource=account['name'],
            avg_ru=round(sample.avg_ru_percent, 2),
            throughput=sample.provisioned_throughput,
            confidence=recommendation.confidence.value,
        )
        
        return await self.gate_and_apply(
            account, recommendation,
            lambda: self.scaler.apply(account, recommendation, self.dry_run),
        )
