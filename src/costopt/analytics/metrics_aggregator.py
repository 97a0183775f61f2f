"""Reduces Azure Monitor series to UtilizationSample records."""

from typing import Dict, List, Sequence
import structlog

from costopt.core.exceptions import MetricsException
from costopt.models.utilization import UtilizationSample

logger = structlog.get_logger(__name__)


def average(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def maximum(values: Sequence[float]) -> float:
    return max(values) if values else 0.0


def total(values: Sequence[float]) -> float:
    return float(sum(values)) if values else 0.0


class MetricsAggregator:
    """Collects the named series each resource kind needs and reduces them.

    Compute metrics propagate failures so the resource is recorded as an
    error. Storage and database metrics degrade a failing series to zero.
    """
    
    def __init__(self, monitor_client, lookback_days: int = 7):
        self.monitor = monitor_client
        self.lookback_days = lookback_days
        self.logger = logger.bind(analytics="metrics")
    
    async def _series(self, resource_id: str, metric_name: str,
                      aggregations: Sequence[str], degrade: bool) -> Dict[str, List[float]]:
        try:
            return await self.monitor.query_metric(
                resource_id, metric_name, self.lookback_days, aggregations=aggregations
            )
        except MetricsException as e:
            if not degrade:
                raise
            self.logger.warning(f"Metric {metric_name} unavailable, using zero", resource=resource_id, error=str(e))
            return {a: [] for a in aggregations}
    
    async def collect_vm(self, resource_id: str) -> UtilizationSample:
        cpu = await self._series(resource_id, "Percentage CPU", ("Average", "Maximum"), degrade=False)
        memory = await self._series(resource_id, "Available Memory Bytes", ("Average",), degrade=False)
        disk_reads = await self._series(resource_id, "Disk Read Operations/Sec", ("Average",), degrade=False)
        disk_writes = await self._series(resource_id, "Disk Write Operations/Sec", ("Average",), degrade=False)
        
        return UtilizationSample(
            resource_id=resource_id,
            window_days=self.lookback_days,
            data_points=len(cpu["Average"]),
            avg_cpu_percent=average(cpu["Average"]),
            max_cpu_percent=maximum(cpu["Maximum"]),
            avg_available_memory_bytes=average(memory["Average"]),
            avg_disk_ops_per_sec=average(disk_reads["Average"]) + average(disk_writes["Average"]),
        )
    
    async def collect_sql_database(self, resource_id: str) -> UtilizationSample:
        dtu = await self._series(resource_id, "dtu_consumption_percent", ("Average", "Maximum"), degrade=True)
        connections = await self._series(resource_id, "connection_successful", ("Total",), degrade=True)
        
        return UtilizationSample(
            resource_id=resource_id,
            window_days=self.lookback_days,
            data_points=len(dtu["Average"]),
            avg_dtu_percent=average(dtu["Average"]),
            max_dtu_percent=maximum(dtu["Maximum"]),
            daily_connections=total(connections["Total"]) / self.lookback_days,
        )
    
    async def collect_cosmos_account(self, resource_id: str) -> UtilizationSample:
        ru = await self._series(resource_id, "NormalizedRUConsumption", ("Average", "Maximum"), degrade=True)
        throughput = await self._series(resource_id, "ProvisionedThroughput", ("Maximum",), degrade=True)
        requests = await self._series(resource_id, "TotalRequests", ("Total",), degrade=True)
        
        return UtilizationSample(
            resource_id=resource_id,
            window_days=self.lookback_days,
            data_points=len(ru["Average"]),
            avg_ru_percent=average(ru["Average"]),
            max_ru_percent=maximum(ru["Maximum"]),
            provisioned_throughput=maximum(throughput["Maximum"]),
            total_transactions=total(requests["Total"]),
        )
    
    async def collect_storage_account(self, resource_id: str) -> UtilizationSample:
        transactions = await self._series(resource_id, "Transactions", ("Total",), degrade=True)
        egress = await self._series(resource_id, "Egress", ("Total",), degrade=True)
        capacity = await self._series(resource_id, "UsedCapacity", ("Average",), degrade=True)
        
        return UtilizationSample(
            resource_id=resource_id,
            window_days=self.lookback_days,
            data_points=len(transactions["Total"]),
            total_transactions=total(transactions["Total"]),
            total_egress_bytes=total(egress["Total"]),
            avg_used_capacity_bytes=average(capacity["Average"]),
        )
