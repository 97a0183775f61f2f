"""Right-sizes underutilized virtual machines."""

from typing import Any, Dict, List, Optional

from costopt.actions.vm_resizer import VmResizer
from costopt.analytics.approval import ApprovalGate
from costopt.analytics.metrics_aggregator import MetricsAggregator
from costopt.analytics.vm_rightsizing import VmRightsizingEngine
from costopt.config.catalog import PricingCatalog
from costopt.models.results import ExecutionResult, ResourceKind
from .base import BaseRunbook


class VmSizeRunbook(BaseRunbook):
    
    name = "Optimize-VMSize"
    
    def __init__(self, clients: Dict[str, Any], settings, catalog: PricingCatalog, resource_group: str,
                 vm_name: Optional[str] = None, target_size: Optional[str] = None,
                 force: bool = False, dry_run: bool = False):
        super().__init__(ApprovalGate.from_settings(settings.approval), resource_group, force, dry_run)
        self.compute = clients['compute']
        self.vm_name = vm_name
        self.target_size = target_size
        self.aggregator = MetricsAggregator(clients['monitor'], settings.runbook.lookback_days)
        self.engine = VmRightsizingEngine.from_settings(catalog, settings)
        self.resizer = VmResizer(
            self.compute,
            poll_interval_seconds=settings.runbook.poll_interval_seconds,
            max_poll_attempts=settings.runbook.max_poll_attempts,
        )
    
    def resource_kind(self, target: Dict[str, Any]) -> ResourceKind:
        return ResourceKind.VIRTUAL_MACHINE
    
    async def list_targets(self) -> List[Dict[str, Any]]:
        return await self.compute.list_virtual_machines(self.resource_group, self.vm_name)
    
    async def process(self, vm: Dict[str, Any]) -> ExecutionResult:
        current_size = vm['vm_size']
        if self.target_size:
            recommendation = self.engine.explicit(current_size, self.target_size)
        else:
            sample = await self.aggregator.collect_vm(vm['id'])
            recommendation = self.engine.recommend(current_size, sample)
            self.logger.info(
                "VM analyzed",
                resource=vm['name'],
                avg_cpu=round(sample.avg_cpu_percent, 2),
                data_points=sample.data_points,
                confidence=recommendation.confidence.value,
            )
        
        return await self.gate_and_apply(
            vm, recommendation,
            lambda: self.resizer.resize(vm, recommendation.recommended_configuration, self.dry_run),
        )
