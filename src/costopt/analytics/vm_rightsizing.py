"""VM right-sizing recommendations."""

from costopt.config.catalog import PricingCatalog
from costopt.models.recommendation import Confidence, OptimizationRecommendation, RecommendedAction
from costopt.models.utilization import UtilizationSample


class VmRightsizingEngine:
    """Classifies average CPU against two thresholds and looks up a downgrade size."""
    
    def __init__(self, catalog: PricingCatalog, cpu_threshold: float = 10.0,
                 monitor_threshold: float = 20.0, min_data_points: int = 24):
        self.catalog = catalog
        self.cpu_threshold = cpu_threshold
        self.monitor_threshold = monitor_threshold
        self.min_data_points = min_data_points
    
    @classmethod
    def from_settings(cls, catalog: PricingCatalog, settings) -> "VmRightsizingEngine":
        return cls(
            catalog,
            cpu_threshold=settings.thresholds.vm_cpu_threshold,
            monitor_threshold=settings.thresholds.vm_cpu_monitor_threshold,
            min_data_points=settings.runbook.min_data_points,
        )
    
    def monthly_savings(self, current_size: str, target_size: str) -> float:
        current_price = self.catalog.vm_price(current_size)
        target_price = self.catalog.vm_price(target_size)
        if current_price is None or target_price is None:
            return 0.0
        return round(current_price - target_price, 2)
    
    def recommend(self, current_size: str, sample: UtilizationSample) -> OptimizationRecommendation:
        avg_cpu = sample.avg_cpu_percent
        
        if avg_cpu < self.cpu_threshold and sample.data_points > self.min_data_points:
            target = self.catalog.vm_size_mapping.get(current_size)
            if target:
                return OptimizationRecommendation(
                    current_configuration=current_size,
                    recommended_configuration=target,
                    justification=(f"Underutilized: average CPU {avg_cpu:.1f}% below {self.cpu_threshold:.0f}% "
                                   f"over {sample.data_points} hourly points"),
                    estimated_monthly_savings=self.monthly_savings(current_size, target),
                    confidence=Confidence.HIGH,
                    should_optimize=True,
                    action=RecommendedAction.RESIZE,
                )
            return OptimizationRecommendation(
                current_configuration=current_size,
                justification=f"Underutilized (average CPU {avg_cpu:.1f}%) but no mapping available for {current_size}",
                confidence=Confidence.MEDIUM,
            )
        
        if avg_cpu < self.monitor_threshold:
            return OptimizationRecommendation(
                current_configuration=current_size,
                justification=(f"Low utilization: average CPU {avg_cpu:.1f}% with {sample.data_points} points, "
                               f"monitor longer before resizing"),
                confidence=Confidence.LOW,
            )
        
        return OptimizationRecommendation(
            current_configuration=current_size,
            justification=f"Utilization within range: average CPU {avg_cpu:.1f}%",
            confidence=Confidence.HIGH,
        )
    
    def explicit(self, current_size: str, target_size: str) -> OptimizationRecommendation:
        """Recommendation for an operator-supplied target size."""
        if current_size == target_size:
            return OptimizationRecommendation(
                current_configuration=current_size,
                justification=f"Already running {target_size}",
                confidence=Confidence.HIGH,
            )
        return OptimizationRecommendation(
            current_configuration=current_size,
            recommended_configuration=target_size,
            justification=f"Explicit target size {target_size} requested",
            estimated_monthly_savings=max(self.monthly_savings(current_size, target_size), 0.0),
            confidence=Confidence.HIGH,
            should_optimize=True,
            action=RecommendedAction.RESIZE,
        )
