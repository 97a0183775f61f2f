"""SQL Database and Cosmos DB scaling recommendations."""

from typing import Optional

from costopt.config.catalog import PricingCatalog
from costopt.models.recommendation import Confidence, OptimizationRecommendation, RecommendedAction
from costopt.models.utilization import UtilizationSample


class DatabaseScalingEngine:
    """DTU and RU classification ladders.

    SQL databases get two underutilized bands. The strict band (very low DTU,
    long history, almost no connections) searches the price table for the next
    lower tier; the regular band uses the downgrade mapping. Cosmos DB
    recommendations are advisory only.
    """
    
    def __init__(self, catalog: PricingCatalog, dtu_threshold: float = 20.0,
                 strict_dtu_threshold: float = 10.0, daily_connections_threshold: float = 10.0,
                 high_dtu_threshold: float = 80.0, ru_low_threshold: float = 20.0,
                 ru_high_threshold: float = 80.0, min_data_points: int = 24,
                 strict_min_data_points: int = 48):
        self.catalog = catalog
        self.dtu_threshold = dtu_threshold
        self.strict_dtu_threshold = strict_dtu_threshold
        self.daily_connections_threshold = daily_connections_threshold
        self.high_dtu_threshold = high_dtu_threshold
        self.ru_low_threshold = ru_low_threshold
        self.ru_high_threshold = ru_high_threshold
        self.min_data_points = min_data_points
        self.strict_min_data_points = strict_min_data_points
    
    @classmethod
    def from_settings(cls, catalog: PricingCatalog, settings) -> "DatabaseScalingEngine":
        thresholds = settings.thresholds
        return cls(
            catalog,
            dtu_threshold=thresholds.database_dtu_threshold,
            strict_dtu_threshold=thresholds.database_dtu_strict_threshold,
            daily_connections_threshold=thresholds.database_daily_connections_threshold,
            high_dtu_threshold=thresholds.database_dtu_high_threshold,
            ru_low_threshold=thresholds.cosmos_ru_low_threshold,
            ru_high_threshold=thresholds.cosmos_ru_high_threshold,
            min_data_points=settings.runbook.min_data_points,
            strict_min_data_points=settings.runbook.strict_min_data_points,
        )
    
    def next_lower_tier(self, service_objective: str) -> Optional[str]:
        """Highest-DTU tier strictly below the current one that also costs less."""
        current = self.catalog.sql_tier(service_objective)
        if current is None:
            return None
        candidates = [
            (name, tier) for name, tier in self.catalog.sql_tiers.items()
            if tier.dtu < current.dtu and tier.monthly_cost < current.monthly_cost
        ]
        candidates.sort(key=lambda item: item[1].dtu, reverse=True)
        return candidates[0][0] if candidates else None
    
    def next_higher_tier(self, service_objective: str) -> Optional[str]:
        """Lowest-DTU tier of the same edition strictly above the current one."""
        current = self.catalog.sql_tier(service_objective)
        if current is None:
            return None
        candidates = [
            (name, tier) for name, tier in self.catalog.sql_tiers.items()
            if tier.dtu > current.dtu and tier.edition == current.edition
        ]
        candidates.sort(key=lambda item: item[1].dtu)
        return candidates[0][0] if candidates else None
    
    def monthly_savings(self, current: str, target: str) -> float:
        current_tier = self.catalog.sql_tier(current)
        target_tier = self.catalog.sql_tier(target)
        if current_tier is None or target_tier is None:
            return 0.0
        return round(current_tier.monthly_cost - target_tier.monthly_cost, 2)
    
    def _scale_down(self, current: str, target: str, justification: str,
                    confidence: Confidence) -> OptimizationRecommendation:
        return OptimizationRecommendation(
            current_configuration=current,
            recommended_configuration=target,
            justification=justification,
            estimated_monthly_savings=self.monthly_savings(current, target),
            confidence=confidence,
            should_optimize=True,
            action=RecommendedAction.SCALE_DOWN,
        )
    
    def recommend_sql(self, service_objective: str, sample: UtilizationSample) -> OptimizationRecommendation:
        if self.catalog.sql_tier(service_objective) is None:
            return OptimizationRecommendation(
                current_configuration=service_objective,
                justification=f"{service_objective} is not a DTU tier in the price table",
                confidence=Confidence.LOW,
            )
        
        avg_dtu = sample.avg_dtu_percent
        points = sample.data_points
        
        if (avg_dtu < self.strict_dtu_threshold and points > self.strict_min_data_points
                and sample.daily_connections < self.daily_connections_threshold):
            target = self.next_lower_tier(service_objective)
            if target and self.monthly_savings(service_objective, target) > 0:
                return self._scale_down(
                    service_objective, target,
                    (f"Highly underutilized: average DTU {avg_dtu:.1f}% and "
                     f"{sample.daily_connections:.1f} connections per day"),
                    Confidence.HIGH,
                )
            return OptimizationRecommendation(
                current_configuration=service_objective,
                justification=f"Highly underutilized but no cheaper tier below {service_objective}",
                confidence=Confidence.MEDIUM,
            )
        
        if avg_dtu < self.dtu_threshold and points > self.min_data_points:
            target = self.catalog.sql_tier_mapping.get(service_objective)
            if target and self.monthly_savings(service_objective, target) > 0:
                return self._scale_down(
                    service_objective, target,
                    f"Underutilized: average DTU {avg_dtu:.1f}% below {self.dtu_threshold:.0f}%",
                    Confidence.MEDIUM,
                )
            return OptimizationRecommendation(
                current_configuration=service_objective,
                justification=f"Underutilized (average DTU {avg_dtu:.1f}%) but no cheaper mapped tier",
                confidence=Confidence.LOW,
            )
        
        if avg_dtu > self.high_dtu_threshold and points > self.min_data_points:
            return OptimizationRecommendation(
                current_configuration=service_objective,
                recommended_configuration=self.next_higher_tier(service_objective),
                justification=f"Saturated: average DTU {avg_dtu:.1f}% above {self.high_dtu_threshold:.0f}%",
                confidence=Confidence.MEDIUM,
                should_optimize=True,
                action=RecommendedAction.SCALE_UP,
            )
        
        if avg_dtu < self.dtu_threshold:
            return OptimizationRecommendation(
                current_configuration=service_objective,
                justification=f"Low DTU ({avg_dtu:.1f}%) with only {points} points, monitor longer",
                confidence=Confidence.LOW,
            )
        
        return OptimizationRecommendation(
            current_configuration=service_objective,
            justification=f"Utilization within range: average DTU {avg_dtu:.1f}%",
            confidence=Confidence.HIGH,
        )
    
    def recommend_cosmos(self, sample: UtilizationSample) -> OptimizationRecommendation:
        throughput = sample.provisioned_throughput
        current = f"{throughput:.0f} RU/s" if throughput else "Serverless"
        avg_ru = sample.avg_ru_percent
        enough_data = sample.data_points > self.min_data_points
        
        if avg_ru > self.ru_high_threshold and enough_data:
            return OptimizationRecommendation(
                current_configuration=current,
                justification=f"Normalized RU consumption {avg_ru:.1f}% above {self.ru_high_threshold:.0f}%",
                confidence=Confidence.MEDIUM,
                should_optimize=True,
                action=RecommendedAction.INCREASE_RU,
            )
        
        if avg_ru < self.ru_low_threshold and enough_data and throughput > 0:
            savings = throughput / 100 * self.catalog.cosmos_price_per_100_ru * self.catalog.cosmos_autoscale_savings
            return OptimizationRecommendation(
                current_configuration=current,
                recommended_configuration="Autoscale",
                justification=f"Normalized RU consumption {avg_ru:.1f}% below {self.ru_low_threshold:.0f}%",
                estimated_monthly_savings=round(savings, 2),
                confidence=Confidence.MEDIUM,
                should_optimize=True,
                action=RecommendedAction.ENABLE_AUTOSCALE,
            )
        
        return OptimizationRecommendation(
            current_configuration=current,
            justification=f"RU consumption {avg_ru:.1f}% needs no change",
            confidence=Confidence.HIGH if enough_data else Confidence.LOW,
        )
    
    def explicit_sql(self, service_objective: str, target: str) -> OptimizationRecommendation:
        """Recommendation for an operator-supplied service objective."""
        if service_objective == target:
            return OptimizationRecommendation(
                current_configuration=service_objective,
                justification=f"Already at {target}",
                confidence=Confidence.HIGH,
            )
        savings = self.monthly_savings(service_objective, target)
        return OptimizationRecommendation(
            current_configuration=service_objective,
            recommended_configuration=target,
            justification=f"Explicit target {target} requested",
            estimated_monthly_savings=max(savings, 0.0),
            confidence=Confidence.HIGH,
            should_optimize=True,
            action=RecommendedAction.SCALE_DOWN if savings >= 0 else RecommendedAction.SCALE_UP,
        )
