"""Tests for SQL and Cosmos DB scaling recommendations."""

import pytest

from costopt.analytics.database_scaling import DatabaseScalingEngine
from costopt.config.catalog import SqlTier
from costopt.models.recommendation import Confidence, RecommendedAction
from costopt.models.utilization import UtilizationSample


def sql_sample(avg_dtu: float, points: int = 168, daily_connections: float = 50.0) -> UtilizationSample:
    return UtilizationSample(
        resource_id="db", window_days=7, data_points=points,
        avg_dtu_percent=avg_dtu, daily_connections=daily_connections,
    )


def cosmos_sample(avg_ru: float, throughput: float = 1000.0, points: int = 168) -> UtilizationSample:
    return UtilizationSample(
        resource_id="cosmos", window_days=7, data_points=points,
        avg_ru_percent=avg_ru, provisioned_throughput=throughput,
    )


class TestSqlScaling:
    """Test the DTU bands."""

    @pytest.fixture
    def engine(self, catalog):
        return DatabaseScalingEngine(catalog)

    def test_underutilized_uses_mapping(self, engine):
        rec = engine.recommend_sql("S2", sql_sample(15.0))

        assert rec.should_optimize is True
        assert rec.recommended_configuration == "S1"
        assert rec.estimated_monthly_savings == pytest.approx(73.62 - 29.45)
        assert rec.confidence == Confidence.MEDIUM
        assert rec.action == RecommendedAction.SCALE_DOWN

    def test_idle_database_searches_next_lower_tier(self, engine):
        """Very low DTU and few connections pick the highest tier below the current one."""
        rec = engine.recommend_sql("S3", sql_sample(5.0, points=100, daily_connections=2.0))

        assert rec.recommended_configuration == "S2"
        assert rec.confidence == Confidence.HIGH

    def test_next_lower_tier_may_cross_editions(self, engine):
        assert engine.next_lower_tier("P1") == "S3"
        assert engine.next_lower_tier("Basic") is None

    @pytest.mark.parametrize("current,target", [("S4", "S3"), ("S6", "S4"), ("S7", "S6")])
    def test_idle_standard_tier_never_lands_on_pricier_premium(self, engine, current, target):
        """Premium rows with fewer DTUs cost more than the Standard tier above them."""
        rec = engine.recommend_sql(current, sql_sample(2.0, daily_connections=1.0))

        assert rec.recommended_configuration == target
        assert rec.estimated_monthly_savings > 0

    def test_no_cheaper_tier_is_not_a_scale_down(self, catalog):
        pricey = catalog.model_copy(update={"sql_tiers": {
            "P1": catalog.sql_tiers["P1"],
            "S_legacy": SqlTier(edition="Standard", dtu=100, monthly_cost=500.0),
        }})
        engine = DatabaseScalingEngine(pricey)

        rec = engine.recommend_sql("P1", sql_sample(2.0, daily_connections=1.0))

        assert engine.next_lower_tier("P1") is None
        assert rec.should_optimize is False
        assert rec.confidence == Confidence.MEDIUM

    def test_mapping_to_pricier_tier_is_refused(self, catalog):
        engine = DatabaseScalingEngine(catalog.model_copy(update={"sql_tier_mapping": {"S4": "P1"}}))

        rec = engine.recommend_sql("S4", sql_sample(15.0))

        assert rec.should_optimize is False
        assert rec.recommended_configuration is None

    def test_lowest_tier_cannot_scale_down(self, engine):
        rec = engine.recommend_sql("Basic", sql_sample(1.0, daily_connections=0.0))

        assert rec.should_optimize is False

    def test_underutilized_without_mapping(self, engine):
        rec = engine.recommend_sql("S0", sql_sample(15.0))

        assert rec.should_optimize is False
        assert rec.confidence == Confidence.LOW

    def test_saturated_database_scales_up(self, engine):
        rec = engine.recommend_sql("S2", sql_sample(92.0))

        assert rec.should_optimize is True
        assert rec.action == RecommendedAction.SCALE_UP
        assert rec.recommended_configuration == "S3"
        assert rec.estimated_monthly_savings == 0.0

    def test_too_few_points_is_monitored(self, engine):
        rec = engine.recommend_sql("S2", sql_sample(5.0, points=10))

        assert rec.should_optimize is False
        assert rec.confidence == Confidence.LOW

    def test_unknown_objective(self, engine):
        rec = engine.recommend_sql("GP_Gen5_2", sql_sample(5.0))

        assert rec.should_optimize is False
        assert rec.confidence == Confidence.LOW

    def test_explicit_upward_target_is_scale_up(self, engine):
        rec = engine.explicit_sql("S1", "S3")

        assert rec.action == RecommendedAction.SCALE_UP
        assert rec.estimated_monthly_savings == 0.0

    def test_explicit_downward_target(self, engine):
        rec = engine.explicit_sql("S3", "S1")

        assert rec.action == RecommendedAction.SCALE_DOWN
        assert rec.estimated_monthly_savings == pytest.approx(147.24 - 29.45)


class TestCosmosScaling:
    """Test the RU bands."""

    @pytest.fixture
    def engine(self, catalog):
        return DatabaseScalingEngine(catalog)

    def test_low_consumption_suggests_autoscale(self, engine):
        rec = engine.recommend_cosmos(cosmos_sample(10.0, throughput=1000.0))

        assert rec.action == RecommendedAction.ENABLE_AUTOSCALE
        assert rec.current_configuration == "1000 RU/s"
        assert rec.estimated_monthly_savings == pytest.approx(round(10 * 5.84 * 0.30, 2))

    def test_high_consumption_suggests_more_ru(self, engine):
        rec = engine.recommend_cosmos(cosmos_sample(90.0))

        assert rec.action == RecommendedAction.INCREASE_RU
        assert rec.should_optimize is True

    def test_serverless_account_needs_nothing(self, engine):
        rec = engine.recommend_cosmos(cosmos_sample(5.0, throughput=0.0))

        assert rec.current_configuration == "Serverless"
        assert rec.should_optimize is False
